from .exceptions import DeployError, ConfigurationError, ExternalCommandError, FilesystemError
from ._glob import match
from .reconcile import reconcile, flatten_patterns, ancestors
from .sync import synchronize, plan_sync, SyncPlan
from .pipeline import run_pipeline, step, Success, Failure, StepOutcome, Step
from .git import git_step, run_git, branch_exists, redact_url
from .deploy import deploy, build_steps, prepare_scratch_dir, with_git_protection, DeployOptions
from .config import load_config, options_from_mapping

__all__ = [
    "DeployError", "ConfigurationError", "ExternalCommandError", "FilesystemError",
    "match", "reconcile", "flatten_patterns", "ancestors",
    "synchronize", "plan_sync", "SyncPlan",
    "run_pipeline", "step", "Success", "Failure", "StepOutcome", "Step",
    "git_step", "run_git", "branch_exists", "redact_url",
    "deploy", "build_steps", "prepare_scratch_dir", "with_git_protection", "DeployOptions",
    "load_config", "options_from_mapping",
]

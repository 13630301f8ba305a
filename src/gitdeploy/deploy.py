"""Publish a directory of build output to a branch of a remote git repository.

:func:`deploy` clones the remote into a scratch working tree, mirrors the
source directory into it (keeping ``.git`` and any protected paths), then
commits, optionally tags, and pushes.  When the target branch already
exists and the mirrored tree has no changes, commit/tag/push are skipped.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from ._glob import check_pattern
from .exceptions import ConfigurationError, FilesystemError
from .git import branch_exists, git_step, redact_url
from .pipeline import Failure, Step, StepOutcome, run_pipeline, step
from .reconcile import PatternInput, flatten_patterns
from .sync import synchronize

logger = logging.getLogger(__name__)

GIT_METADATA_PATTERN = ".git/**"
DEFAULT_TMP = "tmp/deployDir"


@dataclass
class DeployOptions:
    """Options for :func:`deploy`.

    Attributes:
        src: Directory whose contents are published.
        url: Remote repository URL (may embed credentials; they are
            redacted from logs).
        tmp: Scratch working tree.  Deleted and recreated on every deploy.
        branch: Target branch, created if the remote lacks it.
        message: Commit message.
        tag: Annotated tag to create at the new commit, or ``None``.
        tag_message: Annotation message for *tag*.
        src_ignore_patterns: Patterns excluded from the copy.
        repo_ignore_patterns: Patterns in the working tree that are never
            deleted.
        post_sync: Called with the absolute working tree path after the
            source has been copied in, before ``git add``.
    """
    src: str | None = None
    url: str | None = None
    tmp: str = DEFAULT_TMP
    branch: str = "master"
    message: str = "autocommit"
    tag: str | None = None
    tag_message: str = "autocommit"
    src_ignore_patterns: PatternInput = field(default_factory=list)
    repo_ignore_patterns: PatternInput = field(default_factory=list)
    post_sync: Callable[[str], object] | None = None

    def validate(self) -> None:
        """Raise :class:`ConfigurationError` if an option is missing or malformed.

        Ignore patterns are checked here too, so a pattern that would
        escape its directory is reported before the scratch tree is wiped.
        """
        if not self.src or not os.path.isdir(self.src):
            raise ConfigurationError("The source directory to deploy is required.")
        if not self.url:
            raise ConfigurationError("The URL to a remote git repository is required.")
        for name in ("url", "branch", "message", "tag_message"):
            if not isinstance(getattr(self, name), str):
                raise ConfigurationError(f"Deploy option {name} must be a string")
        if not isinstance(self.tmp, (str, os.PathLike)):
            raise ConfigurationError("Deploy option tmp must be a path")
        if self.tag is not None and not isinstance(self.tag, str):
            raise ConfigurationError("Deploy option tag must be a string")
        for patterns in (self.src_ignore_patterns, self.repo_ignore_patterns):
            for pattern in with_git_protection(patterns):
                check_pattern(pattern)


def with_git_protection(patterns: PatternInput) -> list[str]:
    """Return a new flat pattern list with the ``.git`` metadata pattern added.

    *patterns* itself is left untouched.
    """
    return flatten_patterns([patterns, GIT_METADATA_PATTERN])


def prepare_scratch_dir(path: str | os.PathLike[str]) -> Path:
    """Delete *path* if it exists and recreate it empty."""
    scratch = Path(path)
    try:
        if scratch.is_symlink() or scratch.is_file():
            scratch.unlink()
        elif scratch.exists():
            shutil.rmtree(scratch)
        scratch.mkdir(parents=True)
    except OSError as exc:
        logger.error("Failed to prepare scratch directory %s: %s", scratch, exc)
        raise FilesystemError("prepare", str(scratch), exc) from exc
    return scratch


def build_steps(options: DeployOptions, *, exists: bool | None = None) -> list[Step]:
    """Assemble the ordered git/sync steps for *options*.

    If the branch already exists on the remote it is cloned directly and a
    ``status`` probe lets an unchanged tree skip commit/tag/push.  Otherwise
    the default branch is cloned and the target branch created with
    ``checkout -B``.

    *exists* overrides the remote branch probe.
    """
    cwd = options.tmp
    src_ignore = with_git_protection(options.src_ignore_patterns)
    repo_ignore = with_git_protection(options.repo_ignore_patterns)
    if exists is None:
        exists = branch_exists(options.url, options.branch)

    copy = step(
        lambda: synchronize(
            options.src, src_ignore, cwd, repo_ignore,
            post_sync=options.post_sync,
        ),
        f"copy {options.src} to {cwd}",
    )

    if exists:
        steps = [
            git_step(["clone", "-b", options.branch, options.url, "."], cwd),
            copy,
            git_step(["add", "--all"], cwd),
            git_step(["status", "--porcelain"], cwd),
        ]
    else:
        steps = [
            git_step(["clone", options.url, "."], cwd),
            git_step(["checkout", "-B", options.branch], cwd),
            copy,
            git_step(["add", "--all"], cwd),
        ]
    steps.append(git_step(["commit", "--allow-empty", f"--message={options.message}"], cwd))
    if options.tag:
        steps.append(git_step(["tag", "-a", options.tag, "-m", options.tag_message], cwd))
    steps.append(git_step(
        ["push", "--prune", "--quiet", "--follow-tags", options.url, options.branch], cwd,
    ))
    return steps


def deploy(options: DeployOptions) -> StepOutcome:
    """Publish ``options.src`` to ``options.branch`` of ``options.url``.

    Raises:
        ConfigurationError: The source directory or URL is missing; raised
            before anything is touched.
        ExternalCommandError: A git command failed.
        FilesystemError: Preparing the scratch tree or copying failed.

    Returns:
        ``Success(skip_rest=True)`` if there was nothing to commit,
        otherwise ``Success()``.  The scratch tree is left in place either
        way (and on failure, for inspection).
    """
    options.validate()
    prepare_scratch_dir(options.tmp)
    logger.info(
        "Deploying %s to %s (branch %s)",
        options.src, redact_url(options.url), options.branch,
    )
    outcome = run_pipeline(build_steps(options))
    if isinstance(outcome, Failure):
        raise outcome.error
    return outcome

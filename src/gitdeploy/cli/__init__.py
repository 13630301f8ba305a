"""gitdeploy CLI — publish build output to a remote git branch."""

from ._helpers import main  # noqa: F401 — entry point

# Import command modules to register Click commands with the main group.
from . import _deploy, _sync  # noqa: F401

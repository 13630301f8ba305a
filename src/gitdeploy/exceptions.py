"""Exceptions for gitdeploy."""

from __future__ import annotations


class DeployError(Exception):
    """Base class for every error reported by a deployment."""


class ConfigurationError(DeployError, ValueError):
    """Raised when deploy options are missing or invalid.

    Reported before the pipeline starts; nothing on disk has been touched.
    """


class ExternalCommandError(DeployError):
    """Raised when the git executable exits with a non-zero status.

    Attributes:
        command: Argument vector that was run (credentials redacted).
        returncode: Exit status, or ``None`` if the executable was not found.
        stdout: Captured standard output.
        stderr: Captured standard error.
        cwd: Working directory of the command.
    """

    def __init__(self, command, returncode, stdout="", stderr="", cwd=None):
        self.command = list(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.cwd = cwd
        detail = stderr.strip() or stdout.strip()
        if returncode is None:
            msg = f"Could not run {' '.join(self.command)}"
        else:
            msg = f"{' '.join(self.command)} exited with code {returncode}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class FilesystemError(DeployError):
    """Raised when deleting, copying or creating a path fails.

    The original :class:`OSError` is available as ``__cause__``.

    Attributes:
        operation: What was being done (``"delete"``, ``"copy"``, ``"mkdir"``, ...).
        path: The path the operation failed on.
    """

    def __init__(self, operation: str, path: str, cause: OSError | None = None):
        self.operation = operation
        self.path = path
        reason = (cause.strerror or str(cause)) if cause is not None else "failed"
        super().__init__(f"Cannot {operation} {path}: {reason}")

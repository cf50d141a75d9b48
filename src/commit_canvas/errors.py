"""Error taxonomy shared by planning, synthesis, and the service layer."""

from __future__ import annotations


class CommitCanvasError(Exception):
    """Base error carrying a machine-readable kind and an HTTP-style status."""

    status_code = 500

    def __init__(self, message: str, kind: str = "Error", details: str | None = None):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.details = details


class ValidationError(CommitCanvasError):
    """Caller input is malformed or logically inconsistent."""

    status_code = 400


class ConflictError(CommitCanvasError):
    """The target resource already exists."""

    status_code = 409


class InternalError(CommitCanvasError):
    """A post-generation invariant check failed."""

    status_code = 500


class GitCommandError(RuntimeError):
    """A git subprocess exited with a non-zero status."""

    def __init__(self, cmd: list[str], returncode: int, stderr: str):
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"git command failed ({returncode}): {' '.join(cmd)}\n{stderr}")

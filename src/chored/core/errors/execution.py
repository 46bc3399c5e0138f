"""Execution and lookup error classes."""

from typing import Optional, Sequence

from chored.core.errors.base import ChoredError


class SubprocessError(ChoredError):
    """Raised when an external command exits with a nonzero status.

    Attributes:
        cmd: The argv that was executed
        returncode: The process exit status
        output: Captured stdout, when it was captured
        stderr: Captured stderr, when it was captured
    """

    def __init__(
        self,
        cmd: Sequence[str],
        returncode: int,
        *,
        output: Optional[str] = None,
        stderr: Optional[str] = None,
    ):
        self.cmd = list(cmd)
        self.returncode = returncode
        self.output = output
        self.stderr = stderr
        message = f"Command failed with status {returncode}: {' '.join(self.cmd)}"
        if stderr:
            message += f"\n{stderr.rstrip()}"
        super().__init__(message)


class NotFoundError(ChoredError, LookupError):
    """Raised when no entrypoint matches the requested chore path.

    The message includes every candidate module that was consulted so a
    typo or a missing task file is easy to spot.
    """

    def __init__(self, path: Sequence[str], searched: Sequence[str] = ()):
        self.path = list(path)
        self.searched = list(searched)
        message = f"Chore {self.path!r} not found. Try `chored --list`"
        if self.searched:
            message += "\nSearched:\n" + "\n".join(f" - {s}" for s in self.searched)
        super().__init__(message)


class CleanWorkspaceError(ChoredError):
    """Raised when an operation requires a clean git workspace."""

    def __init__(self, description: str = "", diff: Optional[str] = None):
        self.description = description
        self.diff = diff
        suffix = f" {description}" if description else ""
        super().__init__(f"clean workspace required{suffix}")

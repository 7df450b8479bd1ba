"""Analysis-related exceptions: git invocation, empty history, file access."""

from pathlib import Path
from typing import Optional, Sequence

from .base import ChurnScopeError


class AnalysisError(ChurnScopeError):
    """Base class for analysis-related errors."""
    pass


class GitCommandError(AnalysisError):
    """Raised when a git invocation cannot run or exits unsuccessfully."""

    def __init__(self, command: Sequence[str], stderr: str, returncode: Optional[int] = None):
        command_str = " ".join(command)
        details = {"command": command_str, "stderr": stderr.strip()}
        if returncode is not None:
            details["returncode"] = str(returncode)
        super().__init__(f"Git command failed: {command_str}", details=details)
        self.command = list(command)
        self.stderr = stderr
        self.returncode = returncode


class NoCommitsError(AnalysisError):
    """Raised when a log yields zero parseable commits."""

    def __init__(self, reason: Optional[str] = None):
        details = {"reason": reason} if reason else None
        super().__init__("no commits found", details=details)
        self.reason = reason


class FileAccessError(AnalysisError):
    """Raised when a file cannot be accessed or read."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason

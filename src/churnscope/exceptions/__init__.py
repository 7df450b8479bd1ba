"""Exception hierarchy for ChurnScope."""

from .analysis import (
    AnalysisError,
    FileAccessError,
    GitCommandError,
    NoCommitsError,
)
from .base import ChurnScopeError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidPathError,
)

__all__ = [
    "ChurnScopeError",
    "AnalysisError",
    "FileAccessError",
    "GitCommandError",
    "NoCommitsError",
    "ConfigurationError",
    "InvalidPathError",
    "InvalidConfigError",
]

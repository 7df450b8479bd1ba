"""Data models for temporal (git-based) analysis."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from .keys import author_key, parent_directory


class FileStatus(Enum):
    """How a file was touched by a commit.

    numstat output alone only distinguishes renames from everything else,
    so the parser emits MODIFIED or RENAMED.
    """

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


@dataclass(frozen=True)
class Person:
    name: str
    email: str

    @property
    def key(self) -> str:
        """Identity key shared by every analyzer (lower-cased email)."""
        return author_key(self.email)


@dataclass(frozen=True)
class FileChange:
    path: str
    additions: int = 0
    deletions: int = 0
    binary: bool = False  # line counts unknown; additions/deletions are 0
    status: FileStatus = FileStatus.MODIFIED
    old_path: Optional[str] = None  # only set for renames

    @property
    def lines_changed(self) -> int:
        return self.additions + self.deletions

    @property
    def directory(self) -> str:
        return parent_directory(self.path)


@dataclass(frozen=True)
class Commit:
    hash: str
    short_hash: str
    author: Person
    committer: Person
    timestamp: datetime  # author date, timezone-aware when git supplies an offset
    subject: str
    body: str = ""
    parents: tuple[str, ...] = ()
    files: tuple[FileChange, ...] = ()

    @property
    def message(self) -> str:
        if self.body:
            return f"{self.subject}\n\n{self.body}"
        return self.subject

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    @property
    def author_key(self) -> str:
        return self.author.key

    @property
    def paths(self) -> list[str]:
        """Distinct touched paths in first-seen order."""
        return list(dict.fromkeys(f.path for f in self.files))

    @property
    def directories(self) -> list[str]:
        """Distinct touched directories in first-seen order."""
        return list(dict.fromkeys(f.directory for f in self.files))


@dataclass
class GitHistory:
    """Parsed commit stream shared read-only by every analyzer."""

    commits: list[Commit]  # in log order (newest first for a default git log)
    file_set: set[str] = field(default_factory=set)  # all paths ever seen

    def __post_init__(self) -> None:
        if not self.file_set:
            for c in self.commits:
                self.file_set.update(f.path for f in c.files)

    @property
    def total_commits(self) -> int:
        return len(self.commits)

    @property
    def authors(self) -> set[str]:
        return {c.author_key for c in self.commits}

    @property
    def span_days(self) -> int:
        """Days between the oldest and newest commit (0 for fewer than two)."""
        if len(self.commits) < 2:
            return 0
        timestamps = [c.timestamp for c in self.commits]
        return max(1, (max(timestamps) - min(timestamps)).days)

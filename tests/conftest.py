"""Shared test fixtures for ChurnScope tests."""

import shutil
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

import pytest

from churnscope.temporal.log_parser import FIELD_SEPARATOR, RECORD_SEPARATOR
from churnscope.temporal.models import Commit, FileChange, FileStatus, Person

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

ALICE = Person("Alice", "alice@example.com")
BOB = Person("Bob", "bob@example.com")
CAROL = Person("Carol", "carol@example.com")


def change(path: str, additions: int = 1, deletions: int = 0, **kwargs) -> FileChange:
    return FileChange(path=path, additions=additions, deletions=deletions, **kwargs)


def make_commit(
    n: int,
    files: Sequence,
    author: Person = ALICE,
    subject: Optional[str] = None,
    body: str = "",
    parents: Sequence[str] = (),
) -> Commit:
    """Commit number ``n``; ``files`` may mix paths and FileChange values."""
    changes = tuple(f if isinstance(f, FileChange) else change(f) for f in files)
    sha = f"{n:07x}".ljust(40, "0")
    return Commit(
        hash=sha,
        short_hash=sha[:7],
        author=author,
        committer=author,
        timestamp=BASE_TIME + timedelta(hours=n),
        subject=subject or f"Commit {n}",
        body=body,
        parents=tuple(parents),
        files=changes,
    )


def render_numstat(fc: FileChange) -> str:
    if fc.binary:
        counts = "-\t-"
    else:
        counts = f"{fc.additions}\t{fc.deletions}"
    if fc.status is FileStatus.RENAMED and fc.old_path:
        path = f"{fc.old_path} => {fc.path}"
    else:
        path = fc.path
    return f"{counts}\t{path}"


def render_log_entry(commit: Commit) -> str:
    """Raw ``git log --format=LOG_FORMAT --numstat`` text for one commit."""
    header = FIELD_SEPARATOR.join(
        [
            commit.hash,
            commit.short_hash,
            commit.author.name,
            commit.author.email,
            commit.timestamp.isoformat(),
            commit.committer.name,
            commit.committer.email,
            commit.subject,
            commit.body,
            " ".join(commit.parents),
        ]
    )
    lines = [render_numstat(fc) for fc in commit.files]
    # git prints a blank line between the header and the numstat block
    return RECORD_SEPARATOR + header + "\n\n" + "\n".join(lines) + "\n"


def render_log(commits: Sequence[Commit]) -> str:
    return "".join(render_log_entry(c) for c in commits)


@pytest.fixture
def small_history():
    """Five commits by two authors over a handful of files."""
    return [
        make_commit(1, ["src/app.ts", "src/util.ts"], ALICE),
        make_commit(2, ["src/app.ts", "src/util.ts"], ALICE),
        make_commit(3, ["src/app.ts", "src/util.ts", "docs/readme.md"], BOB),
        make_commit(4, ["src/app.ts"], ALICE),
        make_commit(5, ["lib/helpers.ts", "src/util.ts"], BOB),
    ]

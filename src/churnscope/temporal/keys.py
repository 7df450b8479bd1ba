"""Aggregation keys shared by the history analyzers."""

import posixpath

ROOT_DIRECTORY = "."


def author_key(email: str) -> str:
    """Normalize an author email so casing variants collapse to one identity."""
    return email.strip().lower()


def parent_directory(path: str) -> str:
    """Directory containing ``path``; files at the repository root map to "."."""
    parent = posixpath.dirname(path)
    return parent or ROOT_DIRECTORY

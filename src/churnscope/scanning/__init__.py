"""Working-tree scanning for dependency analysis."""

from .snapshot import collect_source_snapshot, iter_source_files, read_source_file

__all__ = ["collect_source_snapshot", "iter_source_files", "read_source_file"]

"""
Source snapshot collection for dependency analysis.

Walks the working tree and reads every file with a recognized source
extension. Unreadable files are skipped, never fatal.
"""

import os
from pathlib import Path
from typing import Optional

from ..config import AnalysisConfig
from ..exceptions import FileAccessError, InvalidPathError
from ..logging_config import get_logger

logger = get_logger(__name__)


def read_source_file(
    filepath: Path,
    max_size_bytes: Optional[int] = None,
    encoding: str = "utf-8",
    errors: str = "replace",
) -> str:
    """
    Read one source file.

    Args:
        filepath: File to read
        max_size_bytes: Larger files are rejected (None = no limit)
        encoding: Text encoding
        errors: How to handle encoding errors

    Returns:
        File contents as string

    Raises:
        FileAccessError: If the file is too large or cannot be read
    """
    try:
        if max_size_bytes is not None:
            size = filepath.stat().st_size
            if size > max_size_bytes:
                raise FileAccessError(filepath, f"File too large: {size} bytes")
        with open(filepath, encoding=encoding, errors=errors) as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise FileAccessError(filepath, f"Encoding error: {e}")
    except OSError as e:
        raise FileAccessError(filepath, f"OS error: {e}")


def iter_source_files(root: Path, config: AnalysisConfig):
    """Yield ``(relative_posix_path, absolute_path)`` for recognized sources."""
    excluded = set(config.excluded_dirs)
    extensions = set(config.source_extensions)

    def on_error(err: OSError) -> None:
        logger.debug("Skipping unreadable directory %s: %s", err.filename, err.strerror)

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        dirnames[:] = sorted(d for d in dirnames if d not in excluded)
        for name in sorted(filenames):
            if os.path.splitext(name)[1] not in extensions:
                continue
            absolute = Path(dirpath) / name
            yield absolute.relative_to(root).as_posix(), absolute


def collect_source_snapshot(
    root_dir: str, config: Optional[AnalysisConfig] = None
) -> dict[str, str]:
    """Read every recognized source file below ``root_dir``.

    Returns:
        Mapping of repository-relative POSIX path to file contents

    Raises:
        InvalidPathError: If ``root_dir`` is not a directory
    """
    config = config or AnalysisConfig()
    root = Path(root_dir).resolve()
    if not root.is_dir():
        raise InvalidPathError(root, "not a directory")

    snapshot: dict[str, str] = {}
    skipped = 0
    for rel_path, absolute in iter_source_files(root, config):
        try:
            snapshot[rel_path] = read_source_file(absolute, config.max_file_size_bytes)
        except FileAccessError as e:
            skipped += 1
            logger.debug("Skipping %s: %s", rel_path, e.reason)

    if skipped:
        logger.debug("Skipped %d unreadable source files", skipped)
    logger.debug("Collected %d source files from %s", len(snapshot), root)
    return snapshot

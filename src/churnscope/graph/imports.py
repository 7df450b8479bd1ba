"""Import-statement extraction and resolution for JavaScript-family sources.

Only relative (``./``, ``../``) and root-anchored (``/``) specifiers are
considered; bare package names are external and ignored.
"""

import posixpath
import re
from typing import Iterable, Optional, Sequence

from ..logging_config import get_logger

logger = get_logger(__name__)

# Each pattern captures the module specifier in group 1.
IMPORT_PATTERNS: tuple[re.Pattern, ...] = (
    # import x from "./a"; import { a, b } from "./a"; import "./a"
    re.compile(r"""import\s+(?:[\w\s{},*$]+\s+from\s+)?['"]([^'"]+)['"]"""),
    # require("./a")
    re.compile(r"""require\s*\(\s*['"]([^'"]+)['"]\s*\)"""),
    # import("./a")
    re.compile(r"""import\s*\(\s*['"]([^'"]+)['"]\s*\)"""),
    # export { a } from "./a"; export * from "./a"
    re.compile(r"""export\s+(?:[\w\s{},*$]+\s+from\s+)['"]([^'"]+)['"]"""),
)


def is_internal_specifier(specifier: str) -> bool:
    return specifier.startswith(".") or specifier.startswith("/")


def extract_import_specifiers(
    content: str, patterns: Sequence[re.Pattern] = IMPORT_PATTERNS
) -> list[str]:
    """Internal specifiers in pattern order, first occurrence only."""
    seen: set[str] = set()
    result = []
    for pattern in patterns:
        for match in pattern.finditer(content):
            specifier = match.group(1).strip()
            if not is_internal_specifier(specifier) or specifier in seen:
                continue
            seen.add(specifier)
            result.append(specifier)
    return result


def candidate_paths(target: str, extensions: Sequence[str]) -> list[str]:
    """Snapshot paths an import target may refer to, in resolution order.

    The literal path, then the extension-less path with each extension,
    then ``<path>/index`` with each extension.
    """
    stem = target
    _, ext = posixpath.splitext(target)
    if ext in extensions:
        stem = target[: -len(ext)]

    if stem in ("", "."):
        # the snapshot root itself
        return [f"index{e}" for e in extensions]

    candidates = [target]
    candidates.extend(stem + e for e in extensions)
    candidates.extend(f"{stem}/index{e}" for e in extensions)
    return candidates


def resolve_import(
    specifier: str,
    source_path: str,
    known_files: Iterable[str],
    extensions: Sequence[str],
) -> Optional[str]:
    """Resolve ``specifier`` imported by ``source_path`` to a snapshot file.

    Returns None for external specifiers and for targets matching no file.
    """
    if not is_internal_specifier(specifier):
        return None

    if specifier.startswith("/"):
        target = posixpath.normpath(specifier.lstrip("/"))
    else:
        base = posixpath.dirname(source_path)
        target = posixpath.normpath(posixpath.join(base, specifier))

    if target.startswith("../") or target == "..":
        # escapes the snapshot root
        return None

    if not isinstance(known_files, (set, frozenset, dict)):
        known_files = set(known_files)

    for candidate in candidate_paths(target, extensions):
        if candidate in known_files:
            return candidate
    return None

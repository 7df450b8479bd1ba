"""Dependency graph construction from source file contents."""

import re
from typing import Mapping, Optional, Sequence

from ..logging_config import get_logger
from .imports import IMPORT_PATTERNS, extract_import_specifiers, resolve_import
from .models import DependencyGraph, DependencyNode

logger = get_logger(__name__)

DEFAULT_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".vue", ".svelte")


def build_dependency_graph(
    snapshot: Mapping[str, str],
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    patterns: Optional[Sequence[re.Pattern]] = None,
) -> DependencyGraph:
    """Build the import graph of a ``{path: contents}`` snapshot.

    Every snapshot file becomes a node. Edges are the resolved internal
    imports; each target appears once per importer and self-imports are
    dropped. Specifiers that resolve to nothing are kept in
    ``unresolved_imports``.
    """
    patterns = patterns or IMPORT_PATTERNS
    known = set(snapshot)
    nodes: dict[str, DependencyNode] = {path: DependencyNode(path=path) for path in sorted(known)}
    unresolved: dict[str, list[str]] = {}

    for path in sorted(known):
        node = nodes[path]
        for specifier in extract_import_specifiers(snapshot[path], patterns):
            resolved = resolve_import(specifier, path, known, extensions)
            if resolved is None:
                unresolved.setdefault(path, []).append(specifier)
                continue
            if resolved == path or resolved in node.imports:
                continue
            node.imports.append(resolved)
            nodes[resolved].imported_by.append(path)

    graph = DependencyGraph(nodes=nodes, unresolved_imports=unresolved)
    if unresolved:
        logger.debug(
            "%d files have unresolvable imports (%d specifiers)",
            len(unresolved),
            sum(len(v) for v in unresolved.values()),
        )
    logger.debug("Built dependency graph: %d nodes, %d edges", len(graph), graph.edge_count)
    return graph

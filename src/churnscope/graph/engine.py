"""Dependency analysis orchestration: snapshot in, DependencyAnalysis out."""

from typing import Mapping, Optional

from ..architecture.layers import default_policy, detect_layer_violations
from ..architecture.models import LayerPolicy
from ..config import AnalysisConfig
from ..logging_config import get_logger
from .algorithms import (
    cluster_name,
    compute_clusters,
    compute_depths,
    compute_metrics,
    detect_cycles,
    find_entry_points,
    find_hubs,
    find_orphans,
    recommend,
    summarize,
)
from .builder import build_dependency_graph
from .models import DependencyAnalysis

logger = get_logger(__name__)


def analyze_dependencies(
    snapshot: Mapping[str, str],
    config: Optional[AnalysisConfig] = None,
    policy: Optional[LayerPolicy] = None,
) -> DependencyAnalysis:
    """Build the import graph of ``snapshot`` and run every graph check.

    An empty snapshot yields an empty analysis with a perfect health score.
    """
    config = config or AnalysisConfig()
    thresholds = config.thresholds
    if not snapshot:
        return DependencyAnalysis()

    graph = build_dependency_graph(snapshot, config.source_extensions)
    sentinel = thresholds.orphan_depth

    entry_points = find_entry_points(graph)
    depths = compute_depths(graph, entry_points, sentinel)
    entry_set = set(entry_points)
    for path, node in graph.nodes.items():
        node.depth = depths[path]
        node.is_orphan = node.depth == sentinel
        node.is_entry_point = path in entry_set
        node.cluster = cluster_name(path)

    cycles = detect_cycles(graph.adjacency, thresholds)
    hubs = find_hubs(graph, thresholds)
    for hub in hubs:
        graph.nodes[hub.path].is_hub = True

    orphans = find_orphans(graph, depths, sentinel)
    violations = detect_layer_violations(graph.edges(), policy or default_policy(config))
    clusters = compute_clusters(graph)
    metrics = compute_metrics(graph, depths, sentinel)
    summary = summarize(graph, cycles, hubs, orphans, thresholds)
    recommendations = recommend(cycles, hubs, orphans, violations, thresholds)

    logger.debug(
        "Dependency analysis: %d files, %d cycles, %d hubs, %d orphans, %d layer violations",
        len(graph),
        len(cycles),
        len(hubs),
        len(orphans),
        len(violations),
    )

    return DependencyAnalysis(
        graph=graph,
        entry_points=entry_points,
        circular_dependencies=cycles,
        hub_files=hubs,
        orphan_modules=orphans,
        layer_violations=violations,
        clusters=clusters,
        metrics=metrics,
        summary=summary,
        recommendations=recommendations,
    )

"""Graph algorithms: entry points, depth, cycles, hubs, orphans, clusters."""

import re
from collections import deque
from typing import Iterable, Sequence

from ..architecture.models import LayerViolation
from ..config import DEFAULT_THRESHOLDS, ThresholdConfig
from ..levels import RiskLevel
from ..math.statistics import Statistics
from .models import (
    CircularDependency,
    DependencyCluster,
    DependencyGraph,
    DependencyMetrics,
    DependencyRecommendation,
    DependencySummary,
    HubFile,
    HubType,
    OrphanModule,
)

ENTRY_POINT_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"(^|/)index\.[^/]+$"),
    re.compile(r"^(src/)?(main|app|server)\.[^/]+$"),
    re.compile(r"(^|/)(pages|routes)/"),
)

TEST_FILE_PATTERN = re.compile(r"\.(test|spec)\.[^/.]+$")

ROOT_CLUSTER = "root"

_CYCLE_SUGGESTIONS = {
    RiskLevel.LOW: "Consider extracting shared logic to a separate module",
    RiskLevel.MEDIUM: "Review dependencies and consider introducing an interface/abstraction",
    RiskLevel.HIGH: "Major architectural issue - consider refactoring to break this cycle",
}

_HUB_ADVICE = {
    HubType.HUB_BOTH: (
        "Very high - central point of failure with many dependencies",
        "Consider breaking into smaller, focused modules",
    ),
    HubType.HUB_IN: (
        "Medium - many files depend on this, changes are risky",
        "Keep stable, ensure good test coverage",
    ),
    HubType.HUB_OUT: (
        "Medium - knows too much about the system",
        "Consider dependency injection or splitting responsibilities",
    ),
}


# ── Entry points and depth ─────────────────────────────────────────


def is_likely_entry_point(path: str, patterns: Sequence[re.Pattern] = ENTRY_POINT_PATTERNS) -> bool:
    return any(p.search(path) for p in patterns)


def is_test_file(path: str) -> bool:
    return TEST_FILE_PATTERN.search(path) is not None


def find_entry_points(graph: DependencyGraph) -> list[str]:
    """Files nobody imports, plus files named like entry points."""
    return sorted(
        path
        for path, node in graph.nodes.items()
        if node.fan_in == 0 or is_likely_entry_point(path)
    )


def compute_depths(
    graph: DependencyGraph,
    entry_points: Iterable[str],
    unreachable_depth: int = DEFAULT_THRESHOLDS.orphan_depth,
) -> dict[str, int]:
    """Shortest hop count from any entry point along import edges.

    Multi-source BFS; nodes never reached get ``unreachable_depth``.
    """
    depth: dict[str, int] = {}
    queue: deque[str] = deque()
    for ep in entry_points:
        if ep in graph.nodes and ep not in depth:
            depth[ep] = 0
            queue.append(ep)

    while queue:
        node = queue.popleft()
        d = depth[node]
        for neighbor in graph.nodes[node].imports:
            if neighbor not in depth:
                depth[neighbor] = d + 1
                queue.append(neighbor)

    for path in graph.nodes:
        depth.setdefault(path, unreachable_depth)
    return depth


# ── Cycles ─────────────────────────────────────────────────────────


def cycle_severity(length: int, thresholds: ThresholdConfig = DEFAULT_THRESHOLDS) -> RiskLevel:
    if length <= thresholds.cycle_low_max_length:
        return RiskLevel.LOW
    if length <= thresholds.cycle_medium_max_length:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def detect_cycles(
    adjacency: dict[str, list[str]], thresholds: ThresholdConfig = DEFAULT_THRESHOLDS
) -> list[CircularDependency]:
    """Find import loops with a depth-first walk (iterative).

    Uses an explicit call stack to avoid Python recursion limits on deep
    import chains. An edge into a node still on the stack closes a loop;
    loops over the same set of files are reported once, whichever node
    the walk entered them from. Longest first.
    """
    visited: set[str] = set()
    on_stack: set[str] = set()
    path: list[str] = []
    seen_keys: set[tuple[str, ...]] = set()
    cycles: list[CircularDependency] = []

    for root in sorted(adjacency):
        if root in visited:
            continue

        visited.add(root)
        on_stack.add(root)
        path.append(root)
        call_stack = [(root, iter(adjacency.get(root, [])))]

        while call_stack:
            node, it = call_stack[-1]
            pushed = False
            for neighbor in it:
                if neighbor not in visited:
                    visited.add(neighbor)
                    on_stack.add(neighbor)
                    path.append(neighbor)
                    call_stack.append((neighbor, iter(adjacency.get(neighbor, []))))
                    pushed = True
                    break
                if neighbor in on_stack:
                    loop = path[path.index(neighbor):]
                    key = tuple(sorted(loop))
                    if key not in seen_keys:
                        seen_keys.add(key)
                        severity = cycle_severity(len(loop), thresholds)
                        cycles.append(
                            CircularDependency(
                                cycle=loop + [neighbor],
                                length=len(loop),
                                severity=severity,
                                suggestion=_CYCLE_SUGGESTIONS[severity],
                            )
                        )

            if not pushed:
                call_stack.pop()
                path.pop()
                on_stack.discard(node)

    cycles.sort(key=lambda c: -c.length)
    return cycles


# ── Hubs and orphans ───────────────────────────────────────────────


def find_hubs(
    graph: DependencyGraph, thresholds: ThresholdConfig = DEFAULT_THRESHOLDS
) -> list[HubFile]:
    """Nodes whose fan-in or fan-out is far above the repository mean.

    threshold = max(hub_min_connections, hub_mean_multiplier * mean)
    """
    if not graph.nodes:
        return []

    nodes = list(graph.nodes.values())
    mean_in = Statistics.mean([n.fan_in for n in nodes])
    mean_out = Statistics.mean([n.fan_out for n in nodes])
    limit_in = max(thresholds.hub_min_connections, thresholds.hub_mean_multiplier * mean_in)
    limit_out = max(thresholds.hub_min_connections, thresholds.hub_mean_multiplier * mean_out)

    hubs = []
    for node in nodes:
        hub_in = node.fan_in >= limit_in
        hub_out = node.fan_out >= limit_out
        if hub_in and hub_out:
            hub_type = HubType.HUB_BOTH
        elif hub_in:
            hub_type = HubType.HUB_IN
        elif hub_out:
            hub_type = HubType.HUB_OUT
        else:
            continue
        risk, suggestion = _HUB_ADVICE[hub_type]
        hubs.append(
            HubFile(
                path=node.path,
                fan_in=node.fan_in,
                fan_out=node.fan_out,
                hub_type=hub_type,
                risk=risk,
                suggestion=suggestion,
            )
        )

    hubs.sort(key=lambda h: (-h.total_connections, h.path))
    return hubs


def find_orphans(
    graph: DependencyGraph,
    depths: dict[str, int],
    unreachable_depth: int = DEFAULT_THRESHOLDS.orphan_depth,
) -> list[OrphanModule]:
    """Files unreachable from every entry point, or never imported and not
    named like an entry point. Test files are never orphans."""
    orphans = []
    for path in sorted(graph.nodes):
        if is_test_file(path):
            continue
        node = graph.nodes[path]
        if depths.get(path, unreachable_depth) == unreachable_depth:
            orphans.append(OrphanModule(path=path, reason="Not reachable from any entry point"))
        elif node.fan_in == 0 and not is_likely_entry_point(path):
            orphans.append(OrphanModule(path=path, reason="Not imported by any other file"))
    return orphans


# ── Clusters and metrics ───────────────────────────────────────────


def cluster_name(path: str) -> str:
    head, sep, _ = path.partition("/")
    return head if sep else ROOT_CLUSTER


def compute_clusters(graph: DependencyGraph) -> list[DependencyCluster]:
    """Group files by top-level directory; count edges staying in vs leaving."""
    members: dict[str, list[str]] = {}
    for path in graph.nodes:
        members.setdefault(cluster_name(path), []).append(path)

    clusters = []
    for name, files in members.items():
        file_set = set(files)
        internal = external = 0
        for path in files:
            for target in graph.nodes[path].imports:
                if target in file_set:
                    internal += 1
                else:
                    external += 1
        total = internal + external
        clusters.append(
            DependencyCluster(
                name=name,
                files=sorted(files),
                internal_dependencies=internal,
                external_dependencies=external,
                cohesion=internal / total if total else 1.0,
                coupling=external / total if total else 0.0,
            )
        )

    clusters.sort(key=lambda c: (-len(c.files), c.name))
    return clusters


def compute_metrics(
    graph: DependencyGraph,
    depths: dict[str, int],
    unreachable_depth: int = DEFAULT_THRESHOLDS.orphan_depth,
) -> DependencyMetrics:
    nodes = list(graph.nodes.values())
    if not nodes:
        return DependencyMetrics()

    max_in = min(nodes, key=lambda n: (-n.fan_in, n.path))
    max_out = min(nodes, key=lambda n: (-n.fan_out, n.path))
    real_depths = [depths.get(n.path, unreachable_depth) for n in nodes]
    real_depths = [d if d != unreachable_depth else 0 for d in real_depths]

    return DependencyMetrics(
        total_edges=graph.edge_count,
        avg_fan_in=Statistics.mean([n.fan_in for n in nodes]),
        avg_fan_out=Statistics.mean([n.fan_out for n in nodes]),
        max_fan_in=(max_in.path, max_in.fan_in) if max_in.fan_in else ("", 0),
        max_fan_out=(max_out.path, max_out.fan_out) if max_out.fan_out else ("", 0),
        avg_instability=Statistics.mean([n.instability for n in nodes]),
        avg_depth=Statistics.mean(real_depths),
        max_depth=max(real_depths),
    )


# ── Summary and recommendations ────────────────────────────────────


def summarize(
    graph: DependencyGraph,
    cycles: list[CircularDependency],
    hubs: list[HubFile],
    orphans: list[OrphanModule],
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
) -> DependencySummary:
    """Counts plus a 0-100 health score.

    With default thresholds:
    score = 100 - 10 per cycle - 5 per hub-both - min(20, 2 per orphan)
    """
    t = thresholds
    nodes = list(graph.nodes.values())
    total_deps = sum(n.fan_out for n in nodes)

    score = 100
    score -= len(cycles) * t.health_cycle_penalty
    score -= sum(1 for h in hubs if h.hub_type is HubType.HUB_BOTH) * t.health_hub_penalty
    score -= min(t.health_orphan_penalty_cap, len(orphans) * t.health_orphan_penalty)

    return DependencySummary(
        total_files=len(nodes),
        total_dependencies=total_deps,
        avg_dependencies_per_file=total_deps / len(nodes) if nodes else 0.0,
        max_dependencies=max((n.fan_out for n in nodes), default=0),
        circular_count=len(cycles),
        hub_count=len(hubs),
        orphan_count=len(orphans),
        health_score=max(0, score),
    )


def recommend(
    cycles: list[CircularDependency],
    hubs: list[HubFile],
    orphans: list[OrphanModule],
    violations: list[LayerViolation],
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
) -> list[DependencyRecommendation]:
    """Prioritized follow-ups, most severe first."""
    recommendations = []

    severe = [c for c in cycles if c.severity is RiskLevel.HIGH]
    if severe:
        recommendations.append(
            DependencyRecommendation(
                priority=RiskLevel.CRITICAL,
                category="Circular Dependencies",
                description=f"{len(severe)} complex circular dependencies detected",
                files=_unique(p for c in severe for p in c.cycle),
                impact="Can cause runtime issues, testing difficulties, and maintenance headaches",
                action="Break cycles by extracting shared logic or using dependency injection",
            )
        )

    major_hubs = [h for h in hubs if h.hub_type is HubType.HUB_BOTH]
    if major_hubs:
        recommendations.append(
            DependencyRecommendation(
                priority=RiskLevel.HIGH,
                category="Hub Files",
                description=(
                    f"{len(major_hubs)} files are both heavily imported and import many others"
                ),
                files=[h.path for h in major_hubs],
                impact="Single points of failure, hard to modify without side effects",
                action="Split responsibilities into focused modules",
            )
        )

    if violations:
        recommendations.append(
            DependencyRecommendation(
                priority=RiskLevel.MEDIUM,
                category="Architecture",
                description=f"{len(violations)} layer dependency violations detected",
                files=_unique(v.from_file for v in violations),
                impact="Breaks architectural boundaries, can lead to spaghetti code",
                action="Restructure imports to follow architectural layers",
            )
        )

    if len(orphans) > thresholds.orphan_report_min:
        recommendations.append(
            DependencyRecommendation(
                priority=RiskLevel.LOW,
                category="Dead Code",
                description=f"{len(orphans)} potentially unused modules detected",
                files=[o.path for o in orphans[:10]],
                impact="Increases bundle size and maintenance burden",
                action="Verify if entry points, otherwise remove",
            )
        )

    return recommendations


def _unique(items: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(items))

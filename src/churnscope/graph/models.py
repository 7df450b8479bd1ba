"""Data models for the import dependency graph and its derived structures."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

from ..architecture.models import LayerViolation
from ..levels import RiskLevel

# ── The graph ──────────────────────────────────────────────────────


@dataclass
class DependencyNode:
    """One source file. ``imports`` holds the files it depends on."""

    path: str
    imports: list[str] = field(default_factory=list)
    imported_by: list[str] = field(default_factory=list)
    depth: int = -1  # BFS hops from the nearest entry point
    is_entry_point: bool = False
    is_hub: bool = False
    is_orphan: bool = False  # unreachable from every entry point
    cluster: Optional[str] = None

    @property
    def fan_in(self) -> int:
        return len(self.imported_by)

    @property
    def fan_out(self) -> int:
        return len(self.imports)

    @property
    def instability(self) -> float:
        """fan_out / (fan_in + fan_out); 0 = stable, 1 = unstable, 0 when isolated."""
        total = self.fan_in + self.fan_out
        return self.fan_out / total if total else 0.0


@dataclass
class DependencyGraph:
    """Directed import graph. An edge A -> B means A imports B."""

    nodes: dict[str, DependencyNode] = field(default_factory=dict)
    # source file -> relative specifiers that matched no file in the snapshot
    unresolved_imports: dict[str, list[str]] = field(default_factory=dict)

    def __contains__(self, path: str) -> bool:
        return path in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return sum(n.fan_out for n in self.nodes.values())

    @property
    def adjacency(self) -> dict[str, list[str]]:
        return {path: node.imports for path, node in self.nodes.items()}

    def edges(self) -> Iterator[tuple[str, str]]:
        for path, node in self.nodes.items():
            for target in node.imports:
                yield path, target


# ── Derived structures ─────────────────────────────────────────────


class HubType(Enum):
    HUB_IN = "hub-in"  # heavily imported
    HUB_OUT = "hub-out"  # imports heavily
    HUB_BOTH = "hub-both"


@dataclass
class CircularDependency:
    """A loop of imports. ``cycle`` repeats its first node at the end."""

    cycle: list[str]
    length: int  # distinct files in the loop
    severity: RiskLevel
    suggestion: str = ""


@dataclass
class HubFile:
    path: str
    fan_in: int
    fan_out: int
    hub_type: HubType
    risk: str = ""
    suggestion: str = ""

    @property
    def total_connections(self) -> int:
        return self.fan_in + self.fan_out


@dataclass
class OrphanModule:
    path: str
    reason: str
    suggestion: str = "Verify if this is an entry point, otherwise consider removing"


@dataclass
class DependencyCluster:
    """Files sharing a top-level path segment."""

    name: str
    files: list[str] = field(default_factory=list)
    internal_dependencies: int = 0
    external_dependencies: int = 0
    cohesion: float = 1.0  # share of edges staying inside
    coupling: float = 0.0  # share of edges leaving


@dataclass
class DependencyMetrics:
    total_edges: int = 0
    avg_fan_in: float = 0.0
    avg_fan_out: float = 0.0
    max_fan_in: tuple[str, int] = ("", 0)  # (file, value)
    max_fan_out: tuple[str, int] = ("", 0)
    avg_instability: float = 0.0
    avg_depth: float = 0.0  # unreachable nodes count as 0
    max_depth: int = 0  # ignores the unreachable sentinel


@dataclass
class DependencySummary:
    total_files: int = 0
    total_dependencies: int = 0
    avg_dependencies_per_file: float = 0.0
    max_dependencies: int = 0
    circular_count: int = 0
    hub_count: int = 0
    orphan_count: int = 0
    health_score: int = 100  # 0-100


@dataclass
class DependencyRecommendation:
    priority: RiskLevel
    category: str
    description: str
    files: list[str] = field(default_factory=list)
    impact: str = ""
    action: str = ""


@dataclass
class DependencyAnalysis:
    """Everything derived from one source snapshot."""

    graph: DependencyGraph = field(default_factory=DependencyGraph)
    entry_points: list[str] = field(default_factory=list)
    circular_dependencies: list[CircularDependency] = field(default_factory=list)
    hub_files: list[HubFile] = field(default_factory=list)
    orphan_modules: list[OrphanModule] = field(default_factory=list)
    layer_violations: list[LayerViolation] = field(default_factory=list)
    clusters: list[DependencyCluster] = field(default_factory=list)
    metrics: DependencyMetrics = field(default_factory=DependencyMetrics)
    summary: DependencySummary = field(default_factory=DependencySummary)
    recommendations: list[DependencyRecommendation] = field(default_factory=list)

"""Structural analysis: import graph, cycles, hubs, orphans, clusters."""

from .builder import build_dependency_graph
from .engine import analyze_dependencies
from .models import (
    CircularDependency,
    DependencyAnalysis,
    DependencyCluster,
    DependencyGraph,
    DependencyNode,
    HubFile,
    HubType,
    OrphanModule,
)

__all__ = [
    "CircularDependency",
    "DependencyAnalysis",
    "DependencyCluster",
    "DependencyGraph",
    "DependencyNode",
    "HubFile",
    "HubType",
    "OrphanModule",
    "analyze_dependencies",
    "build_dependency_graph",
]

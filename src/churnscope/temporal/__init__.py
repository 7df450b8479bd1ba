"""Temporal analysis: git history, churn, bus factor and co-change."""

from .busfactor import BusFactorAnalysis, analyze_bus_factor, compute_bus_factor
from .churn import ChurnAnalysis, analyze_churn, churn_score
from .cochange import CouplingAnalysis, analyze_coupling, coupling_strength
from .git_extractor import GitExtractor
from .log_parser import LOG_FORMAT, parse_log
from .models import Commit, FileChange, FileStatus, GitHistory, Person

__all__ = [
    "BusFactorAnalysis",
    "ChurnAnalysis",
    "Commit",
    "CouplingAnalysis",
    "FileChange",
    "FileStatus",
    "GitExtractor",
    "GitHistory",
    "LOG_FORMAT",
    "Person",
    "analyze_bus_factor",
    "analyze_churn",
    "analyze_coupling",
    "churn_score",
    "compute_bus_factor",
    "coupling_strength",
    "parse_log",
]

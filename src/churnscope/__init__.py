"""
ChurnScope - Git History and Dependency Risk Analysis

Mines a repository's commit history for change hotspots, knowledge
concentration (bus factor) and files that change together, and checks the
working tree's import graph for cycles, hubs, orphans and layering
violations.
"""

__version__ = "0.1.0"

from .api import AnalysisReport, analyze, run_analyzers
from .config import AnalysisConfig, ThresholdConfig, load_config
from .levels import RiskLevel

__all__ = [
    "analyze",  # Main entry point
    "run_analyzers",
    "AnalysisReport",
    "AnalysisConfig",
    "ThresholdConfig",
    "RiskLevel",
    "load_config",
]

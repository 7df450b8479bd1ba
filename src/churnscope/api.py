"""Public API for ChurnScope.

This module provides the main entry point for analysis. Users should call
analyze() instead of wiring the extractor and analyzers by hand.

Example:
    >>> from churnscope import analyze
    >>>
    >>> report = analyze("/path/to/repo")
    >>> report.bus_factor.overall
    2
    >>>
    >>> # Only the last year of main, no merges
    >>> report = analyze(
    ...     "/path/to/repo",
    ...     branch="main",
    ...     since="1 year ago",
    ...     exclude_merges=True,
    ... )
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import AnalysisConfig, load_config
from .graph.engine import analyze_dependencies
from .graph.models import DependencyAnalysis
from .logging_config import get_logger, setup_logging
from .scanning.snapshot import collect_source_snapshot
from .temporal.busfactor import BusFactorAnalysis, analyze_bus_factor
from .temporal.churn import ChurnAnalysis, analyze_churn
from .temporal.cochange import CouplingAnalysis, analyze_coupling
from .temporal.git_extractor import GitExtractor
from .temporal.models import GitHistory

logger = get_logger(__name__)


@dataclass
class AnalysisReport:
    """Results of every analyzer for one repository."""

    repo_path: str
    history: GitHistory
    churn: ChurnAnalysis
    bus_factor: BusFactorAnalysis
    coupling: CouplingAnalysis
    dependencies: Optional[DependencyAnalysis] = None  # None when disabled


def analyze(
    path: str = ".",
    config_file: Optional[Path] = None,
    **overrides,
) -> AnalysisReport:
    """Analyze a git repository and return every analyzer's result.

    1. Load configuration (auto-discover TOML + apply overrides)
    2. Run ``git log`` and parse the history
    3. Run the analyzers concurrently

    Args:
        path: Path to the repository root (default: current directory)
        config_file: Optional explicit config file path
        **overrides: Configuration overrides (e.g., verbose=True, since="2024-01-01")

    Raises:
        ChurnScopeError: If configuration is invalid
        InvalidPathError: If path is not a directory
        GitCommandError: If git fails
        NoCommitsError: If the selected history is empty
    """
    verbosity = "verbose" if overrides.get("verbose") else "normal"
    if overrides.get("quiet"):
        verbosity = "quiet"
    setup_logging(verbose=(verbosity == "verbose"), quiet=(verbosity == "quiet"))

    logger.info(f"Starting analysis of {path}")

    config = load_config(config_file=config_file, **overrides)
    logger.debug(f"Configuration loaded: {config.verbosity} mode")

    history = GitExtractor(path, config).extract()
    logger.info(f"Parsed {history.total_commits} commits by {len(history.authors)} authors")

    return run_analyzers(history, config, repo_path=path)


def run_analyzers(
    history: GitHistory,
    config: Optional[AnalysisConfig] = None,
    repo_path: Optional[str] = None,
) -> AnalysisReport:
    """Run the history analyzers, plus dependency analysis of ``repo_path``.

    Each analyzer only reads its inputs, so they share one thread pool
    without coordination. The first analyzer error propagates.
    """
    config = config or AnalysisConfig()
    thresholds = config.thresholds
    commits = history.commits

    with ThreadPoolExecutor(max_workers=config.workers) as executor:
        churn = executor.submit(analyze_churn, commits, thresholds)
        bus_factor = executor.submit(analyze_bus_factor, commits, thresholds)
        coupling = executor.submit(analyze_coupling, commits, thresholds)
        dependencies = None
        if config.enable_dependency_analysis and repo_path is not None:
            dependencies = executor.submit(_analyze_working_tree, repo_path, config)

        report = AnalysisReport(
            repo_path=str(Path(repo_path).resolve()) if repo_path else "",
            history=history,
            churn=churn.result(),
            bus_factor=bus_factor.result(),
            coupling=coupling.result(),
            dependencies=dependencies.result() if dependencies else None,
        )

    logger.info("Analysis complete")
    return report


def _analyze_working_tree(repo_path: str, config: AnalysisConfig) -> DependencyAnalysis:
    snapshot = collect_source_snapshot(repo_path, config)
    return analyze_dependencies(snapshot, config)

"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import AnalysisConfig, load_config

console = Console()


def resolve_config(
    config: Optional[Path] = None,
    branch: Optional[str] = None,
    since: Optional[str] = None,
    until: Optional[str] = None,
    authors: Optional[list[str]] = None,
    include: Optional[list[str]] = None,
    exclude: Optional[list[str]] = None,
    no_merges: bool = False,
    max_commits: Optional[int] = None,
    no_deps: bool = False,
    workers: Optional[int] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> AnalysisConfig:
    """Build config from CLI options. Unset options leave file/env values alone."""
    overrides: dict = {}
    if branch is not None:
        overrides["branch"] = branch
    if since is not None:
        overrides["since"] = since
    if until is not None:
        overrides["until"] = until
    if authors:
        overrides["authors"] = list(authors)
    if include:
        overrides["include_paths"] = list(include)
    if exclude:
        overrides["exclude_paths"] = list(exclude)
    if no_merges:
        overrides["exclude_merges"] = True
    if max_commits is not None:
        overrides["max_commits"] = max_commits
    if no_deps:
        overrides["enable_dependency_analysis"] = False
    if workers is not None:
        overrides["workers"] = workers
    if verbose:
        overrides["verbose"] = True
    if quiet:
        overrides["quiet"] = True
    return load_config(config_file=config, **overrides)

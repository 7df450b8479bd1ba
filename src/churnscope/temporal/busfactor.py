"""Bus factor: how few contributors hold most of the knowledge of a scope.

The bus factor of a scope is the smallest k such that the k most active
authors together made at least ``threshold`` of the scope's commits.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from ..config import DEFAULT_THRESHOLDS, ThresholdConfig
from ..levels import RiskLevel
from ..logging_config import get_logger
from .keys import ROOT_DIRECTORY
from .models import Commit, Person

logger = get_logger(__name__)


@dataclass
class CriticalArea:
    path: str
    scope: str  # "file" or "directory"
    bus_factor: int
    total_commits: int
    risk: RiskLevel
    sole_contributor: Optional[Person] = None  # set when bus_factor == 1


@dataclass
class BusFactorAnalysis:
    overall: int = 0
    by_directory: dict[str, int] = field(default_factory=dict)
    by_file: dict[str, int] = field(default_factory=dict)
    critical_areas: list[CriticalArea] = field(default_factory=list)


def compute_bus_factor(author_commits: Mapping[str, int], threshold: float = 0.5) -> int:
    """Smallest number of top authors whose commits reach ``threshold`` of the total.

    Authors are ranked by descending commit count; ties keep mapping order.
    """
    if not author_commits:
        return 0
    if len(author_commits) == 1:
        return 1

    total = sum(author_commits.values())
    if total == 0:
        return 0

    ranked = sorted(author_commits.values(), reverse=True)
    accumulated = 0
    bus_factor = 0
    for count in ranked:
        accumulated += count
        bus_factor += 1
        if accumulated / total >= threshold:
            break
    return bus_factor


def classify_bus_factor(
    bus_factor: int, total_commits: int, thresholds: ThresholdConfig = DEFAULT_THRESHOLDS
) -> Optional[RiskLevel]:
    """CRITICAL, MEDIUM, or None when the scope is healthy or too rarely touched."""
    if total_commits < thresholds.bus_factor_min_commits or bus_factor == 0:
        return None
    if bus_factor <= thresholds.bus_factor_critical_max:
        return RiskLevel.CRITICAL
    if bus_factor <= thresholds.bus_factor_medium_max:
        return RiskLevel.MEDIUM
    return None


def scope_author_commits(commits: Sequence[Commit], scope: Optional[str] = None) -> dict[str, int]:
    """Commits per author restricted to ``scope``.

    ``scope`` is None for the whole repository, or a file or directory
    path; a directory covers everything beneath it. Each commit counts
    once per author no matter how many files it touches inside the scope.
    """
    if scope in ("", ROOT_DIRECTORY):
        scope = None
    counts: dict[str, int] = {}
    prefix = scope.rstrip("/") + "/" if scope else None
    for commit in commits:
        if scope is not None and not any(
            f.path == scope or f.path.startswith(prefix) for f in commit.files
        ):
            continue
        key = commit.author_key
        counts[key] = counts.get(key, 0) + 1
    return counts


def bus_factor_for_scope(
    commits: Sequence[Commit], scope: Optional[str] = None, threshold: float = 0.5
) -> int:
    return compute_bus_factor(scope_author_commits(commits, scope), threshold)


def analyze_bus_factor(
    commits: Sequence[Commit], thresholds: ThresholdConfig = DEFAULT_THRESHOLDS
) -> BusFactorAnalysis:
    """Repository, per-directory and per-file bus factors plus flagged areas.

    Directories are the immediate parent directory of each touched file.
    """
    threshold = thresholds.bus_factor_threshold
    repo_counts: dict[str, int] = {}
    dir_counts: dict[str, dict[str, int]] = defaultdict(dict)
    file_counts: dict[str, dict[str, int]] = defaultdict(dict)
    people: dict[str, Person] = {}

    for commit in commits:
        key = commit.author_key
        people.setdefault(key, commit.author)
        repo_counts[key] = repo_counts.get(key, 0) + 1

        for path in commit.paths:
            per_file = file_counts[path]
            per_file[key] = per_file.get(key, 0) + 1
        for directory in commit.directories:
            per_dir = dir_counts[directory]
            per_dir[key] = per_dir.get(key, 0) + 1

    by_file = {p: compute_bus_factor(c, threshold) for p, c in file_counts.items()}
    by_directory = {d: compute_bus_factor(c, threshold) for d, c in dir_counts.items()}

    critical: list[CriticalArea] = []
    for scope, factors, counts in (
        ("file", by_file, file_counts),
        ("directory", by_directory, dir_counts),
    ):
        for path, factor in factors.items():
            author_counts = counts[path]
            total = sum(author_counts.values())
            risk = classify_bus_factor(factor, total, thresholds)
            if risk is None:
                continue
            sole = None
            if factor == 1:
                top_key = max(author_counts, key=lambda k: author_counts[k])
                sole = people[top_key]
            critical.append(
                CriticalArea(
                    path=path,
                    scope=scope,
                    bus_factor=factor,
                    total_commits=total,
                    risk=risk,
                    sole_contributor=sole,
                )
            )

    critical.sort(key=lambda a: (a.risk.rank, a.scope != "file", a.path))

    overall = compute_bus_factor(repo_counts, threshold)
    logger.debug(
        "Bus factor analysis: overall=%d, %d files, %d directories, %d critical areas",
        overall,
        len(by_file),
        len(by_directory),
        len(critical),
    )

    return BusFactorAnalysis(
        overall=overall,
        by_directory=by_directory,
        by_file=by_file,
        critical_areas=critical,
    )

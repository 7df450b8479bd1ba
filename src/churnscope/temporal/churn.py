"""Churn, ownership and combined risk scoring from git history."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from math import log10
from typing import Optional, Sequence

from ..config import DEFAULT_THRESHOLDS, ThresholdConfig
from ..levels import RiskLevel
from ..logging_config import get_logger
from ..math.statistics import Statistics
from .keys import ROOT_DIRECTORY, parent_directory
from .models import Commit, Person

logger = get_logger(__name__)

_RECOMMENDATIONS = {
    RiskLevel.CRITICAL: (
        "Urgent refactoring needed - high change frequency with concentrated ownership"
    ),
    RiskLevel.HIGH: "Consider splitting or refactoring - becoming a maintenance burden",
    RiskLevel.MEDIUM: "Monitor closely - showing signs of complexity growth",
    RiskLevel.LOW: "",
}


@dataclass
class FileChurn:
    path: str
    commits: int = 0
    additions: int = 0
    deletions: int = 0
    binary_changes: int = 0  # touches with unknown line counts
    author_commits: dict[str, int] = field(default_factory=dict)  # author key -> commits
    first_seen: Optional[datetime] = None
    last_seen: Optional[datetime] = None
    churn_score: float = 0.0

    @property
    def total_changes(self) -> int:
        return self.additions + self.deletions

    @property
    def authors(self) -> list[str]:
        return list(self.author_commits)


@dataclass
class FileOwnership:
    path: str
    primary_owner: Person
    ownership_percentage: float  # share of the file's commits by primary_owner, 0-100
    contributors: list[Person] = field(default_factory=list)  # everyone else


@dataclass
class DirectoryStats:
    path: str
    file_count: int = 0
    commits: int = 0  # distinct commits touching the directory
    additions: int = 0
    deletions: int = 0
    top_contributors: list[Person] = field(default_factory=list)


@dataclass
class DirectoryHotspot:
    path: str
    commits: int
    file_count: int
    churn_score: float  # sum of file churn in the directory
    author_count: int
    risk_level: RiskLevel
    top_files: list[str] = field(default_factory=list)
    avg_file_churn: float = 0.0


@dataclass
class RiskEntry:
    path: str
    frequency: int  # commits
    complexity: float  # churn score
    ownership: float  # concentration 0-1, 1 = single owner
    combined_risk: float  # 0-100
    risk_level: RiskLevel
    recommendation: str = ""


@dataclass
class ChurnAnalysis:
    files: list[FileChurn] = field(default_factory=list)  # hottest first
    directories: list[DirectoryStats] = field(default_factory=list)
    ownership: dict[str, FileOwnership] = field(default_factory=dict)
    directory_hotspots: list[DirectoryHotspot] = field(default_factory=list)
    risk_map: list[RiskEntry] = field(default_factory=list)

    def file(self, path: str) -> Optional[FileChurn]:
        for f in self.files:
            if f.path == path:
                return f
        return None


def churn_score(commits: int, lines_changed: int) -> float:
    """``commits * log10(lines + 1)``: frequency counts linearly, magnitude logarithmically."""
    return commits * log10(lines_changed + 1)


def classify_risk(score: float, thresholds: ThresholdConfig = DEFAULT_THRESHOLDS) -> RiskLevel:
    if score > thresholds.risk_critical:
        return RiskLevel.CRITICAL
    if score > thresholds.risk_high:
        return RiskLevel.HIGH
    if score > thresholds.risk_medium:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def classify_directory_risk(
    commits: int, avg_churn: float, thresholds: ThresholdConfig = DEFAULT_THRESHOLDS
) -> RiskLevel:
    t = thresholds
    if commits > t.hotspot_critical_commits and avg_churn > t.hotspot_critical_churn:
        return RiskLevel.CRITICAL
    if commits > t.hotspot_high_commits and avg_churn > t.hotspot_high_churn:
        return RiskLevel.HIGH
    if commits > t.hotspot_medium_commits or avg_churn > t.hotspot_medium_churn:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def analyze_churn(
    commits: Sequence[Commit], thresholds: ThresholdConfig = DEFAULT_THRESHOLDS
) -> ChurnAnalysis:
    """Aggregate per-file and per-directory churn, ownership and risk.

    Single pass over the commits; every accumulator is local to this call.
    """
    file_map: dict[str, FileChurn] = {}
    dir_commits: dict[str, set[str]] = defaultdict(set)
    dir_additions: dict[str, int] = defaultdict(int)
    dir_deletions: dict[str, int] = defaultdict(int)
    dir_authors: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
    dir_files: dict[str, set[str]] = defaultdict(set)
    people: dict[str, Person] = {}

    for commit in commits:
        key = commit.author_key
        people.setdefault(key, commit.author)

        for change in commit.files:
            data = file_map.get(change.path)
            if data is None:
                data = file_map[change.path] = FileChurn(path=change.path)
            data.commits += 1
            data.additions += change.additions
            data.deletions += change.deletions
            if change.binary:
                data.binary_changes += 1
            data.author_commits[key] = data.author_commits.get(key, 0) + 1
            if data.first_seen is None or commit.timestamp < data.first_seen:
                data.first_seen = commit.timestamp
            if data.last_seen is None or commit.timestamp > data.last_seen:
                data.last_seen = commit.timestamp

            directory = change.directory
            dir_commits[directory].add(commit.hash)
            dir_additions[directory] += change.additions
            dir_deletions[directory] += change.deletions
            dir_authors[directory][key] += 1
            dir_files[directory].add(change.path)

    for data in file_map.values():
        data.churn_score = churn_score(data.commits, data.total_changes)

    files = sorted(file_map.values(), key=lambda f: (-f.churn_score, f.path))

    directories = []
    for directory, hashes in dir_commits.items():
        ranked = sorted(dir_authors[directory].items(), key=lambda kv: -kv[1])
        directories.append(
            DirectoryStats(
                path=directory,
                file_count=len(dir_files[directory]),
                commits=len(hashes),
                additions=dir_additions[directory],
                deletions=dir_deletions[directory],
                top_contributors=[people[k] for k, _ in ranked[:5]],
            )
        )
    directories.sort(key=lambda d: (-d.commits, d.path))

    ownership = _compute_ownership(files, people)
    hotspots = _directory_hotspots(files, directories, dir_authors, thresholds)
    risk_map = _risk_map(files, ownership, thresholds)

    logger.debug(
        "Churn analysis: %d files, %d directories, %d hotspots, %d risk entries",
        len(files),
        len(directories),
        len(hotspots),
        len(risk_map),
    )

    return ChurnAnalysis(
        files=files,
        directories=directories,
        ownership=ownership,
        directory_hotspots=hotspots,
        risk_map=risk_map,
    )


def _compute_ownership(
    files: list[FileChurn], people: dict[str, Person]
) -> dict[str, FileOwnership]:
    ownership: dict[str, FileOwnership] = {}
    for data in files:
        if not data.author_commits:
            continue
        total = sum(data.author_commits.values())
        owner_key, owner_commits = None, 0
        for key, count in data.author_commits.items():
            if count > owner_commits:
                owner_key, owner_commits = key, count
        ownership[data.path] = FileOwnership(
            path=data.path,
            primary_owner=people[owner_key],
            ownership_percentage=owner_commits / total * 100,
            contributors=[people[k] for k in data.author_commits if k != owner_key],
        )
    return ownership


def _directory_hotspots(
    files: list[FileChurn],
    directories: list[DirectoryStats],
    dir_authors: dict[str, dict[str, int]],
    thresholds: ThresholdConfig,
) -> list[DirectoryHotspot]:
    files_by_dir: dict[str, list[FileChurn]] = defaultdict(list)
    for f in files:  # already hottest first
        files_by_dir[parent_directory(f.path)].append(f)

    hotspots = []
    for d in directories:
        if d.path == ROOT_DIRECTORY or d.file_count < thresholds.hotspot_min_files:
            continue
        dir_files = files_by_dir[d.path]
        total_churn = sum(f.churn_score for f in dir_files)
        avg_churn = total_churn / len(dir_files) if dir_files else 0.0
        hotspots.append(
            DirectoryHotspot(
                path=d.path,
                commits=d.commits,
                file_count=d.file_count,
                churn_score=total_churn,
                author_count=len(dir_authors[d.path]),
                risk_level=classify_directory_risk(d.commits, avg_churn, thresholds),
                top_files=[f.path for f in dir_files[:3]],
                avg_file_churn=avg_churn,
            )
        )

    hotspots.sort(key=lambda h: (-h.churn_score, h.path))
    return hotspots[: thresholds.hotspot_limit]


def _risk_map(
    files: list[FileChurn],
    ownership: dict[str, FileOwnership],
    thresholds: ThresholdConfig,
) -> list[RiskEntry]:
    if not files:
        return []

    concentrations = [
        ownership[f.path].ownership_percentage / 100 if f.path in ownership else 1.0
        for f in files
    ]
    frequency = Statistics.normalize_to_max([f.commits for f in files])
    complexity = Statistics.normalize_to_max([f.churn_score for f in files])
    concentration = Statistics.normalize_to_max(concentrations)

    entries = []
    for i, f in enumerate(files[: thresholds.risk_candidate_files]):
        combined = (
            frequency[i] * thresholds.risk_frequency_weight
            + complexity[i] * thresholds.risk_churn_weight
            + concentration[i] * thresholds.risk_ownership_weight
        )
        level = classify_risk(combined, thresholds)
        if level is RiskLevel.LOW:
            continue
        entries.append(
            RiskEntry(
                path=f.path,
                frequency=f.commits,
                complexity=f.churn_score,
                ownership=concentrations[i],
                combined_risk=combined,
                risk_level=level,
                recommendation=_RECOMMENDATIONS[level],
            )
        )

    entries.sort(key=lambda e: (-e.combined_risk, e.path))
    return entries[: thresholds.risk_map_limit]

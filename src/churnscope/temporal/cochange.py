"""Temporal coupling: files and directories that change in the same commits."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from itertools import combinations
from typing import Callable, Iterable, Optional, Sequence

from ..config import DEFAULT_THRESHOLDS, ThresholdConfig
from ..logging_config import get_logger
from .keys import parent_directory
from .models import Commit

logger = get_logger(__name__)


@dataclass
class CoChangePair:
    file_a: str  # file_a < file_b
    file_b: str
    cochange_count: int  # commits touching both
    changes_a: int  # commits touching file_a
    changes_b: int
    strength: float  # cochange / min(changes_a, changes_b) * 100
    is_likely_coupled: bool = False


@dataclass
class DirectoryCoupling:
    dir_a: str
    dir_b: str
    cochange_count: int
    strength: float


@dataclass
class HiddenDependency:
    file_a: str
    file_b: str
    cochange_count: int
    strength: float
    reason: str


@dataclass
class HighImpactCommit:
    hash: str  # short hash
    subject: str
    author: str
    files_changed: int
    directories_changed: int
    impact_score: int
    timestamp: datetime


@dataclass
class ChangePattern:
    pattern: str
    description: str
    frequency: int  # commits matching the pattern


@dataclass(frozen=True)
class ChangePatternRule:
    """A commit matches when some touched path satisfies each side."""

    name: str
    description: str
    left: Callable[[str], bool]
    right: Callable[[str], bool]


def _is_config(path: str) -> bool:
    return "config" in path or path.endswith((".json", ".yml", ".yaml"))


def _is_code(path: str) -> bool:
    return path.endswith((".ts", ".js", ".py"))


def _is_test(path: str) -> bool:
    return "test" in path or "spec" in path


def _is_implementation(path: str) -> bool:
    return not _is_test(path) and path.endswith((".ts", ".js"))


def _is_style(path: str) -> bool:
    return path.endswith((".css", ".scss", ".less"))


def _is_template(path: str) -> bool:
    return path.endswith((".html", ".vue", ".jsx", ".tsx"))


CHANGE_PATTERN_RULES = (
    ChangePatternRule(
        "config-code", "Config files often change with code", _is_config, _is_code
    ),
    ChangePatternRule(
        "test-implementation",
        "Tests updated with implementation (good practice)",
        _is_test,
        _is_implementation,
    ),
    ChangePatternRule(
        "style-template", "Styles change with templates", _is_style, _is_template
    ),
)


@dataclass
class CouplingAnalysis:
    pairs: list[CoChangePair] = field(default_factory=list)  # strongest first
    directory_coupling: list[DirectoryCoupling] = field(default_factory=list)
    hidden_dependencies: list[HiddenDependency] = field(default_factory=list)
    high_impact_commits: list[HighImpactCommit] = field(default_factory=list)
    change_patterns: list[ChangePattern] = field(default_factory=list)
    file_change_counts: dict[str, int] = field(default_factory=dict)
    coupling_score: int = 100  # 100 = no coupling problems

    def pair(self, a: str, b: str) -> Optional[CoChangePair]:
        key = pair_key(a, b)
        for p in self.pairs:
            if (p.file_a, p.file_b) == key:
                return p
        return None

    def strength(self, a: str, b: str) -> float:
        """Reported strength for an unordered pair, 0.0 when not reported."""
        p = self.pair(a, b)
        return p.strength if p else 0.0


def pair_key(a: str, b: str) -> tuple[str, str]:
    return (a, b) if a <= b else (b, a)


def count_cochanges(
    groups: Iterable[Iterable[str]], max_group_size: int = 0
) -> tuple[Counter, Counter]:
    """Count touches per item and co-occurrences per unordered pair.

    Each group is one commit's touched items; duplicates inside a group
    are collapsed. Groups larger than ``max_group_size`` (when non-zero)
    are ignored entirely.
    """
    touches: Counter = Counter()
    pairs: Counter = Counter()
    for group in groups:
        items = sorted(set(group))
        if not items:
            continue
        if max_group_size and len(items) > max_group_size:
            continue
        touches.update(items)
        for a, b in combinations(items, 2):
            pairs[(a, b)] += 1
    return touches, pairs


def coupling_strength(cochanges: int, changes_a: int, changes_b: int) -> float:
    """Share of the less frequently changed item's changes that include the other, 0-100."""
    least = min(changes_a, changes_b)
    if least <= 0:
        return 0.0
    return min(100.0, cochanges / least * 100)


def analyze_coupling(
    commits: Sequence[Commit], thresholds: ThresholdConfig = DEFAULT_THRESHOLDS
) -> CouplingAnalysis:
    if not commits:
        return CouplingAnalysis()

    t = thresholds
    # bulk commits are dropped from both the file and the directory pass
    counted = [
        c
        for c in commits
        if not t.coupling_max_files_per_commit
        or len(c.paths) <= t.coupling_max_files_per_commit
    ]
    file_touches, file_pairs = count_cochanges(c.paths for c in counted)
    dir_touches, dir_pairs = count_cochanges(c.directories for c in counted)

    pairs = []
    for (a, b), count in file_pairs.items():
        if count < t.coupling_min_cochanges:
            continue
        strength = coupling_strength(count, file_touches[a], file_touches[b])
        if strength <= t.coupling_min_strength:
            continue
        pairs.append(
            CoChangePair(
                file_a=a,
                file_b=b,
                cochange_count=count,
                changes_a=file_touches[a],
                changes_b=file_touches[b],
                strength=strength,
                is_likely_coupled=strength > t.coupling_likely_strength,
            )
        )
    pairs.sort(key=lambda p: (-p.strength, -p.cochange_count, p.file_a, p.file_b))

    directory_coupling = []
    for (a, b), count in dir_pairs.items():
        if count < t.coupling_dir_min_cochanges:
            continue
        strength = coupling_strength(count, dir_touches[a], dir_touches[b])
        if strength <= t.coupling_dir_min_strength:
            continue
        directory_coupling.append(
            DirectoryCoupling(dir_a=a, dir_b=b, cochange_count=count, strength=strength)
        )
    directory_coupling.sort(key=lambda d: (-d.strength, d.dir_a, d.dir_b))

    hidden = [
        HiddenDependency(
            file_a=p.file_a,
            file_b=p.file_b,
            cochange_count=p.cochange_count,
            strength=p.strength,
            reason=f"Different directories but {p.strength:.0f}% coupling",
        )
        for p in pairs
        if p.strength > t.coupling_hidden_strength
        and parent_directory(p.file_a) != parent_directory(p.file_b)
    ]

    high_impact = _high_impact_commits(commits, t)
    patterns = detect_change_patterns(commits, t.change_pattern_min_commits)
    score = _coupling_score(pairs, hidden, high_impact, len(commits), t)

    logger.debug(
        "Coupling analysis: %d file pairs, %d directory pairs, %d hidden dependencies",
        len(pairs),
        len(directory_coupling),
        len(hidden),
    )

    return CouplingAnalysis(
        pairs=pairs,
        directory_coupling=directory_coupling,
        hidden_dependencies=hidden,
        high_impact_commits=high_impact,
        change_patterns=patterns,
        file_change_counts=dict(file_touches),
        coupling_score=score,
    )


def _high_impact_commits(
    commits: Sequence[Commit], thresholds: ThresholdConfig
) -> list[HighImpactCommit]:
    result = []
    for commit in commits:
        files = len(commit.paths)
        dirs = len(commit.directories)
        if files > thresholds.high_impact_min_files or dirs > thresholds.high_impact_min_dirs:
            result.append(
                HighImpactCommit(
                    hash=commit.short_hash,
                    subject=commit.subject,
                    author=commit.author.name,
                    files_changed=files,
                    directories_changed=dirs,
                    impact_score=files * 2 + dirs * 5,
                    timestamp=commit.timestamp,
                )
            )
    result.sort(key=lambda c: -c.impact_score)
    return result


def _coupling_score(
    pairs: list[CoChangePair],
    hidden: list[HiddenDependency],
    high_impact: list[HighImpactCommit],
    total_commits: int,
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
) -> int:
    t = thresholds
    strong = sum(1 for p in pairs if p.strength > t.coupling_score_strong_strength)
    score = 100.0
    score -= strong * t.coupling_score_strong_penalty
    score -= len(hidden) * t.coupling_score_hidden_penalty
    score -= len(high_impact) / total_commits * 100 * t.coupling_score_high_impact_penalty
    return max(0, min(100, round(score)))


def detect_change_patterns(
    commits: Sequence[Commit],
    min_commits: int = DEFAULT_THRESHOLDS.change_pattern_min_commits,
    rules: Sequence[ChangePatternRule] = CHANGE_PATTERN_RULES,
) -> list[ChangePattern]:
    """Recurring kinds of files changed together, in rule order.

    A pattern is reported when more than ``min_commits`` commits match it.
    """
    patterns = []
    for rule in rules:
        frequency = sum(1 for c in commits if _matches(rule, c.paths))
        if frequency > min_commits:
            patterns.append(
                ChangePattern(pattern=rule.name, description=rule.description, frequency=frequency)
            )
    return patterns


def _matches(rule: ChangePatternRule, paths: list[str]) -> bool:
    return any(rule.left(p) for p in paths) and any(rule.right(p) for p in paths)

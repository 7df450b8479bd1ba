"""Tests for bus factor computation."""

import pytest
from conftest import ALICE, BOB, CAROL, make_commit

from churnscope.config import ThresholdConfig
from churnscope.levels import RiskLevel
from churnscope.temporal.busfactor import (
    analyze_bus_factor,
    bus_factor_for_scope,
    classify_bus_factor,
    compute_bus_factor,
    scope_author_commits,
)


class TestComputeBusFactor:
    def test_empty(self):
        assert compute_bus_factor({}) == 0

    def test_single_author(self):
        assert compute_bus_factor({"a": 1}) == 1
        assert compute_bus_factor({"a": 500}) == 1

    def test_dominant_author(self):
        assert compute_bus_factor({"a": 90, "b": 5, "c": 5}) == 1

    def test_exactly_half_is_enough(self):
        assert compute_bus_factor({"a": 50, "b": 30, "c": 20}) == 1

    def test_even_split(self):
        assert compute_bus_factor({"a": 25, "b": 25, "c": 25, "d": 25}) == 2

    def test_threshold(self):
        counts = {"a": 40, "b": 30, "c": 20, "d": 10}
        assert compute_bus_factor(counts, threshold=0.5) == 2
        assert compute_bus_factor(counts, threshold=0.8) == 3
        assert compute_bus_factor(counts, threshold=1.0) == 4

    def test_ranking_ignores_mapping_order(self):
        assert compute_bus_factor({"c": 1, "b": 1, "a": 8}) == 1

    @pytest.mark.parametrize("authors", [1, 2, 5, 17])
    def test_at_least_one_when_there_are_commits(self, authors):
        counts = {f"author{i}": i + 1 for i in range(authors)}
        assert compute_bus_factor(counts) >= 1


class TestClassifyBusFactor:
    def test_rarely_touched_scopes_are_not_flagged(self):
        assert classify_bus_factor(1, 4) is None

    def test_levels(self):
        assert classify_bus_factor(1, 5) is RiskLevel.CRITICAL
        assert classify_bus_factor(2, 5) is RiskLevel.MEDIUM
        assert classify_bus_factor(3, 50) is None

    def test_custom_thresholds(self):
        t = ThresholdConfig(bus_factor_min_commits=1, bus_factor_medium_max=3)
        assert classify_bus_factor(3, 2, t) is RiskLevel.MEDIUM


class TestScopeAuthorCommits:
    def test_repository_scope(self, small_history):
        assert scope_author_commits(small_history) == {
            "alice@example.com": 3,
            "bob@example.com": 2,
        }
        assert scope_author_commits(small_history, ".") == scope_author_commits(small_history)

    def test_directory_scope_counts_each_commit_once(self, small_history):
        # commit 3 touches two files under src/ but counts once for Bob
        assert scope_author_commits(small_history, "src") == {
            "alice@example.com": 3,
            "bob@example.com": 2,
        }

    def test_directory_scope_covers_subtree(self):
        commits = [make_commit(1, ["src/deep/a.ts"], ALICE), make_commit(2, ["srcx/b.ts"], BOB)]
        assert scope_author_commits(commits, "src") == {"alice@example.com": 1}
        assert scope_author_commits(commits, "src/") == {"alice@example.com": 1}

    def test_file_scope(self, small_history):
        assert scope_author_commits(small_history, "docs/readme.md") == {"bob@example.com": 1}

    def test_scope_without_commits(self, small_history):
        assert scope_author_commits(small_history, "nowhere") == {}
        assert bus_factor_for_scope(small_history, "nowhere") == 0


class TestAnalyzeBusFactor:
    def test_empty_history(self):
        result = analyze_bus_factor([])
        assert result.overall == 0
        assert result.by_directory == {}
        assert result.by_file == {}
        assert result.critical_areas == []

    def test_single_contributor_scopes_are_one(self, small_history):
        result = analyze_bus_factor(small_history)
        assert result.by_file["docs/readme.md"] == 1
        assert result.by_file["lib/helpers.ts"] == 1
        assert result.by_directory["docs"] == 1

    def test_dominant_author_repository(self):
        """One author made 90 of 100 commits and touched every file alone."""
        files = [f"src/module{i}.ts" for i in range(10)]
        commits = [make_commit(i, [files[i % 10]], ALICE) for i in range(90)]
        commits += [make_commit(100 + i, ["docs/notes.md"], BOB) for i in range(10)]

        result = analyze_bus_factor(commits)

        assert result.overall == 1
        for path in files:
            assert result.by_file[path] == 1
        flagged = {a.path: a for a in result.critical_areas if a.scope == "file"}
        assert set(flagged) == set(files) | {"docs/notes.md"}
        for path in files:
            assert flagged[path].risk is RiskLevel.CRITICAL
            assert flagged[path].sole_contributor == ALICE

    def test_critical_areas_sorted(self):
        commits = []
        n = 0
        for _ in range(6):
            n += 1
            commits.append(make_commit(n, ["solo/a.ts"], ALICE))
        for author in (ALICE, BOB, CAROL, ALICE, BOB, CAROL):
            n += 1
            commits.append(make_commit(n, ["shared/b.ts"], author))

        areas = analyze_bus_factor(commits).critical_areas

        assert [(a.path, a.scope, a.risk) for a in areas] == [
            ("solo/a.ts", "file", RiskLevel.CRITICAL),
            ("solo", "directory", RiskLevel.CRITICAL),
            ("shared/b.ts", "file", RiskLevel.MEDIUM),
            ("shared", "directory", RiskLevel.MEDIUM),
        ]
        assert areas[2].sole_contributor is None

    def test_rarely_touched_files_not_flagged(self):
        commits = [make_commit(i, ["a.ts"], CAROL) for i in range(4)]
        result = analyze_bus_factor(commits)
        assert result.by_file["a.ts"] == 1
        assert result.critical_areas == []

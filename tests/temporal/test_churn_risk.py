"""Tests for churn, ownership, hotspots and the risk map."""

import math

import pytest
from conftest import ALICE, BOB, CAROL, change, make_commit

from churnscope.config import ThresholdConfig
from churnscope.levels import RiskLevel
from churnscope.temporal.churn import (
    analyze_churn,
    churn_score,
    classify_directory_risk,
    classify_risk,
)


class TestChurnScore:
    def test_formula(self):
        assert churn_score(3, 99) == pytest.approx(3 * 2.0)

    def test_no_lines_means_zero(self):
        assert churn_score(10, 0) == 0.0

    def test_monotonic_in_commits(self):
        scores = [churn_score(c, 50) for c in range(0, 20)]
        assert scores == sorted(scores)

    def test_monotonic_in_lines(self):
        scores = [churn_score(5, lines) for lines in range(0, 500, 7)]
        assert scores == sorted(scores)


class TestClassification:
    @pytest.mark.parametrize(
        "score,expected",
        [
            (90, RiskLevel.CRITICAL),
            (70.5, RiskLevel.CRITICAL),
            (70, RiskLevel.HIGH),
            (50.1, RiskLevel.HIGH),
            (50, RiskLevel.MEDIUM),
            (30.1, RiskLevel.MEDIUM),
            (30, RiskLevel.LOW),
            (0, RiskLevel.LOW),
        ],
    )
    def test_risk_bands(self, score, expected):
        assert classify_risk(score) is expected

    def test_directory_critical_needs_both_signals(self):
        assert classify_directory_risk(51, 101) is RiskLevel.CRITICAL
        assert classify_directory_risk(51, 60) is RiskLevel.HIGH
        assert classify_directory_risk(20, 10) is RiskLevel.MEDIUM
        assert classify_directory_risk(5, 31) is RiskLevel.MEDIUM
        assert classify_directory_risk(5, 5) is RiskLevel.LOW


class TestAnalyzeChurn:
    def test_empty_history(self):
        result = analyze_churn([])
        assert result.files == []
        assert result.directories == []
        assert result.ownership == {}
        assert result.directory_hotspots == []
        assert result.risk_map == []

    def test_per_file_aggregates(self):
        commits = [
            make_commit(1, [change("src/a.ts", 10, 2)], ALICE),
            make_commit(2, [change("src/a.ts", 5, 5)], BOB),
            make_commit(3, [change("src/a.ts", 0, 1), change("src/b.ts", 1, 0)], ALICE),
        ]
        result = analyze_churn(commits)

        a = result.file("src/a.ts")
        assert a.commits == 3
        assert a.additions == 15
        assert a.deletions == 8
        assert a.total_changes == 23
        assert a.author_commits == {"alice@example.com": 2, "bob@example.com": 1}
        assert a.first_seen == commits[0].timestamp
        assert a.last_seen == commits[2].timestamp
        assert a.churn_score == pytest.approx(3 * math.log10(24))

    def test_files_sorted_by_churn(self, small_history):
        result = analyze_churn(small_history)
        scores = [f.churn_score for f in result.files]
        assert scores == sorted(scores, reverse=True)

    def test_binary_changes_counted_without_lines(self):
        from churnscope.temporal.models import FileChange

        commits = [make_commit(1, [FileChange(path="logo.png", binary=True)])]
        data = analyze_churn(commits).file("logo.png")
        assert data.commits == 1
        assert data.binary_changes == 1
        assert data.total_changes == 0

    def test_author_identity_ignores_email_case(self):
        from churnscope.temporal.models import Person

        commits = [
            make_commit(1, ["a.ts"], Person("Alice", "Alice@Example.com")),
            make_commit(2, ["a.ts"], Person("alice", "alice@example.com")),
        ]
        data = analyze_churn(commits).file("a.ts")
        assert data.author_commits == {"alice@example.com": 2}

    def test_directory_stats(self, small_history):
        result = analyze_churn(small_history)
        src = next(d for d in result.directories if d.path == "src")

        assert src.file_count == 2
        assert src.commits == 5
        assert src.top_contributors[0] == ALICE
        root_dirs = {d.path for d in result.directories}
        assert root_dirs == {"src", "docs", "lib"}

    def test_ownership(self):
        commits = [
            make_commit(1, ["a.ts"], ALICE),
            make_commit(2, ["a.ts"], ALICE),
            make_commit(3, ["a.ts"], ALICE),
            make_commit(4, ["a.ts"], BOB),
        ]
        own = analyze_churn(commits).ownership["a.ts"]
        assert own.primary_owner == ALICE
        assert own.ownership_percentage == pytest.approx(75.0)
        assert own.contributors == [BOB]

    def test_hotspots_skip_root_and_single_file_directories(self):
        commits = [
            make_commit(i, ["README.md", "setup.ts", "solo/only.ts", "pair/a.ts", "pair/b.ts"])
            for i in range(1, 4)
        ]
        hotspots = analyze_churn(commits).directory_hotspots
        assert [h.path for h in hotspots] == ["pair"]
        assert hotspots[0].file_count == 2
        assert hotspots[0].commits == 3
        assert hotspots[0].top_files == ["pair/a.ts", "pair/b.ts"]

    def test_hotspot_limit(self):
        files = [f"d{i}/{name}.ts" for i in range(30) for name in ("a", "b")]
        commits = [make_commit(1, files)]
        hotspots = analyze_churn(commits, ThresholdConfig(hotspot_limit=5)).directory_hotspots
        assert len(hotspots) == 5


class TestRiskMap:
    def test_single_owner_hot_file_is_critical(self):
        commits = [make_commit(i, [change("core.ts", 20, 5)], ALICE) for i in range(1, 11)]
        commits.append(make_commit(11, [change("other.ts", 1, 0)], BOB))
        commits.append(make_commit(12, [change("other.ts", 1, 0)], CAROL))

        risk_map = analyze_churn(commits).risk_map
        entry = risk_map[0]
        assert entry.path == "core.ts"
        # every signal is at its maximum
        assert entry.combined_risk == pytest.approx(100.0)
        assert entry.risk_level is RiskLevel.CRITICAL
        assert entry.ownership == pytest.approx(1.0)
        assert entry.recommendation.startswith("Urgent refactoring")

    def test_low_risk_files_are_omitted(self):
        commits = [make_commit(i, [change("hot.ts", 50, 50)], ALICE) for i in range(1, 21)]
        commits += [
            make_commit(100, [change("cold.ts", 1, 0)], BOB),
            make_commit(101, [change("cold.ts", 0, 0)], CAROL),
        ]
        paths = {e.path for e in analyze_churn(commits).risk_map}
        assert "hot.ts" in paths
        assert "cold.ts" not in paths

    def test_risk_map_limit(self):
        commits = [make_commit(i, [f"f{j}.ts" for j in range(40)]) for i in range(1, 4)]
        risk_map = analyze_churn(commits, ThresholdConfig(risk_map_limit=7)).risk_map
        assert len(risk_map) == 7

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValueError):
            ThresholdConfig(risk_frequency_weight=0.5)

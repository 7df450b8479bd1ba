"""Configuration loading and management for ChurnScope.

This module provides configuration discovery and validation. Configuration
sources are merged in priority order:
    1. Defaults (defined in AnalysisConfig)
    2. Global config (~/.churnscope.toml)
    3. Project config (./churnscope.toml)
    4. Explicit config file
    5. Environment variables (CHURNSCOPE_* prefix)
    6. Keyword overrides (typically CLI flags)

Example:
    >>> config = load_config(branch="main", max_commits=500)
    >>> config.branch
    'main'
    >>> config.thresholds.bus_factor_threshold
    0.5
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ChurnScopeError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]


@dataclass(frozen=True)
class ThresholdConfig:
    """Algorithm thresholds and tuning parameters.

    Every number the analyzers compare against lives here so that policy
    can be tuned without touching control flow.

    Attributes:
        Bus factor:
            bus_factor_threshold: Commit share the top-k authors must reach
            bus_factor_min_commits: Scopes with fewer commits are never flagged
            bus_factor_critical_max: Bus factor at or below this is CRITICAL
            bus_factor_medium_max: Bus factor at or below this is MEDIUM

        Temporal coupling:
            coupling_min_cochanges: Minimum co-change count for file pairs
            coupling_min_strength: File pairs at or below this strength are not reported
            coupling_likely_strength: Strength above this marks a pair "likely coupled"
            coupling_hidden_strength: Strength above this (cross-directory) is hidden
            coupling_dir_min_cochanges: Minimum co-change count for directory pairs
            coupling_dir_min_strength: Directory pairs at or below this are not reported
            coupling_max_files_per_commit: Skip bulk commits above this (0 = no limit)
            high_impact_min_files: Commits touching more files are high impact
            high_impact_min_dirs: Commits touching more directories are high impact
            change_pattern_min_commits: A change pattern is reported above this many commits
            coupling_score_strong_strength: Pairs above this strength cost coupling score
            coupling_score_*_penalty: Points per strong pair, per hidden dependency
                and per percent of high-impact commits

        Churn / risk:
            risk_frequency_weight: Weight of normalized commit frequency
            risk_churn_weight: Weight of normalized churn score
            risk_ownership_weight: Weight of normalized ownership concentration
            risk_critical/high/medium: Combined-risk band floors (exclusive)
            risk_candidate_files: Top-N churn files considered for the risk map
            risk_map_limit: Maximum risk map entries returned
            hotspot_*: Paired directory commit / average churn thresholds
            hotspot_min_files: Directories with fewer files are not hotspots
            hotspot_limit: Maximum directory hotspots returned

        Dependency graph:
            hub_min_connections: Absolute floor for hub detection
            hub_mean_multiplier: Hub threshold as a multiple of the mean degree
            cycle_low_max_length: Cycles up to this length are LOW severity
            cycle_medium_max_length: Cycles up to this length are MEDIUM severity
            orphan_depth: Sentinel depth assigned to unreachable nodes
            orphan_report_min: More orphans than this produce a dead-code recommendation
            health_*_penalty: Health points per cycle, per hub-both and per orphan
            health_orphan_penalty_cap: Most health points orphans can cost
    """

    # === Bus Factor ===
    bus_factor_threshold: float = 0.5
    bus_factor_min_commits: int = 5
    bus_factor_critical_max: int = 1
    bus_factor_medium_max: int = 2

    # === Temporal Coupling ===
    coupling_min_cochanges: int = 3
    coupling_min_strength: float = 20.0
    coupling_likely_strength: float = 50.0
    coupling_hidden_strength: float = 60.0
    coupling_dir_min_cochanges: int = 5
    coupling_dir_min_strength: float = 30.0
    coupling_max_files_per_commit: int = 0
    high_impact_min_files: int = 10
    high_impact_min_dirs: int = 3
    change_pattern_min_commits: int = 5

    # === Coupling Score ===
    coupling_score_strong_strength: float = 70.0
    coupling_score_strong_penalty: float = 2.0
    coupling_score_hidden_penalty: float = 3.0
    coupling_score_high_impact_penalty: float = 2.0

    # === Risk Score Composite Weights (sum = 1.0) ===
    risk_frequency_weight: float = 0.3
    risk_churn_weight: float = 0.4
    risk_ownership_weight: float = 0.3

    # === Risk Bands (0-100) ===
    risk_critical: float = 70.0
    risk_high: float = 50.0
    risk_medium: float = 30.0
    risk_candidate_files: int = 100
    risk_map_limit: int = 30

    # === Directory Hotspots ===
    # critical and high need both signals; medium needs either
    hotspot_critical_commits: int = 50
    hotspot_critical_churn: float = 100.0
    hotspot_high_commits: int = 30
    hotspot_high_churn: float = 50.0
    hotspot_medium_commits: int = 15
    hotspot_medium_churn: float = 30.0
    hotspot_min_files: int = 2
    hotspot_limit: int = 20

    # === Dependency Graph ===
    hub_min_connections: int = 5
    hub_mean_multiplier: float = 2.0
    cycle_low_max_length: int = 2
    cycle_medium_max_length: int = 4
    orphan_depth: int = 999
    orphan_report_min: int = 5

    # === Dependency Health Score ===
    health_cycle_penalty: int = 10
    health_hub_penalty: int = 5
    health_orphan_penalty: int = 2
    health_orphan_penalty_cap: int = 20

    def __post_init__(self) -> None:
        """Validate threshold configuration."""
        if not 0.0 < self.bus_factor_threshold <= 1.0:
            raise ValueError("bus_factor_threshold must be in (0.0, 1.0]")

        pct_fields = [
            "coupling_min_strength",
            "coupling_likely_strength",
            "coupling_hidden_strength",
            "coupling_dir_min_strength",
            "coupling_score_strong_strength",
            "risk_critical",
            "risk_high",
            "risk_medium",
        ]
        for field_name in pct_fields:
            value = getattr(self, field_name)
            if not 0.0 <= value <= 100.0:
                raise ValueError(f"{field_name} must be between 0 and 100")

        weight_sum = (
            self.risk_frequency_weight + self.risk_churn_weight + self.risk_ownership_weight
        )
        if not 0.99 <= weight_sum <= 1.01:
            raise ValueError(f"Risk weights must sum to 1.0, got {weight_sum:.3f}")

        if not self.risk_medium <= self.risk_high <= self.risk_critical:
            raise ValueError("risk bands must satisfy medium <= high <= critical")

        if self.coupling_min_cochanges < 1 or self.coupling_dir_min_cochanges < 1:
            raise ValueError("coupling minimum co-change counts must be at least 1")
        if self.coupling_max_files_per_commit < 0:
            raise ValueError("coupling_max_files_per_commit must be non-negative")
        if self.hub_mean_multiplier <= 0:
            raise ValueError("hub_mean_multiplier must be positive")
        if self.cycle_low_max_length > self.cycle_medium_max_length:
            raise ValueError("cycle_low_max_length must not exceed cycle_medium_max_length")
        if self.orphan_depth < 1:
            raise ValueError("orphan_depth must be at least 1")

        non_negative = [
            "change_pattern_min_commits",
            "coupling_score_strong_penalty",
            "coupling_score_hidden_penalty",
            "coupling_score_high_impact_penalty",
            "orphan_report_min",
            "health_cycle_penalty",
            "health_hub_penalty",
            "health_orphan_penalty",
            "health_orphan_penalty_cap",
        ]
        for field_name in non_negative:
            if getattr(self, field_name) < 0:
                raise ValueError(f"{field_name} must be non-negative")


DEFAULT_THRESHOLDS = ThresholdConfig()


def _default_layer_patterns() -> dict[str, list[str]]:
    return {
        "ui": [r"components?/", r"views?/", r"pages?/"],
        "application": [r"services?/", r"use-?cases?/", r"application/"],
        "domain": [r"domain/", r"models?/", r"entities?/"],
        "infrastructure": [r"infra(structure)?/", r"repositories?/", r"adapters?/"],
        "utils": [r"utils?/", r"helpers?/", r"lib/"],
    }


def _default_allowed_dependencies() -> dict[str, list[str]]:
    return {
        "ui": ["ui", "application", "domain", "utils"],
        "application": ["application", "domain", "infrastructure", "utils"],
        "domain": ["domain", "utils"],
        "infrastructure": ["infrastructure", "domain", "utils"],
        "utils": ["utils"],
    }


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for analysis execution.

    All fields have sensible defaults. Users typically override only a few
    fields via CLI flags or config file.

    Attributes:
        Log filters (applied by git before parsing):
            branch: Ref to walk (None = all refs)
            since / until: Any date expression git accepts
            authors: Author patterns passed as --author
            include_paths / exclude_paths: Pathspecs
            exclude_merges: Pass --no-merges
            max_commits: Maximum commits (0 = unlimited)
            git_timeout_seconds: Deadline for the log invocation (None = none)

        Source snapshot:
            source_extensions: Extensions included in the dependency graph
            excluded_dirs: Directory names never descended into
            max_file_size_mb: Larger files are skipped

        Execution:
            workers: Thread pool size for analyzers (None = executor default)
            enable_dependency_analysis: Run the import-graph analysis
            verbosity: Logging verbosity level

        Layer policy:
            layer_patterns: Ordered layer name -> path regexes (first match wins)
            allowed_layer_dependencies: Layer name -> layers it may import
    """

    # Log filters
    branch: Optional[str] = None
    since: Optional[str] = None
    until: Optional[str] = None
    authors: list[str] = field(default_factory=list)
    include_paths: list[str] = field(default_factory=list)
    exclude_paths: list[str] = field(default_factory=list)
    exclude_merges: bool = False
    max_commits: int = 0
    git_timeout_seconds: Optional[int] = None

    # Source snapshot
    source_extensions: list[str] = field(
        default_factory=lambda: [".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".vue", ".svelte"]
    )
    excluded_dirs: list[str] = field(
        default_factory=lambda: [
            "node_modules",
            ".git",
            "dist",
            "build",
            "coverage",
            ".next",
            ".nuxt",
            "vendor",
        ]
    )
    max_file_size_mb: float = 10.0

    # Execution
    workers: Optional[int] = None
    enable_dependency_analysis: bool = True
    verbosity: Verbosity = "normal"

    # Layer policy
    layer_patterns: dict[str, list[str]] = field(default_factory=_default_layer_patterns)
    allowed_layer_dependencies: dict[str, list[str]] = field(
        default_factory=_default_allowed_dependencies
    )

    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.max_commits < 0:
            raise ValueError("max_commits must be non-negative")
        if self.git_timeout_seconds is not None and self.git_timeout_seconds < 1:
            raise ValueError("git_timeout_seconds must be at least 1")
        if self.workers is not None and self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.max_file_size_mb <= 0:
            raise ValueError("max_file_size_mb must be positive")
        if not self.source_extensions:
            raise ValueError("source_extensions must not be empty")
        for ext in self.source_extensions:
            if not ext.startswith("."):
                raise ValueError(f"source extension '{ext}' must start with '.'")

        unknown = set(self.allowed_layer_dependencies) - set(self.layer_patterns)
        if unknown:
            raise ValueError(
                f"allowed_layer_dependencies names unknown layers: {', '.join(sorted(unknown))}"
            )

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return int(self.max_file_size_mb * 1024 * 1024)


def load_config(config_file: Optional[Path] = None, **overrides) -> AnalysisConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated AnalysisConfig instance

    Raises:
        ChurnScopeError: If a config file is invalid or missing
        InvalidConfigError: If a CHURNSCOPE_* variable cannot be parsed
    """
    merged: dict = {}

    global_config = Path.home() / ".churnscope.toml"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except Exception as e:
            raise ChurnScopeError(f"Invalid global config '{global_config}': {e}")

    project_config = Path.cwd() / "churnscope.toml"
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except Exception as e:
            raise ChurnScopeError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise ChurnScopeError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except Exception as e:
            raise ChurnScopeError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update(overrides)

    thresholds_dict = merged.pop("thresholds", None)
    if thresholds_dict is not None:
        if isinstance(thresholds_dict, dict):
            try:
                merged["thresholds"] = ThresholdConfig(**thresholds_dict)
            except (TypeError, ValueError) as e:
                raise ChurnScopeError(f"Invalid [thresholds] config: {e}")
        elif isinstance(thresholds_dict, ThresholdConfig):
            merged["thresholds"] = thresholds_dict

    try:
        return AnalysisConfig(**merged)
    except (TypeError, ValueError) as e:
        raise ChurnScopeError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from CHURNSCOPE_* environment variables.

    Only scalar fields are supported (e.g. CHURNSCOPE_BRANCH,
    CHURNSCOPE_MAX_COMMITS, CHURNSCOPE_EXCLUDE_MERGES, CHURNSCOPE_WORKERS).
    List and table fields must come from a config file.

    Returns:
        Dict of field_name -> parsed_value for any CHURNSCOPE_* vars found.
    """
    type_hints = get_type_hints(AnalysisConfig)

    result: dict[str, Any] = {}

    for field_name in AnalysisConfig.__dataclass_fields__:
        env_key = f"CHURNSCOPE_{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint, field_name)
            if parsed is not None:
                result[field_name] = parsed
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))

    return result


def _parse_env_value(value: str, type_hint: Any, field_name: str) -> Any:
    """Parse environment variable string to the correct type.

    Returns None for types that cannot be expressed as a single string
    (lists, dicts, nested config).

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]

    origin = getattr(type_hint, "__origin__", None)
    if origin in (list, dict) or type_hint in (list, dict):
        return None

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ChurnScopeError: If neither tomllib nor tomli is available
        Exception: If TOML parsing fails
    """
    try:
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ChurnScopeError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)

"""Rendering of an AnalysisReport as rich tables or JSON."""

import json
from dataclasses import asdict, is_dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from rich.table import Table

from ..api import AnalysisReport
from ..graph.models import DependencyAnalysis
from ..levels import RiskLevel
from ._common import console

_LEVEL_COLORS = {
    RiskLevel.CRITICAL: "bold red",
    RiskLevel.HIGH: "red",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.LOW: "green",
}


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    if is_dataclass(value):
        return asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def report_to_dict(report: AnalysisReport) -> dict:
    """Plain-data form of a report. Commits are summarized, not listed."""
    history = report.history
    return {
        "repository": report.repo_path,
        "history": {
            "total_commits": history.total_commits,
            "total_authors": len(history.authors),
            "total_files": len(history.file_set),
            "span_days": history.span_days,
        },
        "churn": asdict(report.churn),
        "bus_factor": asdict(report.bus_factor),
        "coupling": asdict(report.coupling),
        "dependencies": _dependencies_to_dict(report.dependencies),
    }


def _dependencies_to_dict(analysis: Optional[DependencyAnalysis]) -> Optional[dict]:
    if analysis is None:
        return None
    data = asdict(analysis)
    data["graph"] = {
        "nodes": [
            {
                **asdict(node),
                "fan_in": node.fan_in,
                "fan_out": node.fan_out,
                "instability": round(node.instability, 4),
            }
            for node in analysis.graph.nodes.values()
        ],
        "unresolved_imports": analysis.graph.unresolved_imports,
    }
    for hub, hub_data in zip(analysis.hub_files, data["hub_files"]):
        hub_data["total_connections"] = hub.total_connections
    for violation, violation_data in zip(analysis.layer_violations, data["layer_violations"]):
        violation_data["violation"] = violation.violation
    return data


def output_json(report: AnalysisReport) -> None:
    """Machine-readable JSON output."""
    print(json.dumps(report_to_dict(report), indent=2, default=_json_default))


def output_rich(report: AnalysisReport, verbose: bool = False) -> None:
    """Human-readable tables."""
    limit = 50 if verbose else 10
    history = report.history

    console.print()
    console.print(f"[bold cyan]ChurnScope[/bold cyan]  {report.repo_path}")
    console.print(
        f"  {history.total_commits} commits, {len(history.authors)} authors, "
        f"{len(history.file_set)} files, {history.span_days} days"
    )
    console.print(
        f"  Bus factor: [bold]{report.bus_factor.overall}[/bold]    "
        f"Coupling score: [bold]{report.coupling.coupling_score}[/bold]/100"
    )
    if report.dependencies is not None:
        console.print(
            f"  Dependency health: [bold]{report.dependencies.summary.health_score}[/bold]/100"
        )
    console.print()

    _print_churn(report, limit)
    _print_risk(report, limit)
    _print_bus_factor(report, limit)
    _print_coupling(report, limit)
    if report.dependencies is not None:
        _print_dependencies(report.dependencies, limit)


def _level(level: RiskLevel) -> str:
    color = _LEVEL_COLORS[level]
    return f"[{color}]{level.value}[/{color}]"


def _print_churn(report: AnalysisReport, limit: int) -> None:
    files = report.churn.files[:limit]
    if not files:
        return
    table = Table(title="Hottest files", show_header=True)
    table.add_column("File", style="cyan")
    table.add_column("Commits", justify="right")
    table.add_column("+/-", justify="right")
    table.add_column("Authors", justify="right")
    table.add_column("Churn", justify="right")
    for f in files:
        table.add_row(
            f.path,
            str(f.commits),
            f"+{f.additions}/-{f.deletions}",
            str(len(f.author_commits)),
            f"{f.churn_score:.1f}",
        )
    console.print(table)

    hotspots = report.churn.directory_hotspots[:limit]
    if hotspots:
        table = Table(title="Directory hotspots", show_header=True)
        table.add_column("Directory", style="cyan")
        table.add_column("Files", justify="right")
        table.add_column("Commits", justify="right")
        table.add_column("Avg churn", justify="right")
        table.add_column("Risk")
        for h in hotspots:
            table.add_row(
                h.path,
                str(h.file_count),
                str(h.commits),
                f"{h.avg_file_churn:.1f}",
                _level(h.risk_level),
            )
        console.print(table)


def _print_risk(report: AnalysisReport, limit: int) -> None:
    entries = report.churn.risk_map[:limit]
    if not entries:
        return
    table = Table(title="Risk map", show_header=True)
    table.add_column("File", style="cyan")
    table.add_column("Risk", justify="right")
    table.add_column("Level")
    table.add_column("Recommendation")
    for e in entries:
        table.add_row(e.path, f"{e.combined_risk:.0f}", _level(e.risk_level), e.recommendation)
    console.print(table)


def _print_bus_factor(report: AnalysisReport, limit: int) -> None:
    areas = report.bus_factor.critical_areas[:limit]
    if not areas:
        return
    table = Table(title="Knowledge concentration", show_header=True)
    table.add_column("Path", style="cyan")
    table.add_column("Scope")
    table.add_column("Bus factor", justify="right")
    table.add_column("Commits", justify="right")
    table.add_column("Risk")
    table.add_column("Sole contributor")
    for a in areas:
        table.add_row(
            a.path,
            a.scope,
            str(a.bus_factor),
            str(a.total_commits),
            _level(a.risk),
            a.sole_contributor.name if a.sole_contributor else "",
        )
    console.print(table)


def _print_coupling(report: AnalysisReport, limit: int) -> None:
    for pattern in report.coupling.change_patterns:
        console.print(
            f"  [dim]{pattern.pattern}[/dim] {pattern.description} "
            f"({pattern.frequency} commits)"
        )

    pairs = report.coupling.pairs[:limit]
    if not pairs:
        return
    hidden = {(h.file_a, h.file_b) for h in report.coupling.hidden_dependencies}
    table = Table(title="Temporal coupling", show_header=True)
    table.add_column("File A", style="cyan")
    table.add_column("File B", style="cyan")
    table.add_column("Together", justify="right")
    table.add_column("Strength", justify="right")
    table.add_column("")
    for p in pairs:
        flag = "[red]hidden[/red]" if (p.file_a, p.file_b) in hidden else ""
        table.add_row(p.file_a, p.file_b, str(p.cochange_count), f"{p.strength:.0f}%", flag)
    console.print(table)


def _print_dependencies(analysis: DependencyAnalysis, limit: int) -> None:
    summary = analysis.summary
    console.print(
        f"[bold]Dependencies:[/bold] {summary.total_files} files, "
        f"{summary.total_dependencies} imports, {summary.circular_count} cycles, "
        f"{summary.hub_count} hubs, {summary.orphan_count} orphans, "
        f"{len(analysis.layer_violations)} layer violations"
    )

    for cycle in analysis.circular_dependencies[:limit]:
        console.print(f"  {_level(cycle.severity)} {' -> '.join(cycle.cycle)}")

    if analysis.hub_files:
        table = Table(title="Hub files", show_header=True)
        table.add_column("File", style="cyan")
        table.add_column("Fan-in", justify="right")
        table.add_column("Fan-out", justify="right")
        table.add_column("Type")
        for h in analysis.hub_files[:limit]:
            table.add_row(h.path, str(h.fan_in), str(h.fan_out), h.hub_type.value)
        console.print(table)

    for rec in analysis.recommendations:
        console.print(f"  {_level(rec.priority)} [bold]{rec.category}:[/bold] {rec.description}")
        console.print(f"    {rec.action}")
    console.print()

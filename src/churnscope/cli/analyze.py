"""Main analysis command."""

from pathlib import Path
from typing import List, Optional

import typer

from ..api import AnalysisReport, run_analyzers
from ..exceptions import ChurnScopeError
from ..logging_config import setup_logging
from ..temporal.git_extractor import GitExtractor
from . import app
from ._common import console, resolve_config
from ._output import output_json, output_rich


@app.command()
def analyze(
    path: Path = typer.Argument(
        Path("."),
        help="Repository root to analyze (default: current directory)",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
    ),
    branch: Optional[str] = typer.Option(
        None,
        "--branch",
        "-b",
        help="Ref to walk (default: all refs)",
    ),
    since: Optional[str] = typer.Option(
        None,
        "--since",
        help="Only commits after this date (any format git accepts)",
    ),
    until: Optional[str] = typer.Option(
        None,
        "--until",
        help="Only commits before this date",
    ),
    author: Optional[List[str]] = typer.Option(
        None,
        "--author",
        "-a",
        help="Only commits whose author matches (repeatable)",
    ),
    include: Optional[List[str]] = typer.Option(
        None,
        "--include",
        help="Only history under this pathspec (repeatable)",
    ),
    exclude: Optional[List[str]] = typer.Option(
        None,
        "--exclude",
        help="Drop history under this pathspec (repeatable)",
    ),
    no_merges: bool = typer.Option(
        False,
        "--no-merges",
        help="Skip merge commits",
    ),
    max_commits: Optional[int] = typer.Option(
        None,
        "--max-commits",
        "-n",
        help="Analyze at most this many commits (0 = all)",
        min=0,
    ),
    no_deps: bool = typer.Option(
        False,
        "--no-deps",
        help="Skip the import dependency analysis",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only log errors",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    workers: Optional[int] = typer.Option(
        None,
        "-w",
        "--workers",
        help="Parallel analyzer threads (default: auto)",
        min=1,
        max=32,
        hidden=True,
    ),
):
    """
    Analyze churn, bus factor, temporal coupling and import structure.

    [bold cyan]Examples:[/bold cyan]

      churnscope analyze

      churnscope analyze /path/to/repo --json

      churnscope analyze --since "6 months ago" --no-merges

      churnscope analyze -b main --exclude docs --exclude "*.lock"
    """
    logger = setup_logging(verbose=verbose, quiet=quiet)

    try:
        settings = resolve_config(
            config=config,
            branch=branch,
            since=since,
            until=until,
            authors=author,
            include=include,
            exclude=exclude,
            no_merges=no_merges,
            max_commits=max_commits,
            no_deps=no_deps,
            workers=workers,
            verbose=verbose,
            quiet=quiet,
        )

        repo_path = str(path.resolve())
        if json_output or quiet:
            report = _run(repo_path, settings)
        else:
            with console.status("[cyan]Analyzing history...[/cyan]"):
                report = _run(repo_path, settings)

        if json_output:
            output_json(report)
        else:
            output_rich(report, verbose=verbose)

    except ChurnScopeError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except KeyboardInterrupt:
        logger.info("Analysis interrupted by user")
        console.print("\n[yellow]Analysis interrupted[/yellow]")
        raise typer.Exit(130)


def _run(repo_path: str, settings) -> AnalysisReport:
    history = GitExtractor(repo_path, settings).extract()
    return run_analyzers(history, settings, repo_path=repo_path)

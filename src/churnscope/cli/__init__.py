"""CLI entry point: registers all subcommands."""

import typer

from ._common import console

app = typer.Typer(
    name="churnscope",
    help="ChurnScope - git history and dependency risk analysis",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
        is_eager=True,
    ),
):
    """Analyze churn, ownership, co-change and import structure of a git repository."""
    if version:
        from .. import __version__

        console.print(f"[bold cyan]ChurnScope[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit(0)


# Import subcommands to register them
from .analyze import analyze as _analyze  # noqa: F401, E402


def main() -> None:
    app()

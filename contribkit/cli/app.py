"""Main Typer application - imports and registers all CLI commands.

Entry point: ``contribkit`` (configured via pyproject.toml console_scripts).

Commands: components, twins split, twins patch, envelope build,
envelope check.
"""

from __future__ import annotations

import logging

import typer

from contribkit.cli.commands.envelope import envelope_app
from contribkit.cli.commands.twins import twins_app
from contribkit.config import config

app = typer.Typer(
    name="contribkit",
    help="contribkit: Azure Digital Twins binding and CloudEvents pub/sub helpers.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommand groups
app.add_typer(twins_app, name="twins")
app.add_typer(envelope_app, name="envelope")


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        "", "--log-level", help="Logging level (default: CONTRIBKIT_LOG_LEVEL or INFO)."
    ),
) -> None:
    """Configure logging before any command runs."""
    if log_level:
        level = log_level.upper()
    elif config.debug:
        level = "DEBUG"
    else:
        level = config.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
        force=True,
    )


@app.command(name="components", help="List registered component types.")
def components_cmd() -> None:
    """List the component types a host can create by name."""
    from rich.console import Console
    from rich.table import Table

    from contribkit.components import default_registry

    console = Console()
    entries = default_registry().list_components()
    if not entries:
        console.print("[dim]No components registered.[/dim]")
        return

    table = Table(title="Components")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Kind", style="green")
    table.add_column("Description")
    for entry in entries:
        table.add_row(entry.name, entry.kind.value, entry.description)
    console.print(table)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()

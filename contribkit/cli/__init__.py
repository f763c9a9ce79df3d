"""contribkit CLI - Typer application with Rich output."""

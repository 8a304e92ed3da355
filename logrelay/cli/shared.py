"""Shared utilities for logrelay CLI commands."""

import click
from rich.console import Console

from logrelay.config import RelaySettings, load_settings

console = Console(stderr=True)


def _mask(value: str | None) -> str:
    """Show only the tail of a secret."""
    if not value:
        return "[dim]not set[/dim]"
    if len(value) <= 8:
        return "••••"
    return "••••" + value[-4:]


def load_or_exit() -> RelaySettings:
    """Load settings, turning validation errors into a clean CLI exit."""
    try:
        return load_settings()
    except ValueError as e:
        console.print(f"[red]Invalid settings:[/red] {e}")
        raise click.exceptions.Exit(2)

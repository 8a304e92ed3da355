"""logrelay CLI — command line interface."""

import click
from logrelay import __version__
from .shared import console


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="logrelay")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, debug):
    """logrelay — relay logs into a chat channel"""
    from logrelay.main import setup_logging
    setup_logging(debug)
    if ctx.invoked_subcommand is None:
        _show_help()


def _show_help():
    """Show all available commands."""
    console.print(f"[bold]logrelay v{__version__}[/bold] — relay logs into a chat channel\n")

    commands = [
        ("pipe", "Relay stdin line by line until EOF"),
        ("check", "Show effective settings (--send delivers a test line)"),
    ]
    for name, desc in commands:
        console.print(f"    [bold]logrelay {name:8s}[/bold] {desc}")
    console.print()

    console.print("[dim]Run 'logrelay <command> --help' for details on a specific command.[/dim]")


# Import all command modules (registers commands onto cli group)
from . import cmd_pipe  # noqa: E402, F401
from . import cmd_check  # noqa: E402, F401


@cli.command(name="help", hidden=True)
def help_cmd():
    """Show all available commands."""
    _show_help()

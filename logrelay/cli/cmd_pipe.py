"""Pipe command."""

import asyncio
import click

from . import cli
from .shared import console, load_or_exit


@cli.command()
@click.option("--logger", "logger_name", default="stdin", show_default=True, help="Logger name shown on every line")
@click.option("--level", default="INFO", show_default=True, help="Level assigned to every line")
@click.option("--interval", type=float, default=None, help="Seconds between flushes (default from settings)")
@click.option("--quiet", "-q", is_flag=True, help="Do not copy stdin to stdout")
def pipe(logger_name, level, interval, quiet):
    """Relay stdin into the configured channel until EOF."""
    from logrelay.errors import describe_error
    from logrelay.events import LogLevel
    from logrelay.main import run_pipe

    try:
        parsed_level = LogLevel.parse(level)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--level")

    settings = load_or_exit()
    try:
        asyncio.run(run_pipe(settings, logger_name, parsed_level, interval, echo=not quiet))
    except KeyboardInterrupt:
        pass
    except Exception as e:
        console.print(f"[red]✗[/red] {describe_error(e)}")
        raise click.exceptions.Exit(1)

"""Check command."""

import asyncio
import click

from . import cli
from .shared import _mask, console, load_or_exit

from rich.table import Table


@cli.command()
@click.option("--send", is_flag=True, help="Deliver a test line through the configured channel")
def check(send):
    """Show effective logrelay settings."""
    from logrelay import __version__
    from logrelay.errors import describe_error

    settings = load_or_exit()

    table = Table(title=f"logrelay v{__version__}", show_header=False, padding=(0, 2))
    table.add_column("Key", style="bold")
    table.add_column("Value")

    if settings.telegram_bot_token and settings.telegram_chat_id:
        channel = "Telegram"
    elif settings.discord_webhook_url:
        channel = "Discord webhook"
    else:
        channel = "[red]none configured[/red]"
    table.add_row("Channel", channel)
    table.add_row("Telegram token", _mask(settings.telegram_bot_token))
    table.add_row("Telegram chat", settings.telegram_chat_id or "[dim]not set[/dim]")
    table.add_row("Discord webhook", _mask(settings.discord_webhook_url))

    try:
        levels = ", ".join(sorted(level.name for level in settings.parsed_levels()))
    except ValueError as e:
        levels = f"[red]{e}[/red]"
    table.add_row("Levels", levels)
    table.add_row("Flush interval", f"{settings.flush_interval}s")
    for key in ("colored", "use_code_blocks", "split_block_for_links", "allow_link_embeds", "truncate_oversize"):
        value = getattr(settings, key)
        table.add_row(key.replace("_", " ").capitalize(), "[green]on[/green]" if value else "[dim]off[/dim]")

    console.print(table)

    if not send:
        return

    from logrelay.main import send_test_message

    try:
        handle = asyncio.run(send_test_message(settings))
    except Exception as e:
        console.print(f"[red]✗[/red] {describe_error(e)}")
        raise click.exceptions.Exit(1)
    console.print(f"[green]✓[/green] Test line delivered (message {handle})")

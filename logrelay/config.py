"""Relay configuration: formatting/filter options and environment settings."""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

from pydantic import Field
from pydantic_settings import BaseSettings

from .events import LogEvent, LogLevel

logger = logging.getLogger("logrelay.config")

EventFn = Callable[[LogEvent], str]
NameMapper = Callable[[str], Optional[str]]
MessageMapper = Callable[[Optional[str]], Optional[str]]
Predicate = Callable[[LogEvent], bool]

_UNSET: Any = object()

DEFAULT_LEVELS = frozenset({LogLevel.INFO, LogLevel.WARN, LogLevel.ERROR})


def friendly_name(name: str) -> str:
    """Last dotted segment of a logger name: ``a.b.Worker`` → ``Worker``."""
    return name.rsplit(".", 1)[-1]


@dataclass
class RelayConfig:
    """Options read by every flush cycle.

    Logger mappings are checked in insertion order and the first prefix
    match wins; a mapper returning None drops the event. Message
    transformers run in insertion order: any matching transformer that
    returns None drops the event, otherwise every matching transformer is
    applied in turn.

    The default prefixer renders ``[LEVEL logger] `` using the resolved
    logger name. Replacing the prefixer means logger mappings only affect
    filtering unless the new prefixer calls ``resolve_logger_name`` itself
    (``PrefixBuilder.logger()`` does).

    Call ``freeze()`` before sharing the config with a running scheduler;
    ``ChannelRelay.start()`` does this.
    """
    prefixer: Optional[EventFn] = _UNSET
    suffixer: Optional[EventFn] = None
    colored: bool = True
    use_code_blocks: bool = True
    split_block_for_links: bool = False
    allow_link_embeds: bool = True
    truncate_oversize: bool = False
    levels: frozenset = DEFAULT_LEVELS
    logger_mappings: list = field(default_factory=list)
    message_transformers: list = field(default_factory=list)
    # Escapes messages rendered outside code blocks; the relay fills it from the sink.
    markdown_escaper: Optional[Callable[[str], str]] = None

    # Channel framing costs; verify against the target channel.
    code_block_language: str = "diff"
    clipping_margin: int = 20
    safety_margin: int = 5
    max_burst_length: int = 10_000
    trace_limit: int = 1000

    _frozen = False

    def __post_init__(self):
        if self.prefixer is _UNSET:
            self.prefixer = self.default_prefix
        self.levels = frozenset(self.levels)

    def __setattr__(self, name, value):
        if self._frozen:
            raise RuntimeError(f"RelayConfig is frozen; cannot set {name!r} while the relay is running")
        super().__setattr__(name, value)

    def freeze(self) -> "RelayConfig":
        """Make the config read-only (mapping lists become tuples)."""
        if not self._frozen:
            self.logger_mappings = tuple(self.logger_mappings)
            self.message_transformers = tuple(self.message_transformers)
            object.__setattr__(self, "_frozen", True)
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_mutable(self):
        if self._frozen:
            raise RuntimeError("RelayConfig is frozen; configure it before starting the relay")

    # ── logger names ────────────────────────────────────────

    def map_logger_name(self, prefix: str, name: Union[str, NameMapper]) -> "RelayConfig":
        """Display loggers starting with ``prefix`` under another name.

        ``name`` is either the fixed display name or a function of the full
        logger name (returning None drops the event).
        """
        self._check_mutable()
        mapper = name if callable(name) else (lambda _s, _name=name: _name)
        self.logger_mappings.append((prefix, mapper))
        return self

    def map_logger_name_friendly(self, prefix: str, fn: Optional[Callable[[str], str]] = None) -> "RelayConfig":
        """Display loggers under ``prefix`` by their last dotted segment, optionally decorated by ``fn``."""
        if fn is None:
            return self.map_logger_name(prefix, friendly_name)
        return self.map_logger_name(prefix, lambda s: fn(friendly_name(s)))

    def drop_logger(self, prefix: str) -> "RelayConfig":
        """Discard every event from loggers starting with ``prefix``."""
        return self.map_logger_name(prefix, lambda _s: None)

    def resolve_logger_name(self, name: str) -> Optional[str]:
        """Display name for a logger; None means the event must be dropped."""
        for prefix, mapper in self.logger_mappings:
            if name.startswith(prefix):
                return mapper(name)
        return name

    # ── message transformers ────────────────────────────────

    def add_transformer(self, predicate: Predicate, fn: MessageMapper) -> "RelayConfig":
        """Rewrite messages of matching events; ``fn`` returning None drops the event."""
        self._check_mutable()
        self.message_transformers.append((predicate, fn))
        return self

    def drop_messages(self, predicate: Predicate) -> "RelayConfig":
        """Discard every event matching ``predicate``."""
        return self.add_transformer(predicate, lambda _m: None)

    # ── defaults ────────────────────────────────────────────

    def default_prefix(self, event: LogEvent) -> str:
        return f"[{event.level.name} {self.resolve_logger_name(event.logger)}] "

    @property
    def fence_tag(self) -> str:
        """Language tag on code fences (drives channel-side colouring)."""
        return self.code_block_language if self.colored else ""


class RelaySettings(BaseSettings):
    """Settings loaded from environment variables or .env file."""

    # Telegram
    telegram_bot_token: Optional[str] = Field(default=None, description="Telegram bot token")
    telegram_chat_id: Optional[str] = Field(default=None, description="Chat id or @channel username to log into")

    # Discord
    discord_webhook_url: Optional[str] = Field(default=None, description="Discord webhook URL")

    # Relay behaviour
    flush_interval: float = Field(default=1.5, description="Seconds between scheduled flushes")
    levels: str = Field(default="INFO,WARN,ERROR", description="Comma-separated accepted levels")
    colored: bool = Field(default=True, description="Colour lines by level inside code blocks")
    use_code_blocks: bool = Field(default=True, description="Wrap each message in a code block")
    split_block_for_links: bool = Field(default=False, description="Render lines with links outside the code block")
    allow_link_embeds: bool = Field(default=True, description="Let the channel preview links")
    truncate_oversize: bool = Field(default=False, description="Drop overflow instead of failing on huge lines")

    model_config = {"env_prefix": "LOGRELAY_", "env_file": ".env", "extra": "ignore"}

    def parsed_levels(self) -> frozenset:
        return frozenset(LogLevel.parse(part) for part in self.levels.split(",") if part.strip())

    def to_config(self) -> RelayConfig:
        """Build a fresh RelayConfig from these settings."""
        return RelayConfig(
            colored=self.colored,
            use_code_blocks=self.use_code_blocks,
            split_block_for_links=self.split_block_for_links,
            allow_link_embeds=self.allow_link_embeds,
            truncate_oversize=self.truncate_oversize,
            levels=self.parsed_levels(),
        )


def load_settings() -> RelaySettings:
    """Load settings from environment."""
    settings = RelaySettings()

    url = settings.discord_webhook_url
    if url and not url.startswith("https://"):
        logger.warning(
            "Discord webhook URL is not https; the webhook token will be sent in clear text."
        )

    return settings


def build_sink(settings: RelaySettings):
    """Construct the sink the settings point at (Telegram first, then Discord)."""
    if settings.telegram_bot_token and settings.telegram_chat_id:
        from .sinks.telegram import TelegramSink
        return TelegramSink(settings.telegram_bot_token, settings.telegram_chat_id)
    if settings.discord_webhook_url:
        from .sinks.discord import DiscordWebhookSink
        return DiscordWebhookSink(settings.discord_webhook_url)
    raise ValueError(
        "No channel configured. Set LOGRELAY_TELEGRAM_BOT_TOKEN + LOGRELAY_TELEGRAM_CHAT_ID "
        "or LOGRELAY_DISCORD_WEBHOOK_URL."
    )

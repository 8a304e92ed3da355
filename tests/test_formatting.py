"""Tests for event formatting and the prefix builder."""

from logrelay.config import RelayConfig
from logrelay.events import LogLevel
from logrelay.formatting import (
    PrefixBuilder,
    format_error,
    format_event,
    formatted_length,
    overhead_length,
    strip_colors,
)


class TestFormatEvent:
    def test_default_prefix(self, config, make_event):
        assert format_event(make_event("hello"), config) == "[INFO app] hello"

    def test_prefix_uses_mapped_logger_name(self, make_event):
        config = RelayConfig().map_logger_name("net.example", "Example")
        event = make_event("hi", logger="net.example.http.Client")
        assert format_event(event, config) == "[INFO Example] hi"

    def test_no_prefix(self, make_event):
        config = RelayConfig(prefixer=None)
        assert format_event(make_event("bare"), config) == "bare"

    def test_suffix(self, make_event):
        config = RelayConfig(prefixer=None, suffixer=lambda e: f" ({e.level.name.lower()})")
        assert format_event(make_event("x", level=LogLevel.WARN), config) == "x (warn)"

    def test_error_dump_on_next_line(self, make_event):
        try:
            raise ValueError("bad value")
        except ValueError as e:
            error = e
        text = format_event(make_event("failed", error=error), RelayConfig(prefixer=None))
        first, rest = text.split("\n", 1)
        assert first == "failed"
        assert rest.startswith("Traceback")
        assert rest.endswith("ValueError: bad value")

    def test_error_string(self, make_event):
        text = format_event(make_event(None, error="stack text"), RelayConfig(prefixer=None))
        assert text == "\nstack text"

    def test_code_fences_neutralised(self, make_event):
        text = format_event(make_event("a ```b``` c"), RelayConfig(prefixer=None))
        assert "```" not in text
        assert text.replace("\u200b", "") == "a ```b``` c"

    def test_markdown_escaper_outside_code_blocks(self, make_event):
        config = RelayConfig(prefixer=None, use_code_blocks=False, markdown_escaper=lambda s: s.replace("_", "\\_"))
        assert format_event(make_event("snake_case"), config) == "snake\\_case"

    def test_escaper_ignored_inside_code_blocks(self, make_event):
        config = RelayConfig(prefixer=None, markdown_escaper=lambda s: "ESCAPED")
        assert format_event(make_event("snake_case"), config) == "snake_case"

    def test_overhead_length(self, config, make_event):
        event = make_event("x" * 50)
        assert formatted_length(event, config) == 50 + len("[INFO app] ")
        assert overhead_length(event, config) == len("[INFO app] ")

    def test_overhead_of_empty_message(self, config, make_event):
        assert overhead_length(make_event(None), config) == len("[INFO app] ")


class TestFormatError:
    def test_cap(self):
        text = format_error("e" * 5000, 100)
        assert len(text) == 100
        assert text.endswith("…")

    def test_no_cap(self):
        assert format_error("short", 0) == "short"

    def test_trailing_newlines_trimmed(self):
        assert format_error("line\n\n", 100) == "line"


class TestStripColors:
    def test_ansi_removed(self):
        assert strip_colors("\x1b[31mred\x1b[0m plain \x1b[1;32mbold\x1b[m") == "red plain bold"

    def test_plain_untouched(self):
        assert strip_colors("no colours [here]") == "no colours [here]"


class TestPrefixBuilder:
    # 2023-11-14 22:13:20 UTC
    TS = 1_700_000_000_000

    def test_level_and_logger(self, make_event):
        config = RelayConfig().map_logger_name_friendly("com.acme")
        prefix = PrefixBuilder(config).text("[").level_padded().space().logger().text("] ").build()
        event = make_event(logger="com.acme.billing.Invoicer")
        assert prefix(event) == "[INFO  Invoicer] "

    def test_logger_padded(self, make_event):
        prefix = PrefixBuilder(RelayConfig()).logger_padded(6).text("|").build()
        assert prefix(make_event(logger="db")) == "db    |"

    def test_dates_are_utc(self, make_event):
        config = RelayConfig()
        event = make_event(timestamp=self.TS)
        assert PrefixBuilder(config).date().build()(event) == "11/14"
        assert PrefixBuilder(config).date_with_year().build()(event) == "11/14/2023"
        assert PrefixBuilder(config).time_24h().build()(event) == "22:13:20"
        assert PrefixBuilder(config).time_12h().build()(event) == "10:13:20 PM"

    def test_12h_morning_has_no_leading_zero(self, make_event):
        # 2023-11-14 09:05:00 UTC
        event = make_event(timestamp=1_699_952_700_000)
        assert PrefixBuilder(RelayConfig()).time_12h().build()(event) == "9:05:00 AM"

    def test_as_prefixer(self, make_event):
        config = RelayConfig()
        config.prefixer = PrefixBuilder(config).level().text(": ").build()
        assert format_event(make_event("hi", level=LogLevel.ERROR), config) == "ERROR: hi"

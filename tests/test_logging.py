"""Tests for the client event log.

The logger records structured entries for what the client did, so a
request can be inspected after it finishes.
"""

from py_http.logging import LogEntry, Logger, LogLevel


class TestLogLevel:
    """Verify log level ordering."""

    def test_levels_are_ordered(self) -> None:
        """DEBUG < INFO < WARNING < ERROR."""
        assert LogLevel.DEBUG < LogLevel.INFO
        assert LogLevel.INFO < LogLevel.WARNING
        assert LogLevel.WARNING < LogLevel.ERROR


class TestLogEntry:
    """Verify log entry structure."""

    def test_entry_defaults(self) -> None:
        """An entry without a host stores an empty host."""
        entry = LogEntry(level=LogLevel.INFO, message="sent 10 bytes", source="client")
        assert entry.host == ""

    def test_entry_str_with_host(self) -> None:
        """String form includes level, source, host and message."""
        entry = LogEntry(
            level=LogLevel.ERROR, message="read failed", source="client", host="foo.com"
        )
        assert str(entry) == "[ERROR] client (foo.com): read failed"

    def test_entry_str_without_host(self) -> None:
        """Without a host the parenthesised part is omitted."""
        entry = LogEntry(level=LogLevel.DEBUG, message="hello", source="client")
        assert str(entry) == "[DEBUG] client: hello"


class TestLogger:
    """Verify the logger."""

    def test_log_stores_entries_in_order(self) -> None:
        """Entries come back in the order they were logged."""
        logger = Logger()
        logger.log(LogLevel.INFO, "first", source="client")
        logger.log(LogLevel.INFO, "second", source="client")
        assert [e.message for e in logger.entries] == ["first", "second"]

    def test_entries_returns_a_copy(self) -> None:
        """Mutating the returned list does not change the log."""
        logger = Logger()
        logger.log(LogLevel.INFO, "kept", source="client")
        logger.entries.clear()
        assert len(logger.entries) == 1

    def test_filter_by_level(self) -> None:
        """min_level keeps entries at or above the level."""
        logger = Logger()
        logger.log(LogLevel.DEBUG, "noise", source="client")
        logger.log(LogLevel.WARNING, "careful", source="client")
        logger.log(LogLevel.ERROR, "broken", source="client")
        messages = [e.message for e in logger.filter(min_level=LogLevel.WARNING)]
        assert messages == ["careful", "broken"]

    def test_filter_by_source(self) -> None:
        """source keeps entries from one component only."""
        logger = Logger()
        logger.log(LogLevel.INFO, "a", source="client")
        logger.log(LogLevel.INFO, "b", source="cli")
        assert [e.message for e in logger.filter(source="cli")] == ["b"]

    def test_filter_without_criteria_copies(self) -> None:
        """No criteria returns every entry as a new list."""
        logger = Logger()
        logger.log(LogLevel.INFO, "a", source="client")
        result = logger.filter()
        result.clear()
        assert len(logger.entries) == 1

    def test_clear(self) -> None:
        """clear() removes everything."""
        logger = Logger()
        logger.log(LogLevel.INFO, "a", source="client")
        logger.clear()
        assert logger.entries == []

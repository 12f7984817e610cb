"""Client event log.

The client records what it did for each request: which host it
connected to, how many bytes went out and came back, and what went
wrong.  Entries live in memory so callers (and tests) can inspect them
after the fact, and the command line prints them with ``-v``.

- **LogLevel** — severity levels ordered for filtering (DEBUG < ERROR).
- **LogEntry** — a single structured record (level, message, source, host).
- **Logger** — an append-only log with filtering and clearing.

The parser and codec never log; only the orchestrator does.
"""

from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """Severity levels for log entries."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """A single structured log record.

    Attributes:
        level: The severity of this event.
        message: A human-readable description of what happened.
        source: The component that generated the event (e.g. "client").
        host: The remote host involved, or empty if none.

    """

    level: LogLevel
    message: str
    source: str
    host: str = ""

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: message`` with the host if known."""
        where = f" ({self.host})" if self.host else ""
        return f"[{self.level.name}] {self.source}{where}: {self.message}"


class Logger:
    """Append-only log buffer with filtering."""

    def __init__(self) -> None:
        """Create an empty logger."""
        self._entries: list[LogEntry] = []

    @property
    def entries(self) -> list[LogEntry]:
        """Return all log entries in chronological order."""
        return list(self._entries)

    def log(
        self,
        level: LogLevel,
        message: str,
        *,
        source: str,
        host: str = "",
    ) -> None:
        """Append a new entry to the log."""
        self._entries.append(LogEntry(level=level, message=message, source=source, host=host))

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
    ) -> list[LogEntry]:
        """Return entries matching the given criteria.

        Args:
            min_level: If set, only return entries at or above this level.
            source: If set, only return entries from this source.

        """
        result = list(self._entries)
        if min_level is not None:
            result = [e for e in result if e.level >= min_level]
        if source is not None:
            result = [e for e in result if e.source == source]
        return result

    def clear(self) -> None:
        """Remove all log entries."""
        self._entries.clear()

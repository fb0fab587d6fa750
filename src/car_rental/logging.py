"""Activity log — who did what to the rental records, in order.

The user manager, car catalog, rental desk and session all write to one
shared ``Logger`` owned by ``RentalSystem``.  Entries carry the service
that wrote them and the user on whose behalf it acted, so the
administrator's Activity Log screen can narrow the trail to one
account.

The log is held in memory for the life of the process; nothing is
written to disk.
"""

from dataclasses import dataclass
from enum import IntEnum

SYSTEM_USER = "system"


class LogLevel(IntEnum):
    """Severity of an activity entry.  Higher is more severe."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """One thing that happened.

    Attributes:
        level: How severe the event was.
        message: What happened, in words.
        source: The service that wrote the entry (e.g. "rentals").
        username: The account involved ("system" when none was).

    """

    level: LogLevel
    message: str
    source: str
    username: str = SYSTEM_USER

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: message``."""
        return f"[{self.level.name}] {self.source}: {self.message}"


class Logger:
    """Shared in-memory activity trail."""

    def __init__(self) -> None:
        """Start with an empty trail."""
        self._entries: list[LogEntry] = []

    def log(
        self,
        level: LogLevel,
        message: str,
        *,
        source: str,
        username: str = SYSTEM_USER,
    ) -> None:
        """Record an event.

        Args:
            level: Severity of the event.
            message: Description shown in the activity log.
            source: Service writing the entry.
            username: Account the event concerns.

        """
        self._entries.append(LogEntry(level, message, source, username))

    def filter(
        self,
        *,
        min_level: LogLevel = LogLevel.DEBUG,
        username: str | None = None,
    ) -> list[LogEntry]:
        """Return the entries at or above *min_level*, oldest first.

        Args:
            min_level: Lowest severity to include.
            username: If set, only entries concerning this account.

        """
        return [
            entry
            for entry in self._entries
            if entry.level >= min_level and (username is None or entry.username == username)
        ]

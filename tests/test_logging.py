"""Tests for the activity log.

The logger records structured entries for what the services do.  It
gives the administrator an audit trail of who did what.
"""

from pathlib import Path

from car_rental.config import RentalConfig
from car_rental.logging import SYSTEM_USER, LogEntry, Logger, LogLevel
from car_rental.system import RentalSystem


class TestLogLevel:
    """Verify log level ordering."""

    def test_levels_are_ordered(self) -> None:
        """DEBUG < INFO < WARNING < ERROR."""
        assert LogLevel.DEBUG < LogLevel.INFO
        assert LogLevel.INFO < LogLevel.WARNING
        assert LogLevel.WARNING < LogLevel.ERROR


class TestLogEntry:
    """Verify log entry structure."""

    def test_entry_has_fields(self) -> None:
        """A log entry should store level, message, source, and username."""
        entry = LogEntry(level=LogLevel.INFO, message="rented", source="rentals", username="bob")
        assert entry.level is LogLevel.INFO
        assert entry.message == "rented"
        assert entry.source == "rentals"
        assert entry.username == "bob"

    def test_default_username(self) -> None:
        """Entries without a user are attributed to the system."""
        entry = LogEntry(level=LogLevel.INFO, message="opened", source="system")
        assert entry.username == SYSTEM_USER

    def test_entry_str(self) -> None:
        """String form should be ``[LEVEL] source: message``."""
        entry = LogEntry(level=LogLevel.WARNING, message="bad login", source="users")
        assert str(entry) == "[WARNING] users: bad login"


class TestLogger:
    """Verify the logger."""

    def test_log_stores_entries(self) -> None:
        """Logged entries should be returned by an unfiltered query."""
        logger = Logger()
        logger.log(LogLevel.INFO, "opened", source="system")
        entries = logger.filter()
        assert len(entries) == 1
        assert entries[0].message == "opened"

    def test_entries_are_ordered(self) -> None:
        """Entries should be in chronological order."""
        logger = Logger()
        logger.log(LogLevel.INFO, "first", source="users")
        logger.log(LogLevel.INFO, "second", source="cars")
        assert [e.message for e in logger.filter()] == ["first", "second"]

    def test_filter_returns_copy(self) -> None:
        """Mutating the returned list should not touch the log."""
        logger = Logger()
        logger.log(LogLevel.INFO, "x", source="users")
        logger.filter().clear()
        assert len(logger.filter()) == 1

    def test_filter_by_level(self) -> None:
        """Filtering should return only entries at or above the level."""
        logger = Logger()
        logger.log(LogLevel.DEBUG, "debug msg", source="cars")
        logger.log(LogLevel.INFO, "info msg", source="cars")
        logger.log(LogLevel.ERROR, "error msg", source="rentals")
        warnings_and_above = logger.filter(min_level=LogLevel.WARNING)
        assert len(warnings_and_above) == 1
        assert warnings_and_above[0].level is LogLevel.ERROR

    def test_filter_by_username(self) -> None:
        """Filtering by username should keep only that account's entries."""
        logger = Logger()
        logger.log(LogLevel.INFO, "rented Civic", source="rentals", username="alice")
        logger.log(LogLevel.INFO, "rented Golf", source="rentals", username="bob")
        logger.log(LogLevel.INFO, "opened", source="system")
        assert [e.message for e in logger.filter(username="alice")] == ["rented Civic"]

    def test_filters_combine(self) -> None:
        """Level and username filters should both apply."""
        logger = Logger()
        logger.log(LogLevel.DEBUG, "car flagged", source="cars", username="alice")
        logger.log(LogLevel.INFO, "logged in", source="users", username="alice")
        entries = logger.filter(min_level=LogLevel.INFO, username="alice")
        assert [e.message for e in entries] == ["logged in"]


class TestSystemLogging:
    """Verify that the services write to the shared log."""

    def test_open_is_logged(self, tmp_path: Path) -> None:
        """Opening the system should log the data directory."""
        system = RentalSystem(RentalConfig(data_dir=tmp_path))
        system.open()
        assert any("Opened data directory" in e.message for e in system.logger.filter())

"""Sequence counter — the persisted number of registered users.

Registration needs to know how many accounts have been created across
every previous run, both to pick the next slot and to enforce the
registration capacity.  The count lives in a tiny text file holding one
decimal number.

The counter only ever goes up.  Removing a user does not decrement it,
so it is a "high-water mark", not a live count and not a unique id.
"""

from pathlib import Path

from car_rental.store.records import StoreError


class SequenceCounter:
    """A single integer persisted as decimal text."""

    def __init__(self, path: Path) -> None:
        """Bind the counter to its backing file."""
        self._path = path

    def load(self) -> int:
        """Return the stored value, or 0 if the file is absent or unparsable."""
        try:
            text = self._path.read_text()
        except OSError:
            return 0
        try:
            value = int(text.strip())
        except ValueError:
            return 0
        return max(value, 0)

    def save(self, value: int) -> None:
        """Overwrite the file with *value*.

        Raises:
            StoreError: If the file cannot be written.

        """
        try:
            self._path.write_text(str(value))
        except OSError as e:
            msg = f"Cannot save counter to {self._path}: {e}"
            raise StoreError(msg) from e

    def increment(self) -> int:
        """Load, add one, save, and return the new value."""
        value = self.load() + 1
        self.save(value)
        return value

"""Fixed-record store — CRUD over a file of same-sized records.

A record file is nothing more than records laid end to end::

    offset 0            RECORD_SIZE         2 * RECORD_SIZE
    | record 0          | record 1          | record 2 ...

There is no header, no index and no checksum.  The only structure is
"file size is a multiple of the record size".  That is enough for every
operation the rental system needs:

    - **append** — open in append mode and write one record.
    - **scan** — read record-sized chunks from the start.  A short
      final chunk (a torn write) simply ends the scan.
    - **update in place** — scan to the target, seek back one record
      length, overwrite it.  Every other record keeps its bytes and
      its offset.
    - **delete by rebuild** — fixed-record files have no way to mark a
      hole, so deleting copies the survivors into a temporary file and
      swaps it in with ``os.replace``.  That costs O(n) I/O per delete
      but never leaves a half-compacted file behind: until the swap
      succeeds the original is untouched.

The store is generic over the record type (see ``store.schema.Record``)
so users, cars and rentals all share this one implementation.  The only
per-entity logic lives in the predicates and mutators callers pass in.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from collections.abc import Callable, Iterator
from typing import Generic, TypeAlias, TypeVar
from enum import StrEnum
from pathlib import Path

from car_rental.store.schema import Record


class StoreError(Exception):
    """Raise when a record file cannot be opened, read, or written."""


class RecordNotFoundError(LookupError):
    """Raise when no record matches the requested predicate."""


class FileStatus(StrEnum):
    """Represent what is on disk behind a store.

    - MISSING — no file yet (nothing was ever appended).
    - EMPTY — the file exists but holds zero bytes.
    - POPULATED — at least one byte of record data.
    """

    MISSING = "missing"
    EMPTY = "empty"
    POPULATED = "populated"


R = TypeVar("R", bound=Record)

Predicate: TypeAlias = Callable[[R], bool]


class RecordStore(Generic[R]):
    """Append, scan, update and delete fixed-size records in one file.

    The store owns no in-memory state besides its path: every operation
    goes to disk and returns before the next one starts.
    """

    def __init__(self, path: Path, record_type: type[R]) -> None:
        """Bind a store to a file and a record schema.

        Args:
            path: The backing file.  It is created on the first append.
            record_type: The schema class used to pack and unpack records.

        """
        self._path = path
        self._record_type = record_type
        self._size = record_type.RECORD_SIZE

    # -- Inspection ------------------------------------------------------

    def status(self) -> FileStatus:
        """Report whether the backing file is missing, empty, or populated.

        Raises:
            StoreError: If the file exists but cannot be inspected.

        """
        try:
            size = self._path.stat().st_size
        except FileNotFoundError:
            return FileStatus.MISSING
        except OSError as e:
            msg = f"Cannot inspect {self._path}: {e}"
            raise StoreError(msg) from e
        return FileStatus.EMPTY if size == 0 else FileStatus.POPULATED

    def is_empty(self) -> bool:
        """Return True if there is no record data (missing or zero-size file)."""
        return self.status() is not FileStatus.POPULATED

    def count(self) -> int:
        """Return the number of whole records in the file.

        A trailing partial record is not counted.
        """
        if self.status() is not FileStatus.POPULATED:
            return 0
        return self._path.stat().st_size // self._size

    # -- Reading ---------------------------------------------------------

    def scan(self) -> Iterator[R]:
        """Yield every record from the start of the file, in order.

        Each call opens the file afresh, so the sequence can be restarted
        by calling ``scan()`` again.  A missing file yields nothing.  A
        short read at the end is treated as end-of-data.

        Raises:
            StoreError: If the file exists but cannot be read.

        """
        try:
            f = self._path.open("rb")
        except FileNotFoundError:
            return
        except OSError as e:
            msg = f"Cannot open {self._path}: {e}"
            raise StoreError(msg) from e

        with f:
            while True:
                try:
                    raw = f.read(self._size)
                except OSError as e:
                    msg = f"Cannot read {self._path}: {e}"
                    raise StoreError(msg) from e
                if len(raw) != self._size:
                    return
                yield self._record_type.unpack(raw)

    def load_all(self) -> list[R]:
        """Return every record as a list."""
        return list(self.scan())

    def find_first(self, predicate: Predicate[R]) -> tuple[int, R] | None:
        """Return the first matching record and its ordinal position.

        Args:
            predicate: Called with each record in file order.

        Returns:
            ``(index, record)`` for the first match, or None.

        """
        for index, record in enumerate(self.scan()):
            if predicate(record):
                return index, record
        return None

    # -- Writing ---------------------------------------------------------

    def append(self, record: R) -> None:
        """Write one record at the end of the file, creating it if needed.

        Raises:
            StoreError: If the file cannot be opened or the write is short.

        """
        data = record.pack()
        try:
            with self._path.open("ab") as f:
                written = f.write(data)
        except OSError as e:
            msg = f"Cannot append to {self._path}: {e}"
            raise StoreError(msg) from e
        if written != self._size:
            msg = f"Short write to {self._path}: {written} of {self._size} bytes"
            raise StoreError(msg)

    def update_in_place(self, predicate: Predicate[R], mutator: Callable[[R], R]) -> R:
        """Overwrite the first matching record with ``mutator(record)``.

        Only the matched record's bytes change; every other record keeps
        its contents and offset.

        Args:
            predicate: Selects the record to replace.
            mutator: Builds the replacement from the current record.

        Returns:
            The replacement record as written.

        Raises:
            RecordNotFoundError: If no record matches.
            StoreError: If the file cannot be read or written.

        """
        try:
            with self._path.open("r+b") as f:
                while len(raw := f.read(self._size)) == self._size:
                    current = self._record_type.unpack(raw)
                    if not predicate(current):
                        continue
                    replacement = mutator(current)
                    f.seek(-self._size, os.SEEK_CUR)
                    written = f.write(replacement.pack())
                    if written != self._size:
                        msg = f"Short write to {self._path}: {written} of {self._size} bytes"
                        raise StoreError(msg)
                    return replacement
        except FileNotFoundError:
            pass
        except OSError as e:
            msg = f"Cannot update {self._path}: {e}"
            raise StoreError(msg) from e

        msg = f"No matching record in {self._path.name}"
        raise RecordNotFoundError(msg)

    def delete_where(self, predicate: Predicate[R]) -> bool:
        """Remove every record matching *predicate* by rebuilding the file.

        Returns:
            True if at least one record was removed.

        Raises:
            StoreError: If any step of the rebuild fails.  The original
                file is left as it was.

        """
        return self._rebuild(lambda _index, record: not predicate(record))

    def delete_by_index(self, index: int, *, expected: R | None = None) -> bool:
        """Remove the record at ordinal position *index*.

        Args:
            index: 0-based position in file order.
            expected: If given, the record at *index* must equal this
                value, otherwise nothing is removed.  Callers pass the
                record they displayed so a selection made against an
                older listing cannot delete the wrong record.

        Returns:
            True if a record was removed.

        Raises:
            StoreError: If any step of the rebuild fails.

        """

        def keep(position: int, record: R) -> bool:
            if position != index:
                return True
            return expected is not None and record != expected

        return self._rebuild(keep)

    def _rebuild(self, keep: Callable[[int, R], bool]) -> bool:
        """Copy kept records to a temporary file and swap it in.

        The temporary file lives next to the original so the final
        ``os.replace`` is a same-filesystem rename.  Nothing is rewritten
        when every record is kept.
        """
        records = self.load_all()
        survivors = [r for i, r in enumerate(records) if keep(i, r)]
        if len(survivors) == len(records):
            return False

        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
            )
        except OSError as e:
            msg = f"Cannot create temporary file for {self._path}: {e}"
            raise StoreError(msg) from e

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as f:
                for record in survivors:
                    f.write(record.pack())
                f.flush()
                os.fsync(f.fileno())
            tmp_path.replace(self._path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp_path.unlink()
            msg = f"Cannot rebuild {self._path}: {e}"
            raise StoreError(msg) from e
        return True

"""Storage subsystem — record schemas, the fixed-record store, and the counter.

Re-exports public symbols so callers can write::

    from car_rental.store import RecordStore, User
"""

from car_rental.store.counter import SequenceCounter
from car_rental.store.records import FileStatus, RecordNotFoundError, RecordStore, StoreError
from car_rental.store.schema import Car, Record, Rental, User

__all__ = [
    "Car",
    "FileStatus",
    "Record",
    "RecordNotFoundError",
    "RecordStore",
    "Rental",
    "SequenceCounter",
    "StoreError",
    "User",
]

"""Record schemas — the fixed-width layouts the store reads and writes.

Every entity in the rental system (users, cars, rentals) is stored as a
**fixed-size record**: the same number of bytes for every instance, with
each field at a fixed offset.  Fixed sizes are what make the store's
offset arithmetic possible — record ``n`` always starts at byte
``n * RECORD_SIZE``, so updating one record is a seek plus a write.

Layout rules shared by all three schemas:
    - **Little-endian, no padding** — ``struct`` format strings start
      with ``<`` so the layout is the same on every machine.
    - **Strings are fixed-width byte fields** — UTF-8 encoded, padded
      with NUL bytes, and truncated when too long.  Truncation happens
      when the record is *constructed*, so an in-memory record always
      equals what a later read will return.
    - **Rentals embed a full Car** — a denormalised snapshot, so rental
      history stays readable after the car is edited or removed.

Each schema exposes the same small interface used by ``RecordStore``:
``RECORD_SIZE``, ``pack()`` and ``unpack(raw)``.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import ClassVar, Protocol, Self

# Field widths in bytes.  The user widths match the original data files.
NAME_WIDTH = 20
ADDRESS_WIDTH = 20
EMAIL_WIDTH = 20
USERNAME_WIDTH = 20
PASSWORD_WIDTH = 20
NUMBER_WIDTH = 11
MODEL_WIDTH = 20
COMPANY_WIDTH = 20
COLOR_WIDTH = 15
DATE_WIDTH = 10
RENTAL_ID_WIDTH = 16
TIMESTAMP_WIDTH = 32


class Record(Protocol):
    """Protocol for anything the fixed-record store can hold."""

    RECORD_SIZE: ClassVar[int]

    def pack(self) -> bytes:
        """Serialize the record to exactly ``RECORD_SIZE`` bytes."""
        ...

    @classmethod
    def unpack(cls, raw: bytes) -> Self:
        """Rebuild a record from exactly ``RECORD_SIZE`` bytes."""
        ...


def clip(text: str, width: int) -> str:
    """Return *text* cut down to what fits in a *width*-byte field.

    A multi-byte character split by the cut is dropped rather than
    stored half-encoded.
    """
    return text.encode()[:width].decode(errors="ignore")


def encode_text(text: str, width: int) -> bytes:
    """Encode *text* as a NUL-padded, fixed-width byte field."""
    return text.encode()[:width].ljust(width, b"\x00")


def decode_text(raw: bytes) -> str:
    """Decode a fixed-width byte field, stopping at the first NUL."""
    return raw.split(b"\x00", 1)[0].decode(errors="ignore")


def _clip_fields(record: object, widths: dict[str, int]) -> None:
    """Truncate the string fields of a frozen dataclass in place."""
    for name, width in widths.items():
        object.__setattr__(record, name, clip(getattr(record, name), width))


@dataclass(frozen=True)
class User:
    """A registered customer account.

    Passwords are stored as plain text.  Comparisons go through
    ``car_rental.credentials`` so that hashing can be added in one place.
    """

    fullname: str
    address: str
    email: str
    username: str
    password: str
    number: str

    FORMAT: ClassVar[struct.Struct] = struct.Struct(
        f"<{NAME_WIDTH}s{ADDRESS_WIDTH}s{EMAIL_WIDTH}s"
        f"{USERNAME_WIDTH}s{PASSWORD_WIDTH}s{NUMBER_WIDTH}s"
    )
    RECORD_SIZE: ClassVar[int] = FORMAT.size
    WIDTHS: ClassVar[dict[str, int]] = {
        "fullname": NAME_WIDTH,
        "address": ADDRESS_WIDTH,
        "email": EMAIL_WIDTH,
        "username": USERNAME_WIDTH,
        "password": PASSWORD_WIDTH,
        "number": NUMBER_WIDTH,
    }

    def __post_init__(self) -> None:
        """Truncate every field to its on-disk width."""
        _clip_fields(self, self.WIDTHS)

    def pack(self) -> bytes:
        """Serialize to a fixed-size record."""
        return self.FORMAT.pack(
            *(encode_text(getattr(self, name), width) for name, width in self.WIDTHS.items())
        )

    @classmethod
    def unpack(cls, raw: bytes) -> Self:
        """Deserialize from a fixed-size record."""
        values = cls.FORMAT.unpack(raw)
        return cls(*(decode_text(v) for v in values))


@dataclass(frozen=True)
class Car:
    """A rentable car in the catalog.

    ``available`` is False while the car is out on a rental.
    """

    model: str
    company: str
    year: int
    rate: float
    capacity: int
    efficiency: float
    color: str
    available: bool = True

    FORMAT: ClassVar[struct.Struct] = struct.Struct(
        f"<{MODEL_WIDTH}s{COMPANY_WIDTH}sidid{COLOR_WIDTH}s?"
    )
    RECORD_SIZE: ClassVar[int] = FORMAT.size
    WIDTHS: ClassVar[dict[str, int]] = {
        "model": MODEL_WIDTH,
        "company": COMPANY_WIDTH,
        "color": COLOR_WIDTH,
    }

    def __post_init__(self) -> None:
        """Truncate the text fields to their on-disk widths."""
        _clip_fields(self, self.WIDTHS)

    def pack(self) -> bytes:
        """Serialize to a fixed-size record."""
        return self.FORMAT.pack(
            encode_text(self.model, MODEL_WIDTH),
            encode_text(self.company, COMPANY_WIDTH),
            self.year,
            self.rate,
            self.capacity,
            self.efficiency,
            encode_text(self.color, COLOR_WIDTH),
            self.available,
        )

    @classmethod
    def unpack(cls, raw: bytes) -> Self:
        """Deserialize from a fixed-size record."""
        model, company, year, rate, capacity, efficiency, color, available = cls.FORMAT.unpack(
            raw
        )
        return cls(
            model=decode_text(model),
            company=decode_text(company),
            year=year,
            rate=rate,
            capacity=capacity,
            efficiency=efficiency,
            color=decode_text(color),
            available=available,
        )


@dataclass(frozen=True)
class Rental:
    """One completed rental — an append-only log entry.

    ``car`` is a full copy of the car as it was when rented, and
    ``username`` is the renter's name at that time; neither is a
    reference that could dangle.
    """

    car: Car
    username: str
    pickup_date: str
    return_date: str
    total_cost: float
    car_index: int
    rental_id: str
    created_at: str

    _TAIL: ClassVar[struct.Struct] = struct.Struct(
        f"<{USERNAME_WIDTH}s{DATE_WIDTH}s{DATE_WIDTH}sdi{RENTAL_ID_WIDTH}s{TIMESTAMP_WIDTH}s"
    )
    RECORD_SIZE: ClassVar[int] = Car.RECORD_SIZE + _TAIL.size
    WIDTHS: ClassVar[dict[str, int]] = {
        "username": USERNAME_WIDTH,
        "pickup_date": DATE_WIDTH,
        "return_date": DATE_WIDTH,
        "rental_id": RENTAL_ID_WIDTH,
        "created_at": TIMESTAMP_WIDTH,
    }

    def __post_init__(self) -> None:
        """Truncate the text fields to their on-disk widths."""
        _clip_fields(self, self.WIDTHS)

    def pack(self) -> bytes:
        """Serialize the embedded car followed by the rental fields."""
        return self.car.pack() + self._TAIL.pack(
            encode_text(self.username, USERNAME_WIDTH),
            encode_text(self.pickup_date, DATE_WIDTH),
            encode_text(self.return_date, DATE_WIDTH),
            self.total_cost,
            self.car_index,
            encode_text(self.rental_id, RENTAL_ID_WIDTH),
            encode_text(self.created_at, TIMESTAMP_WIDTH),
        )

    @classmethod
    def unpack(cls, raw: bytes) -> Self:
        """Deserialize from a fixed-size record."""
        car = Car.unpack(raw[: Car.RECORD_SIZE])
        username, pickup, ret, total, index, rental_id, created = cls._TAIL.unpack(
            raw[Car.RECORD_SIZE :]
        )
        return cls(
            car=car,
            username=decode_text(username),
            pickup_date=decode_text(pickup),
            return_date=decode_text(ret),
            total_cost=total,
            car_index=index,
            rental_id=decode_text(rental_id),
            created_at=decode_text(created),
        )

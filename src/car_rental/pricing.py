"""Rental pricing and rental-id generation.

Two small pure helpers used when a rental is confirmed:

- ``calculate_rental_days`` — whole days between pickup and return.
  Dates must be written exactly as ``YYYY-MM-DD``; anything looser is
  rejected before it can reach a record.  A same-day rental is zero
  days; a return before the pickup is an error.
- ``generate_rental_id`` — a prefix followed by a random five-digit
  number.  The generator does not know which ids exist, so uniqueness
  is only probabilistic here; the rental desk retries on a collision.
"""

import random
from datetime import date

_DATE_LENGTH = 10
_HYPHEN_POSITIONS = (4, 7)
_ID_MIN = 10000
_ID_MAX = 99999
RENTAL_ID_DIGITS = len(str(_ID_MAX))


class DateError(ValueError):
    """Raise when a rental date is malformed or the range is inverted."""


def parse_date(text: str) -> date:
    """Parse a strict ``YYYY-MM-DD`` string into a date.

    Raises:
        DateError: If the text is not in the exact format or is not a
            real calendar date.

    """
    digits = text[:4] + text[5:7] + text[8:]
    if (
        len(text) != _DATE_LENGTH
        or any(text[i] != "-" for i in _HYPHEN_POSITIONS)
        or not (digits.isascii() and digits.isdigit())
    ):
        msg = f"Invalid date '{text}': expected YYYY-MM-DD"
        raise DateError(msg)
    try:
        return date(int(text[:4]), int(text[5:7]), int(text[8:]))
    except ValueError as e:
        msg = f"Invalid date '{text}': {e}"
        raise DateError(msg) from e


def calculate_rental_days(pickup: str, return_: str) -> int:
    """Return the number of whole days from *pickup* to *return_*.

    Args:
        pickup: Pickup date as ``YYYY-MM-DD``.
        return_: Return date as ``YYYY-MM-DD``.

    Returns:
        The day count, zero for a same-day rental.

    Raises:
        DateError: If either date is invalid or the return date is
            before the pickup date.

    """
    days = (parse_date(return_) - parse_date(pickup)).days
    if days < 0:
        msg = f"Return date {return_} is before pickup date {pickup}"
        raise DateError(msg)
    return days


def calculate_total_cost(rate: float, days: int) -> float:
    """Return the cost of renting at *rate* per day for *days* days."""
    return rate * days


def generate_rental_id(prefix: str, rng: random.Random | None = None) -> str:
    """Return *prefix* followed by a random number in 10000-99999.

    Args:
        prefix: Text placed before the number (e.g. ``"R"``).
        rng: Random source; the module-level generator when None.

    """
    source = rng if rng is not None else random
    return f"{prefix}{source.randint(_ID_MIN, _ID_MAX)}"

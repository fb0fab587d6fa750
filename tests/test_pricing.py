"""Tests for rental day counting and rental-id generation.

Dates must be written exactly as ``YYYY-MM-DD``.  The day count is the
return date minus the pickup date; same-day rentals are zero days and a
return before the pickup is rejected.
"""

import random

import pytest

from car_rental.pricing import (
    DateError,
    calculate_rental_days,
    calculate_total_cost,
    generate_rental_id,
    parse_date,
)

_FOUR_DAYS = 4
_LEAP_SPAN = 2


class TestCalculateRentalDays:
    """Verify the day calculator."""

    def test_four_days(self) -> None:
        """Jan 1 to Jan 5 is four days."""
        assert calculate_rental_days("2024-01-01", "2024-01-05") == _FOUR_DAYS

    def test_same_day_is_zero(self) -> None:
        """Returning on the pickup day is zero days."""
        assert calculate_rental_days("2024-01-01", "2024-01-01") == 0

    def test_inverted_range_raises(self) -> None:
        """A return date before the pickup date is an error."""
        with pytest.raises(DateError, match="before pickup"):
            calculate_rental_days("2024-01-05", "2024-01-01")

    def test_crosses_leap_day(self) -> None:
        """Feb 28 to Mar 1 in a leap year is two days."""
        assert calculate_rental_days("2024-02-28", "2024-03-01") == _LEAP_SPAN

    def test_date_error_is_value_error(self) -> None:
        """Callers catching ValueError should see date errors too."""
        assert issubclass(DateError, ValueError)


class TestParseDate:
    """Verify strict date parsing."""

    @pytest.mark.parametrize(
        "text",
        [
            "2024-1-01",
            "2024/01/01",
            "20240101",
            "2024-01-011",
            "",
            "abcd-ef-gh",
            "2024-0a-01",
            "+024-01-01",
        ],
    )
    def test_malformed_is_rejected(self, text: str) -> None:
        """Anything but exactly YYYY-MM-DD should raise."""
        with pytest.raises(DateError, match="expected YYYY-MM-DD"):
            parse_date(text)

    @pytest.mark.parametrize("text", ["2023-02-29", "2024-13-01", "2024-04-31", "0000-01-01"])
    def test_impossible_calendar_date_is_rejected(self, text: str) -> None:
        """Well-formed but non-existent dates should raise."""
        with pytest.raises(DateError):
            parse_date(text)

    def test_valid_date(self) -> None:
        """A real date should parse."""
        parsed = parse_date("2024-02-29")
        assert (parsed.year, parsed.month, parsed.day) == (2024, 2, 29)


class TestTotalCost:
    """Verify cost calculation."""

    def test_rate_times_days(self) -> None:
        """Total is the daily rate times the day count."""
        assert calculate_total_cost(45.5, 4) == pytest.approx(182.0)

    def test_zero_days_costs_nothing(self) -> None:
        """A same-day rental costs zero."""
        assert calculate_total_cost(45.5, 0) == 0


class TestGenerateRentalId:
    """Verify rental-id generation."""

    def test_prefix_and_five_digits(self) -> None:
        """An id is the prefix followed by five digits."""
        rental_id = generate_rental_id("R", random.Random(1))
        assert rental_id.startswith("R")
        number = int(rental_id[1:])
        assert 10000 <= number <= 99999

    def test_seeded_generator_is_repeatable(self) -> None:
        """The same seed should give the same id."""
        assert generate_rental_id("R", random.Random(7)) == generate_rental_id(
            "R", random.Random(7)
        )

    def test_default_generator(self) -> None:
        """Without an rng the module generator is used."""
        rental_id = generate_rental_id("CAR-")
        assert rental_id.startswith("CAR-")
        assert len(rental_id) == len("CAR-") + 5

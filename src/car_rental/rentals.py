"""The rental desk — renting a car and reading the rental log.

Renting a car touches two files in sequence:

    1. the car file — the chosen car's availability flag is flipped to
       False with an in-place update keyed by model name;
    2. the rental file — one ``Rental`` record is appended, carrying a
       snapshot of the car, the renter's username, the dates, the cost,
       a rental id and a timestamp.

Everything that can be rejected (the selection, the dates) is checked
before step 1, so a bad request writes nothing.  The two writes are
**not** a transaction: if step 2 fails, the car stays marked unavailable
with no rental to explain it.  That failure is logged at ERROR with the
car's model name so an administrator can restore the flag from the
manage-cars menu.

The rental log is append-only.  Records are never updated or removed.
"""

import random
from collections.abc import Callable
from datetime import datetime

from car_rental.cars import CarCatalog
from car_rental.logging import Logger, LogLevel
from car_rental.pricing import calculate_rental_days, calculate_total_cost, generate_rental_id
from car_rental.store.records import RecordStore, StoreError
from car_rental.store.schema import RENTAL_ID_WIDTH, Car, Rental, clip
from car_rental.validation import ValidationError

_SOURCE = "rentals"
TIMESTAMP_FORMAT = "%a %b %d %H:%M:%S %Y"
MAX_ID_ATTEMPTS = 20


class RentalCancelledError(Exception):
    """Raise when the renter picks 0 to back out of a rental."""


class RentalDesk:
    """Create rentals and answer rental-history queries."""

    def __init__(
        self,
        store: RecordStore[Rental],
        cars: CarCatalog,
        *,
        logger: Logger,
        id_prefix: str,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Create a desk over the rental store and the car catalog.

        Args:
            store: The rental record file.
            cars: The catalog whose availability flags are flipped.
            logger: Activity log shared with the other services.
            id_prefix: Text placed before the number in rental ids.
            rng: Random source for rental ids.
            clock: Returns the time stamped on new rentals.

        """
        self._store = store
        self._cars = cars
        self._logger = logger
        self._id_prefix = id_prefix
        self._rng = rng if rng is not None else random.Random()
        self._clock = clock

    def available_cars(self) -> list[Car]:
        """Return the cars that can be rented, in the order they are offered."""
        return self._cars.list_available()

    def quote(self, car: Car, pickup: str, return_: str) -> tuple[int, float]:
        """Return ``(days, total_cost)`` for renting *car* between two dates.

        Raises:
            DateError: If a date is invalid or the range is inverted.

        """
        days = calculate_rental_days(pickup, return_)
        return days, calculate_total_cost(car.rate, days)

    def rent_car(self, username: str, selection: int, pickup: str, return_: str) -> Rental:
        """Rent the *selection*-th available car (1-based) to *username*.

        Args:
            username: The renter.
            selection: Position in ``available_cars()``, starting at 1.
                0 cancels.
            pickup: Pickup date as ``YYYY-MM-DD``.
            return_: Return date as ``YYYY-MM-DD``.

        Returns:
            The rental record that was appended.

        Raises:
            RentalCancelledError: If *selection* is 0.
            ValidationError: If *selection* is out of range.
            DateError: If the dates are invalid.
            RecordNotFoundError: If the chosen car changed after it was listed.
            StoreError: If either file cannot be written.

        """
        if selection == 0:
            msg = "Rental cancelled"
            raise RentalCancelledError(msg)
        available = self.available_cars()
        if not 1 <= selection <= len(available):
            msg = f"Invalid car number {selection}: choose 1-{len(available)} or 0 to cancel"
            raise ValidationError(msg)

        car = available[selection - 1]
        days, total = self.quote(car, pickup, return_)
        rental_id = self._unique_rental_id()

        rented = self._cars.set_availability(car.model, available=False, expected=car)
        rental = Rental(
            car=rented,
            username=username,
            pickup_date=pickup,
            return_date=return_,
            total_cost=total,
            car_index=selection,
            rental_id=rental_id,
            created_at=self._clock().strftime(TIMESTAMP_FORMAT),
        )
        try:
            self._store.append(rental)
        except StoreError:
            self._logger.log(
                LogLevel.ERROR,
                f"Rental {rental_id} not recorded; car '{car.model}' left unavailable",
                source=_SOURCE,
                username=username,
            )
            raise

        self._logger.log(
            LogLevel.INFO,
            f"Rental {rental_id}: '{car.model}' for {days} day(s), total {total:.2f}",
            source=_SOURCE,
            username=username,
        )
        return rental

    def history(self, username: str | None = None) -> list[Rental]:
        """Return rentals in the order they were made.

        Args:
            username: If set, only this user's rentals.

        """
        if username is None:
            return self._store.load_all()
        return [r for r in self._store.scan() if r.username == username]

    def _unique_rental_id(self) -> str:
        """Draw rental ids until one is not already in the log.

        Raises:
            StoreError: If no free id turns up after ``MAX_ID_ATTEMPTS`` draws.

        """
        existing = {r.rental_id for r in self._store.scan()}
        for _ in range(MAX_ID_ATTEMPTS):
            candidate = clip(generate_rental_id(self._id_prefix, self._rng), RENTAL_ID_WIDTH)
            if candidate not in existing:
                return candidate
        msg = f"Could not generate a free rental id after {MAX_ID_ATTEMPTS} attempts"
        raise StoreError(msg)

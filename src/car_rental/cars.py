"""The car catalog — adding, listing, editing and removing cars.

Cars live in a fixed-record file (``cars.bin``).  The model name acts as
the lookup key for edits and for the rental workflow, but nothing stops
two cars sharing a model name; when that happens the **first match in
file order wins**.

Removal is different: the console shows a numbered list and the admin
picks a number.  A number is only meaningful for the listing it was
read from, so removal passes the selected car along with its position
and the store refuses to delete if the record there has changed.
"""

from collections.abc import Callable
from dataclasses import replace
from enum import StrEnum

from car_rental.logging import Logger, LogLevel
from car_rental.store.records import RecordNotFoundError, RecordStore
from car_rental.store.schema import MODEL_WIDTH, Car, clip
from car_rental.validation import parse_bool, parse_float, parse_int

_SOURCE = "cars"


class CarField(StrEnum):
    """The car fields that can be changed from the admin menu."""

    MODEL = "model"
    COMPANY = "company"
    YEAR = "year"
    RATE = "rate"
    CAPACITY = "capacity"
    EFFICIENCY = "efficiency"
    COLOR = "color"
    AVAILABLE = "available"


_PARSERS: dict[CarField, Callable[[str], object]] = {
    CarField.MODEL: str,
    CarField.COMPANY: str,
    CarField.YEAR: lambda t: parse_int(t, label="Year"),
    CarField.RATE: lambda t: parse_float(t, label="Rate"),
    CarField.CAPACITY: lambda t: parse_int(t, label="Capacity"),
    CarField.EFFICIENCY: lambda t: parse_float(t, label="Efficiency"),
    CarField.COLOR: str,
    CarField.AVAILABLE: lambda t: parse_bool(t, label="Availability"),
}


class CarCatalog:
    """Catalog of rentable cars backed by a record store."""

    def __init__(self, store: RecordStore[Car], *, logger: Logger) -> None:
        """Create a catalog over an existing store."""
        self._store = store
        self._logger = logger

    def list_cars(self) -> list[Car]:
        """Return every car in file order."""
        return self._store.load_all()

    def list_available(self) -> list[Car]:
        """Return the cars that can currently be rented, in file order."""
        return [car for car in self._store.scan() if car.available]

    def find_car(self, model: str) -> Car | None:
        """Return the first car with this model name, if any."""
        model = clip(model, MODEL_WIDTH)
        found = self._store.find_first(lambda c: c.model == model)
        return found[1] if found is not None else None

    def add_car(self, car: Car) -> None:
        """Append a car to the catalog.

        Raises:
            StoreError: If the car file cannot be written.

        """
        self._store.append(car)
        self._logger.log(
            LogLevel.INFO, f"Added car '{car.model}' ({car.company})", source=_SOURCE
        )

    def update_car(self, model: str, field: CarField, raw_value: str) -> Car:
        """Change one field of the first car with this model name.

        Args:
            model: The model name to look up.
            field: Which field to overwrite.
            raw_value: The new value as typed; parsed per field type.

        Returns:
            The updated car.

        Raises:
            ValidationError: If the value cannot be parsed for the field.
            RecordNotFoundError: If no car has this model name.

        """
        model = clip(model, MODEL_WIDTH)
        value = _PARSERS[field](raw_value)
        try:
            updated = self._store.update_in_place(
                lambda c: c.model == model,
                lambda c: replace(c, **{field.value: value}),
            )
        except RecordNotFoundError as e:
            msg = f"Car '{model}' not found"
            raise RecordNotFoundError(msg) from e
        self._logger.log(
            LogLevel.INFO, f"Updated {field.value} of car '{model}'", source=_SOURCE
        )
        return updated

    def set_availability(
        self, model: str, *, available: bool, expected: Car | None = None
    ) -> Car:
        """Flip the availability flag of a car, keyed by model name.

        The first car with this model name whose flag differs from
        *available* is changed.  When *expected* is given, only a record
        equal to it qualifies, so a car picked from a listing is the one
        that changes even if an earlier car shares its model name.

        Raises:
            RecordNotFoundError: If no such car exists.

        """
        model = clip(model, MODEL_WIDTH)

        def matches(car: Car) -> bool:
            if expected is not None and car != expected:
                return False
            return car.model == model and car.available != available

        try:
            updated = self._store.update_in_place(
                matches, lambda c: replace(c, available=available)
            )
        except RecordNotFoundError as e:
            state = "available" if not available else "unavailable"
            msg = f"No {state} car '{model}' found"
            raise RecordNotFoundError(msg) from e
        self._logger.log(
            LogLevel.DEBUG,
            f"Car '{model}' marked {'available' if available else 'unavailable'}",
            source=_SOURCE,
        )
        return updated

    def remove_car(self, index: int, car: Car) -> None:
        """Remove the car shown at *index* (0-based) of the last listing.

        Args:
            index: Position of the car in ``list_cars()`` order.
            car: The car that was displayed at that position.

        Raises:
            RecordNotFoundError: If that car is no longer at *index*.
            StoreError: If the car file cannot be rebuilt.

        """
        if not self._store.delete_by_index(index, expected=car):
            msg = f"Car '{car.model}' is no longer at position {index + 1}; list the cars again"
            raise RecordNotFoundError(msg)
        self._logger.log(LogLevel.INFO, f"Removed car '{car.model}'", source=_SOURCE)

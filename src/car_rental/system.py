"""The rental system — opens the data directory and wires the services.

``RentalSystem`` is the one object the console talks to.  Opening it:

    1. creates the data directory if needed (the only startup step that
       can fail hard — without it nothing can be registered);
    2. binds one ``RecordStore`` per record file and the sequence counter;
    3. builds the user manager, car catalog and rental desk around them,
       all sharing one activity ``Logger``.

No service holds records in memory between operations: each call reads
what it needs from disk and writes back before returning.  Only one
process may use a data directory at a time; there is no file locking.
"""

import random
from collections.abc import Callable
from datetime import datetime
from typing import TypeVar

from car_rental.cars import CarCatalog
from car_rental.config import RentalConfig
from car_rental.credentials import CredentialChecker
from car_rental.logging import Logger, LogLevel
from car_rental.rentals import RentalDesk
from car_rental.session import Session
from car_rental.store.counter import SequenceCounter
from car_rental.store.records import RecordStore
from car_rental.store.schema import Car, Rental, User
from car_rental.users import UserManager

T = TypeVar("T")

USERS_FILE = "registered_users.bin"
CARS_FILE = "cars.bin"
RENTALS_FILE = "rentals.bin"
COUNTER_FILE = "highest_recorded_number.txt"
_SOURCE = "system"


class StartupError(RuntimeError):
    """Raise when the data directory cannot be prepared."""


class RentalSystem:
    """Own the stores and services for one data directory."""

    def __init__(
        self,
        config: RentalConfig | None = None,
        *,
        credentials: CredentialChecker | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Create a closed system.  Call ``open()`` before use.

        Args:
            config: Settings; defaults when None.
            credentials: Password comparison passed to the user manager.
            rng: Random source for rental ids.
            clock: Time source for rental timestamps.

        """
        self._config = config if config is not None else RentalConfig()
        self._credentials = credentials
        self._rng = rng
        self._clock = clock
        self._logger = Logger()
        self._users: UserManager | None = None
        self._cars: CarCatalog | None = None
        self._rentals: RentalDesk | None = None

    @property
    def config(self) -> RentalConfig:
        """Return the settings this system was created with."""
        return self._config

    @property
    def logger(self) -> Logger:
        """Return the shared activity log."""
        return self._logger

    @property
    def users(self) -> UserManager:
        """Return the user manager."""
        return self._require(self._users)

    @property
    def cars(self) -> CarCatalog:
        """Return the car catalog."""
        return self._require(self._cars)

    @property
    def rentals(self) -> RentalDesk:
        """Return the rental desk."""
        return self._require(self._rentals)

    def _require(self, service: T | None) -> T:
        if service is None:
            msg = "Rental system is not open"
            raise RuntimeError(msg)
        return service

    def open(self) -> None:
        """Prepare the data directory and build the services.

        Raises:
            StartupError: If the data directory cannot be created.

        """
        data_dir = self._config.data_dir
        try:
            data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f"Cannot prepare data directory {data_dir}: {e}"
            raise StartupError(msg) from e

        self._users = UserManager(
            RecordStore(data_dir / USERS_FILE, User),
            SequenceCounter(data_dir / COUNTER_FILE),
            logger=self._logger,
            max_users=self._config.max_users,
            credentials=self._credentials,
        )
        self._cars = CarCatalog(RecordStore(data_dir / CARS_FILE, Car), logger=self._logger)
        self._rentals = RentalDesk(
            RecordStore(data_dir / RENTALS_FILE, Rental),
            self._cars,
            logger=self._logger,
            id_prefix=self._config.rental_id_prefix,
            rng=self._rng,
            clock=self._clock,
        )
        self._logger.log(LogLevel.INFO, f"Opened data directory {data_dir}", source=_SOURCE)

    def new_session(self) -> Session:
        """Return a fresh logged-out session."""
        return Session(users=self.users, admin=self._config.admin, logger=self._logger)

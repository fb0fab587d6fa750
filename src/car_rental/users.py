"""User accounts — registration, login, and administration.

Users live in a fixed-record file (``registered_users.bin``).  This
module adds the rules the store itself knows nothing about:

**Uniqueness** — no two active users may share a username or a phone
    number.  Both are checked by a linear scan before anything is
    written; the console re-prompts when a check fails.

**Capacity** — the sequence counter records how many accounts have
    ever been registered.  Registration stops at ``max_users``.  The
    counter is not decremented when a user is removed.

**Login** — a user may identify themselves by username, phone number
    or email.  Each is an exact match against the value as stored (cut to
    its field width); the password comparison goes through a
    ``CredentialChecker``.

**Updates** — one field at a time, rewritten in place.  Changing the
    username or phone number re-runs the uniqueness check.
"""

from dataclasses import replace
from enum import StrEnum

from car_rental.credentials import CredentialChecker, PlainTextCredentials
from car_rental.logging import Logger, LogLevel
from car_rental.store.counter import SequenceCounter
from car_rental.store.records import RecordNotFoundError, RecordStore
from car_rental.store.schema import (
    EMAIL_WIDTH,
    NUMBER_WIDTH,
    PASSWORD_WIDTH,
    USERNAME_WIDTH,
    User,
    clip,
)
from car_rental.validation import ValidationError

_SOURCE = "users"


class AuthenticationError(Exception):
    """Raise when a login identifier or password is not accepted."""


class UserField(StrEnum):
    """The user fields that can be changed after registration."""

    FULLNAME = "fullname"
    ADDRESS = "address"
    NUMBER = "number"
    EMAIL = "email"
    USERNAME = "username"
    PASSWORD = "password"


class UserManager:
    """Registry of user accounts backed by a record store."""

    def __init__(
        self,
        store: RecordStore[User],
        counter: SequenceCounter,
        *,
        logger: Logger,
        max_users: int,
        credentials: CredentialChecker | None = None,
    ) -> None:
        """Create a manager over an existing store and counter.

        Args:
            store: The user record file.
            counter: Persisted count of registrations.
            logger: Activity log shared with the other services.
            max_users: Registration capacity.
            credentials: Password comparison; plain text by default.

        """
        self._store = store
        self._counter = counter
        self._logger = logger
        self._max_users = max_users
        self._credentials = credentials if credentials is not None else PlainTextCredentials()

    @property
    def credentials(self) -> CredentialChecker:
        """Return the password comparison in use."""
        return self._credentials

    # -- Queries ---------------------------------------------------------

    def list_users(self) -> list[User]:
        """Return every user in file order."""
        return self._store.load_all()

    def get_user(self, username: str) -> User | None:
        """Look up a user by username, as stored (cut to its field width)."""
        username = clip(username, USERNAME_WIDTH)
        found = self._store.find_first(lambda u: u.username == username)
        return found[1] if found is not None else None

    def registered_count(self) -> int:
        """Return how many accounts have ever been registered."""
        return self._counter.load()

    def check_number_available(self, number: str) -> None:
        """Raise if an active user already has this phone number.

        Raises:
            ValidationError: If the number is taken.

        """
        number = clip(number, NUMBER_WIDTH)
        if self._store.find_first(lambda u: u.number == number) is not None:
            msg = f"Phone number '{number}' is already registered"
            raise ValidationError(msg)

    def check_username_available(self, username: str) -> None:
        """Raise if an active user already has this username.

        Raises:
            ValidationError: If the username is taken.

        """
        username = clip(username, USERNAME_WIDTH)
        if self._store.find_first(lambda u: u.username == username) is not None:
            msg = f"Username '{username}' is already taken"
            raise ValidationError(msg)

    # -- Commands --------------------------------------------------------

    def register(self, user: User, confirm_password: str) -> int:
        """Persist a new account.

        Args:
            user: The fully populated user record.
            confirm_password: The password typed a second time.

        Returns:
            The number of accounts registered so far, including this one.

        Raises:
            ValidationError: If capacity is reached, the phone number or
                username is taken, or the passwords differ.
            StoreError: If the record or the counter cannot be written.

        """
        registered = self._counter.load()
        if registered >= self._max_users:
            msg = f"Registration is full ({self._max_users} users)"
            raise ValidationError(msg)
        self.check_number_available(user.number)
        self.check_username_available(user.username)
        if not self._credentials.matches(user.password, clip(confirm_password, PASSWORD_WIDTH)):
            msg = "Passwords do not match"
            raise ValidationError(msg)

        self._store.append(user)
        total = self._counter.increment()
        self._logger.log(
            LogLevel.INFO,
            f"Registered user '{user.username}' ({total} total)",
            source=_SOURCE,
            username=user.username,
        )
        return total

    def authenticate(self, identifier: str, password: str) -> User:
        """Return the user whose username, phone number or email is *identifier*.

        *identifier* is cut to each field's width before comparing, the
        same way the field was cut when the user registered.  The first
        record whose identifier field matches is checked against
        *password*.

        Raises:
            AuthenticationError: If no user matches or the password is wrong.

        """
        username = clip(identifier, USERNAME_WIDTH)
        number = clip(identifier, NUMBER_WIDTH)
        email = clip(identifier, EMAIL_WIDTH)
        found = self._store.find_first(
            lambda u: u.username == username or u.number == number or u.email == email
        )
        if found is None or not self._credentials.matches(
            found[1].password, clip(password, PASSWORD_WIDTH)
        ):
            self._logger.log(
                LogLevel.WARNING, f"Failed login for '{identifier}'", source=_SOURCE
            )
            msg = "Invalid username/contact/email or password"
            raise AuthenticationError(msg)

        user = found[1]
        self._logger.log(
            LogLevel.INFO, "User logged in", source=_SOURCE, username=user.username
        )
        return user

    def update_user(self, username: str, field: UserField, value: str) -> User:
        """Change one field of an existing user.

        Args:
            username: The account to change.
            field: Which field to overwrite.
            value: The new value.

        Returns:
            The updated user record.

        Raises:
            ValidationError: If the new username or number is taken.
            RecordNotFoundError: If the user does not exist.

        """
        username = clip(username, USERNAME_WIDTH)
        if field is UserField.USERNAME and clip(value, USERNAME_WIDTH) != username:
            self.check_username_available(value)
        elif field is UserField.NUMBER:
            current = self.get_user(username)
            if current is not None and current.number != clip(value, NUMBER_WIDTH):
                self.check_number_available(value)

        try:
            updated = self._store.update_in_place(
                lambda u: u.username == username,
                lambda u: replace(u, **{field.value: value}),
            )
        except RecordNotFoundError as e:
            msg = f"User '{username}' not found"
            raise RecordNotFoundError(msg) from e

        self._logger.log(
            LogLevel.INFO,
            f"Updated {field.value} of user '{username}'",
            source=_SOURCE,
            username=updated.username,
        )
        return updated

    def remove_user(self, username: str) -> None:
        """Delete a user account.

        Raises:
            RecordNotFoundError: If the user does not exist.
            StoreError: If the user file cannot be rebuilt.

        """
        username = clip(username, USERNAME_WIDTH)
        if not self._store.delete_where(lambda u: u.username == username):
            msg = f"User '{username}' not found"
            raise RecordNotFoundError(msg)
        self._logger.log(LogLevel.INFO, f"Removed user '{username}'", source=_SOURCE)

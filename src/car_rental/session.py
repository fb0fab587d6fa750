"""Login sessions — who is at the console right now.

A session moves through a small state machine::

    UNAUTHENTICATED --login_user--> USER  --logout--> UNAUTHENTICATED
    UNAUTHENTICATED --login_admin--> ADMIN --logout--> UNAUTHENTICATED

Regular users are checked against the user file.  The administrator has
no record on disk: the credentials come from ``RentalConfig.admin`` and
are compared through the same ``CredentialChecker`` as everyone else.
"""

from enum import StrEnum

from car_rental.config import AdminCredentials
from car_rental.logging import Logger, LogLevel
from car_rental.store.schema import User
from car_rental.users import AuthenticationError, UserManager

_SOURCE = "session"


class SessionState(StrEnum):
    """Represent who (if anyone) is logged in."""

    UNAUTHENTICATED = "unauthenticated"
    USER = "user"
    ADMIN = "admin"


class Session:
    """Track the logged-in identity for one console session."""

    def __init__(self, *, users: UserManager, admin: AdminCredentials, logger: Logger) -> None:
        """Create a logged-out session."""
        self._users = users
        self._admin = admin
        self._logger = logger
        self._state = SessionState.UNAUTHENTICATED
        self._user: User | None = None

    @property
    def state(self) -> SessionState:
        """Return the current session state."""
        return self._state

    @property
    def current_user(self) -> User | None:
        """Return the logged-in user, or None for the admin or nobody."""
        return self._user

    @property
    def username(self) -> str | None:
        """Return the name of whoever is logged in."""
        if self._state is SessionState.ADMIN:
            return self._admin.username
        return self._user.username if self._user is not None else None

    def _require_logged_out(self) -> None:
        if self._state is not SessionState.UNAUTHENTICATED:
            msg = f"Already logged in as {self.username}"
            raise RuntimeError(msg)

    def login_user(self, identifier: str, password: str) -> User:
        """Log in a regular user by username, phone number, or email.

        Raises:
            AuthenticationError: If the credentials are not accepted.
            RuntimeError: If someone is already logged in.

        """
        self._require_logged_out()
        user = self._users.authenticate(identifier, password)
        self._user = user
        self._state = SessionState.USER
        return user

    def login_admin(self, username: str, password: str) -> None:
        """Log in as the configured administrator.

        Raises:
            AuthenticationError: If the credentials are not accepted.
            RuntimeError: If someone is already logged in.

        """
        self._require_logged_out()
        checker = self._users.credentials
        if username != self._admin.username or not checker.matches(self._admin.password, password):
            self._logger.log(LogLevel.WARNING, "Failed admin login", source=_SOURCE)
            msg = "Invalid admin credentials"
            raise AuthenticationError(msg)
        self._state = SessionState.ADMIN
        self._logger.log(LogLevel.INFO, "Admin logged in", source=_SOURCE, username=username)

    def refresh(self, user: User) -> None:
        """Replace the cached user record after a self-service update."""
        if self._state is SessionState.USER:
            self._user = user

    def logout(self) -> None:
        """Return to the logged-out state."""
        if self._state is not SessionState.UNAUTHENTICATED:
            self._logger.log(
                LogLevel.INFO, "Logged out", source=_SOURCE, username=self.username or ""
            )
        self._state = SessionState.UNAUTHENTICATED
        self._user = None

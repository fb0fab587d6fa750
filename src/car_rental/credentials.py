"""Credential comparison — the single place passwords are checked.

Passwords are stored and compared as plain text.  That is a known
weakness, kept deliberately so existing data files stay readable.
Every comparison in the system (user login, admin login, registration
confirmation) goes through a ``CredentialChecker``, so switching to
hashed credentials means adding one implementation here rather than
touching every caller.
"""

from typing import Protocol


class CredentialChecker(Protocol):
    """Protocol for comparing a stored credential with a supplied one."""

    def matches(self, stored: str, supplied: str) -> bool:
        """Return True if *supplied* is accepted for *stored*."""
        ...


class PlainTextCredentials:
    """Exact string comparison of plain-text passwords."""

    def matches(self, stored: str, supplied: str) -> bool:
        """Return True if the two strings are identical."""
        return stored == supplied

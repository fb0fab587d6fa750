"""Tests for user registration, login, and administration.

Usernames and phone numbers must be unique among active users.  Login
accepts a username, phone number or email.  The registration counter
keeps counting across runs and enforces the capacity.
"""

from pathlib import Path

import pytest

from car_rental.logging import Logger
from car_rental.store.counter import SequenceCounter
from car_rental.store.records import RecordNotFoundError, RecordStore
from car_rental.store.schema import User
from car_rental.users import AuthenticationError, UserField, UserManager
from car_rental.validation import ValidationError

_MAX_USERS = 100


def _manager(tmp_path: Path, *, max_users: int = _MAX_USERS) -> UserManager:
    """Create a user manager over files in a temporary directory."""
    return UserManager(
        RecordStore(tmp_path / "registered_users.bin", User),
        SequenceCounter(tmp_path / "highest_recorded_number.txt"),
        logger=Logger(),
        max_users=max_users,
    )


def _user(username: str = "alice", number: str = "9800000001", **overrides: str) -> User:
    values = {
        "fullname": "Alice Smith",
        "address": "12 Main St",
        "email": f"{username}@example.com",
        "username": username,
        "password": "s3cret",
        "number": number,
    }
    values.update(overrides)
    return User(**values)


class TestRegister:
    """Verify registration rules."""

    def test_register_persists_user(self, tmp_path: Path) -> None:
        """A registered user should be retrievable."""
        mgr = _manager(tmp_path)
        mgr.register(_user(), "s3cret")
        assert mgr.get_user("alice") == _user()

    def test_register_returns_running_total(self, tmp_path: Path) -> None:
        """Each registration should bump the counter."""
        mgr = _manager(tmp_path)
        assert mgr.register(_user(), "s3cret") == 1
        expected = 2
        assert mgr.register(_user("bob", "9800000002"), "s3cret") == expected
        assert mgr.registered_count() == expected

    def test_counter_resumes_across_instances(self, tmp_path: Path) -> None:
        """A new manager on the same files should continue the count."""
        _manager(tmp_path).register(_user(), "s3cret")
        expected = 2
        assert _manager(tmp_path).register(_user("bob", "9800000002"), "s3cret") == expected

    def test_duplicate_number_rejected(self, tmp_path: Path) -> None:
        """A second user with the same phone number should be rejected."""
        mgr = _manager(tmp_path)
        mgr.register(_user(), "s3cret")
        with pytest.raises(ValidationError, match="already registered"):
            mgr.register(_user("bob", "9800000001"), "s3cret")
        assert len(mgr.list_users()) == 1

    def test_duplicate_username_rejected(self, tmp_path: Path) -> None:
        """A second user with the same username should be rejected."""
        mgr = _manager(tmp_path)
        mgr.register(_user(), "s3cret")
        with pytest.raises(ValidationError, match="already taken"):
            mgr.register(_user("alice", "9800000002"), "s3cret")

    def test_unique_second_user_accepted(self, tmp_path: Path) -> None:
        """Different phone number and username should be accepted."""
        mgr = _manager(tmp_path)
        mgr.register(_user(), "s3cret")
        mgr.register(_user("bob", "9800000002"), "s3cret")
        assert [u.username for u in mgr.list_users()] == ["alice", "bob"]

    def test_password_mismatch_rejected(self, tmp_path: Path) -> None:
        """The confirmation must equal the password."""
        mgr = _manager(tmp_path)
        with pytest.raises(ValidationError, match="do not match"):
            mgr.register(_user(), "different")
        assert mgr.list_users() == []
        assert mgr.registered_count() == 0

    def test_capacity_enforced(self, tmp_path: Path) -> None:
        """Registration should stop at the configured limit."""
        mgr = _manager(tmp_path, max_users=1)
        mgr.register(_user(), "s3cret")
        with pytest.raises(ValidationError, match="full"):
            mgr.register(_user("bob", "9800000002"), "s3cret")

    def test_removal_does_not_free_capacity(self, tmp_path: Path) -> None:
        """The counter is a high-water mark, not a live count."""
        mgr = _manager(tmp_path, max_users=1)
        mgr.register(_user(), "s3cret")
        mgr.remove_user("alice")
        with pytest.raises(ValidationError, match="full"):
            mgr.register(_user("bob", "9800000002"), "s3cret")

    def test_removed_username_can_be_reused(self, tmp_path: Path) -> None:
        """Uniqueness applies to active users only."""
        mgr = _manager(tmp_path)
        mgr.register(_user(), "s3cret")
        mgr.remove_user("alice")
        mgr.register(_user(), "s3cret")
        assert mgr.get_user("alice") is not None


class TestAuthenticate:
    """Verify login by username, phone number, or email."""

    @pytest.mark.parametrize("identifier", ["alice", "9800000001", "alice@example.com"])
    def test_any_identifier(self, tmp_path: Path, identifier: str) -> None:
        """Each of the three identifiers should work."""
        mgr = _manager(tmp_path)
        mgr.register(_user(), "s3cret")
        assert mgr.authenticate(identifier, "s3cret").username == "alice"

    def test_wrong_password(self, tmp_path: Path) -> None:
        """A wrong password should be rejected."""
        mgr = _manager(tmp_path)
        mgr.register(_user(), "s3cret")
        with pytest.raises(AuthenticationError):
            mgr.authenticate("alice", "nope")

    def test_unknown_identifier(self, tmp_path: Path) -> None:
        """An unknown identifier should be rejected."""
        mgr = _manager(tmp_path)
        with pytest.raises(AuthenticationError):
            mgr.authenticate("ghost", "s3cret")

    def test_match_is_exact(self, tmp_path: Path) -> None:
        """Identifiers are compared exactly, not case-insensitively."""
        mgr = _manager(tmp_path)
        mgr.register(_user(), "s3cret")
        with pytest.raises(AuthenticationError):
            mgr.authenticate("ALICE", "s3cret")

    def test_over_width_email(self, tmp_path: Path) -> None:
        """An email longer than its field should still log in as typed."""
        mgr = _manager(tmp_path)
        mgr.register(_user(email="john.smith@example.com"), "s3cret")
        assert mgr.authenticate("john.smith@example.com", "s3cret").username == "alice"

    def test_over_width_username(self, tmp_path: Path) -> None:
        """A username longer than its field should still log in as typed."""
        long_name = "alexandra_montgomery_smith"
        mgr = _manager(tmp_path)
        mgr.register(_user(long_name), "s3cret")
        user = mgr.authenticate(long_name, "s3cret")
        assert user == mgr.get_user(long_name)


class TestUpdateUser:
    """Verify single-field updates."""

    def test_update_address(self, tmp_path: Path) -> None:
        """An ordinary field should be overwritten."""
        mgr = _manager(tmp_path)
        mgr.register(_user(), "s3cret")
        updated = mgr.update_user("alice", UserField.ADDRESS, "99 Elm St")
        assert updated.address == "99 Elm St"
        assert mgr.get_user("alice") == updated

    def test_update_leaves_other_users(self, tmp_path: Path) -> None:
        """Other records should be unchanged."""
        mgr = _manager(tmp_path)
        mgr.register(_user(), "s3cret")
        mgr.register(_user("bob", "9800000002"), "s3cret")
        mgr.update_user("alice", UserField.PASSWORD, "newpass")
        assert mgr.get_user("bob") == _user("bob", "9800000002")

    def test_update_username_to_taken_name(self, tmp_path: Path) -> None:
        """Renaming to an existing username should be rejected."""
        mgr = _manager(tmp_path)
        mgr.register(_user(), "s3cret")
        mgr.register(_user("bob", "9800000002"), "s3cret")
        with pytest.raises(ValidationError):
            mgr.update_user("alice", UserField.USERNAME, "bob")

    def test_update_number_to_taken_number(self, tmp_path: Path) -> None:
        """Changing to another user's phone number should be rejected."""
        mgr = _manager(tmp_path)
        mgr.register(_user(), "s3cret")
        mgr.register(_user("bob", "9800000002"), "s3cret")
        with pytest.raises(ValidationError):
            mgr.update_user("alice", UserField.NUMBER, "9800000002")

    def test_keep_own_number(self, tmp_path: Path) -> None:
        """Re-entering your own number is not a duplicate."""
        mgr = _manager(tmp_path)
        mgr.register(_user(), "s3cret")
        updated = mgr.update_user("alice", UserField.NUMBER, "9800000001")
        assert updated.number == "9800000001"

    def test_update_missing_user(self, tmp_path: Path) -> None:
        """Updating an unknown user should raise RecordNotFoundError."""
        mgr = _manager(tmp_path)
        with pytest.raises(RecordNotFoundError, match="ghost"):
            mgr.update_user("ghost", UserField.EMAIL, "x@example.com")

    def test_update_over_width_username(self, tmp_path: Path) -> None:
        """A username longer than its field should be editable as typed."""
        long_name = "alexandra_montgomery_smith"
        mgr = _manager(tmp_path)
        mgr.register(_user(long_name), "s3cret")
        updated = mgr.update_user(long_name, UserField.ADDRESS, "99 Elm St")
        assert updated.address == "99 Elm St"


class TestRemoveUser:
    """Verify deletion."""

    def test_remove(self, tmp_path: Path) -> None:
        """A removed user should be gone."""
        mgr = _manager(tmp_path)
        mgr.register(_user(), "s3cret")
        mgr.register(_user("bob", "9800000002"), "s3cret")
        mgr.remove_user("alice")
        assert [u.username for u in mgr.list_users()] == ["bob"]

    def test_remove_missing(self, tmp_path: Path) -> None:
        """Removing an unknown user should raise."""
        mgr = _manager(tmp_path)
        with pytest.raises(RecordNotFoundError):
            mgr.remove_user("ghost")

    def test_remove_over_width_username(self, tmp_path: Path) -> None:
        """A username longer than its field should be removable as typed."""
        long_name = "alexandra_montgomery_smith"
        mgr = _manager(tmp_path)
        mgr.register(_user(long_name), "s3cret")
        mgr.remove_user(long_name)
        assert mgr.list_users() == []

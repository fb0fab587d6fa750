"""Configuration — where the data lives and who the administrator is.

Settings are read from an optional JSON file.  Every key has a default,
so a missing file (or a file that only sets one key) is fine::

    {
        "data_dir": "data",
        "admin": {"username": "admin", "password": "admin"},
        "rental_id_prefix": "R",
        "max_users": 100,
        "clear_screen": true
    }

The resulting ``RentalConfig`` is passed explicitly to the system at
startup; nothing reads settings from module-level globals.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from car_rental.pricing import RENTAL_ID_DIGITS
from car_rental.store.schema import RENTAL_ID_WIDTH

CONFIG_FILENAME = "car_rental.json"
DEFAULT_DATA_DIR = Path("data")
DEFAULT_MAX_USERS = 100
MAX_PREFIX_BYTES = RENTAL_ID_WIDTH - RENTAL_ID_DIGITS


class ConfigError(Exception):
    """Raise when the configuration file cannot be read or is invalid."""


@dataclass(frozen=True)
class AdminCredentials:
    """The fixed administrator login.  There is no admin record on disk."""

    username: str = "admin"
    password: str = "admin"


@dataclass(frozen=True)
class RentalConfig:
    """Settings for one rental system instance.

    Attributes:
        data_dir: Directory holding the record files and the counter.
        admin: Administrator credentials.
        rental_id_prefix: Text placed before the number in rental ids.
        max_users: Registration capacity (counted by the sequence counter).
        clear_screen: Whether the console clears the terminal between screens.

    """

    data_dir: Path = DEFAULT_DATA_DIR
    admin: AdminCredentials = field(default_factory=AdminCredentials)
    rental_id_prefix: str = "R"
    max_users: int = DEFAULT_MAX_USERS
    clear_screen: bool = True


def _expect(data: dict[str, Any], key: str, kind: type, default: Any) -> Any:
    """Return ``data[key]`` if present and of type *kind*, else *default*."""
    if key not in data:
        return default
    value = data[key]
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        msg = f"Config key '{key}' must be {kind.__name__}, got {type(value).__name__}"
        raise ConfigError(msg)
    return value


def config_from_dict(data: dict[str, Any]) -> RentalConfig:
    """Build a config from parsed JSON, filling in defaults.

    Raises:
        ConfigError: If a key has the wrong type or an unusable value.

    """
    defaults = RentalConfig()
    admin_data = _expect(data, "admin", dict, {})
    admin = AdminCredentials(
        username=_expect(admin_data, "username", str, defaults.admin.username),
        password=_expect(admin_data, "password", str, defaults.admin.password),
    )
    max_users = _expect(data, "max_users", int, defaults.max_users)
    if max_users < 0:
        msg = f"Config key 'max_users' must not be negative, got {max_users}"
        raise ConfigError(msg)
    prefix = _expect(data, "rental_id_prefix", str, defaults.rental_id_prefix)
    if len(prefix.encode()) > MAX_PREFIX_BYTES:
        msg = (
            f"Config key 'rental_id_prefix' must be at most {MAX_PREFIX_BYTES} bytes, "
            f"got {prefix!r}"
        )
        raise ConfigError(msg)
    return RentalConfig(
        data_dir=Path(_expect(data, "data_dir", str, str(defaults.data_dir))),
        admin=admin,
        rental_id_prefix=prefix,
        max_users=max_users,
        clear_screen=_expect(data, "clear_screen", bool, defaults.clear_screen),
    )


def load_config(path: Path | None = None) -> RentalConfig:
    """Load settings from a JSON file, or return defaults.

    Args:
        path: The config file.  None, or a path that does not exist,
            gives the default configuration.

    Raises:
        ConfigError: If the file exists but cannot be read or parsed.

    """
    if path is None or not path.exists():
        return RentalConfig()
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        msg = f"Cannot load config {path}: {e}"
        raise ConfigError(msg) from e
    if not isinstance(data, dict):
        msg = f"Config {path} must contain a JSON object"
        raise ConfigError(msg)
    return config_from_dict(data)

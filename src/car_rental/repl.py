"""Terminal entry point — connects the console to ``stdin``/``stdout``.

The console itself is fully testable (it only talks to a ``Prompter``);
this module is the thin I/O wrapper around it:

    1. **Configure** — read ``car_rental.json`` from the working directory
       if present, otherwise use defaults.
    2. **Open** — prepare the data directory and build the services.
    3. **Run** — hand a ``TerminalPrompter`` to the console's main menu.

Passwords are read with ``getpass`` so they are not echoed.  Ctrl+C and
Ctrl+D leave the program cleanly.  A startup failure exits with status 1.
"""

import getpass
import sys
from pathlib import Path

from car_rental.config import CONFIG_FILENAME, ConfigError, RentalConfig, load_config
from car_rental.console import Console
from car_rental.system import RentalSystem, StartupError

_BANNER_WIDTH = 38

# ANSI "reset terminal".
CLEAR_SEQUENCE = "\033c"


def format_banner(config: RentalConfig) -> str:
    """Format the start-up banner shown before the main menu.

    Args:
        config: The active configuration (its data directory is shown).

    Returns:
        A formatted string suitable for printing to the console.

    """
    border = "=" * _BANNER_WIDTH
    return (
        f"\n  {border}\n          Car Rental System\n  {border}\n"
        f"  Data directory: {config.data_dir}\n"
    )


class TerminalPrompter:
    """Prompter backed by the real terminal."""

    def ask(self, label: str, *, secret: bool = False) -> str:
        """Read one line, without echo when *secret* is set."""
        if secret:
            return getpass.getpass(label)
        return input(label)

    def show(self, text: str) -> None:
        """Print *text*."""
        print(text)  # noqa: T201

    def clear(self) -> None:
        """Reset the terminal."""
        print(CLEAR_SEQUENCE, end="", flush=True)  # noqa: T201


def run(config_path: Path | None = None) -> None:
    """Open the rental system and run the interactive console.

    This is the main entrypoint.  It handles:
    - Loading configuration.
    - Opening the data directory (fatal on failure).
    - The console's main menu loop.
    - Graceful handling of Ctrl+C and Ctrl+D.

    Args:
        config_path: Configuration file; ``car_rental.json`` in the
            working directory when None.

    """
    path = config_path if config_path is not None else Path(CONFIG_FILENAME)
    try:
        config = load_config(path)
        system = RentalSystem(config)
        system.open()
    except (ConfigError, StartupError) as e:
        print(f"Error: {e}", file=sys.stderr)  # noqa: T201
        sys.exit(1)

    prompter = TerminalPrompter()
    print(format_banner(config))  # noqa: T201
    try:
        Console(system, prompter).run()
    except EOFError:
        # Ctrl+D — graceful exit
        print()  # noqa: T201
    except KeyboardInterrupt:
        # Ctrl+C — graceful exit
        print("\nInterrupted.")  # noqa: T201

"""The console — menus and forms on top of the rental services.

The console is the presentation layer.  It never touches a record file:
every action calls a service on ``RentalSystem`` and turns the result
(or the error) into text.  All input and output goes through a
``Prompter``, a small synchronous request/response interface::

    answer = prompter.ask("Enter Username: ")
    prompter.show("Welcome back!")

The terminal prompter in ``repl.py`` implements it with ``input`` and
``getpass``; tests implement it with a list of scripted answers.  That
keeps the business flow testable without a terminal.

Menus are dispatch tables: a list of ``(key, label, action)`` entries
where an action of None leaves the menu.  Adding a menu item means
writing one method and adding one entry — no if/elif chains.

Screens:
    - **Main** — register, login, admin login, exit.
    - **User dashboard** — view cars, rent a car, rental history,
      account settings, logout.
    - **Admin dashboard** — view cars, manage cars, view users, manage
      users, rental log, activity log, exit.
"""

from collections.abc import Callable, Sequence
from typing import Protocol, TypeAlias, TypeVar

from car_rental.cars import CarField
from car_rental.logging import LogLevel
from car_rental.pricing import DateError
from car_rental.rentals import RentalCancelledError
from car_rental.session import Session
from car_rental.store.records import RecordNotFoundError, StoreError
from car_rental.store.schema import Car, Rental, User
from car_rental.system import RentalSystem
from car_rental.users import AuthenticationError, UserField
from car_rental.validation import ValidationError, parse_float, parse_int

# Errors a console action reports and survives.
_REPORTED_ERRORS = (
    AuthenticationError,
    DateError,
    RecordNotFoundError,
    StoreError,
    ValidationError,
)

_Action: TypeAlias = Callable[[], None]
_MenuEntry: TypeAlias = tuple[str, str, _Action | None]

F = TypeVar("F", UserField, CarField)

_RULE_WIDTH = 72


class Prompter(Protocol):
    """Synchronous request/response interface to whoever is at the console."""

    def ask(self, label: str, *, secret: bool = False) -> str:
        """Show *label* and return the answer (without echo if *secret*)."""
        ...

    def show(self, text: str) -> None:
        """Display *text*."""
        ...

    def clear(self) -> None:
        """Clear the screen."""
        ...


# -- Formatting ---------------------------------------------------------------


def format_menu(title: str, entries: Sequence[tuple[str, str]]) -> str:
    """Render a titled, numbered menu."""
    rule = "=" * _RULE_WIDTH
    lines = [rule, f"  {title}", rule]
    lines.extend(f"  {key}. {label}" for key, label in entries)
    return "\n".join(lines)


def format_cars(cars: Sequence[Car]) -> str:
    """Render cars as a numbered table (numbering starts at 1)."""
    if not cars:
        return "No cars found."
    header = (
        f"{'NO':<4} {'MODEL':<20} {'COMPANY':<20} {'YEAR':<5} {'RATE':>9} "
        f"{'SEATS':>5} {'KM/L':>6} {'COLOR':<15} STATUS"
    )
    lines = [header]
    for number, car in enumerate(cars, start=1):
        status = "available" if car.available else "rented"
        lines.append(
            f"{number:<4} {car.model:<20} {car.company:<20} {car.year:<5} {car.rate:>9.2f} "
            f"{car.capacity:>5} {car.efficiency:>6.1f} {car.color:<15} {status}"
        )
    return "\n".join(lines)


def format_users(users: Sequence[User]) -> str:
    """Render users as a numbered table.  Passwords are never shown."""
    if not users:
        return "No users found."
    header = f"{'NO':<4} {'USERNAME':<20} {'FULL NAME':<20} {'CONTACT':<11} {'EMAIL':<20} ADDRESS"
    lines = [header]
    lines.extend(
        f"{number:<4} {u.username:<20} {u.fullname:<20} {u.number:<11} {u.email:<20} {u.address}"
        for number, u in enumerate(users, start=1)
    )
    return "\n".join(lines)


def format_rentals(rentals: Sequence[Rental]) -> str:
    """Render rental records, one block per rental."""
    if not rentals:
        return "No rentals found."
    blocks = [
        "\n".join(
            [
                f"Rental ID : {r.rental_id}",
                f"User      : {r.username}",
                f"Car       : {r.car.model} ({r.car.company}, {r.car.year}, {r.car.color})",
                f"Dates     : {r.pickup_date} -> {r.return_date}",
                f"Rate      : {r.car.rate:.2f} per day",
                f"Total     : {r.total_cost:.2f}",
                f"Booked    : {r.created_at}",
            ]
        )
        for r in rentals
    ]
    return ("\n" + "-" * _RULE_WIDTH + "\n").join(blocks)


def format_user(user: User) -> str:
    """Render one user's details for review."""
    return "\n".join(
        [
            f"Full Name: {user.fullname}",
            f"Address: {user.address}",
            f"Contact: {user.number}",
            f"Email: {user.email}",
            f"Username: {user.username}",
        ]
    )


def is_yes(answer: str) -> bool:
    """Return True for a ``y``/``Y`` answer."""
    return answer.strip().lower() in {"y", "yes"}


# -- Console ------------------------------------------------------------------


class Console:
    """Menu-driven front end for one console session."""

    def __init__(self, system: RentalSystem, prompter: Prompter) -> None:
        """Attach a console to an open rental system.

        Raises:
            RuntimeError: If the system has not been opened.

        """
        self._system = system
        self._prompter = prompter
        self._session: Session = system.new_session()

    @property
    def session(self) -> Session:
        """Return the current login session."""
        return self._session

    def run(self) -> None:
        """Show the main menu until the operator chooses to exit."""
        self._menu_loop(
            "CAR RENTAL SYSTEM",
            [
                ("1", "Register", self._register),
                ("2", "Login", self._login),
                ("3", "Admin Login", self._admin_login),
                ("4", "Exit", None),
            ],
        )
        self._prompter.show("Goodbye!")

    # -- Helpers ---------------------------------------------------------

    def _clear(self) -> None:
        if self._system.config.clear_screen:
            self._prompter.clear()

    def _menu_loop(self, title: str, entries: list[_MenuEntry]) -> None:
        """Show a menu and run the chosen action until a leave entry is picked."""
        actions = {key: action for key, _label, action in entries}
        while True:
            self._prompter.show(format_menu(title, [(k, label) for k, label, _ in entries]))
            choice = self._prompter.ask("Enter your choice: ").strip()
            if choice not in actions:
                self._prompter.show(f"Invalid choice '{choice}'. Please try again.")
                continue
            action = actions[choice]
            if action is None:
                return
            self._attempt(action)

    def _attempt(self, action: _Action) -> None:
        """Run an action, reporting domain errors instead of propagating them."""
        try:
            action()
        except _REPORTED_ERRORS as e:
            self._prompter.show(f"Error: {e}")

    def _ask_number(self, label: str) -> int | None:
        """Ask for a whole number; report and return None if it is not one."""
        answer = self._prompter.ask(label).strip()
        try:
            return int(answer)
        except ValueError:
            self._prompter.show(f"Error: '{answer}' is not a number")
            return None

    def _confirm(self, label: str) -> bool:
        return is_yes(self._prompter.ask(label))

    def _choose_field(self, fields: list[F]) -> F | None:
        """Show a numbered field list and return the chosen field."""
        self._prompter.show(
            "\n".join(f"  {n}. {f.value.capitalize()}" for n, f in enumerate(fields, start=1))
        )
        number = self._ask_number("Select the field to update (0 to cancel): ")
        if number is None or number == 0:
            return None
        if not 1 <= number <= len(fields):
            self._prompter.show(f"Error: no field numbered {number}")
            return None
        return fields[number - 1]

    # -- Registration and login ------------------------------------------

    def _enter_user_data(self) -> tuple[User, str]:
        """Collect a new user's details, re-prompting until each check passes."""
        users = self._system.users
        fullname = self._prompter.ask("Enter Full Name: ")
        address = self._prompter.ask("Enter Address: ")
        while True:
            number = self._prompter.ask("Enter Contact: ")
            try:
                users.check_number_available(number)
                break
            except ValidationError as e:
                self._prompter.show(f"{e}. Please enter a different contact number.")
        email = self._prompter.ask("Enter Email: ")
        self._prompter.show(
            f"Thank you for providing your information, {fullname}\n"
            "Now you can set your Username and Password for further process"
        )
        while True:
            username = self._prompter.ask("Enter New Username: ")
            try:
                users.check_username_available(username)
                break
            except ValidationError as e:
                self._prompter.show(f"{e}. Please choose another username.")
        while True:
            password = self._prompter.ask("Enter New Password: ", secret=True)
            confirm = self._prompter.ask("Retype the password for verification: ", secret=True)
            if users.credentials.matches(password, confirm):
                break
            self._prompter.show("Passwords do not match. Please try again.")

        user = User(
            fullname=fullname,
            address=address,
            email=email,
            username=username,
            password=password,
            number=number,
        )
        return user, confirm

    def _collect_reviewed_user(self) -> tuple[User, str]:
        """Enter user data until the operator confirms it is correct."""
        while True:
            self._clear()
            user, confirm = self._enter_user_data()
            self._clear()
            self._prompter.show("Review User Data:\n" + format_user(user))
            if self._confirm("\nIs the data correct? (y/n): "):
                return user, confirm

    def _register(self) -> None:
        """Register accounts until the operator stops or capacity is reached."""
        users = self._system.users
        while True:
            if users.registered_count() >= self._system.config.max_users:
                self._prompter.show("Error: registration is full.")
                return
            user, confirm = self._collect_reviewed_user()
            try:
                users.register(user, confirm)
                self._prompter.show("User data has been registered successfully")
            except (ValidationError, StoreError) as e:
                self._prompter.show(f"Error! while registering user: {e}")
            if not self._confirm("Do you want to register another account? (y/n): "):
                break
        self._prompter.show(f"Total users registered: {users.registered_count()}")

    def _login(self) -> None:
        """Log a user in (with retries) and run the user dashboard."""
        while True:
            identifier = self._prompter.ask("Enter Username/Contact/Email: ")
            password = self._prompter.ask("Enter Password: ", secret=True)
            try:
                user = self._session.login_user(identifier, password)
                break
            except AuthenticationError as e:
                self._prompter.show(f"Error: {e}")
                if not self._confirm("Try again? (y/n): "):
                    return

        self._clear()
        self._prompter.show(f"Welcome, {user.fullname}!")
        self._menu_loop(
            "USER DASHBOARD",
            [
                ("1", "View Cars", self._view_cars),
                ("2", "Rent a Car", self._rent_car),
                ("3", "Rental History", self._own_history),
                ("4", "Account Settings", self._account_settings),
                ("5", "Logout", None),
            ],
        )
        self._session.logout()
        self._prompter.show("Logged out.")

    def _admin_login(self) -> None:
        """Log the administrator in (with retries) and run the admin dashboard."""
        while True:
            username = self._prompter.ask("Enter Admin Username: ")
            password = self._prompter.ask("Enter Admin Password: ", secret=True)
            try:
                self._session.login_admin(username, password)
                break
            except AuthenticationError as e:
                self._prompter.show(f"Error: {e}")
                if not self._confirm("Try again? (y/n): "):
                    return

        self._clear()
        self._menu_loop(
            "ADMIN DASHBOARD",
            [
                ("1", "View Cars", self._view_cars),
                ("2", "Manage Cars", self._manage_cars),
                ("3", "View Users", self._view_users),
                ("4", "Manage Users", self._manage_users),
                ("5", "Rental Log", self._rental_log),
                ("6", "Activity Log", self._activity_log),
                ("7", "Exit", None),
            ],
        )
        self._session.logout()
        self._prompter.show("Logged out.")

    # -- Shared screens --------------------------------------------------

    def _view_cars(self) -> None:
        self._prompter.show(format_cars(self._system.cars.list_cars()))

    # -- User dashboard --------------------------------------------------

    def _rent_car(self) -> None:
        """Pick an available car, enter dates, confirm, and record the rental."""
        desk = self._system.rentals
        available = desk.available_cars()
        if not available:
            self._prompter.show("No cars are available right now.")
            return
        self._prompter.show(format_cars(available))
        selection = self._ask_number("Select a car number (0 to cancel): ")
        if selection is None:
            return
        if selection == 0:
            self._prompter.show("Rental cancelled.")
            return
        if not 1 <= selection <= len(available):
            self._prompter.show(f"Error: choose a car between 1 and {len(available)}")
            return

        pickup = self._prompter.ask("Enter pickup date (YYYY-MM-DD): ").strip()
        return_ = self._prompter.ask("Enter return date (YYYY-MM-DD): ").strip()
        days, total = desk.quote(available[selection - 1], pickup, return_)
        self._prompter.show(f"Rental for {days} day(s). Total cost: {total:.2f}")
        if not self._confirm("Confirm rental? (y/n): "):
            self._prompter.show("Rental cancelled.")
            return

        username = self._session.username or ""
        try:
            rental = desk.rent_car(username, selection, pickup, return_)
        except RentalCancelledError:
            self._prompter.show("Rental cancelled.")
            return
        self._prompter.show("Car rented successfully!\n" + format_rentals([rental]))

    def _own_history(self) -> None:
        username = self._session.username or ""
        self._prompter.show(format_rentals(self._system.rentals.history(username)))

    def _account_settings(self) -> None:
        """Let the logged-in user change one of their own fields."""
        user = self._session.current_user
        if user is None:
            return
        self._prompter.show(format_user(user))
        updated = self._update_user_field(user.username)
        if updated is not None:
            self._session.refresh(updated)

    # -- Admin dashboard -------------------------------------------------

    def _view_users(self) -> None:
        self._prompter.show(format_users(self._system.users.list_users()))

    def _rental_log(self) -> None:
        name = self._prompter.ask("Filter by username (blank for all): ").strip()
        rentals = self._system.rentals.history(name or None)
        self._prompter.show(format_rentals(rentals))

    def _activity_log(self) -> None:
        name = self._prompter.ask("Filter by username (blank for all): ").strip()
        entries = self._system.logger.filter(min_level=LogLevel.INFO, username=name or None)
        self._prompter.show("\n".join(str(e) for e in entries) or "No activity yet.")

    def _manage_cars(self) -> None:
        self._menu_loop(
            "MANAGE CARS",
            [
                ("1", "Update Car", self._update_car),
                ("2", "Remove Car", self._remove_car),
                ("3", "Add Car", self._add_car),
                ("0", "Back", None),
            ],
        )

    def _manage_users(self) -> None:
        self._menu_loop(
            "MANAGE USERS",
            [
                ("1", "Update User", self._update_user),
                ("2", "Remove User", self._remove_user),
                ("3", "Add User", self._add_user),
                ("0", "Back", None),
            ],
        )

    def _add_car(self) -> None:
        """Read a new car's fields and append it to the catalog."""
        model = self._prompter.ask("Enter Model Name: ")
        company = self._prompter.ask("Enter Company: ")
        year = parse_int(self._prompter.ask("Enter Year: "), label="Year")
        rate = parse_float(self._prompter.ask("Enter Rental Rate per day: "), label="Rate")
        capacity = parse_int(self._prompter.ask("Enter Passenger Capacity: "), label="Capacity")
        efficiency = parse_float(
            self._prompter.ask("Enter Fuel Efficiency (km/l): "), label="Efficiency"
        )
        color = self._prompter.ask("Enter Color: ")
        car = Car(
            model=model,
            company=company,
            year=year,
            rate=rate,
            capacity=capacity,
            efficiency=efficiency,
            color=color,
        )
        self._system.cars.add_car(car)
        self._prompter.show(f"Car '{car.model}' added.")

    def _update_car(self) -> None:
        model = self._prompter.ask("Enter the model name of the car to update: ")
        if self._system.cars.find_car(model) is None:
            self._prompter.show(f"Error: Car '{model}' not found")
            return
        field = self._choose_field(list(CarField))
        if field is None:
            return
        value = self._prompter.ask(f"Enter new {field.value}: ")
        updated = self._system.cars.update_car(model, field, value)
        self._prompter.show("Car updated.\n" + format_cars([updated]))

    def _remove_car(self) -> None:
        """Remove the car the admin picks from a numbered listing."""
        cars = self._system.cars.list_cars()
        self._prompter.show(format_cars(cars))
        if not cars:
            return
        number = self._ask_number("Select the car number to remove (0 to cancel): ")
        if number is None or number == 0:
            return
        if not 1 <= number <= len(cars):
            self._prompter.show(f"Error: choose a car between 1 and {len(cars)}")
            return
        car = cars[number - 1]
        self._system.cars.remove_car(number - 1, car)
        self._prompter.show(f"Car '{car.model}' removed.")

    def _update_user(self) -> None:
        username = self._prompter.ask("Enter the username to update: ")
        if self._system.users.get_user(username) is None:
            self._prompter.show(f"Error: User '{username}' not found")
            return
        self._update_user_field(username)

    def _update_user_field(self, username: str) -> User | None:
        """Ask which field to change and write the new value."""
        field = self._choose_field(list(UserField))
        if field is None:
            return None
        secret = field is UserField.PASSWORD
        value = self._prompter.ask(f"Enter new {field.value}: ", secret=secret)
        if secret:
            confirm = self._prompter.ask("Retype the password for verification: ", secret=True)
            if not self._system.users.credentials.matches(value, confirm):
                self._prompter.show("Passwords do not match. Nothing changed.")
                return None
        updated = self._system.users.update_user(username, field, value)
        self._prompter.show("User updated.")
        return updated

    def _remove_user(self) -> None:
        username = self._prompter.ask("Enter the username to remove: ")
        if not self._confirm(f"Remove user '{username}'? (y/n): "):
            return
        self._system.users.remove_user(username)
        self._prompter.show(f"User '{username}' removed.")

    def _add_user(self) -> None:
        user, confirm = self._collect_reviewed_user()
        total = self._system.users.register(user, confirm)
        self._prompter.show(f"User '{user.username}' added ({total} registered).")

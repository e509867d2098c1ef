"""
Session state machine for the terminal menu.

    MAIN_MENU -> LOGIN_ROLE_SELECT | REGISTER | EXIT
    LOGIN_ROLE_SELECT -> DASHBOARD (on successful login) | MAIN_MENU
    DASHBOARD -> leaf action -> DASHBOARD ... | Logout -> MAIN_MENU

The logged-in user's role selects the dashboard's action table. Leaf actions
always return to their dashboard; errors raised by the store are reported
and the dashboard carries on.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from rich.console import Console
from rich.markup import escape

from ..core.input_engine import InputEngine
from ..core.validators import is_valid_password, is_valid_username
from ..models import Role, User
from ..services.auth_service import AuthService
from ..services.record_store import RecordStore
from ..utils.exceptions import DuplicateUsername, PetAdoptError
from ..utils.logger import get_logger
from . import admin_actions, user_actions
from .views import menu_panel

logger = get_logger(__name__)


class State(str, Enum):
    MAIN_MENU = "main_menu"
    LOGIN_ROLE_SELECT = "login_role_select"
    REGISTER = "register"
    DASHBOARD = "dashboard"
    EXIT = "exit"


@dataclass(frozen=True)
class DashboardAction:
    label: str
    handler: Optional[Callable[["WorkflowEngine"], None]]  # None logs out


DASHBOARDS: Dict[Role, Tuple[str, List[DashboardAction]]] = {
    Role.ADMIN: (
        "ADMIN DASHBOARD",
        [
            DashboardAction("Add Another Admin", admin_actions.add_admin),
            DashboardAction("Manage User Accounts", admin_actions.manage_users),
            DashboardAction("Manage Pet Records", admin_actions.manage_pets),
            DashboardAction("Process Applications", admin_actions.process_applications),
            DashboardAction("Search Pets", admin_actions.search_pets),
            DashboardAction("Logout", None),
        ],
    ),
    Role.REGULAR_USER: (
        "USER DASHBOARD",
        [
            DashboardAction("Browse Pets", user_actions.browse_pets),
            DashboardAction("Check Application Status", user_actions.check_status),
            DashboardAction("View History", user_actions.view_history),
            DashboardAction("Logout", None),
        ],
    ),
}


class WorkflowEngine:
    """Drives one interactive session against an explicitly owned record store"""

    def __init__(
        self,
        store: RecordStore,
        inputs: InputEngine,
        console: Optional[Console] = None,
        auth: Optional[AuthService] = None,
        interactive: bool = True,
    ):
        self.store = store
        self.inputs = inputs
        self.console = console or inputs.console
        self.auth = auth or AuthService(store)
        # Clears the screen and pauses after each action; off for scripted sessions
        self.interactive = interactive
        self.session: Optional[User] = None
        self.state = State.MAIN_MENU

        self._handlers: Dict[State, Callable[[], State]] = {
            State.MAIN_MENU: self._main_menu,
            State.LOGIN_ROLE_SELECT: self._login_role_select,
            State.REGISTER: self._register,
            State.DASHBOARD: self._dashboard,
        }

    # ------------------------------------------------------------------ helpers

    def say(self, message: str, style: Optional[str] = None) -> None:
        if style:
            self.console.print(f"[{style}]{escape(message)}[/{style}]")
        else:
            self.console.print(escape(message))

    def choose(self, prompt: str, minimum: int, maximum: int) -> Optional[int]:
        """Numeric menu choice, or None when the retry budget ran out"""
        result = self.inputs.acquire_int(prompt, minimum, maximum)
        return result.value if result.ok else None

    def confirm(self, question: str) -> bool:
        return self.choose(f"{question} (1=Yes, 0=No): ", 0, 1) == 1

    def show_menu(self, title: str, options: List[Tuple[str, str]]) -> None:
        if self.interactive:
            self.console.clear()
        self.console.print(menu_panel(title, options))

    def is_logged_in_as(self, user: User) -> bool:
        """True only for the stored record backing the session, not just a matching name"""
        return self.session is not None and self.session == user

    def pause(self) -> None:
        if self.interactive:
            self.inputs.read_line("\nPress Enter to continue...")

    # ------------------------------------------------------------------ state loop

    def run(self) -> None:
        for error in self.store.load_errors:
            self.say(f"Warning: {error}", "yellow")
        while self.state is not State.EXIT:
            self.state = self.step()
        self.say("Exiting system...", "yellow")

    def step(self) -> State:
        return self._handlers[self.state]()

    def _main_menu(self) -> State:
        self.show_menu("PET ADOPTION SYSTEM", [("1", "Login"), ("2", "Register"), ("3", "Exit")])
        choice = self.choose("Enter choice: ", 1, 3)
        if choice == 1:
            return State.LOGIN_ROLE_SELECT
        if choice == 2:
            return State.REGISTER
        if choice == 3:
            return State.EXIT
        return State.MAIN_MENU

    def _login_role_select(self) -> State:
        self.show_menu("LOGIN", [("1", "Admin"), ("2", "User"), ("0", "Back to main menu")])
        choice = self.choose("Select role: ", 0, 2)
        if not choice:
            return State.MAIN_MENU
        role = Role.ADMIN if choice == 1 else Role.REGULAR_USER
        user = self.login(role)
        if user is None:
            return State.MAIN_MENU
        self.session = user
        return State.DASHBOARD

    def login(self, role: Role) -> Optional[User]:
        while True:
            username = self.inputs.acquire(
                "Username (or '0' to cancel): ", is_valid_username, "Invalid username format"
            )
            if not username.ok:
                return None
            password = self.inputs.read_secret("Password (or '0' to cancel): ")
            if password == "0":
                return None

            try:
                user = self.auth.authenticate(username.value, password, role)
            except PetAdoptError as e:
                self._report(e, "login")
                return None
            if user is not None:
                self.say("Login successful!", "bold green")
                return user

            self.say("Invalid credentials or role mismatch.", "red")
            if self.choose("1. Try again  0. Back to menu: ", 0, 1) != 1:
                return None

    def _register(self) -> State:
        self.show_menu("REGISTRATION", [("0", "Cancel at any prompt")])
        self.say("Only regular user registration is allowed.")
        self.say("Admin accounts must be created by an administrator.")

        while True:
            username = self.inputs.acquire(
                "Enter username (4-20 letters, digits or spaces, '0' to cancel): ",
                is_valid_username,
                "Invalid username format",
            )
            if not username.ok:
                return State.MAIN_MENU
            if self.store.find_user(username.value) is not None:
                self.say("Username already exists!", "red")
                if self.choose("1. Try another username  0. Back to menu: ", 0, 1) == 1:
                    continue
                return State.MAIN_MENU

            password = self.inputs.read_secret("Enter password: ")
            if password == "0":
                return State.MAIN_MENU
            if not is_valid_password(password):
                self.say("Invalid password!", "red")
                if self.choose("1. Try again  0. Back to menu: ", 0, 1) == 1:
                    continue
                return State.MAIN_MENU

            try:
                self.store.add_user(username.value, password, Role.REGULAR_USER)
            except DuplicateUsername as e:
                self._report(e, "register")
                continue
            except PetAdoptError as e:
                self._report(e, "register")
                self.pause()
                return State.MAIN_MENU

            self.say("Registration successful!", "bold green")
            self.pause()
            return State.MAIN_MENU

    def _dashboard(self) -> State:
        if self.session is None:
            return State.MAIN_MENU

        title, actions = DASHBOARDS[self.session.role]
        options = [(str(i), action.label) for i, action in enumerate(actions, 1)]
        self.show_menu(f"{title} - {self.session.username}", options)

        choice = self.choose("Enter choice: ", 1, len(actions))
        if choice is None:
            return State.DASHBOARD

        action = actions[choice - 1]
        if action.handler is None:
            self.say("Logging out...", "yellow")
            logger.info("Logout", username=self.session.username)
            self.session = None
            return State.MAIN_MENU

        self.run_action(action)
        self.pause()
        return State.DASHBOARD

    def run_action(self, action: DashboardAction) -> None:
        """Run one leaf action; store errors end the action, never the session"""
        try:
            action.handler(self)
        except PetAdoptError as e:
            self._report(e, action.label)

    def _report(self, error: PetAdoptError, action: str) -> None:
        self.say(str(error), "bold red")
        logger.warning(
            "Action failed",
            action=action,
            error_type=type(error).__name__,
            error=str(error),
        )

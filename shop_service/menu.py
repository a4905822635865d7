import logging
from enum import Enum
from typing import Any, Callable, List, Optional

from .config import Settings
from .roles import Role, open_role
from .schemas import OperationResult

logger = logging.getLogger(__name__)

MENU = (
    "1. Login as Admin\n"
    "2. Login as Manager\n"
    "3. Login as Customer\n"
    "4. Exit"
)
INVALID_CHOICE = "Invalid choice. Please try again."
EXIT_CHOICE = 4


class MenuState(str, Enum):
    SHOWING_MENU = "showing_menu"
    RUNNING = "running"
    EXITED = "exited"


def admin_demo(admin) -> List[OperationResult]:
    return [
        admin.add_product("Product1", 99.99, 100),
        admin.delete_product(1),
    ]


def manager_demo(manager) -> List[OperationResult]:
    return [manager.approve_order(1)]


def customer_demo(customer) -> List[OperationResult]:
    return [
        customer.create_order(),
        customer.add_to_order(1, 101, 2),
    ]


# Menu choice -> (role name, demonstration sequence)
DEMOS = {
    1: ("admin", admin_demo),
    2: ("manager", manager_demo),
    3: ("customer", customer_demo),
}


class MenuDispatcher:
    """Numeric console menu that logs in as a role and runs its demo sequence"""

    def __init__(
        self,
        settings: Settings,
        read: Optional[Callable[[], str]] = None,
        write: Callable[[str], Any] = print,
        role_factory: Callable[..., Role] = open_role,
    ):
        self.settings = settings
        self.read = read or input
        self.write = write
        self.role_factory = role_factory
        self.state = MenuState.SHOWING_MENU

    def run(self) -> None:
        while self.state != MenuState.EXITED:
            self.step()

    def step(self) -> MenuState:
        """Show the menu, read one choice and act on it"""
        self.write(MENU)
        try:
            line = self.read()
        except EOFError:
            logger.info("End of input, leaving menu")
            self.state = MenuState.EXITED
            return self.state

        try:
            choice = int(line.strip())
        except ValueError:
            choice = None

        if choice == EXIT_CHOICE:
            logger.info("Exit selected")
            self.state = MenuState.EXITED
        elif choice in DEMOS:
            self.state = MenuState.RUNNING
            try:
                self.run_demo(choice)
            finally:
                self.state = MenuState.SHOWING_MENU
        else:
            logger.warning(f"Invalid menu choice: {line!r}")
            self.write(INVALID_CHOICE)
            self.state = MenuState.SHOWING_MENU
        return self.state

    def run_demo(self, choice: int) -> List[OperationResult]:
        role_name, demo = DEMOS[choice]
        logger.info(f"Running {role_name} demo")
        with self.role_factory(role_name, self.settings, echo=self.write) as role:
            results = demo(role)
        for result in results:
            if not result.ok:
                self.write(f"Operation failed: {result.operation} ({result.error})")
        return results

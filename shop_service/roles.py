import logging
from typing import Any, Callable, Optional, Sequence

from .config import Settings
from .database import DatabaseConnection
from .exceptions import QueryError
from .schemas import OperationResult

logger = logging.getLogger(__name__)

SELECT_ORDER_STATUS = "SELECT status FROM orders WHERE order_id = $1"
INSERT_ORDER = "INSERT INTO orders (status) VALUES ($1)"
UPDATE_ORDER_STATUS = "UPDATE orders SET status = $1 WHERE order_id = $2"
INSERT_PRODUCT = "INSERT INTO products (name, price, stock_quantity) VALUES ($1, $2, $3)"
DELETE_PRODUCT = "DELETE FROM products WHERE product_id = $1"
INSERT_ORDER_ITEM = "INSERT INTO order_items (order_id, product_id, quantity) VALUES ($1, $2, $3)"
DELETE_ORDER_ITEM = "DELETE FROM order_items WHERE order_id = $1 AND product_id = $2"


class Role:
    """Order operations shared by every role.

    A role owns one :class:`DatabaseConnection`. Each operation prints a
    status line, runs exactly one statement and returns an
    :class:`OperationResult`; a :class:`QueryError` is logged and turned
    into a failed result instead of being raised.
    """

    name = "user"
    title = "User"

    def __init__(self, connection: DatabaseConnection, echo: Callable[[str], Any] = print):
        self.connection = connection
        self.echo = echo

    def view_order_status(self, order_id: int) -> OperationResult:
        self.echo(f"Viewing status of order ID {order_id} as {self.title}.")
        result = self._query("view_order_status", "Error viewing order status", SELECT_ORDER_STATUS, [order_id])
        if result.ok:
            if result.rows:
                self.echo(f"Order ID {order_id} status: {result.rows[0][0]}")
            else:
                self.echo(f"Order ID {order_id} not found.")
        return result

    def create_order(self) -> OperationResult:
        self.echo(f"{self.title} creates a new order.")
        return self._non_query("create_order", "Error creating order", INSERT_ORDER, ["pending"])

    def cancel_order(self, order_id: int) -> OperationResult:
        self.echo(f"{self.title} cancels order ID {order_id}")
        return self._non_query("cancel_order", "Error canceling order", UPDATE_ORDER_STATUS, ["canceled", order_id])

    def return_order(self, order_id: int) -> OperationResult:
        self.echo(f"{self.title} returns order ID {order_id}")
        return self._non_query("return_order", "Error returning order", UPDATE_ORDER_STATUS, ["returned", order_id])

    def close(self) -> None:
        self.connection.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _query(self, operation: str, context: str, statement: str, params: Sequence[Any]) -> OperationResult:
        try:
            rows = self.connection.execute_query(statement, params)
        except QueryError as e:
            logger.error(f"{context}: {e}")
            return OperationResult.failure(operation, self.name, e)
        logger.info(f"{self.title} {operation} returned {len(rows)} row(s)")
        return OperationResult(operation=operation, role=self.name, rows=rows)

    def _non_query(self, operation: str, context: str, statement: str, params: Sequence[Any]) -> OperationResult:
        try:
            rowcount = self.connection.execute_non_query(statement, params)
        except QueryError as e:
            logger.error(f"{context}: {e}")
            return OperationResult.failure(operation, self.name, e)
        logger.info(f"{self.title} {operation} affected {rowcount} row(s)")
        return OperationResult(operation=operation, role=self.name, rowcount=rowcount)


class Admin(Role):
    name = "admin"
    title = "Admin"

    def add_product(self, name: str, price: float, stock: int) -> OperationResult:
        self.echo(f"Admin adds a new product: {name}")
        return self._non_query("add_product", "Error adding product", INSERT_PRODUCT, [name, price, stock])

    def delete_product(self, product_id: int) -> OperationResult:
        self.echo(f"Admin deletes product with ID: {product_id}")
        return self._non_query("delete_product", "Error deleting product", DELETE_PRODUCT, [product_id])


class Manager(Role):
    name = "manager"
    title = "Manager"

    def approve_order(self, order_id: int) -> OperationResult:
        self.echo(f"Manager approves order ID {order_id}")
        return self._non_query("approve_order", "Error approving order", UPDATE_ORDER_STATUS, ["approved", order_id])


class Customer(Role):
    name = "customer"
    title = "Customer"

    def add_to_order(self, order_id: int, product_id: int, quantity: int) -> OperationResult:
        self.echo(f"Customer adds product ID {product_id} to order ID {order_id}")
        return self._non_query(
            "add_to_order",
            "Error adding product to order",
            INSERT_ORDER_ITEM,
            [order_id, product_id, quantity],
        )

    def remove_from_order(self, order_id: int, product_id: int) -> OperationResult:
        self.echo(f"Customer removes product ID {product_id} from order ID {order_id}")
        return self._non_query(
            "remove_from_order",
            "Error removing product from order",
            DELETE_ORDER_ITEM,
            [order_id, product_id],
        )


ROLE_CLASSES = {cls.name: cls for cls in (Admin, Manager, Customer)}


def open_role(role: str, settings: Settings, echo: Optional[Callable[[str], Any]] = None) -> Role:
    """Connect with the role's credentials and return the role object.

    Raises DatabaseConnectionError when the database cannot be opened.
    """
    role_class = ROLE_CLASSES.get(role)
    if role_class is None:
        raise ValueError(f"Unknown role: {role}")
    connection = DatabaseConnection(settings.role_url(role))
    logger.info(f"Logged in as {role_class.title}")
    if echo is None:
        return role_class(connection)
    return role_class(connection, echo=echo)

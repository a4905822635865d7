class ShopError(Exception):
    """Base class for shop service errors"""


class DatabaseConnectionError(ShopError):
    """The database could not be opened"""


class QueryError(ShopError):
    """A statement failed to execute"""

    def __init__(self, message: str, statement: str = None):
        super().__init__(message)
        self.statement = statement

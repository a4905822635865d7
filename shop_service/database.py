import re
import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from .exceptions import DatabaseConnectionError, QueryError

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\$(\d+)")


def create_db_engine(database_url: str):
    # One physical connection per wrapper, never pooled
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url, poolclass=NullPool, connect_args={"check_same_thread": False}
        )
    return create_engine(database_url, poolclass=NullPool)


def bind_statement(statement: str, params: Optional[Sequence[Any]] = None):
    """Turn a ``$1``-style statement and positional params into a bound ``text()`` clause.

    Every parameter is sent as text, so ``9.99`` binds as ``"9.99"``.
    """
    params = list(params or [])
    clause = text(_PLACEHOLDER.sub(lambda m: f":p{m.group(1)}", statement))
    bound: Dict[str, str] = {f"p{i}": str(value) for i, value in enumerate(params, start=1)}
    return clause, bound


def _render(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


class DatabaseConnection:
    """A single database connection with parameterized statement helpers.

    The connection is opened in the constructor and stays open until
    :meth:`close` (or the end of a ``with`` block).
    """

    def __init__(self, database_url: str):
        self.engine = None
        self._connection = None
        self._transaction = None
        try:
            self.engine = create_db_engine(database_url)
            self._connection = self.engine.connect()
        except (SQLAlchemyError, ImportError) as e:
            logger.error(f"Failed to connect to database: {e}")
            if self.engine is not None:
                self.engine.dispose()
            raise DatabaseConnectionError(f"Failed to connect to database: {e}") from e
        logger.info("Connection to database established.")

    @property
    def closed(self) -> bool:
        return self._connection is None or self._connection.closed

    @property
    def in_transaction(self) -> bool:
        return self._transaction is not None

    def execute_query(self, statement: str, params: Optional[Sequence[Any]] = None) -> List[List[str]]:
        """Run a statement and return its rows with every field rendered as text"""
        clause, bound = bind_statement(statement, params)
        try:
            result = self._connection.execute(clause, bound)
            rows = [[_render(field) for field in row] for row in result]
        except SQLAlchemyError as e:
            logger.error(f"Error executing query: {e}")
            self._end_implicit_transaction()
            raise QueryError(f"Error executing query: {e}", statement) from e
        self._end_implicit_transaction()
        return rows

    def execute_non_query(self, statement: str, params: Optional[Sequence[Any]] = None) -> int:
        """Run a statement for its side effect and return the affected row count.

        The statement gets its own transaction, committed on success and
        rolled back on failure. Inside a manual transaction it joins that
        transaction instead and leaves commit/rollback to the caller.
        """
        clause, bound = bind_statement(statement, params)
        if self._transaction is not None:
            try:
                return self._connection.execute(clause, bound).rowcount
            except SQLAlchemyError as e:
                logger.error(f"Error executing non-query: {e}")
                raise QueryError(f"Error executing non-query: {e}", statement) from e

        txn = None
        try:
            txn = self._connection.begin()
            rowcount = self._connection.execute(clause, bound).rowcount
            txn.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error executing non-query: {e}")
            self._abort(txn)
            raise QueryError(f"Error executing non-query: {e}", statement) from e
        return rowcount

    def begin_transaction(self) -> None:
        if self._transaction is not None:
            raise QueryError("A transaction is already in progress")
        try:
            self._end_implicit_transaction()
            self._transaction = self._connection.begin()
        except SQLAlchemyError as e:
            logger.error(f"Error starting transaction: {e}")
            raise QueryError(f"Error starting transaction: {e}") from e
        logger.info("Transaction started")

    def commit_transaction(self) -> None:
        if self._transaction is None:
            return
        txn, self._transaction = self._transaction, None
        try:
            txn.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error committing transaction: {e}")
            self._abort(txn)
            raise QueryError(f"Error committing transaction: {e}") from e
        logger.info("Transaction committed")

    def rollback_transaction(self) -> None:
        if self._transaction is None:
            return
        txn, self._transaction = self._transaction, None
        try:
            txn.rollback()
        except SQLAlchemyError as e:
            logger.error(f"Error rolling back transaction: {e}")
            raise QueryError(f"Error rolling back transaction: {e}") from e
        logger.info("Transaction rolled back")

    @contextmanager
    def transaction(self):
        """Group several non-queries into one transaction"""
        self.begin_transaction()
        try:
            yield self
        except Exception:
            self.rollback_transaction()
            raise
        self.commit_transaction()

    def close(self) -> None:
        if self.closed:
            return
        if self._transaction is not None:
            self.rollback_transaction()
        self._connection.close()
        self.engine.dispose()
        logger.info("Connection to database closed.")

    def _abort(self, txn) -> None:
        # The original error is what gets raised; a failed rollback is only logged
        if txn is None or not txn.is_active:
            return
        try:
            txn.rollback()
        except SQLAlchemyError as e:
            logger.error(f"Error rolling back transaction: {e}")

    def _end_implicit_transaction(self) -> None:
        # Reads autobegin a transaction; release it unless a manual one is open
        if self._transaction is None and self._connection.in_transaction():
            self._connection.rollback()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

import pytest

from shop_service.config import ROLE_NAMES, RoleCredentials, Settings
from shop_service.database import DatabaseConnection
from shop_service.exceptions import QueryError
from shop_service.models import init_db


class RecordingConnection:
    """Stands in for DatabaseConnection and remembers every statement it receives"""

    def __init__(self, rows=None, fail_with=None):
        self.rows = rows or []
        self.fail_with = fail_with
        self.calls = []
        self.closed = False

    def execute_query(self, statement, params=None):
        self.calls.append(("query", statement, [str(p) for p in params or []]))
        if self.fail_with:
            raise QueryError(self.fail_with, statement)
        return self.rows

    def execute_non_query(self, statement, params=None):
        self.calls.append(("non_query", statement, [str(p) for p in params or []]))
        if self.fail_with:
            raise QueryError(self.fail_with, statement)
        return 1

    def close(self):
        self.closed = True


def make_input(*lines):
    it = iter(lines)

    def read():
        try:
            return next(it)
        except StopIteration:
            raise EOFError
    return read


@pytest.fixture
def db_url(tmp_path):
    url = f"sqlite:///{tmp_path / 'shop.db'}"
    init_db(url)
    return url


@pytest.fixture
def bare_db_url(tmp_path):
    """A database file with no tables in it"""
    return f"sqlite:///{tmp_path / 'empty.db'}"


@pytest.fixture
def settings(db_url, tmp_path):
    return Settings(
        database_url=db_url,
        credentials={role: RoleCredentials(user=role, password=role) for role in ROLE_NAMES},
        log_file=str(tmp_path / "shop.log"),
    )


@pytest.fixture
def connection(db_url):
    conn = DatabaseConnection(db_url)
    yield conn
    conn.close()


@pytest.fixture
def recording():
    return RecordingConnection()

"""
Shared fixtures and fakes for builder tests.

Key fixtures:
- fake_connection: a FakeConnection that records prepared statements.
- connection_factory: the FakeConnection class, for custom failure setups.
- select_factory: builds Select instances with the deterministic 'p' namespace.
"""

import pytest

from fluent_sql import FetchMode, Select


class FakeStatement:
    """In-memory PreparedStatement recording binds and cursor releases."""

    def __init__(self, text, rows=None, execute_result=True, last_error=None, row_count=0):
        self.text = text
        self.rows = list(rows or [])
        self.execute_result = execute_result
        self.last_error = last_error
        self._row_count = row_count
        self.binds = []
        self.executed = False
        self.released = 0

    def bind_by_name(self, name, value, param_type):
        self.binds.append((name, value, param_type))

    def execute(self):
        self.executed = True
        return self.execute_result

    def fetch_all(self, mode):
        rows, self.rows = self.rows, []
        return [self._shape(row, mode) for row in rows]

    def fetch_next(self, mode):
        if not self.rows:
            return None
        return self._shape(self.rows.pop(0), mode)

    def row_count(self):
        return self._row_count

    def release_cursor(self):
        self.released += 1

    @staticmethod
    def _shape(row, mode):
        if mode is FetchMode.TUPLE:
            return tuple(row.values())
        return dict(row)


class FakeConnection:
    """In-memory Connection handing out FakeStatements."""

    def __init__(self, rows=None, execute_result=True, last_error=None,
                 row_count=0, insert_id=None, prepare_error=None):
        self.rows = rows
        self.execute_result = execute_result
        self.last_error = last_error
        self.row_count = row_count
        self.insert_id = insert_id
        self.prepare_error = prepare_error
        self.statements = []

    def prepare(self, statement):
        if self.prepare_error is not None:
            raise self.prepare_error
        stmt = FakeStatement(
            statement,
            rows=self.rows,
            execute_result=self.execute_result,
            last_error=self.last_error,
            row_count=self.row_count,
        )
        self.statements.append(stmt)
        return stmt

    def last_insert_id(self):
        return self.insert_id


@pytest.fixture
def fake_connection():
    """Connection returning two user rows."""
    return FakeConnection(rows=[
        {"id": 1, "name": "Ann"},
        {"id": 2, "name": "Bob"},
    ], row_count=2, insert_id=42)


@pytest.fixture
def connection_factory():
    """Factory for FakeConnections with custom behavior."""
    return FakeConnection


@pytest.fixture
def select_factory():
    """Build a Select whose placeholders are :p0, :p1, ..."""
    def factory(sql="T", statement_type="SELECT", **kwargs):
        kwargs.setdefault("uid", "p")
        return Select(sql, statement_type, **kwargs)

    return factory

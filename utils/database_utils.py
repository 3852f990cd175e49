"""
=====================================================
SQLAlchemy implementation of the connection protocol.
=====================================================

Adapts SQLAlchemy 2.x connections to the Connection / PreparedStatement
interface that fluent_sql.Select executes through, and provides the engine
and connection-provider helpers used to wire a builder to a database.

Key Features:
    - Named placeholders bound with bindparam() and a declared type
    - Driver errors caught, logged and reported as a False execute()
    - Statements that return no rows committed automatically (optional)
    - Engine creation and health check from config

Example:
    >>> from fluent_sql import Select
    >>> from utils.database_utils import (
    ...     create_sqlalchemy_engine,
    ...     engine_connection_provider
    ... )
    >>>
    >>> engine = create_sqlalchemy_engine('sqlite:///app.db')
    >>> select = Select('Users', connection_provider=engine_connection_provider(engine))
    >>> if select.eq('status', 'active').execute():
    ...     rows = select.fetch_all_rows()
"""

import logging
from typing import Any, Callable, List, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection as SAConnection
from sqlalchemy.engine import CursorResult, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.expression import bindparam
from sqlalchemy.types import (
    Boolean,
    Float,
    Integer,
    LargeBinary,
    NullType,
    String,
    TypeEngine,
)

from core.config import config
from fluent_sql.parameters import ParamType
from fluent_sql.protocols import FetchMode

logger = logging.getLogger(__name__)

SQLALCHEMY_TYPES = {
    ParamType.STRING: String,
    ParamType.INT: Integer,
    ParamType.BOOL: Boolean,
    ParamType.FLOAT: Float,
    ParamType.NULL: NullType,
    ParamType.LOB: LargeBinary,
}

_default_engine: Optional[Engine] = None


class DatabaseConnectionError(Exception):
    """Exception raised when a database connection cannot be obtained."""
    pass


def sqlalchemy_type(param_type: ParamType, value: Any = None) -> TypeEngine:
    """Map a declared ParamType to a SQLAlchemy type instance.

    Booleans already literalized to 'true' / 'false' stay text even when
    declared as BOOL.
    """
    if param_type is ParamType.BOOL and isinstance(value, str):
        return String()
    return SQLALCHEMY_TYPES[param_type]()


class SQLAlchemyStatement:
    """Prepared statement over a SQLAlchemy text() construct.

    Attributes:
        statement: Statement text as prepared
        last_error: Driver error message of a failed execute(), else None
    """

    def __init__(self, owner: "SQLAlchemyConnection", statement: str):
        self.owner = owner
        self.statement = statement
        self.last_error: Optional[str] = None
        self._clause = text(statement)
        self._binds = []
        self._result: Optional[CursorResult] = None
        self._row_count = 0

    def bind_by_name(self, name: str, value: Any, param_type: ParamType) -> None:
        self._binds.append(bindparam(name, value, type_=sqlalchemy_type(param_type, value)))

    def execute(self) -> bool:
        """Execute the bound statement.

        Returns:
            True if the driver accepted it, False otherwise
        """
        connection = self.owner.connection
        try:
            result = connection.execute(self._clause.bindparams(*self._binds))
            self._row_count = result.rowcount

            if not result.returns_rows:
                self.owner._last_insert_id = result.lastrowid
                if self.owner.autocommit:
                    connection.commit()

            self._result = result
            return True
        except SQLAlchemyError as e:
            self.last_error = str(e)
            logger.debug(f"Statement rejected by driver: {e}")
            if self.owner.autocommit:
                connection.rollback()
            return False

    def fetch_all(self, mode: FetchMode) -> List[Any]:
        if not self._has_rows():
            return []
        if mode is FetchMode.MAPPING:
            return [dict(row) for row in self._result.mappings()]
        return [tuple(row) for row in self._result]

    def fetch_next(self, mode: FetchMode) -> Optional[Any]:
        if not self._has_rows():
            return None
        row = self._result.fetchone()
        if row is None:
            return None
        if mode is FetchMode.MAPPING:
            return dict(row._mapping)
        return tuple(row)

    def row_count(self) -> int:
        """Rows affected by the statement (-1 when the driver cannot tell)."""
        return self._row_count

    def release_cursor(self) -> None:
        if self._result is not None:
            self._result.close()

    def _has_rows(self) -> bool:
        return (
            self._result is not None
            and self._result.returns_rows
            and not self._result.closed
        )


class SQLAlchemyConnection:
    """Connection protocol implementation over a SQLAlchemy Connection.

    Attributes:
        connection: Underlying SQLAlchemy connection
        autocommit: Commit after every statement that returns no rows
    """

    def __init__(self, connection: SAConnection, autocommit: bool = True):
        self.connection = connection
        self.autocommit = autocommit
        self._last_insert_id: Any = None

    def prepare(self, statement: str) -> SQLAlchemyStatement:
        return SQLAlchemyStatement(self, statement)

    def last_insert_id(self) -> Any:
        return self._last_insert_id

    def close(self) -> None:
        self.connection.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def create_sqlalchemy_engine(
    url: Optional[str] = None,
    echo: Optional[bool] = None,
    **engine_kwargs
) -> Engine:
    """
    Create a SQLAlchemy engine from config.

    Args:
        url: Database URL (defaults to config.db.url)
        echo: Enable SQL statement logging (defaults to config.db.echo)
        **engine_kwargs: Passed through to create_engine (pool_size, ...)

    Returns:
        Configured SQLAlchemy Engine
    """
    return create_engine(
        url or config.get_connection_string(),
        echo=config.db.echo if echo is None else echo,
        pool_pre_ping=config.db.pool_pre_ping,
        **engine_kwargs
    )


def engine_connection_provider(
    engine: Engine,
    autocommit: bool = True
) -> Callable[[], SQLAlchemyConnection]:
    """
    Build a connection provider that checks a connection out of engine.

    Raises (from the provider):
        DatabaseConnectionError: If the engine cannot connect
    """
    def provider() -> SQLAlchemyConnection:
        try:
            return SQLAlchemyConnection(engine.connect(), autocommit=autocommit)
        except SQLAlchemyError as e:
            raise DatabaseConnectionError(f"Could not connect to {engine.url}: {e}") from e

    return provider


def get_default_engine() -> Engine:
    """Engine for config.db.url, created on first use and then shared."""
    global _default_engine
    if _default_engine is None:
        _default_engine = create_sqlalchemy_engine()
    return _default_engine


def default_connection_provider() -> SQLAlchemyConnection:
    """Connection provider backed by the shared default engine."""
    return engine_connection_provider(get_default_engine())()


def check_database_available(engine: Optional[Engine] = None) -> bool:
    """
    Check if the database answers a trivial query.

    Args:
        engine: Engine to check (defaults to the shared default engine)

    Returns:
        True if the database is available, False otherwise
    """
    engine = engine or get_default_engine()
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.debug(f"Database not available: {e}")
        return False

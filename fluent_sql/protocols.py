"""Protocol definitions for the database collaborator.

The builder never talks to a driver directly. It needs a connection that can
prepare statement text and a prepared statement that can bind named values,
execute, and hand back rows. These protocols describe only that surface;
utils.database_utils provides the SQLAlchemy implementation.
"""

from enum import Enum
from typing import Any, Callable, List, Optional, Protocol, runtime_checkable

from fluent_sql.parameters import ParamType


class FetchMode(Enum):
    """Shape of the rows returned by fetch operations."""

    MAPPING = "mapping"
    TUPLE = "tuple"


@runtime_checkable
class PreparedStatement(Protocol):
    """Protocol for a prepared statement and its cursor."""

    def bind_by_name(self, name: str, value: Any, param_type: ParamType) -> None:
        """Bind a value to the named placeholder (without the colon)."""
        ...

    def execute(self) -> bool:
        """Execute the statement, returning True on success."""
        ...

    def fetch_all(self, mode: FetchMode) -> List[Any]:
        """Return every remaining row."""
        ...

    def fetch_next(self, mode: FetchMode) -> Optional[Any]:
        """Return the next row, or None when exhausted."""
        ...

    def row_count(self) -> int:
        """Number of rows affected by the last execution."""
        ...

    def release_cursor(self) -> None:
        """Free the cursor so the connection can run another statement."""
        ...


@runtime_checkable
class Connection(Protocol):
    """Protocol for a live database connection."""

    def prepare(self, statement: str) -> PreparedStatement:
        """Prepare statement text for binding and execution."""
        ...

    def last_insert_id(self) -> Any:
        """Identifier generated by the most recent INSERT."""
        ...


# Supplies a connection on demand, or None when none can be had
ConnectionProvider = Callable[[], Optional[Connection]]

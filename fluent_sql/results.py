"""
=================================
Execution outcome and row access.
=================================

ExecutionResult reports how an execute() call went. It is falsy unless the
statement ran, so callers can keep writing ``if not select.execute():``
while still being able to tell a missing connection from a rejected
statement.

ResultHandle wraps the prepared statement of the last execution. Every read
releases the cursor on the way out, whether the rows were consumed, the
result was empty, or iteration was abandoned early.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, List, Optional

from fluent_sql.protocols import FetchMode, PreparedStatement


class ExecutionStatus(Enum):
    """Outcome of an execute() call."""

    SUCCESS = "success"
    FAILED = "failed"
    NO_CONNECTION = "no_connection"


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of executing a statement.

    Attributes:
        status: SUCCESS, FAILED or NO_CONNECTION
        query: Rendered statement text (empty if rendering never happened)
        reason: Human readable failure reason, None on success
    """

    status: ExecutionStatus
    query: str = ""
    reason: Optional[str] = None

    @classmethod
    def success(cls, query: str) -> "ExecutionResult":
        return cls(ExecutionStatus.SUCCESS, query)

    @classmethod
    def failed(cls, query: str, reason: str) -> "ExecutionResult":
        return cls(ExecutionStatus.FAILED, query, reason)

    @classmethod
    def no_connection(cls, reason: str) -> "ExecutionResult":
        return cls(ExecutionStatus.NO_CONNECTION, "", reason)

    @property
    def ok(self) -> bool:
        return self.status is ExecutionStatus.SUCCESS

    def __bool__(self) -> bool:
        return self.ok


class ResultHandle:
    """Read access to the statement produced by the last execution.

    A handle without a statement (nothing executed yet, or execution never
    reached the driver) answers every read with an empty value.
    """

    def __init__(self, statement: Optional[PreparedStatement] = None):
        self.statement = statement

    def fetch_all(self, mode: FetchMode = FetchMode.MAPPING) -> List[Any]:
        """Return all rows and release the cursor."""
        if self.statement is None:
            return []

        try:
            return list(self.statement.fetch_all(mode))
        finally:
            self.statement.release_cursor()

    def rows(self, mode: FetchMode = FetchMode.MAPPING) -> Iterator[Any]:
        """Yield rows one at a time; single pass, not restartable."""
        if self.statement is None:
            return

        try:
            while True:
                row = self.statement.fetch_next(mode)
                if row is None:
                    break
                yield row
        finally:
            self.statement.release_cursor()

    def row_count(self) -> int:
        if self.statement is None:
            return 0
        return self.statement.row_count()

    def single_item(self) -> Any:
        """First column of the first row, or None when there are no rows."""
        if self.statement is None:
            return None

        try:
            row = self.statement.fetch_next(FetchMode.TUPLE)
        finally:
            self.statement.release_cursor()

        if not row:
            return None
        return row[0]

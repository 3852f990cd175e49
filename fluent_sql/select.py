"""
=========================================
Fluent builder for parameterized queries.
=========================================

Select assembles a SELECT, UPDATE, INSERT or DELETE statement from chained
method calls and runs it as a prepared statement. Field names and raw
sub-expressions are used verbatim; only values are parameterized.

Value predicates (eq, not_eq, like) are skipped when the value is blank, so
optional filters can be passed straight from user input. Booleans are never
skipped and are bound as the strings 'true' / 'false'.

Clause fragments can be set in any order; the rendered text always reads
SET, WHERE, GROUP BY, ORDER BY, LIMIT, OFFSET.

Example:
    >>> from fluent_sql import Select
    >>>
    >>> query = (
    ...     Select('Users')
    ...     .eq('status', 'active')
    ...     .start_or()
    ...     .like('name', 'ann')
    ...     .like('email', 'ann')
    ...     .end_or()
    ...     .order('name')
    ...     .limit(10)
    ... )
    >>> query.get_query()
    >>> # SELECT * FROM `Users` WHERE  status = :param_...0 ...
    >>>
    >>> # Execute against a connection and read the rows
    >>> select = Select('Users', connection=conn).eq('id', 5, ParamType.INT)
    >>> if select.execute():
    ...     rows = select.fetch_all_rows()
"""

from collections.abc import Iterable
from enum import Enum
from typing import Any, Iterator, List, Optional, Union

from core.config import config
from core.logger import get_logger
from fluent_sql.grouping import Conjunction, WhereClause
from fluent_sql.parameters import Parameter, ParameterRegistry, ParamType
from fluent_sql.protocols import Connection, ConnectionProvider, FetchMode
from fluent_sql.results import ExecutionResult, ResultHandle

logger = get_logger(__name__)

ALWAYS_FALSE = " 1 = 0 "


class StatementType(Enum):
    """Kind of statement a Select is seeded with."""

    SELECT = "SELECT"
    UPDATE = "UPDATE"
    INSERT = "INSERT"
    DELETE = "DELETE"


_STATEMENT_TEMPLATES = {
    StatementType.SELECT: "SELECT * FROM `{}`",
    StatementType.UPDATE: "UPDATE `{}`",
    StatementType.INSERT: "INSERT INTO `{}`",
    StatementType.DELETE: "DELETE FROM `{}`",
}


def _is_blank(value: Any) -> bool:
    """True when a value should make an optional predicate disappear."""
    if isinstance(value, bool):
        return False
    if value is None:
        return True
    return str(value).strip() == ""


def _literalize(value: Any) -> Any:
    # Enum-like boolean columns store the words, not 0/1
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


class Select:
    """Fluent, parameterized statement builder.

    Attributes:
        statement: Base statement text (verb and target)
        set_clause: Accumulated SET assignments
        where: WHERE buffer and group stack
        group_by: GROUP BY expression, None until set
        order_by: ORDER BY expression, None until set
        limit_value: LIMIT, None until set with a truthy value
        offset_value: OFFSET, None until set with a truthy value
        registry: Parameters bound so far
        result: Outcome of the last execute(), None before the first one
    """

    def __init__(
        self,
        sql: Optional[str] = None,
        statement_type: Union[StatementType, str] = StatementType.SELECT,
        connection: Optional[Connection] = None,
        connection_provider: Optional[ConnectionProvider] = None,
        uid: Optional[str] = None
    ):
        """Seed the builder.

        Args:
            sql: Table name, or a full statement start for SELECT. A single
                word expands according to statement_type.
            statement_type: SELECT, UPDATE, INSERT or DELETE
            connection: Live connection used by execute()
            connection_provider: Called by execute() when no connection was
                given; may return None
            uid: Placeholder namespace (defaults to a random one)
        """
        if isinstance(statement_type, str):
            statement_type = StatementType(statement_type.upper())

        self.statement = ""
        if sql is not None:
            if statement_type is StatementType.SELECT and len(sql.split(" ")) > 1:
                self.statement = sql
            else:
                self.statement = _STATEMENT_TEMPLATES[statement_type].format(sql)

        self.set_clause = ""
        self.where = WhereClause()
        self.group_by: Optional[str] = None
        self.order_by: Optional[str] = None
        self.limit_value: Optional[int] = None
        self.offset_value: Optional[int] = None

        self.registry = ParameterRegistry(uid)
        self.connection = connection
        self.connection_provider = connection_provider

        self.result: Optional[ExecutionResult] = None
        self._handle = ResultHandle()

    # ------------------------------------------------------------------
    # Grouping
    # ------------------------------------------------------------------

    def start_and(self) -> "Select":
        """Open a group whose predicates are joined with AND."""
        self.where.start_group(Conjunction.AND)
        return self

    def start_or(self) -> "Select":
        """Open a group whose predicates are joined with OR."""
        self.where.start_group(Conjunction.OR)
        return self

    def end_and(self) -> "Select":
        self.where.end_group()
        return self

    def end_or(self) -> "Select":
        self.where.end_group()
        return self

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    def eq(self, field: str, value: Any, param_type: ParamType = ParamType.STRING) -> "Select":
        """Add ``field = value``; skipped when value is blank."""
        return self._compare(field, "=", value, param_type)

    def not_eq(self, field: str, value: Any, param_type: ParamType = ParamType.STRING) -> "Select":
        """Add ``field != value``; skipped when value is blank."""
        return self._compare(field, "!=", value, param_type)

    def _compare(self, field: str, op: str, value: Any, param_type: ParamType) -> "Select":
        if _is_blank(value):
            return self
        placeholder = self.registry.bind(_literalize(value), param_type)
        self.where.add(f" {field} {op} {placeholder} ")
        return self

    def eq_die(self, field: str, value: Any, param_type: ParamType = ParamType.STRING) -> "Select":
        """Like eq(), but a blank value makes the statement match no rows.

        Used for required filters: a missing value must not turn into
        "match everything".
        """
        if _is_blank(value):
            logger.debug(f"Required filter on {field} is blank, forcing empty result")
            self.where.add(ALWAYS_FALSE)
            return self
        return self.eq(field, value, param_type)

    def eq_null(self, field: str) -> "Select":
        self.where.add(f" {field} IS NULL ")
        return self

    def eq_not_null(self, field: str) -> "Select":
        self.where.add(f" {field} IS NOT NULL ")
        return self

    def like(self, field: str, value: Any, param_type: ParamType = ParamType.STRING) -> "Select":
        """Add ``field LIKE value``; skipped when value is blank.

        A value without any % is wrapped as %value%.
        """
        if _is_blank(value):
            return self

        value = str(_literalize(value))
        if "%" not in value:
            value = f"%{value}%"
        self.where.add(f" {field} LIKE {self.registry.bind(value, param_type)} ")
        return self

    def in_(
        self,
        field: str,
        value: Any,
        param_type: ParamType = ParamType.STRING,
        negate: bool = False
    ) -> "Select":
        """Add ``field IN (...)`` (or ``NOT IN`` when negate is set).

        value may be:
            - a sequence of scalars, each bound separately
            - another Select, embedded as a sub-select with its parameters
              merged into this one
            - a raw SQL string, embedded as-is with no parameterization;
              never pass user input this way

        An empty sequence makes IN match nothing and NOT IN is skipped.
        """
        if isinstance(value, Select):
            inner = value.get_query()
            self.registry.merge(value.get_params())
        elif isinstance(value, str):
            inner = value
        elif isinstance(value, Iterable) and not isinstance(value, (bytes, bytearray)):
            placeholders = self.registry.bind_many(value, param_type)
            if not placeholders:
                if not negate:
                    self.where.add(ALWAYS_FALSE)
                return self
            inner = ", ".join(placeholders)
        else:
            raise TypeError(
                f"in_() expects a sequence of values, a Select or a string, "
                f"got {type(value).__name__}"
            )

        keyword = "NOT" if negate else ""
        self.where.add(f" {field} {keyword} IN ({inner}) ")
        return self

    def not_in(self, field: str, value: Any, param_type: ParamType = ParamType.STRING) -> "Select":
        return self.in_(field, value, param_type, negate=True)

    # ------------------------------------------------------------------
    # Assignments and trailing clauses
    # ------------------------------------------------------------------

    def set(self, field: str, value: Any, param_type: ParamType = ParamType.STRING) -> "Select":
        """Add ``field = value`` to the SET clause. Always binds."""
        if self.set_clause != "":
            self.set_clause += ","
        self.set_clause += f" {field} = {self.registry.bind(value, param_type)}"
        return self

    def group(self, group_by: str) -> "Select":
        self.group_by = group_by
        return self

    def order(self, order_by: str) -> "Select":
        self.order_by = order_by
        return self

    def limit(self, limit: Optional[int]) -> "Select":
        """Set LIMIT; a falsy value leaves it unchanged."""
        if limit:
            self.limit_value = limit
        return self

    def offset(self, offset: Optional[int]) -> "Select":
        """Set OFFSET; a falsy value leaves it unchanged."""
        if offset:
            self.offset_value = offset
        return self

    def page(self, page: int, page_size: int) -> "Select":
        """Set LIMIT/OFFSET for a 1-based page number.

        Raises:
            ValueError: If page or page_size is below 1
        """
        if page < 1 or page_size < 1:
            raise ValueError(f"page and page_size must be >= 1, got {page} and {page_size}")
        return self.limit(page_size).offset((page - 1) * page_size)

    # ------------------------------------------------------------------
    # Rendering and execution
    # ------------------------------------------------------------------

    def get_query(self) -> str:
        """Render the statement text. Open groups are closed in the output."""
        query = self.statement

        if self.set_clause != "":
            query += " SET " + self.set_clause

        where = self.where.closed()
        if where:
            query += " WHERE " + where.text

        if self.group_by is not None:
            query += " GROUP BY " + self.group_by

        if self.order_by is not None:
            query += " ORDER BY " + self.order_by

        if self.limit_value is not None:
            query += f" LIMIT {self.limit_value}"

        if self.offset_value is not None:
            query += f" OFFSET {self.offset_value}"

        return query

    render = get_query

    def get_params(self) -> List[Parameter]:
        return self.registry.params

    def execute(self, debug: Optional[bool] = None) -> Union[ExecutionResult, str]:
        """Run the statement as a prepared statement.

        Args:
            debug: If True, return the rendered text without touching the
                connection. None falls back to config.query.dry_run.

        Returns:
            The rendered text in debug mode, otherwise an ExecutionResult
            that is truthy only if the statement ran. Driver errors are
            logged and reported through the result, never raised.
        """
        if debug is None:
            debug = config.query.dry_run

        if debug:
            return self.get_query()

        if not self._connect():
            logger.error("❌ No database connection available, statement not executed")
            self.result = ExecutionResult.no_connection("no database connection available")
            return self.result

        self.where.close_all()
        query = self.get_query()
        logger.debug(f"Executing: {query}")

        statement = None
        try:
            statement = self.connection.prepare(query)
            for param in self.registry:
                statement.bind_by_name(param.placeholder, param.value, param.param_type)
            executed = statement.execute()
            reason = None
            if not executed:
                reason = getattr(statement, "last_error", None) or "statement execution returned false"
        except Exception as e:
            executed = False
            reason = str(e)

        self._handle = ResultHandle(statement)
        if executed:
            self.result = ExecutionResult.success(query)
        else:
            logger.error(f"❌ Bad query: {query}")
            self.result = ExecutionResult.failed(query, reason)
        return self.result

    def _connect(self) -> bool:
        if self.connection is None and self.connection_provider is not None:
            try:
                self.connection = self.connection_provider()
            except Exception as e:
                logger.error(f"Connection provider failed: {e}")
                self.connection = None
        return self.connection is not None

    # ------------------------------------------------------------------
    # Result access
    # ------------------------------------------------------------------

    def fetch_all_rows(self, mode: FetchMode = FetchMode.MAPPING) -> List[Any]:
        """All rows of the last execution; [] if there is nothing to read."""
        return self._handle.fetch_all(mode)

    def get_rows(self, mode: FetchMode = FetchMode.MAPPING) -> Iterator[Any]:
        """Lazily yield the rows of the last execution."""
        return self._handle.rows(mode)

    def get_row_count(self) -> int:
        return self._handle.row_count()

    def get_single_item(self) -> Any:
        """First column of the first row, handy for COUNT(*) style queries."""
        return self._handle.single_item()

    def get_insert_id(self) -> Any:
        if self.connection is None:
            return None
        return self.connection.last_insert_id()

    def __str__(self) -> str:
        return self.get_query()

    def __repr__(self) -> str:
        return f"Select({self.get_query()!r}, params={len(self.registry)})"

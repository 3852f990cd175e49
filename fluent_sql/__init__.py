"""
=================================================
Fluent, parameterized SQL statement construction.
=================================================

This package builds SELECT/UPDATE/INSERT/DELETE statements from chained
method calls and executes them as prepared statements through a narrow
connection interface.

The package follows a clear organization:
    - select.py: The Select builder (predicates, clauses, execution)
    - grouping.py: WHERE buffer with nested AND/OR groups
    - parameters.py: Placeholder generation and the ordered bind list
    - results.py: ExecutionResult and cursor-safe row access
    - protocols.py: Connection / PreparedStatement interfaces

Architecture:
    - select.py depends on grouping, parameters and results (not vice versa)
    - Drivers are plugged in through protocols.py; utils.database_utils
      provides the SQLAlchemy implementation
    - Values are always bound; field names and raw fragments are trusted

Example:
    >>> from fluent_sql import Select, ParamType
    >>> from utils.database_utils import engine_connection_provider
    >>>
    >>> select = Select('Users', connection_provider=engine_connection_provider(engine))
    >>> select.eq('status', 'active').eq_die('org_id', org_id, ParamType.INT)
    >>> if select.execute():
    ...     for row in select.get_rows():
    ...         print(row['name'])
"""

__version__ = "0.1.0"
__all__ = [
    # Builder
    'Select', 'StatementType',
    # Parameters
    'Parameter', 'ParameterRegistry', 'ParamType',
    # Grouping
    'Conjunction', 'WhereClause',
    # Results and driver interface
    'ExecutionResult', 'ExecutionStatus', 'ResultHandle',
    'Connection', 'ConnectionProvider', 'FetchMode', 'PreparedStatement',
]

from .grouping import Conjunction, WhereClause
from .parameters import Parameter, ParameterRegistry, ParamType
from .protocols import Connection, ConnectionProvider, FetchMode, PreparedStatement
from .results import ExecutionResult, ExecutionStatus, ResultHandle
from .select import Select, StatementType

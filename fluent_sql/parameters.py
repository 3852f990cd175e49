"""
===========================================
Parameter registry for prepared statements.
===========================================

Every value that reaches a statement goes through a ParameterRegistry. The
registry hands out a unique named placeholder per value and keeps the
(placeholder, value, type) triples in the order they were bound, which is
also the order the placeholders appear in the rendered text.

Placeholders are namespaced by an instance identifier so that two builders
living in the same process (for example a sub-select merged into an IN
clause) never produce the same name.

Example:
    >>> registry = ParameterRegistry(uid='p')
    >>> registry.bind('active')
    ':p0'
    >>> registry.bind(42, ParamType.INT)
    ':p1'
    >>> [p.placeholder for p in registry]
    ['p0', 'p1']
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Iterator, List, Optional
from uuid import uuid4

from core.config import config


class ParamType(Enum):
    """Declared type of a bound value, passed through to the driver."""

    STRING = "string"
    INT = "int"
    BOOL = "bool"
    FLOAT = "float"
    NULL = "null"
    LOB = "lob"


@dataclass(frozen=True)
class Parameter:
    """A single bound value.

    Attributes:
        placeholder: Placeholder name without the leading colon
        value: Value bound to the placeholder
        param_type: Declared type used when binding
    """

    placeholder: str
    value: Any
    param_type: ParamType = ParamType.STRING


def generate_uid(prefix: Optional[str] = None) -> str:
    """Build a fresh placeholder namespace (``<prefix><uuid4 hex>``)."""
    if prefix is None:
        prefix = config.query.placeholder_prefix
    return f"{prefix}{uuid4().hex}"


class ParameterRegistry:
    """Ordered store of the parameters bound by one builder.

    Attributes:
        uid: Namespace prepended to every placeholder this registry generates
    """

    def __init__(self, uid: Optional[str] = None):
        self.uid = uid if uid is not None else generate_uid()
        self._counter = 0
        self._params: List[Parameter] = []

    def bind(self, value: Any, param_type: ParamType = ParamType.STRING) -> str:
        """Register a value and return its placeholder token (``:name``).

        Identical values bound twice get two placeholders.
        """
        param = Parameter(self._next_placeholder(), value, param_type)
        self._params.append(param)
        return f":{param.placeholder}"

    def bind_many(
        self,
        values: Iterable[Any],
        param_type: ParamType = ParamType.STRING
    ) -> List[str]:
        """Bind each value in turn and return the placeholder tokens."""
        return [self.bind(value, param_type) for value in values]

    def merge(self, other: Iterable[Parameter]) -> None:
        """Append parameters bound elsewhere, keeping their order and names."""
        self._params.extend(other)

    @property
    def params(self) -> List[Parameter]:
        """Snapshot of the bound parameters in binding order."""
        return list(self._params)

    def _next_placeholder(self) -> str:
        placeholder = f"{self.uid}{self._counter}"
        self._counter += 1
        return placeholder

    def __iter__(self) -> Iterator[Parameter]:
        return iter(list(self._params))

    def __len__(self) -> int:
        return len(self._params)

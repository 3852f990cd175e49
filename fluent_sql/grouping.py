"""
=======================================
WHERE clause buffer with AND/OR groups.
=======================================

WhereClause accumulates predicate fragments and tracks the stack of open
groups. Each frame carries the conjunction (AND/OR) used between the
predicates added while it is on top. The base frame is always AND and is
never popped.

Closing a group that received no predicates erases the group markup
entirely, since ``()`` is not valid SQL.

Example:
    >>> where = WhereClause()
    >>> where.add(' a = :p0 ')
    >>> where.start_group(Conjunction.OR)
    >>> where.add(' b = :p1 ')
    >>> where.add(' c = :p2 ')
    >>> where.end_group()
    >>> where.text
    ' a = :p0 \\n AND ( b = :p1 \\n OR c = :p2)'
"""

import copy
from dataclasses import dataclass
from enum import Enum
from typing import List

from core.logger import get_logger

logger = get_logger(__name__)

GROUP_OPEN = " ("
GROUP_CLOSE = ")"


class Conjunction(Enum):
    """Boolean word placed between predicates of the same group."""

    AND = "AND"
    OR = "OR"


@dataclass
class _Frame:
    mode: Conjunction
    # Buffer length before the group (and its leading conjunction) was opened
    mark: int = 0


class WhereClause:
    """Accumulating WHERE text plus the stack of open groups."""

    def __init__(self):
        self.text = ""
        self._frames: List[_Frame] = [_Frame(Conjunction.AND)]

    @property
    def current_mode(self) -> Conjunction:
        """Conjunction of the innermost open group."""
        return self._frames[-1].mode

    @property
    def depth(self) -> int:
        """Number of frames, including the base frame."""
        return len(self._frames)

    def add(self, fragment: str) -> None:
        """Append a predicate fragment, preceded by a conjunction if needed."""
        self._add_conjunction()
        self.text += fragment

    def start_group(self, mode: Conjunction) -> None:
        """Open a parenthesized group whose predicates are joined by mode."""
        mark = len(self.text)
        self._add_conjunction()
        self.text += GROUP_OPEN
        self._frames.append(_Frame(mode, mark))

    def end_group(self) -> None:
        """Close the innermost group, dropping it if nothing was added."""
        if len(self._frames) == 1:
            logger.warning("⚠️  end group called with no open group, ignoring")
            return

        frame = self._frames.pop()
        if self.text.endswith("("):
            self.text = self.text[:frame.mark]
        else:
            self.text = self.text.rstrip() + GROUP_CLOSE

    def close_all(self) -> None:
        """Close every group above the base frame."""
        if len(self._frames) > 1:
            logger.debug(f"Auto-closing {len(self._frames) - 1} open group(s)")
        while len(self._frames) > 1:
            self.end_group()

    def closed(self) -> "WhereClause":
        """Return a copy with every group closed, leaving this one untouched."""
        clone = copy.copy(self)
        clone._frames = list(self._frames)
        clone.close_all()
        return clone

    def _add_conjunction(self) -> None:
        stripped = self.text.rstrip()
        if stripped and not stripped.endswith("("):
            self.text = f"{stripped} \n {self.current_mode.value}"

    def __bool__(self) -> bool:
        return self.text != ""

    def __str__(self) -> str:
        return self.text

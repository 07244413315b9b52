"""Builder for the WSAPI query syntax.

    where("Name", "contains", "foo").and_("Owner", "=", "/user/1234")

renders as ``((Name contains foo) AND (Owner = /user/1234))``.
"""

from dataclasses import dataclass
from typing import Any, Optional

from rallyrest.util import ref


@dataclass(frozen=True)
class Query:
    """Immutable query expression node."""
    left: Any
    op: str
    right: Any

    def to_query_string(self) -> str:
        left = self.left
        right = self.right
        if isinstance(left, Query):
            left = left.to_query_string()

        if right is None:
            right = "null"
        elif isinstance(right, bool):
            right = "true" if right else "false"
        elif isinstance(right, Query):
            right = right.to_query_string()
        elif ref.is_ref(right):
            right = ref.get_relative(right)
        elif isinstance(right, str) and " " in right:
            right = f'"{right}"'

        return f"({left} {self.op} {right})"

    def and_(self, left: Any, op: Optional[str] = None, right: Any = None) -> "Query":
        return Query(self, "AND", _operand(left, op, right))

    def or_(self, left: Any, op: Optional[str] = None, right: Any = None) -> "Query":
        return Query(self, "OR", _operand(left, op, right))

    def __str__(self) -> str:
        return self.to_query_string()


def _operand(left: Any, op: Optional[str], right: Any) -> Query:
    return left if isinstance(left, Query) else Query(left, op, right)


def where(left: Any, op: str, right: Any) -> Query:
    """Create a comparison expression, e.g. ``where("Name", "=", "Foo")``."""
    return Query(left, op, right)

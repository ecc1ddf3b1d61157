"""
Query Models

A read selects documents either with a query-language string or with a
predicate over one document field. Both are turned into a parameterized
SQL query before they reach the database.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Tuple, Union

from document_operations.doc_ops_exceptions import InvalidQueryError

# Dotted path of plain identifiers, e.g. "address.city"
_FIELD_PATH = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")

QueryParameters = List[Dict[str, Any]]


class Comparator(str, Enum):
    """Comparison operators supported by field predicates."""
    EQ = "="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="


@dataclass(frozen=True)
class RawQuery:
    """A query written in the database's SQL dialect, passed through as-is."""
    text: str

    def to_sql(self) -> Tuple[str, QueryParameters]:
        if not self.text or not self.text.strip():
            raise InvalidQueryError("Query text is empty")
        return self.text, []


@dataclass(frozen=True)
class FieldPredicate:
    """
    Select documents whose field compares to a value.

    Example:
        FieldPredicate("address.city", Comparator.EQ, "Oslo")
        # SELECT * FROM c WHERE c["address"]["city"] = @value
    """
    field: str
    comparator: Comparator
    value: Any

    def to_sql(self) -> Tuple[str, QueryParameters]:
        if not isinstance(self.field, str) or not _FIELD_PATH.match(self.field):
            raise InvalidQueryError(f"Invalid field path: {self.field!r}")
        try:
            comparator = Comparator(self.comparator)
        except ValueError:
            raise InvalidQueryError(f"Unsupported comparator: {self.comparator!r}")

        path = "".join(f'["{part}"]' for part in self.field.split("."))
        query = f"SELECT * FROM c WHERE c{path} {comparator.value} @value"
        return query, [{"name": "@value", "value": self.value}]


Query = Union[RawQuery, FieldPredicate]


def as_query(query: Union[str, Query]) -> Query:
    """Accept a plain string as shorthand for RawQuery."""
    if isinstance(query, (RawQuery, FieldPredicate)):
        return query
    if isinstance(query, str):
        return RawQuery(query)
    raise InvalidQueryError(
        f"Query must be a SQL string, RawQuery or FieldPredicate, got {type(query).__name__}"
    )

"""
Query conditions and their translation into SurrealQL filter clauses.

A condition is one of two shapes:

- `FieldEquals`: a mapping of field name to exact-match value, combined with AND.
- `ConditionList`: an ordered sequence of `Condition(field, value, operator)`
  triples, combined with AND left to right with no grouping.

Values are rendered inline with JSON quoting (compact separators, non-ASCII
kept) so the statements match what the JavaScript client produces.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping, Sequence, Tuple, Union


class Operator(str, Enum):
    EQ = "="
    NE = "!="
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="
    LIKE = "LIKE"
    IN = "IN"
    NOT_IN = "NOT IN"


@dataclass(frozen=True)
class Condition:
    """A single `field <operator> value` predicate."""

    field: str
    value: Any
    operator: Operator = Operator.EQ

    def __post_init__(self) -> None:
        object.__setattr__(self, "operator", Operator(self.operator))


@dataclass(frozen=True)
class FieldEquals:
    values: Mapping[str, Any]


@dataclass(frozen=True)
class ConditionList:
    conditions: Tuple[Condition, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "conditions", tuple(self.conditions))


QueryCondition = Union[FieldEquals, ConditionList]
ConditionLike = Union[
    QueryCondition,
    Mapping[str, Any],
    Sequence[Union[Condition, Mapping[str, Any], Tuple[str, str, Any]]],
]


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return str(value)


def quote(value: Any) -> str:
    """Render a value the way `JSON.stringify` would."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=_json_default)


def _coerce_item(item: Any) -> Condition:
    if isinstance(item, Condition):
        return item
    if isinstance(item, Mapping):
        return Condition(
            field=item["field"],
            value=item.get("value"),
            operator=item.get("operator") or Operator.EQ,
        )
    if isinstance(item, (tuple, list)) and len(item) == 3:
        name, operator, value = item
        return Condition(field=name, value=value, operator=operator)
    raise TypeError(f"Cannot interpret {item!r} as a query condition")


def as_condition(conditions: ConditionLike) -> QueryCondition:
    """
    Coerce caller input into the tagged condition union.

    A mapping becomes `FieldEquals`; a sequence of `Condition` objects,
    `{"field", "operator", "value"}` dicts or `(field, operator, value)` tuples
    becomes `ConditionList`. Tagged values pass through unchanged.
    """
    if isinstance(conditions, (FieldEquals, ConditionList)):
        return conditions
    if isinstance(conditions, Mapping):
        return FieldEquals(dict(conditions))
    if isinstance(conditions, (list, tuple)):
        return ConditionList(tuple(_coerce_item(item) for item in conditions))
    raise TypeError(f"Unsupported condition type: {type(conditions).__name__}")


def _render_like(name: str, value: Any) -> str:
    pattern = str(value)
    if pattern.startswith("%") and pattern.endswith("%"):
        return f"string::contains({name}, {quote(pattern[1:-1])})"
    if pattern.startswith("%"):
        return f"string::ends_with({name}, {quote(pattern[1:])})"
    if pattern.endswith("%"):
        return f"string::starts_with({name}, {quote(pattern[:-1])})"
    return f"{name} = {quote(value)}"


def _render(condition: Condition) -> str:
    operator = condition.operator
    if operator in (Operator.IN, Operator.NOT_IN):
        values = condition.value if isinstance(condition.value, (list, tuple)) else [condition.value]
        rendered = ", ".join(quote(v) for v in values)
        return f"{condition.field} {operator.value} [{rendered}]"
    if operator is Operator.LIKE:
        return _render_like(condition.field, condition.value)
    return f"{condition.field} {operator.value} {quote(condition.value)}"


def build_where_clause(conditions: ConditionLike) -> str:
    """
    Translate a condition into the body of a WHERE clause.

    Example
    -------
        >>> build_where_clause({"age": 25, "name": "Ann"})
        'age = 25 AND name = "Ann"'
        >>> build_where_clause([Condition("email", "%@x.com", Operator.LIKE)])
        'string::ends_with(email, "@x.com")'
    """
    tagged = as_condition(conditions)
    if not (tagged.values if isinstance(tagged, FieldEquals) else tagged.conditions):
        raise ValueError("WHERE clause needs at least one condition")
    if isinstance(tagged, FieldEquals):
        return " AND ".join(f"{key} = {quote(value)}" for key, value in tagged.values.items())
    return " AND ".join(_render(condition) for condition in tagged.conditions)


def build_set_clause(data: Mapping[str, Any]) -> str:
    """Render `key = value` assignments for an UPDATE statement."""
    if not data:
        raise ValueError("SET clause needs at least one field")
    return ", ".join(f"{key} = {quote(value)}" for key, value in data.items())


__all__ = [
    "Condition",
    "ConditionLike",
    "ConditionList",
    "FieldEquals",
    "Operator",
    "QueryCondition",
    "as_condition",
    "build_set_clause",
    "build_where_clause",
    "quote",
]

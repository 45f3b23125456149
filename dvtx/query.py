"""
Query expressions for retrieving multiple records.

A QueryExpression names one logical type, an optional column set, a tree of
filters, orderings, and an optional row limit. Platforms may translate it to
their own query language; ``matches()`` and ``apply()`` give the reference
semantics used by SqlPlatform.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Sequence
from uuid import UUID

from .batch.models import Record, RecordRef
from .errors import InvalidArgumentError


class ConditionOperator(str, Enum):
    EQUAL = "eq"
    NOT_EQUAL = "ne"
    GREATER_THAN = "gt"
    GREATER_EQUAL = "ge"
    LESS_THAN = "lt"
    LESS_EQUAL = "le"
    BEGINS_WITH = "begins_with"
    ENDS_WITH = "ends_with"
    CONTAINS = "contains"
    NULL = "null"
    NOT_NULL = "not_null"


class LogicalOperator(str, Enum):
    AND = "and"
    OR = "or"


def _comparable(value: Any) -> Any:
    # Lookups compare by the referenced id.
    if isinstance(value, RecordRef):
        return value.id
    return value


def _text(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


@dataclass
class Condition:
    attribute: str
    operator: ConditionOperator
    value: Any = None

    def __post_init__(self) -> None:
        if not self.attribute:
            raise InvalidArgumentError("Attribute name cannot be null or empty")
        self.operator = ConditionOperator(self.operator)
        if self.operator not in (ConditionOperator.NULL, ConditionOperator.NOT_NULL) and self.value is None:
            raise InvalidArgumentError(
                f"Condition on {self.attribute!r} with operator {self.operator.value} requires a value"
            )

    def matches(self, attributes: Mapping[str, Any]) -> bool:
        actual = _comparable(attributes.get(self.attribute))
        op = self.operator

        if op == ConditionOperator.NULL:
            return actual is None
        if op == ConditionOperator.NOT_NULL:
            return actual is not None
        if actual is None:
            return False

        expected = _comparable(self.value)
        if isinstance(actual, UUID) and isinstance(expected, str):
            expected = UUID(expected)

        if op == ConditionOperator.EQUAL:
            return actual == expected
        if op == ConditionOperator.NOT_EQUAL:
            return actual != expected
        if op == ConditionOperator.BEGINS_WITH:
            return _text(actual).lower().startswith(_text(expected).lower())
        if op == ConditionOperator.ENDS_WITH:
            return _text(actual).lower().endswith(_text(expected).lower())
        if op == ConditionOperator.CONTAINS:
            return _text(expected).lower() in _text(actual).lower()

        try:
            if op == ConditionOperator.GREATER_THAN:
                return actual > expected
            if op == ConditionOperator.GREATER_EQUAL:
                return actual >= expected
            if op == ConditionOperator.LESS_THAN:
                return actual < expected
            if op == ConditionOperator.LESS_EQUAL:
                return actual <= expected
        except TypeError as exc:
            raise InvalidArgumentError(
                f"Cannot compare {self.attribute!r} value {actual!r} with {expected!r}"
            ) from exc

        raise InvalidArgumentError(f"Unsupported condition operator: {op}")


@dataclass
class FilterExpression:
    operator: LogicalOperator = LogicalOperator.AND
    conditions: List[Condition] = field(default_factory=list)
    filters: List["FilterExpression"] = field(default_factory=list)

    def add_condition(self, attribute: str, operator: ConditionOperator, value: Any = None) -> "FilterExpression":
        self.conditions.append(Condition(attribute, operator, value))
        return self

    def add_filter(self, child: "FilterExpression") -> "FilterExpression":
        self.filters.append(child)
        return self

    def matches(self, attributes: Mapping[str, Any]) -> bool:
        results = [c.matches(attributes) for c in self.conditions]
        results.extend(f.matches(attributes) for f in self.filters)
        if not results:
            return True
        if self.operator == LogicalOperator.OR:
            return any(results)
        return all(results)


@dataclass
class OrderExpression:
    attribute: str
    descending: bool = False


@dataclass
class QueryExpression:
    logical_name: str
    columns: Optional[Sequence[str]] = None  # None means all columns
    criteria: FilterExpression = field(default_factory=FilterExpression)
    orders: List[OrderExpression] = field(default_factory=list)
    top: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.logical_name:
            raise InvalidArgumentError("Query logical name cannot be empty")
        if self.top is not None and self.top <= 0:
            raise InvalidArgumentError("top must be a positive integer (> 0)")

    def add_order(self, attribute: str, descending: bool = False) -> "QueryExpression":
        self.orders.append(OrderExpression(attribute, descending))
        return self

    def matches(self, record: Record) -> bool:
        return record.logical_name == self.logical_name and self.criteria.matches(record.attributes)

    def apply(self, records: Iterable[Record]) -> list[Record]:
        """
        Filter, order, limit and project records of any logical type.

        Orders are applied last-to-first with stable sorts so the first order
        wins. Records missing an ordered attribute sort after the others.
        """
        selected = [r for r in records if self.matches(r)]

        for order in reversed(self.orders):
            present = [r for r in selected if _comparable(r.attributes.get(order.attribute)) is not None]
            missing = [r for r in selected if _comparable(r.attributes.get(order.attribute)) is None]
            present.sort(
                key=lambda r: _comparable(r.attributes[order.attribute]),
                reverse=order.descending,
            )
            selected = present + missing

        if self.top is not None:
            selected = selected[: self.top]

        if self.columns is None:
            return selected
        return [
            Record(
                r.logical_name,
                {k: v for k, v in r.attributes.items() if k in self.columns},
                r.id,
            )
            for r in selected
        ]

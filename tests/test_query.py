from __future__ import annotations

import uuid
from decimal import Decimal

import pytest

from dvtx.batch.models import Record, RecordRef
from dvtx.errors import InvalidArgumentError
from dvtx.query import (
    Condition,
    ConditionOperator,
    FilterExpression,
    LogicalOperator,
    QueryExpression,
)


def _contact(first=None, last=None, **extra) -> Record:
    attributes = dict(extra)
    if first is not None:
        attributes["firstname"] = first
    if last is not None:
        attributes["lastname"] = last
    return Record("contact", attributes, uuid.uuid4())


class TestCondition:
    def test_string_operators_ignore_case(self) -> None:
        attrs = {"name": "Contoso Ltd"}
        assert Condition("name", ConditionOperator.BEGINS_WITH, "con").matches(attrs)
        assert Condition("name", ConditionOperator.ENDS_WITH, "LTD").matches(attrs)
        assert Condition("name", ConditionOperator.CONTAINS, "so l").matches(attrs)
        assert not Condition("name", ConditionOperator.BEGINS_WITH, "ltd").matches(attrs)

    def test_comparisons(self) -> None:
        attrs = {"revenue": Decimal("100")}
        assert Condition("revenue", ConditionOperator.GREATER_THAN, Decimal("99")).matches(attrs)
        assert Condition("revenue", ConditionOperator.GREATER_EQUAL, Decimal("100")).matches(attrs)
        assert Condition("revenue", ConditionOperator.LESS_THAN, Decimal("101")).matches(attrs)
        assert not Condition("revenue", ConditionOperator.LESS_EQUAL, Decimal("99")).matches(attrs)

    def test_missing_attribute_only_matches_null(self) -> None:
        assert Condition("revenue", ConditionOperator.NULL).matches({})
        assert not Condition("revenue", ConditionOperator.NOT_NULL).matches({})
        assert not Condition("revenue", ConditionOperator.NOT_EQUAL, 5).matches({})

    def test_lookup_compares_by_referenced_id(self) -> None:
        account_id = uuid.uuid4()
        attrs = {"parentcustomerid": RecordRef("account", account_id)}
        assert Condition("parentcustomerid", ConditionOperator.EQUAL, account_id).matches(attrs)
        assert Condition("parentcustomerid", ConditionOperator.EQUAL, str(account_id)).matches(attrs)

    def test_value_required_unless_null_check(self) -> None:
        with pytest.raises(InvalidArgumentError, match="requires a value"):
            Condition("name", ConditionOperator.EQUAL)

    def test_attribute_required(self) -> None:
        with pytest.raises(InvalidArgumentError):
            Condition("", ConditionOperator.NULL)

    def test_incomparable_values_raise_invalid_argument(self) -> None:
        with pytest.raises(InvalidArgumentError, match="Cannot compare"):
            Condition("revenue", ConditionOperator.GREATER_THAN, "lots").matches({"revenue": Decimal("1")})


class TestFilterExpression:
    def test_empty_filter_matches_everything(self) -> None:
        assert FilterExpression().matches({})

    def test_and_or_nesting(self) -> None:
        names = FilterExpression(LogicalOperator.OR)
        names.add_condition("firstname", ConditionOperator.BEGINS_WITH, "jo")
        names.add_condition("lastname", ConditionOperator.BEGINS_WITH, "jo")
        root = FilterExpression().add_condition("jobtitle", ConditionOperator.EQUAL, "CTO").add_filter(names)

        assert root.matches({"firstname": "John", "jobtitle": "CTO"})
        assert root.matches({"lastname": "Jones", "jobtitle": "CTO"})
        assert not root.matches({"firstname": "John", "jobtitle": "CEO"})
        assert not root.matches({"firstname": "Ann", "jobtitle": "CTO"})


class TestQueryExpression:
    def test_requires_logical_name_and_positive_top(self) -> None:
        with pytest.raises(InvalidArgumentError):
            QueryExpression("")
        with pytest.raises(InvalidArgumentError, match="top must be a positive integer"):
            QueryExpression("account", top=0)

    def test_apply_skips_other_logical_types(self) -> None:
        records = [_contact("A"), Record("account", {"name": "A"}, uuid.uuid4())]
        assert [r.logical_name for r in QueryExpression("contact").apply(records)] == ["contact"]

    def test_multi_key_ordering_with_missing_values_last(self) -> None:
        records = [
            _contact("Bob", "Smith"),
            _contact("Ann", None),
            _contact("Al", "Smith"),
            _contact("Zed", "Adams"),
        ]
        query = QueryExpression("contact").add_order("lastname").add_order("firstname")

        ordered = query.apply(records)

        assert [r.attributes["firstname"] for r in ordered] == ["Zed", "Al", "Bob", "Ann"]

    def test_descending_order_and_top(self) -> None:
        records = [Record("account", {"revenue": Decimal(v)}, uuid.uuid4()) for v in ("5", "50", "20")]
        query = QueryExpression("account", top=2).add_order("revenue", descending=True)

        assert [r.attributes["revenue"] for r in query.apply(records)] == [Decimal("50"), Decimal("20")]

    def test_columns_project_attributes_and_keep_ids(self) -> None:
        record = _contact("Jane", "Doe", emailaddress1="jane@example.com")
        projected = QueryExpression("contact", columns=["lastname"]).apply([record])

        assert projected[0].attributes == {"lastname": "Doe"}
        assert projected[0].id == record.id
        assert record.attributes["firstname"] == "Jane"

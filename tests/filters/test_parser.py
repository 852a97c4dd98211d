#!/usr/bin/env python3
"""
Tests for the MongoDB-style filter parser.
"""

import pytest

from scoped_filters.filters import (
    FilterCondition, FilterExpression, FilterOperator, InvalidFilterError, MongoFilterParser
)


class TestMongoFilterParser:
    """Test the MongoDB filter parser."""

    def test_empty_filter(self, parser):
        """Test parsing empty filter."""
        expr = parser.parse({})
        assert expr.operator == FilterOperator.AND
        assert expr.conditions == []

    def test_simple_equality(self, parser):
        """A single field parses to a single condition."""
        cond = parser.parse({"foo.attributes.title": "best"})

        assert isinstance(cond, FilterCondition)
        assert cond.field == "foo.attributes.title"
        assert cond.operator == FilterOperator.EQ
        assert cond.value == "best"
        assert not cond.is_nested

    def test_multiple_equalities(self, parser):
        """Test multiple field equalities (implicit AND)."""
        expr = parser.parse({"foo.attributes.title": "best", "foo.updatedAt": 5})

        assert expr.operator == FilterOperator.AND
        assert [c.field for c in expr.conditions] == ["foo.attributes.title", "foo.updatedAt"]

    def test_comparison_operators(self, parser):
        """Two operators on one field join with AND."""
        expr = parser.parse({"foo.attributes.bytes": {"$gte": 5, "$lt": 10}})

        assert expr.operator == FilterOperator.AND
        assert {cond.operator for cond in expr.conditions} == {FilterOperator.GTE, FilterOperator.LT}

    def test_logical_operators(self, parser):
        """Test $and, $or and $not."""
        expr = parser.parse({"$or": [{"a.b": 1}, {"c.d": 2}]})
        assert expr.operator == FilterOperator.OR
        assert all(isinstance(c, FilterCondition) for c in expr.conditions)

        expr = parser.parse({"$not": {"a.b": 1}})
        assert expr.operator == FilterOperator.NOT
        assert len(expr.conditions) == 1

    def test_nested_logical(self, parser):
        """Test nested logical operators."""
        expr = parser.parse({
            "$and": [
                {"foo.updatedAt": 1},
                {"$or": [
                    {"foo.attributes.bytes": {"$gte": 7}},
                    {"foo.attributes.title": "best"}
                ]}
            ]
        })

        or_expr = expr.conditions[1]
        assert isinstance(or_expr, FilterExpression)
        assert or_expr.operator == FilterOperator.OR
        assert len(or_expr.conditions) == 2

    def test_elem_match(self, parser):
        """$elemMatch payloads are parsed into a sub-tree."""
        cond = parser.parse({"alert.attributes.actions": {"$elemMatch": {"actionTypeId": ".server-log"}}})

        assert cond.is_nested
        assert cond.value == FilterCondition("actionTypeId", FilterOperator.EQ, ".server-log")

    def test_elem_match_requires_dict(self, parser):
        with pytest.raises(InvalidFilterError, match="requires a dictionary"):
            parser.parse({"alert.attributes.actions": {"$elemMatch": ["x"]}})

    def test_empty_key(self, parser):
        """An empty key becomes a condition without a field."""
        assert parser.parse({"": "bye"}).field is None

    def test_max_depth_protection(self):
        """Test max depth protection against DoS."""
        parser = MongoFilterParser(max_depth=3)

        parser.parse({"$and": [{"$or": [{"a": 1}, {"b": 2}]}]})

        with pytest.raises(InvalidFilterError, match="depth"):
            parser.parse({"$and": [{"$or": [{"$and": [{"a": 1}]}]}]})

    def test_invalid_operator(self, parser):
        with pytest.raises(InvalidFilterError, match="Unknown operator"):
            parser.parse({"$invalid": "test"})

        with pytest.raises(InvalidFilterError, match="Unknown operator"):
            parser.parse({"a.b": {"$invalid": 1}})

    def test_operator_without_field(self, parser):
        with pytest.raises(InvalidFilterError, match="requires a field"):
            parser.parse({"$gt": 5})

    def test_malformed_logical(self, parser):
        with pytest.raises(InvalidFilterError, match="requires a list"):
            parser.parse({"$and": {"a": 1}})
        with pytest.raises(InvalidFilterError, match="must be dictionaries"):
            parser.parse({"$or": ["a"]})

    def test_parse_text(self, parser):
        assert parser.parse_text('{"foo.attributes.title": "best"}') == parser.parse({"foo.attributes.title": "best"})

    def test_parse_non_dict(self, parser):
        with pytest.raises(InvalidFilterError, match="Expected dict"):
            parser.parse_text('["foo"]')

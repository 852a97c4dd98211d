#!/usr/bin/env python3
"""
Qdrant backend for rewritten filters.
Translates a storage-level expression tree into a Qdrant Filter object.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from qdrant_client.models import (
    Filter, FieldCondition, Range, MatchValue, MatchAny, MatchExcept,
    MatchText, IsEmptyCondition, IsNullCondition, Nested, NestedCondition,
    PayloadField
)

from .base import (
    FilterCondition, FilterExpression, FilterNode,
    FilterOperator, UnsupportedOperatorError
)
from .schema import IndexMapping

logger = logging.getLogger(__name__)

Clauses = Dict[str, List[Any]]


class QdrantFilterBackend:
    """
    Converts rewritten expression trees to Qdrant Filter objects.

    Field keys are used as payload keys unchanged, so the tree must already
    carry storage-level names (the output of ``validate_convert_filter``).
    """

    SUPPORTED_OPERATORS = {
        FilterOperator.EQ, FilterOperator.NE,
        FilterOperator.GT, FilterOperator.GTE,
        FilterOperator.LT, FilterOperator.LTE,
        FilterOperator.IN, FilterOperator.NIN,
        FilterOperator.AND, FilterOperator.OR, FilterOperator.NOT,
        FilterOperator.EXISTS, FilterOperator.NULL, FilterOperator.EMPTY,
        FilterOperator.CONTAINS, FilterOperator.NOT_CONTAINS,
        FilterOperator.ALL, FilterOperator.REGEX, FilterOperator.TEXT,
        FilterOperator.BETWEEN, FilterOperator.ELEM_MATCH
    }

    def __init__(self, mapping: Any = None, date_fields: Optional[Iterable[str]] = None):
        """
        Initialize the backend.

        Args:
            mapping: Index mapping whose date properties are stored as Unix timestamps
            date_fields: Explicit storage-level date fields, overrides ``mapping``
        """
        if date_fields is not None:
            self.date_fields = set(date_fields)
        elif mapping is not None:
            self.date_fields = IndexMapping.of(mapping).date_fields()
        else:
            self.date_fields = set()

    def convert(self, node: Optional[FilterNode]) -> Optional[Filter]:
        """
        Convert a rewritten tree to a Qdrant Filter.

        Args:
            node: Root of the tree, None for no filter

        Returns:
            Qdrant Filter object or None for empty filters
        """
        if node is None:
            return None
        if isinstance(node, FilterExpression) and not node.conditions:
            return None

        self.validate_expression(node)
        clauses = self._convert_node(node)
        return Filter(**clauses) if clauses else None

    def supports_operator(self, operator: FilterOperator) -> bool:
        """Check if Qdrant backend supports an operator."""
        return operator in self.SUPPORTED_OPERATORS

    def validate_expression(self, node: FilterNode) -> None:
        """
        Check that every operator in the tree is supported.

        Raises:
            UnsupportedOperatorError: If an unsupported operator is found
        """
        if not self.supports_operator(node.operator):
            raise UnsupportedOperatorError(node.operator, "Qdrant")
        if isinstance(node, FilterExpression):
            for child in node.conditions:
                self.validate_expression(child)
        elif node.is_nested and isinstance(node.value, (FilterCondition, FilterExpression)):
            self.validate_expression(node.value)

    def _convert_node(self, node: FilterNode) -> Clauses:
        if isinstance(node, FilterCondition):
            return self._convert_condition(node)
        if isinstance(node, FilterExpression):
            return self._convert_compound(node)
        raise ValueError(f"Unknown expression type: {type(node)}")

    def _convert_compound(self, expr: FilterExpression) -> Clauses:
        """Convert compound expression (AND/OR/NOT)."""
        must, should, must_not = [], [], []

        if expr.operator == FilterOperator.AND:
            for child in expr.conditions:
                result = self._convert_node(child)
                if result.get('should'):
                    # An OR branch inside AND keeps its own scope
                    must.append(Filter(**result))
                else:
                    must.extend(result.get('must', []))
                    must_not.extend(result.get('must_not', []))

        elif expr.operator == FilterOperator.OR:
            for child in expr.conditions:
                result = self._convert_node(child)
                if list(result) == ['must'] and len(result['must']) == 1:
                    should.append(result['must'][0])
                elif result:
                    should.append(Filter(**result))

        elif expr.operator == FilterOperator.NOT:
            if expr.conditions:
                result = self._convert_node(expr.conditions[0])
                if result:
                    must_not.append(Filter(**result))

        return self._clauses(must, should, must_not)

    def _convert_condition(self, condition: FilterCondition) -> Clauses:
        """Convert a single leaf to Qdrant clauses."""
        key = condition.field
        op = condition.operator
        value = self._coerce_value(key, condition.value)
        negated = condition.negated

        if op == FilterOperator.EQ:
            base = FieldCondition(key=key, match=MatchValue(value=value))

        elif op == FilterOperator.NE:
            base = FieldCondition(key=key, match=MatchValue(value=value))
            negated = not negated

        elif op in (FilterOperator.GT, FilterOperator.GTE, FilterOperator.LT, FilterOperator.LTE):
            bound = op.value.lstrip('$')
            base = FieldCondition(key=key, range=Range(**{bound: value}))

        elif op in (FilterOperator.IN, FilterOperator.CONTAINS):
            values = value if isinstance(value, list) else [value]
            base = FieldCondition(key=key, match=MatchAny(any=values))

        elif op == FilterOperator.NIN:
            values = value if isinstance(value, list) else [value]
            base = FieldCondition(key=key, match=MatchExcept(**{"except": values}))

        elif op == FilterOperator.NOT_CONTAINS:
            values = value if isinstance(value, list) else [value]
            base = FieldCondition(key=key, match=MatchAny(any=values))
            negated = not negated

        elif op == FilterOperator.EXISTS:
            base = IsNullCondition(is_null=PayloadField(key=key))
            if value:
                negated = not negated

        elif op == FilterOperator.NULL:
            base = IsNullCondition(is_null=PayloadField(key=key))
            if not value:
                negated = not negated

        elif op == FilterOperator.EMPTY:
            base = IsEmptyCondition(is_empty=PayloadField(key=key))
            if not value:
                negated = not negated

        elif op == FilterOperator.ALL:
            values = value if isinstance(value, list) else [value]
            conditions = [FieldCondition(key=key, match=MatchValue(value=v)) for v in values]
            if negated:
                return {'must_not': [Filter(must=conditions)]}
            return {'must': conditions}

        elif op == FilterOperator.BETWEEN:
            if not isinstance(value, list) or len(value) != 2:
                raise ValueError("$between requires exactly 2 values")
            base = FieldCondition(key=key, range=Range(gte=value[0], lte=value[1]))

        elif op in (FilterOperator.REGEX, FilterOperator.TEXT):
            base = FieldCondition(key=key, match=MatchText(text=value))

        elif op == FilterOperator.ELEM_MATCH:
            inner = self._convert_node(condition.value)
            base = NestedCondition(nested=Nested(key=key, filter=Filter(**inner)))

        else:
            raise UnsupportedOperatorError(op, "Qdrant")

        if negated:
            return {'must_not': [base]}
        return {'must': [base]}

    def _coerce_value(self, key: str, value: Any) -> Any:
        """Date fields are stored as Unix timestamps."""
        if key not in self.date_fields:
            return value
        if isinstance(value, datetime):
            return value.timestamp()
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value.replace('Z', '+00:00')).timestamp()
            except ValueError:
                logger.debug(f"Leaving non-ISO value for {key} unchanged")
        return value

    @staticmethod
    def _clauses(must: List[Any], should: List[Any], must_not: List[Any]) -> Clauses:
        result = {}
        if must:
            result['must'] = must
        if should:
            result['should'] = should
        if must_not:
            result['must_not'] = must_not
        return result

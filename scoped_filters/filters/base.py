#!/usr/bin/env python3
"""
Expression tree for type-scoped filters.
Provides the closed node types the walker and converter operate on, plus the
default MongoDB-style parser that ingests caller filters into that tree.
"""

import json
from dataclasses import dataclass, field as dataclass_field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from ..exceptions import ScopedFiltersError


class FilterOperator(Enum):
    """MongoDB-style query operators."""
    # Comparison
    EQ = "$eq"
    NE = "$ne"
    GT = "$gt"
    GTE = "$gte"
    LT = "$lt"
    LTE = "$lte"

    # Array/List
    IN = "$in"
    NIN = "$nin"
    CONTAINS = "$contains"
    NOT_CONTAINS = "$not_contains"
    ALL = "$all"

    # Logical
    AND = "$and"
    OR = "$or"
    NOT = "$not"

    # Existence
    EXISTS = "$exists"
    NULL = "$null"
    EMPTY = "$empty"

    # Text
    REGEX = "$regex"
    TEXT = "$text"

    # Special
    BETWEEN = "$between"
    ELEM_MATCH = "$elemMatch"

    @classmethod
    def from_string(cls, value: str) -> Optional['FilterOperator']:
        """Convert string to operator."""
        for op in cls:
            if op.value == value:
                return op
        return None


LOGICAL_OPERATORS = frozenset({FilterOperator.AND, FilterOperator.OR, FilterOperator.NOT})


@dataclass
class FilterCondition:
    """
    A field-bearing leaf of the expression tree.

    ``operator`` and ``value`` form the comparison payload. For ``$elemMatch``
    the value is itself a node whose fields are relative to ``field``.
    """
    field: Optional[str]  # None for a free-text term without a key
    operator: FilterOperator
    value: Any
    negated: bool = False

    @property
    def is_nested(self) -> bool:
        return self.operator == FilterOperator.ELEM_MATCH

    def __repr__(self):
        neg = "NOT " if self.negated else ""
        return f"{neg}{self.field} {self.operator.value} {self.value!r}"


@dataclass
class FilterExpression:
    """
    A boolean combinator over an ordered list of child nodes.
    """
    operator: FilterOperator  # AND, OR or NOT
    conditions: List[Union[FilterCondition, 'FilterExpression']] = dataclass_field(default_factory=list)

    def __repr__(self):
        return f"{self.operator.value}({self.conditions})"


FilterNode = Union[FilterCondition, FilterExpression]


def get_node(root: FilterNode, ast_path: str) -> Any:
    """
    Follow a finding's ``ast_path`` from ``root`` to the node it points at.

    Args:
        root: Tree the path was computed on
        ast_path: Dot-joined path such as ``conditions.1.value``

    Returns:
        The node at that position

    Raises:
        InvalidFilterError: If the path does not exist in the tree
    """
    node = root
    if not ast_path:
        return node

    for segment in ast_path.split('.'):
        try:
            if segment.isdigit():
                node = node[int(segment)]
            else:
                node = getattr(node, segment)
        except (AttributeError, IndexError, TypeError):
            raise InvalidFilterError(f"Path '{ast_path}' does not exist in the filter")
    return node


class MongoFilterParser:
    """
    Parses MongoDB-style filter dictionaries into the expression tree.

    Field keys are kept verbatim, so ``{"foo.attributes.title": "best"}``
    becomes a single condition on ``foo.attributes.title``.
    """

    def __init__(self, max_depth: int = 10):
        """
        Initialize the parser.

        Args:
            max_depth: Maximum nesting depth to prevent DoS attacks
        """
        self.max_depth = max_depth
        self._depth = 0

    def parse(self, filters: Dict[str, Any]) -> FilterNode:
        """
        Parse MongoDB-style filters into a structured expression tree.

        Args:
            filters: MongoDB-style filter dictionary

        Returns:
            Root node of the tree

        Raises:
            InvalidFilterError: If the filter is invalid or too deeply nested
        """
        if not isinstance(filters, dict):
            raise InvalidFilterError(f"Expected dict, got {type(filters).__name__}")

        if not filters:
            # Empty filter matches everything
            return FilterExpression(FilterOperator.AND, [])

        self._depth = 0
        return self._parse_dict(filters)

    def parse_text(self, text: str) -> FilterNode:
        """Parse a JSON-encoded MongoDB-style filter."""
        try:
            filters = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidFilterError(f"Filter is not valid JSON: {e.msg}")
        return self.parse(filters)

    def __call__(self, text: str) -> FilterNode:
        return self.parse_text(text)

    def _parse_dict(self, filters: Dict[str, Any]) -> FilterNode:
        """Parse a dictionary of filters."""
        self._depth += 1
        if self._depth > self.max_depth:
            raise InvalidFilterError(f"Filter nesting exceeds maximum depth of {self.max_depth}")

        try:
            conditions = []

            for key, value in filters.items():
                if key.startswith('$'):
                    # Top-level operator
                    op = FilterOperator.from_string(key)
                    if not op:
                        raise InvalidFilterError(f"Unknown operator: {key}")

                    if op in LOGICAL_OPERATORS:
                        conditions.append(self._parse_logical(op, value))
                    else:
                        raise InvalidFilterError(f"Operator {key} requires a field")
                else:
                    conditions.extend(self._parse_field(key, value))

            if len(conditions) == 1:
                return conditions[0]
            return FilterExpression(FilterOperator.AND, conditions)

        finally:
            self._depth -= 1

    def _parse_logical(self, operator: FilterOperator, value: Any) -> FilterExpression:
        """Parse logical operators ($and, $or, $not)."""
        if operator in {FilterOperator.AND, FilterOperator.OR}:
            if not isinstance(value, list):
                raise InvalidFilterError(f"{operator.value} requires a list")

            conditions = []
            for item in value:
                if not isinstance(item, dict):
                    raise InvalidFilterError(f"{operator.value} items must be dictionaries")
                conditions.append(self._parse_dict(item))

            return FilterExpression(operator, conditions)

        if not isinstance(value, dict):
            raise InvalidFilterError(f"{operator.value} requires a dictionary")

        return FilterExpression(operator, [self._parse_dict(value)])

    def _parse_field(self, field: str, value: Any) -> List[FilterNode]:
        """Parse field-level conditions."""
        conditions = []

        if isinstance(value, dict) and any(k.startswith('$') for k in value):
            # Field with operators
            for op_str, op_value in value.items():
                op = FilterOperator.from_string(op_str)
                if not op:
                    raise InvalidFilterError(f"Unknown operator: {op_str}")

                if op in LOGICAL_OPERATORS:
                    raise InvalidFilterError(f"{op_str} cannot be applied to field '{field}'")

                if op == FilterOperator.ELEM_MATCH:
                    if not isinstance(op_value, dict):
                        raise InvalidFilterError(f"$elemMatch on '{field}' requires a dictionary")
                    op_value = self._parse_dict(op_value)

                conditions.append(FilterCondition(field or None, op, op_value))
        else:
            # Direct equality
            conditions.append(FilterCondition(field or None, FilterOperator.EQ, value))

        return conditions


class FilterError(ScopedFiltersError):
    """Base exception for filter-related errors."""
    pass


class UnsupportedOperatorError(FilterError):
    """Raised when a backend doesn't support an operator."""
    def __init__(self, operator: FilterOperator, backend: str):
        super().__init__(f"Operator {operator.value} is not supported by {backend}")
        self.operator = operator
        self.backend = backend


class InvalidFilterError(FilterError):
    """Raised when a filter is malformed or invalid."""
    pass

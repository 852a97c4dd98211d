#!/usr/bin/env python3
"""
Depth-first traversal producing one finding per field-bearing leaf.
"""

from typing import List, Optional

from ..models import Finding
from .base import FilterCondition, FilterExpression, FilterNode, InvalidFilterError
from .classifier import LeafClassifier


def join_path(*segments: str) -> str:
    """Join locator segments, dropping empty ones."""
    return ".".join(segment for segment in segments if segment)


class TreeWalker:
    """
    Walks an expression tree left to right and classifies every leaf.

    Combinators emit no finding. A ``$elemMatch`` leaf is walked through:
    each leaf of its payload is classified under the combined key
    ``outer.inner`` as nested-shaped.
    """

    def __init__(self, classifier: LeafClassifier, has_nested_key: bool = False,
                 storage_level: bool = False):
        self.classifier = classifier
        self.has_nested_key = has_nested_key
        self.storage_level = storage_level

    def walk(self, root: FilterNode) -> List[Finding]:
        findings: List[Finding] = []
        self._visit(root, "", None, findings)
        return findings

    def _visit(self, node: FilterNode, path: str, scope: Optional[str], findings: List[Finding]) -> None:
        if isinstance(node, FilterExpression):
            for index, child in enumerate(node.conditions):
                self._visit(child, join_path(path, "conditions", str(index)), scope, findings)
            return

        if not isinstance(node, FilterCondition):
            raise InvalidFilterError(f"Unknown expression type: {type(node).__name__}")

        key = node.field
        if scope is not None:
            key = f"{scope}.{key}" if key else None

        if node.is_nested and isinstance(node.value, (FilterCondition, FilterExpression)):
            inner: List[Finding] = []
            if key:
                self._visit(node.value, join_path(path, "value"), key, inner)
            if inner:
                findings.extend(inner)
                return

        findings.append(self._classify(node, key, path, nested=scope is not None or node.is_nested))

    def _classify(self, node: FilterCondition, key: Optional[str], path: str, nested: bool) -> Finding:
        nested = nested or self.has_nested_key
        if self.storage_level:
            return self.classifier.classify_storage(key, node.value, nested, path)
        return self.classifier.classify(key, nested, path)

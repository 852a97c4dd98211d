#!/usr/bin/env python3
"""
Validation and conversion entry points for type-scoped filters.

``validate_filter_expression`` reports every finding and never raises for a
badly scoped key. ``validate_convert_filter`` stops at the first error and
otherwise returns a rewritten tree that uses storage-level field names, with a
type clause paired to every metadata field comparison.
"""

import copy
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

from ..config import DEFAULT_MAX_DEPTH, DEFAULT_TYPE_FIELD
from ..exceptions import BadRequestError
from ..models import Finding
from .base import (
    FilterCondition, FilterExpression, FilterNode, FilterOperator,
    InvalidFilterError, MongoFilterParser
)
from .classifier import LeafClassifier
from .schema import IndexMapping
from .walker import TreeWalker

logger = logging.getLogger(__name__)

FilterInput = Union[str, Dict[str, Any], FilterCondition, FilterExpression]
MappingInput = Union[IndexMapping, Dict[str, Any]]


def validate_filter_expression(expression: FilterNode,
                               allowed_types: Sequence[str],
                               mapping: MappingInput,
                               has_nested_key: bool = False,
                               *,
                               metadata_fields: Optional[Iterable[str]] = None,
                               type_field: str = DEFAULT_TYPE_FIELD,
                               storage_level: bool = False) -> List[Finding]:
    """
    Classify every field-bearing leaf of a filter tree.

    Args:
        expression: Root of the tree
        allowed_types: Types the caller may query
        mapping: Shared index mapping
        has_nested_key: Treat every leaf as sitting under a nested boundary
        metadata_fields: Reserved metadata field names (default: config list)
        type_field: Field holding the object type
        storage_level: Classify an already rewritten tree

    Returns:
        Findings in traversal order
    """
    classifier = LeafClassifier(allowed_types, IndexMapping.of(mapping),
                                metadata_fields=metadata_fields, type_field=type_field)
    findings = TreeWalker(classifier, has_nested_key=has_nested_key,
                          storage_level=storage_level).walk(expression)

    logger.debug(f"Validated filter: {len(findings)} findings, "
                 f"{sum(1 for f in findings if f.error)} errors")
    return findings


def validate_convert_filter(allowed_types: Sequence[str],
                            filter_input: FilterInput,
                            mapping: MappingInput,
                            *,
                            metadata_fields: Optional[Iterable[str]] = None,
                            type_field: str = DEFAULT_TYPE_FIELD,
                            max_depth: int = DEFAULT_MAX_DEPTH,
                            parser: Optional[Callable[[str], FilterNode]] = None) -> Optional[FilterNode]:
    """
    Validate a filter and rewrite it to storage-level field names.

    Args:
        allowed_types: Types the caller may query
        filter_input: JSON text, MongoDB-style dict, or an expression tree
        mapping: Shared index mapping
        metadata_fields: Reserved metadata field names (default: config list)
        type_field: Field holding the object type
        max_depth: Nesting limit for the default parser
        parser: Callable turning filter text into a tree

    Returns:
        A new rewritten tree, or None for an empty string

    Raises:
        BadRequestError: On the first finding with an error
        InvalidFilterError: If the input cannot be parsed
    """
    if isinstance(filter_input, str) and filter_input == "":
        return None

    expression = _ingest(filter_input, parser, max_depth)
    index_mapping = IndexMapping.of(mapping)
    classifier = LeafClassifier(allowed_types, index_mapping,
                                metadata_fields=metadata_fields, type_field=type_field)

    for finding in TreeWalker(classifier).walk(expression):
        if finding.error is not None:
            logger.warning(f"Rejected filter at '{finding.ast_path}': {finding.error}")
            raise BadRequestError(finding.error, finding)

    return FilterRewriter(classifier).rewrite(expression)


class FilterRewriter:
    """
    Builds a new tree with storage-level keys from a tree that validated.

    The input tree is left untouched; comparison payloads are deep copied.
    """

    def __init__(self, classifier: LeafClassifier):
        self.classifier = classifier
        self.rewritten = 0

    def rewrite(self, root: FilterNode) -> FilterNode:
        result = self._rewrite(root)
        logger.debug(f"Rewrote {self.rewritten} leaves")
        return result

    def _rewrite(self, node: FilterNode) -> FilterNode:
        if isinstance(node, FilterExpression):
            return FilterExpression(node.operator, [self._rewrite(child) for child in node.conditions])

        finding = self.classifier.classify(node.field, is_nested=node.is_nested)
        if finding.error is not None:
            raise BadRequestError(finding.error, finding)

        self.rewritten += 1
        leaf = FilterCondition(
            field=self.classifier.storage_key(finding),
            operator=node.operator,
            value=copy.deepcopy(node.value),
            negated=node.negated,
        )
        if not finding.is_saved_object_attr:
            return leaf

        type_clause = FilterCondition(self.classifier.type_field, FilterOperator.EQ, finding.type)
        return FilterExpression(FilterOperator.AND, [type_clause, leaf])


def _ingest(filter_input: FilterInput,
            parser: Optional[Callable[[str], FilterNode]],
            max_depth: int) -> FilterNode:
    """Turn any accepted filter input into the closed expression tree."""
    if isinstance(filter_input, (FilterCondition, FilterExpression)):
        return filter_input
    if isinstance(filter_input, str):
        return (parser or MongoFilterParser(max_depth=max_depth))(filter_input)
    if isinstance(filter_input, dict):
        return MongoFilterParser(max_depth=max_depth).parse(filter_input)
    raise InvalidFilterError(f"Unsupported filter input: {type(filter_input).__name__}")

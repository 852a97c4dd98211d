"""
Type-scoped filter validation and rewriting.

Several object types share one index. A filter names attributes as
``type.attributes.field`` and reserved metadata as ``type.field``; this
module checks those keys against the caller's allowed types and the shared
mapping, then rewrites them to the names stored in the index.

Example usage:
    from scoped_filters.filters import validate_convert_filter

    node = validate_convert_filter(
        ["foo"],
        '{"foo.updatedAt": 5678654567, "foo.attributes.title": "best"}',
        index_mapping,
    )
    # $and([$and([type $eq 'foo', updatedAt $eq 5678654567]), foo.title $eq 'best'])
"""

from .base import (
    FilterOperator,
    FilterCondition,
    FilterExpression,
    FilterNode,
    MongoFilterParser,
    get_node,
    FilterError,
    UnsupportedOperatorError,
    InvalidFilterError
)

from .schema import IndexMapping
from .classifier import LeafClassifier
from .walker import TreeWalker
from .converter import FilterRewriter, validate_convert_filter, validate_filter_expression
from .qdrant_backend import QdrantFilterBackend

__all__ = [
    # Tree
    'FilterOperator',
    'FilterCondition',
    'FilterExpression',
    'FilterNode',
    'MongoFilterParser',
    'get_node',

    # Engine
    'IndexMapping',
    'LeafClassifier',
    'TreeWalker',
    'FilterRewriter',
    'validate_filter_expression',
    'validate_convert_filter',

    # Backends
    'QdrantFilterBackend',

    # Errors
    'FilterError',
    'UnsupportedOperatorError',
    'InvalidFilterError'
]

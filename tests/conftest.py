"""
Shared pytest fixtures for scoped-filters tests.
Provides the shared index mapping and common filters used across suites.
"""

import logging
import sys
from pathlib import Path

import pytest

# Add repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from scoped_filters.filters import IndexMapping, MongoFilterParser

# Keep library debug output out of test runs
logging.basicConfig(level=logging.CRITICAL)


INDEX_MAPPING = {
    "properties": {
        "updatedAt": {
            "type": "date",
        },
        "foo": {
            "properties": {
                "title": {"type": "text"},
                "description": {"type": "text"},
                "bytes": {"type": "number"},
            },
        },
        "bar": {
            "properties": {
                "foo": {"type": "text"},
                "description": {"type": "text"},
            },
        },
        "alert": {
            "properties": {
                "actions": {
                    "type": "nested",
                    "properties": {
                        "group": {"type": "keyword"},
                        "actionRef": {"type": "keyword"},
                        "actionTypeId": {"type": "keyword"},
                        "params": {
                            "enabled": False,
                            "type": "object",
                        },
                    },
                },
            },
        },
        "hiddentype": {
            "properties": {
                "description": {"type": "text"},
            },
        },
    },
}


def chain(*leaves, operator="$and"):
    """
    Build a right-leaning chain of binary combinators, e.g.
    ``a and (b and (c and d))``.
    """
    if len(leaves) == 1:
        return leaves[0]
    return {operator: [leaves[0], chain(*leaves[1:], operator=operator)]}


# foo.updatedAt: 5678654567 and foo.attributes.bytes > 1000 and foo.attributes.bytes < 8000
# and foo.attributes.title: "best" and (foo.attributes.description: t* or foo.attributes.description: *)
def build_filter(updated_key="foo.updatedAt",
                 bytes_lower="foo.attributes.bytes",
                 bytes_upper="foo.attributes.bytes",
                 title_key="foo.attributes.title",
                 description_keys=("foo.attributes.description", "foo.attributes.description")):
    return chain(
        {updated_key: 5678654567},
        {bytes_lower: {"$gt": 1000}},
        {bytes_upper: {"$lt": 8000}},
        {title_key: "best"},
        {"$or": [
            {description_keys[0]: {"$regex": "t*"}},
            {description_keys[1]: {"$exists": True}},
        ]},
    )


HAPPY_PATHS = [
    "conditions.0",
    "conditions.1.conditions.0",
    "conditions.1.conditions.1.conditions.0",
    "conditions.1.conditions.1.conditions.1.conditions.0",
    "conditions.1.conditions.1.conditions.1.conditions.1.conditions.0",
    "conditions.1.conditions.1.conditions.1.conditions.1.conditions.1",
]


@pytest.fixture
def mapping():
    """Raw index mapping dict."""
    return INDEX_MAPPING


@pytest.fixture
def index_mapping():
    """IndexMapping view over the shared mapping."""
    return IndexMapping(INDEX_MAPPING)


@pytest.fixture
def parser():
    return MongoFilterParser()


@pytest.fixture
def happy_filter():
    """Filter over foo using every classification that succeeds."""
    return build_filter()

#!/usr/bin/env python3
"""
Tests for index mapping lookups.
"""

import pytest

from scoped_filters.filters import IndexMapping


class TestIndexMapping:
    """Test type discovery and field resolution."""

    def test_known_types(self, index_mapping):
        """Root properties with sub-properties are types."""
        assert index_mapping.is_known_type("foo")
        assert index_mapping.is_known_type("hiddentype")
        assert "alert" in index_mapping
        assert set(index_mapping.types) == {"foo", "bar", "alert", "hiddentype"}

    def test_root_field_is_not_a_type(self, index_mapping):
        """updatedAt sits at the root but declares no properties."""
        assert not index_mapping.is_known_type("updatedAt")
        assert not index_mapping.is_known_type("missing")
        assert not index_mapping.is_known_type(None)

    def test_field_exists(self, index_mapping):
        """Declared attributes resolve."""
        assert index_mapping.field_exists("foo", "title")
        assert index_mapping.field_exists("bar", "foo")

    def test_missing_field(self, index_mapping):
        """Undeclared attributes and wrong types don't resolve."""
        assert not index_mapping.field_exists("foo", "header")
        assert not index_mapping.field_exists("bar", "bytes")
        assert not index_mapping.field_exists("unknown", "title")
        assert not index_mapping.field_exists("foo", "")

    def test_path_below_leaf_property(self, index_mapping):
        """A text field has no sub-fields to descend into."""
        assert not index_mapping.field_exists("foo", "title.raw")

    def test_nested_boundary(self, index_mapping):
        """Anything below a nested property is accepted."""
        assert index_mapping.field_exists("alert", "actions")
        assert index_mapping.field_exists("alert", "actions.group")
        assert index_mapping.field_exists("alert", "actions.notDeclared")

    def test_opaque_boundary(self, index_mapping):
        """enabled: false stops validation too."""
        assert index_mapping.field_exists("alert", "actions.params.anything.deep")
        assert IndexMapping.is_boundary({"type": "object", "enabled": False})
        assert not IndexMapping.is_boundary({"type": "object"})

    def test_kind_style_mapping(self):
        """Mappings may use kind/opaque and skip the root properties wrapper."""
        mapping = IndexMapping({
            "doc": {
                "properties": {
                    "title": {"kind": "text"},
                    "blob": {"kind": "object", "opaque": True},
                    "author": {
                        "kind": "object",
                        "properties": {"name": {"kind": "keyword"}},
                    },
                },
            },
        })

        assert mapping.types == ["doc"]
        assert mapping.field_exists("doc", "author.name")
        assert not mapping.field_exists("doc", "author.email")
        assert mapping.field_exists("doc", "blob.whatever")

    def test_root_settings_beside_properties(self, mapping):
        """A 'dynamic' setting next to the properties wrapper keeps the types visible."""
        strict = IndexMapping(dict(mapping, dynamic="strict"))

        assert set(strict.types) == {"foo", "bar", "alert", "hiddentype"}
        assert strict.field_exists("foo", "title")
        assert not strict.is_known_type("dynamic")

    def test_date_fields(self, index_mapping):
        """Root dates keep their name, type attributes are prefixed."""
        assert index_mapping.date_fields() == {"updatedAt"}

        mapping = IndexMapping({
            "createdAt": {"kind": "date"},
            "doc": {
                "properties": {
                    "published": {"type": "date"},
                    "author": {"properties": {"born": {"type": "date"}}},
                    "history": {"type": "nested", "properties": {"at": {"type": "date"}}},
                },
            },
        })
        assert mapping.date_fields() == {"createdAt", "doc.published", "doc.author.born"}

    def test_of_passes_instances_through(self, index_mapping, mapping):
        """IndexMapping.of wraps dicts once."""
        assert IndexMapping.of(index_mapping) is index_mapping
        assert IndexMapping.of(mapping).types == index_mapping.types

    def test_rejects_non_dict(self):
        """Mappings must be dictionaries."""
        with pytest.raises(TypeError):
            IndexMapping(["foo"])

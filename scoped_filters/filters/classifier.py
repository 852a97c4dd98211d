#!/usr/bin/env python3
"""
Per-leaf classification of filter keys.

A key must be scoped to an allowed type and either address a business
attribute (``type.attributes.path``) or a reserved metadata field
(``type.field``).
"""

from typing import Any, Iterable, Optional, Sequence

from ..config import DEFAULT_METADATA_FIELDS, DEFAULT_TYPE_FIELD
from ..models import Finding
from .schema import IndexMapping

ATTRIBUTES_NAMESPACE = "attributes"

EMPTY_KEY_ERROR = "The key is empty and needs to be wrapped by a saved object type like {types}"
UNSCOPED_KEY_ERROR = "This key '{key}' need to be wrapped by a saved object type like {types}"
DISALLOWED_TYPE_ERROR = "This type {type} is not allowed"
MALFORMED_PATH_ERROR = (
    "This key '{key}' does NOT match the filter proposition SavedObjectType.attributes.key"
)
UNKNOWN_FIELD_ERROR = "This key '{key}' does NOT exist in {type} saved object index patterns"


class LeafClassifier:
    """
    Classifies the key of one leaf against an allow-list and a mapping.

    Instances hold only the inputs of a single call and never change them.
    """

    def __init__(self,
                 allowed_types: Sequence[str],
                 mapping: IndexMapping,
                 metadata_fields: Optional[Iterable[str]] = None,
                 type_field: str = DEFAULT_TYPE_FIELD):
        self.allowed_types = list(allowed_types)
        self.mapping = mapping
        self.metadata_fields = frozenset(
            DEFAULT_METADATA_FIELDS if metadata_fields is None else metadata_fields
        )
        self.type_field = type_field
        self._allowed = frozenset(self.allowed_types)
        self._types_csv = ",".join(self.allowed_types)

    def classify(self, key: Optional[str], is_nested: bool = False, ast_path: str = "") -> Finding:
        """
        Classify a caller-facing key such as ``foo.attributes.title``.

        Args:
            key: Raw field key of the leaf
            is_nested: Leaf sits under a nested boundary, skip existence checks
            ast_path: Locator copied into the finding

        Returns:
            Finding for the leaf
        """
        if not key:
            return self._empty_key(ast_path)

        prefix, _, rest = key.partition(".")

        if prefix not in self._allowed or not rest:
            return self._out_of_scope(key, prefix, ast_path)

        attributes_prefix = f"{ATTRIBUTES_NAMESPACE}."
        if rest.startswith(attributes_prefix):
            sub_path = rest[len(attributes_prefix):]
            error = None
            if not is_nested and not self.mapping.field_exists(prefix, sub_path):
                error = UNKNOWN_FIELD_ERROR.format(key=key, type=prefix)
            return Finding(ast_path, key, prefix, False, error)

        if rest in self.metadata_fields:
            return Finding(ast_path, key, prefix, True, None)

        if "." in rest or rest == ATTRIBUTES_NAMESPACE or self.mapping.field_exists(prefix, rest):
            return Finding(ast_path, key, prefix, False, MALFORMED_PATH_ERROR.format(key=key))

        return Finding(ast_path, key, prefix, False, UNKNOWN_FIELD_ERROR.format(key=key, type=prefix))

    def classify_storage(self,
                         key: Optional[str],
                         value: Any = None,
                         is_nested: bool = False,
                         ast_path: str = "") -> Finding:
        """
        Classify a key of an already rewritten, storage-level filter.

        Storage keys are ``type.path`` for attributes, bare metadata field
        names, and the type field itself compared against type names.
        """
        if not key:
            return self._empty_key(ast_path)

        if key == self.type_field:
            values = value if isinstance(value, (list, tuple)) else [value]
            for type_name in values:
                if not isinstance(type_name, str):
                    return Finding(ast_path, key, None, True, DISALLOWED_TYPE_ERROR.format(type=type_name))
                if type_name not in self._allowed:
                    return Finding(ast_path, key, type_name, True, DISALLOWED_TYPE_ERROR.format(type=type_name))
            type_name = values[0] if len(values) == 1 else None
            return Finding(ast_path, key, type_name, True, None)

        if key in self.metadata_fields:
            return Finding(ast_path, key, None, True, None)

        prefix, _, rest = key.partition(".")
        if prefix not in self._allowed or not rest:
            return self._out_of_scope(key, prefix, ast_path)

        if is_nested or self.mapping.field_exists(prefix, rest):
            return Finding(ast_path, key, prefix, False, None)

        return Finding(ast_path, key, prefix, False, UNKNOWN_FIELD_ERROR.format(key=key, type=prefix))

    def storage_key(self, finding: Finding) -> str:
        """Storage-level field name for a key that classified without error."""
        rest = finding.key.partition(".")[2]
        if finding.is_saved_object_attr:
            return rest
        return f"{finding.type}.{rest[len(ATTRIBUTES_NAMESPACE) + 1:]}"

    def _empty_key(self, ast_path: str) -> Finding:
        return Finding(ast_path, None, None, False, EMPTY_KEY_ERROR.format(types=self._types_csv))

    def _out_of_scope(self, key: str, prefix: str, ast_path: str) -> Finding:
        if prefix not in self._allowed and self.mapping.is_known_type(prefix):
            return Finding(ast_path, key, prefix, True, DISALLOWED_TYPE_ERROR.format(type=prefix))
        return Finding(ast_path, key, None, True, UNSCOPED_KEY_ERROR.format(key=key, types=self._types_csv))

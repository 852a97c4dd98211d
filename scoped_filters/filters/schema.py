#!/usr/bin/env python3
"""
Index mapping lookups for type-scoped filters.

One physical index holds several object types. Each type is a root property
with its own ``properties`` tree; root properties without sub-properties
(``updatedAt`` and friends) are not types.
"""

import logging
from typing import Any, Dict, List, Optional, Set

logger = logging.getLogger(__name__)

NESTED_KIND = "nested"
DATE_KIND = "date"


class IndexMapping:
    """
    Read-only view over a shared index mapping.

    Accepts either ``{"properties": {type: {...}}}`` or ``{type: {...}}``.
    Property nodes may declare their kind as ``kind`` or ``type`` and may be
    made opaque with ``opaque: true`` or ``enabled: false``.
    """

    def __init__(self, mapping: Dict[str, Any]):
        if not isinstance(mapping, dict):
            raise TypeError(f"Index mapping must be a dict, got {type(mapping).__name__}")

        # Root settings such as "dynamic" sit beside the properties wrapper
        root = mapping.get("properties")
        if isinstance(root, dict) and all(isinstance(node, dict) for node in root.values()):
            self._root = root
        else:
            self._root = mapping

    @classmethod
    def of(cls, mapping: Any) -> 'IndexMapping':
        """Wrap a raw mapping dict, passing existing instances through."""
        if isinstance(mapping, cls):
            return mapping
        return cls(mapping)

    @property
    def types(self) -> List[str]:
        """Type names declared at the root of the mapping."""
        return [name for name in self._root if self.is_known_type(name)]

    def is_known_type(self, name: Optional[str]) -> bool:
        """Check whether ``name`` is a type declared in the mapping."""
        if not name:
            return False
        node = self._root.get(name)
        return isinstance(node, dict) and isinstance(node.get("properties"), dict)

    def field_exists(self, type_name: str, sub_path: str) -> bool:
        """
        Check whether a dotted attribute path is declared under a type.

        Lookup stops with a match at the first nested or opaque property,
        nothing below such a boundary is checked.

        Args:
            type_name: Type whose properties are searched
            sub_path: Path relative to the type's attributes, e.g. ``actions.group``

        Returns:
            True if the path resolves
        """
        if not sub_path or not self.is_known_type(type_name):
            return False

        properties = self._root[type_name]["properties"]
        for segment in sub_path.split("."):
            node = properties.get(segment) if isinstance(properties, dict) else None
            if not isinstance(node, dict):
                return False
            if self.is_boundary(node):
                logger.debug(f"Stopped at boundary '{segment}' resolving {type_name}.{sub_path}")
                return True
            properties = node.get("properties")

        return True

    def date_fields(self) -> Set[str]:
        """
        Storage-level names of every property declared with kind ``date``.

        Root fields keep their bare name, attributes are prefixed with their
        type. Nothing below a nested or opaque boundary is listed.
        """
        fields = set()
        for name, node in self._root.items():
            if not isinstance(node, dict):
                continue
            if self.is_known_type(name):
                self._collect_dates(node["properties"], name, fields)
            elif self._kind(node) == DATE_KIND:
                fields.add(name)
        return fields

    def _collect_dates(self, properties: Dict[str, Any], prefix: str, fields: Set[str]) -> None:
        for name, node in properties.items():
            if not isinstance(node, dict) or self.is_boundary(node):
                continue
            path = f"{prefix}.{name}"
            if self._kind(node) == DATE_KIND:
                fields.add(path)
            elif isinstance(node.get("properties"), dict):
                self._collect_dates(node["properties"], path, fields)

    @staticmethod
    def _kind(node: Dict[str, Any]) -> Optional[str]:
        return node.get("kind", node.get("type"))

    @staticmethod
    def is_boundary(node: Dict[str, Any]) -> bool:
        """A nested or opaque property halts deeper validation."""
        kind = node.get("kind", node.get("type"))
        return kind == NESTED_KIND or node.get("opaque") is True or node.get("enabled") is False

    def __contains__(self, name: str) -> bool:
        return self.is_known_type(name)

    def __repr__(self):
        return f"IndexMapping(types={self.types})"

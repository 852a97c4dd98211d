"""
Data models for scoped-filters.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Finding:
    """
    Classification result for one field-bearing node of a filter.

    Attributes:
        ast_path: Location of the node, see ``filters.base.get_node``
        key: Raw field key as written by the caller (None when empty)
        type: Object type the key is scoped to, when one was recognised
        is_saved_object_attr: True for reserved metadata fields
        error: Validation message, None when the key is acceptable
    """
    ast_path: str
    key: Optional[str]
    type: Optional[str]
    is_saved_object_attr: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Export as dictionary."""
        return asdict(self)

    def to_wire(self) -> Dict[str, Any]:
        """Export with the camelCase keys used by HTTP clients."""
        return {
            "astPath": self.ast_path,
            "key": self.key,
            "type": self.type,
            "isSavedObjectAttr": self.is_saved_object_attr,
            "error": self.error,
        }

"""
Configuration helpers for scoped-filters.
Supports environment variables for easy deployment configuration.
"""

import logging
import os
from typing import Any, Dict, Optional, Tuple


# Fields every saved object carries outside its attributes namespace
DEFAULT_METADATA_FIELDS: Tuple[str, ...] = (
    "id",
    "type",
    "namespace",
    "namespaces",
    "originId",
    "references",
    "migrationVersion",
    "coreMigrationVersion",
    "createdAt",
    "updatedAt",
    "updated_at",
    "version",
)

DEFAULT_TYPE_FIELD = "type"
DEFAULT_MAX_DEPTH = 10


class Config:
    """
    Configuration helper that reads from environment variables.

    Environment variables:
        SCOPED_FILTERS_METADATA_FIELDS: Comma separated reserved metadata fields
        SCOPED_FILTERS_TYPE_FIELD: Field holding the object type (default: type)
        SCOPED_FILTERS_MAX_DEPTH: Maximum filter nesting depth (default: 10)
        SCOPED_FILTERS_DEBUG: Enable debug logging for the package
    """

    @staticmethod
    def defaults() -> Dict[str, Any]:
        """Keyword arguments matching the built-in defaults."""
        return {
            "metadata_fields": DEFAULT_METADATA_FIELDS,
            "type_field": DEFAULT_TYPE_FIELD,
            "max_depth": DEFAULT_MAX_DEPTH,
        }

    @staticmethod
    def from_env() -> Dict[str, Any]:
        """
        Create configuration from environment variables.

        Returns:
            Dict with keyword arguments for the filter entry points

        Example:
            from scoped_filters import Config, validate_convert_filter

            node = validate_convert_filter(["foo"], text, mapping, **Config.from_env())
        """
        config = Config.defaults()

        metadata_fields = Config._split_list(os.getenv("SCOPED_FILTERS_METADATA_FIELDS"))
        if metadata_fields:
            config["metadata_fields"] = metadata_fields

        type_field = os.getenv("SCOPED_FILTERS_TYPE_FIELD", "").strip()
        if type_field:
            config["type_field"] = type_field

        max_depth = os.getenv("SCOPED_FILTERS_MAX_DEPTH")
        if max_depth:
            try:
                config["max_depth"] = int(max_depth)
            except ValueError:
                raise ValueError(f"SCOPED_FILTERS_MAX_DEPTH must be an integer, got {max_depth!r}")

        return config

    @staticmethod
    def configure_logging(debug: Optional[bool] = None) -> logging.Logger:
        """
        Set the package logger level.

        Args:
            debug: Force debug on or off (default: read SCOPED_FILTERS_DEBUG)

        Returns:
            The ``scoped_filters`` logger
        """
        if debug is None:
            debug = os.getenv("SCOPED_FILTERS_DEBUG", "").lower() in ("1", "true", "yes")

        logger = logging.getLogger("scoped_filters")
        logger.setLevel(logging.DEBUG if debug else logging.INFO)
        return logger

    @staticmethod
    def _split_list(value: Optional[str]) -> Tuple[str, ...]:
        if not value:
            return ()
        return tuple(item.strip() for item in value.split(",") if item.strip())

"""
Scoped Filters
Validation and rewriting of filters over object types sharing one index.
"""

from .config import Config, DEFAULT_METADATA_FIELDS
from .exceptions import ScopedFiltersError, ValidationError, BadRequestError
from .models import Finding
from .filters import (
    IndexMapping,
    validate_filter_expression,
    validate_convert_filter,
)

__version__ = "1.0.0"

__all__ = [
    "Config",
    "DEFAULT_METADATA_FIELDS",
    "Finding",
    "IndexMapping",
    "validate_filter_expression",
    "validate_convert_filter",
    "ScopedFiltersError",
    "ValidationError",
    "BadRequestError"
]

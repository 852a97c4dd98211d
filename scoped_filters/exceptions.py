"""
Exception classes for scoped-filters.
"""


class ScopedFiltersError(Exception):
    """Base exception for all scoped-filters errors."""
    pass


class ValidationError(ScopedFiltersError):
    """Raised when a filter fails type-scope validation."""
    pass


class BadRequestError(ValidationError):
    """
    Raised when a caller-supplied filter cannot be converted.

    The message carries the first offending finding's error followed by
    ``: Bad Request``.
    """
    status_code = 400

    def __init__(self, message: str, finding=None):
        super().__init__(f"{message}: Bad Request")
        self.finding = finding

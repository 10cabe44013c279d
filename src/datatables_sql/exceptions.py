"""
Exception hierarchy for the DataTables query layer.

Validation failures carry the full field-keyed error list so the web layer
can render every problem at once. Store errors raised by SQLAlchemy are not
wrapped and propagate unchanged.
"""

from typing import Any, Dict, List, Optional


class DataTablesError(Exception):
    """Base exception for all errors raised by this package."""

    def __init__(self, message: str = "DataTables request failed"):
        self.message = message
        super().__init__(self.message)


class ConfigurationError(DataTablesError):
    """Raised when the static per-endpoint configuration is unusable."""


class ValidationError(DataTablesError):
    """
    Raised when the client-supplied parameters fail validation.

    Attributes:
        errors: List of FieldError instances, one per failed check
    """

    def __init__(self, errors: List[Any], message: str = "Validation error"):
        self.errors = list(errors)
        super().__init__(message)

    def as_dicts(self) -> List[Dict[str, Optional[str]]]:
        return [error.as_dict() for error in self.errors]

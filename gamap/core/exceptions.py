"""
Custom exceptions and advisory warnings for the GA mapping platform.
"""

from dataclasses import dataclass, field
from typing import Optional, Any, Dict


class GAMapException(Exception):
    """Base exception for all GA mapping errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ValidationError(GAMapException):
    """Raised when input to an operation is malformed."""
    pass


class AuthorizationError(GAMapException):
    """Raised when a viewer may not access the requested scope."""
    pass


class ResourceNotFoundError(GAMapException):
    """Raised when a requested record is not found."""
    pass


class DuplicateEntityError(GAMapException):
    """Raised when attempting to create a duplicate record."""
    pass


class PersistenceError(GAMapException):
    """Raised when persistence operations fail."""
    pass


class ConfigurationError(GAMapException):
    """Raised when configuration is invalid."""
    pass


@dataclass(frozen=True)
class IntegrityWarning:
    """Non-fatal data-integrity finding.

    Returned next to computed results, never raised.
    """
    kind: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {'kind': self.kind, 'message': self.message, 'details': dict(self.details)}

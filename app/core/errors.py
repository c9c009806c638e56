"""Domain error taxonomy.

All errors derive from ValueError so callers that only care about
"bad input" can keep catching ValueError.
"""

from typing import Dict


class DomainError(ValueError):
    """Base class for errors raised by domain services."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PayloadValidationError(DomainError):
    """Field-level validation failures, keyed by field name."""

    def __init__(self, errors: Dict[str, str]):
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = dict(errors)


class BusinessRuleError(DomainError):
    """A business rule refused the operation."""


class NotFoundError(DomainError):
    """An id lookup failed."""

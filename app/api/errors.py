"""Translation of domain errors to HTTP errors."""

from fastapi import HTTPException, status

from app.core.errors import (
    BusinessRuleError,
    DomainError,
    NotFoundError,
    PayloadValidationError,
)


def http_error(exc: DomainError) -> HTTPException:
    """
    Map a domain error to the HTTPException an endpoint should raise.

    Validation maps become 422 with ``{"errors": {...}}``; lookups 404;
    refused business rules 400.
    """
    if isinstance(exc, PayloadValidationError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"errors": exc.errors},
        )
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)
    if isinstance(exc, BusinessRuleError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def forbidden(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=message)

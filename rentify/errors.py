"""Domain exceptions. Each carries the HTTP status and the stable error code it maps to."""

# Stable, machine-readable error codes for API consumers.
NOT_FOUND = "NOT_FOUND"
DUPLICATE_RESOURCE = "DUPLICATE_RESOURCE"
VALIDATION_ERROR = "VALIDATION_ERROR"
FORBIDDEN = "FORBIDDEN"
UNAUTHORIZED = "UNAUTHORIZED"
CONFLICT = "CONFLICT"
INTERNAL_ERROR = "INTERNAL_ERROR"


class DomainError(Exception):
    """Base exception for domain/business logic errors."""

    status_code = 400
    code = VALIDATION_ERROR


class NotFoundError(DomainError):
    status_code = 404
    code = NOT_FOUND


class DuplicateResourceError(DomainError):
    """A create or update would violate a uniqueness rule (e.g. a taken email)."""

    status_code = 409
    code = DUPLICATE_RESOURCE


class DomainValidationError(DomainError):
    """Business rule failed: bad dates, wrong status for the operation, unknown party."""


class ForbiddenError(DomainError):
    """Authenticated, but not allowed to act on this resource."""

    status_code = 403
    code = FORBIDDEN


class UnauthorizedError(DomainError):
    status_code = 401
    code = UNAUTHORIZED


class ConcurrentUpdateError(DomainError):
    """A contract kept changing underneath an update until the retries ran out."""

    status_code = 409
    code = CONFLICT


class StorageError(DomainError):
    """The blob store could not be reached or rejected the operation."""

    status_code = 500
    code = INTERNAL_ERROR


class DocumentRenderError(DomainError):
    status_code = 500
    code = INTERNAL_ERROR

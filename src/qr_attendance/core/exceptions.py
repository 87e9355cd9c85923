class DomainError(Exception):
    """Base exception for business rule violations.

    ``code`` and ``http_status`` let the HTTP layer tell the kinds apart
    without parsing messages.
    """

    code = "domain_error"
    http_status = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "validation_error"


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    code = "authentication_failed"
    http_status = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "forbidden"
    http_status = 403


class NotFoundError(DomainError):
    code = "not_found"
    http_status = 404


class SessionNotFoundError(NotFoundError):
    code = "session_not_found"


class ForbiddenError(AuthorizationError):
    """Raised when a teacher acts on a class session they do not own."""


class SessionInactiveError(ForbiddenError):
    code = "session_inactive"


class MalformedCredentialError(ValidationError):
    """Raised when a scanned payload cannot be decoded."""

    code = "malformed_credential"


class CredentialExpiredOrInvalidError(DomainError):
    """Token mismatch, no active token, or token past its expiry."""

    code = "credential_expired_or_invalid"


class NotEnrolledError(AuthorizationError):
    code = "not_enrolled"


class AlreadyMarkedError(DomainError):
    """Attendance already committed for (session, student, day)."""

    code = "already_marked"
    http_status = 409


class UnavailableError(Exception):
    """Storage layer failure (connectivity, timeouts, ...).

    Not a DomainError: callers must never treat it as a business rejection.
    """

    code = "unavailable"
    http_status = 503

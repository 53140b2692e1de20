"""
Exception types and error classification for storage transfers.

Provides:
- ErrorCategory enum for caller branching
- Typed exception hierarchy (validation, resolution, service)
- TransferCanceledError for the cancellation terminal state
- HTTP status classification utilities
"""

from enum import Enum
from typing import Optional


class ErrorCategory(Enum):
    """
    Classification of error kinds surfaced to callers.

    Categories:
        VALIDATION: Caller input is wrong (missing key, expiration too long).
                    Raised before any network I/O; fixable by the caller.
        RESOLUTION: Configuration or credential resolution failed.
        SERVICE: The object service or presigner reported a failure
                 (e.g., object not found during existence validation).
        UNKNOWN: Unclassified errors
    """

    VALIDATION = "validation"
    RESOLUTION = "resolution"
    SERVICE = "service"
    UNKNOWN = "unknown"


class StorageError(Exception):
    """
    Base exception for all storage transfer errors.

    Attributes:
        message: Human-readable error description
        category: Error classification for caller branching
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN
    retryable: bool = False

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        context: Optional[dict] = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        """Whether a caller-side retry could succeed. The core never retries."""
        return self.retryable

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Validation Errors
# =============================================================================


class StorageValidationErrorCode(Enum):
    """Codes for caller input validation failures."""

    NO_KEY = "NoKey"
    NO_IDENTITY_ID = "NoIdentityId"
    INVALID_URL_EXPIRATION = "InvalidUrlExpiration"
    URL_EXPIRATION_MAX_LIMIT_EXCEEDED = "UrlExpirationMaxLimitExceed"


VALIDATION_MESSAGES = {
    StorageValidationErrorCode.NO_KEY: "Missing key in request",
    StorageValidationErrorCode.NO_IDENTITY_ID: (
        "Missing identity ID for private or protected access level"
    ),
    StorageValidationErrorCode.INVALID_URL_EXPIRATION: (
        "URL expiration must be a positive number of seconds"
    ),
    StorageValidationErrorCode.URL_EXPIRATION_MAX_LIMIT_EXCEEDED: (
        "URL expiration exceeds the maximum allowed lifetime"
    ),
}


class StorageValidationError(StorageError):
    """Caller input failed validation."""

    category = ErrorCategory.VALIDATION

    def __init__(
        self,
        code: StorageValidationErrorCode,
        message: Optional[str] = None,
        context: Optional[dict] = None,
    ):
        super().__init__(message or VALIDATION_MESSAGES[code], context=context)
        self.code = code


def assert_validation(
    condition: bool,
    code: StorageValidationErrorCode,
    context: Optional[dict] = None,
) -> None:
    """Raise StorageValidationError with ``code`` unless ``condition`` holds."""
    if not condition:
        raise StorageValidationError(code, context=context)


# =============================================================================
# Resolution Errors
# =============================================================================


class ResolutionError(StorageError):
    """Base class for configuration and credential resolution failures."""

    category = ErrorCategory.RESOLUTION


class ConfigurationError(ResolutionError):
    """Invalid or incomplete storage configuration."""

    pass


class CredentialsError(ResolutionError):
    """Credentials could not be resolved."""

    pass


class CredentialsExpiredError(CredentialsError):
    """Resolved credentials are already past their expiration."""

    pass


# =============================================================================
# Service Errors
# =============================================================================


class ServiceError(StorageError):
    """Failure reported by the object service or presigner."""

    category = ErrorCategory.SERVICE

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        cause: Optional[Exception] = None,
        context: Optional[dict] = None,
    ):
        super().__init__(message, cause, context)
        self.status_code = status_code


class ObjectNotFoundError(ServiceError):
    """Object does not exist (404)."""

    pass


class AccessDeniedError(ServiceError):
    """Access denied by the service (401/403)."""

    pass


class ThrottlingError(ServiceError):
    """Rate limited (429)."""

    retryable = True


class ServiceUnavailableError(ServiceError):
    """Service-side failure (5xx)."""

    retryable = True


class ServiceConnectionError(ServiceError):
    """Network failure talking to the service (DNS, reset, timeout)."""

    retryable = True


# =============================================================================
# Cancellation
# =============================================================================


class TransferCanceledError(Exception):
    """
    Terminal state of a canceled task.

    Deliberately not a StorageError: cancellation is reported separately
    from failure.

    Attributes:
        reason: Optional exception supplied to ``cancel()``
    """

    def __init__(self, reason: Optional[BaseException] = None):
        self.reason = reason
        message = "Transfer canceled"
        if reason is not None:
            message = f"{message}: {reason}"
        super().__init__(message)


# =============================================================================
# Error Classification Utilities
# =============================================================================


def classify_http_status(status_code: int) -> type:
    """
    Map an HTTP status code to the ServiceError subclass that represents it.

    Args:
        status_code: HTTP response status

    Returns:
        ServiceError subclass
    """
    if status_code == 404:
        return ObjectNotFoundError

    if status_code in (401, 403):
        return AccessDeniedError

    if status_code == 429:
        return ThrottlingError

    if status_code >= 500:
        return ServiceUnavailableError

    return ServiceError


def service_error_from_status(
    status_code: int,
    message: str,
    context: Optional[dict] = None,
) -> ServiceError:
    """Build the typed service error for an unsuccessful HTTP response."""
    error_class = classify_http_status(status_code)
    return error_class(message, status_code=status_code, context=context)


def wrap_exception(
    exc: Exception,
    default_class: type = ServiceError,
    context: Optional[dict] = None,
    message: Optional[str] = None,
) -> StorageError:
    """
    Wrap a foreign exception in the appropriate StorageError subclass.

    StorageErrors pass through unchanged (context merged) so callers can
    still branch on the original kind.

    Args:
        exc: Exception to wrap
        default_class: Class to use if the exception looks like neither a
            connection failure nor a timeout
        context: Additional context to include
        message: Message for the wrapped error (defaults to str(exc))

    Returns:
        StorageError instance
    """
    if isinstance(exc, StorageError):
        if context:
            exc.context.update(context)
        return exc

    message = message if message is not None else str(exc)
    exc_type = type(exc).__name__.lower()
    exc_str = str(exc).lower()

    connection_markers = (
        "connection",
        "timeout",
        "dns",
        "socket",
        "broken pipe",
    )
    if any(m in exc_type or m in exc_str for m in connection_markers):
        return ServiceConnectionError(message, cause=exc, context=context)

    return default_class(message, cause=exc, context=context)

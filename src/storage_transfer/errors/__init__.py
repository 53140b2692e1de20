"""
Error classification and exception hierarchy.

Provides:
- ErrorCategory enum for classifying errors
- StorageError hierarchy for typed exceptions
- TransferCanceledError for canceled tasks
- Classification utilities for HTTP responses
"""

from storage_transfer.errors.exceptions import (
    # Enums
    ErrorCategory,
    StorageValidationErrorCode,
    # Base classes
    StorageError,
    ResolutionError,
    ServiceError,
    # Validation errors
    StorageValidationError,
    assert_validation,
    # Resolution errors
    ConfigurationError,
    CredentialsError,
    CredentialsExpiredError,
    # Service errors
    ObjectNotFoundError,
    AccessDeniedError,
    ThrottlingError,
    ServiceUnavailableError,
    ServiceConnectionError,
    # Cancellation
    TransferCanceledError,
    # Classification utilities
    classify_http_status,
    service_error_from_status,
    wrap_exception,
)

__all__ = [
    # Enums
    "ErrorCategory",
    "StorageValidationErrorCode",
    # Base classes
    "StorageError",
    "ResolutionError",
    "ServiceError",
    # Validation errors
    "StorageValidationError",
    "assert_validation",
    # Resolution errors
    "ConfigurationError",
    "CredentialsError",
    "CredentialsExpiredError",
    # Service errors
    "ObjectNotFoundError",
    "AccessDeniedError",
    "ThrottlingError",
    "ServiceUnavailableError",
    "ServiceConnectionError",
    # Cancellation
    "TransferCanceledError",
    # Classification utilities
    "classify_http_status",
    "service_error_from_status",
    "wrap_exception",
]

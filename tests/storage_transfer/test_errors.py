"""Tests for the exception hierarchy and classification helpers."""

import pytest

from storage_transfer.errors import (
    AccessDeniedError,
    ConfigurationError,
    CredentialsExpiredError,
    ErrorCategory,
    ObjectNotFoundError,
    ResolutionError,
    ServiceConnectionError,
    ServiceError,
    ServiceUnavailableError,
    StorageError,
    StorageValidationError,
    StorageValidationErrorCode,
    ThrottlingError,
    TransferCanceledError,
    assert_validation,
    classify_http_status,
    service_error_from_status,
    wrap_exception,
)


class TestErrorHierarchy:
    """Test categories and retryability."""

    def test_categories(self):
        assert StorageValidationError(StorageValidationErrorCode.NO_KEY).category is ErrorCategory.VALIDATION
        assert ConfigurationError("x").category is ErrorCategory.RESOLUTION
        assert CredentialsExpiredError("x").category is ErrorCategory.RESOLUTION
        assert ObjectNotFoundError("x").category is ErrorCategory.SERVICE

    def test_resolution_errors_share_base(self):
        assert isinstance(CredentialsExpiredError("x"), ResolutionError)

    def test_retryable(self):
        assert ThrottlingError("x").is_retryable is True
        assert ServiceConnectionError("x").is_retryable is True
        assert ObjectNotFoundError("x").is_retryable is False
        assert StorageValidationError(StorageValidationErrorCode.NO_KEY).is_retryable is False

    def test_str_includes_cause(self):
        error = ServiceError("Upload failed", cause=OSError("disk"))
        assert str(error) == "Upload failed | Caused by: disk"

    def test_canceled_is_not_storage_error(self):
        reason = RuntimeError("stop")
        error = TransferCanceledError(reason)

        assert not isinstance(error, StorageError)
        assert error.reason is reason
        assert "stop" in str(error)


class TestValidation:
    """Test validation error codes."""

    def test_default_message(self):
        error = StorageValidationError(StorageValidationErrorCode.NO_KEY)
        assert error.code is StorageValidationErrorCode.NO_KEY
        assert str(error) == "Missing key in request"

    def test_ceiling_code_name(self):
        assert (
            StorageValidationErrorCode.URL_EXPIRATION_MAX_LIMIT_EXCEEDED.value
            == "UrlExpirationMaxLimitExceed"
        )

    def test_assert_validation(self):
        assert_validation(True, StorageValidationErrorCode.NO_KEY)

        with pytest.raises(StorageValidationError) as exc_info:
            assert_validation(False, StorageValidationErrorCode.NO_IDENTITY_ID, {"key": "k"})

        assert exc_info.value.context == {"key": "k"}


class TestClassification:
    """Test HTTP status and exception classification."""

    @pytest.mark.parametrize(
        "status,expected",
        [
            (404, ObjectNotFoundError),
            (401, AccessDeniedError),
            (403, AccessDeniedError),
            (429, ThrottlingError),
            (500, ServiceUnavailableError),
            (503, ServiceUnavailableError),
            (400, ServiceError),
            (409, ServiceError),
        ],
    )
    def test_classify_http_status(self, status, expected):
        assert classify_http_status(status) is expected

    def test_service_error_from_status(self):
        error = service_error_from_status(404, "not found", {"key": "k"})

        assert isinstance(error, ObjectNotFoundError)
        assert error.status_code == 404
        assert error.context == {"key": "k"}

    def test_wrap_passes_storage_errors_through(self):
        original = ObjectNotFoundError("missing")
        wrapped = wrap_exception(original, context={"bucket": "b"})

        assert wrapped is original
        assert wrapped.context == {"bucket": "b"}

    def test_wrap_connection_errors(self):
        wrapped = wrap_exception(ConnectionResetError("Connection reset by peer"))

        assert isinstance(wrapped, ServiceConnectionError)
        assert isinstance(wrapped.cause, ConnectionResetError)

    def test_wrap_other_errors(self):
        wrapped = wrap_exception(ValueError("bad payload"))

        assert type(wrapped) is ServiceError

    def test_wrap_uses_default_class_and_message(self):
        cause = ValueError("payload ended early")
        wrapped = wrap_exception(
            cause,
            default_class=ServiceConnectionError,
            context={"key": "k"},
            message="GetObject failed for k",
        )

        assert isinstance(wrapped, ServiceConnectionError)
        assert wrapped.message == "GetObject failed for k"
        assert wrapped.cause is cause
        assert wrapped.context == {"key": "k"}

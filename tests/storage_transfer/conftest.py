"""Shared fixtures for storage_transfer tests."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from storage_transfer.auth.credentials import Credentials
from storage_transfer.models import AccessLevel
from storage_transfer.resolver import ResolvedS3Config, ServiceConfig

FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_resolved(
    credentials: Credentials,
    key_prefix: str = "public/",
    bucket: str = "media-bucket",
    access_level: AccessLevel = AccessLevel.GUEST,
    identity_id=None,
) -> ResolvedS3Config:
    service_config = ServiceConfig(
        region="us-east-1",
        credentials=credentials,
        chunk_size=4,
        request_timeout_seconds=5.0,
    )
    return ResolvedS3Config(
        bucket=bucket,
        key_prefix=key_prefix,
        service_config=service_config,
        credentials=credentials,
        region="us-east-1",
        identity_id=identity_id,
        access_level=access_level,
    )


@pytest.fixture
def credentials():
    """Long-lived credentials without expiration."""
    return Credentials("AKIDEXAMPLE", "secret", session_token="token")


@pytest.fixture
def expiring_credentials():
    """Credentials that expire 200 seconds after FIXED_NOW."""
    return Credentials(
        "AKIDEXAMPLE",
        "secret",
        session_token="token",
        expiration=FIXED_NOW + timedelta(seconds=200),
    )


@pytest.fixture
def resolved(credentials):
    return make_resolved(credentials)


@pytest.fixture
def mock_resolver(resolved):
    """Resolver returning a fixed guest-level resolution."""
    resolver = MagicMock()
    resolver.resolve = AsyncMock(return_value=resolved)
    return resolver


@pytest.fixture
def mock_presigner():
    presigner = MagicMock()
    presigner.get_presigned_url = AsyncMock(
        return_value="https://media-bucket.s3.amazonaws.com/public/photo.jpg?X-Amz-Signature=abc"
    )
    return presigner


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def resolved_factory(credentials):
    """Build a ResolvedS3Config with overrides."""

    def factory(creds=None, **kwargs):
        return make_resolved(creds or credentials, **kwargs)

    return factory

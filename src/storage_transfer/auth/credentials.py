"""
Access credentials and credential providers.

Credentials may carry an expiration instant. The core reads it on every call
(never caches it) to bound presigned URL lifetimes.
"""

import math
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Protocol

from storage_transfer.errors import CredentialsError


@dataclass(frozen=True)
class Credentials:
    """
    Time-limited access credentials.

    Attributes:
        access_key_id: Access key identifier
        secret_access_key: Secret used for request signing
        session_token: Token for temporary credentials (None for long-lived keys)
        expiration: Instant after which the credentials are invalid
            (None = permanent / long-lived)
    """

    access_key_id: str
    secret_access_key: str
    session_token: Optional[str] = None
    expiration: Optional[datetime] = None

    def remaining_seconds(self, now: datetime) -> Optional[int]:
        """
        Whole seconds of validity left at ``now``, or None if no expiration.

        Rounds down, so the result never overstates the remaining lifetime.
        """
        if self.expiration is None:
            return None
        expiration = self.expiration
        if expiration.tzinfo is None:
            expiration = expiration.replace(tzinfo=timezone.utc)
        return math.floor((expiration - now).total_seconds())

    def __repr__(self) -> str:
        return (
            f"Credentials(access_key_id={self.access_key_id!r}, "
            f"expiration={self.expiration!r})"
        )


class CredentialsProvider(Protocol):
    """Source of credentials and the caller's identity."""

    async def get_credentials(self) -> Optional[Credentials]:
        ...

    async def get_identity_id(self) -> Optional[str]:
        ...


def parse_expiration(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 expiration timestamp into an aware UTC datetime.

    Accepts a trailing "Z". Naive timestamps are treated as UTC.
    """
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise CredentialsError(f"Invalid credential expiration: {value}", cause=e) from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class StaticCredentialsProvider:
    """
    Provider returning fixed credentials and identity.

    Usage:
        provider = StaticCredentialsProvider(
            Credentials("AKIA...", "secret", expiration=expiry),
            identity_id="us-east-1:abcd",
        )
    """

    def __init__(
        self,
        credentials: Optional[Credentials],
        identity_id: Optional[str] = None,
    ):
        self._credentials = credentials
        self._identity_id = identity_id

    @classmethod
    def from_env(cls) -> "StaticCredentialsProvider":
        """Build a provider from environment variables.

        Environment variables:
            AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY: Required for credentials
            AWS_SESSION_TOKEN: Optional session token
            AWS_CREDENTIAL_EXPIRATION: Optional ISO-8601 expiration
            STORAGE_IDENTITY_ID: Optional identity for private/protected keys

        Missing access keys yield a provider with no credentials; resolution
        then fails with CredentialsError when an operation needs them.
        """
        access_key_id = os.getenv("AWS_ACCESS_KEY_ID")
        secret_access_key = os.getenv("AWS_SECRET_ACCESS_KEY")

        credentials = None
        if access_key_id and secret_access_key:
            credentials = Credentials(
                access_key_id=access_key_id,
                secret_access_key=secret_access_key,
                session_token=os.getenv("AWS_SESSION_TOKEN") or None,
                expiration=parse_expiration(os.getenv("AWS_CREDENTIAL_EXPIRATION")),
            )

        return cls(credentials, identity_id=os.getenv("STORAGE_IDENTITY_ID") or None)

    async def get_credentials(self) -> Optional[Credentials]:
        return self._credentials

    async def get_identity_id(self) -> Optional[str]:
        return self._identity_id

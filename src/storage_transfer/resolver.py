"""
Configuration and credential resolution.

Turns a logical storage request (key + access level options) into the
physical bucket, key prefix, credentials, and service configuration that a
transfer or presign call needs. Every call resolves afresh; nothing here is
cached, so concurrent operations never share resolver state.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from storage_transfer.auth.credentials import (
    Credentials,
    CredentialsProvider,
    StaticCredentialsProvider,
)
from storage_transfer.config import StorageConfig
from storage_transfer.errors import (
    ConfigurationError,
    CredentialsError,
    StorageValidationErrorCode,
    assert_validation,
)
from storage_transfer.logging import get_logger, log_with_context
from storage_transfer.models import AccessLevel, StorageOptions

logger = get_logger(__name__)


@dataclass(frozen=True)
class ServiceConfig:
    """Per-call settings handed to the object service client and presigner."""

    region: str
    credentials: Credentials
    endpoint_url: Optional[str] = None
    addressing_style: str = "auto"
    chunk_size: int = 64 * 1024
    request_timeout_seconds: float = 300.0
    max_connections: int = 100


@dataclass(frozen=True)
class ResolvedCredentials:
    credentials: Credentials
    identity_id: Optional[str]


@dataclass(frozen=True)
class ResolvedS3Config:
    """Physical location and credentials for one operation."""

    bucket: str
    key_prefix: str
    service_config: ServiceConfig
    credentials: Credentials
    region: str
    identity_id: Optional[str]
    access_level: AccessLevel


class ConfigResolver(Protocol):
    """Resolves storage targets; must be safe to call concurrently."""

    async def resolve(
        self, options: Optional[StorageOptions] = None
    ) -> ResolvedS3Config:
        ...

    async def resolve_credentials(self) -> ResolvedCredentials:
        ...


def get_key_prefix(access_level: AccessLevel, identity_id: Optional[str]) -> str:
    """
    Compute the key prefix for an access level.

    guest -> "public/", protected -> "protected/{id}/", private -> "private/{id}/"

    Raises:
        StorageValidationError: NO_IDENTITY_ID when a private or protected
            prefix has no identity to scope it to
    """
    if access_level == AccessLevel.GUEST:
        return "public/"

    assert_validation(
        bool(identity_id),
        StorageValidationErrorCode.NO_IDENTITY_ID,
        context={"access_level": access_level.value},
    )
    return f"{access_level.value}/{identity_id}/"


def resolve_target_identity(
    options: StorageOptions, identity_id: Optional[str]
) -> Optional[str]:
    """
    Pick the identity whose namespace a request addresses.

    Only an explicit protected access level may read another identity's
    namespace; every other tier is pinned to the caller's own identity.
    """
    if options.access_level == AccessLevel.PROTECTED and options.target_identity_id:
        return options.target_identity_id
    return identity_id


class DefaultConfigResolver:
    """
    Resolver backed by a StorageConfig and a CredentialsProvider.

    Usage:
        resolver = DefaultConfigResolver(
            StorageConfig.from_env(),
            StaticCredentialsProvider.from_env(),
        )
        resolved = await resolver.resolve(TransferOptions(access_level=AccessLevel.PRIVATE))
        final_key = resolved.key_prefix + "photo.jpg"
    """

    def __init__(
        self,
        config: StorageConfig,
        credentials_provider: CredentialsProvider,
    ):
        self._config = config
        self._credentials_provider = credentials_provider

    @property
    def config(self) -> StorageConfig:
        return self._config

    async def resolve_credentials(self) -> ResolvedCredentials:
        """
        Fetch current credentials and identity from the provider.

        Raises:
            CredentialsError: If the provider has no credentials or fails
        """
        try:
            credentials = await self._credentials_provider.get_credentials()
            identity_id = await self._credentials_provider.get_identity_id()
        except CredentialsError:
            raise
        except Exception as e:
            raise CredentialsError("Failed to resolve credentials", cause=e) from e

        if credentials is None:
            raise CredentialsError("Credentials should not be empty")

        return ResolvedCredentials(credentials=credentials, identity_id=identity_id)

    async def resolve(
        self, options: Optional[StorageOptions] = None
    ) -> ResolvedS3Config:
        """
        Resolve bucket, key prefix, credentials, and service config.

        Args:
            options: Per-call overrides (access level, target identity, bucket)

        Raises:
            ConfigurationError: No bucket configured or given
            CredentialsError: Credentials unavailable
            StorageValidationError: Private/protected access without identity
        """
        options = options or StorageOptions()

        bucket = options.bucket or self._config.bucket
        if not bucket:
            raise ConfigurationError("Missing bucket name in storage config")

        resolved = await self.resolve_credentials()

        access_level = options.access_level or self._config.default_access_level
        key_prefix = get_key_prefix(
            access_level, resolve_target_identity(options, resolved.identity_id)
        )

        log_with_context(
            logger,
            logging.DEBUG,
            "Resolved storage target",
            bucket=bucket,
            access_level=access_level.value,
            region=self._config.region,
        )

        return ResolvedS3Config(
            bucket=bucket,
            key_prefix=key_prefix,
            service_config=ServiceConfig(
                region=self._config.region,
                credentials=resolved.credentials,
                endpoint_url=self._config.endpoint_url,
                addressing_style=self._config.addressing_style,
                chunk_size=self._config.chunk_size,
                request_timeout_seconds=self._config.request_timeout_seconds,
                max_connections=self._config.max_connections,
            ),
            credentials=resolved.credentials,
            region=self._config.region,
            identity_id=resolved.identity_id,
            access_level=access_level,
        )


_default_resolver: Optional[ConfigResolver] = None


def get_default_resolver() -> ConfigResolver:
    """
    Return the process-wide resolver built from environment variables.

    The resolver itself holds only static config; credentials are still read
    from the provider on every call.
    """
    global _default_resolver
    if _default_resolver is None:
        _default_resolver = DefaultConfigResolver(
            StorageConfig.from_env(),
            StaticCredentialsProvider.from_env(),
        )
    return _default_resolver


def set_default_resolver(resolver: Optional[ConfigResolver]) -> None:
    """Replace (or with None, reset) the process-wide resolver."""
    global _default_resolver
    _default_resolver = resolver

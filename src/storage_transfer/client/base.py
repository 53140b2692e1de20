"""Object service client and presigner protocols and data types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Protocol

from storage_transfer.auth.credentials import Credentials
from storage_transfer.models import ProgressCallback
from storage_transfer.resolver import ServiceConfig
from storage_transfer.tasks.signal import CancelSignal


@dataclass(frozen=True)
class HeadObjectOutput:
    """Metadata from a HEAD object request."""

    content_length: Optional[int] = None
    content_type: Optional[str] = None
    etag: Optional[str] = None
    last_modified: Optional[datetime] = None
    version_id: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class GetObjectOutput(HeadObjectOutput):
    """Object body plus its metadata from a GET object request."""

    body: bytes = b""


@dataclass(frozen=True)
class PutObjectOutput:
    """Service response to a PUT object request."""

    etag: Optional[str] = None
    version_id: Optional[str] = None


@dataclass(frozen=True)
class PresignOptions:
    """
    Signing parameters for a presigned request.

    Attributes:
        credentials: Credentials the URL is signed with
        region: Signing region
        expiration: URL lifetime in seconds
        endpoint_url: S3-compatible endpoint (None = AWS)
        addressing_style: auto | path | virtual
    """

    credentials: Credentials
    region: str
    expiration: int
    endpoint_url: Optional[str] = None
    addressing_style: str = "auto"

    @classmethod
    def from_service_config(
        cls, config: ServiceConfig, expiration: int
    ) -> "PresignOptions":
        return cls(
            credentials=config.credentials,
            region=config.region,
            expiration=expiration,
            endpoint_url=config.endpoint_url,
            addressing_style=config.addressing_style,
        )


class Presigner(Protocol):
    """Protocol for producing presigned request URLs."""

    async def get_presigned_url(
        self,
        options: PresignOptions,
        *,
        bucket: str,
        key: str,
        method: str = "get_object",
        params: Optional[Dict[str, object]] = None,
    ) -> str:
        """Return a URL granting ``method`` on bucket/key for options.expiration seconds.

        Raises:
            ServiceError: If the URL cannot be generated
        """
        ...


class ObjectClient(Protocol):
    """
    Protocol for the object service.

    Implementations must abort promptly when ``signal`` is cancelled and
    release the underlying connection.
    """

    async def get_object(
        self,
        config: ServiceConfig,
        *,
        bucket: str,
        key: str,
        signal: Optional[CancelSignal] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> GetObjectOutput:
        ...

    async def head_object(
        self,
        config: ServiceConfig,
        *,
        bucket: str,
        key: str,
        signal: Optional[CancelSignal] = None,
    ) -> HeadObjectOutput:
        ...

    async def put_object(
        self,
        config: ServiceConfig,
        *,
        bucket: str,
        key: str,
        body: bytes,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
        signal: Optional[CancelSignal] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> PutObjectOutput:
        ...

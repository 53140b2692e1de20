"""
Request and result types for storage operations.

Requests are plain dataclasses built by callers. Results are Pydantic models
so they can be serialized for callers that forward them (e.g. over an API).
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class AccessLevel(str, Enum):
    """Logical namespace qualifier controlling key prefixing."""

    GUEST = "guest"
    PROTECTED = "protected"
    PRIVATE = "private"


class TransferDirection(str, Enum):
    """Direction of a data-movement job."""

    DOWNLOAD = "download"
    UPLOAD = "upload"


@dataclass(frozen=True)
class TransferProgress:
    """Byte-level progress of a single transfer."""

    transferred_bytes: int
    total_bytes: Optional[int] = None


ProgressCallback = Callable[[TransferProgress], None]


# =============================================================================
# Options
# =============================================================================


@dataclass
class StorageOptions:
    """
    Options shared by every operation.

    Attributes:
        access_level: Override of the configured default access level
        target_identity_id: Identity whose namespace to use; honored only
            for the protected access level
        bucket: Per-call bucket override
    """

    access_level: Optional[AccessLevel] = None
    target_identity_id: Optional[str] = None
    bucket: Optional[str] = None


@dataclass
class TransferOptions(StorageOptions):
    """Options for download_data and upload_data."""

    on_progress: Optional[ProgressCallback] = None
    content_type: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)


@dataclass
class GetUrlOptions(StorageOptions):
    """
    Options for get_url.

    Attributes:
        expires_in: Requested URL lifetime in seconds (default 900)
        validate_object_existence: HEAD the object first and fail if absent
    """

    expires_in: Optional[int] = None
    validate_object_existence: bool = False


# =============================================================================
# Requests
# =============================================================================


@dataclass
class DownloadDataRequest:
    key: str
    options: TransferOptions = field(default_factory=TransferOptions)


@dataclass
class UploadDataRequest:
    key: str
    data: bytes
    options: TransferOptions = field(default_factory=TransferOptions)


@dataclass
class GetPropertiesRequest:
    key: str
    options: StorageOptions = field(default_factory=StorageOptions)


@dataclass
class GetUrlRequest:
    key: str
    options: GetUrlOptions = field(default_factory=GetUrlOptions)


# =============================================================================
# Results
# =============================================================================


class ObjectProperties(BaseModel):
    """Metadata attributes of a stored object.

    Attributes:
        key: Logical key the caller asked for (without prefix)
        size: Object size in bytes
        content_type: MIME type reported by the service
        etag: Strong validator of the object content
        last_modified: Last modification time reported by the service
        version_id: Object version when bucket versioning is enabled
        metadata: User metadata map (x-amz-meta-* headers)
    """

    key: str = Field(..., min_length=1)
    size: Optional[int] = Field(default=None, ge=0)
    content_type: Optional[str] = None
    etag: Optional[str] = None
    last_modified: Optional[datetime] = None
    version_id: Optional[str] = None
    metadata: Dict[str, str] = Field(default_factory=dict)


class DownloadDataResult(ObjectProperties):
    """Object body plus every metadata attribute returned by the service."""

    body: bytes = Field(..., description="Object content")


class UploadDataResult(BaseModel):
    """Outcome of a completed upload."""

    key: str = Field(..., min_length=1)
    size: int = Field(..., ge=0)
    etag: Optional[str] = None
    version_id: Optional[str] = None
    content_type: Optional[str] = None
    metadata: Dict[str, str] = Field(default_factory=dict)


class GetUrlResult(BaseModel):
    """Presigned URL and the absolute instant it stops being valid."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., min_length=1)
    expires_at: datetime

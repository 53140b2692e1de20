"""
storage_transfer: cancelable, credential-aware object storage transfers.

Import directly from sub-packages for collaborators:
    from storage_transfer.client import HttpObjectClient, BotocorePresigner
    from storage_transfer.resolver import DefaultConfigResolver
"""

from storage_transfer.apis import (
    DEFAULT_PRESIGN_EXPIRATION,
    MAX_URL_EXPIRATION,
    download_data,
    get_properties,
    get_url,
    upload_data,
)
from storage_transfer.errors import StorageError, TransferCanceledError
from storage_transfer.models import (
    AccessLevel,
    DownloadDataRequest,
    DownloadDataResult,
    GetPropertiesRequest,
    GetUrlOptions,
    GetUrlRequest,
    GetUrlResult,
    ObjectProperties,
    StorageOptions,
    TransferOptions,
    TransferProgress,
    UploadDataRequest,
    UploadDataResult,
)
from storage_transfer.tasks import CancelableTask, CancelSignal, TaskState

__version__ = "0.1.0"

__all__ = [
    "AccessLevel",
    "CancelSignal",
    "CancelableTask",
    "DEFAULT_PRESIGN_EXPIRATION",
    "DownloadDataRequest",
    "DownloadDataResult",
    "GetPropertiesRequest",
    "GetUrlOptions",
    "GetUrlRequest",
    "GetUrlResult",
    "MAX_URL_EXPIRATION",
    "ObjectProperties",
    "StorageError",
    "StorageOptions",
    "TaskState",
    "TransferCanceledError",
    "TransferOptions",
    "TransferProgress",
    "UploadDataRequest",
    "UploadDataResult",
    "download_data",
    "get_properties",
    "get_url",
    "upload_data",
]

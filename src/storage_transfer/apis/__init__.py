"""
Storage operations.

Components:
    - download_data / upload_data: Cancelable transfer tasks
    - get_properties: Object metadata lookup
    - get_url: Presigned URL with credential-bounded expiration
"""

from storage_transfer.apis.download_data import download_data
from storage_transfer.apis.get_properties import get_properties
from storage_transfer.apis.get_url import (
    DEFAULT_PRESIGN_EXPIRATION,
    MAX_URL_EXPIRATION,
    get_url,
    reconcile_expiration,
)
from storage_transfer.apis.upload_data import upload_data

__all__ = [
    "DEFAULT_PRESIGN_EXPIRATION",
    "MAX_URL_EXPIRATION",
    "download_data",
    "get_properties",
    "get_url",
    "reconcile_expiration",
    "upload_data",
]

"""
Object service collaborators.

Components:
    - ObjectClient / Presigner: Protocols consumed by the storage APIs
    - HttpObjectClient: aiohttp client issuing presigned GET/HEAD/PUT requests
    - BotocorePresigner: SigV4 presigned URLs via botocore
"""

from storage_transfer.client.base import (
    GetObjectOutput,
    HeadObjectOutput,
    ObjectClient,
    PresignOptions,
    Presigner,
    PutObjectOutput,
)
from storage_transfer.client.http_client import HttpObjectClient, parse_object_headers
from storage_transfer.client.presign import BotocorePresigner

__all__ = [
    "BotocorePresigner",
    "GetObjectOutput",
    "HeadObjectOutput",
    "HttpObjectClient",
    "ObjectClient",
    "PresignOptions",
    "Presigner",
    "PutObjectOutput",
    "parse_object_headers",
]

"""Object metadata lookup."""

from typing import Optional

from storage_transfer.client.base import ObjectClient
from storage_transfer.client.http_client import HttpObjectClient
from storage_transfer.errors import StorageValidationErrorCode, assert_validation
from storage_transfer.models import GetPropertiesRequest, ObjectProperties
from storage_transfer.resolver import ConfigResolver, get_default_resolver


async def get_properties(
    request: GetPropertiesRequest,
    *,
    resolver: Optional[ConfigResolver] = None,
    client: Optional[ObjectClient] = None,
) -> ObjectProperties:
    """
    Fetch size, type, etag and user metadata of an object.

    Raises:
        StorageValidationError: NO_KEY
        ObjectNotFoundError: Object does not exist
    """
    assert_validation(bool(request.key), StorageValidationErrorCode.NO_KEY)

    resolver = resolver or get_default_resolver()
    client = client or HttpObjectClient()

    resolved = await resolver.resolve(request.options)
    output = await client.head_object(
        resolved.service_config,
        bucket=resolved.bucket,
        key=resolved.key_prefix + request.key,
    )

    return ObjectProperties(
        key=request.key,
        size=output.content_length,
        content_type=output.content_type,
        etag=output.etag,
        last_modified=output.last_modified,
        version_id=output.version_id,
        metadata=output.metadata,
    )

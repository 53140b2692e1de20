"""Single-request object upload as a cancelable transfer task."""

import logging
from typing import Optional

from storage_transfer.client.base import ObjectClient
from storage_transfer.client.http_client import HttpObjectClient
from storage_transfer.errors import StorageValidationErrorCode, assert_validation
from storage_transfer.logging import get_logger, log_with_context
from storage_transfer.models import (
    TransferDirection,
    UploadDataRequest,
    UploadDataResult,
)
from storage_transfer.resolver import ConfigResolver, get_default_resolver
from storage_transfer.tasks.signal import CancelSignal
from storage_transfer.tasks.transfer import TransferTask, create_transfer_task

logger = get_logger(__name__)


def upload_data(
    request: UploadDataRequest,
    *,
    resolver: Optional[ConfigResolver] = None,
    client: Optional[ObjectClient] = None,
) -> TransferTask:
    """
    Start uploading bytes to an object.

    Raises:
        StorageValidationError: NO_KEY, before any task is created
    """
    assert_validation(bool(request.key), StorageValidationErrorCode.NO_KEY)

    options = request.options
    data = bytes(request.data)
    signal = CancelSignal()

    async def job() -> UploadDataResult:
        config_resolver = resolver or get_default_resolver()
        object_client = client or HttpObjectClient()

        resolved = await config_resolver.resolve(options)
        final_key = resolved.key_prefix + request.key

        log_with_context(
            logger,
            logging.DEBUG,
            "Uploading object",
            bucket=resolved.bucket,
            key=final_key,
            access_level=resolved.access_level.value,
            total_bytes=len(data),
        )

        output = await object_client.put_object(
            resolved.service_config,
            bucket=resolved.bucket,
            key=final_key,
            body=data,
            content_type=options.content_type,
            metadata=options.metadata or None,
            signal=signal,
            on_progress=options.on_progress,
        )

        return UploadDataResult(
            key=request.key,
            size=len(data),
            etag=output.etag,
            version_id=output.version_id,
            content_type=options.content_type,
            metadata=options.metadata,
        )

    return create_transfer_task(job, signal.cancel, TransferDirection.UPLOAD)

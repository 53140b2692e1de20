"""In-memory object download as a cancelable transfer task."""

import logging
from typing import Optional

from storage_transfer.client.base import ObjectClient
from storage_transfer.client.http_client import HttpObjectClient
from storage_transfer.errors import StorageValidationErrorCode, assert_validation
from storage_transfer.logging import get_logger, log_with_context
from storage_transfer.models import (
    DownloadDataRequest,
    DownloadDataResult,
    TransferDirection,
)
from storage_transfer.resolver import ConfigResolver, get_default_resolver
from storage_transfer.tasks.signal import CancelSignal
from storage_transfer.tasks.transfer import TransferTask, create_transfer_task

logger = get_logger(__name__)


def download_data(
    request: DownloadDataRequest,
    *,
    resolver: Optional[ConfigResolver] = None,
    client: Optional[ObjectClient] = None,
) -> TransferTask:
    """
    Start downloading an object into memory.

    Returns immediately; the download runs on the event loop. Await
    ``task.result`` for the DownloadDataResult, or call ``task.cancel()`` to
    abort the in-flight request.

    Args:
        request: Key and transfer options (access level, progress callback)
        resolver: Config resolver (default: environment-backed resolver)
        client: Object service client (default: HttpObjectClient)

    Raises:
        StorageValidationError: NO_KEY, before any task is created
    """
    assert_validation(bool(request.key), StorageValidationErrorCode.NO_KEY)

    options = request.options
    signal = CancelSignal()

    async def job() -> DownloadDataResult:
        config_resolver = resolver or get_default_resolver()
        object_client = client or HttpObjectClient()

        resolved = await config_resolver.resolve(options)
        final_key = resolved.key_prefix + request.key

        log_with_context(
            logger,
            logging.DEBUG,
            "Downloading object",
            bucket=resolved.bucket,
            key=final_key,
            access_level=resolved.access_level.value,
        )

        output = await object_client.get_object(
            resolved.service_config,
            bucket=resolved.bucket,
            key=final_key,
            signal=signal,
            on_progress=options.on_progress,
        )

        return DownloadDataResult(
            key=request.key,
            body=output.body,
            size=output.content_length,
            content_type=output.content_type,
            etag=output.etag,
            last_modified=output.last_modified,
            version_id=output.version_id,
            metadata=output.metadata,
        )

    return create_transfer_task(job, signal.cancel, TransferDirection.DOWNLOAD)

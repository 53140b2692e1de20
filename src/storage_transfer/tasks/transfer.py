"""
Transfer task factory.

Wraps a data-movement job (download or upload) in a CancelableTask and adds
lifecycle logging and prometheus outcome metrics. Tasks are fully
independent: there is no registry, deduplication, or concurrency limit.
"""

import logging
import time
import uuid
from typing import Any, Optional

from storage_transfer.logging import (
    get_logger,
    log_exception,
    log_with_context,
    set_log_context,
)
from storage_transfer.metrics import record_transfer_outcome
from storage_transfer.models import TransferDirection
from storage_transfer.tasks.cancelable import (
    CancelableTask,
    CancelCallback,
    Job,
    TaskState,
)

logger = get_logger(__name__)


class TransferTask(CancelableTask):
    """
    CancelableTask for a download or upload.

    Attributes:
        transfer_id: Random identifier used for log correlation
        direction: TransferDirection of the job
    """

    def __init__(
        self,
        job: Job,
        on_cancel: Optional[CancelCallback],
        direction: TransferDirection,
    ):
        self.transfer_id = uuid.uuid4().hex
        self.direction = direction
        self._started = time.monotonic()

        async def traced_job() -> Any:
            set_log_context(transfer_id=self.transfer_id, operation=direction.value)
            return await job()

        super().__init__(traced_job, on_cancel, name=f"{direction.value}-{self.transfer_id}")

        log_with_context(
            logger,
            logging.DEBUG,
            "Transfer task created",
            transfer_id=self.transfer_id,
            direction=direction.value,
        )

    def _on_settled(self, value: Any, error: Optional[BaseException]) -> None:
        duration = time.monotonic() - self._started
        size = getattr(value, "size", None) or 0

        if self.state is TaskState.ERROR and error is not None:
            log_exception(
                logger,
                error,
                "Transfer task failed",
                level=logging.WARNING,
                include_traceback=False,
                transfer_id=self.transfer_id,
                direction=self.direction.value,
                task_state=self.state.value,
                duration_ms=round(duration * 1000, 2),
            )
        else:
            log_with_context(
                logger,
                logging.DEBUG,
                "Transfer task settled",
                transfer_id=self.transfer_id,
                direction=self.direction.value,
                task_state=self.state.value,
                bytes_transferred=size,
                duration_ms=round(duration * 1000, 2),
            )

        record_transfer_outcome(
            direction=self.direction.value,
            state=self.state.value,
            duration_seconds=duration,
            bytes_transferred=size,
        )


def create_transfer_task(
    job: Job,
    on_cancel: Optional[CancelCallback],
    direction: TransferDirection = TransferDirection.DOWNLOAD,
) -> TransferTask:
    """
    Build a cancelable transfer task around a data-movement job.

    Args:
        job: Zero-argument coroutine function performing the transfer
        on_cancel: Called with the cancel reason; wire it to the job's
            CancelSignal so the underlying I/O aborts
        direction: Download or upload, for logging and metrics

    Returns:
        TransferTask exposing ``result``, ``state`` and ``cancel``
    """
    return TransferTask(job, on_cancel, direction)

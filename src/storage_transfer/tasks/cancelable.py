"""
Cancelable task: an in-flight job with a single settled result.

The task owns the asyncio.Task running the job until settlement. Callers get
a future (``result``) and a control handle (``cancel``) on the same object.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from storage_transfer.errors import TransferCanceledError
from storage_transfer.logging import get_logger, log_with_context

logger = get_logger(__name__)

T = TypeVar("T")

Job = Callable[[], Awaitable[T]]
CancelCallback = Callable[[Optional[BaseException]], None]


class TaskState(str, Enum):
    """Lifecycle of a cancelable task. Every state but IN_PROGRESS is terminal."""

    IN_PROGRESS = "in_progress"
    SUCCESS = "success"
    ERROR = "error"
    CANCELED = "canceled"


class CancelableTask(Generic[T]):
    """
    Handle to an asynchronous job that can be aborted from outside.

    The job starts immediately on the running event loop. ``result`` settles
    exactly once: with the job's value, with the job's exception, or with
    TransferCanceledError.

    Cancellation:
        ``cancel()`` calls ``on_cancel(reason)`` synchronously (typically
        tripping the job's CancelSignal) and cancels the asyncio task running
        the job, which interrupts whatever I/O the job is suspended on.
        A cancel issued before the job's first step means the job body never
        runs. Once the job has finished, cancel() is a no-op and its outcome
        stands.

    Usage:
        signal = CancelSignal()
        task = CancelableTask(lambda: fetch(signal), on_cancel=signal.cancel)
        task.cancel()
        try:
            await task.result
        except TransferCanceledError:
            assert task.state is TaskState.CANCELED
    """

    def __init__(
        self,
        job: Job,
        on_cancel: Optional[CancelCallback] = None,
        name: Optional[str] = None,
    ):
        loop = asyncio.get_running_loop()

        self._on_cancel = on_cancel
        self._state = TaskState.IN_PROGRESS
        self._cancel_requested = False
        self._cancel_reason: Optional[BaseException] = None

        self.result: "asyncio.Future[T]" = loop.create_future()
        self.result.add_done_callback(self._on_result_done)

        self._runner: "asyncio.Task[T]" = loop.create_task(self._run(job), name=name)
        self._runner.add_done_callback(self._on_runner_done)

    @property
    def state(self) -> TaskState:
        return self._state

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_requested

    def done(self) -> bool:
        """Whether the task has reached a terminal state."""
        return self._state is not TaskState.IN_PROGRESS

    def cancel(self, reason: Optional[BaseException] = None) -> None:
        """
        Request cancellation.

        Safe to call any number of times, before or after completion; only the
        first call made while the job is still running has effect.

        Args:
            reason: Optional exception recorded as the cancellation reason
        """
        if self._cancel_requested or self._runner.done():
            return

        self._cancel_requested = True
        self._cancel_reason = reason

        log_with_context(
            logger,
            logging.DEBUG,
            "Cancel requested",
            task_state=self._state.value,
            error_message=str(reason) if reason is not None else None,
        )

        try:
            if self._on_cancel is not None:
                self._on_cancel(reason)
        finally:
            self._runner.cancel()

    async def _run(self, job: Job) -> Any:
        return await job()

    def _on_runner_done(self, runner: "asyncio.Task[T]") -> None:
        if runner.cancelled():
            self._settle_canceled(self._cancel_reason)
            return

        exc = runner.exception()
        if exc is not None:
            if isinstance(exc, TransferCanceledError) or self._cancel_requested:
                # Job observed the signal, or its I/O failed because the
                # signal tore the request down.
                reason = self._cancel_reason
                if reason is None and isinstance(exc, TransferCanceledError):
                    reason = exc.reason
                self._settle_canceled(reason)
            else:
                self._settle(TaskState.ERROR, error=exc)
            return

        if self._cancel_requested:
            # Job swallowed the cancellation; it still must not succeed.
            self._settle_canceled(self._cancel_reason)
        else:
            self._settle(TaskState.SUCCESS, value=runner.result())

    def _on_result_done(self, result: "asyncio.Future[T]") -> None:
        # A caller awaiting ``result`` was itself cancelled; asyncio cancels the
        # awaited future, which we treat as a cancel request for the job.
        if result.cancelled() and self._state is TaskState.IN_PROGRESS:
            self.cancel()

    def _settle_canceled(self, reason: Optional[BaseException]) -> None:
        error = TransferCanceledError(reason)
        error.__cause__ = reason
        self._settle(TaskState.CANCELED, error=error)
        if not self.result.cancelled():
            # Canceled tasks are commonly dropped without awaiting ``result``.
            self.result.exception()

    def _settle(
        self,
        state: TaskState,
        value: Any = None,
        error: Optional[BaseException] = None,
    ) -> None:
        if self._state is not TaskState.IN_PROGRESS:
            return

        self._state = state
        if not self.result.done():
            if error is not None:
                self.result.set_exception(error)
            else:
                self.result.set_result(value)

        self._on_settled(value, error)

    def _on_settled(self, value: Any, error: Optional[BaseException]) -> None:
        """Hook for subclasses, called once right after settlement."""


def create_cancelable_task(
    job: Job,
    on_cancel: Optional[CancelCallback] = None,
) -> CancelableTask:
    """
    Start ``job`` and return its cancelable handle.

    Must be called from a coroutine or callback running on an event loop.

    Args:
        job: Zero-argument coroutine function performing the work
        on_cancel: Called synchronously with the reason on the first cancel()

    Returns:
        CancelableTask exposing ``result`` and ``cancel``
    """
    return CancelableTask(job, on_cancel)

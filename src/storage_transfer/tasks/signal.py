"""
Cooperative cancellation signal shared between a task and its job.

A CancelSignal moves from active to cancelled exactly once. The canceling
caller and the running job are the only two parties touching it, and both
run on the same event loop thread, so the transition needs no lock.
"""

import asyncio
from typing import Callable, List, Optional

from storage_transfer.errors import TransferCanceledError

CancelListener = Callable[[Optional[BaseException]], None]


class CancelSignal:
    """
    One-way cancellation flag with listeners.

    Jobs pass the signal down to every I/O primitive they issue. Primitives
    either poll ``raise_if_cancelled()`` between chunks or register a
    listener that tears down the in-flight request.

    Usage:
        signal = CancelSignal()
        signal.add_listener(lambda reason: response.close())
        ...
        signal.cancel(RuntimeError("user navigated away"))
        assert signal.cancelled
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: Optional[BaseException] = None
        self._listeners: List[CancelListener] = []
        self._event: Optional[asyncio.Event] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> Optional[BaseException]:
        return self._reason

    def cancel(self, reason: Optional[BaseException] = None) -> bool:
        """
        Trip the signal.

        Only the first call has effect; later calls (and their reasons) are
        ignored.

        Returns:
            True if this call performed the transition
        """
        if self._cancelled:
            return False

        self._cancelled = True
        self._reason = reason

        if self._event is not None:
            self._event.set()

        listeners, self._listeners = self._listeners, []
        for listener in listeners:
            listener(reason)
        return True

    def add_listener(self, listener: CancelListener) -> None:
        """
        Register a callback run synchronously on cancellation.

        If the signal is already cancelled the callback runs immediately.
        """
        if self._cancelled:
            listener(self._reason)
            return
        self._listeners.append(listener)

    def remove_listener(self, listener: CancelListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def raise_if_cancelled(self) -> None:
        """Raise TransferCanceledError if the signal has been tripped."""
        if self._cancelled:
            raise TransferCanceledError(self._reason)

    async def wait(self) -> Optional[BaseException]:
        """Suspend until the signal is cancelled; return the reason."""
        if not self._cancelled:
            if self._event is None:
                self._event = asyncio.Event()
            await self._event.wait()
        return self._reason

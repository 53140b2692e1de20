"""
Cancelable units of work.

Components:
    - CancelSignal: One-way cancellation flag passed down to I/O primitives
    - CancelableTask: Job handle with a single-settlement result future
    - TransferTask / create_transfer_task: Download and upload task factory
"""

from storage_transfer.tasks.cancelable import (
    CancelableTask,
    TaskState,
    create_cancelable_task,
)
from storage_transfer.tasks.signal import CancelSignal
from storage_transfer.tasks.transfer import TransferTask, create_transfer_task

__all__ = [
    "CancelSignal",
    "CancelableTask",
    "TaskState",
    "TransferTask",
    "create_cancelable_task",
    "create_transfer_task",
]

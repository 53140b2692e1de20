"""Context variables injected into every log record."""

from contextvars import ContextVar
from typing import Dict, Optional

_transfer_id: ContextVar[Optional[str]] = ContextVar("transfer_id", default=None)
_operation: ContextVar[Optional[str]] = ContextVar("operation", default=None)


def set_log_context(
    transfer_id: Optional[str] = None,
    operation: Optional[str] = None,
) -> None:
    """
    Set logging context for the current task.

    Context variables follow asyncio tasks, so each transfer task keeps its
    own transfer_id even when tasks interleave.
    """
    if transfer_id is not None:
        _transfer_id.set(transfer_id)
    if operation is not None:
        _operation.set(operation)


def get_log_context() -> Dict[str, Optional[str]]:
    """Get current logging context."""
    return {
        "transfer_id": _transfer_id.get(),
        "operation": _operation.get(),
    }


def clear_log_context() -> None:
    """Reset all context variables."""
    _transfer_id.set(None)
    _operation.set(None)

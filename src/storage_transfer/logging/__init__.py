"""
Structured logging module.

Import directly from sub-modules:
    from storage_transfer.logging.setup import get_logger, setup_logging
    from storage_transfer.logging.utilities import log_with_context, log_exception
    from storage_transfer.logging.context import set_log_context
"""

from storage_transfer.logging.context import (
    clear_log_context,
    get_log_context,
    set_log_context,
)
from storage_transfer.logging.setup import get_logger, setup_logging
from storage_transfer.logging.utilities import log_exception, log_with_context

__all__ = [
    "clear_log_context",
    "get_log_context",
    "get_logger",
    "log_exception",
    "log_with_context",
    "set_log_context",
    "setup_logging",
]

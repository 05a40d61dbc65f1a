"""
Structured logging for Chat Archive.

One decorator (``track``) for operation timing and one function
(``log_event``) for discrete events, both tagged with a per-request
correlation id.
"""

from .context import (
    get_correlation_id,
    new_correlation_id,
    set_correlation_id,
    set_operation_context,
)
from .smart_logger import (
    log_operation_error,
    log_operation_success,
    track,
)
from .structured import StructuredLogger, log_event

__all__ = [
    # Primary API
    "track",
    "log_event",
    "get_correlation_id",
    "new_correlation_id",
    "set_correlation_id",
    "set_operation_context",
    # Manual logging helpers
    "log_operation_success",
    "log_operation_error",
    # Advanced usage
    "StructuredLogger",
]

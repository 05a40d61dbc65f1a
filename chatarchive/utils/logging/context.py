"""
Context variables for request-scoped logging.

Each HTTP request (and each scheduled cleanup run) gets its own correlation
id so the events it emits across both stores can be grouped.
"""

import contextvars
import uuid
from typing import Any, Dict, Optional

_correlation_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "correlation_id", default=None
)
_operation_context: contextvars.ContextVar[Optional[Dict[str, Any]]] = (
    contextvars.ContextVar("operation_context", default=None)
)


def new_correlation_id() -> str:
    """Generate and install a fresh correlation id for the current context."""
    correlation_id = str(uuid.uuid4())
    _correlation_id.set(correlation_id)
    return correlation_id


def get_correlation_id() -> str:
    """
    Get the current correlation ID, generating one if none exists.

    Returns:
        Correlation ID string for tracking requests across components
    """
    correlation_id = _correlation_id.get()
    if correlation_id is None:
        correlation_id = new_correlation_id()
    return correlation_id


def set_correlation_id(correlation_id: str) -> None:
    """
    Set the correlation ID for the current context.

    Args:
        correlation_id: Identifier supplied by the caller (e.g. X-Request-ID)
    """
    _correlation_id.set(correlation_id)


def set_operation_context(**context: Any) -> None:
    """Merge key/value pairs into the operation context of the current task."""
    current = _operation_context.get() or {}
    _operation_context.set({**current, **context})


def get_operation_context() -> Dict[str, Any]:
    """
    Get the current operation context dictionary.

    Returns:
        Dictionary containing operation-scoped context data
    """
    context = _operation_context.get()
    return context.copy() if context is not None else {}

"""
Operation tracking decorator.

``track`` wraps a sync or async callable and emits operation_started /
operation_completed / operation_failed events with timing and selected
arguments. Hot read paths can be sampled; destructive operations are
always logged.
"""

import asyncio
import functools
import logging
import random
import time
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union, cast

from .context import get_correlation_id
from .structured import log_event

F = TypeVar("F", bound=Callable[..., Any])


class LogConfig:
    """Global configuration for operation tracking."""

    SAMPLE_RATES = {
        "high_frequency": 0.1,
        "medium_frequency": 0.5,
        "low_frequency": 1.0,
    }

    SENSITIVE_KEYS = {"password", "token", "secret", "ca_b64", "auth"}
    LARGE_CONTENT_KEYS = {"content", "data", "file_data", "body"}
    MAX_ARG_LENGTH = 100

    # Always logged regardless of sampling
    CRITICAL_OPS = {"delete", "upload", "cleanup", "create", "initialize"}


def track(
    operation: Optional[str] = None,
    level: int = logging.INFO,
    frequency: str = "low_frequency",
    include_args: Union[bool, List[str]] = True,
    include_result: bool = True,
    track_performance: bool = True,
    emit_events: bool = True,
):
    """
    Decorator that logs the lifecycle of an operation.

    Args:
        operation: Operation name (derived from the function if None)
        level: Log level for this operation
        frequency: Sampling category (high_frequency, medium_frequency,
            low_frequency)
        include_args: True for all keyword args, a list for specific ones,
            False for none
        include_result: Whether to log return value info
        track_performance: Whether to record duration
        emit_events: False to stay silent except on errors

    Examples:
        @track(operation="message_list", frequency="high_frequency")
        @track(include_args=["conversation_id"])
    """

    def decorator(func: F) -> F:
        op_name = operation or _get_operation_name(func)

        def _tracker(args: tuple, kwargs: dict) -> "OperationTracker":
            return OperationTracker(
                operation=op_name,
                level=level,
                include_args=include_args,
                include_result=include_result,
                track_performance=track_performance,
                emit_events=emit_events,
                args=args,
                kwargs=kwargs,
            )

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            if not _should_log(op_name, frequency):
                return await func(*args, **kwargs)

            tracker = _tracker(args, kwargs)
            tracker.on_enter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                tracker.on_exit(type(e), e)
                raise
            tracker.set_result(result)
            tracker.on_exit(None, None)
            return result

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            if not _should_log(op_name, frequency):
                return func(*args, **kwargs)

            tracker = _tracker(args, kwargs)
            tracker.on_enter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                tracker.on_exit(type(e), e)
                raise
            tracker.set_result(result)
            tracker.on_exit(None, None)
            return result

        if asyncio.iscoroutinefunction(func):
            return cast(F, async_wrapper)
        return cast(F, sync_wrapper)

    return decorator


class OperationTracker:
    """Collects timing and context for one tracked call."""

    def __init__(
        self,
        operation: str,
        level: int,
        include_args: Union[bool, List[str]],
        include_result: bool,
        track_performance: bool,
        emit_events: bool,
        args: tuple,
        kwargs: dict,
    ):
        self.operation = operation
        self.level = level
        self.include_args = include_args
        self.include_result = include_result
        self.track_performance = track_performance
        self.emit_events = emit_events
        self.args = args
        self.kwargs = kwargs

        self.start_time: Optional[float] = None
        self.correlation_id: Optional[str] = None
        self.result: Any = None
        self.metrics: Dict[str, Any] = {}

    def on_enter(self) -> None:
        if self.track_performance:
            self.start_time = time.perf_counter()

        self.correlation_id = get_correlation_id()

        if self.emit_events and self.level <= logging.DEBUG:
            log_event("operation_started", self._build_start_context(), self.level)

    def on_exit(self, exc_type: Optional[type], exc_val: Optional[Exception]) -> None:
        if self.track_performance and self.start_time:
            self.metrics["duration_ms"] = int(
                (time.perf_counter() - self.start_time) * 1000
            )

        # Failures are always reported, even in silent mode
        if exc_type is None and not self.emit_events:
            return

        context = self._build_exit_context(exc_type, exc_val)
        if exc_type is None:
            log_event("operation_completed", context, self.level)
        else:
            log_event("operation_failed", context, logging.ERROR)

    def set_result(self, result: Any) -> None:
        self.result = result

    def _build_start_context(self) -> Dict[str, Any]:
        context = {
            "operation": self.operation,
            "correlation_id": self.correlation_id,
        }
        if self.include_args:
            context.update(_extract_safe_args(self.kwargs, self.include_args))
        return context

    def _build_exit_context(
        self, exc_type: Optional[type], exc_val: Optional[Exception]
    ) -> Dict[str, Any]:
        context = {
            **self._build_start_context(),
            "success": exc_type is None,
            **self.metrics,
        }

        if self.include_result and exc_type is None and self.result is not None:
            context.update(_extract_result_info(self.result))

        if exc_type is not None:
            context.update(
                {
                    "error_type": exc_type.__name__,
                    "error_message": str(exc_val) if exc_val else "",
                }
            )

        return context


def _get_operation_name(func: Callable) -> str:
    return func.__qualname__.replace(".", "_").lower()


def _should_log(operation: str, frequency: str) -> bool:
    """Determine if operation should be logged based on sampling."""
    if any(critical in operation.lower() for critical in LogConfig.CRITICAL_OPS):
        return True

    sample_rate = LogConfig.SAMPLE_RATES.get(frequency, 1.0)
    return random.random() < sample_rate


def _extract_safe_args(
    kwargs: dict, include_keys: Union[bool, List[str]]
) -> Dict[str, Any]:
    if include_keys is True:
        include_keys = set(kwargs.keys())
    else:
        include_keys = set(include_keys or [])

    return {
        f"arg_{key}": _sanitize_value(key, value)
        for key, value in kwargs.items()
        if key in include_keys
    }


def _sanitize_value(key: str, value: Any) -> Any:
    """Sanitize a single value for logging."""
    if any(sensitive in key.lower() for sensitive in LogConfig.SENSITIVE_KEYS):
        return "[REDACTED]"

    if key.lower() in LogConfig.LARGE_CONTENT_KEYS and isinstance(
        value, (str, bytes, bytearray)
    ):
        return f"<{len(value)} {'chars' if isinstance(value, str) else 'bytes'}>"

    if isinstance(value, (str, int, float, bool, type(None))):
        if isinstance(value, str) and len(value) > LogConfig.MAX_ARG_LENGTH:
            return f"{value[:LogConfig.MAX_ARG_LENGTH]}..."
        return value

    return f"<{type(value).__name__}>"


def _extract_result_info(result: Any) -> Dict[str, Any]:
    """Extract safe information about the result."""
    result_info: Dict[str, Any] = {"result_type": type(result).__name__}

    # Result types from chatarchive.utils.result
    if hasattr(result, "is_failure"):
        result_info["operation_success"] = not result.is_failure()
        if result.is_failure():
            result_info["error_type"] = getattr(result, "error_type", None)
        return result_info

    if isinstance(result, (list, tuple)):
        result_info["result_length"] = len(result)
    elif isinstance(result, dict):
        result_info["result_keys_count"] = len(result.keys())

    return result_info


def log_operation_success(operation: str, duration_ms: Optional[int] = None, **context):
    """Manually log operation success."""
    context.update(
        {
            "operation": operation,
            "correlation_id": get_correlation_id(),
            "success": True,
        }
    )
    if duration_ms is not None:
        context["duration_ms"] = duration_ms
    log_event("operation_completed", context)


def log_operation_error(
    operation: str, error: Exception, duration_ms: Optional[int] = None, **context
):
    """Manually log operation error."""
    context.update(
        {
            "operation": operation,
            "correlation_id": get_correlation_id(),
            "success": False,
            "error_type": type(error).__name__,
            "error_message": str(error),
        }
    )
    if duration_ms is not None:
        context["duration_ms"] = duration_ms
    log_event("operation_failed", context, logging.ERROR)

"""
Structured logging utilities for event-based logging.

Provides structured event logging with consistent field names and a
human-readable development formatter for the events this service emits.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from .context import get_correlation_id, get_operation_context


class StructuredLogger:
    """
    Structured logger that creates consistent, searchable log events.

    The event payload travels on the log record as ``structured_data`` so
    formatters can render it without parsing the message.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def event(
        self,
        event_name: str,
        data: Optional[Dict[str, Any]] = None,
        level: int = logging.INFO,
    ):
        """
        Log a structured event with optional data.

        Args:
            event_name: Name of the event (e.g., 'attachment_uploaded')
            data: Dictionary of structured data to include
            level: Log level (defaults to INFO)
        """
        if not self.logger.isEnabledFor(level):
            return

        structured_data = {
            "event": event_name,
            "correlation_id": get_correlation_id(),
        }

        operation_context = get_operation_context()
        if operation_context:
            structured_data.update(operation_context)

        if data:
            structured_data.update(data)

        record = self.logger.makeRecord(
            self.logger.name, level, "(structured)", 0, event_name, (), None
        )
        record.structured_data = structured_data

        self.logger.handle(record)


# Global structured logger instance
_global_logger: Optional[StructuredLogger] = None


def get_structured_logger(name: str = "chatarchive") -> StructuredLogger:
    """Get or create the structured logger instance."""
    global _global_logger
    if _global_logger is None:
        _global_logger = StructuredLogger(name)
    return _global_logger


def log_event(
    event_name: str, data: Optional[Dict[str, Any]] = None, level: int = logging.INFO
):
    """
    Convenience function for logging structured events.

    Args:
        event_name: Name of the event
        data: Optional structured data
        level: Log level

    Example::

        log_event("conversation_deleted", {
            "conversation_id": "c-42",
            "messages_deleted": 12,
            "files_deleted": 3,
        })
    """
    get_structured_logger().event(event_name, data, level)


def _format_size(size_bytes: int) -> str:
    if size_bytes > 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f}MB"
    if size_bytes > 1024:
        return f"{size_bytes / 1024:.1f}KB"
    return f"{size_bytes}B"


def _format_duration(duration_ms: int) -> str:
    if duration_ms >= 1000:
        return f"{duration_ms / 1000:.1f}s"
    return f"{duration_ms}ms"


def create_development_formatter() -> logging.Formatter:
    """
    Create a human-readable formatter for development environments.

    Structured events are rendered as one compact line per event; plain
    records fall back to their message.
    """

    class DevelopmentFormatter(logging.Formatter):
        def format(self, record: logging.LogRecord) -> str:
            timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S.%f")[
                :-3
            ]

            data: Optional[dict] = getattr(record, "structured_data", None)

            if not data:
                return f"{timestamp} | {record.levelname:5} | {record.getMessage()}"

            event = data.get("event", "")
            operation = data.get("operation", "")

            if event == "operation_started":
                message_content = f"🚀 {operation or 'operation'} started"
            elif event == "operation_completed":
                message_content = self._format_operation_success(data, operation)
            elif event == "operation_failed":
                message_content = self._format_operation_error(data, operation)
            elif event == "request_completed":
                message_content = self._format_request(data)
            else:
                message_content = self._format_domain_event(data, event)

            return f"{timestamp} | {record.levelname:5} | {message_content}"

        def _format_operation_success(self, data: dict, operation: str) -> str:
            duration_ms = data.get("duration_ms", 0)

            if duration_ms < 50:
                duration_emoji = "⚡"
            elif duration_ms > 2000:
                duration_emoji = "🐌"
            else:
                duration_emoji = "⏱️"

            return f"{duration_emoji} {_format_duration(duration_ms)} {operation}"

        def _format_operation_error(self, data: dict, operation: str) -> str:
            duration_ms = data.get("duration_ms", 0)
            error_type = data.get("error_type", "Error")
            error_message = data.get("error_message", "")

            duration_part = f" {_format_duration(duration_ms)}" if duration_ms else ""

            if len(error_message) > 60:
                error_message = error_message[:57] + "..."

            return (
                f"❌{duration_part} {operation} failed ({error_type}: {error_message})"
            )

        def _format_request(self, data: dict) -> str:
            method = data.get("method", "?")
            path = data.get("path", "?")
            status = data.get("status", "?")
            latency_ms = data.get("latency_ms", 0)
            return f"🌐 {method} {path} -> {status} ({latency_ms}ms)"

        def _format_domain_event(self, data: dict, event: str) -> str:
            if not event:
                return "📝 log_event"

            if event == "attachment_uploaded":
                size = _format_size(data.get("size_bytes", 0))
                return (
                    f"📎 attachment_uploaded (id={data.get('attachment_id')}, "
                    f"{size} {data.get('mime_type', 'unknown')})"
                )
            if event in ("attachment_deleted", "message_deleted"):
                return f"🗑️ {event} (id={data.get('deleted')})"
            if event in (
                "messages_deleted_from",
                "conversation_deleted",
                "archive_cleared",
                "retention_cleanup_completed",
            ):
                parts = []
                if data.get("conversation_id"):
                    parts.append(f"conversation={data['conversation_id']}")
                parts.append(f"messages={data.get('messages_deleted', 0)}")
                parts.append(f"files={data.get('files_deleted', 0)}")
                return f"🧹 {event} ({', '.join(parts)})"
            if event in ("store_connected", "store_closed"):
                return f"🔌 {event} ({data.get('store', 'unknown')})"
            if data.get("error"):
                return f"⚠️ {event}: {data['error']}"

            return f"📝 {event}"

    return DevelopmentFormatter()

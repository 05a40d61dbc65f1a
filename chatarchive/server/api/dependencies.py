"""
Dependency injection for API routes.
"""

from typing import TYPE_CHECKING, Optional

from fastapi import HTTPException

if TYPE_CHECKING:
    from ...storage.database import (
        AttachmentService,
        DeletionService,
        MessageService,
        RetentionService,
    )
    from ..application_server import ApplicationServer


# Global server instance - will be set during app initialization
_server_instance: Optional["ApplicationServer"] = None


def set_server_instance(server: "ApplicationServer"):
    """
    Set the global server instance.

    Args:
        server: The ApplicationServer instance to use globally
    """
    global _server_instance
    _server_instance = server


def get_server() -> "ApplicationServer":
    """
    Get the current server instance.

    Returns:
        The global ApplicationServer instance

    Raises:
        RuntimeError: If server instance not initialized
    """
    if _server_instance is None:
        raise RuntimeError("Server instance not initialized")
    return _server_instance


def _get_service(attr: str, label: str):
    server = get_server()
    container = server.service_container
    service = getattr(container, attr, None) if container else None
    if service is None:
        raise HTTPException(status_code=503, detail=f"{label} service not available")
    return service


def get_message_service() -> "MessageService":
    return _get_service("message_service", "Message")


def get_attachment_service() -> "AttachmentService":
    return _get_service("attachment_service", "Attachment")


def get_retention_service() -> "RetentionService":
    return _get_service("retention_service", "Retention")


def get_deletion_service() -> "DeletionService":
    return _get_service("deletion_service", "Deletion")

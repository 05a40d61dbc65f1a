"""
Attachment service for the files store.

Uploads write two rows in two different stores: the attachment itself in
the files store, then a "user" message pointing at it in the text store.
The writes are sequential and independently committed; when the second one
fails the attachment stays behind and the failure is reported.
"""

import logging
from typing import Any, Dict, Optional

from ...utils.logging import log_event, track
from ...utils.result import (
    Result,
    Success,
    not_found_error,
    payload_too_large,
    validation_error,
)
from . import queries
from .message_service import MessageService
from .store import Store
from .utils import DatabaseError, store_failure

MAX_UPLOAD_BYTES = 50 * 1024 * 1024
DEFAULT_MIME_TYPE = "application/octet-stream"
DEFAULT_URL_TEMPLATE = "http://localhost:8000/api/files/{id}"


class AttachmentService:
    """
    Service for attachment rows in the files store.

    Attachments are immutable: they are created by upload_attachment and
    removed by delete_attachment, retention or the cascade service.
    """

    def __init__(
        self,
        files_store: Store,
        message_service: MessageService,
        url_template: str = DEFAULT_URL_TEMPLATE,
        max_upload_bytes: int = MAX_UPLOAD_BYTES,
    ):
        """
        Initialize attachment service.

        Args:
            files_store: Store adapter for the files (attachments) database
            message_service: Used to record the upload as a message
            url_template: Retrieval URL template with an ``{id}`` placeholder
            max_upload_bytes: Largest accepted payload
        """
        self.files_store = files_store
        self.message_service = message_service
        self.url_template = url_template
        self.max_upload_bytes = max_upload_bytes

    def build_url(self, attachment_id: int) -> str:
        """Format the retrieval URL for an attachment id."""
        return self.url_template.format(id=attachment_id)

    @track(
        operation="attachment_upload",
        include_args=["filename", "mime_type", "conversation_id"],
    )
    async def upload_attachment(
        self,
        data: bytes,
        filename: str,
        mime_type: Optional[str] = None,
        conversation_id: Optional[str] = None,
    ) -> Result[Dict[str, Any], str]:
        """
        Store a file and record it as a message.

        Args:
            data: Raw file bytes
            filename: Original filename
            mime_type: Declared MIME type (octet-stream when missing)
            conversation_id: Optional grouping key, copied to the message

        Returns:
            Success with {"id", "url", "filename", "mime_type",
            "conversation_id"}, or Failure
        """
        if len(data) > self.max_upload_bytes:
            return payload_too_large(
                "file too large",
                context={
                    "size_bytes": len(data),
                    "max_upload_bytes": self.max_upload_bytes,
                },
            )

        if not filename:
            return validation_error("no file")

        mime_type = mime_type or DEFAULT_MIME_TYPE

        try:
            result = await self.files_store.insert(
                queries.INSERT_ATTACHMENT,
                filename,
                mime_type,
                data,
                conversation_id,
            )
        except DatabaseError as e:
            return store_failure(
                e,
                "attachment_upload",
                {"filename": filename, "conversation_id": conversation_id},
            )

        attachment_id = result.inserted_id
        url = self.build_url(attachment_id)

        message_result = await self.message_service.post_message(
            role="user",
            content="",
            attachment_id=attachment_id,
            attachment_url=url,
            attachment_name=filename,
            attachment_type=mime_type,
            conversation_id=conversation_id,
        )

        if message_result.is_failure():
            # The attachment row is already committed and is not removed.
            log_event(
                "attachment_message_link_failed",
                {
                    "attachment_id": attachment_id,
                    "conversation_id": conversation_id,
                    "error": str(message_result.error),
                },
                level=logging.ERROR,
            )
            context = dict(message_result.context or {})
            context["orphaned_attachment_id"] = attachment_id
            message_result.context = context
            return message_result

        log_event(
            "attachment_uploaded",
            {
                "attachment_id": attachment_id,
                "message_id": message_result.unwrap()["id"],
                "conversation_id": conversation_id,
                "mime_type": mime_type,
                "size_bytes": len(data),
            },
        )

        return Success(
            {
                "id": attachment_id,
                "url": url,
                "filename": filename,
                "mime_type": mime_type,
                "conversation_id": conversation_id,
            }
        )

    @track(
        operation="attachment_get",
        include_args=["attachment_id"],
        include_result=False,
        frequency="high_frequency",
    )
    async def get_attachment(self, attachment_id: int) -> Result[Dict[str, Any], str]:
        """
        Fetch an attachment's bytes and metadata.

        Args:
            attachment_id: Attachment id

        Returns:
            Success with {"id", "filename", "mime_type", "file_data"}, or
            NotFound
        """
        try:
            row = await self.files_store.fetchrow(
                queries.SELECT_ATTACHMENT, attachment_id
            )
        except DatabaseError as e:
            return store_failure(e, "attachment_get", {"attachment_id": attachment_id})

        if row is None:
            return not_found_error(
                "file not found", context={"attachment_id": attachment_id}
            )

        return Success(row)

    @track(operation="attachment_delete", include_args=["attachment_id"])
    async def delete_attachment(
        self, attachment_id: int
    ) -> Result[Dict[str, Any], str]:
        """
        Delete exactly one attachment. Messages pointing at it keep their
        (now dangling) reference.

        Args:
            attachment_id: Attachment id

        Returns:
            Success with {"deleted": attachment_id}, or NotFound
        """
        try:
            result = await self.files_store.execute(
                queries.DELETE_ATTACHMENT, attachment_id
            )
        except DatabaseError as e:
            return store_failure(
                e, "attachment_delete", {"attachment_id": attachment_id}
            )

        if result.affected_rows == 0:
            return not_found_error(
                "file not found", context={"attachment_id": attachment_id}
            )

        log_event(
            "attachment_deleted", {"deleted": attachment_id}, level=logging.WARNING
        )

        return Success({"deleted": attachment_id})

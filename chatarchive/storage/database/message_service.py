"""
Message service for the text store.

Provides operations for:
- Posting messages (optionally pointing at an attachment in the files store)
- Listing message history, oldest first
- Looking up a message's timestamp and conversation
- Deleting a single message
"""

import logging
from typing import Any, Dict, List, Optional

from ...utils.logging import log_event, track
from ...utils.result import (
    Result,
    Success,
    not_found_error,
    payload_too_large,
    validation_error,
)
from . import queries
from .store import Store
from .utils import DatabaseError, store_failure

DEFAULT_LIST_LIMIT = 200
MAX_LIST_LIMIT = 1000
MAX_CONTENT_LENGTH = 10_000


class MessageService:
    """
    Service for message rows in the text store.

    A message may carry a denormalized pointer to an attachment
    (id, url, name, type). The pointer is never checked against the files
    store: the attachment may already be gone, or may never have existed.

    All methods return Result types for consistent error handling.
    """

    def __init__(
        self,
        text_store: Store,
        max_content_length: int = MAX_CONTENT_LENGTH,
    ):
        """
        Initialize message service.

        Args:
            text_store: Store adapter for the text (messages) database
            max_content_length: Longest accepted message content, in characters
        """
        self.text_store = text_store
        self.max_content_length = max_content_length

    @track(
        operation="message_create",
        include_args=["role", "conversation_id", "attachment_id"],
        frequency="medium_frequency",
    )
    async def post_message(
        self,
        role: str,
        content: str,
        parent_id: Optional[int] = None,
        attachment_id: Optional[int] = None,
        attachment_url: Optional[str] = None,
        attachment_name: Optional[str] = None,
        attachment_type: Optional[str] = None,
        conversation_id: Optional[str] = None,
    ) -> Result[Dict[str, Any], str]:
        """
        Insert one message row.

        Args:
            role: Message role ('user', 'assistant', ...)
            content: Message text, may be empty
            parent_id: Optional id of the message this one answers
            attachment_id: Id of the attachment in the files store
            attachment_url: Retrieval URL of the attachment
            attachment_name: Original filename of the attachment
            attachment_type: MIME type of the attachment
            conversation_id: Optional grouping key

        Returns:
            Success with {"id", "conversation_id"}, or Failure
        """
        if not role or not role.strip():
            return validation_error("Message role is required", context={"role": role})

        if content is None:
            return validation_error("Message content is required")

        if len(content) > self.max_content_length:
            return payload_too_large(
                "message too large",
                context={
                    "content_length": len(content),
                    "max_content_length": self.max_content_length,
                },
            )

        has_attachment_fields = any(
            value is not None
            for value in (attachment_url, attachment_name, attachment_type)
        )
        if has_attachment_fields and attachment_id is None:
            return validation_error(
                "attachment_id is required when attachment fields are set"
            )

        try:
            result = await self.text_store.insert(
                queries.INSERT_MESSAGE,
                role,
                content,
                parent_id,
                attachment_id,
                attachment_url,
                attachment_name,
                attachment_type,
                conversation_id,
            )
        except DatabaseError as e:
            return store_failure(
                e, "message_create", {"conversation_id": conversation_id}
            )

        log_event(
            "message_posted",
            {
                "message_id": result.inserted_id,
                "conversation_id": conversation_id,
                "role": role,
                "has_attachment": attachment_id is not None,
            },
            level=logging.DEBUG,
        )

        return Success({"id": result.inserted_id, "conversation_id": conversation_id})

    @track(
        operation="message_list",
        include_args=["conversation_id", "limit"],
        frequency="high_frequency",
    )
    async def list_messages(
        self,
        conversation_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Result[List[Dict[str, Any]], str]:
        """
        List messages oldest first.

        The first ``limit`` rows by created_at are returned, so a
        conversation longer than the limit is truncated at its newest end.

        Args:
            conversation_id: Restrict to one conversation (all when None)
            limit: Maximum rows (default 200, clamped to 1000)

        Returns:
            Success with the list of message dicts, or Failure
        """
        if limit is None:
            limit = DEFAULT_LIST_LIMIT
        if limit < 1:
            return validation_error(
                "Limit must be a positive integer", context={"limit": limit}
            )
        limit = min(limit, MAX_LIST_LIMIT)

        try:
            if conversation_id:
                rows = await self.text_store.fetch(
                    queries.SELECT_CONVERSATION_MESSAGES, conversation_id, limit
                )
            else:
                rows = await self.text_store.fetch(queries.SELECT_MESSAGES, limit)
        except DatabaseError as e:
            return store_failure(
                e, "message_list", {"conversation_id": conversation_id}
            )

        return Success(rows)

    async def get_message_anchor(
        self, message_id: int
    ) -> Result[Dict[str, Any], str]:
        """
        Get a message's created_at and conversation_id.

        Args:
            message_id: Message id

        Returns:
            Success with {"id", "created_at", "conversation_id"}, or NotFound
        """
        try:
            row = await self.text_store.fetchrow(
                queries.SELECT_MESSAGE_ANCHOR, message_id
            )
        except DatabaseError as e:
            return store_failure(e, "message_lookup", {"message_id": message_id})

        if row is None:
            return not_found_error(
                "message not found", context={"message_id": message_id}
            )

        return Success(row)

    @track(operation="message_delete", include_args=["message_id"])
    async def delete_message(self, message_id: int) -> Result[Dict[str, Any], str]:
        """
        Delete exactly one message. Its attachment, if any, is left alone.

        Args:
            message_id: Message id

        Returns:
            Success with {"deleted": message_id}, or NotFound
        """
        try:
            result = await self.text_store.execute(queries.DELETE_MESSAGE, message_id)
        except DatabaseError as e:
            return store_failure(e, "message_delete", {"message_id": message_id})

        if result.affected_rows == 0:
            return not_found_error(
                "message not found", context={"message_id": message_id}
            )

        log_event("message_deleted", {"deleted": message_id}, level=logging.WARNING)

        return Success({"deleted": message_id})

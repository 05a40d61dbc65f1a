"""
Deletion service coordinating deletes across the text and files stores.

Provides operations for:
- Deleting one file or one message
- Deleting everything from a message's timestamp onward
- Deleting a whole conversation
- Emptying both stores

Cross-store deletes run the text store statement first and the files store
statement second, each committed on its own. When the second statement
fails the first is not undone: the failure is returned with the number of
messages already deleted in its context.
"""

import logging
from typing import Any, Dict

from ...utils.logging import log_event, track
from ...utils.result import Result, Success, validation_error
from . import queries
from .attachment_service import AttachmentService
from .message_service import MessageService
from .store import Store
from .utils import DatabaseError, store_failure


class DeletionService:
    """
    Service for single-entity and cascading deletes.

    There is no transaction spanning both stores and no soft delete: rows
    disappear as soon as each statement commits.
    """

    def __init__(
        self,
        text_store: Store,
        files_store: Store,
        message_service: MessageService,
        attachment_service: AttachmentService,
    ):
        """
        Initialize deletion service.

        Args:
            text_store: Store adapter for the text (messages) database
            files_store: Store adapter for the files (attachments) database
            message_service: Handles single-message deletes and anchor lookup
            attachment_service: Handles single-file deletes
        """
        self.text_store = text_store
        self.files_store = files_store
        self.message_service = message_service
        self.attachment_service = attachment_service

    async def delete_file(self, attachment_id: int) -> Result[Dict[str, Any], str]:
        """Delete one attachment; NotFound when absent."""
        return await self.attachment_service.delete_attachment(attachment_id)

    async def delete_message(self, message_id: int) -> Result[Dict[str, Any], str]:
        """Delete one message; NotFound when absent."""
        return await self.message_service.delete_message(message_id)

    async def _delete_pair(
        self,
        operation: str,
        text_query: str,
        files_query: str,
        *args: Any,
        context: Dict[str, Any],
    ) -> Result[Dict[str, Any], str]:
        """Run a messages delete then an attachments delete with the same args."""
        try:
            messages = await self.text_store.execute(text_query, *args)
        except DatabaseError as e:
            return store_failure(e, operation, context)

        try:
            files = await self.files_store.execute(files_query, *args)
        except DatabaseError as e:
            # Messages are already gone; nothing compensates for that.
            return store_failure(
                e,
                operation,
                {**context, "messages_deleted": messages.affected_rows},
            )

        return Success(
            {
                "messages_deleted": messages.affected_rows,
                "files_deleted": files.affected_rows,
            }
        )

    @track(operation="messages_delete_from", include_args=["message_id"])
    async def delete_from_message(
        self, message_id: int
    ) -> Result[Dict[str, Any], str]:
        """
        Delete a message and everything created at or after it.

        The anchor message's created_at is the cutoff for both stores, so
        attachments are compared against the message's timestamp rather than
        their own. Without a conversation id on the anchor the delete is
        global; otherwise it is restricted to that conversation.

        Args:
            message_id: Anchor message id

        Returns:
            Success with {"messages_deleted", "files_deleted",
            "conversation_id"}, or NotFound when the anchor does not exist
        """
        anchor_result = await self.message_service.get_message_anchor(message_id)
        if anchor_result.is_failure():
            return anchor_result

        anchor = anchor_result.unwrap()
        cutoff = anchor["created_at"]
        conversation_id = anchor["conversation_id"]
        context = {"message_id": message_id, "conversation_id": conversation_id}

        if conversation_id:
            result = await self._delete_pair(
                "messages_delete_from",
                queries.DELETE_CONVERSATION_MESSAGES_SINCE,
                queries.DELETE_CONVERSATION_ATTACHMENTS_SINCE,
                conversation_id,
                cutoff,
                context=context,
            )
        else:
            result = await self._delete_pair(
                "messages_delete_from",
                queries.DELETE_MESSAGES_SINCE,
                queries.DELETE_ATTACHMENTS_SINCE,
                cutoff,
                context=context,
            )

        if result.is_failure():
            return result

        counts = result.unwrap()
        log_event(
            "messages_deleted_from",
            {**context, **counts},
            level=logging.WARNING,
        )

        return Success({**counts, "conversation_id": conversation_id})

    @track(operation="conversation_delete", include_args=["conversation_id"])
    async def delete_conversation(
        self, conversation_id: str
    ) -> Result[Dict[str, Any], str]:
        """
        Delete every message and attachment of one conversation.

        A conversation id that matches nothing deletes zero rows and still
        succeeds.

        Args:
            conversation_id: Conversation grouping key

        Returns:
            Success with {"messages_deleted", "files_deleted"}, or Failure
        """
        if not conversation_id:
            return validation_error("missing id")

        result = await self._delete_pair(
            "conversation_delete",
            queries.DELETE_CONVERSATION_MESSAGES,
            queries.DELETE_CONVERSATION_ATTACHMENTS,
            conversation_id,
            context={"conversation_id": conversation_id},
        )

        if result.is_success():
            log_event(
                "conversation_deleted",
                {"conversation_id": conversation_id, **result.unwrap()},
                level=logging.WARNING,
            )

        return result

    @track(operation="archive_delete_all")
    async def delete_all(self) -> Result[Dict[str, Any], str]:
        """
        Empty both stores.

        Returns:
            Success with {"messages_deleted", "files_deleted"}, or Failure
        """
        result = await self._delete_pair(
            "archive_delete_all",
            queries.DELETE_ALL_MESSAGES,
            queries.DELETE_ALL_ATTACHMENTS,
            context={},
        )

        if result.is_success():
            log_event("archive_cleared", result.unwrap(), level=logging.WARNING)

        return result

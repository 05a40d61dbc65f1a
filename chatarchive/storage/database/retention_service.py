"""
Retention service: time-based expiry in both stores.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from ...utils.logging import log_event, track
from ...utils.result import Failure, Result, Success
from . import queries
from .store import Store
from .utils import DatabaseError, store_failure

MESSAGE_RETENTION = timedelta(days=90)
ATTACHMENT_RETENTION = timedelta(days=30)


class RetentionService:
    """
    Deletes rows older than a fixed age, independently in each store.

    Attachments expire sooner than messages, so a message regularly outlives
    the attachment it points at. The dangling reference is expected and no
    orphan cleanup is attempted.
    """

    def __init__(
        self,
        text_store: Store,
        files_store: Store,
        message_retention: timedelta = MESSAGE_RETENTION,
        attachment_retention: timedelta = ATTACHMENT_RETENTION,
    ):
        self.text_store = text_store
        self.files_store = files_store
        self.message_retention = message_retention
        self.attachment_retention = attachment_retention

    @track(operation="retention_cleanup")
    async def run_cleanup(self) -> Result[Dict[str, Any], str]:
        """
        Delete expired messages and attachments.

        Both deletions are attempted even when the first one fails; the
        first failure is returned after both ran, with the counts that did
        succeed in its context.

        Returns:
            Success with {"messages_deleted", "files_deleted"}, or Failure
        """
        counts: Dict[str, Any] = {"messages_deleted": 0, "files_deleted": 0}
        failure: Optional[Failure] = None

        try:
            result = await self.text_store.execute(
                queries.DELETE_EXPIRED_MESSAGES, self.message_retention
            )
            counts["messages_deleted"] = result.affected_rows
        except DatabaseError as e:
            failure = store_failure(
                e,
                "retention_cleanup",
                {"retention_days": self.message_retention.days},
            )

        try:
            result = await self.files_store.execute(
                queries.DELETE_EXPIRED_ATTACHMENTS, self.attachment_retention
            )
            counts["files_deleted"] = result.affected_rows
        except DatabaseError as e:
            files_failure = store_failure(
                e,
                "retention_cleanup",
                {"retention_days": self.attachment_retention.days},
            )
            failure = failure or files_failure

        if failure is not None:
            failure.context = {**(failure.context or {}), **counts}
            return failure

        log_event(
            "retention_cleanup_completed",
            counts,
            level=logging.INFO if any(counts.values()) else logging.DEBUG,
        )

        return Success(counts)

"""
Tests for DeletionService cascades across the two stores.
"""

import pytest

from chatarchive.storage.database import (
    AttachmentService,
    DeletionService,
    MessageService,
)
from chatarchive.storage.database import queries
from tests.mocks import InMemoryStore


class Archive:
    """Services over one pair of in-memory stores."""

    def __init__(self, text_store: InMemoryStore, files_store: InMemoryStore):
        self.text_store = text_store
        self.files_store = files_store
        self.messages = MessageService(text_store)
        self.attachments = AttachmentService(files_store, self.messages)
        self.deletion = DeletionService(
            text_store, files_store, self.messages, self.attachments
        )

    async def message(self, content: str, conversation_id=None) -> int:
        result = await self.messages.post_message(
            role="user", content=content, conversation_id=conversation_id
        )
        return result.unwrap()["id"]

    async def upload(self, name: str, conversation_id=None) -> int:
        result = await self.attachments.upload_attachment(
            b"data", name, "text/plain", conversation_id
        )
        return result.unwrap()["id"]


@pytest.fixture
def archive(text_store: InMemoryStore, files_store: InMemoryStore) -> Archive:
    return Archive(text_store, files_store)


class TestSingleDeletes:
    @pytest.mark.asyncio
    async def test_delete_file(self, archive: Archive):
        attachment_id = await archive.upload("a.txt")

        result = await archive.deletion.delete_file(attachment_id)

        assert result.unwrap() == {"deleted": attachment_id}
        assert archive.files_store.count() == 0

    @pytest.mark.asyncio
    async def test_delete_missing_file(self, archive: Archive):
        result = await archive.deletion.delete_file(5)
        assert result.error_type == "NotFound"

    @pytest.mark.asyncio
    async def test_delete_message(self, archive: Archive):
        message_id = await archive.message("a")

        result = await archive.deletion.delete_message(message_id)

        assert result.unwrap() == {"deleted": message_id}

    @pytest.mark.asyncio
    async def test_delete_missing_message(self, archive: Archive):
        await archive.message("a")

        result = await archive.deletion.delete_message(77)

        assert result.error_type == "NotFound"
        assert archive.text_store.count() == 1


class TestDeleteFromMessage:
    @pytest.mark.asyncio
    async def test_earlier_message_survives(self, archive: Archive):
        message_a = await archive.message("A", conversation_id="c1")
        message_b = await archive.message("B", conversation_id="c1")

        result = await archive.deletion.delete_from_message(message_b)

        assert result.unwrap()["messages_deleted"] == 1
        assert message_a in archive.text_store.rows
        assert message_b not in archive.text_store.rows

    @pytest.mark.asyncio
    async def test_scoped_to_the_anchor_conversation(self, archive: Archive):
        anchor = await archive.message("anchor", conversation_id="c1")
        await archive.message("later same", conversation_id="c1")
        other = await archive.message("later other", conversation_id="c2")
        loose = await archive.message("later none")
        same_file = await archive.upload("same.txt", conversation_id="c1")
        other_file = await archive.upload("other.txt", conversation_id="c2")

        result = await archive.deletion.delete_from_message(anchor)

        data = result.unwrap()
        assert data["conversation_id"] == "c1"
        # Two text messages plus the upload message in c1
        assert data["messages_deleted"] == 3
        assert data["files_deleted"] == 1
        assert other in archive.text_store.rows
        assert loose in archive.text_store.rows
        assert same_file not in archive.files_store.rows
        assert other_file in archive.files_store.rows

    @pytest.mark.asyncio
    async def test_without_conversation_deletes_globally(self, archive: Archive):
        before = await archive.message("before", conversation_id="c2")
        anchor = await archive.message("anchor")
        await archive.message("later", conversation_id="c2")
        await archive.upload("later.txt", conversation_id="c3")

        result = await archive.deletion.delete_from_message(anchor)

        data = result.unwrap()
        assert data["conversation_id"] is None
        assert data["messages_deleted"] == 3
        assert data["files_deleted"] == 1
        assert list(archive.text_store.rows) == [before]
        assert archive.files_store.count() == 0

    @pytest.mark.asyncio
    async def test_attachments_use_the_message_timestamp(self, archive: Archive):
        # The upload writes its attachment just before its message, so an
        # anchor on the upload message does not reach the attachment itself.
        await archive.upload("x.txt", conversation_id="c1")
        (upload_message,) = archive.text_store.rows

        result = await archive.deletion.delete_from_message(upload_message)

        assert result.unwrap()["messages_deleted"] == 1
        assert result.unwrap()["files_deleted"] == 0
        assert archive.files_store.count() == 1

    @pytest.mark.asyncio
    async def test_missing_anchor(self, archive: Archive):
        await archive.message("a")

        result = await archive.deletion.delete_from_message(999)

        assert result.is_failure()
        assert result.error == "message not found"
        assert archive.text_store.count() == 1

    @pytest.mark.asyncio
    async def test_files_failure_reports_messages_already_deleted(
        self, archive: Archive
    ):
        anchor = await archive.message("a", conversation_id="c1")
        await archive.upload("b.txt", conversation_id="c1")
        archive.files_store.fail_on(queries.DELETE_CONVERSATION_ATTACHMENTS_SINCE)

        result = await archive.deletion.delete_from_message(anchor)

        assert result.is_failure()
        assert result.error_type == "StatementError"
        assert result.context["messages_deleted"] == 2
        assert result.context["store"] == "files"
        # No compensation: messages stay deleted, the file stays
        assert archive.text_store.count() == 0
        assert archive.files_store.count() == 1


class TestDeleteConversation:
    @pytest.mark.asyncio
    async def test_removes_exactly_the_conversation(self, archive: Archive):
        await archive.message("a", conversation_id="c1")
        await archive.upload("a.txt", conversation_id="c1")
        keep_other = await archive.message("b", conversation_id="c2")
        keep_none = await archive.message("c")
        keep_file = await archive.upload("b.txt", conversation_id="c2")

        result = await archive.deletion.delete_conversation("c1")

        assert result.unwrap() == {"messages_deleted": 2, "files_deleted": 1}
        assert keep_other in archive.text_store.rows
        assert keep_none in archive.text_store.rows
        # The c2 upload also wrote a message, which stays
        remaining = sorted(
            row["conversation_id"] or "" for row in archive.text_store.rows.values()
        )
        assert remaining == ["", "c2", "c2"]
        assert list(archive.files_store.rows) == [keep_file]

    @pytest.mark.asyncio
    async def test_unknown_conversation_deletes_nothing(self, archive: Archive):
        await archive.message("a", conversation_id="c1")

        result = await archive.deletion.delete_conversation("nope")

        assert result.unwrap() == {"messages_deleted": 0, "files_deleted": 0}
        assert archive.text_store.count() == 1

    @pytest.mark.asyncio
    async def test_missing_conversation_id(self, archive: Archive):
        result = await archive.deletion.delete_conversation("")

        assert result.is_failure()
        assert result.error_type == "ValidationError"

    @pytest.mark.asyncio
    async def test_text_store_failure_touches_nothing_else(self, archive: Archive):
        await archive.upload("a.txt", conversation_id="c1")
        archive.text_store.unavailable = True

        result = await archive.deletion.delete_conversation("c1")

        assert result.error_type == "ConnectionError"
        assert archive.files_store.count() == 1
        assert archive.files_store.statements[-1][0] == queries.INSERT_ATTACHMENT


class TestDeleteAll:
    @pytest.mark.asyncio
    async def test_empties_both_stores(self, archive: Archive):
        await archive.message("a", conversation_id="c1")
        await archive.message("b")
        await archive.upload("c.txt")

        result = await archive.deletion.delete_all()

        assert result.unwrap() == {"messages_deleted": 3, "files_deleted": 1}
        listed = await archive.messages.list_messages()
        assert listed.unwrap() == []
        assert archive.files_store.count() == 0

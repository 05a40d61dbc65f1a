"""
Message API routes.

Provides REST endpoints for:
- Posting messages
- Listing message history
- Deleting one message, or a message and everything after it
"""

from typing import Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel, ConfigDict, Field

from ..dependencies import get_deletion_service, get_message_service
from ..responses import failure_response, serialize_for_json

router = APIRouter(prefix="/api", tags=["messages"])


class PostMessageRequest(BaseModel):
    """
    Request model for posting a message.

    Attachment fields are accepted both in snake_case and in the camelCase
    spelling the chat clients send.
    """

    model_config = ConfigDict(populate_by_name=True)

    role: Optional[str] = Field(None, max_length=20, description="Message role")
    content: Optional[str] = Field(None, description="Message text, may be empty")
    parent_id: Optional[int] = Field(None, description="Message being answered")
    attachment_id: Optional[int] = Field(None, alias="attachmentId")
    attachment_url: Optional[str] = Field(None, alias="attachmentUrl")
    attachment_name: Optional[str] = Field(None, alias="attachmentName")
    attachment_type: Optional[str] = Field(None, alias="attachmentType")
    conversation_id: Optional[str] = Field(None, description="Grouping key")


@router.post("/messages")
async def post_message(request: PostMessageRequest):
    """Store one message and return its id."""
    service = get_message_service()

    result = await service.post_message(
        role=request.role,
        content=request.content,
        parent_id=request.parent_id,
        attachment_id=request.attachment_id,
        attachment_url=request.attachment_url,
        attachment_name=request.attachment_name,
        attachment_type=request.attachment_type,
        conversation_id=request.conversation_id or None,
    )

    if result.is_failure():
        return failure_response(result)

    return result.unwrap()


@router.get("/messages")
async def list_messages(
    conversation_id: Optional[str] = None,
    limit: Optional[int] = Query(None),  # noqa: B008
):
    """
    List messages oldest first.

    Defaults to 200 rows; larger limits are clamped to 1000.
    """
    service = get_message_service()

    result = await service.list_messages(
        conversation_id=conversation_id or None, limit=limit
    )

    if result.is_failure():
        return failure_response(result)

    return serialize_for_json(result.unwrap())


@router.delete("/messages/after/{message_id}")
async def delete_messages_after(message_id: int):
    """
    Delete a message and everything created at or after it.

    Scoped to the message's conversation when it has one, global otherwise.
    """
    service = get_deletion_service()

    result = await service.delete_from_message(message_id)
    if result.is_failure():
        return failure_response(result)

    counts = result.unwrap()

    return {
        "ok": True,
        "messages_deleted": counts["messages_deleted"],
        "files_deleted": counts["files_deleted"],
    }


@router.delete("/messages/{message_id}")
async def delete_message(message_id: int):
    """Delete one message. Its attachment, if any, is kept."""
    service = get_deletion_service()

    result = await service.delete_message(message_id)
    if result.is_failure():
        return failure_response(result)

    return {"ok": True, **result.unwrap()}

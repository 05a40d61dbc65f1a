"""
Conversation-scoped and archive-wide delete endpoints.
"""

from fastapi import APIRouter

from ..dependencies import get_deletion_service
from ..responses import failure_response

router = APIRouter(prefix="/api", tags=["conversations"])


# Must stay above /conversations/{conversation_id} so "all" is not taken as an id
@router.delete("/conversations/all")
async def delete_all_conversations():
    """Empty both stores."""
    service = get_deletion_service()

    result = await service.delete_all()
    if result.is_failure():
        return failure_response(result)

    return {"ok": True, **result.unwrap()}


@router.delete("/conversations/{conversation_id}")
async def delete_conversation(conversation_id: str):
    """
    Delete every message and attachment of one conversation.

    Unknown ids succeed with zero counts.
    """
    service = get_deletion_service()

    result = await service.delete_conversation(conversation_id)
    if result.is_failure():
        return failure_response(result)

    return {"ok": True, **result.unwrap()}

"""
Maintenance endpoints.
"""

from fastapi import APIRouter

from ..dependencies import get_retention_service
from ..responses import failure_response

router = APIRouter(prefix="/api", tags=["maintenance"])


@router.post("/cleanup")
async def run_cleanup():
    """Delete expired messages and attachments now."""
    service = get_retention_service()

    result = await service.run_cleanup()
    if result.is_failure():
        return failure_response(result)

    return {"ok": True, **result.unwrap()}

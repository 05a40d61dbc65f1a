"""
File upload, download and delete endpoints.
"""

from typing import Optional

from fastapi import APIRouter, File, Form, UploadFile
from fastapi.responses import Response

from ....utils.result import validation_error
from ..dependencies import get_attachment_service, get_deletion_service
from ..responses import content_disposition, failure_response

router = APIRouter(prefix="/api", tags=["files"])


@router.post("/files")
async def upload_file(
    file: Optional[UploadFile] = File(None),  # noqa: B008
    conversation_id: Optional[str] = Form(None),  # noqa: B008
):
    """
    Store an uploaded file and record it as a user message.

    Returns the attachment id and its retrieval URL.
    """
    service = get_attachment_service()

    if file is None:
        return failure_response(validation_error("no file"))

    # One byte past the limit is enough to know the upload is too large
    data = await file.read(service.max_upload_bytes + 1)

    result = await service.upload_attachment(
        data,
        file.filename or "",
        mime_type=file.content_type,
        conversation_id=conversation_id or None,
    )

    if result.is_failure():
        return failure_response(result)

    return result.unwrap()


@router.get("/files/{attachment_id}")
async def get_file(attachment_id: int):
    """Serve the stored bytes with their original MIME type and filename."""
    service = get_attachment_service()

    result = await service.get_attachment(attachment_id)
    if result.is_failure():
        return failure_response(result)

    attachment = result.unwrap()

    return Response(
        content=bytes(attachment["file_data"]),
        headers={
            "Content-Type": attachment["mime_type"] or "application/octet-stream",
            "Content-Disposition": content_disposition(attachment["filename"]),
        },
    )


@router.delete("/files/{attachment_id}")
async def delete_file(attachment_id: int):
    """Delete one attachment. Messages that point at it are left alone."""
    service = get_deletion_service()

    result = await service.delete_file(attachment_id)
    if result.is_failure():
        return failure_response(result)

    return {"ok": True, **result.unwrap()}

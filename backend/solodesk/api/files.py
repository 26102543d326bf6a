"""
File upload API endpoints.

WHAT: Multipart upload for intake form attachments.

WHY: Attachments are uploaded one request per file, concurrently, before
the client or project is submitted with the returned metadata.
"""

from fastapi import APIRouter, Depends, File, UploadFile, status

from solodesk.core.deps import get_current_user
from solodesk.models.user import User
from solodesk.schemas.client import AttachmentSchema
from solodesk.schemas.common import ApiResponse
from solodesk.services.file_service import FileService


router = APIRouter(prefix="/files", tags=["files"])


def get_file_service() -> FileService:
    return FileService()


@router.post(
    "/upload",
    response_model=ApiResponse[AttachmentSchema],
    status_code=status.HTTP_201_CREATED,
    summary="Upload file",
)
async def upload_file(
    file: UploadFile = File(..., description="File to upload"),
    current_user: User = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
) -> ApiResponse[AttachmentSchema]:
    """
    Store one file.

    Raises:
        ValidationError: 400 if the file is empty or too large
    """
    attachment = await service.save_upload(current_user.id, file)
    return ApiResponse(message="File uploaded successfully", data=attachment)

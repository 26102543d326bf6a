"""
File Service.

WHAT: Stores files uploaded from the client and project intake forms.

WHY: Intake forms upload attachments before the record exists; the
returned metadata is then submitted with the client or project.

HOW: Files are written under UPLOAD_DIR/<user_id>/ with a unique prefix and
served back from /uploads.
"""

import logging
import uuid
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from solodesk.core.config import settings
from solodesk.core.exceptions import ValidationError
from solodesk.models.base import utcnow
from solodesk.schemas.client import AttachmentSchema


logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


def sanitize_filename(filename: str) -> str:
    """
    Strip path separators and null bytes and cap the length.

    WHY: Prevents path traversal through the original file name.
    """
    filename = filename.replace("/", "_").replace("\\", "_").replace("\x00", "").strip()
    if not filename:
        return "file"
    if len(filename) > 200:
        name, ext = filename.rsplit(".", 1) if "." in filename else (filename, "")
        filename = f"{name[:190]}.{ext}" if ext else name[:200]
    return filename


class FileService:
    """Service for storing uploaded attachments on local disk."""

    def __init__(self, upload_dir: Optional[Path] = None, max_size: Optional[int] = None):
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.max_size = max_size or settings.MAX_UPLOAD_SIZE_BYTES

    async def save_upload(self, user_id: int, file: UploadFile) -> AttachmentSchema:
        """
        Store an uploaded file.

        Args:
            user_id: Uploader
            file: Multipart file

        Returns:
            Attachment metadata to submit with a client or project

        Raises:
            ValidationError: If the file is empty or too large
        """
        original_name = sanitize_filename(file.filename or "file")
        stored_name = f"{uuid.uuid4().hex[:12]}_{original_name.replace(' ', '_')}"

        user_dir = self.upload_dir / str(user_id)
        user_dir.mkdir(parents=True, exist_ok=True)
        target = user_dir / stored_name

        size = 0
        try:
            with target.open("wb") as out:
                while True:
                    chunk = await file.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_size:
                        raise ValidationError(
                            message=(
                                f"File size exceeds maximum allowed "
                                f"({self.max_size // (1024 * 1024)}MB)"
                            ),
                            filename=original_name,
                            max_size=self.max_size,
                        )
                    out.write(chunk)
        except ValidationError:
            target.unlink(missing_ok=True)
            raise

        if size == 0:
            target.unlink(missing_ok=True)
            raise ValidationError(message="Uploaded file is empty", filename=original_name)

        logger.info("Stored upload %s (%d bytes) for user %s", stored_name, size, user_id)

        return AttachmentSchema(
            filename=stored_name,
            original_name=original_name,
            mime_type=file.content_type or "application/octet-stream",
            size=size,
            url=f"/uploads/{user_id}/{stored_name}",
            uploaded_at=utcnow(),
        )

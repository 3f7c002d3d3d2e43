import asyncio
import logging
from pathlib import Path

from fastapi import APIRouter, File, UploadFile, status

from lounge.config import settings
from lounge.core.errors import AttachmentError
from lounge.schemas.attachment import UploadResponse
from lounge.storage import save_image, upload_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["uploads"])


@router.post("", response_model=UploadResponse)
async def upload_image(image: UploadFile = File(...)) -> UploadResponse:
    """Store an image attachment and return the URL to reference in ``send-message``."""

    # Validate type and extension before reading the body
    ext = Path(image.filename or "").suffix.lower()
    if image.content_type not in settings.ALLOWED_MIME_TYPES or ext not in settings.ALLOWED_EXTENSIONS:
        raise AttachmentError(
            "Only image files are allowed!",
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
        )

    content = await image.read(settings.MAX_UPLOAD_SIZE + 1)

    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise AttachmentError(
            f"File exceeds the {settings.MAX_UPLOAD_SIZE // (1024 * 1024)} MB limit",
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        )
    if not content:
        raise AttachmentError("No file uploaded")

    try:
        stored_filename = await asyncio.wait_for(
            asyncio.to_thread(
                save_image,
                content,
                settings.UPLOAD_DIR,
                settings.IMAGE_MAX_DIMENSION,
                settings.IMAGE_JPEG_QUALITY,
            ),
            timeout=settings.UPLOAD_PROCESS_TIMEOUT,
        )
    except asyncio.TimeoutError:
        logger.warning("Image processing timed out for %r", image.filename)
        raise AttachmentError("Image processing timed out", status_code=status.HTTP_504_GATEWAY_TIMEOUT) from None

    logger.info("Stored upload %r as %s (%d bytes in)", image.filename, stored_filename, len(content))
    return UploadResponse(image_url=upload_url(stored_filename, settings.UPLOAD_URL_PREFIX))

"""Local disk storage for uploaded images.

Uploads are re-encoded on the way in, so only the compressed JPEG ever
touches disk.  Attachments uploaded but never referenced by a message are
left in place.
"""

import io
import os
import uuid
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from lounge.core.errors import AttachmentError


def _compressed_filename() -> str:
    return f"compressed-{uuid.uuid4().hex}.jpg"


def compress_image(content: bytes, max_size: int = 1200, quality: int = 80) -> bytes:
    """Shrink *content* to fit inside ``max_size`` x ``max_size`` and re-encode as JPEG.

    Smaller images are never enlarged.  Raises AttachmentError if the bytes
    are not a decodable image.
    """
    try:
        img = Image.open(io.BytesIO(content))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        raise AttachmentError("Failed to process image", status_code=422) from exc

    img.thumbnail((max_size, max_size))
    if img.mode != "RGB":
        img = img.convert("RGB")
    out = io.BytesIO()
    img.save(out, "JPEG", quality=quality, optimize=True)
    return out.getvalue()


def save_image(content: bytes, upload_dir: str, max_size: int = 1200, quality: int = 80) -> str:
    """Compress *content* and write it to *upload_dir*. Returns the stored filename."""
    data = compress_image(content, max_size=max_size, quality=quality)
    os.makedirs(upload_dir, exist_ok=True)
    stored = _compressed_filename()
    with open(os.path.join(upload_dir, stored), "wb") as fh:
        fh.write(data)
    return stored


def upload_url(filename: str, url_prefix: str = "/uploads") -> str:
    return f"{url_prefix.rstrip('/')}/{filename}"


def upload_exists(url: str, upload_dir: str, url_prefix: str = "/uploads") -> bool:
    """True if *url* names a file previously stored in *upload_dir*.

    Only bare filenames directly under the prefix are accepted, so a message
    cannot point at arbitrary paths or external hosts.
    """
    prefix = url_prefix.rstrip("/") + "/"
    if not url.startswith(prefix):
        return False
    name = url[len(prefix):]
    if not name or name != Path(name).name or name in (".", ".."):
        return False
    return os.path.isfile(os.path.join(upload_dir, name))

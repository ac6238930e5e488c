# catalog_service/attachments.py - uploaded product images on disk
import logging
import os
import secrets
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence
from urllib.parse import urlparse

from .config import CatalogConfig
from .errors import ValidationError

logger = logging.getLogger(__name__)

UPLOAD_URL_PATH = "/uploads"

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif"}
ALLOWED_MIME_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif"}

# leading bytes of each accepted format
_SIGNATURES = (
    b"\xff\xd8\xff",  # jpeg
    b"\x89PNG\r\n\x1a\n",
    b"GIF87a",
    b"GIF89a",
)


@dataclass
class Upload:
    """A file received from a client, already read into memory."""

    filename: str
    content_type: str
    data: bytes


class ImageStore:
    """
    Stores product images under ``root`` and hands out public references.

    References are ``<base_url>/uploads/<name>`` when a base URL is known and
    ``/uploads/<name>`` otherwise. ``reclaim`` accepts either form.
    """

    def __init__(self, root: str, max_bytes: int = CatalogConfig.MAX_IMAGE_BYTES):
        self.root = os.path.abspath(root)
        self.max_bytes = max_bytes

    def ensure_root(self):
        os.makedirs(self.root, exist_ok=True)

    def validate(self, upload: Upload):
        ext = os.path.splitext(upload.filename or "")[1].lower()
        mime = (upload.content_type or "").split(";")[0].strip().lower()
        if ext not in ALLOWED_EXTENSIONS or mime not in ALLOWED_MIME_TYPES:
            raise ValidationError("Only image files are allowed!")
        if len(upload.data) > self.max_bytes:
            raise ValidationError(
                f"Image {upload.filename} exceeds the {self.max_bytes // (1024 * 1024)}MB limit"
            )
        if not upload.data.startswith(_SIGNATURES):
            raise ValidationError("Only image files are allowed!")

    def _unique_name(self, filename: str) -> str:
        ext = os.path.splitext(filename)[1].lower()
        return f"product-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"

    def reference_for(self, name: str, base_url: Optional[str] = None) -> str:
        path = f"{UPLOAD_URL_PATH}/{name}"
        return f"{base_url.rstrip('/')}{path}" if base_url else path

    def store(self, uploads: Sequence[Upload], base_url: Optional[str] = None) -> List[str]:
        # every file must pass before any is written
        for upload in uploads:
            self.validate(upload)

        self.ensure_root()
        references = []
        try:
            for upload in uploads:
                name = self._unique_name(upload.filename)
                path = os.path.join(self.root, name)
                with open(path, "xb") as f:
                    f.write(upload.data)
                logger.info("Saved image %s (%d bytes)", path, len(upload.data))
                references.append(self.reference_for(name, base_url))
        except OSError:
            self.reclaim_all(references)
            raise
        return references

    def path_for(self, reference: str) -> Optional[str]:
        if not reference:
            return None
        path = urlparse(reference).path if "://" in reference else reference
        name = os.path.basename(path)
        if not name or name in (".", ".."):
            return None
        return os.path.join(self.root, name)

    def reclaim(self, reference: str) -> bool:
        path = self.path_for(reference)
        if path is None:
            logger.warning("Cannot resolve image reference %r", reference)
            return False
        try:
            os.remove(path)
        except FileNotFoundError:
            logger.info("Image already gone: %s", path)
            return False
        except OSError as e:
            logger.error("Failed to remove image %s: %s", path, e)
            return False
        logger.info("Removed image %s", path)
        return True

    def reclaim_all(self, references: Sequence[str]) -> int:
        return sum(1 for ref in references if self.reclaim(ref))

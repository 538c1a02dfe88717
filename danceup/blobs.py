"""
blobs.py – Uploaded image storage
────────────────────────────────────────────
write(path, bytes) → retrievable URL, delete(path).
Blobs live on local disk under BLOB_ROOT and are served back by the
/blobs/<path> route. Paths are namespaced by entity type + owner id:

 • workshops/<owner_id>/<epoch_ms>_<filename>
 • events/<owner_id>/<epoch_ms>_<filename>
 • studio-images/<owner_id>
────────────────────────────────────────────
"""
from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Optional

from werkzeug.utils import secure_filename

from .errors import NotFoundError, StoreError, ValidationError

log = logging.getLogger(__name__)


@dataclass
class ImageUpload:
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def validate_image(image: ImageUpload, max_bytes: int) -> None:
    if image.size > max_bytes:
        raise ValidationError(f"Image size must be less than {max_bytes // (1024 * 1024)}MB")
    if not (image.content_type or "").startswith("image/"):
        raise ValidationError("Please select a valid image file")


def entity_image_path(collection: str, owner_id: str, filename: str, now_ms: Optional[int] = None) -> str:
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
    name = secure_filename(filename or "") or "image"
    return f"{collection}/{owner_id}/{now_ms}_{name}"


def studio_image_path(owner_id: str) -> str:
    return f"studio-images/{owner_id}"


class BlobStore:
    def __init__(self, root: str, base_url: str = "/blobs"):
        self.root = os.path.abspath(root)
        self.base_url = base_url.rstrip("/")

    # ── Paths / URLs ─────────────────────────────
    def resolve(self, path: str) -> str:
        """Filesystem location of a blob path; refuses anything escaping the root."""
        parts = [p for p in (path or "").split("/") if p]
        if not parts or any(p in (".", "..") for p in parts):
            raise NotFoundError(f"Invalid blob path: {path!r}")
        full = os.path.abspath(os.path.join(self.root, *parts))
        if not full.startswith(self.root + os.sep):
            raise NotFoundError(f"Invalid blob path: {path!r}")
        return full

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path}"

    def path_from_url(self, url: str) -> Optional[str]:
        prefix = self.base_url + "/"
        if url and url.startswith(prefix):
            return url[len(prefix):]
        return None

    # ── Operations ───────────────────────────────
    def write(self, path: str, data: bytes) -> str:
        full = self.resolve(path)
        try:
            os.makedirs(os.path.dirname(full), exist_ok=True)
            with open(full, "wb") as fh:
                fh.write(data)
        except OSError as e:
            log.error(f"❌ Blob write failed for {path}: {e}")
            raise StoreError("Failed to upload image") from e
        log.info(f"[BLOB] wrote {path} ({len(data)} bytes)")
        return self.url_for(path)

    def delete(self, path: str) -> None:
        full = self.resolve(path)
        if not os.path.isfile(full):
            raise NotFoundError(f"Blob not found: {path}")
        try:
            os.remove(full)
        except OSError as e:
            log.error(f"❌ Blob delete failed for {path}: {e}")
            raise StoreError("Failed to delete image") from e
        log.info(f"[BLOB] deleted {path}")

    def delete_url(self, url: str) -> None:
        path = self.path_from_url(url)
        if path is None:
            raise NotFoundError(f"Not a blob URL: {url}")
        self.delete(path)

"""
Use cases for the media proxy routes: validate, name and store images, delete them idempotently.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import HTTPException

from eventify.infra.blob_storage import (
    BlobNotFoundError,
    BlobQuotaError,
    BlobRateLimitError,
    BlobStorage,
    BlobStorageError,
)
from eventify.config import MAX_UPLOAD_SIZE
from . import validators

logger = logging.getLogger(__name__)

_storage: Optional[BlobStorage] = None

def get_blob_storage() -> BlobStorage:
    global _storage
    if _storage is None:
        _storage = BlobStorage()
    return _storage

async def close_blob_storage() -> None:
    global _storage
    if _storage is not None:
        await _storage.aclose()
    _storage = None

@dataclass(frozen=True)
class AssetKind:
    name: str
    prefix: str
    owner_field: Optional[str] = None

ASSET_KINDS: Dict[str, AssetKind] = {
    "vendor": AssetKind("vendor", "vendor-images", "vendorId"),
    "event": AssetKind("event", "event-images", "eventId"),
    "feedback": AssetKind("feedback", "feedback-images"),
}

async def upload_image(
    storage: BlobStorage,
    kind: AssetKind,
    *,
    filename: str,
    content: bytes,
    content_type: Optional[str],
    owner_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Validates then stores an image for `kind`.
    - 400 when empty / too large / type not allowed
    - 429 (provider rate limit), 507 (quota), 500 otherwise
    Returns {url, filename, size, contentType}.
    """
    if not content:
        raise HTTPException(status_code=400, detail="No image file provided.")
    reason = validators.image_validation_error(
        len(content), content_type, MAX_UPLOAD_SIZE, validators.SERVER_ALLOWED_TYPES
    )
    if reason:
        raise HTTPException(status_code=400, detail=reason)

    pathname = validators.build_pathname(kind.prefix, filename, owner_id)
    logger.info(
        "media.upload kind=%s pathname=%s size=%.2fKB type=%s owner=%s",
        kind.name, pathname, len(content) / 1024, content_type, owner_id or "new",
    )
    try:
        blob = await storage.put(pathname, content, content_type)
    except BlobRateLimitError:
        raise HTTPException(status_code=429, detail="Upload rate limit exceeded. Please try again later.")
    except BlobQuotaError:
        raise HTTPException(status_code=507, detail="Storage quota exceeded. Please contact support.")
    except BlobStorageError:
        logger.exception("media.upload failed kind=%s pathname=%s", kind.name, pathname)
        raise HTTPException(status_code=500, detail=f"Failed to upload {kind.name} image. Please try again.")

    return {
        "url": blob.url,
        "filename": blob.pathname,
        "size": blob.size,
        "contentType": blob.content_type,
    }

async def delete_image(storage: BlobStorage, kind: AssetKind, url: Optional[str]) -> Dict[str, Any]:
    """
    Deletes a stored image by URL.
    - 400 when url is missing or not a blob storage URL
    - an already deleted blob is reported as success (alreadyDeleted=True)
    """
    if not url or not isinstance(url, str):
        raise HTTPException(status_code=400, detail="Image URL is required")
    if not validators.is_blob_url(url):
        raise HTTPException(status_code=400, detail="Invalid Vercel Blob URL")

    try:
        await storage.delete(url)
    except BlobNotFoundError:
        logger.info("media.delete kind=%s url=%s already deleted", kind.name, url)
        return {"url": url, "deleted": False, "alreadyDeleted": True}
    except BlobStorageError:
        logger.exception("media.delete failed kind=%s url=%s", kind.name, url)
        raise HTTPException(status_code=500, detail=f"Failed to delete {kind.name} image")

    logger.info("media.delete kind=%s url=%s", kind.name, url)
    return {"url": url, "deleted": True, "alreadyDeleted": False}

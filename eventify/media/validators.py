import re
from urllib.parse import urlparse
from typing import Iterable, Optional

from eventify.config import ALLOWED_IMAGE_TYPES, BLOB_HOST_SUFFIX, MAX_UPLOAD_SIZE

# The proxy routes also accept the non-standard "image/jpg" sent by some browsers
SERVER_ALLOWED_TYPES = list(dict.fromkeys(ALLOWED_IMAGE_TYPES + ["image/jpg"]))

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.-]")

def image_validation_error(
    size: int,
    content_type: Optional[str],
    max_size: int = MAX_UPLOAD_SIZE,
    allowed_types: Iterable[str] = ALLOWED_IMAGE_TYPES,
) -> Optional[str]:
    """
    Returns the reason an image is rejected, or None when it is acceptable.
    Type is checked before size.
    """
    allowed = list(allowed_types)
    if content_type not in allowed:
        return f"Invalid file type. Allowed: {', '.join(allowed)}"
    if size > max_size:
        return f"File size exceeds {max_size // (1024 * 1024)}MB limit."
    return None

def sanitize_filename(filename: str) -> str:
    return _UNSAFE_CHARS.sub("_", filename or "upload").lower()

def build_pathname(prefix: str, filename: str, owner_id: Optional[str] = None) -> str:
    safe = sanitize_filename(filename)
    if owner_id:
        return f"{prefix}/{owner_id}/{safe}"
    return f"{prefix}/{safe}"

def is_blob_url(url: str) -> bool:
    if not isinstance(url, str):
        return False
    parsed = urlparse(url)
    host = parsed.hostname or ""
    return parsed.scheme in ("http", "https") and (host == BLOB_HOST_SUFFIX or host.endswith("." + BLOB_HOST_SUFFIX))

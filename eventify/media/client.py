"""
Client-side media service: validates, uploads and deletes images through the
/api/*-image proxy routes.

Upload failures raise UploadError; delete failures raise RollbackError so the
submission flow can queue the asset instead of surfacing the error.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

import httpx

from eventify.config import ALLOWED_IMAGE_TYPES, MAX_UPLOAD_SIZE
from eventify.errors import RollbackError, UploadError, ValidationError
from eventify.infra.http_client import get_frontend_client
from .validators import image_validation_error

logger = logging.getLogger(__name__)

VENDOR_IMAGE_ENDPOINT = "/api/vendor-image"
EVENT_IMAGE_ENDPOINT = "/api/event-image"
FEEDBACK_IMAGE_ENDPOINT = "/api/feedback-image"

ProgressCallback = Callable[[int], None]


@dataclass(frozen=True)
class AssetFile:
    """An image picked by the user, not yet uploaded."""

    filename: str
    content: bytes
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class UploadedAsset:
    """
    A stored image. Until the domain call that references it succeeds it is
    an orphan candidate owned by the submission that uploaded it.
    """

    url: str
    pathname: str
    owner_entity_id: Optional[str] = None


def validate_image_file(
    file: Optional[AssetFile],
    max_size: int = MAX_UPLOAD_SIZE,
    allowed_types: Iterable[str] = ALLOWED_IMAGE_TYPES,
) -> None:
    """Rejects a file locally, before any network call."""
    if file is None or not file.content:
        raise ValidationError("No image file provided")
    reason = image_validation_error(file.size, file.content_type, max_size, allowed_types)
    if reason:
        raise ValidationError(reason, details={"filename": file.filename})


def _server_message(resp: httpx.Response) -> Optional[str]:
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("error") or body.get("detail") or body.get("message")
    return None


class MediaClient:
    def __init__(self, client: Optional[httpx.AsyncClient] = None) -> None:
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client or get_frontend_client()

    async def upload(
        self,
        file: AssetFile,
        endpoint: str,
        entity_id: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> UploadedAsset:
        """
        Uploads `file` to `endpoint` (multipart "file" + optional "entityId").
        Raises UploadError with a message specific to the failure mode.
        """
        data = {"entityId": entity_id} if entity_id else None
        if on_progress:
            on_progress(0)
        try:
            resp = await self.client.post(
                endpoint,
                files={"file": (file.filename, file.content, file.content_type)},
                data=data,
            )
        except httpx.TimeoutException as e:
            raise UploadError("Upload timed out. Check connection or try a smaller file.") from e
        except httpx.TransportError as e:
            raise UploadError("Network error. Could not reach the upload server.") from e

        if not resp.is_success:
            message = _server_message(resp) or f"Server error ({resp.status_code})."
            raise UploadError(message, status_code=resp.status_code)

        try:
            body = resp.json()
        except ValueError:
            body = None
        if not isinstance(body, dict) or not body.get("url"):
            raise UploadError("Upload failed due to an unknown issue.", status_code=resp.status_code)
        if on_progress:
            on_progress(100)
        return UploadedAsset(url=body["url"], pathname=body.get("filename") or "", owner_entity_id=entity_id)

    async def delete(self, url: str, endpoint: str) -> None:
        """
        Deletes an uploaded image. "Not found" counts as deleted.
        Raises RollbackError on any other failure.
        """
        try:
            resp = await self.client.request("DELETE", endpoint, json={"url": url})
        except httpx.TransportError as e:
            raise RollbackError(f"Could not reach {endpoint} to delete {url}") from e
        if resp.status_code == 404 or resp.is_success:
            return
        raise RollbackError(
            _server_message(resp) or f"Delete failed ({resp.status_code})",
            status_code=resp.status_code,
            details={"url": url, "endpoint": endpoint},
        )

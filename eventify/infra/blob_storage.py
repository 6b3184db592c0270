"""
Vercel Blob adapter: centralises the calls to the blob storage REST API.
- put: uploads bytes under a pathname (public access, random suffix)
- delete: removes a blob by URL (idempotent on the provider side)
Provider failures are translated to BlobStorageError subclasses so the routes
can pick an HTTP status without parsing messages.
"""
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

import httpx

from eventify.config import BLOB_API_URL, BLOB_READ_WRITE_TOKEN, UPLOAD_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

BLOB_API_VERSION = "7"


class BlobStorageError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BlobRateLimitError(BlobStorageError):
    pass


class BlobQuotaError(BlobStorageError):
    pass


class BlobNotFoundError(BlobStorageError):
    pass


@dataclass(frozen=True)
class StoredBlob:
    url: str
    pathname: str
    content_type: str
    size: int


def _raise_for_blob_error(resp: httpx.Response) -> None:
    if resp.is_success:
        return
    try:
        body = resp.json()
    except ValueError:
        body = {}
    error = body.get("error") if isinstance(body, dict) else None
    message = error.get("message") if isinstance(error, dict) else error
    message = message or resp.text or f"Blob API error ({resp.status_code})"
    logger.warning("blob api error status=%s message=%s", resp.status_code, message)
    lowered = message.lower()
    if resp.status_code == 429 or "rate limit" in lowered:
        raise BlobRateLimitError(message, resp.status_code)
    if resp.status_code == 507 or "quota" in lowered:
        raise BlobQuotaError(message, resp.status_code)
    if resp.status_code == 404 or "not found" in lowered:
        raise BlobNotFoundError(message, resp.status_code)
    raise BlobStorageError(message, resp.status_code)


class BlobStorage:
    """Thin async client over the Vercel Blob REST API."""

    def __init__(
        self,
        token: str = BLOB_READ_WRITE_TOKEN,
        api_url: str = BLOB_API_URL,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._token = token
        self._api_url = api_url.rstrip("/")
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=UPLOAD_TIMEOUT_SECONDS)
        return self._client

    def _headers(self) -> dict:
        if not self._token:
            raise BlobStorageError("BLOB_READ_WRITE_TOKEN is not configured")
        return {
            "authorization": f"Bearer {self._token}",
            "x-api-version": BLOB_API_VERSION,
        }

    async def put(
        self,
        pathname: str,
        content: bytes,
        content_type: str,
        add_random_suffix: bool = True,
    ) -> StoredBlob:
        """
        Uploads `content` under `pathname` with public access.
        Returns the stored blob (url + final pathname, suffix included).
        """
        headers = self._headers()
        headers["x-content-type"] = content_type
        headers["x-add-random-suffix"] = "1" if add_random_suffix else "0"
        try:
            resp = await self._get_client().put(
                f"{self._api_url}/{quote(pathname)}",
                content=content,
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise BlobStorageError(f"Blob upload failed: {e}") from e
        _raise_for_blob_error(resp)
        data = resp.json()
        return StoredBlob(
            url=data["url"],
            pathname=data.get("pathname") or pathname,
            content_type=data.get("contentType") or content_type,
            size=len(content),
        )

    async def delete(self, url: str) -> None:
        """
        Deletes a blob by URL. Raises BlobNotFoundError when the provider reports it missing.
        """
        headers = self._headers()
        headers["content-type"] = "application/json"
        try:
            resp = await self._get_client().post(
                f"{self._api_url}/delete",
                json={"urls": [url]},
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise BlobStorageError(f"Blob delete failed: {e}") from e
        _raise_for_blob_error(resp)

    async def aclose(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()

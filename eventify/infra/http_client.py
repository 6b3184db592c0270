from typing import Optional
import httpx
from eventify.config import (
    BACKEND_API_URL,
    BACKEND_TIMEOUT_SECONDS,
    FRONTEND_BASE_URL,
    UPLOAD_TIMEOUT_SECONDS,
)

_backend_client: Optional[httpx.AsyncClient] = None
_frontend_client: Optional[httpx.AsyncClient] = None

def get_backend_client() -> httpx.AsyncClient:
    """
    Shared client for the Go backend API (orders, payments, vendors, events, feedback).
    """
    global _backend_client
    if _backend_client is None or _backend_client.is_closed:
        _backend_client = httpx.AsyncClient(
            base_url=BACKEND_API_URL,
            timeout=BACKEND_TIMEOUT_SECONDS,
            headers={"Content-Type": "application/json"},
        )
    return _backend_client

def get_frontend_client() -> httpx.AsyncClient:
    """
    Shared client for this service's media proxy routes (/api/*-image).
    Longer timeout: uploads carry up to MAX_UPLOAD_SIZE bytes.
    """
    global _frontend_client
    if _frontend_client is None or _frontend_client.is_closed:
        _frontend_client = httpx.AsyncClient(base_url=FRONTEND_BASE_URL, timeout=UPLOAD_TIMEOUT_SECONDS)
    return _frontend_client

async def close_clients() -> None:
    global _backend_client, _frontend_client
    for client in (_backend_client, _frontend_client):
        if client is not None and not client.is_closed:
            await client.aclose()
    _backend_client = None
    _frontend_client = None

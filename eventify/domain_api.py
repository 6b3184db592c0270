"""
Adapter for the backend CRUD endpoints the submission flows persist to.
Every failure becomes a DomainError: with the HTTP status when the backend
answered, without one when it could not be reached.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from eventify.errors import DomainError
from eventify.infra.http_client import get_backend_client

logger = logging.getLogger(__name__)

VENDOR_REGISTER_PATH = "/api/v1/vendors/register"
VENDOR_PATH = "/api/v1/vendors/{vendor_id}"
EVENT_CREATE_PATH = "/api/events/create"
EVENT_PATH = "/api/events/{event_id}"
FEEDBACK_PATH = "/api/v1/feedback"

NETWORK_MESSAGE = "No response from server. Check your connection."

class DomainApi:
    def __init__(self, client: Optional[httpx.AsyncClient] = None) -> None:
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client or get_backend_client()

    async def _send(self, method: str, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = await self.client.request(method, path, json=payload)
        except httpx.TransportError as e:
            logger.warning("domain_api %s %s unreachable: %s", method, path, e)
            raise DomainError(NETWORK_MESSAGE) from e

        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {"data": body}

        if not resp.is_success:
            message = body.get("message") or body.get("error") or f"Request failed ({resp.status_code})"
            logger.info("domain_api %s %s rejected status=%s message=%s", method, path, resp.status_code, message)
            raise DomainError(message, status_code=resp.status_code, details=body)

        data = body.get("data")
        return data if isinstance(data, dict) else body

    async def register_vendor(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._send("POST", VENDOR_REGISTER_PATH, payload)

    async def update_vendor(self, vendor_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._send("PATCH", VENDOR_PATH.format(vendor_id=vendor_id), payload)

    async def create_event(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._send("POST", EVENT_CREATE_PATH, payload)

    async def update_event(self, event_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._send("PUT", EVENT_PATH.format(event_id=event_id), payload)

    async def create_feedback(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._send("POST", FEEDBACK_PATH, payload)

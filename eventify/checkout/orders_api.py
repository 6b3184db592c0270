"""
Adapter for the backend order/payment endpoints.
- initialize: POST /api/orders/initialize -> reference + authoritative amount
- verify: GET /api/payments/verify/{reference} -> raw verification body
"""
import logging
from typing import Any, Dict, Optional

import httpx

from eventify.errors import PaymentInitError
from eventify.infra.http_client import get_backend_client
from .models import OrderInitializationRequest, OrderInitializationResult

logger = logging.getLogger(__name__)

INITIALIZE_PATH = "/api/orders/initialize"
VERIFY_PATH = "/api/payments/verify"

OUT_OF_STOCK_MESSAGE = "Some items just sold out! Please update your cart."
NETWORK_MESSAGE = "Could not start payment, try again."
GENERIC_MESSAGE = "Payment failed to initialize."

def _body(resp: httpx.Response) -> Dict[str, Any]:
    try:
        body = resp.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}

def _init_error(resp: httpx.Response) -> PaymentInitError:
    body = _body(resp)
    server_message = body.get("message") or body.get("error") or ""
    if resp.status_code == 409 or "stock" in server_message.lower():
        return PaymentInitError(OUT_OF_STOCK_MESSAGE, reason=PaymentInitError.OUT_OF_STOCK,
                                status_code=resp.status_code, details=body)
    if 400 <= resp.status_code < 500:
        return PaymentInitError(server_message or "Your order could not be validated. Please review your cart.",
                                reason=PaymentInitError.INVALID_ORDER, status_code=resp.status_code, details=body)
    return PaymentInitError(server_message or GENERIC_MESSAGE, reason=PaymentInitError.GENERIC,
                            status_code=resp.status_code, details=body)

class OrdersApi:
    def __init__(self, client: Optional[httpx.AsyncClient] = None) -> None:
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client or get_backend_client()

    async def initialize(self, request: OrderInitializationRequest) -> OrderInitializationResult:
        """
        Creates a pending order server-side. The returned amount_kobo is the only
        amount the payment widget may be opened with.
        Raises PaymentInitError (out_of_stock | invalid_order | network | generic).
        """
        try:
            resp = await self.client.post(INITIALIZE_PATH, json=request.to_payload())
        except httpx.TransportError as e:
            logger.warning("orders.initialize transport error: %s", e)
            raise PaymentInitError(NETWORK_MESSAGE, reason=PaymentInitError.NETWORK) from e

        if not resp.is_success:
            err = _init_error(resp)
            logger.info("orders.initialize rejected status=%s reason=%s", resp.status_code, err.reason)
            raise err

        body = _body(resp)
        data = body.get("data") or {}
        if body.get("status") != "success" or not data.get("reference") or data.get("amount_kobo") is None:
            raise PaymentInitError(body.get("message") or GENERIC_MESSAGE, reason=PaymentInitError.GENERIC,
                                   status_code=resp.status_code, details=body)
        result = OrderInitializationResult(reference=str(data["reference"]), amount_kobo=int(data["amount_kobo"]))
        logger.info("orders.initialize reference=%s amount_kobo=%s", result.reference, result.amount_kobo)
        return result

    async def verify(self, reference: str) -> Dict[str, Any]:
        """
        Returns the verification body {status, data, ...}.
        Raises httpx.HTTPStatusError (non-2xx) or httpx.TransportError; the verifier classifies them.
        """
        resp = await self.client.get(f"{VERIFY_PATH}/{reference}")
        resp.raise_for_status()
        return _body(resp)

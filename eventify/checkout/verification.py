"""
Payment verification: polls the backend for a reference until the outcome is known.

verifying -> success | pending (retry) | failed | not_found | error
pending   -> pending_timeout once the retry policy is exhausted

`failed` means the backend rejected the payment; `error` and `pending_timeout`
mean the outcome is unknown and the user should check back later.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from eventify.config import (
    SUCCESS_REDIRECT_DELAY_SECONDS,
    TICKETS_PATH,
    VERIFY_MAX_ATTEMPTS,
    VERIFY_RETRY_DELAY_SECONDS,
)
from eventify.utils.retry import RetryPolicy, retry_with_policy
from .models import VerificationResult, VerificationStatus
from .orders_api import OrdersApi

logger = logging.getLogger(__name__)

# Backend answers for an affirmative rejection (bad request, payment required, amount mismatch)
REJECTED_STATUS_CODES = {400, 402, 409}

STATUS_MESSAGES = {
    VerificationStatus.SUCCESS: "Payment confirmed. Your tickets are ready.",
    VerificationStatus.FAILED: "Payment was not successful.",
    VerificationStatus.NOT_FOUND: "We could not find this payment reference.",
    VerificationStatus.PENDING_TIMEOUT: "Payment status unknown, check your ticket page shortly.",
    VerificationStatus.ERROR: "Payment status unknown, check your ticket page shortly.",
}

StatusListener = Callable[[str, VerificationStatus], None]
SuccessHook = Callable[[VerificationResult], Any]

def default_retry_policy() -> RetryPolicy:
    return RetryPolicy(max_attempts=VERIFY_MAX_ATTEMPTS, delay=VERIFY_RETRY_DELAY_SECONDS)

def classify_response(reference: str, body: Dict[str, Any]) -> VerificationResult:
    status = (body or {}).get("status")
    data = (body or {}).get("data")
    if status == "success" and data:
        return VerificationResult(reference=reference, status=VerificationStatus.SUCCESS, data=data)
    if status == "pending":
        return VerificationResult(reference=reference, status=VerificationStatus.PENDING)
    return VerificationResult(reference=reference, status=VerificationStatus.FAILED, message=(body or {}).get("message"))

def classify_exception(reference: str, exc: Exception) -> VerificationResult:
    if isinstance(exc, httpx.HTTPStatusError):
        code = exc.response.status_code
        if code == 404:
            return VerificationResult(reference=reference, status=VerificationStatus.NOT_FOUND)
        if code in REJECTED_STATUS_CODES:
            return VerificationResult(reference=reference, status=VerificationStatus.FAILED)
    return VerificationResult(reference=reference, status=VerificationStatus.ERROR, message=str(exc))

class PaymentVerifier:
    """
    Verifies a payment reference with a bounded, fixed-delay retry policy.
    - status listeners see every transition
    - success hooks run once per reference (clear cart, drop checkout draft...)
    - navigation to the ticket view is scheduled `redirect_delay` seconds after success
    """

    def __init__(
        self,
        orders_api: Optional[OrdersApi] = None,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        navigate: Optional[Callable[[str], Any]] = None,
        redirect_delay: float = SUCCESS_REDIRECT_DELAY_SECONDS,
        tickets_path: str = TICKETS_PATH,
    ) -> None:
        self._api = orders_api or OrdersApi()
        self._policy = policy or default_retry_policy()
        self._sleep = sleep
        self._navigate = navigate
        self._redirect_delay = redirect_delay
        self._tickets_path = tickets_path
        self._listeners: List[StatusListener] = []
        self._success_hooks: List[SuccessHook] = []
        self._succeeded: Dict[str, VerificationResult] = {}
        self._redirect_handle: Optional[asyncio.TimerHandle] = None

    def on_status(self, listener: StatusListener) -> None:
        self._listeners.append(listener)

    def on_success(self, hook: SuccessHook) -> None:
        self._success_hooks.append(hook)

    def _emit(self, reference: str, status: VerificationStatus) -> None:
        logger.info("payments.verify reference=%s status=%s", reference, status.value)
        for listener in list(self._listeners):
            listener(reference, status)

    def ticket_url(self, reference: str) -> str:
        return f"{self._tickets_path}?reference={reference}"

    async def verify(self, reference: str) -> VerificationResult:
        """
        Polls GET /api/payments/verify/{reference}.
        Makes at most policy.max_attempts calls, then ends in pending_timeout.
        """
        if not reference:
            raise ValueError("Payment reference is required")
        if reference in self._succeeded:
            return self._succeeded[reference]

        self._emit(reference, VerificationStatus.VERIFYING)

        async def _poll(attempt: int) -> VerificationResult:
            try:
                body = await self._api.verify(reference)
            except httpx.HTTPError as e:
                logger.warning("payments.verify reference=%s attempt=%s failed: %s", reference, attempt, e)
                return classify_exception(reference, e)
            return classify_response(reference, body)

        outcome = await retry_with_policy(
            _poll,
            self._policy,
            should_retry=lambda r: r.status is VerificationStatus.PENDING,
            sleep=self._sleep,
            on_retry=lambda r, attempt: self._emit(reference, VerificationStatus.PENDING),
        )

        result = outcome.value
        status = VerificationStatus.PENDING_TIMEOUT if outcome.exhausted else result.status
        result = result.model_copy(update={
            "status": status,
            "attempts": outcome.attempts,
            "message": result.message or STATUS_MESSAGES.get(status),
        })
        self._emit(reference, status)

        if status is VerificationStatus.SUCCESS:
            self._succeeded[reference] = result
            self._run_success_hooks(result)
            self._schedule_redirect(reference)
        return result

    def _run_success_hooks(self, result: VerificationResult) -> None:
        for hook in list(self._success_hooks):
            try:
                hook(result)
            except Exception:
                # The payment is confirmed; a local side effect failing must not hide that
                logger.exception("payments.verify success hook failed reference=%s", result.reference)

    def _schedule_redirect(self, reference: str) -> None:
        if self._navigate is None:
            return
        self.cancel_redirect()
        loop = asyncio.get_running_loop()
        self._redirect_handle = loop.call_later(self._redirect_delay, self._navigate, self.ticket_url(reference))

    def cancel_redirect(self) -> None:
        if self._redirect_handle is not None:
            self._redirect_handle.cancel()
            self._redirect_handle = None

"""
Checkout orchestration: order initialization -> payment widget -> verification.

- The charge amount always comes from the initialization response, never from the cart.
- At most one initialization is live per checkout session: a new one aborts the
  previous request, whose result is then discarded.
- close() (view teardown) aborts any in-flight initialization.
"""
import asyncio
import logging
from enum import Enum
from typing import Any, Dict, Optional

from eventify.cart.store import CartStore
from eventify.config import PAYMENT_CURRENCY, PAYSTACK_PUBLIC_KEY
from eventify.errors import InitializationAborted, PaymentInitError, ValidationError
from .models import (
    CustomerInfo,
    OrderInitializationRequest,
    OrderInitializationResult,
    VerificationResult,
)
from .orders_api import OrdersApi
from .verification import PaymentVerifier
from .widget import PaymentWidget, WidgetConfig, WidgetOutcome, WidgetResult

logger = logging.getLogger(__name__)


class CheckoutPhase(str, Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    AWAITING_PAYMENT = "awaiting_payment"
    VERIFYING = "verifying"
    CLOSED = "closed"


class PaymentOrchestrator:
    """
    Drives one checkout session for a cart.

    Collaborators are injected: the backend orders API, the payment widget and
    the verifier (which receives the cart-clearing success hook).
    """

    def __init__(
        self,
        cart: CartStore,
        widget: PaymentWidget,
        orders_api: Optional[OrdersApi] = None,
        verifier: Optional[PaymentVerifier] = None,
        public_key: str = PAYSTACK_PUBLIC_KEY,
        currency: str = PAYMENT_CURRENCY,
    ) -> None:
        self.cart = cart
        self._widget = widget
        self._orders = orders_api or OrdersApi()
        self._verifier = verifier or PaymentVerifier(self._orders)
        self._verifier.on_success(lambda result: self._clear_cart_once(result.reference))
        self._public_key = public_key
        self._currency = currency
        self._in_flight: Optional[asyncio.Task] = None
        self._last_result: Optional[OrderInitializationResult] = None
        self._cleared_references: set = set()
        self._closed = False
        self.phase = CheckoutPhase.IDLE

    @property
    def last_result(self) -> Optional[OrderInitializationResult]:
        return self._last_result

    def _abort_in_flight(self) -> None:
        task, self._in_flight = self._in_flight, None
        if task is not None and not task.done():
            logger.info("checkout.initialize aborting in-flight request")
            task.cancel()

    async def initialize_order(self, request: OrderInitializationRequest) -> OrderInitializationResult:
        """
        POSTs the order and returns the server-issued reference and amount.
        - Any in-flight initialization is aborted first (last intent wins)
        - A superseded or torn-down call raises InitializationAborted and never
          updates the session state
        - Backend/network failures raise PaymentInitError
        """
        if self._closed:
            raise InitializationAborted("closed")
        self._abort_in_flight()
        task = asyncio.ensure_future(self._orders.initialize(request))
        self._in_flight = task
        self.phase = CheckoutPhase.INITIALIZING

        try:
            result = await task
        except asyncio.CancelledError:
            if task.cancelled() and self._in_flight is not task:
                raise InitializationAborted("closed" if self._closed else "superseded")
            # The caller itself was cancelled
            if self._in_flight is task:
                self._in_flight = None
                if not self._closed:
                    self.phase = CheckoutPhase.IDLE
            raise
        except PaymentInitError:
            if self._in_flight is not task:
                raise InitializationAborted("closed" if self._closed else "superseded") from None
            self._in_flight = None
            self.phase = CheckoutPhase.IDLE
            raise

        # Completed, but a newer attempt may have started before we resumed
        if self._in_flight is not task:
            raise InitializationAborted("closed" if self._closed else "superseded")
        self._in_flight = None
        self._last_result = result
        return result

    async def open_payment_widget(
        self,
        reference: str,
        amount_kobo: int,
        email: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> WidgetResult:
        """
        Opens the hosted widget for the last server-issued reference/amount pair.
        - success: phase becomes VERIFYING and the cart is cleared
        - close: control returns to the user, cart kept, nothing marked failed
        """
        if self._closed:
            raise InitializationAborted("closed")
        issued = self._last_result
        if issued is None or issued.reference != reference or issued.amount_kobo != amount_kobo:
            raise ValueError("The payment widget only accepts the reference and amount issued by order initialization")

        self.phase = CheckoutPhase.AWAITING_PAYMENT
        config = WidgetConfig(
            public_key=self._public_key,
            email=email,
            amount=issued.amount_kobo,
            reference=issued.reference,
            currency=self._currency,
            metadata=metadata or {},
        )
        result = await self._widget.open(config)
        if result.outcome is WidgetOutcome.SUCCESS:
            self.phase = CheckoutPhase.VERIFYING
            self._clear_cart_once(issued.reference)
        else:
            logger.info("checkout.widget closed reference=%s, cart kept", issued.reference)
            self.phase = CheckoutPhase.IDLE
        return result

    async def checkout(
        self,
        email: str,
        customer: Optional[CustomerInfo] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> WidgetResult:
        """
        "Pay now": validates locally, initializes the order, then opens the widget
        with the server amount. Validation failures never reach the network.
        """
        if not email or "@" not in email:
            raise ValidationError("Please provide a valid email address.")
        if self.cart.is_empty:
            raise ValidationError("Your cart is empty.")
        try:
            request = OrderInitializationRequest.from_cart(email, self.cart.items, customer)
        except ValueError as e:
            raise ValidationError("Please provide a valid email address.", details={"errors": str(e)}) from e

        result = await self.initialize_order(request)
        return await self.open_payment_widget(result.reference, result.amount_kobo, email, metadata)

    async def verify_payment(self, reference: str) -> VerificationResult:
        return await self._verifier.verify(reference)

    def _clear_cart_once(self, reference: str) -> None:
        if reference in self._cleared_references:
            return
        self._cleared_references.add(reference)
        self.cart.clear()

    def close(self) -> None:
        """Teardown: abort the in-flight initialization and any pending redirect."""
        self._closed = True
        self._abort_in_flight()
        self._verifier.cancel_redirect()
        self.phase = CheckoutPhase.CLOSED

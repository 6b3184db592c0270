"""
Feature 'checkout': public entry point.
Gathers order initialization (server-side amount), the payment widget adapter,
verification polling and the orchestrator.
"""

from .models import (
    CustomerInfo,
    OrderInitializationRequest,
    OrderInitializationResult,
    OrderItemRequest,
    VerificationResult,
    VerificationStatus,
)
from .orders_api import OrdersApi
from .widget import CallbackWidgetAdapter, PaymentWidget, WidgetConfig, WidgetOutcome, WidgetResult
from .verification import PaymentVerifier
from .orchestrator import CheckoutPhase, PaymentOrchestrator

__all__ = [
    # models
    "CustomerInfo",
    "OrderItemRequest",
    "OrderInitializationRequest",
    "OrderInitializationResult",
    "VerificationStatus",
    "VerificationResult",
    # backend adapter
    "OrdersApi",
    # widget
    "PaymentWidget",
    "CallbackWidgetAdapter",
    "WidgetConfig",
    "WidgetOutcome",
    "WidgetResult",
    # orchestration
    "PaymentVerifier",
    "PaymentOrchestrator",
    "CheckoutPhase",
]

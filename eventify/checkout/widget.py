"""Payment widget abstraction.

The hosted widget is callback-shaped (setup(options) then openIframe(), with
`callback` / `onClose` hooks). CallbackWidgetAdapter turns it into a single
awaitable so the orchestrator reads as linear async code and tests can swap
in a fake PaymentWidget.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class WidgetOutcome(str, Enum):
    SUCCESS = "success"
    CLOSED = "closed"


@dataclass(frozen=True)
class WidgetConfig:
    public_key: str
    email: str
    amount: int
    reference: str
    currency: str = "NGN"
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class WidgetResult:
    outcome: WidgetOutcome
    reference: str
    response: Optional[Dict[str, Any]] = None


class PaymentWidget(ABC):
    """Interface over the hosted payment widget."""

    @abstractmethod
    async def open(self, config: WidgetConfig) -> WidgetResult:
        """Open the widget and resolve once the user paid or closed it."""
        ...


class CallbackWidgetAdapter(PaymentWidget):
    """
    Wraps a callback-style SDK. `setup` receives the widget options
    ({key, email, amount, ref, currency, metadata, callback, onClose}) and
    returns a handler exposing `openIframe()`.
    The first callback wins; later ones are ignored.
    """

    def __init__(self, setup: Callable[[Dict[str, Any]], Any]) -> None:
        self._setup = setup

    async def open(self, config: WidgetConfig) -> WidgetResult:
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()

        def _resolve(result: WidgetResult) -> None:
            if not future.done():
                future.set_result(result)

        def _on_success(response: Optional[Dict[str, Any]] = None) -> None:
            loop.call_soon_threadsafe(_resolve, WidgetResult(WidgetOutcome.SUCCESS, config.reference, response))

        def _on_close() -> None:
            loop.call_soon_threadsafe(_resolve, WidgetResult(WidgetOutcome.CLOSED, config.reference))

        handler = self._setup({
            "key": config.public_key,
            "email": config.email,
            "amount": config.amount,
            "ref": config.reference,
            "currency": config.currency,
            "metadata": config.metadata,
            "callback": _on_success,
            "onClose": _on_close,
        })
        handler.openIframe()
        result = await future
        logger.info("widget.%s reference=%s", result.outcome.value, config.reference)
        return result

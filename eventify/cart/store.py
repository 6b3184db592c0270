"""
Cart session state: an explicit store object, created by the application and
passed to whatever needs it (orchestrator, verifier). No module-level cart.
"""
import logging
from typing import Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

class CartItem(BaseModel):
    """
    One ticket tier in the cart. `price` is in kobo and only ever used for display.
    Invariant: 1 <= quantity <= max_quantity.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    event_id: str
    tier_id: str
    event_title: str = ""
    tier_name: str
    price: int = Field(ge=0)
    quantity: int = Field(ge=1)
    max_quantity: int = Field(ge=1)
    event_image: Optional[str] = None

    @model_validator(mode="after")
    def _check_quantity(self) -> "CartItem":
        if self.quantity > self.max_quantity:
            raise ValueError(f"quantity {self.quantity} exceeds max_quantity {self.max_quantity}")
        return self

    @property
    def key(self) -> Tuple[str, str]:
        return (self.event_id, self.tier_id)

CartListener = Callable[[List[CartItem]], None]

class CartStore:
    """
    Cart store with typed actions: add_item, update_quantity, remove_item, clear.
    Listeners are notified with a snapshot after every change.
    """

    def __init__(self, items: Optional[List[CartItem]] = None) -> None:
        self._items: Dict[Tuple[str, str], CartItem] = {}
        self._listeners: List[CartListener] = []
        for item in items or []:
            self._items[item.key] = item

    @property
    def items(self) -> List[CartItem]:
        return list(self._items.values())

    @property
    def is_empty(self) -> bool:
        return not self._items

    @property
    def item_count(self) -> int:
        return sum(i.quantity for i in self._items.values())

    @property
    def subtotal_kobo(self) -> int:
        """Display subtotal. Never used as the charge amount."""
        return sum(i.price * i.quantity for i in self._items.values())

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _notify(self) -> None:
        snapshot = self.items
        for listener in list(self._listeners):
            listener(snapshot)

    def add_item(self, item: CartItem) -> CartItem:
        """
        Adds a tier to the cart; an existing (event, tier) line is merged.
        The merged quantity is clamped to max_quantity.
        """
        existing = self._items.get(item.key)
        if existing:
            quantity = min(existing.quantity + item.quantity, item.max_quantity)
            item = item.model_copy(update={"quantity": quantity})
        self._items[item.key] = item
        self._notify()
        return item

    def update_quantity(self, event_id: str, tier_id: str, quantity: int) -> Optional[CartItem]:
        """
        Sets the quantity of a line. quantity < 1 removes the line,
        quantity above max_quantity is clamped.
        """
        key = (event_id, tier_id)
        existing = self._items.get(key)
        if existing is None:
            raise KeyError(f"No cart item for event={event_id} tier={tier_id}")
        if quantity < 1:
            self.remove_item(event_id, tier_id)
            return None
        updated = existing.model_copy(update={"quantity": min(quantity, existing.max_quantity)})
        self._items[key] = updated
        self._notify()
        return updated

    def remove_item(self, event_id: str, tier_id: str) -> None:
        if self._items.pop((event_id, tier_id), None) is not None:
            self._notify()

    def clear(self) -> None:
        self._items.clear()
        logger.info("cart cleared")
        self._notify()

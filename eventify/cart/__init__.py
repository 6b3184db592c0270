from .store import CartItem, CartStore
from .totals import calculate_cart_totals, calculate_service_fee, format_naira, kobo_to_naira, naira_to_kobo

__all__ = [
    "CartItem",
    "CartStore",
    "calculate_cart_totals",
    "calculate_service_fee",
    "format_naira",
    "kobo_to_naira",
    "naira_to_kobo",
]

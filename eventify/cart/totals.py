"""
Display totals for the cart (service fee tiers, VAT). Pure logic, no I/O.

These figures are shown to the user only. The amount actually charged is the
one returned by order initialization.
"""
import math
from typing import Any, Dict, Iterable, List

from .store import CartItem

VAT_RATE = 0.075
TIER_THRESHOLD = 5000
SMALL_TICKET_RATE = 0.10
PREMIUM_TICKET_RATE = 0.07
PREMIUM_TICKET_FLAT = 50

def _round(value: float) -> int:
    # Half-up, like the fees shown on the payment page
    return int(math.floor(value + 0.5))

def kobo_to_naira(kobo: Any) -> float:
    try:
        return float(kobo) / 100
    except (TypeError, ValueError):
        return 0.0

def naira_to_kobo(naira: Any) -> int:
    try:
        return _round(float(naira) * 100)
    except (TypeError, ValueError):
        return 0

def calculate_service_fee(ticket_price_naira: float) -> Dict[str, Any]:
    """
    Service fee for one ticket.
    - <= ₦5,000: 10% flat, VAT included
    - > ₦5,000: 7% + ₦50, plus 7.5% VAT on that fee
    """
    try:
        price = float(ticket_price_naira)
    except (TypeError, ValueError):
        price = 0.0
    if price <= 0:
        return {"service_fee": 0, "vat": 0, "total_fee": 0, "tier": None}
    if price <= TIER_THRESHOLD:
        fee = _round(price * SMALL_TICKET_RATE)
        return {"service_fee": fee, "vat": 0, "total_fee": fee, "tier": "small"}
    fee = _round(price * PREMIUM_TICKET_RATE) + PREMIUM_TICKET_FLAT
    vat = _round(fee * VAT_RATE)
    return {"service_fee": fee, "vat": vat, "total_fee": fee + vat, "tier": "premium"}

def calculate_cart_totals(items: Iterable[CartItem]) -> Dict[str, Any]:
    items = list(items)
    breakdown: List[Dict[str, Any]] = []
    subtotal = service_fee = vat = 0.0
    tiers = set()
    for item in items:
        unit = kobo_to_naira(item.price)
        fee = calculate_service_fee(unit)
        line_subtotal = unit * item.quantity
        subtotal += line_subtotal
        service_fee += fee["service_fee"] * item.quantity
        vat += fee["vat"] * item.quantity
        tiers.add(fee["tier"])
        breakdown.append({
            "event_title": item.event_title,
            "tier_name": item.tier_name,
            "price_per_ticket": unit,
            "quantity": item.quantity,
            "subtotal": line_subtotal,
            "service_fee": fee["service_fee"] * item.quantity,
            "vat": fee["vat"] * item.quantity,
            "tier": fee["tier"],
        })
    total_fees = service_fee + vat
    final_total = subtotal + total_fees
    return {
        "subtotal": subtotal,
        "service_fee": service_fee,
        "vat": vat,
        "total_fees": total_fees,
        "final_total": final_total,
        "final_total_kobo": naira_to_kobo(final_total),
        "items_breakdown": breakdown,
        "has_mixed_tiers": len(tiers) > 1,
        "item_count": sum(i.quantity for i in items),
    }

def format_naira(amount: float) -> str:
    """₦1,500 style, no decimals."""
    return f"₦{_round(amount):,}"

"""
Payload builders: form data (+ final image URL) -> backend JSON.
Pure functions, no I/O.
"""
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from eventify.errors import ValidationError

EVENT_UI_ONLY_FIELDS = ("eventImagePreview", "startTime", "endTime", "timezone")

def _to_int(value: Any) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return 0

def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0

def prepare_vendor_payload(form: Mapping[str, Any], image_url: Optional[str], user_id: Optional[str]) -> Dict[str, Any]:
    if not user_id:
        raise ValidationError("Owner ID is required for registration")
    return {
        # ownerId is informative; the backend trusts the session cookie
        "owner_id": user_id,
        "name": (form.get("name") or "").strip(),
        "category": form.get("category"),
        "imageURL": image_url or form.get("imageURL") or "",
        "state": form.get("state"),
        "city": form.get("city") or "",
        "phoneNumber": form.get("phoneNumber") or "",
        "minPrice": _to_int(form.get("minPrice")),
    }

def _combine(date: str, time: str) -> str:
    return datetime.fromisoformat(f"{date}T{time}:00").isoformat()

def _ticket(ticket: Mapping[str, Any]) -> Dict[str, Any]:
    ticket_id = ticket.get("id")
    # temp-* ids come from unsaved rows; the backend generates real ones
    if ticket_id is not None and str(ticket_id).startswith("temp-"):
        ticket_id = None
    out = {
        "tierName": ticket.get("tierName"),
        "price": _to_float(ticket.get("price")),
        "quantity": _to_int(ticket.get("quantity")),
        "description": ticket.get("description") or "",
    }
    if ticket_id:
        out["id"] = ticket_id
    return out

def prepare_event_payload(form: Mapping[str, Any], image_url: Optional[str]) -> Dict[str, Any]:
    payload = dict(form)
    if image_url:
        payload["eventImage"] = image_url

    if payload.get("startDate") and payload.get("startTime"):
        try:
            payload["startDate"] = _combine(payload["startDate"], payload["startTime"])
            if payload.get("endDate") and payload.get("endTime"):
                payload["endDate"] = _combine(payload["endDate"], payload["endTime"])
        except ValueError as e:
            raise ValidationError("Invalid event date or time", details={"error": str(e)}) from e

    payload["tickets"] = [_ticket(t) for t in payload.get("tickets") or []]
    for key in EVENT_UI_ONLY_FIELDS:
        payload.pop(key, None)
    return payload

def prepare_feedback_payload(form: Mapping[str, Any], image_url: Optional[str]) -> Dict[str, Any]:
    return {
        "name": form.get("name"),
        "email": form.get("email"),
        "type": form.get("type"),
        "message": form.get("message"),
        "imageUrl": image_url or "",
    }

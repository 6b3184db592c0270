"""
Event creation / edit with a cover image.
"""
from typing import Any, Dict, Mapping, Optional

from eventify.errors import ValidationError
from eventify.media.client import EVENT_IMAGE_ENDPOINT
from .base import AssetSubmission
from .payloads import prepare_event_payload

class EventSubmission(AssetSubmission):
    endpoint = EVENT_IMAGE_ENDPOINT
    asset_field = "eventImage"

    def __init__(self, user_id: Optional[str], **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.user_id = user_id

    def check_form(self, form_data: Mapping[str, Any], entity_id: Optional[str]) -> None:
        if not self.user_id:
            raise ValidationError("Authentication required. Please log in.")
        if not isinstance(form_data, Mapping):
            raise ValidationError("Invalid form data received")
        prepare_event_payload(form_data, None)

    def build_payload(self, form_data: Mapping[str, Any], asset_url: Optional[str]) -> Dict[str, Any]:
        return prepare_event_payload(form_data, asset_url)

    async def persist(self, payload: Dict[str, Any], entity_id: Optional[str]) -> Dict[str, Any]:
        if entity_id:
            return await self.domain_api.update_event(entity_id, payload)
        return await self.domain_api.create_event(payload)

    def success_message(self, is_update: bool) -> str:
        return "Event updated successfully" if is_update else "Event created successfully"

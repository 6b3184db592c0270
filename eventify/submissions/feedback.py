"""
Feedback form with an optional screenshot. Create-only.
"""
from typing import Any, Dict, Mapping, Optional

from eventify.errors import ValidationError
from eventify.media.client import FEEDBACK_IMAGE_ENDPOINT
from .base import AssetSubmission
from .payloads import prepare_feedback_payload

REQUIRED_FIELDS = ("name", "email", "type", "message")

class FeedbackSubmission(AssetSubmission):
    endpoint = FEEDBACK_IMAGE_ENDPOINT
    asset_field = "imageUrl"
    supports_update = False

    def check_form(self, form_data: Mapping[str, Any], entity_id: Optional[str]) -> None:
        missing = [f for f in REQUIRED_FIELDS if not form_data.get(f)]
        if missing:
            raise ValidationError("Please fill in all required fields", details={"missing": missing})

    def build_payload(self, form_data: Mapping[str, Any], asset_url: Optional[str]) -> Dict[str, Any]:
        return prepare_feedback_payload(form_data, asset_url)

    async def persist(self, payload: Dict[str, Any], entity_id: Optional[str]) -> Dict[str, Any]:
        return await self.domain_api.create_feedback(payload)

    def success_message(self, is_update: bool) -> str:
        return "Thanks for your feedback!"

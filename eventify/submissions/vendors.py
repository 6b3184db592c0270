"""
Vendor registration / profile update with a brand image.
"""
from typing import Any, Dict, Mapping, Optional

from eventify.media.client import VENDOR_IMAGE_ENDPOINT
from .base import AssetSubmission
from .payloads import prepare_vendor_payload

class VendorSubmission(AssetSubmission):
    endpoint = VENDOR_IMAGE_ENDPOINT
    asset_field = "imageURL"

    def __init__(self, user_id: Optional[str], **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.user_id = user_id

    def check_form(self, form_data: Mapping[str, Any], entity_id: Optional[str]) -> None:
        # raises before the upload when the owner is unknown
        prepare_vendor_payload(form_data, None, self.user_id)

    def build_payload(self, form_data: Mapping[str, Any], asset_url: Optional[str]) -> Dict[str, Any]:
        return prepare_vendor_payload(form_data, asset_url, self.user_id)

    async def persist(self, payload: Dict[str, Any], entity_id: Optional[str]) -> Dict[str, Any]:
        if entity_id:
            return await self.domain_api.update_vendor(entity_id, payload)
        return await self.domain_api.register_vendor(payload)

    def success_message(self, is_update: bool) -> str:
        return "Vendor profile updated successfully" if is_update else "Vendor registered successfully"

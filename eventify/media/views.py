from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile

from eventify.infra.blob_storage import BlobStorage
from eventify.utils.rate_limit import optional_rate_limit
from .service import ASSET_KINDS, AssetKind, delete_image, get_blob_storage, upload_image

router = APIRouter(prefix="/api", tags=["Media"])

def _asset_kind(kind: str) -> AssetKind:
    asset_kind = ASSET_KINDS.get(kind)
    if asset_kind is None:
        raise HTTPException(status_code=404, detail="Not Found")
    return asset_kind

# module eventify.media.views
@router.post("/{kind}-image", dependencies=[Depends(optional_rate_limit(times=20, seconds=60))])
async def post_image(
    kind: str,
    file: Optional[UploadFile] = File(None),
    vendorId: Optional[str] = Form(None),
    eventId: Optional[str] = Form(None),
    entityId: Optional[str] = Form(None),
    storage: BlobStorage = Depends(get_blob_storage),
) -> Dict[str, Any]:
    """
    Uploads a vendor / event / feedback image to blob storage.
    - Multipart: file (+ vendorId | eventId | entityId to organise the pathname)
    - Returns {url, filename, size, contentType}
    - Errors: 400 validation, 429 rate limit, 507 quota, 500 provider error
    """
    asset_kind = _asset_kind(kind)
    if file is None:
        raise HTTPException(status_code=400, detail="No image file provided.")
    owners = {"vendorId": vendorId, "eventId": eventId}
    owner_id = (owners.get(asset_kind.owner_field) if asset_kind.owner_field else None) or entityId
    content = await file.read()
    return await upload_image(
        storage,
        asset_kind,
        filename=file.filename or "upload",
        content=content,
        content_type=file.content_type,
        owner_id=owner_id,
    )

@router.delete("/{kind}-image")
async def remove_image(
    kind: str,
    request: Request,
    url: Optional[str] = None,
    storage: BlobStorage = Depends(get_blob_storage),
) -> Dict[str, Any]:
    """
    Deletes an image by URL.
    - URL from the JSON body {url} (alias imageUrl) or the ?url= query parameter
    - Idempotent: an already deleted image is not an error
    """
    asset_kind = _asset_kind(kind)
    if not url:
        try:
            body = await request.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            url = body.get("url") or body.get("imageUrl")
    return await delete_image(storage, asset_kind, url)

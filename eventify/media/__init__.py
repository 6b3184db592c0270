"""
Feature 'media': image proxy routes (server side) and the media client,
orphan queue and cleanup sweep (client side).
"""
from typing import Optional

from .client import (
    EVENT_IMAGE_ENDPOINT,
    FEEDBACK_IMAGE_ENDPOINT,
    VENDOR_IMAGE_ENDPOINT,
    AssetFile,
    MediaClient,
    UploadedAsset,
    validate_image_file,
)
from .orphans import (
    InMemoryOrphanRepository,
    JsonFileOrphanRepository,
    OrphanAssetRepository,
    OrphanedAsset,
    SweepResult,
    sweep_orphaned_assets,
    unpersisted_orphans,
)

async def cleanup_orphaned_images(
    repository: Optional[OrphanAssetRepository] = None,
    media: Optional[MediaClient] = None,
    fallback: Optional[OrphanAssetRepository] = None,
    **kwargs,
) -> SweepResult:
    """
    Sweeps the orphan queue through the proxy routes each entry was uploaded to,
    then the in-memory entries the durable queue could not store.
    Defaults: the durable JSON queue and the shared media client.
    """
    repository = repository or JsonFileOrphanRepository()
    fallback = fallback or unpersisted_orphans
    media = media or MediaClient()

    async def _delete(asset: OrphanedAsset) -> None:
        await media.delete(asset.url, asset.endpoint)

    result = await sweep_orphaned_assets(repository, _delete, **kwargs)
    kept = await sweep_orphaned_assets(fallback, _delete, **kwargs)
    return SweepResult(success=result.success + kept.success, failed=result.failed + kept.failed)

__all__ = [
    "AssetFile",
    "UploadedAsset",
    "MediaClient",
    "validate_image_file",
    "VENDOR_IMAGE_ENDPOINT",
    "EVENT_IMAGE_ENDPOINT",
    "FEEDBACK_IMAGE_ENDPOINT",
    "OrphanedAsset",
    "OrphanAssetRepository",
    "InMemoryOrphanRepository",
    "JsonFileOrphanRepository",
    "SweepResult",
    "sweep_orphaned_assets",
    "cleanup_orphaned_images",
]

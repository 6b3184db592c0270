"""
Rollback-safe asset submission.

idle -> uploading -> uploaded -> submitting_domain -> succeeded
                                                   -> rolling_back -> rollback_succeeded | rollback_queued

Upload strictly precedes the domain call; the rollback strictly follows a
domain failure; a replaced asset is deleted only after the update succeeded.
An attempt is `succeeded` only once the domain call confirmed.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Protocol

from eventify.config import ALLOWED_IMAGE_TYPES, MAX_UPLOAD_SIZE
from eventify.domain_api import DomainApi
from eventify.errors import user_message
from eventify.media.client import AssetFile, MediaClient, UploadedAsset, validate_image_file
from eventify.media.orphans import (
    JsonFileOrphanRepository,
    OrphanAssetRepository,
    OrphanedAsset,
    unpersisted_orphans,
)

logger = logging.getLogger(__name__)


class SubmissionState(str, Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    UPLOADED = "uploaded"
    SUBMITTING_DOMAIN = "submitting_domain"
    SUCCEEDED = "succeeded"
    ROLLING_BACK = "rolling_back"
    ROLLBACK_SUCCEEDED = "rollback_succeeded"
    ROLLBACK_QUEUED = "rollback_queued"
    # Validation or upload failure: nothing was stored, nothing to compensate
    FAILED = "failed"


@dataclass(frozen=True)
class SubmissionResult:
    state: SubmissionState
    entity: Dict[str, Any]
    asset_url: Optional[str] = None
    replaced_asset_url: Optional[str] = None


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LoggingNotifier:
    """Default notifier: user-facing messages go to the log."""

    def success(self, message: str) -> None:
        logger.info("notify.success %s", message)

    def error(self, message: str) -> None:
        logger.info("notify.error %s", message)


class AssetSubmission(ABC):
    """
    One submission flow (vendor, event, feedback). Subclasses provide the
    proxy endpoint, the payload builder and the domain call.
    """

    endpoint: str = ""
    asset_field: str = "imageUrl"
    supports_update: bool = True

    def __init__(
        self,
        domain_api: Optional[DomainApi] = None,
        media: Optional[MediaClient] = None,
        orphans: Optional[OrphanAssetRepository] = None,
        fallback_orphans: Optional[OrphanAssetRepository] = None,
        notifier: Optional[Notifier] = None,
        max_size: int = MAX_UPLOAD_SIZE,
        allowed_types: Iterable[str] = ALLOWED_IMAGE_TYPES,
        on_progress: Optional[Callable[[int], None]] = None,
    ) -> None:
        self.domain_api = domain_api or DomainApi()
        self.media = media or MediaClient()
        self.orphans = orphans or JsonFileOrphanRepository()
        self.fallback_orphans = fallback_orphans or unpersisted_orphans
        self.notifier = notifier or LoggingNotifier()
        self.max_size = max_size
        self.allowed_types = list(allowed_types)
        self.on_progress = on_progress
        self.state = SubmissionState.IDLE
        self.history: List[SubmissionState] = [SubmissionState.IDLE]
        self.progress = 0

    # -- hooks -------------------------------------------------------------

    def check_form(self, form_data: Mapping[str, Any], entity_id: Optional[str]) -> None:
        """Local checks run before any network call. Raise ValidationError."""

    @abstractmethod
    def build_payload(self, form_data: Mapping[str, Any], asset_url: Optional[str]) -> Dict[str, Any]:
        ...

    @abstractmethod
    async def persist(self, payload: Dict[str, Any], entity_id: Optional[str]) -> Dict[str, Any]:
        ...

    def success_message(self, is_update: bool) -> str:
        return "Saved successfully"

    def existing_asset_url(self, form_data: Mapping[str, Any]) -> Optional[str]:
        value = form_data.get(self.asset_field)
        return value if isinstance(value, str) and value else None

    # -- flow --------------------------------------------------------------

    def _set_state(self, state: SubmissionState) -> None:
        self.state = state
        self.history.append(state)
        logger.info("submission.%s endpoint=%s", state.value, self.endpoint)

    def _set_progress(self, value: int) -> None:
        self.progress = value
        if self.on_progress:
            self.on_progress(value)

    async def submit(
        self,
        form_data: Mapping[str, Any],
        asset_file: Optional[AssetFile] = None,
        entity_id: Optional[str] = None,
    ) -> SubmissionResult:
        """
        Uploads `asset_file` (if any), then creates or updates the entity.
        - Domain failure after an upload: the new asset is deleted, or queued
          in the orphan repository if that delete fails
        - Update replacing an asset: the old one is deleted after success only
        - Exactly one user-facing error is notified; the primary error is re-raised
        """
        self.state = SubmissionState.IDLE
        self.history = [SubmissionState.IDLE]
        self._set_progress(0)
        uploaded: Optional[UploadedAsset] = None
        is_update = entity_id is not None
        previous_url = None

        try:
            if is_update and not self.supports_update:
                raise ValueError(f"{type(self).__name__} does not support updates")
            self.check_form(form_data, entity_id)
            if is_update:
                previous_url = self.existing_asset_url(form_data)
            if asset_file is not None:
                validate_image_file(asset_file, self.max_size, self.allowed_types)
                self._set_state(SubmissionState.UPLOADING)
                self._set_progress(20)
                uploaded = await self.media.upload(asset_file, self.endpoint, entity_id)
                self._set_state(SubmissionState.UPLOADED)
                self._set_progress(60)

            asset_url = uploaded.url if uploaded else self.existing_asset_url(form_data)
            payload = self.build_payload(form_data, asset_url)
            self._set_state(SubmissionState.SUBMITTING_DOMAIN)
            entity = await self.persist(payload, entity_id)
        except (Exception, asyncio.CancelledError) as error:
            if uploaded is not None:
                await self._rollback(uploaded)
            else:
                self._set_state(SubmissionState.FAILED)
            self._set_progress(0)
            if not isinstance(error, asyncio.CancelledError):
                logger.info("submission failed endpoint=%s error=%s", self.endpoint, error)
                self.notifier.error(user_message(error))
            raise

        self._set_state(SubmissionState.SUCCEEDED)
        self._set_progress(100)

        replaced = None
        if uploaded is not None and previous_url and previous_url != uploaded.url:
            replaced = previous_url
            await self._delete_replaced(previous_url)

        self.notifier.success(self.success_message(is_update))
        return SubmissionResult(
            state=SubmissionState.SUCCEEDED,
            entity=entity,
            asset_url=uploaded.url if uploaded else self.existing_asset_url(form_data),
            replaced_asset_url=replaced,
        )

    async def _rollback(self, uploaded: UploadedAsset) -> None:
        self._set_state(SubmissionState.ROLLING_BACK)
        try:
            await self.media.delete(uploaded.url, self.endpoint)
        except Exception:
            logger.warning("submission rollback failed, queueing url=%s", uploaded.url, exc_info=True)
            self._queue_orphan(uploaded.url, uploaded.pathname)
            self._set_state(SubmissionState.ROLLBACK_QUEUED)
            return
        self._set_state(SubmissionState.ROLLBACK_SUCCEEDED)

    async def _delete_replaced(self, url: str) -> None:
        try:
            await self.media.delete(url, self.endpoint)
        except Exception:
            # The entity already points at the new asset
            logger.warning("submission old asset cleanup failed, queueing url=%s", url, exc_info=True)
            self._queue_orphan(url, "")

    def _queue_orphan(self, url: str, pathname: str) -> None:
        asset = OrphanedAsset(url=url, endpoint=self.endpoint, pathname=pathname)
        try:
            self.orphans.append(asset)
        except OSError:
            logger.error(
                "submission could not persist orphaned asset, kept in memory url=%s endpoint=%s",
                url,
                self.endpoint,
                exc_info=True,
            )
            self.fallback_orphans.append(asset)

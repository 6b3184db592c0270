import pytest
from unittest.mock import MagicMock

from eventify.errors import DomainError, RollbackError, UploadError, ValidationError
from eventify.media.client import AssetFile, UploadedAsset
from eventify.media.orphans import InMemoryOrphanRepository
from eventify.submissions import (
    EventSubmission,
    FeedbackSubmission,
    SubmissionState,
    VendorSubmission,
)

NEW_URL = "https://store.public.blob.vercel-storage.com/vendor-images/logo-x1.png"
OLD_URL = "https://store.public.blob.vercel-storage.com/vendor-images/old-logo.png"
LOGO = AssetFile(filename="logo.png", content=b"\x89PNG", content_type="image/png")

class _Recorder:
    """Shared call log so tests can assert the order of side effects."""

    def __init__(self):
        self.calls = []

class _FakeMedia:
    def __init__(self, log, upload_error=None, delete_error=None):
        self.log = log
        self.upload_error = upload_error
        self.delete_error = delete_error

    async def upload(self, file, endpoint, entity_id=None, on_progress=None):
        self.log.calls.append(("upload", endpoint, entity_id))
        if self.upload_error:
            raise self.upload_error
        return UploadedAsset(url=NEW_URL, pathname="vendor-images/logo-x1.png", owner_entity_id=entity_id)

    async def delete(self, url, endpoint):
        self.log.calls.append(("delete", url))
        if self.delete_error:
            raise self.delete_error

class _FakeDomain:
    def __init__(self, log, error=None):
        self.log = log
        self.error = error
        self.payloads = []

    async def _call(self, name, payload):
        self.log.calls.append((name,))
        self.payloads.append(payload)
        if self.error:
            raise self.error
        return {"id": "entity-1", **payload}

    async def register_vendor(self, payload):
        return await self._call("register_vendor", payload)

    async def update_vendor(self, vendor_id, payload):
        return await self._call("update_vendor", payload)

    async def create_event(self, payload):
        return await self._call("create_event", payload)

    async def update_event(self, event_id, payload):
        return await self._call("update_event", payload)

    async def create_feedback(self, payload):
        return await self._call("create_feedback", payload)

def _vendor(log, domain_error=None, **media_kwargs):
    notifier = MagicMock()
    orphans = InMemoryOrphanRepository()
    submission = VendorSubmission(
        user_id="user-1",
        domain_api=_FakeDomain(log, domain_error),
        media=_FakeMedia(log, **media_kwargs),
        orphans=orphans,
        notifier=notifier,
    )
    return submission, notifier, orphans

VENDOR_FORM = {"name": "Jollof Kings", "category": "catering", "state": "Lagos", "minPrice": "15000"}

@pytest.mark.asyncio
async def test_register_uploads_then_persists_with_new_url():
    log = _Recorder()
    submission, notifier, _ = _vendor(log)

    result = await submission.submit(VENDOR_FORM, LOGO)

    assert [c[0] for c in log.calls] == ["upload", "register_vendor"]
    assert submission.domain_api.payloads[0]["imageURL"] == NEW_URL
    assert result.state is SubmissionState.SUCCEEDED
    assert result.asset_url == NEW_URL
    assert submission.history == [
        SubmissionState.IDLE,
        SubmissionState.UPLOADING,
        SubmissionState.UPLOADED,
        SubmissionState.SUBMITTING_DOMAIN,
        SubmissionState.SUCCEEDED,
    ]
    notifier.success.assert_called_once_with("Vendor registered successfully")
    notifier.error.assert_not_called()

@pytest.mark.asyncio
async def test_domain_failure_deletes_uploaded_asset_exactly_once():
    log = _Recorder()
    submission, notifier, orphans = _vendor(log, domain_error=DomainError("Invalid category", status_code=400))

    with pytest.raises(DomainError):
        await submission.submit(VENDOR_FORM, LOGO)

    assert log.calls == [("upload", "/api/vendor-image", None), ("register_vendor",), ("delete", NEW_URL)]
    assert submission.state is SubmissionState.ROLLBACK_SUCCEEDED
    assert orphans.entries() == []
    notifier.error.assert_called_once_with("Invalid category")
    notifier.success.assert_not_called()

@pytest.mark.asyncio
async def test_failed_rollback_is_queued_exactly_once_and_primary_error_surfaces():
    log = _Recorder()
    submission, notifier, orphans = _vendor(
        log,
        domain_error=DomainError("Server exploded", status_code=500),
        delete_error=RollbackError("blob down"),
    )

    with pytest.raises(DomainError):
        await submission.submit(VENDOR_FORM, LOGO)

    queued = orphans.entries()
    assert len(queued) == 1
    assert queued[0].url == NEW_URL
    assert queued[0].endpoint == "/api/vendor-image"
    assert submission.state is SubmissionState.ROLLBACK_QUEUED
    assert [c[0] for c in log.calls].count("delete") == 1
    # The rollback problem is never shown to the user
    notifier.error.assert_called_once_with("Server exploded")

@pytest.mark.asyncio
async def test_update_deletes_old_asset_only_after_success():
    log = _Recorder()
    submission, notifier, _ = _vendor(log)

    result = await submission.submit({**VENDOR_FORM, "imageURL": OLD_URL}, LOGO, entity_id="v1")

    assert log.calls == [("upload", "/api/vendor-image", "v1"), ("update_vendor",), ("delete", OLD_URL)]
    assert result.replaced_asset_url == OLD_URL
    notifier.success.assert_called_once_with("Vendor profile updated successfully")

@pytest.mark.asyncio
async def test_failed_update_never_deletes_old_asset():
    log = _Recorder()
    submission, _, _ = _vendor(log, domain_error=DomainError("Forbidden", status_code=403))

    with pytest.raises(DomainError):
        await submission.submit({**VENDOR_FORM, "imageURL": OLD_URL}, LOGO, entity_id="v1")

    deleted = [c[1] for c in log.calls if c[0] == "delete"]
    assert deleted == [NEW_URL]

@pytest.mark.asyncio
async def test_update_with_same_url_or_no_new_file_deletes_nothing():
    log = _Recorder()
    submission, _, _ = _vendor(log)
    await submission.submit({**VENDOR_FORM, "imageURL": NEW_URL}, LOGO, entity_id="v1")
    await submission.submit({**VENDOR_FORM, "imageURL": OLD_URL}, None, entity_id="v1")

    assert [c for c in log.calls if c[0] == "delete"] == []
    assert submission.domain_api.payloads[-1]["imageURL"] == OLD_URL

@pytest.mark.asyncio
async def test_old_asset_cleanup_failure_is_not_surfaced():
    log = _Recorder()
    submission, notifier, orphans = _vendor(log, delete_error=RollbackError("blob down"))

    result = await submission.submit({**VENDOR_FORM, "imageURL": OLD_URL}, LOGO, entity_id="v1")

    assert result.state is SubmissionState.SUCCEEDED
    assert [a.url for a in orphans.entries()] == [OLD_URL]
    notifier.error.assert_not_called()

@pytest.mark.asyncio
async def test_upload_failure_makes_no_domain_call_and_nothing_to_roll_back():
    log = _Recorder()
    submission, notifier, _ = _vendor(log, upload_error=UploadError("Upload timed out."))

    with pytest.raises(UploadError):
        await submission.submit(VENDOR_FORM, LOGO)

    assert log.calls == [("upload", "/api/vendor-image", None)]
    assert submission.state is SubmissionState.FAILED
    notifier.error.assert_called_once_with("Upload timed out.")

@pytest.mark.asyncio
async def test_invalid_file_and_missing_owner_fail_before_network():
    log = _Recorder()
    submission, notifier, _ = _vendor(log)
    with pytest.raises(ValidationError):
        await submission.submit(VENDOR_FORM, AssetFile("logo.svg", b"<svg/>", "image/svg+xml"))

    anonymous = VendorSubmission(user_id=None, domain_api=_FakeDomain(log), media=_FakeMedia(log),
                                 orphans=InMemoryOrphanRepository(), notifier=MagicMock())
    with pytest.raises(ValidationError):
        await anonymous.submit(VENDOR_FORM, LOGO)

    assert log.calls == []
    assert notifier.error.call_count == 1

@pytest.mark.asyncio
async def test_event_submission_persists_combined_payload():
    log = _Recorder()
    submission = EventSubmission(user_id="user-1", domain_api=_FakeDomain(log), media=_FakeMedia(log),
                                 orphans=InMemoryOrphanRepository(), notifier=MagicMock())
    form = {"eventTitle": "Afro Night", "startDate": "2026-12-01", "startTime": "19:30", "tickets": []}

    await submission.submit(form, LOGO)

    assert log.calls[0] == ("upload", "/api/event-image", None)
    payload = submission.domain_api.payloads[0]
    assert payload["eventImage"] == NEW_URL
    assert payload["startDate"] == "2026-12-01T19:30:00"

@pytest.mark.asyncio
async def test_feedback_is_create_only_and_rolls_back_screenshot():
    log = _Recorder()
    notifier = MagicMock()
    submission = FeedbackSubmission(domain_api=_FakeDomain(log, DomainError("No response from server.")),
                                    media=_FakeMedia(log), orphans=InMemoryOrphanRepository(), notifier=notifier)
    form = {"name": "A", "email": "a@b.co", "type": "bug", "message": "Broken button"}

    with pytest.raises(DomainError):
        await submission.submit(form, LOGO)
    assert [c[0] for c in log.calls] == ["upload", "create_feedback", "delete"]

    with pytest.raises(ValueError):
        await submission.submit(form, None, entity_id="f1")

@pytest.mark.asyncio
async def test_progress_hook_reports_each_phase():
    log = _Recorder()
    progress = []
    submission = VendorSubmission(user_id="user-1", domain_api=_FakeDomain(log), media=_FakeMedia(log),
                                  orphans=InMemoryOrphanRepository(), notifier=MagicMock(),
                                  on_progress=progress.append)
    await submission.submit(VENDOR_FORM, LOGO)
    assert progress == [0, 20, 60, 100]

@pytest.mark.asyncio
async def test_event_with_malformed_date_fails_before_upload():
    log = _Recorder()
    notifier = MagicMock()
    submission = EventSubmission(user_id="user-1", domain_api=_FakeDomain(log), media=_FakeMedia(log),
                                 orphans=InMemoryOrphanRepository(), notifier=notifier)
    form = {"eventTitle": "Afro Night", "startDate": "2026-13-45", "startTime": "10:00", "tickets": []}

    with pytest.raises(ValidationError):
        await submission.submit(form, LOGO)

    assert log.calls == []
    assert submission.history == [SubmissionState.IDLE, SubmissionState.FAILED]
    notifier.error.assert_called_once_with("Invalid event date or time")

class _BrokenOrphanStore(InMemoryOrphanRepository):
    def append(self, asset):
        raise OSError("disk full")

@pytest.mark.asyncio
async def test_orphan_is_kept_in_memory_when_durable_queue_fails():
    log = _Recorder()
    fallback = InMemoryOrphanRepository()
    submission = VendorSubmission(user_id="user-1",
                                  domain_api=_FakeDomain(log, DomainError("Server exploded", status_code=500)),
                                  media=_FakeMedia(log, delete_error=RollbackError("blob down")),
                                  orphans=_BrokenOrphanStore(), fallback_orphans=fallback, notifier=MagicMock())

    with pytest.raises(DomainError):
        await submission.submit(VENDOR_FORM, LOGO)

    assert submission.state is SubmissionState.ROLLBACK_QUEUED
    assert [(a.url, a.endpoint) for a in fallback.entries()] == [(NEW_URL, "/api/vendor-image")]

import json
import httpx
import pytest

from eventify.errors import RollbackError, UploadError, ValidationError
from eventify.media.client import (
    VENDOR_IMAGE_ENDPOINT,
    AssetFile,
    MediaClient,
    validate_image_file,
)

PNG = AssetFile(filename="logo.png", content=b"\x89PNG...", content_type="image/png")

def _client(handler):
    return MediaClient(httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://media.test"))

def test_validate_image_file_rejects_type_and_size():
    with pytest.raises(ValidationError):
        validate_image_file(AssetFile("a.txt", b"x", "text/plain"))
    with pytest.raises(ValidationError):
        validate_image_file(AssetFile("a.png", b"x" * 11, "image/png"), max_size=10)
    with pytest.raises(ValidationError):
        validate_image_file(None)
    validate_image_file(PNG)

@pytest.mark.asyncio
async def test_upload_posts_multipart_with_entity_id():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = request.content
        return httpx.Response(200, json={"url": "https://x.public.blob.vercel-storage.com/vendor-images/v1/logo.png",
                                         "filename": "vendor-images/v1/logo.png"})

    progress = []
    asset = await _client(handler).upload(PNG, VENDOR_IMAGE_ENDPOINT, entity_id="v1", on_progress=progress.append)
    assert seen["path"] == "/api/vendor-image"
    assert b'name="entityId"' in seen["body"]
    assert b'filename="logo.png"' in seen["body"]
    assert asset.pathname == "vendor-images/v1/logo.png"
    assert asset.owner_entity_id == "v1"
    assert progress == [0, 100]

@pytest.mark.asyncio
async def test_upload_server_error_uses_server_message():
    def handler(request):
        return httpx.Response(507, json={"error": "Storage quota exceeded. Please contact support."})

    with pytest.raises(UploadError) as exc:
        await _client(handler).upload(PNG, VENDOR_IMAGE_ENDPOINT)
    assert exc.value.status_code == 507
    assert "quota" in exc.value.message

@pytest.mark.asyncio
async def test_upload_timeout_and_network_errors_have_distinct_messages():
    def timeout(request):
        raise httpx.ReadTimeout("timed out", request=request)

    def unreachable(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(UploadError) as t:
        await _client(timeout).upload(PNG, VENDOR_IMAGE_ENDPOINT)
    with pytest.raises(UploadError) as n:
        await _client(unreachable).upload(PNG, VENDOR_IMAGE_ENDPOINT)
    assert "timed out" in t.value.message
    assert "Network error" in n.value.message

@pytest.mark.asyncio
async def test_upload_without_url_is_an_error():
    with pytest.raises(UploadError):
        await _client(lambda r: httpx.Response(200, json={})).upload(PNG, VENDOR_IMAGE_ENDPOINT)

@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    httpx.Response(200, text="<html>ok</html>"),
    httpx.Response(200, json=["https://x.public.blob.vercel-storage.com/a.png"]),
])
async def test_upload_with_unreadable_success_body_is_an_upload_error(response):
    with pytest.raises(UploadError) as e:
        await _client(lambda r: response).upload(PNG, VENDOR_IMAGE_ENDPOINT)
    assert e.value.message == "Upload failed due to an unknown issue."

@pytest.mark.asyncio
async def test_delete_sends_json_body_and_treats_404_as_success():
    seen = []

    def handler(request):
        seen.append((request.method, json.loads(request.content)))
        return httpx.Response(404, json={"error": "not found"})

    await _client(handler).delete("https://x.public.blob.vercel-storage.com/a.png", VENDOR_IMAGE_ENDPOINT)
    assert seen == [("DELETE", {"url": "https://x.public.blob.vercel-storage.com/a.png"})]

@pytest.mark.asyncio
async def test_delete_failure_raises_rollback_error():
    with pytest.raises(RollbackError):
        await _client(lambda r: httpx.Response(500, json={"error": "boom"})).delete("u", VENDOR_IMAGE_ENDPOINT)

    def unreachable(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(RollbackError):
        await _client(unreachable).delete("u", VENDOR_IMAGE_ENDPOINT)

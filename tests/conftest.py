import os
import pytest
from typing import Generator, List, Optional
from fastapi.testclient import TestClient

# Disable fastapi-limiter init (no Redis during tests)
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

from eventify.app import app as fastapi_app
from eventify.infra.blob_storage import BlobNotFoundError, BlobStorageError, StoredBlob
from eventify.media.service import get_blob_storage

# Automatic markers by folder
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)

class FakeBlobStorage:
    """In-memory stand-in for BlobStorage, records every call."""

    def __init__(self) -> None:
        self.blobs = {}
        self.puts: List[str] = []
        self.deletes: List[str] = []
        self.put_error: Optional[Exception] = None
        self.delete_error: Optional[Exception] = None

    async def put(self, pathname, content, content_type, add_random_suffix=True):
        if self.put_error:
            raise self.put_error
        stored = pathname.replace(".", "-abc123.", 1) if add_random_suffix else pathname
        url = f"https://store.public.blob.vercel-storage.com/{stored}"
        self.blobs[url] = content
        self.puts.append(pathname)
        return StoredBlob(url=url, pathname=stored, content_type=content_type, size=len(content))

    async def delete(self, url):
        self.deletes.append(url)
        if self.delete_error:
            raise self.delete_error
        if url not in self.blobs:
            raise BlobNotFoundError("The requested blob does not exist", 404)
        del self.blobs[url]

    async def aclose(self):
        return None

@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

@pytest.fixture()
def fake_blob_storage(app):
    storage = FakeBlobStorage()
    app.dependency_overrides[get_blob_storage] = lambda: storage
    try:
        yield storage
    finally:
        app.dependency_overrides.pop(get_blob_storage, None)

@pytest.fixture()
def failing_blob_storage(fake_blob_storage):
    fake_blob_storage.put_error = BlobStorageError("Internal blob error", 500)
    fake_blob_storage.delete_error = BlobStorageError("Internal blob error", 500)
    return fake_blob_storage

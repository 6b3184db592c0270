import sys
import time
import types
from fastapi import FastAPI, Depends, Request
from fastapi.testclient import TestClient
from eventify.utils.rate_limit import optional_rate_limit, rate_limit_health_info


def _make_app(times=2, seconds=60):
    app = FastAPI()

    @app.post("/api/vendor-image", dependencies=[Depends(optional_rate_limit(times, seconds))])
    def upload_vendor():
        return {"ok": True}

    @app.post("/api/event-image", dependencies=[Depends(optional_rate_limit(times, seconds))])
    def upload_event():
        return {"ok": True}

    @app.get("/rl_info")
    def rl_info(request: Request):
        return rate_limit_health_info(request)

    return app


def test_rate_limit_fallback_blocks_after_limit(monkeypatch):
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")
    client = TestClient(_make_app(times=2, seconds=60))

    assert client.post("/api/vendor-image").status_code == 200
    assert client.post("/api/vendor-image").status_code == 200
    assert client.post("/api/vendor-image").status_code == 429


def test_rate_limit_is_per_path(monkeypatch):
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")
    client = TestClient(_make_app(times=1, seconds=60))

    assert client.post("/api/vendor-image").status_code == 200
    assert client.post("/api/vendor-image").status_code == 429
    # event uploads have their own budget
    assert client.post("/api/event-image").status_code == 200


def test_rate_limit_resets_after_window(monkeypatch):
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")
    client = TestClient(_make_app(times=1, seconds=1))

    assert client.post("/api/vendor-image").status_code == 200
    assert client.post("/api/vendor-image").status_code == 429
    time.sleep(1.1)
    assert client.post("/api/vendor-image").status_code == 200


def test_rate_limit_disabled_flag_bypasses_limit(monkeypatch):
    monkeypatch.delenv("LOCAL_RATE_LIMIT_FALLBACK", raising=False)
    app = _make_app(times=1, seconds=60)
    app.state.rate_limit_enabled = False
    client = TestClient(app)

    for _ in range(3):
        assert client.post("/api/vendor-image").status_code == 200


def test_rate_limit_health_info(monkeypatch):
    app = _make_app()
    app.state.rate_limit_enabled = True
    client = TestClient(app)

    dummy = types.ModuleType("fastapi_limiter")

    class FastAPILimiter:
        redis = None

    dummy.FastAPILimiter = FastAPILimiter
    monkeypatch.setitem(sys.modules, "fastapi_limiter", dummy)

    info = client.get("/rl_info").json()
    assert info == {"enabled": True, "ready": False, "backend": None}

    FastAPILimiter.redis = object()
    monkeypatch.setenv("RATE_LIMIT_REDIS_URL", "redis://localhost:6379/0")
    info = client.get("/rl_info").json()
    assert info["ready"] is True
    assert info["backend"] == "redis"
    assert info["redis"] == {"scheme": "redis", "host": "localhost", "port": 6379}

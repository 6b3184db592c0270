"""
FastAPI lifespan: startup/shutdown of shared resources.
- Initialises FastAPILimiter (Redis), with a fakeredis option for tests.
- Supported environment variables:
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: skips limiter init entirely
  - USE_FAKE_REDIS_FOR_TESTS=1: uses fakeredis
  - LOCAL_RATE_LIMIT_FALLBACK=1: in-memory fallback when init fails
- Shutdown closes the shared httpx clients and the blob storage client.
"""
import os
import logging
import redis.asyncio as redis
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter

from eventify.infra.http_client import close_clients
from eventify.media.service import close_blob_storage

try:
    from fakeredis.aioredis import FakeRedis  # tests only
except ImportError:
    FakeRedis = None

async def _init_rate_limiter(app: FastAPI, logger: logging.Logger) -> None:
    try:
        if os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1":
            if not FakeRedis:
                raise RuntimeError("USE_FAKE_REDIS_FOR_TESTS=1 but fakeredis is not installed.")
            r = FakeRedis(decode_responses=True)
        else:
            redis_url = os.getenv("RATE_LIMIT_REDIS_URL", "redis://127.0.0.1:6379/0")
            r = redis.from_url(redis_url, encoding="utf-8", decode_responses=True)

        await FastAPILimiter.init(r)
        app.state.rate_limit_enabled = True
        logger.info("Rate limiting enabled")
    except Exception as e:
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            app.state.rate_limit_enabled = True
            logger.warning("Rate limiting falling back to local in-memory due to init error: %s", e)
        else:
            app.state.rate_limit_enabled = False
            logger.warning("Rate limiting disabled due to init error: %s", e)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Sets up rate limiting, then releases outbound clients on shutdown.
    - A Redis failure without fallback disables rate limiting cleanly.
    """
    logger = logging.getLogger("uvicorn.error")
    if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
        app.state.rate_limit_enabled = False
        logger.info("Rate limiting disabled by DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS")
    else:
        await _init_rate_limiter(app, logger)

    try:
        yield
    finally:
        await close_clients()
        await close_blob_storage()
        logger.info("Outbound HTTP clients closed")

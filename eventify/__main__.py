"""
Entry point for the media service.

Usage:
    python -m eventify

Environment variables:
- PORT: listening port (default 8000)
- UVICORN_RELOAD: auto-reload in development ("1"/"true"/"yes")
- LOG_LEVEL: uvicorn log level (e.g. "info", "debug")
"""
import os
import uvicorn

from eventify.config import LOG_LEVEL

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    reload_flag = os.environ.get("UVICORN_RELOAD", "").lower() in ("1", "true", "yes")
    uvicorn.run(
        "eventify.asgi:app",
        host="0.0.0.0",
        port=port,
        reload=reload_flag,
        log_level=LOG_LEVEL,
    )

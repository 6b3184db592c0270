"""
ASGI entrypoint: exposes `app` for process managers (uvicorn, gunicorn with uvicorn workers).
Configuration lives in eventify.app_setup; this module only exposes the instance.
"""

from eventify.app import app

__all__ = ["app"]

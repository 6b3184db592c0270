"""
Exception handlers.
- HTTPException on /api/*: {"error": detail}, the shape the web app reads
- HTTPException elsewhere: FastAPI's standard {"detail": ...}
- EventifyError: {"error": message, "code": code} with its status (default per class)
"""
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from eventify.errors import EventifyError

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_error(request: Request, exc: HTTPException):
        if request.url.path.startswith("/api/"):
            return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)

    @app.exception_handler(EventifyError)
    async def eventify_error(request: Request, exc: EventifyError):
        status_code = exc.status_code or exc.default_status
        logger.info("request failed path=%s code=%s status=%s", request.url.path, exc.code.value, status_code)
        return JSONResponse(status_code=status_code, content={"error": exc.message, "code": exc.code.value})

"""
Central router registry: media proxy routes and health.
"""
from fastapi import FastAPI
from eventify.media.views import router as media_router
from eventify.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    # Blob storage proxy (/api/{vendor,event,feedback}-image)
    app.include_router(media_router)
    # Health & monitoring
    app.include_router(health_router)

"""
Application factory used by the entrypoints (eventify.asgi, python -m eventify).
"""
from fastapi import FastAPI
from .lifespan import lifespan
from .middlewares import register_basic_middlewares
from .exceptions import register_exception_handlers
from .routers import register_routers

def create_app() -> FastAPI:
    """
    Builds the FastAPI app with its lifespan and registers:
      - CORS and TrustedHost middlewares
      - exception handlers (HTTPException, EventifyError)
      - the media and health routers
    """
    app = FastAPI(title="Eventify media service", lifespan=lifespan)
    register_basic_middlewares(app)
    register_exception_handlers(app)
    register_routers(app)
    return app

"""
DevEvent - tech event catalog and booking
Main application entry point
"""

import os
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
import uvicorn

from devevent.core.config import Settings, settings as default_settings
from devevent.core.db import Database
from devevent.core.errors import DomainError
from devevent.api import routes_bookings, routes_events, routes_pages, routes_public
from devevent.services.image_service import ImageUploader, build_uploader
from devevent.services.repositories import open_backend
from devevent.utils.responses import domain_error_response, error_response

# Configure logging
logging.basicConfig(level=default_settings.LOG_LEVEL.upper())
logger = logging.getLogger(__name__)

def create_app(
    settings: Settings = default_settings,
    database: Optional[Database] = None,
    uploader: Optional[ImageUploader] = None
) -> FastAPI:
    """Build the application; tests pass their own database and uploader"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan management"""
        try:
            await app.state.database.connect()
        except Exception:
            # Requests retry the connection on demand
            logger.exception("Initial database connection failed")
        yield
        await app.state.database.close()
        logger.info("Application shutdown")

    app = FastAPI(
        title=settings.APP_NAME,
        description="Discover, view and book tech events",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.database = database or Database(lambda: open_backend(settings))
    app.state.uploader = uploader or build_uploader(settings)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DomainError)
    async def handle_domain_error(request: Request, exc: DomainError):
        return domain_error_response(exc)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(message="Internal server error", error=str(exc), status_code=500)

    # Mount static files
    os.makedirs("static", exist_ok=True)
    app.mount("/static", StaticFiles(directory="static"), name="static")

    # Include routers
    app.include_router(routes_public.router, tags=["public"])
    app.include_router(routes_events.router, prefix="/api/events", tags=["events"])
    app.include_router(routes_bookings.router, prefix="/api/bookings", tags=["bookings"])
    app.include_router(routes_pages.router, tags=["pages"])

    return app

app = create_app()

# Note: Run this ASGI app directly with Uvicorn or Hypercorn. For Gunicorn,
# use `uvicorn.workers.UvicornWorker` instead of wrapping the app.

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="127.0.0.1",
        port=8000,
        reload=True
    )

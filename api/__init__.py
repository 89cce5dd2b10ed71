"""
FastAPI application factory for the Folio API server.

Serves the portfolio image store and the photo grid render plan.
"""

import os
import sys

# Ensure the project root is in Python path for local imports
_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown hooks."""
    # Startup: make sure the schema exists (DB_PATH env var)
    from db import init_database
    init_database()
    yield
    # Shutdown: nothing to clean up (sqlite connections are per-request)


def create_app() -> FastAPI:
    """FastAPI application factory."""
    from api.config import SITE_CONFIG

    app = FastAPI(
        title="Folio API",
        description="Photography portfolio image store and photo grid layout",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/api/docs",
        openapi_url="/api/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=SITE_CONFIG['cors_origins'],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    from api.routers.auth import router as auth_router
    from api.routers.images import router as images_router
    from api.routers.layout import router as layout_router

    app.include_router(auth_router)
    app.include_router(images_router)
    app.include_router(layout_router)

    # Serve uploaded images under /uploads, matching the URLs stored for them
    upload_dir = SITE_CONFIG['upload_dir']
    if os.path.isdir(upload_dir):
        app.mount("/uploads", StaticFiles(directory=upload_dir), name="uploads")

    return app

"""Main FastAPI application for the Folio blog."""

import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import SITE_ROOT, settings
from .database import dispose_engine, init_db
from .errors import FolioError, SeedDataError
from .logging_config import configure_logging
from .routers import (
    categories_router,
    posts_router,
    tags_router,
    theme_router,
    theme_ws_router,
)
from .seed import seed_if_empty

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup - skip if in test mode (fixtures own the database)
    if "pytest" not in sys.modules:
        log_file = configure_logging(
            settings.log_dir,
            settings.log_max_bytes,
            settings.log_retention_days,
            settings.debug,
            settings.uvicorn_log_level,
        )
        logger.info("Logging to %s", log_file)
        logger.info("Initializing database...")
        await init_db()
        if settings.seed_on_startup:
            try:
                await seed_if_empty(settings.seed_data_dir)
            except SeedDataError:
                logger.exception("Could not load seed content; starting empty")
        logger.info("Folio ready!")

    yield

    if "pytest" not in sys.modules:
        logger.info("Shutting down...")

    try:
        await dispose_engine()
    except Exception:
        logger.exception("Error while disposing database engine")


app = FastAPI(
    title="Folio",
    description="Personal blog and portfolio: posts, categories, tags and theme preferences",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FolioError)
async def folio_error_handler(request: Request, exc: FolioError):
    """Translate domain errors into JSON responses."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "details": exc.details},
    )


app.include_router(posts_router)
app.include_router(categories_router)
app.include_router(tags_router)
app.include_router(theme_router)
app.include_router(theme_ws_router)


@app.get("/api/health")
async def root():
    """Root endpoint - basic info."""
    return {
        "name": "Folio",
        "version": __version__,
        "status": "running",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


def main():
    """Run the server."""
    print(f"Starting Folio on {settings.host}:{settings.port}")
    reload_dirs = [str(SITE_ROOT / "src")] if settings.debug else None
    uvicorn.run(
        "folio.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        reload_dirs=reload_dirs,
    )


if __name__ == "__main__":
    main()

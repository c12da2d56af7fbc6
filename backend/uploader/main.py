"""Image Upload Service.

Accepts one image per request together with a name and email, stores the
file on local disk and records the upload in DuckDB.

Endpoints:
    - POST /upload: multipart upload (name, email, image)
    - GET /images: every stored upload record
    - GET /uploads/{filename}: stored image bytes
    - GET /health: liveness check
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from uploader.config import AppSettings, load_settings
from uploader.uploads.context import UploadContext
from uploader.uploads.router import router as uploads_router
from uploader.uploads.storage import ensure_storage_dir

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

for _noisy in ("multipart", "python_multipart", "httpx", "httpcore"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


def _apply_log_level(level: str) -> None:
    configured_level = getattr(logging, level.upper(), None)
    if isinstance(configured_level, int):
        logging.getLogger().setLevel(configured_level)
        logger.info("Root logger level set to %s", level.upper())


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Build the application.

    The storage directory is created here, before anything is served. The
    record store is opened in the lifespan; if the database cannot be
    opened, startup fails and the server exits.
    """
    if settings is None:
        settings = load_settings()
    _apply_log_level(settings.logging.level)
    ensure_storage_dir(settings.storage.upload_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the upload context for the lifetime of the app."""
        ctx = UploadContext.from_settings(settings)
        app.state.uploads = ctx
        logger.info(
            "Serving uploads from %s (database=%s)",
            settings.storage.upload_dir,
            settings.database.url,
        )

        yield  # Application runs here

        ctx.close()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="Image Upload API",
        description="Upload an image with a name and email, list stored uploads",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(uploads_router)

    @app.get("/health")
    async def health() -> dict:
        """Health check endpoint."""
        return {"status": "ok"}

    return app

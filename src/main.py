"""
FastAPI application entry point.

This module creates and configures the FastAPI application.
Using an application factory pattern (create_app function) because
tests build the app with their own settings and dependency overrides.

For local development:
    uvicorn src.main:app --reload

For production:
    gunicorn src.main:app -w 4 -k uvicorn.workers.UvicornWorker
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api.errors import register_exception_handlers
from .api.routes import auth, health, images, upload
from .config.settings import get_settings

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=get_settings().log_level.upper(),
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Logs startup configuration and warns about missing settings. Nothing
    needs closing on shutdown: boto3 clients are created per request.
    """
    settings = get_settings()

    logger.info(
        "Image host starting",
        extra={
            "version": settings.api_version,
            "environment": settings.environment,
            "mock_mode": {"r2": settings.r2_mock_mode},
        }
    )

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )

    yield

    logger.info("Image host shutting down")


def create_app() -> FastAPI:
    """
    Application factory.

    Creates and configures the FastAPI application.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=__version__,
        description="""
        Image hosting on Cloudflare R2.

        ## Authentication

        `POST /api/auth/login` with the admin password sets an http-only
        `auth-token` cookie. Uploads (and, by default, listing and
        deletion) require that cookie.

        ## Workflow

        1. **Log in**: `POST /api/auth/login`
        2. **Upload**: `POST /api/upload` (multipart, one file per request)
        3. **Browse**: `GET /api/images?limit=&offset=`
        4. **Delete**: `DELETE /api/images` with `{"key": ...}` or `{"keys": [...]}`
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Session cookies need credentials; "*" only makes sense in development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(
        auth.router,
        prefix="/api/auth",
        tags=["Auth"],
    )

    app.include_router(
        upload.router,
        prefix="/api/upload",
        tags=["Upload"],
    )

    app.include_router(
        images.router,
        prefix="/api/images",
        tags=["Images"],
    )

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": settings.api_title,
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    register_exception_handlers(app)

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": __version__,
        }
    )

    return app


# Create the application instance
# This is what uvicorn/gunicorn will import
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )

"""
ReelHub API application.

This module creates and configures the FastAPI application using an
application factory (create_app), so tests can build fresh instances
with different settings.

For local development:
    uvicorn reelhub.main:app --reload

For production:
    gunicorn reelhub.main:app -w 4 -k uvicorn.workers.UvicornWorker
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .api.routes import auth, feed, health, videos
from .config.settings import get_settings
from .infrastructure.imagekit.auth import ImageKitAuthError
from .infrastructure.mongo.client import MongoConnectionError

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup and shutdown.

    Logs configuration problems at startup. The database connection is
    opened lazily by the first request that needs it, then cached.
    """
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    logger.info(
        "ReelHub API starting",
        extra={
            "version": __version__,
            "mock_mode": {
                "mongo": settings.mongo_mock_mode,
                "imagekit": settings.imagekit_mock_mode,
            }
        }
    )

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )

    yield

    logger.info("ReelHub API shutting down")


def create_app() -> FastAPI:
    """Build the app: middleware, routers and error handlers."""
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="""
        Short-video sharing.

        ## Workflow

        1. **Get an upload credential**: `GET /api/auth/imagekit-auth`
        2. **Upload the file to ImageKit** with that credential
        3. **Publish**: `POST /api/videos` with the returned file path,
           a title and a description (requires `X-API-Key`)
        4. **Browse**: `GET /api/feed` or `GET /api/videos`
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

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
        tags=["Uploads"],
    )

    app.include_router(
        videos.router,
        prefix="/api/videos",
        tags=["Videos"],
    )

    app.include_router(
        feed.router,
        prefix="/api/feed",
        tags=["Feed"],
    )

    @app.get("/", include_in_schema=False)
    async def root():
        """Root endpoint - pointers to docs."""
        return {
            "message": "ReelHub API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request, exc):
        """Error bodies use an `error` field, like the web frontend expects."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request, exc):
        """Schema errors get the same `error` body, naming the first bad field."""
        errors = exc.errors()
        message = "Invalid request"
        if errors:
            first = errors[0]
            field = ".".join(
                str(part) for part in first.get("loc", ())
                if part not in ("body", "query", "path")
            )
            message = f"{field}: {first.get('msg')}" if field else first.get("msg", message)

        logger.info(
            "Request validation failed",
            extra={"path": request.url.path, "errors": len(errors)},
        )
        return JSONResponse(
            status_code=422,
            content={"error": message},
        )

    @app.exception_handler(MongoConnectionError)
    async def database_unavailable_handler(request, exc):
        logger.error(
            "Database unavailable",
            extra={"path": request.url.path, "error": str(exc)},
        )
        return JSONResponse(
            status_code=503,
            content={"error": "Database unavailable"},
        )

    @app.exception_handler(ImageKitAuthError)
    async def imagekit_unconfigured_handler(request, exc):
        logger.error(
            "ImageKit not configured",
            extra={"path": request.url.path, "error": str(exc)},
        )
        return JSONResponse(
            status_code=503,
            content={"error": "ImageKit is not configured"},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """
        Anything unhandled becomes a 500 with a generic body; the traceback
        only goes to the log.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"}
        )

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": settings.api_version,
        }
    )

    return app


# ASGI entry point
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "reelhub.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )

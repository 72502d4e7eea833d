"""
FastAPI dependency injection.

Dependencies provide instances of repositories, the ImageKit signer and
configuration to route handlers. Using dependency injection means:
- Routes don't instantiate their own dependencies (easier to test)
- Dependencies can be overridden in tests
- Configuration is centralized

Each dependency is a function that FastAPI calls when needed.
"""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from ..config.settings import Settings, get_settings
from ..infrastructure.imagekit.auth import ImageKitSigner
from ..infrastructure.mongo.client import (
    MockVideoCollection,
    MongoConfig,
    get_video_collection,
)
from ..infrastructure.mongo.repositories.videos import VideoRepository

logger = logging.getLogger(__name__)

# API Key security scheme
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

# Keys used to sign credentials in ImageKit mock mode when none are configured
MOCK_PRIVATE_KEY = "private_mock_key"
MOCK_PUBLIC_KEY = "public_mock_key"

# Global mock instance (shared across requests so records persist)
_mock_video_collection = None


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

async def verify_api_key(
    settings: Annotated[Settings, Depends(get_settings)],
    api_key: str = Security(api_key_header),
) -> str:
    """
    Validate API key from request header.

    Guards the endpoints that write. Reading the feed is public.

    Raises 403 if key is invalid or missing.
    """
    if not api_key:
        logger.warning("Request missing API key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="API key required. Provide X-API-Key header.",
        )

    if api_key not in settings.api_keys_list:
        logger.warning(
            "Invalid API key attempt",
            extra={"key_prefix": api_key[:8]}
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key",
        )

    return api_key


# ---------------------------------------------------------------------------
# Service Dependencies
# ---------------------------------------------------------------------------

def get_video_repository(
    settings: Annotated[Settings, Depends(get_settings)],
) -> VideoRepository:
    """
    Provide VideoRepository over the videos collection.

    The MongoDB client is created once per process and cached, so this
    is cheap after the first request. Raises MongoConnectionError if the
    database isn't configured or reachable; the app turns that into 503.

    In mock mode, we reuse the same in-memory collection across requests
    so that published videos persist during the session.
    """
    global _mock_video_collection

    if settings.mongo_mock_mode:
        if _mock_video_collection is None:
            _mock_video_collection = MockVideoCollection(database=settings.mongo_database)
            logger.info("Created shared mock video collection")
        return VideoRepository(_mock_video_collection)

    config = MongoConfig(
        uri=settings.mongo_uri,
        database=settings.mongo_database,
        collection=settings.mongo_collection,
        server_selection_timeout_ms=settings.mongo_server_selection_timeout_ms,
    )
    return VideoRepository(get_video_collection(config))


def get_signing_keys(
    settings: Annotated[Settings, Depends(get_settings)],
) -> tuple[str, str]:
    """
    Provide the (private, public) ImageKit key pair.

    Mock mode falls back to fixed keys so the flow works with no account.
    """
    private_key = settings.imagekit_private_key
    public_key = settings.imagekit_public_key

    if settings.imagekit_mock_mode and not private_key:
        return MOCK_PRIVATE_KEY, public_key or MOCK_PUBLIC_KEY

    return private_key, public_key


def get_imagekit_signer(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ImageKitSigner:
    """
    Provide the ImageKit SDK signer for credentials and delivery URLs.

    Raises ImageKitAuthError when keys or the URL endpoint are missing;
    the app turns that into 503.
    """
    private_key, public_key = get_signing_keys(settings)
    return ImageKitSigner(private_key, public_key, settings.imagekit_url_endpoint)


def reset_mock_state() -> None:
    """Drop the shared mock collection (tests)."""
    global _mock_video_collection
    _mock_video_collection = None


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
AuthenticatedUser = Annotated[str, Depends(verify_api_key)]
VideoRepositoryDep = Annotated[VideoRepository, Depends(get_video_repository)]
ImageKitSignerDep = Annotated[ImageKitSigner, Depends(get_imagekit_signer)]
SettingsDep = Annotated[Settings, Depends(get_settings)]

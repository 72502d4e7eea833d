"""
ImageKit integration: upload signing, direct uploads and delivery URLs.

Includes mock mode for local development without credentials.
"""

from .auth import ImageKitAuthError, ImageKitSigner
from .client import (
    ImageKitAbortError,
    ImageKitConfig,
    ImageKitError,
    ImageKitInvalidRequestError,
    ImageKitServerError,
    ImageKitUploadClient,
    ImageKitUploadNetworkError,
    MockImageKitClient,
    create_imagekit_client,
)
from .urls import build_url, build_video_url

__all__ = [
    "ImageKitAuthError",
    "ImageKitSigner",
    "ImageKitAbortError",
    "ImageKitConfig",
    "ImageKitError",
    "ImageKitInvalidRequestError",
    "ImageKitServerError",
    "ImageKitUploadClient",
    "ImageKitUploadNetworkError",
    "MockImageKitClient",
    "create_imagekit_client",
    "build_url",
    "build_video_url",
]

"""
Repository pattern implementations for MongoDB.

Repositories translate between domain models and stored documents.
"""

from .videos import VideoNotFoundError, VideoRepository

__all__ = ["VideoNotFoundError", "VideoRepository"]

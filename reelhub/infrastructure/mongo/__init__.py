"""
MongoDB persistence for video records.

One cached client per process, plus an in-memory collection for mock mode.
"""

from .client import (
    MockVideoCollection,
    MongoConfig,
    MongoConnectionError,
    get_mongo_client,
    get_video_collection,
)

__all__ = [
    "MockVideoCollection",
    "MongoConfig",
    "MongoConnectionError",
    "get_mongo_client",
    "get_video_collection",
]

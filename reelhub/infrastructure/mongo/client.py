"""
MongoDB connection management.

One MongoClient per process, created on first use and reused by every
request afterwards. MongoClient pools connections internally, so caching
the client is all the pooling we need. A failed connection is not
cached: the next request tries again.

Includes an in-memory collection for mock mode, enabling local
development and tests without a running MongoDB.
"""

import copy
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterator, Optional

from bson import ObjectId
from pymongo import MongoClient
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


class MongoConnectionError(Exception):
    """Raised when MongoDB can't be reached or isn't configured."""
    pass


@dataclass
class MongoConfig:
    """Configuration for the video store."""
    uri: Optional[str]
    database: str = "reelhub"
    collection: str = "videos"
    server_selection_timeout_ms: int = 5000


@lru_cache(maxsize=4)
def _cached_client(uri: str, server_selection_timeout_ms: int) -> MongoClient:
    client = MongoClient(uri, serverSelectionTimeoutMS=server_selection_timeout_ms)
    try:
        # MongoClient connects lazily; ping so a bad URI fails here, uncached
        client.admin.command("ping")
    except PyMongoError:
        client.close()
        raise
    return client


def get_mongo_client(config: MongoConfig) -> MongoClient:
    """
    Get the process-wide client for this URI.

    Raises MongoConnectionError if the URI is missing or the server
    doesn't answer a ping.
    """
    if not config.uri:
        raise MongoConnectionError("Please define the MONGO_URI environment variable")

    try:
        client = _cached_client(config.uri, config.server_selection_timeout_ms)
    except PyMongoError as e:
        logger.error(
            "MongoDB connection failed",
            extra={"database": config.database, "error": str(e)},
        )
        raise MongoConnectionError(f"Database connection failed: {e}")

    return client


def get_video_collection(config: MongoConfig):
    """The videos collection on the cached client."""
    client = get_mongo_client(config)
    return client[config.database][config.collection]


def reset_mongo_clients() -> None:
    """Forget cached clients so the next request reconnects (tests)."""
    _cached_client.cache_clear()


# ---------------------------------------------------------------------------
# Mock Collection for Local Development
# ---------------------------------------------------------------------------

class _InsertOneResult:
    def __init__(self, inserted_id: ObjectId) -> None:
        self.inserted_id = inserted_id


class MockCursor:
    """Just enough of pymongo's Cursor for the repository: sort, limit, iterate."""

    def __init__(self, documents: list[dict]) -> None:
        self._documents = documents

    def sort(self, key: str, direction: int = 1) -> "MockCursor":
        # stable sort on a copy; documents missing the key sort first
        self._documents = sorted(
            self._documents,
            key=lambda doc: (key in doc, doc.get(key)),
            reverse=direction < 0,
        )
        return self

    def limit(self, count: int) -> "MockCursor":
        if count:
            self._documents = self._documents[:count]
        return self

    def __iter__(self) -> Iterator[dict]:
        return iter(self._documents)


class MockDatabase:
    def __init__(self, name: str) -> None:
        self.name = name

    def command(self, name: str) -> dict:
        return {"ok": 1.0}


class MockVideoCollection:
    """
    In-memory stand-in for a pymongo Collection.

    Implements the subset VideoRepository uses. Filters support
    top-level equality only.

    Not suitable for production, but perfect for local development
    and tests.
    """

    def __init__(self, database: str = "reelhub") -> None:
        self._documents: list[dict] = []
        self.database = MockDatabase(database)
        logger.info("Initialized mock video collection (in-memory)")

    def insert_one(self, document: dict) -> _InsertOneResult:
        # pymongo sets _id on the caller's dict too
        if "_id" not in document:
            document["_id"] = ObjectId()
        self._documents.append(copy.deepcopy(document))
        return _InsertOneResult(document["_id"])

    def find(self, filter: Optional[dict[str, Any]] = None) -> MockCursor:
        return MockCursor([
            copy.deepcopy(doc) for doc in self._documents
            if self._matches(doc, filter)
        ])

    def find_one(self, filter: Optional[dict[str, Any]] = None) -> Optional[dict]:
        for doc in self._documents:
            if self._matches(doc, filter):
                return copy.deepcopy(doc)
        return None

    @staticmethod
    def _matches(document: dict, filter: Optional[dict[str, Any]]) -> bool:
        if not filter:
            return True
        return all(document.get(key) == value for key, value in filter.items())

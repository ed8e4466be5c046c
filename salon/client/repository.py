"""Storage for the client's review collection.

The whole collection lives in one document under one key and every save
rewrites that document. Nothing is merged or patched in place.
"""

import contextlib
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from salon.models.review_documents import ReviewDocument

logger = logging.getLogger(__name__)

_collection_adapter = TypeAdapter(list[ReviewDocument])


def dump_collection(reviews: list[ReviewDocument]) -> list[dict]:
    return _collection_adapter.dump_python(reviews, mode="json")


def parse_collection(raw) -> list[ReviewDocument]:
    return _collection_adapter.validate_python(raw or [])


class ReviewRepository(ABC):
    @abstractmethod
    def load(self) -> list[ReviewDocument]:
        """Return the stored collection, newest first."""

    @abstractmethod
    def save(self, reviews: list[ReviewDocument]) -> bool:
        """Replace the stored collection. Returns False when the write failed."""


class InMemoryReviewRepository(ReviewRepository):
    def __init__(self, reviews: list[ReviewDocument] | None = None):
        self._raw = dump_collection(reviews or [])
        self.save_count = 0

    def load(self) -> list[ReviewDocument]:
        return parse_collection(self._raw)

    def save(self, reviews: list[ReviewDocument]) -> bool:
        self._raw = dump_collection(reviews)
        self.save_count += 1
        return True


class JsonFileReviewRepository(ReviewRepository):
    """One JSON file per storage key."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> list[ReviewDocument]:
        if not self.path.exists():
            return []

        try:
            with open(self.path, encoding="utf-8") as f:
                return parse_collection(json.load(f))
        except (OSError, ValueError, ValidationError) as e:
            # ValueError covers bad JSON and bad UTF-8
            logger.error(f"Discarding unreadable review store {self.path}: {e}")
            return []

    def save(self, reviews: list[ReviewDocument]) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        except OSError as e:
            logger.error(f"Error saving review store {self.path}: {e}")
            return False

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(dump_collection(reviews), f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error saving review store {self.path}: {e}")
            with contextlib.suppress(OSError):
                os.unlink(tmp_path)
            return False


class RedisReviewRepository(ReviewRepository):
    """One JSON document under one Redis key, stored without expiry."""

    def __init__(self, key: str, client=None):
        if client is None:
            from salon.db.redis_client import redis_client as client
        self.key = key
        self.client = client

    def load(self) -> list[ReviewDocument]:
        try:
            return parse_collection(self.client.get_json(self.key))
        except Exception as e:
            logger.error(f"Discarding unreadable reviews at Redis key {self.key}: {e}")
            return []

    def save(self, reviews: list[ReviewDocument]) -> bool:
        try:
            return self.client.set_json(self.key, dump_collection(reviews), ttl=None)
        except Exception as e:
            logger.error(f"Error saving reviews to Redis key {self.key}: {e}")
            return False

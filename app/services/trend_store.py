import itertools
import logging
import time
from datetime import datetime, timezone
from typing import Any, Protocol

import chromadb
from chromadb.api.models.Collection import Collection
from chromadb.config import Settings as ChromaSettings

from app.core.errors import TrendStoreError
from app.core.settings import Settings
from app.models.movie import MovieRecord
from app.models.trending import SearchTermCounter

logger = logging.getLogger(__name__)

# counters are metadata only, chroma still wants one vector per record
_PLACEHOLDER_EMBEDDING = [1.0]


def _sort_key(counter: SearchTermCounter) -> tuple[int, float, str]:
    # count desc, then most recently incremented, then term for a stable order
    return (-counter.count, -counter.updated_at.timestamp(), counter.term)


def rank_counters(counters: list[SearchTermCounter], limit: int) -> list[SearchTermCounter]:
    if limit <= 0:
        return []
    return sorted(counters, key=_sort_key)[:limit]


class TrendStore(Protocol):
    def get(self, term: str) -> SearchTermCounter | None: ...

    def create(self, term: str, movie: MovieRecord) -> SearchTermCounter: ...

    def increment(self, counter: SearchTermCounter) -> SearchTermCounter: ...

    def top(self, limit: int) -> list[SearchTermCounter]: ...

    def count(self) -> int: ...


class InMemoryTrendStore:
    """Dict backed counters for dev and tests; nothing survives a restart."""

    def __init__(self) -> None:
        self._by_term: dict[str, SearchTermCounter] = {}
        # logical clock so ties between increments in the same instant still order
        self._ticks = itertools.count(1)

    def _now(self) -> datetime:
        return datetime.fromtimestamp(next(self._ticks), tz=timezone.utc)

    def get(self, term: str) -> SearchTermCounter | None:
        return self._by_term.get(term)

    def create(self, term: str, movie: MovieRecord) -> SearchTermCounter:
        now = self._now()
        counter = SearchTermCounter(
            term=term,
            count=1,
            movie_id=movie.id,
            title=movie.title,
            poster_url=movie.poster_url,
            created_at=now,
            updated_at=now,
        )
        self._by_term[term] = counter
        return counter

    def increment(self, counter: SearchTermCounter) -> SearchTermCounter:
        current = self._by_term.get(counter.term, counter)
        updated = current.model_copy(update={"count": current.count + 1, "updated_at": self._now()})
        self._by_term[counter.term] = updated
        return updated

    def top(self, limit: int) -> list[SearchTermCounter]:
        return rank_counters(list(self._by_term.values()), limit)

    def count(self) -> int:
        return len(self._by_term)


class ChromaTrendStore:
    def __init__(self, settings: Settings, client: Any | None = None):
        self.settings = settings
        try:
            self.client = client or chromadb.PersistentClient(
                path=settings.chroma_persist_path,
                settings=ChromaSettings(anonymized_telemetry=False),
            )
            self.collection: Collection = self.client.get_or_create_collection(
                name=settings.trend_collection_name,
                embedding_function=None,
            )
        except Exception as exc:
            raise TrendStoreError(
                "Could not open trend collection",
                details={"collection_name": settings.trend_collection_name, "error_type": exc.__class__.__name__},
            ) from exc

    @staticmethod
    def _to_metadata(counter: SearchTermCounter) -> dict[str, Any]:
        # chroma metadata values cannot be None
        return {
            "term": counter.term,
            "count": counter.count,
            "movie_id": counter.movie_id,
            "title": counter.title,
            "poster_url": counter.poster_url or "",
            "created_at": counter.created_at.timestamp(),
            "updated_at": counter.updated_at.timestamp(),
        }

    @staticmethod
    def _parse_counter(metadata: dict[str, Any]) -> SearchTermCounter:
        return SearchTermCounter(
            term=str(metadata["term"]),
            count=int(metadata["count"]),
            movie_id=int(metadata["movie_id"]),
            title=str(metadata.get("title", "")),
            poster_url=str(metadata.get("poster_url") or "") or None,
            created_at=datetime.fromtimestamp(float(metadata["created_at"]), tz=timezone.utc),
            updated_at=datetime.fromtimestamp(float(metadata["updated_at"]), tz=timezone.utc),
        )

    def _write(self, counter: SearchTermCounter) -> None:
        try:
            self.collection.upsert(
                ids=[counter.term],
                embeddings=[_PLACEHOLDER_EMBEDDING],
                metadatas=[self._to_metadata(counter)],
            )
        except Exception as exc:
            raise TrendStoreError("Failed to write search counter", details={"term": counter.term}) from exc

    def get(self, term: str) -> SearchTermCounter | None:
        try:
            result = self.collection.get(ids=[term], include=["metadatas"])
        except Exception as exc:
            raise TrendStoreError("Failed to read search counter", details={"term": term}) from exc

        metadatas = result.get("metadatas") or []
        if len(metadatas) == 0 or not metadatas[0]:
            return None
        return self._parse_counter(metadatas[0])

    def create(self, term: str, movie: MovieRecord) -> SearchTermCounter:
        now = datetime.fromtimestamp(time.time(), tz=timezone.utc)
        counter = SearchTermCounter(
            term=term,
            count=1,
            movie_id=movie.id,
            title=movie.title,
            poster_url=movie.poster_url,
            created_at=now,
            updated_at=now,
        )
        self._write(counter)
        return counter

    def increment(self, counter: SearchTermCounter) -> SearchTermCounter:
        now = datetime.fromtimestamp(time.time(), tz=timezone.utc)
        updated = counter.model_copy(update={"count": counter.count + 1, "updated_at": now})
        self._write(updated)
        return updated

    def top(self, limit: int) -> list[SearchTermCounter]:
        # chroma has no ORDER BY, rank in process
        try:
            result = self.collection.get(include=["metadatas"])
        except Exception as exc:
            raise TrendStoreError("Failed to read trending counters") from exc

        counters: list[SearchTermCounter] = []
        for metadata in result.get("metadatas") or []:
            if not metadata:
                continue
            try:
                counters.append(self._parse_counter(metadata))
            except (KeyError, TypeError, ValueError):
                logger.warning("skipping unreadable trend counter", extra={"metadata": metadata})
        return rank_counters(counters, limit)

    def count(self) -> int:
        try:
            return self.collection.count()
        except Exception as exc:
            raise TrendStoreError("Failed to count trend counters") from exc


def build_trend_store(settings: Settings) -> TrendStore:
    if settings.trend_store_backend == "memory":
        return InMemoryTrendStore()
    return ChromaTrendStore(settings)

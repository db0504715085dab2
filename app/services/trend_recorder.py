import asyncio
import logging

from app.core.errors import TrendStoreError
from app.models.movie import MovieRecord
from app.models.trending import SearchTermCounter
from app.services.trend_store import TrendStore

logger = logging.getLogger(__name__)


class SearchTrendRecorder:
    """Counts successful searches per term and ranks the most searched ones.

    Store failures never leave this class: they are logged and the caller
    sees either nothing (writes) or an empty ranking (reads).
    """

    def __init__(self, store: TrendStore, default_limit: int = 5):
        self.store = store
        self.default_limit = default_limit
        self._pending: set[asyncio.Task] = set()

    async def record_search(self, term: str, top_result: MovieRecord) -> SearchTermCounter | None:
        if not term or not term.strip():
            return None

        # no await between read and write, so increments cannot interleave
        try:
            existing = self.store.get(term)
            if existing is None:
                counter = self.store.create(term, top_result)
            else:
                counter = self.store.increment(existing)
        except TrendStoreError:
            logger.exception("Failed to record search term", extra={"term": term, "movie_id": top_result.id})
            return None

        logger.info("recorded search term", extra={"term": term, "count": counter.count})
        return counter

    def schedule_record(self, term: str, top_result: MovieRecord) -> asyncio.Task:
        task = asyncio.create_task(self.record_search(term, top_result))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def top_trending(self, limit: int | None = None) -> list[SearchTermCounter]:
        resolved_limit = self.default_limit if limit is None else limit
        try:
            return self.store.top(resolved_limit)
        except TrendStoreError:
            logger.exception("Failed to load trending search terms", extra={"limit": resolved_limit})
            return []

    async def drain(self) -> None:
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def aclose(self) -> None:
        await self.drain()

import logging
import time
import uuid
from collections.abc import Callable

from app.core.errors import SessionNotFoundError
from app.services.search_controller import SearchController

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Open search sessions keyed by id.

    Sessions idle longer than ``idle_seconds`` are closed on the next
    ``open()``, and the least recently used ones are closed once
    ``max_sessions`` would be exceeded.
    """

    def __init__(
        self,
        controller_factory: Callable[[], SearchController],
        max_sessions: int = 200,
        idle_seconds: float = 1800.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._controller_factory = controller_factory
        self.max_sessions = max_sessions
        self.idle_seconds = idle_seconds
        self._clock = clock
        self._sessions: dict[str, SearchController] = {}
        self._last_seen: dict[str, float] = {}

    async def open(self) -> tuple[str, SearchController]:
        await self._evict()
        session_id = uuid.uuid4().hex
        controller = self._controller_factory()
        self._sessions[session_id] = controller
        self._last_seen[session_id] = self._clock()
        await controller.mount()
        logger.info("search session opened", extra={"session_id": session_id, "open_sessions": len(self._sessions)})
        return session_id, controller

    def get(self, session_id: str) -> SearchController:
        controller = self._sessions.get(session_id)
        if controller is None:
            raise SessionNotFoundError(session_id)
        self._last_seen[session_id] = self._clock()
        return controller

    async def close(self, session_id: str) -> None:
        controller = self._sessions.pop(session_id, None)
        self._last_seen.pop(session_id, None)
        if controller is None:
            raise SessionNotFoundError(session_id)
        await controller.aclose()
        logger.info("search session closed", extra={"session_id": session_id})

    async def _evict(self) -> None:
        now = self._clock()
        expired = [sid for sid, seen in self._last_seen.items() if now - seen >= self.idle_seconds]
        # make room for the session about to open
        overflow = len(self._sessions) - len(expired) - (self.max_sessions - 1)
        if overflow > 0:
            live = sorted((sid for sid in self._last_seen if sid not in expired), key=self._last_seen.__getitem__)
            expired.extend(live[:overflow])
        for session_id in expired:
            await self.close(session_id)
        if expired:
            logger.info("evicted search sessions", extra={"evicted": len(expired), "open_sessions": len(self._sessions)})

    async def close_all(self) -> None:
        for session_id in list(self._sessions):
            await self.close(session_id)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from typing import ClassVar, Protocol, Union

from app.core.errors import InvalidCredentialError, RemoteFetchError
from app.models.movie import MovieRecord
from app.models.search import SessionSnapshot
from app.models.trending import SearchTermCounter
from app.services.trend_recorder import SearchTrendRecorder

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = "No movies found."
FETCH_FAILED_MESSAGE = "Error fetching movies. Please try again later."


class MovieCatalog(Protocol):
    async def search(self, query: str = "") -> list[MovieRecord]: ...


@dataclass(frozen=True)
class Idle:
    name: ClassVar[str] = "idle"


@dataclass(frozen=True)
class Loading:
    name: ClassVar[str] = "loading"


@dataclass(frozen=True)
class Success:
    results: tuple[MovieRecord, ...]
    name: ClassVar[str] = "success"


@dataclass(frozen=True)
class Empty:
    message: str = NO_RESULTS_MESSAGE
    name: ClassVar[str] = "empty"


@dataclass(frozen=True)
class Failed:
    message: str = FETCH_FAILED_MESSAGE
    name: ClassVar[str] = "failed"


SearchState = Union[Idle, Loading, Success, Empty, Failed]


def state_results(state: SearchState) -> list[MovieRecord]:
    if isinstance(state, Success):
        return list(state.results)
    return []


def state_message(state: SearchState) -> str | None:
    if isinstance(state, (Empty, Failed)):
        return state.message
    return None


async def execute_search(catalog: MovieCatalog, recorder: SearchTrendRecorder, query: str) -> SearchState:
    """Run one catalog fetch and map its outcome to a terminal state.

    A non-empty query with at least one result schedules exactly one trend
    write for the first result. The write is not awaited.
    """
    try:
        movies = await catalog.search(query)
    except (RemoteFetchError, InvalidCredentialError) as exc:
        logger.warning(
            "catalog search failed",
            extra={"query": query, "error_code": exc.code, "details": exc.details},
        )
        return Failed()
    except Exception:
        # a cycle must always leave Loading, whatever the catalog raised
        logger.exception("unexpected catalog search failure", extra={"query": query})
        return Failed()

    if not movies:
        return Empty()

    if query:
        recorder.schedule_record(query, movies[0])
    return Success(results=tuple(movies))


@dataclass
class _Cycle:
    token: int
    query: str
    task: asyncio.Task | None = field(default=None, repr=False)


class SearchController:
    """Per-session search state driven by keystrokes.

    Raw text is debounced before it becomes the active query. Every change
    of the debounced query starts a cycle with a fresh token, and a cycle
    only writes state if its token is still the latest one issued, so a
    slow response can never overwrite a newer search.
    """

    def __init__(
        self,
        catalog: MovieCatalog,
        recorder: SearchTrendRecorder,
        debounce_seconds: float = 1.0,
        trending_limit: int = 5,
    ):
        self.catalog = catalog
        self.recorder = recorder
        self.debounce_seconds = debounce_seconds
        self.trending_limit = trending_limit

        self.query = ""
        self.debounced_query: str | None = None
        self.state: SearchState = Idle()
        self.trending: list[SearchTermCounter] = []

        self._tokens = itertools.count(1)
        self._latest_token = 0
        self._mounted = False
        self._closed = False
        self._debounce_task: asyncio.Task | None = None
        self._cycles: set[asyncio.Task] = set()

    @property
    def is_loading(self) -> bool:
        return isinstance(self.state, Loading)

    async def mount(self) -> None:
        if self._mounted or self._closed:
            return
        self._mounted = True
        await asyncio.gather(self._load_trending(), self._apply_debounced(self.query))

    async def _load_trending(self) -> None:
        self.trending = await self.recorder.top_trending(self.trending_limit)

    @property
    def closed(self) -> bool:
        return self._closed

    def set_query(self, text: str) -> None:
        if self._closed:
            logger.info("ignoring query for closed search controller", extra={"query": text})
            return
        self.query = text
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
        if not self._mounted:
            return
        self._debounce_task = asyncio.create_task(self._debounce(text))

    async def _debounce(self, text: str) -> None:
        await asyncio.sleep(self.debounce_seconds)
        # the cycle runs as its own task so later keystrokes only cancel timers
        self._start_cycle_if_changed(text)

    async def _apply_debounced(self, text: str) -> None:
        task = self._start_cycle_if_changed(text)
        if task is not None:
            await task

    def _start_cycle_if_changed(self, text: str) -> asyncio.Task | None:
        if text == self.debounced_query:
            return None
        self.debounced_query = text
        cycle = _Cycle(token=next(self._tokens), query=text)
        self._latest_token = cycle.token
        self.state = Loading()
        cycle.task = asyncio.create_task(self._run_cycle(cycle))
        self._cycles.add(cycle.task)
        cycle.task.add_done_callback(self._cycles.discard)
        return cycle.task

    async def _run_cycle(self, cycle: _Cycle) -> SearchState:
        outcome = await execute_search(self.catalog, self.recorder, cycle.query)
        if cycle.token != self._latest_token:
            logger.info(
                "discarding superseded search response",
                extra={"query": cycle.query, "token": cycle.token, "latest_token": self._latest_token},
            )
            return outcome
        self.state = outcome
        return outcome

    async def settle(self) -> None:
        """Wait for the pending debounce timer and every in-flight cycle."""
        if self._debounce_task is not None:
            await asyncio.gather(self._debounce_task, return_exceptions=True)
        if self._cycles:
            await asyncio.gather(*list(self._cycles), return_exceptions=True)

    def snapshot(self, session_id: str | None = None) -> SessionSnapshot:
        return SessionSnapshot(
            session_id=session_id,
            query=self.query,
            debounced_query=self.debounced_query or "",
            state=self.state.name,
            is_loading=self.is_loading,
            results=state_results(self.state),
            message=state_message(self.state),
            trending=list(self.trending),
        )

    async def aclose(self) -> None:
        self._closed = True
        pending = [task for task in [self._debounce_task, *self._cycles] if task is not None and not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

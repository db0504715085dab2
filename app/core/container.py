import logging

from app.core.settings import Settings
from app.services.search_controller import MovieCatalog, SearchController
from app.services.sessions import SessionRegistry
from app.services.tmdb_client import TMDBClient, build_catalog_config
from app.services.trend_recorder import SearchTrendRecorder
from app.services.trend_store import TrendStore, build_trend_store

logger = logging.getLogger(__name__)


class AppContainer:
    def __init__(
        self,
        settings: Settings,
        catalog: MovieCatalog | None = None,
        trend_store: TrendStore | None = None,
    ):
        self.settings = settings

        # missing credentials fail here, before anything is served
        self.catalog = catalog if catalog is not None else TMDBClient(build_catalog_config(settings))
        self.trend_store = trend_store if trend_store is not None else build_trend_store(settings)
        self.trend_recorder = SearchTrendRecorder(self.trend_store, default_limit=settings.trending_limit)
        self.sessions = SessionRegistry(
            self.new_controller,
            max_sessions=settings.max_sessions,
            idle_seconds=settings.session_idle_seconds,
        )

        logger.info(
            "App container initialized",
            extra={
                "environment": settings.environment,
                "tmdb_base_url": settings.tmdb_base_url,
                "trend_store_backend": settings.trend_store_backend,
                "trend_collection_name": settings.trend_collection_name,
                "trending_limit": settings.trending_limit,
                "search_debounce_ms": settings.search_debounce_ms,
            },
        )

    def new_controller(self) -> SearchController:
        return SearchController(
            catalog=self.catalog,
            recorder=self.trend_recorder,
            debounce_seconds=self.settings.search_debounce_ms / 1000.0,
            trending_limit=self.settings.trending_limit,
        )

    async def close(self) -> None:
        await self.sessions.close_all()
        await self.trend_recorder.aclose()
        close = getattr(self.catalog, "close", None)
        if close is not None:
            await close()

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from app.core.errors import ConfigurationError, InvalidCredentialError, RemoteFetchError
from app.core.settings import Settings
from app.models.movie import MovieRecord
from app.services.normalizer import normalize_tmdb_movie

logger = logging.getLogger(__name__)

INVALID_CREDENTIAL_STATUS = 7
SEARCH_PATH = "/search/movie"
DISCOVER_PATH = "/discover/movie"


@dataclass(frozen=True)
class CatalogConfig:
    api_key: str
    base_url: str = "https://api.themoviedb.org/3"
    image_base_url: str = "https://image.tmdb.org/t/p/w500"
    timeout_seconds: float = 10.0


def build_catalog_config(settings: Settings) -> CatalogConfig:
    api_key = (settings.tmdb_api_key or "").strip()
    if not api_key:
        raise ConfigurationError(
            "TMDB_API_KEY is not set",
            details={"env_vars": ["TMDB_API_KEY", "VITE_TMDB_API_KEY"]},
        )
    return CatalogConfig(
        api_key=api_key,
        base_url=settings.tmdb_base_url,
        image_base_url=settings.tmdb_image_base_url,
        timeout_seconds=settings.tmdb_timeout_seconds,
    )


class TMDBClient:
    def __init__(self, config: CatalogConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            headers={
                "Accept": "application/json",
                "Authorization": f"Bearer {config.api_key}",
            },
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _endpoint(query: str) -> tuple[str, dict[str, str]]:
        if query:
            return SEARCH_PATH, {"query": query}
        return DISCOVER_PATH, {"sort_by": "popularity.desc"}

    async def _get(self, path: str, params: dict[str, str]) -> dict[str, Any]:
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise RemoteFetchError(
                "TMDB upstream is unavailable",
                details={"path": path, "error_type": exc.__class__.__name__},
            ) from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        # TMDB reports a bad token as status_code 7, usually alongside a 401
        if isinstance(payload, dict) and payload.get("status_code") == INVALID_CREDENTIAL_STATUS:
            raise InvalidCredentialError(details={"path": path, "status_code": response.status_code})

        if response.status_code == 401:
            raise InvalidCredentialError(details={"path": path, "status_code": 401})

        if response.status_code >= 400:
            raise RemoteFetchError(
                "TMDB request failed",
                details={"path": path, "status_code": response.status_code, "response": response.text[:200]},
            )

        if not isinstance(payload, dict):
            raise RemoteFetchError("TMDB returned a malformed response", details={"path": path})

        return payload

    async def search(self, query: str = "") -> list[MovieRecord]:
        path, params = self._endpoint(query)
        payload = await self._get(path, params)

        results = payload.get("results")
        if results is None:
            return []
        if not isinstance(results, list):
            raise RemoteFetchError("TMDB results field is not a list", details={"path": path})

        movies: list[MovieRecord] = []
        skipped = 0
        for item in results:
            movie = normalize_tmdb_movie(item, self.config.image_base_url)
            if movie is None:
                skipped += 1
                continue
            movies.append(movie)

        if skipped:
            logger.warning("skipped malformed TMDB results", extra={"path": path, "skipped": skipped})
        logger.info("catalog search completed", extra={"path": path, "query": query, "count": len(movies)})
        return movies

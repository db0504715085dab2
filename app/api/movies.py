from fastapi import APIRouter, Depends, Query

from app.api.deps import get_container
from app.core.container import AppContainer
from app.models.search import SearchResponse
from app.models.trending import TrendingResponse
from app.services.search_controller import execute_search, state_message, state_results

router = APIRouter(prefix="/v1", tags=["movies"])


@router.get("/movies", response_model=SearchResponse)
async def search_movies(
    query: str = Query(default="", max_length=300),
    container: AppContainer = Depends(get_container),
) -> SearchResponse:
    state = await execute_search(container.catalog, container.trend_recorder, query)
    return SearchResponse(
        query=query,
        state=state.name,
        results=state_results(state),
        message=state_message(state),
    )


@router.get("/trending", response_model=TrendingResponse)
async def trending_searches(
    limit: int | None = Query(default=None, ge=1, le=20),
    container: AppContainer = Depends(get_container),
) -> TrendingResponse:
    resolved_limit = limit or container.settings.trending_limit
    results = await container.trend_recorder.top_trending(resolved_limit)
    return TrendingResponse(limit=resolved_limit, results=results)

import logging

from fastapi import APIRouter, Depends

from app.api.deps import get_container
from app.core.container import AppContainer
from app.core.errors import TrendStoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def liveness() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/ready")
async def readiness(container: AppContainer = Depends(get_container)) -> dict[str, object]:
    try:
        counters = container.trend_store.count()
    except TrendStoreError:
        logger.exception("Trend store readiness probe failed")
        return {"status": "degraded", "trend_store": "unavailable", "open_sessions": len(container.sessions)}
    return {
        "status": "ok",
        "trend_store": "ok",
        "trend_counters": counters,
        "open_sessions": len(container.sessions),
    }

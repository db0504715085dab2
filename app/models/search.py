from typing import Literal

from pydantic import BaseModel, Field

from app.models.movie import MovieRecord
from app.models.trending import SearchTermCounter

SearchStateName = Literal["idle", "loading", "success", "empty", "failed"]


class SearchResponse(BaseModel):
    query: str
    state: SearchStateName
    results: list[MovieRecord]
    message: str | None = None


class QueryUpdate(BaseModel):
    query: str = Field(default="", max_length=300)


class SessionSnapshot(BaseModel):
    session_id: str | None = None
    query: str
    debounced_query: str
    state: SearchStateName
    is_loading: bool
    results: list[MovieRecord]
    message: str | None = None
    trending: list[SearchTermCounter]

from datetime import datetime

from pydantic import BaseModel, Field


class SearchTermCounter(BaseModel):
    term: str = Field(min_length=1)
    count: int = Field(ge=1)
    movie_id: int
    title: str = ""
    poster_url: str | None = None
    created_at: datetime
    updated_at: datetime


class TrendingResponse(BaseModel):
    limit: int
    results: list[SearchTermCounter]

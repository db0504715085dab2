from pydantic import BaseModel, ConfigDict


class MovieRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    poster_path: str | None = None
    poster_url: str | None = None
    overview: str = ""
    release_date: str | None = None
    vote_average: float | None = None
    original_language: str | None = None

    @property
    def release_year(self) -> int | None:
        if self.release_date and len(self.release_date) >= 4 and self.release_date[:4].isdigit():
            return int(self.release_date[:4])
        return None

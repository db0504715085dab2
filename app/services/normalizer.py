from typing import Any

from app.models.movie import MovieRecord


def _safe_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def build_poster_url(image_base_url: str, poster_path: str | None) -> str | None:
    if not poster_path:
        return None
    return f"{image_base_url.rstrip('/')}/{poster_path.lstrip('/')}"


def normalize_tmdb_movie(item: Any, image_base_url: str) -> MovieRecord | None:
    if not isinstance(item, dict):
        return None

    movie_id = item.get("id")
    title = _safe_str(item.get("title"))
    # bool is an int subclass, TMDB never sends it for ids
    if not isinstance(movie_id, int) or isinstance(movie_id, bool) or not title:
        return None

    poster_path = _safe_str(item.get("poster_path")) or None
    release_date = _safe_str(item.get("release_date")) or None
    language = _safe_str(item.get("original_language")) or None

    vote_average = item.get("vote_average")
    rating = float(vote_average) if isinstance(vote_average, (int, float)) and not isinstance(vote_average, bool) else None

    return MovieRecord(
        id=movie_id,
        title=title,
        poster_path=poster_path,
        poster_url=build_poster_url(image_base_url, poster_path),
        overview=_safe_str(item.get("overview")),
        release_date=release_date,
        vote_average=rating,
        original_language=language,
    )

from app.services.normalizer import build_poster_url, normalize_tmdb_movie

IMAGE_BASE = "https://image.tmdb.org/t/p/w500"


def test_normalize_full_tmdb_result() -> None:
    movie = normalize_tmdb_movie(
        {
            "id": 438631,
            "title": " Dune ",
            "poster_path": "/d5NXSklXo0qyIYkgV94XAgMIckC.jpg",
            "overview": "Paul Atreides travels to Arrakis.",
            "release_date": "2021-09-15",
            "vote_average": 7.8,
            "original_language": "en",
        },
        IMAGE_BASE,
    )

    assert movie is not None
    assert movie.title == "Dune"
    assert movie.poster_url == "https://image.tmdb.org/t/p/w500/d5NXSklXo0qyIYkgV94XAgMIckC.jpg"
    assert movie.release_year == 2021
    assert movie.vote_average == 7.8


def test_normalize_tolerates_missing_optional_fields() -> None:
    movie = normalize_tmdb_movie({"id": 1, "title": "A", "poster_path": None, "release_date": ""}, IMAGE_BASE)

    assert movie is not None
    assert movie.poster_path is None
    assert movie.poster_url is None
    assert movie.release_year is None
    assert movie.vote_average is None


def test_normalize_rejects_unusable_entries() -> None:
    assert normalize_tmdb_movie({"title": "No id"}, IMAGE_BASE) is None
    assert normalize_tmdb_movie({"id": 3, "title": "  "}, IMAGE_BASE) is None
    assert normalize_tmdb_movie({"id": True, "title": "Bool id"}, IMAGE_BASE) is None
    assert normalize_tmdb_movie(["not", "a", "dict"], IMAGE_BASE) is None


def test_build_poster_url_joins_single_slash() -> None:
    assert build_poster_url(IMAGE_BASE + "/", "/x.jpg") == IMAGE_BASE + "/x.jpg"
    assert build_poster_url(IMAGE_BASE, "") is None

from app.core.settings import Settings
from app.models.movie import MovieRecord
from app.services.trend_store import ChromaTrendStore


def _store(tmp_path) -> ChromaTrendStore:
    settings = Settings(
        _env_file=None,
        environment="test",
        chroma_persist_path=str(tmp_path / "chroma"),
        trend_collection_name="trends_test",
    )
    return ChromaTrendStore(settings)


def test_create_then_increment_keeps_representative(tmp_path) -> None:
    store = _store(tmp_path)
    assert store.get("dune") is None

    created = store.create("dune", MovieRecord(id=42, title="Dune", poster_url="https://img/dune.jpg"))
    updated = store.increment(created)
    loaded = store.get("dune")

    assert created.count == 1
    assert updated.count == 2
    assert loaded.count == 2
    assert loaded.movie_id == 42
    assert loaded.title == "Dune"
    assert loaded.poster_url == "https://img/dune.jpg"
    assert store.count() == 1


def test_missing_poster_round_trips_as_none(tmp_path) -> None:
    store = _store(tmp_path)
    store.create("obscure", MovieRecord(id=5, title="Obscure"))

    assert store.get("obscure").poster_url is None


def test_top_orders_by_count(tmp_path) -> None:
    store = _store(tmp_path)
    low = store.create("low", MovieRecord(id=1, title="Low"))
    high = store.create("high", MovieRecord(id=2, title="High"))
    high = store.increment(high)
    store.increment(high)
    store.create("mid", MovieRecord(id=3, title="Mid"))
    store.increment(store.get("mid"))

    top = store.top(2)

    assert [entry.term for entry in top] == ["high", "mid"]
    assert low.term not in {entry.term for entry in top}
    assert store.top(0) == []

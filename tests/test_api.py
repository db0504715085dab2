import httpx
import pytest
import pytest_asyncio

from app.api.deps import get_container
from app.core.container import AppContainer
from app.core.errors import RemoteFetchError
from app.core.settings import Settings
from app.main import app
from app.models.movie import MovieRecord
from app.services.trend_store import InMemoryTrendStore


class _CatalogStub:
    def __init__(self):
        self.calls: list[str] = []

    async def search(self, query: str = "") -> list[MovieRecord]:
        self.calls.append(query)
        if query == "boom":
            raise RemoteFetchError(details={"status_code": 500})
        if query == "nothing":
            return []
        if query == "dune":
            return [MovieRecord(id=42, title="Dune", poster_path="/dune.jpg", poster_url="https://img/dune.jpg")]
        return [MovieRecord(id=1, title="A"), MovieRecord(id=2, title="B")]


@pytest_asyncio.fixture
async def container():
    settings = Settings(_env_file=None, environment="test", trend_store_backend="memory", search_debounce_ms=0)
    built = AppContainer(settings, catalog=_CatalogStub(), trend_store=InMemoryTrendStore())
    app.dependency_overrides[get_container] = lambda: built
    yield built
    app.dependency_overrides.clear()
    await built.close()


@pytest_asyncio.fixture
async def client(container):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


@pytest.mark.asyncio
async def test_search_and_trending_endpoints(client, container) -> None:
    response = await client.get("/v1/movies", params={"query": "dune"})
    assert response.status_code == 200
    body = response.json()
    assert body["state"] == "success"
    assert body["results"][0]["id"] == 42
    assert body["message"] is None

    await container.trend_recorder.drain()
    trending = (await client.get("/v1/trending")).json()
    assert trending["limit"] == 5
    assert trending["results"][0]["term"] == "dune"
    assert trending["results"][0]["count"] == 1
    assert trending["results"][0]["poster_url"] == "https://img/dune.jpg"


@pytest.mark.asyncio
async def test_popular_search_is_not_recorded(client, container) -> None:
    body = (await client.get("/v1/movies")).json()
    await container.trend_recorder.drain()

    assert [movie["title"] for movie in body["results"]] == ["A", "B"]
    assert container.trend_store.count() == 0


@pytest.mark.asyncio
async def test_empty_and_failed_states_are_reported_in_body(client) -> None:
    empty = (await client.get("/v1/movies", params={"query": "nothing"})).json()
    failed = (await client.get("/v1/movies", params={"query": "boom"})).json()

    assert empty["state"] == "empty"
    assert empty["message"] == "No movies found."
    assert failed["state"] == "failed"
    assert failed["results"] == []
    assert failed["message"] == "Error fetching movies. Please try again later."


@pytest.mark.asyncio
async def test_trending_limit_is_validated(client) -> None:
    response = await client.get("/v1/trending", params={"limit": 0})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_session_lifecycle(client, container) -> None:
    opened = await client.post("/v1/sessions")
    assert opened.status_code == 201
    snapshot = opened.json()
    session_id = snapshot["session_id"]
    assert snapshot["state"] == "success"
    assert snapshot["debounced_query"] == ""
    assert len(snapshot["results"]) == 2

    typed = await client.put(f"/v1/sessions/{session_id}/query", json={"query": "dune"})
    assert typed.status_code == 200
    assert typed.json()["query"] == "dune"

    await container.sessions.get(session_id).settle()
    current = (await client.get(f"/v1/sessions/{session_id}")).json()
    assert current["debounced_query"] == "dune"
    assert current["results"][0]["title"] == "Dune"
    assert current["is_loading"] is False

    closed = await client.delete(f"/v1/sessions/{session_id}")
    assert closed.status_code == 204
    missing = await client.get(f"/v1/sessions/{session_id}")
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "session_not_found"


@pytest.mark.asyncio
async def test_health_endpoints(client, container) -> None:
    live = await client.get("/health/live")
    ready = await client.get("/health/ready")

    assert live.json() == {"status": "ok"}
    assert ready.json()["status"] == "ok"
    assert ready.json()["trend_counters"] == 0

"""Tests for the roster and session API routes."""

import random

import httpx
import pytest
from fastapi.testclient import TestClient

from faceoff.main import app
from faceoff.repositories.session_repository import SessionRepository
from faceoff.services.change_broadcaster import ChangeBroadcaster
from faceoff.services.signup_registry import SignupRegistry
from faceoff.services.viewer_state import HttpSnapshotFetcher, ViewerStateReducer

from conftest import drain_types

pytestmark = pytest.mark.anyio


@pytest.fixture
def app_state():
    """Fresh in-memory registry on app.state (mimics lifespan startup)."""
    repository = SessionRepository(":memory:")
    broadcaster = ChangeBroadcaster()
    app.state.broadcaster = broadcaster
    app.state.registry = SignupRegistry(repository, broadcaster, rng=random.Random(3))
    yield app.state
    repository.close()
    del app.state.registry
    del app.state.broadcaster


@pytest.fixture
async def client(app_state):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def signup(client, name, position="forward"):
    return await client.post("/api/current-game/signup", json={"name": name, "position": position})


class TestRoster:
    async def test_add_and_list(self, client):
        response = await client.post("/api/players", json={"name": "  Zed ", "position": "goalie"})
        assert response.status_code == 201
        assert response.json()["name"] == "Zed"

        await client.post("/api/players", json={"name": "Amy", "position": "defense"})
        names = [p["name"] for p in (await client.get("/api/players")).json()]
        assert names == ["Amy", "Zed"]

    @pytest.mark.parametrize(
        "body",
        [
            {"name": "   ", "position": "forward"},
            {"name": "Amy", "position": "winger"},
            {"position": "forward"},
        ],
    )
    async def test_invalid_entry_rejected(self, client, body):
        response = await client.post("/api/players", json=body)
        assert response.status_code == 422


class TestSignup:
    async def test_signup_and_list(self, client, app_state):
        viewer = app_state.broadcaster.register()

        response = await signup(client, "Alice", "defense")

        assert response.status_code == 201
        assert response.json() == {"id": 1, "name": "Alice", "position": "defense", "team": "unassigned"}
        assert (await client.get("/api/current-game")).json() == [response.json()]
        assert drain_types(viewer) == ["SIGNUP_ADDED"]

    async def test_duplicate_signup(self, client, app_state):
        await signup(client, "Alice", "defense")
        viewer = app_state.broadcaster.register()

        response = await signup(client, "Alice", "forward")

        assert response.status_code == 409
        assert "already signed up" in response.json()["detail"]
        assert len((await client.get("/api/current-game")).json()) == 1
        assert drain_types(viewer) == []

    async def test_capacity(self, client):
        for i in range(22):
            assert (await signup(client, f"P{i}")).status_code == 201

        response = await signup(client, "P22")
        assert response.status_code == 409
        assert "full" in response.json()["detail"]

    async def test_remove(self, client, app_state):
        alice = (await signup(client, "Alice")).json()
        viewer = app_state.broadcaster.register()

        response = await client.post("/api/current-game/remove", json={"id": alice["id"]})

        assert response.json() == {"success": True, "removed": True}
        assert (await client.get("/api/current-game")).json() == []
        assert drain_types(viewer) == ["SIGNUP_REMOVED"]


class TestTeams:
    async def test_split_needs_two_players(self, client):
        await signup(client, "Solo")
        response = await client.post("/api/current-game/split")
        assert response.status_code == 400

    async def test_split(self, client, app_state):
        for i in range(3):
            await signup(client, f"G{i}", "goalie")
        for i in range(5):
            await signup(client, f"F{i}", "forward")
        viewer = app_state.broadcaster.register()

        response = await client.post("/api/current-game/split")

        assert response.status_code == 200
        participants = response.json()["participants"]
        assert len(participants) == 8
        goalie_teams = sorted(p["team"] for p in participants if p["position"] == "goalie")
        assert goalie_teams == ["blue", "red", "unassigned"]
        assert drain_types(viewer) == ["TEAMS_CHANGED"]

    async def test_override_cycle(self, client):
        alice = (await signup(client, "Alice")).json()

        teams = []
        for _ in range(3):
            response = await client.post("/api/current-game/override", json={"id": alice["id"]})
            teams.append(response.json()["team"])

        assert teams == ["red", "blue", "unassigned"]

    async def test_override_explicit_and_unknown(self, client):
        alice = (await signup(client, "Alice")).json()

        response = await client.post("/api/current-game/override", json={"id": alice["id"], "team": "blue"})
        assert response.json()["team"] == "blue"

        response = await client.post("/api/current-game/override", json={"id": 999})
        assert response.status_code == 404

    async def test_summary(self, client):
        alice = (await signup(client, "Alice", "goalie")).json()
        await client.post("/api/current-game/override", json={"id": alice["id"], "team": "red"})

        response = await client.get("/api/current-game/summary")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "Goalie: Alice" in response.text


class TestReset:
    async def test_reset_twice(self, client, app_state):
        await signup(client, "Alice")
        viewer = app_state.broadcaster.register()

        first = await client.post("/api/current-game/reset")
        second = await client.post("/api/current-game/reset")

        assert first.json() == {"success": True, "removed": 1}
        assert second.json() == {"success": True, "removed": 0}
        assert (await client.get("/api/current-game")).json() == []
        assert drain_types(viewer) == ["SESSION_RESET", "SESSION_RESET"]


async def test_health(client):
    response = await client.get("/health")
    assert response.json() == {"status": "healthy", "service": "faceoff"}


async def test_viewer_catches_up_with_snapshot(client):
    """A viewer that missed a removal converges after a full fetch."""
    await client.post("/api/players", json={"name": "Alice", "position": "forward"})
    alice = (await signup(client, "Alice")).json()
    await signup(client, "Bob", "goalie")

    fetcher = HttpSnapshotFetcher("http://test", _client=client)
    reducer = ViewerStateReducer(fetcher)
    await reducer.initialize()
    assert len(reducer.projection.participants) == 2

    # Removal happens while the viewer is disconnected
    await client.post("/api/current-game/remove", json={"id": alice["id"]})
    await reducer.refresh()

    assert [p.name for p in reducer.projection.participants] == ["Bob"]
    assert [e.name for e in reducer.projection.roster] == ["Alice"]


def test_websocket_streams_events(app_state):
    with TestClient(app) as test_client:
        with test_client.websocket_connect("/ws") as websocket:
            test_client.post("/api/current-game/signup", json={"name": "Alice", "position": "forward"})
            added = websocket.receive_json()
            test_client.post("/api/current-game/reset")
            reset = websocket.receive_json()

    assert added["type"] == "SIGNUP_ADDED"
    assert added["data"]["name"] == "Alice"
    assert reset == {"type": "SESSION_RESET"}
    assert app_state.broadcaster.connection_count == 0
    # Lifespan shutdown leaves a pre-populated repository open
    assert app_state.registry.list_session() == []


def test_websocket_ignores_binary_frames(app_state):
    with TestClient(app) as test_client:
        with test_client.websocket_connect("/ws") as websocket:
            websocket.send_bytes(b"hi")
            test_client.post("/api/current-game/signup", json={"name": "Alice", "position": "forward"})
            added = websocket.receive_json()
            assert app_state.broadcaster.connection_count == 1

    assert added["type"] == "SIGNUP_ADDED"

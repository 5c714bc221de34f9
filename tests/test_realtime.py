"""Unit tests for familytodo/routers/realtime.py."""

import asyncio
from collections.abc import Generator
from typing import TYPE_CHECKING

import pytest
from fastapi.testclient import TestClient

from familytodo.database import Base, get_db
from familytodo.main import create_app
from familytodo.routers import realtime
from familytodo.routers.realtime import ConnectionManager, publish
from tests.utils import api_path, clean_tables, create_sqlite_engine, test_client_with_session

if TYPE_CHECKING:
    from _pytest.monkeypatch import MonkeyPatch
    from sqlalchemy.orm import Session


engine, TestingSessionLocal = create_sqlite_engine()


@pytest.fixture(scope="module")
def db_setup() -> Generator[None, None, None]:
    """Create test database schema once per module."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_setup: None) -> Generator["Session", None, None]:
    """Create test database session on empty tables."""
    db = TestingSessionLocal()
    try:
        clean_tables(db)
        yield db
    finally:
        db.rollback()
        db.close()


@pytest.fixture
def client(db_session: "Session", monkeypatch: "MonkeyPatch") -> Generator[TestClient, None, None]:
    """Create test client with database session override."""
    monkeypatch.setattr("familytodo.main.init_db", lambda: None)
    app = create_app()
    with test_client_with_session(app, get_db, db_session) as test_client:
        yield test_client


class MockWebSocket:
    """Stand-in for a connected WebSocket."""

    def __init__(self, should_fail: bool = False) -> None:
        self.should_fail = should_fail
        self.client = type("Client", (), {"host": "127.0.0.1", "port": 8000})()
        self.messages: list[dict] = []

    async def send_json(self, message: dict) -> None:
        if self.should_fail:
            raise RuntimeError("Send failed")
        self.messages.append(message)


def _register(manager: ConnectionManager, ws: MockWebSocket) -> None:
    manager._connections.add(ws)  # type: ignore[arg-type]
    manager._meta[ws] = {"id": id(ws), "host": "127.0.0.1", "port": 8000}  # type: ignore[index]


class TestConnectionManager:
    """Tests for ConnectionManager class."""

    def test_initial_state(self) -> None:
        manager = ConnectionManager()

        assert manager.status() == {"active_connections": 0, "clients": []}

    def test_disconnect_removes_connection(self) -> None:
        manager = ConnectionManager()
        ws = MockWebSocket()
        _register(manager, ws)

        manager.disconnect(ws)  # type: ignore[arg-type]

        assert manager.status()["active_connections"] == 0
        assert ws not in manager._meta

    def test_broadcast_sends_to_all_connections(self) -> None:
        manager = ConnectionManager()
        first, second = MockWebSocket(), MockWebSocket()
        _register(manager, first)
        _register(manager, second)
        message = {"event": "task-created", "data": {"id": 1}}

        asyncio.run(manager.broadcast(message))

        assert first.messages == [message]
        assert second.messages == [message]

    def test_broadcast_drops_failed_connections(self) -> None:
        manager = ConnectionManager()
        healthy, broken = MockWebSocket(), MockWebSocket(should_fail=True)
        _register(manager, healthy)
        _register(manager, broken)

        asyncio.run(manager.broadcast({"event": "task-deleted", "data": {"id": 1}}))

        assert manager._connections == {healthy}


class TestPublish:
    """Tests for publish."""

    def test_publish_outside_event_loop_wraps_payload(self, monkeypatch: "MonkeyPatch") -> None:
        manager = ConnectionManager()
        ws = MockWebSocket()
        _register(manager, ws)
        monkeypatch.setattr(realtime, "manager", manager)

        publish("task-completed", {"id": 7})

        assert ws.messages == [{"event": "task-completed", "data": {"id": 7}}]

    def test_publish_inside_running_loop_keeps_task_until_done(self, monkeypatch: "MonkeyPatch") -> None:
        manager = ConnectionManager()
        ws = MockWebSocket()
        _register(manager, ws)
        monkeypatch.setattr(realtime, "manager", manager)

        async def scenario() -> None:
            publish("task-updated", {"id": 3})
            assert len(realtime._pending_broadcasts) == 1
            await asyncio.gather(*list(realtime._pending_broadcasts))
            await asyncio.sleep(0)

        asyncio.run(scenario())

        assert ws.messages == [{"event": "task-updated", "data": {"id": 3}}]
        assert realtime._pending_broadcasts == set()


class TestWebSocketEndpoint:
    """Tests for the /tasks/stream endpoint."""

    def test_status_endpoint(self, client: TestClient) -> None:
        response = client.get(api_path("/tasks/stream/status"))

        assert response.status_code == 200
        assert "active_connections" in response.json()

    def test_created_task_is_pushed_to_subscribers(self, client: TestClient) -> None:
        with client.websocket_connect(api_path("/tasks/stream")) as websocket:
            response = client.post(api_path("/tasks/"), json={"title": "Feed the cat"})
            assert response.status_code == 201

            message = websocket.receive_json()

        assert message["event"] == "task-created"
        assert message["data"]["id"] == response.json()["id"]
        assert message["data"]["title"] == "Feed the cat"

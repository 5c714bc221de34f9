"""Unit tests for tasks API router."""

from collections.abc import Generator
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from familytodo.database import Base, get_db
from familytodo.main import create_app
from familytodo.models.person import Person
from familytodo.routers import tasks as tasks_router
from familytodo.services.task_service import TaskService
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
def published(monkeypatch: "MonkeyPatch") -> list[tuple[str, dict[str, Any]]]:
    """Record realtime events instead of broadcasting them."""
    events: list[tuple[str, dict[str, Any]]] = []
    monkeypatch.setattr(tasks_router, "publish", lambda event, payload: events.append((event, payload)))
    return events


@pytest.fixture
def client(db_session: "Session", monkeypatch: "MonkeyPatch") -> Generator[TestClient, None, None]:
    """Create test client with test database."""
    monkeypatch.setattr("familytodo.main.init_db", lambda: None)
    app = create_app()
    with test_client_with_session(app, get_db, db_session) as test_client:
        yield test_client


def _create(client: TestClient, **fields: Any) -> dict[str, Any]:
    payload = {"title": "Water plants", "due_date": "2024-01-01T09:00:00"}
    payload.update(fields)
    response = client.post(api_path("/tasks/"), json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestTasksRouter:
    """Unit tests for tasks API router."""

    def test_create_task(self, client: TestClient, published: list) -> None:
        data = _create(client, description="Living room", priority=1)

        assert data["title"] == "Water plants"
        assert data["description"] == "Living room"
        assert data["priority"] == 1
        assert data["completed"] is False
        assert data["recurring_summary"] is None
        assert published == [("task-created", data)]

    def test_create_recurring_task_with_client_keys(self, client: TestClient, published: list) -> None:
        data = _create(
            client,
            recurring_settings={"unit": "week", "interval": 2, "from": "completion", "endCount": 4},
        )

        assert data["recurring_unit"] == "week"
        assert data["recurring_interval"] == 2
        assert data["recurring_from"] == "completion"
        assert data["recurring_end_count"] == 4
        assert data["recurring_summary"] == "Every 2 weeks (from completion) (1/4)"

    @pytest.mark.parametrize(
        "settings",
        [
            {"unit": "day", "interval": 0},
            {"unit": "fortnight"},
            {"unit": "month", "days": ["monday"]},
        ],
    )
    def test_malformed_rule_is_rejected_before_create(
        self, client: TestClient, db_session: "Session", published: list, settings: dict
    ) -> None:
        response = client.post(
            api_path("/tasks/"),
            json={"title": "Bad", "recurring_settings": settings},
        )

        assert response.status_code == 422
        assert TaskService.get_all_tasks(db_session, include_deleted=True) == []
        assert published == []

    def test_unknown_assignee_is_422(self, client: TestClient) -> None:
        response = client.post(api_path("/tasks/"), json={"title": "Dishes", "assigned_people": [404]})

        assert response.status_code == 422
        assert "People not found" in response.json()["detail"]

    def test_list_tasks_with_filters(self, client: TestClient, db_session: "Session") -> None:
        person = Person(name="Sam")
        db_session.add(person)
        db_session.commit()
        _create(client, title="Sam's", assigned_people=[person.id])
        _create(client, title="Anyone's")

        everything = client.get(api_path("/tasks/")).json()
        mine = client.get(api_path("/tasks/"), params={"person_id": person.id}).json()

        assert {t["title"] for t in everything} == {"Sam's", "Anyone's"}
        assert [t["title"] for t in mine] == ["Sam's"]
        assert mine[0]["assigned_people"][0]["name"] == "Sam"

    def test_get_task_not_found(self, client: TestClient) -> None:
        response = client.get(api_path("/tasks/999"))

        assert response.status_code == 404

    def test_update_task(self, client: TestClient, published: list) -> None:
        created = _create(client)

        response = client.put(
            api_path(f"/tasks/{created['id']}"),
            json={"title": "Water all plants", "recurring_settings": {"unit": "weekday"}},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Water all plants"
        assert data["recurring_summary"] == "Every weekday"
        assert published[-1] == ("task-updated", data)

    def test_complete_recurring_task_publishes_both_events(self, client: TestClient, published: list) -> None:
        created = _create(client, recurring_settings={"unit": "week", "interval": 2})

        response = client.post(api_path(f"/tasks/{created['id']}/complete"))

        assert response.status_code == 200
        completed = response.json()
        assert completed["completed"] is True
        events = [event for event, _ in published]
        assert events == ["task-created", "task-completed", "task-created"]
        successor = published[-1][1]
        assert successor["due_date"] == "2024-01-15T09:00:00Z"
        assert successor["recurring_occurrence"] == 2
        assert successor["parent_task_id"] == created["id"]
        assert successor["recurring_group_id"] == completed["recurring_group_id"]

    def test_complete_twice_publishes_once(self, client: TestClient, published: list) -> None:
        created = _create(client, recurring_settings={"unit": "day"})
        client.post(api_path(f"/tasks/{created['id']}/complete"))
        published.clear()

        response = client.post(api_path(f"/tasks/{created['id']}/complete"))

        assert response.status_code == 200
        assert published == []

    def test_complete_then_delete_creates_single_successor(self, client: TestClient, published: list) -> None:
        created = _create(client, recurring_settings={"unit": "day"})
        client.post(api_path(f"/tasks/{created['id']}/complete"))
        group_id = published[-1][1]["recurring_group_id"]

        response = client.delete(api_path(f"/tasks/{created['id']}"))

        assert response.status_code == 204
        series = client.get(api_path(f"/tasks/series/{group_id}")).json()
        assert [t["recurring_occurrence"] for t in series] == [1, 2]
        assert published[-1] == ("task-deleted", {"id": created["id"]})

    def test_delete_recurring_task_publishes_successor(self, client: TestClient, published: list) -> None:
        created = _create(client, recurring_settings={"unit": "month"}, due_date="2024-01-31T08:00:00")

        response = client.delete(api_path(f"/tasks/{created['id']}"))

        assert response.status_code == 204
        assert [event for event, _ in published] == ["task-created", "task-deleted", "task-created"]
        assert published[-1][1]["due_date"] == "2024-02-29T08:00:00Z"
        assert client.get(api_path(f"/tasks/{created['id']}")).status_code == 404

    def test_uncomplete(self, client: TestClient, published: list) -> None:
        created = _create(client)
        client.post(api_path(f"/tasks/{created['id']}/complete"))

        response = client.post(api_path(f"/tasks/{created['id']}/uncomplete"))

        assert response.status_code == 200
        assert response.json()["completed"] is False
        assert published[-1][0] == "task-uncompleted"

    @pytest.mark.parametrize("action", ["complete", "uncomplete"])
    def test_actions_on_missing_task(self, client: TestClient, action: str) -> None:
        assert client.post(api_path(f"/tasks/12345/{action}")).status_code == 404

    def test_delete_missing_task(self, client: TestClient) -> None:
        assert client.delete(api_path("/tasks/12345")).status_code == 404

    def test_series_not_found(self, client: TestClient) -> None:
        assert client.get(api_path("/tasks/series/unknown")).status_code == 404

    def test_attachments(self, client: TestClient) -> None:
        created = _create(client)

        response = client.post(
            api_path(f"/tasks/{created['id']}/attachments"),
            json={"filename": "a.jpg", "original_name": "fridge.jpg", "url": "/uploads/a.jpg", "type": "image/jpeg", "size": 2048},
        )

        assert response.status_code == 201
        listed = client.get(api_path(f"/tasks/{created['id']}/attachments")).json()
        assert [a["original_name"] for a in listed] == ["fridge.jpg"]
        task = client.get(api_path(f"/tasks/{created['id']}")).json()
        assert task["attachments"][0]["size"] == 2048

    def test_storage_failure_is_500_and_leaves_task_open(
        self,
        client: TestClient,
        published: list,
        monkeypatch: "MonkeyPatch",
    ) -> None:
        created = _create(client, recurring_settings={"unit": "day"})
        published.clear()

        def broken_materialize(self, task, now=None):
            raise OperationalError("INSERT INTO tasks", {}, Exception("database is locked"))

        monkeypatch.setattr(
            "familytodo.services.materializer.OccurrenceMaterializer.materialize_next",
            broken_materialize,
        )
        response = client.post(api_path(f"/tasks/{created['id']}/complete"))

        assert response.status_code == 500
        assert published == []
        assert client.get(api_path(f"/tasks/{created['id']}")).json()["completed"] is False


class TestTimezones:
    """Offsets sent by clients are kept as absolute UTC instants."""

    @pytest.mark.parametrize("due_date", ["2024-03-09T19:00:00Z", "2024-03-10T00:00:00+05:00"])
    def test_due_date_is_returned_in_utc(self, client: TestClient, published: list, due_date: str) -> None:
        created = _create(client, due_date=due_date, recurring_pattern="daily")

        response = client.post(api_path(f"/tasks/{created['id']}/complete"))

        assert response.status_code == 200
        assert datetime.fromisoformat(created["due_date"]) == datetime(2024, 3, 9, 19, tzinfo=timezone.utc)
        successor = published[-1][1]
        assert datetime.fromisoformat(successor["due_date"]) == datetime(2024, 3, 10, 19, tzinfo=timezone.utc)

    def test_end_date_offset_is_applied(self, client: TestClient, published: list) -> None:
        created = _create(
            client,
            due_date="2024-03-10T08:00:00Z",
            recurring_settings={"unit": "day", "endDate": "2024-03-11T05:00:00+05:00"},
        )

        assert datetime.fromisoformat(created["recurring_end_date"]) == datetime(2024, 3, 11, tzinfo=timezone.utc)

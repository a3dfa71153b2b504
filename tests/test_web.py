"""
Tests for the web API
"""

import pytest
from fastapi.testclient import TestClient
from taskboard.api.memory_store import InMemoryDocumentStore
from taskboard.main import BoardSession
from taskboard.web.main import app


@pytest.fixture
def client(seed_data, monkeypatch):
    """Test client whose session runs on a seeded in-memory store"""
    monkeypatch.setattr(
        "taskboard.main.create_store",
        lambda: InMemoryDocumentStore(initial=seed_data),
    )
    with TestClient(app) as test_client:
        yield test_client


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


def test_session_created_on_startup(client):
    """Test startup stores a BoardSession on the app"""
    assert isinstance(app.state.session, BoardSession)


def test_list_tasks_resolves_assignees(client):
    """Test tasks carry resolved contacts and display colors"""
    tasks = client.get("/api/tasks").json()

    login = next(task for task in tasks if task["id"] == "task-002")
    assert login["status"] == "in-progress"
    assert [contact["initials"] for contact in login["assignees"]] == ["AS", "BM"]
    assert login["displayColor"] == 7


def test_board_columns(client):
    """Test the board lists every column"""
    board = client.get("/api/board").json()

    assert list(board) == ["todo", "in-progress", "awaiting-feedback", "done"]
    assert [task["id"] for task in board["todo"]] == ["task-001"]


def test_board_search(client):
    board = client.get("/api/board", params={"search": "login"}).json()

    assert sum(len(column) for column in board.values()) == 1


def test_create_task(client):
    """Test task creation through the API"""
    response = client.post("/api/tasks", json={"title": "From API", "category": "User Story"})

    assert response.status_code == 200
    assert response.json()["data"]["id"] == "task-003"
    assert client.get("/api/tasks/task-003").json()["title"] == "From API"
    assert client.get("/api/notification").json()["type"] == "success"


def test_create_task_invalid(client):
    """Test validation errors become 400 and an error notification"""
    response = client.post("/api/tasks", json={"title": "", "category": "User Story"})

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert client.get("/api/notification").json()["type"] == "error"


def test_move_task(client):
    """Test drag and drop through the API"""
    response = client.post("/api/board/move", json={"taskId": "task-001", "from": "todo", "to": "done", "index": 0})

    body = response.json()
    assert body["success"] is True
    assert [task["id"] for task in body["data"]["board"]["done"]] == ["task-001"]
    assert body["data"]["notification"]["type"] == "success"


def test_move_unknown_task(client):
    response = client.post("/api/board/move", json={"taskId": "task-404", "from": "todo", "to": "done"})

    assert response.status_code == 404


def test_summary(client):
    summary = client.get("/api/summary").json()

    assert summary["total"] == 2
    assert summary["urgent"] == 1


def test_two_step_task_delete(client):
    """Test the first delete request asks, the second deletes"""
    first = client.post("/api/tasks/task-001/delete").json()
    assert first["data"] == {"deleted": False, "pending": "task-001"}
    assert client.get("/api/notification").json()["actions"] == ["Cancel", "Delete"]

    second = client.post("/api/tasks/task-001/delete").json()
    assert second["data"]["deleted"] is True
    assert client.get("/api/tasks/task-001").status_code == 404


def test_delete_via_notification_action(client):
    """Test the Delete button of the prompt"""
    client.post("/api/contacts/contact-002/delete")

    response = client.post("/api/notification/actions/1")

    assert response.status_code == 200
    assert [contact["id"] for contact in client.get("/api/contacts").json()] == ["contact-001"]


def test_cancel_delete(client):
    client.post("/api/tasks/task-001/delete")

    client.post("/api/tasks/delete/cancel")

    assert client.get("/api/notification").json() is None
    assert client.post("/api/tasks/delete/confirm").json()["success"] is False


def test_contact_directory(client):
    directory = client.get("/api/contacts/directory").json()

    assert list(directory) == ["A", "B"]


def test_create_and_update_contact(client):
    """Test contact creation and rename"""
    response = client.post("/api/contacts", json={
        "name": "Carla Souza",
        "email": "carla@example.com",
        "phone": "0170 1112223",
    })
    contact_id = response.json()["data"]["id"]
    assert contact_id == "contact-003"

    client.patch(f"/api/contacts/{contact_id}", json={"name": "Carla Lima"})

    contact = next(c for c in client.get("/api/contacts").json() if c["id"] == contact_id)
    assert contact["name"] == "Carla Lima"
    assert contact["initials"] == "CS"


def test_toggle_subtask(client):
    response = client.post("/api/tasks/task-001/subtasks/sub-2/toggle")

    assert response.json()["data"] == {"completed": True}
    assert client.get("/api/tasks/task-001").json()["progress"] == 1.0


def test_dismiss_notification(client):
    client.post("/api/tasks/task-001/delete")

    client.post("/api/notification/dismiss")

    assert client.get("/api/notification").json() is None


def test_missing_notification_action(client):
    assert client.post("/api/notification/actions/0").status_code == 404


def test_failed_task_update_shows_error(client):
    """Test a rejected PATCH surfaces as an error notification"""
    response = client.patch("/api/tasks/task-404", json={"title": "Gone"})

    assert response.status_code == 404
    notification = client.get("/api/notification").json()
    assert notification["type"] == "error"
    assert notification["title"] == "Task could not be updated"


def test_failed_subtask_toggle_shows_error(client):
    response = client.post("/api/tasks/task-001/subtasks/sub-9/toggle")

    assert response.status_code == 400
    assert client.get("/api/notification").json()["type"] == "error"


def test_invalid_contact_update_shows_error(client):
    """Test contact edits with bad input are rejected with a notification"""
    response = client.patch("/api/contacts/contact-001", json={"email": "not-an-email"})

    assert response.status_code == 400
    assert client.get("/api/notification").json()["title"] == "Contact could not be saved"

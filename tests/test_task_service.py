"""
Tests for task service
"""

import pytest
from unittest.mock import AsyncMock
from taskboard.api.document_store import SERVER_TIMESTAMP
from taskboard.config.constants import MAX_RETRIES
from taskboard.models.task import TaskUpdate, Stage
from taskboard.services.task_service import TaskService
from taskboard.utils.error_handler import (
    ValidationError,
    DocumentExistsError,
    DocumentNotFoundError,
    StoreError,
)


@pytest.mark.asyncio
async def test_add_task_generates_next_id(task_service, memory_store, fixed_now):
    """Test creation uses the next sequential id and fills defaults"""
    task_id = await task_service.add_task({"title": "New task", "category": "User Story"})

    assert task_id == "task-003"
    stored = await memory_store.get_document("tasks", "task-003")
    assert stored["title"] == "New task"
    assert stored["status"] == "todo"
    assert stored["priority"] == "medium"
    assert stored["assignedContacts"] == []
    assert 1 <= stored["color"] <= 10
    assert stored["createdAt"] == fixed_now
    assert stored["updatedAt"] == fixed_now


@pytest.mark.asyncio
async def test_add_task_keeps_given_color(task_service, memory_store):
    """Test an explicit color is not replaced"""
    task_id = await task_service.add_task({"title": "Colored", "category": "User Story", "color": 9})

    assert (await memory_store.get_document("tasks", task_id))["color"] == 9


@pytest.mark.asyncio
async def test_add_task_validation_writes_nothing(mock_store):
    """Test malformed input never reaches the store"""
    service = TaskService(mock_store)

    with pytest.raises(ValidationError) as exc_info:
        await service.add_task({"title": "", "category": "User Story"})

    assert "title" in str(exc_info.value)
    mock_store.list_documents.assert_not_called()
    mock_store.create_document.assert_not_called()


@pytest.mark.asyncio
async def test_add_task_sends_server_timestamps(mock_store):
    """Test timestamps are left to the store"""
    service = TaskService(mock_store)

    await service.add_task({"title": "Task", "category": "Technical Task", "priority": "urgent"})

    collection, task_id, data = mock_store.create_document.call_args.args
    assert (collection, task_id) == ("tasks", "task-001")
    assert data["createdAt"] is SERVER_TIMESTAMP
    assert data["updatedAt"] is SERVER_TIMESTAMP
    assert data["priority"] == "urgent"


@pytest.mark.asyncio
async def test_add_task_retries_on_id_collision(mock_store):
    """Test a concurrently taken id leads to a new id"""
    mock_store.list_documents.side_effect = [[{"id": "task-001"}], [{"id": "task-001"}, {"id": "task-002"}]]
    mock_store.create_document.side_effect = [DocumentExistsError("taken", "already-exists"), None]
    service = TaskService(mock_store)

    task_id = await service.add_task({"title": "Task", "category": "User Story"})

    assert task_id == "task-003"
    assert mock_store.create_document.await_count == 2


@pytest.mark.asyncio
async def test_add_task_gives_up_after_retries(mock_store):
    """Test persistent collisions surface as DocumentExistsError"""
    mock_store.create_document.side_effect = DocumentExistsError("taken", "already-exists")
    service = TaskService(mock_store)

    with pytest.raises(DocumentExistsError):
        await service.add_task({"title": "Task", "category": "User Story"})

    assert mock_store.create_document.await_count == MAX_RETRIES


@pytest.mark.asyncio
async def test_add_task_fails_when_id_scan_fails(mock_store):
    """Test there is no fallback id"""
    mock_store.list_documents.side_effect = StoreError("unavailable", "unavailable")
    service = TaskService(mock_store)

    with pytest.raises(StoreError):
        await service.add_task({"title": "Task", "category": "User Story"})

    mock_store.create_document.assert_not_called()


@pytest.mark.asyncio
async def test_update_task_partial(task_service, memory_store, fixed_now):
    """Test only given fields and updatedAt change"""
    await task_service.update_task("task-001", TaskUpdate(stage=Stage.DONE))

    stored = await memory_store.get_document("tasks", "task-001")
    assert stored["status"] == "done"
    assert stored["title"] == "Write API docs"
    assert stored["updatedAt"] == fixed_now


@pytest.mark.asyncio
async def test_update_task_from_dict(mock_store):
    """Test raw dict updates are validated"""
    service = TaskService(mock_store)

    await service.update_task("task-001", {"status": "awaiting-feedback"})

    _, _, data = mock_store.update_document.call_args.args
    assert data == {"status": "awaiting-feedback", "updatedAt": SERVER_TIMESTAMP}

    with pytest.raises(ValidationError):
        await service.update_task("task-001", {"status": "archived"})


@pytest.mark.asyncio
async def test_update_missing_task(task_service):
    """Test updating a deleted task"""
    with pytest.raises(DocumentNotFoundError):
        await task_service.update_task("task-404", {"title": "Gone"})


@pytest.mark.asyncio
async def test_toggle_subtask(task_service, memory_store):
    """Test subtask completion flips"""
    assert await task_service.toggle_subtask("task-001", "sub-2") is True
    assert await task_service.toggle_subtask("task-001", "sub-1") is False

    stored = await memory_store.get_document("tasks", "task-001")
    assert [subtask["completed"] for subtask in stored["subtasks"]] == [False, True]


@pytest.mark.asyncio
async def test_toggle_unknown_subtask(task_service):
    """Test unknown subtask and unknown task"""
    with pytest.raises(ValidationError):
        await task_service.toggle_subtask("task-001", "sub-9")
    with pytest.raises(DocumentNotFoundError):
        await task_service.toggle_subtask("task-404", "sub-1")


@pytest.mark.asyncio
async def test_toggle_subtask_without_stored_id(task_service, memory_store, task_mirror):
    """Test subtasks stored without an id can be toggled by the id the mirror shows"""
    await memory_store.set_document("tasks", "task-009", {"title": "Legacy", "subtasks": [{"title": "a"}]})
    shown_id = task_mirror.get("task-009").subtasks[0].id
    assert shown_id == "task-009-1"

    assert await task_service.toggle_subtask("task-009", shown_id) is True

    stored = await memory_store.get_document("tasks", "task-009")
    assert stored["subtasks"] == [{"title": "a", "id": "task-009-1", "completed": True}]
    assert task_mirror.get("task-009").subtasks[0].completed is True


@pytest.mark.asyncio
async def test_delete_task(task_service, memory_store):
    """Test delete removes the document; empty ids are ignored"""
    await task_service.delete_task("task-001")
    await task_service.delete_task("")

    assert await memory_store.get_document("tasks", "task-001") is None
    assert await memory_store.get_document("tasks", "task-002") is not None


@pytest.mark.asyncio
async def test_delete_task_error_propagates(mock_store):
    """Test services raise, they do not notify"""
    mock_store.delete_document = AsyncMock(side_effect=StoreError("denied", "permission-denied"))
    service = TaskService(mock_store)

    with pytest.raises(StoreError):
        await service.delete_task("task-001")

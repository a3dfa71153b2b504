"""
Pytest configuration and fixtures
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from taskboard.api.document_store import DocumentStore
from taskboard.api.memory_store import InMemoryDocumentStore
from taskboard.models.task import Task
from taskboard.services.notification_service import NotificationChannel
from taskboard.services.task_service import TaskService
from taskboard.services.contact_service import ContactService
from taskboard.services.entity_mirror import TaskMirror, ContactMirror

FIXED_NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_task(task_id: str, stage: str = "todo", priority: str = "medium", **fields) -> Task:
    """Task built the same way the mirror builds it"""
    return Task.from_document(task_id, {"status": stage, "priority": priority, "title": task_id, **fields})


@pytest.fixture
def task_factory():
    """Factory for tasks built from minimal documents"""
    return make_task


@pytest.fixture
def seed_data():
    """Two tasks and two contacts as stored documents"""
    return {
        "tasks": {
            "task-001": {
                "title": "Write API docs",
                "description": "Describe the board endpoints",
                "category": "Technical Task",
                "priority": "low",
                "status": "todo",
                "assignedContacts": ["contact-001"],
                "subtasks": [
                    {"id": "sub-1", "title": "Outline", "completed": True},
                    {"id": "sub-2", "title": "Examples", "completed": False},
                ],
                "color": 3,
            },
            "task-002": {
                "title": "Login page",
                "category": "User Story",
                "priority": "urgent",
                "status": "in-progress",
                "assignedContacts": ["contact-001", "contact-002"],
                "dueDate": datetime(2025, 3, 10, tzinfo=timezone.utc),
                "color": 7,
            },
        },
        "contacts": {
            "contact-001": {
                "name": "Anna Schmidt",
                "email": "anna@example.com",
                "telephone": "+49 170 1234567",
                "initials": "AS",
                "color": 2,
            },
            "contact-002": {
                "name": "Bernd Meier",
                "email": "bernd@example.com",
                "telephone": "0170 7654321",
                "initials": "BM",
                "color": 5,
            },
        },
    }


@pytest.fixture
def fixed_now():
    """Clock value of the in-memory stores"""
    return FIXED_NOW


@pytest.fixture
def memory_store(seed_data):
    """In-memory store seeded with sample tasks and contacts"""
    return InMemoryDocumentStore(initial=seed_data, clock=lambda: FIXED_NOW)


@pytest.fixture
def empty_store():
    """In-memory store without documents"""
    return InMemoryDocumentStore(clock=lambda: FIXED_NOW)


@pytest.fixture
def notifications():
    """Notification channel"""
    return NotificationChannel()


@pytest.fixture
def task_service(memory_store):
    """Task service over the seeded store"""
    return TaskService(memory_store)


@pytest.fixture
def contact_service(memory_store):
    """Contact service over the seeded store"""
    return ContactService(memory_store)


@pytest.fixture
def task_mirror(memory_store, notifications):
    """Task mirror over the seeded store"""
    mirror = TaskMirror(memory_store, notifications)
    yield mirror
    mirror.close()


@pytest.fixture
def contact_mirror(memory_store, notifications):
    """Contact mirror over the seeded store"""
    mirror = ContactMirror(memory_store, notifications)
    yield mirror
    mirror.close()


@pytest.fixture
def mock_store():
    """Mock document store"""
    store = MagicMock(spec=DocumentStore)
    store.subscribe = MagicMock(return_value=MagicMock())
    store.list_documents = AsyncMock(return_value=[])
    store.get_document = AsyncMock(return_value=None)
    store.create_document = AsyncMock(return_value=None)
    store.set_document = AsyncMock(return_value=None)
    store.update_document = AsyncMock(return_value=None)
    store.delete_document = AsyncMock(return_value=None)
    store.close = AsyncMock(return_value=None)
    return store


@pytest.fixture
def mock_task_service():
    """Mock task service"""
    service = MagicMock(spec=TaskService)
    service.add_task = AsyncMock(return_value="task-003")
    service.update_task = AsyncMock(return_value=None)
    service.toggle_subtask = AsyncMock(return_value=True)
    service.delete_task = AsyncMock(return_value=None)
    return service

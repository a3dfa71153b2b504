"""
Task service for task CRUD against the document store
"""

import random
from typing import Any, Dict, Optional, Union
from pydantic import ValidationError as PydanticValidationError
from taskboard.api.document_store import DocumentStore, SERVER_TIMESTAMP
from taskboard.config.constants import TASK_ID_PREFIX, PALETTE_SIZE, MAX_RETRIES
from taskboard.config.settings import settings
from taskboard.models.task import TaskCreate, TaskUpdate
from taskboard.services.id_generator import SequentialIdGenerator
from taskboard.utils.error_handler import (
    ValidationError,
    DocumentExistsError,
    DocumentNotFoundError,
)
from taskboard.utils.logger import logger


def random_color() -> int:
    return random.randint(1, PALETTE_SIZE)


def validation_message(error: PydanticValidationError) -> str:
    """First pydantic error as "field: message" """
    first = error.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or "input"
    message = first.get("msg", "invalid value")
    # pydantic prefixes messages raised from validators
    return f"{field}: {message.removeprefix('Value error, ')}"


async def create_with_sequential_id(
    store: DocumentStore,
    id_generator: SequentialIdGenerator,
    collection: str,
    prefix: str,
    data: Dict[str, Any],
    component: str,
) -> str:
    """
    Write a new document under the next sequential id

    The write must not overwrite an existing document; if another client took
    the id in the meantime, a fresh id is generated and the write retried.

    Returns:
        Id of the created document

    Raises:
        DocumentExistsError: If every attempt collided
        StoreError: If the id scan or the write failed
    """
    last_error: Optional[DocumentExistsError] = None
    for attempt in range(MAX_RETRIES):
        doc_id = await id_generator.next_id(collection, prefix)
        try:
            await store.create_document(collection, doc_id, data)
            return doc_id
        except DocumentExistsError as e:
            last_error = e
            logger.warning(
                f"[{component}] Id {doc_id} was taken concurrently "
                f"(attempt {attempt + 1}/{MAX_RETRIES}), generating a new one"
            )
    raise last_error


class TaskService:
    """Service for creating, editing and deleting tasks"""

    def __init__(
        self,
        store: DocumentStore,
        id_generator: Optional[SequentialIdGenerator] = None,
        collection: Optional[str] = None,
    ):
        """
        Initialize task service

        Args:
            store: Document store
            id_generator: Id generator (one over the same store by default)
            collection: Tasks collection name
        """
        self.store = store
        self.id_generator = id_generator or SequentialIdGenerator(store)
        self.collection = collection or settings.TASKS_COLLECTION
        self.logger = logger

    async def add_task(self, task: Union[TaskCreate, Dict[str, Any]]) -> str:
        """
        Create a new task

        Args:
            task: Validated TaskCreate or raw form data

        Returns:
            Id of the new task ("task-NNN")

        Raises:
            ValidationError: If the input is malformed (nothing is written)
            StoreError: If id generation or the write failed
        """
        if not isinstance(task, TaskCreate):
            try:
                task = TaskCreate.model_validate(task)
            except PydanticValidationError as e:
                raise ValidationError(validation_message(e)) from e

        data = task.model_dump(by_alias=True)
        if data.get("color") is None:
            data["color"] = random_color()
        data["createdAt"] = SERVER_TIMESTAMP
        data["updatedAt"] = SERVER_TIMESTAMP

        self.logger.info(
            f"[TaskService] Adding task: title='{task.title}', category={task.category}, "
            f"priority={task.priority}, status={task.stage}"
        )
        try:
            task_id = await create_with_sequential_id(
                self.store, self.id_generator, self.collection, TASK_ID_PREFIX, data, "TaskService"
            )
        except Exception as e:
            self.logger.error(f"[TaskService] Failed to add task '{task.title}': {e}", exc_info=True)
            raise

        self.logger.info(f"[TaskService] Task added with id {task_id}")
        return task_id

    async def update_task(self, task_id: str, updates: Union[TaskUpdate, Dict[str, Any]]) -> None:
        """
        Apply a partial update to a task

        Args:
            task_id: Task id
            updates: TaskUpdate or raw dict with document field names

        Raises:
            ValidationError: If the update is malformed
            DocumentNotFoundError: If the task no longer exists
            StoreError: If the write failed
        """
        if not task_id:
            raise ValidationError("task id is required")
        if not isinstance(updates, TaskUpdate):
            try:
                updates = TaskUpdate.model_validate(updates)
            except PydanticValidationError as e:
                raise ValidationError(validation_message(e)) from e

        data = updates.to_document()
        data["updatedAt"] = SERVER_TIMESTAMP
        self.logger.debug(f"[TaskService] Updating task {task_id}: {sorted(data)}")
        await self.store.update_document(self.collection, task_id, data)
        self.logger.info(f"[TaskService] Task {task_id} updated")

    async def toggle_subtask(self, task_id: str, subtask_id: str) -> bool:
        """
        Flip the completed flag of one subtask

        Args:
            task_id: Task id
            subtask_id: Subtask id

        Returns:
            New completed state

        Raises:
            DocumentNotFoundError: If the task does not exist
            ValidationError: If the task has no such subtask
        """
        document = await self.store.get_document(self.collection, task_id)
        if document is None:
            raise DocumentNotFoundError(f"Task {task_id} not found", "not-found")

        subtasks = document.get("subtasks") or []
        for index, subtask in enumerate(subtasks):
            if not isinstance(subtask, dict):
                continue
            # Same fallback id the mirror shows for subtasks stored without one
            current_id = str(subtask.get("id") or f"{task_id}-{index + 1}")
            if current_id == subtask_id:
                subtask["id"] = current_id
                completed = not bool(subtask.get("completed", subtask.get("complete", False)))
                subtask["completed"] = completed
                subtask.pop("complete", None)
                break
        else:
            raise ValidationError(f"task {task_id} has no subtask {subtask_id}")

        await self.store.update_document(
            self.collection, task_id, {"subtasks": subtasks, "updatedAt": SERVER_TIMESTAMP}
        )
        self.logger.info(f"[TaskService] Subtask {subtask_id} of {task_id} marked completed={completed}")
        return completed

    async def delete_task(self, task_id: str) -> None:
        """
        Delete a task

        Args:
            task_id: Task id (empty ids are ignored)
        """
        if not task_id:
            return
        await self.store.delete_document(self.collection, task_id)
        self.logger.info(f"[TaskService] Task {task_id} deleted")

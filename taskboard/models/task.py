"""
Task model
"""

from enum import Enum
from typing import Optional, List, Dict, Any
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict, field_validator
from taskboard.config.constants import (
    STAGE_LABELS,
    DEFAULT_PRIORITY,
    PALETTE_SIZE,
)
from taskboard.utils.date_utils import parse_timestamp


class Stage(str, Enum):
    """Workflow stages, in board column order"""
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    AWAITING_FEEDBACK = "awaiting-feedback"
    DONE = "done"

    @classmethod
    def from_str(cls, value: Any) -> "Stage":
        try:
            return cls(value)
        except (ValueError, TypeError):
            return cls.first()

    @classmethod
    def first(cls) -> "Stage":
        return next(iter(cls))

    @property
    def label(self) -> str:
        return STAGE_LABELS.get(self.value, self.value)


class TaskCategory(str, Enum):
    """Closed set of task categories"""
    USER_STORY = "User Story"
    TECHNICAL_TASK = "Technical Task"

    @classmethod
    def from_str(cls, value: Any) -> "TaskCategory":
        try:
            return cls(value)
        except (ValueError, TypeError):
            return cls.TECHNICAL_TASK


class Priority(str, Enum):
    """Priorities accepted for new or edited tasks"""
    LOW = "low"
    MEDIUM = "medium"
    URGENT = "urgent"


class Subtask(BaseModel):
    """Checklist item inside a task"""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = ""
    completed: bool = False
    created_at: Optional[datetime] = Field(None, alias="createdAt")


class Task(BaseModel):
    """Task as mirrored from the tasks collection"""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = ""
    description: str = ""
    category: TaskCategory = TaskCategory.TECHNICAL_TASK
    # Plain string: legacy documents carry priorities outside Priority
    priority: str = DEFAULT_PRIORITY
    stage: Stage = Field(Stage.TODO, alias="status")
    assigned_contacts: List[str] = Field(default_factory=list, alias="assignedContacts")
    subtasks: List[Subtask] = Field(default_factory=list)
    due_date: Optional[datetime] = Field(None, alias="dueDate")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")
    color: Optional[int] = None

    @property
    def completed_subtasks(self) -> int:
        return sum(1 for subtask in self.subtasks if subtask.completed)

    @property
    def subtask_progress(self) -> float:
        """Share of completed subtasks (0.0 when there are none)"""
        if not self.subtasks:
            return 0.0
        return self.completed_subtasks / len(self.subtasks)

    @classmethod
    def from_document(cls, doc_id: str, data: Optional[Dict[str, Any]]) -> "Task":
        """
        Build a task from a raw document, defaulting every optional field

        Args:
            doc_id: Document key
            data: Raw document fields (may be incomplete)

        Returns:
            Task with no missing values
        """
        data = data or {}

        subtasks = []
        raw_subtasks = data.get("subtasks") or []
        if isinstance(raw_subtasks, list):
            for index, raw in enumerate(raw_subtasks):
                if not isinstance(raw, dict):
                    continue
                subtasks.append(Subtask(
                    id=str(raw.get("id") or f"{doc_id}-{index + 1}"),
                    title=str(raw.get("title") or ""),
                    # Older documents use "complete"
                    completed=bool(raw.get("completed", raw.get("complete", False))),
                    created_at=parse_timestamp(raw.get("createdAt")),
                ))

        assigned = data.get("assignedContacts") or []
        if not isinstance(assigned, list):
            assigned = []

        return cls(
            id=doc_id,
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            category=TaskCategory.from_str(data.get("category")),
            priority=str(data.get("priority") or DEFAULT_PRIORITY),
            stage=Stage.from_str(data.get("status")),
            assigned_contacts=[str(contact_id) for contact_id in assigned if contact_id],
            subtasks=subtasks,
            due_date=parse_timestamp(data.get("dueDate")),
            created_at=parse_timestamp(data.get("createdAt")),
            updated_at=parse_timestamp(data.get("updatedAt")),
            color=_coerce_color(data.get("color")),
        )


class TaskCreate(BaseModel):
    """Task creation model"""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    title: str
    description: str = ""
    category: TaskCategory
    priority: Priority = Priority.MEDIUM
    stage: Stage = Field(Stage.TODO, alias="status")
    assigned_contacts: List[str] = Field(default_factory=list, alias="assignedContacts")
    subtasks: List[Subtask] = Field(default_factory=list)
    due_date: Optional[datetime] = Field(None, alias="dueDate")
    color: Optional[int] = Field(None, ge=1, le=PALETTE_SIZE)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be empty")
        return value


class TaskUpdate(BaseModel):
    """Task update model (only fields that were set are written)"""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[TaskCategory] = None
    priority: Optional[Priority] = None
    stage: Optional[Stage] = Field(None, alias="status")
    assigned_contacts: Optional[List[str]] = Field(None, alias="assignedContacts")
    subtasks: Optional[List[Subtask]] = None
    due_date: Optional[datetime] = Field(None, alias="dueDate")
    color: Optional[int] = Field(None, ge=1, le=PALETTE_SIZE)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("title must not be empty")
        return value

    def to_document(self) -> Dict[str, Any]:
        """Partial document with the store's field names"""
        return self.model_dump(by_alias=True, exclude_unset=True)


def _coerce_color(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None

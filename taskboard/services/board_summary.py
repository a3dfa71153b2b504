"""
Board summary (dashboard figures)
"""

from datetime import datetime
from typing import Dict, Iterable, Optional
from pydantic import BaseModel, Field
from taskboard.models.task import Task, Stage, Priority


class BoardSummary(BaseModel):
    """Counts shown on the dashboard"""
    total: int = 0
    per_stage: Dict[str, int] = Field(default_factory=lambda: {stage.value: 0 for stage in Stage})
    urgent: int = 0
    next_deadline: Optional[datetime] = None


def summarize_tasks(tasks: Iterable[Task]) -> BoardSummary:
    """
    Count tasks per stage and find the nearest deadline

    Args:
        tasks: Mirrored tasks

    Returns:
        BoardSummary; next_deadline ignores tasks that are done
    """
    summary = BoardSummary()
    for task in tasks:
        summary.total += 1
        summary.per_stage[task.stage.value] += 1
        if task.priority.lower() == Priority.URGENT.value:
            summary.urgent += 1
        if task.due_date is not None and task.stage != Stage.DONE:
            if summary.next_deadline is None or task.due_date < summary.next_deadline:
                summary.next_deadline = task.due_date
    return summary

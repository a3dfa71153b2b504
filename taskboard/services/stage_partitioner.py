"""
Stage partitioning for the board view
"""

from typing import Dict, Iterable, List
from taskboard.config.constants import PRIORITY_RANK
from taskboard.models.task import Task, Stage

Board = Dict[Stage, List[Task]]


def priority_rank(priority: str) -> int:
    """
    Sort weight of a priority (urgent 4, high 3, medium 2, low 1)

    Args:
        priority: Priority string, any case

    Returns:
        Rank, 0 for unknown priorities
    """
    if not isinstance(priority, str):
        return 0
    return PRIORITY_RANK.get(priority.lower(), 0)


def empty_board() -> Board:
    return {stage: [] for stage in Stage}


def partition_tasks(tasks: Iterable[Task]) -> Board:
    """
    Group tasks by stage and sort each group by priority

    Every stage is present in the result (possibly empty). Tasks keep their
    input order within equal priorities.

    Args:
        tasks: Tasks in mirror order

    Returns:
        Mapping stage -> tasks, highest priority first
    """
    board = empty_board()
    for task in tasks:
        stage = task.stage if isinstance(task.stage, Stage) else Stage.from_str(task.stage)
        board[stage].append(task)

    for stage, column in board.items():
        # sorted() is stable
        board[stage] = sorted(column, key=lambda task: priority_rank(task.priority), reverse=True)

    return board


def filter_tasks(tasks: Iterable[Task], term: str) -> List[Task]:
    """Tasks whose title or description contains term (case-insensitive)"""
    needle = (term or "").strip().lower()
    if not needle:
        return list(tasks)
    return [
        task for task in tasks
        if needle in task.title.lower() or needle in task.description.lower()
    ]

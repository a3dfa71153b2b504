"""
Board reorder controller (drag and drop between columns)
"""

from typing import Optional, Union
from taskboard.models.task import Task, Stage, TaskUpdate
from taskboard.services.entity_mirror import TaskMirror
from taskboard.services.notification_service import NotificationChannel
from taskboard.services.stage_partitioner import Board, filter_tasks
from taskboard.services.task_service import TaskService
from taskboard.utils.error_handler import format_error_message
from taskboard.utils.formatters import format_task_moved
from taskboard.utils.observable import ObservableValue
from taskboard.utils.logger import logger


def _parse_stage(value: Union[Stage, str]) -> Optional[Stage]:
    if isinstance(value, Stage):
        return value
    try:
        return Stage(value)
    except ValueError:
        return None


class BoardReorderController:
    """
    Moves tasks between board columns

    ``view`` holds the columns as shown to the user: the mirror's board,
    filtered by the current search term, plus any optimistic move that the
    store has not confirmed yet. Every board push from the mirror replaces it.
    """

    def __init__(
        self,
        task_mirror: TaskMirror,
        task_service: TaskService,
        notifications: NotificationChannel,
    ):
        self.task_mirror = task_mirror
        self.task_service = task_service
        self.notifications = notifications
        self.logger = logger
        self.search_term = ""
        self.view: ObservableValue[Board] = ObservableValue(
            self._filtered(task_mirror.board.value), "BoardController.view"
        )
        self._unsubscribe = task_mirror.board.subscribe(self._on_board)

    @property
    def columns(self) -> Board:
        return self.view.value

    def apply_search(self, term: str) -> None:
        """Filter the columns by title or description; an empty term shows all"""
        self.search_term = (term or "").strip()
        self.logger.debug(f"[BoardController] Search term: '{self.search_term}'")
        self.view.set(self._filtered(self.task_mirror.board.value))

    async def move(
        self,
        task: Task,
        from_stage: Union[Stage, str],
        to_stage: Union[Stage, str],
        destination_index: int,
    ) -> bool:
        """
        Move a task into another column

        The local columns change at once; the store gets one stage update.
        Order inside a column follows priority, so a drop inside the same
        column writes nothing.

        Args:
            task: Dragged task
            from_stage: Column it was dragged from
            to_stage: Column it was dropped on
            destination_index: Drop position in the target column

        Returns:
            True if the store accepted the new stage
        """
        source = _parse_stage(from_stage)
        target = _parse_stage(to_stage)
        if source is None or target is None:
            bad = from_stage if source is None else to_stage
            self.logger.warning(f"[BoardController] Rejected move of {task.id} to unknown stage '{bad}'")
            self.notifications.show_error(f"Unknown board column '{bad}'", title="Move not possible")
            return False

        if source == target:
            self.logger.debug(f"[BoardController] {task.id} dropped inside '{source.value}', nothing to write")
            return False

        self._apply_local_move(task, source, target, destination_index)

        try:
            await self.task_service.update_task(task.id, TaskUpdate(stage=target))
        except Exception as e:
            # Rejected writes push nothing; restore the last snapshot
            self.view.set(self._filtered(self.task_mirror.board.value))
            self.logger.error(f"[BoardController] Failed to move {task.id} to '{target.value}': {e}")
            self.notifications.show_error(format_error_message(e), title="Task status could not be updated")
            return False

        self.logger.info(f"[BoardController] Moved {task.id}: {source.value} -> {target.value}")
        self.notifications.show_success(format_task_moved(source, target), title="Task status updated")
        return True

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _apply_local_move(self, task: Task, source: Stage, target: Stage, destination_index: int) -> None:
        columns = {stage: list(column) for stage, column in self.columns.items()}
        source_column = columns.setdefault(source, [])
        target_column = columns.setdefault(target, [])

        for index, candidate in enumerate(source_column):
            if candidate.id == task.id:
                del source_column[index]
                break

        position = max(0, min(destination_index, len(target_column)))
        target_column.insert(position, task.model_copy(update={"stage": target}))
        self.view.set(columns)

    def _on_board(self, board: Board) -> None:
        self.view.set(self._filtered(board))

    def _filtered(self, board: Board) -> Board:
        if not self.search_term:
            return {stage: list(column) for stage, column in board.items()}
        return {stage: filter_tasks(column, self.search_term) for stage, column in board.items()}

"""
Two-step delete confirmation

The first request for an item shows a warning with Cancel / Delete buttons.
Confirming (button, or a second request for the same item) deletes it.
Without an answer the request lapses after DELETE_CONFIRM_TIMEOUT seconds.
"""

import asyncio
import inspect
from enum import Enum
from typing import Any, Awaitable, Callable, Optional
from taskboard.config.constants import DELETE_CONFIRM_TIMEOUT
from taskboard.models.notification import NotificationAction, NotificationConfig
from taskboard.services.notification_service import NotificationChannel
from taskboard.utils.error_handler import format_error_message
from taskboard.utils.formatters import format_delete_prompt, format_deleted
from taskboard.utils.logger import logger


class DeleteState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"


class DeleteConfirmationController:
    """Holds at most one pending deletion"""

    def __init__(
        self,
        notifications: NotificationChannel,
        delete_fn: Callable[[str], Awaitable[None]],
        on_deleted: Optional[Callable[[str], Any]] = None,
        timeout: float = DELETE_CONFIRM_TIMEOUT,
        kind: str = "task",
        describe: Optional[Callable[[str], Optional[str]]] = None,
    ):
        """
        Initialize delete confirmation

        Args:
            notifications: Channel for the prompt and the outcome
            delete_fn: Coroutine function deleting an item by id
            on_deleted: Called with the id after a successful delete
            timeout: Seconds until an unanswered request lapses
            kind: Item name used in messages ("task", "contact")
            describe: Returns a display label for an id (title, name)
        """
        self.notifications = notifications
        self.delete_fn = delete_fn
        self.on_deleted = on_deleted
        self.timeout = timeout
        self.kind = kind
        self.describe = describe or (lambda target_id: None)
        self.logger = logger
        self._target: Optional[str] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._prompt: Optional[NotificationConfig] = None

    @property
    def state(self) -> DeleteState:
        return DeleteState.PENDING if self._target is not None else DeleteState.IDLE

    @property
    def pending_target(self) -> Optional[str]:
        return self._target

    async def request(self, target_id: str) -> bool:
        """
        Ask to delete an item

        Args:
            target_id: Id of the item

        Returns:
            True if the item was deleted by this call (second request)
        """
        if self._target == target_id:
            self.logger.info(f"[DeleteConfirmation] Second request for {target_id}, deleting")
            return await self.confirm()

        if self._target is not None:
            self.logger.info(f"[DeleteConfirmation] Dropping pending {self._target} for {target_id}")
            self._reset()

        self._target = target_id
        self._timer = asyncio.get_running_loop().call_later(self.timeout, self._on_timeout, target_id)
        self.notifications.show_warning_with_actions(
            format_delete_prompt(self.kind, self.describe(target_id)),
            [
                NotificationAction(label="Cancel", handler=self.cancel),
                NotificationAction(label="Delete", handler=self.confirm),
            ],
        )
        self._prompt = self.notifications.current
        self.logger.info(f"[DeleteConfirmation] Waiting {self.timeout}s for confirmation of {target_id}")
        return False

    async def confirm(self) -> bool:
        """
        Delete the pending item

        Returns:
            True on success; False when idle or the delete failed
        """
        target_id = self._target
        if target_id is None:
            return False
        label = self.describe(target_id)
        self._reset()

        try:
            await self.delete_fn(target_id)
        except Exception as e:
            self.logger.error(f"[DeleteConfirmation] Failed to delete {self.kind} {target_id}: {e}")
            self.notifications.show_error(format_error_message(e), title=f"{self.kind.capitalize()} could not be deleted")
            return False

        self.logger.info(f"[DeleteConfirmation] Deleted {self.kind} {target_id}")
        self.notifications.show_success(format_deleted(self.kind, label))

        if self.on_deleted is not None:
            try:
                result = self.on_deleted(target_id)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self.logger.error(f"[DeleteConfirmation] Post-delete hook failed for {target_id}: {e}", exc_info=True)
        return True

    def cancel(self) -> None:
        """Drop the pending request and its prompt"""
        if self._target is None:
            return
        self.logger.info(f"[DeleteConfirmation] Deletion of {self._target} cancelled")
        prompt = self._prompt
        self._reset()
        if prompt is not None and self.notifications.current is prompt:
            self.notifications.hide()

    def _on_timeout(self, target_id: str) -> None:
        self._timer = None
        if self._target == target_id:
            self.logger.info(f"[DeleteConfirmation] Confirmation for {target_id} timed out")
            self._reset()

    def _reset(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._target = None
        self._prompt = None

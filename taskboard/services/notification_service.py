"""
Notification ("toast") channel

Holds at most one active notification. Showing a new one replaces the old one
and cancels its auto-hide timer.
"""

import asyncio
import inspect
from typing import Optional, List, Any
from taskboard.config.constants import (
    NOTIFICATION_DURATION_SUCCESS,
    NOTIFICATION_DURATION_ERROR,
    NOTIFICATION_DURATION_WARNING,
    NOTIFICATION_DURATION_WARNING_ACTION,
    NOTIFICATION_DURATION_INFO,
)
from taskboard.models.notification import NotificationConfig, NotificationType, NotificationAction
from taskboard.utils.observable import ObservableValue
from taskboard.utils.logger import logger


class NotificationChannel:
    """Single-slot notification state with auto-hide timers"""

    def __init__(self):
        self.state: ObservableValue[Optional[NotificationConfig]] = ObservableValue(None, "notification")
        self.logger = logger
        self._timer: Optional[asyncio.TimerHandle] = None
        self._waiters: List[asyncio.Future] = []

    @property
    def current(self) -> Optional[NotificationConfig]:
        return self.state.value

    def show(self, config: NotificationConfig) -> None:
        """
        Make config the active notification

        Args:
            config: Notification to show; duration 0 keeps it until hide()
        """
        self._cancel_timer()
        self._release_waiters()
        self.state.set(config)
        self.logger.debug(f"[Notifications] {config.type.value}: {config.message}")

        if config.duration > 0:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                self.logger.warning("[Notifications] No running event loop, notification will not auto-hide")
                return
            self._timer = loop.call_later(config.duration / 1000, self._expire, config)

    def hide(self) -> None:
        """Clear the active notification"""
        self._cancel_timer()
        if self.state.value is not None:
            self.state.set(None)
        self._release_waiters()

    def show_success(self, message: str, title: Optional[str] = None) -> None:
        self.show(NotificationConfig(
            type=NotificationType.SUCCESS, message=message, title=title,
            duration=NOTIFICATION_DURATION_SUCCESS,
        ))

    def show_error(self, message: str, title: Optional[str] = None) -> None:
        self.show(NotificationConfig(
            type=NotificationType.ERROR, message=message, title=title,
            duration=NOTIFICATION_DURATION_ERROR,
        ))

    def show_warning(self, message: str, title: Optional[str] = None) -> None:
        self.show(NotificationConfig(
            type=NotificationType.WARNING, message=message, title=title,
            duration=NOTIFICATION_DURATION_WARNING,
        ))

    def show_warning_with_action(
        self,
        message: str,
        action: NotificationAction,
        title: Optional[str] = None,
    ) -> None:
        self.show_warning_with_actions(message, [action], title)

    def show_warning_with_actions(
        self,
        message: str,
        actions: List[NotificationAction],
        title: Optional[str] = None,
    ) -> None:
        self.show(NotificationConfig(
            type=NotificationType.WARNING, message=message, title=title,
            duration=NOTIFICATION_DURATION_WARNING_ACTION, actions=list(actions),
        ))

    def show_info(self, message: str, title: Optional[str] = None) -> None:
        self.show(NotificationConfig(
            type=NotificationType.INFO, message=message, title=title,
            duration=NOTIFICATION_DURATION_INFO,
        ))

    async def run_action(self, index: int) -> Any:
        """
        Invoke an action button of the active notification

        Args:
            index: Position of the action

        Returns:
            Whatever the handler returned

        Raises:
            IndexError: If there is no such action
        """
        config = self.state.value
        if config is None or not 0 <= index < len(config.actions):
            raise IndexError(f"No notification action at index {index}")

        action = config.actions[index]
        self.logger.debug(f"[Notifications] Action '{action.label}' selected")
        result = action.handler()
        if inspect.isawaitable(result):
            result = await result
        return result

    async def wait_closed(self) -> None:
        """Wait until the active notification is hidden or replaced"""
        if self.state.value is None:
            return
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        await waiter

    def _expire(self, config: NotificationConfig) -> None:
        self._timer = None
        if self.state.value is config:
            self.hide()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _release_waiters(self) -> None:
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)

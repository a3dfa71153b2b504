"""
Tests for two-step delete confirmation
"""

import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock
from taskboard.config.constants import DELETE_CONFIRM_TIMEOUT
from taskboard.models.notification import NotificationType
from taskboard.services.delete_confirmation import DeleteConfirmationController, DeleteState
from taskboard.utils.error_handler import StoreError


@pytest.fixture
def delete_fn():
    return AsyncMock(return_value=None)


@pytest.fixture
def confirmation(notifications, delete_fn):
    """Controller with a short timeout"""
    return DeleteConfirmationController(notifications, delete_fn, timeout=0.05, kind="task")


def test_default_timeout(notifications, delete_fn):
    """Test pending requests lapse after five seconds by default"""
    controller = DeleteConfirmationController(notifications, delete_fn)

    assert controller.timeout == DELETE_CONFIRM_TIMEOUT == 5.0
    assert controller.state == DeleteState.IDLE


@pytest.mark.asyncio
async def test_first_request_asks_for_confirmation(confirmation, notifications, delete_fn):
    """Test the first request shows a warning with Cancel and Delete"""
    deleted = await confirmation.request("task-001")

    assert deleted is False
    assert confirmation.state == DeleteState.PENDING
    assert confirmation.pending_target == "task-001"
    assert notifications.current.type == NotificationType.WARNING
    assert [action.label for action in notifications.current.actions] == ["Cancel", "Delete"]
    delete_fn.assert_not_called()


@pytest.mark.asyncio
async def test_second_request_deletes(confirmation, notifications, delete_fn):
    """Test requesting the same id twice deletes it at once"""
    await confirmation.request("task-001")
    deleted = await confirmation.request("task-001")

    assert deleted is True
    delete_fn.assert_awaited_once_with("task-001")
    assert confirmation.state == DeleteState.IDLE
    assert notifications.current.type == NotificationType.SUCCESS


@pytest.mark.asyncio
async def test_timeout_returns_to_idle(confirmation, delete_fn):
    """Test an unanswered request lapses without deleting"""
    await confirmation.request("task-001")

    await asyncio.sleep(0.12)

    assert confirmation.state == DeleteState.IDLE
    delete_fn.assert_not_called()

    # A request after the timeout starts over
    assert await confirmation.request("task-001") is False


@pytest.mark.asyncio
async def test_other_id_replaces_pending(confirmation, delete_fn):
    """Test a request for another item clears the old one first"""
    await confirmation.request("task-001")
    await confirmation.request("task-002")

    assert confirmation.pending_target == "task-002"

    await confirmation.confirm()
    delete_fn.assert_awaited_once_with("task-002")


@pytest.mark.asyncio
async def test_replaced_request_timer_cancelled(notifications, delete_fn):
    """Test the first request's timer does not clear the second request"""
    controller = DeleteConfirmationController(notifications, delete_fn, timeout=0.05)
    await controller.request("task-001")
    await asyncio.sleep(0.03)
    await controller.request("task-002")
    await asyncio.sleep(0.03)

    # First timer would have fired by now
    assert controller.pending_target == "task-002"


@pytest.mark.asyncio
async def test_cancel_hides_prompt(confirmation, notifications, delete_fn):
    """Test cancel returns to idle and removes the confirmation notification"""
    await confirmation.request("task-001")

    confirmation.cancel()

    assert confirmation.state == DeleteState.IDLE
    assert notifications.current is None
    delete_fn.assert_not_called()
    await asyncio.sleep(0.08)
    assert confirmation.state == DeleteState.IDLE


@pytest.mark.asyncio
async def test_cancel_keeps_foreign_notification(confirmation, notifications):
    """Test cancel does not hide a notification shown by someone else"""
    await confirmation.request("task-001")
    notifications.show_info("Something else")

    confirmation.cancel()

    assert notifications.current.message == "Something else"


@pytest.mark.asyncio
async def test_delete_button_confirms(confirmation, notifications, delete_fn):
    """Test the Delete action of the prompt deletes the item"""
    await confirmation.request("task-001")

    await notifications.run_action(1)

    delete_fn.assert_awaited_once_with("task-001")


@pytest.mark.asyncio
async def test_cancel_button(confirmation, notifications, delete_fn):
    """Test the Cancel action of the prompt"""
    await confirmation.request("task-001")

    await notifications.run_action(0)

    assert confirmation.state == DeleteState.IDLE
    delete_fn.assert_not_called()


@pytest.mark.asyncio
async def test_failed_delete(notifications):
    """Test a failed delete shows an error and still returns to idle"""
    delete_fn = AsyncMock(side_effect=StoreError("denied", "permission-denied"))
    on_deleted = MagicMock()
    controller = DeleteConfirmationController(notifications, delete_fn, on_deleted=on_deleted, timeout=0.05)

    await controller.request("task-001")
    deleted = await controller.confirm()

    assert deleted is False
    assert controller.state == DeleteState.IDLE
    assert notifications.current.type == NotificationType.ERROR
    on_deleted.assert_not_called()


@pytest.mark.asyncio
async def test_post_delete_hook(notifications, delete_fn):
    """Test the hook runs with the deleted id (sync or async)"""
    on_deleted = AsyncMock()
    controller = DeleteConfirmationController(notifications, delete_fn, on_deleted=on_deleted, timeout=0.05)

    await controller.request("contact-001")
    await controller.confirm()

    on_deleted.assert_awaited_once_with("contact-001")


@pytest.mark.asyncio
async def test_confirm_when_idle(confirmation, delete_fn):
    """Test confirm without a pending request does nothing"""
    assert await confirmation.confirm() is False
    delete_fn.assert_not_called()


@pytest.mark.asyncio
async def test_prompt_names_item(notifications, delete_fn):
    """Test the prompt uses the label of the item"""
    controller = DeleteConfirmationController(
        notifications, delete_fn, timeout=0.05, kind="contact", describe=lambda _: "Anna Schmidt"
    )

    await controller.request("contact-001")

    assert "Anna Schmidt" in notifications.current.message
    await controller.confirm()
    assert notifications.current.message == "Contact 'Anna Schmidt' deleted"

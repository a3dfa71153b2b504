"""
Main application entry point
"""

import asyncio
from typing import Optional
from taskboard.api.document_store import DocumentStore
from taskboard.api.firestore_client import FirestoreClient
from taskboard.api.memory_store import InMemoryDocumentStore
from taskboard.config.constants import DELETE_CONFIRM_TIMEOUT
from taskboard.config.settings import settings
from taskboard.services.board_controller import BoardReorderController
from taskboard.services.contact_service import ContactService
from taskboard.services.delete_confirmation import DeleteConfirmationController
from taskboard.services.entity_mirror import TaskMirror, ContactMirror
from taskboard.services.id_generator import SequentialIdGenerator
from taskboard.services.notification_service import NotificationChannel
from taskboard.services.task_service import TaskService
from taskboard.utils.logger import logger


def create_store() -> DocumentStore:
    """
    Create the document store selected by STORE_BACKEND

    Returns:
        FirestoreClient or InMemoryDocumentStore
    """
    settings.validate()
    if settings.STORE_BACKEND == "firestore":
        logger.info(f"[Startup] Using Firestore project '{settings.FIREBASE_PROJECT_ID}'")
        return FirestoreClient()
    logger.info("[Startup] Using in-memory document store")
    return InMemoryDocumentStore()


class BoardSession:
    """
    Everything one board session needs, wired together once

    Must be created inside a running event loop: the mirrors open their
    subscriptions on construction.
    """

    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        delete_timeout: float = DELETE_CONFIRM_TIMEOUT,
    ):
        """
        Initialize board session

        Args:
            store: Document store (created from settings if not given)
            delete_timeout: Seconds a delete request waits for confirmation
        """
        self.store = store or create_store()
        self.notifications = NotificationChannel()
        self.id_generator = SequentialIdGenerator(self.store)
        self.task_service = TaskService(self.store, self.id_generator)
        self.contact_service = ContactService(self.store, self.id_generator)
        self.task_mirror = TaskMirror(self.store, self.notifications)
        self.contact_mirror = ContactMirror(self.store, self.notifications)
        self.board = BoardReorderController(self.task_mirror, self.task_service, self.notifications)
        self.task_deletion = DeleteConfirmationController(
            self.notifications,
            self.task_service.delete_task,
            timeout=delete_timeout,
            kind="task",
            describe=self._task_title,
        )
        self.contact_deletion = DeleteConfirmationController(
            self.notifications,
            self.contact_service.delete_contact,
            timeout=delete_timeout,
            kind="contact",
            describe=self._contact_name,
        )
        self.logger = logger
        self.logger.info("[BoardSession] Session ready")

    def _task_title(self, task_id: str) -> Optional[str]:
        task = self.task_mirror.get(task_id)
        return task.title if task else None

    def _contact_name(self, contact_id: str) -> Optional[str]:
        contact = self.contact_mirror.get(contact_id)
        return contact.name if contact else None

    async def close(self):
        """Stop listening and release the store"""
        self.task_deletion.cancel()
        self.contact_deletion.cancel()
        self.notifications.hide()
        self.board.close()
        self.task_mirror.close()
        self.contact_mirror.close()
        await self.store.close()
        self.logger.info("[BoardSession] Session closed")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


async def main():
    """Main entry point"""
    import uvicorn
    from taskboard.web.main import app

    settings.validate()
    config = uvicorn.Config(
        app,
        host="0.0.0.0",
        port=settings.WEB_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
    server = uvicorn.Server(config)

    try:
        await server.serve()
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        raise


if __name__ == "__main__":
    asyncio.run(main())

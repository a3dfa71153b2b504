"""
Entity mirrors

A mirror keeps the typed, in-memory copy of one remote collection. It holds a
single subscription; every push replaces the whole entity list.
"""

from typing import Callable, Dict, Generic, Iterable, List, Optional, TypeVar
from pydantic import ValidationError as PydanticValidationError
from taskboard.api.document_store import DocumentStore, Document, Unsubscribe
from taskboard.config.constants import SUBSCRIPTION_ERROR_THRESHOLD
from taskboard.config.settings import settings
from taskboard.models.contact import Contact
from taskboard.models.task import Task
from taskboard.services.board_summary import BoardSummary, summarize_tasks
from taskboard.services.notification_service import NotificationChannel
from taskboard.services.stage_partitioner import Board, partition_tasks
from taskboard.utils.observable import ObservableValue, DerivedValue
from taskboard.utils.logger import logger

E = TypeVar("E")

EntityBuilder = Callable[[str, Document], E]


class EntityMirror(Generic[E]):
    """Reactive mirror of a remote collection"""

    def __init__(
        self,
        store: DocumentStore,
        collection: str,
        builder: EntityBuilder,
        notifications: Optional[NotificationChannel] = None,
        name: str = "EntityMirror",
    ):
        """
        Initialize mirror and open its subscription

        Args:
            store: Document store to listen to
            collection: Collection name
            builder: Turns (doc_id, raw document) into an entity
            notifications: Channel for repeated subscription failures
            name: Tag used in log messages
        """
        self.store = store
        self.collection = collection
        self.builder = builder
        self.notifications = notifications
        self.name = name
        self.logger = logger
        self.entities: ObservableValue[List[E]] = ObservableValue([], f"{name}.entities")
        self.error_count = 0
        self.loaded = False
        self._derived: List[DerivedValue] = []
        self._closed = False
        self._unsubscribe: Optional[Unsubscribe] = store.subscribe(collection, self._on_snapshot, self._on_error)
        self.logger.info(f"[{self.name}] Subscribed to '{collection}'")

    @property
    def items(self) -> List[E]:
        """Current snapshot"""
        return self.entities.value

    @property
    def closed(self) -> bool:
        return self._closed

    def derive(self, transform: Callable[[List[E]], object], name: str) -> DerivedValue:
        derived = self.entities.map(transform, f"{self.name}.{name}")
        self._derived.append(derived)
        return derived

    def close(self) -> None:
        """Release the subscription (safe to call more than once)"""
        if self._closed:
            return
        self._closed = True
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        for derived in self._derived:
            derived.detach()
        self.logger.info(f"[{self.name}] Unsubscribed from '{self.collection}'")

    def _build(self, documents: Iterable[Document]) -> List[E]:
        entities = []
        for document in documents:
            doc_id = str(document.get("id") or "")
            if not doc_id:
                self.logger.warning(f"[{self.name}] Skipping document without id")
                continue
            try:
                entities.append(self.builder(doc_id, document))
            except (PydanticValidationError, TypeError, ValueError) as e:
                self.logger.warning(f"[{self.name}] Skipping malformed document {doc_id}: {e}")
        return entities

    def _on_snapshot(self, documents: List[Document]) -> None:
        if self._closed:
            return
        entities = self._build(documents)
        if self.error_count:
            self.logger.info(f"[{self.name}] Subscription recovered after {self.error_count} errors")
        self.error_count = 0
        self.loaded = True
        self.entities.set(entities)
        self.logger.debug(f"[{self.name}] Snapshot applied: {len(entities)} entities")

    def _on_error(self, error: Exception) -> None:
        self.error_count += 1
        self.logger.error(
            f"[{self.name}] Subscription error ({self.error_count} in a row), "
            f"keeping last snapshot of {len(self.items)} entities: {error}"
        )
        if self.error_count == SUBSCRIPTION_ERROR_THRESHOLD and self.notifications is not None:
            self.notifications.show_error(f"Lost connection to {self.collection}. Showing last known data.")


class TaskMirror(EntityMirror[Task]):
    """Mirror of the tasks collection with the board view derived from it"""

    def __init__(
        self,
        store: DocumentStore,
        notifications: Optional[NotificationChannel] = None,
        collection: Optional[str] = None,
    ):
        super().__init__(
            store,
            collection or settings.TASKS_COLLECTION,
            Task.from_document,
            notifications,
            name="TaskMirror",
        )
        self.board: DerivedValue[Board] = self.derive(partition_tasks, "board")
        self.summary: DerivedValue[BoardSummary] = self.derive(summarize_tasks, "summary")

    def get(self, task_id: str) -> Optional[Task]:
        return next((task for task in self.items if task.id == task_id), None)


def group_contacts(contacts: Iterable[Contact]) -> Dict[str, List[Contact]]:
    """
    Group contacts by the upper-cased first letter of their name

    Contacts without a name are left out. Groups are ordered by letter,
    contacts by name.
    """
    directory: Dict[str, List[Contact]] = {}
    for contact in sorted(contacts, key=lambda c: c.name.lower()):
        name = contact.name.strip()
        if not name:
            continue
        directory.setdefault(name[0].upper(), []).append(contact)
    return dict(sorted(directory.items()))


class ContactMirror(EntityMirror[Contact]):
    """Mirror of the contacts collection"""

    def __init__(
        self,
        store: DocumentStore,
        notifications: Optional[NotificationChannel] = None,
        collection: Optional[str] = None,
    ):
        super().__init__(
            store,
            collection or settings.CONTACTS_COLLECTION,
            Contact.from_document,
            notifications,
            name="ContactMirror",
        )
        self.directory: DerivedValue[Dict[str, List[Contact]]] = self.derive(group_contacts, "directory")

    def get(self, contact_id: str) -> Optional[Contact]:
        return next((contact for contact in self.items if contact.id == contact_id), None)

    def resolve(self, contact_ids: Iterable[str]) -> List[Contact]:
        """
        Look up contacts by id, in the given order

        Ids of deleted contacts are dropped silently.
        """
        by_id = {contact.id: contact for contact in self.items}
        return [by_id[contact_id] for contact_id in contact_ids if contact_id in by_id]

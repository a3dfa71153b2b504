"""
Process-local document store

Used for local runs (STORE_BACKEND=memory) and tests. Every write pushes a
fresh snapshot to the collection's listeners before the write coroutine returns.
"""

import copy
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple
from taskboard.api.document_store import (
    DocumentStore,
    Document,
    SnapshotCallback,
    ErrorCallback,
    Unsubscribe,
    SERVER_TIMESTAMP,
)
from taskboard.utils.date_utils import utc_now
from taskboard.utils.error_handler import DocumentExistsError, DocumentNotFoundError
from taskboard.utils.logger import logger


class InMemoryDocumentStore(DocumentStore):
    """Dict-backed store with synchronous snapshot fan-out"""

    def __init__(
        self,
        initial: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize in-memory store

        Args:
            initial: Seed data as {collection: {doc_id: fields}}
            clock: Source for SERVER_TIMESTAMP values
        """
        self.clock = clock
        self.logger = logger
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = copy.deepcopy(initial or {})
        self._listeners: Dict[str, List[Tuple[SnapshotCallback, ErrorCallback]]] = {}

    def subscribe(
        self,
        collection: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Unsubscribe:
        listener = (on_snapshot, on_error)
        self._listeners.setdefault(collection, []).append(listener)
        self.logger.debug(f"[MemoryStore] Listener added to '{collection}'")
        self._deliver(collection, listener, self._snapshot(collection))

        def unsubscribe() -> None:
            listeners = self._listeners.get(collection, [])
            if listener in listeners:
                listeners.remove(listener)
                self.logger.debug(f"[MemoryStore] Listener removed from '{collection}'")

        return unsubscribe

    def listener_count(self, collection: str) -> int:
        return len(self._listeners.get(collection, []))

    async def list_documents(self, collection: str) -> List[Document]:
        return self._snapshot(collection)

    async def get_document(self, collection: str, doc_id: str) -> Optional[Document]:
        data = self._collections.get(collection, {}).get(doc_id)
        if data is None:
            return None
        return {**copy.deepcopy(data), "id": doc_id}

    async def create_document(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        documents = self._collections.setdefault(collection, {})
        if doc_id in documents:
            raise DocumentExistsError(f"Document {collection}/{doc_id} already exists", "already-exists")
        documents[doc_id] = self._resolve(data)
        self._push(collection)

    async def set_document(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self._collections.setdefault(collection, {})[doc_id] = self._resolve(data)
        self._push(collection)

    async def update_document(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        documents = self._collections.get(collection, {})
        if doc_id not in documents:
            raise DocumentNotFoundError(f"Document {collection}/{doc_id} not found", "not-found")
        documents[doc_id].update(self._resolve(data))
        self._push(collection)

    async def delete_document(self, collection: str, doc_id: str) -> None:
        if self._collections.get(collection, {}).pop(doc_id, None) is not None:
            self._push(collection)

    async def close(self) -> None:
        self._listeners.clear()

    def _resolve(self, data: Dict[str, Any]) -> Dict[str, Any]:
        now = self.clock()
        return {
            key: now if value is SERVER_TIMESTAMP else copy.deepcopy(value)
            for key, value in data.items()
            if key != "id"
        }

    def _snapshot(self, collection: str) -> List[Document]:
        documents = self._collections.get(collection, {})
        return [
            {**copy.deepcopy(documents[doc_id]), "id": doc_id}
            for doc_id in sorted(documents)
        ]

    def _push(self, collection: str) -> None:
        listeners = list(self._listeners.get(collection, []))
        if not listeners:
            return
        snapshot = self._snapshot(collection)
        for listener in listeners:
            # Each listener gets its own copy
            self._deliver(collection, listener, copy.deepcopy(snapshot))

    def _deliver(self, collection: str, listener: Tuple[SnapshotCallback, ErrorCallback], snapshot: List[Document]) -> None:
        on_snapshot, _ = listener
        try:
            on_snapshot(snapshot)
        except Exception as e:
            self.logger.error(f"[MemoryStore] Snapshot listener for '{collection}' failed: {e}", exc_info=True)

"""
Remote document collection contract

A store holds named collections of keyed documents. Documents travel as plain
dicts carrying their key under "id". Writes are coroutines; ``subscribe``
pushes the full current snapshot of a collection whenever anything in it
changes (the first push happens right after subscribing).
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

Document = Dict[str, Any]
SnapshotCallback = Callable[[List[Document]], None]
ErrorCallback = Callable[[Exception], None]
Unsubscribe = Callable[[], None]


class _ServerTimestamp:
    """Placeholder resolved to the store's clock when the write is applied"""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


class DocumentStore(ABC):
    """Keyed document collections with real-time snapshot push"""

    @abstractmethod
    def subscribe(
        self,
        collection: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Unsubscribe:
        """Listen to a collection; returns a function that stops listening"""

    @abstractmethod
    async def list_documents(self, collection: str) -> List[Document]:
        """All documents of a collection, ordered by id"""

    @abstractmethod
    async def get_document(self, collection: str, doc_id: str) -> Optional[Document]:
        """One document, or None if it does not exist"""

    @abstractmethod
    async def create_document(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Write a new document; raises DocumentExistsError if the id is taken"""

    @abstractmethod
    async def set_document(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Create or fully replace a document"""

    @abstractmethod
    async def update_document(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Merge fields into an existing document; raises DocumentNotFoundError"""

    @abstractmethod
    async def delete_document(self, collection: str, doc_id: str) -> None:
        """Delete a document (deleting a missing document is not an error)"""

    async def close(self) -> None:
        """Release connections and listeners"""

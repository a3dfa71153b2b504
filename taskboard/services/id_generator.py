"""
Sequential document id generation ("task-001", "contact-014", ...)
"""

import re
from typing import Iterable
from taskboard.api.document_store import DocumentStore
from taskboard.config.constants import ID_PAD_WIDTH
from taskboard.utils.logger import logger


def next_sequential_id(existing_ids: Iterable[str], prefix: str) -> str:
    """
    Next id after the highest numbered id with the given prefix

    Gaps are not filled: {p-001, p-002, p-005} -> p-006.

    Args:
        existing_ids: Ids currently in the collection
        prefix: Id prefix without the dash

    Returns:
        prefix-NNN, zero-padded to ID_PAD_WIDTH digits
    """
    pattern = re.compile(rf"^{re.escape(prefix)}-(\d+)$")
    highest = 0
    for doc_id in existing_ids:
        match = pattern.match(doc_id or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{prefix}-{highest + 1:0{ID_PAD_WIDTH}d}"


class SequentialIdGenerator:
    """Generates the next free sequential id of a collection"""

    def __init__(self, store: DocumentStore):
        """
        Initialize id generator

        Args:
            store: Document store to scan
        """
        self.store = store
        self.logger = logger

    async def next_id(self, collection: str, prefix: str) -> str:
        """
        Scan the collection and return the next sequential id

        Raises:
            StoreError: If the collection cannot be read
        """
        documents = await self.store.list_documents(collection)
        new_id = next_sequential_id((doc.get("id", "") for doc in documents), prefix)
        self.logger.debug(f"[IdGenerator] Next id in '{collection}': {new_id}")
        return new_id

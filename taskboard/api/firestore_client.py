"""
Firestore REST client

Implements the DocumentStore contract on top of the Firestore v1 REST API.
Real-time listening is done by polling the collection and pushing a snapshot
whenever its content changed.
"""

import asyncio
import re
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, List, Set
import httpx
from taskboard.api.base_client import BaseAPIClient
from taskboard.api.document_store import (
    DocumentStore,
    Document,
    SnapshotCallback,
    ErrorCallback,
    Unsubscribe,
    SERVER_TIMESTAMP,
)
from taskboard.config.settings import settings
from taskboard.config.constants import (
    FIRESTORE_API_BASE_URL,
    FIRESTORE_API_VERSION,
    FIRESTORE_PAGE_SIZE,
)
from taskboard.utils.date_utils import format_timestamp, parse_timestamp
from taskboard.utils.error_handler import (
    StoreError,
    SubscriptionError,
    WriteError,
    DocumentExistsError,
    DocumentNotFoundError,
)
from taskboard.utils.logger import logger

SIMPLE_FIELD_PATH = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def encode_value(value: Any) -> Dict[str, Any]:
    """
    Encode a Python value as a Firestore typed value

    Args:
        value: str, int, float, bool, None, datetime, list or dict

    Returns:
        Firestore Value object
    """
    if value is None:
        return {"nullValue": None}
    if isinstance(value, Enum):
        return encode_value(value.value)
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, datetime):
        return {"timestampValue": format_timestamp(value)}
    if isinstance(value, dict):
        return {"mapValue": {"fields": encode_fields(value)}}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(item) for item in value]}}
    raise TypeError(f"Cannot store value of type {type(value).__name__}")


def encode_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: encode_value(value) for key, value in data.items()}


def decode_value(value: Dict[str, Any]) -> Any:
    """Decode a Firestore typed value into a plain Python value"""
    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "timestampValue" in value:
        return parse_timestamp(value["timestampValue"])
    if "stringValue" in value:
        return value["stringValue"]
    if "arrayValue" in value:
        return [decode_value(item) for item in value["arrayValue"].get("values", [])]
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    # referenceValue, bytesValue, geoPointValue are passed through untouched
    return next(iter(value.values()), None)


def decode_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {key: decode_value(value) for key, value in fields.items()}


def _field_path(key: str) -> str:
    if SIMPLE_FIELD_PATH.match(key):
        return key
    escaped = key.replace("\\", "\\\\").replace("`", "\\`")
    return f"`{escaped}`"


class FirestoreClient(BaseAPIClient, DocumentStore):
    """Client for the Firestore REST API"""

    def __init__(
        self,
        project_id: Optional[str] = None,
        database: Optional[str] = None,
        api_key: Optional[str] = None,
        id_token: Optional[str] = None,
        poll_interval: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Firestore client

        Args:
            project_id: Firebase project id (defaults to settings)
            database: Database id, "(default)" unless configured
            api_key: Web API key sent as ?key=
            id_token: Firebase ID token of the signed-in user
            poll_interval: Seconds between polls of a subscribed collection
            transport: Custom httpx transport
        """
        self.project_id = project_id or settings.FIREBASE_PROJECT_ID
        if not self.project_id:
            raise ValueError("Firestore client needs a project id")

        super().__init__(FIRESTORE_API_BASE_URL, transport=transport)
        self.database = database or settings.FIRESTORE_DATABASE
        self.api_key = api_key if api_key is not None else settings.FIREBASE_API_KEY
        self.id_token = id_token if id_token is not None else settings.FIREBASE_ID_TOKEN
        self.poll_interval = poll_interval if poll_interval is not None else settings.POLL_INTERVAL
        self.logger = logger
        self._pollers: Set[asyncio.Task] = set()

    @property
    def database_path(self) -> str:
        return f"projects/{self.project_id}/databases/{self.database}"

    @property
    def documents_path(self) -> str:
        return f"{self.database_path}/documents"

    def _get_headers(self) -> Dict[str, str]:
        """Get request headers with authentication"""
        headers = {"Content-Type": "application/json"}
        if self.id_token:
            headers["Authorization"] = f"Bearer {self.id_token}"
        return headers

    def _get_params(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        params = dict(extra or {})
        if self.api_key:
            params["key"] = self.api_key
        return params

    def _document_name(self, collection: str, doc_id: str) -> str:
        return f"{self.documents_path}/{collection}/{doc_id}"

    # ── Reads ────────────────────────────────────────────────────────────────

    async def list_documents(self, collection: str) -> List[Document]:
        documents: List[Document] = []
        page_token: Optional[str] = None

        try:
            while True:
                params = {"pageSize": FIRESTORE_PAGE_SIZE}
                if page_token:
                    params["pageToken"] = page_token

                response = await self.get(
                    endpoint=f"/{FIRESTORE_API_VERSION}/{self.documents_path}/{collection}",
                    headers=self._get_headers(),
                    params=self._get_params(params),
                )

                for raw in response.get("documents", []):
                    documents.append(self._to_document(raw))

                page_token = response.get("nextPageToken")
                if not page_token:
                    break
        except httpx.HTTPError as e:
            raise self._translate_error(e, StoreError, f"Failed to list '{collection}'") from e

        self.logger.debug(f"[Firestore] Listed {len(documents)} documents from '{collection}'")
        return documents

    async def get_document(self, collection: str, doc_id: str) -> Optional[Document]:
        try:
            response = await self.get(
                endpoint=f"/{FIRESTORE_API_VERSION}/{self._document_name(collection, doc_id)}",
                headers=self._get_headers(),
                params=self._get_params(),
            )
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise self._translate_error(e, StoreError, f"Failed to read {collection}/{doc_id}") from e
        except httpx.HTTPError as e:
            raise self._translate_error(e, StoreError, f"Failed to read {collection}/{doc_id}") from e

        return self._to_document(response)

    # ── Writes ───────────────────────────────────────────────────────────────

    async def create_document(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        write = self._build_write(collection, doc_id, data)
        write["currentDocument"] = {"exists": False}
        await self._commit([write], f"create {collection}/{doc_id}")

    async def set_document(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        await self._commit([self._build_write(collection, doc_id, data)], f"set {collection}/{doc_id}")

    async def update_document(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        write = self._build_write(collection, doc_id, data, with_mask=True)
        write["currentDocument"] = {"exists": True}
        await self._commit([write], f"update {collection}/{doc_id}")

    async def delete_document(self, collection: str, doc_id: str) -> None:
        await self._commit([{"delete": self._document_name(collection, doc_id)}], f"delete {collection}/{doc_id}")

    def _build_write(
        self,
        collection: str,
        doc_id: str,
        data: Dict[str, Any],
        with_mask: bool = False,
    ) -> Dict[str, Any]:
        """
        Build a commit write for a document

        SERVER_TIMESTAMP values become REQUEST_TIME transforms; with_mask limits
        the write to the given fields (partial update).
        """
        fields = {}
        transforms = []
        for key, value in data.items():
            if key == "id":
                continue
            if value is SERVER_TIMESTAMP:
                transforms.append({"fieldPath": _field_path(key), "setToServerValue": "REQUEST_TIME"})
            else:
                fields[key] = value

        write: Dict[str, Any] = {
            "update": {
                "name": self._document_name(collection, doc_id),
                "fields": encode_fields(fields),
            }
        }
        if with_mask:
            write["updateMask"] = {"fieldPaths": [_field_path(key) for key in fields]}
        if transforms:
            write["updateTransforms"] = transforms
        return write

    async def _commit(self, writes: List[Dict[str, Any]], description: str) -> None:
        try:
            await self.post(
                endpoint=f"/{FIRESTORE_API_VERSION}/{self.documents_path}:commit",
                headers=self._get_headers(),
                params=self._get_params(),
                json_data={"writes": writes},
            )
        except httpx.HTTPError as e:
            raise self._translate_error(e, WriteError, f"Failed to {description}") from e
        self.logger.debug(f"[Firestore] Committed: {description}")

    # ── Subscription ─────────────────────────────────────────────────────────

    def subscribe(
        self,
        collection: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Unsubscribe:
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._poll(collection, on_snapshot, on_error))
        self._pollers.add(task)
        task.add_done_callback(self._pollers.discard)
        self.logger.info(f"[Firestore] Listening to '{collection}' (poll every {self.poll_interval}s)")

        def unsubscribe() -> None:
            if not task.done():
                task.cancel()
                self.logger.info(f"[Firestore] Stopped listening to '{collection}'")

        return unsubscribe

    async def _poll(self, collection: str, on_snapshot: SnapshotCallback, on_error: ErrorCallback) -> None:
        last_snapshot: Optional[List[Document]] = None
        while True:
            try:
                snapshot = await self.list_documents(collection)
            except StoreError as e:
                on_error(SubscriptionError(e.message, e.error_code))
            else:
                if snapshot != last_snapshot:
                    last_snapshot = snapshot
                    try:
                        on_snapshot(snapshot)
                    except Exception as e:
                        self.logger.error(f"[Firestore] Snapshot listener for '{collection}' failed: {e}", exc_info=True)
            await asyncio.sleep(self.poll_interval)

    async def close(self):
        for task in list(self._pollers):
            task.cancel()
        if self._pollers:
            await asyncio.gather(*self._pollers, return_exceptions=True)
        await super().close()

    # ── Helpers ──────────────────────────────────────────────────────────────

    @staticmethod
    def _to_document(raw: Dict[str, Any]) -> Document:
        doc_id = raw.get("name", "").rsplit("/", 1)[-1]
        return {**decode_fields(raw.get("fields", {})), "id": doc_id}

    @staticmethod
    def _translate_error(error: httpx.HTTPError, default: type, message: str) -> StoreError:
        if isinstance(error, httpx.HTTPStatusError):
            status = error.response.status_code
            if status == 409:
                return DocumentExistsError(f"{message}: document already exists", "already-exists")
            if status == 404:
                return DocumentNotFoundError(f"{message}: document not found", "not-found")
            if status in (401, 403):
                return default(f"{message}: permission denied", "permission-denied")
            return default(f"{message}: HTTP {status}", str(status))
        return default(f"{message}: {error}", "unavailable")

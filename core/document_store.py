"""
Document store collaborator.

The engine only needs "keyed records queryable by field equality/range".
DocumentStore is that contract; services receive an instance by constructor
injection so tests (and alternative backends) can swap it freely.

Records are plain JSON-compatible dicts. Every record returned by the store
is a COPY with its key under "id" - mutating it never touches stored state.

Implementations:
    - InMemoryDocumentStore: dict-of-dicts guarded by a lock (tests, dev)
    - JsonFileDocumentStore: in-memory store flushed to a JSON file on write

Thread Safety:
    Each single operation is atomic (one lock acquisition). Multi-step
    read-modify-write sequences built on top of the store are NOT atomic;
    the store offers no transactions.

Usage:
    store = InMemoryDocumentStore()
    order_id = store.create("orders", {"displayId": "007", "status": "RECEIVED"})
    matches = store.find("orders", Where("displayId", "==", "007"))
    store.update("orders", order_id, {"status": "DELIVERED"})
"""

from __future__ import annotations

import json
import os
import threading
import uuid
from abc import ABC, abstractmethod
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from .exceptions import StoreError


# Collections used by the engine
ORDERS = "orders"
SALES = "sales"
PURCHASES = "purchases"
LENS_INVENTORY = "lensInventory"
CUSTOMERS = "customers"
TRANSACTIONS = "transactions"
COUNTERS = "counters"


_OPERATORS = {
    "==": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    "<": lambda a, b: a < b,
    "<=": lambda a, b: a <= b,
    ">": lambda a, b: a > b,
    ">=": lambda a, b: a >= b,
}


@dataclass(frozen=True)
class Where:
    """
    A single field predicate for DocumentStore.find().

    Records missing the field never match, whatever the operator.
    Range comparisons between incomparable types are treated as no match.
    """

    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in _OPERATORS:
            raise ValueError(f"Unsupported operator: {self.op!r}")

    def matches(self, record: Dict[str, Any]) -> bool:
        if self.field not in record:
            return False
        try:
            return bool(_OPERATORS[self.op](record[self.field], self.value))
        except TypeError:
            return False


class DocumentStore(ABC):
    """Abstract keyed-record store."""

    @abstractmethod
    def find(self, collection: str, *conditions: Where) -> List[Dict[str, Any]]:
        """Return all records in collection matching every condition."""

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Return the record with this key, or None."""

    @abstractmethod
    def create(self, collection: str, data: Dict[str, Any]) -> str:
        """Insert a new record and return its generated key."""

    @abstractmethod
    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Insert or replace the record stored under an explicit key."""

    @abstractmethod
    def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Merge fields into an existing record. Raises StoreError if missing."""

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> None:
        """Remove a record. Raises StoreError if missing."""


class InMemoryDocumentStore(DocumentStore):
    """
    Lock-guarded in-memory store.

    Records keep insertion order, so find() results are deterministic.
    """

    def __init__(self, initial: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = None):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = deepcopy(initial or {})
        self._lock = threading.Lock()

    @staticmethod
    def _with_id(doc_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        record = deepcopy(data)
        record["id"] = doc_id
        return record

    @staticmethod
    def _strip_id(data: Dict[str, Any]) -> Dict[str, Any]:
        return {k: deepcopy(v) for k, v in data.items() if k != "id"}

    def find(self, collection: str, *conditions: Where) -> List[Dict[str, Any]]:
        with self._lock:
            docs = self._collections.get(collection, {})
            return [
                self._with_id(doc_id, data)
                for doc_id, data in docs.items()
                if all(c.matches(data) for c in conditions)
            ]

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            data = self._collections.get(collection, {}).get(doc_id)
            return self._with_id(doc_id, data) if data is not None else None

    def create(self, collection: str, data: Dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex[:20]
        with self._lock:
            self._collections.setdefault(collection, {})[doc_id] = self._strip_id(data)
            self._flush()
        return doc_id

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        with self._lock:
            self._collections.setdefault(collection, {})[doc_id] = self._strip_id(data)
            self._flush()

    def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        with self._lock:
            docs = self._collections.get(collection, {})
            if doc_id not in docs:
                raise StoreError("update", collection, doc_id, "document not found")
            docs[doc_id].update(self._strip_id(data))
            self._flush()

    def delete(self, collection: str, doc_id: str) -> None:
        with self._lock:
            docs = self._collections.get(collection, {})
            if doc_id not in docs:
                raise StoreError("delete", collection, doc_id, "document not found")
            del docs[doc_id]
            self._flush()

    def count(self, collection: str) -> int:
        """Number of records in a collection."""
        with self._lock:
            return len(self._collections.get(collection, {}))

    def _flush(self) -> None:
        """Persist hook, called with the lock held after every write."""


class JsonFileDocumentStore(InMemoryDocumentStore):
    """
    In-memory store backed by a single JSON file.

    The whole dataset is rewritten on every write (temp file + atomic
    replace). Suitable for a single-shop deployment, not for concurrency
    across processes.
    """

    def __init__(self, path: Path):
        self._path = Path(path)
        initial: Dict[str, Dict[str, Dict[str, Any]]] = {}
        if self._path.exists():
            try:
                with open(self._path, "r", encoding="utf-8") as f:
                    initial = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                raise StoreError("load", str(self._path), reason=str(e)) from e
        super().__init__(initial)

    @property
    def path(self) -> Path:
        return self._path

    def _flush(self) -> None:
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self._collections, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise StoreError("flush", str(self._path), reason=str(e)) from e


def create_store(store_path: str = "") -> DocumentStore:
    """Build the configured store: JSON file when a path is given, else memory."""
    if store_path:
        return JsonFileDocumentStore(Path(store_path))
    return InMemoryDocumentStore()

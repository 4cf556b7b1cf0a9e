"""
Core module for OpticalPOS.

Contains fundamental infrastructure components:
- exceptions: Custom exception hierarchy
- document_store: Keyed-record store collaborator and its implementations
"""

from .exceptions import (
    OpticalPosError,
    ValidationError,
    StoreError,
    PersistenceFailure,
    ReconciliationFailure,
)
from .document_store import (
    DocumentStore,
    InMemoryDocumentStore,
    JsonFileDocumentStore,
    Where,
    create_store,
)

__all__ = [
    "OpticalPosError",
    "ValidationError",
    "StoreError",
    "PersistenceFailure",
    "ReconciliationFailure",
    "DocumentStore",
    "InMemoryDocumentStore",
    "JsonFileDocumentStore",
    "Where",
    "create_store",
]

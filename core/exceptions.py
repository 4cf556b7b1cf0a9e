"""
Custom exceptions for OpticalPOS.

Exception Hierarchy:
    OpticalPosError (base)
    ├── ValidationError        - Caller input rejected (invoice not saved)
    ├── StoreError             - Document store read/write failed
    ├── PersistenceFailure     - Invoice/purchase write failed (hard failure)
    └── ReconciliationFailure  - One order could not be reconciled (never raised
                                 past the reconciliation engine)

Usage:
    ValidationError and PersistenceFailure propagate to the caller.
    ReconciliationFailure is captured per order and reported in the save
    result; the invoice save still succeeds.

An order reference that matches nothing is NOT an error - the resolver
returns None and reconciliation reports a NOT_FOUND outcome.
"""

from typing import Optional, Dict, Any


class OpticalPosError(Exception):
    """
    Base exception for all OpticalPOS errors.

    All custom exceptions inherit from this class, allowing callers to catch
    all application-specific errors with a single except clause if needed.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# CALLER ERRORS - Surfaced to the caller, nothing is written
# =============================================================================

class ValidationError(OpticalPosError):
    """
    Invoice or purchase input was rejected before anything was persisted.

    Typical causes:
    - No customer (or vendor) selected
    - Every line item has a zero or blank total
    - Unknown tax option id
    """

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else None
        super().__init__(message, details)
        self.field = field


# =============================================================================
# STORE ERRORS
# =============================================================================

class StoreError(OpticalPosError):
    """
    A document store operation failed.

    Raised by DocumentStore implementations. Callers decide whether the
    failure is fatal (invoice write) or isolated (reconciliation).
    """

    def __init__(
        self,
        operation: str,
        collection: str,
        doc_id: Optional[str] = None,
        reason: str = ""
    ):
        message = f"Store {operation} on '{collection}' failed"
        if reason:
            message = f"{message}: {reason}"
        details: Dict[str, Any] = {"operation": operation, "collection": collection}
        if doc_id:
            details["doc_id"] = doc_id
        super().__init__(message, details)
        self.operation = operation
        self.collection = collection
        self.doc_id = doc_id


class PersistenceFailure(OpticalPosError):
    """
    The invoice (or purchase) record itself could not be written.

    This is a HARD failure - it propagates to the caller and no
    reconciliation is attempted, so no partial invoice is left visible.
    """

    def __init__(self, document: str, cause: Optional[Exception] = None):
        message = f"Failed to persist {document}"
        details = {"cause": str(cause)} if cause else None
        super().__init__(message, details)
        self.document = document
        self.cause = cause


class ReconciliationFailure(OpticalPosError):
    """
    Reconciling one order reference against inventory failed.

    Never propagated out of the reconciliation engine: it is captured in the
    ReconciliationResult for that order so the caller can observe partial
    failure while the invoice save still reports success.
    """

    def __init__(self, reference: str, cause: Optional[Exception] = None):
        message = f"Reconciliation failed for order reference '{reference}'"
        details: Dict[str, Any] = {"reference": reference}
        if cause is not None:
            details["cause"] = str(cause)
        super().__init__(message, details)
        self.reference = reference
        self.cause = cause

"""
Reconciliation result data models.

Reconciliation is a side effect of saving an invoice: it never fails the save.
Instead of only writing failures to the log, every attempt produces a result
object, and the invoice service returns them alongside the new invoice id so
callers can see which orders were delivered, skipped or failed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from core.exceptions import ReconciliationFailure


class ReconciliationOutcome(Enum):
    """
    What happened to one order reference.

    RECONCILED -> order marked DELIVERED, matching stock consumed
    SKIPPED    -> order found but its status forbids deduction
    NOT_FOUND  -> no order matches the reference (not an error)
    FAILED     -> a store operation failed part way through
    """

    RECONCILED = "reconciled"
    SKIPPED = "skipped"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass
class ReconciliationResult:
    """Outcome of reconciling one order reference against inventory."""

    reference: str
    """Order reference as written on the invoice line."""

    outcome: ReconciliationOutcome

    order_id: Optional[str] = None
    """Store key of the resolved order."""

    display_id: Optional[str] = None
    """Display id of the resolved order."""

    previous_status: Optional[str] = None
    """Order status before reconciliation."""

    decremented_lens_ids: List[str] = field(default_factory=list)
    """Inventory records whose qty went down by one."""

    deleted_lens_ids: List[str] = field(default_factory=list)
    """Inventory records removed because their last unit was sold."""

    error: Optional[ReconciliationFailure] = None

    @property
    def ok(self) -> bool:
        return self.outcome is not ReconciliationOutcome.FAILED

    @classmethod
    def not_found(cls, reference: str) -> "ReconciliationResult":
        return cls(reference=reference, outcome=ReconciliationOutcome.NOT_FOUND)

    @classmethod
    def skipped(cls, reference: str, order_id: str, display_id: str, status: str) -> "ReconciliationResult":
        return cls(
            reference=reference,
            outcome=ReconciliationOutcome.SKIPPED,
            order_id=order_id,
            display_id=display_id,
            previous_status=status,
        )

    @classmethod
    def failed(
        cls,
        reference: str,
        cause: Exception,
        order_id: Optional[str] = None,
    ) -> "ReconciliationResult":
        return cls(
            reference=reference,
            outcome=ReconciliationOutcome.FAILED,
            order_id=order_id,
            error=ReconciliationFailure(reference, cause),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reference": self.reference,
            "outcome": self.outcome.value,
            "orderId": self.order_id,
            "displayId": self.display_id,
            "previousStatus": self.previous_status,
            "decrementedLensIds": list(self.decremented_lens_ids),
            "deletedLensIds": list(self.deleted_lens_ids),
            "error": str(self.error) if self.error else None,
        }


@dataclass
class StockDeduction:
    """
    Outcome of deducting one non-order invoice line from inventory.

    Lines that reference an order are reconciled through the order instead
    and never produce a StockDeduction.
    """

    item_name: str
    requested_qty: int
    deducted_qty: int = 0
    lens_ids: List[str] = field(default_factory=list)
    skipped_reason: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "itemName": self.item_name,
            "requestedQty": self.requested_qty,
            "deductedQty": self.deducted_qty,
            "lensIds": list(self.lens_ids),
            "skippedReason": self.skipped_reason,
            "error": self.error,
        }

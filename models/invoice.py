"""
Sales invoice data models.

An Invoice is written once, at save time, with all derived totals frozen into
the document. Nothing here recomputes totals on read: reports rely on the
stored values exactly as they were saved.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from modules.calculator import DiscountType, InvoiceTotals
from modules.formatting import bounded_decimal, money_str
from .line_item import LineItem
from .reconciliation import ReconciliationResult, StockDeduction


class PaymentStatus(str, Enum):
    """Payment state recorded on a sale or purchase."""

    UNPAID = "UNPAID"
    PARTIAL = "PARTIAL"
    PAID = "PAID"

    @classmethod
    def parse(cls, value: Any) -> "PaymentStatus":
        try:
            return cls(str(value or "").upper())
        except ValueError:
            return cls.UNPAID


@dataclass(frozen=True)
class DiscountConfig:
    """Invoice-level discount."""

    type: DiscountType = DiscountType.AMOUNT
    value: Decimal = Decimal("0")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "DiscountConfig":
        data = data or {}
        return cls(
            type=DiscountType.parse(data.get("type", data.get("discountType"))),
            value=bounded_decimal(data.get("value", data.get("discountValue")), "discount"),
        )


@dataclass(frozen=True)
class PaymentInfo:
    """Payment captured together with the invoice."""

    status: PaymentStatus = PaymentStatus.UNPAID
    amount_paid: Decimal = Decimal("0")
    payment_method: str = "cash"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PaymentInfo":
        data = data or {}
        return cls(
            status=PaymentStatus.parse(data.get("status", data.get("paymentStatus"))),
            amount_paid=bounded_decimal(data.get("amountPaid"), "amountPaid"),
            payment_method=str(data.get("paymentMethod") or "cash"),
        )


@dataclass(frozen=True)
class PartySnapshot:
    """
    Customer (or vendor) details copied onto the document at save time.

    Later edits to the customer record do not change saved invoices.
    """

    id: str
    name: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    phone: str = ""
    gst_number: str = ""
    is_vendor: bool = False

    @property
    def is_gst_registered(self) -> bool:
        return bool(self.gst_number.strip())

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["PartySnapshot"]:
        """None when no party (or a party without an id) was given."""
        if not data or not data.get("id"):
            return None
        return cls(
            id=str(data["id"]),
            name=str(data.get("opticalName") or data.get("name") or ""),
            address=str(data.get("address") or ""),
            city=str(data.get("city") or ""),
            state=str(data.get("state") or ""),
            phone=str(data.get("phone") or ""),
            gst_number=str(data.get("gstNumber") or ""),
            is_vendor=bool(data.get("isVendor") or data.get("type") == "vendor"),
        )


@dataclass(frozen=True)
class Invoice:
    """A sales invoice ready to be persisted."""

    customer: PartySnapshot
    invoice_number: str
    invoice_date: date
    items: Tuple[LineItem, ...]
    discount: DiscountConfig
    tax_option: str
    totals: InvoiceTotals
    payment: PaymentInfo
    due_date: Optional[date] = None
    notes: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the sales document."""
        data: Dict[str, Any] = {
            "customerId": self.customer.id,
            "customerName": self.customer.name,
            "customerAddress": self.customer.address,
            "customerCity": self.customer.city,
            "customerState": self.customer.state,
            "phone": self.customer.phone,
            "customerGst": self.customer.gst_number,
            "invoiceNumber": self.invoice_number,
            "invoiceDate": self.invoice_date.isoformat(),
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "items": [item.to_dict() for item in self.items],
            "discountType": self.discount.type.value,
            "discountValue": money_str(self.discount.value),
            "taxOption": self.tax_option,
            "paymentStatus": self.payment.status.value,
            "notes": self.notes,
        }
        data.update(self.totals.to_dict())
        return data


@dataclass
class SaveInvoiceResult:
    """
    What save_invoice() hands back to the caller.

    The invoice is saved whenever this object exists; reconciliation and
    stock results may still contain failures.
    """

    invoice_id: str
    invoice_number: str
    totals: InvoiceTotals
    reconciliation_results: List[ReconciliationResult] = field(default_factory=list)
    stock_deductions: List[StockDeduction] = field(default_factory=list)
    payment_transaction_id: Optional[str] = None

    @property
    def fully_reconciled(self) -> bool:
        return all(r.ok for r in self.reconciliation_results) and all(
            d.ok for d in self.stock_deductions
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "invoiceId": self.invoice_id,
            "invoiceNumber": self.invoice_number,
            "totals": self.totals.to_dict(),
            "displayBalanceDue": money_str(self.totals.display_balance_due),
            "reconciliation": [r.to_dict() for r in self.reconciliation_results],
            "stockDeductions": [d.to_dict() for d in self.stock_deductions],
            "paymentTransactionId": self.payment_transaction_id,
            "fullyReconciled": self.fully_reconciled,
        }

"""Purchase (vendor bill) data model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Tuple

from modules.calculator import InvoiceTotals
from modules.formatting import money_str
from .invoice import DiscountConfig, PartySnapshot, PaymentInfo
from .line_item import LineItem


@dataclass(frozen=True)
class Purchase:
    """
    A purchase from a vendor.

    Same totals as a sale, plus item-level discounts on lines. The unclamped
    balance is stored under "balance".
    """

    vendor: PartySnapshot
    purchase_number: str
    purchase_date: date
    items: Tuple[LineItem, ...]
    discount: DiscountConfig
    tax_option: str
    totals: InvoiceTotals
    payment: PaymentInfo
    notes: str = ""

    def to_dict(self) -> Dict[str, Any]:
        totals = self.totals.to_dict()
        balance = totals.pop("balanceDue")
        data: Dict[str, Any] = {
            "vendorId": self.vendor.id,
            "vendorName": self.vendor.name,
            "vendorGst": self.vendor.gst_number,
            "purchaseNumber": self.purchase_number,
            "purchaseDate": self.purchase_date.isoformat(),
            "items": [item.to_dict() for item in self.items],
            "discountType": self.discount.type.value,
            "discountValue": money_str(self.discount.value),
            "taxOption": self.tax_option,
            "paymentStatus": self.payment.status.value,
            "balance": balance,
            "notes": self.notes,
        }
        data.update(totals)
        return data

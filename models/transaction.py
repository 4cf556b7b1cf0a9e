"""Ledger transaction written when a payment is taken with a sale."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict

from modules.formatting import money_str


@dataclass(frozen=True)
class Transaction:
    """A payment received from a customer (or made to a vendor)."""

    entity_id: str
    entity_name: str
    entity_type: str
    """'customer' or 'vendor'."""

    type: str
    """'received' from customers, 'paid' to vendors."""

    amount: Decimal
    date: date
    invoice_id: str
    invoice_number: str
    payment_method: str = "cash"
    source: str = "sale_creation"

    @property
    def description(self) -> str:
        direction = "received from" if self.type == "received" else "made to"
        return f"Payment {direction} {self.entity_name} for Invoice {self.invoice_number}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entityId": self.entity_id,
            "entityName": self.entity_name,
            "entityType": self.entity_type,
            "type": self.type,
            "amount": money_str(self.amount),
            "date": self.date.isoformat(),
            "description": self.description,
            "invoiceId": self.invoice_id,
            "invoiceNumber": self.invoice_number,
            "paymentMethod": self.payment_method,
            "createdBy": "system",
            "source": self.source,
        }

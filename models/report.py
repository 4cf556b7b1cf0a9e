"""
GST period summary data models.

Amounts are Decimal; to_dict() renders them as 2-decimal strings for JSON.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List

from modules.formatting import ZERO, money_str


@dataclass(frozen=True)
class TaxBuckets:
    """Tax split by GST component."""

    integrated: Decimal = ZERO
    central: Decimal = ZERO
    state: Decimal = ZERO

    def __add__(self, other: "TaxBuckets") -> "TaxBuckets":
        return TaxBuckets(
            integrated=self.integrated + other.integrated,
            central=self.central + other.central,
            state=self.state + other.state,
        )

    def net_payable(self, credit: "TaxBuckets") -> "TaxBuckets":
        """
        Liability per bucket after input tax credit.

        A bucket never goes below zero; unused credit is neither carried
        over nor reported as a negative liability.
        """
        return TaxBuckets(
            integrated=max(ZERO, self.integrated - credit.integrated),
            central=max(ZERO, self.central - credit.central),
            state=max(ZERO, self.state - credit.state),
        )

    @property
    def total(self) -> Decimal:
        return self.integrated + self.central + self.state

    def to_dict(self) -> Dict[str, str]:
        return {
            "integrated": money_str(self.integrated),
            "central": money_str(self.central),
            "state": money_str(self.state),
            "total": money_str(self.total),
        }


@dataclass(frozen=True)
class PartitionTotals:
    """Count and sums over a set of invoices."""

    count: int = 0
    total_amount: Decimal = ZERO
    tax_amount: Decimal = ZERO

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "totalAmount": money_str(self.total_amount),
            "taxAmount": money_str(self.tax_amount),
        }


@dataclass(frozen=True)
class GstInvoiceRow:
    """One invoice line of the B2B/B2C return sheets."""

    invoice_id: str
    invoice_number: str
    invoice_date: str
    customer_name: str
    customer_gst: str
    place_of_supply: str
    tax_option: str
    tax_rate: Decimal
    taxable_value: Decimal
    tax_amount: Decimal
    invoice_value: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "invoiceId": self.invoice_id,
            "invoiceNumber": self.invoice_number,
            "invoiceDate": self.invoice_date,
            "customerName": self.customer_name,
            "customerGst": self.customer_gst,
            "placeOfSupply": self.place_of_supply,
            "taxOption": self.tax_option,
            "taxRate": str(self.tax_rate),
            "taxableValue": money_str(self.taxable_value),
            "taxAmount": money_str(self.tax_amount),
            "invoiceValue": money_str(self.invoice_value),
        }


@dataclass
class GstSummary:
    """Result of aggregating one reporting period."""

    start_date: date
    end_date: date
    overall: PartitionTotals
    b2b: PartitionTotals
    b2c: PartitionTotals
    purchases: PartitionTotals
    outward_tax: TaxBuckets
    input_tax_credit: TaxBuckets
    net_payable: TaxBuckets
    receipt_count: int = 0
    b2b_rows: List[GstInvoiceRow] = field(default_factory=list)
    b2c_rows: List[GstInvoiceRow] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": {
                "from": self.start_date.isoformat(),
                "to": self.end_date.isoformat(),
            },
            "overall": self.overall.to_dict(),
            "b2b": self.b2b.to_dict(),
            "b2c": self.b2c.to_dict(),
            "purchases": self.purchases.to_dict(),
            "receiptCount": self.receipt_count,
            "outwardTax": self.outward_tax.to_dict(),
            "inputTaxCredit": self.input_tax_credit.to_dict(),
            "netPayable": self.net_payable.to_dict(),
            "b2bInvoices": [row.to_dict() for row in self.b2b_rows],
            "b2cInvoices": [row.to_dict() for row in self.b2c_rows],
        }

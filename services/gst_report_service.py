"""
GST period aggregation.

Reads saved sales and purchases for a date range and rolls them up the way
the monthly GST return needs them:

    - B2B: invoices to GST-registered customers (non-empty GSTIN)
    - B2C: everything else
    - Outward tax from sales, input tax credit (ITC) from purchases, both
      split into integrated / central / state buckets by tax option
    - Net payable per bucket, never below zero

Only stored totals are read; nothing is recomputed from line items, so a
report always agrees with the invoices as they were printed.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Tuple

from core.document_store import DocumentStore, PURCHASES, SALES, TRANSACTIONS, Where
from models.report import GstInvoiceRow, GstSummary, PartitionTotals, TaxBuckets
from modules.formatting import ZERO, quantize_money, to_decimal
from modules.tax_options import is_central_state_split, is_integrated
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

TWO = Decimal("2")


def customer_gst(sale: Dict[str, Any]) -> str:
    """GSTIN on a stored sale; older documents used gstNumber."""
    return str(sale.get("customerGst") or sale.get("gstNumber") or "").strip()


def is_b2b(sale: Dict[str, Any]) -> bool:
    return bool(customer_gst(sale))


def tax_buckets(tax_option: str, tax_amount: Any) -> TaxBuckets:
    """
    Split one document's tax amount by its tax option.

    IGST options are wholly integrated tax; CGST/SGST options split into
    equal halves. Any other option (tax free, plain GST) fills no bucket.
    """
    amount = to_decimal(tax_amount)
    if is_integrated(tax_option):
        return TaxBuckets(integrated=amount)
    if is_central_state_split(tax_option):
        half = quantize_money(amount / TWO)
        return TaxBuckets(central=half, state=amount - half)
    return TaxBuckets()


def partition_totals(documents: Iterable[Dict[str, Any]]) -> PartitionTotals:
    count = 0
    total_amount = ZERO
    tax_amount = ZERO
    for doc in documents:
        count += 1
        total_amount += to_decimal(doc.get("totalAmount"))
        tax_amount += to_decimal(doc.get("taxAmount"))
    return PartitionTotals(count=count, total_amount=total_amount, tax_amount=tax_amount)


def invoice_row(sale: Dict[str, Any]) -> GstInvoiceRow:
    """Export row for one sale. Taxable value is after the invoice discount."""
    taxable = sale.get("taxableAmount")
    if taxable is None:
        taxable = to_decimal(sale.get("subtotal")) - to_decimal(sale.get("discountAmount"))
    return GstInvoiceRow(
        invoice_id=str(sale.get("id", "")),
        invoice_number=str(sale.get("invoiceNumber") or ""),
        invoice_date=str(sale.get("invoiceDate") or ""),
        customer_name=str(sale.get("customerName") or ""),
        customer_gst=customer_gst(sale),
        place_of_supply=str(sale.get("customerState") or ""),
        tax_option=str(sale.get("taxOption") or ""),
        tax_rate=to_decimal(sale.get("taxRate")),
        taxable_value=to_decimal(taxable),
        tax_amount=to_decimal(sale.get("taxAmount")),
        invoice_value=to_decimal(sale.get("totalAmount")),
    )


class GstReportService:
    """Builds GST period summaries from stored documents."""

    def __init__(self, store: DocumentStore):
        self._store = store

    def _in_range(self, collection: str, date_field: str, start: date, end: date) -> List[Dict[str, Any]]:
        # Dates are stored as ISO strings; the bound is the start of the next
        # day so timestamps on the last day are included
        return self._store.find(
            collection,
            Where(date_field, ">=", start.isoformat()),
            Where(date_field, "<", (end + timedelta(days=1)).isoformat()),
        )

    def aggregate(self, start_date: date, end_date: date) -> GstSummary:
        """
        Summarize sales and purchases dated within [start_date, end_date].

        Raises:
            ValueError: If start_date is after end_date
        """
        if start_date > end_date:
            raise ValueError(f"start date {start_date} is after end date {end_date}")

        sales = self._in_range(SALES, "invoiceDate", start_date, end_date)
        purchases = self._in_range(PURCHASES, "purchaseDate", start_date, end_date)
        receipts = self._in_range(TRANSACTIONS, "date", start_date, end_date)

        b2b_sales, b2c_sales = self._partition(sales)

        outward = sum(
            (tax_buckets(s.get("taxOption", ""), s.get("taxAmount")) for s in sales),
            TaxBuckets(),
        )
        credit = sum(
            (tax_buckets(p.get("taxOption", ""), p.get("taxAmount")) for p in purchases),
            TaxBuckets(),
        )

        summary = GstSummary(
            start_date=start_date,
            end_date=end_date,
            overall=partition_totals(sales),
            b2b=partition_totals(b2b_sales),
            b2c=partition_totals(b2c_sales),
            purchases=partition_totals(purchases),
            outward_tax=outward,
            input_tax_credit=credit,
            net_payable=outward.net_payable(credit),
            receipt_count=len(receipts),
            b2b_rows=[invoice_row(s) for s in b2b_sales],
            b2c_rows=[invoice_row(s) for s in b2c_sales],
        )

        logger.info(
            f"GST summary {start_date} to {end_date}: {summary.overall.count} invoice(s) "
            f"({summary.b2b.count} B2B, {summary.b2c.count} B2C), "
            f"{summary.purchases.count} purchase(s)"
        )
        return summary

    @staticmethod
    def _partition(sales: List[Dict[str, Any]]) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        b2b = [s for s in sales if is_b2b(s)]
        b2c = [s for s in sales if not is_b2b(s)]
        return b2b, b2c

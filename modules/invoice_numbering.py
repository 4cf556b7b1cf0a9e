"""
Financial-year invoice numbering.

Invoice numbers look like "2024-2025/07": the Indian financial year
(April to March) as prefix and a per-year counter padded to two digits.
The counter lives in the counters collection under "invoices_<year>".
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional

from core.document_store import COUNTERS, DocumentStore
from logging_config import get_logger


logger = get_logger(__name__)

_FINANCIAL_YEAR_NUMBER = re.compile(r"^(\d{4}-\d{4})/(\d+)$")
_TRAILING_DIGITS = re.compile(r"(\d+)$")


@dataclass(frozen=True)
class InvoiceNumber:
    """A parsed or generated invoice number."""

    prefix: str
    number: int
    full_display: str

    @property
    def padded_number(self) -> str:
        return str(self.number).zfill(2)


def current_financial_year(today: Optional[date] = None) -> str:
    """Financial year containing today, e.g. '2024-2025' for 2025-02-10."""
    today = today or date.today()
    if today.month < 4:
        return f"{today.year - 1}-{today.year}"
    return f"{today.year}-{today.year + 1}"


def _counter_id(financial_year: str) -> str:
    return f"invoices_{financial_year}"


def _build(financial_year: str, number: int) -> InvoiceNumber:
    return InvoiceNumber(
        prefix=financial_year,
        number=number,
        full_display=f"{financial_year}/{str(number).zfill(2)}",
    )


def preview_next_invoice_number(store: DocumentStore, financial_year: str) -> InvoiceNumber:
    """Next number for the year without consuming it."""
    counter = store.get(COUNTERS, _counter_id(financial_year))
    count = int(counter.get("count", 0)) if counter else 0
    return _build(financial_year, count + 1)


def generate_invoice_number(store: DocumentStore, financial_year: str) -> InvoiceNumber:
    """
    Consume and return the next number for the year.

    The read-then-write on the counter is not atomic; two saves racing on
    the same store can receive the same number.
    """
    counter_id = _counter_id(financial_year)
    now = datetime.now(timezone.utc).isoformat()
    counter = store.get(COUNTERS, counter_id)

    if counter is None:
        number = 1
        store.set(COUNTERS, counter_id, {
            "count": number,
            "prefix": financial_year,
            "separator": "/",
            "createdAt": now,
            "updatedAt": now,
        })
    else:
        number = int(counter.get("count", 0)) + 1
        store.update(COUNTERS, counter_id, {"count": number, "updatedAt": now})

    invoice_number = _build(financial_year, number)
    logger.debug(f"Allocated invoice number {invoice_number.full_display}")
    return invoice_number


def parse_invoice_number(invoice_number: Optional[str]) -> InvoiceNumber:
    """
    Parse stored invoice numbers in any historical format.

    Handles "2024-2025/61", legacy "INV-0061" and bare "61".
    """
    if not invoice_number:
        return InvoiceNumber(prefix="", number=0, full_display="")

    match = _FINANCIAL_YEAR_NUMBER.match(invoice_number)
    if match:
        return InvoiceNumber(
            prefix=match.group(1),
            number=int(match.group(2)),
            full_display=invoice_number,
        )

    match = _TRAILING_DIGITS.search(invoice_number)
    if match:
        return InvoiceNumber(prefix="", number=int(match.group(1)), full_display=invoice_number)

    return InvoiceNumber(prefix="", number=0, full_display=invoice_number)

"""
Invoice assembly and persistence.

InvoiceService is the single owner of every write a sale makes. The order
of operations is fixed:

    1. Validate input          -> ValidationError, nothing written
    2. Compute totals          (modules.calculator)
    3. Allocate invoice number (financial-year counter)
    4. Persist the invoice     -> PersistenceFailure, nothing reconciled
    5. Record the payment      (ledger transaction, failure only logged)
    6. Reconcile order lines   (per order, failures captured)
    7. Deduct stock lines      (per line, failures captured)

Persistence completes before any reconciliation starts, and reconciliation
is attempted once and never retried. A SaveInvoiceResult therefore always
means "the invoice exists"; its reconciliation_results and stock_deductions
say how far the inventory side effects got.

Usage:
    service = InvoiceService(store, InventoryReconciler(store))
    result = service.save_invoice(
        customer=PartySnapshot(id="c1", name="Vision Opticals"),
        line_items=[LineItem(item_name="Crizal", qty=2, price=Decimal("500"))],
        discount=DiscountConfig(),
        tax_option_id="CGST_SGST_6",
        freight=Decimal("0"),
        payment=PaymentInfo(),
    )
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Optional, Sequence

from core.document_store import DocumentStore, SALES, TRANSACTIONS
from core.exceptions import PersistenceFailure, ValidationError
from models.invoice import DiscountConfig, Invoice, PartySnapshot, PaymentInfo, SaveInvoiceResult
from models.line_item import LineItem
from models.transaction import Transaction
from modules.calculator import (
    InvoiceTotals,
    compute_totals,
    filled_lines,
    resolve_amount_paid,
    stored_balance_due,
)
from modules.invoice_numbering import (
    InvoiceNumber,
    current_financial_year,
    generate_invoice_number,
    preview_next_invoice_number,
)
from modules.tax_options import SALE_TAX_OPTIONS, find_tax_option
from services.reconciliation_service import InventoryReconciler
from logging_config import get_invoice_logger, get_logger


# Module logger
logger = get_logger(__name__)


def apply_payment(totals: InvoiceTotals, payment: PaymentInfo) -> InvoiceTotals:
    """Totals with amount paid and stored balance implied by the payment status."""
    paid = resolve_amount_paid(payment.status.value, payment.amount_paid, totals.total)
    return replace(totals, amount_paid=paid, balance_due=stored_balance_due(totals.total, paid))


class InvoiceService:
    """
    Saves sales invoices and applies their inventory side effects.

    Attributes:
        reconciler: InventoryReconciler used after each save
    """

    def __init__(
        self,
        store: DocumentStore,
        reconciler: Optional[InventoryReconciler] = None,
        financial_year: str = "",
    ):
        """
        Initialize invoice service.

        Args:
            store: Document store shared with the reconciler
            reconciler: Reconciliation engine (built on the same store if omitted)
            financial_year: Fixed invoice number prefix; empty derives it
                from the invoice date
        """
        self._store = store
        self._reconciler = reconciler or InventoryReconciler(store)
        self._financial_year = financial_year
        logger.info("InvoiceService initialized")

    @property
    def reconciler(self) -> InventoryReconciler:
        return self._reconciler

    def financial_year_for(self, invoice_date: Optional[date] = None) -> str:
        return self._financial_year or current_financial_year(invoice_date)

    def next_invoice_number(self, invoice_date: Optional[date] = None) -> InvoiceNumber:
        """Number the next saved invoice would get (not consumed)."""
        return preview_next_invoice_number(self._store, self.financial_year_for(invoice_date))

    def save_invoice(
        self,
        customer: Optional[PartySnapshot],
        line_items: Sequence[LineItem],
        discount: Optional[DiscountConfig] = None,
        tax_option_id: str = "TAX_FREE",
        freight: Any = Decimal("0"),
        payment: Optional[PaymentInfo] = None,
        invoice_date: Optional[date] = None,
        due_date: Optional[date] = None,
        notes: str = "",
    ) -> SaveInvoiceResult:
        """
        Validate, persist and reconcile one sale.

        Args:
            customer: Customer snapshot (required)
            line_items: Rows as entered; rows with a zero or blank total are dropped
            discount: Invoice-level discount
            tax_option_id: Id from the sale tax catalog
            freight: Freight charge added after tax
            payment: Payment status and amount taken at the counter
            invoice_date: Defaults to today
            due_date: Optional due date
            notes: Free-text notes

        Returns:
            SaveInvoiceResult with the new invoice id and per-line outcomes

        Raises:
            ValidationError: If the input is rejected (nothing is written)
            PersistenceFailure: If the invoice could not be written
        """
        discount = discount or DiscountConfig()
        payment = payment or PaymentInfo()
        invoice_date = invoice_date or date.today()

        # 1. Validate
        if customer is None or not customer.id:
            raise ValidationError("customer required", field="customer")

        items = tuple(line.with_normalized_prescription() for line in filled_lines(line_items))
        if not items:
            raise ValidationError("no items", field="items")

        tax_option = find_tax_option(tax_option_id, SALE_TAX_OPTIONS)
        if tax_option is None:
            raise ValidationError(f"unknown tax option '{tax_option_id}'", field="taxOption")

        # 2. Totals
        totals = compute_totals(
            items,
            discount_type=discount.type,
            discount_value=discount.value,
            tax_rate=tax_option.rate,
            freight=freight,
        )
        totals = apply_payment(totals, payment)

        # 3-4. Number and persist
        try:
            invoice_number = generate_invoice_number(self._store, self.financial_year_for(invoice_date))
            invoice = Invoice(
                customer=customer,
                invoice_number=invoice_number.full_display,
                invoice_date=invoice_date,
                items=items,
                discount=discount,
                tax_option=tax_option.id,
                totals=totals,
                payment=replace(payment, amount_paid=totals.amount_paid),
                due_date=due_date,
                notes=notes,
            )
            document = invoice.to_dict()
            document["createdAt"] = datetime.now(timezone.utc).isoformat()
            invoice_id = self._store.create(SALES, document)
        except Exception as e:
            logger.error(f"Failed to persist invoice for customer {customer.id}: {e}", exc_info=True)
            raise PersistenceFailure("invoice", e) from e

        invoice_logger = get_invoice_logger(invoice.invoice_number)
        invoice_logger.info(
            f"Invoice saved as {invoice_id}: {len(items)} line(s), total {totals.total}"
        )

        result = SaveInvoiceResult(
            invoice_id=invoice_id,
            invoice_number=invoice.invoice_number,
            totals=totals,
        )

        # 5. Payment ledger
        if totals.amount_paid > 0:
            result.payment_transaction_id = self._record_payment(invoice, invoice_id, invoice_logger)

        # 6-7. Inventory side effects
        result.reconciliation_results = self._reconciler.reconcile_lines(items, invoice_logger)
        result.stock_deductions = self._reconciler.deduct_stock_items(items, invoice_logger)

        if not result.fully_reconciled:
            invoice_logger.warning("Invoice saved with inventory reconciliation failures")
        return result

    def _record_payment(self, invoice: Invoice, invoice_id: str, log) -> Optional[str]:
        """
        Write the ledger transaction for money taken at save time.

        Customers are recorded as "received", vendors as "paid".
        """
        party = invoice.customer
        transaction = Transaction(
            entity_id=party.id,
            entity_name=party.name,
            entity_type="vendor" if party.is_vendor else "customer",
            type="paid" if party.is_vendor else "received",
            amount=invoice.totals.amount_paid,
            date=invoice.invoice_date,
            invoice_id=invoice_id,
            invoice_number=invoice.invoice_number,
            payment_method=invoice.payment.payment_method,
        )
        data = transaction.to_dict()
        data["createdAt"] = datetime.now(timezone.utc).isoformat()
        try:
            transaction_id = self._store.create(TRANSACTIONS, data)
        except Exception as e:
            log.error(f"Failed to record payment transaction: {e}", exc_info=True)
            return None
        log.info(f"Recorded payment of {transaction.amount} as transaction {transaction_id}")
        return transaction_id

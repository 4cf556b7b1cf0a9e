"""
Purchase (vendor bill) persistence.

Purchases share the invoice arithmetic but differ in a few places:
    - rows are kept only when they have a name, a positive qty and a
      positive price
    - rows may carry an item-level discount
    - the purchase number is entered by hand (the vendor's bill number)
    - the amount paid is stored as entered, and the unclamped balance is
      stored under "balance"

Purchases do not touch inventory and write no ledger transaction.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, List, Optional, Sequence

from core.document_store import DocumentStore, PURCHASES
from core.exceptions import PersistenceFailure, ValidationError
from models.invoice import DiscountConfig, PartySnapshot, PaymentInfo
from models.line_item import LineItem
from models.purchase import Purchase
from modules.calculator import compute_totals
from modules.tax_options import PURCHASE_TAX_OPTIONS, find_tax_option
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)


def purchase_lines(line_items: Sequence[LineItem]) -> List[LineItem]:
    """Rows worth saving: named, with positive qty and price."""
    return [
        line for line in line_items
        if line.item_name.strip() and line.qty > 0 and line.price > 0
    ]


class PurchaseService:
    """Saves purchases from vendors."""

    def __init__(self, store: DocumentStore):
        self._store = store

    def save_purchase(
        self,
        vendor: Optional[PartySnapshot],
        line_items: Sequence[LineItem],
        discount: Optional[DiscountConfig] = None,
        tax_option_id: str = "TAX_FREE",
        freight: Any = Decimal("0"),
        payment: Optional[PaymentInfo] = None,
        purchase_number: str = "",
        purchase_date: Optional[date] = None,
        notes: str = "",
    ) -> str:
        """
        Validate and persist one purchase.

        Returns:
            Store key of the new purchase

        Raises:
            ValidationError: If the input is rejected (nothing is written)
            PersistenceFailure: If the purchase could not be written
        """
        discount = discount or DiscountConfig()
        payment = payment or PaymentInfo()

        if vendor is None or not vendor.id:
            raise ValidationError("vendor required", field="vendor")

        items = tuple(purchase_lines(line_items))
        if not items:
            raise ValidationError("no items", field="items")

        tax_option = find_tax_option(tax_option_id, PURCHASE_TAX_OPTIONS)
        if tax_option is None:
            raise ValidationError(f"unknown tax option '{tax_option_id}'", field="taxOption")

        totals = compute_totals(
            items,
            discount_type=discount.type,
            discount_value=discount.value,
            tax_rate=tax_option.rate,
            freight=freight,
            amount_paid=payment.amount_paid,
        )

        purchase = Purchase(
            vendor=vendor,
            purchase_number=purchase_number,
            purchase_date=purchase_date or date.today(),
            items=items,
            discount=discount,
            tax_option=tax_option.id,
            totals=totals,
            payment=payment,
            notes=notes,
        )
        document = purchase.to_dict()
        document["createdAt"] = datetime.now(timezone.utc).isoformat()

        try:
            purchase_id = self._store.create(PURCHASES, document)
        except Exception as e:
            logger.error(f"Failed to persist purchase from vendor {vendor.id}: {e}", exc_info=True)
            raise PersistenceFailure("purchase", e) from e

        logger.info(
            f"Purchase {purchase_number or purchase_id} saved: "
            f"{len(items)} line(s), total {totals.total}"
        )
        return purchase_id

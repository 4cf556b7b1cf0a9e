"""
Order reference resolver.

Display ids are generated as zero-padded sequence numbers ("007"), but staff
often type them without the leading zeros ("7"). Resolution is strict
equality with exactly one normalization fallback:

    1. displayId == reference
    2. displayId == reference left-padded with zeros to width 3
    3. nothing -> None

The first record of the first non-empty query wins, so an exact match on
the reference as typed always takes precedence over the padded form.
There is no partial or fuzzy matching.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from core.document_store import DocumentStore, ORDERS, Where
from models.line_item import ItemKind, LineItem, Unit
from models.order import Order
from modules.formatting import format_optical_value, to_decimal
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

DISPLAY_ID_WIDTH = 3


def pad_display_id(reference: str) -> str:
    """Left-pad a display id with zeros to the generated width ("7" -> "007")."""
    return str(reference).zfill(DISPLAY_ID_WIDTH)


def display_id_candidates(reference: str) -> List[str]:
    """References to try, in order, without repeating an identical form."""
    reference = str(reference)
    padded = pad_display_id(reference)
    return [reference] if padded == reference else [reference, padded]


def order_quantity(order: Order) -> int:
    """
    Units a sale of this order consumes.

    A right and a left lens together are one pair, so when both eyes are
    ordered the larger count wins instead of the sum. A one-eye order counts
    that eye. Orders with no quantity count as 1.
    """
    right_qty = order.right.qty
    left_qty = order.left.qty
    return max(right_qty, left_qty) or 1


class OrderResolver:
    """
    Resolves order references against the orders collection.

    Usage:
        resolver = OrderResolver(store)
        order = resolver.resolve("7")
        if order is None:
            # nothing to reconcile
            ...
    """

    def __init__(self, store: DocumentStore):
        self._store = store

    def find_by_display_id(self, display_id: str) -> List[Dict[str, Any]]:
        return self._store.find(ORDERS, Where("displayId", "==", display_id))

    def resolve(self, reference: Optional[str]) -> Optional[Order]:
        """
        Resolve a typed order reference.

        Args:
            reference: Display id as entered on the invoice line

        Returns:
            The matching Order, or None when nothing matches

        Raises:
            StoreError: If the store query fails
        """
        reference = (reference or "").strip()
        if not reference:
            return None

        for candidate in display_id_candidates(reference):
            records = self.find_by_display_id(candidate)
            if records:
                if candidate != reference:
                    logger.debug(f"Order reference '{reference}' matched padded id '{candidate}'")
                return Order.from_dict(records[0])

        logger.debug(f"Order reference '{reference}' did not match any order")
        return None

    def line_from_order(self, order: Order) -> LineItem:
        """
        Invoice line pre-filled from an order.

        The prescription is taken from the right eye, falling back to the
        left eye field by field. Lens orders are always billed in pairs.
        """
        quantity = order_quantity(order)
        return LineItem(
            item_name=order.brand_name,
            order_id=order.display_id,
            kind=ItemKind.PRESCRIPTION,
            sph=format_optical_value(order.right.sph or order.left.sph),
            cyl=format_optical_value(order.right.cyl or order.left.cyl),
            axis=order.right.axis or order.left.axis,
            add=format_optical_value(order.right.add or order.left.add),
            qty=quantity,
            unit=Unit.PAIRS.value,
            price=to_decimal(order.price),
        )

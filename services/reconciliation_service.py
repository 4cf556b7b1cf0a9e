"""
Inventory reconciliation engine.

Saving a sale has side effects on stock. This service applies them once the
invoice itself has been persisted:

ORDER LINES (a line carrying an order reference):
    1. Resolve the reference (OrderResolver)
    2. Skip unless the order status allows deduction
    3. Mark the order DELIVERED
    4. Find lens records linked to the order (by key, then by display id)
    5. Each linked record loses one unit; the last unit deletes the record

STOCK LINES (no order reference):
    - Stock lenses sold by power decrement their power slot
    - Everything else is matched by name and deducted greedily
    - Services never touch inventory

FAILURE ISOLATION:
    Every line is processed on its own. A store error while handling one
    line is captured in that line's result and logged; the remaining lines
    are still processed and nothing is raised to the caller. The invoice
    save has already succeeded by the time this runs.

Concurrency:
    The store has no transactions. Two sales referencing the same order at
    the same moment can both see it as deductible and both decrement its
    lens records; this race is known and not guarded against.

Usage:
    reconciler = InventoryReconciler(store, OrderResolver(store))
    results = reconciler.reconcile_lines(invoice.items)
    deductions = reconciler.deduct_stock_items(invoice.items)
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from core.document_store import DocumentStore, LENS_INVENTORY, ORDERS, Where
from models.inventory import InventoryLens
from models.line_item import ItemKind, LineItem
from models.order import Order, OrderStatus
from models.reconciliation import ReconciliationOutcome, ReconciliationResult, StockDeduction
from modules.formatting import parse_number, to_decimal
from services.order_resolver import OrderResolver, pad_display_id
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

# Prescription matching tolerance for unreferenced RX lenses (one quarter step)
POWER_TOLERANCE = Decimal("0.25")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _within_tolerance(wanted: str, stocked: str) -> bool:
    """Blank on either side matches anything."""
    wanted_value = parse_number(wanted) if wanted else None
    stocked_value = parse_number(stocked) if stocked else None
    if wanted_value is None or stocked_value is None:
        return True
    return abs(wanted_value - stocked_value) <= POWER_TOLERANCE


def _names_overlap(search_term: str, candidate: str) -> bool:
    """Case-insensitive containment in either direction. Blank names never match."""
    candidate = candidate.lower().strip()
    if not candidate:
        return False
    return search_term in candidate or candidate in search_term


class InventoryReconciler:
    """
    Applies a saved sale to orders and lens inventory.

    Attributes:
        resolver: OrderResolver used for order references
    """

    def __init__(self, store: DocumentStore, resolver: Optional[OrderResolver] = None):
        self._store = store
        self._resolver = resolver or OrderResolver(store)

    @property
    def resolver(self) -> OrderResolver:
        return self._resolver

    # =========================================================================
    # ORDER LINES
    # =========================================================================

    def reconcile(self, reference: str, log: Optional[logging.Logger] = None) -> ReconciliationResult:
        """
        Reconcile one order reference.

        Never raises: store failures are returned as a FAILED result.

        Args:
            reference: Order reference from the invoice line
            log: Logger to write to (defaults to the module logger)

        Returns:
            ReconciliationResult describing what happened
        """
        log = log or logger
        order: Optional[Order] = None

        try:
            order = self._resolver.resolve(reference)
            if order is None:
                log.debug(f"Order '{reference}' not found, nothing to reconcile")
                return ReconciliationResult.not_found(reference)

            if not order.is_deductible:
                log.info(
                    f"Order {order.display_id} has status '{order.status}', "
                    f"skipping inventory deduction"
                )
                return ReconciliationResult.skipped(reference, order.id, order.display_id, order.status)

            now = _now()
            self._store.update(ORDERS, order.id, {
                "status": OrderStatus.DELIVERED.value,
                "updatedAt": now,
            })

            result = ReconciliationResult(
                reference=reference,
                outcome=ReconciliationOutcome.RECONCILED,
                order_id=order.id,
                display_id=order.display_id,
                previous_status=order.status,
            )

            for lens in self.find_order_lenses(order):
                if lens.qty > 1:
                    self._store.update(LENS_INVENTORY, lens.id, {
                        "qty": lens.qty - 1,
                        "updatedAt": now,
                    })
                    result.decremented_lens_ids.append(lens.id)
                else:
                    self._store.delete(LENS_INVENTORY, lens.id)
                    result.deleted_lens_ids.append(lens.id)

            log.info(
                f"Order {order.display_id} delivered: "
                f"{len(result.decremented_lens_ids)} lens record(s) decremented, "
                f"{len(result.deleted_lens_ids)} removed"
            )
            return result

        except Exception as e:
            log.error(f"Failed to reconcile order '{reference}': {e}", exc_info=True)
            return ReconciliationResult.failed(reference, e, order.id if order else None)

    def find_order_lenses(self, order: Order) -> List[InventoryLens]:
        """
        Lens records linked to an order.

        Tried in order, first non-empty query wins:
            orderId == order key
            orderDisplayId == display id
            orderDisplayId == padded display id
        """
        queries = [Where("orderId", "==", order.id)]
        if order.display_id:
            queries.append(Where("orderDisplayId", "==", order.display_id))
            padded = pad_display_id(order.display_id)
            if padded != order.display_id:
                queries.append(Where("orderDisplayId", "==", padded))

        for condition in queries:
            records = self._store.find(LENS_INVENTORY, condition)
            if records:
                return [InventoryLens.from_dict(r) for r in records]
        return []

    def reconcile_lines(
        self,
        lines: Iterable[LineItem],
        log: Optional[logging.Logger] = None
    ) -> List[ReconciliationResult]:
        """
        Reconcile every line that carries an order reference.

        Lines are handled one after another in invoice order; a failure on
        one line does not stop the others.
        """
        results = []
        for line in lines:
            if not line.has_order_reference:
                continue
            results.append(self.reconcile(line.order_id.strip(), log))

        failed = [r for r in results if not r.ok]
        if failed:
            (log or logger).warning(
                f"{len(failed)} of {len(results)} order reference(s) failed to reconcile"
            )
        return results

    # =========================================================================
    # STOCK LINES
    # =========================================================================

    def deduct_stock_items(
        self,
        lines: Iterable[LineItem],
        log: Optional[logging.Logger] = None
    ) -> List[StockDeduction]:
        """
        Deduct sold lines that do not reference an order.

        Lines with an order reference are left to reconcile_lines(). Each
        line is isolated: an error is recorded on its StockDeduction.
        """
        log = log or logger
        deductions = []
        for line in lines:
            if line.has_order_reference:
                continue
            if line.kind is ItemKind.SERVICE:
                log.debug(f"Skipping service line '{line.item_name}'")
                continue

            try:
                if line.kind is ItemKind.STOCK_LENS and line.lens_id and line.power_key:
                    deduction = self.deduct_power_slot(line, log)
                else:
                    deduction = self.deduct_named_item(line, log)
            except Exception as e:
                log.error(f"Failed to deduct stock for '{line.item_name}': {e}", exc_info=True)
                deduction = StockDeduction(
                    item_name=line.item_name,
                    requested_qty=line.piece_quantity or line.qty,
                    error=str(e),
                )
            deductions.append(deduction)
        return deductions

    def deduct_power_slot(self, line: LineItem, log: logging.Logger) -> StockDeduction:
        """
        Take pieces out of one power slot of a stock lens record.

        Insufficient stock skips the line rather than going negative. The
        record's totalQuantity is recomputed from all slots.
        """
        requested = line.piece_quantity
        deduction = StockDeduction(item_name=line.item_name, requested_qty=requested)

        if requested <= 0:
            deduction.skipped_reason = "no pieces selected"
            return deduction

        record = self._store.get(LENS_INVENTORY, line.lens_id)
        if record is None:
            deduction.skipped_reason = "lens record not found"
            log.warning(f"Stock lens {line.lens_id} not found for '{line.item_name}'")
            return deduction

        lens = InventoryLens.from_dict(record)
        if line.power_key not in lens.power_inventory:
            deduction.skipped_reason = f"power {line.power_key} not stocked"
            log.warning(f"Power {line.power_key} not found on stock lens {lens.id}")
            return deduction

        available = lens.power_quantity(line.power_key)
        if available < requested:
            deduction.skipped_reason = f"insufficient stock ({available} < {requested})"
            log.warning(
                f"Insufficient stock for power {line.power_key} on lens {lens.id}: "
                f"{available} available, {requested} sold"
            )
            return deduction

        power_inventory: Dict[str, Dict[str, Any]] = {
            key: dict(slot) for key, slot in lens.power_inventory.items()
        }
        power_inventory[line.power_key]["quantity"] = available - requested
        total_quantity = sum(int(to_decimal(slot.get("quantity"))) for slot in power_inventory.values())

        self._store.update(LENS_INVENTORY, lens.id, {
            "powerInventory": power_inventory,
            "totalQuantity": total_quantity,
            "updatedAt": _now(),
        })

        deduction.deducted_qty = requested
        deduction.lens_ids.append(lens.id)
        log.info(f"Deducted {requested} piece(s) of power {line.power_key} from lens {lens.id}")
        return deduction

    def find_matching_stock(self, line: LineItem) -> List[InventoryLens]:
        """
        Sellable inventory records for a line, by the first strategy that hits.

            1. brandName == item name
            2. serviceName == item name
            3. itemName == item name
            4. prescription lenses within a quarter step on SPH and CYL
               whose brand overlaps the item name
            5. any record whose brand, service or item name overlaps
        """
        name = line.item_name.strip()

        def sellable(records: List[Dict[str, Any]]) -> List[InventoryLens]:
            lenses = [InventoryLens.from_dict(r) for r in records]
            return [lens for lens in lenses if lens.sellable]

        for field_name in ("brandName", "serviceName", "itemName"):
            matches = sellable(self._store.find(LENS_INVENTORY, Where(field_name, "==", name)))
            if matches:
                return matches

        search_term = name.lower()

        if line.sph or line.cyl:
            candidates = sellable(self._store.find(LENS_INVENTORY, Where("type", "==", "prescription")))
            matches = [
                lens for lens in candidates
                if _within_tolerance(line.sph, lens.sph)
                and _within_tolerance(line.cyl, lens.cyl)
                and (not lens.brand_name or _names_overlap(search_term, lens.brand_name))
            ]
            if matches:
                return matches

        return [
            lens for lens in sellable(self._store.find(LENS_INVENTORY))
            if _names_overlap(search_term, lens.brand_name)
            or _names_overlap(search_term, lens.service_name)
            or _names_overlap(search_term, lens.item_name)
        ]

    def deduct_named_item(self, line: LineItem, log: logging.Logger) -> StockDeduction:
        """
        Deduct a line from the records matched by name.

        The sold quantity is taken greedily, record by record, without
        taking any record below zero. Records left at zero are kept.
        """
        deduction = StockDeduction(item_name=line.item_name, requested_qty=line.qty)

        if not line.item_name.strip():
            deduction.skipped_reason = "no item name"
            return deduction
        if line.qty <= 0:
            deduction.skipped_reason = "no quantity"
            return deduction

        matches = self.find_matching_stock(line)
        if not matches:
            deduction.skipped_reason = "no matching inventory"
            log.debug(f"No inventory matches '{line.item_name}'")
            return deduction

        remaining = line.qty
        now = _now()
        for lens in matches:
            if remaining <= 0:
                break
            taken = min(remaining, lens.qty)
            self._store.update(LENS_INVENTORY, lens.id, {
                "qty": lens.qty - taken,
                "updatedAt": now,
            })
            remaining -= taken
            deduction.deducted_qty += taken
            deduction.lens_ids.append(lens.id)

        if remaining > 0:
            log.warning(
                f"Only {deduction.deducted_qty} of {line.qty} '{line.item_name}' "
                f"found in inventory"
            )
        else:
            log.info(f"Deducted {line.qty} '{line.item_name}' from {len(deduction.lens_ids)} record(s)")
        return deduction

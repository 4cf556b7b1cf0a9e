"""
Unit tests for the inventory reconciliation engine.

Covers order delivery (status gating, lens decrement/delete, failure
isolation) and stock deduction for lines without an order reference.
"""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from conftest import seed_lens, seed_order
from core.document_store import InMemoryDocumentStore, LENS_INVENTORY, ORDERS
from core.exceptions import ReconciliationFailure, StoreError
from models.line_item import ItemKind, LineItem
from models.reconciliation import ReconciliationOutcome
from services.order_resolver import OrderResolver
from services.reconciliation_service import InventoryReconciler


class FailingUpdateStore(InMemoryDocumentStore):
    """Store whose updates fail for one collection."""

    def __init__(self, failing_collection, failing_ids=None):
        super().__init__()
        self.failing_collection = failing_collection
        self.failing_ids = failing_ids

    def update(self, collection, doc_id, data):
        if collection == self.failing_collection and (
            self.failing_ids is None or doc_id in self.failing_ids
        ):
            raise StoreError("update", collection, doc_id, "write refused")
        super().update(collection, doc_id, data)


class TestReconcileOrder:
    """Test reconciliation of one order reference."""

    def test_single_unit_lens_is_deleted(self, store, reconciler):
        order_id = seed_order(store, "007")
        lens_id = seed_lens(store, orderId=order_id, qty=1)

        result = reconciler.reconcile("7")

        assert result.outcome is ReconciliationOutcome.RECONCILED
        assert result.deleted_lens_ids == [lens_id]
        assert store.get(LENS_INVENTORY, lens_id) is None
        assert store.get(ORDERS, order_id)["status"] == "DELIVERED"

    def test_multi_unit_lens_is_decremented(self, store, reconciler):
        order_id = seed_order(store, "007", status="DISPATCHED")
        lens_id = seed_lens(store, orderId=order_id, qty=3)

        result = reconciler.reconcile("007")

        assert result.decremented_lens_ids == [lens_id]
        assert store.get(LENS_INVENTORY, lens_id)["qty"] == 2
        assert result.previous_status == "DISPATCHED"

    @pytest.mark.parametrize("status", ["PENDING", "PLACED", "CANCELLED", "DECLINED", "ON_HOLD"])
    def test_non_deductible_status_is_untouched(self, store, reconciler, status):
        order_id = seed_order(store, "009", status=status)
        lens_id = seed_lens(store, orderId=order_id, qty=1)

        result = reconciler.reconcile("9")

        assert result.outcome is ReconciliationOutcome.SKIPPED
        assert result.ok
        assert store.get(ORDERS, order_id)["status"] == status
        assert store.get(LENS_INVENTORY, lens_id)["qty"] == 1

    def test_not_found(self, store, reconciler):
        lens_id = seed_lens(store, orderDisplayId="404", qty=1)

        result = reconciler.reconcile("404")

        assert result.outcome is ReconciliationOutcome.NOT_FOUND
        assert result.ok
        assert store.get(LENS_INVENTORY, lens_id) is not None

    def test_lenses_found_by_display_id(self, store, reconciler):
        seed_order(store, "012")
        lens_id = seed_lens(store, orderDisplayId="012", qty=2)

        result = reconciler.reconcile("12")

        assert result.decremented_lens_ids == [lens_id]
        assert store.get(LENS_INVENTORY, lens_id)["qty"] == 1

    def test_lenses_found_by_padded_display_id(self, store, reconciler):
        seed_order(store, "5")
        lens_id = seed_lens(store, orderDisplayId="005", qty=1)

        result = reconciler.reconcile("5")

        assert result.deleted_lens_ids == [lens_id]

    def test_order_key_link_preferred(self, store, reconciler):
        order_id = seed_order(store, "020")
        linked = seed_lens(store, orderId=order_id, qty=2)
        by_display = seed_lens(store, orderDisplayId="020", qty=2)

        reconciler.reconcile("020")

        assert store.get(LENS_INVENTORY, linked)["qty"] == 1
        assert store.get(LENS_INVENTORY, by_display)["qty"] == 2

    def test_each_linked_lens_processed(self, store, reconciler):
        order_id = seed_order(store, "031")
        right = seed_lens(store, orderId=order_id, qty=1, eye="right")
        left = seed_lens(store, orderId=order_id, qty=3, eye="left")

        result = reconciler.reconcile("31")

        assert result.outcome is ReconciliationOutcome.RECONCILED
        assert result.deleted_lens_ids == [right]
        assert result.decremented_lens_ids == [left]
        assert store.get(LENS_INVENTORY, right) is None
        assert store.get(LENS_INVENTORY, left)["qty"] == 2

    def test_order_without_lenses_still_delivered(self, store, reconciler):
        order_id = seed_order(store, "030")
        result = reconciler.reconcile("030")
        assert result.outcome is ReconciliationOutcome.RECONCILED
        assert store.get(ORDERS, order_id)["status"] == "DELIVERED"


class TestFailureIsolation:
    """Test that one failing order does not stop the others."""

    def test_store_failure_is_captured(self):
        store = FailingUpdateStore(ORDERS)
        seed_order(store, "001")
        reconciler = InventoryReconciler(store, OrderResolver(store))

        result = reconciler.reconcile("1")

        assert result.outcome is ReconciliationOutcome.FAILED
        assert not result.ok
        assert isinstance(result.error, ReconciliationFailure)
        assert isinstance(result.error.cause, StoreError)

    def test_other_lines_still_processed(self):
        store = FailingUpdateStore(ORDERS, failing_ids=set())
        bad_id = seed_order(store, "001")
        good_id = seed_order(store, "002")
        seed_lens(store, orderId=good_id, qty=1)
        store.failing_ids.add(bad_id)
        reconciler = InventoryReconciler(store, OrderResolver(store))

        results = reconciler.reconcile_lines([
            LineItem(item_name="A", price=Decimal("100"), order_id="001"),
            LineItem(item_name="B", price=Decimal("100")),
            LineItem(item_name="C", price=Decimal("100"), order_id="002"),
        ])

        assert [r.outcome for r in results] == [
            ReconciliationOutcome.FAILED,
            ReconciliationOutcome.RECONCILED,
        ]
        assert store.get(ORDERS, good_id)["status"] == "DELIVERED"

    def test_resolver_exception_is_captured(self, store):
        resolver = MagicMock()
        resolver.resolve.side_effect = RuntimeError("connection lost")
        reconciler = InventoryReconciler(store, resolver)

        result = reconciler.reconcile("7")

        assert result.outcome is ReconciliationOutcome.FAILED
        assert "connection lost" in str(result.error)


class TestStockDeduction:
    """Test deduction of lines without an order reference."""

    def test_service_lines_skipped(self, store, reconciler):
        seed_lens(store, serviceName="Fitting", qty=5)
        deductions = reconciler.deduct_stock_items([
            LineItem(item_name="Fitting", price=Decimal("100"), unit="Service", kind=ItemKind.SERVICE),
        ])
        assert deductions == []

    def test_order_lines_skipped(self, store, reconciler):
        deductions = reconciler.deduct_stock_items([
            LineItem(item_name="Crizal", price=Decimal("100"), order_id="007"),
        ])
        assert deductions == []

    def test_brand_name_match(self, store, reconciler):
        lens_id = seed_lens(store, brandName="Ray-Ban Frame", type="frame", qty=5)

        deductions = reconciler.deduct_stock_items([
            LineItem(item_name="Ray-Ban Frame", price=Decimal("2000"), qty=2, unit="Pieces"),
        ])

        assert deductions[0].deducted_qty == 2
        assert store.get(LENS_INVENTORY, lens_id)["qty"] == 3

    def test_greedy_across_records(self, store, reconciler):
        first = seed_lens(store, itemName="Lens Cloth", brandName="", type="item", qty=2)
        second = seed_lens(store, itemName="Lens Cloth", brandName="", type="item", qty=5)

        deductions = reconciler.deduct_stock_items([
            LineItem(item_name="Lens Cloth", price=Decimal("20"), qty=4),
        ])

        assert deductions[0].deducted_qty == 4
        assert deductions[0].lens_ids == [first, second]
        assert store.get(LENS_INVENTORY, first)["qty"] == 0
        assert store.get(LENS_INVENTORY, second)["qty"] == 3

    def test_hidden_and_empty_records_ignored(self, store, reconciler):
        hidden = seed_lens(store, brandName="Acuvue", qty=5, hiddenFromInventory=True)
        empty = seed_lens(store, brandName="Acuvue", qty=0)

        deductions = reconciler.deduct_stock_items([
            LineItem(item_name="Acuvue", price=Decimal("900"), qty=1),
        ])

        assert deductions[0].deducted_qty == 0
        assert deductions[0].skipped_reason == "no matching inventory"
        assert store.get(LENS_INVENTORY, hidden)["qty"] == 5
        assert store.get(LENS_INVENTORY, empty)["qty"] == 0

    def test_prescription_tolerance_match(self, store, reconciler):
        lens_id = seed_lens(store, brandName="Hoya", type="prescription", sph="-1.25", cyl="-0.50", qty=2)

        deductions = reconciler.deduct_stock_items([
            LineItem(item_name="Hoya Blue", price=Decimal("1200"), sph="-1.50", cyl="-0.50"),
        ])

        assert deductions[0].lens_ids == [lens_id]
        assert store.get(LENS_INVENTORY, lens_id)["qty"] == 1

    def test_prescription_outside_tolerance_no_match(self, store, reconciler):
        lens_id = seed_lens(store, brandName="Hoya", type="prescription", sph="-2.00", qty=2)

        reconciler.deduct_stock_items([
            LineItem(item_name="Zeiss", price=Decimal("1200"), sph="-1.50"),
        ])

        assert store.get(LENS_INVENTORY, lens_id)["qty"] == 2

    def test_stock_lens_power_slot(self, store, reconciler):
        lens_id = seed_lens(store, brandName="Stock SV", type="stock", powerInventory={
            "-1.00_-0.50": {"quantity": 4},
            "-1.25_0.00": {"quantity": 2},
        }, totalQuantity=6)

        deductions = reconciler.deduct_stock_items([
            LineItem(
                item_name="Stock SV", price=Decimal("300"), kind=ItemKind.STOCK_LENS,
                lens_id=lens_id, power_key="-1.00_-0.50", piece_quantity=3,
            ),
        ])

        record = store.get(LENS_INVENTORY, lens_id)
        assert deductions[0].deducted_qty == 3
        assert record["powerInventory"]["-1.00_-0.50"]["quantity"] == 1
        assert record["totalQuantity"] == 3

    def test_stock_lens_insufficient_is_skipped(self, store, reconciler):
        lens_id = seed_lens(store, brandName="Stock SV", type="stock", powerInventory={
            "-1.00_-0.50": {"quantity": 1},
        })

        deductions = reconciler.deduct_stock_items([
            LineItem(
                item_name="Stock SV", price=Decimal("300"), kind=ItemKind.STOCK_LENS,
                lens_id=lens_id, power_key="-1.00_-0.50", piece_quantity=2,
            ),
        ])

        assert deductions[0].deducted_qty == 0
        assert deductions[0].skipped_reason.startswith("insufficient stock")
        assert store.get(LENS_INVENTORY, lens_id)["powerInventory"]["-1.00_-0.50"]["quantity"] == 1

    def test_failure_recorded_per_line(self):
        store = FailingUpdateStore(LENS_INVENTORY)
        seed_lens(store, brandName="Frame A", qty=3)
        seed_lens(store, brandName="Frame B", qty=3)
        reconciler = InventoryReconciler(store)

        deductions = reconciler.deduct_stock_items([
            LineItem(item_name="Frame A", price=Decimal("100")),
            LineItem(item_name="Frame B", price=Decimal("100")),
        ])

        assert len(deductions) == 2
        assert all(not d.ok for d in deductions)
        assert "write refused" in deductions[0].error

"""
Unit tests for the purchase service.
"""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from core.document_store import PURCHASES
from core.exceptions import PersistenceFailure, StoreError, ValidationError
from models.invoice import DiscountConfig, PartySnapshot, PaymentInfo, PaymentStatus
from models.line_item import LineItem
from modules.calculator import DiscountType
from services.purchase_service import PurchaseService, purchase_lines


@pytest.fixture
def vendor():
    return PartySnapshot(id="vend-1", name="Essilor Distributors", gst_number="32AAACE1234A1Z1", is_vendor=True)


class TestPurchaseLines:
    """Test which rows are kept."""

    def test_filter(self):
        rows = [
            LineItem(item_name="", price=Decimal("100")),
            LineItem(item_name="Zero qty", price=Decimal("100"), qty=0),
            LineItem(item_name="Free", price=Decimal("0")),
            LineItem(item_name="Kept", price=Decimal("100"), qty=2),
        ]
        assert [line.item_name for line in purchase_lines(rows)] == ["Kept"]


class TestSavePurchase:
    """Test validation and the persisted purchase document."""

    def test_vendor_required(self, purchase_service):
        with pytest.raises(ValidationError, match="vendor required"):
            purchase_service.save_purchase(None, [LineItem(item_name="A", price=Decimal("10"))])

    def test_no_items(self, purchase_service, vendor):
        with pytest.raises(ValidationError, match="no items"):
            purchase_service.save_purchase(vendor, [LineItem(item_name="A", price=Decimal("0"))])

    def test_gst_option_accepted(self, store, purchase_service, vendor):
        purchase_id = purchase_service.save_purchase(
            vendor,
            [LineItem(item_name="CR39 Blanks", price=Decimal("100"), qty=10)],
            tax_option_id="GST_12",
            purchase_number="ESS-778",
            purchase_date=date(2024, 7, 2),
        )
        document = store.get(PURCHASES, purchase_id)
        assert document["taxAmount"] == "120.00"
        assert document["totalAmount"] == "1120.00"
        assert document["purchaseNumber"] == "ESS-778"
        assert document["purchaseDate"] == "2024-07-02"
        assert document["vendorName"] == "Essilor Distributors"

    def test_item_discounts_and_balance(self, store, purchase_service, vendor):
        purchase_id = purchase_service.save_purchase(
            vendor,
            [
                LineItem(
                    item_name="Frames", price=Decimal("200"), qty=5,
                    item_discount_type=DiscountType.PERCENTAGE, item_discount_value=Decimal("10"),
                ),
                LineItem(
                    item_name="Cases", price=Decimal("50"), qty=4,
                    item_discount_type=DiscountType.AMOUNT, item_discount_value=Decimal("20"),
                ),
            ],
            discount=DiscountConfig(DiscountType.AMOUNT, Decimal("80")),
            tax_option_id="IGST_12",
            freight=Decimal("30"),
            payment=PaymentInfo(status=PaymentStatus.PARTIAL, amount_paid=Decimal("2000")),
        )
        document = store.get(PURCHASES, purchase_id)

        # 900 + 180 = 1080, less 80 = 1000, tax 120, freight 30
        assert document["subtotal"] == "1080.00"
        assert document["totalAmount"] == "1150.00"
        assert document["amountPaid"] == "2000.00"
        assert document["balance"] == "-850.00"
        assert "balanceDue" not in document
        assert document["items"][0]["itemDiscountType"] == "percentage"

    def test_unknown_tax_option_rejected(self, purchase_service, vendor):
        with pytest.raises(ValidationError):
            purchase_service.save_purchase(
                vendor, [LineItem(item_name="A", price=Decimal("10"))], tax_option_id="VAT_5",
            )

    def test_persistence_failure(self, vendor):
        store = MagicMock()
        store.create.side_effect = StoreError("create", PURCHASES, reason="disk full")
        with pytest.raises(PersistenceFailure):
            PurchaseService(store).save_purchase(vendor, [LineItem(item_name="A", price=Decimal("10"))])

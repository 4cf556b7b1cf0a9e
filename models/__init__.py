"""
Data models for OpticalPOS.

This module contains dataclasses for:
- LineItem: One invoice/purchase row, tagged with its ItemKind
- Order: Lens order referenced by display id
- InventoryLens: Stock lens record
- Invoice / Purchase: Documents persisted at save time
- ReconciliationResult / StockDeduction: Per-line side-effect outcomes
- GstSummary: Period tax report

Documents (LineItem, Invoice, Purchase, Order, InventoryLens) are frozen:
once read or assembled they are never modified in place.
"""

from .line_item import LineItem, ItemKind, Unit, classify_item
from .order import Order, OrderStatus, EyePrescription, DEDUCTIBLE_STATUSES, NON_DEDUCTIBLE_STATUSES
from .inventory import InventoryLens
from .reconciliation import ReconciliationOutcome, ReconciliationResult, StockDeduction
from .invoice import (
    Invoice,
    DiscountConfig,
    PaymentInfo,
    PaymentStatus,
    PartySnapshot,
    SaveInvoiceResult,
)
from .purchase import Purchase
from .transaction import Transaction
from .report import GstSummary, GstInvoiceRow, PartitionTotals, TaxBuckets

__all__ = [
    # Line items
    "LineItem",
    "ItemKind",
    "Unit",
    "classify_item",
    # Orders and inventory
    "Order",
    "OrderStatus",
    "EyePrescription",
    "DEDUCTIBLE_STATUSES",
    "NON_DEDUCTIBLE_STATUSES",
    "InventoryLens",
    # Reconciliation
    "ReconciliationOutcome",
    "ReconciliationResult",
    "StockDeduction",
    # Documents
    "Invoice",
    "DiscountConfig",
    "PaymentInfo",
    "PaymentStatus",
    "PartySnapshot",
    "SaveInvoiceResult",
    "Purchase",
    "Transaction",
    # Reports
    "GstSummary",
    "GstInvoiceRow",
    "PartitionTotals",
    "TaxBuckets",
]

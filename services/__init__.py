"""
Services layer for OpticalPOS.

This module contains the business logic services:
- OrderResolver: Order reference lookup by display id
- InventoryReconciler: Order delivery and stock deduction after a sale
- InvoiceService: Sale validation, persistence and side effects
- PurchaseService: Vendor purchase persistence
- GstReportService: GST period summaries

Every service receives the DocumentStore by constructor injection and
issues its store calls sequentially from the calling (request) thread.
"""

from .order_resolver import OrderResolver
from .reconciliation_service import InventoryReconciler
from .invoice_service import InvoiceService
from .purchase_service import PurchaseService
from .gst_report_service import GstReportService

__all__ = [
    "OrderResolver",
    "InventoryReconciler",
    "InvoiceService",
    "PurchaseService",
    "GstReportService",
]

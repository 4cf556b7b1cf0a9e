"""Shared fixtures: an in-memory store seeded with orders and lenses, and the services on top of it."""

import pytest

from app import create_app
from core.document_store import InMemoryDocumentStore, LENS_INVENTORY, ORDERS
from services import (
    GstReportService,
    InventoryReconciler,
    InvoiceService,
    OrderResolver,
    PurchaseService,
)


def seed_order(store, display_id, status="RECEIVED", **fields):
    """Create an order record and return its key."""
    data = {
        "displayId": display_id,
        "status": status,
        "customerId": "cust-1",
        "customerName": "Vision Opticals",
        "brandName": "Crizal Prevencia",
        "price": 1500,
        "rightSph": "-1.5",
        "rightCyl": "-0.5",
        "rightAxis": "90",
        "rightQty": 1,
        "leftSph": "-1.25",
        "leftQty": 1,
    }
    data.update(fields)
    return store.create(ORDERS, data)


def seed_lens(store, **fields):
    """Create a lens inventory record and return its key."""
    data = {"qty": 1, "brandName": "Crizal Prevencia", "type": "prescription"}
    data.update(fields)
    return store.create(LENS_INVENTORY, data)


# Fixtures

@pytest.fixture
def store():
    """Empty in-memory document store."""
    return InMemoryDocumentStore()


@pytest.fixture
def resolver(store):
    return OrderResolver(store)


@pytest.fixture
def reconciler(store, resolver):
    return InventoryReconciler(store, resolver)


@pytest.fixture
def invoice_service(store, reconciler):
    return InvoiceService(store, reconciler, financial_year="2024-2025")


@pytest.fixture
def purchase_service(store):
    return PurchaseService(store)


@pytest.fixture
def report_service(store):
    return GstReportService(store)


@pytest.fixture
def app(store):
    """Flask app wired to the shared in-memory store."""
    return create_app("config.TestingConfig", store=store)


@pytest.fixture
def client(app):
    return app.test_client()

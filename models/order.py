"""
Lens order data models.

An Order is a lens order placed with a lab or distributor on behalf of a
customer. Staff refer to it by its display id ("007"), which is distinct
from the store key.

Lifecycle:
    PENDING -> PLACED -> RECEIVED -> DISPATCHED -> DELIVERED
    (CANCELLED / DECLINED end the order without fulfilment)

A sale that references a received or dispatched order moves it straight to
DELIVERED; there is no partially delivered state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from modules.formatting import to_decimal


class OrderStatus(str, Enum):
    """Status of a lens order."""

    PENDING = "PENDING"
    PLACED = "PLACED"
    RECEIVED = "RECEIVED"
    DISPATCHED = "DISPATCHED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    DECLINED = "DECLINED"

    @classmethod
    def parse(cls, value: Any) -> Optional["OrderStatus"]:
        """None for blank or unknown status strings."""
        try:
            return cls(str(value or "").upper())
        except ValueError:
            return None


# Not yet fulfilled, or never will be: a sale must not deduct stock
NON_DEDUCTIBLE_STATUSES: FrozenSet[OrderStatus] = frozenset({
    OrderStatus.PENDING,
    OrderStatus.PLACED,
    OrderStatus.CANCELLED,
    OrderStatus.DECLINED,
})

DEDUCTIBLE_STATUSES: FrozenSet[OrderStatus] = frozenset(OrderStatus) - NON_DEDUCTIBLE_STATUSES


@dataclass(frozen=True)
class EyePrescription:
    """Prescription and quantity for one eye."""

    sph: str = ""
    cyl: str = ""
    axis: str = ""
    add: str = ""
    qty: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any], side: str) -> "EyePrescription":
        """Read the '<side>Sph', '<side>Cyl', ... fields of an order document."""
        return cls(
            sph=str(data.get(f"{side}Sph") or ""),
            cyl=str(data.get(f"{side}Cyl") or ""),
            axis=str(data.get(f"{side}Axis") or ""),
            add=str(data.get(f"{side}Add") or ""),
            qty=int(to_decimal(data.get(f"{side}Qty"))),
        )


@dataclass(frozen=True)
class Order:
    """
    A lens order as read from the store.

    Unknown document fields are kept in raw so nothing is lost when the
    order is passed around.
    """

    id: str
    """Store key."""

    display_id: str
    """Human-facing reference, usually zero padded ("007")."""

    status: str
    """Raw status string (see OrderStatus)."""

    customer_id: str = ""
    customer_name: str = ""
    brand_name: str = ""
    price: Any = 0
    right: EyePrescription = field(default_factory=EyePrescription)
    left: EyePrescription = field(default_factory=EyePrescription)
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def order_status(self) -> Optional[OrderStatus]:
        return OrderStatus.parse(self.status)

    @property
    def is_deductible(self) -> bool:
        """True when a sale may consume this order's stock."""
        return self.order_status in DEDUCTIBLE_STATUSES

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Order":
        """Create from a store record (must carry its key under 'id')."""
        return cls(
            id=str(data.get("id", "")),
            display_id=str(data.get("displayId", "")),
            status=str(data.get("status", "")),
            customer_id=str(data.get("customerId", "")),
            customer_name=str(data.get("customerName", "")),
            brand_name=str(data.get("brandName", "")),
            price=data.get("price", 0),
            right=EyePrescription.from_dict(data, "right"),
            left=EyePrescription.from_dict(data, "left"),
            raw=dict(data),
        )

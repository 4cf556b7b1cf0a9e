"""
Lens inventory data models.

An InventoryLens is one stock record in the lensInventory collection. Lenses
received against an order are linked back to it by orderId (store key) or
orderDisplayId (display code), depending on how the record was created.

Stock lenses sold by power keep per-power counts in power_inventory:
    {"-1.00_-0.50": {"quantity": 4, ...}, ...}
with total_quantity holding the sum.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from modules.formatting import to_decimal


@dataclass(frozen=True)
class InventoryLens:
    """A stock lens record as read from the store."""

    id: str
    """Store key."""

    qty: int = 0
    """Identical units in stock."""

    order_id: str = ""
    """Store key of the originating order, if any."""

    order_display_id: str = ""
    """Display id of the originating order, if any."""

    brand_name: str = ""
    item_name: str = ""
    service_name: str = ""
    type: str = ""
    """Lens category ('prescription', 'stock', 'contact', ...)."""

    sph: str = ""
    cyl: str = ""

    hidden_from_inventory: bool = False
    """Created only to feed item suggestions; never sold from."""

    power_inventory: Dict[str, Dict[str, Any]] = field(default_factory=dict, compare=False)
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def in_stock(self) -> bool:
        return self.qty > 0

    @property
    def sellable(self) -> bool:
        """Visible in inventory and with stock left."""
        return self.in_stock and not self.hidden_from_inventory

    def power_quantity(self, power_key: str) -> int:
        """Units left in one power slot (0 when the slot is unknown)."""
        slot = self.power_inventory.get(power_key) or {}
        return int(to_decimal(slot.get("quantity")))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InventoryLens":
        """Create from a store record (must carry its key under 'id')."""
        return cls(
            id=str(data.get("id", "")),
            qty=int(to_decimal(data.get("qty"))),
            order_id=str(data.get("orderId") or ""),
            order_display_id=str(data.get("orderDisplayId") or ""),
            brand_name=str(data.get("brandName") or ""),
            item_name=str(data.get("itemName") or ""),
            service_name=str(data.get("serviceName") or ""),
            type=str(data.get("type") or ""),
            sph=str(data.get("sph") or ""),
            cyl=str(data.get("cyl") or ""),
            hidden_from_inventory=bool(
                data.get("hiddenFromInventory") or data.get("createdForSale")
            ),
            power_inventory=dict(data.get("powerInventory") or {}),
            raw=dict(data),
        )

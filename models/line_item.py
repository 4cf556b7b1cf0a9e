"""
Line item data models.

A LineItem is one row of a sale or purchase. Rows are edited freely while an
invoice is being built and frozen once the invoice is saved, so LineItem is a
frozen dataclass: with_normalized_prescription() and friends return copies.

Rows come in several flavours (plain items, stock lenses picked by power,
contact lenses, prescription lenses from an order, services). Historically
the flavour was inferred from a handful of loose flags on the row; here it is
an explicit ItemKind tag, derived once by classify_item() when a row is read.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from modules.calculator import DiscountType, compute_line_total
from modules.formatting import (
    MAX_QUANTITY,
    bounded_decimal,
    format_optical_value,
    money_str,
    quantize_money,
)


class Unit(str, Enum):
    """Units offered on invoice rows. Stored values are free text."""

    PAIRS = "Pairs"
    PIECES = "Pieces"
    DOZEN = "Dozen"
    PACK = "Pack"
    BOX = "Box"
    SET = "Set"
    SERVICE = "Service"


class ItemKind(str, Enum):
    """What a row represents; decides how a sale touches inventory."""

    REGULAR = "regular"
    """Frame, accessory or any other stocked item matched by name."""

    STOCK_LENS = "stockLens"
    """Stock lens sold from a specific power slot of a lens record."""

    CONTACT_LENS = "contactLens"
    """Contact lens matched by name."""

    PRESCRIPTION = "prescription"
    """Prescription lens, usually fulfilled through a lens order."""

    SERVICE = "service"
    """Fitting, repair or other service; never touches inventory."""


def _is_service(data: Dict[str, Any]) -> bool:
    unit = str(data.get("unit") or "").lower()
    item_name = str(data.get("itemName") or "").lower()
    return bool(
        data.get("isService")
        or data.get("type") == "service"
        or unit == "service"
        or "service" in item_name
        or data.get("serviceData")
    )


def classify_item(data: Dict[str, Any]) -> ItemKind:
    """
    Derive the ItemKind of a raw row dict.

    An explicit "itemKind" wins. Otherwise the legacy flags are read in
    order: service markers, stock lens power selection, contact lens type,
    order reference or prescription values, and finally regular.
    """
    explicit = data.get("itemKind")
    if explicit:
        try:
            return ItemKind(explicit)
        except ValueError:
            pass

    if _is_service(data):
        return ItemKind.SERVICE
    if data.get("lensType") == "stockLens" or data.get("powerKey"):
        return ItemKind.STOCK_LENS
    if data.get("type") == "contact" or data.get("lensType") == "contactLens":
        return ItemKind.CONTACT_LENS
    if str(data.get("orderId") or "").strip() or data.get("type") == "prescription":
        return ItemKind.PRESCRIPTION
    return ItemKind.REGULAR


@dataclass(frozen=True)
class LineItem:
    """
    One row of an invoice or purchase.

    total is derived from price x qty (less any item discount) when not
    given explicitly.
    """

    item_name: str = ""
    """Item, brand or service name."""

    qty: int = 1
    """Number of units sold."""

    price: Decimal = Decimal("0")
    """Unit price."""

    unit: str = Unit.PAIRS.value
    """Unit label (see Unit)."""

    sph: str = ""
    cyl: str = ""
    axis: str = ""
    add: str = ""

    order_id: str = ""
    """Display id of the lens order this row fulfils, if any."""

    kind: ItemKind = ItemKind.REGULAR
    """Row flavour."""

    item_discount_type: DiscountType = DiscountType.AMOUNT
    item_discount_value: Decimal = Decimal("0")
    """Item-level discount (purchase flow)."""

    lens_id: str = ""
    power_key: str = ""
    piece_quantity: int = 0
    """Stock lens power slot sold (STOCK_LENS rows only)."""

    total: Optional[Decimal] = None
    """Line total."""

    def __post_init__(self) -> None:
        if self.total is None:
            object.__setattr__(self, "total", compute_line_total(
                self.price, self.qty, self.item_discount_type, self.item_discount_value
            ))
        else:
            object.__setattr__(self, "total", quantize_money(self.total))

    @property
    def has_order_reference(self) -> bool:
        return bool(self.order_id and self.order_id.strip())

    def with_normalized_prescription(self) -> "LineItem":
        """Copy with SPH/CYL/ADD canonicalized. AXIS is kept as entered."""
        return replace(
            self,
            sph=format_optical_value(self.sph),
            cyl=format_optical_value(self.cyl),
            add=format_optical_value(self.add),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a store document."""
        data: Dict[str, Any] = {
            "orderId": self.order_id,
            "itemName": self.item_name,
            "itemKind": self.kind.value,
            "sph": self.sph,
            "cyl": self.cyl,
            "axis": self.axis,
            "add": self.add,
            "qty": self.qty,
            "unit": self.unit,
            "price": money_str(self.price),
            "total": money_str(self.total),
        }
        if self.item_discount_value > 0:
            data["itemDiscountType"] = self.item_discount_type.value
            data["itemDiscount"] = money_str(self.item_discount_value)
        if self.kind is ItemKind.STOCK_LENS and self.lens_id:
            data["lensId"] = self.lens_id
            data["powerKey"] = self.power_key
            data["pieceQuantity"] = self.piece_quantity
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LineItem":
        """
        Create from a row dict (form payload or stored document).

        Missing or unparseable numbers read as zero. The total is always
        re-derived from price, qty and item discount; a "total" sent by the
        client is ignored.

        Raises:
            ValidationError: If price, qty or item discount is out of range
        """
        return cls(
            item_name=str(data.get("itemName") or "").strip(),
            qty=int(bounded_decimal(data.get("qty", 1), "qty", MAX_QUANTITY)),
            price=bounded_decimal(data.get("price"), "price"),
            unit=str(data.get("unit") or Unit.PAIRS.value),
            sph=str(data.get("sph") or ""),
            cyl=str(data.get("cyl") or ""),
            axis=str(data.get("axis") or ""),
            add=str(data.get("add") or ""),
            order_id=str(data.get("orderId") or "").strip(),
            kind=classify_item(data),
            item_discount_type=DiscountType.parse(data.get("itemDiscountType")),
            item_discount_value=bounded_decimal(
                data.get("itemDiscount", data.get("itemDiscountValue")), "itemDiscount"
            ),
            lens_id=str(data.get("lensId") or ""),
            power_key=str(data.get("powerKey") or ""),
            piece_quantity=int(bounded_decimal(data.get("pieceQuantity"), "pieceQuantity", MAX_QUANTITY)),
        )

"""Fixed GST tax option catalog for sales and purchases."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class TaxOption:
    """One selectable tax rate."""

    id: str
    """Stable identifier stored on invoices (e.g. 'CGST_SGST_12')."""

    label: str
    """Human-readable label."""

    rate: Decimal
    """Percentage rate (0-28)."""

    split: bool = False
    """True when the rate divides into equal CGST and SGST halves."""

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "label": self.label,
            "rate": str(self.rate),
            "split": self.split,
        }


TAX_FREE = TaxOption("TAX_FREE", "Tax Free", Decimal("0"))

SALE_TAX_OPTIONS: Tuple[TaxOption, ...] = (
    TAX_FREE,
    TaxOption("CGST_SGST_6", "CGST/SGST 6%", Decimal("6"), split=True),
    TaxOption("CGST_SGST_12", "CGST/SGST 12%", Decimal("12"), split=True),
    TaxOption("CGST_SGST_18", "CGST/SGST 18%", Decimal("18"), split=True),
    TaxOption("IGST_6", "IGST 6%", Decimal("6")),
    TaxOption("IGST_12", "IGST 12%", Decimal("12")),
    TaxOption("IGST_18", "IGST 18%", Decimal("18")),
)

# Purchases also accept a plain "GST" rate for vendors that do not split
PURCHASE_TAX_OPTIONS: Tuple[TaxOption, ...] = (
    TAX_FREE,
    TaxOption("GST_6", "GST 6%", Decimal("6")),
    TaxOption("GST_12", "GST 12%", Decimal("12")),
    TaxOption("GST_18", "GST 18%", Decimal("18")),
) + SALE_TAX_OPTIONS[1:]


def find_tax_option(
    tax_id: Optional[str],
    catalog: Tuple[TaxOption, ...] = SALE_TAX_OPTIONS
) -> Optional[TaxOption]:
    """Exact lookup; None when the id is not in the catalog."""
    for option in catalog:
        if option.id == tax_id:
            return option
    return None


def get_tax_option(
    tax_id: Optional[str],
    catalog: Tuple[TaxOption, ...] = SALE_TAX_OPTIONS
) -> TaxOption:
    """Lookup falling back to the first catalog entry (tax free) for display."""
    return find_tax_option(tax_id, catalog) or catalog[0]


def is_integrated(tax_id: Optional[str]) -> bool:
    """IGST family - the whole amount is integrated tax."""
    return bool(tax_id) and "IGST" in tax_id


def is_central_state_split(tax_id: Optional[str]) -> bool:
    """CGST/SGST family - the amount splits into equal central and state halves."""
    return bool(tax_id) and "CGST_SGST" in tax_id

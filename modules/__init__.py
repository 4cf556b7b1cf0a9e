"""Pure helper modules for OpticalPOS (formatting, tax catalog, calculator, invoice numbering)."""

__all__ = [
    "calculator",
    "formatting",
    "invoice_numbering",
    "tax_options",
]

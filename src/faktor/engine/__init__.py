"""Invoice arithmetic, validation and the working-copy lifecycle."""

from .calculator import (
    InvoiceTotals,
    calculate_discount,
    calculate_invoice_totals,
    calculate_subtotal,
    calculate_tax,
    calculate_total,
    calculate_totals,
    round_toman,
)
from .records import build_invoice_payload, dashboard_stats, generate_invoice_number, serialize_invoice
from .store import InvoiceStore, create_default_invoice, create_empty_service, resolve_payment_info
from .validation import get_field_error, validate_invoice, validate_service

__all__ = [
    "InvoiceStore",
    "InvoiceTotals",
    "build_invoice_payload",
    "calculate_discount",
    "calculate_invoice_totals",
    "calculate_subtotal",
    "calculate_tax",
    "calculate_total",
    "calculate_totals",
    "create_default_invoice",
    "create_empty_service",
    "dashboard_stats",
    "generate_invoice_number",
    "get_field_error",
    "resolve_payment_info",
    "round_toman",
    "serialize_invoice",
    "validate_invoice",
    "validate_service",
]

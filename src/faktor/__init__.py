"""faktor: invoice validation, totals and Iranian payment identifiers."""

from .detect.banks import BankMatch, BankTable, detect_bank
from .detect.validators import (
    is_valid_email,
    is_valid_invoice_number,
    is_valid_iranian_card,
    is_valid_iranian_iban,
    is_valid_iranian_phone,
)
from .engine.calculator import InvoiceTotals, calculate_total, calculate_totals
from .engine.validation import validate_invoice
from .models import Customer, Invoice, PaymentInfo, Service, ValidationResult

__version__ = "0.1.0"

__all__ = [
    "BankMatch",
    "BankTable",
    "Customer",
    "Invoice",
    "InvoiceTotals",
    "PaymentInfo",
    "Service",
    "ValidationResult",
    "calculate_total",
    "calculate_totals",
    "detect_bank",
    "is_valid_email",
    "is_valid_invoice_number",
    "is_valid_iranian_card",
    "is_valid_iranian_iban",
    "is_valid_iranian_phone",
    "validate_invoice",
]

"""
Invoice data model.

The models mirror what the invoice form and the document store exchange, so
they accept both snake_case field names and the camelCase names used on the
wire (``paymentInfo.cardNumber``), and dump camelCase with ``by_alias=True``.

They are deliberately permissive: a half-filled form must still be
representable so :func:`faktor.engine.validation.validate_invoice` can report
on it. Business rules (positive quantities, valid card numbers...) live in the
validator, not in field constraints.

Models are frozen; change them with ``model_copy(update=...)``.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Model(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# ---- Line items and parties ----

class Service(_Model):
    """A billed line item. ``price`` is in whole Toman."""
    id: int = 0
    description: Optional[str] = ""
    additional_description: Optional[str] = None
    quantity: Optional[float] = None
    price: Optional[float] = None

    @property
    def line_total(self) -> float:
        return (self.quantity or 0) * (self.price or 0)


class Customer(_Model):
    name: Optional[str] = ""
    company: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class PaymentInfo(_Model):
    """Card the customer pays to; bank name/logo are usually auto-detected."""
    card_number: Optional[str] = ""
    card_holder_name: Optional[str] = ""
    bank_name: Optional[str] = None
    bank_logo: Optional[str] = None
    iban: Optional[str] = None


class CompanyCard(_Model):
    """A card the business accepts payments on (configured, not entered)."""
    id: int
    card_number: str
    card_holder_name: str
    bank_name: Optional[str] = None
    bank_logo: Optional[str] = None
    iban: Optional[str] = None
    is_default: bool = False


# ---- Invoice ----

class Invoice(_Model):
    """
    The working invoice.

    ``date`` is an opaque, locale-formatted string. ``discount`` and ``tax``
    are percentages; ``None`` means "not set" and is treated as 0 wherever an
    amount is computed.
    """
    number: Optional[str] = ""
    date: Optional[str] = ""
    customer: Customer = Field(default_factory=Customer)
    services: List[Service] = Field(default_factory=list)
    payment_info: PaymentInfo = Field(default_factory=PaymentInfo)
    discount: Optional[float] = None
    tax: Optional[float] = None
    notes: Optional[str] = None


class StoredInvoice(Invoice):
    """
    An invoice as persisted by the storage layer.

    ``id`` is the store-assigned identity (``_id`` on the wire) and is
    unrelated to the business-facing ``number``.
    """
    id: Optional[str] = Field(default=None, alias="_id")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None


# ---- Validation results ----

class ValidationIssue(_Model):
    """One failed rule, keyed by a dotted field path (``services.2.price``)."""
    field: str
    message: str


class ValidationResult(_Model):
    is_valid: bool
    errors: List[ValidationIssue] = Field(default_factory=list)


# ---- Aggregates ----

class DashboardStats(_Model):
    total_invoices: int = 0
    total_revenue: int = 0
    total_customers: int = 0
    this_month: int = 0
    recent_invoices: List[StoredInvoice] = Field(default_factory=list)

"""
The working copy of an invoice while it is being composed.

`InvoiceStore` is the explicit state container a UI (or any other caller)
holds on to: it starts from a default invoice, applies field-by-field edits,
and hands out immutable snapshots to the validator and calculator. Every
mutation replaces ``store.invoice`` with a new model, so a snapshot taken
before an edit never changes underneath its holder.
"""

from __future__ import annotations

import logging
import time
from datetime import date
from typing import Any, Callable, Mapping, Optional, Union

from ..config import FaktorConfig
from ..detect.banks import BankTable, detect_bank
from ..models import CompanyCard, Invoice, PaymentInfo, Service, ValidationResult
from .calculator import InvoiceTotals, calculate_invoice_totals
from .validation import validate_invoice

logger = logging.getLogger(__name__)


def resolve_payment_info(card: CompanyCard, table: Optional[BankTable] = None) -> PaymentInfo:
    """
    Payment block for a company card.

    The detected bank name/logo win over whatever the card was configured
    with; the configured values are the fallback for unknown BINs.
    """
    detected = detect_bank(card.card_number, table)
    return PaymentInfo(
        card_number=card.card_number,
        card_holder_name=card.card_holder_name,
        bank_name=(detected.bank if detected else None) or card.bank_name or "",
        bank_logo=(detected.logo if detected else None) or card.bank_logo,
        iban=card.iban,
    )


def create_default_invoice(
    config: Optional[FaktorConfig] = None,
    table: Optional[BankTable] = None,
    today: Optional[date] = None,
) -> Invoice:
    """A blank invoice: no services, default card, standard tax, today's date."""
    config = config or FaktorConfig()
    today = today or date.today()
    return Invoice(
        number="",
        date=today.strftime(config.invoice.date_format),
        services=[],
        payment_info=resolve_payment_info(config.default_card, table),
        discount=config.invoice.discount,
        tax=config.invoice.tax,
        notes="",
    )


def create_empty_service() -> Service:
    return Service(id=0, description="", additional_description="", quantity=1, price=0)


class InvoiceStore:
    """
    Mutable holder of the current :class:`Invoice`.

    Unknown service ids passed to :meth:`edit_service` / :meth:`remove_service`
    are ignored. Field updates are re-validated against the model, so a value
    of the wrong type raises :class:`pydantic.ValidationError` here rather
    than reaching the calculator.
    """

    def __init__(
        self,
        config: Optional[FaktorConfig] = None,
        bank_table: Optional[BankTable] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.config = config or FaktorConfig()
        self.bank_table = bank_table
        self._today = today
        self._last_service_id = 0
        self._invoice = self._initial()

    # ---------------- Snapshot ----------------

    @property
    def invoice(self) -> Invoice:
        return self._invoice

    def totals(self) -> InvoiceTotals:
        return calculate_invoice_totals(self._invoice)

    def validate(self) -> ValidationResult:
        return validate_invoice(self._invoice)

    # ---------------- Mutations ----------------

    def set_invoice(self, **updates: Any) -> Invoice:
        """Merge top-level field updates given by snake_case field name."""
        data = self._invoice.model_dump()
        data.update(updates)
        self._invoice = Invoice.model_validate(data)
        return self._invoice

    def add_service(self, service: Union[Service, Mapping[str, Any], None] = None) -> Service:
        """
        Append a line item. A service without an id (``0``) gets a fresh,
        strictly increasing millisecond-timestamp id.
        """
        if service is None:
            service = create_empty_service()
        elif not isinstance(service, Service):
            service = Service.model_validate(service)
        if not service.id:
            service = service.model_copy(update={"id": self.next_service_id()})
        self._invoice = self._invoice.model_copy(
            update={"services": [*self._invoice.services, service]}
        )
        return service

    def edit_service(self, service_id: int, **changes: Any) -> Optional[Service]:
        edited: Optional[Service] = None
        services = []
        for s in self._invoice.services:
            if s.id == service_id:
                s = Service.model_validate({**s.model_dump(), **changes})
                edited = s
            services.append(s)
        if edited is not None:
            self._invoice = self._invoice.model_copy(update={"services": services})
        return edited

    def remove_service(self, service_id: int) -> None:
        self._invoice = self._invoice.model_copy(
            update={"services": [s for s in self._invoice.services if s.id != service_id]}
        )

    def select_card(self, card: CompanyCard) -> PaymentInfo:
        payment = resolve_payment_info(card, self.bank_table)
        self._invoice = self._invoice.model_copy(update={"payment_info": payment})
        return payment

    def set_card_number(self, card_number: str) -> PaymentInfo:
        """
        Change the card number and refresh the detected bank name/logo.
        An unknown BIN clears both, since neither belongs to the new card.
        """
        detected = detect_bank(card_number, self.bank_table)
        payment = self._invoice.payment_info.model_copy(update={
            "card_number": card_number,
            "bank_name": detected.bank if detected else None,
            "bank_logo": detected.logo if detected else None,
        })
        self._invoice = self._invoice.model_copy(update={"payment_info": payment})
        return payment

    def reset(self) -> Invoice:
        self._invoice = self._initial()
        logger.debug("Invoice store reset")
        return self._invoice

    def load_invoice(self, invoice: Union[Invoice, Mapping[str, Any]]) -> Invoice:
        """Replace the working copy, e.g. with a record loaded from history."""
        if not isinstance(invoice, Invoice):
            invoice = Invoice.model_validate(invoice)
        elif type(invoice) is not Invoice:
            # Drop storage metadata; the working copy is a plain invoice.
            invoice = Invoice.model_validate(invoice.model_dump(include=set(Invoice.model_fields)))
        self._invoice = invoice
        self._last_service_id = max((s.id for s in invoice.services), default=0)
        logger.debug("Loaded invoice %r with %d services", invoice.number, len(invoice.services))
        return invoice

    def next_service_id(self) -> int:
        """A millisecond-timestamp id, strictly greater than any id handed out or loaded."""
        existing = max((s.id for s in self._invoice.services), default=0)
        candidate = max(time.time_ns() // 1_000_000, existing + 1, self._last_service_id + 1)
        self._last_service_id = candidate
        return candidate

    # ---------------- Internals ----------------

    def _initial(self) -> Invoice:
        return create_default_invoice(self.config, self.bank_table, self._today())

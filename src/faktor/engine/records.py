"""
Shaping invoices for storage and summarizing stored ones.

The document store itself is external; these helpers only produce the plain
payload it receives, the JSON-ready form of what it returns, and the
dashboard aggregates computed over a list of stored records.
"""

from __future__ import annotations

import random
import string
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence

from ..models import DashboardStats, Invoice, StoredInvoice
from .calculator import calculate_invoice_totals

NUMBER_LETTER_COUNT = 3
NUMBER_DIGIT_COUNT = 4
RECENT_INVOICES = 5


def generate_invoice_number(rng: Optional[random.Random] = None) -> str:
    """Random business number such as ``KQX-0427``. Uniqueness is the store's job."""
    rng = rng or random.Random()
    letters = "".join(rng.choice(string.ascii_uppercase) for _ in range(NUMBER_LETTER_COUNT))
    digits = str(rng.randrange(10 ** NUMBER_DIGIT_COUNT)).zfill(NUMBER_DIGIT_COUNT)
    return f"{letters}-{digits}"


def build_invoice_payload(invoice: Invoice) -> Dict[str, Any]:
    """
    Body sent to the store on save: camelCase keys, business fields only,
    with ``discount``/``tax`` defaulting to 0 and ``notes`` to "".
    """
    payload = invoice.model_dump(
        by_alias=True,
        include={"number", "date", "customer", "services", "payment_info"},
    )
    payload["discount"] = invoice.discount or 0
    payload["tax"] = invoice.tax or 0
    payload["notes"] = invoice.notes or ""
    return payload


def serialize_invoice(record: StoredInvoice) -> Dict[str, Any]:
    """JSON-ready dict of a stored record (ISO-8601 timestamps, ``_id``)."""
    return record.model_dump(mode="json", by_alias=True)


def _customer_key(record: Invoice) -> str:
    return record.customer.phone or record.customer.name or record.number or ""


def dashboard_stats(
    records: Sequence[StoredInvoice],
    now: Optional[datetime] = None,
) -> DashboardStats:
    """
    Aggregate stored invoices for the dashboard.

    ``records`` are expected newest first, as the store returns them.
    Revenue is the sum of each invoice's payable (whole Toman) total, so it
    always equals the sum of the totals printed on the invoices.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    def created_this_month(record: StoredInvoice) -> bool:
        created = record.created_at
        if created is None:
            return False
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        created = created.astimezone(timezone.utc)
        current = now.astimezone(timezone.utc)
        return (created.year, created.month) == (current.year, current.month)

    return DashboardStats(
        total_invoices=len(records),
        total_revenue=sum(calculate_invoice_totals(r).payable for r in records),
        total_customers=len({_customer_key(r) for r in records}),
        this_month=sum(1 for r in records if created_this_month(r)),
        recent_invoices=list(records[:RECENT_INVOICES]),
    )

"""
Invoice arithmetic: subtotal, discount, tax and total.

All amounts are Toman. Intermediate values are plain floats and are not
rounded; :func:`round_toman` is the one rounding rule, applied to produce the
``payable`` amount that is displayed, printed and aggregated.

Percentages outside [0, 100] (or missing) are treated as "not applied" for
both discount and tax.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Iterable, Optional

from ..models import Invoice, Service


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: float
    discount_amount: float
    after_discount: float
    tax_amount: float
    total: float

    @property
    def payable(self) -> int:
        """Total rounded to whole Toman."""
        return round_toman(self.total)


def round_toman(amount: float) -> int:
    """Round half-up to a whole Toman. Non-finite amounts round to 0."""
    if amount is None or not math.isfinite(amount):
        return 0
    with localcontext() as ctx:
        # Finite floats stay below 1e309, so every digit fits.
        ctx.prec = 400
        return int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _applicable_rate(percent: Optional[float]) -> float:
    # Missing, zero, negative, >100 and NaN all mean "do not apply".
    if not percent or not 0 < percent <= 100:
        return 0.0
    return percent / 100


def calculate_subtotal(services: Iterable[Service]) -> float:
    return sum(((s.quantity or 0) * (s.price or 0) for s in services), 0.0)


def calculate_discount(subtotal: float, discount_percent: Optional[float]) -> float:
    return subtotal * _applicable_rate(discount_percent)


def calculate_tax(amount: float, tax_percent: Optional[float]) -> float:
    return amount * _applicable_rate(tax_percent)


def calculate_total(
    subtotal: float,
    discount_percent: Optional[float] = 0,
    tax_percent: Optional[float] = 0,
) -> float:
    """
    Apply the discount to ``subtotal``, then tax on the discounted amount.

    >>> calculate_total(1000, 10, 9)
    981.0
    """
    after_discount = subtotal - calculate_discount(subtotal, discount_percent)
    return after_discount + calculate_tax(after_discount, tax_percent)


def calculate_totals(
    services: Iterable[Service],
    discount_percent: Optional[float] = 0,
    tax_percent: Optional[float] = 0,
) -> InvoiceTotals:
    """Full breakdown for a list of services and percentage discount/tax."""
    subtotal = calculate_subtotal(services)
    discount_amount = calculate_discount(subtotal, discount_percent)
    after_discount = subtotal - discount_amount
    tax_amount = calculate_tax(after_discount, tax_percent)
    return InvoiceTotals(
        subtotal=subtotal,
        discount_amount=discount_amount,
        after_discount=after_discount,
        tax_amount=tax_amount,
        total=after_discount + tax_amount,
    )


def calculate_invoice_totals(invoice: Invoice) -> InvoiceTotals:
    return calculate_totals(invoice.services, invoice.discount or 0, invoice.tax or 0)

"""Display helpers for amounts and payment identifiers."""

from __future__ import annotations

import re
from typing import Optional, Union

TOMAN = "تومان"


def format_price(value: Union[int, float, str, None]) -> str:
    """
    Group an amount with thousands separators: ``1250000`` -> ``"1,250,000"``.

    Empty and zero values render as ``""`` so an untouched price input stays
    blank.
    """
    if not value:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    num = str(value).replace(",", "")
    return re.sub(r"\B(?=(\d{3})+(?!\d))", ",", num)


def parse_price(value: Optional[str]) -> int:
    """Inverse of :func:`format_price`; anything unreadable becomes 0."""
    if not value:
        return 0
    match = re.match(r"\s*[+-]?\d+", value.replace(",", ""))
    return int(match.group(0)) if match else 0


def format_toman(amount: Union[int, float]) -> str:
    return f"{format_price(amount) or '0'} {TOMAN}"


def format_iban(iban: str) -> str:
    """``ir06296...`` -> ``IR06 2960 0000 ...``"""
    cleaned = re.sub(r"\s", "", iban).upper()
    return " ".join(cleaned[i:i + 4] for i in range(0, len(cleaned), 4))


def format_card_number(card_number: str) -> str:
    """Group the digits of a card number as ``XXXX-XXXX-XXXX-XXXX``."""
    digits = re.sub(r"\D", "", card_number)
    return "-".join(digits[i:i + 4] for i in range(0, len(digits), 4))

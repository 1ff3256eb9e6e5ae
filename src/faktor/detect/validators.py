"""
Validators for Iranian payment identifiers and contact details.

Why this file exists
--------------------
Card numbers, IBANs (shaba) and phone numbers are typed by hand into the
invoice form. These functions give cheap, deterministic answers to "is this
well-formed?" so the invoice validator can attach a message to the exact
input instead of letting a bad card number reach a printed invoice.

Design principles
-----------------
- **Pure functions**: no I/O, no logging, no shared state.
- **Total**: every function returns ``False`` for malformed input, including
  ``None`` or non-string values. Nothing here raises.
- **Lenient input**: user-friendly separators (spaces, dashes) are stripped
  before the checks run.
"""

from __future__ import annotations

import re
from typing import Any

_IBAN_SHAPE = re.compile(r"^IR\d{24}$")
_PHONE_SHAPE = re.compile(r"^09\d{9}$")
_EMAIL_SHAPE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

CARD_LENGTH = 16
MIN_INVOICE_NUMBER_LENGTH = 3


def _digits_only(s: str) -> str:
    """
    Return only the ASCII digit characters from a string.

    "6037-9972 1100-8801" normalizes to "6037997211008801".
    """
    return "".join(ch for ch in s if "0" <= ch <= "9")


def normalize_spaces_dashes(s: str) -> str:
    """
    Remove whitespace and dashes from a string.

    Used before BIN lookup so "6037-9972-..." and "6037 9972 ..." share a key.
    """
    return re.sub(r"[\s-]", "", s)


def luhn_ok(digits: str) -> bool:
    """
    Run the Luhn ("mod 10") checksum over a string of digits.

    Digits are processed from right to left; every second digit (the first
    one, the check digit, is not doubled) is doubled and reduced by 9 when it
    exceeds 9.
    """
    total = 0
    for i, ch in enumerate(reversed(digits)):
        d = ord(ch) - 48  # '0' -> 48
        if i % 2 == 1:
            d *= 2
            if d > 9:
                d -= 9
        total += d
    return total % 10 == 0


def is_valid_iranian_card(card_number: Any) -> bool:
    """
    Validate a 16-digit Iranian bank card number (Shetab).

    Args:
        card_number: Candidate string; non-digits are ignored.

    Returns:
        True if exactly 16 digits remain and they pass Luhn.
    """
    if not isinstance(card_number, str):
        return False
    n = _digits_only(card_number)
    if len(n) != CARD_LENGTH:
        return False
    return luhn_ok(n)


def _mod97(numeric: str) -> int:
    # Fold a leading block of up to 9 digits into its remainder until at most
    # two digits are left. Keeps every intermediate value well inside int64.
    remainder = numeric
    while len(remainder) > 2:
        block = remainder[:9]
        remainder = str(int(block) % 97) + remainder[9:]
    return int(remainder) % 97


def is_valid_iranian_iban(iban: Any) -> bool:
    """
    Validate an Iranian IBAN (shaba) with the ISO 7064 mod-97 checksum.

    Steps:
      1) Strip whitespace and uppercase.
      2) Require ``IR`` followed by exactly 24 digits.
      3) Move the first 4 chars to the end.
      4) Replace letters A..Z with 10..35.
      5) A valid IBAN leaves remainder 1 modulo 97.

    Args:
        iban: Candidate string (may include spaces).

    Returns:
        True if the IBAN is well-formed and its checksum holds.
    """
    if not isinstance(iban, str):
        return False
    cleaned = re.sub(r"\s", "", iban).upper()
    if not _IBAN_SHAPE.match(cleaned):
        return False

    rearranged = cleaned[4:] + cleaned[:4]
    numeric = "".join(
        str(ord(ch) - 55) if "A" <= ch <= "Z" else ch for ch in rearranged
    )
    return _mod97(numeric) == 1


def is_valid_iranian_phone(phone: Any) -> bool:
    """Iranian mobile number: 11 digits starting with ``09``."""
    if not isinstance(phone, str):
        return False
    return bool(_PHONE_SHAPE.match(_digits_only(phone)))


def is_valid_email(email: Any) -> bool:
    if not isinstance(email, str):
        return False
    return bool(_EMAIL_SHAPE.match(email))


def is_valid_invoice_number(number: Any) -> bool:
    """Invoice numbers need at least 3 characters once trimmed."""
    if not isinstance(number, str):
        return False
    return len(number.strip()) >= MIN_INVOICE_NUMBER_LENGTH

"""
Bank identification from the leading digits (BIN) of an Iranian card.

What this does
--------------
- Loads the BIN table (`faktor/detect/tables/bank_bins.yaml` by default, or a
  caller-supplied YAML file with the same shape).
- Maps the first 4 digits of a card to a list of candidate issuers.
- Breaks ties between issuers sharing a 4-digit prefix using the first 6
  digits, falling back to the first candidate.

Lookup misses are a normal "no information" answer (``None``), never an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .validators import normalize_spaces_dashes

logger = logging.getLogger(__name__)

PRIMARY_PREFIX_LENGTH = 4
TIE_BREAK_PREFIX_LENGTH = 6


@dataclass(frozen=True)
class BankBin:
    """
    One candidate issuer for a 4-digit prefix.

    Attributes:
        bank: Display name of the bank.
        prefix_examples: Sample card prefixes (e.g. "6037-99") used to tell
            apart banks sharing the 4-digit prefix.
        logo: Path of the bank logo, if one is known.
    """
    bank: str
    prefix_examples: tuple[str, ...] = ()
    logo: Optional[str] = None


@dataclass(frozen=True)
class BankMatch:
    bank: str
    logo: Optional[str] = None


@dataclass
class BankTable:
    """
    Immutable-by-convention BIN lookup table.

    Build it with :meth:`from_yaml` / :meth:`from_mapping`, or use
    :func:`load_bank_table` for the shipped table.
    """
    bins: Dict[str, List[BankBin]] = field(default_factory=dict)

    # -- Construction ----------------------------------------------------------------------

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "BankTable":
        """
        Build a table from the parsed YAML shape::

            logos: {bank name: logo path}
            bins:  {prefix: [{bank, prefix_examples, logo?, logo_from?}]}

        An explicit ``logo`` wins, then the logo of ``logo_from``, then the
        logo registered under the entry's own bank name.
        """
        logos: Dict[str, str] = data.get("logos", {}) or {}
        bins: Dict[str, List[BankBin]] = {}
        for prefix, entries in (data.get("bins", {}) or {}).items():
            candidates: List[BankBin] = []
            for entry in entries or []:
                if not isinstance(entry, dict) or "bank" not in entry:
                    continue
                bank = str(entry["bank"])
                logo = entry.get("logo") or logos.get(entry.get("logo_from", bank))
                candidates.append(
                    BankBin(
                        bank=bank,
                        prefix_examples=tuple(str(p) for p in entry.get("prefix_examples", [])),
                        logo=logo,
                    )
                )
            if candidates:
                bins[str(prefix)] = candidates
        return cls(bins=bins)

    @classmethod
    def from_yaml(cls, text: str) -> "BankTable":
        return cls.from_mapping(yaml.safe_load(text) or {})

    @classmethod
    def from_path(cls, path: Path) -> "BankTable":
        table = cls.from_yaml(Path(path).read_text(encoding="utf-8"))
        logger.debug("Loaded %d BIN prefixes from %s", len(table.bins), path)
        return table

    # -- Lookup ----------------------------------------------------------------------------

    def candidates(self, prefix: str) -> List[BankBin]:
        return list(self.bins.get(prefix, []))

    def detect(self, card_number: Optional[str]) -> Optional[BankMatch]:
        """
        Identify the issuing bank of a (possibly formatted) card number.

        Order of operations:
          1) strip spaces/dashes; fewer than 4 characters -> None
          2) 4-digit prefix lookup; unknown prefix -> None
          3) single candidate -> it
          4) several candidates -> first whose 6-digit example matches
          5) no example matches -> first candidate
        """
        if not card_number or not isinstance(card_number, str):
            return None

        clean = normalize_spaces_dashes(card_number)
        prefix = clean[:PRIMARY_PREFIX_LENGTH]
        if len(prefix) < PRIMARY_PREFIX_LENGTH:
            return None

        candidates = self.bins.get(prefix)
        if not candidates:
            return None

        if len(candidates) == 1:
            return _as_match(candidates[0])

        six = clean[:TIE_BREAK_PREFIX_LENGTH]
        for candidate in candidates:
            for example in candidate.prefix_examples:
                example_six = normalize_spaces_dashes(example)[:TIE_BREAK_PREFIX_LENGTH]
                if six.startswith(example_six):
                    return _as_match(candidate)

        return _as_match(candidates[0])


def _as_match(candidate: BankBin) -> BankMatch:
    return BankMatch(bank=candidate.bank, logo=candidate.logo)


@lru_cache(maxsize=None)
def load_bank_table(path: Optional[Path] = None) -> BankTable:
    """
    Load a BIN table once per path; ``None`` means the table shipped with the
    package.
    """
    if path is not None:
        return BankTable.from_path(path)
    text = resources.files("faktor.detect").joinpath("tables").joinpath("bank_bins.yaml").read_text(encoding="utf-8")
    table = BankTable.from_yaml(text)
    logger.debug("Loaded %d BIN prefixes from the packaged table", len(table.bins))
    return table


def detect_bank(card_number: Optional[str], table: Optional[BankTable] = None) -> Optional[BankMatch]:
    """Detect the bank for a card number using ``table`` or the packaged table."""
    return (table or load_bank_table()).detect(card_number)

from __future__ import annotations

from pathlib import Path
from typing import List, Optional
import yaml
from pydantic import BaseModel, Field

from .models import CompanyCard

# ---- Invoice defaults (what a fresh form starts with) ----
class InvoiceDefaults(BaseModel):
    tax: float = Field(default=9, ge=0, le=100)       # standard VAT rate, percent
    discount: float = Field(default=0, ge=0, le=100)
    date_format: str = "%Y/%m/%d"                       # strftime pattern for "today"


# ---- Issuing business, printed on the invoice header ----
class CompanyInfo(BaseModel):
    name: str = "ETMIFY"
    address: str = "تهران - میدان ونک - برج سفید"
    phone: str = "+98 992 619 6904"
    website: str = "www.etmify.com"
    email: str = "info@etmify.com"
    logo: str = "/images/logo.png"


def _default_cards() -> List[CompanyCard]:
    return [
        CompanyCard(
            id=1,
            card_number="6037-7015-4909-9163",
            card_holder_name="محسن قادری",
            bank_name="بانک کشاورزی",
            is_default=True,
        ),
        CompanyCard(
            id=2,
            card_number="6280-2311-0000-1238",
            card_holder_name="شرکت اتمیفای",
            bank_name="بانک مسکن",
        ),
    ]


# ---- BIN table override ----
class BankConfig(BaseModel):
    table: Optional[Path] = None  # YAML with the same shape as the packaged bank_bins.yaml


# ---- Root config ----
class FaktorConfig(BaseModel):
    invoice: InvoiceDefaults = Field(default_factory=InvoiceDefaults)
    company: CompanyInfo = Field(default_factory=CompanyInfo)
    cards: List[CompanyCard] = Field(default_factory=_default_cards, min_length=1)
    banks: BankConfig = Field(default_factory=BankConfig)

    @property
    def default_card(self) -> CompanyCard:
        """The card flagged ``is_default``, else the first configured one."""
        return next((c for c in self.cards if c.is_default), self.cards[0])


# ---- Loader ----
def load_config(path: Optional[Path]) -> FaktorConfig:
    if not path:
        return FaktorConfig()
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    return FaktorConfig(**data)

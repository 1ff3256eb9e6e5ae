from __future__ import annotations

import json
import pathlib
from enum import Enum
from typing import Any, Dict, Optional

import click
import typer
import structlog
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from .config import load_config, FaktorConfig
from .detect.banks import BankTable, load_bank_table
from .detect.validators import (
    is_valid_email,
    is_valid_iranian_card,
    is_valid_iranian_iban,
    is_valid_iranian_phone,
)
from .engine.calculator import calculate_invoice_totals
from .engine.records import build_invoice_payload, generate_invoice_number
from .engine.store import create_default_invoice
from .engine.validation import validate_invoice
from .formatting import format_iban, format_toman
from .models import Invoice

console = Console()
log = structlog.get_logger()
app = typer.Typer(add_completion=False, no_args_is_help=True, help="faktor — invoice checks for Iranian businesses")


class Identifier(str, Enum):
    card = "card"
    iban = "iban"
    phone = "phone"
    email = "email"


_CHECKS = {
    Identifier.card: is_valid_iranian_card,
    Identifier.iban: is_valid_iranian_iban,
    Identifier.phone: is_valid_iranian_phone,
    Identifier.email: is_valid_email,
}


def version_callback(value: bool):
    if value:
        from . import __version__
        console.print(f"faktor {__version__}")
        raise typer.Exit()


def _config() -> FaktorConfig:
    return click.get_current_context().obj["config"]


def _bank_table(cfg: FaktorConfig) -> BankTable:
    return load_bank_table(cfg.banks.table)


def _read_invoice(path: pathlib.Path) -> Dict[str, Any]:
    """Load an invoice document from JSON (``.json``) or YAML (anything else)."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise typer.BadParameter(f"cannot read {path}: {e}")
    try:
        data = json.loads(text) if path.suffix.lower() == ".json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise typer.BadParameter(f"{path} is not valid JSON/YAML: {e}")
    if not isinstance(data, dict):
        raise typer.BadParameter(f"{path} does not contain an invoice object")
    return data


@app.callback()
def common(
    ctx: typer.Context,
    config: Optional[pathlib.Path] = typer.Option(None, "--config", envvar="FAKTOR_CONFIG", help="Path to faktor.yaml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logs"),
    version: Optional[bool] = typer.Option(None, "--version", callback=version_callback, is_eager=True),
):
    """Global options (config, verbosity)."""
    structlog.configure(processors=[structlog.processors.JSONRenderer()])
    ctx.obj = {"config": load_config(config) if config else FaktorConfig()}
    if verbose:
        log.info("verbose_enabled")
        if config:
            log.info("config_loaded", path=str(config))


@app.command()
def validate(src: pathlib.Path = typer.Argument(..., help="Invoice file (JSON or YAML)")):
    """Check an invoice against every rule; exit 1 if it is invalid."""
    result = validate_invoice(_read_invoice(src))
    if result.is_valid:
        console.print("[green]Invoice is valid[/green]")
        return

    table = Table(title=f"{len(result.errors)} problem(s)")
    table.add_column("Field", style="cyan")
    table.add_column("Message")
    for issue in result.errors:
        table.add_row(issue.field, issue.message)
    console.print(table)
    raise typer.Exit(code=1)


@app.command()
def totals(src: pathlib.Path = typer.Argument(..., help="Invoice file (JSON or YAML)")):
    """Print subtotal, discount, tax and the payable total."""
    try:
        invoice = Invoice.model_validate(_read_invoice(src))
    except ValidationError as e:
        raise typer.BadParameter(f"{src} has unreadable fields: {e.error_count()} error(s)")

    result = validate_invoice(invoice)
    if not result.is_valid:
        console.print("[yellow]Invoice has validation problems; totals may be misleading[/yellow]")
        log.warning("totals_on_invalid_invoice", errors=len(result.errors))

    t = calculate_invoice_totals(invoice)
    table = Table(show_header=False)
    table.add_row("Subtotal", format_toman(t.subtotal))
    table.add_row(f"Discount ({invoice.discount or 0}%)", format_toman(t.discount_amount))
    table.add_row("After discount", format_toman(t.after_discount))
    table.add_row(f"Tax ({invoice.tax or 0}%)", format_toman(t.tax_amount))
    table.add_row("[bold]Payable[/bold]", f"[bold]{format_toman(t.payable)}[/bold]")
    console.print(table)


@app.command()
def bank(card: str = typer.Argument(..., help="Card number, separators allowed")):
    """Detect the issuing bank from a card number."""
    match = _bank_table(_config()).detect(card)
    if match is None:
        console.print("[yellow]Unknown bank[/yellow]")
        raise typer.Exit(code=1)
    console.print(match.bank)
    if match.logo:
        console.print(f"logo: {match.logo}")


@app.command()
def check(
    kind: Identifier = typer.Argument(..., help="card|iban|phone|email", case_sensitive=False),
    value: str = typer.Argument(..., help="Value to check"),
):
    """Run a single identifier validator."""
    ok = _CHECKS[kind](value)
    shown = format_iban(value) if kind is Identifier.iban else value
    if ok:
        console.print(f"[green]valid[/green] {kind.value}: {shown}")
    else:
        console.print(f"[red]invalid[/red] {kind.value}: {shown}")
        raise typer.Exit(code=1)


@app.command()
def new(
    number: bool = typer.Option(False, "--number", help="Fill in a random invoice number"),
):
    """Print a blank invoice built from the configuration, as JSON."""
    cfg = _config()
    invoice = create_default_invoice(cfg, _bank_table(cfg))
    if number:
        invoice = invoice.model_copy(update={"number": generate_invoice_number()})
    console.print_json(json.dumps(build_invoice_payload(invoice), ensure_ascii=False))

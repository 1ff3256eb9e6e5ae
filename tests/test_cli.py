from pathlib import Path

from typer.testing import CliRunner
from faktor.__main__ import main
from faktor.cli import app

runner = CliRunner()
FIXTURES = Path(__file__).parent / "fixtures"


def test_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "invoice checks" in result.stdout


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "faktor 0.1.0" in result.stdout


def test_validate_valid_invoice():
    result = runner.invoke(app, ["validate", str(FIXTURES / "invoice.json")])
    assert result.exit_code == 0
    assert "Invoice is valid" in result.stdout


def test_validate_broken_invoice():
    result = runner.invoke(app, ["validate", str(FIXTURES / "broken_invoice.yaml")])
    assert result.exit_code == 1
    assert "8 problem(s)" in result.stdout


def test_validate_missing_file():
    result = runner.invoke(app, ["validate", str(FIXTURES / "nope.json")])
    assert result.exit_code != 0


def test_totals():
    result = runner.invoke(app, ["totals", str(FIXTURES / "invoice.json")])
    assert result.exit_code == 0
    assert "981,000" in result.stdout
    assert "1,000,000" in result.stdout


def test_bank():
    result = runner.invoke(app, ["bank", "6219-8612-3456-7890"])
    assert result.exit_code == 0
    assert "سامان" in result.stdout


def test_bank_unknown():
    result = runner.invoke(app, ["bank", "1111-2222-3333-4444"])
    assert result.exit_code == 1


def test_check_iban_and_card():
    ok = runner.invoke(app, ["check", "iban", "IR062960000000100324200001"])
    bad = runner.invoke(app, ["check", "card", "6037997211008802"])
    assert ok.exit_code == 0
    assert "IR06 2960" in ok.stdout
    assert bad.exit_code == 1


def test_new_uses_config():
    result = runner.invoke(app, ["--config", str(FIXTURES / "faktor.yaml"), "new"])
    assert result.exit_code == 0
    assert '"tax": 10' in result.stdout
    assert "6219-8612-3456-7890" in result.stdout

from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from faktor.config import FaktorConfig
from faktor.engine.store import (
    InvoiceStore,
    create_default_invoice,
    create_empty_service,
    resolve_payment_info,
)
from faktor.models import CompanyCard, Customer, Invoice, Service, StoredInvoice

TODAY = date(2024, 10, 19)


@pytest.fixture
def store():
    return InvoiceStore(today=lambda: TODAY)


class TestDefaults:
    def test_default_invoice(self):
        invoice = create_default_invoice(today=TODAY)
        assert invoice.number == ""
        assert invoice.date == "2024/10/19"
        assert invoice.services == []
        assert invoice.discount == 0
        assert invoice.tax == 9
        assert invoice.payment_info.card_number == "6037-7015-4909-9163"
        assert invoice.payment_info.card_holder_name == "محسن قادری"

    def test_default_card_bank_is_detected(self):
        payment = create_default_invoice(today=TODAY).payment_info
        assert payment.bank_name == "کشاورزی"
        assert payment.bank_logo == "/images/bank-keshavarzi.png"

    def test_configured_defaults(self):
        config = FaktorConfig(invoice={"tax": 10, "discount": 5, "date_format": "%d-%m-%Y"})
        invoice = create_default_invoice(config, today=TODAY)
        assert (invoice.tax, invoice.discount, invoice.date) == (10, 5, "19-10-2024")

    def test_empty_service(self):
        service = create_empty_service()
        assert (service.id, service.description, service.quantity, service.price) == (0, "", 1, 0)


class TestResolvePaymentInfo:
    def test_unknown_bin_keeps_configured_bank(self):
        card = CompanyCard(id=9, card_number="1111-2222-3333-4444", card_holder_name="x", bank_name="بانک آزمایشی")
        payment = resolve_payment_info(card)
        assert payment.bank_name == "بانک آزمایشی"
        assert payment.bank_logo is None

    def test_detected_bank_wins(self):
        card = CompanyCard(id=9, card_number="6104-3377-0000-0000", card_holder_name="x", bank_name="غلط")
        assert resolve_payment_info(card).bank_name == "ملت"


class TestServices:
    def test_add_assigns_increasing_ids(self, store):
        first = store.add_service(Service(description="a", quantity=1, price=10))
        second = store.add_service({"description": "b", "quantity": 1, "price": 20})
        assert first.id > 0
        assert second.id > first.id
        assert [s.description for s in store.invoice.services] == ["a", "b"]

    def test_explicit_id_is_kept(self, store):
        assert store.add_service(Service(id=42, description="x")).id == 42

    def test_edit(self, store):
        added = store.add_service(Service(description="a", quantity=1, price=10))
        edited = store.edit_service(added.id, price=25, quantity=2)
        assert edited.price == 25
        assert store.invoice.services[0].line_total == 50

    def test_edit_unknown_id_is_noop(self, store):
        store.add_service(Service(id=1, description="a"))
        before = store.invoice
        assert store.edit_service(999, price=1) is None
        assert store.invoice is before

    def test_remove(self, store):
        store.add_service(Service(id=1, description="a"))
        store.add_service(Service(id=2, description="b"))
        store.remove_service(1)
        assert [s.id for s in store.invoice.services] == [2]
        store.remove_service(999)
        assert [s.id for s in store.invoice.services] == [2]


class TestSnapshots:
    def test_mutations_do_not_touch_earlier_snapshots(self, store):
        snapshot = store.invoice
        store.add_service(Service(description="a", quantity=1, price=10))
        store.set_invoice(number="INV-9")
        assert snapshot.services == []
        assert snapshot.number == ""

    def test_models_are_frozen(self, store):
        with pytest.raises(ValidationError):
            store.invoice.number = "x"

    def test_bad_update_raises(self, store):
        with pytest.raises(ValidationError):
            store.set_invoice(discount="lots")


class TestLifecycle:
    def test_fill_validate_and_total(self, store):
        store.set_invoice(number="INV-100", customer=Customer(name="سارا"), discount=10, tax=9)
        store.add_service(Service(description="توسعه", quantity=2, price=500000))
        assert store.validate().is_valid
        assert store.totals().payable == 981000

    def test_new_invoice_fails_validation(self, store):
        result = store.validate()
        assert not result.is_valid
        assert "services" in [e.field for e in result.errors]

    def test_set_card_number_redetects_bank(self, store):
        payment = store.set_card_number("6219-8612-3456-7890")
        assert payment.bank_name == "سامان"
        assert store.invoice.payment_info.card_holder_name == "محسن قادری"

    def test_set_unknown_card_number_clears_bank(self, store):
        assert store.invoice.payment_info.bank_name == "کشاورزی"
        payment = store.set_card_number("1111-2222-3333-4444")
        assert payment.bank_name is None
        assert payment.bank_logo is None
        assert payment.card_holder_name == "محسن قادری"

    def test_select_card(self, store):
        config = FaktorConfig()
        payment = store.select_card(config.cards[1])
        assert payment.card_holder_name == "شرکت اتمیفای"
        assert payment.bank_name == "مسکن"

    def test_every_configured_card_can_validate(self, store):
        store.set_invoice(number="INV-7", customer=Customer(name="سارا"))
        store.add_service(Service(description="x", quantity=1, price=10))
        for card in FaktorConfig().cards:
            store.select_card(card)
            assert store.validate().is_valid, card.card_number

    def test_next_service_id_is_public_and_monotonic(self, store):
        store.add_service(Service(id=10 ** 15, description="far future"))
        first = store.next_service_id()
        assert first == 10 ** 15 + 1
        assert store.next_service_id() > first

    def test_reset(self, store):
        store.set_invoice(number="X-1")
        store.add_service(Service(description="a"))
        invoice = store.reset()
        assert invoice.number == ""
        assert invoice.services == []

    def test_load_stored_invoice(self, store):
        record = StoredInvoice(
            _id="66f0c0ffee",
            number="ABC-0001",
            date="1403/07/01",
            services=[Service(id=7, description="x", quantity=1, price=10)],
            created_at=datetime(2024, 10, 1, tzinfo=timezone.utc),
        )
        loaded = store.load_invoice(record)
        assert type(loaded) is Invoice
        assert loaded.number == "ABC-0001"
        assert store.add_service(Service(description="y")).id > 7

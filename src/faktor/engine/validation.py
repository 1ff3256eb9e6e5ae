"""
Invoice validation.

`validate_invoice` runs every rule against an invoice and collects the
failures into a :class:`ValidationResult`. Rules never short-circuit each
other, so the form can show all problems at once. Field names are dotted
paths in wire (camelCase) form, e.g. ``services.2.price`` or
``paymentInfo.iban``.

Error order:
  number, date, customer.name, customer.phone, services (then per service:
  description, quantity, price), paymentInfo.cardNumber,
  paymentInfo.cardHolderName, paymentInfo.iban, discount, tax.

Nothing here raises on bad input; every problem becomes an entry in
``errors``. Messages are in Persian, as shown in the invoice form.
"""

from __future__ import annotations

import math
from typing import Any, List, Mapping, Optional, Sequence, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as ModelValidationError

from ..detect.validators import (
    is_valid_invoice_number,
    is_valid_iranian_card,
    is_valid_iranian_iban,
    is_valid_iranian_phone,
)
from ..models import Customer, Invoice, PaymentInfo, Service, ValidationIssue, ValidationResult

M = TypeVar("M", bound=BaseModel)

MSG_NUMBER_REQUIRED = "شماره فاکتور الزامی است"
MSG_NUMBER_TOO_SHORT = "شماره فاکتور باید حداقل 3 کاراکتر باشد"
MSG_DATE_REQUIRED = "تاریخ الزامی است"
MSG_CUSTOMER_NAME_REQUIRED = "نام مشتری الزامی است"
MSG_PHONE_INVALID = "شماره تلفن معتبر نیست (مثال: 09123456789)"
MSG_SERVICES_EMPTY = "حداقل یک خدمت باید اضافه شود"
MSG_CARD_REQUIRED = "شماره کارت الزامی است"
MSG_CARD_INVALID = "شماره کارت معتبر نیست"
MSG_CARD_HOLDER_REQUIRED = "نام صاحب کارت الزامی است"
MSG_IBAN_INVALID = "شماره شبا معتبر نیست (مثال: IR020160000000000307454684)"
MSG_DISCOUNT_RANGE = "درصد تخفیف باید بین 0 تا 100 باشد"
MSG_TAX_RANGE = "درصد مالیات باید بین 0 تا 100 باشد"


def _blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


def _positive(value: Optional[float]) -> bool:
    # NaN fails this too.
    return value is not None and value > 0


def _in_percent_range(value: float) -> bool:
    return 0 <= value <= 100


def _replacement(annotation: Any, raw: Any) -> Any:
    # NaN fails both the "> 0" and the percent-range rules.
    if annotation in (float, Optional[float]):
        return math.nan
    if annotation in (str, Optional[str]) and isinstance(raw, (int, float)):
        return str(raw)
    return None


def _take(values: dict, model: Type[M], name: str) -> Any:
    """Pop ``name`` from ``values`` under either its field name or its alias."""
    alias = model.model_fields[name].alias or name
    raw = values.pop(alias, None)
    named = values.pop(name, None)
    return raw if raw is not None else named


def _read_model(model: Type[M], data: Any) -> M:
    """
    Read ``data`` into ``model`` field by field, never raising.

    A field whose value cannot be read is replaced rather than rejected:
    numbers become NaN, a number given for a text field becomes its
    string form, and anything else falls back to the field default. The
    rules then report on the replaced value the same way they report on a
    missing or out-of-range one.
    """
    if isinstance(data, model):
        return data
    values = dict(data) if isinstance(data, Mapping) else {}
    try:
        return model.model_validate(values)
    except ModelValidationError as exc:
        unreadable = {err["loc"][0] for err in exc.errors() if err["loc"]}
    for name, info in model.model_fields.items():
        if not unreadable & {name, info.alias}:
            continue
        replacement = _replacement(info.annotation, _take(values, model, name))
        if replacement is not None:
            values[name] = replacement
    return model.model_validate(values)


def _read_invoice(data: Any) -> Invoice:
    if isinstance(data, Invoice):
        return data
    values = dict(data) if isinstance(data, Mapping) else {}
    services = _take(values, Invoice, "services")
    values["customer"] = _read_model(Customer, _take(values, Invoice, "customer"))
    values["payment_info"] = _read_model(PaymentInfo, _take(values, Invoice, "payment_info"))
    values["services"] = (
        [_read_model(Service, s) for s in services] if isinstance(services, (list, tuple)) else []
    )
    return _read_model(Invoice, values)


def _service_issues(service: Service, index: int) -> List[ValidationIssue]:
    position = index + 1
    issues: List[ValidationIssue] = []
    if _blank(service.description):
        issues.append(ValidationIssue(
            field=f"services.{index}.description",
            message=f"شرح خدمت {position} الزامی است",
        ))
    if not _positive(service.quantity):
        issues.append(ValidationIssue(
            field=f"services.{index}.quantity",
            message=f"تعداد خدمت {position} باید بیشتر از صفر باشد",
        ))
    if not _positive(service.price):
        issues.append(ValidationIssue(
            field=f"services.{index}.price",
            message=f"قیمت خدمت {position} باید بیشتر از صفر باشد",
        ))
    return issues


def validate_invoice(invoice: Union[Invoice, Mapping[str, Any], None]) -> ValidationResult:
    """
    Validate a complete or partially filled invoice.

    Args:
        invoice: An :class:`Invoice`, or a mapping in the same shape (snake_case
            or camelCase keys). ``None`` is treated as an empty form.

    Returns:
        ValidationResult with ``is_valid`` and the ordered list of issues.
        An unreadable value in a mapping (e.g. ``quantity: "many"``) fails
        the rule for its field; every other rule still runs.
    """
    invoice = _read_invoice(invoice)

    errors: List[ValidationIssue] = []

    # Invoice number
    if _blank(invoice.number):
        errors.append(ValidationIssue(field="number", message=MSG_NUMBER_REQUIRED))
    elif not is_valid_invoice_number(invoice.number):
        errors.append(ValidationIssue(field="number", message=MSG_NUMBER_TOO_SHORT))

    # Date (opaque string, only presence is checked)
    if _blank(invoice.date):
        errors.append(ValidationIssue(field="date", message=MSG_DATE_REQUIRED))

    # Customer
    customer = invoice.customer
    if _blank(customer.name):
        errors.append(ValidationIssue(field="customer.name", message=MSG_CUSTOMER_NAME_REQUIRED))
    if customer.phone and not is_valid_iranian_phone(customer.phone):
        errors.append(ValidationIssue(field="customer.phone", message=MSG_PHONE_INVALID))

    # Services
    if not invoice.services:
        errors.append(ValidationIssue(field="services", message=MSG_SERVICES_EMPTY))
    else:
        for index, service in enumerate(invoice.services):
            errors.extend(_service_issues(service, index))

    # Payment
    payment = invoice.payment_info
    if _blank(payment.card_number):
        errors.append(ValidationIssue(field="paymentInfo.cardNumber", message=MSG_CARD_REQUIRED))
    elif not is_valid_iranian_card(payment.card_number):
        errors.append(ValidationIssue(field="paymentInfo.cardNumber", message=MSG_CARD_INVALID))

    if _blank(payment.card_holder_name):
        errors.append(ValidationIssue(field="paymentInfo.cardHolderName", message=MSG_CARD_HOLDER_REQUIRED))

    if not _blank(payment.iban) and not is_valid_iranian_iban(payment.iban):
        errors.append(ValidationIssue(field="paymentInfo.iban", message=MSG_IBAN_INVALID))

    # Discount / tax
    if invoice.discount is not None and not _in_percent_range(invoice.discount):
        errors.append(ValidationIssue(field="discount", message=MSG_DISCOUNT_RANGE))
    if invoice.tax is not None and not _in_percent_range(invoice.tax):
        errors.append(ValidationIssue(field="tax", message=MSG_TAX_RANGE))

    return ValidationResult(is_valid=not errors, errors=errors)


def validate_service(service: Union[Service, Mapping[str, Any]]) -> ValidationResult:
    """
    Validate a single line item as it is being entered.

    Field names are the bare attribute names (``description``, ``quantity``,
    ``price``) since the line-entry form has no index yet.
    """
    service = _read_model(Service, service)

    errors: List[ValidationIssue] = []
    if _blank(service.description):
        errors.append(ValidationIssue(field="description", message="شرح خدمات الزامی است"))
    if not _positive(service.quantity):
        errors.append(ValidationIssue(field="quantity", message="تعداد باید بیشتر از صفر باشد"))
    if not _positive(service.price):
        errors.append(ValidationIssue(field="price", message="قیمت باید بیشتر از صفر باشد"))
    return ValidationResult(is_valid=not errors, errors=errors)


def get_field_error(errors: Sequence[ValidationIssue], field: str) -> Optional[str]:
    """First message reported for ``field``, or None."""
    for issue in errors:
        if issue.field == field:
            return issue.message
    return None

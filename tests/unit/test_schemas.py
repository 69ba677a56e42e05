"""Unit tests for lenient parsing of mirrored documents."""

from datetime import date, datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from feemirror.models.enums import BillingCycle
from feemirror.schemas.finance import Expense
from feemirror.schemas.inventory import InventoryItem
from feemirror.schemas.school import AppSettings
from feemirror.schemas.student import Student, coerce_student
from feemirror.utils.values import as_record_list, parse_datetime, to_decimal, to_int


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("raw,expected", [
    (100, Decimal("100")),
    (12.5, Decimal("12.5")),
    ("1,250.00", Decimal("1250.00")),
    (" 40 ", Decimal("40")),
    ("abc", Decimal("0")),
    (None, Decimal("0")),
    (True, Decimal("0")),
    (float("nan"), Decimal("0")),
])
def test_to_decimal(raw, expected):
    assert to_decimal(raw) == expected


def test_to_int_rejects_fractions_and_garbage():
    assert to_int("7") == 7
    assert to_int(3.0) == 3
    assert to_int(3.5) is None
    assert to_int("three") is None


def test_parse_datetime_formats():
    assert parse_datetime("2025-06-03T09:00:00") == datetime(2025, 6, 3, 9, 0)
    assert parse_datetime("2025-06-03") == datetime(2025, 6, 3)
    assert parse_datetime({"seconds": 0, "nanoseconds": 0}) == datetime(1970, 1, 1)
    assert parse_datetime(date(2025, 1, 2)) == datetime(2025, 1, 2)


def test_parse_datetime_converts_aware_values():
    # Default school timezone is UTC
    assert parse_datetime("2025-06-03T09:00:00+02:00") == datetime(2025, 6, 3, 7, 0)
    assert parse_datetime("2025-06-03T09:00:00Z") == datetime(2025, 6, 3, 9, 0)


@pytest.mark.parametrize("raw", ["not-a-date", "", 42, [], {"nanos": 1}])
def test_parse_datetime_unreadable(raw):
    assert parse_datetime(raw) is None


def test_as_record_list_drops_stray_entries():
    assert as_record_list([{"a": 1}, "x", None, 3]) == [{"a": 1}]
    assert as_record_list({"a": 1}) == []
    assert as_record_list(None) == []


# ---------------------------------------------------------------------------
# Student
# ---------------------------------------------------------------------------

def test_student_from_camel_case_document():
    student = Student.model_validate({
        "id": "s1",
        "fullName": "Ama Mensah",
        "classGroup": "g1",
        "admissionDate": "2025-01-10",
        "hasTransport": "true",
        "transportFee": "20",
        "feePayments": [{"period": 1, "amountPaid": 100, "unknownField": "x"}],
    })
    assert student.full_name == "Ama Mensah"
    assert student.admission_date == date(2025, 1, 10)
    assert student.has_transport is True
    assert student.transport_fee == Decimal("20")
    assert student.fee_payments[0].amount_paid == Decimal("100")
    assert student.transport_payments == []


def test_student_accepts_snake_case_names():
    student = Student(full_name="Kofi", class_group="g2")
    assert student.full_name == "Kofi"
    assert student.class_group == "g2"


def test_student_is_immutable():
    student = Student(id="s1")
    with pytest.raises(ValidationError):
        student.full_name = "Changed"


def test_custom_fee_property():
    assert Student(has_custom_fees=True, custom_school_fee=75).custom_fee == Decimal("75")
    assert Student(has_custom_fees=True, custom_school_fee=0).custom_fee is None
    assert Student(has_custom_fees=False, custom_school_fee=75).custom_fee is None


def test_coerce_student_never_raises():
    assert coerce_student(None).id == ""
    assert coerce_student("garbage").fee_payments == []


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("raw,expected", [
    ("MONTHLY", BillingCycle.MONTHLY),
    ("monthly", BillingCycle.MONTHLY),
    (" Termly ", BillingCycle.TERMLY),
    ("weekly", None),
    (None, None),
    (3, None),
])
def test_billing_cycle_normalization(raw, expected):
    settings = AppSettings.model_validate({"billingCycle": raw})
    assert settings.billing_cycle == expected


def test_class_groups_indexed_by_id_from_list():
    settings = AppSettings.model_validate({
        "classGroups": [
            {"id": "g1", "name": "Junior", "standardFee": 100},
            {"name": "No id"},
            "junk",
        ]
    })
    assert list(settings.class_groups) == ["g1"]
    assert settings.get_class_group("g1").standard_fee == Decimal("100")
    assert settings.get_class_group("g2") is None
    assert settings.get_class_group("") is None


def test_class_groups_from_mapping():
    settings = AppSettings.model_validate({"classGroups": {"g1": {"name": "Junior", "standardFee": "80"}}})
    group = settings.get_class_group("g1")
    assert group.id == "g1"
    assert group.standard_fee == Decimal("80")


def test_class_groups_bad_shape_is_empty():
    assert AppSettings.model_validate({"classGroups": "none"}).class_groups == {}


# ---------------------------------------------------------------------------
# Finance and inventory
# ---------------------------------------------------------------------------

def test_expense_legacy_reversed_flag():
    assert Expense.model_validate({"amount": 10, "reversed": True}).is_reversed is True
    assert Expense.model_validate({"amount": 10, "isReversed": True}).is_reversed is True
    assert Expense.model_validate({"amount": 10}).is_reversed is False


def test_inventory_item_quantity_coercion():
    item = InventoryItem.model_validate({"itemName": "Shirt", "quantity": "12", "stockLog": None})
    assert item.quantity == 12
    assert item.stock_log == []

import logging
from datetime import date

import pytest

from smart_expense_manager.errors import TransactionValidationError, ValidationError
from smart_expense_manager.records import (
    FRAME_COLUMNS,
    UNCATEGORIZED,
    load_frame,
    parse_transactions,
    validate_transaction_form,
)
from tests.helpers import make_row


def test_malformed_amounts_are_rejected_not_zeroed(caplog):
    rows = [
        make_row("expense", "Food", "abc", date(2026, 10, 1)),
        make_row("expense", "Food", 0, date(2026, 10, 1)),
        make_row("expense", "Food", None, date(2026, 10, 1)),
        make_row("expense", "Food", "1,200.50", date(2026, 10, 1)),
    ]
    with caplog.at_level(logging.WARNING, logger="smart_expense_manager"):
        records, rejected = parse_transactions(rows)

    assert [r.amount for r in records] == [1200.50]
    assert [r.index for r in rejected] == [0, 1, 2]
    assert all("amount" in r.reason for r in rejected)
    assert rejected[0].row_id == rows[0]["id"]
    assert "Rejected transaction row" in caplog.text


def test_unknown_type_is_rejected():
    _, rejected = parse_transactions([make_row("transfer", "Bank", 10, date(2026, 10, 1))])
    assert len(rejected) == 1
    assert "type" in rejected[0].reason


def test_strict_mode_raises():
    with pytest.raises(TransactionValidationError) as exc_info:
        parse_transactions([make_row("expense", "Food", -5, date(2026, 10, 1))], strict=True)
    assert len(exc_info.value.rejected) == 1


def test_blank_category_becomes_uncategorized():
    records, _ = parse_transactions([make_row("expense", "  ", 10, date(2026, 10, 1))])
    assert records[0].category_name == UNCATEGORIZED


def test_load_frame_shape():
    df, rejected = load_frame([make_row("income", "Salary", "2500", date(2026, 3, 31), "March pay")])
    assert rejected == []
    assert list(df.columns) == FRAME_COLUMNS
    assert df.loc[0, "Month"] == "2026-03"
    assert df.loc[0, "Amount"] == 2500.0
    assert df.loc[0, "Description"] == "March pay"


def test_load_frame_empty_has_columns():
    df, _ = load_frame([])
    assert df.empty
    assert list(df.columns) == FRAME_COLUMNS


def test_validate_transaction_form_ok():
    payload = validate_transaction_form("expense", 3, " Food ", "45.5", date(2026, 10, 1), "  lunch ")
    assert payload == {
        "type": "expense",
        "category_id": 3,
        "category_name": "Food",
        "amount": 45.5,
        "description": "lunch",
        "transaction_date": date(2026, 10, 1),
    }


def test_validate_transaction_form_blank_description_is_none():
    payload = validate_transaction_form("income", 1, "Salary", 100, date(2026, 10, 1), "   ")
    assert payload["description"] is None


@pytest.mark.parametrize("amount", ["", "abc", "0", "-3", None, "nan", "inf"])
def test_validate_transaction_form_rejects_bad_amounts(amount):
    with pytest.raises(ValidationError, match="valid amount"):
        validate_transaction_form("expense", 1, "Food", amount, date(2026, 10, 1))


def test_validate_transaction_form_requires_fields():
    with pytest.raises(ValidationError, match="category"):
        validate_transaction_form("expense", None, "", 10, date(2026, 10, 1))
    with pytest.raises(ValidationError, match="date"):
        validate_transaction_form("expense", 1, "Food", 10, None)
    with pytest.raises(ValidationError, match="type"):
        validate_transaction_form("refund", 1, "Food", 10, date(2026, 10, 1))

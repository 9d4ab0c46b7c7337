from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from smart_expense_manager.errors import StoreError, ValidationError
from smart_expense_manager.records import load_frame, validate_transaction_form
from smart_expense_manager.store import TransactionStore


@pytest.fixture
def store(db_session):
    return TransactionStore(db_session)


@pytest.fixture
def user(store):
    return store.create_profile("asha", "s3cret", full_name="Asha", monthly_budget=20000)


def _payload(store, type="expense", amount=100, on=date(2026, 10, 1), name="Food", description=None):
    category = next(c for c in store.list_categories(type) if c["name"] == name)
    return validate_transaction_form(type, category["id"], category["name"], amount, on, description)


def test_create_profile_hashes_password(store, user):
    assert user.id is not None
    assert user.password_hash != "s3cret"
    assert store.authenticate("asha", "s3cret").id == user.id
    assert store.authenticate("asha", "wrong") is None
    assert store.authenticate("nobody", "s3cret") is None


def test_create_profile_requires_credentials(store):
    with pytest.raises(ValidationError):
        store.create_profile("", "pw")
    with pytest.raises(ValidationError):
        store.create_profile("someone", "")


def test_duplicate_username_is_a_store_error(store, user):
    with pytest.raises(StoreError):
        store.create_profile("asha", "other")
    # the session is usable again after the rollback
    assert store.authenticate("asha", "s3cret") is not None


def test_list_categories_filters_by_type(store):
    expense = store.list_categories("expense")
    income = store.list_categories("income")
    assert expense and income
    assert {c["type"] for c in expense} == {"expense"}
    assert {c["type"] for c in income} == {"income"}
    assert len(store.list_categories()) == len(expense) + len(income)


def test_add_and_list_transactions_newest_first(store, user):
    store.add_transaction(user.id, _payload(store, amount=10, on=date(2026, 9, 1)))
    store.add_transaction(user.id, _payload(store, "income", 5000, date(2026, 10, 2), "Salary"))
    store.add_transaction(user.id, _payload(store, amount=30, on=date(2026, 10, 5), description="Lunch"))

    rows = store.list_transactions(user.id)
    assert [r["transaction_date"] for r in rows] == [date(2026, 10, 5), date(2026, 10, 2), date(2026, 9, 1)]
    assert rows[0]["description"] == "Lunch"
    assert rows[0]["category_name"] == "Food"
    assert rows[0]["created_at"] is not None

    df, rejected = load_frame(rows)
    assert rejected == []
    assert len(df) == 3


def test_transactions_are_scoped_to_their_owner(store, user):
    other = store.create_profile("ravi", "pw")
    row = store.add_transaction(user.id, _payload(store))

    assert store.list_transactions(other.id) == []
    with pytest.raises(StoreError, match="not found"):
        store.update_transaction(other.id, row["id"], {"amount": 1})
    with pytest.raises(StoreError, match="not found"):
        store.delete_transaction(other.id, row["id"])
    assert len(store.list_transactions(user.id)) == 1


def test_update_and_delete_transaction(store, user):
    row = store.add_transaction(user.id, _payload(store, amount=50))

    updated = store.update_transaction(user.id, row["id"], _payload(store, amount=75, name="Transport"))
    assert updated["amount"] == 75
    assert updated["category_name"] == "Transport"

    store.delete_transaction(user.id, row["id"])
    assert store.list_transactions(user.id) == []


def test_update_monthly_budget(store, user):
    assert store.update_monthly_budget(user.id, "12500").monthly_budget == 12500.0
    assert store.get_profile(user.id).monthly_budget == 12500.0
    assert store.update_monthly_budget(user.id, 0).monthly_budget == 0.0

    with pytest.raises(ValidationError):
        store.update_monthly_budget(user.id, -1)
    with pytest.raises(ValidationError):
        store.update_monthly_budget(user.id, "lots")
    with pytest.raises(StoreError):
        store.update_monthly_budget(9999, 100)


def test_commit_failure_rolls_back(store, user, monkeypatch):
    rolled_back = []

    def failing_commit():
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(store.db, "commit", failing_commit)
    monkeypatch.setattr(store.db, "rollback", lambda: rolled_back.append(True))

    with pytest.raises(StoreError, match="add transaction"):
        store.add_transaction(user.id, _payload(store))
    assert rolled_back == [True]


@pytest.mark.parametrize("amount", ["nan", "inf", float("inf"), "1e999"])
def test_update_monthly_budget_rejects_non_finite(store, user, amount):
    with pytest.raises(ValidationError):
        store.update_monthly_budget(user.id, amount)
    assert store.get_profile(user.id).monthly_budget == 20000.0

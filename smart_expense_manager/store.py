"""Transaction store: CRUD over transactions, categories and profiles.

Reads return plain dict rows, the same shape a hosted backend would return,
so the app always goes through ``records.load_frame`` before aggregating.
Every failure surfaces as ``StoreError`` after the session is rolled back.
"""

from __future__ import annotations

import math
from typing import List, Optional

import bcrypt
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from smart_expense_manager.database import Category, Profile, Transaction
from smart_expense_manager.errors import StoreError, ValidationError
from smart_expense_manager.logging_setup import get_logger

logger = get_logger(__name__)

TRANSACTION_FIELDS = (
    "type",
    "category_id",
    "category_name",
    "amount",
    "description",
    "transaction_date",
)


def _row(t: Transaction) -> dict:
    return {
        "id": t.id,
        "user_id": t.user_id,
        "type": t.type,
        "category_id": t.category_id,
        "category_name": t.category_name,
        "amount": t.amount,
        "description": t.description,
        "transaction_date": t.transaction_date,
        "created_at": t.created_at,
    }


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


class TransactionStore:
    def __init__(self, db: Session):
        self.db = db

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Failed to %s", action)
            raise StoreError(f"Failed to {action}") from e

    # --- Transactions ---

    def list_transactions(self, user_id: int) -> List[dict]:
        try:
            txns = (
                self.db.query(Transaction)
                .filter(Transaction.user_id == user_id)
                .order_by(Transaction.transaction_date.desc(), Transaction.created_at.desc())
                .all()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Failed to load transactions for user %s", user_id)
            raise StoreError("Failed to load transactions") from e
        return [_row(t) for t in txns]

    def _owned(self, user_id: int, txn_id: int) -> Transaction:
        try:
            txn = (
                self.db.query(Transaction)
                .filter(Transaction.id == txn_id, Transaction.user_id == user_id)
                .first()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError("Failed to load transaction") from e
        if txn is None:
            raise StoreError("Transaction not found")
        return txn

    def add_transaction(self, user_id: int, data: dict) -> dict:
        txn = Transaction(user_id=user_id, **{k: data[k] for k in TRANSACTION_FIELDS if k in data})
        self.db.add(txn)
        self._commit("add transaction")
        logger.info("Added %s transaction %s for user %s", txn.type, txn.id, user_id)
        return _row(txn)

    def update_transaction(self, user_id: int, txn_id: int, data: dict) -> dict:
        txn = self._owned(user_id, txn_id)
        for field in TRANSACTION_FIELDS:
            if field in data:
                setattr(txn, field, data[field])
        self._commit("update transaction")
        logger.info("Updated transaction %s for user %s", txn_id, user_id)
        return _row(txn)

    def delete_transaction(self, user_id: int, txn_id: int) -> None:
        txn = self._owned(user_id, txn_id)
        self.db.delete(txn)
        self._commit("delete transaction")
        logger.info("Deleted transaction %s for user %s", txn_id, user_id)

    # --- Categories ---

    def list_categories(self, type: Optional[str] = None) -> List[dict]:
        try:
            query = self.db.query(Category)
            if type:
                query = query.filter(Category.type == type)
            cats = query.order_by(Category.name).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError("Failed to load categories") from e
        return [{"id": c.id, "name": c.name, "icon": c.icon, "type": c.type} for c in cats]

    # --- Profiles ---

    def get_profile(self, user_id: int) -> Optional[Profile]:
        try:
            return self.db.get(Profile, user_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError("Failed to load profile") from e

    def create_profile(self, username: str, password: str, full_name: str = "", monthly_budget: float = 0.0) -> Profile:
        if not username or not password:
            raise ValidationError("Username and password are required")
        profile = Profile(
            username=username.strip(),
            password_hash=hash_password(password),
            full_name=full_name or username,
            monthly_budget=monthly_budget,
        )
        self.db.add(profile)
        self._commit("create profile")
        return profile

    def update_monthly_budget(self, user_id: int, amount) -> Profile:
        try:
            value = float(amount)
        except (TypeError, ValueError):
            value = -1.0
        if not math.isfinite(value) or value < 0:
            raise ValidationError("Please enter a valid budget")

        profile = self.get_profile(user_id)
        if profile is None:
            raise StoreError("Profile not found")
        profile.monthly_budget = value
        self._commit("update monthly budget")
        logger.info("Monthly budget for user %s set to %.2f", user_id, value)
        return profile

    def authenticate(self, username: str, password: str) -> Optional[Profile]:
        try:
            profile = self.db.query(Profile).filter(Profile.username == username).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError("Failed to check credentials") from e
        if profile is None or not profile.password_hash:
            return None
        if bcrypt.checkpw(password.encode("utf-8"), profile.password_hash.encode("utf-8")):
            return profile
        return None

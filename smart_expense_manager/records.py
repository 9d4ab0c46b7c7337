"""Typed transaction records and the frame the aggregation layer consumes.

Rows come out of the store as plain dicts. Every row is validated into a
``TransactionRecord`` before it reaches any aggregate; a row whose amount is
missing, non-numeric or not positive is rejected and reported instead of
being counted as zero.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, List, Literal, Mapping, Optional, Tuple

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from smart_expense_manager.database import EXPENSE, INCOME, TRANSACTION_TYPES
from smart_expense_manager.errors import TransactionValidationError, ValidationError
from smart_expense_manager.logging_setup import get_logger

logger = get_logger(__name__)

UNCATEGORIZED = "Uncategorized"

FRAME_COLUMNS = [
    "ID",
    "Date",
    "Type",
    "Category",
    "CategoryID",
    "Amount",
    "Description",
    "CreatedAt",
    "Month",
]


def _parse_amount(value: Any) -> Any:
    if isinstance(value, str):
        cleaned = value.strip().replace(",", "")
        if not cleaned:
            raise ValueError("amount is empty")
        return cleaned
    return value


class TransactionRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    user_id: Optional[int] = None
    type: Literal["income", "expense"]
    category_id: Optional[int] = None
    category_name: str = UNCATEGORIZED
    amount: float = Field(gt=0, allow_inf_nan=False)
    description: Optional[str] = None
    transaction_date: date
    created_at: Optional[datetime] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, value):
        return _parse_amount(value)

    @field_validator("category_name", mode="before")
    @classmethod
    def _category_name(cls, value):
        if value is None or not str(value).strip():
            return UNCATEGORIZED
        return str(value).strip()


@dataclass(frozen=True)
class RejectedRow:
    index: int
    row_id: Any
    reason: str


def parse_transactions(
    rows: Iterable[Mapping[str, Any]],
    strict: bool = False,
) -> Tuple[List[TransactionRecord], List[RejectedRow]]:
    """Validate raw store rows.

    Invalid rows are logged and returned alongside the good ones. With
    ``strict=True`` any invalid row raises ``TransactionValidationError``.
    """

    records: List[TransactionRecord] = []
    rejected: List[RejectedRow] = []
    for idx, row in enumerate(rows):
        try:
            records.append(TransactionRecord.model_validate(row))
        except PydanticValidationError as exc:
            reason = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
            )
            row_id = row.get("id") if isinstance(row, Mapping) else None
            logger.warning("Rejected transaction row %s (id=%s): %s", idx, row_id, reason)
            rejected.append(RejectedRow(index=idx, row_id=row_id, reason=reason))

    if strict and rejected:
        raise TransactionValidationError(rejected)
    return records, rejected


def to_frame(records: Iterable[TransactionRecord]) -> pd.DataFrame:
    """Build the canonical transaction frame, preserving input order."""

    data = [
        {
            "ID": r.id,
            "Date": r.transaction_date,
            "Type": r.type,
            "Category": r.category_name,
            "CategoryID": r.category_id,
            "Amount": r.amount,
            "Description": r.description or "",
            "CreatedAt": r.created_at,
        }
        for r in records
    ]

    if not data:
        df = pd.DataFrame(columns=FRAME_COLUMNS)
        df["Amount"] = df["Amount"].astype(float)
        df["Date"] = pd.to_datetime(df["Date"])
        df["CreatedAt"] = pd.to_datetime(df["CreatedAt"])
        return df

    df = pd.DataFrame(data)
    df["Date"] = pd.to_datetime(df["Date"])
    df["CreatedAt"] = pd.to_datetime(df["CreatedAt"])
    df["Amount"] = df["Amount"].astype(float)
    df["Month"] = df["Date"].dt.to_period("M").astype(str)
    return df[FRAME_COLUMNS]


def load_frame(
    rows: Iterable[Mapping[str, Any]],
    strict: bool = False,
) -> Tuple[pd.DataFrame, List[RejectedRow]]:
    records, rejected = parse_transactions(rows, strict=strict)
    return to_frame(records), rejected


def validate_transaction_form(
    type: str,
    category_id: Optional[int],
    category_name: Optional[str],
    amount: Any,
    transaction_date: Optional[date],
    description: Optional[str] = None,
) -> dict:
    """Check a submitted form before it is sent to the store.

    Returns the payload for ``TransactionStore.add_transaction`` /
    ``update_transaction``. Raises ``ValidationError`` with a message fit for
    a toast.
    """

    if type not in TRANSACTION_TYPES:
        raise ValidationError(f"Transaction type must be '{INCOME}' or '{EXPENSE}'")

    try:
        parsed = float(_parse_amount(amount)) if amount is not None else None
    except (TypeError, ValueError):
        parsed = None
    if parsed is None or not math.isfinite(parsed) or parsed <= 0:
        raise ValidationError("Please enter a valid amount")

    if category_id is None:
        raise ValidationError("Please choose a category")
    if transaction_date is None:
        raise ValidationError("Please choose a date")

    return {
        "type": type,
        "category_id": category_id,
        "category_name": (category_name or "").strip(),
        "amount": parsed,
        "description": (description or "").strip() or None,
        "transaction_date": transaction_date,
    }

"""Row builders shared by the test modules."""

from __future__ import annotations

from datetime import date, datetime
from itertools import count

_ids = count(1)


def make_row(
    type: str,
    category: str,
    amount,
    on: date,
    description: str | None = None,
    created_at: datetime | None = None,
    user_id: int = 1,
) -> dict:
    """A transaction row shaped like ``TransactionStore.list_transactions`` output."""

    return {
        "id": next(_ids),
        "user_id": user_id,
        "type": type,
        "category_id": None,
        "category_name": category,
        "amount": amount,
        "description": description,
        "transaction_date": on,
        "created_at": created_at or datetime.combine(on, datetime.min.time()),
    }

# aggregation.py: derived figures over the canonical transaction frame

from datetime import date, timedelta
from typing import Dict, List, NamedTuple, Optional, Tuple

import pandas as pd

from smart_expense_manager.database import EXPENSE, INCOME


class Totals(NamedTuple):
    income: float
    expense: float
    balance: float


def _today(today: Optional[date]) -> date:
    return today or date.today()


def _month_key(today: Optional[date]) -> str:
    return str(pd.Period(pd.Timestamp(_today(today)), freq="M"))


def totals(df: pd.DataFrame) -> Totals:
    """Sum amounts by type. ``balance`` is always ``income - expense``."""
    if df.empty:
        return Totals(0.0, 0.0, 0.0)

    income = float(df.loc[df["Type"] == INCOME, "Amount"].sum())
    expense = float(df.loc[df["Type"] == EXPENSE, "Amount"].sum())
    return Totals(income, expense, income - expense)


def savings_rate(income: float, expense: float) -> float:
    # guard against division by zero
    if not income:
        return 0.0
    return (income - expense) / income * 100


def category_breakdown(df: pd.DataFrame, type: str = EXPENSE) -> Dict[str, float]:
    """
    Summed amount per category name for one transaction type.

    Keys keep the order in which each category first appears in ``df``.
    Use ``sorted_breakdown`` for a ranking.
    """
    rows = df[df["Type"] == type] if not df.empty else df
    if rows.empty:
        return {}

    by_cat = rows.groupby("Category", sort=False)["Amount"].sum()
    return {str(name): float(value) for name, value in by_cat.items()}


def sorted_breakdown(breakdown: Dict[str, float], top_n: Optional[int] = None) -> List[Tuple[str, float]]:
    ranked = sorted(breakdown.items(), key=lambda item: item[1], reverse=True)
    return ranked[:top_n] if top_n else ranked


def month_frame(df: pd.DataFrame, today: Optional[date] = None) -> pd.DataFrame:
    if df.empty:
        return df
    return df[df["Month"] == _month_key(today)]


def month_expense(df: pd.DataFrame, today: Optional[date] = None) -> float:
    """Expenses booked in the current calendar month."""
    return totals(month_frame(df, today)).expense


def monthly_series(df: pd.DataFrame, months_back: int = 6, today: Optional[date] = None) -> pd.DataFrame:
    """
    Income and expense per month for the trailing ``months_back`` months,
    ending with the current month. Months without activity are zero rows.
    """
    current = pd.Period(pd.Timestamp(_today(today)), freq="M")
    months = pd.period_range(end=current, periods=months_back, freq="M")
    keys = [str(p) for p in months]

    if df.empty:
        grouped = pd.DataFrame(0.0, index=keys, columns=[INCOME, EXPENSE])
    else:
        grouped = (
            df.groupby(["Month", "Type"])["Amount"]
            .sum()
            .unstack(fill_value=0.0)
            .reindex(index=keys, columns=[INCOME, EXPENSE], fill_value=0.0)
            .fillna(0.0)
        )

    return pd.DataFrame({
        "Month": keys,
        "Label": [p.strftime("%b") for p in months],
        "Income": grouped[INCOME].astype(float).to_numpy(),
        "Expense": grouped[EXPENSE].astype(float).to_numpy(),
    })


def forecast(df: pd.DataFrame, today: Optional[date] = None, window: int = 3) -> float:
    """Simple moving average of the last ``window`` monthly expense sums.

    The current month counts as the most recent one; months with no
    expenses contribute zero.
    """
    series = monthly_series(df, months_back=window, today=today)
    return float(series["Expense"].mean())


def quick_stats(df: pd.DataFrame, today: Optional[date] = None) -> dict:
    """Small at-a-glance numbers for the Quick Stats card."""

    today = _today(today)
    empty = {
        "today_count": 0,
        "today_amount": 0.0,
        "yesterday_count": 0,
        "yesterday_amount": 0.0,
        "avg_transaction": 0.0,
        "avg_daily_expense": 0.0,
        "largest_amount": 0.0,
        "largest_category": None,
        "active_days": 0,
        "month_count": 0,
        "transaction_count": 0,
    }
    if df.empty:
        return empty

    days = df["Date"].dt.date
    today_rows = df[days == today]
    yesterday_rows = df[days == today - timedelta(days=1)]
    this_month = month_frame(df, today)

    largest = df.loc[df["Amount"].idxmax()]

    return {
        "today_count": int(len(today_rows)),
        "today_amount": float(today_rows["Amount"].sum()),
        "yesterday_count": int(len(yesterday_rows)),
        "yesterday_amount": float(yesterday_rows["Amount"].sum()),
        "avg_transaction": float(df["Amount"].mean()),
        "avg_daily_expense": totals(this_month).expense / today.day,
        "largest_amount": float(largest["Amount"]),
        "largest_category": largest["Category"],
        "active_days": int(days.nunique()),
        "month_count": int(len(this_month)),
        "transaction_count": int(len(df)),
    }

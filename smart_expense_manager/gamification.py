from datetime import datetime
from typing import List, Optional

import pandas as pd

from smart_expense_manager.aggregation import savings_rate, totals

MAX_LEVEL = 10
MAX_STREAK = 10
POINTS_PER_LEVEL = 100


def _progress(value: float, target: float) -> float:
    return max(0.0, min(value / target * 100, 100.0))


def tracking_streak(df: pd.DataFrame, now: Optional[datetime] = None) -> int:
    """Days since the oldest recorded transaction, capped at ``MAX_STREAK``."""
    if df.empty:
        return 0

    now = now or datetime.now()
    started = df["CreatedAt"].min()
    if pd.isna(started):
        started = df["Date"].min()
    days = (pd.Timestamp(now) - pd.Timestamp(started)).days
    return max(0, min(days, MAX_STREAK))


def points(df: pd.DataFrame) -> int:
    income = totals(df).income
    return len(df) * 10 + int(income // 1000)


def compute_badges(df: pd.DataFrame, streak: int) -> List[dict]:
    income, expense, _ = totals(df)
    rate = savings_rate(income, expense)
    count = len(df)

    return [
        {
            "id": "first-transaction",
            "name": "Getting Started",
            "description": "Add your first transaction",
            "achieved": count >= 1,
            "progress": _progress(count, 1),
        },
        {
            "id": "budget-keeper",
            "name": "Budget Keeper",
            "description": "Stay under budget for 3 days",
            "achieved": streak >= 3,
            "progress": _progress(streak, 3),
        },
        {
            "id": "super-saver",
            "name": "Super Saver",
            "description": "Save more than 30% of income",
            "achieved": rate >= 30,
            "progress": _progress(rate, 30),
        },
        {
            "id": "tracking-pro",
            "name": "Tracking Pro",
            "description": "Record 50 transactions",
            "achieved": count >= 50,
            "progress": _progress(count, 50),
        },
    ]


def compute_achievements(df: pd.DataFrame, now: Optional[datetime] = None) -> dict:
    streak = tracking_streak(df, now)
    total_points = points(df)
    return {
        "badges": compute_badges(df, streak),
        "streak": streak,
        "points": total_points,
        "level": min(total_points // POINTS_PER_LEVEL + 1, MAX_LEVEL),
        "level_progress": total_points % POINTS_PER_LEVEL,
    }

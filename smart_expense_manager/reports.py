"""Period reports and their JSON / CSV export.

The export is a one-way artifact: figures are rounded for presentation
(amounts to 2 places, percentages to 1) and there is no way to load a report
back in.
"""

from __future__ import annotations

import json
from datetime import date
from io import StringIO
from typing import Optional, Tuple

import pandas as pd

from smart_expense_manager.aggregation import category_breakdown, savings_rate, totals

PERIODS = {
    "current-month": "Current Month",
    "last-month": "Last Month",
    "current-year": "Current Year",
    "last-year": "Last Year",
}


def period_bounds(period: str, today: Optional[date] = None) -> Tuple[date, date, str]:
    """Inclusive start/end dates and a display label for a reporting period."""

    today = today or date.today()
    ts = pd.Timestamp(today)

    if period == "current-month":
        start = ts.replace(day=1)
    elif period == "last-month":
        start = (ts - pd.DateOffset(months=1)).replace(day=1)
    elif period == "current-year":
        return date(today.year, 1, 1), date(today.year, 12, 31), str(today.year)
    elif period == "last-year":
        year = today.year - 1
        return date(year, 1, 1), date(year, 12, 31), str(year)
    else:
        raise ValueError(f"Unknown report period: {period}")

    end = start + pd.offsets.MonthEnd(0)
    return start.date(), end.date(), start.strftime("%B %Y")


def filter_period(df: pd.DataFrame, start: date, end: date) -> pd.DataFrame:
    if df.empty:
        return df
    days = df["Date"].dt.date
    return df[(days >= start) & (days <= end)]


def build_report(df: pd.DataFrame, period: str = "current-month", today: Optional[date] = None) -> dict:
    start, end, label = period_bounds(period, today)
    period_df = filter_period(df, start, end)

    income, expense, net = totals(period_df)
    breakdown = category_breakdown(period_df)

    return {
        "period": label,
        "start": start.isoformat(),
        "end": end.isoformat(),
        "summary": {
            "total_income": round(income, 2),
            "total_expense": round(expense, 2),
            "net_savings": round(net, 2),
            "savings_rate": round(savings_rate(income, expense), 1),
            "transaction_count": int(len(period_df)),
        },
        "category_breakdown": [
            {
                "category": category,
                "amount": round(amount, 2),
                "percentage": round(amount / expense * 100, 1) if expense > 0 else 0.0,
            }
            for category, amount in breakdown.items()
        ],
        "transactions": [
            {
                "date": row.Date.date().isoformat(),
                "type": row.Type,
                "category": row.Category,
                "amount": round(float(row.Amount), 2),
                "description": row.Description or "",
            }
            for row in period_df.itertuples(index=False)
        ],
    }


def to_json(report: dict) -> str:
    return json.dumps(report, indent=2, ensure_ascii=False)


def to_csv(report: dict) -> str:
    """Summary, category breakdown and transactions as three CSV blocks."""

    summary = pd.DataFrame(
        [{"metric": key, "value": value} for key, value in report["summary"].items()]
    )
    summary = pd.concat(
        [pd.DataFrame([{"metric": "period", "value": report["period"]}]), summary],
        ignore_index=True,
    )
    breakdown = pd.DataFrame(report["category_breakdown"], columns=["category", "amount", "percentage"])
    txns = pd.DataFrame(report["transactions"], columns=["date", "type", "category", "amount", "description"])

    buffer = StringIO()
    summary.to_csv(buffer, index=False)
    buffer.write("\n")
    breakdown.to_csv(buffer, index=False)
    buffer.write("\n")
    txns.to_csv(buffer, index=False)
    return buffer.getvalue()


def report_filename(report: dict, fmt: str = "json") -> str:
    slug = "-".join(report["period"].lower().split())
    return f"financial-report-{slug}.{fmt}"

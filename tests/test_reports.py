import json
from datetime import date

import pytest

from smart_expense_manager.records import load_frame
from smart_expense_manager.reports import build_report, period_bounds, report_filename, to_csv, to_json
from tests.helpers import make_row


@pytest.mark.parametrize(
    "period, today, expected",
    [
        ("current-month", date(2026, 10, 18), (date(2026, 10, 1), date(2026, 10, 31), "October 2026")),
        ("last-month", date(2026, 10, 18), (date(2026, 9, 1), date(2026, 9, 30), "September 2026")),
        ("last-month", date(2026, 1, 15), (date(2025, 12, 1), date(2025, 12, 31), "December 2025")),
        ("current-month", date(2028, 2, 3), (date(2028, 2, 1), date(2028, 2, 29), "February 2028")),
        ("current-year", date(2026, 10, 18), (date(2026, 1, 1), date(2026, 12, 31), "2026")),
        ("last-year", date(2026, 10, 18), (date(2025, 1, 1), date(2025, 12, 31), "2025")),
    ],
)
def test_period_bounds(period, today, expected):
    assert period_bounds(period, today) == expected


def test_unknown_period():
    with pytest.raises(ValueError):
        period_bounds("fortnight", date(2026, 10, 18))


def test_current_month_report(sample_df, today):
    report = build_report(sample_df, "current-month", today)

    assert report["period"] == "October 2026"
    assert (report["start"], report["end"]) == ("2026-10-01", "2026-10-31")
    assert report["summary"] == {
        "total_income": 50000.0,
        "total_expense": 2300.0,
        "net_savings": 47700.0,
        "savings_rate": 95.4,
        "transaction_count": 4,
    }
    assert report["category_breakdown"] == [
        {"category": "Food", "amount": 2000.0, "percentage": 87.0},
        {"category": "Transport", "amount": 300.0, "percentage": 13.0},
    ]
    assert report["transactions"][0] == {
        "date": "2026-10-12",
        "type": "expense",
        "category": "Food",
        "amount": 799.5,
        "description": "Groceries",
    }


def test_year_reports(sample_df, today):
    assert build_report(sample_df, "current-year", today)["summary"]["transaction_count"] == 8
    last_year = build_report(sample_df, "last-year", today)
    assert last_year["summary"]["total_expense"] == 600.0
    assert last_year["category_breakdown"] == [{"category": "Entertainment", "amount": 600.0, "percentage": 100.0}]


def test_empty_period_report(sample_df):
    report = build_report(sample_df, "current-month", date(2026, 7, 1))
    assert report["summary"]["transaction_count"] == 0
    assert report["summary"]["savings_rate"] == 0
    assert report["category_breakdown"] == []
    assert report["transactions"] == []
    assert "metric,value" in to_csv(report)


def test_json_export_is_lossless(sample_df, today):
    report = build_report(sample_df, "current-month", today)
    assert json.loads(to_json(report)) == report


def test_csv_export_has_three_blocks(sample_df, today):
    text = to_csv(build_report(sample_df, "current-month", today))
    summary, breakdown, txns = text.strip("\n").split("\n\n")

    assert summary.splitlines()[:2] == ["metric,value", "period,October 2026"]
    assert breakdown.splitlines() == ["category,amount,percentage", "Food,2000.0,87.0", "Transport,300.0,13.0"]
    assert txns.splitlines()[0] == "date,type,category,amount,description"
    assert len(txns.splitlines()) == 5


def test_report_filename(sample_df, today):
    report = build_report(sample_df, "current-month", today)
    assert report_filename(report) == "financial-report-october-2026.json"
    assert report_filename(report, "csv") == "financial-report-october-2026.csv"


@pytest.mark.parametrize("period", ["current-month", "last-month", "current-year", "last-year"])
def test_export_recomputes_from_its_transactions(sample_df, today, period):
    report = json.loads(to_json(build_report(sample_df, period, today)))
    rows = report["transactions"]

    income = sum(r["amount"] for r in rows if r["type"] == "income")
    expense = sum(r["amount"] for r in rows if r["type"] == "expense")
    by_category = {}
    for r in rows:
        if r["type"] == "expense":
            by_category[r["category"]] = by_category.get(r["category"], 0.0) + r["amount"]

    summary = report["summary"]
    assert summary["transaction_count"] == len(rows)
    assert summary["total_income"] == round(income, 2)
    assert summary["total_expense"] == round(expense, 2)
    assert summary["net_savings"] == round(income - expense, 2)
    expected_rate = round((income - expense) / income * 100, 1) if income else 0.0
    assert summary["savings_rate"] == expected_rate

    assert {c["category"]: c["amount"] for c in report["category_breakdown"]} == {
        name: round(amount, 2) for name, amount in by_category.items()
    }
    assert {c["category"]: c["percentage"] for c in report["category_breakdown"]} == {
        name: round(amount / expense * 100, 1) for name, amount in by_category.items()
    }


def test_savings_rate_is_rounded_to_one_place(today):
    df, _ = load_frame([
        make_row("income", "Salary", 3000, date(2026, 10, 1)),
        make_row("expense", "Food", 1000, date(2026, 10, 2)),
    ])
    assert build_report(df, "current-month", today)["summary"]["savings_rate"] == 66.7

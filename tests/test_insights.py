from datetime import date

import pytest

from smart_expense_manager import config
from smart_expense_manager.insights import compute_highlights, generate_actionable_tips, generate_insights
from smart_expense_manager.records import load_frame
from tests.helpers import make_row


def test_highlights_for_current_month(sample_df, today):
    highlights = compute_highlights(sample_df, today)
    assert highlights["month"] == "2026-10"
    assert highlights["income"] == 50000.0
    assert highlights["spend"] == pytest.approx(2300.0)
    assert highlights["net"] == pytest.approx(47700.0)
    assert highlights["top_category"] == "Food"
    assert highlights["top_category_spend"] == pytest.approx(2000.0)
    assert highlights["avg_ticket"] == pytest.approx(2300 / 3)


def test_highlights_for_empty_month(sample_df):
    assert compute_highlights(sample_df, date(2026, 7, 1)) == {}


def test_insights_praise_high_savings(sample_df):
    text = generate_insights(sample_df)
    assert "Great job" in text
    assert "90.5%" in text
    assert f"**Bills** at {config.CURRENCY}4,000.00" in text
    assert "Quick Tips" in text


def test_insights_warn_when_spending_exceeds_income():
    df, _ = load_frame([
        make_row("income", "Salary", 100, date(2026, 10, 1)),
        make_row("expense", "Food", 200, date(2026, 10, 2)),
    ])
    assert "expenses exceed your income" in generate_insights(df)


def test_insights_for_empty_history(empty_df):
    assert generate_insights(empty_df) == ""


def test_actionable_tips(sample_df, today):
    tips = generate_actionable_tips(sample_df, today)
    assert len(tips) == 2
    assert "**Food**" in tips[0]
    assert "50%+" in tips[1]


def test_actionable_tips_flag_spending_spike(today):
    df, _ = load_frame([
        make_row("expense", "Food", 1000, date(2026, 10, 3)),
        make_row("expense", "Food", 500, date(2026, 9, 3)),
    ])
    tips = generate_actionable_tips(df, today)
    assert "Spending Alert" in tips[0]
    assert len(tips) == 2


def test_actionable_tips_empty(empty_df, today):
    assert generate_actionable_tips(empty_df, today) == []

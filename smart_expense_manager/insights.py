from datetime import date
from typing import List, Optional

import pandas as pd

from smart_expense_manager import config
from smart_expense_manager.aggregation import (
    category_breakdown,
    month_frame,
    savings_rate,
    sorted_breakdown,
    totals,
)
from smart_expense_manager.database import EXPENSE

QUICK_TIPS = [
    "Track daily expenses to identify spending patterns",
    "Set monthly budgets for each category",
    "Review and optimize recurring subscriptions",
    "Build an emergency fund covering 3-6 months of expenses",
]


def _money(value: float) -> str:
    return f"{config.CURRENCY}{value:,.2f}"


def compute_highlights(df: pd.DataFrame, today: Optional[date] = None) -> dict:
    """Summarize the current month for quick highlights."""

    month_df = month_frame(df, today)
    if month_df.empty:
        return {}

    income, expense, net = totals(month_df)
    ranked = sorted_breakdown(category_breakdown(month_df))
    top_category, top_category_spend = ranked[0] if ranked else (None, 0.0)
    expense_rows = month_df[month_df["Type"] == EXPENSE]

    return {
        "month": month_df["Month"].iloc[0],
        "income": income,
        "spend": expense,
        "net": net,
        "top_category": top_category,
        "top_category_spend": float(top_category_spend),
        "avg_ticket": float(expense_rows["Amount"].mean()) if not expense_rows.empty else 0.0,
    }


def generate_insights(df: pd.DataFrame) -> str:
    """Rule-based overview of the whole history, as Markdown."""

    if df.empty:
        return ""

    income, expense, _ = totals(df)
    rate = savings_rate(income, expense)
    ranked = sorted_breakdown(category_breakdown(df))

    text = "📊 **Financial Overview**\n\n"
    if rate > 20:
        text += (
            f"🎉 Great job! You're saving {rate:.1f}% of your income. "
            "Keep up the excellent financial discipline!\n\n"
        )
    elif rate > 0:
        text += (
            f"💡 You're saving {rate:.1f}% of your income. "
            "Consider increasing this to 20% or more for better financial health.\n\n"
        )
    else:
        text += "⚠️ Your expenses exceed your income. Focus on reducing spending or increasing income sources.\n\n"

    if ranked:
        name, amount = ranked[0]
        text += f"📈 Your highest spending category is **{name}** at {_money(amount)}.\n\n"

    text += "💰 **Quick Tips:**\n"
    text += "\n".join(f"• {tip}" for tip in QUICK_TIPS)
    return text


def generate_actionable_tips(df: pd.DataFrame, today: Optional[date] = None) -> List[str]:
    """
    Generates rule-based tips for the current month.
    """
    tips = []

    if df.empty:
        return tips

    today = today or date.today()
    current = month_frame(df, today)
    last_month = (pd.Timestamp(today) - pd.DateOffset(months=1)).date()
    previous = month_frame(df, last_month)

    # 1. Spending spike vs last month
    curr_spend = totals(current).expense
    last_spend = totals(previous).expense
    if last_spend > 0 and curr_spend > last_spend * 1.2:
        tips.append(
            "⚠️ **Spending Alert**: You're pacing 20% higher than last month. Consider pausing discretionary spend this week."
        )

    # 2. High category spend
    ranked = sorted_breakdown(category_breakdown(current))
    if ranked:
        top_cat, top_val = ranked[0]
        tips.append(
            f"🍔 **Top Category**: {_money(top_val)} spent on **{top_cat}** this month. Shift a single purchase to savings to stay on track."
        )

    # 3. Savings opportunity
    income = totals(current).income
    if income > 0 and (curr_spend / income) < 0.5:
        tips.append(
            "💰 **Great Job**: You've saved 50%+ of income this month. Move the surplus to your emergency fund or investments."
        )

    return tips

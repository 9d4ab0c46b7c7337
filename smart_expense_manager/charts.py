# charts.py: plotly figures for the dashboard

import hashlib
from typing import Dict

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

PALETTE = [
    "#6366F1",
    "#08CAC1",
    "#F59E0B",
    "#EF4444",
    "#10B981",
    "#8B5CF6",
    "#EC4899",
    "#0EA5E9",
    "#F97316",
    "#84CC16",
]

INCOME_COLOR = "#4CAF50"
EXPENSE_COLOR = "#FF5252"


def category_color(name: str) -> str:
    """Stable palette color for a category name, identical across reruns."""
    digest = hashlib.md5(name.encode("utf-8")).hexdigest()
    return PALETTE[int(digest, 16) % len(PALETTE)]


def _empty(title: str, message: str) -> go.Figure:
    fig = go.Figure()
    fig.add_annotation(text=message, showarrow=False, x=0.5, y=0.5, xref="paper", yref="paper")
    fig.update_layout(title=title, xaxis={"visible": False}, yaxis={"visible": False}, height=350)
    return fig


def spending_pie(breakdown: Dict[str, float]):
    """
    Donut chart of spending by category.
    """
    if not breakdown:
        return _empty("Spending by Category", "No expense data available")

    by_cat = pd.DataFrame({"Category": list(breakdown), "Amount": list(breakdown.values())})
    fig = px.pie(
        by_cat,
        values="Amount",
        names="Category",
        hole=0.4,
        title="Spending by Category",
        color="Category",
        color_discrete_map={name: category_color(name) for name in breakdown},
    )
    fig.update_traces(textposition="inside", textinfo="percent+label")
    return fig


def trend_bars(series: pd.DataFrame):
    """
    Bar chart of income vs expenses per month.
    """
    if series.empty:
        return _empty("Income vs Expenses Trend", "No data available")

    fig = go.Figure()
    fig.add_trace(go.Bar(x=series["Label"], y=series["Income"], name="Income", marker_color=INCOME_COLOR))
    fig.add_trace(go.Bar(x=series["Label"], y=series["Expense"], name="Expenses", marker_color=EXPENSE_COLOR))
    fig.update_layout(barmode="group", title="Income vs Expenses Trend", height=400)
    return fig


def forecast_line(series: pd.DataFrame, forecast_value: float):
    """Actual monthly expense with next month's projection appended."""
    if series.empty:
        return _empty("Spending Forecast", "Not enough data to predict")

    actual = series[["Month", "Expense"]].rename(columns={"Expense": "Amount"}).assign(Type="Actual")
    next_month = str(pd.Period(series["Month"].iloc[-1], freq="M") + 1)
    projected = pd.DataFrame({
        "Month": [series["Month"].iloc[-1], next_month],
        "Amount": [series["Expense"].iloc[-1], forecast_value],
        "Type": ["Forecast", "Forecast"],
    })
    combined = pd.concat([actual, projected], ignore_index=True)

    fig = px.line(combined, x="Month", y="Amount", color="Type", markers=True, title="Spending Forecast")
    fig.update_layout(height=350)
    return fig

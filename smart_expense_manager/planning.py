from datetime import date
from typing import List, Optional

import pandas as pd

from smart_expense_manager.aggregation import category_breakdown, month_frame
from smart_expense_manager.repository import CategoryBudget, Goal


def budget_status(budgets: List[CategoryBudget], df: pd.DataFrame, today: Optional[date] = None) -> List[dict]:
    """Compute month-to-date spend versus each category budget.

    ``spent_amount`` is recomputed here from the current month's expenses;
    whatever was stored alongside the budget is ignored.
    """

    if not budgets:
        return []

    spent_by_cat = category_breakdown(month_frame(df, today))

    status = []
    for budget in budgets:
        limit = float(budget.budget_amount or 0)
        spent = float(spent_by_cat.get(budget.category, 0.0))
        pct = spent / limit * 100 if limit > 0 else 0.0
        status.append({
            "id": budget.id,
            "category": budget.category,
            "budget_amount": limit,
            "spent_amount": spent,
            "remaining": limit - spent,
            "pct": pct,
            "is_over": pct > 100,
            "over_by": max(0.0, spent - limit),
        })
    return status


def budget_summary(status: List[dict]) -> dict:
    total_budget = sum(b["budget_amount"] for b in status)
    total_spent = sum(b["spent_amount"] for b in status)
    return {
        "total_budget": total_budget,
        "total_spent": total_spent,
        "overall_progress": total_spent / total_budget * 100 if total_budget > 0 else 0.0,
    }


def goal_progress(goal: Goal) -> float:
    if goal.target_amount <= 0:
        return 0.0
    return goal.current_amount / goal.target_amount * 100


def goal_savings_plan(goal: Goal, today: Optional[date] = None) -> dict:
    """Monthly amount needed to reach the goal by its deadline."""

    today = today or date.today()
    months_remaining = max((goal.deadline.year - today.year) * 12 + (goal.deadline.month - today.month), 1)
    remaining_needed = max(goal.target_amount - goal.current_amount, 0.0)

    return {
        "goal": goal.title,
        "months_remaining": months_remaining,
        "remaining_needed": float(remaining_needed),
        "required_monthly": float(remaining_needed / months_remaining),
        "is_overdue": goal.deadline < today and remaining_needed > 0,
    }

"""Financial health score.

A weighted blend of four 0-100 sub-scores. The weights and the "ideal"
denominators are illustrative, so they live in ``HealthScoreConfig`` rather
than in the formulas.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import pandas as pd

from smart_expense_manager.aggregation import savings_rate, totals
from smart_expense_manager.database import EXPENSE


@dataclass(frozen=True)
class HealthScoreConfig:
    savings_weight: float = 0.30
    expense_control_weight: float = 0.25
    consistency_weight: float = 0.25
    diversity_weight: float = 0.20
    savings_multiplier: float = 2.0
    ideal_transactions_per_month: int = 10
    ideal_categories: int = 8
    excellent_from: float = 80.0
    good_from: float = 60.0


@dataclass(frozen=True)
class HealthMetric:
    name: str
    score: float
    weight: float


@dataclass
class HealthScore:
    overall: float
    status: str
    metrics: List[HealthMetric]
    expense_ratio: float
    tips: List[str] = field(default_factory=list)

    def metric(self, name: str) -> HealthMetric:
        return next(m for m in self.metrics if m.name == name)


def _clamp(value: float) -> float:
    return max(0.0, min(value, 100.0))


def health_status(score: float, cfg: HealthScoreConfig = HealthScoreConfig()) -> str:
    if score >= cfg.excellent_from:
        return "Excellent"
    if score >= cfg.good_from:
        return "Good"
    return "Needs Attention"


def compute_health_score(df: pd.DataFrame, cfg: HealthScoreConfig = HealthScoreConfig()) -> HealthScore:
    income, expense, _ = totals(df)
    rate = savings_rate(income, expense)
    expense_ratio = (expense / income * 100) if income > 0 else 100.0

    if df.empty:
        consistency = 0.0
        diversity = 0.0
    else:
        active_months = df["Month"].nunique()
        per_month = len(df) / active_months if active_months else 0
        consistency = _clamp(per_month / cfg.ideal_transactions_per_month * 100)
        categories = df.loc[df["Type"] == EXPENSE, "Category"].nunique()
        diversity = _clamp(categories / cfg.ideal_categories * 100)

    metrics = [
        HealthMetric("Savings Rate", _clamp(rate * cfg.savings_multiplier), cfg.savings_weight),
        HealthMetric("Expense Control", max(0.0, 100 - expense_ratio), cfg.expense_control_weight),
        HealthMetric("Tracking Consistency", consistency, cfg.consistency_weight),
        HealthMetric("Category Diversity", diversity, cfg.diversity_weight),
    ]
    overall = sum(m.score * m.weight for m in metrics)

    tips = []
    if overall < cfg.good_from:
        tips.append("Focus on increasing your savings rate and reducing unnecessary expenses.")
    if expense_ratio > 80:
        tips.append("Your expenses are high relative to income. Review your spending categories.")
    if consistency < 50:
        tips.append("Track expenses more regularly for better financial insights.")
    if diversity < 50:
        tips.append("Categorize expenses in more detail to see where the money goes.")
    if overall >= cfg.excellent_from:
        tips.append("Excellent financial health! Keep up the great work.")

    return HealthScore(
        overall=overall,
        status=health_status(overall, cfg),
        metrics=metrics,
        expense_ratio=expense_ratio,
        tips=tips,
    )

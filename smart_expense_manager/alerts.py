"""Budget alert rules.

Two independent tiers are evaluated fresh on every render:

* the primary tier classifies month-to-date spend against the monthly budget
  into exactly one of EXCEEDED, NEAR_LIMIT, WARNING or GOOD;
* the forecast tier may add FORECAST_EXCEEDED or FORECAST_WARNING based on the
  trailing-average forecast.

Nothing is remembered between renders, so an alert disappears as soon as
the numbers stop supporting it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from smart_expense_manager import config


class AlertLevel(str, Enum):
    EXCEEDED = "exceeded"
    NEAR_LIMIT = "near_limit"
    WARNING = "warning"
    GOOD = "good"
    FORECAST_EXCEEDED = "forecast_exceeded"
    FORECAST_WARNING = "forecast_warning"


# error / warning / info, mapped onto st.error / st.warning / st.info
SEVERITY = {
    AlertLevel.EXCEEDED: "error",
    AlertLevel.NEAR_LIMIT: "warning",
    AlertLevel.WARNING: "info",
    AlertLevel.GOOD: "success",
    AlertLevel.FORECAST_EXCEEDED: "error",
    AlertLevel.FORECAST_WARNING: "warning",
}


@dataclass(frozen=True)
class AlertThresholds:
    exceeded: float = 1.00
    near_limit: float = 0.80
    warning: float = 0.60
    forecast_exceeded: float = 0.90
    forecast_warning: float = 0.80


DEFAULT_THRESHOLDS = AlertThresholds()


@dataclass(frozen=True)
class Alert:
    level: AlertLevel
    title: str
    message: str
    percentage: float

    @property
    def severity(self) -> str:
        return SEVERITY[self.level]


def classify_budget(spent: float, budget: float, thresholds: AlertThresholds = DEFAULT_THRESHOLDS) -> AlertLevel:
    """Primary tier. Lower bounds are inclusive."""
    if budget <= 0:
        raise ValueError("budget must be positive")

    ratio = spent / budget
    if ratio >= thresholds.exceeded:
        return AlertLevel.EXCEEDED
    if ratio >= thresholds.near_limit:
        return AlertLevel.NEAR_LIMIT
    if ratio >= thresholds.warning:
        return AlertLevel.WARNING
    return AlertLevel.GOOD


def classify_forecast(
    forecast: float,
    budget: float,
    primary: AlertLevel,
    thresholds: AlertThresholds = DEFAULT_THRESHOLDS,
) -> Optional[AlertLevel]:
    if budget <= 0:
        raise ValueError("budget must be positive")

    ratio = forecast / budget
    if ratio >= thresholds.forecast_exceeded:
        return AlertLevel.FORECAST_EXCEEDED if primary != AlertLevel.EXCEEDED else None
    if ratio >= thresholds.forecast_warning and primary != AlertLevel.NEAR_LIMIT:
        return AlertLevel.FORECAST_WARNING
    return None


def _money(value: float) -> str:
    return f"{config.CURRENCY}{value:,.2f}"


def _primary_alert(level: AlertLevel, spent: float, budget: float) -> Alert:
    pct = spent / budget * 100
    used = f"You've spent {_money(spent)} ({pct:.1f}%) of your {_money(budget)} monthly budget."
    if level == AlertLevel.EXCEEDED:
        return Alert(level, "Budget Exceeded!", f"{used} Consider reviewing your expenses.", pct)
    if level == AlertLevel.NEAR_LIMIT:
        return Alert(level, "Approaching Budget Limit", f"{used} Monitor your spending closely.", pct)
    if level == AlertLevel.WARNING:
        return Alert(level, "Budget Check-in", f"{used} That's over 60% of your budget, pace yourself.", pct)
    return Alert(level, "On Track", f"{used} Keep it up!", pct)


def _forecast_alert(level: AlertLevel, forecast: float, budget: float) -> Alert:
    pct = forecast / budget * 100
    projected = (
        f"Based on your spending pattern, you're projected to spend {_money(forecast)} "
        f"this month ({pct:.1f}% of budget)."
    )
    if level == AlertLevel.FORECAST_EXCEEDED:
        return Alert(level, "Spending Forecast Alert", f"{projected} Consider adjusting your expenses.", pct)
    return Alert(level, "Forecast Nearing Budget", f"{projected} Keep an eye on discretionary spend.", pct)


def evaluate_alerts(
    spent: float,
    budget: Optional[float],
    forecast: Optional[float] = None,
    thresholds: AlertThresholds = DEFAULT_THRESHOLDS,
) -> List[Alert]:
    """Return the banners to show, most severe tier first.

    GOOD is never returned as a banner. Without a positive budget there is
    nothing to compare against and the result is empty.
    """

    if not budget or budget <= 0:
        return []

    alerts: List[Alert] = []
    primary = classify_budget(spent, budget, thresholds)
    if primary != AlertLevel.GOOD:
        alerts.append(_primary_alert(primary, spent, budget))

    if forecast:
        forecast_level = classify_forecast(forecast, budget, primary, thresholds)
        if forecast_level is not None:
            alerts.append(_forecast_alert(forecast_level, forecast, budget))

    return alerts


def budget_headline(spent: float, budget: Optional[float], thresholds: AlertThresholds = DEFAULT_THRESHOLDS) -> Optional[Alert]:
    """Primary-tier alert including GOOD, for the budget progress card."""
    if not budget or budget <= 0:
        return None
    return _primary_alert(classify_budget(spent, budget, thresholds), spent, budget)

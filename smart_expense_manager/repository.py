"""Typed, user-scoped repositories for goals and category budgets.

Each user's items are stored as one JSON array under
``<namespace>/<user_id>.json`` on a key-value backend from ``storage``.
"""

from __future__ import annotations

import math
import uuid
from datetime import date, datetime
from typing import Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from smart_expense_manager.errors import StoreError, ValidationError
from smart_expense_manager.logging_setup import get_logger

logger = get_logger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


class Goal(BaseModel):
    id: str = Field(default_factory=_new_id)
    user_id: int
    title: str
    target_amount: float = Field(gt=0, allow_inf_nan=False)
    current_amount: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    deadline: date
    created_at: datetime = Field(default_factory=datetime.utcnow)


class CategoryBudget(BaseModel):
    id: str = Field(default_factory=_new_id)
    category: str
    budget_amount: float = Field(gt=0, allow_inf_nan=False)
    # derived on read by planning.budget_status, never trusted from storage
    spent_amount: float = 0.0


T = TypeVar("T", bound=BaseModel)


class JsonListRepository(Generic[T]):
    namespace: str
    model: Type[BaseModel]

    def __init__(self, backend) -> None:
        self.backend = backend
        self._adapter = TypeAdapter(List[self.model])

    def key(self, user_id: int) -> str:
        return f"{self.namespace}/{user_id}.json"

    def list(self, user_id: int) -> List[T]:
        raw = self.backend.get(self.key(user_id))
        if not raw:
            return []
        try:
            return self._adapter.validate_json(raw)
        except PydanticValidationError as e:
            logger.error("Corrupt %s data for user %s: %s", self.namespace, user_id, e)
            raise StoreError(f"Stored {self.namespace} could not be read") from e

    def save_all(self, user_id: int, items: List[T]) -> None:
        self.backend.put(self.key(user_id), self._adapter.dump_json(items, indent=2).decode("utf-8"))

    def get(self, user_id: int, item_id: str) -> Optional[T]:
        return next((item for item in self.list(user_id) if item.id == item_id), None)

    def delete(self, user_id: int, item_id: str) -> bool:
        items = self.list(user_id)
        remaining = [item for item in items if item.id != item_id]
        if len(remaining) == len(items):
            return False
        self.save_all(user_id, remaining)
        logger.info("Deleted %s %s for user %s", self.namespace, item_id, user_id)
        return True

    def clear(self, user_id: int) -> None:
        self.backend.delete(self.key(user_id))


def _positive_amount(value) -> Optional[float]:
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    return amount if math.isfinite(amount) and amount > 0 else None


class GoalRepository(JsonListRepository[Goal]):
    namespace = "goals"
    model = Goal

    def add(self, user_id: int, title: str, target_amount, deadline: Optional[date]) -> Goal:
        amount = _positive_amount(target_amount)
        if not title or not title.strip() or amount is None or deadline is None:
            raise ValidationError("Please fill all fields")

        goal = Goal(user_id=user_id, title=title.strip(), target_amount=amount, deadline=deadline)
        # newest first
        self.save_all(user_id, [goal] + self.list(user_id))
        logger.info("Added goal %s for user %s", goal.id, user_id)
        return goal

    def update_progress(self, user_id: int, goal_id: str, current_amount) -> Goal:
        try:
            amount = float(current_amount)
        except (TypeError, ValueError):
            amount = -1.0
        if not math.isfinite(amount) or amount < 0:
            raise ValidationError("Saved amount cannot be negative")

        goals = self.list(user_id)
        for idx, goal in enumerate(goals):
            if goal.id == goal_id:
                goals[idx] = goal.model_copy(update={"current_amount": amount})
                self.save_all(user_id, goals)
                return goals[idx]
        raise ValidationError("Goal not found")


class BudgetRepository(JsonListRepository[CategoryBudget]):
    namespace = "budgets"
    model = CategoryBudget

    @staticmethod
    def _validate(category: str, budget_amount) -> tuple:
        amount = _positive_amount(budget_amount)
        if not category or not category.strip() or amount is None:
            raise ValidationError("Please enter valid category and budget amount")
        return category.strip(), amount

    def add(self, user_id: int, category: str, budget_amount) -> CategoryBudget:
        category, amount = self._validate(category, budget_amount)
        budget = CategoryBudget(category=category, budget_amount=amount)
        self.save_all(user_id, self.list(user_id) + [budget])
        logger.info("Added budget %s (%s) for user %s", budget.id, category, user_id)
        return budget

    def update(self, user_id: int, budget_id: str, category: str, budget_amount) -> CategoryBudget:
        category, amount = self._validate(category, budget_amount)
        budgets = self.list(user_id)
        for idx, budget in enumerate(budgets):
            if budget.id == budget_id:
                budgets[idx] = budget.model_copy(update={"category": category, "budget_amount": amount})
                self.save_all(user_id, budgets)
                return budgets[idx]
        raise ValidationError("Budget not found")

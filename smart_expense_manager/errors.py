"""Exceptions raised by the expense manager.

Everything the UI has to surface derives from ``ExpenseManagerError`` so a
page can catch a single type and show a notification.
"""

from __future__ import annotations

from typing import Any, List


class ExpenseManagerError(Exception):
    """Base class for all application errors."""


class ValidationError(ExpenseManagerError):
    """User input failed a local check before reaching the store."""


class StoreError(ExpenseManagerError):
    """A database or key-value backend call failed."""


class TransactionValidationError(ExpenseManagerError):
    """One or more stored transaction rows could not be parsed."""

    def __init__(self, rejected: List[Any]):
        self.rejected = rejected
        super().__init__(f"{len(rejected)} transaction row(s) failed validation")

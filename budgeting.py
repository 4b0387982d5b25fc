# budgeting.py: pure spend aggregation and alert evaluation

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from database import TransactionType

ZERO = Decimal("0")


@dataclass(frozen=True)
class BudgetStatus:
    budget_id: Optional[int]
    name: str
    amount: Decimal
    spent: Decimal
    remaining: Decimal
    percentage_used: float


@dataclass(frozen=True)
class BudgetAlert:
    user_id: int
    budget_id: Optional[int]
    budget_name: str
    percentage_used: float


def is_in_window(budget, day: date) -> bool:
    """True when ``day`` falls inside the budget's inclusive spend window."""
    if day < budget.start_date:
        return False
    return budget.end_date is None or day <= budget.end_date


def _counts_toward(budget, transaction) -> bool:
    return (
        transaction.category_id == budget.category_id
        and TransactionType(transaction.type) == TransactionType.EXPENSE
        and is_in_window(budget, transaction.date)
    )


def calculate_spent(budget, transactions: Iterable) -> Decimal:
    """Sum of expense amounts in the budget's category and spend window."""
    return sum(
        (Decimal(t.amount) for t in transactions if _counts_toward(budget, t)), ZERO
    )


def usage_percent(amount, spent) -> Decimal:
    amount = Decimal(amount)
    if amount <= 0:
        return ZERO
    return Decimal(spent) / amount * 100


def percentage_used(amount, spent) -> float:
    # Display value only; thresholds compare against usage_percent.
    return round(float(usage_percent(amount, spent)), 2)


def calculate_budget_status(budget, transactions: Iterable) -> BudgetStatus:
    amount = Decimal(budget.amount)
    spent = calculate_spent(budget, transactions)
    return BudgetStatus(
        budget_id=budget.id,
        name=budget.name,
        amount=amount,
        spent=spent,
        remaining=amount - spent,
        percentage_used=percentage_used(amount, spent),
    )


def evaluate_budget_alerts(budgets, transactions_by_user, threshold) -> list:
    """Return one alert for every budget whose usage reached ``threshold``.

    ``transactions_by_user`` maps a user id to that user's transactions; a
    budget only ever sees its owner's transactions.
    """
    threshold = Decimal(str(threshold))
    alerts = []
    for budget in budgets:
        status = calculate_budget_status(
            budget, transactions_by_user.get(budget.user_id, ())
        )
        if usage_percent(status.amount, status.spent) >= threshold:
            alerts.append(
                BudgetAlert(
                    user_id=budget.user_id,
                    budget_id=budget.id,
                    budget_name=budget.name,
                    percentage_used=status.percentage_used,
                )
            )
    return alerts

# finote/budgets.py
from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional

from finote.core.models import Budget, BudgetPeriod, BudgetStatus, TransactionType
from finote.utils import parse_date

WARNING_PERCENTAGE = 80.0


def period_start(period, today: Optional[date] = None) -> date:
    today = today or date.today()
    if BudgetPeriod(period) == BudgetPeriod.YEARLY:
        return date(today.year, 1, 1)
    return date(today.year, today.month, 1)


def period_spending(transactions: Iterable, category: str, period, today: Optional[date] = None) -> float:
    """Expense total for a category since the start of the current period."""
    start = period_start(period, today)
    total = 0.0
    for tx in transactions:
        tx_date = parse_date(tx.date)
        if tx_date is None or tx_date < start:
            continue
        if TransactionType(tx.type) == TransactionType.EXPENSE and tx.category == category:
            total += tx.amount
    return total


def budget_status(budget: Budget, transactions: Iterable, today: Optional[date] = None) -> BudgetStatus:
    spent = period_spending(transactions, budget.category, budget.period, today)
    raw = spent / budget.amount * 100 if budget.amount > 0 else (100.0 if spent > 0 else 0.0)
    if raw >= 100:
        level = "over"
    elif raw >= WARNING_PERCENTAGE:
        level = "warning"
    else:
        level = "ok"
    return BudgetStatus(
        budget=budget,
        spent=spent,
        remaining=budget.amount - spent,
        percentage=min(raw, 100.0),
        level=level,
    )


def budget_report(budgets: Iterable[Budget], transactions: Iterable, today: Optional[date] = None) -> List[BudgetStatus]:
    txs = list(transactions)
    return [budget_status(budget, txs, today) for budget in budgets]

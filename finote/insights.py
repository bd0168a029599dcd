# finote/insights.py
"""Rule-based financial insights and the overall health score.

Both work on plain transaction, budget and goal lists and hold no state.
"""
from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from finote.core.models import Budget, Goal, HealthMetric, HealthScore, Insight, TransactionType
from finote.goals import days_remaining, is_on_track
from finote.utils import add_months, parse_date, round_half_up

INSIGHT_WINDOW_DAYS = 30
HEALTH_WINDOW_MONTHS = 3
MAX_INSIGHTS = 5
MIN_INSIGHTS = 3

SMART_TIP = Insight(
    type="tip",
    title="Smart Tip",
    message="Consider setting up automatic transfers to your savings account to build wealth consistently.",
)


def _since(transactions: Iterable, start: date) -> List:
    recent = []
    for tx in transactions:
        tx_date = parse_date(tx.date)
        if tx_date is not None and tx_date >= start:
            recent.append(tx)
    return recent


def _totals(transactions: List) -> tuple:
    income = sum(tx.amount for tx in transactions if TransactionType(tx.type) == TransactionType.INCOME)
    expenses = sum(tx.amount for tx in transactions if TransactionType(tx.type) == TransactionType.EXPENSE)
    return float(income), float(expenses)


def _expenses_by(transactions: List, key) -> Dict[str, float]:
    totals: Dict[str, float] = defaultdict(float)
    for tx in transactions:
        if TransactionType(tx.type) == TransactionType.EXPENSE:
            totals[key(tx)] += tx.amount
    return totals


def _savings_rate(income: float, expenses: float) -> float:
    return (income - expenses) / income * 100 if income > 0 else 0.0


def generate_insights(
    transactions: Iterable,
    budgets: Iterable[Budget] = (),
    goals: Iterable[Goal] = (),
    today: Optional[date] = None,
) -> List[Insight]:
    """Up to five insights about the last 30 days of activity."""
    today = today or date.today()
    recent = _since(transactions, today - timedelta(days=INSIGHT_WINDOW_DAYS))
    income, expenses = _totals(recent)
    insights: List[Insight] = []

    rate = _savings_rate(income, expenses)
    if rate >= 20:
        insights.append(Insight(
            type="positive",
            title="Excellent Savings Rate!",
            message=f"You're saving {rate:.1f}% of your income. This is above the recommended 20% threshold.",
        ))
    elif rate < 10:
        insights.append(Insight(
            type="warning",
            title="Low Savings Rate",
            message=f"You're saving {rate:.1f}% of your income. Consider increasing your savings to at least 20%.",
            action="Review your expenses",
        ))

    by_category = _expenses_by(recent, lambda tx: tx.category)
    if by_category:
        category, spent = sorted(by_category.items(), key=lambda item: -item[1])[0]
        if spent > income * 0.3:
            share = f"{spent / income * 100:.1f}% of your income" if income > 0 else "all spending with no income recorded"
            insights.append(Insight(
                type="warning",
                title="High Category Spending",
                message=f"{category} accounts for {share}.",
                action="Review budget for this category",
            ))

    for budget in budgets:
        if budget.amount <= 0:
            continue
        spent = by_category.get(budget.category, 0.0)
        percentage = spent / budget.amount * 100
        if percentage >= 90:
            insights.append(Insight(
                type="warning",
                title="Budget Alert",
                message=f"You've used {percentage:.1f}% of your {budget.category} budget.",
                action="Monitor spending",
            ))

    for goal in goals:
        if goal.target_amount <= 0:
            continue
        progress = goal.current_amount / goal.target_amount * 100
        days = days_remaining(goal, today)
        if progress >= 100:
            insights.append(Insight(
                type="achievement",
                title="Goal Achieved!",
                message=f"Congratulations! You've reached your {goal.name} goal.",
            ))
        elif days < 30 and progress < 75:
            insights.append(Insight(
                type="warning",
                title="Goal Deadline Approaching",
                message=f"Your {goal.name} goal is {days} days away with {progress:.1f}% progress.",
                action="Increase contributions",
            ))

    if len(insights) < MIN_INSIGHTS:
        insights.append(SMART_TIP)
    return insights[:MAX_INSIGHTS]


def _status(score: float, excellent: float, good: float, fair: float) -> str:
    if score >= excellent:
        return "excellent"
    if score >= good:
        return "good"
    if score >= fair:
        return "fair"
    return "poor"


def _savings_metric(income: float, expenses: float) -> HealthMetric:
    rate = _savings_rate(income, expenses)
    if rate >= 20:
        score = 100.0
    elif rate >= 15:
        score = 80.0
    elif rate >= 10:
        score = 60.0
    else:
        score = max(0.0, rate * 4)
    return HealthMetric(
        name="Savings Rate",
        score=score,
        weight=0.3,
        description=f"{rate:.1f}% of income saved",
        status=_status(rate, 20, 15, 10),
    )


def _budget_metric(budgets: List[Budget], recent: List) -> HealthMetric:
    spent = _expenses_by(recent, lambda tx: tx.category)
    over = sum(1 for b in budgets if spent.get(b.category, 0.0) > b.amount)
    if over == 0:
        score, status = 100.0, "excellent"
    elif over <= len(budgets) * 0.25:
        score, status = 80.0, "good"
    elif over <= len(budgets) * 0.5:
        score, status = 60.0, "fair"
    else:
        score, status = 30.0, "poor"
    return HealthMetric(
        name="Budget Adherence",
        score=score,
        weight=0.25,
        description=f"{len(budgets) - over}/{len(budgets)} budgets on track",
        status=status,
    )


def _goal_metric(goals: List[Goal], today: date) -> HealthMetric:
    on_track = sum(1 for g in goals if is_on_track(g, today))
    if not goals or on_track == len(goals):
        score, status = 100.0, "excellent"
    elif on_track >= len(goals) * 0.75:
        score, status = 80.0, "good"
    elif on_track >= len(goals) * 0.5:
        score, status = 60.0, "fair"
    else:
        score, status = 30.0, "poor"
    return HealthMetric(
        name="Goal Progress",
        score=score,
        weight=0.2,
        description=f"{on_track}/{len(goals)} goals on track",
        status=status,
    )


def _consistency_metric(recent: List) -> HealthMetric:
    monthly = list(_expenses_by(recent, lambda tx: parse_date(tx.date).strftime("%Y-%m")).values())
    score = 100.0
    if monthly:
        average = sum(monthly) / len(monthly)
        deviation = sum(abs(value - average) for value in monthly) / len(monthly)
        if average > 0:
            score = max(0.0, (1 - deviation / average) * 100)
    return HealthMetric(
        name="Expense Consistency",
        score=score,
        weight=0.15,
        description=f"{score:.0f}% consistent spending",
        status=_status(score, 80, 60, 40),
    )


def _emergency_metric(income: float, expenses: float) -> HealthMetric:
    months = (income - expenses) / (expenses / 12) if expenses > 0 else 0.0
    if months >= 6:
        score = 100.0
    elif months >= 3:
        score = 80.0
    elif months >= 1:
        score = 60.0
    else:
        score = max(0.0, months * 60)
    return HealthMetric(
        name="Emergency Fund",
        score=score,
        weight=0.1,
        description=f"{months:.1f} months of expenses saved",
        status=_status(months, 6, 3, 1),
    )


def health_score(
    transactions: Iterable,
    budgets: Iterable[Budget] = (),
    goals: Iterable[Goal] = (),
    today: Optional[date] = None,
) -> HealthScore:
    """Weighted 0-100 score over the last three months of activity."""
    today = today or date.today()
    recent = _since(transactions, add_months(today, -HEALTH_WINDOW_MONTHS))
    budgets, goals = list(budgets), list(goals)
    income, expenses = _totals(recent)
    metrics = [
        _savings_metric(income, expenses),
        _budget_metric(budgets, recent),
        _goal_metric(goals, today),
        _consistency_metric(recent),
        _emergency_metric(income, expenses),
    ]
    total = sum(metric.score * metric.weight for metric in metrics)
    return HealthScore(score=round_half_up(total), metrics=metrics)

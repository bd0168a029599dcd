# finote/goals.py
from __future__ import annotations

import dataclasses
from datetime import date
from typing import Optional

from finote.core.models import Goal

YEAR_DAYS = 365


def goal_progress(goal: Goal) -> float:
    """Percentage of the target reached, capped at 100."""
    if goal.target_amount <= 0:
        return 100.0
    return min(goal.current_amount / goal.target_amount * 100, 100.0)


def days_remaining(goal: Goal, today: Optional[date] = None) -> int:
    today = today or date.today()
    return (goal.deadline - today).days


def contribute(goal: Goal, amount: float) -> Goal:
    """Return the goal with ``amount`` added; withdrawals never go below zero."""
    return dataclasses.replace(goal, current_amount=max(0.0, goal.current_amount + amount))


def is_on_track(goal: Goal, today: Optional[date] = None) -> bool:
    """
    A goal is on track when its progress keeps pace with a one-year
    horizon ending at the deadline.
    """
    expected = max(0.0, (YEAR_DAYS - days_remaining(goal, today)) / YEAR_DAYS * 100)
    return goal_progress(goal) >= expected

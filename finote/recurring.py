# finote/recurring.py
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from finote.core.models import Frequency, RecurringCandidate, Transaction, TransactionType
from finote.utils import add_months, parse_amount, parse_date, round_half_up

logger = logging.getLogger(__name__)

AMOUNT_TOLERANCE = 0.10
SUGGEST_AHEAD_DAYS = 30
OVERDUE_DAYS = 7

# (frequency, canonical gap in days, tolerance in days, confidence)
_INTERVALS: Tuple[Tuple[Frequency, int, int, float], ...] = (
    (Frequency.WEEKLY, 7, 3, 0.8),
    (Frequency.MONTHLY, 30, 5, 0.9),
    (Frequency.YEARLY, 365, 30, 0.7),
)
_FALLBACK = (Frequency.MONTHLY, 0.5)


def _next_date(current_date: date, frequency: Frequency) -> date:
    if frequency == Frequency.WEEKLY:
        return current_date + timedelta(weeks=1)
    if frequency == Frequency.MONTHLY:
        return add_months(current_date, 1)
    if frequency == Frequency.YEARLY:
        return add_months(current_date, 12)
    raise ValueError(f"Unsupported frequency '{frequency}'.")


def _group_key(tx) -> tuple:
    kind = getattr(tx.type, "value", tx.type)
    return (
        str(tx.description or "").lower(),
        str(tx.category or "").lower(),
        str(kind or "").lower(),
    )


def _classify(mean_gap: float) -> Tuple[Frequency, float]:
    for frequency, days, tolerance, confidence in _INTERVALS:
        if abs(mean_gap - days) < tolerance:
            return frequency, confidence
    # No canonical period matched; keep the monthly guess at low confidence.
    return _FALLBACK


def _consistent_amounts(amounts: List[float]) -> Optional[float]:
    """Return the mean amount if every member stays within tolerance of it."""
    mean = sum(amounts) / len(amounts)
    if mean <= 0:
        return None
    if all(abs(amount - mean) / mean < AMOUNT_TOLERANCE for amount in amounts):
        return mean
    return None


def detect_recurring(
    transactions: Iterable, today: Optional[date] = None
) -> List[RecurringCandidate]:
    """
    Propose transactions likely to recur soon.

    Transactions are grouped by case-insensitive (description, category, type).
    A group yields a candidate when it has at least two members with amounts
    within 10% of their mean, and the projected next occurrence falls no more
    than 30 days ahead or 7 days overdue relative to ``today``.
    """
    today = today or date.today()
    groups: Dict[tuple, List[tuple]] = {}
    for tx in transactions:
        tx_date = parse_date(tx.date)
        amount = parse_amount(tx.amount)
        if tx_date is None or amount is None:
            logger.debug("Skipping unreadable transaction %r", getattr(tx, "id", tx))
            continue
        groups.setdefault(_group_key(tx), []).append((tx, tx_date, amount))

    detected = []
    for key, members in groups.items():
        if len(members) < 2:
            continue

        mean = _consistent_amounts([amount for _, _, amount in members])
        if mean is None:
            logger.debug("Group %s rejected: inconsistent amounts", key)
            continue

        dates = sorted(tx_date for _, tx_date, _ in members)
        gaps = [(later - earlier).days for earlier, later in zip(dates, dates[1:])]
        frequency, confidence = _classify(sum(gaps) / len(gaps))

        last = dates[-1]
        upcoming = _next_date(last, frequency)
        days_until = (upcoming - today).days
        if not (-OVERDUE_DAYS < days_until <= SUGGEST_AHEAD_DAYS):
            continue

        first = members[0][0]
        detected.append(
            RecurringCandidate(
                description=first.description,
                category=first.category,
                amount=round_half_up(mean),
                type=TransactionType(getattr(first.type, "value", first.type)),
                frequency=frequency,
                last_occurrence=last,
                confidence=confidence,
                suggested_date=upcoming,
            )
        )

    logger.info("Detected %d recurring candidate(s)", len(detected))
    return detected


def candidate_to_transaction(candidate: RecurringCandidate) -> Transaction:
    """Turn an accepted candidate into a new transaction on its suggested date."""
    return Transaction.new(
        date=candidate.suggested_date,
        type=candidate.type,
        category=candidate.category,
        description=candidate.description,
        amount=candidate.amount,
    )


def remove_candidate(
    candidates: Iterable[RecurringCandidate], candidate_id: str
) -> List[RecurringCandidate]:
    return [c for c in candidates if c.id != candidate_id]

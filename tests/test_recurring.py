from datetime import date

from finote.core.models import Frequency, Transaction, TransactionType
from finote.recurring import (
    candidate_to_transaction,
    detect_recurring,
    remove_candidate,
)


def tx(day, amount=199, description="Netflix", category="Entertainment", kind="expense"):
    return Transaction.new(
        date=day, type=kind, category=category, description=description, amount=amount
    )


def test_monthly_subscription_is_suggested():
    txs = [tx(date(2024, 1, 1)), tx(date(2024, 2, 1))]
    found = detect_recurring(txs, today=date(2024, 2, 20))

    assert len(found) == 1
    c = found[0]
    assert c.frequency == Frequency.MONTHLY
    assert c.confidence == 0.9
    assert c.suggested_date == date(2024, 3, 1)
    assert c.last_occurrence == date(2024, 2, 1)
    assert c.amount == 199
    assert c.type == TransactionType.EXPENSE
    assert (c.description, c.category) == ("Netflix", "Entertainment")


def test_thirty_day_gap_is_monthly_and_clamps_month_end():
    txs = [tx(date(2024, 1, 1), 50), tx(date(2024, 1, 31), 50)]
    found = detect_recurring(txs, today=date(2024, 2, 15))

    assert len(found) == 1
    assert found[0].frequency == Frequency.MONTHLY
    assert found[0].confidence == 0.9
    assert found[0].suggested_date == date(2024, 2, 29)


def test_weekly_and_yearly_patterns():
    weekly = [tx(date(2024, 3, d), 12, "Gym", "Healthcare") for d in (1, 8, 15)]
    found = detect_recurring(weekly, today=date(2024, 3, 18))
    assert [(c.frequency, c.confidence, c.suggested_date) for c in found] == [
        (Frequency.WEEKLY, 0.8, date(2024, 3, 22))
    ]

    yearly = [
        tx(date(2023, 3, 10), 1200, "Insurance", "Bills"),
        tx(date(2024, 3, 10), 1180, "Insurance", "Bills"),
    ]
    found = detect_recurring(yearly, today=date(2025, 3, 1))
    assert [(c.frequency, c.confidence, c.suggested_date) for c in found] == [
        (Frequency.YEARLY, 0.7, date(2025, 3, 10))
    ]


def test_unmatched_interval_falls_back_to_low_confidence_monthly():
    txs = [tx(date(2024, 3, 1), 40, "Haircut"), tx(date(2024, 3, 15), 40, "Haircut")]
    found = detect_recurring(txs, today=date(2024, 4, 1))

    assert len(found) == 1
    assert found[0].frequency == Frequency.MONTHLY
    assert found[0].confidence == 0.5
    assert found[0].suggested_date == date(2024, 4, 15)


def test_inconsistent_amounts_are_rejected():
    txs = [tx(date(2024, 1, 1), 85), tx(date(2024, 2, 1), 115)]
    assert detect_recurring(txs, today=date(2024, 2, 20)) == []


def test_zero_mean_amount_is_rejected():
    txs = [tx(date(2024, 1, 1), 0), tx(date(2024, 2, 1), 0)]
    assert detect_recurring(txs, today=date(2024, 2, 20)) == []


def test_single_occurrence_is_not_a_pattern():
    assert detect_recurring([tx(date(2024, 2, 1))], today=date(2024, 2, 20)) == []


def test_suggestion_window():
    txs = [tx(date(2024, 1, 1)), tx(date(2024, 2, 1))]
    # next occurrence 2024-03-01
    assert detect_recurring(txs, today=date(2024, 1, 16)) == []  # 45 days ahead
    assert len(detect_recurring(txs, today=date(2024, 1, 31))) == 1  # 30 days ahead
    assert len(detect_recurring(txs, today=date(2024, 3, 7))) == 1  # 6 days overdue
    assert detect_recurring(txs, today=date(2024, 3, 8)) == []  # 7 days overdue


def test_grouping_is_case_insensitive_and_type_aware():
    txs = [
        tx(date(2024, 1, 1), description="NETFLIX", category="entertainment"),
        tx(date(2024, 2, 1), description="netflix", category="Entertainment"),
        tx(date(2024, 1, 15), description="Netflix", kind="income"),
    ]
    found = detect_recurring(txs, today=date(2024, 2, 20))

    assert len(found) == 1
    assert found[0].description == "NETFLIX"
    assert found[0].category == "entertainment"


def test_malformed_dates_are_skipped_not_fatal():
    bad = Transaction(
        date="2024-13-45",
        type=TransactionType.EXPENSE,
        category="Entertainment",
        description="Netflix",
        amount=199,
    )
    txs = [tx(date(2024, 1, 1)), bad, tx(date(2024, 2, 1))]
    found = detect_recurring(txs, today=date(2024, 2, 20))
    assert len(found) == 1
    assert found[0].suggested_date == date(2024, 3, 1)

    assert detect_recurring([bad, tx(date(2024, 2, 1))], today=date(2024, 2, 20)) == []


def test_amount_is_rounded_half_up():
    txs = [tx(date(2024, 1, 1), 10.5), tx(date(2024, 2, 1), 10.5)]
    assert detect_recurring(txs, today=date(2024, 2, 20))[0].amount == 11


def test_accept_and_dismiss_candidates():
    txs = [
        tx(date(2024, 1, 1)),
        tx(date(2024, 2, 1)),
        tx(date(2024, 1, 5), 900, "Rent", "Bills"),
        tx(date(2024, 2, 5), 900, "Rent", "Bills"),
    ]
    found = detect_recurring(txs, today=date(2024, 2, 20))
    assert len(found) == 2

    new_tx = candidate_to_transaction(found[0])
    assert new_tx.date == found[0].suggested_date
    assert new_tx.amount == float(found[0].amount)
    assert new_tx.description == found[0].description
    assert new_tx.id not in {t.id for t in txs}

    remaining = remove_candidate(found, found[0].id)
    assert [c.id for c in remaining] == [found[1].id]


def test_surrounding_whitespace_keeps_groups_apart():
    txs = [tx(date(2024, 1, 1), description="Netflix "), tx(date(2024, 2, 1), description="Netflix")]
    assert detect_recurring(txs, today=date(2024, 2, 20)) == []

# finote/reports.py
from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List

import pandas as pd

from finote.core.models import SummaryStats, TransactionType
from finote.utils import parse_date

_COLUMNS = ["date", "type", "category", "amount"]


def _kind(tx) -> str:
    return TransactionType(tx.type).value


def filter_transactions(
    transactions: Iterable,
    date_from: date | None = None,
    date_to: date | None = None,
    type: str | None = None,
    category: str | None = None,
    search: str | None = None,
) -> List:
    """
    Return transactions matching every given filter.
    Date bounds are inclusive; ``search`` matches description or category
    case-insensitively.
    """
    needle = search.lower() if search else None
    kind = TransactionType(type).value if type else None
    matched = []
    for tx in transactions:
        tx_date = parse_date(tx.date)
        if date_from and (tx_date is None or tx_date < date_from):
            continue
        if date_to and (tx_date is None or tx_date > date_to):
            continue
        if kind and _kind(tx) != kind:
            continue
        if category and tx.category != category:
            continue
        if needle and needle not in tx.description.lower() and needle not in tx.category.lower():
            continue
        matched.append(tx)
    return matched


def summary_stats(transactions: Iterable) -> SummaryStats:
    txs = list(transactions)
    income = sum(tx.amount for tx in txs if _kind(tx) == TransactionType.INCOME.value)
    expenses = sum(tx.amount for tx in txs if _kind(tx) == TransactionType.EXPENSE.value)
    return SummaryStats(
        total_income=float(income),
        total_expenses=float(expenses),
        net_balance=float(income - expenses),
        transaction_count=len(txs),
    )


def _frame(transactions: Iterable) -> pd.DataFrame:
    rows = [
        {
            "date": parse_date(tx.date),
            "type": _kind(tx),
            "category": tx.category or "Other",
            "amount": float(tx.amount),
        }
        for tx in transactions
    ]
    df = pd.DataFrame(rows, columns=_COLUMNS)
    return df.dropna(subset=["date"])


def summarize_by_category(
    transactions: Iterable, type: str = TransactionType.EXPENSE.value
) -> List[Dict[str, object]]:
    """Totals per category for one transaction type, largest first."""
    df = _frame(transactions)
    df = df[df["type"] == TransactionType(type).value]
    if df.empty:
        return []
    grouped = (
        df.groupby("category")["amount"]
        .agg(total="sum", transactions="count")
        .reset_index()
        .sort_values(["total", "category"], ascending=[False, True])
    )
    return [
        {
            "category": row.category,
            "total": float(row.total),
            "transactions": int(row.transactions),
        }
        for row in grouped.itertuples(index=False)
    ]


def monthly_data(transactions: Iterable) -> List[Dict[str, object]]:
    """Income, expenses and net per YYYY-MM, oldest first."""
    df = _frame(transactions)
    if df.empty:
        return []
    df["month"] = df["date"].map(lambda d: d.strftime("%Y-%m"))
    pivot = (
        df.pivot_table(index="month", columns="type", values="amount", aggfunc="sum", fill_value=0.0)
        .reindex(columns=[t.value for t in TransactionType], fill_value=0.0)
        .sort_index()
    )
    return [
        {
            "month": month,
            "income": float(row["income"]),
            "expenses": float(row["expense"]),
            "net": float(row["income"] - row["expense"]),
        }
        for month, row in pivot.iterrows()
    ]

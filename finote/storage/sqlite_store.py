# finote/storage/sqlite_store.py
from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import List

from finote.core.models import Budget, Goal, Transaction
from finote.storage.base import BaseStore

logger = logging.getLogger(__name__)

_TX_COLUMNS = ("id", "date", "type", "category", "description", "amount", "createdAt", "updatedAt")
_BUDGET_COLUMNS = ("id", "category", "amount", "period", "createdAt")
_GOAL_COLUMNS = ("id", "name", "targetAmount", "currentAmount", "deadline", "category", "createdAt")


def _init_db(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS transactions (
            id TEXT PRIMARY KEY,
            date TEXT NOT NULL,
            type TEXT NOT NULL,
            category TEXT NOT NULL,
            description TEXT NOT NULL,
            amount REAL NOT NULL,
            createdAt TEXT NOT NULL,
            updatedAt TEXT NOT NULL
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS budgets (
            id TEXT PRIMARY KEY,
            category TEXT NOT NULL,
            amount REAL NOT NULL,
            period TEXT NOT NULL,
            createdAt TEXT NOT NULL
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS goals (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            targetAmount REAL NOT NULL,
            currentAmount REAL NOT NULL,
            deadline TEXT NOT NULL,
            category TEXT NOT NULL,
            createdAt TEXT NOT NULL
        )
        """
    )
    conn.commit()


class SqliteStore(BaseStore):
    """Stores transactions, budgets and goals in a SQLite database file."""

    def __init__(self, config):
        self.db_path = Path(config.get("db_path", "finote.db"))

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        _init_db(conn)
        return conn

    def _load(self, table, columns, factory):
        conn = self._connect()
        try:
            rows = conn.execute(
                f"SELECT {', '.join(columns)} FROM {table} ORDER BY rowid"
            ).fetchall()
        finally:
            conn.close()
        items = []
        for row in rows:
            try:
                items.append(factory(dict(zip(columns, row))))
            except ValueError as e:
                logger.warning("Skipping malformed row in %s: %s", table, e)
        return items

    def _replace_all(self, table, columns, rows) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute(f"DELETE FROM {table}")
                conn.executemany(
                    f"INSERT INTO {table} ({', '.join(columns)}) "
                    f"VALUES ({', '.join('?' for _ in columns)})",
                    [tuple(row[c] for c in columns) for row in rows],
                )
        finally:
            conn.close()

    def load_transactions(self) -> List[Transaction]:
        return self._load("transactions", _TX_COLUMNS, Transaction.from_dict)

    def save_transactions(self, transactions: List[Transaction]) -> None:
        self._replace_all("transactions", _TX_COLUMNS, [tx.to_dict() for tx in transactions])

    def load_budgets(self) -> List[Budget]:
        return self._load("budgets", _BUDGET_COLUMNS, Budget.from_dict)

    def save_budgets(self, budgets: List[Budget]) -> None:
        self._replace_all("budgets", _BUDGET_COLUMNS, [b.to_dict() for b in budgets])

    def load_goals(self) -> List[Goal]:
        return self._load("goals", _GOAL_COLUMNS, Goal.from_dict)

    def save_goals(self, goals: List[Goal]) -> None:
        self._replace_all("goals", _GOAL_COLUMNS, [g.to_dict() for g in goals])

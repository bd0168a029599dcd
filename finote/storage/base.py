# finote/storage/base.py
import logging
from abc import ABC, abstractmethod
import dataclasses
from typing import Iterable, List

from finote.core.models import Budget, Goal, Transaction, utc_timestamp

logger = logging.getLogger(__name__)


class BaseStore(ABC):
    """
    Persistence for the transaction, budget and goal lists.

    Backends only load and save whole collections; every mutation below is
    a read-modify-write over those collections.
    """

    @abstractmethod
    def load_transactions(self) -> List[Transaction]:
        pass

    @abstractmethod
    def save_transactions(self, transactions: List[Transaction]) -> None:
        pass

    @abstractmethod
    def load_budgets(self) -> List[Budget]:
        pass

    @abstractmethod
    def save_budgets(self, budgets: List[Budget]) -> None:
        pass

    @abstractmethod
    def load_goals(self) -> List[Goal]:
        pass

    @abstractmethod
    def save_goals(self, goals: List[Goal]) -> None:
        pass

    def add_transaction(self, transaction: Transaction) -> Transaction:
        self.save_transactions(self.load_transactions() + [transaction])
        logger.info("Added transaction %s", transaction.id)
        return transaction

    def add_transactions(self, transactions: Iterable[Transaction], replace: bool = False) -> None:
        new = list(transactions)
        existing = [] if replace else self.load_transactions()
        self.save_transactions(existing + new)

    def update_transaction(self, transaction_id: str, **changes) -> Transaction:
        transactions = self.load_transactions()
        for index, tx in enumerate(transactions):
            if tx.id == transaction_id:
                updated = dataclasses.replace(tx, updated_at=utc_timestamp(), **changes)
                transactions[index] = updated
                self.save_transactions(transactions)
                return updated
        raise KeyError(f"No transaction with id '{transaction_id}'.")

    def delete_transaction(self, transaction_id: str) -> bool:
        transactions = self.load_transactions()
        remaining = [tx for tx in transactions if tx.id != transaction_id]
        if len(remaining) == len(transactions):
            return False
        self.save_transactions(remaining)
        return True

    def clear_transactions(self) -> None:
        self.save_transactions([])

    def add_budget(self, budget: Budget) -> Budget:
        self.save_budgets(self.load_budgets() + [budget])
        return budget

    def update_budget(self, budget_id: str, **changes) -> Budget:
        budgets = self.load_budgets()
        for index, budget in enumerate(budgets):
            if budget.id == budget_id:
                budgets[index] = dataclasses.replace(budget, **changes)
                self.save_budgets(budgets)
                return budgets[index]
        raise KeyError(f"No budget with id '{budget_id}'.")

    def delete_budget(self, budget_id: str) -> bool:
        budgets = self.load_budgets()
        remaining = [b for b in budgets if b.id != budget_id]
        if len(remaining) == len(budgets):
            return False
        self.save_budgets(remaining)
        return True

    def add_goal(self, goal: Goal) -> Goal:
        self.save_goals(self.load_goals() + [goal])
        return goal

    def update_goal(self, goal_id: str, **changes) -> Goal:
        goals = self.load_goals()
        for index, goal in enumerate(goals):
            if goal.id == goal_id:
                goals[index] = dataclasses.replace(goal, **changes)
                self.save_goals(goals)
                return goals[index]
        raise KeyError(f"No goal with id '{goal_id}'.")

    def delete_goal(self, goal_id: str) -> bool:
        goals = self.load_goals()
        remaining = [g for g in goals if g.id != goal_id]
        if len(remaining) == len(goals):
            return False
        self.save_goals(remaining)
        return True

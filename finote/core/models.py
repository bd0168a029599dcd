# finote/core/models.py
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import List, Optional


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class Frequency(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Currency(str, Enum):
    THB = "THB"
    USD = "USD"


class BudgetPeriod(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


class GoalCategory(str, Enum):
    SAVINGS = "savings"
    DEBT = "debt"
    INVESTMENT = "investment"
    OTHER = "other"


def _new_id() -> str:
    return str(uuid.uuid4())


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class Transaction:
    date: date
    type: TransactionType
    category: str
    description: str
    amount: float
    id: str = field(default_factory=_new_id)
    created_at: str = field(default_factory=utc_timestamp)
    updated_at: str = field(default_factory=utc_timestamp)

    @classmethod
    def new(cls, date, type, category, description, amount) -> "Transaction":
        """Build a fresh transaction with its own id and timestamps."""
        return cls(
            date=date,
            type=TransactionType(type),
            category=category,
            description=description,
            amount=float(amount),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date.isoformat() if hasattr(self.date, "isoformat") else str(self.date),
            "type": TransactionType(self.type).value,
            "category": self.category,
            "description": self.description,
            "amount": self.amount,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        """Rebuild a transaction from its persisted form.

        Raises ValueError when the date, type or amount cannot be parsed.
        """
        raw_date = data.get("date")
        if not raw_date:
            raise ValueError(f"Missing 'date' in transaction: {data}")
        tx_date = date.fromisoformat(str(raw_date)[:10])
        try:
            amount = float(data.get("amount"))
        except (TypeError, ValueError):
            raise ValueError(f"Invalid 'amount' in transaction: {data}")
        now = utc_timestamp()
        return cls(
            id=str(data.get("id") or _new_id()),
            date=tx_date,
            type=TransactionType(data.get("type")),
            category=data.get("category", ""),
            description=data.get("description", ""),
            amount=amount,
            created_at=data.get("createdAt") or now,
            updated_at=data.get("updatedAt") or now,
        )


@dataclass
class RecurringCandidate:
    description: str
    category: str
    amount: int
    type: TransactionType
    frequency: Frequency
    last_occurrence: date
    confidence: float
    suggested_date: date
    id: str = field(default_factory=_new_id)


@dataclass(frozen=True)
class TaxBracket:
    lower: float
    upper: Optional[float]
    rate: float
    label: str = ""

    @property
    def unbounded(self) -> bool:
        return self.upper is None


@dataclass
class BracketBreakdown:
    bracket: TaxBracket
    taxable_amount: float
    tax_amount: float


@dataclass
class TaxCalculationResult:
    gross_income: float
    net_income: float
    total_tax: float
    effective_rate: float
    allowance: float = 0.0
    brackets: List[BracketBreakdown] = field(default_factory=list)

    @property
    def taxable_income(self) -> float:
        return max(0.0, self.gross_income - self.allowance)


@dataclass
class SummaryStats:
    total_income: float
    total_expenses: float
    net_balance: float
    transaction_count: int


@dataclass
class Budget:
    category: str
    amount: float
    period: BudgetPeriod = BudgetPeriod.MONTHLY
    id: str = field(default_factory=_new_id)
    created_at: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category,
            "amount": self.amount,
            "period": BudgetPeriod(self.period).value,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Budget":
        try:
            amount = float(data.get("amount"))
        except (TypeError, ValueError):
            raise ValueError(f"Invalid 'amount' in budget: {data}")
        return cls(
            id=str(data.get("id") or _new_id()),
            category=data.get("category", ""),
            amount=amount,
            period=BudgetPeriod(data.get("period", "monthly")),
            created_at=data.get("createdAt") or utc_timestamp(),
        )


@dataclass
class BudgetStatus:
    budget: Budget
    spent: float
    remaining: float
    percentage: float
    level: str


@dataclass
class Goal:
    name: str
    target_amount: float
    deadline: date
    current_amount: float = 0.0
    category: GoalCategory = GoalCategory.SAVINGS
    id: str = field(default_factory=_new_id)
    created_at: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "targetAmount": self.target_amount,
            "currentAmount": self.current_amount,
            "deadline": self.deadline.isoformat(),
            "category": GoalCategory(self.category).value,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Goal":
        raw_deadline = data.get("deadline")
        if not raw_deadline:
            raise ValueError(f"Missing 'deadline' in goal: {data}")
        try:
            target = float(data.get("targetAmount"))
            current = float(data.get("currentAmount") or 0)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid amounts in goal: {data}")
        return cls(
            id=str(data.get("id") or _new_id()),
            name=data.get("name", ""),
            target_amount=target,
            current_amount=current,
            deadline=date.fromisoformat(str(raw_deadline)[:10]),
            category=GoalCategory(data.get("category", "savings")),
            created_at=data.get("createdAt") or utc_timestamp(),
        )


@dataclass
class Insight:
    type: str
    title: str
    message: str
    action: Optional[str] = None


@dataclass
class HealthMetric:
    name: str
    score: float
    weight: float
    description: str
    status: str


@dataclass
class HealthScore:
    score: int
    metrics: List[HealthMetric] = field(default_factory=list)

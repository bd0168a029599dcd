import json
from datetime import date

import pytest

from finote.config import DEFAULT_CONFIG
from finote.core.models import Budget, BudgetPeriod, Goal, GoalCategory, Transaction, TransactionType
from finote.storage import get_store
from finote.storage.json_store import JsonStore
from finote.storage.sqlite_store import SqliteStore


def make_config(tmp_path, store):
    cfg = dict(DEFAULT_CONFIG)
    cfg.update(store=store, data_dir=str(tmp_path / "data"), db_path=str(tmp_path / "finote.db"))
    return cfg


@pytest.fixture(params=["json", "sqlite"])
def store(request, tmp_path):
    return get_store(make_config(tmp_path, request.param))


def sample(day=1, amount=10.0):
    return Transaction.new(
        date=date(2024, 1, day), type="expense", category="Food",
        description="Lunch", amount=amount,
    )


def test_get_store_resolves_backends(tmp_path):
    assert isinstance(get_store(make_config(tmp_path, "json")), JsonStore)
    assert isinstance(get_store(make_config(tmp_path, "sqlite")), SqliteStore)
    with pytest.raises(KeyError):
        get_store(make_config(tmp_path, "redis"))


def test_empty_store_loads_nothing(store):
    assert store.load_transactions() == []
    assert store.load_budgets() == []
    assert store.load_goals() == []


def test_transaction_crud(store):
    first = store.add_transaction(sample(1))
    store.add_transactions([sample(2, 20.0), sample(3, 30.0)])
    loaded = store.load_transactions()
    assert [tx.amount for tx in loaded] == [10.0, 20.0, 30.0]
    assert loaded[0] == first

    updated = store.update_transaction(first.id, amount=12.5, category="Shopping")
    assert updated.amount == 12.5
    assert updated.created_at == first.created_at
    assert store.load_transactions()[0].category == "Shopping"

    assert store.delete_transaction(first.id) is True
    assert store.delete_transaction(first.id) is False
    assert len(store.load_transactions()) == 2

    store.add_transactions([sample(9)], replace=True)
    assert [tx.date for tx in store.load_transactions()] == [date(2024, 1, 9)]

    store.clear_transactions()
    assert store.load_transactions() == []

    with pytest.raises(KeyError):
        store.update_transaction("missing", amount=1)


def test_budget_crud(store):
    budget = store.add_budget(Budget(category="Food", amount=300))
    assert store.load_budgets() == [budget]

    store.update_budget(budget.id, amount=400, period=BudgetPeriod.YEARLY)
    loaded = store.load_budgets()[0]
    assert (loaded.amount, loaded.period) == (400, BudgetPeriod.YEARLY)

    assert store.delete_budget(budget.id) is True
    assert store.load_budgets() == []


def test_json_store_uses_camelcase_records(tmp_path):
    store = JsonStore(make_config(tmp_path, "json"))
    tx = store.add_transaction(sample())

    rows = json.loads((tmp_path / "data" / "finote_transactions.json").read_text())
    assert rows == [
        {
            "id": tx.id,
            "date": "2024-01-01",
            "type": "expense",
            "category": "Food",
            "description": "Lunch",
            "amount": 10.0,
            "createdAt": tx.created_at,
            "updatedAt": tx.updated_at,
        }
    ]


def test_json_store_tolerates_bad_data(tmp_path):
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    path = data_dir / "finote_transactions.json"
    store = JsonStore(make_config(tmp_path, "json"))

    path.write_text("{not json")
    assert store.load_transactions() == []

    path.write_text(json.dumps([
        {"id": "a", "date": "2024-01-05", "type": "income", "category": "Salary",
         "description": "Pay", "amount": 5000},
        {"id": "b", "date": "not-a-date", "type": "expense", "category": "Food",
         "description": "Bad", "amount": 1},
        {"id": "c", "date": "2024-01-06", "type": "transfer", "category": "Other",
         "description": "Bad", "amount": 1},
    ]))
    loaded = store.load_transactions()
    assert [tx.id for tx in loaded] == ["a"]
    assert loaded[0].type == TransactionType.INCOME


def test_goal_crud(store):
    goal = store.add_goal(Goal(name="Emergency fund", target_amount=6000, deadline=date(2024, 12, 31)))
    assert store.load_goals() == [goal]

    store.update_goal(goal.id, current_amount=1500.0, category=GoalCategory.INVESTMENT)
    loaded = store.load_goals()[0]
    assert (loaded.current_amount, loaded.category) == (1500.0, GoalCategory.INVESTMENT)
    assert loaded.deadline == date(2024, 12, 31)

    with pytest.raises(KeyError):
        store.update_goal("missing", current_amount=1)
    assert store.delete_goal(goal.id) is True
    assert store.delete_goal(goal.id) is False
    assert store.load_goals() == []

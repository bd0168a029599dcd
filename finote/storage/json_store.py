# finote/storage/json_store.py
import json
import logging
from pathlib import Path

from finote.core.models import Budget, Goal, Transaction
from finote.storage.base import BaseStore

logger = logging.getLogger(__name__)

TRANSACTIONS_KEY = "finote_transactions"
BUDGETS_KEY = "finote_budgets"
GOALS_KEY = "finote_goals"


class JsonStore(BaseStore):
    """
    Keeps each collection as a JSON array in ``<data_dir>/<key>.json``.
    """

    def __init__(self, config):
        self.data_dir = Path(config.get('data_dir', 'data'))

    def _path(self, key):
        return self.data_dir / f"{key}.json"

    def _read(self, key):
        path = self._path(key)
        if not path.exists():
            return []
        try:
            with path.open("r", encoding="utf-8") as fp:
                data = json.load(fp)
        except (OSError, ValueError) as e:
            logger.error("Error loading %s: %s", path, e)
            return []
        return data if isinstance(data, list) else []

    def _write(self, key, rows):
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        with tmp.open("w", encoding="utf-8") as fp:
            json.dump(rows, fp, indent=2)
        tmp.replace(path)

    def _load(self, key, factory):
        items = []
        for row in self._read(key):
            try:
                items.append(factory(row))
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning("Skipping malformed record in %s: %s", key, e)
        return items

    def load_transactions(self):
        return self._load(TRANSACTIONS_KEY, Transaction.from_dict)

    def save_transactions(self, transactions):
        self._write(TRANSACTIONS_KEY, [tx.to_dict() for tx in transactions])

    def load_budgets(self):
        return self._load(BUDGETS_KEY, Budget.from_dict)

    def save_budgets(self, budgets):
        self._write(BUDGETS_KEY, [b.to_dict() for b in budgets])

    def load_goals(self):
        return self._load(GOALS_KEY, Goal.from_dict)

    def save_goals(self, goals):
        self._write(GOALS_KEY, [g.to_dict() for g in goals])

# finote/core/categories.py
from typing import Dict, Iterable, List, Optional

from finote.core.models import TransactionType

DEFAULT_CATEGORIES: Dict[str, List[str]] = {
    "income": ["Salary", "Freelance", "Investment", "Gift", "Other"],
    "expense": [
        "Food",
        "Transport",
        "Entertainment",
        "Shopping",
        "Bills",
        "Healthcare",
        "Education",
        "Other",
    ],
}


def merge_categories(transactions: Iterable, custom: Optional[Dict[str, List[str]]] = None):
    """
    Return the category catalogue per type, extended with any category
    that only appears in the transactions.
    """
    base = custom or DEFAULT_CATEGORIES
    merged = {kind.value: list(base.get(kind.value, [])) for kind in TransactionType}
    for tx in transactions:
        names = merged[TransactionType(tx.type).value]
        if tx.category and tx.category not in names:
            names.append(tx.category)
    return merged


def categorize(description, keyword_map):
    text = (description or "").lower()
    for cat, keywords in keyword_map.items():
        for kw in keywords or []:
            if kw.lower() in text:
                return cat
    return None

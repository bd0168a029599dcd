# finote/config.py
from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Dict

import yaml

DEFAULT_CONFIG: Dict[str, object] = {
    "store": "json",
    "stores": {
        "json": "finote.storage.json_store.JsonStore",
        "sqlite": "finote.storage.sqlite_store.SqliteStore",
    },
    "data_dir": "./data",
    "db_path": "finote.db",
    "currency": "THB",
    "categories": {
        "Food": ["grocery", "restaurant", "cafe"],
        "Transport": ["gas", "fuel", "taxi", "train"],
        "Entertainment": ["netflix", "spotify", "cinema"],
        "Bills": ["electric", "water", "internet", "rent"],
        "Salary": ["salary", "payroll"],
    },
    "tax_schedules": {},
}

DEFAULT_CONFIG_PATH = Path("config.yaml")


def default_config_path() -> Path:
    return Path(os.environ.get("FINOTE_CONFIG", DEFAULT_CONFIG_PATH))


def _merge_defaults(current: Dict[str, object], defaults: Dict[str, object]) -> Dict[str, object]:
    """Merge missing default keys into the current config recursively."""
    merged = dict(current)
    for key, value in defaults.items():
        if key not in merged:
            merged[key] = copy.deepcopy(value)
        elif isinstance(value, dict) and isinstance(merged[key], dict):
            merged[key] = _merge_defaults(merged[key], value)
    return merged


def load_config(path: Path | str | None = None) -> Dict[str, object]:
    target = Path(path) if path else default_config_path()
    if not target.exists():
        return copy.deepcopy(DEFAULT_CONFIG)
    with target.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {target} must contain a mapping.")
    return _merge_defaults(data, DEFAULT_CONFIG)


def save_config(config: Dict[str, object], path: Path | str | None = None) -> None:
    target = Path(path) if path else default_config_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as fp:
        yaml.safe_dump(config, fp, sort_keys=False)

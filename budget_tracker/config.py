from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Dict

import yaml

DEFAULT_CONFIG: Dict[str, object] = {
    "db_path": "budget_app.db",
    "store": "sqlite",
    "store_modules": {
        "sqlite": "budget_tracker.storage.sqlite_store.SQLiteStore",
        "memory": "budget_tracker.storage.memory_store.MemoryStore",
    },
    "output_modules": {
        "csv": "budget_tracker.outputs.csv_output.CSVOutput",
        "excel": "budget_tracker.outputs.excel_output.ExcelOutput",
    },
    "output_dir": "./data",
    "rates_cache_path": "currency_rates.json",
    "currency": {
        "base_url": "https://api.exchangerate-api.com/v4/latest",
        "supported": ["USD", "RUB", "CNY", "EUR", "TRY"],
        "timeout": 10,
        "cache_hours": 24,
    },
}


def _merge_defaults(current: Dict[str, object], defaults: Dict[str, object]) -> Dict[str, object]:
    """Merge missing default keys into the current config recursively."""
    merged = dict(current)
    for key, value in defaults.items():
        if key not in merged:
            merged[key] = copy.deepcopy(value)
        elif isinstance(value, dict) and isinstance(merged[key], dict):
            merged[key] = _merge_defaults(merged[key], value)
    return merged


def load_config(path: str | Path | None = None) -> Dict[str, object]:
    """Load a YAML config file, filling in defaults for anything it omits.

    A missing file is not an error; the defaults are returned. ``BUDGET_DB_PATH``
    overrides ``db_path`` from either source.
    """
    data: Dict[str, object] = {}
    if path is not None and Path(path).exists():
        with Path(path).open("r", encoding="utf-8") as fp:
            data = yaml.safe_load(fp) or {}
    config = _merge_defaults(data, DEFAULT_CONFIG)
    env_db = os.getenv("BUDGET_DB_PATH")
    if env_db:
        config["db_path"] = env_db
    return config


def save_config(config: Dict[str, object], path: str | Path) -> None:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as fp:
        yaml.safe_dump(config, fp, sort_keys=False, allow_unicode=True)

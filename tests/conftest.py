from datetime import datetime

import pytest

from budget_tracker.ledger import Ledger
from budget_tracker.storage.memory_store import MemoryStore
from budget_tracker.storage.sqlite_store import SQLiteStore

NOW = datetime(2025, 3, 15, 12, 0)


@pytest.fixture(params=["sqlite", "memory"])
def store(request, tmp_path):
    if request.param == "sqlite":
        return SQLiteStore({"db_path": str(tmp_path / "budget.db")})
    return MemoryStore({})


@pytest.fixture
def ledger(store):
    return Ledger(store, now=lambda: NOW)


def category_id(store, name, tx_type):
    return next(
        c.id for c in store.get_categories_by_type(tx_type) if c.name == name
    )

import logging
from typing import Dict, List

from budget_tracker.core.exceptions import StoreError
from budget_tracker.core.models import TransactionType, default_categories
from budget_tracker.storage.base import BaseStore

logger = logging.getLogger(__name__)


def _newest_first(transactions):
    return sorted(transactions, key=lambda t: (t.date, t.id or 0), reverse=True)


class MemoryStore(BaseStore):
    """Store that keeps everything in process memory. Nothing is persisted."""

    def __init__(self, config=None):
        self._categories = [
            c.replace(id=idx) for idx, c in enumerate(default_categories(), start=1)
        ]
        self._transactions = []
        self._profile = None
        self._next_category_id = len(self._categories) + 1
        self._next_transaction_id = 1
        logger.debug("In-memory store ready with %d categories", len(self._categories))

    # Categories

    def get_categories(self):
        return sorted(self._categories, key=lambda c: (c.name, c.id))

    def get_categories_by_type(self, tx_type):
        tx_type = TransactionType.from_value(tx_type)
        return [c for c in self.get_categories() if c.type is tx_type]

    def get_category(self, category_id):
        return next((c for c in self._categories if c.id == category_id), None)

    def add_category(self, category):
        new_id = self._next_category_id
        self._next_category_id += 1
        self._categories.append(category.replace(id=new_id, is_default=False))
        return new_id

    def delete_category(self, category_id):
        category = self.get_category(category_id)
        if category is None:
            return 0
        if category.is_default:
            raise StoreError(f"Category '{category.name}' is a system category")
        in_use = sum(1 for t in self._transactions if t.category_id == category_id)
        if in_use:
            raise StoreError(
                f"Category '{category.name}' is used by {in_use} transaction(s)"
            )
        self._categories.remove(category)
        return 1

    # Transactions

    def insert_transaction(self, transaction):
        if self.get_category(transaction.category_id) is None:
            raise StoreError(f"Unknown category {transaction.category_id}")
        new_id = self._next_transaction_id
        self._next_transaction_id += 1
        self._transactions.append(transaction.replace(id=new_id))
        logger.debug("Inserted transaction %s (%s)", new_id, transaction.formatted_amount_with_sign)
        return new_id

    def get_transactions(self, limit=None):
        result = _newest_first(self._transactions)
        if limit is not None and limit > 0:
            result = result[:limit]
        return result

    def get_transactions_by_type(self, tx_type):
        tx_type = TransactionType.from_value(tx_type)
        return [t for t in self.get_transactions() if t.type is tx_type]

    def get_transactions_by_period(self, start, end):
        return [t for t in self.get_transactions() if start <= t.date <= end]

    def update_transaction(self, transaction):
        for idx, existing in enumerate(self._transactions):
            if existing.id == transaction.id:
                self._transactions[idx] = transaction
                return 1
        return 0

    def delete_transaction(self, transaction_id):
        before = len(self._transactions)
        self._transactions = [t for t in self._transactions if t.id != transaction_id]
        return before - len(self._transactions)

    # Aggregates

    def get_total_balance(self):
        totals = self._totals(self._transactions)
        return totals["income"] - totals["expense"]

    def get_income_expense_by_period(self, start, end) -> Dict[str, float]:
        totals = self._totals(self.get_transactions_by_period(start, end))
        totals["balance"] = totals["income"] - totals["expense"]
        return totals

    @staticmethod
    def _totals(transactions: List) -> Dict[str, float]:
        totals = {"income": 0.0, "expense": 0.0}
        for t in transactions:
            totals[t.type.value] += t.amount
        return totals

    # Profile

    def get_user_profile(self):
        return self._profile

    def save_user_profile(self, profile):
        profile_id = self._profile.id if self._profile is not None else 1
        self._profile = profile.replace(id=profile_id)
        return profile_id

    def delete_user_profile(self):
        deleted = 1 if self._profile is not None else 0
        self._profile = None
        return deleted

    def reset_all_data(self):
        self._transactions = []
        self._profile = None
        self._categories = [c for c in self._categories if c.is_default]

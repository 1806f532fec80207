from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Dict, List

from budget_tracker.core.constants import CURRENCY_CODE
from budget_tracker.core.exceptions import TransactionNotFound, ValidationError
from budget_tracker.core.models import (
    Category,
    FilterPeriod,
    Transaction,
    TransactionType,
    UserProfile,
    validate_profile,
    validate_transaction,
)
from budget_tracker.statistics import Statistics, compute_statistics
from budget_tracker.storage.base import BaseStore
from budget_tracker.utils import filter_by_period, group_by_day

logger = logging.getLogger(__name__)


class Ledger:
    """User-level operations over a store: validated writes and filtered reads."""

    def __init__(self, store: BaseStore, now: Callable[[], datetime] = datetime.now):
        self.store = store
        self._now = now

    def _category_or_fail(self, category_id: int) -> Category:
        category = self.store.get_category(category_id)
        if category is None:
            raise ValidationError(f"Unknown category id {category_id}")
        return category

    def _get_transaction(self, transaction_id: int) -> Transaction:
        # Stores expose no single-row lookup; the list is small enough.
        for tx in self.store.get_transactions():
            if tx.id == transaction_id:
                return tx
        raise TransactionNotFound(transaction_id)

    def add_transaction(
        self,
        amount: float,
        category_id: int,
        date: datetime | None = None,
        description: str = "",
    ) -> Transaction:
        """Record a transaction. Its type follows the category's type.

        An empty description is replaced by the category name.
        """
        category = self._category_or_fail(category_id)
        now = self._now()
        tx = Transaction(
            amount=float(amount),
            description=description.strip() or category.name,
            date=date or now,
            category_id=category.id,
            type=category.type,
            created_at=now,
        )
        validate_transaction(tx, now)
        tx.id = self.store.insert_transaction(tx)
        logger.info("Added transaction %s: %s", tx.id, tx.formatted_amount_with_sign)
        return tx

    def edit_transaction(self, transaction_id: int, **changes) -> Transaction:
        current = self._get_transaction(transaction_id)
        if "category_id" in changes and changes["category_id"] is not None:
            category = self._category_or_fail(changes["category_id"])
            changes["type"] = category.type
        else:
            category = self._category_or_fail(current.category_id)
        if "description" in changes and changes["description"] is not None:
            changes["description"] = changes["description"].strip() or category.name
        if "amount" in changes and changes["amount"] is not None:
            changes["amount"] = float(changes["amount"])
        changes = {k: v for k, v in changes.items() if v is not None}

        now = self._now()
        updated = current.replace(updated_at=now, **changes)
        validate_transaction(updated, now)
        if not self.store.update_transaction(updated):
            raise TransactionNotFound(transaction_id)
        logger.info("Updated transaction %s", transaction_id)
        return updated

    def delete_transaction(self, transaction_id: int) -> None:
        if not self.store.delete_transaction(transaction_id):
            raise TransactionNotFound(transaction_id)
        logger.info("Deleted transaction %s", transaction_id)

    def list_transactions(
        self,
        tx_type: TransactionType | str | None = None,
        category_id: int | None = None,
        search: str | None = None,
        period: FilterPeriod | str = FilterPeriod.ALL,
    ) -> List[Transaction]:
        txs = self.store.get_transactions()
        if tx_type is not None:
            tx_type = TransactionType.from_value(tx_type)
            txs = [t for t in txs if t.type is tx_type]
        if category_id is not None:
            txs = [t for t in txs if t.category_id == category_id]
        if search:
            needle = search.lower()
            txs = [t for t in txs if needle in t.description.lower()]
        txs = filter_by_period(txs, period, self._now())
        return sorted(txs, key=lambda t: t.date, reverse=True)

    def group_by_day(self, transactions: List[Transaction]) -> Dict[str, List[Transaction]]:
        """Group under `YYYY-MM-DD` keys, newest day first."""
        return group_by_day(transactions)

    def dashboard(self, recent: int = 5) -> Dict[str, object]:
        return {
            "balance": self.store.get_total_balance(),
            "recent": self.store.get_transactions(limit=recent),
        }

    def statistics(self, period: FilterPeriod | str = FilterPeriod.MONTH) -> Statistics:
        return compute_statistics(
            self.store.get_transactions(),
            self.store.get_categories(),
            period,
            self._now(),
        )

    def category_names(self) -> Dict[int, str]:
        return {c.id: c.name for c in self.store.get_categories()}

    def add_category(
        self,
        name: str,
        tx_type: TransactionType | str,
        name_kz: str = "",
        icon: str = "more_horiz",
        color_hex: str = "#A8A8A8",
    ) -> Category:
        name = name.strip()
        if not name:
            raise ValidationError("Category name is required")
        category = Category(
            name=name,
            name_kz=name_kz.strip() or name,
            icon=icon,
            color_hex=color_hex,
            type=TransactionType.from_value(tx_type),
            is_default=False,
            created_at=self._now(),
        )
        category.id = self.store.add_category(category)
        return category

    def save_profile(self, name: str, email: str, currency: str = CURRENCY_CODE) -> UserProfile:
        validate_profile(name, email)
        now = self._now()
        existing = self.store.get_user_profile()
        profile = UserProfile(
            id=existing.id if existing else None,
            name=(name or "").strip(),
            email=(email or "").strip(),
            currency=currency,
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )
        profile.id = self.store.save_user_profile(profile)
        return profile

    def reset(self) -> None:
        self.store.reset_all_data()
        logger.info("All transactions, profile and user categories were removed")

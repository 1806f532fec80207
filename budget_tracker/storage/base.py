# budget_tracker/storage/base.py
from abc import ABC, abstractmethod


class BaseStore(ABC):
    """Persistence contract shared by the SQLite and in-memory backends.

    Transactions come back newest first. Period bounds are inclusive on both
    ends. Default categories are seeded when a store is first opened.
    """

    # Categories

    @abstractmethod
    def get_categories(self):
        """All categories ordered by name."""

    @abstractmethod
    def get_categories_by_type(self, tx_type):
        pass

    @abstractmethod
    def get_category(self, category_id):
        """Return the category or None."""

    @abstractmethod
    def add_category(self, category):
        """Insert a user category and return its id."""

    @abstractmethod
    def delete_category(self, category_id):
        """Delete a user category; raises StoreError for defaults or categories in use."""

    # Transactions

    @abstractmethod
    def insert_transaction(self, transaction):
        pass

    @abstractmethod
    def get_transactions(self, limit=None):
        pass

    @abstractmethod
    def get_transactions_by_type(self, tx_type):
        pass

    @abstractmethod
    def get_transactions_by_period(self, start, end):
        pass

    @abstractmethod
    def update_transaction(self, transaction):
        """Return the number of rows updated."""

    @abstractmethod
    def delete_transaction(self, transaction_id):
        """Return the number of rows deleted."""

    # Aggregates

    @abstractmethod
    def get_total_balance(self):
        pass

    @abstractmethod
    def get_income_expense_by_period(self, start, end):
        """Return a dict with ``income``, ``expense`` and ``balance`` keys."""

    # Profile

    @abstractmethod
    def get_user_profile(self):
        pass

    @abstractmethod
    def save_user_profile(self, profile):
        """Insert or update the single profile row; returns its id."""

    @abstractmethod
    def delete_user_profile(self):
        pass

    @abstractmethod
    def reset_all_data(self):
        """Drop transactions, the profile and user categories."""

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

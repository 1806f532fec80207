# budget_tracker/core/exceptions.py


class BudgetError(Exception):
    """Base class for errors raised by the budget tracker."""


class ValidationError(BudgetError, ValueError):
    """A record failed field validation."""


class TransactionNotFound(BudgetError, LookupError):
    def __init__(self, transaction_id):
        super().__init__(f"Transaction {transaction_id} not found")
        self.transaction_id = transaction_id


class StoreError(BudgetError):
    """The store refused an operation."""


class CurrencyError(BudgetError):
    """Currency rates could not be fetched or loaded from the cache."""

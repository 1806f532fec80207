# budget_tracker/outputs/base.py
from abc import ABC, abstractmethod

from budget_tracker.core.constants import UNCATEGORIZED


class BaseOutput(ABC):
    @abstractmethod
    def append(self, transactions, category_names=None):
        """Write transactions to the chosen sink and return the file path."""
        pass

    @staticmethod
    def rows(transactions, category_names=None):
        """Flatten transactions into sortable export rows, oldest first."""
        names = category_names or {}
        rows = [
            {
                'date': tx.date.date().isoformat(),
                'type': tx.type.value,
                'category': names.get(tx.category_id, UNCATEGORIZED),
                'description': tx.description.strip(),
                'amount': round(float(tx.amount), 2),
            }
            for tx in transactions
        ]
        rows.sort(key=lambda r: r['date'])
        return rows

# budget_tracker/outputs/csv_output.py

import os
import csv
import logging
from budget_tracker.outputs.base import BaseOutput

logger = logging.getLogger(__name__)

HEADERS = ['date', 'type', 'category', 'description', 'amount']


class CSVOutput(BaseOutput):
    """
    Writes transactions to a single CSV file named Transactions<Year>.csv,
    sorted by date (oldest to latest). The year is taken from the oldest row.
    """
    def __init__(self, config):
        self.config     = config
        self.output_dir = config.get('output_dir', 'data')
        os.makedirs(self.output_dir, exist_ok=True)

    def append(self, transactions, category_names=None):
        rows = self.rows(transactions, category_names)
        if not rows:
            logger.info("No transactions to write.")
            return None

        year = rows[0]['date'][:4]
        out_path = os.path.join(self.output_dir, f"Transactions{year}.csv")

        with open(out_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(HEADERS)
            for row in rows:
                writer.writerow([
                    row['date'],
                    row['type'],
                    row['category'],
                    row['description'],
                    f"{row['amount']:.2f}",
                ])

        logger.info("Written %d transactions to %s", len(rows), out_path)
        return out_path

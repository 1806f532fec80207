# budget_tracker/outputs/excel_output.py

"""Excel output module backed by XlsxWriter.

The workbook has three sheets: ``AllData`` with every transaction, a
``Summary`` sheet with income, expense and balance per month, and a
``Charts`` sheet whose tables feed a monthly income/expense column chart and
an expense-by-category pie chart.
"""

from __future__ import annotations

from datetime import datetime
import logging
import os
import xlsxwriter

from budget_tracker.outputs.base import BaseOutput

logger = logging.getLogger(__name__)


class ExcelOutput(BaseOutput):
    """Generate a local Excel workbook of transactions with summaries."""

    MONTH_FMT = "%B %Y"
    ALL_DATA = "AllData"
    SUMMARY = "Summary"
    CHARTS = "Charts"
    HEADERS = ["date", "type", "category", "description", "amount"]

    def __init__(self, config: dict):
        self.config = config
        self.output_dir = config.get("output_dir", "data")
        os.makedirs(self.output_dir, exist_ok=True)

    def append(self, transactions, category_names=None):
        rows = self.rows(transactions, category_names)
        if not rows:
            logger.info("No transactions to write.")
            return None

        year = rows[0]["date"][:4]
        out_path = os.path.join(self.output_dir, f"Transactions{year}.xlsx")

        workbook = xlsxwriter.Workbook(out_path)
        amount_fmt = workbook.add_format({"num_format": "#,##0.00 \"₸\""})

        all_ws = workbook.add_worksheet(self.ALL_DATA)
        all_ws.freeze_panes(1, 0)
        all_ws.write_row(0, 0, self.HEADERS)
        for idx, row in enumerate(rows, start=1):
            all_ws.write_row(idx, 0, [row[h] for h in self.HEADERS[:4]])
            all_ws.write_number(idx, 4, row["amount"], amount_fmt)
        all_ws.set_column(4, 4, None, amount_fmt)
        all_ws.add_table(0, 0, len(rows), 4, {
            "columns": [{"header": h} for h in self.HEADERS]
        })

        tables = self._build_summary_tables(rows)

        summary_ws = workbook.add_worksheet(self.SUMMARY)
        summary_ws.freeze_panes(1, 0)
        summary_ws.set_column(1, 3, None, amount_fmt)
        for offset, row in enumerate(tables["monthly"]):
            summary_ws.write_row(offset, 0, row)

        charts_ws = workbook.add_worksheet(self.CHARTS)
        charts_ws.set_column(1, 2, None, amount_fmt)
        layout = {}
        start_row = 0
        for key in ("monthly", "expense_categories"):
            table = tables[key]
            layout[key] = (start_row, len(table))
            for offset, row in enumerate(table):
                charts_ws.write_row(start_row + offset, 0, row)
            start_row += len(table) + 2

        self._insert_charts(workbook, charts_ws, layout)

        workbook.close()
        logger.info("Written Excel workbook %s", out_path)
        return out_path

    def _build_summary_tables(self, rows):
        months = {}
        month_sort = {}
        expense_categories = {}

        for row in rows:
            try:
                dt = datetime.strptime(row["date"][:7], "%Y-%m")
            except (KeyError, ValueError):
                continue
            month = dt.strftime(self.MONTH_FMT)
            month_sort.setdefault(month, dt)
            totals = months.setdefault(month, {"income": 0.0, "expense": 0.0})
            totals[row["type"]] = totals.get(row["type"], 0.0) + row["amount"]
            if row["type"] == "expense":
                cat = row["category"]
                expense_categories[cat] = expense_categories.get(cat, 0.0) + row["amount"]

        monthly_rows = [
            [
                month,
                months[month]["income"],
                months[month]["expense"],
                months[month]["income"] - months[month]["expense"],
            ]
            for month in sorted(months, key=month_sort.get)
        ]
        category_rows = [
            [category, total]
            for category, total in sorted(
                expense_categories.items(), key=lambda item: item[1], reverse=True
            )
        ]
        return {
            "monthly": [["Month", "Income", "Expense", "Balance"]] + monthly_rows,
            "expense_categories": [["Category", "Total"]] + category_rows,
        }

    def _insert_charts(self, workbook, charts_ws, layout):
        start, count = layout["monthly"]
        if count > 1:
            chart = workbook.add_chart({"type": "column"})
            for col, title in ((1, "Income"), (2, "Expense")):
                chart.add_series({
                    "categories": [charts_ws.name, start + 1, 0, start + count - 1, 0],
                    "values": [charts_ws.name, start + 1, col, start + count - 1, col],
                    "name": title,
                })
            chart.set_title({"name": "Income and expenses by month"})
            chart.set_legend({"position": "bottom"})
            charts_ws.insert_chart(0, 6, chart)

        start, count = layout["expense_categories"]
        if count > 1:
            chart = workbook.add_chart({"type": "pie"})
            chart.add_series({
                "categories": [charts_ws.name, start + 1, 0, start + count - 1, 0],
                "values": [charts_ws.name, start + 1, 1, start + count - 1, 1],
                "name": "Expenses by category",
            })
            chart.set_title({"name": "Expenses by category"})
            chart.set_legend({"position": "right"})
            chart.set_size({"width": 480, "height": 300})
            charts_ws.insert_chart(18, 6, chart)

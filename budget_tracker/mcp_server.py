from __future__ import annotations

import anyio
from mcp.server.fastmcp import FastMCP

from datetime import date, datetime, time

from pathlib import Path

from budget_tracker.core.models import FilterPeriod
from budget_tracker.ledger import Ledger
from budget_tracker.storage.sqlite_store import SQLiteStore

server = FastMCP(name="Tenge Budget", instructions="Expose the budget ledger as MCP tools")


def _parse_day(value: str | None, name: str) -> date | None:
    try:
        return date.fromisoformat(value) if value else None
    except ValueError as exc:
        raise ValueError(f"Invalid {name}: {value}") from exc


def _open_store(db_path: str) -> SQLiteStore:
    if not Path(db_path).exists():
        raise FileNotFoundError(f"Database not found: {db_path}")
    return SQLiteStore({"db_path": db_path})


def _tx_to_dict(tx, names) -> dict:
    return {
        "id": tx.id,
        "date": tx.date.isoformat(),
        "type": tx.type.value,
        "amount": tx.amount,
        "category": names.get(tx.category_id),
        "description": tx.description,
    }


@server.tool(
    name="get_transactions", description="Fetch transactions from the budget database"
)
async def get_transactions(
    db_path: str,
    start_date: str | None = None,
    end_date: str | None = None,
) -> list[dict]:
    """Return transactions from ``db_path``, newest first.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file.
    start_date, end_date:
        Optional ISO formatted dates bounding the query (both inclusive).
    """

    start = _parse_day(start_date, "start_date")
    end = _parse_day(end_date, "end_date")
    if start and end and start > end:
        raise ValueError("start_date must be on or before end_date")

    def _run() -> list[dict]:
        store = _open_store(db_path)
        names = {c.id: c.name for c in store.get_categories()}
        if start or end:
            txs = store.get_transactions_by_period(
                datetime.combine(start or date.min, time.min),
                datetime.combine(end or date.max, time.max),
            )
        else:
            txs = store.get_transactions()
        return [_tx_to_dict(t, names) for t in txs]

    return await anyio.to_thread.run_sync(_run)


@server.tool(
    name="get_statistics", description="Income, expense and category totals for a period"
)
async def get_statistics(db_path: str, period: str = "month") -> dict:
    try:
        selected = FilterPeriod(period)
    except ValueError as exc:
        raise ValueError(f"Invalid period: {period}") from exc

    def _run() -> dict:
        return Ledger(_open_store(db_path)).statistics(selected).to_dict()

    return await anyio.to_thread.run_sync(_run)


def main() -> None:
    server.run()


if __name__ == "__main__":
    main()

import logging
import sqlite3
from pathlib import Path
from typing import Dict, List

from budget_tracker.core.constants import DB_VERSION
from budget_tracker.core.exceptions import StoreError
from budget_tracker.core.models import (
    Category,
    Transaction,
    TransactionType,
    UserProfile,
    default_categories,
)
from budget_tracker.storage.base import BaseStore

logger = logging.getLogger(__name__)

_SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS categories (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        name_kz TEXT NOT NULL,
        icon TEXT NOT NULL,
        color_hex TEXT NOT NULL,
        type TEXT NOT NULL CHECK(type IN ('income', 'expense')),
        is_default INTEGER DEFAULT 1,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS transactions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        amount REAL NOT NULL CHECK(amount > 0),
        description TEXT DEFAULT '',
        date TEXT NOT NULL,
        category_id INTEGER NOT NULL,
        type TEXT NOT NULL CHECK(type IN ('income', 'expense')),
        created_at TEXT NOT NULL,
        updated_at TEXT,
        FOREIGN KEY (category_id) REFERENCES categories (id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS user_profile (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        email TEXT NOT NULL,
        currency TEXT DEFAULT 'KZT',
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_transactions_date ON transactions(date)",
    "CREATE INDEX IF NOT EXISTS idx_transactions_type ON transactions(type)",
    "CREATE INDEX IF NOT EXISTS idx_transactions_category ON transactions(category_id)",
]

_CATEGORY_COLUMNS = "name, name_kz, icon, color_hex, type, is_default, created_at"
_TRANSACTION_COLUMNS = "amount, description, date, category_id, type, created_at, updated_at"


def _init_db(conn: sqlite3.Connection) -> None:
    version = conn.execute("PRAGMA user_version").fetchone()[0]
    if version >= DB_VERSION:
        return
    for statement in _SCHEMA:
        conn.execute(statement)
    if version == 0:
        rows = [c.to_row() for c in default_categories()]
        conn.executemany(
            f"""
            INSERT INTO categories ({_CATEGORY_COLUMNS})
            VALUES (:name, :name_kz, :icon, :color_hex, :type, :is_default, :created_at)
            """,
            rows,
        )
        logger.info("Created database schema with %d default categories", len(rows))
    conn.execute(f"PRAGMA user_version = {DB_VERSION}")
    conn.commit()


class SQLiteStore(BaseStore):
    """Store backed by a single SQLite file.

    Every operation opens its own connection and closes it when done, so the
    store object itself holds no open handles between calls.
    """

    def __init__(self, config):
        self.db_path = Path(config.get('db_path', 'budget_app.db'))
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._connect()
        try:
            _init_db(conn)
        finally:
            conn.close()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _query(self, sql, params=()) -> List[sqlite3.Row]:
        conn = self._connect()
        try:
            return conn.execute(sql, params).fetchall()
        finally:
            conn.close()

    def _execute(self, sql, params=()) -> sqlite3.Cursor:
        conn = self._connect()
        try:
            cur = conn.execute(sql, params)
            conn.commit()
            return cur
        except sqlite3.IntegrityError as exc:
            raise StoreError(str(exc)) from exc
        finally:
            conn.close()

    # ===== Categories =====

    def get_categories(self) -> List[Category]:
        rows = self._query("SELECT * FROM categories ORDER BY name, id")
        return [Category.from_row(r) for r in rows]

    def get_categories_by_type(self, tx_type) -> List[Category]:
        rows = self._query(
            "SELECT * FROM categories WHERE type = ? ORDER BY name, id",
            (TransactionType.from_value(tx_type).value,),
        )
        return [Category.from_row(r) for r in rows]

    def get_category(self, category_id):
        rows = self._query("SELECT * FROM categories WHERE id = ? LIMIT 1", (category_id,))
        return Category.from_row(rows[0]) if rows else None

    def add_category(self, category) -> int:
        row = category.replace(is_default=False).to_row()
        cur = self._execute(
            f"""
            INSERT INTO categories ({_CATEGORY_COLUMNS})
            VALUES (:name, :name_kz, :icon, :color_hex, :type, :is_default, :created_at)
            """,
            row,
        )
        return cur.lastrowid

    def delete_category(self, category_id) -> int:
        category = self.get_category(category_id)
        if category is None:
            return 0
        if category.is_default:
            raise StoreError(f"Category '{category.name}' is a system category")
        in_use = self._query(
            "SELECT COUNT(*) FROM transactions WHERE category_id = ?", (category_id,)
        )[0][0]
        if in_use:
            raise StoreError(
                f"Category '{category.name}' is used by {in_use} transaction(s)"
            )
        return self._execute("DELETE FROM categories WHERE id = ?", (category_id,)).rowcount

    # ===== Transactions =====

    def insert_transaction(self, transaction) -> int:
        cur = self._execute(
            f"""
            INSERT INTO transactions ({_TRANSACTION_COLUMNS})
            VALUES (:amount, :description, :date, :category_id, :type, :created_at, :updated_at)
            """,
            transaction.to_row(),
        )
        logger.debug("Inserted transaction %s", cur.lastrowid)
        return cur.lastrowid

    def get_transactions(self, limit=None) -> List[Transaction]:
        sql = "SELECT * FROM transactions ORDER BY date DESC, id DESC"
        params: list = []
        if limit is not None and limit > 0:
            sql += " LIMIT ?"
            params.append(limit)
        return [Transaction.from_row(r) for r in self._query(sql, params)]

    def get_transactions_by_type(self, tx_type) -> List[Transaction]:
        rows = self._query(
            "SELECT * FROM transactions WHERE type = ? ORDER BY date DESC, id DESC",
            (TransactionType.from_value(tx_type).value,),
        )
        return [Transaction.from_row(r) for r in rows]

    def get_transactions_by_period(self, start, end) -> List[Transaction]:
        rows = self._query(
            """
            SELECT * FROM transactions
            WHERE date BETWEEN ? AND ?
            ORDER BY date DESC, id DESC
            """,
            (start.isoformat(), end.isoformat()),
        )
        return [Transaction.from_row(r) for r in rows]

    def update_transaction(self, transaction) -> int:
        if transaction.id is None:
            return 0
        return self._execute(
            """
            UPDATE transactions
            SET amount = :amount, description = :description, date = :date,
                category_id = :category_id, type = :type,
                created_at = :created_at, updated_at = :updated_at
            WHERE id = :id
            """,
            transaction.to_row(),
        ).rowcount

    def delete_transaction(self, transaction_id) -> int:
        return self._execute(
            "DELETE FROM transactions WHERE id = ?", (transaction_id,)
        ).rowcount

    # ===== Statistics =====

    def get_total_balance(self) -> float:
        totals = self._totals_by_type("", [])
        return totals["income"] - totals["expense"]

    def get_income_expense_by_period(self, start, end) -> Dict[str, float]:
        totals = self._totals_by_type(
            "WHERE date BETWEEN ? AND ?", [start.isoformat(), end.isoformat()]
        )
        totals["balance"] = totals["income"] - totals["expense"]
        return totals

    def _totals_by_type(self, where, params) -> Dict[str, float]:
        rows = self._query(
            f"""
            SELECT type, COALESCE(SUM(amount), 0.0) AS total
            FROM transactions
            {where}
            GROUP BY type
            """,
            params,
        )
        totals = {"income": 0.0, "expense": 0.0}
        for row in rows:
            if row["type"] in totals:
                totals[row["type"]] = float(row["total"] or 0.0)
        return totals

    # ===== User profile =====

    def get_user_profile(self):
        rows = self._query("SELECT * FROM user_profile ORDER BY id LIMIT 1")
        return UserProfile.from_row(rows[0]) if rows else None

    def save_user_profile(self, profile) -> int:
        existing = self.get_user_profile()
        if existing is not None:
            row = profile.replace(id=existing.id).to_row()
            self._execute(
                """
                UPDATE user_profile
                SET name = :name, email = :email, currency = :currency,
                    created_at = :created_at, updated_at = :updated_at
                WHERE id = :id
                """,
                row,
            )
            return existing.id
        cur = self._execute(
            """
            INSERT INTO user_profile (name, email, currency, created_at, updated_at)
            VALUES (:name, :email, :currency, :created_at, :updated_at)
            """,
            profile.to_row(),
        )
        return cur.lastrowid

    def delete_user_profile(self) -> int:
        return self._execute("DELETE FROM user_profile").rowcount

    # ===== Reset =====

    def reset_all_data(self) -> None:
        conn = self._connect()
        try:
            conn.execute("DELETE FROM transactions")
            conn.execute("DELETE FROM user_profile")
            conn.execute("DELETE FROM categories WHERE is_default = 0")
            conn.commit()
        finally:
            conn.close()
        logger.info("Reset all data in %s", self.db_path)

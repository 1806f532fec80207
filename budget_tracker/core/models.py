# budget_tracker/core/models.py
from __future__ import annotations

import dataclasses
import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List

from budget_tracker.core import constants
from budget_tracker.core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class TransactionType(Enum):
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def display_name(self) -> str:
        return "Доход" if self is TransactionType.INCOME else "Расход"

    @classmethod
    def from_value(cls, value) -> "TransactionType":
        """Return the member for ``value``; unknown values map to EXPENSE."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value == value:
                return member
        return cls.EXPENSE


class FilterPeriod(Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"

    @property
    def display_name(self) -> str:
        return {
            "week": "Неделя",
            "month": "Месяц",
            "year": "Год",
            "all": "Все время",
        }[self.value]


def _parse_dt(value):
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def format_amount(amount: float) -> str:
    """Format whole tenge with spaces between thousands, e.g. ``1 234 ₸``."""
    return f"{round(amount):,.0f}".replace(",", " ") + f" {constants.CURRENCY_SYMBOL}"


@dataclass
class Category:
    name: str
    name_kz: str
    icon: str
    color_hex: str
    type: TransactionType
    is_default: bool = True
    created_at: datetime = field(default_factory=datetime.now)
    id: int | None = None

    @classmethod
    def from_row(cls, row) -> "Category":
        return cls(
            id=row["id"],
            name=row["name"],
            name_kz=row["name_kz"],
            icon=row["icon"],
            color_hex=row["color_hex"],
            type=TransactionType.from_value(row["type"]),
            is_default=bool(row["is_default"]),
            created_at=_parse_dt(row["created_at"]),
        )

    def to_row(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "name_kz": self.name_kz,
            "icon": self.icon,
            "color_hex": self.color_hex,
            "type": self.type.value,
            "is_default": 1 if self.is_default else 0,
            "created_at": self.created_at.isoformat(),
        }

    def replace(self, **changes) -> "Category":
        return dataclasses.replace(self, **changes)


@dataclass(eq=False)
class Transaction:
    amount: float
    date: datetime
    category_id: int
    type: TransactionType
    description: str = ""
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime | None = None
    id: int | None = None

    @classmethod
    def from_row(cls, row) -> "Transaction":
        return cls(
            id=row["id"],
            amount=float(row["amount"]),
            description=row["description"] or "",
            date=_parse_dt(row["date"]),
            category_id=int(row["category_id"]),
            type=TransactionType.from_value(row["type"]),
            created_at=_parse_dt(row["created_at"]),
            updated_at=_parse_dt(row["updated_at"]),
        )

    def to_row(self) -> dict:
        return {
            "id": self.id,
            "amount": float(self.amount),
            "description": self.description,
            "date": self.date.isoformat(),
            "category_id": self.category_id,
            "type": self.type.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def replace(self, **changes) -> "Transaction":
        return dataclasses.replace(self, **changes)

    def is_valid(self, now: datetime | None = None) -> bool:
        try:
            validate_transaction(self, now)
        except ValidationError:
            return False
        return True

    @property
    def formatted_amount(self) -> str:
        return format_amount(self.amount)

    @property
    def formatted_amount_with_sign(self) -> str:
        sign = "+" if self.type is TransactionType.INCOME else "-"
        return f"{sign}{self.formatted_amount}"

    def __eq__(self, other):
        if not isinstance(other, Transaction):
            return NotImplemented
        return (self.id, self.amount, self.type, self.date) == (
            other.id, other.amount, other.type, other.date
        )

    def __hash__(self):
        return hash((self.id, self.amount, self.type, self.date))


@dataclass(eq=False)
class UserProfile:
    name: str
    email: str
    currency: str = constants.CURRENCY_CODE
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime | None = None
    id: int | None = None

    @classmethod
    def from_row(cls, row) -> "UserProfile":
        return cls(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            currency=row["currency"] or constants.CURRENCY_CODE,
            created_at=_parse_dt(row["created_at"]),
            updated_at=_parse_dt(row["updated_at"]),
        )

    def to_row(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "currency": self.currency,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def replace(self, **changes) -> "UserProfile":
        return dataclasses.replace(self, **changes)

    def __eq__(self, other):
        if not isinstance(other, UserProfile):
            return NotImplemented
        return (self.id, self.name, self.email) == (other.id, other.name, other.email)

    def __hash__(self):
        return hash((self.id, self.name, self.email))


@dataclass
class CurrencyRate:
    """Exchange rate expressed as tenge per one unit of ``code``."""

    code: str
    rate: float
    flag: str
    name: str
    updated_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_api_response(cls, code: str, payload: dict) -> "CurrencyRate":
        """Build a rate from an exchangerate-api ``latest/<code>`` payload.

        The payload is based on ``code`` itself, but USD is read directly while
        every other currency goes through the cross rate ``KZT / code`` so that
        USD-based payloads give the same answer.
        """
        rates = payload["rates"]
        kzt = float(rates["KZT"])
        if code == "USD":
            rate = kzt
        else:
            rate = kzt / float(rates[code])
        return cls(
            code=code,
            rate=rate,
            flag=constants.CURRENCY_FLAGS.get(code, constants.DEFAULT_FLAG),
            name=constants.CURRENCY_NAMES.get(code, code),
        )

    @classmethod
    def from_dict(cls, data: dict) -> "CurrencyRate":
        return cls(
            code=data["code"],
            rate=float(data["rate"]),
            flag=data["flag"],
            name=data["name"],
            updated_at=_parse_dt(data["updatedAt"]),
        )

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "rate": self.rate,
            "flag": self.flag,
            "name": self.name,
            "updatedAt": self.updated_at.isoformat(),
        }

    @property
    def formatted_rate(self) -> str:
        return f"{self.rate:.2f}"

    def __str__(self) -> str:
        return f"{self.flag} {self.code}: {self.formatted_rate} {constants.CURRENCY_SYMBOL}"


def default_categories(created_at: datetime | None = None) -> List[Category]:
    """System categories seeded into every new store, expenses first."""
    created_at = created_at or datetime.now()
    specs = [(TransactionType.EXPENSE, s) for s in constants.EXPENSE_CATEGORIES]
    specs += [(TransactionType.INCOME, s) for s in constants.INCOME_CATEGORIES]
    return [
        Category(
            name=name,
            name_kz=name_kz,
            icon=icon,
            color_hex=color,
            type=tx_type,
            is_default=True,
            created_at=created_at,
        )
        for tx_type, (name, name_kz, icon, color) in specs
    ]


def validate_transaction(tx: Transaction, now: datetime | None = None) -> None:
    if not math.isfinite(tx.amount):
        raise ValidationError(f"Amount must be a finite number, got {tx.amount}")
    if tx.amount < constants.MIN_AMOUNT:
        raise ValidationError(
            f"Amount must be at least {constants.MIN_AMOUNT:.0f} {constants.CURRENCY_SYMBOL}"
        )
    if tx.amount > constants.MAX_AMOUNT:
        raise ValidationError(
            f"Amount must not exceed {constants.MAX_AMOUNT:.0f} {constants.CURRENCY_SYMBOL}"
        )
    if len(tx.description) > constants.MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"Description is limited to {constants.MAX_DESCRIPTION_LENGTH} characters"
        )
    if tx.date < constants.MIN_DATE:
        raise ValidationError(
            f"Date must be on or after {constants.MIN_DATE.date().isoformat()}"
        )
    if tx.date > constants.max_date(now):
        raise ValidationError("Date cannot be more than one day in the future")


def validate_profile(name: str, email: str) -> None:
    name = (name or "").strip()
    email = (email or "").strip()
    if not name and not email:
        raise ValidationError("Fill in at least one of name or email")
    if email and not _EMAIL_RE.match(email):
        raise ValidationError(f"Invalid email address: {email}")

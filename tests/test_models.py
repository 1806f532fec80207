from datetime import datetime

import pytest

from budget_tracker.core.exceptions import ValidationError
from budget_tracker.core.models import (
    CurrencyRate,
    Transaction,
    TransactionType,
    UserProfile,
    default_categories,
    format_amount,
    validate_profile,
    validate_transaction,
)

NOW = datetime(2025, 3, 15, 12, 0)


def _tx(**kwargs):
    data = dict(
        amount=1500.0,
        date=datetime(2025, 3, 10),
        category_id=1,
        type=TransactionType.EXPENSE,
        description="Groceries",
        created_at=NOW,
    )
    data.update(kwargs)
    return Transaction(**data)


def test_transaction_type_from_value_defaults_to_expense():
    assert TransactionType.from_value("income") is TransactionType.INCOME
    assert TransactionType.from_value("expense") is TransactionType.EXPENSE
    assert TransactionType.from_value("bogus") is TransactionType.EXPENSE
    assert TransactionType.INCOME.display_name == "Доход"


def test_formatted_amounts():
    assert format_amount(1234567) == "1 234 567 ₸"
    assert format_amount(999) == "999 ₸"
    assert _tx(amount=25000).formatted_amount_with_sign == "-25 000 ₸"
    assert _tx(amount=5000, type=TransactionType.INCOME).formatted_amount_with_sign == "+5 000 ₸"


def test_transaction_row_round_trip_keeps_optional_updated_at():
    tx = _tx(id=7, updated_at=datetime(2025, 3, 11, 9, 30))
    restored = Transaction.from_row(tx.to_row())
    assert restored == tx
    assert restored.updated_at == datetime(2025, 3, 11, 9, 30)
    assert Transaction.from_row(_tx(id=8).to_row()).updated_at is None


def test_transaction_equality_ignores_description():
    assert _tx(id=1, description="a") == _tx(id=1, description="b")
    assert _tx(id=1) != _tx(id=2)


@pytest.mark.parametrize(
    "changes, message",
    [
        ({"amount": 0.5}, "at least"),
        ({"amount": float("nan")}, "finite number"),
        ({"amount": float("inf")}, "finite number"),
        ({"amount": 100_000_000}, "exceed"),
        ({"description": "x" * 101}, "100 characters"),
        ({"date": datetime(2019, 12, 31)}, "2020-01-01"),
        ({"date": datetime(2025, 3, 17)}, "future"),
    ],
)
def test_validate_transaction_rejects(changes, message):
    with pytest.raises(ValidationError, match=message):
        validate_transaction(_tx(**changes), NOW)
    assert not _tx(**changes).is_valid(NOW)


def test_validate_transaction_accepts_boundaries():
    validate_transaction(_tx(amount=1.0, date=datetime(2020, 1, 1)), NOW)
    validate_transaction(_tx(amount=99_999_999, date=datetime(2025, 3, 16, 12, 0)), NOW)
    assert _tx(description="x" * 100).is_valid(NOW)


def test_validate_profile():
    validate_profile("Aigerim", "")
    validate_profile("", "user@example.kz")
    with pytest.raises(ValidationError):
        validate_profile("  ", "")
    with pytest.raises(ValidationError, match="email"):
        validate_profile("Aigerim", "not-an-email")


def test_profile_equality_and_default_currency():
    a = UserProfile(name="A", email="a@b.kz", id=1)
    b = UserProfile(name="A", email="a@b.kz", id=1, currency="USD")
    assert a == b
    assert a.currency == "KZT"


def test_currency_rate_from_api_response():
    usd = CurrencyRate.from_api_response("USD", {"rates": {"USD": 1, "KZT": 509.67}})
    assert usd.rate == pytest.approx(509.67)
    assert usd.flag == "🇺🇸"
    assert str(usd) == "🇺🇸 USD: 509.67 ₸"

    rub = CurrencyRate.from_api_response("RUB", {"rates": {"RUB": 1.0, "KZT": 6.2}})
    assert rub.rate == pytest.approx(6.2)
    assert rub.name == "Российский рубль"

    cross = CurrencyRate.from_api_response("EUR", {"rates": {"EUR": 0.5, "KZT": 250.0}})
    assert cross.rate == pytest.approx(500.0)

    odd = CurrencyRate.from_api_response("GBP", {"rates": {"GBP": 1, "KZT": 640}})
    assert odd.flag == "🏳️"
    assert odd.name == "GBP"


def test_default_categories():
    cats = default_categories(NOW)
    assert len(cats) == 13
    assert sum(1 for c in cats if c.type is TransactionType.EXPENSE) == 8
    assert all(c.is_default for c in cats)
    assert cats[0].name == "Еда и продукты"
    assert cats[0].to_row()["is_default"] == 1

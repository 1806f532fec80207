# budget_tracker/core/constants.py
from datetime import datetime, timedelta

# Validation
MIN_AMOUNT = 1.0
MAX_AMOUNT = 99_999_999.0
MAX_DESCRIPTION_LENGTH = 100
MIN_DATE = datetime(2020, 1, 1)

# Currency
CURRENCY_CODE = "KZT"
CURRENCY_SYMBOL = "₸"
CURRENCY_NAME = "Казахстанский тенге"

UNCATEGORIZED = "Без категории"

DB_VERSION = 1


def max_date(now=None):
    """Latest date a transaction may carry."""
    return (now or datetime.now()) + timedelta(days=1)


# Category colours
COLOR_EXPENSE_FOOD = "#FF6B6B"
COLOR_EXPENSE_TRANSPORT = "#4ECDC4"
COLOR_EXPENSE_HOUSING = "#45B7D1"
COLOR_EXPENSE_CLOTHING = "#96CEB4"
COLOR_EXPENSE_HEALTH = "#FFEAA7"
COLOR_EXPENSE_ENTERTAINMENT = "#DDA0DD"
COLOR_EXPENSE_EDUCATION = "#FD79A8"
COLOR_EXPENSE_OTHER = "#A8A8A8"
COLOR_INCOME_SALARY = "#00B894"
COLOR_INCOME_SIDE_JOB = "#00CEC9"
COLOR_INCOME_GIFTS = "#E17055"
COLOR_INCOME_SOCIAL = "#74B9FF"
COLOR_INCOME_OTHER = "#81ECEC"

# (name, name_kz, icon, color_hex)
EXPENSE_CATEGORIES = [
    ("Еда и продукты", "Тамақ", "restaurant", COLOR_EXPENSE_FOOD),
    ("Транспорт", "Көлік", "directions_bus", COLOR_EXPENSE_TRANSPORT),
    ("ЖКХ и аренда", "Тұрғын үй", "home", COLOR_EXPENSE_HOUSING),
    ("Одежда", "Киім", "checkroom", COLOR_EXPENSE_CLOTHING),
    ("Здоровье", "Денсаулық", "local_hospital", COLOR_EXPENSE_HEALTH),
    ("Развлечения", "Ойын-сауық", "sports_esports", COLOR_EXPENSE_ENTERTAINMENT),
    ("Образование", "Білім", "school", COLOR_EXPENSE_EDUCATION),
    ("Прочее", "Басқа", "more_horiz", COLOR_EXPENSE_OTHER),
]

INCOME_CATEGORIES = [
    ("Зарплата", "Жалақы", "payments", COLOR_INCOME_SALARY),
    ("Подработка", "Қосымша жұмыс", "work", COLOR_INCOME_SIDE_JOB),
    ("Подарки", "Сыйлықтар", "card_giftcard", COLOR_INCOME_GIFTS),
    ("Социальные выплаты", "Әлеуметтік төлемдер", "account_balance", COLOR_INCOME_SOCIAL),
    ("Прочее", "Басқа", "more_horiz", COLOR_INCOME_OTHER),
]

CURRENCY_FLAGS = {
    "USD": "🇺🇸",
    "RUB": "🇷🇺",
    "EUR": "🇪🇺",
    "CNY": "🇨🇳",
    "TRY": "🇹🇷",
}

CURRENCY_NAMES = {
    "USD": "Доллар США",
    "RUB": "Российский рубль",
    "EUR": "Евро",
    "CNY": "Китайский юань",
    "TRY": "Турецкая лира",
}

DEFAULT_FLAG = "🏳️"

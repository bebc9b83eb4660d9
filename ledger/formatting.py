import datetime as dt
from decimal import Decimal
from typing import Any

from ledger.dates import parse_date
from ledger.domain import INCOME


def format_currency(number: Any) -> str:
    """1234.5 -> '1,234.50'; anything that is not a number renders as 0."""
    if isinstance(number, bool) or not isinstance(number, (int, float, Decimal)):
        number = 0
    return f"{Decimal(str(number)):,.2f}"


def format_money(number: Any) -> str:
    text = format_currency(number)
    if text.startswith("-"):
        return f"-${text[1:]}"
    return f"${text}"


def format_signed_amount(tx_type: str, amount: Any) -> str:
    sign = "+" if tx_type == INCOME else "-"
    return f"{sign}${format_currency(amount)}"


def format_display_date(value: dt.date) -> str:
    d = parse_date(value)
    return f"{d:%b} {d.day}, {d.year}"


def format_category(category: str | None) -> str:
    if not category:
        return ""
    return category[:1].upper() + category[1:]

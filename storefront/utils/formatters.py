from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from storefront.config import settings

CURRENCY_SYMBOLS = {
    "USD": "$",
    "INR": "₹",
    "EUR": "€",
    "GBP": "£",
}

Number = Union[int, float, Decimal]


def format_currency(amount: Number, currency: Optional[str] = None) -> str:
    """Major currency units, grouped, with no forced decimals ("$5", "$1,234.5")."""
    currency = currency or settings.currency
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")

    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    text = f"{abs(value):,.2f}".rstrip("0").rstrip(".")
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{text}"


def format_cents(price_in_cents: int, currency: Optional[str] = None) -> str:
    return format_currency(Decimal(price_in_cents) / 100, currency)


def format_number(number: Number) -> str:
    return f"{number:,}"


def format_percent(fraction: Number) -> str:
    # 0.2 -> "20%"
    value = (Decimal(str(fraction)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"{value:,}%"


def format_date_time(value: datetime) -> str:
    """Medium date, short time: "Oct 19, 2026, 2:45 PM"."""
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{value:%b} {value.day}, {value.year}, {hour}:{value.minute:02d} {meridiem}"

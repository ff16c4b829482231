"""
Platform fee arithmetic and price display.

The platform adds its fee on top of the owner's listed price: an owner
listing 40 per hour receives 40 while the customer pays 42.
"""

import math
from decimal import Decimal
from typing import Dict, NamedTuple, Optional, Union

from sportsbnb.config import settings

Number = Union[int, float, Decimal]


class Currency(NamedTuple):
    symbol: str
    name: str


CURRENCIES: Dict[str, Currency] = {
    "USD": Currency("$", "US Dollar"),
    "EUR": Currency("€", "Euro"),
    "GBP": Currency("£", "British Pound"),
    "AMD": Currency("֏", "Armenian Dram"),
    "RUB": Currency("₽", "Russian Ruble"),
    "GEL": Currency("₾", "Georgian Lari"),
    "TRY": Currency("₺", "Turkish Lira"),
    "AED": Currency("د.إ", "UAE Dirham"),
    "INR": Currency("₹", "Indian Rupee"),
    "JPY": Currency("¥", "Japanese Yen"),
    "CNY": Currency("¥", "Chinese Yuan"),
    "KRW": Currency("₩", "South Korean Won"),
    "BRL": Currency("R$", "Brazilian Real"),
    "CAD": Currency("CA$", "Canadian Dollar"),
    "AUD": Currency("A$", "Australian Dollar"),
}


def _fee_multiplier() -> Decimal:
    return Decimal(1) + Decimal(str(settings.PLATFORM_FEE_PERCENTAGE))


def _to_decimal(value: Number) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def customer_price(owner_price: Number) -> int:
    """Price the customer pays: owner price plus fee, rounded up"""
    return math.ceil(_to_decimal(owner_price) * _fee_multiplier())


def platform_fee(owner_price: Number) -> Decimal:
    return customer_price(owner_price) - _to_decimal(owner_price)


def owner_price(customer_price_paid: Number) -> int:
    """Amount the owner receives from a customer-facing price, rounded down"""
    return math.floor(_to_decimal(customer_price_paid) / _fee_multiplier())


def format_price(amount: Number, currency: Optional[str] = None) -> str:
    """
    Render an amount with its currency symbol and thousands separators.

    Whole amounts drop the decimals: ``format_price(12500, "AMD") == "֏12,500"``.
    Unknown currency codes are rendered as a ``CODE `` prefix.
    """
    code = (currency or settings.DEFAULT_CURRENCY).upper()
    entry = CURRENCIES.get(code)
    prefix = entry.symbol if entry else f"{code} "

    value = _to_decimal(amount)
    if value == value.to_integral_value():
        body = f"{int(value):,}"
    else:
        body = f"{value:,.2f}"

    if value < 0:
        return f"-{prefix}{body.lstrip('-')}"
    return f"{prefix}{body}"

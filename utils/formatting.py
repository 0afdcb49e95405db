# utils/formatting.py
from datetime import datetime
from decimal import Decimal
from typing import Union

Number = Union[int, float, Decimal]


def format_price(price: Number) -> str:
    """
    Short price display used on receipts and labels.
    Example: 25000 -> "25k", 26500 -> "26.5k", 950 -> "950"
    """
    price = Decimal(str(price))
    if price >= 1000:
        k_price = price / 1000
        if k_price % 1 == 0:
            return f"{int(k_price)}k"
        return f"{k_price:.1f}k"
    if price % 1 == 0:
        return str(int(price))
    return str(price.normalize())


def format_date_fr(value: datetime, with_time: bool = False) -> str:
    """17/10/2026, or 17/10/2026 14:05 with time."""
    if with_time:
        return value.strftime("%d/%m/%Y %H:%M")
    return value.strftime("%d/%m/%Y")

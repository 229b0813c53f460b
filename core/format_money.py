# PATH: core/format_money.py
"""
Safe money formatting utilities for XLEG.

All money values are str or Decimal. Floats are accepted only as
legacy input and converted through str().
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Union

Numeric = Union[str, Decimal, int, float, None]


def format_money(value: Numeric, decimals: int = 6) -> str:
    """
    Safely format a money value to string with specified decimal places.

    Uses ROUND_HALF_UP (0.005 -> 0.01 with 2 decimals).
    Never raises; unparseable input formats as zero.

    Example:
        >>> format_money("123.45")
        '123.450000'
        >>> format_money(None)
        '0.000000'
    """
    zero = f"0.{'0' * decimals}" if decimals > 0 else "0"
    if value is None:
        return zero

    try:
        if isinstance(value, str):
            if not value.strip():
                return zero
            dec_value = Decimal(value)
        elif isinstance(value, Decimal):
            dec_value = value
        elif isinstance(value, bool):
            # bool is a subclass of int
            dec_value = Decimal(1 if value else 0)
        else:
            dec_value = Decimal(str(value))

        if not dec_value.is_finite():
            return zero

        with localcontext() as ctx:
            ctx.prec = 50
            quantize_str = "0." + "0" * decimals if decimals > 0 else "0"
            rounded = dec_value.quantize(Decimal(quantize_str), rounding=ROUND_HALF_UP)

        return f"{{:.{decimals}f}}".format(rounded)

    except (InvalidOperation, ValueError, TypeError):
        return zero


def format_pct(value: Numeric) -> str:
    """
    Format a percentage value with 4 decimals.

    Example:
        >>> format_pct("-0.5")
        '-0.5000'
    """
    return format_money(value, decimals=4)


def format_amount(amount: Union[str, int, None], decimals: int) -> str:
    """
    Human-readable token amount from base units.

    Example:
        >>> format_amount("100000000000000000", 18)
        '0.1000'
        >>> format_amount("2500000000", 6)
        '2.50K'
    """
    if not amount:
        return "0"
    try:
        num = Decimal(str(amount)) / (Decimal(10) ** decimals)
    except (InvalidOperation, ValueError):
        return "0"

    if num < Decimal("0.001"):
        return "<0.001"
    if num < 1:
        return format_money(num, 4)
    if num < 1000:
        return format_money(num, 3)
    if num < 1_000_000:
        return format_money(num / 1000, 2) + "K"
    return format_money(num / 1_000_000, 2) + "M"


def format_usd(value: Numeric) -> str:
    """
    Dollar display string.

    Example:
        >>> format_usd("12.345")
        '$12.35'
        >>> format_usd("0.004")
        '<$0.01'
    """
    if value is None or value == "":
        return "$0.00"
    try:
        num = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return "$0.00"
    if num == 0:
        return "$0.00"
    if num < Decimal("0.01"):
        return "<$0.01"
    return "$" + format_money(num, 2)

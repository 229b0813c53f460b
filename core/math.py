# PATH: core/math.py
"""
Math utilities for XLEG.

Safe conversions and spread/profit calculations (no float money).
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Union

HUNDRED = Decimal("100")


def safe_decimal(value: Union[str, int, float, Decimal, None], default: Decimal = Decimal("0")) -> Decimal:
    """
    Safely convert value to Decimal.

    Args:
        value: Value to convert
        default: Default if conversion fails

    Returns:
        Decimal value
    """
    if value is None:
        return default

    try:
        if isinstance(value, Decimal):
            result = value
        else:
            result = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return default

    if not result.is_finite():
        return default
    return result


def parse_base_units(amount: Union[str, int]) -> int:
    """
    Parse an integer amount in base units (wei-style).

    Accepts ints, decimal digit strings and 0x-prefixed hex strings.
    Empty / None parse as 0.

    Raises:
        ValueError: If the value is not an integer amount
    """
    if amount is None or amount == "":
        return 0
    if isinstance(amount, bool):
        raise ValueError(f"Invalid base-unit amount: {amount!r}")
    if isinstance(amount, int):
        return amount
    text = str(amount).strip()
    if text.lower().startswith("0x"):
        return int(text, 16)
    if not text.isdigit():
        raise ValueError(f"Invalid base-unit amount: {amount!r}")
    return int(text)


@dataclass(frozen=True)
class SpreadMetrics:
    """Spread and net profit for one priced cross-chain move."""
    spread_percent: Decimal
    net_profit_usd: Decimal
    net_profit_percent: Decimal


def compute_spread_metrics(
    input_usd: Union[str, Decimal],
    output_usd: Union[str, Decimal],
    fee_usd: Union[str, Decimal],
) -> SpreadMetrics:
    """
    Compute spread and net profit from USD valuations.

        spread_percent     = (out - in) / in * 100
        net_profit_usd     = out - in - fee
        net_profit_percent = net_profit_usd / in * 100

    Raises:
        ValueError: If input_usd is not positive
    """
    value_in = safe_decimal(input_usd)
    value_out = safe_decimal(output_usd)
    fee = safe_decimal(fee_usd)

    if value_in <= 0:
        raise ValueError(f"input_usd must be positive, got {value_in}")

    net_profit = value_out - value_in - fee
    return SpreadMetrics(
        spread_percent=(value_out - value_in) / value_in * HUNDRED,
        net_profit_usd=net_profit,
        net_profit_percent=net_profit / value_in * HUNDRED,
    )

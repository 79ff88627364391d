"""Decimal utilities for monetary arithmetic.

All amounts inside the engine are Decimal. Floats are only accepted at the
boundary and are converted through their string form so that 0.1 stays 0.1.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Optional

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Currency symbols to strip
CURRENCY_SYMBOLS = {"$", "€", "£", "¥", "￥", "₹", "₩"}

# Thousands separators: 1,234,567 or 1 234 567
_THOUSANDS_PATTERN = re.compile(r"(?<=\d)[,\s](?=\d{3}(?:\D|$))")


def parse_amount(raw_amount: object) -> Decimal:
    """Parse a stored amount into a Decimal.

    Handles ints, Decimals, floats and strings such as "1200", "¥1,200"
    or "1,234.50".

    Args:
        raw_amount: The stored amount.

    Returns:
        The amount as Decimal (sign preserved).

    Raises:
        ValueError: If the amount is missing or cannot be parsed.
    """
    if raw_amount is None or isinstance(raw_amount, bool):
        raise ValueError(f"Cannot parse amount {raw_amount!r}")

    if isinstance(raw_amount, Decimal):
        amount = raw_amount
    elif isinstance(raw_amount, (int, float)):
        amount = Decimal(str(raw_amount))
    else:
        amount_str = str(raw_amount).strip()
        for symbol in CURRENCY_SYMBOLS:
            amount_str = amount_str.replace(symbol, "")
        amount_str = _THOUSANDS_PATTERN.sub("", amount_str.strip())
        if not amount_str:
            raise ValueError(f"Cannot parse amount {raw_amount!r}")
        try:
            amount = Decimal(amount_str)
        except InvalidOperation as e:
            raise ValueError(f"Cannot parse amount {raw_amount!r}: {e}") from e

    if not amount.is_finite():
        raise ValueError(f"Amount is not finite: {raw_amount!r}")
    return amount


def safe_decimal(value: Optional[object], default: Optional[Decimal] = None) -> Optional[Decimal]:
    """Convert a value to Decimal, returning default when it is not numeric.

    Empty strings and non-numeric values give the default rather than zero.

    Args:
        value: Value to convert (string, int, float, Decimal or None).
        default: Value returned when conversion fails.

    Returns:
        Decimal value or default.
    """
    if value is None or value == "":
        return default
    try:
        return parse_amount(value)
    except ValueError:
        return default


def sum_amounts(amounts: Iterable[Decimal]) -> Decimal:
    """Sum Decimal amounts exactly.

    Args:
        amounts: Decimal amounts.

    Returns:
        Sum as Decimal (Decimal("0") for no amounts).
    """
    total = ZERO
    for amount in amounts:
        total += amount
    return total


def divide(numerator: Decimal, denominator: Decimal | int) -> Decimal:
    """Divide, returning zero when the denominator is zero."""
    if not denominator:
        return ZERO
    return numerator / Decimal(denominator)


def percentage(part: Decimal | int, whole: Decimal | int) -> Decimal:
    """Return part as a percentage of whole (zero when whole is zero)."""
    return divide(Decimal(part) * HUNDRED, Decimal(whole))


def quantize(amount: Decimal, decimal_places: int = 2) -> Decimal:
    """Round half-up to a fixed number of decimal places."""
    return amount.quantize(Decimal(1).scaleb(-decimal_places), rounding=ROUND_HALF_UP)


def format_currency(
    amount: Decimal,
    decimal_places: int = 2,
    include_sign: bool = True,
) -> str:
    """Format a Decimal amount for display.

    Args:
        amount: The amount to format.
        decimal_places: Number of decimal places (default 2).
        include_sign: Whether to include sign for negative amounts.

    Returns:
        Formatted string like "-1234.56" or "1234.56".
    """
    rounded = quantize(amount, decimal_places)
    if include_sign and rounded < 0:
        return str(rounded)
    return str(abs(rounded))

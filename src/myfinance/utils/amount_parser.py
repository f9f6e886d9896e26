"""Amount parsing and minor-unit conversion utilities."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re

CENTS = Decimal(100)


def parse_amount(amount_str: str) -> Decimal:
    """Parse a major-unit amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "R$123.45", "$123.45", "€123.45"
    - "1,234.56"
    - "1.234,56" (comma as decimal separator)
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount in major currency units

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    amount_str = re.sub(r"R\$|[$€£¥]", "", amount_str).strip()

    # A trailing ",dd" means the comma is the decimal separator
    if re.search(r",\d{1,2}$", amount_str):
        amount_str = amount_str.replace(".", "").replace(",", ".")
    else:
        amount_str = amount_str.replace(",", "")

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}") from e
    return -amount if is_negative else amount


def to_minor_units(value: Decimal | float | int | str) -> int:
    """Convert a major-unit value (e.g. reais) to integer minor units (cents).

    Rounds half away from zero, so 0.005 becomes 1 cent.
    """
    try:
        major = Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Could not convert '{value}' to minor units") from e
    return int((major * CENTS).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_major_units(amount: int) -> Decimal:
    """Convert integer minor units back to a Decimal in major units."""
    return Decimal(amount) / CENTS


def format_amount(amount: int, currency: str = "") -> str:
    """Render minor units as a two-decimal string, optionally with currency."""
    text = f"{to_major_units(amount):,.2f}"
    return f"{text} {currency}" if currency else text

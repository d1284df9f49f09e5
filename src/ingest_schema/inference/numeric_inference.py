import re
from decimal import Decimal, InvalidOperation
from typing import Optional, Tuple

INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
DECIMAL_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def parse_integer(value: str) -> Optional[int]:
    """
    Parse a signed base-10 integer literal.
    Underscores, whitespace and other int() leniencies are rejected.
    """
    if not INTEGER_PATTERN.fullmatch(value):
        return None
    return int(value)


def parse_decimal(value: str) -> Optional[Decimal]:
    """
    Parse a finite decimal literal (plain or exponent notation).
    NaN / Infinity are not numbers for our purposes.
    """
    if not DECIMAL_PATTERN.fullmatch(value):
        return None
    try:
        d = Decimal(value)
    except (InvalidOperation, ValueError):
        return None
    return d if d.is_finite() else None


def detect_precision(value: str) -> Tuple[int, int]:
    """
    Infer (integer digits, fractional digits) of a numeric literal.

    Args:
        value (str): raw cell text

    Returns:
        (precision, scale), or (0, 0) when value is not numeric
    """
    d = parse_decimal(value)
    if d is None:
        return 0, 0

    _, digits, exponent = d.as_tuple()

    if exponent >= 0:
        return len(digits) + exponent, 0

    scale = -exponent
    return max(len(digits) - scale, 0), scale

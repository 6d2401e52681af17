"""
Decimal Output Module

Converts canonical decimals into integers, floats and display strings.
Conversions refuse to lose information: when the target type cannot hold
the exact value they return None, like an unparseable source does.

Display patterns follow the DecimalFormat conventions existing callers
rely on: "##,##0" (grouped integer), "##,##0.00" (grouped, two decimals)
and "##,##0.0… %" for percentages.
"""

from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from typing import Optional

from .comparison import ComparisonResult, compare, is_integer, is_long
from .parsing import (
    EXACT_CONTEXT, ZERO, parse_decimal, rescale, strip_trailing_zeros,
    to_plain_string, wrap_zero
)
from .rounding import RoundingMode

FORMAT_COMMA_0 = "##,##0"
FORMAT_COMMA_2 = "##,##0.00"

PERCENT_MULTIPLICATOR = Decimal('100')
_PATTERN_CHARS = "#0,."
BLANK = ""


# =============================================================================
# Numeric conversions
# =============================================================================


def to_integer(source) -> Optional[int]:
    """Integral value within the signed 32-bit range, else None"""
    value = parse_decimal(source)
    if not is_integer(value):
        return None
    return int(value)


def to_integer_w0(source) -> Optional[int]:
    return to_integer(wrap_zero(source))


def to_long(source) -> Optional[int]:
    """Integral value within the signed 64-bit range, else None"""
    value = parse_decimal(source)
    if not is_long(value):
        return None
    return int(value)


def to_long_w0(source) -> Optional[int]:
    return to_long(wrap_zero(source))


def to_double(source) -> Optional[float]:
    """
    Float holding exactly the same shortest value, else None.

    Examples:
        >>> to_double("0.1")
        0.1
        >>> to_double("0.12345678901234567890") is None
        True
    """
    value = parse_decimal(source)
    if value is None:
        return None
    result = float(value)
    if compare(value, result) is not ComparisonResult.EQUAL:
        return None
    return result


def to_double_w0(source) -> Optional[float]:
    return to_double(wrap_zero(source))


# =============================================================================
# Text output
# =============================================================================


def stringify(source) -> str:
    """
    Plain text without trailing zeros or exponent; blank when unparseable.

    Examples:
        >>> stringify("1,200.500")
        '1200.5'
    """
    value = parse_decimal(source)
    if value is None:
        return BLANK
    return to_plain_string(strip_trailing_zeros(value))


def stringify_w0(source) -> str:
    return stringify(wrap_zero(source))


@dataclass(frozen=True)
class NumberPattern:
    """Parsed DecimalFormat-style pattern"""
    prefix: str
    suffix: str
    grouping_size: int
    min_integer_digits: int
    min_fraction_digits: int
    max_fraction_digits: int
    multiplier: Decimal

    def apply(self, value: Decimal) -> str:
        """Render a Decimal, rounding half-even to the maximum fraction digits"""
        scaled = EXACT_CONTEXT.multiply(value, self.multiplier)
        rounded = rescale(scaled, self.max_fraction_digits, RoundingMode.HALF_EVEN)

        integer_digits, _, fraction_digits = to_plain_string(rounded.copy_abs()).partition('.')
        integer_digits = integer_digits.lstrip('0').rjust(self.min_integer_digits, '0')
        fraction_digits = fraction_digits.rstrip('0').ljust(self.min_fraction_digits, '0')
        if not integer_digits and not fraction_digits:
            integer_digits = '0'

        if self.grouping_size:
            groups = []
            while len(integer_digits) > self.grouping_size:
                groups.insert(0, integer_digits[-self.grouping_size:])
                integer_digits = integer_digits[:-self.grouping_size]
            groups.insert(0, integer_digits)
            integer_digits = ','.join(groups)

        number = integer_digits + ('.' + fraction_digits if fraction_digits else BLANK)
        # Sign of the unrounded value, so -0.4 renders as "-0"
        sign = '-' if scaled < ZERO else BLANK
        return f"{sign}{self.prefix}{number}{self.suffix}"


@lru_cache(maxsize=64)
def parse_pattern(pattern: str) -> NumberPattern:
    """
    Parse a DecimalFormat-style pattern.

    Supports "0" (required digit), "#" (optional digit), "," (grouping,
    size taken from the last group), "." (fraction separator), literal
    prefix/suffix text, and "%" (value multiplied by 100).

    Raises:
        ValueError: If the pattern contains no digit placeholders
    """
    positions = [index for index, char in enumerate(pattern) if char in _PATTERN_CHARS]
    if not positions or not any(char in "#0" for char in pattern):
        raise ValueError(f"Pattern has no digit placeholders: {pattern!r}")

    start, end = positions[0], positions[-1] + 1
    prefix, number, suffix = pattern[:start], pattern[start:end], pattern[end:]
    integer_part, _, fraction_part = number.partition('.')

    grouping_size = 0
    if ',' in integer_part:
        grouping_size = len(integer_part) - integer_part.rfind(',') - 1

    multiplier = PERCENT_MULTIPLICATOR if '%' in prefix + suffix else Decimal(1)
    return NumberPattern(
        prefix=prefix,
        suffix=suffix,
        grouping_size=grouping_size,
        min_integer_digits=integer_part.count('0'),
        min_fraction_digits=fraction_part.count('0'),
        max_fraction_digits=len(fraction_part.replace(',', BLANK)),
        multiplier=multiplier
    )


def format_decimal(source, pattern: Optional[str]) -> Optional[str]:
    """
    Format the source with a DecimalFormat-style pattern.

    Returns None for a blank pattern and "" for an unparseable source.

    Examples:
        >>> format_decimal("1234567.891", "##,##0.00")
        '1,234,567.89'
        >>> format_decimal("0.5", "#.##")
        '.5'
    """
    if pattern is None or not pattern.strip():
        return None
    value = parse_decimal(source)
    if value is None:
        return BLANK
    return parse_pattern(pattern).apply(value)


def format_decimal_w0(source, pattern: Optional[str]) -> Optional[str]:
    return format_decimal(wrap_zero(source), pattern)


def dress(source) -> str:
    """Grouped integer text rounded half-even, e.g. "1,234" """
    return format_decimal(source, FORMAT_COMMA_0)


def dress_w0(source) -> str:
    return dress(wrap_zero(source))


def dress_2dp(source) -> str:
    """Grouped text with two decimals, e.g. "1,234.50" """
    return format_decimal(source, FORMAT_COMMA_2)


def dress_2dp_w0(source) -> str:
    return dress_2dp(wrap_zero(source))


def percent(source, decimal_places: Optional[int]) -> str:
    """
    Render a ratio as a percentage.

    The value is multiplied by 100 and rounded half-up to |decimal_places|
    digits. A space separates the number from "%" when decimal_places is
    None or negative.

    Examples:
        >>> percent("0.1234", 1)
        '12.3%'
        >>> percent("0.5", None)
        '50 %'
        >>> percent("12.3456", -2)
        '1,234.56 %'
    """
    value = parse_decimal(source)
    if value is None:
        return BLANK

    exact_places = abs(decimal_places or 0)
    scaled = rescale(EXACT_CONTEXT.multiply(value, PERCENT_MULTIPLICATOR), exact_places, RoundingMode.HALF_UP)
    has_space = decimal_places is None or decimal_places < 0

    pattern = FORMAT_COMMA_0
    if exact_places:
        pattern += "." + "0" * exact_places
    return parse_pattern(pattern).apply(scaled) + (" " if has_space else BLANK) + "%"


def percent_w0(source, decimal_places: Optional[int]) -> str:
    return percent(wrap_zero(source), decimal_places)

"""
Canonical Decimal Parser Module

Normalizes every supported numeric representation into one canonical
Decimal value, or into None when the source carries no usable number.
Parsing never substitutes a default: zero-wrapping is a separate, explicit
step layered on top (see wrap_zero).

Also hosts the exact arithmetic context shared by the rest of the package
and the single-rounding rescale/divide primitives every scale-reducing
operation goes through.
"""

from abc import ABC, abstractmethod
from decimal import (
    Context, Decimal, Inexact, InvalidOperation, DivisionByZero, Overflow,
    MAX_EMAX, MAX_PREC, MIN_EMIN, localcontext
)
from typing import Optional
import math
import re

from .rounding import RoundingMode

# Unbounded context: additions, products and remainders never round
EXACT_CONTEXT = Context(
    prec=MAX_PREC,
    Emax=MAX_EMAX,
    Emin=MIN_EMIN,
    traps=[InvalidOperation, DivisionByZero, Overflow]
)

ZERO = Decimal('0')
ONE = Decimal('1')

DEFAULT_SCALE = 0
DEFAULT_ROUNDING_MODE = RoundingMode.HALF_UP

# Whitespace trimmed around text input, ideographic space included
_SPACE_CHARS = " \t\n\r\f\v　"
_GROUP_SEPARATOR = ","
_DECIMAL_SYNTAX = re.compile(r'[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?')


class DecimalSource(ABC):
    """
    Anything that carries a current decimal value and can therefore be
    passed wherever a number is accepted (the accumulator is one).
    """

    @property
    @abstractmethod
    def value(self) -> Decimal:
        """Current canonical value"""


def parse_decimal(source) -> Optional[Decimal]:
    """
    Parse a supported source into a canonical Decimal.

    Supported kinds: None, Decimal, int, float, str and DecimalSource.
    A bool is a flag, never a quantity, so it parses to None.

    Args:
        source: Value to parse

    Returns:
        Canonical Decimal, or None when the source is absent or unparseable

    Raises:
        TypeError: If the source is of an unsupported type
    """
    if source is None or isinstance(source, bool):
        return None
    elif isinstance(source, Decimal):
        return source if source.is_finite() else None
    elif isinstance(source, int):
        return Decimal(source)
    elif isinstance(source, float):
        if not math.isfinite(source):
            return None
        # Shortest round-trip text avoids binary expansion artifacts
        return Decimal(repr(source))
    elif isinstance(source, str):
        return _parse_text(source)
    elif isinstance(source, DecimalSource):
        return source.value
    raise TypeError(f"Unparseable argument passed in: {type(source).__name__}")


def _parse_text(source: str) -> Optional[Decimal]:
    text = source.strip(_SPACE_CHARS).replace(_GROUP_SEPARATOR, "")
    if not text or not _DECIMAL_SYNTAX.fullmatch(text):
        return None
    return Decimal(text)


def wrap_zero(source) -> Decimal:
    """Parse the source, substituting zero when it is unparseable"""
    return if_null_then(source, ZERO)


def wrap_null(source) -> Optional[Decimal]:
    """Parse the source, substituting None when it equals zero"""
    result = parse_decimal(source)
    if result is not None and result == ZERO:
        return None
    return result


def if_null_then(primary, alternative) -> Optional[Decimal]:
    """
    Parse the primary source, falling back to the alternative.

    Examples:
        >>> if_null_then("20", 30)
        Decimal('20')
        >>> if_null_then("A20", 30)
        Decimal('30')
    """
    result = parse_decimal(primary)
    if result is None:
        result = parse_decimal(alternative)
    return result


def is_decimal(source) -> bool:
    """Check whether the source parses"""
    return parse_decimal(source) is not None


def is_null_or_zero(value: Optional[Decimal]) -> bool:
    """Check whether an already parsed value is absent or zero"""
    return value is None or value == ZERO


def is_unusable_or_zero(source) -> bool:
    """Check whether the source is unparseable or parses to zero"""
    return is_null_or_zero(parse_decimal(source))


def strip_trailing_zeros(value: Decimal) -> Decimal:
    """Remove trailing fractional zeros without rounding"""
    if value == ZERO:
        return ZERO
    return value.normalize(EXACT_CONTEXT)


def to_plain_string(value: Decimal) -> str:
    """Render a Decimal without exponent notation"""
    return format(value, 'f')


def rescale(value: Decimal, scale: int,
            rounding_mode: RoundingMode = DEFAULT_ROUNDING_MODE) -> Decimal:
    """
    Round a Decimal to exactly `scale` fractional digits.

    A negative scale rounds to tens, hundreds and so on.

    Raises:
        decimal.Inexact: If rounding_mode is UNNECESSARY and digits would be lost
    """
    exponent = Decimal(1).scaleb(-scale, EXACT_CONTEXT)
    with localcontext() as ctx:
        ctx.prec = max(28, value.adjusted() + scale + 2)
        ctx.Emax = MAX_EMAX
        ctx.Emin = MIN_EMIN
        ctx.traps[Inexact] = rounding_mode.is_exact
        result = value.quantize(exponent, rounding=rounding_mode.rounding)
    if result == ZERO:
        result = result.copy_abs()
    return result


def set_scale(source, scale: int,
              rounding_mode: RoundingMode = DEFAULT_ROUNDING_MODE) -> Optional[Decimal]:
    """
    Parse the source and round it to `scale` fractional digits.

    Examples:
        >>> set_scale("5.125", 2)
        Decimal('5.13')
        >>> set_scale("A5", 2) is None
        True
    """
    result = parse_decimal(source)
    if result is None:
        return None
    return rescale(result, scale, RoundingMode.of(rounding_mode))


def divide_to_scale(dividend: Decimal, divisor: Decimal, scale: int,
                    rounding_mode: RoundingMode = DEFAULT_ROUNDING_MODE) -> Decimal:
    """
    Divide two Decimals, rounding the exact quotient once to `scale` digits.

    The quotient is computed on integers one digit past the target scale,
    with a sticky digit appended when the remainder is non-zero, so the
    final rounding sees the same tie/non-tie situation as the exact value.

    Raises:
        ZeroDivisionError: If the divisor is zero
        decimal.Inexact: If rounding_mode is UNNECESSARY and digits would be lost
    """
    if divisor == ZERO:
        raise ZeroDivisionError("Division by zero")

    negative = dividend.is_signed() != divisor.is_signed()
    _, dividend_digits, dividend_exponent = dividend.as_tuple()
    _, divisor_digits, divisor_exponent = divisor.as_tuple()
    numerator = int(''.join(map(str, dividend_digits)))
    denominator = int(''.join(map(str, divisor_digits)))

    shift = dividend_exponent - divisor_exponent + scale + 1
    if shift >= 0:
        numerator *= 10 ** shift
    else:
        denominator *= 10 ** -shift

    quotient, remainder = divmod(numerator, denominator)
    exponent = -(scale + 1)
    if remainder:
        quotient = quotient * 10 + 1
        exponent -= 1

    digits = tuple(int(digit) for digit in str(quotient))
    guarded = Decimal((1 if negative else 0, digits, exponent))
    return rescale(guarded, scale, rounding_mode)

"""
Null-Propagation Policy Engine

N-ary sums and products, quotients, remainders and the percentage and tax
derivations built on them. Every reduction is offered under three policies:

- RESERVE_NULL: unparseable operands are skipped; the result is None only
  when no operand parsed at all.
- NOTICE_NULL: a single unparseable operand makes the whole result None.
- WRAP_ZERO: the RESERVE_NULL result with None replaced by zero.

Division by an absent or zero divisor is identity (the dividend comes back
unchanged) in the default variants, and None in the NOTICE_NULL variants.
"""

from decimal import Decimal
from enum import Enum
from typing import Iterable, List, Optional

from .config import get_config
from .parsing import (
    DEFAULT_ROUNDING_MODE, EXACT_CONTEXT, ONE, ZERO,
    divide_to_scale, is_null_or_zero, is_unusable_or_zero, parse_decimal,
    rescale, strip_trailing_zeros, wrap_zero
)
from .rounding import RoundingMode

DEPERCENT_MULTIPLICATOR = Decimal('0.01')
PERCENT_MULTIPLICATOR = Decimal('100')
PERCENT_ADDEND = ONE


class NullPolicy(Enum):
    """How unparseable operands affect an n-ary reduction"""
    RESERVE_NULL = "reserve_null"
    NOTICE_NULL = "notice_null"
    WRAP_ZERO = "wrap_zero"


# =============================================================================
# Generic reductions
# =============================================================================


def _reduce(operands: Iterable, policy: NullPolicy, operation,
            identity: Decimal) -> Optional[Decimal]:
    result = None
    for operand in operands:
        value = parse_decimal(operand)
        if value is None:
            if policy is NullPolicy.NOTICE_NULL:
                return None
            continue
        result = value if result is None else operation(result, value)

    # Nothing parsed: only RESERVE_NULL keeps the absence visible
    if result is None and policy is not NullPolicy.RESERVE_NULL:
        return identity
    return result


def reduce_sum(operands: Iterable, policy: NullPolicy = NullPolicy.WRAP_ZERO) -> Optional[Decimal]:
    """Sum operands under the given null policy; the empty sum is zero"""
    return _reduce(operands, policy, EXACT_CONTEXT.add, ZERO)


def reduce_product(operands: Iterable, policy: NullPolicy = NullPolicy.WRAP_ZERO) -> Optional[Decimal]:
    """Multiply operands under the given null policy; the empty product is one"""
    return _reduce(operands, policy, EXACT_CONTEXT.multiply, ONE)


# =============================================================================
# Sign and magnitude
# =============================================================================


def minus(source) -> Optional[Decimal]:
    """Negate the source; None stays None"""
    value = parse_decimal(source)
    if value is None:
        return None
    return value.copy_negate() if value != ZERO else value.copy_abs()


def absolute(source) -> Optional[Decimal]:
    """Absolute value of the source; None stays None"""
    value = parse_decimal(source)
    if value is None:
        return None
    return value.copy_abs()


# =============================================================================
# Sums
# =============================================================================


def sum(*addends) -> Decimal:
    """
    Sum all parseable addends, zero when none parses.

    Examples:
        >>> sum(20, "-35", "50")
        Decimal('35')
        >>> sum(20, "A35", "50")
        Decimal('70')
    """
    return reduce_sum(addends, NullPolicy.WRAP_ZERO)


def sum_reserve_null(*addends) -> Optional[Decimal]:
    """Sum all parseable addends, None when none parses"""
    return reduce_sum(addends, NullPolicy.RESERVE_NULL)


def sum_notice_null(*addends) -> Optional[Decimal]:
    """Sum all addends, None as soon as one does not parse"""
    return reduce_sum(addends, NullPolicy.NOTICE_NULL)


def _blend_addends(params) -> List[Optional[Decimal]]:
    # A bool switches the sign of every addend that follows it
    positive = True
    addends = []
    for param in params:
        if isinstance(param, bool):
            positive = param
            continue
        addend = parse_decimal(param)
        if addend is not None and not positive:
            addend = minus(addend)
        addends.append(addend)
    return addends


def blend_sum(*params) -> Decimal:
    """
    Sum with inline sign switches: True means plus, False means minus.

    Examples:
        >>> blend_sum(20, False, "-35", "50")
        Decimal('5')
        >>> blend_sum(False, 20, "A35", True, "50")
        Decimal('30')
    """
    return sum(*_blend_addends(params))


def blend_sum_reserve_null(*params) -> Optional[Decimal]:
    """Signed sum, None when no addend parses"""
    return sum_reserve_null(*_blend_addends(params))


def blend_sum_notice_null(*params) -> Optional[Decimal]:
    """Signed sum, None as soon as one addend does not parse"""
    return sum_notice_null(*_blend_addends(params))


# =============================================================================
# Products
# =============================================================================


def product(*multipliers) -> Decimal:
    """
    Multiply all parseable multipliers, one when none parses.

    Examples:
        >>> product(2, "-3", "5")
        Decimal('-30')
        >>> product(2, "A3", "5")
        Decimal('10')
    """
    return reduce_product(multipliers, NullPolicy.WRAP_ZERO)


def product_reserve_null(*multipliers) -> Optional[Decimal]:
    """Multiply all parseable multipliers, None when none parses"""
    return reduce_product(multipliers, NullPolicy.RESERVE_NULL)


def product_notice_null(*multipliers) -> Optional[Decimal]:
    """Multiply all multipliers, None as soon as one does not parse"""
    return reduce_product(multipliers, NullPolicy.NOTICE_NULL)


def product_depercent(*multipliers) -> Decimal:
    """Product divided by 100, one factor being a percentage"""
    return EXACT_CONTEXT.multiply(DEPERCENT_MULTIPLICATOR, product(*multipliers))


def product_depercent_reserve_null(*multipliers) -> Optional[Decimal]:
    """Percentage product, None when no multiplier parses"""
    return product_notice_null(DEPERCENT_MULTIPLICATOR, product_reserve_null(*multipliers))


def product_depercent_notice_null(*multipliers) -> Optional[Decimal]:
    """Percentage product, None as soon as one multiplier does not parse"""
    return product_notice_null(DEPERCENT_MULTIPLICATOR, product_notice_null(*multipliers))


# =============================================================================
# Quotients and remainders
# =============================================================================


def quotient(dividend, divisor, scale: int,
             rounding_mode: RoundingMode = DEFAULT_ROUNDING_MODE) -> Decimal:
    """
    Divide, treating an absent or zero divisor as identity.

    An absent dividend counts as zero.

    Examples:
        >>> quotient("41", "8", 2)
        Decimal('5.13')
        >>> quotient("A41", "8", 2)
        Decimal('0.00')
        >>> quotient("41", "A8", 2)
        Decimal('41.00')
    """
    if is_unusable_or_zero(divisor):
        divisor = ONE
    return quotient_notice_null(wrap_zero(dividend), divisor, scale, rounding_mode)


def quotient_notice_null(dividend, divisor, scale: int,
                         rounding_mode: RoundingMode = DEFAULT_ROUNDING_MODE) -> Optional[Decimal]:
    """Divide, None when the dividend is absent or the divisor absent or zero"""
    dividend_value = parse_decimal(dividend)
    divisor_value = parse_decimal(divisor)
    if dividend_value is None or is_null_or_zero(divisor_value):
        return None
    return divide_to_scale(dividend_value, divisor_value, scale, RoundingMode.of(rounding_mode))


def quotient_percent(dividend, divisor, scale: int,
                     rounding_mode: RoundingMode = DEFAULT_ROUNDING_MODE) -> Decimal:
    """
    Divide and express the ratio as a percentage.

    Examples:
        >>> quotient_percent(1, 8, 2)
        Decimal('12.50')
    """
    if is_unusable_or_zero(divisor):
        divisor = ONE
    return quotient_percent_notice_null(wrap_zero(dividend), divisor, scale, rounding_mode)


def quotient_percent_notice_null(dividend, divisor, scale: int,
                                 rounding_mode: RoundingMode = DEFAULT_ROUNDING_MODE) -> Optional[Decimal]:
    """Percentage ratio, None when either operand is unusable"""
    scaled_dividend = product_notice_null(dividend, PERCENT_MULTIPLICATOR)
    return quotient_notice_null(scaled_dividend, divisor, scale, rounding_mode)


def mod(dividend, divisor) -> Optional[Decimal]:
    """
    Remainder carrying the dividend's sign; identity for an unusable divisor.

    Examples:
        >>> mod(17, 5)
        Decimal('2')
        >>> mod(-17, 5)
        Decimal('-2')
        >>> mod(17, 0)
        Decimal('17')
    """
    divisor_value = parse_decimal(divisor)
    if is_null_or_zero(divisor_value):
        return parse_decimal(dividend)
    return mod_notice_null(wrap_zero(dividend), divisor_value)


def mod_notice_null(dividend, divisor) -> Optional[Decimal]:
    """Remainder, None when the dividend is absent or the divisor absent or zero"""
    dividend_value = parse_decimal(dividend)
    divisor_value = parse_decimal(divisor)
    if dividend_value is None or is_null_or_zero(divisor_value):
        return None
    result = EXACT_CONTEXT.remainder(dividend_value, divisor_value)
    return result.copy_abs() if result == ZERO else result


# =============================================================================
# Tax decomposition
# =============================================================================


def tax_of_inclusive(amount, tax_rate, scale: int,
                     rounding_mode: RoundingMode = DEFAULT_ROUNDING_MODE) -> Decimal:
    """
    Tax contained in a tax-inclusive amount: amount * rate / (1 + rate).

    Rates are fractions, 0.1 meaning 10 %. Zero when either side is unusable.

    Examples:
        >>> tax_of_inclusive(1100, "0.1", 0)
        Decimal('100')
    """
    if is_unusable_or_zero(amount) or is_unusable_or_zero(tax_rate):
        return rescale(ZERO, scale)
    return quotient(product(amount, tax_rate), sum(PERCENT_ADDEND, tax_rate), scale, rounding_mode)


def tax_of_exclusive(amount, tax_rate, scale: int,
                     rounding_mode: RoundingMode = DEFAULT_ROUNDING_MODE) -> Decimal:
    """
    Tax due on top of a tax-exclusive amount: amount * rate.

    Examples:
        >>> tax_of_exclusive(1000, "0.08", 0)
        Decimal('80')
    """
    if is_unusable_or_zero(amount) or is_unusable_or_zero(tax_rate):
        return rescale(ZERO, scale)
    return quotient(product(amount, tax_rate), PERCENT_ADDEND, scale, rounding_mode)


# =============================================================================
# Scientific helpers
# =============================================================================


def average(*sources) -> Decimal:
    """
    Mean of the sources; unparseable ones count as zero but stay in the count.

    Examples:
        >>> average(1, 2, "A")
        Decimal('1')
    """
    scientific_scale = get_config().scientific_scale
    return strip_trailing_zeros(quotient(sum(*sources), len(sources), scientific_scale))


def average_ignore_null(*sources) -> Decimal:
    """Mean of the parseable sources only"""
    return average(*[value for value in map(parse_decimal, sources) if value is not None])


def exact_power(base: Decimal, exponent: int) -> Decimal:
    """Raise a Decimal to a non-negative integer power without rounding"""
    result = ONE
    while exponent > 0:
        if exponent & 1:
            result = EXACT_CONTEXT.multiply(result, base)
        base = EXACT_CONTEXT.multiply(base, base)
        exponent >>= 1
    return result


def power(source, exponent: int) -> Decimal:
    """
    Integer power; a negative exponent yields the reciprocal at the
    scientific scale.

    Examples:
        >>> power("1.5", 2)
        Decimal('2.25')
        >>> power(2, -2)
        Decimal('0.25')
    """
    value = wrap_zero(source)
    if is_null_or_zero(value):
        return ZERO
    elif exponent == 0:
        return ONE

    result = exact_power(value, abs(exponent))
    if exponent < 0:
        result = quotient(ONE, result, get_config().scientific_scale, RoundingMode.HALF_UP)
    return strip_trailing_zeros(result)


def integral_part(source) -> Decimal:
    """Integer part, truncated towards zero"""
    return rescale(wrap_zero(source), 0, RoundingMode.DOWN)


def fractional_part(source) -> Decimal:
    """
    Fraction part, keeping the sign; a whole number gives 0.0.

    Examples:
        >>> fractional_part("-3.250")
        Decimal('-0.25')
    """
    result = strip_trailing_zeros(EXACT_CONTEXT.subtract(wrap_zero(source), integral_part(source)))
    if result == ZERO:
        result = rescale(ZERO, 1)
    return result


def integral_length(source) -> int:
    """Number of digits in the integer part"""
    return len(format(integral_part(source).copy_abs(), 'f'))


def fractional_length(source) -> int:
    """Number of significant fractional digits"""
    fraction = strip_trailing_zeros(fractional_part(source).copy_abs())
    if fraction == ZERO:
        return 0
    return len(format(fraction, 'f')) - 2

"""
Comparison Oracle Module

One comparison primitive that reports null-presence alongside ordering.
Every higher-level predicate in the package (ascending checks, extremum,
set membership, option selection) is built on compare() so that handling
of unparseable operands lives in exactly one place.
"""

from decimal import Decimal
from enum import Enum
from functools import cmp_to_key
from typing import Callable, FrozenSet, Mapping, Optional

from .parsing import ZERO, parse_decimal, wrap_zero

INT_MIN, INT_MAX = -2 ** 31, 2 ** 31 - 1
LONG_MIN, LONG_MAX = -2 ** 63, 2 ** 63 - 1


class ComparisonResult(Enum):
    """Outcome of comparing two parse results"""
    EQUAL = "equal"
    GREATER = "greater"
    LESS = "less"
    RIGHT_NULL = "right_null"    # Only the right operand is unparseable
    LEFT_NULL = "left_null"      # Only the left operand is unparseable
    BOTH_NULL = "both_null"

    @property
    def is_ordered(self) -> bool:
        """True when both operands parsed"""
        return self in (ComparisonResult.EQUAL, ComparisonResult.GREATER, ComparisonResult.LESS)

    def mirror(self) -> 'ComparisonResult':
        """Result of the same comparison with operands swapped"""
        return _MIRRORED[self]


_MIRRORED = {
    ComparisonResult.EQUAL: ComparisonResult.EQUAL,
    ComparisonResult.GREATER: ComparisonResult.LESS,
    ComparisonResult.LESS: ComparisonResult.GREATER,
    ComparisonResult.RIGHT_NULL: ComparisonResult.LEFT_NULL,
    ComparisonResult.LEFT_NULL: ComparisonResult.RIGHT_NULL,
    ComparisonResult.BOTH_NULL: ComparisonResult.BOTH_NULL,
}

# Sort weights: absent values order before every number
_SORT_WEIGHT = {
    ComparisonResult.EQUAL: 0,
    ComparisonResult.BOTH_NULL: 0,
    ComparisonResult.GREATER: 1,
    ComparisonResult.RIGHT_NULL: 1,
    ComparisonResult.LESS: -1,
    ComparisonResult.LEFT_NULL: -1,
}

# Adjacent-pair outcomes that break each ascending-sequence variant
_VIOLATIONS_PLAIN: FrozenSet[ComparisonResult] = frozenset({ComparisonResult.GREATER})
_VIOLATIONS_NOT_EQUAL = _VIOLATIONS_PLAIN | {ComparisonResult.EQUAL}
_VIOLATIONS_NOT_NULL = _VIOLATIONS_PLAIN | {
    ComparisonResult.RIGHT_NULL, ComparisonResult.LEFT_NULL, ComparisonResult.BOTH_NULL
}
_VIOLATIONS_NOT_EQUAL_NOT_NULL = _VIOLATIONS_NOT_NULL | _VIOLATIONS_NOT_EQUAL


def compare(left, right) -> ComparisonResult:
    """
    Compare two sources after parsing them.

    Examples:
        >>> compare("10", 2)
        <ComparisonResult.GREATER: 'greater'>
        >>> compare("A", 2)
        <ComparisonResult.LEFT_NULL: 'left_null'>
    """
    left_value, right_value = parse_decimal(left), parse_decimal(right)
    if left_value is None and right_value is None:
        return ComparisonResult.BOTH_NULL
    elif left_value is None:
        return ComparisonResult.LEFT_NULL
    elif right_value is None:
        return ComparisonResult.RIGHT_NULL

    if left_value > right_value:
        return ComparisonResult.GREATER
    elif left_value < right_value:
        return ComparisonResult.LESS
    return ComparisonResult.EQUAL


def compare_w0(left, right) -> ComparisonResult:
    """Compare two sources, treating unparseable ones as zero"""
    return compare(wrap_zero(left), wrap_zero(right))


def _sort_key(getter: Callable, comparator: Callable, descending: bool):
    def compare_entities(first, second):
        if descending:
            first, second = second, first
        return _SORT_WEIGHT[comparator(getter(first), getter(second))]
    return cmp_to_key(compare_entities)


def compare_asc(getter: Callable):
    """Sort key ordering entities ascending by a decimal field"""
    return _sort_key(getter, compare, descending=False)


def compare_desc(getter: Callable):
    """Sort key ordering entities descending by a decimal field"""
    return _sort_key(getter, compare, descending=True)


def compare_w0_asc(getter: Callable):
    """Sort key ordering entities ascending, unparseable fields as zero"""
    return _sort_key(getter, compare_w0, descending=False)


def compare_w0_desc(getter: Callable):
    """Sort key ordering entities descending, unparseable fields as zero"""
    return _sort_key(getter, compare_w0, descending=True)


def have_same_value(*sources) -> bool:
    """Check that every source compares EQUAL to the first one"""
    if not sources:
        return True
    return all(compare(sources[0], source) is ComparisonResult.EQUAL for source in sources)


def _is_ascending_core(sources, violations: FrozenSet[ComparisonResult]) -> bool:
    previous_valid = sources[0] if sources else None
    for current in sources[1:]:
        if compare(previous_valid, current) in violations:
            return False
        if parse_decimal(current) is not None:
            previous_valid = current
    return True


def is_ascending(*sources) -> bool:
    """
    Check that parseable sources never decrease.

    Unparseable sources are skipped when choosing the next baseline.

    Examples:
        >>> is_ascending(1, "A", 1, 3)
        True
        >>> is_ascending(1, 3, "A", 2)
        False
    """
    return _is_ascending_core(sources, _VIOLATIONS_PLAIN)


def is_ascending_not_equal(*sources) -> bool:
    """Check that parseable sources strictly increase"""
    return _is_ascending_core(sources, _VIOLATIONS_NOT_EQUAL)


def is_ascending_not_null(*sources) -> bool:
    """Check that sources never decrease and none is unparseable"""
    return _is_ascending_core(sources, _VIOLATIONS_NOT_NULL)


def is_ascending_not_equal_not_null(*sources) -> bool:
    """Check that sources strictly increase and none is unparseable"""
    return _is_ascending_core(sources, _VIOLATIONS_NOT_EQUAL_NOT_NULL)


def is_in_scope(target, *options) -> bool:
    """Check whether the target equals any of the options numerically"""
    return any(compare(target, option) is ComparisonResult.EQUAL for option in options)


def select(target, option_map: Optional[Mapping]):
    """
    Pick the value whose key numerically equals the target.

    Examples:
        >>> select("2.0", {1: "one", 2: "two"})
        'two'
    """
    if not option_map:
        return None
    for key, value in option_map.items():
        if compare(target, key) is ComparisonResult.EQUAL:
            return value
    return None


def _integral_within(source, lower: int, upper: int) -> bool:
    value = parse_decimal(source)
    if value is None or value != value.to_integral_value():
        return False
    return lower <= int(value) <= upper


def is_integer(source) -> bool:
    """Check for an integral value within the signed 32-bit range"""
    return _integral_within(source, INT_MIN, INT_MAX)


def is_long(source) -> bool:
    """Check for an integral value within the signed 64-bit range"""
    return _integral_within(source, LONG_MIN, LONG_MAX)


def is_natural_number(source) -> bool:
    """Check for a non-negative long value"""
    return is_long(source) and compare(source, ZERO) in (ComparisonResult.EQUAL, ComparisonResult.GREATER)


def is_positive_integral(source) -> bool:
    """Check for a positive long value"""
    return is_long(source) and compare(source, ZERO) is ComparisonResult.GREATER


def _extremum(sources, direction: ComparisonResult) -> Optional[Decimal]:
    result = None
    for source in sources:
        candidate = parse_decimal(source)
        if compare(candidate, result) in (direction, ComparisonResult.RIGHT_NULL):
            result = candidate
    return result


def maximum(*sources) -> Optional[Decimal]:
    """Largest parseable source, or None when nothing parses"""
    return _extremum(sources, ComparisonResult.GREATER)


def minimum(*sources) -> Optional[Decimal]:
    """Smallest parseable source, or None when nothing parses"""
    return _extremum(sources, ComparisonResult.LESS)

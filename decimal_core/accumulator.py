"""
Stateful Accumulator Module

A mutable decimal register with a fluent API. Every mutator applies one
policy-engine operation to the current value, ignores operands that do not
parse, records a human-readable line in the instance log, and returns the
accumulator itself so calls can be chained:

    DecimalAccumulator(2).add(10, "5.5").divide(3).value  -> Decimal('5.17')

Instances are independent and not thread-safe; use one per thread.
Also provides the tax accumulator and collection sums built on it.
"""

from dataclasses import fields, is_dataclass, replace
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Union, get_args, get_origin, get_type_hints
import logging
import types

from . import formatting
from . import policies
from .comparison import ComparisonResult, compare_w0
from .config import get_config
from .logging_config import log_operation
from .parsing import (
    ZERO, DecimalSource, is_unusable_or_zero, parse_decimal, set_scale,
    to_plain_string, wrap_zero
)
from .rounding import RoundingMode

logger = logging.getLogger(__name__)

DEFAULT_VALUE = ZERO
COLLECTION_SUM_SCALE = 2


class DecimalAccumulator(DecimalSource):
    """
    Mutable decimal register with chained operations and an operation log
    """

    def __init__(self, scale: Optional[int] = None,
                 rounding_mode: Union[RoundingMode, str, None] = None):
        settings = get_config()
        self._value = DEFAULT_VALUE
        self._scale = settings.default_scale if scale is None else scale
        self._rounding_mode = settings.rounding_mode if rounding_mode is None else RoundingMode.of(rounding_mode)
        self._log: List[str] = []

        self._record("initialized", "initialize")
        self._record(f"set value to default: {DEFAULT_VALUE}", "initialize")
        self._record_scale()

    def __repr__(self) -> str:
        return (f"DecimalAccumulator(value={to_plain_string(self._value)}, "
                f"scale={self._scale}, rounding_mode={self._rounding_mode.label})")

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def value(self) -> Decimal:
        """Current value"""
        return self._value

    @property
    def scale(self) -> int:
        """Scale used by division"""
        return self._scale

    @property
    def rounding_mode(self) -> RoundingMode:
        """Rounding mode used by division and rescaling"""
        return self._rounding_mode

    @property
    def log(self) -> str:
        """Operation log, one line per entry"""
        return "".join(f"{line}\n" for line in self._log)

    @property
    def log_lines(self) -> List[str]:
        return list(self._log)

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------

    def _record(self, line: str, operation: str) -> None:
        self._log.append(line)
        if get_config().operation_logging:
            log_operation(
                logger, "debug", line,
                operation=operation, component="accumulator",
                extra={"value": to_plain_string(self._value), "scale": self._scale}
            )

    def _record_command(self, command: str, *operands) -> None:
        rendered = []
        for operand in operands:
            parsed = parse_decimal(operand)
            rendered.append(to_plain_string(parsed) if parsed is not None else "null")

        line = command
        if len(operands) > 1:
            line += f" ({', '.join(rendered)})"
        elif operands:
            line += f" {rendered[0]}"
        if "divide" in command:
            line += f" ({self._scale}, {self._rounding_mode.label})"
        line += f", current value: {to_plain_string(self._value)}"
        self._record(line, command.split(" ")[0])

    def _record_scale(self) -> None:
        self._record(f"set scale: {self._scale}, roundingMode: {self._rounding_mode.label}", "set_scale")

    def _apply_scale(self, scale: Optional[int], rounding_mode) -> None:
        if scale is None and rounding_mode is None:
            return
        if scale is not None:
            self._scale = scale
        if rounding_mode is not None:
            self._rounding_mode = RoundingMode.of(rounding_mode)
        self._record_scale()

    # -------------------------------------------------------------------------
    # Mutators
    # -------------------------------------------------------------------------

    def clear(self) -> 'DecimalAccumulator':
        """Reset the value to zero and start a fresh log"""
        self._value = DEFAULT_VALUE
        self._log.clear()
        self._record(f"(re)set value to default: {DEFAULT_VALUE}", "clear")
        return self

    def negate(self) -> 'DecimalAccumulator':
        self._value = policies.minus(self._value)
        self._record_command("negate")
        return self

    def absolute(self) -> 'DecimalAccumulator':
        self._value = policies.absolute(self._value)
        self._record_command("absolute")
        return self

    def add(self, *addends) -> 'DecimalAccumulator':
        self._value = policies.sum(self._value, policies.sum_reserve_null(*addends))
        self._record_command("add", *addends)
        return self

    def subtract(self, *subtrahends) -> 'DecimalAccumulator':
        self._value = policies.sum(self._value, policies.minus(policies.sum_reserve_null(*subtrahends)))
        self._record_command("subtract", *subtrahends)
        return self

    def multiply(self, *multipliers) -> 'DecimalAccumulator':
        self._value = policies.product(self._value, policies.product_reserve_null(*multipliers))
        self._record_command("multiply", *multipliers)
        return self

    def multiply_depercent(self, *multipliers) -> 'DecimalAccumulator':
        """Multiply, then divide by 100 because one multiplier is a percentage"""
        self._value = policies.product_depercent(self._value, policies.product_reserve_null(*multipliers))
        self._record_command("multiply into depercent", *multipliers)
        return self

    def divide(self, divisor, scale: Optional[int] = None, rounding_mode=None) -> 'DecimalAccumulator':
        """
        Divide the current value; an unusable divisor leaves it unchanged
        apart from rescaling.
        """
        self._apply_scale(scale, rounding_mode)
        self._value = policies.quotient(self._value, divisor, self._scale, self._rounding_mode)
        self._record_command("divide", divisor)
        return self

    def divide_percent(self, divisor, scale: Optional[int] = None, rounding_mode=None) -> 'DecimalAccumulator':
        """Divide and express the ratio as a percentage"""
        self._apply_scale(scale, rounding_mode)
        self._value = policies.quotient_percent(self._value, divisor, self._scale, self._rounding_mode)
        self._record_command("divide into percent", divisor)
        return self

    def divide_as_divisor(self, dividend, scale: Optional[int] = None, rounding_mode=None) -> 'DecimalAccumulator':
        """Replace the value with dividend / value"""
        self._apply_scale(scale, rounding_mode)
        self._value = policies.quotient(dividend, self._value, self._scale, self._rounding_mode)
        self._record_command("divide as divisor", dividend)
        return self

    def divide_as_divisor_percent(self, dividend, scale: Optional[int] = None,
                                  rounding_mode=None) -> 'DecimalAccumulator':
        """Replace the value with dividend / value as a percentage"""
        self._apply_scale(scale, rounding_mode)
        self._value = policies.quotient_percent(dividend, self._value, self._scale, self._rounding_mode)
        self._record_command("divide as divisor into percent", dividend)
        return self

    def mod(self, divisor) -> 'DecimalAccumulator':
        self._value = policies.mod(self._value, divisor)
        self._record_command("mod", divisor)
        return self

    def mod_as_divisor(self, dividend) -> 'DecimalAccumulator':
        """Replace the value with dividend mod value"""
        self._value = wrap_zero(policies.mod(dividend, self._value))
        self._record_command("mod as divisor", dividend)
        return self

    def set_scale(self, scale: int, rounding_mode=None) -> 'DecimalAccumulator':
        """Adopt a new scale (and optionally mode) and round the value to it"""
        self._scale = scale
        if rounding_mode is not None:
            self._rounding_mode = RoundingMode.of(rounding_mode)
        self._value = set_scale(self._value, self._scale, self._rounding_mode)
        self._record_scale()
        return self

    # -------------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------------

    def is_equivalent_to(self, comparand) -> bool:
        return compare_w0(self._value, comparand) is ComparisonResult.EQUAL

    def is_greater_than(self, comparand) -> bool:
        return compare_w0(self._value, comparand) is ComparisonResult.GREATER

    def is_greater_equal(self, comparand) -> bool:
        return compare_w0(self._value, comparand) in (ComparisonResult.EQUAL, ComparisonResult.GREATER)

    def is_less_than(self, comparand) -> bool:
        return compare_w0(self._value, comparand) is ComparisonResult.LESS

    def is_less_equal(self, comparand) -> bool:
        return compare_w0(self._value, comparand) in (ComparisonResult.EQUAL, ComparisonResult.LESS)

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def integral_part(self) -> Decimal:
        return policies.integral_part(self._value)

    def fractional_part(self) -> Decimal:
        return policies.fractional_part(self._value)

    def integer_value(self) -> Optional[int]:
        return formatting.to_integer(self._value)

    def long_value(self) -> Optional[int]:
        return formatting.to_long(self._value)

    def double_value(self) -> Optional[float]:
        return formatting.to_double(self._value)

    def stringify(self) -> str:
        return formatting.stringify(self._value)

    def dress(self) -> str:
        return formatting.dress(self._value)

    def dress_2dp(self) -> str:
        return formatting.dress_2dp(self._value)

    def format(self, pattern: str) -> Optional[str]:
        return formatting.format_decimal(self._value, pattern)

    def percent(self, decimal_places: Optional[int]) -> str:
        return formatting.percent(self._value, decimal_places)

    # -------------------------------------------------------------------------
    # Batch helpers
    # -------------------------------------------------------------------------

    @classmethod
    def create_array(cls, size: int, scale: Optional[int] = None,
                     rounding_mode=None) -> List['DecimalAccumulator']:
        """Create `size` independent accumulators"""
        return [cls(scale, rounding_mode) for _ in range(size)]

    @classmethod
    def create_map(cls, *keys: str) -> Dict[str, 'DecimalAccumulator']:
        """Create one independent accumulator per key"""
        return {key: cls() for key in keys}

    @staticmethod
    def clear_all(container: Union[List['DecimalAccumulator'], Dict[str, 'DecimalAccumulator']]) -> None:
        """Clear every accumulator in a list or dict"""
        accumulators = container.values() if isinstance(container, dict) else container
        for accumulator in accumulators:
            accumulator.clear()

    @staticmethod
    def transfer_value(container, source, destination) -> None:
        """
        Move a value between two slots of a list or dict: the destination
        gains the source's value and the source is reset to zero.
        """
        container[destination].add(container[source])
        container[source].clear()


class TaxAccumulator:
    """
    Running totals of tax-exclusive (pay), tax and tax-inclusive (all)
    amounts. Each call decomposes only the amount it adds.
    """

    def __init__(self, scale: Optional[int] = None, rounding_mode=None):
        settings = get_config()
        self.scale = settings.default_scale if scale is None else scale
        self.rounding_mode = settings.rounding_mode if rounding_mode is None else RoundingMode.of(rounding_mode)
        self.pay_amount = DecimalAccumulator(self.scale, self.rounding_mode)
        self.tax_amount = DecimalAccumulator(self.scale, self.rounding_mode)
        self.all_amount = DecimalAccumulator(self.scale, self.rounding_mode)

    def add_in_tax(self, amount, tax_rate) -> 'TaxAccumulator':
        """Add a tax-inclusive amount; rate 0.1 means 10 %"""
        amount_value = wrap_zero(amount)
        tax = policies.tax_of_inclusive(amount_value, tax_rate, self.scale, self.rounding_mode)
        self.all_amount.add(amount_value)
        self.tax_amount.add(tax)
        self.pay_amount.add(amount_value).subtract(tax)
        return self

    def add_in_tax_by_unit(self, unit_price, count, tax_rate) -> 'TaxAccumulator':
        return self.add_in_tax(self._line_amount(unit_price, count), tax_rate)

    def add_out_tax(self, amount, tax_rate) -> 'TaxAccumulator':
        """Add a tax-exclusive amount; tax is charged on top"""
        amount_value = wrap_zero(amount)
        tax = policies.tax_of_exclusive(amount_value, tax_rate, self.scale, self.rounding_mode)
        self.pay_amount.add(amount_value)
        self.tax_amount.add(tax)
        self.all_amount.add(amount_value, tax)
        return self

    def add_out_tax_by_unit(self, unit_price, count, tax_rate) -> 'TaxAccumulator':
        return self.add_out_tax(self._line_amount(unit_price, count), tax_rate)

    def _line_amount(self, unit_price, count) -> Decimal:
        if is_unusable_or_zero(unit_price) or is_unusable_or_zero(count):
            return ZERO
        return set_scale(policies.product(unit_price, count), self.scale, self.rounding_mode)


# =============================================================================
# Collection sums
# =============================================================================


def collection_sum(items: Optional[Iterable], getter: Callable) -> Optional[Decimal]:
    """
    Sum one decimal attribute over a collection.

    Returns None for an empty collection; unparseable attributes are ignored.
    """
    items = list(items or [])
    if not items:
        return None
    total = DecimalAccumulator()
    for item in items:
        total.add(getter(item))
    return total.value


_FIELD_CONVERTERS: Dict[type, Callable[[DecimalAccumulator], object]] = {
    Decimal: lambda total: total.value,
    int: DecimalAccumulator.long_value,
    float: DecimalAccumulator.double_value,
    str: DecimalAccumulator.dress_2dp,
}


# Optional[X] and, on 3.10+, X | None
_UNION_ORIGINS = (Union, getattr(types, "UnionType", Union))


def _summable_type(hint) -> Optional[type]:
    if get_origin(hint) in _UNION_ORIGINS:
        members = [arg for arg in get_args(hint) if arg is not type(None)]
        if len(members) != 1:
            return None
        hint = members[0]
    return hint if hint in _FIELD_CONVERTERS else None


def collection_sum_fields(items: Optional[Iterable], *field_names: str):
    """
    Sum numeric fields across dataclass instances.

    Decimal, int, float and str fields (optionally Optional[...]) are summed
    at scale 2 and converted back to their declared type; str fields come
    back as "##,##0.00" text. Fields not summed keep the first item's value.

    Args:
        items: Dataclass instances of one type
        field_names: Fields to sum; all summable fields when omitted

    Returns:
        New instance holding the sums, or None for an empty collection

    Raises:
        TypeError: If the items are not dataclass instances
        ValueError: If a named field is missing or not summable
    """
    items = list(items or [])
    if not items:
        return None
    first = items[0]
    if not is_dataclass(first) or isinstance(first, type):
        raise TypeError(f"collection_sum_fields requires dataclass instances, got {type(first).__name__}")

    hints = get_type_hints(type(first))
    summable = {}
    for data_field in fields(first):
        field_type = _summable_type(hints.get(data_field.name))
        if data_field.init and field_type is not None:
            summable[data_field.name] = field_type

    for name in field_names:
        if name not in summable:
            raise ValueError(f"No summable field named '{name}'")
    selected = list(field_names) or list(summable)

    totals = {name: DecimalAccumulator(COLLECTION_SUM_SCALE, RoundingMode.HALF_UP) for name in selected}
    for item in items:
        for name in selected:
            totals[name].add(getattr(item, name))

    converted = {name: _FIELD_CONVERTERS[summable[name]](totals[name]) for name in selected}
    return replace(first, **converted)

"""
Rounding Mode Module

Enumerates the rounding policies attached to every scale-reducing operation
and maps each of them onto the matching decimal module constant.
"""

from decimal import (
    ROUND_CEILING, ROUND_DOWN, ROUND_FLOOR, ROUND_HALF_DOWN,
    ROUND_HALF_EVEN, ROUND_HALF_UP, ROUND_UP
)
from enum import Enum


class RoundingMode(Enum):
    """Rounding policies with their log label and decimal constant"""
    UP = ("up", ROUND_UP)                  # Away from zero
    DOWN = ("down", ROUND_DOWN)            # Towards zero
    CEILING = ("ceiling", ROUND_CEILING)   # Towards positive infinity
    FLOOR = ("floor", ROUND_FLOOR)         # Towards negative infinity
    HALF_UP = ("half_up", ROUND_HALF_UP)
    HALF_DOWN = ("half_down", ROUND_HALF_DOWN)
    HALF_EVEN = ("half_even", ROUND_HALF_EVEN)
    UNNECESSARY = ("unnecessary", ROUND_DOWN)  # Raises Inexact if digits would be lost

    def __init__(self, label: str, rounding: str):
        self.label = label
        self.rounding = rounding

    @property
    def is_exact(self) -> bool:
        """Whether this mode forbids discarding non-zero digits"""
        return self is RoundingMode.UNNECESSARY

    @classmethod
    def of(cls, value) -> 'RoundingMode':
        """
        Resolve a rounding mode from a member, a label or a decimal constant

        Args:
            value: RoundingMode, label such as "half_up", or decimal.ROUND_* constant

        Returns:
            Matching RoundingMode

        Raises:
            ValueError: If the value names no rounding mode
        """
        if isinstance(value, RoundingMode):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            for mode in cls:
                if mode.label == lowered:
                    return mode
            for mode in cls:
                if mode.rounding == value and not mode.is_exact:
                    return mode
        raise ValueError(f"Unknown rounding mode: {value!r}")

"""
Expression Interpreter Module

Evaluates infix arithmetic over canonical decimals with an operator
precedence (shunting-yard) scan: one operand stack, one operator stack,
no persistent tree. Input is user text, so every structural problem
resolves to None instead of an exception.

Leniency rules:
- whitespace is removed and unbalanced parentheses are completed
  (missing ")" appended, missing "(" prepended);
- characters that are neither digits, ".", operators nor parentheses
  are ignored;
- unary signs are not supported, "1+-2" is malformed.
"""

from decimal import Decimal
from typing import Callable, Dict, List, Optional
import logging
import re
import string

from .parsing import EXACT_CONTEXT, ONE, ZERO, divide_to_scale, parse_decimal, rescale
from .policies import exact_power, minus
from .rounding import RoundingMode

logger = logging.getLogger(__name__)

LEFT_PARENTHESIS = "("
RIGHT_PARENTHESIS = ")"
DOT = "."
PLUS = "+"
MINUS = "-"

# Division inside expressions always rounds to this scale, half-up,
# independently of any caller default
EXPRESSION_DIVISION_SCALE = 2
EXPRESSION_ROUNDING_MODE = RoundingMode.HALF_UP

PRECEDENCE: Dict[str, int] = {
    "+": 1,
    "-": 1,
    "*": 2,
    "/": 2,
    "^": 3,
}

# Typographic operators accepted as aliases
OPERATOR_ALIASES = {
    "×": "*",
    "÷": "/",
    "−": "-",
}

_WHITESPACE = re.compile(r"\s+")


class MalformedExpression(Exception):
    """Raised inside the scan when the expression cannot be reduced"""


def _divide(left: Decimal, right: Decimal) -> Decimal:
    if right == ZERO:
        raise MalformedExpression("division by zero")
    return divide_to_scale(left, right, EXPRESSION_DIVISION_SCALE, EXPRESSION_ROUNDING_MODE)


def _power(left: Decimal, right: Decimal) -> Decimal:
    # The exponent is truncated to an integer
    exponent = int(rescale(right, 0, RoundingMode.DOWN))
    if exponent >= 0:
        return exact_power(left, exponent)
    denominator = exact_power(left, -exponent)
    return _divide(ONE, denominator)


OPERATIONS: Dict[str, Callable[[Decimal, Decimal], Decimal]] = {
    "+": EXACT_CONTEXT.add,
    "-": EXACT_CONTEXT.subtract,
    "*": EXACT_CONTEXT.multiply,
    "/": _divide,
    "^": _power,
}


def balance_parentheses(source: str) -> str:
    """
    Complete unmatched parentheses.

    Examples:
        >>> balance_parentheses("(1+2")
        '(1+2)'
        >>> balance_parentheses("1+2)")
        '(1+2)'
    """
    open_count = source.count(LEFT_PARENTHESIS) - source.count(RIGHT_PARENTHESIS)
    if open_count > 0:
        return source + RIGHT_PARENTHESIS * open_count
    return LEFT_PARENTHESIS * -open_count + source


def _reduce_top(operands: List[Decimal], operators: List[str]) -> None:
    operator = operators.pop()
    if len(operands) < 2:
        raise MalformedExpression(f"operator '{operator}' lacks an operand")
    right = operands.pop()
    left = operands.pop()
    operands.append(OPERATIONS[operator](left, right))


def _is_number_char(char: str) -> bool:
    return char in string.digits or char == DOT


def evaluate_expression(source: Optional[str]) -> Optional[Decimal]:
    """
    Evaluate an infix arithmetic expression.

    Supports + - * / ^ and parentheses; precedence is ^ over * / over + -,
    operators of equal precedence associate left. Division rounds to two
    decimals half-up.

    Args:
        source: Expression text

    Returns:
        Result, or None when the expression is malformed

    Examples:
        >>> evaluate_expression("1 + 2 - 3 * 4^5 /6")
        Decimal('-509.00')
        >>> evaluate_expression("(1+2- 3 * ((4+5)*1.2)^2")
        Decimal('-346.92')
        >>> evaluate_expression("1+-2") is None
        True
    """
    if source is None:
        return None
    text = _WHITESPACE.sub("", source)
    for alias, operator in OPERATOR_ALIASES.items():
        text = text.replace(alias, operator)
    text = balance_parentheses(text)

    operands: List[Decimal] = []
    operators: List[str] = []
    index = 0
    try:
        while index < len(text):
            char = text[index]
            if _is_number_char(char):
                start = index
                while index < len(text) and _is_number_char(text[index]):
                    index += 1
                operand = parse_decimal(text[start:index])
                if operand is None:
                    raise MalformedExpression(f"unparseable number '{text[start:index]}'")
                operands.append(operand)
                continue

            if char == LEFT_PARENTHESIS:
                operators.append(char)
            elif char == RIGHT_PARENTHESIS:
                while operators and operators[-1] != LEFT_PARENTHESIS:
                    _reduce_top(operands, operators)
                if not operators:
                    raise MalformedExpression("unmatched ')'")
                operators.pop()
            elif char in PRECEDENCE:
                while (operators and operators[-1] != LEFT_PARENTHESIS
                       and PRECEDENCE[operators[-1]] >= PRECEDENCE[char]):
                    _reduce_top(operands, operators)
                operators.append(char)
            index += 1

        while operators:
            if operators[-1] == LEFT_PARENTHESIS:
                raise MalformedExpression("unmatched '('")
            _reduce_top(operands, operators)

        if len(operands) != 1:
            raise MalformedExpression(f"{len(operands)} operands left after reduction")
    except MalformedExpression as exc:
        logger.debug(f"Expression {source!r} is malformed: {exc}")
        return None

    return operands[0]


def blend_extract(source: Optional[str]) -> List[Decimal]:
    """
    Extract signed numbers from free text.

    A "+" or "-" sets the sign of the number runs that follow it; any
    other character only terminates the current run.

    Examples:
        >>> blend_extract("a12-3.5 b+4")
        [Decimal('12'), Decimal('-3.5'), Decimal('4')]
    """
    results: List[Decimal] = []
    if source is None:
        return results

    negative = False
    run: List[str] = []

    def flush():
        if run:
            value = parse_decimal("".join(run))
            if value is not None:
                results.append(minus(value) if negative else value)
            run.clear()

    for char in source:
        if _is_number_char(char):
            run.append(char)
            continue
        flush()
        if char in (PLUS, MINUS):
            negative = char == MINUS
    flush()
    return results

"""
Decimal Core

A canonical decimal arithmetic engine: lenient parsing of mixed numeric
inputs into Decimal, explicit null-propagation policies for sums, products
and quotients, an infix expression interpreter, a chainable accumulator,
and a combinatorial identifier codec.
"""

__version__ = "1.0.0"

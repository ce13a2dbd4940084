"""Decimal arithmetic on NumberNodes. Numbers are never converted to floats: every value is a Decimal built from the
string it was written as, and a result is printed with at least as many fractional digits as its most precise operand
("2 + 2.00" is "4.00", not "4").

Source: https://docs.python.org/3/library/decimal.html
"""

import operator
from decimal import Decimal, DecimalException

from texcalc.pure.nodes import NumberNode


BINARY = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
    "^": operator.pow,
}

UNARY = {
    "+": operator.pos,
    "-": operator.neg,
}


def render(value, digits=0):
    """Returns value as a plain decimal string (never in scientific notation) with at least digits fractional digits.
    Digits beyond that are kept, never rounded off. Zero is never signed.
    """
    text = format(value.normalize(), "f")
    if fractional_digits(text) < digits:
        text = format(value.quantize(Decimal(1).scaleb(-digits)), "f")

    if Decimal(text) == 0:
        text = text.lstrip("-")
    return text


def fractional_digits(text):
    """Number of digits after the decimal point in text."""
    if "." not in text:
        return 0
    return len(text) - text.index(".") - 1


def apply_unary(op, node, token=None):
    """Returns the NumberNode for op applied to node."""
    value = UNARY[op.raw](node.value)
    return NumberNode(render(value, node.fractional_digits), token=token or node.token)


def apply_binary(op, lhs, rhs, token=None):
    """Returns the NumberNode for lhs op rhs, or None if the result is undefined (division by zero, a negative base
    under a fractional exponent, an overflow...). "=" has no numerical meaning and is not handled here.
    """
    try:
        value = BINARY[op.raw](lhs.value, rhs.value)
    except DecimalException:
        return None

    if not value.is_finite():
        return None

    digits = max(lhs.fractional_digits, rhs.fractional_digits)
    return NumberNode(render(value, digits), token=token or lhs.token)


def is_integer(node):
    """Whether node is a NumberNode holding a whole number (written as "2" or "2.0" alike)."""
    return isinstance(node, NumberNode) and node.value == node.value.to_integral_value()

"""Algebraic rewriting: exponent laws and distribution of products over sums (FOIL).

Rules, with implicit multiplication written as juxtaposition:

```
x^0       ->  1
x^1       ->  x
x^2       ->  x x
x^n       ->  x x^(n - 1)          ; n a whole number > 2
x^-n      ->  1 / x^n
(a ± b) c ->  a c ± b c
c (a ± b) ->  c a ± c b
-n        ->  the number -n        ; a sign folded into a literal
```
"""

import logging

from texcalc.lang.numerical import apply_binary, apply_unary, is_integer
from texcalc.pure.lexer import DIV, EXP, IMPLICIT_MULT, MINUS, MULT, PLUS
from texcalc.pure.nodes import BinaryOpNode, NumberNode, UnaryOpNode
from texcalc.pure.visitor import IdentityVisitor


logger = logging.getLogger(__name__)

ONE = "1"


class FoilVisitor(IdentityVisitor):
    """Expands a tree. By default every rule is applied until none applies anywhere; with single_step, the first
    applicable rule (outermost first, then left to right) is applied once and the rest of the tree is left alone.
    """

    def __init__(self, single_step=False):
        self.single_step = single_step
        self.stepped = False
        self._depth = 0

    def visit(self, node):
        if self._depth == 0:
            self.stepped = False  # a new traversal gets a new step
        elif self.single_step and self.stepped:
            return node

        self._depth += 1
        try:
            return super().visit(node)
        finally:
            self._depth -= 1

    def visit_unary_op(self, node):
        if self.single_step:
            return self.step(node, super().visit_unary_op)

        node = super().visit_unary_op(node)
        rewritten = FoilVisitor.rewrite(node)
        return node if rewritten is None else self.visit(rewritten)

    def visit_binary_op(self, node):
        if self.single_step:
            return self.step(node, super().visit_binary_op)

        node = super().visit_binary_op(node)
        rewritten = FoilVisitor.rewrite(node)
        return node if rewritten is None else self.visit(rewritten)

    def step(self, node, descend):
        """Rewrites node itself if possible, else looks for a rewrite among its children."""
        rewritten = FoilVisitor.rewrite(node)
        if rewritten is None:
            return descend(node)

        self.stepped = True
        return rewritten

    @staticmethod
    def rewrite(node):
        """Returns node with one rule applied to its root, or None if no rule applies there."""
        if isinstance(node, UnaryOpNode):
            rewritten = FoilVisitor.fold_sign(node)
        elif node.op == EXP:
            rewritten = FoilVisitor.expand_power(node)
        elif node.op == MULT:
            rewritten = FoilVisitor.distribute(node)
        else:
            rewritten = None

        if rewritten is not None:
            logger.debug("rewrote %r into %r", node, rewritten)
        return rewritten

    @staticmethod
    def fold_sign(node):
        if isinstance(node.operand, NumberNode):
            return apply_unary(node.op, node.operand, token=node.token)
        return None

    @staticmethod
    def expand_power(node):
        base, exponent = node.lhs, node.rhs
        if not isinstance(exponent, NumberNode):
            return None

        value = exponent.value
        if value == 0:
            return NumberNode(ONE, token=node.token)
        elif value < 0:
            positive = apply_unary(MINUS, exponent)
            return BinaryOpNode(DIV, NumberNode(ONE, token=exponent.token),
                                BinaryOpNode(EXP, base, positive, token=node.token), token=node.token)
        elif value == 1:
            return base
        elif value == 2:
            return BinaryOpNode(IMPLICIT_MULT, base, base, token=node.token)
        elif value > 2 and is_integer(exponent):
            lowered = apply_binary(MINUS, exponent, NumberNode(ONE, token=exponent.token))
            return BinaryOpNode(IMPLICIT_MULT, base, BinaryOpNode(EXP, base, lowered, token=node.token),
                                token=node.token)
        return None

    @staticmethod
    def distribute(node):
        factor, other = node.lhs, node.rhs
        if FoilVisitor.is_sum(factor):
            terms = (BinaryOpNode(IMPLICIT_MULT, factor.lhs, other, token=factor.lhs.token),
                     BinaryOpNode(IMPLICIT_MULT, factor.rhs, other, token=factor.rhs.token))
        elif FoilVisitor.is_sum(other):
            factor, other = other, factor
            terms = (BinaryOpNode(IMPLICIT_MULT, other, factor.lhs, token=factor.lhs.token),
                     BinaryOpNode(IMPLICIT_MULT, other, factor.rhs, token=factor.rhs.token))
        else:
            return None

        return BinaryOpNode(factor.op, *terms, token=node.token)

    @staticmethod
    def is_sum(node):
        return isinstance(node, BinaryOpNode) and node.op in (PLUS, MINUS)


def foil(node, single_step=False):
    """Shortcut for FoilVisitor(single_step).visit(node)."""
    return FoilVisitor(single_step).visit(node)

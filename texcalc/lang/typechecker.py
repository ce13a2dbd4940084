"""Coarse type checking for texcalc statements. Every expression is classified as a number, a variable (something
symbolic), a function of some arity or unknown (an unbound name), which is enough to reject the statements that cannot
mean anything: calling a non-function, calling a function with too many arguments, or doing arithmetic on a function.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from texcalc.lang.environment import Environment
from texcalc.lang.error import (EmptyListNode, ExpectedFunction, InvalidCallArgumentCount, UncheckableExpression,
                                UnexpectedType)
from texcalc.pure.nodes import ClosureNode, ExprNode, PrototypeNode
from texcalc.pure.printer import to_tex
from texcalc.pure.visitor import Visitor


logger = logging.getLogger(__name__)


class Kind(Enum):
    NUMBER = "number"
    VARIABLE = "variable"
    FUNCTION = "function"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ValueType:
    """Classification of node. For functions, arity is the number of arguments still expected and bound holds the
    (parameter, ValueType) pairs that currying already supplied.
    """
    kind: Kind
    node: ExprNode = field(compare=False)
    arity: int = 0
    bound: tuple = field(default=(), compare=False)

    def __str__(self):
        if self.kind is Kind.FUNCTION:
            return f"{self.kind.value}({to_tex(self.node, inline=True)}, {self.arity})"
        return f"{self.kind.value}({to_tex(self.node, inline=True)})"


def describe(item):
    return str(item) if isinstance(item, ValueType) else to_tex(item, inline=True)


class TypeChecker(Visitor):
    """Classifies statements, keeping track of what every bound name classifies as across statements."""

    def __init__(self, environment=None):
        self.environment = environment if environment is not None else Environment(describe)

    def check(self, node):
        """Returns node's ValueType or raises a TypeCheckError."""
        value_type = self.visit(node)
        logger.debug("%s: %s", to_tex(node, inline=True), value_type)
        return value_type

    def visit_number(self, node):
        return ValueType(Kind.NUMBER, node)

    def visit_variable(self, node):
        value_type = self.environment.lookup(node)
        return value_type if value_type is not None else ValueType(Kind.UNKNOWN, node)

    def visit_unary_op(self, node):
        operand = self.visit(node.operand)
        # unbound names and functions are rejected
        if operand.kind in (Kind.NUMBER, Kind.VARIABLE):
            return ValueType(operand.kind, node)
        raise UnexpectedType(node.operand.token or node.token, operand)

    def visit_binary_op(self, node):
        lhs, rhs = self.visit(node.lhs), self.visit(node.rhs)
        for operand, value_type in ((node.lhs, lhs), (node.rhs, rhs)):
            if value_type.kind is Kind.FUNCTION:
                raise UnexpectedType(operand.token or node.token, value_type)
        return ValueType(Kind.NUMBER, node)

    def visit_let(self, node):
        value_type = self.visit(node.value)
        self.environment.set(node.variable, value_type)
        return value_type

    def visit_function(self, node):
        value_type = ValueType(Kind.FUNCTION, node, node.arity)
        self.environment.set(node.name, value_type)
        return value_type

    def visit_closure(self, node):
        return self.visit_function(node)

    def visit_call(self, node):
        callee = self.visit(node.callee)
        if callee.kind is not Kind.FUNCTION:
            raise ExpectedFunction(node.token, callee)

        function = callee.node
        parameters = function.prototype.parameters
        given = len(node.arguments)
        if given > callee.arity:
            raise InvalidCallArgumentCount(node.token, given, callee.arity)

        arguments = self.visit_all(node.arguments)  # in the caller's scope
        bound = callee.bound + tuple(zip(parameters, arguments))

        if given == callee.arity:
            with self.environment.scope():
                for parameter, argument in bound:
                    self.environment.set(parameter, argument)
                return self.visit(function.body)

        # curried: what is left is a function of the remaining parameters
        remaining = parameters[given:]
        closure = ClosureNode(PrototypeNode(function.name, remaining, token=function.prototype.token), function.body,
                              token=node.token)
        return ValueType(Kind.FUNCTION, closure, len(remaining), bound)

    def visit_children(self, node):
        """Classifies every child; a container classifies as its last child."""
        if not node.children:
            raise EmptyListNode(node.token)
        return self.visit_all(node.children)[-1]

    def visit_braced(self, node):
        return self.visit_children(node)

    def visit_tex(self, node):
        return self.visit_children(node)

    def visit_tex_list(self, node):
        return self.visit_children(node)

    def visit_prototype(self, node):
        raise UncheckableExpression(node.token)

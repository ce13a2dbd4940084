"""Evaluation of texcalc statements. Evaluating never fails on something symbolic: whatever can be computed is folded
into a number and everything else is rebuilt around the folded parts, so "(4 + 1)(x + 2)" evaluates to "5(x + 2)".

Calling a function with fewer arguments than it has parameters curries it. The supplied arguments are substituted into
a copy of the body, which makes the resulting closure a self-contained value: printing or calling it later never looks
anything up in the environment it was created in.
"""

import logging

from texcalc.lang.environment import Environment
from texcalc.lang.error import IncorrectArgumentCount, InvalidOperator, UnhandledExpression
from texcalc.lang.numerical import apply_binary, apply_unary
from texcalc.pure.lexer import EQUAL
from texcalc.pure.nodes import (BinaryOpNode, CallNode, ClosureNode, FunctionNode, LetNode, NumberNode, PrototypeNode,
                                UnaryOpNode, VariableNode)
from texcalc.pure.printer import to_tex
from texcalc.pure.visitor import IdentityVisitor, SubstitutionVisitor


logger = logging.getLogger(__name__)


class Interpreter(IdentityVisitor):
    """Evaluates statements against an environment that persists between them. Containers (brace groups, unknown
    macros, \\begin...\\end lists) are rebuilt from their evaluated children, as IdentityVisitor does.
    """
    ANONYMOUS = "anon{}"

    def __init__(self, environment=None):
        self.environment = environment if environment is not None else Environment(lambda node: to_tex(node, True))
        self.anonymous = 0

    def evaluate(self, node):
        """Returns the value of node. Raises an InterpreterError if node cannot be evaluated."""
        value = self.visit(node)
        logger.debug("%s evaluated to %s", to_tex(node, inline=True), to_tex(value, inline=True))
        return value

    def is_function(self, variable):
        """Whether variable is currently bound to a function (or closure)."""
        return isinstance(self.environment.lookup(variable), FunctionNode)

    def fresh_name(self, token):
        name = VariableNode(Interpreter.ANONYMOUS.format(self.anonymous), token=token)
        self.anonymous += 1
        return name

    def visit_number(self, node):
        return node

    def visit_variable(self, node):
        value = self.environment.lookup(node)
        return value if value is not None else node

    def visit_unary_op(self, node):
        operand = self.visit(node.operand)
        if isinstance(operand, FunctionNode):
            raise InvalidOperator(node.token)
        elif isinstance(operand, NumberNode):
            return apply_unary(node.op, operand, token=node.token)
        return UnaryOpNode(node.op, operand, token=node.token)

    def visit_binary_op(self, node):
        lhs, rhs = self.visit(node.lhs), self.visit(node.rhs)
        if isinstance(lhs, FunctionNode) or isinstance(rhs, FunctionNode):
            raise InvalidOperator(node.token)

        # an equation is kept as it is, never decided
        if isinstance(lhs, NumberNode) and isinstance(rhs, NumberNode) and node.op != EQUAL:
            folded = apply_binary(node.op, lhs, rhs, token=node.token)
            if folded is not None:
                return folded
            logger.debug("%s %s %s is undefined, leaving it symbolic", lhs.string, node.op.raw, rhs.string)

        return BinaryOpNode(node.op, lhs, rhs, token=node.token)

    def visit_prototype(self, node):
        raise UnhandledExpression(node.token)

    def visit_function(self, node):
        self.environment.set(node.name, node)
        logger.debug("bound function %s", to_tex(node.prototype))
        return node

    def visit_closure(self, node):
        return self.visit_function(node)

    def visit_let(self, node):
        value = self.visit(node.value)
        if isinstance(value, FunctionNode):
            value = value.renamed(node.variable)
            self.environment.set(node.variable, value)
            return value

        self.environment.set(node.variable, value)
        logger.debug("bound %s to %s", to_tex(node.variable), to_tex(value, inline=True))
        return LetNode(node.variable, value, token=node.token)

    def visit_call(self, node):
        arguments = self.visit_all(node.arguments)
        function = self.environment.lookup(node.callee)
        if not isinstance(function, FunctionNode):
            return CallNode(node.callee, arguments, token=node.token)

        parameters = function.prototype.parameters
        given, expected = len(arguments), len(parameters)
        if given > expected:
            raise IncorrectArgumentCount(node.token, given, expected)

        if given == expected:
            with self.environment.scope():
                for parameter, argument in zip(parameters, arguments):
                    self.environment.set(parameter, argument)
                return self.visit(function.body)

        return self.curry(function, arguments, node.token)

    def curry(self, function, arguments, token):
        """Returns a closure of function's remaining parameters, with arguments substituted for the first ones. A
        remaining parameter whose name occurs in one of the arguments is renamed, so that the argument keeps referring
        to whatever it referred to at the call.
        """
        name = self.fresh_name(token)
        closed = tuple(zip(function.prototype.parameters, arguments))

        parameters, renamed = [], []
        for parameter in function.prototype.parameters[len(arguments):]:
            if any(argument.mentions(parameter) for argument in arguments):
                fresh = self.fresh_name(parameter.token)
                renamed.append((parameter, fresh))
                parameter = fresh
            parameters.append(parameter)

        # a single pass, so substituted arguments are never renamed themselves
        body = SubstitutionVisitor(closed + tuple(renamed)).visit(function.body)

        prototype = PrototypeNode(name, tuple(parameters), token=token)
        closure = ClosureNode(prototype, body, function.closed + closed, token=token)
        logger.debug("curried %s into %s", to_tex(function.prototype), to_tex(closure, inline=True))
        return closure

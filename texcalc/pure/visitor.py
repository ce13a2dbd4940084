"""Visitors over texcalc expression trees.

A Visitor has one visit_* method per node kind and maps a node to a result of its own choosing: another tree
(IdentityVisitor and everything built on it), a string (PrintVisitor), a classification (TypeChecker) or a value
(Interpreter). Children are visited by calling the same visitor on them, so a subclass only overrides the node kinds it
cares about and leaves the rest to its superclass.

IdentityVisitor is the baseline for tree-to-tree passes: it rebuilds every node from its visited children, i.e. it
returns a faithful deep copy. A rewrite is written as an IdentityVisitor subclass that overrides a few cases and falls
through to super() for everything else.
"""

from abc import ABC, abstractmethod

from texcalc.pure.nodes import (BinaryOpNode, BracedNode, CallNode, ClosureNode, FunctionNode, LetNode, NumberNode,
                                PrototypeNode, TexListNode, TexNode, UnaryOpNode, VariableNode)


class Visitor(ABC):
    """Superclass for anything that walks an expression tree."""

    def visit(self, node):
        """Entry point: dispatches node to the matching visit_* method."""
        return node.accept(self)

    def visit_all(self, nodes):
        """Visits every node in nodes, in order, and returns the results as a tuple."""
        return tuple(self.visit(node) for node in nodes)

    @abstractmethod
    def visit_number(self, node):
        ...

    @abstractmethod
    def visit_variable(self, node):
        ...

    @abstractmethod
    def visit_unary_op(self, node):
        ...

    @abstractmethod
    def visit_binary_op(self, node):
        ...

    @abstractmethod
    def visit_braced(self, node):
        ...

    @abstractmethod
    def visit_tex(self, node):
        ...

    @abstractmethod
    def visit_tex_list(self, node):
        ...

    @abstractmethod
    def visit_prototype(self, node):
        ...

    @abstractmethod
    def visit_function(self, node):
        ...

    @abstractmethod
    def visit_closure(self, node):
        ...

    @abstractmethod
    def visit_call(self, node):
        ...

    @abstractmethod
    def visit_let(self, node):
        ...


class IdentityVisitor(Visitor):
    """Deep copy: rebuilds every node from its visited children."""

    def visit_number(self, node):
        return NumberNode(node.string, token=node.token)

    def visit_variable(self, node):
        return VariableNode(node.name, self.visit_all(node.subscripts), token=node.token)

    def visit_unary_op(self, node):
        return UnaryOpNode(node.op, self.visit(node.operand), token=node.token)

    def visit_binary_op(self, node):
        return BinaryOpNode(node.op, self.visit(node.lhs), self.visit(node.rhs), token=node.token)

    def visit_braced(self, node):
        return BracedNode(self.visit_all(node.expressions), token=node.token)

    def visit_tex(self, node):
        return TexNode(node.name, self.visit_all(node.arguments), token=node.token)

    def visit_tex_list(self, node):
        return TexListNode(node.name, node.arguments, self.visit_all(node.statements), token=node.token)

    def visit_prototype(self, node):
        return PrototypeNode(self.visit(node.name), self.visit_all(node.parameters), token=node.token)

    def visit_function(self, node):
        return FunctionNode(self.visit(node.prototype), self.visit(node.body), node.closed, token=node.token)

    def visit_closure(self, node):
        return ClosureNode(self.visit(node.prototype), self.visit(node.body), node.closed, token=node.token)

    def visit_call(self, node):
        return CallNode(self.visit(node.callee), self.visit_all(node.arguments), token=node.token)

    def visit_let(self, node):
        return LetNode(self.visit(node.variable), self.visit(node.value), token=node.token)


class AnonymousVisitor(IdentityVisitor):
    """Applies a one-off rule: rule(node) returns a replacement for node, or None to leave node to IdentityVisitor
    (whose children are then visited with this visitor again, so the rule applies throughout the tree).
    """

    def __init__(self, rule):
        self.rule = rule

    def visit(self, node):
        replacement = self.rule(node)
        if replacement is not None:
            return replacement
        return super().visit(node)


class SubstitutionVisitor(AnonymousVisitor):
    """Replaces every variable structurally equal to one of bindings' keys with the bound expression. The parameter
    list of a prototype is left alone, only the places where a variable is used are replaced.
    """

    def __init__(self, bindings):
        self.bindings = dict(bindings)
        super().__init__(lambda node: self.bindings.get(node) if isinstance(node, VariableNode) else None)

    def visit_prototype(self, node):
        return node


class SwapBinaryVisitor(IdentityVisitor):
    """Swaps the operands of every binary operator, all the way down."""

    def visit_binary_op(self, node):
        return BinaryOpNode(node.op, self.visit(node.rhs), self.visit(node.lhs), token=node.token)

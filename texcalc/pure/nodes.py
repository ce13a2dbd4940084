"""Expression tree for texcalc formulas.

Nodes are frozen dataclasses: a tree is never mutated, every transformation builds a new one, so any number of visitors
can be applied to the same parsed tree. Every node keeps the token that introduced it for error reporting, but tokens
take no part in equality: two nodes are equal iff they are structurally equal.

Each node dispatches to its own visit_* method of a Visitor (see visitor.py) through accept.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal

from texcalc.pure.lexer import Token


def _token():
    return field(default=None, compare=False, repr=False, kw_only=True)


class ExprNode(ABC):
    """Superclass of every node in a texcalc expression tree."""
    token: Token

    @abstractmethod
    def accept(self, visitor):
        """Calls the visitor method for this node kind and returns its result."""

    @property
    def children(self):
        """Direct sub-expressions, in order."""
        return ()

    def matches(self, other):
        """Structural equality, ignoring how numbers are spelled ("2" matches "2.0")."""
        if type(self) is not type(other) or len(self.children) != len(other.children):
            return False
        return all(child.matches(other_child) for child, other_child in zip(self.children, other.children))

    def mentions(self, variable):
        """Whether variable occurs anywhere in this tree, subscripts included."""
        return self.matches(variable) or any(child.mentions(variable) for child in self.children)


@dataclass(frozen=True)
class NumberNode(ExprNode):
    string: str
    token: Token = _token()

    @property
    def value(self):
        return Decimal(self.string)

    @property
    def fractional_digits(self):
        """Digits after the decimal point as written, so "2.50" keeps its two digits when printed back."""
        if "." not in self.string:
            return 0
        return len(self.string) - self.string.index(".") - 1

    def matches(self, other):
        return isinstance(other, NumberNode) and self.value == other.value

    def accept(self, visitor):
        return visitor.visit_number(self)


@dataclass(frozen=True)
class VariableNode(ExprNode):
    name: str
    subscripts: tuple = ()
    token: Token = _token()

    @property
    def children(self):
        return self.subscripts

    def matches(self, other):
        return isinstance(other, VariableNode) and self.name == other.name and super().matches(other)

    def accept(self, visitor):
        return visitor.visit_variable(self)


@dataclass(frozen=True)
class UnaryOpNode(ExprNode):
    op: object
    operand: ExprNode
    token: Token = _token()

    @property
    def children(self):
        return (self.operand,)

    def matches(self, other):
        return isinstance(other, UnaryOpNode) and self.op == other.op and self.operand.matches(other.operand)

    def accept(self, visitor):
        return visitor.visit_unary_op(self)


@dataclass(frozen=True)
class BinaryOpNode(ExprNode):
    op: object
    lhs: ExprNode
    rhs: ExprNode
    token: Token = _token()

    @property
    def children(self):
        return (self.lhs, self.rhs)

    def matches(self, other):
        return isinstance(other, BinaryOpNode) and self.op == other.op and super().matches(other)

    def accept(self, visitor):
        return visitor.visit_binary_op(self)


@dataclass(frozen=True)
class BracedNode(ExprNode):
    """A brace group {...}. Macros consume these through unwrap."""
    expressions: tuple
    token: Token = _token()

    @property
    def children(self):
        return self.expressions

    def unwrap(self):
        """None if empty, the only child if there is exactly one, else the group itself."""
        if not self.expressions:
            return None
        elif len(self.expressions) == 1:
            return self.expressions[0]
        return self

    def accept(self, visitor):
        return visitor.visit_braced(self)


@dataclass(frozen=True)
class TexNode(ExprNode):
    """Any macro the parser has no production for, kept with its brace groups: \\name{...}{...}."""
    name: str
    arguments: tuple
    token: Token = _token()

    @property
    def children(self):
        return self.arguments

    def matches(self, other):
        return isinstance(other, TexNode) and self.name == other.name and super().matches(other)

    def accept(self, visitor):
        return visitor.visit_tex(self)


@dataclass(frozen=True)
class TexListNode(ExprNode):
    """\\begin{name}{args...} statements \\end{name}. arguments holds the raw text of every leading brace group, the
    first of which is the name.
    """
    name: str
    arguments: tuple
    statements: tuple
    token: Token = _token()

    @property
    def children(self):
        return self.statements

    def matches(self, other):
        return isinstance(other, TexListNode) and self.name == other.name and super().matches(other)

    def accept(self, visitor):
        return visitor.visit_tex_list(self)


@dataclass(frozen=True)
class PrototypeNode(ExprNode):
    """Name and parameters of a function: f(x, y)."""
    name: VariableNode
    parameters: tuple
    token: Token = _token()

    @property
    def children(self):
        return self.parameters

    @property
    def arity(self):
        return len(self.parameters)

    def matches(self, other):
        return isinstance(other, PrototypeNode) and self.name.matches(other.name) and super().matches(other)

    def accept(self, visitor):
        return visitor.visit_prototype(self)


@dataclass(frozen=True)
class FunctionNode(ExprNode):
    """A function definition. closed holds (parameter, argument) pairs that were already substituted into body by
    currying, so it is empty for a function that came straight out of \\func.
    """
    prototype: PrototypeNode
    body: ExprNode
    token: Token = _token()
    closed: tuple = ()

    @property
    def name(self):
        return self.prototype.name

    @property
    def arity(self):
        return self.prototype.arity

    @property
    def children(self):
        return (self.prototype, self.body)

    def renamed(self, name):
        """This function under a different name."""
        prototype = PrototypeNode(name, self.prototype.parameters, token=self.prototype.token)
        return type(self)(prototype, self.body, self.closed, token=self.token)

    def accept(self, visitor):
        return visitor.visit_function(self)


@dataclass(frozen=True)
class ClosureNode(FunctionNode):
    """A partially applied function: what is left of a function once some of its parameters were bound."""

    def accept(self, visitor):
        return visitor.visit_closure(self)


@dataclass(frozen=True)
class CallNode(ExprNode):
    callee: VariableNode
    arguments: tuple
    token: Token = _token()

    @property
    def children(self):
        return (self.callee,) + self.arguments

    def accept(self, visitor):
        return visitor.visit_call(self)


@dataclass(frozen=True)
class LetNode(ExprNode):
    """\\let{variable}{value}."""
    variable: VariableNode
    value: ExprNode
    token: Token = _token()

    @property
    def children(self):
        return (self.variable, self.value)

    def accept(self, visitor):
        return visitor.visit_let(self)

"""Renders expression trees back into TeX-flavoured texcalc source.

Parentheses are only inserted where flattening would change the meaning: a child binary operator is wrapped when it
binds looser than its parent, or as tightly on the right of a non-associative operator. Implicit multiplication is
written as plain juxtaposition, except when that would glue two numbers together.
"""

from texcalc.lang.numerical import render
from texcalc.pure.lexer import Symbol
from texcalc.pure.nodes import BinaryOpNode, LetNode, NumberNode, UnaryOpNode
from texcalc.pure.visitor import Visitor


# a sign binds tighter than * and / but looser than ^
UNARY_PRECEDENCE = (Symbol.PRECEDENCE["*"] + Symbol.PRECEDENCE["^"]) // 2


class PrintVisitor(Visitor):
    """Turns a tree into a string. inline writes fractions as a / b instead of \\frac{a}{b}; ignore_subscripts drops
    the subscripts of every variable.
    """
    ALIGNED = ("aligned", "align", "eqnarray", "eqalign", "split")

    def __init__(self, inline=False, ignore_subscripts=False):
        self.inline = inline
        self.ignore_subscripts = ignore_subscripts

    def visit_number(self, node):
        return render(node.value, node.fractional_digits)

    def visit_variable(self, node):
        if self.ignore_subscripts or not node.subscripts:
            return node.name
        return node.name + "_{" + ",".join(self.visit_all(node.subscripts)) + "}"

    def visit_unary_op(self, node):
        operand = self.visit(node.operand)
        if self.precedence(node.operand) < Symbol.PRECEDENCE["^"]:
            operand = f"({operand})"
        return node.op.raw + operand

    def visit_binary_op(self, node):
        lhs, rhs = self.visit(node.lhs), self.visit(node.rhs)
        if node.op.implicit:
            return self.juxtapose(node, lhs, rhs)
        elif node.op.raw == "/" and not self.inline:
            return "\\frac{" + lhs + "}{" + rhs + "}"

        if self.wraps(node, node.lhs, right=False):
            lhs = f"({lhs})"
        if self.wraps(node, node.rhs, right=True):
            rhs = f"({rhs})"

        if node.op.raw == "^":
            return f"{lhs}^{rhs}"
        return f"{lhs} {node.op.raw} {rhs}"

    def juxtapose(self, node, lhs, rhs):
        """Implicit multiplication: 2x, x(y + 1), (1)(2)."""
        if isinstance(node.lhs, NumberNode) and isinstance(node.rhs, NumberNode):
            return f"({lhs})({rhs})"

        if self.wraps(node, node.lhs, right=False):
            lhs = f"({lhs})"

        if self.wraps(node, node.rhs, right=True) or not (rhs[0].isalnum() or rhs[0] == "("):
            rhs = f"({rhs})"
        elif rhs[0].isdigit() and (lhs[-1].isdigit() or lhs[-1] == "."):
            rhs = f"({rhs})"
        return lhs + rhs

    def precedence(self, node):
        if isinstance(node, BinaryOpNode) and node.op.raw == "/" and not self.inline:
            return float("inf")  # \frac{}{} groups itself
        elif isinstance(node, BinaryOpNode):
            return node.op.precedence
        elif isinstance(node, UnaryOpNode):
            return UNARY_PRECEDENCE
        return float("inf")

    def wraps(self, parent, child, right):
        """Whether child must be parenthesised as the left (or right) operand of parent."""
        if isinstance(child, UnaryOpNode):
            # a sign can start any right operand
            return not right and parent.op.precedence > UNARY_PRECEDENCE

        child_precedence = self.precedence(child)
        if child_precedence != parent.op.precedence:
            return child_precedence < parent.op.precedence
        return right and not (parent.op.is_associative and child.op.is_associative)

    def visit_braced(self, node):
        return "{ " + " ".join(self.visit_all(node.expressions)) + " }"

    def visit_tex(self, node):
        return node.name + "".join(self.visit_all(node.arguments))

    def visit_tex_list(self, node):
        begin = "\\begin{" + node.name + "}" + "".join("{" + argument + "}" for argument in node.arguments[1:])
        end = "\\end{" + node.name + "}"

        aligned = node.name in PrintVisitor.ALIGNED
        lines = []
        for statement in node.statements:
            if aligned and isinstance(statement, LetNode):
                lines.append(self.let(statement, "&="))
            else:
                lines.append(self.visit(statement))

        if not lines:
            return begin + "\n" + end
        return begin + "\n" + " \\\\\n".join(lines) + "\n" + end

    def visit_prototype(self, node):
        return self.visit(node.name) + "(" + ", ".join(self.visit_all(node.parameters)) + ")"

    def visit_function(self, node):
        return self.visit(node.prototype) + " = " + self.visit(node.body)

    def visit_closure(self, node):
        return self.visit_function(node)

    def visit_call(self, node):
        return self.visit(node.callee) + "(" + ", ".join(self.visit_all(node.arguments)) + ")"

    def visit_let(self, node):
        return self.let(node, "=")

    def let(self, node, equals):
        return f"{self.visit(node.variable)} {equals} {self.visit(node.value)}"


def to_tex(node, inline=False, ignore_subscripts=False):
    """Shortcut for PrintVisitor(inline, ignore_subscripts).visit(node)."""
    return PrintVisitor(inline, ignore_subscripts).visit(node)

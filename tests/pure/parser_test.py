import unittest

from texcalc.lang import error
from texcalc.pure.lexer import DIV, EQUAL, EXP, IMPLICIT_MULT, MINUS, MULT, PLUS, tokenize
from texcalc.pure.nodes import (BinaryOpNode, BracedNode, CallNode, FunctionNode, LetNode, NumberNode, PrototypeNode,
                                TexListNode, TexNode, UnaryOpNode, VariableNode)
from texcalc.pure.parser import Parser, parse


def var(name, *subscripts):
    return VariableNode(name, tuple(subscripts))


def num(string):
    return NumberNode(string)


x, y, z = var("x"), var("y"), var("z")


def parse_source(source, functions=None):
    tokens, __ = tokenize(source)
    return parse(tokens, functions)


class ParserTestCase(unittest.TestCase):

    def test_expressions(self):
        cases = {
            "x": x,
            "2.50": num("2.50"),
            "x + y * z": BinaryOpNode(PLUS, x, BinaryOpNode(MULT, y, z)),
            "(x + y) * z": BinaryOpNode(MULT, BinaryOpNode(PLUS, x, y), z),
            "x - y - z": BinaryOpNode(MINUS, BinaryOpNode(MINUS, x, y), z),
            "x = y + 1": BinaryOpNode(EQUAL, x, BinaryOpNode(PLUS, y, num("1"))),
            "x ^ 2 * y": BinaryOpNode(MULT, BinaryOpNode(EXP, x, num("2")), y),
            "\\frac{x}{y + 1}": BinaryOpNode(DIV, x, BinaryOpNode(PLUS, y, num("1"))),
        }
        for case, expected in cases.items():
            statements, errors = parse_source(case)
            self.assertEqual([], errors, case)
            self.assertEqual([expected], statements, case)

    def test_implicit_multiplication(self):
        cases = {
            "2x": BinaryOpNode(IMPLICIT_MULT, num("2"), x),
            "(x + y)(x - y)": BinaryOpNode(IMPLICIT_MULT, BinaryOpNode(PLUS, x, y), BinaryOpNode(MINUS, x, y)),
            "x y z": BinaryOpNode(IMPLICIT_MULT, BinaryOpNode(IMPLICIT_MULT, x, y), z),
            "x + 2y": BinaryOpNode(PLUS, x, BinaryOpNode(IMPLICIT_MULT, num("2"), y)),
            "2x^2": BinaryOpNode(IMPLICIT_MULT, num("2"), BinaryOpNode(EXP, x, num("2"))),
            "f(2)": BinaryOpNode(IMPLICIT_MULT, var("f"), num("2")),
        }
        for case, expected in cases.items():
            statements, errors = parse_source(case)
            self.assertEqual([], errors, case)
            self.assertEqual([expected], statements, case)

        # the flag survives parsing, even though it takes no part in equality
        statements, __ = parse_source("2x")
        self.assertTrue(statements[0].op.implicit)

    def test_unary(self):
        cases = {
            "-x": UnaryOpNode(MINUS, x),
            "-x^2": UnaryOpNode(MINUS, BinaryOpNode(EXP, x, num("2"))),
            "-2x": BinaryOpNode(IMPLICIT_MULT, UnaryOpNode(MINUS, num("2")), x),
            "2 * -100": BinaryOpNode(MULT, num("2"), UnaryOpNode(MINUS, num("100"))),
            "x^-1": BinaryOpNode(EXP, x, UnaryOpNode(MINUS, num("1"))),
            "x - -y": BinaryOpNode(MINUS, x, UnaryOpNode(MINUS, y)),
        }
        for case, expected in cases.items():
            statements, errors = parse_source(case)
            self.assertEqual([], errors, case)
            self.assertEqual([expected], statements, case)

    def test_subscripts(self):
        cases = {
            "x_1": var("x", num("1")),
            "x_i": var("x", var("i")),
            "x_{i,j}": var("x", var("i"), var("j")),
            "x_{y}_2": var("x", y, num("2")),
            "p_{0x}": var("p", BinaryOpNode(IMPLICIT_MULT, num("0"), x)),
            "x_i y": BinaryOpNode(IMPLICIT_MULT, var("x", var("i")), y),
        }
        for case, expected in cases.items():
            statements, errors = parse_source(case)
            self.assertEqual([], errors, case)
            self.assertEqual([expected], statements, case)

    def test_macros(self):
        cases = {
            "\\let{x}{2}": LetNode(x, num("2")),
            "\\let{x_1}{y + 1}": LetNode(var("x", num("1")), BinaryOpNode(PLUS, y, num("1"))),
            "\\func{f(x, y)}{x + y}": FunctionNode(PrototypeNode(var("f"), (x, y)), BinaryOpNode(PLUS, x, y)),
            "\\func{f()}{1}": FunctionNode(PrototypeNode(var("f"), ()), num("1")),
            "\\sqrt{x}": TexNode("\\sqrt", (BracedNode((x,)),)),
            "\\pi": TexNode("\\pi", ()),
            "\\begin{aligned}\\let{x}{2} \\\\ x + 1\\end{aligned}":
                TexListNode("aligned", ("aligned",), (LetNode(x, num("2")), BinaryOpNode(PLUS, x, num("1")))),
        }
        for case, expected in cases.items():
            statements, errors = parse_source(case)
            self.assertEqual([], errors, case)
            self.assertEqual([expected], statements, case)

    def test_statements(self):
        cases = {
            "x\n\ny": [x, y],
            "x \\\\ y": [x, y],
            "x\ny": [BinaryOpNode(IMPLICIT_MULT, x, y)],
            "\\let{x}{2} \\let{y}{3}": [LetNode(x, num("2")), LetNode(y, num("3"))],
            "\\let{x}{2} y": [LetNode(x, num("2")), y],
            "\n\n\n\nx\n\n\n\n": [x],
            "": [],
        }
        for case, expected in cases.items():
            statements, errors = parse_source(case)
            self.assertEqual([], errors, case)
            self.assertEqual(expected, statements, case)

    def test_calls(self):
        f = var("f")
        cases = {
            "\\func{f(x)}{x}\n\nf(2)": CallNode(f, (num("2"),)),
            "\\func{f(x, y)}{x}\n\nf(2, y + 1)": CallNode(f, (num("2"), BinaryOpNode(PLUS, y, num("1")))),
            "\\func{f()}{1}\n\nf()": CallNode(f, ()),
            "\\func{f(x)}{x}\n\n2f(x)": BinaryOpNode(IMPLICIT_MULT, num("2"), CallNode(f, (x,))),
            "\\let{h}{\\func{f(x)}{x}}\n\nh(1)": CallNode(var("h"), (num("1"),)),
        }
        for case, expected in cases.items():
            statements, errors = parse_source(case)
            self.assertEqual([], errors, case)
            self.assertEqual(expected, statements[-1], case)

        # a function name used without arguments is just a variable
        statements, __ = parse_source("\\func{f(x)}{x}\n\nf + 1")
        self.assertEqual(BinaryOpNode(PLUS, f, num("1")), statements[-1])

    def test_external_functions(self):
        statements, errors = parse_source("g(5)", functions=lambda variable: variable.name == "g")
        self.assertEqual([], errors)
        self.assertEqual([CallNode(var("g"), (num("5"),))], statements)

        statements, __ = parse_source("h(5)", functions=lambda variable: variable.name == "g")
        self.assertEqual([BinaryOpNode(IMPLICIT_MULT, var("h"), num("5"))], statements)

    def test_errors(self):
        cases = {
            "x + * y": error.UnexpectedToken,
            "\\end{a}": error.UnexpectedToken,
            "x $ y": error.UndefinedOperator,
            ")": error.ExpectedExpression,
            "\\frac{a}": error.InvalidArgumentCount,
            "\\frac{a}{}": error.InvalidArgumentCount,
            "\\frac{a}{b}{c}": error.InvalidArgumentCount,
            "\\let{x y}{2}": error.InvalidLetVariable,
            "\\let{2}{3}": error.InvalidLetVariable,
            "\\let{x}{}": error.InvalidLetValue,
            "\\let{x}{1 2}{3}": error.InvalidArgumentCount,
            "\\func{f(x)}{}": error.InvalidFunctionBody,
            "\\func{2(x)}{x}": error.ExpectedFunctionName,
            "\\func{f x}{x}": error.ExpectedCharacter,
            "\\func{f(x y)}{x}": error.ExpectedArgumentList,
            "\\func{f(x)}{x}\n\nf(1; 2)": error.ExpectedArgumentList,
            "\\begin{a} x \\end{b}": error.MismatchedName,
            "\\begin{a} x": error.UnendingList,
            "\\begin x": error.ExpectedArgumentList,
            "x_+": error.InvalidSubscript,
            "(x + 1": error.UnexpectedEOF,
            "x +": error.UnexpectedEOF,
            "x_": error.UnexpectedEOF,
        }
        for case, expected in cases.items():
            __, errors = parse_source(case)
            self.assertEqual([expected], [type(e) for e in errors], case)

    def test_error_recovery(self):
        statements, errors = parse_source("x + * y\n\nx + 7")
        self.assertEqual([BinaryOpNode(PLUS, x, num("7"))], statements)
        self.assertEqual(1, len(errors))

        token = errors[0].token
        self.assertIsInstance(errors[0], error.UnexpectedToken)
        self.assertEqual(("*", 1, 4, 4), (token.raw, token.line, token.col, token.loc))

        statements, errors = parse_source("\\frac{a}\n\n\\let{x}{2}\n\nx")
        self.assertEqual([error.InvalidArgumentCount], [type(e) for e in errors])
        self.assertEqual([LetNode(x, num("2")), x], statements)

    def test_statements_order(self):
        tokens, __ = tokenize("x\n\n)\n\ny")
        results = list(Parser(tokens).statements())

        self.assertEqual(3, len(results))
        self.assertEqual(x, results[0])
        self.assertIsInstance(results[1], error.ExpectedExpression)
        self.assertEqual(y, results[2])

    def test_missing_eof(self):
        tokens, __ = tokenize("x + 1")
        statements, errors = Parser(tokens[:-1]).parse()
        self.assertEqual([BinaryOpNode(PLUS, x, num("1"))], statements)
        self.assertEqual([], errors)


if __name__ == '__main__':
    unittest.main()

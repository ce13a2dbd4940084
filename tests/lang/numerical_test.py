import unittest
from decimal import Decimal

from texcalc.lang import numerical
from texcalc.pure.lexer import DIV, EXP, MINUS, MULT, PLUS
from texcalc.pure.nodes import NumberNode, VariableNode


def num(string):
    return NumberNode(string)


class NumericalTestCase(unittest.TestCase):

    def test_render(self):
        cases = {
            ("4", 0): "4",
            ("4", 2): "4.00",
            ("4.00", 0): "4",
            ("1.5625", 2): "1.5625",
            ("1E+3", 0): "1000",
            ("-0", 0): "0",
            ("-0.0", 1): "0.0",
            ("0.10", 1): "0.1",
        }
        for (value, digits), expected in cases.items():
            self.assertEqual(expected, numerical.render(Decimal(value), digits), (value, digits))

    def test_fractional_digits(self):
        cases = {"2": 0, "2.": 0, "2.5": 1, "2.500": 3}
        for case, expected in cases.items():
            self.assertEqual(expected, numerical.fractional_digits(case), case)

    def test_apply_binary(self):
        cases = {
            (PLUS, "2", "2.00"): "4.00",
            (PLUS, "0.1", "0.2"): "0.3",
            (MINUS, "2", "5"): "-3",
            (MULT, "2.5", "2"): "5.0",
            (MULT, "1.25", "1.25"): "1.5625",
            (DIV, "10", "4"): "2.5",
            (DIV, "1", "3"): "0.3333333333333333333333333333",
            (EXP, "2", "10"): "1024",
            (EXP, "4", "0.5"): "2.0",
        }
        for (op, lhs, rhs), expected in cases.items():
            result = numerical.apply_binary(op, num(lhs), num(rhs))
            self.assertEqual(num(expected), result, (lhs, op.raw, rhs))

    def test_undefined(self):
        should_fail = [(DIV, "1", "0"), (DIV, "0", "0"), (EXP, "-8", "0.5"), (EXP, "10", "1000000")]
        for op, lhs, rhs in should_fail:
            self.assertIsNone(numerical.apply_binary(op, num(lhs), num(rhs)), (lhs, op.raw, rhs))

    def test_apply_unary(self):
        cases = {(MINUS, "2"): "-2", (MINUS, "-2.50"): "2.50", (PLUS, "3"): "3", (MINUS, "0"): "0"}
        for (op, operand), expected in cases.items():
            self.assertEqual(num(expected), numerical.apply_unary(op, num(operand)), (op.raw, operand))

    def test_is_integer(self):
        should_pass = [num("2"), num("2.0"), num("-7"), num("0")]
        for case in should_pass:
            self.assertTrue(numerical.is_integer(case), case)

        should_fail = [num("2.5"), num("0.001"), VariableNode("x")]
        for case in should_fail:
            self.assertFalse(numerical.is_integer(case), case)


if __name__ == '__main__':
    unittest.main()

import unittest

from texcalc.lang import error
from texcalc.lang.session import Outcome, Runtime, run
from texcalc.pure.nodes import NumberNode
from texcalc.pure.printer import to_tex


class RuntimeTestCase(unittest.TestCase):

    def test_run(self):
        outcomes = run("\\func{f(x, y)}{x + y}\n\n\\let{g}{f(2)}\n\ng(5)")
        self.assertEqual(3, len(outcomes))
        self.assertTrue(all(outcome.success for outcome in outcomes))

        results = [to_tex(outcome.evaluated) for outcome in outcomes]
        self.assertEqual(["f(x, y) = x + y", "g(y) = 2 + y", "7"], results)

    def test_curried_argument_stays_free(self):
        outcomes = run("\\func{f(x, y)}{x + y}\n\n\\let{g}{f(y)}\n\ng(5)")
        results = [to_tex(outcome.evaluated, inline=True) for outcome in outcomes]
        self.assertEqual(["f(x, y) = x + y", "g(anon1) = y + anon1", "y + 5"], results)

    def test_unary_needs_bound_operand(self):
        outcomes = run("-x\n\n\\let{x}{2}\n\n-x")
        self.assertIsInstance(outcomes[0].error, error.UnexpectedType)
        self.assertEqual(NumberNode("-2"), outcomes[2].evaluated)

    def test_parsed(self):
        outcome, = run("\\let{x}{1 + 1}")
        self.assertEqual("x = 1 + 1", to_tex(outcome.parsed))
        self.assertEqual("x = 2", to_tex(outcome.evaluated))

    def test_bindings_persist(self):
        runtime = Runtime()
        runtime.run("\\func{f(x)}{2x}\n\n\\let{a}{4}")

        outcome, = runtime.run("f(a) + 1")
        self.assertEqual(NumberNode("9"), outcome.evaluated)
        self.assertEqual("f => f(x) = 2x\na => 4", str(runtime.environment))

    def test_separate_environments(self):
        runtime = Runtime()
        runtime.run("\\let{a}{4}")
        self.assertIsNot(runtime.environment, runtime.typechecker.environment)
        self.assertEqual(NumberNode("4"), runtime.environment.lookup(runtime.run("a")[0].parsed))

    def test_errors_do_not_stop(self):
        outcomes = run("x + * y\n\n1 + 1\n\n\\func{f(x)}{x}\n\nf(1, 2)\n\nf(3)")
        kinds = [outcome.error.kind if outcome.error else to_tex(outcome.evaluated) for outcome in outcomes]
        self.assertEqual(["UnexpectedToken", "2", "f(x) = x", "InvalidCallArgumentCount", "3"], kinds)

        self.assertIsNone(outcomes[0].parsed)
        self.assertIsNotNone(outcomes[3].parsed)
        self.assertIsNone(outcomes[3].evaluated)

    def test_type_errors_before_evaluation(self):
        runtime = Runtime()
        outcomes = runtime.run("\\func{f(x)}{x}\n\n\\let{a}{f + 1}\n\na")

        self.assertIsInstance(outcomes[1].error, error.UnexpectedType)
        # a failed statement binds nothing
        self.assertEqual("a", to_tex(outcomes[2].evaluated))

    def test_recursion(self):
        runtime = Runtime()
        outcomes = runtime.run("\\func{f(x)}{f(x)}\n\nf(1)\n\n1 + 2")

        self.assertFalse(outcomes[1].success)
        self.assertEqual(0, runtime.environment.depth)
        self.assertEqual(0, runtime.typechecker.environment.depth)
        self.assertEqual("maximum recursion depth exceeded while evaluating 'f'", outcomes[1].error.plain)
        self.assertEqual(NumberNode("3"), outcomes[2].evaluated)

    def test_outcome(self):
        self.assertTrue(Outcome().success)
        self.assertFalse(Outcome(error=error.GenericException("oops")).success)

    def test_empty(self):
        self.assertEqual([], run(""))
        self.assertEqual([], run("% nothing but a comment\n"))


if __name__ == '__main__':
    unittest.main()

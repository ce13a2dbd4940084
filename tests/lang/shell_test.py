import contextlib
import io
import re
import unittest

from texcalc.lang.error import ErrorHandler
from texcalc.lang.session import Runtime
from texcalc.lang.shell import Shell
from texcalc.pure.algebra import FoilVisitor


def plain(text):
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.handler = ErrorHandler()
        self.shell = Shell(Runtime(), self.handler)

    def lines(self, *lines):
        output = io.StringIO()
        with contextlib.redirect_stdout(output):
            for line in lines:
                self.shell.onecmd(line)
        return plain(output.getvalue())

    def test_statements(self):
        self.assertEqual("x = 2\n3\n", self.lines("\\let{x}{2}", "x + 1"))
        self.assertEqual("2\n5\n", self.lines("x \\\\ 5"))

    def test_continuation(self):
        self.assertEqual("", self.lines("\\func{f(x)}{"))
        self.assertEqual(Shell.secondary_prompt, self.shell.prompt)

        self.assertEqual("f(x) = x + 1\n", self.lines("x + 1}"))
        self.assertEqual("> ", self.shell.prompt)

        self.assertEqual("", self.lines("f(2) +\\"))
        self.assertEqual("4\n", self.lines("1"))

    def test_continues(self):
        should_pass = ["x +\\", "\\frac{a}{", "\\begin{aligned}{"]
        for case in should_pass:
            self.assertTrue(Shell.continues(case), case)

        should_fail = ["x + 1", "x \\\\", "\\frac{a}{b}", ""]
        for case in should_fail:
            self.assertFalse(Shell.continues(case), case)

    def test_errors_are_not_fatal(self):
        self.assertFalse(self.handler.fatal)

        printed = self.lines("x + * y", "1 + 1")
        self.assertIn("<in>:1:4: error: unexpected token '*'", printed)
        self.assertTrue(printed.endswith("2\n"))
        self.assertEqual(1, self.handler.errors)

    def test_foil(self):
        self.shell = Shell(Runtime(), self.handler, foil=FoilVisitor())
        self.assertEqual("(x + 1)(x + 2)\nxx + x2 + 1x + (1)(2)\n", self.lines("(x + 1)(x + 2)"))

    def test_env(self):
        self.lines("\\let{x}{2}")
        self.assertEqual("x => 2\n", self.lines("env"))

    def test_exit(self):
        self.assertTrue(self.shell.onecmd("exit"))
        self.assertEqual("", self.lines(""))


if __name__ == '__main__':
    unittest.main()

"""Session control for texcalc: runs whole documents (or single shell lines) statement by statement through the lexer,
parser, type checker and interpreter, keeping every binding for the statements that follow.
"""

import logging
from dataclasses import dataclass

from texcalc.lang.error import GenericException, ParseError
from texcalc.lang.interpreter import Interpreter
from texcalc.lang.typechecker import TypeChecker
from texcalc.pure.lexer import tokenize
from texcalc.pure.parser import Parser


logger = logging.getLogger(__name__)


@dataclass
class Outcome:
    """Result of a single statement: parsed and evaluated on success, error on failure. A statement that failed to
    parse has no parsed tree.
    """
    parsed: object = None
    evaluated: object = None
    error: GenericException = None

    @property
    def success(self):
        return self.error is None


class Runtime:
    """Governs a texcalc session. Each statement is type checked and evaluated before the next one is parsed, so that a
    statement can call any function bound by the statements before it.
    """

    def __init__(self):
        self.typechecker = TypeChecker()
        self.interpreter = Interpreter()

    @property
    def environment(self):
        """Bindings of evaluated values (the type checker keeps its own classifications)."""
        return self.interpreter.environment

    def statements(self, source):
        """Yields an Outcome per statement of source, in order. Errors never stop the statements that follow."""
        tokens, __ = tokenize(source)
        parser = Parser(tokens, functions=self.interpreter.is_function)

        for statement in parser.statements():
            if isinstance(statement, ParseError):
                yield Outcome(error=statement)
                continue

            yield self.execute(statement)

    def run(self, source):
        """Returns the list of Outcomes of every statement in source."""
        return list(self.statements(source))

    def execute(self, statement):
        """Type checks, then evaluates, a single parsed statement."""
        try:
            self.typechecker.check(statement)
            evaluated = self.interpreter.evaluate(statement)
        except GenericException as error:
            logger.debug("statement failed: %s", error.plain)
            return Outcome(parsed=statement, error=error)
        except RecursionError:
            # scopes of the abandoned calls may not all have been popped on the way out
            self.typechecker.environment.unwind()
            self.interpreter.environment.unwind()

            msg = "maximum recursion depth exceeded while evaluating '{}'"
            error = GenericException(msg, statement.token.raw if statement.token else "", token=statement.token)
            return Outcome(parsed=statement, error=error)

        return Outcome(parsed=statement, evaluated=evaluated)


def run(source):
    """Runs source in a fresh Runtime."""
    return Runtime().run(source)

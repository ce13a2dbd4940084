"""Error handling for texcalc. Every error a formula can produce is a GenericException subclass carrying the token that
triggered it: ParseErrors come out of the parser, TypeCheckErrors out of the type checker and InterpreterErrors out of
the interpreter. If another type of error makes it all the way to ErrorHandler, it is assumed to be an internal issue.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error message so that it can be used to throw a texcalc error. exprs are formatted (bolded) into
    msg, and exprs[0] should be the offending expr that caused the error.
    """

    def __init__(self, msg, exprs=None, diagnosis=True, internal=False, token=None):
        if exprs is None:
            exprs = token.raw if token is not None else ""
        if isinstance(exprs, str):
            exprs = [exprs]

        self.msg = msg.format(*(colored(str(expr), attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.plain = msg.format(*exprs)
        self.diagnosis = diagnosis
        self.internal = internal
        self.token = token

        super().__init__(self.plain)

    @property
    def kind(self):
        return type(self).__name__


class ParseError(GenericException):
    """Raised inside the parser. The parser records these per statement instead of propagating them."""
    message = "unexpected '{}'"

    def __init__(self, token, exprs=None):
        super().__init__(self.message, exprs=exprs, token=token)


class UnexpectedToken(ParseError):
    message = "unexpected token '{}'"


class UndefinedOperator(ParseError):
    message = "'{}' is not a defined operator"


class ExpectedCharacter(ParseError):
    message = "expected '{1}' but found '{0}'"

    def __init__(self, char, token):
        self.char = char
        super().__init__(token, exprs=[token.raw, char])


class ExpectedExpression(ParseError):
    message = "expected an expression but found '{}'"


class ExpectedArgumentList(ParseError):
    message = "expected ',' or ')' in the argument list but found '{}'"


class ExpectedFunctionName(ParseError):
    message = "expected a function name but found '{}'"


class MismatchedName(ParseError):
    message = "'{}' closes a list opened with a different name"


class UnendingList(ParseError):
    message = "'{}' is never closed by a matching \\end"


class InvalidArgumentCount(ParseError):
    message = "'{}' has the wrong number of arguments"


class InvalidFunctionBody(ParseError):
    message = "the function defined at '{}' needs a single expression as its body"


class InvalidSubscript(ParseError):
    message = "'{}' is not a valid subscript"


class InvalidLetVariable(ParseError):
    message = "'{}' needs a single variable to bind"


class InvalidLetValue(ParseError):
    message = "'{}' needs a single expression as its value"


class UnexpectedEOF(ParseError):
    message = "unexpected end of input"


class TypeCheckError(GenericException):
    """Raised by the type checker. given is the ValueType found where something else was needed, if any."""
    message = "'{}' does not type check"

    def __init__(self, token, given=None):
        self.given = given
        super().__init__(self.message, token=token)


class ExpectedFunction(TypeCheckError):
    message = "'{}' is called but is not a function"


class UnexpectedType(TypeCheckError):
    message = "'{}' cannot be used as an operand here"


class EmptyListNode(TypeCheckError):
    message = "'{}' contains nothing to check"


class UncheckableExpression(TypeCheckError):
    message = "'{}' cannot be type checked"


class InvalidCallArgumentCount(TypeCheckError):
    message = "'{}' takes {} argument(s) but was called with {}"

    def __init__(self, token, given, expected):
        self.given = given
        self.expected = expected
        GenericException.__init__(self, self.message, exprs=[token.raw, expected, given], token=token)


class InterpreterError(GenericException):
    """Raised by the interpreter."""
    message = "'{}' cannot be evaluated"

    def __init__(self, token):
        super().__init__(self.message, token=token)


class UnhandledExpression(InterpreterError):
    message = "'{}' cannot be evaluated"


class InvalidOperator(InterpreterError):
    message = "'{}' cannot be applied here"


class IncorrectArgumentCount(InterpreterError):
    message = "'{}' takes {} argument(s) but was called with {}"

    def __init__(self, token, given, expected):
        self.given = given
        self.expected = expected
        GenericException.__init__(self, self.message, exprs=[token.raw, expected, given], token=token)


class ErrorHandler:
    """Context manager that reports texcalc errors and turns any other Python error into an internal texcalc error."""
    COLOR = "red"

    def __init__(self, fatal=True, path="<in>"):
        self.fatal = fatal
        self.path = path
        self.lines = []
        self.errors = 0

    def register_source(self, source, path=None):
        """Registers the source that the tokens of subsequent errors point into."""
        if path is not None:
            self.path = path
        self.lines = source.split("\n")

    @staticmethod
    def diagnose(line, start, end):
        """Returns line with line[start:end] highlighted and underlined."""
        color = ErrorHandler.COLOR

        end = max(end, start + 1)
        diagnosis = "  " + line[:start]
        diagnosis += colored(line[start:end], color, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), color, attrs=["bold"])

        return diagnosis

    def format(self, error):
        """Returns the printable report for error: location, message and (if possible) the highlighted source line."""
        color = ErrorHandler.COLOR
        token = error.token

        location = self.path
        if token is not None:
            location += f":{token.line}:{token.col}"

        error_msg = colored(f"{location}: ", attrs=["bold"])
        if error.internal:
            error_msg += colored("[internal] ", color, attrs=["bold"])
        error_msg += colored("error: ", color, attrs=["bold"]) + error.msg

        if not error.internal and error.diagnosis and token is not None and 0 < token.line <= len(self.lines):
            width = len(token.raw.split("\n")[0])
            error_msg += "\n" + ErrorHandler.diagnose(self.lines[token.line - 1], token.col, token.col + width)

        return error_msg

    def throw(self, error):
        """Prints error. Exits if this handler is fatal."""
        self.errors += 1
        print(self.format(error))

        if self.fatal:
            sys.exit(1)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum recursion depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException("unknown error: '{}'", f"{exc_type.__name__}: {exc_val}", internal=True))
            do_exit = True

        return not do_exit

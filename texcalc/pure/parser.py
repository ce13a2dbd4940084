r"""Recursive-descent parser for texcalc formulas. Binary operators are parsed by precedence climbing over the table in
Symbol.PRECEDENCE; two primaries with nothing between them are joined by an implicit multiplication.

The statement grammar on top of the token grammar in lexer.py:

```
<statement>  ::= <expr> (<eol> | <eof>)
<expr>       ::= <primary> (<operator>? <primary>)*     ; no operator: implicit multiplication
<primary>    ::= <macro> | <unary> | <variable> | <call> | <number> | "(" <expr> ")"
<unary>      ::= ("+" | "-") <primary> ("^" <primary>)*
<variable>   ::= <identifier> ("_" (<braced> | <identifier> | <number>))*
<call>       ::= <variable> "(" (<expr> ("," <expr>)*)? ")"  ; only for names known to be functions

<macro>      ::= "\frac" <braced> <braced>
               | "\let" "{" <variable> "}" <braced>
               | "\func" "{" <variable> "(" (<variable> ("," <variable>)*)? ")" "}" <braced>
               | "\begin" ("{" <text> "}")+ <statement>* "\end" "{" <text> "}"
               | <tex> <braced>*
<braced>     ::= "{" <expr>* "}"
```

\let, \func and \begin...\end end the expression they start: nothing is multiplied onto them.
"""

import logging

from texcalc.lang.error import (ExpectedArgumentList, ExpectedCharacter, ExpectedExpression, ExpectedFunctionName,
                                InvalidArgumentCount, InvalidFunctionBody, InvalidLetValue, InvalidLetVariable,
                                InvalidSubscript, MismatchedName, ParseError, UndefinedOperator, UnendingList,
                                UnexpectedEOF, UnexpectedToken)
from texcalc.pure.lexer import IMPLICIT_MULT, DIV, Symbol, Token, TokenKind
from texcalc.pure.nodes import (BinaryOpNode, BracedNode, CallNode, FunctionNode, LetNode, NumberNode, PrototypeNode,
                                TexListNode, TexNode, UnaryOpNode, VariableNode)


logger = logging.getLogger(__name__)


class Parser:
    """Parses a token list (as returned by Lexer.tokenize) into top-level statements.

    functions is an optional callable taking a VariableNode and returning whether that name is a function defined
    outside of these tokens. Names defined by \\func (or bound to one by \\let) inside the tokens are always known.
    """
    IMPLICIT_KINDS = (TokenKind.IDENTIFIER, TokenKind.NUMBER, TokenKind.PARENS_OPEN)
    BOUNDARY_KINDS = (TokenKind.TEX, TokenKind.EOL, TokenKind.EOF)

    def __init__(self, tokens, functions=None):
        self.tokens = list(tokens)
        if not self.tokens or self.tokens[-1].kind is not TokenKind.EOF:
            last = self.tokens[-1] if self.tokens else None
            line, col, loc = (last.line, last.col + len(last.raw), last.loc + len(last.raw)) if last else (1, 0, 0)
            self.tokens.append(Token(TokenKind.EOF, None, line, col, loc, ""))

        self.functions = functions
        self.prototypes = []
        self.index = 0

    # token cursor
    def peek(self):
        return self.tokens[self.index]

    def pop(self):
        """Consumes and returns the current token. The final EOF token is never consumed."""
        token = self.tokens[self.index]
        if token.kind is not TokenKind.EOF:
            self.index += 1
        return token

    def expect(self, kind, char):
        """Consumes a token of the given kind or raises: char is what was expected, for the error message."""
        token = self.pop()
        if token.kind is TokenKind.EOF and kind is not TokenKind.EOF:
            raise UnexpectedEOF(token)
        elif token.kind is not kind:
            raise ExpectedCharacter(char, token)
        return token

    def skip_eol(self):
        while self.peek().kind is TokenKind.EOL:
            self.pop()

    # public api
    def statements(self):
        """Yields every top-level statement in order, or the ParseError raised in its place. After an error, parsing
        resumes at the next macro or end of statement, so that a single typo does not hide the rest of the document.
        """
        self.index = 0
        while True:
            self.skip_eol()
            start = self.index

            try:
                node = self.parse_top_level()
            except ParseError as error:
                logger.debug("parse error at %d:%d: %s", error.token.line, error.token.col, error.plain)
                self.recover(start)
                yield error
                continue

            if node is None:
                return
            logger.debug("parsed statement %r", node)
            yield node

    def parse(self):
        """Returns (statements, errors)."""
        statements, errors = [], []
        for result in self.statements():
            (errors if isinstance(result, ParseError) else statements).append(result)
        return statements, errors

    def recover(self, start):
        """Skips to the next statement boundary, always consuming at least one token."""
        if self.index == start:
            self.pop()
        while self.peek().kind not in Parser.BOUNDARY_KINDS:
            self.pop()

    # statements
    def parse_top_level(self):
        """Returns the next statement, or None if there are none left."""
        self.skip_eol()
        if self.peek().kind is TokenKind.EOF:
            return None
        return self.parse_expression()

    def parse_expression(self):
        node = self.parse_primary()
        if Parser.ends_statement(node):
            return node
        return self.parse_binary_op(node, 0)

    @staticmethod
    def ends_statement(node):
        return isinstance(node, (LetNode, FunctionNode, TexListNode))

    # operators
    def precedence(self):
        """Precedence of the operator at the cursor: implicit multiplication if a primary follows directly, -1 if the
        expression ends here.
        """
        token = self.peek()
        if token.kind is TokenKind.OPERATOR:
            return token.value.precedence
        elif token.kind in Parser.IMPLICIT_KINDS:
            return IMPLICIT_MULT.precedence
        return -1

    def parse_binary_op(self, node, min_precedence):
        lhs = node
        while True:
            token_precedence = self.precedence()
            if token_precedence < min_precedence:
                return lhs

            token = self.peek()
            if token.kind is TokenKind.OPERATOR:
                op = self.pop().value
            else:
                op = IMPLICIT_MULT
                token = Token(TokenKind.OPERATOR, op, token.line, token.col, token.loc, op.raw)

            rhs = self.parse_primary()
            if Parser.ends_statement(rhs):
                return BinaryOpNode(op, lhs, rhs, token=token)

            if token_precedence < self.precedence():
                rhs = self.parse_binary_op(rhs, token_precedence + 1)
            lhs = BinaryOpNode(op, lhs, rhs, token=token)

    def parse_unary(self):
        """A sign binds tighter than anything but exponentiation: -x^2 is -(x^2) but -2x is (-2)x."""
        token = self.pop()
        if not token.value.is_unary:
            raise UnexpectedToken(token)

        operand = self.parse_primary()
        if not Parser.ends_statement(operand):
            operand = self.parse_binary_op(operand, Symbol.PRECEDENCE["^"])
        return UnaryOpNode(token.value, operand, token=token)

    # primaries
    def parse_primary(self):
        token = self.peek()
        if token.kind is TokenKind.TEX:
            return self.parse_tex()
        elif token.kind is TokenKind.OPERATOR:
            return self.parse_unary()
        elif token.kind is TokenKind.IDENTIFIER:
            variable = self.parse_identifier()
            if self.peek().kind is TokenKind.PARENS_OPEN and self.is_function(variable):
                return self.parse_call(variable)
            return variable
        elif token.kind is TokenKind.NUMBER:
            return self.parse_number()
        elif token.kind is TokenKind.PARENS_OPEN:
            return self.parse_parens()
        elif token.kind is TokenKind.OTHER:
            raise UndefinedOperator(token)
        elif token.kind is TokenKind.EOF:
            raise UnexpectedEOF(token)
        raise ExpectedExpression(token)

    def parse_number(self):
        token = self.pop()
        return NumberNode(token.value, token=token)

    def parse_parens(self):
        self.expect(TokenKind.PARENS_OPEN, "(")
        node = self.parse_expression()
        self.expect(TokenKind.PARENS_CLOSE, ")")
        return node

    def parse_identifier(self):
        """A variable with any number of chained subscripts: x_1, x_{i,j}, x_{y}_2."""
        token = self.pop()
        subscripts = []

        while self.peek().kind is TokenKind.SUBSCRIPT:
            self.pop()
            following = self.peek()

            if following.kind is TokenKind.BRACE_OPEN:
                subscripts.extend(self.parse_braced(commas=True).expressions)
            elif following.kind is TokenKind.IDENTIFIER:
                subscripts.append(VariableNode(following.value, token=self.pop()))
            elif following.kind is TokenKind.NUMBER:
                subscripts.append(self.parse_number())
            elif following.kind is TokenKind.EOF:
                raise UnexpectedEOF(following)
            else:
                raise InvalidSubscript(following)

        return VariableNode(token.value, tuple(subscripts), token=token)

    def is_function(self, variable):
        if any(prototype.name == variable for prototype in self.prototypes):
            return True
        return self.functions is not None and bool(self.functions(variable))

    def parse_call(self, callee):
        self.expect(TokenKind.PARENS_OPEN, "(")
        arguments = []

        if self.peek().kind is TokenKind.PARENS_CLOSE:
            self.pop()
            return CallNode(callee, (), token=callee.token)

        while True:
            arguments.append(self.parse_expression())

            separator = self.pop()
            if separator.kind is TokenKind.PARENS_CLOSE:
                break
            elif separator.kind is TokenKind.EOF:
                raise UnexpectedEOF(separator)
            elif separator.kind is not TokenKind.COMMA:
                raise ExpectedArgumentList(separator)

        return CallNode(callee, tuple(arguments), token=callee.token)

    def parse_prototype(self):
        """name(x, y, ...) as found inside the first brace group of \\func."""
        token = self.peek()
        if token.kind is TokenKind.EOF:
            raise UnexpectedEOF(token)
        elif token.kind is not TokenKind.IDENTIFIER:
            raise ExpectedFunctionName(token)

        name = self.parse_identifier()
        self.expect(TokenKind.PARENS_OPEN, "(")

        parameters = []
        while self.peek().kind is TokenKind.IDENTIFIER:
            parameters.append(self.parse_identifier())
            if self.peek().kind is TokenKind.PARENS_CLOSE:
                break

            separator = self.pop()
            if separator.kind is not TokenKind.COMMA:
                raise ExpectedArgumentList(separator)

        self.expect(TokenKind.PARENS_CLOSE, ")")
        return PrototypeNode(name, tuple(parameters), token=token)

    # brace groups
    def parse_braced(self, commas=False):
        """A single {...} group. If commas is set, commas may separate the expressions (as in subscripts)."""
        token = self.expect(TokenKind.BRACE_OPEN, "{")
        expressions = []

        while True:
            self.skip_eol()
            following = self.peek()
            if following.kind is TokenKind.BRACE_CLOSE:
                self.pop()
                break
            elif following.kind is TokenKind.EOF:
                raise UnexpectedEOF(following)
            elif commas and following.kind is TokenKind.COMMA:
                self.pop()
                continue

            expressions.append(self.parse_expression())

        return BracedNode(tuple(expressions), token=token)

    def parse_brace_list(self):
        """Every {...} group directly at the cursor: {a}{b}{c}."""
        arguments = []
        while self.peek().kind is TokenKind.BRACE_OPEN:
            arguments.append(self.parse_braced())
        return arguments

    def parse_brace_text_list(self):
        """Like parse_brace_list, but each group is kept as raw text: \\begin{aligned}."""
        arguments = []
        while self.peek().kind is TokenKind.BRACE_OPEN:
            self.pop()
            text = ""
            while self.peek().kind not in (TokenKind.BRACE_CLOSE, TokenKind.EOF):
                text += self.pop().raw
            self.expect(TokenKind.BRACE_CLOSE, "}")
            arguments.append(text)
        return arguments

    # macros
    def parse_tex(self):
        name = self.peek().value
        if name == "\\begin":
            return self.parse_list()
        elif name == "\\func":
            return self.parse_func()
        elif name == "\\frac":
            return self.parse_frac()
        elif name == "\\let":
            return self.parse_let()
        elif name == "\\end":
            raise UnexpectedToken(self.peek())

        token = self.pop()
        return TexNode(name, tuple(self.parse_brace_list()), token=token)

    def parse_frac(self):
        token = self.pop()
        arguments = self.parse_brace_list()
        if len(arguments) != 2:
            raise InvalidArgumentCount(token)

        numerator, denominator = (argument.unwrap() for argument in arguments)
        if numerator is None or denominator is None:
            raise InvalidArgumentCount(token)
        return BinaryOpNode(DIV, numerator, denominator, token=token)

    def parse_let(self):
        token = self.pop()
        arguments = self.parse_brace_list()
        if len(arguments) != 2:
            raise InvalidArgumentCount(token)

        variable, value = (argument.unwrap() for argument in arguments)
        if not isinstance(variable, VariableNode):
            raise InvalidLetVariable(token)
        elif value is None or isinstance(value, BracedNode):
            raise InvalidLetValue(token)

        if isinstance(value, FunctionNode):
            self.prototypes.append(PrototypeNode(variable, value.prototype.parameters, token=token))
        return LetNode(variable, value, token=token)

    def parse_func(self):
        token = self.pop()
        self.expect(TokenKind.BRACE_OPEN, "{")
        prototype = self.parse_prototype()
        self.expect(TokenKind.BRACE_CLOSE, "}")

        # registered before the body so that a function can call itself
        self.prototypes.append(prototype)

        body = self.parse_braced().unwrap()
        if body is None or isinstance(body, BracedNode):
            raise InvalidFunctionBody(token)
        return FunctionNode(prototype, body, token=token)

    def parse_list(self):
        token = self.pop()
        arguments = self.parse_brace_text_list()
        if not arguments:
            raise ExpectedArgumentList(token)

        name = arguments[0]
        statements = []
        while True:
            self.skip_eol()
            following = self.peek()

            if following.kind is TokenKind.TEX and following.value == "\\end":
                self.pop()
                closing = self.parse_brace_text_list()
                if not closing or closing[0] != name:
                    raise MismatchedName(following)
                break
            elif following.kind is TokenKind.EOF:
                raise UnendingList(token)

            statements.append(self.parse_expression())

        return TexListNode(name, tuple(arguments), tuple(statements), token=token)


def parse(tokens, functions=None):
    """Shortcut for Parser(tokens, functions).parse()."""
    return Parser(tokens, functions).parse()

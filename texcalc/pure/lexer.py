r"""Lexical analysis for the texcalc formula grammar: raw text in, a flat token list out.

The token grammar, tried longest-match-first (ties go to the earlier entry):

```
<eol>         ::= "\n" [ \t]* "\n" | "\\"       ; end of statement
<space>       ::= [ \t] | "\n"                  ; skipped
<tex>         ::= "\" [a-zA-Z]+                 ; \frac, \let, \func, \begin, ...
<identifier>  ::= [a-zA-Z]+
<number>      ::= [0-9]+ "."? [0-9]*            ; unsigned: a leading "-" is a unary operator
<punctuation> ::= "(" | ")" | "{" | "}" | "_" | ","
<operator>    ::= "+" | "-" | "*" | "/" | "^" | "="

<comment>     ::= "%" [^\n]* [ \t\n]*           ; recorded separately, never tokenized
```

Anything else becomes a single-character Other token: the lexer never rejects input, it leaves that to the parser.
Token positions always refer to the original source, comments included: lines are 1-based, columns and offsets are
0-based.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar


class TokenKind(Enum):
    TEX = "tex"
    IDENTIFIER = "identifier"
    NUMBER = "number"
    OPERATOR = "operator"
    PARENS_OPEN = "("
    PARENS_CLOSE = ")"
    BRACE_OPEN = "{"
    BRACE_CLOSE = "}"
    SUBSCRIPT = "_"
    COMMA = ","
    OTHER = "other"
    EOF = "eof"
    EOL = "eol"


@dataclass(frozen=True)
class Symbol:
    """An operator. Two multiplications are equal whether or not they are implicit: the flag only affects printing."""
    raw: str
    implicit: bool = field(default=False, compare=False)

    PRECEDENCE: ClassVar[dict] = {"=": 10, "+": 20, "-": 20, "*": 40, "/": 40, "^": 60}
    UNARY: ClassVar[tuple] = ("+", "-")

    @property
    def precedence(self):
        return Symbol.PRECEDENCE[self.raw]

    @property
    def is_unary(self):
        return self.raw in Symbol.UNARY

    @property
    def is_associative(self):
        return self.raw in ("+", "*")

    def __str__(self):
        return " " if self.implicit else self.raw


PLUS = Symbol("+")
MINUS = Symbol("-")
MULT = Symbol("*")
IMPLICIT_MULT = Symbol("*", implicit=True)
DIV = Symbol("/")
EXP = Symbol("^")
EQUAL = Symbol("=")


@dataclass(frozen=True)
class Token:
    """A single token. value is the payload of the kinds that carry one: the macro name (with its backslash) for TEX,
    the name for IDENTIFIER, the decimal string for NUMBER, the Symbol for OPERATOR and the character for OTHER.
    """
    kind: TokenKind
    value: object
    line: int
    col: int
    loc: int
    raw: str

    def __repr__(self):
        return f"Token({self.kind.name}, {self.raw!r}, at=({self.line}, {self.col}))"


@dataclass(frozen=True)
class Comment:
    """A comment stripped out of the source. tail is the number of whitespace columns it swallowed on its last line."""
    line: int
    col: int
    loc: int
    length: int
    raw: str
    tail: int


class Lexer:
    """Turns a source string into (tokens, comments). Patterns are compiled once, when the module is imported."""
    COMMENT = re.compile(r"%[^\n]*[ \t\n]*")
    TOKENS = [
        (TokenKind.EOL, re.compile(r"\n[ \t]*\n|\\\\")),
        (None, re.compile(r"[ \t]|\n")),
        (TokenKind.TEX, re.compile(r"\\[a-zA-Z]+")),
        (TokenKind.IDENTIFIER, re.compile(r"[a-zA-Z]+")),
        (TokenKind.NUMBER, re.compile(r"[0-9]+\.?[0-9]*")),
        (TokenKind.PARENS_OPEN, re.compile(r"\(")),
        (TokenKind.PARENS_CLOSE, re.compile(r"\)")),
        (TokenKind.BRACE_OPEN, re.compile(r"\{")),
        (TokenKind.BRACE_CLOSE, re.compile(r"\}")),
        (TokenKind.SUBSCRIPT, re.compile(r"_")),
        (TokenKind.COMMA, re.compile(r",")),
        (TokenKind.OPERATOR, re.compile(r"[+\-*/^=]")),
    ]

    def __init__(self, source):
        self.source = source

        self.line = 1
        self.col = 0
        self.loc = 0

    def tokenize(self):
        """Returns (tokens, comments). tokens always ends with an EOF token."""
        tokens = []
        comments = []
        self.line, self.col, self.loc = 1, 0, 0

        while self.loc < len(self.source):
            match = Lexer.COMMENT.match(self.source, self.loc)
            if match:
                text = match.group()
                comments.append(Comment(self.line, self.col, self.loc, len(text), text, Lexer._tail(text)))
                self._advance(text)
                continue

            kind, text = self._longest_match()
            if text is None:
                kind, text = TokenKind.OTHER, self.source[self.loc]

            if kind is not None:
                tokens.append(Token(kind, Lexer._value(kind, text), self.line, self.col, self.loc, text))
            self._advance(text)

        tokens.append(Token(TokenKind.EOF, None, self.line, self.col, self.loc, ""))
        return tokens, comments

    def _longest_match(self):
        """Returns (kind, text) of the longest pattern matching at the cursor, or (None, None) if none matches."""
        best_kind, best_text = None, None
        for kind, pattern in Lexer.TOKENS:
            match = pattern.match(self.source, self.loc)
            if match and (best_text is None or len(match.group()) > len(best_text)):
                best_kind, best_text = kind, match.group()
        return best_kind, best_text

    def _advance(self, text):
        """Moves the cursor past text, keeping line and column in sync."""
        self.loc += len(text)
        newlines = text.count("\n")
        if newlines:
            self.line += newlines
            self.col = Lexer._tail(text)
        else:
            self.col += len(text)

    @staticmethod
    def _tail(text):
        """Number of characters after the last newline in text (0 if there is none)."""
        if "\n" not in text:
            return 0
        return len(text) - text.rindex("\n") - 1

    @staticmethod
    def _value(kind, text):
        if kind is TokenKind.OPERATOR:
            return Symbol(text)
        elif kind in (TokenKind.TEX, TokenKind.IDENTIFIER, TokenKind.NUMBER, TokenKind.OTHER):
            return text
        return None


def tokenize(source):
    """Shortcut for Lexer(source).tokenize()."""
    return Lexer(source).tokenize()

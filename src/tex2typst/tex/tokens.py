"""
LaTeX tokens - the flat stream between lexer and parser

Tokens have no identity beyond their position in the stream. The parser
consumes them and throws them away once the tree is built.
"""

from enum import Enum

from pydantic import BaseModel


class TokenKind(str, Enum):
    """Lexical category of a token"""

    COMMAND = "COMMAND"  # \frac, \alpha, \, (value includes the backslash)
    LETTER = "LETTER"  # single letter
    DIGIT = "DIGIT"  # run of digits, optionally with a decimal part
    OPERATOR = "OPERATOR"  # + - * / = ' < > ! . , ; : ? ( ) |
    BRACE_OPEN = "BRACE_OPEN"
    BRACE_CLOSE = "BRACE_CLOSE"
    BRACKET_OPEN = "BRACKET_OPEN"
    BRACKET_CLOSE = "BRACKET_CLOSE"
    SUPERSCRIPT = "SUPERSCRIPT"
    SUBSCRIPT = "SUBSCRIPT"
    MATH_DELIMITER = "MATH_DELIMITER"  # \( \) \[ \]
    ENV_BEGIN = "ENV_BEGIN"  # value is the environment name
    ENV_END = "ENV_END"  # value is the environment name
    ALIGNMENT = "ALIGNMENT"  # &
    ROW_SEPARATOR = "ROW_SEPARATOR"  # \\
    WHITESPACE = "WHITESPACE"
    NEWLINE = "NEWLINE"
    TEXT = "TEXT"  # verbatim body of \text{...} and friends
    COMMENT = "COMMENT"  # % to end of line, without the %
    OTHER = "OTHER"  # escapes like \{ and anything unrecognized


class Token(BaseModel):
    """A single lexical unit"""

    kind: TokenKind
    value: str

    model_config = {"frozen": True}

    def is_(self, kind: TokenKind, value: str | None = None) -> bool:
        """Match on kind and, optionally, exact value"""
        return self.kind == kind and (value is None or self.value == value)

    @property
    def is_space(self) -> bool:
        return self.kind in (TokenKind.WHITESPACE, TokenKind.NEWLINE)


def token(kind: TokenKind, value: str) -> Token:
    """Shorthand constructor used by the lexer and the tests"""
    return Token(kind=kind, value=value)

"""
LaTeX lexer

Turns raw LaTeX into a flat list of Tokens. The lexer knows just enough
grammar to keep the parser simple: \\begin{name} and \\end{name} arrive as
single tokens, and text-mode commands (\\text, \\operatorname, ...) arrive
with their brace body captured verbatim so math rules never touch prose.

Fun fact: Knuth's TeX lexer assigns every character one of 16 "category
codes" that can be changed at runtime. Our categories are fixed - a small
mercy for anyone who has ever debugged \\catcode tricks!
"""

import re

from tex2typst.kernel.errors import TexSyntaxError, UnbalancedGroup
from tex2typst.tex.tokens import Token, TokenKind, token

# Commands whose brace argument is text, not math
TEXT_COMMANDS = frozenset(
    {
        "text",
        "textrm",
        "textnormal",
        "textbf",
        "textit",
        "textsf",
        "texttt",
        "mbox",
        "operatorname",
    }
)

ESCAPED_SYMBOLS = frozenset("{}%$&#_|")
MATH_DELIMITER_CHARS = frozenset("()[]")
OPERATOR_CHARS = frozenset("+-*/='<>!.,;:?()|")

NUMBER_RE = re.compile(r"[0-9]+(?:\.[0-9]+)?")
TEXT_ESCAPE_RE = re.compile(r"\\([{}\\$&#_%])")

SINGLE_CHAR_TOKENS = {
    "{": TokenKind.BRACE_OPEN,
    "}": TokenKind.BRACE_CLOSE,
    "[": TokenKind.BRACKET_OPEN,
    "]": TokenKind.BRACKET_CLOSE,
    "^": TokenKind.SUPERSCRIPT,
    "_": TokenKind.SUBSCRIPT,
    "&": TokenKind.ALIGNMENT,
}


def _is_command_letter(char: str) -> bool:
    return char.isascii() and char.isalpha()


def find_closing_brace(latex: str, start: int) -> int:
    """
    Find the index of the brace closing the one at `start`

    Escaped characters (\\{, \\}, \\\\) are skipped.

    Raises:
        UnbalancedGroup: If the input ends before the group closes
    """
    depth = 0
    pos = start
    while pos < len(latex):
        char = latex[pos]
        if char == "\\":
            pos += 2
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return pos
        pos += 1
    raise UnbalancedGroup("{", start)


def _read_brace_body(latex: str, pos: int, command: str) -> tuple[str, int]:
    """Read `{...}` after a text-like command; returns (raw body, next pos)"""
    while pos < len(latex) and latex[pos] in " \t\r\n":
        pos += 1
    if pos >= len(latex) or latex[pos] != "{":
        raise TexSyntaxError(f"No content for {command} command")
    closing = find_closing_brace(latex, pos)
    return latex[pos + 1 : closing], closing + 1


def _lex_backslash(latex: str, pos: int, tokens: list[Token]) -> int:
    """Lex a token starting with a backslash; returns the next position"""
    if pos + 1 >= len(latex):
        raise TexSyntaxError("Expecting command name after '\\'")

    following = latex[pos + 1]
    if following == "\\":
        tokens.append(token(TokenKind.ROW_SEPARATOR, "\\\\"))
        return pos + 2
    if following in MATH_DELIMITER_CHARS:
        tokens.append(token(TokenKind.MATH_DELIMITER, "\\" + following))
        return pos + 2
    if following in ESCAPED_SYMBOLS:
        tokens.append(token(TokenKind.OTHER, "\\" + following))
        return pos + 2
    if not _is_command_letter(following):
        # Control symbols: \, \; \: \! \  and friends
        tokens.append(token(TokenKind.COMMAND, "\\" + following))
        return pos + 2

    end = pos + 1
    while end < len(latex) and _is_command_letter(latex[end]):
        end += 1
    name = latex[pos + 1 : end]

    if name in ("begin", "end"):
        env_name, end = _read_brace_body(latex, end, "\\" + name)
        kind = TokenKind.ENV_BEGIN if name == "begin" else TokenKind.ENV_END
        tokens.append(token(kind, env_name.strip()))
    elif name in TEXT_COMMANDS:
        if latex.startswith("*", end):  # \operatorname*
            end += 1
        body, end = _read_brace_body(latex, end, "\\" + name)
        tokens.append(token(TokenKind.COMMAND, "\\" + name))
        tokens.append(token(TokenKind.BRACE_OPEN, "{"))
        tokens.append(token(TokenKind.TEXT, TEXT_ESCAPE_RE.sub(r"\1", body)))
        tokens.append(token(TokenKind.BRACE_CLOSE, "}"))
    else:
        tokens.append(token(TokenKind.COMMAND, "\\" + name))
    return end


def tokenize(latex: str) -> list[Token]:
    """
    Split LaTeX source into tokens

    Args:
        latex: LaTeX math source (macros already expanded)

    Returns:
        Token list in source order

    Raises:
        TexSyntaxError: On a trailing lone backslash or a text command without body
        UnbalancedGroup: When a text command's body never closes
    """
    tokens: list[Token] = []
    pos = 0

    while pos < len(latex):
        char = latex[pos]

        if char == "%":
            end = latex.find("\n", pos)
            if end == -1:
                end = len(latex)
            tokens.append(token(TokenKind.COMMENT, latex[pos + 1 : end]))
            pos = end
        elif char in SINGLE_CHAR_TOKENS:
            tokens.append(token(SINGLE_CHAR_TOKENS[char], char))
            pos += 1
        elif char == "\n":
            tokens.append(token(TokenKind.NEWLINE, "\n"))
            pos += 1
        elif char == "\r":
            tokens.append(token(TokenKind.NEWLINE, "\n"))
            pos += 2 if latex.startswith("\r\n", pos) else 1
        elif char in " \t":
            end = pos
            while end < len(latex) and latex[end] in " \t":
                end += 1
            tokens.append(token(TokenKind.WHITESPACE, latex[pos:end]))
            pos = end
        elif char == "\\":
            pos = _lex_backslash(latex, pos, tokens)
        elif char in "0123456789":
            match = NUMBER_RE.match(latex, pos)
            tokens.append(token(TokenKind.DIGIT, match.group(0)))
            pos = match.end()
        elif char.isalpha():
            tokens.append(token(TokenKind.LETTER, char))
            pos += 1
        elif char in OPERATOR_CHARS:
            tokens.append(token(TokenKind.OPERATOR, char))
            pos += 1
        else:
            tokens.append(token(TokenKind.OTHER, char))
            pos += 1

    return tokens

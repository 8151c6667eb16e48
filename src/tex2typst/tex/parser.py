"""
LaTeX parser

Recursive descent over the token list with one token of lookahead. Every
production consumes at least one token, so malformed input always ends in an
error instead of a loop.

Grammar sketch:
    sequence := expr*
    expr     := atom primes? (('_' | '^') atom primes?)*
    atom     := symbol | '{' sequence '}' | command args | \\left .. \\right
              | \\begin{env} rows \\end{env}

Fun fact: LaTeX's `x^2^3` really is an error ("Double superscript") - TeX
refuses to guess whether you meant x^(2^3) or (x^2)^3. So do we!
"""

from typing import Callable

from tex2typst.kernel.errors import (
    MismatchedDelimiter,
    TexSyntaxError,
    UnbalancedGroup,
    UnknownEnvironment,
)
from tex2typst.tex.commands import (
    ARGUMENT_ENVIRONMENTS,
    ENVIRONMENTS,
    FRACTION_COMMANDS,
    lookup_signature,
)
from tex2typst.tex.lexer import TEXT_COMMANDS, tokenize
from tex2typst.tex.nodes import (
    EMPTY_GROUP,
    Command,
    Comment,
    Environment,
    Fraction,
    Group,
    LeftRight,
    LineBreak,
    SupSub,
    Symbol,
    TexNode,
    Text,
)
from tex2typst.tex.tokens import Token, TokenKind

ParseResult = tuple[TexNode, int]

# Tokens accepted after \left and \right
DELIMITER_VALUES = frozenset(
    {"(", ")", "[", "]", "|", ".", "/", "<", ">", "\\{", "\\}", "\\|"}
)
DELIMITER_COMMANDS = frozenset(
    {
        "\\lfloor",
        "\\rfloor",
        "\\lceil",
        "\\rceil",
        "\\langle",
        "\\rangle",
        "\\lvert",
        "\\rvert",
        "\\lVert",
        "\\rVert",
        "\\vert",
        "\\Vert",
        "\\lgroup",
        "\\rgroup",
        "\\uparrow",
        "\\downarrow",
        "\\backslash",
    }
)

SYMBOL_KINDS = frozenset(
    {
        TokenKind.LETTER,
        TokenKind.DIGIT,
        TokenKind.OPERATOR,
        TokenKind.OTHER,
        TokenKind.BRACKET_OPEN,
        TokenKind.BRACKET_CLOSE,
    }
)


def _is_left(tok: Token) -> bool:
    return tok.is_(TokenKind.COMMAND, "\\left")


def _is_right(tok: Token) -> bool:
    return tok.is_(TokenKind.COMMAND, "\\right")


def _kind_is(kind: TokenKind) -> Callable[[Token], bool]:
    return lambda tok: tok.kind == kind


def _pack(nodes: list[TexNode]) -> TexNode:
    """A run of nodes as one node: nothing, the node itself, or a Group"""
    if not nodes:
        return EMPTY_GROUP
    if len(nodes) == 1:
        return nodes[0]
    return Group(children=tuple(nodes))


class LatexParser:
    """
    Parser from tokens to a LaTeX AST

    The parser keeps no state between calls; one instance can serve any
    number of parses.
    """

    def parse(self, tokens: list[Token]) -> TexNode:
        """
        Parse a whole token list

        Args:
            tokens: Output of tokenize()

        Returns:
            Root node (a Group unless the input is a single expression)

        Raises:
            ParseError: On any structurally malformed input
        """
        return self._parse_range(tokens, 0, len(tokens))

    # ------------------------------------------------------------------
    # Sequences and expressions
    # ------------------------------------------------------------------

    def _parse_range(self, tokens: list[Token], start: int, end: int) -> TexNode:
        nodes: list[TexNode] = []
        pos = start
        while True:
            pos = self._skip_spaces(tokens, pos, end)
            if pos >= end:
                break
            if tokens[pos].kind == TokenKind.ALIGNMENT:
                raise TexSyntaxError("Unexpected & outside of an alignment")
            node, pos = self._parse_expr(tokens, pos, end)
            nodes.append(node)
        return _pack(nodes)

    def _parse_expr(self, tokens: list[Token], pos: int, end: int) -> ParseResult:
        """An atom with any primes, subscript and superscript attached to it"""
        if tokens[pos].kind in (TokenKind.SUBSCRIPT, TokenKind.SUPERSCRIPT):
            base: TexNode = EMPTY_GROUP
        else:
            base, pos = self._parse_atom(tokens, pos, end)

        sub: TexNode | None = None
        sup: TexNode | None = None
        pos, primes = self._eat_primes(tokens, pos, end)

        while True:
            look = self._skip_spaces(tokens, pos, end)
            if look >= end:
                break
            kind = tokens[look].kind
            if kind == TokenKind.SUBSCRIPT:
                if sub is not None:
                    raise TexSyntaxError("Double subscript")
                sub, pos = self._parse_argument(tokens, look + 1, end, "_")
                pos, more = self._eat_primes(tokens, pos, end)
                primes += more
            elif kind == TokenKind.SUPERSCRIPT:
                if sup is not None:
                    raise TexSyntaxError("Double superscript")
                sup, pos = self._parse_argument(tokens, look + 1, end, "^")
                pos, more = self._eat_primes(tokens, pos, end)
                if more:
                    raise TexSyntaxError("Double superscript")
            else:
                break

        if sub is None and sup is None and primes == 0:
            return base, pos

        if primes:
            marks: list[TexNode] = [Symbol(value="'")] * primes
            if sup is not None:
                marks.append(sup)
            sup = _pack(marks)
        return SupSub(base=base, sup=sup, sub=sub), pos

    def _parse_argument(
        self, tokens: list[Token], pos: int, end: int, owner: str
    ) -> ParseResult:
        """One argument of a command or script marker (skips leading spaces)"""
        pos = self._skip_spaces(tokens, pos, end)
        if pos >= end:
            raise TexSyntaxError(f"Expecting argument for {owner}")
        if tokens[pos].kind in (TokenKind.SUBSCRIPT, TokenKind.SUPERSCRIPT):
            raise TexSyntaxError(
                f"Expecting argument for {owner}, found '{tokens[pos].value}'"
            )
        return self._parse_atom(tokens, pos, end)

    def _parse_atom(self, tokens: list[Token], pos: int, end: int) -> ParseResult:
        tok = tokens[pos]
        kind = tok.kind

        if kind in SYMBOL_KINDS:
            return Symbol(value=tok.value), pos + 1
        if kind == TokenKind.BRACE_OPEN:
            closing = self._find_closing(
                tokens,
                pos,
                end,
                _kind_is(TokenKind.BRACE_OPEN),
                _kind_is(TokenKind.BRACE_CLOSE),
            )
            if closing == -1:
                raise UnbalancedGroup("{", pos)
            return self._parse_range(tokens, pos + 1, closing), closing + 1
        if kind == TokenKind.BRACE_CLOSE:
            raise UnbalancedGroup("}", pos)
        if kind == TokenKind.COMMAND:
            if tok.value == "\\left":
                return self._parse_left_right(tokens, pos, end)
            if tok.value == "\\right":
                raise MismatchedDelimiter("\\right")
            return self._parse_command(tokens, pos, end)
        if kind == TokenKind.ENV_BEGIN:
            return self._parse_environment(tokens, pos, end)
        if kind == TokenKind.ENV_END:
            raise MismatchedDelimiter(f"\\end{{{tok.value}}}")
        if kind == TokenKind.ROW_SEPARATOR:
            return LineBreak(), pos + 1
        if kind == TokenKind.TEXT:
            return Text(value=tok.value), pos + 1
        if kind == TokenKind.COMMENT:
            return Comment(value=tok.value), pos + 1
        if kind == TokenKind.ALIGNMENT:
            raise TexSyntaxError("Unexpected & outside of an alignment")
        if kind == TokenKind.MATH_DELIMITER:
            raise TexSyntaxError(f"Unexpected math delimiter {tok.value}")
        raise TexSyntaxError(f"Unexpected token {tok.value!r}")

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _parse_command(self, tokens: list[Token], pos: int, end: int) -> ParseResult:
        command = tokens[pos].value
        name = command[1:]
        signature = lookup_signature(name)
        pos += 1

        if signature.mandatory == 0 and not signature.optional:
            return Command(name=name), pos

        if name in TEXT_COMMANDS:
            return self._parse_text_command(tokens, pos, end, name)

        optional: TexNode | None = None
        if signature.optional:
            look = self._skip_spaces(tokens, pos, end)
            if look < end and tokens[look].kind == TokenKind.BRACKET_OPEN:
                closing = self._find_closing(
                    tokens,
                    look,
                    end,
                    _kind_is(TokenKind.BRACKET_OPEN),
                    _kind_is(TokenKind.BRACKET_CLOSE),
                )
                if closing == -1:
                    raise UnbalancedGroup("[", look)
                optional = self._parse_range(tokens, look + 1, closing)
                pos = closing + 1

        args: list[TexNode] = []
        for _ in range(signature.mandatory):
            arg, pos = self._parse_argument(tokens, pos, end, command)
            args.append(arg)

        if name in FRACTION_COMMANDS:
            return Fraction(name=name, numerator=args[0], denominator=args[1]), pos
        return Command(name=name, args=tuple(args), optional=optional), pos

    def _parse_text_command(
        self, tokens: list[Token], pos: int, end: int, name: str
    ) -> ParseResult:
        # The lexer always emits BRACE_OPEN TEXT BRACE_CLOSE after these
        if (
            pos + 2 >= end
            or tokens[pos].kind != TokenKind.BRACE_OPEN
            or tokens[pos + 1].kind != TokenKind.TEXT
            or tokens[pos + 2].kind != TokenKind.BRACE_CLOSE
        ):
            raise TexSyntaxError(f"Expecting text content for \\{name}")
        text = Text(value=tokens[pos + 1].value, style=name)
        if name == "operatorname":
            return Command(name=name, args=(text,)), pos + 3
        return text, pos + 3

    # ------------------------------------------------------------------
    # \left ... \right
    # ------------------------------------------------------------------

    def _parse_left_right(self, tokens: list[Token], start: int, end: int) -> ParseResult:
        pos = self._skip_spaces(tokens, start + 1, end)
        left = self._delimiter_at(tokens, pos, end, "\\left")

        closing = self._find_closing(tokens, start, end, _is_left, _is_right)
        if closing == -1:
            raise MismatchedDelimiter("\\left")
        body = self._parse_range(tokens, pos + 1, closing)

        pos = self._skip_spaces(tokens, closing + 1, end)
        right = self._delimiter_at(tokens, pos, end, "\\right")
        return LeftRight(left=left, body=body, right=right), pos + 1

    @staticmethod
    def _delimiter_at(tokens: list[Token], pos: int, end: int, owner: str) -> str:
        if pos >= end:
            raise TexSyntaxError(f"Expecting delimiter after {owner}")
        tok = tokens[pos]
        if tok.kind == TokenKind.COMMAND and tok.value in DELIMITER_COMMANDS:
            return tok.value
        if tok.kind != TokenKind.COMMAND and tok.value in DELIMITER_VALUES:
            return tok.value
        raise TexSyntaxError(f"Invalid delimiter {tok.value!r} after {owner}")

    # ------------------------------------------------------------------
    # Environments
    # ------------------------------------------------------------------

    def _parse_environment(self, tokens: list[Token], start: int, end: int) -> ParseResult:
        name = tokens[start].value
        if name not in ENVIRONMENTS:
            raise UnknownEnvironment(name)

        closing = self._find_closing(
            tokens,
            start,
            end,
            _kind_is(TokenKind.ENV_BEGIN),
            _kind_is(TokenKind.ENV_END),
        )
        if closing == -1:
            raise MismatchedDelimiter(f"\\begin{{{name}}}")
        if tokens[closing].value != name:
            raise MismatchedDelimiter(
                f"\\begin{{{name}}}", f"\\end{{{tokens[closing].value}}}"
            )

        body_start = start + 1
        argument: str | None = None
        if name in ARGUMENT_ENVIRONMENTS:
            look = self._skip_spaces(tokens, body_start, closing)
            if look < closing and tokens[look].kind == TokenKind.BRACE_OPEN:
                arg_closing = self._find_closing(
                    tokens,
                    look,
                    closing,
                    _kind_is(TokenKind.BRACE_OPEN),
                    _kind_is(TokenKind.BRACE_CLOSE),
                )
                if arg_closing == -1:
                    raise UnbalancedGroup("{", look)
                argument = "".join(
                    t.value for t in tokens[look + 1 : arg_closing] if not t.is_space
                )
                body_start = arg_closing + 1

        rows = self._parse_rows(tokens, body_start, closing)
        return Environment(name=name, rows=rows, argument=argument), closing + 1

    def _parse_rows(
        self, tokens: list[Token], start: int, end: int
    ) -> tuple[tuple[Group, ...], ...]:
        rows: list[tuple[Group, ...]] = []
        row: list[Group] = []
        cell: list[TexNode] = []
        pos = start

        while True:
            pos = self._skip_spaces(tokens, pos, end)
            if pos >= end:
                break
            kind = tokens[pos].kind
            if kind == TokenKind.ROW_SEPARATOR:
                row.append(Group(children=tuple(cell)))
                rows.append(tuple(row))
                row, cell = [], []
                pos += 1
            elif kind == TokenKind.ALIGNMENT:
                row.append(Group(children=tuple(cell)))
                cell = []
                pos += 1
            else:
                node, pos = self._parse_expr(tokens, pos, end)
                cell.append(node)

        row.append(Group(children=tuple(cell)))
        rows.append(tuple(row))

        # A trailing \\ does not open a new row
        if len(rows) > 1 and rows[-1] == (EMPTY_GROUP,):
            rows.pop()
        return tuple(rows)

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _skip_spaces(tokens: list[Token], pos: int, end: int) -> int:
        while pos < end and tokens[pos].is_space:
            pos += 1
        return pos

    @staticmethod
    def _eat_primes(tokens: list[Token], pos: int, end: int) -> tuple[int, int]:
        count = 0
        while pos < end and tokens[pos].is_(TokenKind.OPERATOR, "'"):
            pos += 1
            count += 1
        return pos, count

    @staticmethod
    def _find_closing(
        tokens: list[Token],
        start: int,
        end: int,
        is_open: Callable[[Token], bool],
        is_close: Callable[[Token], bool],
    ) -> int:
        """Index of the token closing tokens[start], or -1 if there is none"""
        depth = 0
        for pos in range(start, end):
            tok = tokens[pos]
            if is_open(tok):
                depth += 1
            elif is_close(tok):
                depth -= 1
                if depth == 0:
                    return pos
        return -1


def parse_tex(tex: str) -> TexNode:
    """
    Tokenize and parse LaTeX math in one step

    Example:
        >>> parse_tex(r"\\frac{1}{2}")
        Fraction(name='frac', numerator=Symbol(value='1'), denominator=Symbol(value='2'))
    """
    return LatexParser().parse(tokenize(tex))

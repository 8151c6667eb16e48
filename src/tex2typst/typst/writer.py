"""
Typst Writer - Typst AST to text

Serialization happens in two steps. serialize() flattens nodes into a queue
of typed tokens; finalize() walks the queue once and decides the spacing
between each pair of neighbours. Keeping tokens around until the end is what
lets replace_with_shorthand() swap whole symbols without ever touching part
of an identifier.

Spacing rules, in short:
- one space between tokens by default
- none after an opening or before a closing parenthesis
- none around `/`, `_` and `^`, none before `,` `;` `'` `!`
- none between a function name and its `(`
- `(` sticks to a preceding letter, digit or `)`, but not to a named symbol
  (alpha (x) is a symbol followed by parentheses, alpha(x) would be a call)
- a leading sign sticks to its operand: -x, a = -b, x^(-1)
- after a bare attachment (x^2) a soft space keeps the next token out of
  the script; it is dropped before closers and at the end

Fun fact: Typst reads `x^2 (a)` and `x^2(a)` differently - the second one
raises 2 to... nothing, and calls it with (a). One space makes all the
difference!
"""

from enum import Enum
from typing import Iterable

from pydantic import BaseModel

from tex2typst.kernel.errors import WriteError
from tex2typst.typst import symbols
from tex2typst.typst.nodes import (
    Align,
    Atom,
    Binary,
    Cases,
    Comment,
    Empty,
    Fraction,
    FuncCall,
    Grouped,
    Matrix,
    Sequence,
    SupSub,
    Symbol,
    TextLiteral,
    TypstNode,
)


class SymbolShorthand(BaseModel):
    """
    Replacement of a Typst symbol name by a shorter spelling

    Example:
        SymbolShorthand(original="plus.minus", shorthand="+-")
    """

    original: str
    shorthand: str

    model_config = {"frozen": True}


class TypstTokenKind(str, Enum):
    ATOM = "ATOM"  # literal text: letters, digits, operators, escapes
    SYMBOL = "SYMBOL"  # named symbol
    SHORTHAND = "SHORTHAND"  # symbol already replaced by its shorthand
    FUNCTION = "FUNCTION"  # function name, always followed by OPEN
    TEXT = "TEXT"  # quoted string
    OPTION = "OPTION"  # named argument, e.g. delim: "["
    OPEN = "OPEN"  # structural (
    CLOSE = "CLOSE"  # structural )
    SEPARATOR = "SEPARATOR"  # , or ; between arguments and rows
    SCRIPT = "SCRIPT"  # _ or ^
    SLASH = "SLASH"  # fraction bar
    ALIGN = "ALIGN"  # &
    COMMENT = "COMMENT"
    NEWLINE = "NEWLINE"
    SOFT_SPACE = "SOFT_SPACE"


class TypstToken(BaseModel):
    kind: TypstTokenKind
    value: str

    model_config = {"frozen": True}


NO_SPACE_AFTER_ATOMS = frozenset({"(", "[", "{"})
NO_SPACE_BEFORE_ATOMS = frozenset({")", "]", "}", ",", ";", "!", "'"})
SOFT_SPACE_DROPPED_BEFORE = frozenset({")", "]", "}", ",", ";"})
SIGN_ATOMS = frozenset({"+", "-"})
OPERAND_START_ATOMS = frozenset(
    {"(", "[", "{", ",", ";", ":", "=", "<", ">", "+", "-", "*", "\\", "\\/"}
)
OPERAND_START_KINDS = frozenset(
    {
        TypstTokenKind.OPEN,
        TypstTokenKind.SEPARATOR,
        TypstTokenKind.SCRIPT,
        TypstTokenKind.SLASH,
        TypstTokenKind.ALIGN,
        TypstTokenKind.NEWLINE,
    }
)
SOFT_SPACE_DROPPED_KINDS = frozenset(
    {TypstTokenKind.CLOSE, TypstTokenKind.SEPARATOR, TypstTokenKind.NEWLINE}
)


def _is_atom(tok: TypstToken, values: frozenset[str]) -> bool:
    return tok.kind == TypstTokenKind.ATOM and tok.value in values


def _starts_operand(prev: TypstToken | None) -> bool:
    """True when a sign after prev is unary"""
    if prev is None or prev.kind in OPERAND_START_KINDS:
        return True
    if prev.kind == TypstTokenKind.ATOM:
        return prev.value in OPERAND_START_ATOMS
    if prev.kind == TypstTokenKind.SYMBOL:
        return prev.value in symbols.OPERATOR_PRECEDENCE
    return False


def _needs_space(prev: TypstToken, cur: TypstToken) -> bool:
    if prev.kind in (TypstTokenKind.NEWLINE, TypstTokenKind.FUNCTION):
        return False
    if prev.kind in (TypstTokenKind.OPEN, TypstTokenKind.SCRIPT, TypstTokenKind.SLASH):
        return False
    if cur.kind in (
        TypstTokenKind.CLOSE,
        TypstTokenKind.SEPARATOR,
        TypstTokenKind.SCRIPT,
        TypstTokenKind.SLASH,
        TypstTokenKind.NEWLINE,
    ):
        return False
    if _is_atom(prev, NO_SPACE_AFTER_ATOMS) or _is_atom(cur, NO_SPACE_BEFORE_ATOMS):
        return False
    if prev.kind == TypstTokenKind.ALIGN and cur.value == "=":
        return False
    if prev.kind == TypstTokenKind.ATOM and cur.kind == TypstTokenKind.ATOM:
        if cur.value == "(" and (prev.value.isalnum() or prev.value in (")", "]")):
            return False
        if prev.value.isdigit() and cur.value[0].isdigit():
            return False
    return True


def _quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


class TypstWriter:
    """
    Single-use serializer from Typst nodes to text

    Example:
        >>> writer = TypstWriter()
        >>> writer.serialize(Symbol(name="plus.minus"))
        >>> writer.replace_with_shorthand([SymbolShorthand(original="plus.minus", shorthand="+-")])
        >>> writer.finalize()
        '+-'
    """

    def __init__(self) -> None:
        self._queue: list[TypstToken] = []
        self._function_depth = 0
        self._finalized = False
        self._ends_with_comment = False

    @property
    def ends_with_comment(self) -> bool:
        """True when the finalized text ended in a line comment"""
        return self._ends_with_comment

    def serialize(self, node: TypstNode) -> None:
        """
        Append a node to the output queue

        Raises:
            WriteError: If the writer was already finalized
        """
        self._ensure_open("serialize")
        self._write(node)

    def replace_with_shorthand(self, shorthands: Iterable[SymbolShorthand]) -> None:
        """
        Replace queued symbols by their shorthand spelling

        Only whole symbol tokens are replaced, and a replaced token is never
        replaced again, so applying the same list twice changes nothing.
        """
        self._ensure_open("replace_with_shorthand")
        table = {item.original: item.shorthand for item in shorthands}
        if not table:
            return
        self._queue = [
            TypstToken(kind=TypstTokenKind.SHORTHAND, value=table[tok.value])
            if tok.kind == TypstTokenKind.SYMBOL and tok.value in table
            else tok
            for tok in self._queue
        ]

    def finalize(self) -> str:
        """
        Flush the queue into text

        Returns:
            The Typst source. A trailing line comment keeps no line end;
            check ends_with_comment before appending more math.

        Raises:
            WriteError: If called twice
        """
        self._ensure_open("finalize")
        self._finalized = True
        text = self._flush()
        emitted = [tok for tok in self._queue if tok.kind != TypstTokenKind.SOFT_SPACE]
        if emitted and emitted[-1].kind == TypstTokenKind.NEWLINE:
            self._ends_with_comment = True
            text = text[:-1]
        self._queue = []
        return text

    def _ensure_open(self, operation: str) -> None:
        if self._finalized:
            raise WriteError(f"Cannot {operation}: writer already finalized")

    def _emit(self, kind: TypstTokenKind, value: str = "") -> None:
        self._queue.append(TypstToken(kind=kind, value=value))

    # ------------------------------------------------------------------
    # Nodes to tokens
    # ------------------------------------------------------------------

    def _write(self, node: TypstNode) -> None:
        if isinstance(node, Empty):
            return
        if isinstance(node, Atom):
            if self._function_depth and node.value in symbols.CALL_ESCAPES:
                self._emit(TypstTokenKind.SYMBOL, symbols.CALL_ESCAPES[node.value])
            else:
                self._emit(TypstTokenKind.ATOM, node.value)
        elif isinstance(node, Symbol):
            self._emit(TypstTokenKind.SYMBOL, node.name)
        elif isinstance(node, TextLiteral):
            self._emit(TypstTokenKind.TEXT, _quote(node.value))
        elif isinstance(node, Comment):
            self._emit(TypstTokenKind.COMMENT, "//" + node.value)
            self._emit(TypstTokenKind.NEWLINE, "\n")
        elif isinstance(node, FuncCall):
            self._write_call(
                node.name,
                [[arg] for arg in node.args],
                options=node.options,
                trailing_options=True,
            )
        elif isinstance(node, Grouped):
            self._emit(TypstTokenKind.OPEN, "(")
            self._write(node.body)
            self._emit(TypstTokenKind.CLOSE, ")")
        elif isinstance(node, Binary):
            self._write(node.left)
            self._write(node.op)
            self._write(node.right)
        elif isinstance(node, Sequence):
            for item in node.items:
                self._write(item)
        elif isinstance(node, Fraction):
            self._write(node.numerator)
            self._emit(TypstTokenKind.SLASH, "/")
            self._write(node.denominator)
        elif isinstance(node, SupSub):
            self._write_supsub(node)
        elif isinstance(node, Align):
            for index, row in enumerate(node.rows):
                if index:
                    self._emit(TypstTokenKind.ATOM, "\\")
                self._write_cells(row)
        elif isinstance(node, Matrix):
            options = () if node.delim is None else (("delim", node.delim),)
            self._write_call("mat", [list(row) for row in node.rows], options, row_separator=";")
        elif isinstance(node, Cases):
            options = (("reverse", "#true"),) if node.reverse else ()
            self._write_call("cases", [[row] for row in node.rows], options, aligned=True)
        else:
            raise WriteError(f"Cannot write {type(node).__name__}")

    def _write_supsub(self, node: SupSub) -> None:
        self._write(node.base)
        for _ in range(node.primes):
            self._emit(TypstTokenKind.ATOM, "'")
        last: TypstNode | None = None
        if node.sub is not None:
            self._emit(TypstTokenKind.SCRIPT, "_")
            self._write(node.sub)
            last = node.sub
        if node.sup is not None:
            self._emit(TypstTokenKind.SCRIPT, "^")
            self._write(node.sup)
            last = node.sup
        if last is not None and not isinstance(last, Grouped):
            self._emit(TypstTokenKind.SOFT_SPACE)

    def _write_cells(self, cells: tuple[TypstNode, ...]) -> None:
        for index, cell in enumerate(cells):
            if index:
                self._emit(TypstTokenKind.ALIGN, "&")
            self._write(cell)

    def _write_call(
        self,
        name: str,
        rows: list[list],
        options: tuple[tuple[str, str], ...] = (),
        row_separator: str = ",",
        aligned: bool = False,
        trailing_options: bool = False,
    ) -> None:
        """
        name(options..., rows...) or name(rows..., options...)

        Each row is a list of arguments separated by commas; rows are
        separated by row_separator. With aligned=True every row entry is a
        tuple of cells joined by &.
        """
        self._emit(TypstTokenKind.FUNCTION, name)
        self._emit(TypstTokenKind.OPEN, "(")
        self._function_depth += 1
        try:
            if not trailing_options:
                self._write_options(options)
                if options and rows:
                    self._emit(TypstTokenKind.SEPARATOR, ",")
            for row_index, row in enumerate(rows):
                if row_index:
                    self._emit(TypstTokenKind.SEPARATOR, row_separator)
                for arg_index, arg in enumerate(row):
                    if arg_index:
                        self._emit(TypstTokenKind.SEPARATOR, ",")
                    if aligned:
                        self._write_cells(arg)
                    else:
                        self._write(arg)
            if trailing_options:
                if options and rows:
                    self._emit(TypstTokenKind.SEPARATOR, ",")
                self._write_options(options)
        finally:
            self._function_depth -= 1
        self._emit(TypstTokenKind.CLOSE, ")")

    def _write_options(self, options: tuple[tuple[str, str], ...]) -> None:
        for index, (key, value) in enumerate(options):
            if index:
                self._emit(TypstTokenKind.SEPARATOR, ",")
            self._emit(TypstTokenKind.OPTION, f"{key}: {value}")

    # ------------------------------------------------------------------
    # Tokens to text
    # ------------------------------------------------------------------

    def _flush(self) -> str:
        out: list[str] = []
        prev: TypstToken | None = None
        soft_space = False
        unary_sign = False

        for tok in self._queue:
            if tok.kind == TypstTokenKind.SOFT_SPACE:
                soft_space = prev is not None
                continue

            if prev is not None:
                if soft_space:
                    space = not (
                        tok.kind in SOFT_SPACE_DROPPED_KINDS
                        or _is_atom(tok, SOFT_SPACE_DROPPED_BEFORE)
                    )
                elif unary_sign:
                    space = False
                else:
                    space = _needs_space(prev, tok)
                if space:
                    out.append(" ")

            out.append(tok.value)
            unary_sign = _is_atom(tok, SIGN_ATOMS) and _starts_operand(prev)
            prev = tok
            soft_space = False

        return "".join(out)

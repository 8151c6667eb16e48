"""
Typst AST - the converter's output, the writer's input

A second closed set of immutable node models, deliberately separate from the
LaTeX tree: Typst has its own notion of what needs parentheses, and that
notion lives here as Precedence.

Fun fact: Typst math strips one layer of parentheses around fractions and
attachments - `(a+b)/2` renders without them. That is why the converter can
wrap operands freely without cluttering the output!
"""

from enum import IntEnum
from typing import Union

from pydantic import BaseModel


class Precedence(IntEnum):
    """
    Typst math parse levels, loosest first

    An operand must be parenthesized when its own level is too loose for the
    slot it occupies.
    """

    SEQUENCE = 0  # juxtaposition and infix operators: a b, a + b
    FRACTION = 1  # a/b
    ATTACH = 2  # a_b, a^b, a'
    ATOM = 3  # identifiers, literals, calls, parenthesized groups


class _Node(BaseModel):
    model_config = {"frozen": True}


class Empty(_Node):
    """Nothing; writes no output"""

    pass


class Atom(_Node):
    """Literal math text written as-is: letters, digits, operators, escapes"""

    value: str


class Symbol(_Node):
    """Named Typst symbol (alpha, plus.minus, arrow.r.long, RR)"""

    name: str


class TextLiteral(_Node):
    """Quoted text: "some text" (value is unescaped)"""

    value: str


class Comment(_Node):
    """Line comment, written as //value"""

    value: str


class FuncCall(_Node):
    """
    Function call: name(arg, ..., key: value)

    Options are (key, raw Typst value) pairs, e.g. ("limits", "#true").
    """

    name: str
    args: tuple["TypstNode", ...] = ()
    options: tuple[tuple[str, str], ...] = ()


class Grouped(_Node):
    """Explicit parentheses around a node"""

    body: "TypstNode"


class Binary(_Node):
    """Infix operator with both operands: a = b, a + b"""

    op: Union[Atom, Symbol]
    left: "TypstNode"
    right: "TypstNode"


class Sequence(_Node):
    """Juxtaposed items: a b c"""

    items: tuple["TypstNode", ...] = ()


class Fraction(_Node):
    numerator: "TypstNode"
    denominator: "TypstNode"


class SupSub(_Node):
    """Attachment: base'_sub^sup with `primes` prime marks"""

    base: "TypstNode"
    sup: Union["TypstNode", None] = None
    sub: Union["TypstNode", None] = None
    primes: int = 0


class Align(_Node):
    """Aligned rows: cells joined by &, rows by \\"""

    rows: tuple[tuple["TypstNode", ...], ...] = ()


class Matrix(_Node):
    """
    mat(...) call

    `delim` is the raw Typst value of the delim option ('"["', "#none"), or
    None for Typst's default parentheses.
    """

    rows: tuple[tuple["TypstNode", ...], ...] = ()
    delim: str | None = None


class Cases(_Node):
    """cases(...) call; `reverse` puts the brace on the right"""

    rows: tuple[tuple["TypstNode", ...], ...] = ()
    reverse: bool = False


TypstNode = Union[
    Empty,
    Atom,
    Symbol,
    TextLiteral,
    Comment,
    FuncCall,
    Grouped,
    Binary,
    Sequence,
    Fraction,
    SupSub,
    Align,
    Matrix,
    Cases,
]

for _model in (FuncCall, Grouped, Binary, Sequence, Fraction, SupSub, Align, Matrix, Cases):
    _model.model_rebuild()

EMPTY = Empty()


def precedence(node: TypstNode) -> Precedence:
    """Parse level of a node as written by TypstWriter"""
    if isinstance(node, Sequence):
        if len(node.items) == 1:
            return precedence(node.items[0])
        return Precedence.SEQUENCE if node.items else Precedence.ATOM
    if isinstance(node, (Binary, Align)):
        return Precedence.SEQUENCE
    if isinstance(node, Fraction):
        return Precedence.FRACTION
    if isinstance(node, SupSub):
        return Precedence.ATTACH
    return Precedence.ATOM


def is_empty(node: TypstNode | None) -> bool:
    return node is None or isinstance(node, Empty) or (
        isinstance(node, Sequence) and all(is_empty(item) for item in node.items)
    )

"""
LaTeX AST - the parser's output

A closed set of immutable node models. The converter matches on these
classes one by one; adding a variant means teaching the converter about it.

Fun fact: LaTeX has no AST of its own - TeX expands macros straight into
typeset boxes. Building a tree is what makes translation to another
language possible at all!
"""

from typing import Union

from pydantic import BaseModel


class _Node(BaseModel):
    model_config = {"frozen": True}


class Group(_Node):
    """
    Brace-delimited scope `{...}`, or any ordered run of nodes

    Children are in rendering order. An empty group stands for "nothing",
    e.g. the missing base of `_{a}`.
    """

    children: tuple["TexNode", ...] = ()


class Symbol(_Node):
    """Single glyph: letter, digit run, operator, escaped character"""

    value: str


class Text(_Node):
    """Text-mode run, e.g. the body of \\text{...}"""

    value: str
    style: str = "text"  # name of the producing command: text, textbf, ...


class Comment(_Node):
    """`% ...` comment, without the percent sign"""

    value: str


class Command(_Node):
    """
    Backslash command with its arguments

    Attributes:
        name: Command name without the backslash (`alpha`, `sqrt`, `,`)
        args: Mandatory arguments, exactly as many as the registered arity
        optional: The `[...]` argument, when the command accepts one
    """

    name: str
    args: tuple["TexNode", ...] = ()
    optional: Union["TexNode", None] = None


class Fraction(_Node):
    """\\frac-like command with numerator and denominator (frac, binom, ...)"""

    name: str = "frac"
    numerator: "TexNode"
    denominator: "TexNode"


class SupSub(_Node):
    """Base with superscript and/or subscript attached"""

    base: "TexNode"
    sup: Union["TexNode", None] = None
    sub: Union["TexNode", None] = None


class LeftRight(_Node):
    """\\left<delim> ... \\right<delim>; delimiters kept as raw LaTeX"""

    left: str
    body: "TexNode"
    right: str


class Environment(_Node):
    """
    \\begin{name} ... \\end{name}

    Rows are split on `\\\\`, cells on `&`; every cell is a Group.
    `argument` holds the column spec of environments such as array.
    """

    name: str
    rows: tuple[tuple[Group, ...], ...] = ()
    argument: str | None = None


class LineBreak(_Node):
    """`\\\\` outside of any environment"""

    pass


TexNode = Union[
    Group,
    Symbol,
    Text,
    Comment,
    Command,
    Fraction,
    SupSub,
    LeftRight,
    Environment,
    LineBreak,
]

for _model in (Group, Command, Fraction, SupSub, LeftRight, Environment):
    _model.model_rebuild()

EMPTY_GROUP = Group()

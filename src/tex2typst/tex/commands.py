"""
Command signatures - how many arguments each LaTeX command takes

The parser looks up every command here. Anything not registered is a
zero-argument symbol, so unknown commands pass through to the converter
instead of failing the parse.
"""

from types import MappingProxyType

from pydantic import BaseModel, Field


class CommandSignature(BaseModel):
    """Argument shape of a command: 0-2 mandatory plus at most one optional"""

    mandatory: int = Field(default=0, ge=0, le=2)
    optional: bool = False

    model_config = {"frozen": True}


SYMBOL = CommandSignature()
UNARY = CommandSignature(mandatory=1)
BINARY = CommandSignature(mandatory=2)
OPTIONAL_UNARY = CommandSignature(mandatory=1, optional=True)

UNARY_COMMANDS = (
    # text-like (body arrives as a single TEXT token)
    "text",
    "textrm",
    "textnormal",
    "textbf",
    "textit",
    "textsf",
    "texttt",
    "mbox",
    "operatorname",
    # fonts
    "mathbb",
    "mathbf",
    "mathcal",
    "mathfrak",
    "mathit",
    "mathrm",
    "mathscr",
    "mathsf",
    "mathtt",
    "boldsymbol",
    "bold",
    "bm",
    "pmb",
    "rm",
    # accents and decorations
    "acute",
    "bar",
    "breve",
    "check",
    "ddot",
    "dddot",
    "dot",
    "grave",
    "hat",
    "widehat",
    "tilde",
    "widetilde",
    "vec",
    "mathring",
    "overline",
    "underline",
    "overbrace",
    "underbrace",
    "overrightarrow",
    "overleftarrow",
    "overleftrightarrow",
    "cancel",
    # misc
    "floor",
    "ceil",
    "abs",
    "norm",
    "pmod",
)

BINARY_COMMANDS = (
    "binom",
    "dbinom",
    "tbinom",
    "overset",
    "underset",
    "stackrel",
)

# Fraction-like binary commands become tex.nodes.Fraction
FRACTION_COMMANDS = frozenset(
    {"frac", "dfrac", "tfrac", "cfrac", "binom", "dbinom", "tbinom"}
)

OPTIONAL_UNARY_COMMANDS = ("sqrt",)

COMMAND_SIGNATURES: MappingProxyType[str, CommandSignature] = MappingProxyType(
    {
        **{name: UNARY for name in UNARY_COMMANDS},
        **{name: BINARY for name in BINARY_COMMANDS},
        **{name: BINARY for name in FRACTION_COMMANDS},
        **{name: OPTIONAL_UNARY for name in OPTIONAL_UNARY_COMMANDS},
    }
)


def lookup_signature(name: str) -> CommandSignature:
    """
    Signature of a command name (without backslash)

    Unregistered names fall back to SYMBOL - zero arguments.
    """
    return COMMAND_SIGNATURES.get(name, SYMBOL)


def is_registered(name: str) -> bool:
    return name in COMMAND_SIGNATURES


# Environments

ALIGN_ENVIRONMENTS = frozenset(
    {
        "align",
        "align*",
        "aligned",
        "alignat",
        "alignat*",
        "alignedat",
        "split",
        "gather",
        "gather*",
        "gathered",
        "equation",
        "equation*",
        "eqnarray",
        "eqnarray*",
    }
)

MATRIX_ENVIRONMENTS = frozenset(
    {
        "matrix",
        "smallmatrix",
        "pmatrix",
        "bmatrix",
        "Bmatrix",
        "vmatrix",
        "Vmatrix",
        "array",
        "subarray",
    }
)

CASES_ENVIRONMENTS = frozenset({"cases", "dcases", "rcases"})

# Environments whose \begin{name} is followed by a brace argument
ARGUMENT_ENVIRONMENTS = frozenset({"array", "subarray", "alignat", "alignat*", "alignedat"})

ENVIRONMENTS = ALIGN_ENVIRONMENTS | MATRIX_ENVIRONMENTS | CASES_ENVIRONMENTS

"""
Symbol tables - LaTeX command names to Typst names

All tables are read-only module data, built once at import:

- SYMBOL_MAP: commands whose Typst name differs (\\pm -> plus.minus)
- TYPST_NATIVE: commands whose Typst name is the same (\\alpha -> alpha)
- DROPPED_COMMANDS: sizing and style switches with no Typst counterpart
- FUNCTION_MAP: one-argument commands that become a Typst call
- OPERATOR_PRECEDENCE: infix operators by binding strength

Fun fact: Typst's dotted names (arrow.r.long.double) are "modifiers" that
can be given in any order - arrow.double.r.long is the very same arrow.
LaTeX needed a separate command name for each one!
"""

from enum import IntEnum
from types import MappingProxyType

SYMBOL_MAP: MappingProxyType[str, str] = MappingProxyType(
    {
        # Greek variants (LaTeX and Typst disagree on which form is default)
        "epsilon": "epsilon.alt",
        "varepsilon": "epsilon",
        "phi": "phi.alt",
        "varphi": "phi",
        "vartheta": "theta.alt",
        "varpi": "pi.alt",
        "varrho": "rho.alt",
        "varsigma": "sigma.alt",
        "varkappa": "kappa.alt",
        # Binary operators
        "pm": "plus.minus",
        "mp": "minus.plus",
        "cdot": "dot.op",
        "circ": "compose",
        "oplus": "plus.circle",
        "ominus": "minus.circle",
        "otimes": "times.circle",
        "odot": "dot.circle",
        "cup": "union",
        "cap": "inter",
        "sqcup": "union.sq",
        "sqcap": "inter.sq",
        "uplus": "union.plus",
        "setminus": "without",
        "wedge": "and",
        "land": "and",
        "vee": "or",
        "lor": "or",
        "neg": "not",
        "lnot": "not",
        "amalg": "product.co",
        # Relations
        "le": "lt.eq",
        "leq": "lt.eq",
        "ge": "gt.eq",
        "geq": "gt.eq",
        "leqslant": "lt.eq.slant",
        "geqslant": "gt.eq.slant",
        "ne": "eq.not",
        "neq": "eq.not",
        "sim": "tilde.op",
        "simeq": "tilde.eq",
        "cong": "tilde.equiv",
        "propto": "prop",
        "ll": "lt.double",
        "gg": "gt.double",
        "preceq": "prec.eq",
        "succeq": "succ.eq",
        "notin": "in.not",
        "ni": "in.rev",
        "subseteq": "subset.eq",
        "supseteq": "supset.eq",
        "subsetneq": "subset.neq",
        "supsetneq": "supset.neq",
        "mid": "divides",
        "nmid": "divides.not",
        "vdash": "tack.r",
        "dashv": "tack.l",
        "coloneqq": "colon.eq",
        "doteq": "eq.dots",
        # Arrows
        "to": "arrow.r",
        "rightarrow": "arrow.r",
        "leftarrow": "arrow.l",
        "gets": "arrow.l",
        "leftrightarrow": "arrow.l.r",
        "Rightarrow": "arrow.r.double",
        "Leftarrow": "arrow.l.double",
        "Leftrightarrow": "arrow.l.r.double",
        "longrightarrow": "arrow.r.long",
        "longleftarrow": "arrow.l.long",
        "longleftrightarrow": "arrow.l.r.long",
        "Longrightarrow": "arrow.r.double.long",
        "implies": "arrow.r.double.long",
        "Longleftarrow": "arrow.l.double.long",
        "impliedby": "arrow.l.double.long",
        "Longleftrightarrow": "arrow.l.r.double.long",
        "iff": "arrow.l.r.double.long",
        "mapsto": "arrow.r.bar",
        "longmapsto": "arrow.r.long.bar",
        "uparrow": "arrow.t",
        "downarrow": "arrow.b",
        "updownarrow": "arrow.t.b",
        "Uparrow": "arrow.t.double",
        "Downarrow": "arrow.b.double",
        "hookrightarrow": "arrow.r.hook",
        "hookleftarrow": "arrow.l.hook",
        "nearrow": "arrow.tr",
        "searrow": "arrow.br",
        "nwarrow": "arrow.tl",
        "swarrow": "arrow.bl",
        "rightharpoonup": "harpoon.rt",
        "rightleftharpoons": "harpoons.rtlb",
        # Big operators
        "int": "integral",
        "iint": "integral.double",
        "iiint": "integral.triple",
        "oint": "integral.cont",
        "bigcup": "union.big",
        "bigcap": "inter.big",
        "bigsqcup": "union.sq.big",
        "bigoplus": "plus.circle.big",
        "bigotimes": "times.circle.big",
        "bigodot": "dot.circle.big",
        "bigvee": "or.big",
        "bigwedge": "and.big",
        "biguplus": "union.plus.big",
        # Miscellaneous symbols
        "infty": "infinity",
        "hbar": "planck.reduce",
        "nexists": "exists.not",
        "varnothing": "nothing",
        "cdots": "dots.c",
        "ldots": "dots.h",
        "dots": "dots.h",
        "vdots": "dots.v",
        "ddots": "dots.down",
        "langle": "angle.l",
        "rangle": "angle.r",
        "lfloor": "floor.l",
        "rfloor": "floor.r",
        "lceil": "ceil.l",
        "rceil": "ceil.r",
        "lbrace": "brace.l",
        "rbrace": "brace.r",
        "lbrack": "bracket.l",
        "rbrack": "bracket.r",
        "vert": "bar.v",
        "lvert": "bar.v",
        "rvert": "bar.v",
        "Vert": "bar.v.double",
        "lVert": "bar.v.double",
        "rVert": "bar.v.double",
        "|": "bar.v.double",
        "triangle": "triangle.t",
        "ddagger": "dagger.double",
        "measuredangle": "angle.arc",
        "imath": "dotless.i",
        "jmath": "dotless.j",
        "bmod": "mod",
        "lgroup": "paren.l.flat",
        "rgroup": "paren.r.flat",
        # Spacing
        ",": "thin",
        "thinspace": "thin",
        ":": "med",
        ">": "med",
        "medspace": "med",
        ";": "thick",
        "thickspace": "thick",
        " ": "space",
        "enspace": "space.en",
        "qquad": "wide",
    }
)

TYPST_OPERATORS = frozenset(
    {
        "arccos",
        "arcsin",
        "arctan",
        "arg",
        "cos",
        "cosh",
        "cot",
        "coth",
        "csc",
        "csch",
        "deg",
        "det",
        "dim",
        "exp",
        "gcd",
        "hom",
        "id",
        "im",
        "inf",
        "ker",
        "lcm",
        "lg",
        "lim",
        "liminf",
        "limsup",
        "ln",
        "log",
        "max",
        "min",
        "mod",
        "Pr",
        "sec",
        "sech",
        "sin",
        "sinh",
        "sup",
        "tan",
        "tanh",
        "tr",
    }
)

TYPST_NATIVE = TYPST_OPERATORS | frozenset(
    {
        # Greek
        "alpha",
        "beta",
        "gamma",
        "delta",
        "zeta",
        "eta",
        "theta",
        "iota",
        "kappa",
        "lambda",
        "mu",
        "nu",
        "xi",
        "omicron",
        "pi",
        "rho",
        "sigma",
        "tau",
        "upsilon",
        "chi",
        "psi",
        "omega",
        "Gamma",
        "Delta",
        "Theta",
        "Lambda",
        "Xi",
        "Pi",
        "Sigma",
        "Upsilon",
        "Phi",
        "Psi",
        "Omega",
        # Operators and relations
        "sum",
        "prod",
        "coprod",
        "times",
        "div",
        "star",
        "bullet",
        "approx",
        "equiv",
        "in",
        "subset",
        "supset",
        "perp",
        "parallel",
        # Symbols
        "partial",
        "nabla",
        "forall",
        "exists",
        "emptyset",
        "aleph",
        "beth",
        "ell",
        "wp",
        "Re",
        "Im",
        "top",
        "bot",
        "dagger",
        "angle",
        "square",
        "diamond",
        "checkmark",
        "therefore",
        "because",
        "prime",
        "quad",
        "digamma",
        "ast",
        "prec",
        "succ",
        "models",
        "asymp",
        "degree",
        "colon",
        "backslash",
    }
)

# Sizing and style switches; \! is a negative thin space Typst has no need for
DROPPED_COMMANDS = frozenset(
    {
        "!",
        "big",
        "Big",
        "bigg",
        "Bigg",
        "bigl",
        "bigr",
        "Bigl",
        "Bigr",
        "biggl",
        "biggr",
        "Biggl",
        "Biggr",
        "displaystyle",
        "textstyle",
        "scriptstyle",
        "scriptscriptstyle",
        "limits",
        "nolimits",
        "hline",
        "nonumber",
        "notag",
    }
)

# One-argument commands rendered as a call to a single Typst function
FUNCTION_MAP: MappingProxyType[str, str] = MappingProxyType(
    {
        # Fonts
        "mathcal": "cal",
        "mathscr": "scr",
        "mathfrak": "frak",
        "mathit": "italic",
        "mathrm": "upright",
        "rm": "upright",
        "mathsf": "sans",
        "mathtt": "mono",
        "boldsymbol": "bold",
        "bold": "bold",
        "bm": "bold",
        "pmb": "bold",
        # Accents
        "acute": "acute",
        "bar": "macron",
        "breve": "breve",
        "check": "caron",
        "ddot": "dot.double",
        "dddot": "dot.triple",
        "dot": "dot",
        "grave": "grave",
        "hat": "hat",
        "widehat": "hat",
        "tilde": "tilde",
        "widetilde": "tilde",
        "vec": "arrow",
        "mathring": "circle",
        "overrightarrow": "arrow",
        "overleftarrow": "arrow.l",
        "overleftrightarrow": "arrow.l.r",
        # Decorations
        "overline": "overline",
        "underline": "underline",
        "overbrace": "overbrace",
        "underbrace": "underbrace",
        "cancel": "cancel",
        # Delimiting functions
        "floor": "floor",
        "ceil": "ceil",
        "abs": "abs",
        "norm": "norm",
    }
)

# Text-mode commands: Typst function wrapping the quoted text (None: bare text)
TEXT_STYLES: MappingProxyType[str, str | None] = MappingProxyType(
    {
        "text": None,
        "textrm": None,
        "textnormal": None,
        "mbox": None,
        "textbf": "bold",
        "textit": "italic",
        "textsf": "sans",
        "texttt": "mono",
    }
)

# Characters that need a backslash (or a name) in Typst math
ATOM_ESCAPES: MappingProxyType[str, str] = MappingProxyType(
    {
        "/": "\\/",
        '"': '\\"',
        "#": "\\#",
        "$": "\\$",
        "@": "\\@",
        "\\{": "{",
        "\\}": "}",
        "\\%": "%",
        "\\$": "\\$",
        "\\#": "\\#",
        "\\&": "\\&",
        "\\_": "\\_",
    }
)

# Atoms that become named symbols
ATOM_SYMBOLS: MappingProxyType[str, str] = MappingProxyType(
    {
        "~": "space.nobreak",
        "\\|": "bar.v.double",
    }
)

# Inside a function call these would be read as argument syntax
CALL_ESCAPES: MappingProxyType[str, str] = MappingProxyType(
    {
        ",": "comma",
        ";": "semi",
        ":": "colon",
    }
)


# \left / \right delimiters

DELIMITER_MAP: MappingProxyType[str, str] = MappingProxyType(
    {
        "(": "(",
        ")": ")",
        "[": "[",
        "]": "]",
        "\\{": "{",
        "\\}": "}",
        "|": "|",
        "/": "\\/",
        "<": "angle.l",
        ">": "angle.r",
        "\\|": "bar.v.double",
        "\\langle": "angle.l",
        "\\rangle": "angle.r",
        "\\lfloor": "floor.l",
        "\\rfloor": "floor.r",
        "\\lceil": "ceil.l",
        "\\rceil": "ceil.r",
        "\\lvert": "|",
        "\\rvert": "|",
        "\\vert": "|",
        "\\lVert": "bar.v.double",
        "\\rVert": "bar.v.double",
        "\\Vert": "bar.v.double",
        "\\lgroup": "paren.l.flat",
        "\\rgroup": "paren.r.flat",
        "\\uparrow": "arrow.t",
        "\\downarrow": "arrow.b",
        "\\backslash": "backslash",
    }
)

# Pairs written as bare delimiters
BARE_DELIMITER_PAIRS = frozenset({("(", ")"), ("[", "]"), ("\\{", "\\}")})

# Pairs written as a rounding function
ROUNDING_PAIRS: MappingProxyType[tuple[str, str], str] = MappingProxyType(
    {
        ("\\lfloor", "\\rfloor"): "floor",
        ("\\lceil", "\\rceil"): "ceil",
        ("\\lfloor", "\\rceil"): "round",
    }
)

# Delimiters that must be escaped when left unpaired inside lr(...)
UNPAIRED_ESCAPES: MappingProxyType[str, str] = MappingProxyType(
    {
        "(": "\\(",
        ")": "\\)",
        "[": "\\[",
        "]": "\\]",
        "{": "\\{",
        "}": "\\}",
    }
)


# Matrix environments: raw value of mat()'s delim option (None: default parens)

MATRIX_DELIMS: MappingProxyType[str, str | None] = MappingProxyType(
    {
        "matrix": "#none",
        "smallmatrix": "#none",
        "array": "#none",
        "subarray": "#none",
        "pmatrix": None,
        "bmatrix": '"["',
        "Bmatrix": '"{"',
        "vmatrix": '"|"',
        "Vmatrix": '"||"',
    }
)


# Infix operators


class OperatorPrecedence(IntEnum):
    """Binding strength of infix operators; sequences split at the weakest"""

    RELATION = 1
    ADDITIVE = 2
    MULTIPLICATIVE = 3


_RELATIONS = (
    "=",
    "<",
    ">",
    "lt.eq",
    "gt.eq",
    "lt.eq.slant",
    "gt.eq.slant",
    "eq.not",
    "eq.def",
    "eq.dots",
    "colon.eq",
    "approx",
    "equiv",
    "asymp",
    "tilde.op",
    "tilde.eq",
    "tilde.equiv",
    "prop",
    "lt.double",
    "gt.double",
    "prec",
    "succ",
    "prec.eq",
    "succ.eq",
    "in",
    "in.not",
    "in.rev",
    "subset",
    "supset",
    "subset.eq",
    "supset.eq",
    "subset.neq",
    "supset.neq",
    "divides",
    "divides.not",
    "perp",
    "parallel",
    "tack.r",
    "tack.l",
    "models",
    "arrow.r",
    "arrow.l",
    "arrow.l.r",
    "arrow.r.double",
    "arrow.l.double",
    "arrow.l.r.double",
    "arrow.r.long",
    "arrow.l.long",
    "arrow.l.r.long",
    "arrow.r.double.long",
    "arrow.l.double.long",
    "arrow.l.r.double.long",
    "arrow.r.bar",
    "arrow.r.long.bar",
    "arrow.r.hook",
    "arrow.l.hook",
)

_ADDITIVE = (
    "+",
    "-",
    "plus.minus",
    "minus.plus",
    "union",
    "union.sq",
    "union.plus",
    "without",
    "or",
    "plus.circle",
    "minus.circle",
)

_MULTIPLICATIVE = (
    "*",
    "times",
    "div",
    "dot.op",
    "ast",
    "compose",
    "inter",
    "inter.sq",
    "and",
    "times.circle",
    "dot.circle",
)

OPERATOR_PRECEDENCE: MappingProxyType[str, OperatorPrecedence] = MappingProxyType(
    {
        **{op: OperatorPrecedence.RELATION for op in _RELATIONS},
        **{op: OperatorPrecedence.ADDITIVE for op in _ADDITIVE},
        **{op: OperatorPrecedence.MULTIPLICATIVE for op in _MULTIPLICATIVE},
    }
)


def map_command(name: str) -> str | None:
    """
    Typst symbol name of a nullary LaTeX command

    Returns:
        The Typst name, or None when the command has no symbol mapping
        (dropped commands and unknown commands both return None)
    """
    if name in SYMBOL_MAP:
        return SYMBOL_MAP[name]
    if name in TYPST_NATIVE:
        return name
    return None


def double_struck(letter: str) -> str | None:
    """RR for R, NN for N, ...; None when Typst has no doubled name"""
    if len(letter) == 1 and letter.isascii() and letter.isupper():
        return letter * 2
    return None

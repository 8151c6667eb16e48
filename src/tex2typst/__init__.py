"""
tex2typst - LaTeX math to Typst math

Translates LaTeX math, alone or embedded in prose, into idiomatic Typst
markup with as few parentheses as Typst's own grammar allows.

Fun fact: Typst was started in 2019 as a master's thesis project in Berlin.
LaTeX had a 35-year head start - hence the need for a converter!
"""

from tex2typst.api import (
    Tex2Typst,
    tex2typst,
    tex2typst_with_macros,
    tex2typst_with_shorthands,
    text_and_tex2typst,
    text_and_tex2typst_with_macros,
    text_and_tex2typst_with_shorthands,
)
from tex2typst.kernel.policy import ConversionPolicy
from tex2typst.tex.parser import parse_tex
from tex2typst.typst.converter import convert_tree
from tex2typst.typst.writer import SymbolShorthand, TypstWriter

__version__ = "0.1.0"
__all__ = [
    "Tex2Typst",
    "ConversionPolicy",
    "SymbolShorthand",
    "TypstWriter",
    "parse_tex",
    "convert_tree",
    "tex2typst",
    "tex2typst_with_macros",
    "tex2typst_with_shorthands",
    "text_and_tex2typst",
    "text_and_tex2typst_with_macros",
    "text_and_tex2typst_with_shorthands",
    "__version__",
]

"""
Shared fixtures for the tex2typst test suite

Pipeline stages (parser, converter, writer, macro table) are built fresh per
test, and the policies cover both the lenient default and a strict variant
with a shallow macro ceiling and comments dropped.

Fun fact: the `\\d` and `\\pp` macros below are the kind of shorthand almost
every physics paper defines in its preamble. A converter that ignored user
macros would fail on most real documents before reaching the first equation!
"""

import pytest

from tex2typst.api import Tex2Typst
from tex2typst.kernel.policy import ConversionPolicy
from tex2typst.tex.macros import MacroTable
from tex2typst.tex.parser import LatexParser
from tex2typst.typst.converter import TypstConverter
from tex2typst.typst.writer import SymbolShorthand, TypstWriter

PARTIAL_MACROS = r"""
\newcommand{\d}{\partial}
\newcommand{\pp}[2][]{\frac{\partial #1}{\partial #2}}
\newcommand{\R}{\mathbb{R}}
"""


@pytest.fixture
def policy() -> ConversionPolicy:
    """Provide the default conversion policy"""
    return ConversionPolicy()


@pytest.fixture
def strict_policy() -> ConversionPolicy:
    """
    Provide a restrictive policy

    Shallow expansion ceiling, no macro redefinition, comments dropped.
    """
    return ConversionPolicy(
        max_macro_depth=4,
        allow_macro_redefinition=False,
        keep_comments=False,
    )


@pytest.fixture
def parser() -> LatexParser:
    return LatexParser()


@pytest.fixture
def converter(policy: ConversionPolicy) -> TypstConverter:
    return TypstConverter(policy)


@pytest.fixture
def writer() -> TypstWriter:
    """Provide a fresh single-use writer"""
    return TypstWriter()


@pytest.fixture
def macro_table(policy: ConversionPolicy) -> MacroTable:
    return MacroTable(policy)


@pytest.fixture
def partial_macros() -> str:
    """Macro declarations used across scenarios: \\d, \\pp and \\R"""
    return PARTIAL_MACROS


@pytest.fixture
def common_shorthands() -> list[SymbolShorthand]:
    """Shorthands for a few frequent symbols"""
    return [
        SymbolShorthand(original="plus.minus", shorthand="+-"),
        SymbolShorthand(original="integral", shorthand="int"),
        SymbolShorthand(original="arrow.r.long", shorthand="-->"),
        SymbolShorthand(original="arrow.r.double.long", shorthand="==>"),
    ]


@pytest.fixture
def tex2typst_converter(partial_macros: str) -> Tex2Typst:
    """Provide a facade preloaded with the shared macros"""
    return Tex2Typst(macros=partial_macros)

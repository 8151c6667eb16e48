"""
Tex2Typst - Main facade

The primary interface of the package. It wires the pipeline together:

    macro expansion -> tokenize -> parse -> convert -> write -> shorthands

and offers the same pipeline for prose with embedded math. Every call builds
its own macro table and writer, so a Tex2Typst instance can be shared freely.

Example:
    >>> from tex2typst import Tex2Typst
    >>> converter = Tex2Typst(macros=r"\\newcommand{\\R}{\\mathbb{R}}")
    >>> converter.convert(r"x \\in \\R")
    'x in RR'
    >>> converter.convert_mixed(r"Let \\(x \\in \\R\\).")
    'Let $x in RR$.'
"""

from typing import Iterable

from tex2typst.kernel.logging import LogOperation, get_logger, summarize_input
from tex2typst.kernel.policy import ConversionPolicy, default_policy
from tex2typst.mixed import convert_mixed
from tex2typst.tex.lexer import tokenize
from tex2typst.tex.macros import MacroTable
from tex2typst.tex.parser import LatexParser
from tex2typst.typst.converter import TypstConverter
from tex2typst.typst.writer import SymbolShorthand, TypstWriter

logger = get_logger(__name__)


class Tex2Typst:
    """
    LaTeX to Typst converter

    Holds the conversion policy, the macro declarations and the shorthand
    list; all three apply to every conversion made through the instance.
    """

    def __init__(
        self,
        policy: ConversionPolicy | None = None,
        macros: str | None = None,
        shorthands: Iterable[SymbolShorthand] | None = None,
    ) -> None:
        """
        Initialize converter

        Args:
            policy: Conversion policy (uses defaults if None)
            macros: \\newcommand declarations available to every conversion
            shorthands: Symbol shorthands applied to every output

        Raises:
            MacroError: If the macro declarations are malformed
        """
        self.policy = policy or default_policy
        self.macros = macros or ""
        self.shorthands = tuple(shorthands or ())
        self.parser = LatexParser()
        self.converter = TypstConverter(self.policy)

        # Fail on bad declarations now rather than on the first conversion
        self._macro_table()

    def _macro_table(self) -> MacroTable:
        table = MacroTable(self.policy)
        if self.macros:
            table.define(self.macros)
        return table

    def convert(self, tex: str) -> str:
        """
        Convert LaTeX math (without $ delimiters) to Typst math

        Raises:
            Tex2TypstError: On the first failure anywhere in the pipeline
        """
        with LogOperation(logger, "tex2typst", input=summarize_input(tex)):
            return self._convert_math(tex, self._macro_table())

    def convert_mixed(self, text: str) -> str:
        """
        Convert prose with embedded LaTeX math

        Macros apply to every math span of the document.

        Raises:
            Tex2TypstError: On the first failure in any math span
        """
        with LogOperation(logger, "text_and_tex2typst", input=summarize_input(text)):
            table = self._macro_table()
            return convert_mixed(
                text, lambda math: self._convert_math(math, table, keep_line_end=True)
            )

    def _convert_math(
        self, tex: str, table: MacroTable, *, keep_line_end: bool = False
    ) -> str:
        expanded = table.expand(tex)
        tree = self.parser.parse(tokenize(expanded))
        writer = TypstWriter()
        writer.serialize(self.converter.convert(tree))
        if self.shorthands:
            writer.replace_with_shorthand(self.shorthands)
        typst = writer.finalize()
        if keep_line_end and writer.ends_with_comment:
            # the closing $ must not land inside the comment
            typst += "\n"
        return typst


# Convenience functions


def tex2typst(tex: str) -> str:
    """
    Convert LaTeX math to Typst math

    Example:
        >>> tex2typst(r"\\frac{1}{2}")
        '1/2'
    """
    return Tex2Typst().convert(tex)


def tex2typst_with_macros(tex: str, macro_definitions: str) -> str:
    """Convert LaTeX math, expanding the given \\newcommand declarations first"""
    return Tex2Typst(macros=macro_definitions).convert(tex)


def tex2typst_with_shorthands(tex: str, shorthands: Iterable[SymbolShorthand]) -> str:
    """Convert LaTeX math and spell matching symbols with their shorthands"""
    return Tex2Typst(shorthands=shorthands).convert(tex)


def text_and_tex2typst(text: str) -> str:
    """
    Convert prose with embedded LaTeX math

    Example:
        >>> text_and_tex2typst(r"half: \\(\\frac{1}{2}\\)")
        'half: $1/2$'
    """
    return Tex2Typst().convert_mixed(text)


def text_and_tex2typst_with_macros(text: str, macro_definitions: str) -> str:
    return Tex2Typst(macros=macro_definitions).convert_mixed(text)


def text_and_tex2typst_with_shorthands(
    text: str, shorthands: Iterable[SymbolShorthand]
) -> str:
    return Tex2Typst(shorthands=shorthands).convert_mixed(text)

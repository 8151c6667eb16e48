"""
TeX side of the pipeline - macros, lexer, parser and the LaTeX AST
"""

from tex2typst.tex.lexer import tokenize
from tex2typst.tex.macros import MacroDefinition, MacroTable
from tex2typst.tex.parser import LatexParser, parse_tex
from tex2typst.tex.tokens import Token, TokenKind

__all__ = [
    "Token",
    "TokenKind",
    "tokenize",
    "LatexParser",
    "parse_tex",
    "MacroDefinition",
    "MacroTable",
]

"""
Typst side of the pipeline - Typst AST, symbol tables, converter and writer
"""

from tex2typst.typst.converter import TypstConverter, convert_tree
from tex2typst.typst.writer import SymbolShorthand, TypstWriter

__all__ = [
    "TypstConverter",
    "convert_tree",
    "SymbolShorthand",
    "TypstWriter",
]

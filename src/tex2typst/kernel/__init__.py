"""
Kernel - Shared infrastructure for the conversion pipeline

Errors, logging and the conversion policy used by every stage.
"""

from tex2typst.kernel.errors import (
    ConvertError,
    MacroArityMismatch,
    MacroError,
    MacroRecursionLimit,
    MacroRedefinition,
    MalformedMacro,
    MismatchedDelimiter,
    ParseError,
    Tex2TypstError,
    TexSyntaxError,
    UnbalancedGroup,
    UnknownEnvironment,
    UnsupportedConstruct,
    WriteError,
)
from tex2typst.kernel.policy import ConversionPolicy, default_policy

__all__ = [
    # Policy
    "ConversionPolicy",
    "default_policy",
    # Errors
    "Tex2TypstError",
    "ParseError",
    "UnbalancedGroup",
    "MismatchedDelimiter",
    "UnknownEnvironment",
    "TexSyntaxError",
    "MacroError",
    "MalformedMacro",
    "MacroRedefinition",
    "MacroRecursionLimit",
    "MacroArityMismatch",
    "ConvertError",
    "UnsupportedConstruct",
    "WriteError",
]

"""
Custom exceptions for tex2typst

Every pipeline stage raises from this hierarchy so callers can catch one base
class (Tex2TypstError) or react to a precise failure. The first error anywhere
in the pipeline aborts the whole conversion - there is never partial output.

Fun fact: TeX's own error messages famously end with "?" and wait for the user
to type an instruction. We settled for raising exceptions instead!
"""


class Tex2TypstError(Exception):
    """Base exception for all tex2typst errors"""

    pass


# Parse Errors


class ParseError(Tex2TypstError):
    """Base class for lexing and parsing errors"""

    pass


class UnbalancedGroup(ParseError):
    """Raised when braces, brackets or math delimiters do not balance"""

    def __init__(self, opener: str, position: int | None = None) -> None:
        self.opener = opener
        self.position = position
        where = f" at position {position}" if position is not None else ""
        super().__init__(f"Unmatched '{opener}'{where}")


class MismatchedDelimiter(ParseError):
    """
    Raised when \\left/\\right or \\begin/\\end pairs do not match up

    Covers a \\left without \\right, a stray \\right, a missing \\end and a
    \\begin{a} closed by \\end{b}.
    """

    def __init__(self, delimiter: str, counterpart: str | None = None) -> None:
        self.delimiter = delimiter
        self.counterpart = counterpart
        if counterpart is None:
            message = f"No matching delimiter for {delimiter}"
        else:
            message = f"{delimiter} closed by mismatched {counterpart}"
        super().__init__(message)


class UnknownEnvironment(ParseError):
    """Raised when \\begin names an environment outside the registered set"""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown environment: {name}")


class TexSyntaxError(ParseError):
    """Raised for tokens that cannot start or continue any valid production"""

    pass


# Macro Errors


class MacroError(Tex2TypstError):
    """Base class for macro definition and expansion errors"""

    pass


class MalformedMacro(MacroError):
    """Raised when a \\newcommand-style declaration cannot be parsed"""

    def __init__(self, reason: str, position: int | None = None) -> None:
        self.reason = reason
        self.position = position
        where = f" at position {position}" if position is not None else ""
        super().__init__(f"Malformed macro declaration{where}: {reason}")


class MacroRedefinition(MacroError):
    """Raised when a macro is redefined while the policy forbids it"""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Macro \\{name} is already defined and redefinition is disabled"
        )


class MacroRecursionLimit(MacroError):
    """
    Raised when macro expansion nests deeper than the configured ceiling

    Self-referential macros (\\newcommand{\\x}{\\x}) expand forever; the depth
    ceiling turns that into a clean failure.
    """

    def __init__(self, name: str, max_depth: int) -> None:
        self.name = name
        self.max_depth = max_depth
        super().__init__(
            f"Expansion of \\{name} exceeded maximum macro depth {max_depth}"
        )


class MacroArityMismatch(MacroError):
    """Raised when an invocation supplies fewer arguments than declared"""

    def __init__(self, name: str, expected: int, found: int) -> None:
        self.name = name
        self.expected = expected
        self.found = found
        super().__init__(
            f"Macro \\{name} expects {expected} argument(s), found {found}"
        )


# Conversion Errors


class ConvertError(Tex2TypstError):
    """Base class for LaTeX tree -> Typst tree conversion errors"""

    pass


class UnsupportedConstruct(ConvertError):
    """Raised for parsed trees whose shape has no Typst representation"""

    pass


# Writer Errors


class WriteError(Tex2TypstError):
    """Raised on output buffer misuse, e.g. writing after finalize()"""

    pass

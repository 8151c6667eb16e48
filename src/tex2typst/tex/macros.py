"""
Macro Table - user-defined \\newcommand macros

Macros are expanded textually, before lexing: every invocation is replaced by
its body with `#1`..`#9` substituted, and the result is scanned again for
further invocations. A depth ceiling turns self-referential macros into a
MacroRecursionLimit error instead of an endless loop.

Supported declarations:
    \\newcommand{\\name}[n][default]{body}    (also \\newcommand\\name...)
    \\renewcommand{\\name}...                  (same as \\newcommand here)
    \\providecommand{\\name}...                (keeps an existing definition)
    \\DeclareMathOperator{\\name}{text}        (body: \\operatorname{text})

Fun fact: \\newcommand's optional-argument syntax `[n][default]` dates from
LaTeX2e (1994). Plain TeX's \\def has no optional arguments at all!
"""

from pydantic import BaseModel, Field

from tex2typst.kernel.errors import (
    MacroArityMismatch,
    MacroRecursionLimit,
    MacroRedefinition,
    MalformedMacro,
    UnbalancedGroup,
)
from tex2typst.kernel.logging import get_logger
from tex2typst.kernel.policy import ConversionPolicy, default_policy
from tex2typst.tex.lexer import find_closing_brace

logger = get_logger(__name__)

DEFINING_COMMANDS = ("newcommand", "renewcommand", "providecommand")
OPERATOR_COMMANDS = ("DeclareMathOperator",)


class MacroDefinition(BaseModel):
    """
    One user macro

    Attributes:
        name: Macro name without backslash
        num_args: Total number of arguments, including the optional one
        default: Default for the optional first argument; None when the
                 macro has no optional argument
        body: Replacement template with #1..#9 placeholders
    """

    name: str
    num_args: int = Field(default=0, ge=0, le=9)
    default: str | None = None
    body: str

    model_config = {"frozen": True}

    @property
    def has_optional(self) -> bool:
        return self.default is not None

    def substitute(self, args: list[str]) -> str:
        """Replace placeholders in the body with the collected arguments"""
        out: list[str] = []
        pos = 0
        body = self.body
        while pos < len(body):
            char = body[pos]
            if char == "#" and pos + 1 < len(body) and body[pos + 1].isdigit():
                out.append(args[int(body[pos + 1]) - 1])
                pos += 2
            else:
                out.append(char)
                pos += 1
        return "".join(out)


def _skip_blank(text: str, pos: int) -> int:
    """Skip whitespace and % comments"""
    while pos < len(text):
        if text[pos] in " \t\r\n":
            pos += 1
        elif text[pos] == "%":
            newline = text.find("\n", pos)
            pos = len(text) if newline == -1 else newline + 1
        else:
            break
    return pos


def _read_control_sequence(text: str, pos: int) -> tuple[str, int]:
    """Read `\\name` at pos; returns (name, next pos)"""
    if pos >= len(text) or text[pos] != "\\" or pos + 1 >= len(text):
        raise MalformedMacro("expected a control sequence", pos)
    end = pos + 1
    if text[end].isascii() and text[end].isalpha():
        while end < len(text) and text[end].isascii() and text[end].isalpha():
            end += 1
    else:
        end += 1
    return text[pos + 1 : end], end


def _find_closing_bracket(text: str, start: int) -> int:
    """Index of the `]` closing the `[` at start (nested brackets allowed)"""
    depth = 0
    pos = start
    while pos < len(text):
        char = text[pos]
        if char == "\\":
            pos += 2
            continue
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return pos
        pos += 1
    return -1


def _ends_with_control_word(text: str) -> bool:
    """True when text ends in `\\letters` (a following letter would merge)"""
    pos = len(text)
    while pos > 0 and text[pos - 1].isascii() and text[pos - 1].isalpha():
        pos -= 1
    return pos < len(text) and pos > 0 and text[pos - 1] == "\\"


class MacroTable:
    """
    Registry of user macros for a single conversion call

    Example:
        >>> table = MacroTable()
        >>> table.define(r"\\newcommand{\\R}{\\mathbb{R}}")
        >>> table.expand(r"x \\in \\R")
        'x \\\\in \\\\mathbb{R}'
    """

    def __init__(self, policy: ConversionPolicy | None = None) -> None:
        self.policy = policy or default_policy
        self._macros: dict[str, MacroDefinition] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._macros

    def __len__(self) -> int:
        return len(self._macros)

    def get(self, name: str) -> MacroDefinition | None:
        return self._macros.get(name)

    # ------------------------------------------------------------------
    # Definitions
    # ------------------------------------------------------------------

    def define(self, declarations: str) -> None:
        """
        Parse and register one or more macro declarations

        Args:
            declarations: Declarations separated by whitespace, newlines or comments

        Raises:
            MalformedMacro: If a declaration cannot be parsed
            MacroRedefinition: If redefinition is disabled and a name repeats
        """
        pos = _skip_blank(declarations, 0)
        while pos < len(declarations):
            pos = self._define_one(declarations, pos)
            pos = _skip_blank(declarations, pos)

    def register(self, macro: MacroDefinition, *, overwrite: bool = True) -> None:
        """Add a parsed definition, honoring the redefinition policy"""
        if macro.name in self._macros:
            if not overwrite:
                return
            if not self.policy.allow_macro_redefinition:
                raise MacroRedefinition(macro.name)
        self._macros[macro.name] = macro
        logger.debug(
            "Macro defined",
            macro=macro.name,
            num_args=macro.num_args,
            has_optional=macro.has_optional,
        )

    def _define_one(self, text: str, pos: int) -> int:
        command, pos = _read_control_sequence(text, pos)
        if command not in DEFINING_COMMANDS + OPERATOR_COMMANDS:
            raise MalformedMacro(f"unsupported declaration \\{command}", pos)
        if text.startswith("*", pos):
            pos += 1

        name, pos = self._read_macro_name(text, _skip_blank(text, pos))

        if command in OPERATOR_COMMANDS:
            operator, pos = self._read_group(text, _skip_blank(text, pos))
            self.register(
                MacroDefinition(name=name, body=f"\\operatorname{{{operator}}}")
            )
            return pos

        num_args = 0
        default: str | None = None
        pos = _skip_blank(text, pos)
        if text.startswith("[", pos):
            count, pos = self._read_bracket(text, pos)
            if not count.strip().isdigit() or not 0 <= int(count) <= 9:
                raise MalformedMacro(f"invalid argument count {count!r}", pos)
            num_args = int(count)
            pos = _skip_blank(text, pos)
            if text.startswith("[", pos):
                default, pos = self._read_bracket(text, pos)
                if num_args == 0:
                    raise MalformedMacro("optional default given for a macro without arguments", pos)

        body, pos = self._read_group(text, _skip_blank(text, pos))
        self._check_placeholders(name, body, num_args)
        self.register(
            MacroDefinition(name=name, num_args=num_args, default=default, body=body),
            overwrite=command != "providecommand",
        )
        return pos

    @staticmethod
    def _read_macro_name(text: str, pos: int) -> tuple[str, int]:
        if text.startswith("{", pos):
            inner_start = _skip_blank(text, pos + 1)
            name, end = _read_control_sequence(text, inner_start)
            end = _skip_blank(text, end)
            if not text.startswith("}", end):
                raise MalformedMacro("expected '}' after macro name", end)
            return name, end + 1
        return _read_control_sequence(text, pos)

    @staticmethod
    def _read_bracket(text: str, pos: int) -> tuple[str, int]:
        closing = _find_closing_bracket(text, pos)
        if closing == -1:
            raise MalformedMacro("unterminated '['", pos)
        return text[pos + 1 : closing], closing + 1

    @staticmethod
    def _read_group(text: str, pos: int) -> tuple[str, int]:
        if not text.startswith("{", pos):
            raise MalformedMacro("expected '{' to open the macro body", pos)
        try:
            closing = find_closing_brace(text, pos)
        except UnbalancedGroup:
            raise MalformedMacro("unterminated '{'", pos) from None
        return text[pos + 1 : closing], closing + 1

    @staticmethod
    def _check_placeholders(name: str, body: str, num_args: int) -> None:
        pos = body.find("#")
        while pos != -1:
            if pos + 1 >= len(body) or not body[pos + 1].isdigit():
                raise MalformedMacro(f"stray '#' in body of \\{name}")
            index = int(body[pos + 1])
            if not 1 <= index <= num_args:
                raise MalformedMacro(
                    f"\\{name} uses #{index} but declares {num_args} argument(s)"
                )
            pos = body.find("#", pos + 2)

    # ------------------------------------------------------------------
    # Expansion
    # ------------------------------------------------------------------

    def expand(self, text: str) -> str:
        """
        Expand every macro invocation in text

        Args:
            text: LaTeX source

        Returns:
            Source with all registered macros expanded

        Raises:
            MacroArityMismatch: If an invocation lacks arguments
            MacroRecursionLimit: If expansion nests deeper than the policy allows
            UnbalancedGroup: If a braced argument never closes
        """
        if not self._macros:
            return text

        out: list[str] = []
        # (text, depth, follows a replacement); the top piece is scanned first
        pending: list[tuple[str, int, bool]] = [(text, 0, False)]
        while pending:
            piece, depth, after_replacement = pending.pop()
            if (
                after_replacement
                and piece[:1].isalpha()
                and _ends_with_control_word("".join(out))
            ):
                out.append(" ")
            pos = 0
            while pos < len(piece):
                char = piece[pos]
                if char != "\\" or pos + 1 >= len(piece):
                    out.append(char)
                    pos += 1
                    continue

                name, end = _read_control_sequence(piece, pos)
                macro = self._macros.get(name)
                if macro is None:
                    out.append(piece[pos:end])
                    pos = end
                    continue

                if depth >= self.policy.max_macro_depth:
                    raise MacroRecursionLimit(name, self.policy.max_macro_depth)

                args, end = self._collect_arguments(macro, piece, end)
                pending.append((piece[end:], depth, True))
                pending.append((macro.substitute(args), depth + 1, False))
                break
        return "".join(out)

    def _collect_arguments(
        self, macro: MacroDefinition, text: str, pos: int
    ) -> tuple[list[str], int]:
        args: list[str] = []

        if macro.has_optional:
            look = _skip_blank(text, pos)
            if text.startswith("[", look):
                closing = _find_closing_bracket(text, look)
                if closing == -1:
                    raise UnbalancedGroup("[", look)
                args.append(text[look + 1 : closing])
                pos = closing + 1
            else:
                args.append(macro.default or "")

        while len(args) < macro.num_args:
            look = _skip_blank(text, pos)
            if look >= len(text):
                raise MacroArityMismatch(macro.name, macro.num_args, len(args))
            if text[look] == "{":
                closing = find_closing_brace(text, look)
                args.append(text[look + 1 : closing])
                pos = closing + 1
            elif macro.has_optional or text[look] in "}]":
                raise MacroArityMismatch(macro.name, macro.num_args, len(args))
            elif text[look] == "\\":
                _, end = _read_control_sequence(text, look)
                args.append(text[look:end])
                pos = end
            else:
                args.append(text[look])
                pos = look + 1

        return args, pos

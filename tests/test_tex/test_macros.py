"""
Tests for the macro table

Verifies:
- Declaration parsing (\\newcommand and its variants)
- Argument collection, optional defaults and placeholder substitution
- Redefinition policy and recursion ceiling
- Expanded source parses exactly like hand-written source

Fun fact: \\newcommand refuses to overwrite an existing command in real
LaTeX - that is what \\renewcommand is for. Being lenient here means
snippets copied from different papers still convert!
"""

import pytest

from tex2typst.kernel.errors import (
    MacroArityMismatch,
    MacroRecursionLimit,
    MacroRedefinition,
    MalformedMacro,
    UnbalancedGroup,
)
from tex2typst.kernel.policy import ConversionPolicy
from tex2typst.tex.macros import MacroDefinition, MacroTable
from tex2typst.tex.parser import parse_tex


# =============================================================================
# Declarations
# =============================================================================


def test_define_simple_macro(macro_table: MacroTable) -> None:
    macro_table.define(r"\newcommand{\R}{\mathbb{R}}")

    assert "R" in macro_table
    assert macro_table.get("R") == MacroDefinition(name="R", body=r"\mathbb{R}")


def test_define_with_arguments_and_default(macro_table: MacroTable) -> None:
    macro_table.define(r"\newcommand{\pp}[2][]{\frac{\partial #1}{\partial #2}}")

    macro = macro_table.get("pp")
    assert macro is not None
    assert macro.num_args == 2
    assert macro.default == ""
    assert macro.has_optional


def test_define_several_declarations(macro_table: MacroTable, partial_macros: str) -> None:
    macro_table.define(partial_macros)

    assert len(macro_table) == 3
    assert "d" in macro_table and "pp" in macro_table and "R" in macro_table


def test_braceless_name_and_star(macro_table: MacroTable) -> None:
    macro_table.define(r"\newcommand*\N{\mathbb{N}} % naturals")

    assert macro_table.get("N").body == r"\mathbb{N}"


def test_declare_math_operator(macro_table: MacroTable) -> None:
    macro_table.define(r"\DeclareMathOperator{\rank}{rank}")

    assert macro_table.expand(r"\rank A") == r"\operatorname{rank} A"


def test_providecommand_keeps_existing(macro_table: MacroTable) -> None:
    macro_table.define(r"\newcommand{\x}{a} \providecommand{\x}{b} \providecommand{\y}{c}")

    assert macro_table.get("x").body == "a"
    assert macro_table.get("y").body == "c"


def test_redefinition_last_write_wins(macro_table: MacroTable) -> None:
    macro_table.define(r"\newcommand{\x}{a} \renewcommand{\x}{b}")

    assert macro_table.expand(r"\x") == "b"


def test_redefinition_forbidden_by_policy(strict_policy: ConversionPolicy) -> None:
    table = MacroTable(strict_policy)
    table.define(r"\newcommand{\x}{a}")

    with pytest.raises(MacroRedefinition) as exc_info:
        table.define(r"\newcommand{\x}{b}")
    assert exc_info.value.name == "x"


@pytest.mark.parametrize(
    "declaration",
    [
        r"\newcommand",
        r"\newcommand{\x}",
        r"\newcommand{x}{y}",
        r"\newcommand{\x}[a]{y}",
        r"\newcommand{\x}{#1}",
        r"\newcommand{\x}[1]{#2}",
        r"\newcommand{\x}{unclosed",
        r"\def\x{y}",
        "garbage",
    ],
)
def test_malformed_declarations(macro_table: MacroTable, declaration: str) -> None:
    with pytest.raises(MalformedMacro):
        macro_table.define(declaration)


# =============================================================================
# Expansion
# =============================================================================


def test_expand_without_macros_is_identity(macro_table: MacroTable) -> None:
    assert macro_table.expand(r"\frac{a}{b}") == r"\frac{a}{b}"


def test_expand_substitutes_arguments(macro_table: MacroTable, partial_macros: str) -> None:
    macro_table.define(partial_macros)

    assert macro_table.expand(r"\pp[f]{x}") == r"\frac{\partial f}{\partial x}"
    assert macro_table.expand(r"\pp{y}") == r"\frac{\partial }{\partial y}"


def test_expand_nested_optional_argument(macro_table: MacroTable, partial_macros: str) -> None:
    macro_table.define(partial_macros)

    assert macro_table.expand(r"\pp[f[x]]{y}") == r"\frac{\partial f[x]}{\partial y}"


def test_expand_braceless_argument(macro_table: MacroTable) -> None:
    macro_table.define(r"\newcommand{\sq}[1]{#1^2}")

    assert macro_table.expand(r"\sq x + \sq\alpha") == r"x^2 + \alpha^2"


def test_expand_is_recursive(macro_table: MacroTable) -> None:
    macro_table.define(r"\newcommand{\R}{\mathbb{R}} \newcommand{\Rn}{\R^n}")

    assert macro_table.expand(r"\Rn") == r"\mathbb{R}^n"


def test_expand_separates_control_word_from_letters(macro_table: MacroTable) -> None:
    """Test that \\d followed by x does not become \\partialx"""
    macro_table.define(r"\newcommand{\d}{\partial}")

    assert macro_table.expand(r"\d x") == r"\partial x"
    assert macro_table.expand(r"\d{}x") == r"\partial{}x"
    assert parse_tex(macro_table.expand(r"\d^2")) == parse_tex(r"\partial^2")


def test_expand_leaves_other_commands_alone(macro_table: MacroTable) -> None:
    """Test that a macro name prefix does not match a longer command"""
    macro_table.define(r"\newcommand{\d}{\partial}")

    assert macro_table.expand(r"\delta \\ \d") == r"\delta \\ \partial"


def test_missing_argument_is_arity_mismatch(macro_table: MacroTable) -> None:
    macro_table.define(r"\newcommand{\f}[2]{#1 #2}")

    with pytest.raises(MacroArityMismatch) as exc_info:
        macro_table.expand(r"\f{a}")
    assert exc_info.value.expected == 2
    assert exc_info.value.found == 1


def test_optional_macro_requires_braced_arguments(
    macro_table: MacroTable, partial_macros: str
) -> None:
    macro_table.define(partial_macros)

    with pytest.raises(MacroArityMismatch):
        macro_table.expand(r"\pp x")


def test_unclosed_argument_is_unbalanced(macro_table: MacroTable) -> None:
    macro_table.define(r"\newcommand{\f}[1]{#1}")

    with pytest.raises(UnbalancedGroup):
        macro_table.expand(r"\f{a")


def test_self_reference_hits_recursion_limit(strict_policy: ConversionPolicy) -> None:
    table = MacroTable(strict_policy)
    table.define(r"\newcommand{\x}{\x}")

    with pytest.raises(MacroRecursionLimit) as exc_info:
        table.expand(r"\x")
    assert exc_info.value.max_depth == 4


def test_highest_allowed_ceiling_still_reports_recursion_limit() -> None:
    """Test that the deepest permitted ceiling fails with a macro error"""
    table = MacroTable(ConversionPolicy(max_macro_depth=1024))
    table.define(r"\newcommand{\x}{\x}")

    with pytest.raises(MacroRecursionLimit) as exc_info:
        table.expand(r"\x")
    assert exc_info.value.max_depth == 1024


def test_macro_arguments_are_taken_from_its_own_text(macro_table: MacroTable) -> None:
    """Test that an invocation ending a body does not consume the text after it"""
    macro_table.define(r"\newcommand{\sq}[1]{#1^2} \newcommand{\tail}{a \sq}")

    with pytest.raises(MacroArityMismatch):
        macro_table.expand(r"\tail{b}")


def test_expansion_within_ceiling_succeeds(strict_policy: ConversionPolicy) -> None:
    table = MacroTable(strict_policy)
    table.define(r"\newcommand{\a}{x} \newcommand{\b}{\a} \newcommand{\c}{\b}")

    assert table.expand(r"\c") == "x"


def test_expanded_macro_parses_like_written_source(
    macro_table: MacroTable, partial_macros: str
) -> None:
    """Test that \\pp[f]{x} yields the tree of the hand-written fraction"""
    macro_table.define(partial_macros)

    assert parse_tex(macro_table.expand(r"\pp[f]{x}")) == parse_tex(
        r"\frac{\partial f}{\partial x}"
    )

"""
Tests for the Tex2Typst facade and the module-level entry points

Verifies:
- Every public entry point produces the expected Typst
- Macros, shorthands and the policy flow through the pipeline
- Errors surface unchanged and no partial output is returned
- Conversions are deterministic

Fun fact: The first public Typst release (2023) shipped with `$ x $` and
`$x$` meaning two different things - display and inline math - decided only
by the spaces inside the dollars!
"""

import pytest

from tex2typst import (
    SymbolShorthand,
    Tex2Typst,
    tex2typst,
    tex2typst_with_macros,
    tex2typst_with_shorthands,
    text_and_tex2typst,
    text_and_tex2typst_with_macros,
    text_and_tex2typst_with_shorthands,
)
from tex2typst.kernel.errors import (
    MacroRedefinition,
    MalformedMacro,
    Tex2TypstError,
    TexSyntaxError,
    UnbalancedGroup,
    UnknownEnvironment,
)
from tex2typst.kernel.policy import ConversionPolicy


# =============================================================================
# Module-level functions
# =============================================================================


def test_tex2typst_fraction() -> None:
    assert tex2typst(r"\frac{1}{2}") == "1/2"


def test_tex2typst_blackboard() -> None:
    assert tex2typst(r"\mathbb{R}") == "RR"


def test_tex2typst_arrow_accent() -> None:
    """Test a single function call with no spurious parentheses"""
    assert tex2typst(r"\overrightarrow{P M}") == "arrow(P M)"


def test_tex2typst_with_macros(partial_macros: str) -> None:
    assert tex2typst_with_macros(r"\R \pp[f]{x}", partial_macros) == (
        "RR (partial f)/(partial x)"
    )


def test_tex2typst_with_shorthands(common_shorthands: list[SymbolShorthand]) -> None:
    assert tex2typst_with_shorthands(r"\pm \int_a^b", common_shorthands) == "+- int_a^b"


def test_text_and_tex2typst() -> None:
    assert text_and_tex2typst(r"some text and some formula: \(\frac{1}{2}\)") == (
        "some text and some formula: $1/2$"
    )


def test_text_and_tex2typst_with_macros(partial_macros: str) -> None:
    assert text_and_tex2typst_with_macros(r"Let \(x \in \R\).", partial_macros) == (
        "Let $x in RR$."
    )


def test_text_and_tex2typst_with_shorthands(
    common_shorthands: list[SymbolShorthand],
) -> None:
    text = r"Error is $\pm 1$."
    assert text_and_tex2typst_with_shorthands(text, common_shorthands) == "Error is $+- 1$."


# =============================================================================
# Facade
# =============================================================================


def test_facade_reuses_macros(tex2typst_converter: Tex2Typst) -> None:
    assert tex2typst_converter.convert(r"\pp{y}") == "partial/(partial y)"
    assert tex2typst_converter.convert(r"\pp[f[x]]{y}") == "(partial f [x])/(partial y)"
    assert tex2typst_converter.convert(r"\d x") == "partial x"


def test_facade_macros_do_not_leak_between_instances(
    tex2typst_converter: Tex2Typst,
) -> None:
    """Test that a plain converter does not know the shared macros"""
    assert tex2typst_converter.convert(r"\R") == "RR"
    assert Tex2Typst().convert(r"\R") == 'op("R")'


def test_facade_rejects_malformed_macros_early() -> None:
    with pytest.raises(MalformedMacro):
        Tex2Typst(macros=r"\newcommand{\x}[a]{y}")


def test_facade_policy_forbids_redefinition(strict_policy: ConversionPolicy) -> None:
    with pytest.raises(MacroRedefinition):
        Tex2Typst(
            policy=strict_policy,
            macros=r"\newcommand{\x}{a} \newcommand{\x}{b}",
        )


def test_facade_policy_drops_comments(strict_policy: ConversionPolicy) -> None:
    assert Tex2Typst().convert("x % note") == "x // note"
    assert Tex2Typst(policy=strict_policy).convert("x % note") == "x"


def test_facade_shorthands_apply_to_every_call(
    common_shorthands: list[SymbolShorthand],
) -> None:
    converter = Tex2Typst(shorthands=common_shorthands)

    assert converter.convert(r"\longrightarrow") == "-->"
    assert converter.convert(r"\Longrightarrow") == "==>"
    assert converter.convert(r"\iint") == "integral.double"


# =============================================================================
# Pipeline behavior
# =============================================================================


@pytest.mark.parametrize(
    "latex,expected",
    [
        (r"\sum_{i=1}^n i", "sum_(i = 1)^n i"),
        (r"\int_{a}^{b} f(x) dx", "integral_a^b f(x) d x"),
        ("e_f(x)", "e_f (x)"),
        ("e_{f (x)}", "e_(f(x))"),
        (
            r"x = \frac{a-b \pm \sqrt{b^2 - 4ac}}{2a}",
            "x = (a - b plus.minus sqrt(b^2 - 4 a c))/(2 a)",
        ),
        (r"\sqrt{3} \sqrt[3]{x}", "sqrt(3) root(3, x)"),
        (
            r"\left\lfloor \frac{a}{b} \right\rfloor \floor{\frac{a}{b}}",
            "floor(a/b) floor(a/b)",
        ),
        (r"\text        {some text}", '"some text"'),
        (r"\begin{aligned}asd \end{aligned}", "a s d"),
    ],
)
def test_conversion_scenarios(latex: str, expected: str) -> None:
    assert tex2typst(latex) == expected


def test_unknown_command_keeps_its_name() -> None:
    output = tex2typst(r"\foobar{x}")

    assert "foobar" in output
    assert output == 'op("foobar") x'


def test_single_atom_groups_get_no_parentheses() -> None:
    assert tex2typst(r"\frac{a}{b}") == "a/b"
    assert tex2typst("x^{2}") == "x^2"
    assert tex2typst("{x}") == "x"


def test_conversion_is_deterministic() -> None:
    latex = r"\begin{pmatrix} a & b \\ c & d \end{pmatrix} + \sum_{k} \alpha_k"
    assert tex2typst(latex) == tex2typst(latex)


def test_empty_input() -> None:
    assert tex2typst("") == ""


# =============================================================================
# Errors
# =============================================================================


def test_unbalanced_input_raises_without_partial_output() -> None:
    with pytest.raises(UnbalancedGroup):
        tex2typst(r"\frac{1}{2")


def test_text_without_body_is_syntax_error() -> None:
    with pytest.raises(TexSyntaxError):
        tex2typst(r"\text ")


def test_unknown_environment_is_reported() -> None:
    with pytest.raises(UnknownEnvironment):
        tex2typst(r"\begin{tikzcd} a \end{tikzcd}")


def test_every_failure_is_a_tex2typst_error() -> None:
    for latex in (r"\frac{1}{2", r"\left( x", "x^2^3", r"\begin{foo}\end{foo}"):
        with pytest.raises(Tex2TypstError):
            tex2typst(latex)

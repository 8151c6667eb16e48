"""
CLI tests

Tests the convert and mixed commands through Typer's CliRunner: input from
arguments, stdin and files, macro files, shorthands and error exits.

Fun fact: Unix pipes were added in 1973 after Doug McIlroy had lobbied for
them for years. `echo ... | tex2typst convert` owes him one!
"""

import pytest
from typer.testing import CliRunner

from tex2typst.cli.main import app, parse_shorthand


@pytest.fixture
def runner():
    """Typer CLI test runner"""
    return CliRunner()


@pytest.fixture
def macro_file(tmp_path, partial_macros):
    """Macro declarations written to a file"""
    path = tmp_path / "macros.tex"
    path.write_text(partial_macros, encoding="utf-8")
    return path


# =============================================================================
# convert
# =============================================================================


def test_convert_argument(runner):
    """Test convert with the expression as argument"""
    result = runner.invoke(app, ["convert", r"\frac{1}{2}"])

    assert result.exit_code == 0
    assert result.stdout == "1/2\n"


def test_convert_stdin(runner):
    """Test convert reading the expression from stdin"""
    result = runner.invoke(app, ["convert"], input="\\sum_{i=1}^n i\n")

    assert result.exit_code == 0
    assert result.stdout == "sum_(i = 1)^n i\n"


def test_convert_with_macro_file(runner, macro_file):
    result = runner.invoke(app, ["convert", r"\R \pp[f]{x}", "--macros", str(macro_file)])

    assert result.exit_code == 0
    assert result.stdout == "RR (partial f)/(partial x)\n"


def test_convert_with_missing_macro_file(runner, tmp_path):
    result = runner.invoke(
        app, ["convert", "x", "--macros", str(tmp_path / "missing.tex")]
    )

    assert result.exit_code == 1
    assert "Cannot read macro file" in result.output


def test_convert_with_shorthands(runner):
    result = runner.invoke(
        app,
        [
            "convert",
            r"a \pm b \to c",
            "--shorthand",
            "plus.minus=+-",
            "--shorthand",
            "arrow.r=->",
        ],
    )

    assert result.exit_code == 0
    assert result.stdout == "a +- b -> c\n"


def test_convert_bad_shorthand_is_usage_error(runner):
    result = runner.invoke(app, ["convert", "x", "--shorthand", "nonsense"])

    assert result.exit_code == 2


def test_convert_error_exits_with_code_1(runner):
    """Test that library errors are reported, not raised"""
    result = runner.invoke(app, ["convert", r"\frac{1}{2"])

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "Unmatched" in result.output


def test_convert_verbose(runner):
    result = runner.invoke(app, ["convert", "x", "--verbose"])

    assert result.exit_code == 0
    assert "x" in result.stdout


# =============================================================================
# mixed
# =============================================================================


def test_mixed_file(runner, tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("Half: \\(\\frac{1}{2}\\)\nDone.\n", encoding="utf-8")

    result = runner.invoke(app, ["mixed", str(path)])

    assert result.exit_code == 0
    assert result.stdout == "Half: $1/2$\nDone.\n"


def test_mixed_stdin_with_macros(runner, macro_file):
    result = runner.invoke(
        app, ["mixed", "--macros", str(macro_file)], input="Let $x \\in \\R$."
    )

    assert result.exit_code == 0
    assert result.stdout == "Let $x in RR$.\n"


def test_mixed_missing_file(runner, tmp_path):
    result = runner.invoke(app, ["mixed", str(tmp_path / "missing.txt")])

    assert result.exit_code == 1
    assert "Cannot read" in result.output


def test_mixed_unbalanced_math(runner):
    result = runner.invoke(app, ["mixed"], input="open $x and never close")

    assert result.exit_code == 1
    assert "Error:" in result.output


# =============================================================================
# Helpers
# =============================================================================


def test_parse_shorthand():
    shorthand = parse_shorthand("arrow.r.double==>")

    assert shorthand.original == "arrow.r.double"
    assert shorthand.shorthand == "=>"

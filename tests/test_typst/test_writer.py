"""
Tests for the Typst writer

Verifies:
- Spacing rules between tokens
- Commas inside function calls
- Shorthand replacement (whole tokens, idempotent)
- Single-use lifecycle (finalize once)

Fun fact: Typst treats `ab` as one identifier but `a b` as two letters
multiplied - so the writer's spaces are not cosmetic, they are grammar!
"""

import pytest

from tex2typst.kernel.errors import WriteError
from tex2typst.typst.nodes import (
    Align,
    Atom,
    Binary,
    Cases,
    Comment,
    Fraction,
    FuncCall,
    Grouped,
    Matrix,
    Sequence,
    SupSub,
    Symbol,
    TextLiteral,
)
from tex2typst.typst.writer import SymbolShorthand, TypstWriter


def write(node) -> str:
    writer = TypstWriter()
    writer.serialize(node)
    return writer.finalize()


def atoms(*values: str) -> Sequence:
    return Sequence(items=tuple(Atom(value=value) for value in values))


# =============================================================================
# Spacing
# =============================================================================


def test_atoms_are_space_separated() -> None:
    assert write(atoms("a", "s", "d")) == "a s d"


def test_fraction_has_no_spaces() -> None:
    node = Fraction(numerator=Grouped(body=atoms("2", "a")), denominator=Atom(value="b"))
    assert write(node) == "(2 a)/b"


def test_function_call() -> None:
    assert write(FuncCall(name="root", args=(Atom(value="3"), Atom(value="x")))) == "root(3, x)"


def test_function_options() -> None:
    node = FuncCall(name="op", args=(Atom(value="="),), options=(("limits", "#true"),))
    assert write(node) == "op(=, limits: #true)"


def test_paren_sticks_to_letter_but_not_to_symbol() -> None:
    assert write(atoms("f", "(", "x", ")")) == "f(x)"
    node = Sequence(items=(Symbol(name="alpha"), Atom(value="("), Atom(value="x"), Atom(value=")")))
    assert write(node) == "alpha (x)"


def test_bracket_does_not_stick_to_letter() -> None:
    assert write(atoms("f", "[", "x", "]")) == "f [x]"


def test_leading_sign_sticks_to_operand() -> None:
    assert write(atoms("-", "x")) == "-x"
    assert write(atoms("a", "=", "-", "b")) == "a = -b"
    node = SupSub(base=Atom(value="x"), sup=Grouped(body=atoms("-", "1")))
    assert write(node) == "x^(-1)"


def test_binary_minus_is_spaced() -> None:
    node = Binary(op=Atom(value="-"), left=Atom(value="a"), right=Atom(value="b"))
    assert write(node) == "a - b"


def test_punctuation_has_no_space_before() -> None:
    assert write(atoms("a", ",", "b", ";", "n", "!")) == "a, b; n!"


def test_digits_stay_together() -> None:
    assert write(atoms("1", "2")) == "12"


def test_soft_space_after_bare_attachment() -> None:
    node = Sequence(
        items=(SupSub(base=Atom(value="e"), sub=Atom(value="f")),) + atoms("(", "x", ")").items
    )
    assert write(node) == "e_f (x)"


def test_soft_space_dropped_before_closer_and_at_end() -> None:
    attached = SupSub(base=Atom(value="x"), sub=Atom(value="1"))
    assert write(attached) == "x_1"
    assert write(Grouped(body=attached)) == "(x_1)"
    assert write(Sequence(items=(attached, Atom(value=","), Atom(value="y")))) == "x_1, y"


def test_parenthesized_attachment_needs_no_soft_space() -> None:
    node = Sequence(
        items=(
            SupSub(base=Atom(value="e"), sub=Grouped(body=atoms("f", "(", "x", ")"))),
            Atom(value="y"),
        )
    )
    assert write(node) == "e_(f(x)) y"


def test_sub_written_before_sup() -> None:
    node = SupSub(base=Symbol(name="integral"), sub=Atom(value="a"), sup=Atom(value="b"))
    assert write(node) == "integral_a^b"


def test_primes() -> None:
    assert write(SupSub(base=Atom(value="f"), sup=Atom(value="2"), primes=2)) == "f''^2"


def test_text_literal_is_quoted_and_escaped() -> None:
    assert write(TextLiteral(value='say "hi"')) == '"say \\"hi\\""'


def test_comment_ends_line() -> None:
    node = Sequence(items=(Atom(value="x"), Comment(value=" note"), Atom(value="y")))
    assert write(node) == "x // note\ny"


def test_trailing_comment_drops_final_line_end() -> None:
    """Test that output ending in a comment reports it instead of a newline"""
    writer = TypstWriter()
    writer.serialize(Sequence(items=(Atom(value="x"), Comment(value=" note"))))

    assert writer.finalize() == "x // note"
    assert writer.ends_with_comment


def test_comment_inside_output_is_not_trailing() -> None:
    writer = TypstWriter()
    writer.serialize(Sequence(items=(Comment(value=" note"), Atom(value="y"))))

    assert writer.finalize() == "// note\ny"
    assert not writer.ends_with_comment


# =============================================================================
# Structures
# =============================================================================


def test_align_keeps_ampersand_equals_together() -> None:
    node = Align(
        rows=(
            (Atom(value="x"), atoms("=", "1")),
            (Atom(value="y"), atoms("=", "2")),
        )
    )
    assert write(node) == "x &= 1 \\ y &= 2"


def test_matrix_with_delimiter() -> None:
    node = Matrix(
        rows=((Atom(value="a"), Atom(value="b")), (Atom(value="c"), Atom(value="d"))),
        delim='"["',
    )
    assert write(node) == 'mat(delim: "[", a, b; c, d)'


def test_matrix_default_delimiter() -> None:
    node = Matrix(rows=((Atom(value="1"),),))
    assert write(node) == "mat(1)"


def test_cases() -> None:
    node = Cases(
        rows=(
            (Atom(value="1"), TextLiteral(value="if")),
            (Atom(value="0"),),
        )
    )
    assert write(node) == 'cases(1 & "if", 0)'


def test_comma_inside_call_becomes_symbol() -> None:
    node = FuncCall(name="sqrt", args=(atoms("a", ",", "b"),))
    assert write(node) == "sqrt(a comma b)"
    assert write(atoms("a", ",", "b")) == "a, b"


# =============================================================================
# Shorthands and lifecycle
# =============================================================================


def test_shorthand_replaces_whole_symbols(common_shorthands: list[SymbolShorthand]) -> None:
    writer = TypstWriter()
    writer.serialize(
        Sequence(
            items=(
                Symbol(name="arrow.r.long"),
                Symbol(name="arrow.r.double.long"),
                Symbol(name="plus.minus"),
                SupSub(base=Symbol(name="integral"), sub=Atom(value="a"), sup=Atom(value="b")),
            )
        )
    )
    writer.replace_with_shorthand(common_shorthands)
    assert writer.finalize() == "--> ==> +- int_a^b"


def test_shorthand_never_touches_part_of_a_name() -> None:
    writer = TypstWriter()
    writer.serialize(Symbol(name="integral.double"))
    writer.replace_with_shorthand([SymbolShorthand(original="integral", shorthand="int")])
    assert writer.finalize() == "integral.double"


def test_shorthand_is_idempotent() -> None:
    shorthands = [
        SymbolShorthand(original="arrow.r", shorthand="->"),
        SymbolShorthand(original="->", shorthand="arrow.r"),
    ]
    once = TypstWriter()
    once.serialize(Symbol(name="arrow.r"))
    once.replace_with_shorthand(shorthands)

    twice = TypstWriter()
    twice.serialize(Symbol(name="arrow.r"))
    twice.replace_with_shorthand(shorthands)
    twice.replace_with_shorthand(shorthands)

    assert once.finalize() == twice.finalize() == "->"


def test_finalize_twice_raises(writer: TypstWriter) -> None:
    writer.serialize(Atom(value="x"))
    assert writer.finalize() == "x"

    with pytest.raises(WriteError):
        writer.finalize()


def test_serialize_after_finalize_raises(writer: TypstWriter) -> None:
    writer.finalize()

    with pytest.raises(WriteError):
        writer.serialize(Atom(value="x"))
    with pytest.raises(WriteError):
        writer.replace_with_shorthand([])


def test_serialize_appends(writer: TypstWriter) -> None:
    writer.serialize(Atom(value="a"))
    writer.serialize(Atom(value="b"))
    assert writer.finalize() == "a b"

"""
Converter - LaTeX AST to Typst AST

Walks the parsed LaTeX tree once and builds the equivalent Typst tree. All
knowledge about names lives in typst.symbols; this module decides structure:
which runs become infix expressions, where parentheses are needed, and how
environments map onto Typst calls.

Parenthesization follows Typst's own parse levels (typst.nodes.Precedence):
- fraction numerator: wrapped when looser than a fraction
- fraction denominator: wrapped when a fraction or looser
- attachment base and scripts: wrapped unless a plain atom

Fun fact: LaTeX never needs these parentheses because braces group without
printing anything. Typst has no invisible grouping in math, so the converter
has to earn every pair it emits!
"""

import re
from typing import Callable

from tex2typst.kernel.errors import UnsupportedConstruct
from tex2typst.kernel.logging import get_logger
from tex2typst.kernel.policy import ConversionPolicy, default_policy
from tex2typst.tex import nodes as tex
from tex2typst.tex.commands import ALIGN_ENVIRONMENTS, CASES_ENVIRONMENTS
from tex2typst.typst import symbols
from tex2typst.typst.nodes import (
    EMPTY,
    Align,
    Atom,
    Binary,
    Cases,
    Comment,
    Empty,
    Fraction,
    FuncCall,
    Grouped,
    Matrix,
    Precedence,
    Sequence,
    SupSub,
    Symbol,
    TextLiteral,
    TypstNode,
    is_empty,
    precedence,
)

logger = get_logger(__name__)

LIMITS_OPTION = (("limits", "#true"),)
OPENING_ATOMS = frozenset("([{")
CLOSING_ATOMS = frozenset(")]}")
COLUMN_SPEC_BRACES_RE = re.compile(r"\{[^{}]*\}")
COLUMN_LETTERS = frozenset("lcrpmbX")


def _operator_key(node: TypstNode) -> str | None:
    """Value under which a node appears in OPERATOR_PRECEDENCE"""
    if isinstance(node, Atom):
        return node.value
    if isinstance(node, Symbol):
        return node.name
    return None


def _is_operator(node: TypstNode) -> bool:
    key = _operator_key(node)
    return key is not None and key in symbols.OPERATOR_PRECEDENCE


def _wrap(node: TypstNode, wrap: bool) -> TypstNode:
    return Grouped(body=node) if wrap else node


def _script_operand(node: TypstNode) -> TypstNode:
    """Attachment script: anything looser than an atom, or nothing, gets parens"""
    if is_empty(node):
        return Grouped(body=EMPTY)
    return _wrap(node, precedence(node) < Precedence.ATOM)


class TypstConverter:
    """
    Converts one LaTeX tree into a Typst tree

    The converter holds only the policy; convert() can be called any number
    of times.
    """

    def __init__(self, policy: ConversionPolicy | None = None) -> None:
        self.policy = policy or default_policy
        self._dispatch: dict[type, Callable[[object], TypstNode]] = {
            tex.Group: self._convert_group,
            tex.Symbol: self._convert_symbol,
            tex.Text: self._convert_text,
            tex.Comment: self._convert_comment,
            tex.Command: self._convert_command,
            tex.Fraction: self._convert_fraction,
            tex.SupSub: self._convert_supsub,
            tex.LeftRight: self._convert_left_right,
            tex.Environment: self._convert_environment,
            tex.LineBreak: self._convert_line_break,
        }

    def convert(self, node: tex.TexNode) -> TypstNode:
        """
        Convert a LaTeX node and everything below it

        Raises:
            UnsupportedConstruct: For shapes Typst cannot express
        """
        handler = self._dispatch.get(type(node))
        if handler is None:
            raise UnsupportedConstruct(f"No conversion for {type(node).__name__}")
        return handler(node)

    # ------------------------------------------------------------------
    # Sequences
    # ------------------------------------------------------------------

    def _convert_group(self, node: tex.Group) -> TypstNode:
        return self._convert_items(node.children)

    def _convert_items(self, children: tuple[tex.TexNode, ...]) -> TypstNode:
        items = [self.convert(child) for child in children]
        items = [item for item in items if not isinstance(item, Empty)]
        return self._fold_operators(items)

    def _fold_operators(self, items: list[TypstNode]) -> TypstNode:
        """
        Build infix structure around the weakest operator at bracket depth 0

        Ties go to the rightmost operator so chains stay left-associative.
        An operator directly after another operator (or at either end) is a
        sign, not an infix operator.
        """
        if not items:
            return EMPTY
        if len(items) == 1:
            return items[0]

        split = -1
        weakest: int | None = None
        depth = 0
        for index, item in enumerate(items):
            if isinstance(item, Atom) and item.value in OPENING_ATOMS:
                depth += 1
                continue
            if isinstance(item, Atom) and item.value in CLOSING_ATOMS:
                depth = max(depth - 1, 0)
                continue
            if depth or index == 0 or index == len(items) - 1:
                continue
            key = _operator_key(item)
            if key is None or key not in symbols.OPERATOR_PRECEDENCE:
                continue
            if _is_operator(items[index - 1]):
                continue
            strength = symbols.OPERATOR_PRECEDENCE[key]
            if weakest is None or strength <= weakest:
                weakest = strength
                split = index

        if split == -1:
            return Sequence(items=tuple(items))
        return Binary(
            op=items[split],
            left=self._fold_operators(items[:split]),
            right=self._fold_operators(items[split + 1 :]),
        )

    # ------------------------------------------------------------------
    # Leaves
    # ------------------------------------------------------------------

    def _convert_symbol(self, node: tex.Symbol) -> TypstNode:
        value = node.value
        if value in symbols.ATOM_SYMBOLS:
            return Symbol(name=symbols.ATOM_SYMBOLS[value])
        return Atom(value=symbols.ATOM_ESCAPES.get(value, value))

    def _convert_text(self, node: tex.Text) -> TypstNode:
        literal = TextLiteral(value=node.value)
        function = symbols.TEXT_STYLES.get(node.style)
        if function is None:
            return literal
        return FuncCall(name=function, args=(literal,))

    def _convert_comment(self, node: tex.Comment) -> TypstNode:
        if not self.policy.keep_comments:
            return EMPTY
        return Comment(value=node.value)

    def _convert_line_break(self, node: tex.LineBreak) -> TypstNode:
        return Atom(value="\\")

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _convert_command(self, node: tex.Command) -> TypstNode:
        name = node.name

        if not node.args and node.optional is None:
            return self._convert_nullary(name)

        args = node.args
        if name == "sqrt":
            radicand = self.convert(args[0])
            if node.optional is None or node.optional == tex.EMPTY_GROUP:
                return FuncCall(name="sqrt", args=(radicand,))
            return FuncCall(name="root", args=(self.convert(node.optional), radicand))

        if name == "mathbb":
            arg = args[0]
            if isinstance(arg, tex.Symbol):
                doubled = symbols.double_struck(arg.value)
                if doubled is not None:
                    return Symbol(name=doubled)
            return FuncCall(name="bb", args=(self.convert(arg),))

        if name == "mathbf":
            inner = FuncCall(name="bold", args=(self.convert(args[0]),))
            return FuncCall(name="upright", args=(inner,))

        if name in symbols.FUNCTION_MAP:
            return FuncCall(name=symbols.FUNCTION_MAP[name], args=(self.convert(args[0]),))

        if name == "operatorname":
            return self._convert_operatorname(args[0])

        if name == "pmod":
            return Sequence(
                items=(
                    Atom(value="("),
                    Symbol(name="mod"),
                    self.convert(args[0]),
                    Atom(value=")"),
                )
            )

        if name in ("overset", "stackrel", "underset"):
            return self._convert_stacked(name, args[0], args[1])

        raise UnsupportedConstruct(f"No conversion for \\{name} with arguments")

    def _convert_nullary(self, name: str) -> TypstNode:
        if name in symbols.DROPPED_COMMANDS:
            return EMPTY
        mapped = symbols.map_command(name)
        if mapped is not None:
            return Symbol(name=mapped)
        logger.debug("Unknown command rendered as operator", command=name)
        return FuncCall(name="op", args=(TextLiteral(value=name),))

    def _convert_operatorname(self, arg: tex.TexNode) -> TypstNode:
        text = arg.value if isinstance(arg, tex.Text) else ""
        if text in symbols.TYPST_OPERATORS:
            return Symbol(name=text)
        return FuncCall(name="op", args=(TextLiteral(value=text),))

    def _convert_stacked(
        self, name: str, annotation: tex.TexNode, base: tex.TexNode
    ) -> TypstNode:
        if name == "overset" and _is_def(annotation) and base == tex.Symbol(value="="):
            return Symbol(name="eq.def")

        operator = FuncCall(name="op", args=(self.convert(base),), options=LIMITS_OPTION)
        script = _script_operand(self.convert(annotation))
        if name == "underset":
            return SupSub(base=operator, sub=script)
        return SupSub(base=operator, sup=script)

    # ------------------------------------------------------------------
    # Fractions and attachments
    # ------------------------------------------------------------------

    def _convert_fraction(self, node: tex.Fraction) -> TypstNode:
        numerator = self.convert(node.numerator)
        denominator = self.convert(node.denominator)

        if node.name in ("binom", "dbinom", "tbinom"):
            return FuncCall(name="binom", args=(numerator, denominator))

        if is_empty(numerator):
            numerator = Grouped(body=EMPTY)
        else:
            numerator = _wrap(numerator, precedence(numerator) < Precedence.FRACTION)
        if is_empty(denominator):
            denominator = Grouped(body=EMPTY)
        else:
            denominator = _wrap(denominator, precedence(denominator) <= Precedence.FRACTION)
        return Fraction(numerator=numerator, denominator=denominator)

    def _convert_supsub(self, node: tex.SupSub) -> TypstNode:
        primes, sup_source = _split_primes(node.sup)

        brace = self._convert_brace(node, primes, sup_source)
        if brace is not None:
            return brace

        base = self.convert(node.base)
        if is_empty(base):
            base = TextLiteral(value="")
        else:
            base = _wrap(base, precedence(base) < Precedence.ATOM)

        sup = None if sup_source is None else _script_operand(self.convert(sup_source))
        sub = None if node.sub is None else _script_operand(self.convert(node.sub))
        return SupSub(base=base, sup=sup, sub=sub, primes=primes)

    def _convert_brace(
        self, node: tex.SupSub, primes: int, sup: tex.TexNode | None
    ) -> TypstNode | None:
        """\\overbrace{x}^{y} and \\underbrace{x}_{y} take the script as an argument"""
        base = node.base
        if not isinstance(base, tex.Command) or primes:
            return None
        if base.name == "overbrace" and sup is not None and node.sub is None:
            annotation = sup
        elif base.name == "underbrace" and node.sub is not None and sup is None:
            annotation = node.sub
        else:
            return None
        return FuncCall(
            name=base.name,
            args=(self.convert(base.args[0]), self.convert(annotation)),
        )

    # ------------------------------------------------------------------
    # \left ... \right
    # ------------------------------------------------------------------

    def _convert_left_right(self, node: tex.LeftRight) -> TypstNode:
        left, right = node.left, node.right
        body = self.convert(node.body)

        if (left, right) in symbols.ROUNDING_PAIRS:
            return FuncCall(name=symbols.ROUNDING_PAIRS[(left, right)], args=(body,))

        if (left, right) in symbols.BARE_DELIMITER_PAIRS:
            return Sequence(
                items=(
                    Atom(value=symbols.DELIMITER_MAP[left]),
                    body,
                    Atom(value=symbols.DELIMITER_MAP[right]),
                )
            )

        unpaired = left == "." or right == "."
        items = (
            self._delimiter(left, unpaired),
            body,
            self._delimiter(right, unpaired),
        )
        return FuncCall(
            name="lr",
            args=(Sequence(items=tuple(item for item in items if not is_empty(item))),),
        )

    @staticmethod
    def _delimiter(delimiter: str, unpaired: bool) -> TypstNode:
        if delimiter == ".":
            return EMPTY
        mapped = symbols.DELIMITER_MAP[delimiter]
        if unpaired and mapped in symbols.UNPAIRED_ESCAPES:
            return Atom(value=symbols.UNPAIRED_ESCAPES[mapped])
        if mapped[0].isalpha():
            return Symbol(name=mapped)
        return Atom(value=mapped)

    # ------------------------------------------------------------------
    # Environments
    # ------------------------------------------------------------------

    def _convert_environment(self, node: tex.Environment) -> TypstNode:
        rows = tuple(
            tuple(self._convert_items(cell.children) for cell in row) for row in node.rows
        )

        if node.name in ALIGN_ENVIRONMENTS:
            return Align(rows=rows)

        if node.name in CASES_ENVIRONMENTS:
            for row in rows:
                if len(row) > 2:
                    raise UnsupportedConstruct(
                        f"{node.name} row has {len(row)} columns, at most 2 are supported"
                    )
            return Cases(rows=rows, reverse=node.name == "rcases")

        width = max((len(row) for row in rows), default=0)
        if node.argument is not None:
            declared = _count_columns(node.argument)
            if width > declared:
                raise UnsupportedConstruct(
                    f"{node.name} row has {width} cells but the column spec "
                    f"{node.argument!r} declares {declared}"
                )
        padded = tuple(row + (EMPTY,) * (width - len(row)) for row in rows)
        return Matrix(rows=padded, delim=symbols.MATRIX_DELIMS[node.name])


def _split_primes(sup: tex.TexNode | None) -> tuple[int, tex.TexNode | None]:
    """Separate leading prime marks from a superscript"""
    prime = tex.Symbol(value="'")
    if sup == prime:
        return 1, None
    if not isinstance(sup, tex.Group):
        return 0, sup

    count = 0
    for child in sup.children:
        if child != prime:
            break
        count += 1
    if count == 0:
        return 0, sup
    rest = sup.children[count:]
    if not rest:
        return count, None
    if len(rest) == 1:
        return count, rest[0]
    return count, tex.Group(children=rest)


def _is_def(node: tex.TexNode) -> bool:
    """True for the letters d e f (as in \\overset{def}{=})"""
    if isinstance(node, tex.Text):
        return node.value == "def"
    if not isinstance(node, tex.Group):
        return False
    letters = [child.value for child in node.children if isinstance(child, tex.Symbol)]
    return len(letters) == len(node.children) and "".join(letters) == "def"


def _count_columns(spec: str) -> int:
    """Number of columns declared by an array column spec like {c|c} or {lp{2cm}}"""
    stripped = COLUMN_SPEC_BRACES_RE.sub("", spec)
    return sum(1 for char in stripped if char in COLUMN_LETTERS)


def convert_tree(node: tex.TexNode, policy: ConversionPolicy | None = None) -> TypstNode:
    """
    Convert a parsed LaTeX tree into a Typst tree

    Example:
        >>> from tex2typst.tex.parser import parse_tex
        >>> convert_tree(parse_tex(r"\\mathbb{R}"))
        Symbol(name='RR')
    """
    return TypstConverter(policy).convert(node)

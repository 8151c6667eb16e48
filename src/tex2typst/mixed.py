"""
Mixed-mode splitter - prose with embedded LaTeX math

Finds the math spans in a document, hands each one to a math converter and
stitches the results back into the prose:

    \\( x \\)  and  $x$       inline   ->  $x$
    \\[ x \\]  and  $$x$$     display  ->  $ x $

Prose is copied verbatim, escapes included (`\\$` means a literal dollar in
Typst markup too). A span that never closes, or a stray `\\)` or `\\]`, is an
error: guessing where math ends would silently mangle the document.

Fun fact: `$$...$$` is plain TeX and officially discouraged in LaTeX, which
prefers `\\[...\\]`. Both are everywhere in the wild, so both are accepted!
"""

from enum import Enum
from typing import Callable

from pydantic import BaseModel

from tex2typst.kernel.errors import UnbalancedGroup
from tex2typst.kernel.logging import get_logger

logger = get_logger(__name__)

# opener -> (closer, display)
MATH_OPENERS: dict[str, tuple[str, bool]] = {
    "\\(": ("\\)", False),
    "\\[": ("\\]", True),
    "$$": ("$$", True),
    "$": ("$", False),
}
STRAY_CLOSERS = ("\\)", "\\]")


class SegmentKind(str, Enum):
    TEXT = "text"
    INLINE = "inline"
    DISPLAY = "display"


class Segment(BaseModel):
    """A run of prose or the content of one math span (delimiters removed)"""

    kind: SegmentKind
    content: str

    model_config = {"frozen": True}


def _opener_at(text: str, pos: int) -> str | None:
    # "$$" is listed before "$" so the longer opener wins
    for opener in MATH_OPENERS:
        if text.startswith(opener, pos):
            return opener
    return None


def _find_closer(text: str, start: int, closer: str) -> int:
    """Index of closer at or after start, skipping escaped pairs; -1 if none"""
    pos = start
    while pos < len(text):
        if text.startswith(closer, pos):
            return pos
        pos += 2 if text[pos] == "\\" else 1
    return -1


def split_mixed(text: str) -> list[Segment]:
    """
    Split a document into prose and math segments

    Raises:
        UnbalancedGroup: On an unterminated math span or a stray closer
    """
    segments: list[Segment] = []
    prose: list[str] = []
    pos = 0

    while pos < len(text):
        for closer in STRAY_CLOSERS:
            if text.startswith(closer, pos):
                raise UnbalancedGroup(closer, pos)

        opener = _opener_at(text, pos)
        if opener is None:
            step = 2 if text[pos] == "\\" else 1
            prose.append(text[pos : pos + step])
            pos += step
            continue

        closer, display = MATH_OPENERS[opener]
        body_start = pos + len(opener)
        end = _find_closer(text, body_start, closer)
        if end == -1:
            raise UnbalancedGroup(opener, pos)

        if prose:
            segments.append(Segment(kind=SegmentKind.TEXT, content="".join(prose)))
            prose = []
        kind = SegmentKind.DISPLAY if display else SegmentKind.INLINE
        segments.append(Segment(kind=kind, content=text[body_start:end]))
        pos = end + len(closer)

    if prose:
        segments.append(Segment(kind=SegmentKind.TEXT, content="".join(prose)))
    return segments


def convert_mixed(text: str, convert_math: Callable[[str], str]) -> str:
    """
    Convert every math span of a document, keeping the prose

    Args:
        text: Prose with embedded LaTeX math
        convert_math: Converter for the content of one math span

    Returns:
        The document with Typst math in place of LaTeX math

    Example:
        >>> convert_mixed(r"half: \\(\\frac{1}{2}\\)", tex2typst)
        'half: $1/2$'
    """
    segments = split_mixed(text)
    logger.debug(
        "Split mixed input",
        segments=len(segments),
        math_spans=sum(1 for seg in segments if seg.kind != SegmentKind.TEXT),
    )

    out: list[str] = []
    for segment in segments:
        if segment.kind == SegmentKind.TEXT:
            out.append(segment.content)
            continue
        converted = convert_math(segment.content)
        math = converted.strip()
        if converted.endswith("\n"):
            # a trailing line comment needs its line end
            math += "\n"
        if segment.kind == SegmentKind.DISPLAY:
            out.append(f"$ {math} $")
        else:
            out.append(f"${math}$")
    return "".join(out)

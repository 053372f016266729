"""Line breaking and painting for certificate text blocks.

Coordinates are PDF points with the origin at the bottom-left of the page;
y grows upward, so successive lines move to smaller y values.

Text is broken greedily at whitespace. There is no hyphenation, and line
break characters inside segment text are ordinary whitespace: they allow a
wrap but never force one.
"""
from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Callable, Iterable, Mapping, Protocol, Sequence

from ..constants import DEFAULT_FONT_SIZE, DEFAULT_TEXT_COLOR, HANG_FACTORS
from .certificates_layout import StyledSegment, TextBlock, Token, VisualLine
from .colors import RGB
from .typefaces import lookup_font

logger = logging.getLogger("certpress.render")

_WHITESPACE_RE = re.compile(r"(\s+)")


class MeasuredFont(Protocol):
    def width_of(self, text: str, size: float) -> float: ...


class PageSurface(Protocol):
    def draw_text_run(
        self, text: str, font, size: float, color: RGB, x: float, y: float
    ) -> None: ...

    def draw_rect(
        self, x: float, y: float, width: float, height: float, color: RGB
    ) -> None: ...


def tokenize(segment: StyledSegment, font: MeasuredFont, size: float) -> list[Token]:
    """Split a segment into word and whitespace tokens.

    Joining the token texts gives back ``segment.text`` exactly.
    """
    tokens: list[Token] = []
    # split() with one capture group alternates word, whitespace, word, ...
    for index, part in enumerate(_WHITESPACE_RE.split(segment.text)):
        if not part:
            continue
        tokens.append(
            Token(
                text=part,
                font=segment.font,
                width=font.width_of(part, size),
                is_whitespace=index % 2 == 1,
            )
        )
    return tokens


def _seal(tokens: list[Token]) -> VisualLine | None:
    while tokens and tokens[-1].is_whitespace:
        tokens.pop()
    if not tokens:
        return None
    return VisualLine(tokens=tuple(tokens), width=sum(t.width for t in tokens))


def break_tokens(tokens: Iterable[Token], max_width: float) -> list[VisualLine]:
    """Greedy first-fit wrapping of an already tokenized block."""
    lines: list[VisualLine] = []
    current: list[Token] = []
    width = 0.0

    def flush() -> None:
        nonlocal current, width
        line = _seal(current)
        if line is not None:
            lines.append(line)
        current, width = [], 0.0

    for token in tokens:
        if current and width + token.width > max_width:
            flush()
        if not current and token.is_whitespace:
            continue
        current.append(token)
        width += token.width
        # A single word wider than the box gets a line to itself.
        if len(current) == 1 and token.width > max_width:
            flush()
    flush()
    return lines


def break_lines(
    segments: Sequence[StyledSegment],
    fonts: Mapping[str, MeasuredFont],
    size: float,
    max_width: float,
) -> list[VisualLine]:
    tokens: list[Token] = []
    for segment in segments:
        tokens.extend(tokenize(segment, lookup_font(fonts, segment.font), size))
    return break_tokens(tokens, max_width)


def optical_hang(
    line: VisualLine,
    fonts: Mapping[str, MeasuredFont],
    size: float,
    hang_factors: Mapping[str, float] = HANG_FACTORS,
) -> float:
    """Distance trailing punctuation may extend past the right edge."""
    last = next(
        (t for t in reversed(line.tokens) if t.text and not t.is_whitespace),
        None,
    )
    if last is None:
        return 0.0
    font = lookup_font(fonts, last.font)
    hang = 0.0
    for char in reversed(last.text):
        factor = hang_factors.get(char)
        if factor is None:
            break
        hang += font.width_of(char, size) * factor
    return hang


def line_origin(
    line: VisualLine,
    *,
    x: float,
    max_width: float,
    align: str,
    hang: float = 0.0,
) -> float:
    if align == "center":
        return x + (max_width - line.width) / 2
    if align == "right":
        return x + (max_width - line.width) + hang
    return x


def draw_lines(
    page: PageSurface,
    lines: Sequence[VisualLine],
    block: TextBlock,
    fonts: Mapping[str, MeasuredFont],
) -> None:
    max_width = block.effective_max_width
    line_height = block.effective_line_height
    optical = block.align == "right" and block.uses_optical_margin
    for index, line in enumerate(lines):
        hang = optical_hang(line, fonts, block.size) if optical else 0.0
        cursor = line_origin(
            line, x=block.x, max_width=max_width, align=block.align, hang=hang
        )
        baseline = block.y - index * line_height
        for token in line.tokens:
            page.draw_text_run(
                token.text,
                lookup_font(fonts, token.font),
                block.size,
                block.color,
                cursor,
                baseline,
            )
            cursor += token.width


def draw_text_block(
    page: PageSurface,
    block: TextBlock,
    fonts: Mapping[str, MeasuredFont],
) -> list[VisualLine]:
    """Wrap and paint one text block; returns the lines that were painted."""
    lines = break_lines(block.segments, fonts, block.size, block.effective_max_width)
    logger.debug(
        "[layout] block at (%s, %s): %d segment(s) -> %d line(s)",
        block.x,
        block.y,
        len(block.segments),
        len(lines),
    )
    draw_lines(page, lines, block, fonts)
    return lines


def render_text_block(
    page: PageSurface,
    segments: Sequence[StyledSegment],
    *,
    x: float,
    y: float,
    fonts: Mapping[str, MeasuredFont],
    size: float = DEFAULT_FONT_SIZE,
    max_width: float | None = None,
    line_height: float | None = None,
    align: str = "left",
    color: RGB = DEFAULT_TEXT_COLOR,
    optical_margin: bool | None = None,
) -> list[VisualLine]:
    block = TextBlock(
        x=x,
        y=y,
        segments=tuple(segments),
        size=size,
        max_width=max_width,
        line_height=line_height,
        align=align,
        color=color,
        optical_margin=optical_margin,
    )
    return draw_text_block(page, block, fonts)


def substitute_segments(
    block: TextBlock, transform: Callable[[str], str]
) -> TextBlock:
    """Return a copy of ``block`` with ``transform`` applied to each segment text."""
    return replace(
        block,
        segments=tuple(
            replace(segment, text=transform(segment.text)) for segment in block.segments
        ),
    )

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from ..constants import (
    ALIGN_CHOICES,
    DEFAULT_FONT_SIZE,
    DEFAULT_MAX_WIDTH,
    DEFAULT_QR_BACKGROUND,
    DEFAULT_QR_COLOR,
    DEFAULT_QR_ERROR_CORRECTION,
    DEFAULT_TEXT_COLOR,
    LINE_HEIGHT_FACTOR,
    QR_ERROR_CORRECTION_LEVELS,
)
from .colors import RGB, validate_rgb


class LayoutError(ValueError):
    """Raised when a template layout document has an invalid shape."""


@dataclass(frozen=True)
class StyledSegment:
    """A run of text drawn in one font. Segments concatenate literally."""

    text: str
    font: str

    def __post_init__(self) -> None:
        if not isinstance(self.text, str):
            raise LayoutError(f"Segment text must be a string, got {self.text!r}")
        if not isinstance(self.font, str) or not self.font:
            raise LayoutError("Segment font name is required")


@dataclass(frozen=True)
class Token:
    text: str
    font: str
    width: float
    is_whitespace: bool


@dataclass(frozen=True)
class VisualLine:
    """A wrapped line; never starts or ends with a whitespace token."""

    tokens: tuple[Token, ...]
    width: float

    @property
    def text(self) -> str:
        return "".join(token.text for token in self.tokens)


def _number(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise LayoutError(f"{key} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise LayoutError(f"{key} must be finite, got {value!r}")
    return float(value)


def _flag(value: Any, key: str) -> None:
    if not isinstance(value, bool):
        raise LayoutError(f"{key} must be true or false, got {value!r}")


@dataclass(frozen=True)
class TextBlock:
    x: float
    y: float
    segments: tuple[StyledSegment, ...] = ()
    size: float = DEFAULT_FONT_SIZE
    max_width: float | None = None
    line_height: float | None = None
    align: str = "left"
    color: RGB = DEFAULT_TEXT_COLOR
    optical_margin: bool | None = None

    def __post_init__(self) -> None:
        _number(self.x, "x")
        _number(self.y, "y")
        if _number(self.size, "size") <= 0:
            raise LayoutError(f"size must be positive, got {self.size!r}")
        if self.max_width is not None:
            _number(self.max_width, "maxWidth")
        if self.line_height is not None:
            _number(self.line_height, "lineHeight")
        if self.optical_margin is not None:
            _flag(self.optical_margin, "opticalMargin")
        if self.align not in ALIGN_CHOICES:
            raise LayoutError(
                f"align must be one of {', '.join(ALIGN_CHOICES)}, got {self.align!r}"
            )
        object.__setattr__(self, "color", validate_rgb(self.color))
        object.__setattr__(self, "segments", tuple(self.segments))
        for segment in self.segments:
            if not isinstance(segment, StyledSegment):
                raise LayoutError(f"Expected StyledSegment, got {segment!r}")

    @property
    def effective_max_width(self) -> float:
        return DEFAULT_MAX_WIDTH if self.max_width is None else self.max_width

    @property
    def effective_line_height(self) -> float:
        if self.line_height is None:
            return self.size * LINE_HEIGHT_FACTOR
        return self.line_height

    @property
    def uses_optical_margin(self) -> bool:
        if self.optical_margin is None:
            return self.align == "right"
        return bool(self.optical_margin)

    @property
    def font_names(self) -> set[str]:
        return {segment.font for segment in self.segments}


@dataclass(frozen=True)
class QRCodeBlock:
    show: bool = False
    x: float = 0.0
    y: float = 0.0
    width: float = 50.0
    color: RGB = DEFAULT_QR_COLOR
    background: RGB = DEFAULT_QR_BACKGROUND
    error_correction: str = DEFAULT_QR_ERROR_CORRECTION

    def __post_init__(self) -> None:
        _flag(self.show, "show")
        _number(self.x, "x")
        _number(self.y, "y")
        if _number(self.width, "width") <= 0:
            raise LayoutError(f"QR code width must be positive, got {self.width!r}")
        if self.error_correction not in QR_ERROR_CORRECTION_LEVELS:
            raise LayoutError(
                "QR error correction must be one of "
                f"{', '.join(QR_ERROR_CORRECTION_LEVELS)}, got {self.error_correction!r}"
            )
        object.__setattr__(self, "color", validate_rgb(self.color))
        object.__setattr__(self, "background", validate_rgb(self.background))


@dataclass(frozen=True)
class TemplateLayout:
    texts: tuple[TextBlock, ...] = ()
    qrcode: QRCodeBlock = field(default_factory=QRCodeBlock)

    def __post_init__(self) -> None:
        object.__setattr__(self, "texts", tuple(self.texts))

    @property
    def font_names(self) -> set[str]:
        names: set[str] = set()
        for block in self.texts:
            names |= block.font_names
        return names


def _parse_segment(raw: Any) -> StyledSegment:
    if not isinstance(raw, Mapping):
        raise LayoutError(f"Line segment must be an object, got {raw!r}")
    return StyledSegment(text=raw.get("text", ""), font=raw.get("font", ""))


def parse_text_block(raw: Any) -> TextBlock:
    if not isinstance(raw, Mapping):
        raise LayoutError(f"Text block must be an object, got {raw!r}")
    for key in ("x", "y"):
        if key not in raw:
            raise LayoutError(f"Text block is missing {key!r}")
    lines = raw.get("lines") or []
    if not isinstance(lines, list):
        raise LayoutError("Text block 'lines' must be a list")
    return TextBlock(
        x=raw["x"],
        y=raw["y"],
        segments=tuple(_parse_segment(line) for line in lines),
        size=raw.get("size", DEFAULT_FONT_SIZE),
        max_width=raw.get("maxWidth"),
        line_height=raw.get("lineHeight"),
        align=raw.get("align") or "left",
        color=raw.get("color") or DEFAULT_TEXT_COLOR,
        optical_margin=raw.get("opticalMargin"),
    )


def parse_qrcode_block(raw: Any) -> QRCodeBlock:
    if raw is None:
        return QRCodeBlock()
    if not isinstance(raw, Mapping):
        raise LayoutError(f"QR code settings must be an object, got {raw!r}")
    return QRCodeBlock(
        show=raw.get("show", False),
        x=raw.get("x", 0.0),
        y=raw.get("y", 0.0),
        width=raw.get("width", 50.0),
        color=raw.get("color") or DEFAULT_QR_COLOR,
        background=raw.get("background") or DEFAULT_QR_BACKGROUND,
        error_correction=str(raw.get("ec") or DEFAULT_QR_ERROR_CORRECTION).upper(),
    )


def parse_layout(data: Any) -> TemplateLayout:
    """Build a TemplateLayout from the JSON document stored with a template.

    A bare list is accepted as the ``texts`` array of a layout without a QR
    code block.
    """
    if isinstance(data, list):
        data = {"texts": data}
    if not isinstance(data, Mapping):
        raise LayoutError(f"Layout must be an object, got {type(data).__name__}")
    texts = data.get("texts") or []
    if not isinstance(texts, list):
        raise LayoutError("Layout 'texts' must be a list")
    return TemplateLayout(
        texts=tuple(parse_text_block(block) for block in texts),
        qrcode=parse_qrcode_block(data.get("qrcode")),
    )


def _segments_to_dicts(segments: Iterable[StyledSegment]) -> list[dict]:
    return [{"text": segment.text, "font": segment.font} for segment in segments]


def layout_to_dict(layout: TemplateLayout) -> dict:
    texts: list[dict] = []
    for block in layout.texts:
        entry: dict[str, Any] = {
            "x": block.x,
            "y": block.y,
            "size": block.size,
            "align": block.align,
            "color": list(block.color),
            "lines": _segments_to_dicts(block.segments),
        }
        if block.max_width is not None:
            entry["maxWidth"] = block.max_width
        if block.line_height is not None:
            entry["lineHeight"] = block.line_height
        if block.optical_margin is not None:
            entry["opticalMargin"] = block.optical_margin
        texts.append(entry)
    qr = layout.qrcode
    return {
        "texts": texts,
        "qrcode": {
            "show": qr.show,
            "x": qr.x,
            "y": qr.y,
            "width": qr.width,
            "color": list(qr.color),
            "background": list(qr.background),
            "ec": qr.error_correction,
        },
    }

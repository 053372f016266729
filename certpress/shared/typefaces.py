from __future__ import annotations

import hashlib
import logging
import os
from io import BytesIO
from typing import Iterable, Iterator, Mapping

from PIL import ImageFont
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from ..constants import TYPEFACE_EXTENSIONS
from .certificates_layout import TextBlock

logger = logging.getLogger("certpress.typefaces")


class MissingFontError(LookupError):
    """A layout references a typeface that is not registered."""

    def __init__(self, font_name: str):
        super().__init__(f"Typeface {font_name!r} is not registered")
        self.font_name = font_name


class TypefaceRegistry(Mapping[str, bytes]):
    """Read-only mapping of typeface name to TrueType file bytes.

    Lookups are exact string matches on the name stored in a layout segment.
    """

    def __init__(self, typefaces: Mapping[str, bytes] | None = None):
        self._typefaces = dict(typefaces or {})

    @classmethod
    def from_directory(cls, path: str) -> "TypefaceRegistry":
        typefaces: dict[str, bytes] = {}
        if os.path.isdir(path):
            for filename in sorted(os.listdir(path)):
                stem, ext = os.path.splitext(filename)
                if ext.lower() not in TYPEFACE_EXTENSIONS:
                    continue
                with open(os.path.join(path, filename), "rb") as fh:
                    typefaces[stem] = fh.read()
        logger.debug("[typefaces] loaded %d from %s", len(typefaces), path)
        return cls(typefaces)

    def __getitem__(self, name: str) -> bytes:
        return self._typefaces[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._typefaces)

    def __len__(self) -> int:
        return len(self._typefaces)


class FontHandle:
    """An embedded TrueType font usable for measuring and drawing.

    reportlab keeps one process-wide font registry, so the font is registered
    under a name derived from its file digest. Identical files share one
    entry; a replaced file gets a new one.
    """

    def __init__(self, name: str, data: bytes):
        self.name = name
        self.data = data
        digest = hashlib.sha256(data).hexdigest()[:16]
        self.pdf_name = f"certpress-{digest}"
        if self.pdf_name not in pdfmetrics.getRegisteredFontNames():
            pdfmetrics.registerFont(TTFont(self.pdf_name, BytesIO(data)))
        self._ttfont = pdfmetrics.getFont(self.pdf_name)
        self._image_fonts: dict[int, ImageFont.FreeTypeFont] = {}

    def width_of(self, text: str, size: float) -> float:
        return self._ttfont.stringWidth(text, size)

    def image_font(self, size_px: int) -> ImageFont.FreeTypeFont:
        size_px = max(int(size_px), 1)
        font = self._image_fonts.get(size_px)
        if font is None:
            font = ImageFont.truetype(BytesIO(self.data), size_px)
            self._image_fonts[size_px] = font
        return font

    def __repr__(self) -> str:
        return f"FontHandle({self.name!r}, pdf_name={self.pdf_name!r})"


def lookup_font(fonts: Mapping[str, FontHandle], name: str) -> FontHandle:
    try:
        return fonts[name]
    except KeyError:
        raise MissingFontError(name) from None


def resolve_fonts(
    blocks: Iterable[TextBlock], registry: Mapping[str, bytes]
) -> dict[str, FontHandle]:
    """Embed every typeface referenced by ``blocks``.

    Returns a new table on every call. A name missing from ``registry``
    aborts the whole render; no fallback font is substituted.
    """
    names: set[str] = set()
    for block in blocks:
        names |= block.font_names
    fonts: dict[str, FontHandle] = {}
    for name in sorted(names):
        data = registry.get(name)
        if data is None:
            logger.error("[CERT-FONT] typeface %r is not registered", name)
            raise MissingFontError(name)
        fonts[name] = FontHandle(name, data)
    return fonts

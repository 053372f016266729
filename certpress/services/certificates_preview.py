import base64
import logging
import re
from dataclasses import dataclass
from io import BytesIO
from typing import Mapping

from PIL import Image
from PyPDF2 import PdfReader

from ..certgen import TemplateSource, paint_layout
from ..constants import PREVIEW_SCALE
from ..shared.certificates_layout import TemplateLayout
from ..shared.locales import DEFAULT_LOCALE
from ..shared.surfaces import RasterSurface
from ..shared.text_variables import CertificateContext
from ..shared.typefaces import resolve_fonts

logger = logging.getLogger("certpress.preview")

_IMAGE_PLACEMENT_RE = re.compile(r"([\d\.\-\s]+)cm\s+/([^\s/]+)\s+Do")


@dataclass(frozen=True)
class PreviewResult:
    png: bytes
    warnings: tuple[str, ...]

    @property
    def data_uri(self) -> str:
        return "data:image/png;base64," + base64.b64encode(self.png).decode("ascii")


def _page_size(reader: PdfReader) -> tuple[float, float]:
    page = reader.pages[0]
    return float(page.mediabox.width), float(page.mediabox.height)


def _paint_background(reader: PdfReader, surface: RasterSurface) -> None:
    """Paste the raster images placed on the template page.

    Only ``cm ... Do`` image placements are understood; vector artwork in
    the template is not rasterized.
    """
    page = reader.pages[0]
    content = page.get_contents()
    if content is None:
        return
    commands = content.get_data().decode("latin-1")
    resources = page.get("/Resources")
    xobjects = resources.get_object().get("/XObject") if resources else None
    if not xobjects:
        return
    xobjects = xobjects.get_object()
    for match in _IMAGE_PLACEMENT_RE.finditer(commands):
        numbers = [float(x) for x in match.group(1).split()]
        if len(numbers) < 6:
            continue
        a, _, _, d, e, f = numbers[-6:]
        stream = xobjects.get("/" + match.group(2))
        if stream is None:
            continue
        stream_obj = stream.get_object()
        if stream_obj.get("/Subtype") != "/Image":
            continue
        try:
            image = Image.open(BytesIO(stream_obj.get_data())).convert("RGB")
        except OSError:
            logger.info("[preview-bg] skipped undecodable image %s", match.group(2))
            continue
        width_pt = abs(a)
        height_pt = abs(d)
        w_px = max(1, int(round(width_pt * surface.scale)))
        h_px = max(1, int(round(height_pt * surface.scale)))
        image = image.resize((w_px, h_px))
        y_top_pt = f + height_pt if d > 0 else f
        x_px, y_px = surface.to_pixels(e, y_top_pt)
        surface.image.paste(image, (int(round(x_px)), int(round(y_px))))


def generate_preview(
    template_pdf: TemplateSource,
    layout: TemplateLayout,
    registry: Mapping[str, bytes],
    *,
    context: CertificateContext | None = None,
    locale: str = DEFAULT_LOCALE,
    qr_url: str | None = None,
    scale: float = PREVIEW_SCALE,
) -> PreviewResult:
    fonts = resolve_fonts(layout.texts, registry)
    warnings: list[str] = []

    if isinstance(template_pdf, bytes):
        template_pdf = BytesIO(template_pdf)
    reader = PdfReader(template_pdf)
    page_width, page_height = _page_size(reader)
    surface = RasterSurface(page_width, page_height, scale=scale)
    try:
        _paint_background(reader, surface)
    except Exception:
        logger.exception("[preview-bg-fallback] template background not rendered")
        warnings.append("[preview-bg-fallback] template background not rendered")
        surface = RasterSurface(page_width, page_height, scale=scale)

    paint_layout(surface, layout, fonts, context=context, locale=locale, qr_url=qr_url)

    buffer = BytesIO()
    surface.image.save(buffer, format="PNG")
    return PreviewResult(png=buffer.getvalue(), warnings=tuple(warnings))

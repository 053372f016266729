from __future__ import annotations

import logging
from io import BytesIO
from typing import BinaryIO, Mapping, Union

from PyPDF2 import PdfReader, PdfWriter
from reportlab.pdfgen import canvas

from .shared.certificates_layout import TemplateLayout
from .shared.locales import DEFAULT_LOCALE
from .shared.qrcodes import draw_qrcode_block
from .shared.storage import existing_digest, write_atomic
from .shared.surfaces import CanvasSurface
from .shared.text_layout import PageSurface, draw_text_block, substitute_segments
from .shared.text_variables import CertificateContext, replace_variables, sample_context
from .shared.typefaces import FontHandle, resolve_fonts

logger = logging.getLogger("certpress.render")

SAMPLE_QR_URL = "https://example.com/view/00000000-0000-0000-0000-000000000000"

TemplateSource = Union[str, bytes, BinaryIO]


def certificate_view_url(base_url: str, certificate_uuid: str) -> str:
    return f"{base_url.rstrip('/')}/view/{certificate_uuid}"


def _open_template(template_pdf: TemplateSource) -> PdfReader:
    if isinstance(template_pdf, bytes):
        return PdfReader(BytesIO(template_pdf))
    return PdfReader(template_pdf)


def paint_layout(
    page: PageSurface,
    layout: TemplateLayout,
    fonts: Mapping[str, FontHandle],
    *,
    context: CertificateContext | None = None,
    locale: str = DEFAULT_LOCALE,
    qr_url: str | None = None,
) -> None:
    """Draw every text block and, if enabled, the QR code of ``layout``."""
    for block in layout.texts:
        if context is not None:
            block = substitute_segments(
                block, lambda text: replace_variables(text, context, locale)
            )
        draw_text_block(page, block, fonts)
    if layout.qrcode.show and qr_url:
        draw_qrcode_block(page, layout.qrcode, qr_url)


def render_certificate_pdf(
    template_pdf: TemplateSource,
    layout: TemplateLayout,
    registry: Mapping[str, bytes],
    *,
    context: CertificateContext | None = None,
    locale: str = DEFAULT_LOCALE,
    qr_url: str | None = None,
) -> bytes:
    """Render the layout onto page 1 of the template and return the PDF bytes."""
    fonts = resolve_fonts(layout.texts, registry)

    template = _open_template(template_pdf)
    base_page = template.pages[0]
    w = float(base_page.mediabox.width)
    h = float(base_page.mediabox.height)

    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=(w, h))
    paint_layout(
        CanvasSurface(c), layout, fonts, context=context, locale=locale, qr_url=qr_url
    )
    c.save()
    buffer.seek(0)

    overlay = PdfReader(buffer)
    base_page.merge_page(overlay.pages[0])

    writer = PdfWriter()
    writer.add_page(base_page)
    out_buffer = BytesIO()
    writer.write(out_buffer)
    return out_buffer.getvalue()


def make_certificate_pdf(
    output_path: str,
    *,
    template_pdf: TemplateSource,
    layout: TemplateLayout,
    registry: Mapping[str, bytes],
    context: CertificateContext | None = None,
    locale: str = DEFAULT_LOCALE,
    qr_url: str | None = None,
    skip_if_exists: bool = False,
) -> str:
    """Generate a certificate PDF and return its sha256 hash."""
    if skip_if_exists:
        digest = existing_digest(output_path)
        if digest is not None:
            logger.info("[CERT] kept existing %s", output_path)
            return digest

    pdf_bytes = render_certificate_pdf(
        template_pdf,
        layout,
        registry,
        context=context,
        locale=locale,
        qr_url=qr_url,
    )
    digest = write_atomic(output_path, pdf_bytes)
    logger.info("[CERT] wrote %s (%d bytes)", output_path, len(pdf_bytes))
    return digest


def render_template_sample(
    template_pdf: TemplateSource,
    layout: TemplateLayout,
    registry: Mapping[str, bytes],
    *,
    locale: str = DEFAULT_LOCALE,
) -> bytes:
    return render_certificate_pdf(
        template_pdf,
        layout,
        registry,
        context=sample_context(),
        locale=locale,
        qr_url=SAMPLE_QR_URL,
    )

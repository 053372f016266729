from __future__ import annotations

import logging

import qrcode
from qrcode.constants import (
    ERROR_CORRECT_H,
    ERROR_CORRECT_L,
    ERROR_CORRECT_M,
    ERROR_CORRECT_Q,
)
from qrcode.exceptions import DataOverflowError

from ..constants import DEFAULT_QR_BACKGROUND, DEFAULT_QR_COLOR
from .certificates_layout import LayoutError, QRCodeBlock
from .colors import RGB
from .text_layout import PageSurface

logger = logging.getLogger("certpress.render")

_ERROR_CORRECTION = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}


def qr_matrix(url: str, error_correction: str = "M") -> list[list[bool]]:
    """Encode ``url`` and return the module grid, row 0 at the top.

    Raises ``qrcode.exceptions.DataOverflowError`` when the data does not fit
    at the requested level; the level is never lowered automatically.
    """
    try:
        level = _ERROR_CORRECTION[error_correction]
    except KeyError:
        raise LayoutError(
            f"Unknown QR error correction level: {error_correction!r}"
        ) from None
    qr = qrcode.QRCode(error_correction=level, border=0)
    qr.add_data(url)
    try:
        qr.make(fit=True)
    except ValueError as exc:
        # Newer qrcode releases report "Invalid version" instead.
        raise DataOverflowError(str(exc)) from exc
    return qr.get_matrix()


def render_qr_code(
    page: PageSurface,
    url: str,
    x: float,
    y: float,
    width: float,
    background: RGB = DEFAULT_QR_BACKGROUND,
    color: RGB = DEFAULT_QR_COLOR,
    error_correction: str = "M",
) -> None:
    """Paint a QR code whose symbol fills the square from (x, y) to
    (x + width, y + width), on a background plate one module wider on every
    side.
    """
    matrix = qr_matrix(url, error_correction)
    count = len(matrix)
    module = width / count
    page.draw_rect(
        x - module, y - module, width + 2 * module, width + 2 * module, background
    )
    for row_index, row in enumerate(matrix):
        # Matrix rows run top-down, page y runs bottom-up.
        module_y = y + (count - 1 - row_index) * module
        for col_index, dark in enumerate(row):
            if dark:
                page.draw_rect(x + col_index * module, module_y, module, module, color)
    logger.debug("[QR] %dx%d modules at (%s, %s) width=%s", count, count, x, y, width)


def draw_qrcode_block(page: PageSurface, block: QRCodeBlock, url: str) -> None:
    render_qr_code(
        page,
        url,
        block.x,
        block.y,
        block.width,
        background=block.background,
        color=block.color,
        error_correction=block.error_correction,
    )

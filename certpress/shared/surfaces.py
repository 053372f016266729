from __future__ import annotations

from PIL import Image, ImageDraw
from reportlab.pdfgen import canvas

from .colors import RGB, rgb_to_bytes
from .typefaces import FontHandle


class CanvasSurface:
    """Paints onto a reportlab canvas in PDF points."""

    def __init__(self, c: canvas.Canvas):
        self.canvas = c

    def draw_text_run(
        self, text: str, font: FontHandle, size: float, color: RGB, x: float, y: float
    ) -> None:
        self.canvas.setFont(font.pdf_name, size)
        self.canvas.setFillColorRGB(*color)
        self.canvas.drawString(x, y, text)

    def draw_rect(
        self, x: float, y: float, width: float, height: float, color: RGB
    ) -> None:
        self.canvas.setFillColorRGB(*color)
        self.canvas.rect(x, y, width, height, stroke=0, fill=1)


class RasterSurface:
    """Paints onto a Pillow image.

    Page coordinates keep the PDF convention (bottom-left origin); they are
    flipped and multiplied by ``scale`` to get pixel positions.
    """

    def __init__(
        self,
        page_width: float,
        page_height: float,
        *,
        scale: float = 1.0,
        image: Image.Image | None = None,
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.scale = scale
        if image is None:
            image = Image.new(
                "RGB",
                (int(round(page_width * scale)), int(round(page_height * scale))),
                "white",
            )
        self.image = image
        self._draw = ImageDraw.Draw(self.image)

    def to_pixels(self, x: float, y: float) -> tuple[float, float]:
        return x * self.scale, (self.page_height - y) * self.scale

    def draw_text_run(
        self, text: str, font: FontHandle, size: float, color: RGB, x: float, y: float
    ) -> None:
        px, py = self.to_pixels(x, y)
        self._draw.text(
            (px, py),
            text,
            font=font.image_font(round(size * self.scale)),
            fill=rgb_to_bytes(color),
            anchor="ls",
        )

    def draw_rect(
        self, x: float, y: float, width: float, height: float, color: RGB
    ) -> None:
        left, top = self.to_pixels(x, y + height)
        right, bottom = self.to_pixels(x + width, y)
        x0, y0 = int(round(left)), int(round(top))
        # Pillow treats the lower-right corner as inclusive.
        x1 = max(int(round(right)) - 1, x0)
        y1 = max(int(round(bottom)) - 1, y0)
        self._draw.rectangle(
            [x0, y0, x1, y1],
            fill=rgb_to_bytes(color),
        )

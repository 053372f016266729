from reportlab.lib.pagesizes import A4

ALIGN_CHOICES = ("left", "center", "right")

QR_ERROR_CORRECTION_LEVELS = ("L", "M", "Q", "H")

DEFAULT_FONT_SIZE = 12

# Text blocks without an explicit maxWidth wrap at the width of an A4 page.
DEFAULT_MAX_WIDTH = A4[0]

LINE_HEIGHT_FACTOR = 1.4

DEFAULT_TEXT_COLOR = (0.0, 0.0, 0.0)
DEFAULT_QR_COLOR = (0.0, 0.0, 0.0)
DEFAULT_QR_BACKGROUND = (1.0, 1.0, 1.0)
DEFAULT_QR_ERROR_CORRECTION = "M"

# Fraction of a trailing glyph's advance width allowed to hang past the right
# edge of a right-aligned block. Tuned by eye.
HANG_FACTORS: dict[str, float] = {
    ".": 0.6,
    ",": 0.6,
    ";": 0.5,
    ":": 0.5,
    "!": 0.45,
    "?": 0.45,
    "…": 0.9,
    "'": 0.35,
    "‘": 0.35,
    "’": 0.35,
    '"': 0.35,
    "“": 0.35,
    "”": 0.35,
    ")": 0.25,
    "]": 0.25,
    "»": 0.35,
}

TYPEFACE_EXTENSIONS = (".ttf",)

PREVIEW_SCALE = 2.0

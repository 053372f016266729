import os
import pathlib
import sys

import pytest
import reportlab
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

PROJECT_ROOT = pathlib.Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from certpress.app import create_app
from certpress.shared.typefaces import TypefaceRegistry

REPORTLAB_FONTS = pathlib.Path(reportlab.__file__).resolve().parent / "fonts"


def pytest_collection_modifyitems(config, items):
    for item in items:
        if "slow" in item.keywords or "quarantine" in item.keywords:
            continue
        item.add_marker("full")
        if "no_smoke" in item.keywords:
            continue
        item.add_marker("smoke")


class FixedWidthFont:
    """Every character advances ``advance * size`` points unless overridden."""

    def __init__(self, advance: float = 0.5, overrides: dict | None = None):
        self.advance = advance
        self.overrides = overrides or {}

    def width_of(self, text: str, size: float) -> float:
        return sum(self.overrides.get(ch, self.advance) * size for ch in text)


class RecordingSurface:
    def __init__(self):
        self.calls = []

    def draw_text_run(self, text, font, size, color, x, y):
        self.calls.append(("text", text, font, size, color, x, y))

    def draw_rect(self, x, y, width, height, color):
        self.calls.append(("rect", x, y, width, height, color))

    @property
    def texts(self):
        return [call for call in self.calls if call[0] == "text"]

    @property
    def rects(self):
        return [call for call in self.calls if call[0] == "rect"]


@pytest.fixture
def vera_bytes():
    return {
        "Vera": (REPORTLAB_FONTS / "Vera.ttf").read_bytes(),
        "Vera Bold": (REPORTLAB_FONTS / "VeraBd.ttf").read_bytes(),
    }


@pytest.fixture
def registry(vera_bytes):
    return TypefaceRegistry(vera_bytes)


@pytest.fixture
def recorder():
    return RecordingSurface()


@pytest.fixture
def template_pdf(tmp_path):
    path = tmp_path / "template.pdf"
    c = canvas.Canvas(str(path), pagesize=A4)
    c.setFillGray(0.9)
    c.rect(20, 20, A4[0] - 40, A4[1] - 40, stroke=1, fill=0)
    c.showPage()
    c.save()
    return str(path)


@pytest.fixture
def app(tmp_path, vera_bytes):
    typeface_dir = tmp_path / "typefaces"
    typeface_dir.mkdir()
    for name, data in vera_bytes.items():
        (typeface_dir / f"{name}.ttf").write_bytes(data)
    application = create_app(
        {
            "STORAGE_ROOT": str(tmp_path / "storage"),
            "TYPEFACE_DIR": str(typeface_dir),
            "PUBLIC_BASE_URL": "https://certs.example.com",
        }
    )
    os.makedirs(application.config["STORAGE_ROOT"], exist_ok=True)
    with application.app_context():
        yield application

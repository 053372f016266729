from __future__ import annotations

import math
import re
from typing import Sequence

RGB = tuple[float, float, float]

_HEX_RE = re.compile(r"[0-9a-fA-F]{3}|[0-9a-fA-F]{6}")


class ColorError(ValueError):
    """Raised for malformed hex strings or RGB components outside [0, 1]."""


def validate_rgb(value: Sequence[float] | None, default: RGB | None = None) -> RGB:
    if value is None:
        if default is None:
            raise ColorError("Color is required")
        return default
    if isinstance(value, (str, bytes)) or len(value) != 3:
        raise ColorError(f"Color must be three numbers, got {value!r}")
    components: list[float] = []
    for component in value:
        if isinstance(component, bool) or not isinstance(component, (int, float)):
            raise ColorError(f"Color component {component!r} is not a number")
        if math.isnan(component) or component < 0 or component > 1:
            raise ColorError(
                f"Color component {component!r} must be between 0 and 1"
            )
        components.append(float(component))
    return (components[0], components[1], components[2])


def hex_to_rgb(value: str) -> RGB:
    raw = (value or "").strip()
    if raw.startswith("#"):
        raw = raw[1:]
    if not _HEX_RE.fullmatch(raw):
        raise ColorError(f"Invalid hex color string: {value!r}")
    if len(raw) == 3:
        raw = "".join(ch * 2 for ch in raw)
    return (
        int(raw[0:2], 16) / 255,
        int(raw[2:4], 16) / 255,
        int(raw[4:6], 16) / 255,
    )


def rgb_to_hex(value: Sequence[float]) -> str:
    r, g, b = validate_rgb(value)
    # round() first so 171/255 maps back to ab rather than aa
    return "".join(f"{math.floor(round(c * 255, 6)):02x}" for c in (r, g, b))


def rgb_to_bytes(value: Sequence[float]) -> tuple[int, int, int]:
    """Scale a validated triple to 0..255 for raster output."""
    r, g, b = validate_rgb(value)
    return (round(r * 255), round(g * 255), round(b * 255))

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Tuple

_HEX_PATTERN = re.compile(r"^#([0-9a-fA-F]{6})$")

RGB = Tuple[int, int, int]


@dataclass(frozen=True)
class HSL:
    h: float
    s: float
    l: float  # noqa: E741


def parse_hex(color: str) -> RGB:
    match = _HEX_PATTERN.match(color.strip()) if isinstance(color, str) else None
    if match is None:
        raise ValueError(f"Color must be in '#RRGGBB' format, got {color!r}.")
    digits = match.group(1)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def format_hex(rgb: RGB) -> str:
    r, g, b = (min(max(int(channel), 0), 255) for channel in rgb)
    return f"#{r:02X}{g:02X}{b:02X}"


def normalize_hex(color: str) -> str:
    return format_hex(parse_hex(color))


def rgb2hsl(color: str) -> HSL:
    r, g, b = (channel / 255 for channel in parse_hex(color))
    c_min = min(r, g, b)
    c_max = max(r, g, b)
    delta = c_max - c_min

    lightness = (c_max + c_min) / 2
    saturation = 0.0 if delta == 0 else delta / (1 - abs(2 * lightness - 1))

    if delta == 0:
        hue = 0.0
    elif c_max == r:
        hue = (g - b) / delta
    elif c_max == g:
        hue = (b - r) / delta + 2
    else:
        hue = (r - g) / delta + 4
    hue = (hue * 60) % 360

    return HSL(h=hue, s=min(saturation, 1.0), l=lightness)


def hsl2rgb(hsl: HSL) -> str:
    hue = hsl.h % 360
    chroma = (1 - abs(2 * hsl.l - 1)) * hsl.s
    x = chroma * (1 - abs((hue / 60) % 2 - 1))
    m = hsl.l - chroma / 2

    if hue < 60:
        r, g, b = chroma, x, 0.0
    elif hue < 120:
        r, g, b = x, chroma, 0.0
    elif hue < 180:
        r, g, b = 0.0, chroma, x
    elif hue < 240:
        r, g, b = 0.0, x, chroma
    elif hue < 300:
        r, g, b = x, 0.0, chroma
    else:
        r, g, b = chroma, 0.0, x

    return format_hex(tuple(int((channel + m) * 255 + 0.5) for channel in (r, g, b)))


def _clamp_unit(value: float) -> float:
    return min(max(value, 0.0), 1.0)


def _scale(value: float, factor: float, inverse: bool) -> float:
    if not inverse:
        return _clamp_unit(value * factor)
    if factor == 0:
        return value
    return _clamp_unit(value / factor)


def shift_color(color: str, modifier: HSL, inverse: bool = False) -> str:
    """Rotate ``color`` by ``modifier`` in HSL space (or undo it when ``inverse``)."""
    hsl = rgb2hsl(color)
    hue = hsl.h - modifier.h if inverse else hsl.h + modifier.h
    return hsl2rgb(
        HSL(
            h=hue % 360,
            s=_scale(hsl.s, modifier.s, inverse),
            l=_scale(hsl.l, modifier.l, inverse),
        )
    )

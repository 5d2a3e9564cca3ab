"""OKLCH <-> sRGB / Display P3 conversion, hex parsing and gamut clamping.

Conversions and gamut tests go through coloraide. `Color` is the
project-local class with the APCA contrast method registered; everything
else in lumat_checker builds its colours from it.
"""

import logging
import math
import re

from coloraide import Color as _Base

from lumat_checker.core.apca import APCAContrast
from lumat_checker.core.types import PerceptualColor

logger = logging.getLogger(__name__)


class Color(_Base):
    """Project-local Color class with APCA contrast."""


Color.register(APCAContrast())

Gamut = str  # 'srgb' or 'p3'

WHITE_HEX = '#ffffff'

_GAMUT_SPACES = {'p3': 'display-p3', 'srgb': 'srgb'}
_ACHROMATIC = 1e-7
_HEX_RE = re.compile(r'^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$')


def hex_to_rgb(hex_str: str) -> tuple[int, int, int]:
    """Convert '#rrggbb', '#rgb' or 'rrggbb' to (r, g, b). Malformed input yields white."""
    m = _HEX_RE.match(hex_str.strip()) if isinstance(hex_str, str) else None
    if not m:
        logger.warning('Malformed hex colour %r, substituting white', hex_str)
        return (255, 255, 255)
    r, g, b = Color(f'#{m.group(1)}').coords()
    return (round(r * 255), round(g * 255), round(b * 255))


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return Color('srgb', [r / 255, g / 255, b / 255]).to_string(hex=True)


def oklch(l: float, c: float, h: float) -> Color:
    return Color('oklch', [l, c, h])


def as_color(color: PerceptualColor) -> Color:
    """The clipped sRGB projection of a PerceptualColor as a coloraide Color."""
    return Color('srgb', list(color.rgb))


def oklch_to_rgb(l: float, c: float, h: float) -> tuple[float, float, float]:
    """Gamma-encoded sRGB in 0..1 nominal range, not clipped."""
    r, g, b = oklch(l, c, h).convert('srgb').coords()
    return (r, g, b)


def rgb_to_oklch(r: float, g: float, b: float) -> tuple[float, float, float]:
    l, c, h = Color('srgb', [r, g, b]).convert('oklch').coords()
    if c < _ACHROMATIC or math.isnan(h):
        h = 0.0
    return (l, max(c, 0.0), h % 360.0)


def in_gamut(l: float, c: float, h: float, gamut: Gamut = 'p3') -> bool:
    return oklch(l, c, h).in_gamut(_GAMUT_SPACES[gamut])


def clamp_chroma(l: float, c: float, h: float, gamut: Gamut = 'p3', iterations: int = 24) -> float:
    """Largest chroma <= c that keeps (l, h) inside the gamut. Lightness is never changed.

    Bisects on in_gamut() rather than calling Color.fit(): fit() finishes with
    a clip that can move lightness, and the generator needs it exact.
    """
    if c <= 0 or in_gamut(l, c, h, gamut):
        return max(c, 0.0)
    low, high = 0.0, c
    for _ in range(iterations):
        mid = (low + high) / 2
        if in_gamut(l, mid, h, gamut):
            low = mid
        else:
            high = mid
    return low


def to_perceptual(l: float, c: float, h: float, **extra) -> PerceptualColor:
    """Build a PerceptualColor with its clipped sRGB/hex projection cached."""
    srgb = Color('srgb', list(oklch_to_rgb(l, c, h))).clip()
    r, g, b = srgb.coords()
    return PerceptualColor(L=l, C=c, H=h, hex=srgb.to_string(hex=True), rgb=(r, g, b), **extra)


def hex_to_oklch(hex_str: str) -> PerceptualColor:
    """Parse a hex colour into OKLCH. Malformed input yields white (L=1, C=0, H=0)."""
    r8, g8, b8 = hex_to_rgb(hex_str)
    if (r8, g8, b8) == (255, 255, 255):
        return PerceptualColor(L=1.0, C=0.0, H=0.0, hex=WHITE_HEX, rgb=(1.0, 1.0, 1.0))
    rgb = (r8 / 255, g8 / 255, b8 / 255)
    l, c, h = rgb_to_oklch(*rgb)
    return PerceptualColor(L=l, C=c, H=h, hex=rgb_to_hex(r8, g8, b8), rgb=rgb)

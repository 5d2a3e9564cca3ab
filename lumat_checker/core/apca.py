"""APCA 0.1.9 (SAPC-4g) lightness contrast as a coloraide contrast method.

coloraide ships WCAG 2.1 contrast only. Registering APCAContrast on a Color
class makes `text.contrast(background, method='apca')` return the signed Lc:
positive for dark text on a light background, negative for light text on a
dark background.
"""

import math
from typing import Any

from coloraide.contrast import ColorContrast

_COEFFICIENTS = (0.2126729, 0.7151522, 0.0721750)
_TRC = 2.4
_BLACK_THRESHOLD = 0.022
_BLACK_CLIP = 1.414
_DELTA_Y_MIN = 0.0005
_NORM_BG = 0.56
_NORM_TXT = 0.57
_REV_TXT = 0.62
_REV_BG = 0.65
_SCALE = 1.14
_LO_CLIP = 0.1
_LO_OFFSET = 0.027


def apca_luminance(r: float, g: float, b: float) -> float:
    """APCA screen luminance (simple 2.4 exponent) of gamma-encoded sRGB in 0..1."""
    return sum(k * max(0.0, min(1.0, v)) ** _TRC for k, v in zip(_COEFFICIENTS, (r, g, b)))


def luminance_to_lc(text_y: float, bg_y: float) -> float:
    """Signed APCA Lc (x100) from text and background luminance."""
    if text_y < _BLACK_THRESHOLD:
        text_y += math.pow(_BLACK_THRESHOLD - text_y, _BLACK_CLIP)
    if bg_y < _BLACK_THRESHOLD:
        bg_y += math.pow(_BLACK_THRESHOLD - bg_y, _BLACK_CLIP)

    if abs(bg_y - text_y) < _DELTA_Y_MIN:
        return 0.0

    if bg_y > text_y:
        sapc = (math.pow(bg_y, _NORM_BG) - math.pow(text_y, _NORM_TXT)) * _SCALE
        lc = 0.0 if sapc < _LO_CLIP else sapc - _LO_OFFSET
    else:
        sapc = (math.pow(bg_y, _REV_BG) - math.pow(text_y, _REV_TXT)) * _SCALE
        lc = 0.0 if sapc > -_LO_CLIP else sapc + _LO_OFFSET
    return lc * 100.0


class APCAContrast(ColorContrast):
    """`color1` is the text colour, `color2` the background."""

    NAME = 'apca'

    def contrast(self, color1: Any, color2: Any, **kwargs: Any) -> float:
        text = color1.convert('srgb').clip().coords()
        background = color2.convert('srgb').clip().coords()
        return luminance_to_lc(apca_luminance(*text), apca_luminance(*background))

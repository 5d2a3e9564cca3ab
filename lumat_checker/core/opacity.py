"""Alpha blending of scale colours over a background.

Blending follows CSS compositing, fg * alpha + bg * (1 - alpha), either on
gamma-encoded sRGB ('srgb', what browsers and design tools do) or on linear
light ('linear'). The lightness of a blend is CIE L* (0-100) of its WCAG
luminance, so it is not a weighted average of the two input lightnesses.

min_opacity_for_wcag() and min_opacity_for_apca() bisect the opacity axis for
the lowest whole percentage that still meets a contrast goal, or None when
even full opacity falls short.
"""

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Literal

import numpy as np

from lumat_checker.core.apca import apca_luminance, luminance_to_lc
from lumat_checker.core.colour import Color, hex_to_rgb
from lumat_checker.core.contrast import luminance_ratio, relative_luminance
from lumat_checker.core.types import PerceptualColor

BlendMode = Literal['srgb', 'linear']

WCAG_OPACITY_TOLERANCE = 0.1
APCA_OPACITY_TOLERANCE = 1.0

# Opacity choices for translucent equivalents, in percent
OPACITY_STEPS: tuple[int, ...] = tuple(range(5, 101, 5))

# Bisection stops once the opacity interval is this many percentage points wide
_OPACITY_RESOLUTION = 0.5
_CIE_EPSILON = 0.008856
_CIE_KAPPA = 903.3


@dataclass(frozen=True)
class BlendResult:
    rgb: tuple[float, float, float]
    hex: str
    luminance: float
    lightness: float  # CIE L*, 0-100


def luminance_to_lightness(y: float) -> float:
    """CIE L* (0-100) of a relative luminance."""
    return 116 * y ** (1 / 3) - 16 if y > _CIE_EPSILON else _CIE_KAPPA * y


def _background_rgb(background_hex: str) -> np.ndarray:
    return np.array(hex_to_rgb(background_hex), dtype=float) / 255


def _convert(rgb: np.ndarray, source: str, target: str) -> np.ndarray:
    return np.array(Color(source, rgb.tolist()).convert(target).coords())


def _mix(fg: np.ndarray, bg: np.ndarray, alpha: float, mode: BlendMode) -> np.ndarray:
    if mode == 'linear':
        mixed = _convert(fg, 'srgb', 'srgb-linear') * alpha + _convert(bg, 'srgb', 'srgb-linear') * (1 - alpha)
        return _convert(mixed, 'srgb-linear', 'srgb')
    return fg * alpha + bg * (1 - alpha)


def blend_on_background(
    foreground: PerceptualColor,
    opacity: float,
    background_hex: str,
    mode: BlendMode = 'srgb',
) -> BlendResult:
    """Composite the colour at `opacity` percent over the background."""
    alpha = min(max(opacity, 0.0), 100.0) / 100
    mixed = np.clip(_mix(np.array(foreground.rgb, dtype=float), _background_rgb(background_hex), alpha, mode), 0, 1)
    r, g, b = mixed.tolist()
    luminance = relative_luminance(r, g, b)
    return BlendResult(
        rgb=(r, g, b),
        hex=Color('srgb', [r, g, b]).to_string(hex=True),
        luminance=luminance,
        lightness=luminance_to_lightness(luminance),
    )


def find_closest_opacity(
    target_lightness: float,
    foreground: PerceptualColor,
    opacities: Sequence[float],
    background_hex: str,
    mode: BlendMode = 'srgb',
) -> tuple[float, BlendResult]:
    """The opacity whose blend lands nearest target_lightness (L*). Ties keep the earlier opacity.

    With no opacities to choose from, full opacity is returned.
    """
    candidates = [(opacity, blend_on_background(foreground, opacity, background_hex, mode)) for opacity in opacities]
    if not candidates:
        return 100.0, blend_on_background(foreground, 100.0, background_hex, mode)
    return min(candidates, key=lambda pair: abs(pair[1].lightness - target_lightness))


def _min_opacity(measure: Callable[[float], float], target: float, tolerance: float) -> int | None:
    goal = target - tolerance
    if measure(100.0) < goal:
        return None
    low, high, best = 0.0, 100.0, 100.0
    while high - low > _OPACITY_RESOLUTION:
        mid = (low + high) / 2
        if measure(mid) >= goal:
            best = high = mid
        else:
            low = mid
    return math.ceil(best)


def min_opacity_for_wcag(
    foreground: PerceptualColor,
    background_hex: str,
    target_ratio: float,
    tolerance: float = WCAG_OPACITY_TOLERANCE,
    mode: BlendMode = 'srgb',
) -> int | None:
    """Lowest opacity (whole percent) whose blend reaches target_ratio within tolerance."""
    background_y = relative_luminance(*_background_rgb(background_hex).tolist())

    def ratio(opacity: float) -> float:
        return luminance_ratio(blend_on_background(foreground, opacity, background_hex, mode).luminance, background_y)

    return _min_opacity(ratio, target_ratio, tolerance)


def min_opacity_for_apca(
    foreground: PerceptualColor,
    background_hex: str,
    target_lc: float,
    tolerance: float = APCA_OPACITY_TOLERANCE,
    mode: BlendMode = 'srgb',
) -> int | None:
    """Lowest opacity (whole percent) whose blend reaches |Lc| target_lc within tolerance."""
    background_y = apca_luminance(*_background_rgb(background_hex).tolist())

    def lc(opacity: float) -> float:
        blend = blend_on_background(foreground, opacity, background_hex, mode)
        return abs(luminance_to_lc(apca_luminance(*blend.rgb), background_y))

    return _min_opacity(lc, target_lc, tolerance)

"""Deterministic OKLCH scale generation.

Given a lightness, base chroma and hue plus optional hue/chroma curves, produce
one gamut-mapped PerceptualColor. Chroma is reduced to fit the Display P3
gamut at a fixed lightness. The target contrast modes pick that lightness by
bisection against a background instead of using the step's own. The
optimizer queries this as a black box inside its search loop, so it must stay
a pure function of its inputs.
"""

import math
from collections.abc import Callable
from dataclasses import replace

from lumat_checker.core.backgrounds import DEFAULT_BACKGROUND, resolve_background_hex
from lumat_checker.core.colour import clamp_chroma, hex_to_oklch, to_perceptual
from lumat_checker.core.config import DEFAULT_SETTINGS, Settings
from lumat_checker.core.contrast import apca_lc, relative_luminance, validate_contrast, wcag_ratio
from lumat_checker.core.types import ColorScale, ContrastMode, CurveParams, PerceptualColor

# Max P3 chroma per hue (30 degree samples) and lightness (0..100)
HUE_CHROMA_MAP: dict[int, dict[int, float]] = {
    0: {10: 0.05, 20: 0.12, 30: 0.18, 40: 0.22, 50: 0.24, 60: 0.23, 70: 0.20, 80: 0.15, 90: 0.08, 98: 0.03},
    30: {10: 0.05, 20: 0.12, 30: 0.17, 40: 0.20, 50: 0.22, 60: 0.21, 70: 0.18, 80: 0.13, 90: 0.07, 98: 0.03},
    60: {10: 0.04, 20: 0.10, 30: 0.14, 40: 0.16, 50: 0.18, 60: 0.19, 70: 0.20, 80: 0.18, 90: 0.10, 98: 0.04},
    90: {10: 0.05, 20: 0.12, 30: 0.18, 40: 0.22, 50: 0.25, 60: 0.26, 70: 0.24, 80: 0.18, 90: 0.10, 98: 0.04},
    120: {10: 0.06, 20: 0.14, 30: 0.20, 40: 0.24, 50: 0.27, 60: 0.28, 70: 0.26, 80: 0.20, 90: 0.11, 98: 0.05},
    150: {10: 0.06, 20: 0.14, 30: 0.21, 40: 0.26, 50: 0.29, 60: 0.30, 70: 0.28, 80: 0.22, 90: 0.12, 98: 0.05},
    180: {10: 0.06, 20: 0.15, 30: 0.22, 40: 0.27, 50: 0.30, 60: 0.32, 70: 0.30, 80: 0.24, 90: 0.13, 98: 0.06},
    210: {10: 0.07, 20: 0.16, 30: 0.24, 40: 0.30, 50: 0.34, 60: 0.35, 70: 0.32, 80: 0.26, 90: 0.14, 98: 0.06},
    240: {10: 0.07, 20: 0.17, 30: 0.26, 40: 0.32, 50: 0.36, 60: 0.37, 70: 0.34, 80: 0.28, 90: 0.15, 98: 0.07},
    270: {10: 0.06, 20: 0.15, 30: 0.23, 40: 0.28, 50: 0.31, 60: 0.32, 70: 0.29, 80: 0.23, 90: 0.13, 98: 0.06},
    300: {10: 0.06, 20: 0.14, 30: 0.21, 40: 0.26, 50: 0.28, 60: 0.28, 70: 0.25, 80: 0.20, 90: 0.11, 98: 0.05},
    330: {10: 0.05, 20: 0.13, 30: 0.19, 40: 0.23, 50: 0.26, 60: 0.25, 70: 0.22, 80: 0.17, 90: 0.09, 98: 0.04},
}

_MISSING_CHROMA = 0.2
_GREY_CHROMA = 0.02

DEFAULT_TARGET_LC = 75.0
DEFAULT_TARGET_RATIO = 4.5
DEFAULT_APCA_TOLERANCE = 1.5

TARGET_SEARCH_LOW = 0.01
TARGET_SEARCH_HIGH = 0.99
TARGET_SEARCH_WIDTH = 0.001
TARGET_SEARCH_ITERATIONS = 30


def apply_curve(base: float, lightness: float, shift: float, power: float) -> float:
    """Shift a value by up to `shift` at the dark end, shaped by `power`."""
    return base + shift * math.pow(1 - lightness, power)


def apply_chroma_curve_with_easing(base_chroma: float, lightness: float, shift: float, power: float) -> float:
    t = 1 - lightness
    eased = 4 * t * t * t if t < 0.5 else 1 - math.pow(-2 * t + 2, 3) / 2
    return base_chroma + shift * math.pow(eased, power)


def max_chroma_for_hue(hue: float, lightness100: float) -> float:
    """Bilinear interpolation over HUE_CHROMA_MAP."""
    hue = hue % 360
    lightness100 = max(0.0, min(100.0, lightness100))

    hue_lower = int(hue // 30) * 30
    hue_upper = (hue_lower + 30) % 360
    hue_t = (hue - hue_lower) / 30

    l_lower = int(lightness100 // 10) * 10
    l_upper = min(100, l_lower + 10)
    l_t = (lightness100 - l_lower) / 10

    lower_row = HUE_CHROMA_MAP.get(hue_lower, {})
    upper_row = HUE_CHROMA_MAP.get(hue_upper, {})
    c_ll = lower_row.get(l_lower, _MISSING_CHROMA)
    c_lu = lower_row.get(l_upper, _MISSING_CHROMA)
    c_ul = upper_row.get(l_lower, _MISSING_CHROMA)
    c_uu = upper_row.get(l_upper, _MISSING_CHROMA)

    at_lower = c_ll * (1 - l_t) + c_lu * l_t
    at_upper = c_ul * (1 - l_t) + c_uu * l_t
    return at_lower * (1 - hue_t) + at_upper * hue_t


def chroma_multiplier(hue: float, lightness: float = 0.6) -> float:
    """Achievable chroma at this hue relative to blue, clamped to [0.5, 1.0]."""
    lightness100 = lightness * 100
    ratio = max_chroma_for_hue(hue, lightness100) / max_chroma_for_hue(240, lightness100)
    return max(0.5, min(1.0, ratio))


def _fixed_lightness(lightness: float, chroma: float, hue: float, **extra) -> PerceptualColor:
    return to_perceptual(lightness, clamp_chroma(lightness, chroma, hue, 'p3'), hue, **extra)


def _search_lightness(measure: Callable[[float], float], target: float, rising: bool, tolerance: float) -> float:
    """Bisect lightness until measure(L) lands within tolerance of target.

    `rising` says whether the measure grows with lightness. When the bracket
    closes first its midpoint is returned.
    """
    low, high = TARGET_SEARCH_LOW, TARGET_SEARCH_HIGH
    for _ in range(TARGET_SEARCH_ITERATIONS):
        if high - low <= TARGET_SEARCH_WIDTH:
            break
        mid = (low + high) / 2
        value = measure(mid)
        if abs(value - target) < tolerance:
            return mid
        if (value < target) == rising:
            low = mid
        else:
            high = mid
    return (low + high) / 2


def background_color(name: str | None) -> PerceptualColor:
    """The colour behind a targetBackground name, hex or preset (unset means canvas-bg)."""
    return hex_to_oklch(resolve_background_hex(name or DEFAULT_BACKGROUND))


def find_lightness_for_apca(
    target_lc: float,
    hue: float,
    chroma: float,
    background: PerceptualColor,
    tolerance: float = DEFAULT_APCA_TOLERANCE,
) -> float:
    """Lightness whose |Lc| against the background is target_lc, chroma clamped at that lightness."""
    return _search_lightness(
        lambda l: abs(apca_lc(_fixed_lightness(l, chroma, hue), background)),
        target_lc,
        rising=background.L <= 0.5,
        tolerance=tolerance,
    )


def find_lightness_for_wcag(
    target_ratio: float,
    hue: float,
    chroma: float,
    background: PerceptualColor,
    tolerance: float = 0.1,
) -> float:
    """Lightness whose WCAG ratio against the background is target_ratio."""
    return _search_lightness(
        lambda l: wcag_ratio(_fixed_lightness(l, chroma, hue), background),
        target_ratio,
        rising=background.L <= 0.5,
        tolerance=tolerance,
    )


def find_lightness_for_luminance(target_y: float, hue: float, chroma: float, tolerance: float = 0.001) -> float:
    """Lightness at which the colour has relative luminance target_y (same grey in greyscale)."""
    return _search_lightness(
        lambda l: relative_luminance(*_fixed_lightness(l, chroma, hue).rgb),
        target_y,
        rising=True,
        tolerance=tolerance,
    )


def generate_color(
    lightness: float,
    chroma: float,
    hue: float,
    hue_curve: CurveParams | None = None,
    chroma_curve: CurveParams | None = None,
    contrast_mode: ContrastMode = 'standard',
    chroma_compensation: bool | None = True,
    calculate_contrast: bool = False,
    target_background: str | None = None,
    target_lc: float | None = None,
    target_wcag_ratio: float | None = None,
    apca_tolerance: float | None = None,
    settings: Settings = DEFAULT_SETTINGS,
) -> PerceptualColor:
    """One gamut-mapped colour.

    standard and apca-fixed keep the requested lightness. The target modes
    replace it: apca-target and wcag-target search for the lightness that
    meets target_lc / target_wcag_ratio against target_background, and
    luminance-matched for the one whose luminance equals that of the grey at
    the requested lightness. Chroma is then reduced to fit Display P3.
    """
    effective_h = hue
    effective_c = chroma

    if hue_curve is not None:
        effective_h = apply_curve(hue, lightness, hue_curve.shift, hue_curve.power) % 360
    if chroma_curve is not None:
        eased = apply_chroma_curve_with_easing(chroma, lightness, chroma_curve.shift, chroma_curve.power)
        effective_c = max(0.0, eased)
    if chroma_compensation is None or chroma_compensation:
        effective_c *= chroma_multiplier(effective_h, lightness)

    # hue shifts are imperceptible on near-greys; keep the base hue
    if effective_c < _GREY_CHROMA:
        effective_h = hue

    if contrast_mode == 'apca-target':
        lightness = find_lightness_for_apca(
            DEFAULT_TARGET_LC if target_lc is None else target_lc,
            effective_h,
            effective_c,
            background_color(target_background),
            DEFAULT_APCA_TOLERANCE if apca_tolerance is None else apca_tolerance,
        )
    elif contrast_mode == 'wcag-target':
        lightness = find_lightness_for_wcag(
            DEFAULT_TARGET_RATIO if target_wcag_ratio is None else target_wcag_ratio,
            effective_h,
            effective_c,
            background_color(target_background),
        )
    elif contrast_mode == 'luminance-matched':
        grey = to_perceptual(lightness, 0.0, effective_h)
        lightness = find_lightness_for_luminance(relative_luminance(*grey.rgb), effective_h, effective_c)

    color = _fixed_lightness(lightness, effective_c, effective_h, target_background=target_background)
    if calculate_contrast:
        color = replace(color, contrast=validate_contrast(color, settings))
    return color


def scale_steps(scale: ColorScale, default: tuple[int, ...] = DEFAULT_SETTINGS.step_labels) -> tuple[int, ...]:
    """The scale's own lightness steps if it overrides them, else the default labels."""
    return scale.custom_lightness_steps or default


def generate_scale(
    scale: ColorScale,
    lightness_steps: tuple[int, ...] | list[int],
    calculate_contrast: bool = True,
    settings: Settings = DEFAULT_SETTINGS,
) -> tuple[PerceptualColor, ...]:
    """Generate one colour per lightness step (labels are lightness percentages)."""
    return tuple(
        generate_color(
            step / 100,
            scale.manual_chroma,
            scale.hue,
            scale.hue_curve,
            scale.chroma_curve,
            contrast_mode=scale.contrast_mode,
            chroma_compensation=scale.chroma_compensation,
            calculate_contrast=calculate_contrast,
            target_background=scale.target_background,
            target_lc=scale.apca_target_lc,
            target_wcag_ratio=scale.wcag_target_ratio,
            apca_tolerance=scale.apca_tolerance,
            settings=settings,
        )
        for step in lightness_steps
    )

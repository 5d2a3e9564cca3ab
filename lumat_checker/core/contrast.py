"""WCAG 2.x contrast ratio and APCA (0.1.9 / SAPC-4g) lightness contrast.

WCAG is symmetric: ratio(a, b) == ratio(b, a), always >= 1.
APCA is asymmetric: apca_lc(text, bg) is positive for dark text on a light
background and negative for light text on a dark background. Usable
contrast strength is abs(Lc).

Both metrics are coloraide contrast methods ('wcag21' and the registered
'apca') evaluated on the colour's clipped sRGB projection.
"""

from lumat_checker.core.colour import Color, as_color, to_perceptual
from lumat_checker.core.config import DEFAULT_SETTINGS, Settings
from lumat_checker.core.types import BackgroundContrast, ContrastPayload, PerceptualColor, WcagLevel

# Reference backgrounds for the precomputed payload
REFERENCE_BLACK = to_perceptual(0.14, 0.0, 0.0)
REFERENCE_WHITE = to_perceptual(1.0, 0.0, 0.0)
REFERENCE_GRAY = to_perceptual(0.9, 0.0, 0.0)


def relative_luminance(r: float, g: float, b: float) -> float:
    """WCAG relative luminance of gamma-encoded sRGB in 0..1."""
    return Color('srgb', [r, g, b]).clip().luminance()


def luminance_ratio(lum_a: float, lum_b: float) -> float:
    lighter, darker = max(lum_a, lum_b), min(lum_a, lum_b)
    return (lighter + 0.05) / (darker + 0.05)


def wcag_ratio(color_a: PerceptualColor, color_b: PerceptualColor) -> float:
    return as_color(color_a).contrast(as_color(color_b), method='wcag21')


def apca_lc(foreground: PerceptualColor, background: PerceptualColor) -> float:
    return as_color(foreground).contrast(as_color(background), method='apca')


def classify_wcag(ratio: float, settings: Settings = DEFAULT_SETTINGS) -> WcagLevel:
    if ratio >= settings.wcag.aaa_normal:
        return WcagLevel.AAA
    if ratio >= settings.wcag.aa_normal:
        return WcagLevel.AA
    if ratio >= settings.wcag.aa_large:
        return WcagLevel.A
    return WcagLevel.FAIL


def validate_contrast(color: PerceptualColor, settings: Settings = DEFAULT_SETTINGS) -> ContrastPayload:
    """Contrast of a colour against the reference white, grey and black backgrounds."""
    wcag = BackgroundContrast(
        on_white=wcag_ratio(color, REFERENCE_WHITE),
        on_gray=wcag_ratio(color, REFERENCE_GRAY),
        on_black=wcag_ratio(color, REFERENCE_BLACK),
    )
    apca = BackgroundContrast(
        on_white=abs(apca_lc(color, REFERENCE_WHITE)),
        on_gray=abs(apca_lc(color, REFERENCE_GRAY)),
        on_black=abs(apca_lc(color, REFERENCE_BLACK)),
    )
    best = max(wcag.on_white, wcag.on_gray, wcag.on_black)
    return ContrastPayload(
        apca=apca,
        wcag=wcag,
        meets_aa=best >= settings.wcag.aa_normal,
        meets_aaa=best >= settings.wcag.aaa_normal,
    )

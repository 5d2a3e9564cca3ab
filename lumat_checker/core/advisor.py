"""Usage guidance and swatch validation for a generated scale.

Reads the precomputed contrast payload carried on each colour (contrast
against white, grey and black) and never recomputes it. The reference
background is the step's own override if it has one, else the scale's.
"""

from collections.abc import Sequence

from lumat_checker.core.backgrounds import map_background_to_contrast_key
from lumat_checker.core.config import DEFAULT_SETTINGS, Settings
from lumat_checker.core.types import (
    ColorScale,
    ContrastKey,
    ContrastThreshold,
    PerceptualColor,
    ScaleContrastSummary,
    SwatchContrast,
    UsageGuideline,
)

BEST_PAIRING_DISTANCE = 60
BEST_PAIRING_LIMIT = 5


def _reference_contrast(color: PerceptualColor, key: ContrastKey) -> tuple[float | None, float | None]:
    if color.contrast is None:
        return None, None
    return color.contrast.apca.for_key(key), color.contrast.wcag.for_key(key)


def _tier_advice(
    step: int,
    target_bg: str,
    key: ContrastKey,
    apca: float | None,
    wcag: float | None,
    settings: Settings,
) -> tuple[list[str], list[str]]:
    recs: list[str] = []
    warnings: list[str] = []
    t = settings.wcag

    if step >= 90:
        recs.append('Excellent for backgrounds and subtle UI elements')
        recs.append('Use for card backgrounds, hover states')
        if key in ('white', 'gray'):
            warnings.append(f'Low contrast with {target_bg} backgrounds')
    elif step >= 70:
        recs.append('Good for disabled states and borders')
        recs.append('Suitable for secondary UI elements')
        if wcag is not None and wcag >= t.aa_large:
            level = 'AAA' if wcag >= t.aaa_large else 'AA'
            recs.append(f'Meets WCAG {level} for large text on {target_bg}')
    elif step >= 40:
        recs.append('Ideal for interactive elements and icons')
        recs.append('Works well for primary buttons and links')
        if wcag is not None and wcag >= t.aa_normal:
            recs.append(f'AA compliant for text on {target_bg} ({wcag:.1f}:1)')
        if apca is not None and abs(apca) >= 60:
            recs.append(f'APCA Lc {abs(apca):.0f} - suitable for body text')
    elif step >= 20:
        recs.append('Strong contrast for primary text')
        recs.append('Excellent for headings and emphasis')
        if wcag is not None and wcag >= t.aaa_normal:
            recs.append(f'AAA compliant for body text on {target_bg} ({wcag:.1f}:1)')
        if apca is not None and abs(apca) >= 75:
            recs.append(f'APCA Lc {abs(apca):.0f} - excellent readability')
    else:
        recs.append('Maximum contrast for critical elements')
        recs.append('Use sparingly for high emphasis')
        warnings.append('May be too harsh for large text blocks')
        if wcag is not None and wcag >= t.aaa_normal:
            recs.append(f'Exceeds AAA standards ({wcag:.1f}:1)')
    return recs, warnings


def generate_usage_guidelines(
    colors: Sequence[PerceptualColor],
    labels: Sequence[int],
    scale: ColorScale,
    settings: Settings = DEFAULT_SETTINGS,
) -> list[UsageGuideline]:
    """One guideline per step: usage tier, compliance notes and best pairings."""
    if len(colors) != len(labels):
        raise ValueError(f'{len(labels)} step labels for {len(colors)} colours')

    guidelines = []
    for index, color in enumerate(colors):
        step = labels[index]
        target_bg = color.target_background or scale.target_background or 'black'
        key = map_background_to_contrast_key(target_bg)
        apca, wcag = _reference_contrast(color, key)
        recs, warnings = _tier_advice(step, target_bg, key, apca, wcag, settings)

        pairings = [
            other for other_index, other in enumerate(labels)
            if other_index != index and abs(step - other) >= BEST_PAIRING_DISTANCE
        ]
        pairings.sort(reverse=True)

        guidelines.append(
            UsageGuideline(
                step=step,
                color=color.hex,
                recommendations=recs,
                warnings=warnings,
                best_pairings=pairings[:BEST_PAIRING_LIMIT],
            )
        )
    return guidelines


def evaluate_swatch(color: PerceptualColor, target_bg: str, threshold: ContrastThreshold) -> SwatchContrast:
    """Check one colour's reference-background contrast against a threshold."""
    min_lc = threshold.min_apca or 0.0
    min_wcag = threshold.min_wcag or 0.0
    step = round(color.L * 100)

    if color.contrast is None:
        return SwatchContrast(
            step=step,
            passes=False,
            apca_value=0.0,
            wcag_value=1.0,
            delta=-min_lc if threshold.use_apca else -min_wcag,
        )

    key = map_background_to_contrast_key(target_bg)
    apca = color.contrast.apca.for_key(key)
    wcag = color.contrast.wcag.for_key(key)
    delta = apca - min_lc if threshold.use_apca else wcag - min_wcag
    return SwatchContrast(step=step, passes=delta >= 0, apca_value=apca, wcag_value=wcag, delta=delta)


def analyze_scale_contrast(
    scale: ColorScale,
    colors: Sequence[PerceptualColor],
    threshold: ContrastThreshold,
) -> ScaleContrastSummary:
    """Split a scale's swatches into passing/failing and pick the passing step nearest 50."""
    target_bg = scale.target_background or 'white'
    results = [evaluate_swatch(color, target_bg, threshold) for color in colors]
    passing = [r for r in results if r.passes]

    recommended_step = None
    if passing:
        best = passing[0]
        for candidate in passing[1:]:
            if abs(candidate.step - 50) < abs(best.step - 50):
                best = candidate
        recommended_step = best.step
        best.recommended = True

    return ScaleContrastSummary(
        scale_id=scale.id,
        scale_name=scale.name,
        target_background=target_bg,
        contrast_mode=scale.contrast_mode,
        passing_swatches=passing,
        failing_swatches=[r for r in results if not r.passes],
        recommended_step=recommended_step,
        compliance_rate=len(passing) / len(colors) if colors else 0.0,
    )


def contrast_stats(summaries: Sequence[ScaleContrastSummary]) -> dict:
    """Aggregate compliance counts across several scale summaries."""
    total_passing = sum(len(s.passing_swatches) for s in summaries)
    total_failing = sum(len(s.failing_swatches) for s in summaries)
    total = total_passing + total_failing
    return {
        'total_swatches': total,
        'total_passing': total_passing,
        'total_failing': total_failing,
        'average_compliance': total_passing / total if total else 0.0,
        'scales_fully_compliant': sum(1 for s in summaries if s.compliance_rate == 1),
        'scales_partially_compliant': sum(1 for s in summaries if 0 < s.compliance_rate < 1),
        'scales_non_compliant': sum(1 for s in summaries if s.compliance_rate == 0),
    }

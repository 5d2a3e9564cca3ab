"""APCA auto-fix: nudge a scale until its steps hit a target Lc against a background.

Strategies, applied in order (each may be a no-op):

  1. switch the scale to the 'apca-fixed' contrast mode
  2. trim chroma above 0.2 by min(0.05, chroma * 0.15)
  3. binary-search a new lightness for every step against the highest-priority
     target, keeping only successful moves of at least 2 lightness points
  4. enable hue-specific chroma compensation

Only the highest-priority target drives the lightness search. Lower-priority
targets count towards the success metrics but are never searched themselves.

Lc is not strictly monotonic in lightness for every hue/chroma, so the search
is bounded (max_iterations, interval width 0.005) and returns the best
candidate it saw together with an explicit success flag.

auto_fix_scale() is the lighter pass behind the wcag-aa, wcag-aaa, apca-body
and apca-heading presets. It picks a contrast mode from the chroma, cuts
chroma by 20% when fewer than half of the step pairs meet the goal on white,
and reports the pair counts before and after.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from itertools import combinations
from typing import Literal

from lumat_checker.core.backgrounds import DEFAULT_BACKGROUND, resolve_background_hex
from lumat_checker.core.colour import WHITE_HEX, hex_to_oklch
from lumat_checker.core.config import DEFAULT_SETTINGS, LIGHTNESS_STEPS, Settings
from lumat_checker.core.contrast import apca_lc
from lumat_checker.core.generator import generate_color, generate_scale
from lumat_checker.core.types import (
    PRIORITY_ORDER,
    APCATarget,
    AutoFixMetrics,
    AutoFixResult,
    ColorScale,
    LightnessAdjustment,
    PerceptualColor,
)

logger = logging.getLogger(__name__)

SEARCH_LOW = 0.05
SEARCH_HIGH = 0.98
SEARCH_MIN_WIDTH = 0.005
SEARCH_MAX_ITERATIONS = 30

HIGH_CHROMA = 0.2
MAX_CHROMA_REDUCTION = 0.05
CHROMA_REDUCTION_FACTOR = 0.15
MIN_STEP_CHANGE = 2
# Ends of the editor ramp
PRESERVED_ENDPOINTS = (LIGHTNESS_STEPS[0], LIGHTNESS_STEPS[-1])
SUCCESS_FRACTION = 0.7

GREY_CHROMA = 0.02
CHROMA_FLOOR = 0.05
CHROMA_CUT = 0.2
PAIR_COMPLIANCE_FLOOR = 0.5


@dataclass(frozen=True)
class AutoFixOptions:
    targets: tuple[APCATarget, ...]
    adjust_lightness: bool = True
    adjust_chroma: bool = True
    max_iterations: int = SEARCH_MAX_ITERATIONS
    tolerance: float = 1.0
    preserve_endpoints: bool = True


@dataclass(frozen=True)
class SearchResult:
    lightness: float
    achieved_lc: float
    success: bool
    iterations: int


@dataclass(frozen=True)
class ScaleFixOptions:
    """Pair goal for auto_fix_scale(). `metric` picks which minimum drives the chroma cut."""

    metric: Literal['wcag', 'apca'] = 'wcag'
    min_wcag: float = 4.5
    min_apca: float = 75.0
    adjust_chroma: bool = True
    adjust_mode: bool = True


@dataclass(frozen=True)
class ScaleFixResult:
    scale: ColorScale
    improvements: tuple[str, ...]
    total_pairs: int
    pairs_before: int
    pairs_after: int
    chroma_adjustment: float
    mode_changed: bool

    @property
    def compliance(self) -> float:
        return self.pairs_after / self.total_pairs if self.total_pairs else 1.0

    @property
    def success(self) -> bool:
        return self.compliance >= PAIR_COMPLIANCE_FLOOR


def find_lightness_for_target(
    target_lc: float,
    hue: float,
    chroma: float,
    background_hex: str,
    initial_l: float,
    tolerance: float = 1.0,
    max_iterations: int = SEARCH_MAX_ITERATIONS,
) -> SearchResult:
    """Binary-search the lightness whose |Lc| against the background is closest to target_lc.

    On a light background (L > 0.5) more contrast means darker, otherwise lighter.
    The returned lightness always lies in [0.05, 0.98].
    """
    background = hex_to_oklch(background_hex)
    light_background = background.L > 0.5

    low, high = SEARCH_LOW, SEARCH_HIGH
    best_l = min(SEARCH_HIGH, max(SEARCH_LOW, initial_l))
    best_lc = 0.0
    iterations = 0

    while iterations < max_iterations and (high - low) > SEARCH_MIN_WIDTH:
        mid = (low + high) / 2
        candidate = generate_color(mid, chroma, hue, contrast_mode='apca-fixed')
        lc = abs(apca_lc(candidate, background))

        if abs(lc - target_lc) < abs(best_lc - target_lc):
            best_l, best_lc = mid, lc

        need_more_contrast = lc < target_lc
        if need_more_contrast == light_background:
            high = mid
        else:
            low = mid
        iterations += 1

    success = abs(best_lc - target_lc) <= tolerance
    logger.debug(
        'lightness search hue=%.1f chroma=%.3f target=%.1f -> L=%.4f Lc=%.2f in %d iterations (%s)',
        hue, chroma, target_lc, best_l, best_lc, iterations, 'ok' if success else 'no convergence',
    )
    return SearchResult(lightness=best_l, achieved_lc=best_lc, success=success, iterations=iterations)


def sort_targets(targets: Sequence[APCATarget]) -> list[APCATarget]:
    """Highest priority first; equal priorities keep their given order."""
    return sorted(targets, key=lambda t: PRIORITY_ORDER[t.priority], reverse=True)


def auto_fix_apca(scale: ColorScale, lightness_steps: Sequence[int], options: AutoFixOptions) -> AutoFixResult:
    """Return a new scale and lightness sequence adjusted towards the APCA targets.

    The input scale is never modified.
    """
    improvements: list[str] = []
    adjustments: list[LightnessAdjustment] = []
    adjusted_steps = list(lightness_steps)
    overrides: dict = {}
    chroma = scale.manual_chroma
    chroma_adjustment = 0.0
    total_lc = 0.0

    targets = sort_targets(options.targets)

    if scale.contrast_mode != 'apca-fixed':
        overrides['contrast_mode'] = 'apca-fixed'
        improvements.append('Switched to APCA-fixed mode for consistent contrast')

    if options.adjust_chroma and scale.manual_chroma > HIGH_CHROMA:
        reduction = min(MAX_CHROMA_REDUCTION, scale.manual_chroma * CHROMA_REDUCTION_FACTOR)
        chroma = scale.manual_chroma - reduction
        chroma_adjustment = -reduction
        overrides['manual_chroma'] = chroma
        improvements.append(f'Reduced chroma by {reduction * 100:.1f}% to improve APCA compliance')

    if options.adjust_lightness and targets:
        primary = targets[0]
        for index, step in enumerate(lightness_steps):
            if options.preserve_endpoints and step in PRESERVED_ENDPOINTS:
                continue

            result = find_lightness_for_target(
                primary.min_lc,
                scale.hue,
                chroma,
                primary.background,
                step / 100,
                options.tolerance,
                options.max_iterations,
            )
            new_step = round(result.lightness * 100)
            if abs(new_step - step) >= MIN_STEP_CHANGE and result.success:
                adjustments.append(
                    LightnessAdjustment(step=index, before=step, after=new_step, achieved_lc=result.achieved_lc)
                )
                adjusted_steps[index] = new_step
                total_lc += result.achieved_lc

        if adjustments:
            improvements.append(f'Adjusted {len(adjustments)} lightness values to meet APCA Lc {primary.min_lc:g}')

    if not scale.chroma_compensation:
        overrides['chroma_compensation'] = True
        improvements.append('Enabled hue-specific chroma compensation')

    # Per-step successes are counted against the number of targets
    achieved = len(adjustments)
    failed = len(targets) - achieved
    average_lc = total_lc / achieved if achieved else 0.0
    success = failed == 0 or (bool(targets) and achieved / len(targets) >= SUCCESS_FRACTION)

    for line in improvements:
        logger.info('%s: %s', scale.name, line)

    return AutoFixResult(
        scale=scale.with_overrides(**overrides),
        adjusted_lightness_steps=tuple(adjusted_steps),
        improvements=tuple(improvements),
        metrics=AutoFixMetrics(
            targets_achieved=achieved,
            targets_failed=failed,
            average_lc_improvement=average_lc,
            lightness_adjustments=tuple(adjustments),
            chroma_adjustment=chroma_adjustment,
        ),
        success=success,
    )


def _preset(*targets: APCATarget, max_iterations: int = 20) -> AutoFixOptions:
    return AutoFixOptions(targets=targets, max_iterations=max_iterations)


APCA_AUTO_FIX_PRESETS: dict[str, AutoFixOptions] = {
    'body-text-white': _preset(APCATarget(75, '#FFFFFF', 'must', 'Body Text')),
    'body-text-black': _preset(APCATarget(75, '#000000', 'must', 'Body Text')),
    'large-text-white': _preset(APCATarget(60, '#FFFFFF', 'must', 'Large Text')),
    'ui-white': _preset(APCATarget(60, '#FFFFFF', 'must', 'UI Elements')),
    'universal': _preset(
        APCATarget(60, '#FFFFFF', 'must', 'Light BG'),
        APCATarget(60, '#000000', 'should', 'Dark BG'),
        max_iterations=30,
    ),
    'strict-body': _preset(APCATarget(90, '#FFFFFF', 'must', 'Strict Body Text'), max_iterations=30),
}


def apply_preset(name: str, scale: ColorScale, lightness_steps: Sequence[int]) -> AutoFixResult | None:
    """Run a named preset. Unknown names are logged and yield None."""
    options = APCA_AUTO_FIX_PRESETS.get(name)
    if options is None:
        _unknown_preset(name)
        return None
    return auto_fix_apca(scale, lightness_steps, options)


def recommend_apca_preset(scale: ColorScale, target_background: str | None = None) -> str:
    """Pick the preset best suited to the scale's chroma and the background's polarity.

    The background may be a hex or a preset name. Without one the scale's own
    targetBackground is used, then white.
    """
    background = resolve_background_hex(target_background or scale.target_background) or WHITE_HEX
    light_background = hex_to_oklch(background).L > 0.5
    if not light_background:
        return 'body-text-black'
    if scale.manual_chroma > 0.15:
        return 'ui-white'
    if scale.manual_chroma < 0.05:
        return 'strict-body'
    return 'body-text-white'



def count_passing_pairs(colors: Sequence[PerceptualColor], options: ScaleFixOptions) -> int:
    """Step pairs whose stronger member meets the goal on white."""
    passing = 0
    for a, b in combinations(colors, 2):
        if a.contrast is None or b.contrast is None:
            continue
        if options.metric == 'wcag':
            best = max(a.contrast.wcag.on_white, b.contrast.wcag.on_white)
            goal = options.min_wcag
        else:
            best = max(a.contrast.apca.on_white, b.contrast.apca.on_white)
            goal = options.min_apca
        if best >= goal:
            passing += 1
    return passing


def auto_fix_scale(
    scale: ColorScale,
    lightness_steps: Sequence[int],
    options: ScaleFixOptions = ScaleFixOptions(),
    settings: Settings = DEFAULT_SETTINGS,
) -> ScaleFixResult:
    """Mode, chroma and compensation tune-up. Lightness steps are left alone.

    The input scale is never modified.
    """
    improvements: list[str] = []
    overrides: dict = {}
    mode_changed = False

    if options.adjust_mode and scale.contrast_mode == 'standard':
        if scale.manual_chroma < GREY_CHROMA:
            overrides['contrast_mode'] = 'luminance-matched'
            improvements.append('Switched to luminance-matched mode for grayscale consistency')
        else:
            overrides['contrast_mode'] = 'apca-fixed'
            improvements.append('Switched to APCA-fixed mode for consistent contrast')
        mode_changed = True

    total = len(lightness_steps) * (len(lightness_steps) - 1) // 2
    before = count_passing_pairs(generate_scale(scale, lightness_steps, settings=settings), options)
    staged = scale.with_overrides(**overrides)
    staged_pairs = count_passing_pairs(generate_scale(staged, lightness_steps, settings=settings), options)

    chroma_adjustment = 0.0
    low_compliance = total > 0 and staged_pairs / total < PAIR_COMPLIANCE_FLOOR
    if options.adjust_chroma and scale.manual_chroma > CHROMA_FLOOR and low_compliance:
        reduction = scale.manual_chroma * CHROMA_CUT
        chroma = max(CHROMA_FLOOR, scale.manual_chroma - reduction)
        chroma_adjustment = chroma - scale.manual_chroma
        overrides['manual_chroma'] = chroma
        improvements.append(f'Reduced chroma by {reduction * 100:.1f}% to improve contrast')

    if scale.chroma_compensation is False:
        overrides['chroma_compensation'] = True
        improvements.append('Enabled chroma compensation for perceptual uniformity')

    if not scale.target_background or scale.target_background == DEFAULT_BACKGROUND:
        improvements.append('Consider setting specific target background for accurate contrast calculations')

    fixed = scale.with_overrides(**overrides)
    after = count_passing_pairs(generate_scale(fixed, lightness_steps, settings=settings), options)

    for line in improvements:
        logger.info('%s: %s', scale.name, line)

    return ScaleFixResult(
        scale=fixed,
        improvements=tuple(improvements),
        total_pairs=total,
        pairs_before=before,
        pairs_after=after,
        chroma_adjustment=chroma_adjustment,
        mode_changed=mode_changed,
    )


AUTO_FIX_PRESETS: dict[str, ScaleFixOptions] = {
    'wcag-aa': ScaleFixOptions(metric='wcag', min_wcag=4.5),
    'wcag-aaa': ScaleFixOptions(metric='wcag', min_wcag=7.0),
    'apca-body': ScaleFixOptions(metric='apca', min_apca=75.0),
    'apca-heading': ScaleFixOptions(metric='apca', min_apca=90.0),
}


def apply_scale_preset(
    name: str,
    scale: ColorScale,
    lightness_steps: Sequence[int],
    settings: Settings = DEFAULT_SETTINGS,
) -> ScaleFixResult | None:
    """Run a named tune-up preset. Unknown names are logged and yield None."""
    options = AUTO_FIX_PRESETS.get(name)
    if options is None:
        _unknown_preset(name)
        return None
    return auto_fix_scale(scale, lightness_steps, options, settings)


def _unknown_preset(name: str) -> None:
    available = ', '.join([*APCA_AUTO_FIX_PRESETS, *AUTO_FIX_PRESETS])
    logger.warning('Unknown auto-fix preset %r. Available: %s', name, available)

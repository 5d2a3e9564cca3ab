"""Auto-fix: adjust each scale towards a contrast goal, write the result.

Goal, first match wins:
    --target LC@HEX[:PRIORITY]    repeatable, e.g. --target 75@#FFFFFF:must
    --preset NAME                 APCA presets: body-text-white, body-text-black,
                                  large-text-white, ui-white, universal, strict-body
                                  pair presets: wcag-aa, wcag-aaa, apca-body, apca-heading
    the recommended APCA preset for the scale (see `lumat-tool help recommend`)

APCA presets and targets: switch to apca-fixed mode, trim chroma above 0.2,
binary-search step lightness against the highest-priority target (endpoints
98 and 14 are kept), enable hue chroma compensation. Only moves of 2+
lightness points that land within the tolerance of the target are kept.

Pair presets leave the lightness steps alone: they pick a contrast mode from
the chroma (luminance-matched below 0.02, else apca-fixed), cut chroma by 20%
when fewer than half of the step pairs meet the goal on white, and report how
many pairs pass before and after.

The recommendation uses --background, else the scale's targetBackground,
else white.

The fixed scales are written to <out_dir>/autofix.json in the same format as
the input file. The input scales are never modified.

Example:
    lumat-tool autofix ./out scales.json --preset ui-white
    lumat-tool autofix ./out scales.json --preset wcag-aa
    lumat-tool autofix ./out scales.json --target 60@#FFFFFF --target 60@#000000:should
"""

import logging
from pathlib import Path

from lumat_checker.core.autofix import (
    APCA_AUTO_FIX_PRESETS,
    AUTO_FIX_PRESETS,
    AutoFixOptions,
    ScaleFixResult,
    apply_preset,
    apply_scale_preset,
    auto_fix_apca,
    recommend_apca_preset,
)
from lumat_checker.core.config import DEFAULT_SETTINGS, Settings
from lumat_checker.core.scale_file import dump_scale, write_scale_file
from lumat_checker.core.types import PRIORITY_ORDER, APCATarget, AutoFixResult, Report, ScaleContext, Technique

logger = logging.getLogger(__name__)

technique = Technique(
    name='autofix',
    help='Adjust lightness/chroma towards a contrast goal and write the fixed scales.',
)

OUTPUT_NAME = 'autofix.json'


def parse_target(text: str) -> APCATarget | None:
    """Parse 'LC@HEX[:PRIORITY]'. Malformed targets are logged and yield None."""
    lc_part, sep, rest = text.partition('@')
    if not sep or not rest:
        logger.warning('Ignoring malformed target %r (expected LC@HEX[:PRIORITY])', text)
        return None
    background, _, priority = rest.partition(':')
    priority = priority or 'must'
    if priority not in PRIORITY_ORDER:
        logger.warning('Ignoring target %r: unknown priority %r', text, priority)
        return None
    try:
        min_lc = float(lc_part)
    except ValueError:
        logger.warning('Ignoring target %r: %r is not a number', text, lc_part)
        return None
    return APCATarget(min_lc=min_lc, background=background, priority=priority)


def _apca_data(preset: str, result: AutoFixResult, targets: tuple[APCATarget, ...]) -> dict:
    return {
        'preset': preset,
        'targets': [
            {'min_lc': t.min_lc, 'background': t.background, 'priority': t.priority, 'name': t.name}
            for t in targets
        ],
        'success': result.success,
        'improvements': list(result.improvements),
        'lightness_adjustments': [
            {'step': a.step, 'before': a.before, 'after': a.after, 'achieved_lc': round(a.achieved_lc, 2)}
            for a in result.metrics.lightness_adjustments
        ],
        'targets_achieved': result.metrics.targets_achieved,
        'targets_failed': result.metrics.targets_failed,
        'average_lc': round(result.metrics.average_lc_improvement, 2),
        'chroma_adjustment': round(result.metrics.chroma_adjustment, 4),
        'steps': list(result.adjusted_lightness_steps),
    }


def _pair_data(preset: str, result: ScaleFixResult, steps: tuple[int, ...]) -> dict:
    return {
        'preset': preset,
        'success': result.success,
        'improvements': list(result.improvements),
        'lightness_adjustments': [],
        'metric': AUTO_FIX_PRESETS[preset].metric,
        'pairs_before': result.pairs_before,
        'pairs_after': result.pairs_after,
        'total_pairs': result.total_pairs,
        'chroma_adjustment': round(result.chroma_adjustment, 4),
        'mode_changed': result.mode_changed,
        'steps': list(steps),
    }


def _fix(
    ctx: ScaleContext, preset: str, targets: tuple[APCATarget, ...] | None, settings: Settings
) -> tuple[dict, dict | None]:
    """Report data for one scale and its dumped fixed scale (None when nothing ran)."""
    if targets is not None:
        result = auto_fix_apca(ctx.scale, ctx.labels, AutoFixOptions(targets=targets))
        return _apca_data(preset, result, targets), dump_scale(result.scale, result.adjusted_lightness_steps)
    if preset in AUTO_FIX_PRESETS:
        pair_result = apply_scale_preset(preset, ctx.scale, ctx.labels, settings)
        return _pair_data(preset, pair_result, ctx.labels), dump_scale(pair_result.scale, ctx.labels)
    result = apply_preset(preset, ctx.scale, ctx.labels)
    if result is None:
        return {'preset': preset, 'success': False, 'improvements': [], 'lightness_adjustments': []}, None
    options = APCA_AUTO_FIX_PRESETS[preset]
    return _apca_data(preset, result, options.targets), dump_scale(result.scale, result.adjusted_lightness_steps)


@technique.run
def run(scales: list[ScaleContext], report: Report, args) -> None:
    settings = getattr(args, 'settings', DEFAULT_SETTINGS)
    background = getattr(args, 'background', None)
    raw_targets = getattr(args, 'target', None) or []
    targets = tuple(t for t in (parse_target(raw) for raw in raw_targets) if t is not None) if raw_targets else None

    fixed = []
    for ctx in scales:
        if targets is not None:
            preset = 'custom'
        else:
            preset = getattr(args, 'preset', None) or recommend_apca_preset(ctx.scale, background)
        data, dumped = _fix(ctx, preset, targets, settings)
        report.add(ctx.name, 'autofix', data)
        if dumped is not None:
            fixed.append(dumped)
        if data['success']:
            report.record_pass(ctx.name)
        else:
            report.record_fail(ctx.name)

    if fixed:
        out_path = Path(args.out_dir) / OUTPUT_NAME
        write_scale_file(out_path, fixed)
        for ctx in scales:
            data = report.scales.get(ctx.name, {}).get('techniques', {}).get('autofix')
            if data is not None and 'steps' in data:
                data['file'] = str(out_path)

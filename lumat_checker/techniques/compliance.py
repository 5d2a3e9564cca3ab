"""Swatch compliance against a contrast threshold.

Threshold, first match wins:
    --preset NAME                e.g. APCA_BODY_TEXT, WCAG_AA_NORMAL
    --preset FILE.json           exported preset, {"type": "apca", "value": 60}
    the scale's contrastThreshold block (when enabled)
    APCA Lc 75 / WCAG 4.5 body-text default

Each swatch is checked against the scale's targetBackground (default white).
Reports passing/failing counts, compliance rate and the passing step closest
to 50. A scale passes when at least one swatch does.
The report also carries totals across all scales: swatches passing, average
compliance and how many scales are fully compliant.

Combine with --fail-under N to exit 1 when any scale's compliance is below N%.

Example:
    lumat-tool compliance ./out scales.json --preset WCAG_AA_NORMAL
"""

import os

from lumat_checker.core.advisor import analyze_scale_contrast, contrast_stats
from lumat_checker.core.filtering import threshold_from_preset
from lumat_checker.core.scale_file import load_preset_file
from lumat_checker.core.types import ContrastThreshold, Report, ScaleContext, Technique

technique = Technique(
    name='compliance',
    help='Passing/failing swatches and recommended step against a contrast threshold.',
)

DEFAULT_THRESHOLD = ContrastThreshold(use_apca=True, min_apca=75.0, min_wcag=4.5)


def load_threshold(preset: str | None) -> ContrastThreshold | None:
    if not preset:
        return None
    if preset.endswith('.json') and os.path.isfile(preset):
        return load_preset_file(preset)
    return threshold_from_preset(preset)


@technique.run
def run(scales: list[ScaleContext], report: Report, args) -> None:
    preset_threshold = load_threshold(getattr(args, 'preset', None))
    summaries = []

    for ctx in scales:
        threshold = preset_threshold or ctx.scale.contrast_threshold or DEFAULT_THRESHOLD
        summary = analyze_scale_contrast(ctx.scale, ctx.colors, threshold)
        summaries.append(summary)
        passed = summary.recommended_step is not None
        report.add(
            ctx.name,
            'compliance',
            {
                'target_background': summary.target_background,
                'metric': 'apca' if threshold.use_apca else 'wcag',
                'passing': len(summary.passing_swatches),
                'total': len(summary.passing_swatches) + len(summary.failing_swatches),
                'compliance_rate': round(summary.compliance_rate, 4),
                'recommended_step': summary.recommended_step,
                'failing_steps': [s.step for s in summary.failing_swatches],
                'pass': passed,
            },
        )
        if passed:
            report.record_pass(ctx.name)
        else:
            report.record_fail(ctx.name)

    report.stats['compliance'] = contrast_stats(summaries)

"""Filter the contrast matrix by threshold and rank the just-passing pairs.

Filter bounds (all optional, APCA compares |Lc|):
    --min-apca / --max-apca     used by default
    --min-wcag / --max-wcag     used with --wcag
With no bound at all every pair is kept.

Ranking: for each badge threshold (WCAG 3:1, WCAG 4.5:1, APCA 45/70/90 Lc)
the five pairs at or above it with the lowest contrast. Those are the most
broadly usable combinations, not the extremes.

Example:
    lumat-tool pairs ./out scales.json --min-apca 60
    lumat-tool pairs ./out scales.json --wcag --min-wcag 4.5 --json
"""

from lumat_checker.core.config import DEFAULT_SETTINGS
from lumat_checker.core.filtering import filter_pairs, rank_all_thresholds
from lumat_checker.core.matrix import build_contrast_matrix
from lumat_checker.core.types import ContrastPair, ContrastThreshold, Report, ScaleContext, Technique

technique = Technique(
    name='pairs',
    help='Filter contrast pairs by APCA/WCAG bounds and list the top just-passing pairs per badge.',
)


def _pair_dict(pair: ContrastPair) -> dict:
    return {
        'fg': pair.fg_step,
        'bg': pair.bg_step,
        'fg_hex': pair.fg_hex,
        'bg_hex': pair.bg_hex,
        'apca': round(pair.apca_lc, 1),
        'wcag': round(pair.wcag_ratio, 2),
        'level': pair.wcag_level.label,
    }


def threshold_from_args(args) -> ContrastThreshold:
    return ContrastThreshold(
        use_apca=not getattr(args, 'wcag', False),
        min_apca=getattr(args, 'min_apca', None),
        max_apca=getattr(args, 'max_apca', None),
        min_wcag=getattr(args, 'min_wcag', None),
        max_wcag=getattr(args, 'max_wcag', None),
    )


@technique.run
def run(scales: list[ScaleContext], report: Report, args) -> None:
    settings = getattr(args, 'settings', DEFAULT_SETTINGS)
    threshold = threshold_from_args(args)
    for ctx in scales:
        pairs = build_contrast_matrix(ctx.colors, ctx.labels, settings)
        matched = filter_pairs(pairs, threshold)
        ranked = rank_all_thresholds(pairs)
        report.add(
            ctx.name,
            'pairs',
            {
                'total': len(pairs),
                'matched': len(matched),
                'filtered': [_pair_dict(p) for p in matched] if threshold.has_bounds else [],
                'ranked': {label: [_pair_dict(p) for p in top] for label, top in ranked.items()},
            },
        )

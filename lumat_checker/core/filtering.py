"""Threshold filtering and ranking of contrast pairs.

filter_pairs() applies either the APCA bounds or the WCAG bounds, never both.
rank_threshold_pairs() surfaces the pairs that only just clear a badge
threshold: those are the most broadly usable combinations, not the extremes.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from lumat_checker.core.types import ContrastPair, ContrastThreshold

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BadgeThreshold:
    label: str
    metric: Literal['wcag', 'apca']
    value: float
    badge: str


BADGE_THRESHOLDS: tuple[BadgeThreshold, ...] = (
    BadgeThreshold('WCAG 3:1', 'wcag', 3.0, 'A'),
    BadgeThreshold('WCAG 4.5:1', 'wcag', 4.5, 'AA'),
    BadgeThreshold('APCA 45 Lc', 'apca', 45.0, '45'),
    BadgeThreshold('APCA 70 Lc', 'apca', 70.0, '70'),
    BadgeThreshold('APCA 90 Lc', 'apca', 90.0, '90'),
)

# Named thresholds for filtering and swatch validation
CONTRAST_PRESETS: dict[str, ContrastThreshold] = {
    'WCAG_AA_NORMAL': ContrastThreshold(use_apca=False, min_wcag=4.5),
    'WCAG_AA_LARGE': ContrastThreshold(use_apca=False, min_wcag=3.0),
    'WCAG_AAA_NORMAL': ContrastThreshold(use_apca=False, min_wcag=7.0),
    'WCAG_AAA_LARGE': ContrastThreshold(use_apca=False, min_wcag=4.5),
    'UI_COMPONENT': ContrastThreshold(use_apca=False, min_wcag=3.0),
    'APCA_BODY_TEXT': ContrastThreshold(use_apca=True, min_apca=60.0),
    'APCA_LARGE_TEXT': ContrastThreshold(use_apca=True, min_apca=45.0),
    'APCA_HEADINGS': ContrastThreshold(use_apca=True, min_apca=75.0),
    'APCA_UI': ContrastThreshold(use_apca=True, min_apca=45.0),
    'APCA_BRONZE': ContrastThreshold(use_apca=True, min_apca=60.0),
    'APCA_SILVER': ContrastThreshold(use_apca=True, min_apca=75.0),
    'APCA_GOLD': ContrastThreshold(use_apca=True, min_apca=90.0),
}


def threshold_from_preset(name: str) -> ContrastThreshold | None:
    """Look up a named preset. Unknown names are logged and yield None."""
    threshold = CONTRAST_PRESETS.get(name.upper()) if name else None
    if threshold is None:
        logger.warning('Unknown contrast preset %r. Available: %s', name, ', '.join(sorted(CONTRAST_PRESETS)))
    return threshold


def _within(value: float, low: float | None, high: float | None) -> bool:
    return (low is None or value >= low) and (high is None or value <= high)


def filter_pairs(pairs: Sequence[ContrastPair], threshold: ContrastThreshold) -> list[ContrastPair]:
    """Keep the pairs inside the threshold's bounds. No bounds at all returns the input unchanged."""
    if not threshold.has_bounds:
        return list(pairs)
    if threshold.use_apca:
        return [p for p in pairs if _within(p.apca, threshold.min_apca, threshold.max_apca)]
    return [p for p in pairs if _within(p.wcag_ratio, threshold.min_wcag, threshold.max_wcag)]


def rank_threshold_pairs(pairs: Sequence[ContrastPair], badge: BadgeThreshold, limit: int = 5) -> list[ContrastPair]:
    """The `limit` pairs at or above the badge value, closest to it first."""
    if badge.metric == 'wcag':
        passing = sorted((p for p in pairs if p.wcag_ratio >= badge.value), key=lambda p: p.wcag_ratio)
    else:
        passing = sorted((p for p in pairs if p.apca >= badge.value), key=lambda p: p.apca)
    return passing[:limit]


def rank_all_thresholds(
    pairs: Sequence[ContrastPair],
    badges: Sequence[BadgeThreshold] = BADGE_THRESHOLDS,
    limit: int = 5,
) -> dict[str, list[ContrastPair]]:
    return {badge.label: rank_threshold_pairs(pairs, badge, limit) for badge in badges}

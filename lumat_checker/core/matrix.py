"""Pairwise contrast matrix across every step of a scale.

Direction matters: APCA is asymmetric, so both (a on b) and (b on a) are
emitted. Only self-pairs are skipped. Order is foreground-major.
"""

from collections import Counter
from collections.abc import Sequence

from lumat_checker.core.config import DEFAULT_SETTINGS, Settings
from lumat_checker.core.contrast import apca_lc, classify_wcag, wcag_ratio
from lumat_checker.core.types import ContrastPair, PerceptualColor, WcagLevel


def build_contrast_matrix(
    colors: Sequence[PerceptualColor],
    labels: Sequence[int],
    settings: Settings = DEFAULT_SETTINGS,
) -> list[ContrastPair]:
    """Return the N*(N-1) directional pairs of `colors`, labelled by `labels`."""
    if len(colors) != len(labels):
        raise ValueError(f'{len(labels)} step labels for {len(colors)} colours')

    pairs: list[ContrastPair] = []
    for i, fg in enumerate(colors):
        for j, bg in enumerate(colors):
            if i == j:
                continue
            lc = apca_lc(fg, bg)
            ratio = wcag_ratio(fg, bg)
            pairs.append(
                ContrastPair(
                    fg_step=labels[i],
                    bg_step=labels[j],
                    fg_hex=fg.hex,
                    bg_hex=bg.hex,
                    apca_lc=lc,
                    wcag_ratio=ratio,
                    wcag_level=classify_wcag(ratio, settings),
                    apca_passes=abs(lc) >= settings.apca_pass,
                )
            )
    return pairs


def summarise_matrix(pairs: Sequence[ContrastPair]) -> dict:
    """Counts per WCAG level plus APCA pass count, for reporting."""
    levels = Counter(pair.wcag_level for pair in pairs)
    return {
        'pairs': len(pairs),
        'wcag_levels': {level.label: levels.get(level, 0) for level in sorted(WcagLevel, reverse=True)},
        'apca_passing': sum(1 for pair in pairs if pair.apca_passes),
    }

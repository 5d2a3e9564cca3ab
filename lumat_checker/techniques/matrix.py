"""Pairwise contrast matrix: every ordered pair of steps, both directions.

For N steps this is N*(N-1) pairs (self-pairs skipped). Each pair carries the
signed APCA Lc, the WCAG ratio and its level (Fail < A < AA < AAA). A pair
passes APCA when |Lc| >= 60 (LUMAT_APCA_PASS).

Output: pair count, WCAG level histogram and APCA passing count per scale.

Example:
    lumat-tool matrix ./out scales.json
"""

from lumat_checker.core.config import DEFAULT_SETTINGS
from lumat_checker.core.matrix import build_contrast_matrix, summarise_matrix
from lumat_checker.core.types import Report, ScaleContext, Technique

technique = Technique(
    name='matrix',
    help='Pairwise contrast matrix (APCA + WCAG) across all steps of each scale.',
)


@technique.run
def run(scales: list[ScaleContext], report: Report, args) -> None:
    settings = getattr(args, 'settings', DEFAULT_SETTINGS)
    for ctx in scales:
        pairs = build_contrast_matrix(ctx.colors, ctx.labels, settings)
        report.add(ctx.name, 'matrix', summarise_matrix(pairs))

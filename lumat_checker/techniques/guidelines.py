"""Usage guidance per scale step.

Each step is placed in a tier by its label (0-100):
    >=90   backgrounds, subtle UI (warns on white/grey backgrounds)
    70-89  disabled states, borders (notes WCAG large-text compliance)
    40-69  interactive elements, icons (notes AA and APCA Lc 60)
    20-39  primary text, headings (notes AAA and APCA Lc 75)
    <20    maximum contrast, critical elements

The reference background is the scale's targetBackground (default black),
mapped to the precomputed white/grey/black contrast figures.
Best pairings are the steps at least 60 labels away, highest first, top 5.
meets_aa / meets_aaa say whether the step reaches WCAG AA / AAA body text on any
of the reference backgrounds.

Example:
    lumat-tool guidelines ./out scales.json
"""

from dataclasses import asdict

from lumat_checker.core.advisor import generate_usage_guidelines
from lumat_checker.core.config import DEFAULT_SETTINGS
from lumat_checker.core.types import Report, ScaleContext, Technique

technique = Technique(
    name='guidelines',
    help='Usage recommendations, warnings and best pairings for every step.',
)


@technique.run
def run(scales: list[ScaleContext], report: Report, args) -> None:
    settings = getattr(args, 'settings', DEFAULT_SETTINGS)
    for ctx in scales:
        guidelines = generate_usage_guidelines(ctx.colors, ctx.labels, ctx.scale, settings)
        steps = []
        for guideline, color in zip(guidelines, ctx.colors):
            payload = color.contrast
            steps.append(
                {
                    **asdict(guideline),
                    'meets_aa': payload is not None and payload.meets_aa,
                    'meets_aaa': payload is not None and payload.meets_aaa,
                }
            )
        report.add(ctx.name, 'guidelines', {'steps': steps})

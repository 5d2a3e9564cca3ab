"""Run every analysis technique, combine into a single report.

Runs: compliance, guidelines, matrix, opacity, pairs, recommend.
Skips: autofix (writes files, run it explicitly).

Example:
    lumat-tool all ./out scales.json
    lumat-tool all ./out scales.json --json
    lumat-tool all ./out scales.json --fail-under=50
"""

from lumat_checker.core.types import Report, ScaleContext, Technique

technique = Technique(
    name='all',
    help='Run every analysis technique (except autofix). Combine into a single report.',
)

# Techniques never run automatically
SKIP = {'all', 'autofix'}


@technique.run
def run(scales: list[ScaleContext], report: Report, args) -> None:
    from lumat_checker.registry import all_techniques

    for name, tech in sorted(all_techniques().items()):
        if name in SKIP:
            continue
        tech.execute(scales, report, args)

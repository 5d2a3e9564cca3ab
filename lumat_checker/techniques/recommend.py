"""Recommend an APCA auto-fix preset for each scale.

Decision table: on a dark background always body-text-black. On a light
background chroma > 0.15 gives ui-white, chroma < 0.05 gives strict-body,
anything else body-text-white.

The background is --background (hex or preset name such as 'canvas-bg (E)'),
else the scale's targetBackground, else white.

Example:
    lumat-tool recommend ./out scales.json --background '#101014'
"""

from lumat_checker.core.autofix import recommend_apca_preset
from lumat_checker.core.backgrounds import resolve_background_hex
from lumat_checker.core.colour import WHITE_HEX
from lumat_checker.core.types import Report, ScaleContext, Technique

technique = Technique(
    name='recommend',
    help='Pick the APCA auto-fix preset that suits each scale.',
)


@technique.run
def run(scales: list[ScaleContext], report: Report, args) -> None:
    override = getattr(args, 'background', None)
    for ctx in scales:
        background = resolve_background_hex(override or ctx.scale.target_background) or WHITE_HEX
        report.add(
            ctx.name,
            'recommend',
            {'background': background, 'preset': recommend_apca_preset(ctx.scale, background)},
        )

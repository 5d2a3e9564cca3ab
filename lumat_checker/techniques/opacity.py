"""Minimum opacity per step that still meets a contrast goal on a background.

Each step is blended over the background in sRGB (CSS compositing) and the
opacity is bisected for the lowest whole percentage that meets the goal.
Steps that fall short even at full opacity show '-'.

Each step also gets its translucent equivalent: the opacity (in steps of 5%)
at which the scale's strongest colour, the one furthest in lightness from the
background, blends to the same L* as the step.

Goal:
    default                    APCA |Lc| --min-apca (default 75), within 1 Lc
    --wcag                     WCAG ratio --min-wcag (default AA normal, 4.5), within 0.1

Background: --background (hex or preset name), else the scale's
targetBackground, else white.

Example:
    lumat-tool opacity ./out scales.json
    lumat-tool opacity ./out scales.json --wcag --min-wcag 3 --background '#101014'
"""

from lumat_checker.core.backgrounds import resolve_background_hex
from lumat_checker.core.colour import WHITE_HEX, hex_to_oklch
from lumat_checker.core.config import DEFAULT_SETTINGS
from lumat_checker.core.generator import DEFAULT_TARGET_LC
from lumat_checker.core.opacity import (
    OPACITY_STEPS,
    blend_on_background,
    find_closest_opacity,
    min_opacity_for_apca,
    min_opacity_for_wcag,
)
from lumat_checker.core.types import Report, ScaleContext, Technique

technique = Technique(
    name='opacity',
    help='Lowest opacity at which each step still meets an APCA or WCAG goal on a background.',
)


@technique.run
def run(scales: list[ScaleContext], report: Report, args) -> None:
    settings = getattr(args, 'settings', DEFAULT_SETTINGS)
    use_wcag = getattr(args, 'wcag', False)
    if use_wcag:
        target = getattr(args, 'min_wcag', None) or settings.wcag.aa_normal
    else:
        target = getattr(args, 'min_apca', None) or DEFAULT_TARGET_LC
    override = getattr(args, 'background', None)

    for ctx in scales:
        background = resolve_background_hex(override or ctx.scale.target_background) or WHITE_HEX
        background_l = hex_to_oklch(background).L
        base = max(ctx.colors, key=lambda c: abs(c.L - background_l))
        steps = []
        for label, color in zip(ctx.labels, ctx.colors):
            if use_wcag:
                opacity = min_opacity_for_wcag(color, background, target)
            else:
                opacity = min_opacity_for_apca(color, background, target)
            solid = blend_on_background(color, 100, background)
            base_opacity, _ = find_closest_opacity(solid.lightness, base, OPACITY_STEPS, background)
            steps.append({'step': label, 'color': color.hex, 'min_opacity': opacity, 'base_opacity': base_opacity})
        report.add(
            ctx.name,
            'opacity',
            {
                'background': background,
                'metric': 'wcag' if use_wcag else 'apca',
                'target': target,
                'base': base.hex,
                'steps': steps,
            },
        )

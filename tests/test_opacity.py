"""Tests for lumat_checker.core.opacity: blending, L* conversion and minimum opacity."""

import pytest
from lumat_checker.core.apca import apca_luminance, luminance_to_lc
from lumat_checker.core.colour import to_perceptual
from lumat_checker.core.contrast import luminance_ratio
from lumat_checker.core.opacity import (
    blend_on_background,
    find_closest_opacity,
    luminance_to_lightness,
    min_opacity_for_apca,
    min_opacity_for_wcag,
)
from lumat_checker.core.types import PerceptualColor

BLACK = PerceptualColor(L=0.0, C=0.0, H=0.0, hex='#000000', rgb=(0.0, 0.0, 0.0))
WHITE_HEX = '#ffffff'


class TestLuminanceToLightness:
    def test_extremes(self) -> None:
        assert luminance_to_lightness(0.0) == 0.0
        assert luminance_to_lightness(1.0) == pytest.approx(100.0)

    def test_mid_grey(self) -> None:
        assert luminance_to_lightness(0.18) == pytest.approx(49.5, abs=0.1)

    def test_linear_segment(self) -> None:
        assert luminance_to_lightness(0.005) == pytest.approx(903.3 * 0.005)


class TestBlend:
    def test_full_opacity_is_foreground(self) -> None:
        color = to_perceptual(0.5, 0.1, 240)
        result = blend_on_background(color, 100, WHITE_HEX)
        assert result.rgb == pytest.approx(color.rgb)
        assert result.hex == color.hex

    def test_zero_opacity_is_background(self) -> None:
        result = blend_on_background(BLACK, 0, '#102030')
        assert result.hex == '#102030'

    def test_srgb_midpoint(self) -> None:
        result = blend_on_background(BLACK, 50, WHITE_HEX)
        assert result.rgb == pytest.approx((0.5, 0.5, 0.5))
        assert result.lightness == pytest.approx(luminance_to_lightness(result.luminance))

    def test_linear_midpoint_is_lighter(self) -> None:
        srgb = blend_on_background(BLACK, 50, WHITE_HEX)
        linear = blend_on_background(BLACK, 50, WHITE_HEX, mode='linear')
        assert linear.rgb[0] == pytest.approx(0.7354, abs=1e-3)
        assert linear.lightness > srgb.lightness

    def test_opacity_clamped(self) -> None:
        assert blend_on_background(BLACK, 140, WHITE_HEX) == blend_on_background(BLACK, 100, WHITE_HEX)
        assert blend_on_background(BLACK, -5, WHITE_HEX).hex == WHITE_HEX


class TestFindClosestOpacity:
    def test_picks_nearest_lightness(self) -> None:
        opacity, result = find_closest_opacity(50, BLACK, [0, 25, 50, 75, 100], WHITE_HEX)
        assert opacity == 50
        assert result.lightness == pytest.approx(53.4, abs=0.5)

    def test_no_choices_means_full_opacity(self) -> None:
        opacity, result = find_closest_opacity(50, BLACK, [], WHITE_HEX)
        assert opacity == 100.0
        assert result.hex == '#000000'


class TestMinimumOpacity:
    def test_wcag_black_on_white(self) -> None:
        opacity = min_opacity_for_wcag(BLACK, WHITE_HEX, 4.5)
        assert opacity is not None
        assert 1 <= opacity < 100
        achieved = luminance_ratio(blend_on_background(BLACK, opacity, WHITE_HEX).luminance, 1.0)
        assert achieved >= 4.5 - 0.1

    def test_wcag_unreachable(self) -> None:
        pale = to_perceptual(0.9, 0.02, 240)
        assert min_opacity_for_wcag(pale, WHITE_HEX, 7.0) is None

    def test_stricter_goal_needs_more_opacity(self) -> None:
        assert min_opacity_for_wcag(BLACK, WHITE_HEX, 7.0) > min_opacity_for_wcag(BLACK, WHITE_HEX, 3.0)

    def test_apca_black_on_white(self) -> None:
        opacity = min_opacity_for_apca(BLACK, WHITE_HEX, 75)
        assert opacity is not None
        blend = blend_on_background(BLACK, opacity, WHITE_HEX)
        assert abs(luminance_to_lc(apca_luminance(*blend.rgb), apca_luminance(1, 1, 1))) >= 75 - 1.0

    def test_apca_same_colour_unreachable(self) -> None:
        white = to_perceptual(1.0, 0.0, 0.0)
        assert min_opacity_for_apca(white, WHITE_HEX, 15) is None

    def test_apca_light_on_dark(self) -> None:
        white = to_perceptual(1.0, 0.0, 0.0)
        opacity = min_opacity_for_apca(white, '#07070d', 60)
        assert opacity is not None
        assert opacity < 100

"""Tests for lumat_checker.core.advisor and core.backgrounds: backgrounds, usage guidelines, swatches."""

import pytest
from lumat_checker.core.advisor import (
    analyze_scale_contrast,
    contrast_stats,
    evaluate_swatch,
    generate_usage_guidelines,
    map_background_to_contrast_key,
)
from lumat_checker.core.backgrounds import BACKGROUND_PRESETS, resolve_background_hex
from lumat_checker.core.colour import to_perceptual
from lumat_checker.core.config import DEFAULT_STEP_LABELS, Settings, WcagThresholds
from lumat_checker.core.generator import generate_scale
from lumat_checker.core.types import ColorScale, ContrastThreshold

BLUE = ColorScale(name='blue', id='blue', hue=240, manual_chroma=0.15)


class TestMapBackground:
    @pytest.mark.parametrize(
        ('name', 'key'),
        [
            ('white', 'white'),
            ('light2', 'gray'),
            ('dark1', 'black'),
            ('canvas-bg-lv2', 'gray'),
            ('canvas-bg (E)', 'black'),
            ('surface-L20', 'black'),
            ('surface-L90', 'white'),
            ('surface-L50', 'gray'),
            ('my-dark-theme', 'black'),
            ('light-panel', 'white'),
        ],
    )
    def test_mapping(self, name: str, key: str) -> None:
        assert map_background_to_contrast_key(name) == key

    def test_unknown_defaults_to_gray(self, caplog: pytest.LogCaptureFixture) -> None:
        assert map_background_to_contrast_key('mystery') == 'gray'
        assert 'Unknown background preset' in caplog.text


class TestResolveBackground:
    def test_unset(self) -> None:
        assert resolve_background_hex(None) is None
        assert resolve_background_hex('') is None

    def test_hex_passes_through(self) -> None:
        assert resolve_background_hex('#101014') == '#101014'
        assert resolve_background_hex('#FFF') == '#FFF'

    def test_canvas_presets(self) -> None:
        assert resolve_background_hex('canvas-bg-lv2') == '#dcdde6'
        assert resolve_background_hex('canvas-bg (E)') == '#07070d'
        assert len(BACKGROUND_PRESETS) == 6

    def test_other_names_use_reference_colour(self) -> None:
        assert resolve_background_hex('white') == '#ffffff'
        assert resolve_background_hex('dark2') == to_perceptual(0.14, 0.0, 0.0).hex


class TestUsageGuidelines:
    def test_one_per_step(self) -> None:
        colors = generate_scale(BLUE, DEFAULT_STEP_LABELS)
        guidelines = generate_usage_guidelines(colors, DEFAULT_STEP_LABELS, BLUE)
        assert [g.step for g in guidelines] == list(DEFAULT_STEP_LABELS)
        assert [g.color for g in guidelines] == [c.hex for c in colors]

    def test_background_tier_warns_on_light_background(self) -> None:
        scale = BLUE.with_overrides(target_background='white')
        colors = generate_scale(scale, DEFAULT_STEP_LABELS)
        first = generate_usage_guidelines(colors, DEFAULT_STEP_LABELS, scale)[0]
        assert first.recommendations[0] == 'Excellent for backgrounds and subtle UI elements'
        assert first.warnings == ['Low contrast with white backgrounds']

    def test_default_background_is_black(self) -> None:
        colors = generate_scale(BLUE, DEFAULT_STEP_LABELS)
        first = generate_usage_guidelines(colors, DEFAULT_STEP_LABELS, BLUE)[0]
        assert first.warnings == []

    def test_large_text_level(self) -> None:
        (guideline,) = generate_usage_guidelines(generate_scale(BLUE, (80,)), (80,), BLUE)
        assert 'Meets WCAG AAA for large text on black' in guideline.recommendations

        strict = Settings(wcag=WcagThresholds(aaa_large=50.0))
        colors = generate_scale(BLUE, (80,), settings=strict)
        (guideline,) = generate_usage_guidelines(colors, (80,), BLUE, strict)
        assert 'Meets WCAG AA for large text on black' in guideline.recommendations

    def test_darkest_tier_warns(self) -> None:
        colors = generate_scale(BLUE, DEFAULT_STEP_LABELS)
        last = generate_usage_guidelines(colors, DEFAULT_STEP_LABELS, BLUE)[-1]
        assert last.recommendations[0] == 'Maximum contrast for critical elements'
        assert 'May be too harsh for large text blocks' in last.warnings

    def test_best_pairings(self) -> None:
        colors = generate_scale(BLUE, DEFAULT_STEP_LABELS)
        by_step = {g.step: g for g in generate_usage_guidelines(colors, DEFAULT_STEP_LABELS, BLUE)}
        assert by_step[100].best_pairings == [40, 30, 20, 15, 12]
        assert by_step[0].best_pairings == [100, 90, 80, 70, 60]
        assert by_step[50].best_pairings == []

    def test_colours_without_contrast_still_advised(self) -> None:
        labels = (95, 50)
        colors = generate_scale(BLUE, labels, calculate_contrast=False)
        guidelines = generate_usage_guidelines(colors, labels, BLUE)
        assert len(guidelines) == 2
        assert guidelines[1].recommendations[0] == 'Ideal for interactive elements and icons'

    def test_label_mismatch_raises(self) -> None:
        with pytest.raises(ValueError):
            generate_usage_guidelines(generate_scale(BLUE, (50,)), (50, 40), BLUE)


class TestEvaluateSwatch:
    def test_without_contrast_fails(self) -> None:
        result = evaluate_swatch(to_perceptual(0.5, 0.1, 240), 'white', ContrastThreshold(min_apca=60))
        assert not result.passes
        assert result.delta == -60

    def test_wcag_metric(self) -> None:
        black = generate_scale(BLUE, (0,))[0]
        result = evaluate_swatch(black, 'white', ContrastThreshold(use_apca=False, min_wcag=4.5))
        assert result.passes
        assert result.delta == pytest.approx(result.wcag_value - 4.5)


class TestAnalyzeScaleContrast:
    def test_split_and_rate(self) -> None:
        colors = generate_scale(BLUE, DEFAULT_STEP_LABELS)
        summary = analyze_scale_contrast(BLUE, colors, ContrastThreshold(min_apca=60))
        assert summary.target_background == 'white'
        assert len(summary.passing_swatches) + len(summary.failing_swatches) == len(colors)
        assert summary.compliance_rate == pytest.approx(len(summary.passing_swatches) / len(colors))
        assert all(s.delta >= 0 for s in summary.passing_swatches)
        assert all(s.delta < 0 for s in summary.failing_swatches)
        # white on white can never reach Lc 60
        assert 100 in [s.step for s in summary.failing_swatches]
        assert 0 in [s.step for s in summary.passing_swatches]

    def test_recommended_nearest_50(self) -> None:
        colors = generate_scale(BLUE, DEFAULT_STEP_LABELS)
        summary = analyze_scale_contrast(BLUE, colors, ContrastThreshold(min_apca=0))
        assert summary.compliance_rate == 1.0
        assert summary.recommended_step == 50
        assert [s.step for s in summary.passing_swatches if s.recommended] == [50]

    def test_nothing_passes(self) -> None:
        colors = generate_scale(BLUE, (100, 95))
        summary = analyze_scale_contrast(BLUE, colors, ContrastThreshold(min_apca=90))
        assert summary.recommended_step is None
        assert summary.compliance_rate == 0.0

    def test_stats(self) -> None:
        colors = generate_scale(BLUE, DEFAULT_STEP_LABELS)
        all_pass = analyze_scale_contrast(BLUE, colors, ContrastThreshold(min_apca=0))
        none_pass = analyze_scale_contrast(BLUE, colors, ContrastThreshold(min_apca=200))
        stats = contrast_stats([all_pass, none_pass])
        assert stats['total_swatches'] == 2 * len(colors)
        assert stats['average_compliance'] == pytest.approx(0.5)
        assert stats['scales_fully_compliant'] == 1
        assert stats['scales_non_compliant'] == 1

"""Shared types for lumat-tool: colours, scales, contrast pairs, fix results, Technique, Report."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Literal

ContrastMode = Literal['standard', 'apca-fixed', 'luminance-matched', 'apca-target', 'wcag-target']
Priority = Literal['must', 'should', 'nice']
ContrastKey = Literal['white', 'gray', 'black']

PRIORITY_ORDER: dict[str, int] = {'must': 3, 'should': 2, 'nice': 1}


@dataclass(frozen=True)
class BackgroundContrast:
    """One metric measured against the three reference backgrounds."""

    on_white: float
    on_gray: float
    on_black: float

    def for_key(self, key: ContrastKey) -> float:
        if key == 'white':
            return self.on_white
        if key == 'gray':
            return self.on_gray
        return self.on_black


@dataclass(frozen=True)
class ContrastPayload:
    """Precomputed contrast of a colour against white, grey and black."""

    apca: BackgroundContrast
    wcag: BackgroundContrast
    meets_aa: bool
    meets_aaa: bool


@dataclass(frozen=True)
class PerceptualColor:
    """An OKLCH colour plus its cached display projection."""

    L: float
    C: float
    H: float
    hex: str = '#ffffff'
    rgb: tuple[float, float, float] = (1.0, 1.0, 1.0)  # clipped sRGB, 0..1
    contrast: ContrastPayload | None = None
    target_background: str | None = None  # per-step override of the scale's background


@dataclass(frozen=True)
class CurveParams:
    shift: float = 0.0
    power: float = 1.0


class WcagLevel(IntEnum):
    """WCAG 2.x conformance level of a contrast ratio, totally ordered."""

    FAIL = 0
    A = 1
    AA = 2
    AAA = 3

    @property
    def label(self) -> str:
        return 'Fail' if self is WcagLevel.FAIL else self.name


@dataclass(frozen=True)
class ContrastThreshold:
    """Filter predicate over contrast pairs. A bound left as None does not constrain."""

    use_apca: bool = True
    min_apca: float | None = None
    max_apca: float | None = None
    min_wcag: float | None = None
    max_wcag: float | None = None

    @property
    def has_bounds(self) -> bool:
        return any(v is not None for v in (self.min_apca, self.max_apca, self.min_wcag, self.max_wcag))


@dataclass(frozen=True)
class ColorScale:
    """Parameters of one generated colour scale. Never mutated; see with_overrides()."""

    name: str = 'scale'
    hue: float = 0.0
    manual_chroma: float = 0.1
    hue_curve: CurveParams = CurveParams()
    chroma_curve: CurveParams = CurveParams()
    contrast_mode: ContrastMode = 'standard'
    chroma_compensation: bool | None = None  # None behaves as enabled during generation
    target_background: str | None = None
    id: str = ''
    apca_tolerance: float | None = None
    apca_target_lc: float | None = None
    wcag_target_ratio: float | None = None
    custom_lightness_steps: tuple[int, ...] | None = None
    contrast_threshold: ContrastThreshold | None = None

    def with_overrides(self, **changes: Any) -> ColorScale:
        """Build a new scale from this one plus the given field values."""
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class ContrastPair:
    """Directional contrast of one scale step drawn on another."""

    fg_step: int
    bg_step: int
    fg_hex: str
    bg_hex: str
    apca_lc: float  # signed; positive is dark-on-light
    wcag_ratio: float
    wcag_level: WcagLevel
    apca_passes: bool

    @property
    def apca(self) -> float:
        return abs(self.apca_lc)


@dataclass(frozen=True)
class APCATarget:
    min_lc: float
    background: str
    priority: Priority = 'must'
    name: str | None = None


@dataclass(frozen=True)
class LightnessAdjustment:
    step: int  # index into the lightness sequence
    before: int
    after: int
    achieved_lc: float = 0.0


@dataclass(frozen=True)
class AutoFixMetrics:
    targets_achieved: int
    targets_failed: int
    average_lc_improvement: float
    lightness_adjustments: tuple[LightnessAdjustment, ...]
    chroma_adjustment: float


@dataclass(frozen=True)
class AutoFixResult:
    scale: ColorScale
    adjusted_lightness_steps: tuple[int, ...]
    improvements: tuple[str, ...]
    metrics: AutoFixMetrics
    success: bool


@dataclass
class UsageGuideline:
    step: int
    color: str
    recommendations: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    best_pairings: list[int] = field(default_factory=list)


@dataclass
class SwatchContrast:
    step: int
    passes: bool
    apca_value: float
    wcag_value: float
    delta: float  # signed distance from the threshold
    recommended: bool = False


@dataclass
class ScaleContrastSummary:
    scale_id: str
    scale_name: str
    target_background: str
    contrast_mode: str
    passing_swatches: list[SwatchContrast] = field(default_factory=list)
    failing_swatches: list[SwatchContrast] = field(default_factory=list)
    recommended_step: int | None = None
    compliance_rate: float = 0.0


@dataclass
class ScaleContext:
    """A scale together with its generated colours, ready for analysis."""

    name: str
    scale: ColorScale
    labels: tuple[int, ...]
    colors: tuple[PerceptualColor, ...]

    def __post_init__(self) -> None:
        if len(self.labels) != len(self.colors):
            raise ValueError(
                f'Scale {self.name!r}: {len(self.labels)} step labels for {len(self.colors)} colours'
            )


class Technique:
    """A self-registering analysis technique.

    Usage in a technique module:

        technique = Technique(name='matrix', help='Pairwise contrast matrix')

        @technique.run
        def run(scales, report, args):
            ...
    """

    def __init__(self, name: str, help: str = ''):
        self.name = name
        self.help = help
        self._run_fn: Callable | None = None

    def run(self, fn: Callable) -> Callable:
        """Decorator to register the run function."""
        self._run_fn = fn
        return fn

    def execute(self, scales: list[ScaleContext], report: Report, args: Any) -> None:
        """Execute the technique's run function."""
        if self._run_fn is None:
            raise RuntimeError(f'Technique {self.name} has no run function')
        self._run_fn(scales, report, args)


@dataclass
class Report:
    """Accumulates results from techniques for text/JSON output."""

    input_path: str = ''
    step_labels: list[int] = field(default_factory=list)
    scales: dict[str, dict[str, Any]] = field(default_factory=dict)
    pass_count: int = 0
    fail_count: int = 0
    stats: dict[str, dict[str, Any]] = field(default_factory=dict)

    def add(self, scale_name: str, technique_name: str, data: dict[str, Any]) -> None:
        """Add technique results for a scale."""
        if scale_name not in self.scales:
            self.scales[scale_name] = {'hue': None, 'chroma': None, 'techniques': {}}
        self.scales[scale_name]['techniques'][technique_name] = data

    def set_scale(self, scale_name: str, scale: ColorScale) -> None:
        """Record the headline parameters of a scale in the report."""
        if scale_name not in self.scales:
            self.scales[scale_name] = {'hue': None, 'chroma': None, 'techniques': {}}
        self.scales[scale_name]['hue'] = scale.hue
        self.scales[scale_name]['chroma'] = scale.manual_chroma

    def record_pass(self, scale_name: str) -> None:
        self.pass_count += 1

    def record_fail(self, scale_name: str) -> None:
        self.fail_count += 1

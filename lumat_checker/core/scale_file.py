"""Reader and writer for scale definition JSON files.

Accepted shapes:

    {"name": "blue", "hue": 240, "manualChroma": 0.15, ...}

    {"steps": [98, 90, ...], "scales": [{...}, {...}]}

Keys follow the scale editor's camelCase names. Malformed scales and preset
imports are user-editable convenience inputs: they are logged and skipped
(None), never raised.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from lumat_checker.core.types import ColorScale, ContrastThreshold, CurveParams

logger = logging.getLogger(__name__)

_CONTRAST_MODES = {'standard', 'apca-fixed', 'luminance-matched', 'apca-target', 'wcag-target'}


@dataclass
class ScaleFile:
    """Parsed scale file."""

    scales: list[ColorScale] = field(default_factory=list)
    steps: tuple[int, ...] | None = None


def _curve(obj: Any, label: str) -> CurveParams:
    if obj is None:
        return CurveParams()
    if not isinstance(obj, dict):
        raise ValueError(f'{label} must be an object with shift/power')
    return CurveParams(shift=float(obj.get('shift', 0.0)), power=float(obj.get('power', 1.0)))


def _steps(obj: Any) -> tuple[int, ...] | None:
    if obj is None:
        return None
    if not isinstance(obj, list) or not obj:
        raise ValueError('steps must be a non-empty list of numbers')
    return tuple(int(round(float(v))) for v in obj)


def _threshold(obj: Any) -> ContrastThreshold | None:
    """Read a {minLc, minWcag, useApca, enabled} block. Disabled blocks are ignored."""
    if not isinstance(obj, dict) or not obj.get('enabled', True):
        return None
    use_apca = bool(obj.get('useApca', True))
    min_lc = obj.get('minLc', obj.get('minApca'))
    min_wcag = obj.get('minWcag')
    return ContrastThreshold(
        use_apca=use_apca,
        min_apca=float(min_lc) if min_lc is not None else None,
        max_apca=float(obj['maxApca']) if obj.get('maxApca') is not None else None,
        min_wcag=float(min_wcag) if min_wcag is not None else None,
        max_wcag=float(obj['maxWcag']) if obj.get('maxWcag') is not None else None,
    )


def parse_scale_dict(obj: Any, index: int = 0) -> ColorScale | None:
    """Build a ColorScale from a decoded JSON object, or None if it is malformed."""
    if not isinstance(obj, dict):
        logger.warning('Scale #%d is not an object, skipping', index)
        return None
    name = str(obj.get('name') or f'scale-{index + 1}')
    try:
        if 'hue' not in obj:
            raise ValueError('missing hue')
        mode = obj.get('contrastMode', 'standard')
        if mode not in _CONTRAST_MODES:
            raise ValueError(f'unknown contrastMode {mode!r}')
        compensation = obj.get('chromaCompensation')
        return ColorScale(
            name=name,
            id=str(obj.get('id', name)),
            hue=float(obj['hue']),
            manual_chroma=float(obj.get('manualChroma', 0.1)),
            hue_curve=_curve(obj.get('hueCurve'), 'hueCurve'),
            chroma_curve=_curve(obj.get('chromaCurve'), 'chromaCurve'),
            contrast_mode=mode,
            chroma_compensation=None if compensation is None else bool(compensation),
            target_background=obj.get('targetBackground'),
            apca_tolerance=obj.get('apcaTolerance'),
            apca_target_lc=obj.get('apcaTargetLc'),
            wcag_target_ratio=obj.get('wcagTargetRatio'),
            custom_lightness_steps=_steps(obj.get('customLightnessSteps')),
            contrast_threshold=_threshold(obj.get('contrastThreshold')),
        )
    except (TypeError, ValueError) as exc:
        logger.warning('Skipping malformed scale %r: %s', name, exc)
        return None


def parse_scale_string(text: str) -> ScaleFile | None:
    """Parse scale JSON from a string. Returns None if nothing usable is found."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning('Scale file is not valid JSON: %s', exc)
        return None

    if isinstance(data, dict) and 'scales' in data:
        raw_scales = data['scales'] if isinstance(data['scales'], list) else []
        try:
            steps = _steps(data.get('steps'))
        except (TypeError, ValueError) as exc:
            logger.warning('Ignoring malformed steps: %s', exc)
            steps = None
    else:
        raw_scales = data if isinstance(data, list) else [data]
        steps = None

    scales = []
    for i, obj in enumerate(raw_scales):
        scale = parse_scale_dict(obj, i)
        if scale is not None:
            scales.append(scale)
    if not scales:
        logger.warning('No usable scales found')
        return None
    return ScaleFile(scales=scales, steps=steps)


def _read_text(path: str | Path, label: str) -> str | None:
    try:
        return Path(path).read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning('Cannot read %s file %s: %s', label, path, exc)
        return None


def load_scale_file(path: str | Path) -> ScaleFile | None:
    """Parse a scale file from disk. Unreadable or non-UTF-8 files yield None."""
    text = _read_text(path, 'scale')
    return None if text is None else parse_scale_string(text)


def parse_preset_json(text: str) -> ContrastThreshold | None:
    """Import a contrast preset exported as JSON ({type, value} or a threshold block)."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning('Preset is not valid JSON: %s', exc)
        return None
    if not isinstance(data, dict):
        logger.warning('Preset must be a JSON object')
        return None

    if 'type' in data and 'value' in data:
        try:
            value = float(data['value'])
        except (TypeError, ValueError):
            logger.warning('Preset value %r is not a number', data['value'])
            return None
        if data['type'] == 'apca':
            return ContrastThreshold(use_apca=True, min_apca=value)
        if data['type'] == 'wcag':
            return ContrastThreshold(use_apca=False, min_wcag=value)
        logger.warning('Unknown preset type %r', data['type'])
        return None

    try:
        threshold = _threshold(data)
    except (TypeError, ValueError) as exc:
        logger.warning('Malformed preset: %s', exc)
        return None
    if threshold is None or not threshold.has_bounds:
        logger.warning('Preset defines no thresholds')
        return None
    return threshold


def load_preset_file(path: str | Path) -> ContrastThreshold | None:
    """Import an exported preset from disk. Unreadable or non-UTF-8 files yield None."""
    text = _read_text(path, 'preset')
    return None if text is None else parse_preset_json(text)


def dump_scale(scale: ColorScale, lightness_steps: tuple[int, ...] | None = None) -> dict[str, Any]:
    """Serialise a scale back to the camelCase JSON shape."""
    obj: dict[str, Any] = {
        'id': scale.id,
        'name': scale.name,
        'hue': scale.hue,
        'manualChroma': round(scale.manual_chroma, 6),
        'hueCurve': {'shift': scale.hue_curve.shift, 'power': scale.hue_curve.power},
        'chromaCurve': {'shift': scale.chroma_curve.shift, 'power': scale.chroma_curve.power},
        'contrastMode': scale.contrast_mode,
    }
    if scale.chroma_compensation is not None:
        obj['chromaCompensation'] = scale.chroma_compensation
    if scale.target_background is not None:
        obj['targetBackground'] = scale.target_background
    steps = lightness_steps or scale.custom_lightness_steps
    if steps:
        obj['customLightnessSteps'] = list(steps)
    return obj


def write_scale_file(path: Path, scales: list[dict[str, Any]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({'scales': scales}, indent=2) + '\n', encoding='utf-8')

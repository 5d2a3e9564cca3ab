"""Named backgrounds: the canvas presets, the three reference keys and raw hex.

A scale's targetBackground may be any of these. map_background_to_contrast_key()
picks which precomputed contrast figure applies; resolve_background_hex()
turns the name into a concrete colour for searches and recommendations.
"""

import logging
import re

from lumat_checker.core.contrast import REFERENCE_BLACK, REFERENCE_GRAY, REFERENCE_WHITE
from lumat_checker.core.types import ContrastKey

logger = logging.getLogger(__name__)

DEFAULT_BACKGROUND = 'canvas-bg'

# Canvas presets: (hex, lightness percentage)
BACKGROUND_PRESETS: dict[str, tuple[str, int]] = {
    'canvas-bg': ('#ffffff', 100),
    'canvas-bg-lv1': ('#f7f8ff', 98),
    'canvas-bg-lv2': ('#dcdde6', 90),
    'canvas-bg-lv2 (E)': ('#23242b', 26),
    'canvas-bg-lv1 (E)': ('#13141a', 20),
    'canvas-bg (E)': ('#07070d', 14),
}

_BACKGROUND_KEYS: dict[str, ContrastKey] = {
    'white': 'white',
    'light1': 'white',
    'light2': 'gray',
    'gray': 'gray',
    'black': 'black',
    'dark1': 'black',
    'dark2': 'black',
    'contrast': 'black',
    'canvas-bg': 'white',
    'canvas-bg-lv1': 'white',
    'canvas-bg-lv2': 'gray',
    'canvas-bg (E)': 'black',
    'canvas-bg-lv1 (E)': 'black',
    'canvas-bg-lv2 (E)': 'black',
}

_REFERENCE_HEX: dict[ContrastKey, str] = {
    'white': REFERENCE_WHITE.hex,
    'gray': REFERENCE_GRAY.hex,
    'black': REFERENCE_BLACK.hex,
}

_HEX_RE = re.compile(r'^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$')


def map_background_to_contrast_key(name: str) -> ContrastKey:
    """Map a background preset name to the precomputed contrast figure it should use."""
    if name in _BACKGROUND_KEYS:
        return _BACKGROUND_KEYS[name]

    # L<digits> lightness hint, e.g. 'surface-L20'
    m = re.search(r'L(\d+)', name, re.IGNORECASE)
    if m:
        lightness = int(m.group(1))
        if lightness < 40:
            return 'black'
        if lightness >= 85:
            return 'white'
        return 'gray'

    lowered = name.lower()
    if any(word in lowered for word in ('dark', 'black', 'contrast')):
        return 'black'
    if any(word in lowered for word in ('light', 'canvas')):
        return 'white'

    logger.warning('Unknown background preset %r, defaulting to gray for contrast calculation', name)
    return 'gray'


def resolve_background_hex(name: str | None) -> str | None:
    """Concrete hex for a background: a hex as given, a canvas preset's colour, else its reference colour."""
    if not name:
        return None
    if _HEX_RE.match(name):
        return name
    if name in BACKGROUND_PRESETS:
        return BACKGROUND_PRESETS[name][0]
    return _REFERENCE_HEX[map_background_to_contrast_key(name)]

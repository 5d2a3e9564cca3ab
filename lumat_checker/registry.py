"""Technique auto-discovery and registration.

Scans lumat_checker/techniques/ for modules that define a `technique` object
of type Technique and collects them into a dict keyed by name. Frozen
binaries, where pkgutil.iter_modules returns nothing, fall back to the known
module list below.
"""

import importlib
import logging
import pkgutil

from lumat_checker.core.types import Technique

logger = logging.getLogger(__name__)

_registry: dict[str, Technique] = {}

# Known technique module names: fallback for frozen binaries
_TECHNIQUE_MODULES = [
    'all',
    'autofix',
    'compliance',
    'guidelines',
    'matrix',
    'opacity',
    'pairs',
    'recommend',
]


def discover() -> dict[str, Technique]:
    """Import all technique modules and return the registry."""
    if _registry:
        return _registry

    import lumat_checker.techniques as pkg

    found_modules = [
        modname for _importer, modname, _ispkg in pkgutil.iter_modules(pkg.__path__) if not modname.startswith('_')
    ]
    if not found_modules:
        found_modules = _TECHNIQUE_MODULES

    for modname in found_modules:
        module = importlib.import_module(f'lumat_checker.techniques.{modname}')
        tech = getattr(module, 'technique', None)
        if isinstance(tech, Technique):
            _registry[tech.name] = tech
        else:
            logger.debug('techniques.%s defines no technique, skipped', modname)

    return _registry


def get(name: str) -> Technique:
    """Get a technique by name."""
    reg = discover()
    if name not in reg:
        raise KeyError(f'Unknown technique: {name}. Available: {", ".join(sorted(reg))}')
    return reg[name]


def all_techniques() -> dict[str, Technique]:
    return discover()

"""Settings and environment loading for lumat-tool.

Settings.load() merges, first wins:
  1. OS environment variables.
  2. LUMAT_* lines of the .env file given by --env-file, or else of the
     nearest .env walking up from the working directory (stopping at the
     directory that holds .git).

The process environment is read, never modified.

Recognised variables:
  LUMAT_STEP_LABELS   comma-separated step labels (default 100,90,...,0)
  LUMAT_APCA_PASS     |Lc| at or above which a pair passes (default 60)
  LUMAT_LOG_LEVEL     logging level name (default WARNING)

The threshold tables live on an immutable Settings value that is loaded once
and handed to every function that needs it.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path

logger = logging.getLogger(__name__)

_ENV_PREFIX = 'LUMAT_'

DEFAULT_STEP_LABELS: tuple[int, ...] = (100, 90, 80, 70, 60, 50, 40, 30, 20, 15, 12, 10, 7, 5, 3, 0)

# Editor lightness ramp; the optimizer keeps its endpoints 98 and 14 fixed
LIGHTNESS_STEPS: tuple[int, ...] = (98, 96, 93, 90, 85, 80, 70, 60, 48, 40, 32, 26, 20, 17, 14)


@dataclass(frozen=True)
class WcagThresholds:
    aa_normal: float = 4.5
    aa_large: float = 3.0
    aaa_normal: float = 7.0
    aaa_large: float = 4.5


@dataclass(frozen=True)
class Settings:
    wcag: WcagThresholds = WcagThresholds()
    apca_pass: float = 60.0
    step_labels: tuple[int, ...] = DEFAULT_STEP_LABELS
    log_level: str = 'WARNING'

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> 'Settings':
        """Build settings from LUMAT_* variables. Malformed values are logged and ignored."""
        env = os.environ if environ is None else environ
        settings = cls()

        raw_labels = env.get('LUMAT_STEP_LABELS')
        if raw_labels:
            try:
                labels = tuple(int(part) for part in raw_labels.split(',') if part.strip())
            except ValueError:
                logger.warning('Ignoring malformed LUMAT_STEP_LABELS=%r', raw_labels)
            else:
                if labels:
                    settings = replace(settings, step_labels=labels)

        raw_pass = env.get('LUMAT_APCA_PASS')
        if raw_pass:
            try:
                settings = replace(settings, apca_pass=float(raw_pass))
            except ValueError:
                logger.warning('Ignoring malformed LUMAT_APCA_PASS=%r', raw_pass)

        raw_level = env.get('LUMAT_LOG_LEVEL')
        if raw_level:
            level = raw_level.strip().upper()
            if isinstance(logging.getLevelName(level), int):
                settings = replace(settings, log_level=level)
            else:
                logger.warning('Ignoring unknown LUMAT_LOG_LEVEL=%r', raw_level)

        return settings

    @classmethod
    def load(
        cls, env_file: str | Path | None = None, environ: Mapping[str, str] | None = None
    ) -> tuple['Settings', Path | None]:
        """Settings from an env file overlaid by the process environment.

        Without env_file the nearest .env above the working directory is used.
        Returns the settings and the env file that was read, if any.
        os.environ is only read, never written.
        """
        if env_file:
            path: Path | None = Path(env_file)
            if not path.is_file():
                logger.warning('env file not found: %s', env_file)
                path = None
        else:
            path = find_env_file(Path.cwd().resolve())

        merged = read_env_file(path) if path else {}
        merged.update(os.environ if environ is None else environ)
        return cls.from_env(merged), path


DEFAULT_SETTINGS = Settings()


def find_env_file(start: Path) -> Path | None:
    """Nearest .env at or above start, not looking past a directory holding .git."""
    for directory in (start, *start.parents):
        if (directory / '.env').is_file():
            return directory / '.env'
        if (directory / '.git').exists():
            return None
    return None


def read_env_file(path: Path) -> dict[str, str]:
    """LUMAT_* assignments from an env file. Unreadable files are logged and yield {}."""
    try:
        lines = path.read_text(encoding='utf-8').splitlines()
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning('Cannot read env file %s: %s', path, exc)
        return {}
    values: dict[str, str] = {}
    for line in lines:
        key, sep, value = line.strip().partition('=')
        key = key.removeprefix('export ').strip()
        if sep and key.startswith(_ENV_PREFIX):
            values[key] = value.strip().strip('"').strip("'")
    return values


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format='%(levelname)s %(name)s: %(message)s',
        force=True,
    )

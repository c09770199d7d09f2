"""Environment configuration for cosaf.

Load order (first wins):
  1. Existing OS environment variables, never overwritten.
  2. .env file at --env-file path (if explicitly provided).
  3. .env file walking up from cwd, stopping at .git (file or dir).

Walking stops at .git so we never load a .env from outside the repo.
Only sets variables that are NOT already in os.environ.

`parameters_from_env` then overlays COSAF_* variables on the Parameters
defaults:

  COSAF_TIME_LIMIT           milliseconds, or 'none'
  COSAF_TARGET_DESIRABILITY  0..1, or 'none'
  COSAF_SOLVER               fc | srs3 | breakout
  COSAF_RATIO_MODE           bool
  COSAF_RATIO_PER_VISION     bool
  COSAF_RESOLUTION           Lab grid step
  COSAF_MAX_DIFFERENCE       CIE76 radius of the global_radius domains
  COSAF_HUE_TOLERANCE        hue steps
  COSAF_TONE_TOLERANCE       tone units
  COSAF_CONSPICUITY_RATE     enables conspicuity weighting when set
  COSAF_BOTTLENECK           bool
  COSAF_VISIONS              subset of 'TPDM', e.g. 'PD'
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from cosaf.core.parameters import Parameters
from cosaf.core.types import SolverType, Vision

PREFIX = 'COSAF_'

_TRUE = {'1', 'true', 'yes', 'on'}
_FALSE = {'0', 'false', 'no', 'off'}
_VISION_LETTERS = {'T': Vision.TRICHROMACY, 'P': Vision.PROTANOPIA, 'D': Vision.DEUTERANOPIA, 'M': Vision.MONOCHROMACY}


def _find_dotenv(start: Path) -> Path | None:
    """Walk up from start, return first .env found, stop at .git boundary."""
    current = start.resolve()
    while True:
        candidate = current / '.env'
        if candidate.is_file():
            return candidate
        # .git can be a dir (normal clone) or a file (worktree)
        if (current / '.git').exists():
            return None
        parent = current.parent
        if parent == current:
            return None
        current = parent


def _parse_dotenv(path: Path) -> dict[str, str]:
    """Parse a .env file into a dict. Handles KEY=value and KEY="value"."""
    result: dict[str, str] = {}
    for line in path.read_text(encoding='utf-8').splitlines():
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        if '=' not in line:
            continue
        key, _, raw_value = line.partition('=')
        key = key.strip()
        if key.startswith('export '):
            key = key[len('export ') :].strip()
        value = raw_value.strip().strip('"').strip("'")
        if key:
            result[key] = value
    return result


def load_env(env_file: str | None = None) -> Path | None:
    """Load .env into os.environ for keys not already set.

    Returns the path that was loaded, or None if no .env was found/used.
    """
    if env_file:
        path = Path(env_file)
        if not path.is_file():
            return None
    else:
        path = _find_dotenv(Path.cwd())
        if path is None:
            return None

    parsed = _parse_dotenv(path)
    for key, value in parsed.items():
        if key not in os.environ:
            os.environ[key] = value

    return path


# -----------------------------------------------------------------------------
# Parameters
# -----------------------------------------------------------------------------


def parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f'Expected a boolean, got {raw!r}')


def _optional(convert: Callable[[str], Any]) -> Callable[[str], Any]:
    def parse(raw: str) -> Any:
        return None if raw.strip().lower() in ('', 'none') else convert(raw)

    return parse


def parse_solver(raw: str) -> SolverType:
    try:
        return SolverType(raw.strip().lower())
    except ValueError:
        choices = ', '.join(s.value for s in SolverType)
        raise ValueError(f'Unknown solver: {raw!r}. Expected one of: {choices}') from None


def parse_visions(raw: str) -> dict[Vision, bool]:
    """'PD' -> protanopia and deuteranopia checked, the rest not."""
    letters = raw.strip().upper()
    unknown = set(letters) - set(_VISION_LETTERS)
    if unknown:
        raise ValueError(f'Unknown vision letters: {"".join(sorted(unknown))}. Expected a subset of TPDM')
    return {vision: letter in letters for letter, vision in _VISION_LETTERS.items()}


_FIELDS: dict[str, tuple[str, Callable[[str], Any]]] = {
    'TIME_LIMIT': ('time_limit', _optional(int)),
    'TARGET_DESIRABILITY': ('target_desirability', _optional(float)),
    'SOLVER': ('solver', parse_solver),
    'RATIO_MODE': ('ratio_mode', parse_bool),
    'RATIO_PER_VISION': ('ratio_per_vision', parse_bool),
    'RESOLUTION': ('resolution', float),
    'MAX_DIFFERENCE': ('max_difference', float),
    'HUE_TOLERANCE': ('hue_tolerance', float),
    'TONE_TOLERANCE': ('tone_tolerance', float),
    'CONSPICUITY_RATE': ('conspicuity_rate', float),
    'BOTTLENECK': ('bottleneck_resolved', parse_bool),
    'VISIONS': ('vision_checks', parse_visions),
}


def parameters_from_env(environ: Mapping[str, str] | None = None, base: Parameters | None = None) -> Parameters:
    """Parameters with every COSAF_* variable of `environ` (os.environ by default) applied."""
    environ = os.environ if environ is None else environ
    params = base or Parameters()
    for suffix, (attr, convert) in _FIELDS.items():
        key = PREFIX + suffix
        if key not in environ:
            continue
        try:
            value = convert(environ[key])
        except ValueError as e:
            raise ValueError(f'{key}: {e}') from e
        setattr(params, attr, value)
        if suffix == 'CONSPICUITY_RATE':
            params.conspicuity_checked = True
    return params

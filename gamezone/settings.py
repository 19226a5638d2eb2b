"""Application settings: built-in defaults, an optional JSON file, and
environment-variable overrides (environment wins).

Environment variables:

- ``GAMEZONE_DATA_DIR``      overrides ``data_dir``
- ``RAWG_API_KEY``           overrides ``catalog.api_key``
- ``GAMEZONE_LOG_LEVEL``     overrides ``log_level``
- ``GAMEZONE_LATENCY_SCALE`` multiplies every ``latency`` entry (``0`` disables)
"""
import copy
import json
import logging
import os
from typing import Dict, Optional

from .exceptions import ConfigError

logger = logging.getLogger('gamezone.settings')

# Simulated round-trip delays in seconds.  Profile and favourites reads are
# deliberately shorter than the write paths.
DEFAULT_LATENCY: Dict[str, float] = {
    'auth': 0.5,
    'profile': 0.15,
    'favorites_read': 0.1,
    'favorites_write': 0.3,
    'reviews': 0.3,
}

DEFAULT_SETTINGS: Dict = {
    'data_dir': '.gamezone',
    'seed_defaults': True,
    'sso_user_id': 'google-user-007',
    'log_level': 'WARNING',
    'watch_interval': 1.0,
    'latency': dict(DEFAULT_LATENCY),
    'catalog': {
        'base_url': 'https://api.rawg.io/api',
        'api_key': '',
        'timeout': 10,
    },
}


def _merge(base: Dict, overrides: Dict) -> Dict:
    """Recursively merge *overrides* into a copy of *base*."""
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(path: Optional[str] = None) -> Dict:
    """Return the effective settings dict.

    Args:
        path: Optional JSON settings file.  A missing file is not an error;
              a file that is not valid JSON (or not an object) is.

    Raises:
        ConfigError: If *path* exists but cannot be parsed, or an environment
            override has the wrong type.
    """
    settings = copy.deepcopy(DEFAULT_SETTINGS)

    if path and os.path.exists(path):
        try:
            with open(path, 'r') as fh:
                data = json.load(fh)
        except (json.JSONDecodeError, IOError) as exc:
            raise ConfigError(f"Could not load settings file {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Settings file {path} must contain a JSON object")
        settings = _merge(settings, data)
        logger.info("Loaded settings from %s", path)

    if os.getenv('GAMEZONE_DATA_DIR'):
        settings['data_dir'] = os.getenv('GAMEZONE_DATA_DIR')
    if os.getenv('RAWG_API_KEY'):
        settings['catalog']['api_key'] = os.getenv('RAWG_API_KEY')
    if os.getenv('GAMEZONE_LOG_LEVEL'):
        settings['log_level'] = os.getenv('GAMEZONE_LOG_LEVEL')
    scale = os.getenv('GAMEZONE_LATENCY_SCALE')
    if scale:
        try:
            factor = float(scale)
        except ValueError as exc:
            raise ConfigError(f"GAMEZONE_LATENCY_SCALE must be a number, got {scale!r}") from exc
        settings['latency'] = {
            name: max(0.0, float(delay) * factor)
            for name, delay in settings['latency'].items()
        }

    return settings

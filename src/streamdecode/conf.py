"""User defaults and config persistence for streamdecode.

Config is stored at ~/.config/streamdecode/config.json (XDG-compliant).
Only the CLI reads it; library callers pass every value explicitly.

Usage:
    from streamdecode.conf import settings

    settings.subsampling_level   # default SubsamplingLevel for extract
    settings.max_image_pixels    # decompression-bomb limit for Pillow
    settings.chunk_size          # bytes per chunk for `streamdecode stream`

    # Low-level config access
    from streamdecode.conf import load_config, save_config
"""
from __future__ import annotations

import json
import logging
import os

from .core.models import SubsamplingLevel

log = logging.getLogger(__name__)

# =========================================================================
# Config file location (XDG-compliant)
# =========================================================================

_XDG_CONFIG = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
CONFIG_DIR = os.path.join(_XDG_CONFIG, 'streamdecode')
CONFIG_PATH = os.path.join(CONFIG_DIR, 'config.json')

# Pillow's own default limit
DEFAULT_MAX_IMAGE_PIXELS = int(1024 * 1024 * 1024 // 4 // 3)
DEFAULT_CHUNK_SIZE = 4096


# =========================================================================
# Low-level config persistence
# =========================================================================

def load_config() -> dict:
    """Load user config from disk. Returns empty dict on missing/corrupt file."""
    try:
        with open(CONFIG_PATH, 'r') as f:
            config = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return {}
    return config if isinstance(config, dict) else {}


def save_config(config: dict):
    """Save user config to disk."""
    os.makedirs(os.path.dirname(CONFIG_PATH), exist_ok=True)
    with open(CONFIG_PATH, 'w') as f:
        json.dump(config, f, indent=2)


def _save_value(key: str, value):
    config = load_config()
    config[key] = value
    save_config(config)


# =========================================================================
# Decode defaults
# =========================================================================

def get_default_subsampling_level() -> SubsamplingLevel:
    """Saved subsampling level; falls back to no subsampling on bad values."""
    value = load_config().get('subsampling_level', int(SubsamplingLevel.DEFAULT))
    try:
        return SubsamplingLevel(value)
    except ValueError:
        log.warning("Ignoring invalid subsampling_level %r in %s", value, CONFIG_PATH)
        return SubsamplingLevel.DEFAULT


def save_default_subsampling_level(level: SubsamplingLevel):
    _save_value('subsampling_level', int(level))


def get_max_image_pixels() -> int:
    value = load_config().get('max_image_pixels', DEFAULT_MAX_IMAGE_PIXELS)
    if isinstance(value, int) and value > 0:
        return value
    return DEFAULT_MAX_IMAGE_PIXELS


def save_max_image_pixels(pixels: int):
    _save_value('max_image_pixels', pixels)


def get_chunk_size() -> int:
    value = load_config().get('chunk_size', DEFAULT_CHUNK_SIZE)
    if isinstance(value, int) and value > 0:
        return value
    return DEFAULT_CHUNK_SIZE


def save_chunk_size(size: int):
    _save_value('chunk_size', size)


# =========================================================================
# Settings singleton
# =========================================================================

class Settings:
    """Process-wide defaults, loaded once from config.json.

    Setters update the in-memory value and persist it.
    """

    def __init__(self) -> None:
        self._subsampling_level = get_default_subsampling_level()
        self._max_image_pixels = get_max_image_pixels()
        self._chunk_size = get_chunk_size()

    @property
    def subsampling_level(self) -> SubsamplingLevel:
        return self._subsampling_level

    @property
    def max_image_pixels(self) -> int:
        return self._max_image_pixels

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    def set_subsampling_level(self, level: SubsamplingLevel) -> None:
        level = SubsamplingLevel(level)
        log.info("Settings: subsampling level %d → %d",
                 self._subsampling_level, level)
        self._subsampling_level = level
        save_default_subsampling_level(self._subsampling_level)

    def set_max_image_pixels(self, pixels: int) -> None:
        self._max_image_pixels = pixels
        save_max_image_pixels(pixels)

    def set_chunk_size(self, size: int) -> None:
        self._chunk_size = size
        save_chunk_size(size)

    def reload(self) -> None:
        """Re-read config.json."""
        self.__init__()


# Module-level singleton, import and use directly
settings = Settings()

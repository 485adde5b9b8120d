"""
ReadWeaver v0.1.0

Configuration management for ReadWeaver.

Author: ReadWeaver Development Team
License: Dual License (Academic/Commercial)
"""

from .parser import ConfigParser
from .presets import PLATFORM_PRESETS, get_preset, list_presets
from .schema import DEFAULT_CONFIG, build_settings, load_config, validate_config

__all__ = [
    "ConfigParser",
    "DEFAULT_CONFIG",
    "PLATFORM_PRESETS",
    "build_settings",
    "get_preset",
    "list_presets",
    "load_config",
    "validate_config",
]

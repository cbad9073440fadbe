"""
Configuration parsing with nginx-like syntax.
"""

from .loader import ConfigError, ConfigLoader, load_config
from .schema import CollectionMode, Config

__all__ = [
    "CollectionMode",
    "Config",
    "ConfigError",
    "ConfigLoader",
    "load_config",
]

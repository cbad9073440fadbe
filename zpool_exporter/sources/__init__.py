"""
Sources that query the ZFS subsystem for pool state and vdev trees.
"""

from .base import PoolSource, SourceError
from .libzfs import LibzfsSource

__all__ = [
    "PoolSource",
    "SourceError",
    "LibzfsSource",
]

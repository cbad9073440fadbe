"""
Data models for pools and vdevs.
"""

from .pool import (
    POOL_STATUS_NAMES,
    ZIO_TYPE_NAMES,
    Pool,
    PoolState,
    VdevNode,
    VdevState,
    ZIOType,
)

__all__ = [
    "Pool",
    "PoolState",
    "VdevNode",
    "VdevState",
    "ZIOType",
    "ZIO_TYPE_NAMES",
    "POOL_STATUS_NAMES",
]

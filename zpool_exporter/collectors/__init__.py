"""
Collection pipeline: vdev tree walk, metric extraction and pool passes.
"""

from .extract import error_count_sample, pool_samples, vdev_samples
from .walker import visit_vdevs
from .zpool import PassResult, PoolCollector, PoolErrors, select_pools

__all__ = [
    "visit_vdevs",
    "pool_samples",
    "vdev_samples",
    "error_count_sample",
    "PassResult",
    "PoolCollector",
    "PoolErrors",
    "select_pools",
]

"""
Pool collection passes.

A pass walks every selected pool in order, converting its state, status
and vdev tree to samples. Query failures never abort a pass: they are
logged, replaced with sentinel values or a skipped vdev tree, and counted
in the pool's collection error counter, which lives for the lifetime of
the process.
"""

import fnmatch
import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from prometheus_client.metrics_core import Metric

from ..const import QUERY_FAILED
from ..exporter.metrics import Sample, build_families
from ..logging import get_logger
from ..models.pool import Pool, VdevNode
from ..sources.base import PoolSource, SourceError
from .extract import error_count_sample, pool_samples, vdev_samples
from .walker import visit_vdevs


logger = get_logger("collector")


class PoolErrors:
    """
    Per-pool collection error counters.

    Counters are created at zero the first time a pool is seen and only
    ever grow. Access is serialized so a scrape can read while a pass
    is updating.
    """

    def __init__(self):
        self._counts: dict[str, int] = {}
        self._lock = threading.Lock()

    def ensure(self, pool_name: str) -> None:
        """Register a pool with a zero count if it is new."""
        with self._lock:
            self._counts.setdefault(pool_name, 0)

    def increment(self, pool_name: str) -> int:
        """Count one failed query and return the new total."""
        with self._lock:
            self._counts[pool_name] = self._counts.get(pool_name, 0) + 1
            return self._counts[pool_name]

    def get(self, pool_name: str) -> int:
        with self._lock:
            return self._counts.get(pool_name, 0)

    def snapshot(self) -> dict[str, int]:
        """Copy of all counters."""
        with self._lock:
            return dict(self._counts)


@dataclass
class PassResult:
    """Result of one collection pass."""

    # Samples for all pools, in pool order
    samples: list[Sample] = field(default_factory=list)

    # Number of pools visited
    pools: int = 0

    # Pools that had at least one failed query
    failed_pools: list[str] = field(default_factory=list)

    # Wall-clock duration of the pass in seconds
    duration: float = 0.0

    def families(self) -> list[Metric]:
        """Group samples into Prometheus metric families."""
        return build_families(self.samples)

    def __repr__(self) -> str:
        return (
            f"PassResult({self.pools} pools, {len(self.samples)} samples, "
            f"{len(self.failed_pools)} failed, {self.duration:.3f}s)"
        )


def select_pools(
    pools: Iterable[Pool],
    filters: list[str] | None = None,
    excludes: list[str] | None = None,
) -> list[Pool]:
    """
    Select pools by name using glob patterns.

    Args:
        pools: Pools in enumeration order
        filters: Keep only pools matching one of these (all if empty)
        excludes: Drop pools matching one of these

    Returns:
        Selected pools, order preserved
    """
    selected = []
    for pool in pools:
        if filters and not any(fnmatch.fnmatch(pool.name, pattern) for pattern in filters):
            continue
        if excludes and any(fnmatch.fnmatch(pool.name, pattern) for pattern in excludes):
            continue
        selected.append(pool)
    return selected


class PoolCollector:
    """
    Runs collection passes over a fixed list of pools.

    The pool list is enumerated once, when the exporter starts; each pass
    refreshes and re-queries every pool on that list.
    """

    def __init__(
        self,
        source: PoolSource,
        pools: list[Pool],
        errors: PoolErrors | None = None,
    ):
        """
        Initialize collector.

        Args:
            source: Backend answering pool queries
            pools: Pools to collect, in collection order
            errors: Error counters (a fresh set if not provided)
        """
        self.source = source
        self.pools = list(pools)
        self.errors = errors if errors is not None else PoolErrors()

        for pool in self.pools:
            self.errors.ensure(self.source.pool_name(pool))

    def _query_code(self, pool: Pool, pool_name: str, query: Callable[[Pool], int]) -> int:
        """Run a state/status query, counting failures and returning -1 for them."""
        try:
            return int(query(pool))
        except SourceError as e:
            logger.warning(f"{e}")
            self.errors.increment(pool_name)
            return QUERY_FAILED

    def collect_pool(self, pool: Pool) -> list[Sample]:
        """
        Collect samples for a single pool.

        Args:
            pool: Pool to query

        Returns:
            Pool samples, the error counter sample, then vdev samples in
            pre-order (omitted if the vdev tree could not be read)
        """
        pool_name = self.source.pool_name(pool)
        self.errors.ensure(pool_name)

        try:
            self.source.refresh_stats(pool)
        except SourceError as e:
            logger.warning(f"{e}")
            self.errors.increment(pool_name)

        state = self._query_code(pool, pool_name, self.source.get_state)
        status = self._query_code(pool, pool_name, self.source.get_status)
        samples = pool_samples(pool_name, state, status)

        device_samples: list[Sample] = []

        def visit(vdev: VdevNode) -> None:
            device_samples.extend(vdev_samples(pool_name, vdev))

        try:
            visit_vdevs(self.source.get_device_tree(pool), visit)
        except SourceError as e:
            logger.warning(f"{e}")
            self.errors.increment(pool_name)
            device_samples.clear()
        except Exception as e:
            logger.exception(f"Unexpected error reading vdevs of pool '{pool_name}': {e}")
            self.errors.increment(pool_name)
            device_samples.clear()

        samples.append(error_count_sample(pool_name, self.errors.get(pool_name)))
        samples.extend(device_samples)

        return samples

    def run_pass(self) -> PassResult:
        """
        Collect all pools once.

        A pool that raises unexpectedly before its state and status are
        known (e.g. during refresh) is reported with sentinel state and
        status and its error counter; no vdev samples are kept for it.

        Returns:
            PassResult with samples for every pool
        """
        result = PassResult()
        started = time.monotonic()

        for pool in self.pools:
            pool_name = self.source.pool_name(pool)
            errors_before = self.errors.get(pool_name)

            try:
                result.samples.extend(self.collect_pool(pool))
            except Exception as e:
                logger.exception(f"Unexpected error collecting pool '{pool_name}': {e}")
                self.errors.increment(pool_name)
                result.samples.extend(pool_samples(pool_name, QUERY_FAILED, QUERY_FAILED))
                result.samples.append(error_count_sample(pool_name, self.errors.get(pool_name)))

            if self.errors.get(pool_name) != errors_before:
                result.failed_pools.append(pool_name)
            result.pools += 1

        result.duration = time.monotonic() - started
        logger.debug(f"Collection pass finished: {result}")
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.source!r}, {len(self.pools)} pools)"

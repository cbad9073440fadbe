"""
Prometheus collectors exposing pool metrics.

Two disciplines are supported:
- OnDemandCollector queries all pools on every scrape
- SnapshotCollector serves the families stored by the background poller
"""

import threading
from collections.abc import Iterator

from prometheus_client.metrics_core import Metric
from prometheus_client.registry import Collector

from ..collectors.zpool import PoolCollector
from ..logging import get_logger
from .metrics import describe_families


logger = get_logger("collector.registry")


class OnDemandCollector(Collector):
    """
    Runs a collection pass for each scrape.

    Concurrent scrapes are serialized: a pass holds the lock from the
    first pool query until the last family is built.
    """

    def __init__(self, collector: PoolCollector):
        self.collector = collector
        self._lock = threading.Lock()
        self._collecting = False

    @property
    def collecting(self) -> bool:
        """Whether a pass is in progress."""
        return self._collecting

    def describe(self) -> Iterator[Metric]:
        return iter(describe_families())

    def collect(self) -> Iterator[Metric]:
        with self._lock:
            self._collecting = True
            try:
                result = self.collector.run_pass()
                families = result.families()
            finally:
                self._collecting = False

        if result.failed_pools:
            logger.info(f"Scrape completed with errors for: {', '.join(result.failed_pools)}")
        yield from families


class SnapshotCollector(Collector):
    """
    Serves the metric families of the most recent poll.

    Until the first poll completes, nothing is exposed.
    """

    def __init__(self):
        self._families: list[Metric] = []
        self._lock = threading.Lock()
        self._updates = 0

    def update(self, families: list[Metric]) -> None:
        """Replace the served families with those of a new pass."""
        with self._lock:
            self._families = list(families)
            self._updates += 1

    @property
    def updates(self) -> int:
        """Number of snapshots stored so far."""
        with self._lock:
            return self._updates

    def describe(self) -> Iterator[Metric]:
        return iter(describe_families())

    def collect(self) -> Iterator[Metric]:
        with self._lock:
            families = list(self._families)
        yield from families

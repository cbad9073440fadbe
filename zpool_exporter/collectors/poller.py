"""
Background polling of pools.

The poller runs a collection pass every interval and stores the result
in a SnapshotCollector, so scrapes never wait on ZFS queries and see
values at most one interval old.
"""

import asyncio

from ..const import DEFAULT_POLL_INTERVAL
from ..exporter.registry import SnapshotCollector
from ..logging import get_logger
from .zpool import PassResult, PoolCollector


logger = get_logger("poller")


class ZpoolPoller:
    """Polls pools on a fixed interval until stopped."""

    def __init__(
        self,
        collector: PoolCollector,
        snapshot: SnapshotCollector,
        interval: float = DEFAULT_POLL_INTERVAL,
    ):
        """
        Initialize poller.

        Args:
            collector: Pass runner over the pools selected at startup
            snapshot: Collector that serves the latest pass
            interval: Seconds to sleep between passes
        """
        self.collector = collector
        self.snapshot = snapshot
        self.interval = interval
        self._running = False
        self._passes = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def passes(self) -> int:
        """Number of completed passes."""
        return self._passes

    def poll_once(self) -> PassResult:
        """Run one pass and publish its families."""
        result = self.collector.run_pass()
        self.snapshot.update(result.families())
        self._passes += 1
        return result

    async def run(self, max_passes: int | None = None) -> None:
        """
        Poll until stopped.

        Each pass runs in a worker thread since libzfs calls block.
        Errors are logged and the loop carries on with the next interval.

        Args:
            max_passes: Stop after this many attempted passes (runs forever if None)
        """
        logger.info(
            f"Starting poller: {len(self.collector.pools)} pools, interval {self.interval}s"
        )
        self._running = True
        attempts = 0

        while self._running:
            try:
                result = await asyncio.to_thread(self.poll_once)
                if result.failed_pools:
                    logger.info(f"Poll completed with errors for: {', '.join(result.failed_pools)}")
            except Exception as e:
                logger.error(f"Error in poll loop: {e}")

            attempts += 1
            if max_passes is not None and attempts >= max_passes:
                break

            await asyncio.sleep(self.interval)

        self._running = False
        logger.info("Poller stopped")

    def stop(self) -> None:
        """Ask the loop to exit after the current pass."""
        self._running = False

    def __repr__(self) -> str:
        status = "running" if self._running else "stopped"
        return f"{self.__class__.__name__}({status}, {self.interval}s)"

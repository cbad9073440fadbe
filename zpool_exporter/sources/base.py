"""
Pool source interface.

A source is the boundary between the exporter and the ZFS subsystem. It
enumerates pools and answers per-pool queries; every query may fail with
SourceError, which the collection pipeline turns into sentinel values and
per-pool error counts.
"""

from abc import ABC, abstractmethod

from ..models.pool import Pool, VdevNode


class SourceError(Exception):
    """Raised when a query against the ZFS subsystem fails."""

    def __init__(self, message: str, pool: str | None = None):
        self.pool = pool
        if pool:
            super().__init__(f"pool '{pool}': {message}")
        else:
            super().__init__(message)


class PoolSource(ABC):
    """
    Abstract query interface for storage pools.

    Implementations must keep pool objects usable after a failed call, so
    that a failed refresh can be followed by state, status and tree
    queries on the same pool.
    """

    # Backend name for logging
    NAME: str = "unknown"

    @abstractmethod
    def list_pools(self) -> list[Pool]:
        """
        Enumerate currently imported pools.

        Raises:
            SourceError: If the pools cannot be opened
        """
        pass

    @abstractmethod
    def refresh_stats(self, pool: Pool) -> None:
        """Bring the pool's in-memory statistics up to date."""
        pass

    @abstractmethod
    def get_state(self, pool: Pool) -> int:
        """Get the pool state code (PoolState)."""
        pass

    @abstractmethod
    def get_status(self, pool: Pool) -> int:
        """Get the pool status code (index into POOL_STATUS_NAMES)."""
        pass

    @abstractmethod
    def get_device_tree(self, pool: Pool) -> VdevNode | None:
        """
        Get the pool's vdev tree.

        Returns:
            Root VdevNode, or None for a pool without devices
        """
        pass

    def pool_name(self, pool: Pool) -> str:
        """Stable identity of a pool."""
        return pool.name

    def close(self) -> None:
        """Release backend resources."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.NAME})"

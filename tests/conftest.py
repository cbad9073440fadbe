"""
Pytest configuration and fixtures.
"""

from collections.abc import Iterable

import pytest

from zpool_exporter.models.pool import Pool, VdevNode, VdevState
from zpool_exporter.sources.base import PoolSource, SourceError


def make_mirror_tree(pool_name: str, disks: Iterable[str] = ("sda", "sdb")) -> VdevNode:
    """root -> mirror-0 -> disks"""
    leaves = [
        VdevNode(
            name=disk,
            type="disk",
            state=VdevState.HEALTHY,
            allocated=100 * (i + 1),
            space=1000,
            ops=(0, 10 + i, 20 + i, 1, 0, 2),
            bytes=(0, 4096 * (i + 1), 8192 * (i + 1), 512, 0, 0),
        )
        for i, disk in enumerate(disks)
    ]
    mirror = VdevNode(
        name="mirror-0",
        type="mirror",
        state=VdevState.HEALTHY,
        allocated=300,
        space=1000,
        fragmentation=12,
        children=leaves,
    )
    return VdevNode(
        name=pool_name,
        type="root",
        state=VdevState.HEALTHY,
        allocated=300,
        space=1000,
        fragmentation=12,
        children=[mirror],
    )


class FakeSource(PoolSource):
    """
    In-memory pool source.

    Queries listed in `failures[pool_name]` ("refresh", "state", "status",
    "tree") raise SourceError; the set can be changed between passes.
    """

    NAME = "fake"

    def __init__(
        self,
        trees: dict[str, VdevNode | None] | None = None,
        states: dict[str, int] | None = None,
        statuses: dict[str, int] | None = None,
    ):
        self.trees = dict(trees or {})
        self.states = states or {}
        self.statuses = statuses or {}
        self.failures: dict[str, set[str]] = {}
        self.list_error: Exception | None = None
        self.calls: list[tuple[str, str]] = []

    def fail(self, pool_name: str, *queries: str) -> None:
        self.failures.setdefault(pool_name, set()).update(queries)

    def recover(self, pool_name: str) -> None:
        self.failures.pop(pool_name, None)

    def _call(self, query: str, pool: Pool) -> None:
        self.calls.append((query, pool.name))
        if query in self.failures.get(pool.name, ()):
            raise SourceError(f"{query} failed", pool.name)

    def list_pools(self) -> list[Pool]:
        if self.list_error is not None:
            raise self.list_error
        return [Pool(name=name) for name in self.trees]

    def refresh_stats(self, pool: Pool) -> None:
        self._call("refresh", pool)

    def get_state(self, pool: Pool) -> int:
        self._call("state", pool)
        return self.states.get(pool.name, 0)

    def get_status(self, pool: Pool) -> int:
        self._call("status", pool)
        return self.statuses.get(pool.name, 24)

    def get_device_tree(self, pool: Pool) -> VdevNode | None:
        self._call("tree", pool)
        return self.trees[pool.name]


@pytest.fixture
def fake_source() -> FakeSource:
    """Source with three healthy mirrored pools."""
    return FakeSource(
        trees={
            "tank": make_mirror_tree("tank"),
            "backup": make_mirror_tree("backup", ("sdc", "sdd")),
            "scratch": make_mirror_tree("scratch", ("nvme0n1", "nvme1n1")),
        }
    )


@pytest.fixture
def make_tree():
    """Factory for root -> mirror -> disks trees."""
    return make_mirror_tree


@pytest.fixture
def source_factory():
    """Factory for FakeSource instances."""
    return FakeSource

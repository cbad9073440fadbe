"""
Pool source backed by py-libzfs.

py-libzfs is the Cython binding to libzfs shipped with TrueNAS and the
FreeBSD ports tree (package py-libzfs). It is not published on PyPI, so
the module is imported when the source is created rather than at import
time of this module.

Values read:
- Pool state (pool_state_t) and status (zpool_status_t) codes
- vdev tree with per-vdev vdev_stat counters (ops, bytes, errors,
  allocated/total space, fragmentation)
"""

import importlib
from types import ModuleType
from typing import Any

from ..logging import get_logger
from ..models.pool import Pool, VdevNode, VdevState
from .base import PoolSource, SourceError


logger = get_logger("sources.libzfs")


def load_libzfs() -> ModuleType:
    """
    Import the libzfs binding.

    Raises:
        SourceError: If py-libzfs is not installed
    """
    try:
        return importlib.import_module("libzfs")
    except ImportError as e:
        raise SourceError(f"py-libzfs is not available: {e}") from e


def vdev_from_state(state: dict[str, Any], pool_name: str) -> VdevNode:
    """
    Build a VdevNode tree from a ZFSVdev.__getstate__() dictionary.

    The root vdev is named after its pool.

    Args:
        state: vdev state dict (name, type, status, stats, children)
        pool_name: Name of the owning pool

    Returns:
        Root VdevNode of the converted subtree
    """
    vdev_type = str(state.get("type") or "unknown")
    name = state.get("name") or state.get("path") or vdev_type
    if vdev_type == "root":
        name = pool_name

    stats = state.get("stats") or {}
    if not isinstance(stats, dict):
        stats = stats.__getstate__()

    return VdevNode(
        name=str(name),
        type=vdev_type,
        state=VdevState.from_name(state.get("status")),
        allocated=int(stats.get("allocated", 0)),
        space=int(stats.get("size", 0)),
        fragmentation=int(stats.get("fragmentation", 0)),
        read_errors=int(stats.get("read_errors", 0)),
        write_errors=int(stats.get("write_errors", 0)),
        checksum_errors=int(stats.get("checksum_errors", 0)),
        ops=stats.get("ops") or (),
        bytes=stats.get("bytes") or (),
        children=[vdev_from_state(child, pool_name) for child in state.get("children") or []],
    )


class LibzfsSource(PoolSource):
    """
    Query pools through py-libzfs.

    Pool handles are libzfs ZFSPool objects. Refreshing stats re-opens the
    pool by name, which reloads its config and vdev statistics.
    """

    NAME = "libzfs"

    def __init__(self, module: ModuleType | None = None):
        """
        Initialize source.

        Args:
            module: libzfs module to use (imported on demand if not given)
        """
        self._libzfs = module or load_libzfs()
        try:
            self._zfs = self._libzfs.ZFS()
        except self._errors as e:
            raise SourceError(f"unable to open libzfs handle: {e}") from e

    @property
    def _errors(self) -> tuple[type[BaseException], ...]:
        return (self._libzfs.ZFSException, OSError)

    def list_pools(self) -> list[Pool]:
        try:
            handles = list(self._zfs.pools)
        except self._errors as e:
            raise SourceError(f"error opening pools: {e}") from e

        pools = [Pool(name=str(handle.name), handle=handle) for handle in handles]
        logger.debug(f"Opened {len(pools)} pools: {', '.join(p.name for p in pools)}")
        return pools

    def refresh_stats(self, pool: Pool) -> None:
        try:
            pool.handle = self._zfs.get(pool.name)
        except self._errors as e:
            raise SourceError(f"unable to refresh stats: {e}", pool.name) from e

    def get_state(self, pool: Pool) -> int:
        try:
            return int(pool.handle.state.value)
        except self._errors as e:
            raise SourceError(f"error getting state: {e}", pool.name) from e

    def get_status(self, pool: Pool) -> int:
        try:
            return int(pool.handle.status_code.value)
        except self._errors as e:
            raise SourceError(f"error getting status: {e}", pool.name) from e

    def get_device_tree(self, pool: Pool) -> VdevNode | None:
        try:
            root = pool.handle.root_vdev
            if root is None:
                return None
            return vdev_from_state(root.__getstate__(), pool.name)
        except self._errors as e:
            raise SourceError(f"unable to read vdev tree: {e}", pool.name) from e
        except (TypeError, ValueError, KeyError, AttributeError) as e:
            raise SourceError(f"malformed vdev tree: {e}", pool.name) from e

"""
Pool and vdev data model.

Pools and vdev trees are snapshots taken from the ZFS subsystem on every
collection pass. They are never mutated by the exporter and are discarded
once their metrics have been extracted.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ZIOType(IntEnum):
    """I/O operation types, in the order libzfs indexes vdev_stat ops/bytes."""
    NULL = 0
    READ = 1
    WRITE = 2
    FREE = 3
    CLAIM = 4
    IOCTL = 5


# Label values for the vdevoptype label, indexed by ZIOType
ZIO_TYPE_NAMES = ("Null", "Read", "Write", "Free", "Claim", "IoCtl")


class VdevState(IntEnum):
    """vdev_state_t from libzfs."""
    UNKNOWN = 0
    CLOSED = 1
    OFFLINE = 2
    REMOVED = 3
    CANT_OPEN = 4
    FAULTED = 5
    DEGRADED = 6
    HEALTHY = 7

    @classmethod
    def from_name(cls, name: str | None) -> "VdevState":
        """
        Map a state name as printed by zpool status to the enum.

        "ONLINE" is the user-facing name of HEALTHY. Unrecognised names map
        to UNKNOWN. libzfs prints "UNAVAIL" for both CLOSED and CANT_OPEN,
        so a state read by name is never CLOSED.
        """
        if not name:
            return cls.UNKNOWN
        key = name.strip().upper().replace(" ", "_")
        if key == "ONLINE":
            return cls.HEALTHY
        if key == "UNAVAIL":
            return cls.CANT_OPEN
        try:
            return cls[key]
        except KeyError:
            return cls.UNKNOWN


class PoolState(IntEnum):
    """pool_state_t from libzfs."""
    ACTIVE = 0
    EXPORTED = 1
    DESTROYED = 2
    SPARE = 3
    L2CACHE = 4
    UNINITIALIZED = 5
    UNAVAIL = 6
    POTENTIALLY_ACTIVE = 7


# zpool_status_t from libzfs, in enum order
POOL_STATUS_NAMES = (
    "CorruptCache",
    "MissingDevR",
    "MissingDevNr",
    "CorruptLabelR",
    "CorruptLabelNr",
    "BadGUIDSum",
    "CorruptPool",
    "CorruptData",
    "FailingDev",
    "VersionNewer",
    "HostidMismatch",
    "IoFailureWait",
    "IoFailureContinue",
    "BadLog",
    "Errata",
    "UnsupFeatRead",
    "UnsupFeatWrite",
    "FaultedDevR",
    "FaultedDevNr",
    "VersionOlder",
    "FeatDisabled",
    "Resilvering",
    "OfflineDev",
    "RemovedDev",
    "Ok",
)


def _zio_counters(values: Any) -> tuple[int, ...]:
    """Normalize an ops/bytes array to exactly one entry per ZIOType."""
    counters = [int(v) for v in list(values or [])[: len(ZIOType)]]
    counters.extend([0] * (len(ZIOType) - len(counters)))
    return tuple(counters)


@dataclass
class VdevNode:
    """
    A node in a pool's vdev tree.

    The root node of a pool carries the pool name and type "root"; interior
    nodes are mirrors, raidz groups or the cache/log/spare containers, and
    leaves are disks or files. Children are kept in the order reported by
    the ZFS subsystem.
    """

    name: str
    type: str
    state: int = VdevState.UNKNOWN
    allocated: int = 0
    space: int = 0
    fragmentation: int = 0
    read_errors: int = 0
    write_errors: int = 0
    checksum_errors: int = 0
    ops: tuple[int, ...] = field(default_factory=lambda: (0,) * len(ZIOType))
    bytes: tuple[int, ...] = field(default_factory=lambda: (0,) * len(ZIOType))
    children: list["VdevNode"] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.ops = _zio_counters(self.ops)
        self.bytes = _zio_counters(self.bytes)

    def __repr__(self) -> str:
        return f"VdevNode({self.type}:{self.name!r}, children={len(self.children)})"


@dataclass
class Pool:
    """
    An imported storage pool.

    Only the name is interpreted by the exporter; the handle belongs to the
    source backend that produced the pool.
    """

    name: str
    handle: Any = None

    def __repr__(self) -> str:
        return f"Pool({self.name!r})"

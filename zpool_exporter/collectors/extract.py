"""
Mapping of pools and vdevs to metric samples.

Pool samples:
- State and status codes (-1 when the query failed)
- Cumulative collection error count

Vdev samples:
- State, allocated bytes, total space, fragmentation
- Read/write/checksum error counters
- Operation and byte counters per I/O type
"""

from ..exporter.metrics import (
    COLLECT_ERRORS,
    POOL_STATE,
    POOL_STATUS,
    VDEV_ALLOCATED,
    VDEV_BYTES,
    VDEV_ERRORS,
    VDEV_FRAGMENTATION,
    VDEV_OPS,
    VDEV_SPACE,
    VDEV_STATE,
    Sample,
)
from ..models.pool import ZIO_TYPE_NAMES, VdevNode, ZIOType


def pool_samples(pool_name: str, state: int, status: int) -> list[Sample]:
    """Samples for a pool's state and status codes."""
    labels = (pool_name,)
    return [
        Sample(POOL_STATE, labels, float(state)),
        Sample(POOL_STATUS, labels, float(status)),
    ]


def error_count_sample(pool_name: str, error_count: int) -> Sample:
    """Sample for a pool's cumulative collection error count."""
    return Sample(COLLECT_ERRORS, (pool_name,), float(error_count))


def vdev_samples(pool_name: str, vdev: VdevNode) -> list[Sample]:
    """
    Samples for a single vdev.

    Always yields one row per error type and one ops and one bytes row per
    ZIOType, including zero values.

    Args:
        pool_name: Owning pool
        vdev: vdev node (children are not visited)

    Returns:
        List of samples labeled (pool, type, name[, kind])
    """
    labels = (pool_name, vdev.type, vdev.name)

    samples = [
        Sample(VDEV_STATE, labels, float(vdev.state)),
        Sample(VDEV_ALLOCATED, labels, float(vdev.allocated)),
        Sample(VDEV_SPACE, labels, float(vdev.space)),
        Sample(VDEV_FRAGMENTATION, labels, float(vdev.fragmentation)),
        Sample(VDEV_ERRORS, labels + ("read",), float(vdev.read_errors)),
        Sample(VDEV_ERRORS, labels + ("write",), float(vdev.write_errors)),
        Sample(VDEV_ERRORS, labels + ("checksum",), float(vdev.checksum_errors)),
    ]

    for zio_type in ZIOType:
        samples.append(
            Sample(VDEV_OPS, labels + (ZIO_TYPE_NAMES[zio_type],), float(vdev.ops[zio_type]))
        )

    for zio_type in ZIOType:
        samples.append(
            Sample(VDEV_BYTES, labels + (ZIO_TYPE_NAMES[zio_type],), float(vdev.bytes[zio_type]))
        )

    return samples

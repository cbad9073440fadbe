"""
Metric descriptors and conversion to Prometheus metric families.

The collection pipeline produces flat Sample tuples; this module owns the
metric names, help texts and label names, and groups samples into
prometheus_client metric families at exposition time.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily
from prometheus_client.metrics_core import Metric

from ..models.pool import POOL_STATUS_NAMES


class MetricKind(Enum):
    """Prometheus metric type."""
    GAUGE = "gauge"
    COUNTER = "counter"


@dataclass(frozen=True)
class MetricDef:
    """Descriptor for one exported metric."""

    name: str
    documentation: str
    kind: MetricKind
    labels: tuple[str, ...]

    def family(self) -> Metric:
        """Create an empty metric family for this descriptor."""
        if self.kind is MetricKind.COUNTER:
            return CounterMetricFamily(self.name, self.documentation, labels=self.labels)
        return GaugeMetricFamily(self.name, self.documentation, labels=self.labels)


POOL_LABELS = ("poolname",)
VDEV_LABELS = ("poolname", "vdevtype", "vdevname")


VDEV_OPS = MetricDef(
    "zfs_zpool_vdevops_total",
    "number of operations performed.",
    MetricKind.COUNTER,
    VDEV_LABELS + ("vdevoptype",),
)

VDEV_BYTES = MetricDef(
    "zfs_zpool_vdevbytes_total",
    "number of bytes handled",
    MetricKind.COUNTER,
    VDEV_LABELS + ("vdevoptype",),
)

VDEV_ERRORS = MetricDef(
    "zfs_zpool_errors_total",
    "number of errors seen",
    MetricKind.COUNTER,
    VDEV_LABELS + ("errortype",),
)

VDEV_STATE = MetricDef(
    "zfs_zpool_vdevstate",
    "vdev state: Unknown, Closed, Offline, Removed, CantOpen, Faulted, Degraded, Healthy.",
    MetricKind.GAUGE,
    VDEV_LABELS,
)

VDEV_ALLOCATED = MetricDef(
    "zfs_zpool_allocated_bytes",
    "number of bytes allocated (usage)",
    MetricKind.GAUGE,
    VDEV_LABELS,
)

VDEV_SPACE = MetricDef(
    "zfs_zpool_space_bytes",
    "size of the vdev in bytes (total capacity).",
    MetricKind.GAUGE,
    VDEV_LABELS,
)

VDEV_FRAGMENTATION = MetricDef(
    "zfs_zpool_fragmentation_percent",
    "device fragmentation percentage",
    MetricKind.GAUGE,
    VDEV_LABELS,
)

POOL_STATE = MetricDef(
    "zfs_zpool_poolstate",
    "pool state enum: Active, Exported, Destroyed, Spare, L2cache, uninitialized, "
    "unavail, potentiallyactive; -1 if the state could not be read",
    MetricKind.GAUGE,
    POOL_LABELS,
)

POOL_STATUS = MetricDef(
    "zfs_zpool_poolstatus",
    f"pool status enum: {', '.join(POOL_STATUS_NAMES)}; -1 if the status could not be read",
    MetricKind.GAUGE,
    POOL_LABELS,
)

COLLECT_ERRORS = MetricDef(
    "zfs_zpool_collecterrors",
    "errors harvesting ZFS metrics",
    MetricKind.COUNTER,
    POOL_LABELS,
)

# Exposition order
ALL_METRICS = (
    VDEV_OPS,
    VDEV_BYTES,
    VDEV_ERRORS,
    VDEV_STATE,
    VDEV_ALLOCATED,
    VDEV_SPACE,
    VDEV_FRAGMENTATION,
    POOL_STATE,
    POOL_STATUS,
    COLLECT_ERRORS,
)


class Sample(NamedTuple):
    """One observation of a metric."""

    metric: MetricDef
    labels: tuple[str, ...]
    value: float


def build_families(samples: Iterable[Sample]) -> list[Metric]:
    """
    Group samples into metric families.

    Families without samples are omitted, so an empty pass exposes
    nothing. Samples keep their relative order within a family.

    Args:
        samples: Samples from one collection pass

    Returns:
        Metric families in ALL_METRICS order
    """
    families: dict[MetricDef, Metric] = {}
    for sample in samples:
        family = families.get(sample.metric)
        if family is None:
            family = families[sample.metric] = sample.metric.family()
        family.add_metric(list(sample.labels), sample.value)

    return [families[metric] for metric in ALL_METRICS if metric in families]


def describe_families() -> list[Metric]:
    """Empty families for every exported metric (collector registration)."""
    return [metric.family() for metric in ALL_METRICS]

"""
Tests for pool and vdev metric extraction.
"""

from zpool_exporter.collectors.extract import error_count_sample, pool_samples, vdev_samples
from zpool_exporter.exporter.metrics import (
    COLLECT_ERRORS,
    POOL_STATE,
    POOL_STATUS,
    VDEV_BYTES,
    VDEV_ERRORS,
    VDEV_OPS,
    VDEV_STATE,
)
from zpool_exporter.models.pool import (
    POOL_STATUS_NAMES,
    ZIO_TYPE_NAMES,
    PoolState,
    VdevNode,
    VdevState,
    ZIOType,
)


def by_metric(samples, metric):
    return {sample.labels: sample.value for sample in samples if sample.metric is metric}


def test_zero_vdev_emits_all_counter_rows() -> None:
    """Test that zero counters still produce every error, ops and bytes row."""
    vdev = VdevNode(name="sda", type="disk")

    samples = vdev_samples("tank", vdev)

    ops = by_metric(samples, VDEV_OPS)
    transferred = by_metric(samples, VDEV_BYTES)
    errors = by_metric(samples, VDEV_ERRORS)

    assert len(ops) == 6
    assert len(transferred) == 6
    assert set(ops.values()) == {0.0}
    assert set(transferred.values()) == {0.0}
    assert [labels[-1] for labels in ops] == list(ZIO_TYPE_NAMES)
    assert {labels[-1] for labels in errors} == {"read", "write", "checksum"}
    assert len(samples) == 4 + 3 + 6 + 6


def test_vdev_values() -> None:
    """Test that vdev values are mapped onto their metrics."""
    vdev = VdevNode(
        name="sda",
        type="disk",
        state=VdevState.DEGRADED,
        allocated=1024,
        space=4096,
        fragmentation=37,
        read_errors=1,
        write_errors=2,
        checksum_errors=3,
        ops=(0, 11, 22, 33, 44, 55),
        bytes=(0, 110, 220, 330, 440, 550),
    )

    samples = vdev_samples("tank", vdev)
    labels = ("tank", "disk", "sda")

    assert by_metric(samples, VDEV_STATE) == {labels: 6.0}
    assert by_metric(samples, VDEV_ERRORS) == {
        labels + ("read",): 1.0,
        labels + ("write",): 2.0,
        labels + ("checksum",): 3.0,
    }
    assert by_metric(samples, VDEV_OPS)[labels + ("Write",)] == 22.0
    assert by_metric(samples, VDEV_BYTES)[labels + ("IoCtl",)] == 550.0


def test_same_type_vdevs_have_distinct_labels() -> None:
    """Test that sibling vdevs of the same type get distinct label sets."""
    sda = VdevNode(name="sda", type="disk", ops=(0, 1, 0, 0, 0, 0))
    sdb = VdevNode(name="sdb", type="disk", ops=(0, 2, 0, 0, 0, 0))

    samples = vdev_samples("tank", sda) + vdev_samples("tank", sdb)
    ops = by_metric(samples, VDEV_OPS)

    assert len(ops) == 12
    assert ops[("tank", "disk", "sda", "Read")] == 1.0
    assert ops[("tank", "disk", "sdb", "Read")] == 2.0


def test_pool_samples_keep_failure_sentinel() -> None:
    """Test that -1 state and status are passed through."""
    samples = pool_samples("tank", -1, 24)

    assert by_metric(samples, POOL_STATE) == {("tank",): -1.0}
    assert by_metric(samples, POOL_STATUS) == {("tank",): 24.0}


def test_error_count_sample() -> None:
    """Test the collection error counter sample."""
    sample = error_count_sample("tank", 3)

    assert sample.metric is COLLECT_ERRORS
    assert sample.labels == ("tank",)
    assert sample.value == 3.0


def test_vdev_counters_are_normalized_to_zio_types() -> None:
    """Test that ops and bytes arrays are padded or truncated to six entries."""
    short = VdevNode(name="a", type="disk", ops=[1, 2, 3])
    long = VdevNode(name="b", type="disk", bytes=[1, 2, 3, 4, 5, 6, 7])

    assert short.ops == (1, 2, 3, 0, 0, 0)
    assert long.bytes == (1, 2, 3, 4, 5, 6)


def test_vdev_state_names() -> None:
    """Test mapping of printed vdev state names."""
    assert VdevState.from_name("ONLINE") is VdevState.HEALTHY
    assert VdevState.from_name("degraded") is VdevState.DEGRADED
    assert VdevState.from_name("UNAVAIL") is VdevState.CANT_OPEN
    assert VdevState.from_name("bogus") is VdevState.UNKNOWN
    assert VdevState.from_name(None) is VdevState.UNKNOWN


def test_libzfs_enum_orderings() -> None:
    """Test that enum values follow libzfs ordering."""
    assert PoolState.ACTIVE == 0
    assert PoolState.UNAVAIL == 6
    assert len(POOL_STATUS_NAMES) == 25
    assert POOL_STATUS_NAMES[24] == "Ok"
    assert ZIO_TYPE_NAMES[ZIOType.IOCTL] == "IoCtl"

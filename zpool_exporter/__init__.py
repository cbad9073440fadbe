"""
ZFS pool exporter for Prometheus.

Walks the vdev tree of every imported pool and exposes pool health and
per-vdev I/O statistics on a pull-based metrics endpoint.
"""

from .const import APP_VERSION

__version__ = APP_VERSION

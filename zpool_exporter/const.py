"""
Application constants and metadata.
"""

# Application info
APP_NAME = "ZFS Exporter"
APP_VERSION = "0.1.0"

# Default values
DEFAULT_LISTEN_ADDRESS = ":9254"
DEFAULT_METRICS_PATH = "/metrics"
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_CONFIG_PATH = "/etc/zpool-exporter/config.conf"

# Value reported when a pool state/status query fails
QUERY_FAILED = -1

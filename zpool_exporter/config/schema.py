"""
Configuration schema.

Maps parsed blocks onto dataclasses with defaults. Every setting can be
left out; command-line flags are applied on top with Config.override().
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..const import DEFAULT_LISTEN_ADDRESS, DEFAULT_METRICS_PATH, DEFAULT_POLL_INTERVAL
from .parser import Block, ConfigDocument


class CollectionMode(Enum):
    """When pools are queried."""
    ON_DEMAND = "on_demand"  # On every scrape
    POLLING = "polling"      # On a fixed interval, scrapes read the last result

    @classmethod
    def parse(cls, value: Any) -> "CollectionMode":
        """
        Parse a mode name; "on-demand" and "on_demand" are both accepted.

        Raises:
            ValueError: If the mode is unknown
        """
        name = str(value).strip().lower().replace("-", "_")
        try:
            return cls(name)
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown collection mode '{value}' (expected one of: {choices})")


def parse_interval(value: Any) -> float:
    """
    Parse a poll interval in seconds.

    Raises:
        ValueError: If the interval is not a positive number
    """
    interval = float(value)
    if interval <= 0:
        raise ValueError(f"Poll interval must be positive, got {value}")
    return interval


@dataclass
class ExporterConfig:
    """HTTP endpoint and collection settings."""
    listen: str = DEFAULT_LISTEN_ADDRESS
    path: str = DEFAULT_METRICS_PATH
    mode: CollectionMode = CollectionMode.ON_DEMAND
    interval: float = DEFAULT_POLL_INTERVAL

    @classmethod
    def from_block(cls, block: Block | None) -> "ExporterConfig":
        """Create ExporterConfig from a parsed 'exporter' block."""
        if block is None:
            return cls()

        return cls(
            listen=str(block.get_value("listen", DEFAULT_LISTEN_ADDRESS)),
            path=str(block.get_value("path", DEFAULT_METRICS_PATH)),
            mode=CollectionMode.parse(block.get_value("mode", CollectionMode.ON_DEMAND.value)),
            interval=parse_interval(block.get_value("interval", DEFAULT_POLL_INTERVAL)),
        )


@dataclass
class PoolsConfig:
    """Pool selection by name (glob patterns)."""
    filter: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)

    @classmethod
    def from_block(cls, block: Block | None) -> "PoolsConfig":
        """Create PoolsConfig from a parsed 'pools' block."""
        if block is None:
            return cls()

        return cls(
            filter=[str(v) for v in block.get_all_values("filter")],
            exclude=[str(v) for v in block.get_all_values("exclude")],
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "info"
    file: str | None = None
    file_level: str = "debug"
    file_max_size: int = 10  # MB
    file_keep: int = 5
    colors: bool = True

    @classmethod
    def from_block(cls, block: Block | None) -> "LoggingConfig":
        """Create LoggingConfig from a parsed 'logging' block."""
        if block is None:
            return cls()

        file_value = block.get_value("file")
        return cls(
            level=str(block.get_value("level", "info")),
            file=str(file_value) if file_value is not None else None,
            file_level=str(block.get_value("file_level", "debug")),
            file_max_size=int(block.get_value("file_max_size", 10)),
            file_keep=int(block.get_value("file_keep", 5)),
            colors=bool(block.get_value("colors", True)),
        )


@dataclass
class Config:
    """Root configuration."""
    exporter: ExporterConfig = field(default_factory=ExporterConfig)
    pools: PoolsConfig = field(default_factory=PoolsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_document(cls, doc: ConfigDocument) -> "Config":
        """Create Config from a parsed ConfigDocument."""
        return cls(
            exporter=ExporterConfig.from_block(doc.get_block("exporter")),
            pools=PoolsConfig.from_block(doc.get_block("pools")),
            logging=LoggingConfig.from_block(doc.get_block("logging")),
        )

    def override(
        self,
        listen: str | None = None,
        path: str | None = None,
        mode: str | None = None,
        interval: float | None = None,
    ) -> "Config":
        """
        Apply command-line values on top of this configuration.

        None leaves the configured value in place.

        Raises:
            ValueError: If the mode or interval is invalid

        Returns:
            self, for chaining
        """
        if listen is not None:
            self.exporter.listen = listen
        if path is not None:
            self.exporter.path = path
        if mode is not None:
            self.exporter.mode = CollectionMode.parse(mode)
        if interval is not None:
            self.exporter.interval = parse_interval(interval)
        return self

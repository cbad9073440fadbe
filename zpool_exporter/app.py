"""
Main application orchestrator.

Handles:
- Opening the pool source and enumerating pools
- Registering the collector for the configured collection mode
- Running the HTTP server and background poller
- Graceful shutdown
"""

import asyncio
import signal

from prometheus_client.gc_collector import GCCollector
from prometheus_client.platform_collector import PlatformCollector
from prometheus_client.process_collector import ProcessCollector
from prometheus_client.registry import CollectorRegistry

from .collectors.poller import ZpoolPoller
from .collectors.zpool import PoolCollector, PoolErrors, select_pools
from .config.schema import CollectionMode, Config
from .exporter.http import MetricsServer
from .exporter.registry import OnDemandCollector, SnapshotCollector
from .logging import LogConfig, get_logger, setup_logging
from .models.pool import Pool
from .sources.base import PoolSource, SourceError
from .sources.libzfs import LibzfsSource


logger = get_logger("app")


class StartupError(Exception):
    """Raised when the exporter cannot start serving."""

    pass


def create_registry() -> CollectorRegistry:
    """Registry with the standard process, platform and GC collectors."""
    registry = CollectorRegistry()
    ProcessCollector(registry=registry)
    PlatformCollector(registry=registry)
    GCCollector(registry=registry)
    return registry


class Application:
    """
    Main application class.

    Wires the pool source, collection pipeline and HTTP server together
    for one of the two collection modes.
    """

    def __init__(
        self,
        config: Config,
        source: PoolSource | None = None,
        registry: CollectorRegistry | None = None,
    ):
        """
        Initialize application.

        Args:
            config: Application configuration
            source: Pool source (py-libzfs if not provided)
            registry: Metrics registry (a fresh one if not provided)
        """
        self.config = config
        self.source = source
        self.registry = registry if registry is not None else create_registry()
        self.errors = PoolErrors()

        self.collector: PoolCollector | None = None
        self.poller: ZpoolPoller | None = None
        self.server: MetricsServer | None = None

        self._poll_task: asyncio.Task | None = None
        self._shutdown_event = asyncio.Event()

    def _open_source(self) -> PoolSource:
        if self.source is not None:
            return self.source
        try:
            return LibzfsSource()
        except SourceError as e:
            raise StartupError(str(e)) from e

    def _enumerate_pools(self, source: PoolSource) -> list[Pool]:
        """
        Enumerate and select pools once at startup.

        Raises:
            StartupError: If enumeration fails
        """
        try:
            pools = source.list_pools()
        except SourceError as e:
            raise StartupError(str(e)) from e

        selected = select_pools(pools, self.config.pools.filter, self.config.pools.exclude)
        skipped = len(pools) - len(selected)

        names = ", ".join(source.pool_name(p) for p in selected) or "none"
        logger.info(f"Collecting {len(selected)} pools: {names}")
        if skipped:
            logger.info(f"Skipped {skipped} pools by filter/exclude")
        return selected

    def setup(self) -> None:
        """
        Open the source, enumerate pools and register collectors.

        Raises:
            StartupError: If the source cannot be opened or pools cannot be listed
        """
        self.source = self._open_source()
        pools = self._enumerate_pools(self.source)
        self.collector = PoolCollector(self.source, pools, self.errors)

        exporter = self.config.exporter
        if exporter.mode is CollectionMode.POLLING:
            snapshot = SnapshotCollector()
            self.registry.register(snapshot)
            self.poller = ZpoolPoller(self.collector, snapshot, exporter.interval)
        else:
            self.registry.register(OnDemandCollector(self.collector))

        try:
            self.server = MetricsServer(self.registry, exporter.listen, exporter.path)
        except ValueError as e:
            raise StartupError(str(e)) from e

        logger.info(f"Collection mode: {exporter.mode.value}")

    def _setup_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self._signal_handler)

    def _signal_handler(self) -> None:
        logger.info("Received shutdown signal")
        self._shutdown_event.set()

    def request_shutdown(self) -> None:
        """Stop the application from within the event loop."""
        self._shutdown_event.set()

    async def start(self) -> None:
        """Start serving and wait for shutdown."""
        logger.info("Starting ZFS exporter")

        self.setup()

        try:
            self.server.start()
        except OSError as e:
            raise StartupError(f"Unable to listen on {self.config.exporter.listen}: {e}") from e

        self._setup_signal_handlers()

        if self.poller is not None:
            self._poll_task = asyncio.create_task(self.poller.run())

        logger.info("ZFS exporter started")

        await self._shutdown_event.wait()
        await self.stop()

    async def stop(self) -> None:
        """Stop the poller and HTTP server."""
        logger.info("Stopping ZFS exporter")

        if self.poller is not None:
            self.poller.stop()
        if self._poll_task is not None:
            self._poll_task.cancel()
            await asyncio.gather(self._poll_task, return_exceptions=True)
            self._poll_task = None

        if self.server is not None:
            self.server.stop()

        if self.source is not None:
            self.source.close()

        logger.info("ZFS exporter stopped")


def build_log_config(config: Config, cli_log_config: LogConfig | None = None) -> LogConfig:
    """
    Merge logging settings from the config file and command line.

    Command-line settings win; a log file from the config file is used
    when none was given on the command line.
    """
    file_settings = {
        "file_level": config.logging.file_level,
        "file_max_bytes": config.logging.file_max_size * 1024 * 1024,
        "file_backup_count": config.logging.file_keep,
    }

    if cli_log_config is None:
        log_config = LogConfig(
            console_level=config.logging.level,
            console_colors=config.logging.colors,
            file_enabled=config.logging.file is not None,
            **file_settings,
        )
        if config.logging.file:
            log_config.file_path = config.logging.file
        return log_config

    if not cli_log_config.file_enabled and config.logging.file:
        cli_log_config.file_enabled = True
        cli_log_config.file_path = config.logging.file
        for key, value in file_settings.items():
            setattr(cli_log_config, key, value)
    return cli_log_config


async def run_app(config: Config, cli_log_config: LogConfig | None = None) -> None:
    """
    Configure logging and run the application until shutdown.

    Args:
        config: Loaded configuration, with command-line overrides applied
        cli_log_config: Logging config from CLI args (overrides file config)
    """
    setup_logging(build_log_config(config, cli_log_config))

    logger.debug(f"Listen address: {config.exporter.listen}")
    logger.debug(f"Metrics path: {config.exporter.path}")

    app = Application(config)
    await app.start()

"""
Entry point for the ZFS exporter.

Usage:
    python -m zpool_exporter --web.listen-address :9254
    python -m zpool_exporter -c /etc/zpool-exporter/config.conf
    python -m zpool_exporter --help
"""

import argparse
import asyncio
import sys

from . import __version__
from .app import StartupError, run_app
from .config.loader import ConfigError, ConfigLoader
from .config.schema import CollectionMode, Config
from .const import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_LISTEN_ADDRESS,
    DEFAULT_METRICS_PATH,
    DEFAULT_POLL_INTERVAL,
)
from .logging import LogConfig, get_logger, setup_logging


logger = get_logger("main")


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="zpool-exporter",
        description="Prometheus exporter for ZFS pool health and vdev I/O statistics",
    )

    parser.add_argument(
        "--web.listen-address",
        dest="listen_address",
        metavar="ADDRESS",
        help=f"Address on which to expose metrics and web interface (default: {DEFAULT_LISTEN_ADDRESS})",
    )

    parser.add_argument(
        "--web.telemetry-path",
        dest="metrics_path",
        metavar="PATH",
        help=f"Path under which to expose metrics (default: {DEFAULT_METRICS_PATH})",
    )

    parser.add_argument(
        "-c", "--config",
        metavar="PATH",
        help=f"Path to configuration file (optional, e.g. {DEFAULT_CONFIG_PATH})",
    )

    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in CollectionMode],
        help="Query pools on every scrape, or poll in the background (default: on_demand)",
    )

    parser.add_argument(
        "--interval",
        type=float,
        metavar="SECONDS",
        help=f"Poll interval in polling mode (default: {DEFAULT_POLL_INTERVAL})",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging (INFO level)",
    )

    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Enable debug logging (DEBUG level)",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Quiet mode (only errors)",
    )

    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Write logs to file",
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate configuration and exit",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def log_config_from_args(args: argparse.Namespace) -> LogConfig:
    """Logging settings requested on the command line."""
    log_config = LogConfig()

    if args.debug:
        log_config.console_level = "debug"
    elif args.verbose:
        log_config.console_level = "info"
    elif args.quiet:
        log_config.console_level = "error"
    else:
        log_config.console_level = "warning"

    if args.no_color:
        log_config.console_colors = False

    if args.log_file:
        log_config.file_enabled = True
        log_config.file_path = args.log_file

    return log_config


def load_config(args: argparse.Namespace, loader: ConfigLoader) -> Config:
    """
    Load the config file (if any) and apply command-line overrides.

    Raises:
        ConfigError: If the file or an override is invalid
    """
    config = loader.load_file(args.config) if args.config else Config()
    try:
        return config.override(
            listen=args.listen_address,
            path=args.metrics_path,
            mode=args.mode,
            interval=args.interval,
        )
    except ValueError as e:
        raise ConfigError(str(e)) from e


def validate_config(config: Config, loader: ConfigLoader) -> int:
    """Print configuration warnings and summary."""
    warnings = loader.validate(config)

    if warnings:
        print(f"Configuration warnings ({len(warnings)}):")
        for warning in warnings:
            print(f"  - {warning}")

    print("\nConfiguration summary:")
    print(f"  Listen address: {config.exporter.listen}")
    print(f"  Metrics path: {config.exporter.path}")
    print(f"  Collection mode: {config.exporter.mode.value}")
    if config.exporter.mode is CollectionMode.POLLING:
        print(f"  Poll interval: {config.exporter.interval}s")
    print(f"  Pool filter: {', '.join(config.pools.filter) or 'all'}")
    if config.pools.exclude:
        print(f"  Pool exclude: {', '.join(config.pools.exclude)}")
    print(f"  Logging level: {config.logging.level}")

    print("\nConfiguration is valid!")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    log_config = log_config_from_args(args)
    setup_logging(log_config)

    loader = ConfigLoader()
    try:
        config = load_config(args, loader)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    if args.validate:
        return validate_config(config, loader)

    for warning in loader.validate(config):
        logger.warning(f"Config warning: {warning}")

    try:
        cli_logging = args.debug or args.verbose or args.quiet or args.log_file or args.no_color
        asyncio.run(run_app(config, cli_log_config=log_config if cli_logging else None))
        return 0
    except StartupError as e:
        logger.error(f"Startup failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

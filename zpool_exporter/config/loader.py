"""
Configuration loader with file reading and validation.
"""

from pathlib import Path

from ..exporter.http import parse_listen_address
from .lexer import LexerError
from .parser import ConfigDocument, ParseError, parse_config, parse_config_file
from .schema import CollectionMode, Config


class ConfigError(Exception):
    """Exception raised for configuration errors."""

    pass


class ConfigLoader:
    """
    Loads and validates configuration from files or strings.

    Usage:
        loader = ConfigLoader()
        config = loader.load_file("/etc/zpool-exporter/config.conf")
        warnings = loader.validate(config)
    """

    KNOWN_DIRECTIVES = {
        "exporter": {"listen", "path", "mode", "interval"},
        "pools": {"filter", "exclude"},
        "logging": {"level", "file", "file_level", "file_max_size", "file_keep", "colors"},
    }

    def __init__(self):
        self.last_document: ConfigDocument | None = None

    def load_file(self, path: str | Path) -> Config:
        """
        Load configuration from a file.

        Raises:
            ConfigError: If the file cannot be read or parsed
        """
        path = Path(path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.is_file():
            raise ConfigError(f"Not a file: {path}")

        try:
            document = parse_config_file(path)
        except (LexerError, ParseError) as e:
            raise ConfigError(f"Failed to parse configuration: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read configuration: {e}") from e

        return self._build(document)

    def load_string(self, source: str, filename: str = "<string>") -> Config:
        """
        Load configuration from a string.

        Raises:
            ConfigError: If the configuration cannot be parsed
        """
        try:
            document = parse_config(source, filename)
        except (LexerError, ParseError) as e:
            raise ConfigError(f"Failed to parse configuration: {e}") from e

        return self._build(document)

    def _build(self, document: ConfigDocument) -> Config:
        self.last_document = document
        try:
            return Config.from_document(document)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration value: {e}") from e

    def validate(self, config: Config) -> list[str]:
        """
        Validate configuration and return warnings.

        Problems that make the exporter unusable (bad listen address) are
        reported as warnings here and fail later at startup.

        Returns:
            List of warning messages (empty if no issues)
        """
        warnings = []

        if self.last_document:
            warnings.extend(self._check_unknown_directives(self.last_document))

        try:
            parse_listen_address(config.exporter.listen)
        except ValueError as e:
            warnings.append(str(e))

        if not config.exporter.path.startswith("/"):
            warnings.append(f"Metrics path should start with '/': {config.exporter.path!r}")
        elif config.exporter.path == "/":
            warnings.append("Metrics path '/' hides the index page")

        if config.exporter.interval <= 0:
            warnings.append(f"Poll interval must be positive, got {config.exporter.interval}")
        elif config.exporter.mode is CollectionMode.ON_DEMAND and self._has_directive("exporter", "interval"):
            warnings.append("Poll interval is ignored in on_demand mode")

        overlap = set(config.pools.filter) & set(config.pools.exclude)
        for pattern in sorted(overlap):
            warnings.append(f"Pool pattern '{pattern}' is both filtered and excluded")

        return warnings

    def _has_directive(self, block_type: str, name: str) -> bool:
        if self.last_document is None:
            return False
        block = self.last_document.get_block(block_type)
        return block is not None and block.get_value(name) is not None

    def _check_unknown_directives(self, document: ConfigDocument) -> list[str]:
        warnings = []

        for block in document.blocks:
            known = self.KNOWN_DIRECTIVES.get(block.type)
            if known is None:
                warnings.append(f"Unknown block '{block.type}' (line {block.line})")
                continue

            for directive in block.directives:
                if directive.name not in known:
                    warnings.append(
                        f"Unknown directive '{directive.name}' in {block.type} block (line {directive.line})"
                    )
            for nested in block.blocks:
                warnings.append(f"Unexpected block '{nested.type}' in {block.type} block (line {nested.line})")

        for directive in document.directives:
            warnings.append(f"Unknown top-level directive '{directive.name}' (line {directive.line})")

        return warnings


def load_config(path: str | Path | None = None) -> Config:
    """
    Load configuration from a file, or defaults if no path is given.

    Raises:
        ConfigError: If the file cannot be loaded
    """
    if path is None:
        return Config()
    return ConfigLoader().load_file(path)

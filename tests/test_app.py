"""
Tests for application wiring and the command-line entry point.
"""

import asyncio

import pytest
from prometheus_client.registry import CollectorRegistry

from zpool_exporter import __main__ as cli
from zpool_exporter import app as app_module
from zpool_exporter.app import Application, StartupError, build_log_config
from zpool_exporter.config.loader import ConfigLoader
from zpool_exporter.config.schema import CollectionMode, Config
from zpool_exporter.logging import LogConfig
from zpool_exporter.sources.base import SourceError


def make_config(mode: CollectionMode = CollectionMode.ON_DEMAND, **pools) -> Config:
    config = Config().override(listen="127.0.0.1:0", mode=mode.value, interval=0.01)
    config.pools.filter = pools.get("filter", [])
    config.pools.exclude = pools.get("exclude", [])
    return config


def test_on_demand_setup(fake_source) -> None:
    """Test that on_demand mode registers a collector that queries on scrape."""
    registry = CollectorRegistry()
    app = Application(make_config(), source=fake_source, registry=registry)

    app.setup()

    assert app.poller is None
    assert registry.get_sample_value("zfs_zpool_poolstate", {"poolname": "tank"}) == 0.0


def test_polling_setup(fake_source) -> None:
    """Test that polling mode creates a poller and serves nothing until it runs."""
    registry = CollectorRegistry()
    app = Application(make_config(CollectionMode.POLLING), source=fake_source, registry=registry)

    app.setup()

    assert app.poller is not None
    assert app.poller.interval == 0.01
    assert registry.get_sample_value("zfs_zpool_poolstate", {"poolname": "tank"}) is None
    app.poller.poll_once()
    assert registry.get_sample_value("zfs_zpool_poolstate", {"poolname": "tank"}) == 0.0


def test_pool_selection_applies(fake_source) -> None:
    """Test that filter and exclude patterns limit the collected pools."""
    registry = CollectorRegistry()
    app = Application(make_config(exclude=["scratch"]), source=fake_source, registry=registry)

    app.setup()

    assert [p.name for p in app.collector.pools] == ["tank", "backup"]
    assert registry.get_sample_value("zfs_zpool_poolstate", {"poolname": "scratch"}) is None
    assert app.errors.snapshot() == {"tank": 0, "backup": 0}


def test_enumeration_failure_is_startup_error(fake_source) -> None:
    """Test that failing to list pools aborts startup."""
    fake_source.list_error = SourceError("error opening pools")
    app = Application(make_config(), source=fake_source, registry=CollectorRegistry())

    with pytest.raises(StartupError, match="error opening pools"):
        app.setup()


def test_bad_listen_address_is_startup_error(fake_source) -> None:
    """Test that an unusable listen address aborts startup."""
    config = make_config()
    config.exporter.listen = "nowhere"
    app = Application(config, source=fake_source, registry=CollectorRegistry())

    with pytest.raises(StartupError, match="port"):
        app.setup()


def test_start_and_shutdown(fake_source) -> None:
    """Test that start() serves until shutdown and then stops cleanly."""
    app = Application(
        make_config(CollectionMode.POLLING), source=fake_source, registry=CollectorRegistry()
    )

    async def scenario() -> None:
        task = asyncio.create_task(app.start())
        while app.poller is None or app.poller.passes < 1:
            await asyncio.sleep(0.01)
        app.request_shutdown()
        await asyncio.wait_for(task, timeout=5.0)

    asyncio.run(scenario())

    assert app.server.server_port is None
    assert not app.poller.running


def test_build_log_config_from_file_settings() -> None:
    """Test that logging settings come from the config file."""
    config = ConfigLoader().load_string(
        'logging { level debug; file "/tmp/zpool.log"; file_max_size 2; file_keep 3; }'
    )

    log_config = build_log_config(config)

    assert log_config.console_level == "debug"
    assert log_config.file_enabled
    assert log_config.file_path == "/tmp/zpool.log"
    assert log_config.file_max_bytes == 2 * 1024 * 1024
    assert log_config.file_backup_count == 3


def test_build_log_config_cli_wins() -> None:
    """Test that command-line logging settings take precedence."""
    config = ConfigLoader().load_string('logging { level debug; file "/tmp/zpool.log"; }')
    cli_config = LogConfig(console_level="error", file_enabled=True, file_path="/tmp/cli.log")

    log_config = build_log_config(config, cli_config)

    assert log_config.console_level == "error"
    assert log_config.file_path == "/tmp/cli.log"


def test_main_exits_when_pools_cannot_be_opened(monkeypatch) -> None:
    """Test that main() exits with 1 when libzfs is unavailable."""
    def unavailable():
        raise SourceError("py-libzfs is not available")

    monkeypatch.setattr(app_module, "LibzfsSource", unavailable)

    assert cli.main(["--web.listen-address", "127.0.0.1:0", "-q", "--no-color"]) == 1


def test_main_rejects_bad_config(tmp_path, capsys) -> None:
    """Test that main() exits with 1 on an invalid config file."""
    path = tmp_path / "bad.conf"
    path.write_text("exporter { mode sometimes; }")

    assert cli.main(["-c", str(path)]) == 1
    assert "Configuration error" in capsys.readouterr().err


def test_main_validate(tmp_path, capsys) -> None:
    """Test that --validate prints the summary and exits with 0."""
    path = tmp_path / "zpool.conf"
    path.write_text('exporter { mode polling; interval 5s; }\npools { filter "tank*"; }')

    assert cli.main(["-c", str(path), "--validate", "--web.telemetry-path", "/zfs"]) == 0

    out = capsys.readouterr().out
    assert "Collection mode: polling" in out
    assert "Poll interval: 5.0s" in out
    assert "Metrics path: /zfs" in out
    assert "Pool filter: tank*" in out


def test_main_rejects_non_positive_interval(capsys) -> None:
    """Test that --interval 0 is refused before anything is started."""
    assert cli.main(["--mode", "polling", "--interval", "0"]) == 1
    assert "must be positive" in capsys.readouterr().err

"""
HTTP surface of the exporter.

Serves the Prometheus text format on the metrics path and a small index
page on "/" linking to it. Any other path answers 404.
"""

import socket
import threading
from collections.abc import Callable, Iterable
from typing import Any
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import make_wsgi_app
from prometheus_client.exposition import ThreadingWSGIServer
from prometheus_client.registry import CollectorRegistry

from ..const import APP_NAME
from ..logging import get_logger


logger = get_logger("http")


WSGIApp = Callable[[dict[str, Any], Callable[..., Any]], Iterable[bytes]]

INDEX_TEMPLATE = """<html>
<head><title>{title}</title></head>
<body>
<h1>{title}</h1>
<p><a href="{metrics_path}">Metrics</a></p>
</body>
</html>
"""


def parse_listen_address(address: str) -> tuple[str, int]:
    """
    Split a listen address into host and port.

    Accepted forms: ":9254", "0.0.0.0:9254", "localhost:9254",
    "[::1]:9254". An empty host means all interfaces.

    Raises:
        ValueError: If the address has no valid port
    """
    host, sep, port_str = address.rpartition(":")
    if not sep:
        raise ValueError(f"Listen address must include a port: {address!r}")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]

    try:
        port = int(port_str)
    except ValueError:
        raise ValueError(f"Invalid port in listen address: {address!r}")

    if not 0 <= port <= 65535:
        raise ValueError(f"Port out of range in listen address: {address!r}")

    return host, port


class ThreadingWSGIServerV6(ThreadingWSGIServer):
    """Threaded WSGI server bound to an IPv6 address."""

    address_family = socket.AF_INET6


class QuietRequestHandler(WSGIRequestHandler):
    """Request handler that logs requests at debug level instead of stderr."""

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug(f"{self.address_string()} {format % args}")


def create_app(registry: CollectorRegistry, metrics_path: str = "/metrics") -> WSGIApp:
    """
    Create the WSGI application.

    Args:
        registry: Registry to expose
        metrics_path: Path serving the metrics

    Returns:
        WSGI callable
    """
    metrics_app = make_wsgi_app(registry)
    index = INDEX_TEMPLATE.format(title=APP_NAME, metrics_path=metrics_path).encode("utf-8")

    def app(environ: dict[str, Any], start_response: Callable[..., Any]) -> Iterable[bytes]:
        path = environ.get("PATH_INFO") or "/"

        if path == metrics_path:
            return metrics_app(environ, start_response)

        if path == "/":
            start_response(
                "200 OK",
                [("Content-Type", "text/html; charset=utf-8"), ("Content-Length", str(len(index)))],
            )
            return [index]

        body = b"Not Found\n"
        start_response(
            "404 Not Found",
            [("Content-Type", "text/plain; charset=utf-8"), ("Content-Length", str(len(body)))],
        )
        return [body]

    return app


class MetricsServer:
    """
    HTTP server running in a background thread.

    Usage:
        server = MetricsServer(registry, ":9254", "/metrics")
        server.start()
        ...
        server.stop()
    """

    def __init__(
        self,
        registry: CollectorRegistry,
        listen_address: str,
        metrics_path: str = "/metrics",
    ):
        self.host, self.port = parse_listen_address(listen_address)
        self.metrics_path = metrics_path
        self.app = create_app(registry, metrics_path)

        self._server: WSGIServer | None = None
        self._thread: threading.Thread | None = None

    @property
    def server_port(self) -> int | None:
        """Bound port (useful when listening on port 0)."""
        if self._server is None:
            return None
        return self._server.server_port

    def start(self) -> None:
        """
        Bind and start serving.

        Raises:
            OSError: If the address cannot be bound
        """
        server_class = ThreadingWSGIServerV6 if ":" in self.host else ThreadingWSGIServer
        self._server = make_server(
            self.host,
            self.port,
            self.app,
            server_class=server_class,
            handler_class=QuietRequestHandler,
        )
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            name="metrics-http",
            daemon=True,
        )
        self._thread.start()

        host = self.host or "*"
        logger.info(f"Serving metrics on http://{host}:{self.server_port}{self.metrics_path}")

    def stop(self) -> None:
        """Stop serving and close the socket."""
        if self._server is None:
            return

        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5.0)

        self._server = None
        self._thread = None
        logger.info("HTTP server stopped")

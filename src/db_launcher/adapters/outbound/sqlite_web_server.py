"""HTTP-fronted database server.

Serves the FastAPI application from db_launcher.adapters.inbound.rest_api
with uvicorn, in a background thread.
"""

from __future__ import annotations

import threading
import time
from typing import Any

import uvicorn

from db_launcher.adapters.outbound.server_base import DatabaseServerBase

# Interval at which startup progress is polled
_POLL_INTERVAL = 0.05


class SqliteWebServer(DatabaseServerBase):
    """Database server speaking HTTP/JSON."""

    variant = "webserver"
    default_port = 80
    default_tls_port = 443

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._uvicorn: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None

    def _serve(self) -> None:
        from db_launcher.adapters.inbound.rest_api import create_app

        port = self.get_port()
        config = uvicorn.Config(
            create_app(self),
            host=self._address,
            port=port,
            log_level="debug" if self._trace else "warning",
            access_log=self._trace,
            lifespan="off",
            ssl_certfile=self._tls_certfile if self._tls else None,
            ssl_keyfile=self._tls_keyfile if self._tls else None,
        )
        self._uvicorn = uvicorn.Server(config)
        self._thread = threading.Thread(
            target=self._uvicorn.run,
            name=f"db-launcher-{self.variant}",
            daemon=True,
        )
        self._thread.start()

        deadline = time.monotonic() + self._startup_timeout
        while not self._uvicorn.started:
            if not self._thread.is_alive():
                raise OSError(f"{self.variant} server failed to listen on {self._address}:{port}")
            if time.monotonic() > deadline:
                self._uvicorn.should_exit = True
                raise RuntimeError(
                    f"{self.variant} server did not come online within {self._startup_timeout}s"
                )
            time.sleep(_POLL_INTERVAL)

        servers = getattr(self._uvicorn, "servers", None)
        if servers and servers[0].sockets:
            self._bound_port = servers[0].sockets[0].getsockname()[1]

    def _shutdown(self) -> None:
        if self._uvicorn is None or self._thread is None:
            return
        self._uvicorn.should_exit = True
        self._thread.join(timeout=self._startup_timeout)

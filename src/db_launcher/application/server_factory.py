"""Server variant selection.

Maps a mode string to a server variant through a lookup table keyed by
ServerMode. Unsupported modes fail before any server object exists.
"""

from __future__ import annotations

from functools import partial
from typing import Callable, Mapping

from db_launcher.adapters.outbound import SqliteServer, SqliteWebServer
from db_launcher.domain.value_objects import ServerMode
from db_launcher.infrastructure.metrics import MetricsRegistry
from db_launcher.ports.outbound import DatabaseServer

ServerConstructor = Callable[[], DatabaseServer]


class LauncherError(Exception):
    """Base class for launcher errors."""


class ConfigurationError(LauncherError):
    """Raised when the configured server mode is not supported."""

    def __init__(self, mode: str) -> None:
        self.mode = mode
        super().__init__(f"This release doesn't support [{mode}]. Try 'server' instead.")


class ServerFactory:
    """Creates the server variant selected by a mode string."""

    def __init__(
        self,
        variants: Mapping[ServerMode, ServerConstructor] | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the factory.

        Args:
            variants: Constructor per variant. Defaults to the SQLite servers.
            metrics: Metrics registry handed to the default servers.
        """
        if variants is None:
            variants = {
                ServerMode.SERVER: partial(SqliteServer, metrics=metrics),
                ServerMode.WEBSERVER: partial(SqliteWebServer, metrics=metrics),
            }
        self._variants = dict(variants)

    def create(self, mode: str) -> DatabaseServer:
        """Create an unstarted server for a mode, ignoring case.

        Raises:
            ConfigurationError: If the mode names no supported variant.
        """
        try:
            variant = ServerMode.parse(mode)
        except ValueError:
            raise ConfigurationError(mode) from None

        constructor = self._variants.get(variant)
        if constructor is None:
            raise ConfigurationError(mode)
        return constructor()

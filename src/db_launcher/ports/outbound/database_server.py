"""Database server port.

This outbound port defines the contract of a launchable database server:
the settings the launcher applies before start, the start/stop operations
and the read-back of the server's state and live database names.

Servers expose numbered database slots; the launcher only uses slot 0.

References:
    - db_launcher.adapters.outbound.sqlite_server (data protocol variant)
    - db_launcher.adapters.outbound.sqlite_web_server (HTTP variant)
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol

from db_launcher.domain.value_objects import ServerState


class DatabaseServer(Protocol):
    """Protocol for an embedded database server.

    A server is configured while SHUTDOWN, started once, and then runs
    in background threads until stop() is called or the process exits.

    Thread Safety:
        Setters and start()/stop() are called from a single thread.
        Statement execution happens on the server's own threads.
    """

    @abstractmethod
    def set_silent(self, silent: bool) -> None:
        """Set whether statements are kept out of the log."""
        ...

    @abstractmethod
    def set_trace(self, trace: bool) -> None:
        """Set whether wire traffic is logged."""
        ...

    @abstractmethod
    def set_tls(self, tls: bool) -> None:
        """Set whether the server listens on TLS sockets."""
        ...

    @abstractmethod
    def set_tls_files(self, certfile: str | None, keyfile: str | None) -> None:
        """Set the certificate chain and key used when TLS is on."""
        ...

    @abstractmethod
    def set_address(self, address: str) -> None:
        """Set the bind address."""
        ...

    @abstractmethod
    def set_port(self, port: int) -> None:
        """Set the listen port, replacing the variant's default."""
        ...

    @abstractmethod
    def get_port(self) -> int:
        """Return the listen port (the bound port once ONLINE)."""
        ...

    @abstractmethod
    def set_database_name(self, index: int, name: str) -> None:
        """Register the alias clients use for the database in a slot."""
        ...

    @abstractmethod
    def set_database_path(self, index: int, path: str) -> None:
        """Set the connection URL (``mem:`` or ``file:``) of a slot."""
        ...

    @abstractmethod
    def get_database_name(self, index: int, as_configured: bool) -> str | None:
        """Return the alias of a slot.

        Args:
            index: Database slot.
            as_configured: True returns the alias as set; False returns the
                live alias of the opened database (None if not open).
        """
        ...

    @abstractmethod
    def get_state(self) -> ServerState:
        """Return the current run state."""
        ...

    @abstractmethod
    def get_state_descriptor(self) -> str:
        """Return a human-readable description of the run state."""
        ...

    @abstractmethod
    def start(self) -> None:
        """Open the configured databases and start serving.

        Returns once the listening socket is bound. The server keeps
        running in the background afterwards.

        Raises:
            RuntimeError: If the server was already started.
            OSError: If the socket cannot be bound or storage opened.
        """
        ...

    @abstractmethod
    def stop(self) -> None:
        """Stop serving and close the databases (checkpointing them)."""
        ...

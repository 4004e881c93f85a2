"""Launch configuration record.

A ServerConfig is created once per launch, usually from the settings in
``db_launcher.infrastructure.config``, and is never modified afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class ServerConfig:
    """Immutable configuration for a single server launch.

    Attributes:
        mode: Server variant name, ``server`` or ``webserver`` (any case).
        db_name: Database name; may be a relative path such as ``data/testdb``.
        silent: When False every statement is logged.
        trace: Log wire traffic.
        tls: Serve over TLS sockets.
        port: Listen port. 0 keeps the variant's default port.
        is_transient: In-memory (``mem:``) storage instead of ``file:``.
        delete_on_entry: Remove entries prefixed with db_name before start.
        delete_on_exit: Remove the artifact files at process exit.
        address: Bind address.
        tls_certfile: Certificate chain used when tls is set.
        tls_keyfile: Private key used when tls is set.
        base_dir: Directory scanned by entry cleanup.
    """

    db_name: str
    mode: str = "server"
    silent: bool = True
    trace: bool = False
    tls: bool = False
    port: int = 0
    is_transient: bool = False
    delete_on_entry: bool = False
    delete_on_exit: bool = False
    address: str = "0.0.0.0"
    tls_certfile: str | None = None
    tls_keyfile: str | None = None
    base_dir: Path = field(default_factory=lambda: Path("."))

    def __post_init__(self) -> None:
        """Validate the configuration."""
        if not self.db_name:
            raise ValueError("db_name must not be empty")
        if not 0 <= self.port <= 65535:
            raise ValueError(f"port must be between 0 and 65535, got {self.port}")

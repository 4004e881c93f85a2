"""Settings, database slots and state handling shared by the server variants.

Subclasses provide the transport: _serve() binds and starts serving in
background threads, _shutdown() stops serving. Everything else (settings,
slot bookkeeping, the state machine and statement dispatch) lives here.
"""

from __future__ import annotations

import ssl
from typing import Any, ClassVar

from db_launcher.adapters.outbound.sqlite_database import ExecutionResult, SqliteDatabase
from db_launcher.domain.value_objects import DEFAULT_SLOT, ServerState
from db_launcher.infrastructure.logging import get_logger
from db_launcher.infrastructure.metrics import MetricsRegistry, get_metrics

logger = get_logger(__name__)

MAX_DATABASES = 10
DEFAULT_ADDRESS = "0.0.0.0"
DEFAULT_STARTUP_TIMEOUT = 10.0


class UnknownDatabaseError(KeyError):
    """Raised when a request addresses an alias that is not served."""

    def __init__(self, alias: str) -> None:
        super().__init__(alias)
        self.alias = alias

    def __str__(self) -> str:
        return f"Database not found: {self.alias}"


class DatabaseServerBase:
    """Common implementation of the DatabaseServer port."""

    variant: ClassVar[str] = ""
    default_port: ClassVar[int] = 0
    default_tls_port: ClassVar[int] = 0

    def __init__(
        self,
        metrics: MetricsRegistry | None = None,
        startup_timeout: float = DEFAULT_STARTUP_TIMEOUT,
    ) -> None:
        self._metrics = metrics or get_metrics()
        self._startup_timeout = startup_timeout
        self._silent = True
        self._trace = False
        self._tls = False
        self._tls_certfile: str | None = None
        self._tls_keyfile: str | None = None
        self._address = DEFAULT_ADDRESS
        self._port: int | None = None
        self._bound_port: int | None = None
        self._names: dict[int, str] = {}
        self._paths: dict[int, str] = {}
        self._databases: dict[int, SqliteDatabase] = {}
        self._state = ServerState.SHUTDOWN
        self._started = False
        self._log = logger.bind(variant=self.variant)

    # -- settings ---------------------------------------------------------

    def set_silent(self, silent: bool) -> None:
        self._check_configurable()
        self._silent = silent

    def set_trace(self, trace: bool) -> None:
        self._check_configurable()
        self._trace = trace

    def set_tls(self, tls: bool) -> None:
        self._check_configurable()
        self._tls = tls

    def set_tls_files(self, certfile: str | None, keyfile: str | None) -> None:
        self._check_configurable()
        self._tls_certfile = certfile
        self._tls_keyfile = keyfile

    def set_address(self, address: str) -> None:
        self._check_configurable()
        self._address = address

    def set_port(self, port: int) -> None:
        self._check_configurable()
        if not 0 <= port <= 65535:
            raise ValueError(f"Invalid port: {port}")
        self._port = port

    def get_port(self) -> int:
        if self._bound_port is not None:
            return self._bound_port
        if self._port is not None:
            return self._port
        return self.default_tls_port if self._tls else self.default_port

    def set_database_name(self, index: int, name: str) -> None:
        self._check_configurable()
        self._check_index(index)
        self._names[index] = name

    def set_database_path(self, index: int, path: str) -> None:
        self._check_configurable()
        self._check_index(index)
        self._paths[index] = path

    def get_database_name(self, index: int, as_configured: bool) -> str | None:
        self._check_index(index)
        if as_configured:
            return self._names.get(index)
        database = self._databases.get(index)
        return database.alias if database is not None else None

    # -- state ------------------------------------------------------------

    def get_state(self) -> ServerState:
        return self._state

    def get_state_descriptor(self) -> str:
        return self._state.descriptor

    @property
    def address(self) -> str:
        return self._address

    @property
    def silent(self) -> bool:
        return self._silent

    @property
    def trace(self) -> bool:
        return self._trace

    @property
    def tls(self) -> bool:
        return self._tls

    def start(self) -> None:
        """Open the configured databases and start serving.

        Raises:
            RuntimeError: If the server was started before.
            ValueError: If TLS is on without a certificate file, or a
                database URL is not supported.
            OSError: If storage cannot be opened or the port bound.
        """
        if self._started:
            raise RuntimeError(f"{self.variant} server cannot be restarted")
        if self._tls and not self._tls_certfile:
            raise ValueError("TLS requires a certificate file")

        self._started = True
        self._state = ServerState.OPENING
        try:
            self._open_databases()
            self._serve()
        except BaseException:
            self._close_databases()
            self._state = ServerState.SHUTDOWN
            raise

        self._state = ServerState.ONLINE
        self._metrics.servers_online.inc()
        self._log.info(
            "server_online",
            address=self._address,
            port=self.get_port(),
            tls=self._tls,
            databases=[db.alias for db in self._databases.values()],
        )

    def stop(self) -> None:
        """Stop serving and close the databases. No-op unless ONLINE."""
        if self._state != ServerState.ONLINE:
            return

        self._state = ServerState.CLOSING
        try:
            self._shutdown()
        finally:
            self._close_databases()
            self._state = ServerState.SHUTDOWN
            self._metrics.servers_online.dec()
            self._log.info("server_shutdown")

    # -- statement dispatch -----------------------------------------------

    def get_database(self, alias: str | None = None) -> SqliteDatabase:
        """Return an open database by live alias (slot 0 when None).

        Raises:
            UnknownDatabaseError: If no open database has that alias.
        """
        if alias is None:
            database = self._databases.get(DEFAULT_SLOT)
            if database is None:
                raise UnknownDatabaseError(str(DEFAULT_SLOT))
            return database

        wanted = alias.lower()
        for database in self._databases.values():
            if database.alias == wanted:
                return database
        raise UnknownDatabaseError(alias)

    def execute(self, sql: str, database: str | None = None) -> ExecutionResult:
        """Execute a statement against a served database.

        Raises:
            UnknownDatabaseError: If the alias is not served.
        """
        result = self.get_database(database).execute(sql)
        self._metrics.statements_total.labels(
            variant=self.variant,
            status="success" if result.success else "error",
        ).inc()
        return result

    def describe_databases(self) -> list[dict[str, Any]]:
        """Return slot, alias and storage of every open database."""
        return [
            {
                "slot": index,
                "alias": database.alias,
                "storage": database.location.prefix,
                "location": database.location.location,
            }
            for index, database in sorted(self._databases.items())
        ]

    # -- transport hooks --------------------------------------------------

    def _serve(self) -> None:
        """Bind and start serving; return once the socket is bound."""
        raise NotImplementedError

    def _shutdown(self) -> None:
        """Stop serving and wait for the serving threads."""
        raise NotImplementedError

    def _ssl_context(self) -> ssl.SSLContext | None:
        if not self._tls:
            return None
        context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
        context.load_cert_chain(self._tls_certfile, self._tls_keyfile)
        return context

    # -- helpers ----------------------------------------------------------

    def _open_databases(self) -> None:
        for index in sorted(self._paths):
            name = self._names.get(index)
            if name is None:
                continue
            database = SqliteDatabase(name, self._paths[index], silent=self._silent)
            database.open()
            self._databases[index] = database

    def _close_databases(self) -> None:
        for database in self._databases.values():
            try:
                database.close()
            except Exception as e:
                self._log.warning("database_close_failed", alias=database.alias, error=str(e))
        self._databases.clear()

    def _check_configurable(self) -> None:
        if self._state != ServerState.SHUTDOWN or self._started:
            raise RuntimeError("Server settings can only be changed before start")

    @staticmethod
    def _check_index(index: int) -> None:
        if not 0 <= index < MAX_DATABASES:
            raise IndexError(f"Database slot out of range: {index}")

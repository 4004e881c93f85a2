"""SQLite-backed database opened by the launched servers.

A database is opened from a connection URL:

    mem:<name>[;key=value...]    shared-cache in-memory database, no files
    file:<path>[;key=value...]   file-backed database

A file-backed database keeps its artifact files beside <path>:

    <path>.data        SQLite database file
    <path>.properties  URL properties and engine metadata (key=value lines)
    <path>.script      SQL dump of schema and data, rewritten at checkpoint
    <path>.log         Redo log of modifying statements since the last
                       checkpoint
    <path>.backup      Online backup of the data file, written at checkpoint

A CHECKPOINT statement, or closing the database, checkpoints it.

Thread Safety:
    Statement execution is serialized on a re-entrant lock; one
    SqliteDatabase may be shared by all server threads.
"""

from __future__ import annotations

import sqlite3
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TextIO
from urllib.parse import quote

from db_launcher.domain.value_objects import FILE_PREFIX, MEMORY_PREFIX
from db_launcher.infrastructure.logging import get_logger

logger = get_logger(__name__)

CHECKPOINT_STATEMENT = "CHECKPOINT"


@dataclass(frozen=True)
class DatabaseLocation:
    """Parsed connection URL."""

    prefix: str
    location: str
    properties: dict[str, str] = field(default_factory=dict)

    @property
    def is_memory(self) -> bool:
        return self.prefix == MEMORY_PREFIX

    def artifact(self, suffix: str) -> Path:
        """Return the path of an artifact file of a file-backed database."""
        return Path(self.location + suffix)


def parse_database_url(url: str) -> DatabaseLocation:
    """Split a connection URL into prefix, location and properties.

    Raises:
        ValueError: If the URL has no supported prefix or no location.
    """
    head, *props = url.split(";")
    for prefix in (MEMORY_PREFIX, FILE_PREFIX):
        if head.startswith(prefix):
            location = head[len(prefix):]
            break
    else:
        raise ValueError(f"Unsupported database URL: {url!r}")

    if not location:
        raise ValueError(f"Database URL has no location: {url!r}")

    properties = {}
    for prop in props:
        key, sep, value = prop.partition("=")
        if key:
            properties[key.strip()] = value.strip() if sep else ""

    return DatabaseLocation(prefix=prefix, location=location, properties=properties)


def _json_value(value: Any) -> Any:
    """Make a SQLite value JSON serializable."""
    if isinstance(value, bytes):
        return value.hex()
    return value


@dataclass
class ExecutionResult:
    """Result of a statement execution."""

    success: bool = True
    message: str = ""
    columns: list[str] = field(default_factory=list)
    rows: list[tuple[Any, ...]] = field(default_factory=list)
    affected_rows: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "columns": list(self.columns),
            "rows": [[_json_value(v) for v in row] for row in self.rows],
            "affected_rows": self.affected_rows,
        }


class SqliteDatabase:
    """A database served by a launched server.

    Attributes:
        alias: Live alias clients use to address the database.
        location: Parsed connection URL.
    """

    def __init__(
        self,
        alias: str,
        url: str,
        silent: bool = True,
    ) -> None:
        """Initialize the database (it is opened by open()).

        Args:
            alias: Configured alias; the live alias is its lower-case form.
            url: Connection URL.
            silent: When False every statement is logged.

        Raises:
            ValueError: If the URL is not supported.
        """
        self._alias = alias.lower()
        self._location = parse_database_url(url)
        self._silent = silent
        self._lock = threading.RLock()
        self._conn: sqlite3.Connection | None = None
        self._redo_log: TextIO | None = None

    @property
    def alias(self) -> str:
        return self._alias

    @property
    def location(self) -> DatabaseLocation:
        return self._location

    @property
    def properties(self) -> dict[str, str]:
        return dict(self._location.properties)

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self) -> None:
        """Open the database, creating the artifact files if file-backed.

        Raises:
            RuntimeError: If already open.
            sqlite3.Error, OSError: If the storage cannot be opened.
        """
        with self._lock:
            if self._conn is not None:
                raise RuntimeError(f"Database {self._alias} already open")

            if self._location.is_memory:
                uri = f"file:{quote(self._location.location)}?mode=memory&cache=shared"
                self._conn = sqlite3.connect(
                    uri, uri=True, check_same_thread=False, isolation_level=None
                )
            else:
                data_file = self._location.artifact(".data")
                data_file.parent.mkdir(parents=True, exist_ok=True)
                self._conn = sqlite3.connect(
                    str(data_file), check_same_thread=False, isolation_level=None
                )
                self._write_properties()
                self._write_script()
                self._redo_log = open(self._location.artifact(".log"), "a", encoding="utf-8")

            logger.info(
                "database_opened",
                alias=self._alias,
                storage=self._location.prefix,
                location=self._location.location,
            )

    def execute(self, sql: str) -> ExecutionResult:
        """Execute a single SQL statement.

        SQL errors are returned as unsuccessful results, never raised.

        Raises:
            RuntimeError: If the database is not open.
        """
        with self._lock:
            if self._conn is None:
                raise RuntimeError(f"Database {self._alias} is not open")

            if not self._silent:
                logger.info("statement", database=self._alias, sql=sql)

            if sql.strip().rstrip(";").strip().upper() == CHECKPOINT_STATEMENT:
                self.checkpoint()
                return ExecutionResult(message="OK: checkpoint")

            try:
                cursor = self._conn.execute(sql)
                rows = cursor.fetchall()
            except (sqlite3.Error, sqlite3.Warning) as e:
                # sqlite3.Warning: more than one statement (Python < 3.11)
                return ExecutionResult(success=False, message=f"Error: {e}")

            columns = [d[0] for d in cursor.description] if cursor.description else []
            if not columns and self._redo_log is not None:
                self._redo_log.write(sql.rstrip().rstrip(";") + ";\n")
                self._redo_log.flush()

            return ExecutionResult(
                columns=columns,
                rows=rows,
                affected_rows=max(cursor.rowcount, 0),
            )

    def checkpoint(self) -> None:
        """Write the script and backup files and truncate the redo log.

        No-op for in-memory databases.
        """
        with self._lock:
            if self._conn is None or self._location.is_memory:
                return

            self._write_script()

            backup = sqlite3.connect(str(self._location.artifact(".backup")))
            try:
                self._conn.backup(backup)
            finally:
                backup.close()

            if self._redo_log is not None:
                self._redo_log.seek(0)
                self._redo_log.truncate()
                self._redo_log.flush()

            logger.debug("database_checkpoint", alias=self._alias)

    def close(self) -> None:
        """Checkpoint and close the database."""
        with self._lock:
            if self._conn is None:
                return
            try:
                self.checkpoint()
            finally:
                if self._redo_log is not None:
                    self._redo_log.close()
                    self._redo_log = None
                self._conn.close()
                self._conn = None
            logger.info("database_closed", alias=self._alias)

    def _write_properties(self) -> None:
        from db_launcher import __version__

        lines = [
            "#DB Launcher database properties",
            f"version={__version__}",
            f"engine=sqlite {sqlite3.sqlite_version}",
            f"alias={self._alias}",
        ]
        lines.extend(f"{key}={value}" for key, value in self._location.properties.items())
        self._location.artifact(".properties").write_text("\n".join(lines) + "\n", encoding="utf-8")

    def _write_script(self) -> None:
        script = "\n".join(self._conn.iterdump())
        self._location.artifact(".script").write_text(script + "\n", encoding="utf-8")

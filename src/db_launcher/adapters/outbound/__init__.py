"""Outbound adapters - servers, storage engine and exit hooks."""

from db_launcher.adapters.outbound.atexit_registrar import AtexitRegistrar
from db_launcher.adapters.outbound.server_base import DatabaseServerBase, UnknownDatabaseError
from db_launcher.adapters.outbound.sqlite_database import (
    DatabaseLocation,
    ExecutionResult,
    SqliteDatabase,
    parse_database_url,
)
from db_launcher.adapters.outbound.sqlite_server import SqliteServer
from db_launcher.adapters.outbound.sqlite_web_server import SqliteWebServer

__all__ = [
    "AtexitRegistrar",
    "DatabaseServerBase",
    "UnknownDatabaseError",
    "DatabaseLocation",
    "ExecutionResult",
    "SqliteDatabase",
    "parse_database_url",
    "SqliteServer",
    "SqliteWebServer",
]

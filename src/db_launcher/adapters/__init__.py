"""Adapters layer - concrete implementations of port interfaces.

Adapters provide the actual implementations:
- Inbound adapters: Handle incoming requests (REST, CLI)
- Outbound adapters: Database servers, SQLite storage, exit hooks
"""

from db_launcher.adapters.outbound import (
    AtexitRegistrar,
    SqliteDatabase,
    SqliteServer,
    SqliteWebServer,
)

__all__ = [
    # Outbound adapters
    "AtexitRegistrar",
    "SqliteDatabase",
    "SqliteServer",
    "SqliteWebServer",
]

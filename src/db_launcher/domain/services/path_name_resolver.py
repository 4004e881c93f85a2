"""Database name and storage location resolution.

A configured db_name may be a relative path (``data/testdb``). The server
registers the database under the last path segment, while the storage
location keeps the full path:

    db_name       name     connection_url
    testdb        testdb   file:testdb;sql.enforce_strict_size=true
    data/testdb   testdb   file:data/testdb;sql.enforce_strict_size=true
"""

from __future__ import annotations

from db_launcher.domain.value_objects import (
    FILE_PREFIX,
    MEMORY_PREFIX,
    URL_PROPERTIES,
    ResolvedIdentity,
)

PATH_SEPARATOR = "/"


def storage_prefix(is_transient: bool) -> str:
    """Return ``mem:`` for transient storage, ``file:`` otherwise."""
    return MEMORY_PREFIX if is_transient else FILE_PREFIX


def resolve(db_name: str, is_transient: bool) -> ResolvedIdentity:
    """Derive the registered name and connection URL for a database.

    Args:
        db_name: Configured database name, possibly containing ``/``.
        is_transient: Whether the database lives in memory.

    Returns:
        The resolved identity. Any string is accepted as-is.
    """
    _, _, name = db_name.rpartition(PATH_SEPARATOR)
    prefix = storage_prefix(is_transient)
    return ResolvedIdentity(
        name=name,
        storage_prefix=prefix,
        connection_url=prefix + db_name + URL_PROPERTIES,
    )

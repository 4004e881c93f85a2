"""Resolved database identity."""

from __future__ import annotations

from dataclasses import dataclass

MEMORY_PREFIX = "mem:"
FILE_PREFIX = "file:"

# Appended to every connection URL handed to the server
URL_PROPERTIES = ";sql.enforce_strict_size=true"

# Slot used for the launched database
DEFAULT_SLOT = 0


@dataclass(frozen=True, slots=True)
class ResolvedIdentity:
    """Name and storage location derived from a configured db_name.

    Attributes:
        name: Alias the database is registered under (last path segment).
        storage_prefix: ``mem:`` for transient storage, ``file:`` otherwise.
        connection_url: Storage location handed to the server. Built from
            the full db_name, not from ``name``.
    """

    name: str
    storage_prefix: str
    connection_url: str

    @property
    def is_transient(self) -> bool:
        return self.storage_prefix == MEMORY_PREFIX

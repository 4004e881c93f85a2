"""Value objects for the database launcher domain.

Exports:
    Identity:
        - ResolvedIdentity: Registered name, storage prefix and connection URL
        - MEMORY_PREFIX, FILE_PREFIX: Storage prefixes
        - URL_PROPERTIES: Properties appended to every connection URL
        - DEFAULT_SLOT: Database slot used by the launcher

    Server Types:
        - ServerMode: Server variants (SERVER, WEBSERVER)
        - ServerState: Server run states (SHUTDOWN, OPENING, ONLINE, CLOSING)
        - LifecyclePhase: Phases of a launch
"""

from db_launcher.domain.value_objects.identity import (
    DEFAULT_SLOT,
    FILE_PREFIX,
    MEMORY_PREFIX,
    URL_PROPERTIES,
    ResolvedIdentity,
)
from db_launcher.domain.value_objects.server_types import (
    LifecyclePhase,
    ServerMode,
    ServerState,
)

__all__ = [
    # Identity
    "ResolvedIdentity",
    "MEMORY_PREFIX",
    "FILE_PREFIX",
    "URL_PROPERTIES",
    "DEFAULT_SLOT",
    # Server types
    "ServerMode",
    "ServerState",
    "LifecyclePhase",
]

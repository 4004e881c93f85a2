"""Server variant, server state and lifecycle phase enumerations."""

from __future__ import annotations

from enum import Enum, auto


class ServerMode(Enum):
    """Server variants that can be launched.

    SERVER serves the line-delimited JSON data protocol over TCP.
    WEBSERVER fronts the same engine with an HTTP/JSON API; it is the
    only variant for which the port carries HTTP semantics.
    """

    SERVER = "server"
    WEBSERVER = "webserver"

    @classmethod
    def parse(cls, text: str) -> ServerMode:
        """Look up a variant by name, ignoring case.

        Raises:
            ValueError: If the name is not a supported variant.
        """
        return cls(text.lower())


class ServerState(Enum):
    """Run state of a database server.

        SHUTDOWN ──start()──> OPENING ──bound──> ONLINE
            ^                                      │
            └──────────── CLOSING <──stop()────────┘

    The state descriptor reported by a server is the state name.
    """

    SHUTDOWN = auto()
    OPENING = auto()
    ONLINE = auto()
    CLOSING = auto()

    @property
    def descriptor(self) -> str:
        return self.name


class LifecyclePhase(Enum):
    """Phases of a launch, in the order they are reached.

    ENTRY_CLEANUP and EXIT_CLEANUP_SCHEDULED are skipped when the
    corresponding cleanup policy is off.
    """

    INIT = auto()
    ENTRY_CLEANUP = auto()
    CONSTRUCTED = auto()
    CONFIGURED = auto()
    STARTED = auto()
    EXIT_CLEANUP_SCHEDULED = auto()

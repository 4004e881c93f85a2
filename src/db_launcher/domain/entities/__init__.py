"""Domain entities for the database launcher.

Exports:
    ServerConfig:
        - ServerConfig: Immutable launch configuration record
"""

from db_launcher.domain.entities.server_config import ServerConfig

__all__ = [
    "ServerConfig",
]

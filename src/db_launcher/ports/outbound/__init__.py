"""Outbound ports - dependencies the launcher drives."""

from db_launcher.ports.outbound.database_server import DatabaseServer
from db_launcher.ports.outbound.exit_registrar import ExitRegistrar

__all__ = [
    "DatabaseServer",
    "ExitRegistrar",
]

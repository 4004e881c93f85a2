"""Ports layer - interface definitions following Hexagonal Architecture.

Outbound ports define what the launcher needs from the outside world:
a database server it can configure and start (DatabaseServer) and a
place to register files for deletion at process exit (ExitRegistrar).
"""

from db_launcher.ports.outbound import DatabaseServer, ExitRegistrar

__all__ = [
    "DatabaseServer",
    "ExitRegistrar",
]

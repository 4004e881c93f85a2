"""Application layer for the database launcher.

Exports:
    Lifecycle:
        - LifecycleManager: Runs a launch from a ServerConfig
        - LaunchResult: Running server and launch outcome
    Server Factory:
        - ServerFactory: Creates the server variant for a mode
        - ConfigurationError: Unsupported mode
        - LauncherError: Base launcher error
"""

from db_launcher.application.lifecycle_manager import LaunchResult, LifecycleManager
from db_launcher.application.server_factory import (
    ConfigurationError,
    LauncherError,
    ServerFactory,
)

__all__ = [
    "LifecycleManager",
    "LaunchResult",
    "ServerFactory",
    "ConfigurationError",
    "LauncherError",
]

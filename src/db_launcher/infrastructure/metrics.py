"""Prometheus metrics for the database launcher."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Gauge,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all launcher metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Lifecycle metrics
        self.launches_total = Counter(
            "db_launcher_launches_total",
            "Total number of server launches",
            ["mode", "status"],  # status: started, config_error, start_error
            registry=self._registry,
        )

        self.servers_online = Gauge(
            "db_launcher_servers_online",
            "Number of servers currently online",
            registry=self._registry,
        )

        # Cleanup metrics
        self.entry_cleanup_deleted_total = Counter(
            "db_launcher_entry_cleanup_deleted_total",
            "Total entries removed by entry cleanup",
            registry=self._registry,
        )

        self.entry_cleanup_failed_total = Counter(
            "db_launcher_entry_cleanup_failed_total",
            "Total entries entry cleanup failed to remove",
            registry=self._registry,
        )

        self.exit_deletions_scheduled_total = Counter(
            "db_launcher_exit_deletions_scheduled_total",
            "Total artifact files scheduled for deletion at exit",
            registry=self._registry,
        )

        # Statement metrics
        self.statements_total = Counter(
            "db_launcher_statements_total",
            "Total SQL statements served",
            ["variant", "status"],  # status: success, error
            registry=self._registry,
        )

        self.info = Info(
            "db_launcher",
            "Database launcher information",
            registry=self._registry,
        )


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up Prometheus metrics server.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    _metrics = MetricsRegistry(registry)

    from db_launcher import __version__
    _metrics.info.info({
        "version": __version__,
    })

    start_http_server(port, registry=registry or REGISTRY)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics

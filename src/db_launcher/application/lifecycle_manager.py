"""Server lifecycle orchestration.

A launch runs these phases in order, stopping at the first failure:

    INIT -> [ENTRY_CLEANUP] -> CONSTRUCTED -> CONFIGURED -> STARTED
         -> [EXIT_CLEANUP_SCHEDULED]

Only an unsupported mode is reported as a launcher error. Cleanup is best
effort and never fails a launch. Start failures propagate unchanged, and
nothing done in earlier phases is undone.

The started server keeps running in the background. The manager never
stops it; LaunchResult.stop() is there for callers that want to.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from db_launcher.adapters.outbound import AtexitRegistrar
from db_launcher.application.server_factory import ConfigurationError, ServerFactory
from db_launcher.domain.entities import ServerConfig
from db_launcher.domain.services import (
    CleanupReport,
    delete_matching,
    resolve,
    schedule_artifact_deletion,
)
from db_launcher.domain.value_objects import DEFAULT_SLOT, LifecyclePhase, ResolvedIdentity
from db_launcher.infrastructure.logging import get_logger, launch_context
from db_launcher.infrastructure.metrics import MetricsRegistry, get_metrics
from db_launcher.infrastructure.tracing import phase_span, trace_span
from db_launcher.ports.outbound import DatabaseServer, ExitRegistrar

logger = get_logger(__name__)

LAUNCH_MESSAGE = "Database server launched"


@dataclass
class LaunchResult:
    """Outcome of a successful launch.

    Attributes:
        server: The running server.
        identity: Resolved name and connection URL.
        phases: Phases reached, in order.
        entry_cleanup: Entry cleanup report, None if entry cleanup was off.
        exit_deletions: Files scheduled for deletion at exit.
        status_lines: The status lines that were logged.
    """

    server: DatabaseServer
    identity: ResolvedIdentity
    phases: list[LifecyclePhase] = field(default_factory=list)
    entry_cleanup: CleanupReport | None = None
    exit_deletions: list[Path] = field(default_factory=list)
    status_lines: list[str] = field(default_factory=list)

    @property
    def live_name(self) -> str | None:
        return self.server.get_database_name(DEFAULT_SLOT, False)

    def stop(self) -> None:
        """Stop the server."""
        self.server.stop()


class LifecycleManager:
    """Launches a database server from a ServerConfig."""

    def __init__(
        self,
        registrar: ExitRegistrar | None = None,
        factory: ServerFactory | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            registrar: Collects exit-time deletions. The process entry point
                normally owns it; a private AtexitRegistrar is used if None.
            factory: Server factory. Defaults to the SQLite server variants.
            metrics: Metrics registry.
        """
        self._metrics = metrics or get_metrics()
        self._registrar = registrar if registrar is not None else AtexitRegistrar()
        self._factory = factory or ServerFactory(metrics=self._metrics)
        self._phases: list[LifecyclePhase] = []

    @property
    def registrar(self) -> ExitRegistrar:
        return self._registrar

    @property
    def phases(self) -> list[LifecyclePhase]:
        """Phases reached by the most recent launch."""
        return list(self._phases)

    def launch(self, config: ServerConfig) -> LaunchResult:
        """Clean up, create, configure and start a server.

        Args:
            config: Launch configuration.

        Returns:
            The running server and what was done to launch it.

        Raises:
            ConfigurationError: If config.mode is not a supported variant.
        """
        self._phases = [LifecyclePhase.INIT]

        with launch_context(db_name=config.db_name, mode=config.mode), trace_span(
            "lifecycle.launch", db_name=config.db_name, mode=config.mode
        ):
            entry_cleanup = None
            if config.delete_on_entry:
                entry_cleanup = self._entry_cleanup(config)

            try:
                server = self._factory.create(config.mode)
            except ConfigurationError as e:
                self._metrics.launches_total.labels(mode="unsupported", status="config_error").inc()
                logger.error("unsupported_mode", error=str(e))
                raise
            self._phases.append(LifecyclePhase.CONSTRUCTED)
            mode_label = config.mode.lower()

            identity = self._configure(server, config)
            self._phases.append(LifecyclePhase.CONFIGURED)

            with phase_span(LifecyclePhase.STARTED, url=identity.connection_url):
                try:
                    server.start()
                except Exception:
                    self._metrics.launches_total.labels(mode=mode_label, status="start_error").inc()
                    raise
            self._phases.append(LifecyclePhase.STARTED)
            self._metrics.launches_total.labels(mode=mode_label, status="started").inc()

            exit_deletions: list[Path] = []
            if not config.is_transient and config.delete_on_exit:
                exit_deletions = self._schedule_exit_cleanup(config)

            result = LaunchResult(
                server=server,
                identity=identity,
                phases=self.phases,
                entry_cleanup=entry_cleanup,
                exit_deletions=exit_deletions,
            )
            result.status_lines = [
                LAUNCH_MESSAGE,
                server.get_state_descriptor(),
                f"Live name: {result.live_name}",
            ]
            for line in result.status_lines:
                logger.info(line)

        return result

    def _entry_cleanup(self, config: ServerConfig) -> CleanupReport:
        logger.info("Deleting database files on entry", base_dir=str(config.base_dir))
        with phase_span(LifecyclePhase.ENTRY_CLEANUP, base_dir=str(config.base_dir)):
            report = delete_matching(config.base_dir, config.db_name)
        self._metrics.entry_cleanup_deleted_total.inc(report.deleted)
        self._metrics.entry_cleanup_failed_total.inc(report.failed)
        logger.debug("entry_cleanup_done", deleted=report.deleted, failed=report.failed)
        self._phases.append(LifecyclePhase.ENTRY_CLEANUP)
        return report

    def _configure(self, server: DatabaseServer, config: ServerConfig) -> ResolvedIdentity:
        server.set_silent(config.silent)
        server.set_trace(config.trace)
        server.set_tls(config.tls)
        server.set_tls_files(config.tls_certfile, config.tls_keyfile)
        server.set_address(config.address)
        if config.port != 0:
            server.set_port(config.port)

        identity = resolve(config.db_name, config.is_transient)
        server.set_database_name(DEFAULT_SLOT, identity.name)
        server.set_database_path(DEFAULT_SLOT, identity.connection_url)
        return identity

    def _schedule_exit_cleanup(self, config: ServerConfig) -> list[Path]:
        with phase_span(LifecyclePhase.EXIT_CLEANUP_SCHEDULED):
            scheduled = schedule_artifact_deletion(config.db_name, self._registrar)
        self._metrics.exit_deletions_scheduled_total.inc(len(scheduled))
        logger.debug("exit_cleanup_scheduled", files=[str(p) for p in scheduled])
        self._phases.append(LifecyclePhase.EXIT_CLEANUP_SCHEDULED)
        return scheduled

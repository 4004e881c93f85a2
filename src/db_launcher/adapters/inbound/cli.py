"""Command line entry point.

Usage:
    python -m db_launcher --mode webserver --db-name data/testdb --port 8080 \\
        --delete-on-entry --delete-on-exit

Options not given on the command line come from the environment
(DB_LAUNCHER_LAUNCH__MODE, DB_LAUNCHER_LAUNCH__DB_NAME, ...). The process
owns the exit registrar: scheduled artifact files are removed when the
interpreter exits after the server is stopped.
"""

from __future__ import annotations

import argparse
import signal
import sys
import threading
from typing import Any, Sequence

from pydantic import ValidationError

from db_launcher.adapters.outbound import AtexitRegistrar
from db_launcher.application import ConfigurationError, LifecycleManager
from db_launcher.infrastructure.config import Config, LaunchConfig, get_config
from db_launcher.infrastructure.logging import get_logger, setup_logging
from db_launcher.infrastructure.metrics import get_metrics, setup_metrics
from db_launcher.infrastructure.tracing import setup_tracing

EXIT_OK = 0
EXIT_START_FAILED = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="db-launcher",
        description="Launch an embedded database server for a test or development run.",
    )
    parser.add_argument("--mode", help="server or webserver")
    parser.add_argument("--db-name", dest="db_name", help="database name or relative path")
    parser.add_argument("--port", type=int, help="listen port (0 keeps the default)")
    parser.add_argument("--address", help="bind address")
    parser.add_argument(
        "--transient", dest="is_transient", action=argparse.BooleanOptionalAction, default=None,
        help="in-memory database instead of file-backed",
    )
    parser.add_argument(
        "--delete-on-entry", dest="delete_on_entry", action=argparse.BooleanOptionalAction,
        default=None, help="delete leftover database files before start",
    )
    parser.add_argument(
        "--delete-on-exit", dest="delete_on_exit", action=argparse.BooleanOptionalAction,
        default=None, help="delete database files at exit (file-backed only)",
    )
    parser.add_argument(
        "--silent", action=argparse.BooleanOptionalAction, default=None,
        help="--no-silent logs every statement",
    )
    parser.add_argument(
        "--trace", action=argparse.BooleanOptionalAction, default=None, help="log wire traffic"
    )
    parser.add_argument(
        "--tls", action=argparse.BooleanOptionalAction, default=None, help="serve over TLS"
    )
    parser.add_argument("--tls-certfile", dest="tls_certfile", help="TLS certificate chain")
    parser.add_argument("--tls-keyfile", dest="tls_keyfile", help="TLS private key")
    return parser


def load_config(args: argparse.Namespace, base: Config | None = None) -> Config:
    """Overlay command line options on the environment settings."""
    base = base or get_config()
    overrides: dict[str, Any] = {
        key: value for key, value in vars(args).items() if value is not None
    }
    launch = LaunchConfig.model_validate({**base.launch.model_dump(), **overrides})
    return base.model_copy(update={"launch": launch})


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = load_config(args)
    except ValidationError as e:
        setup_logging()
        get_logger(__name__).error("invalid_settings", error=str(e))
        return EXIT_CONFIG_ERROR

    obs = config.observability
    setup_logging(obs.log_level, obs.log_format)
    if obs.otel_endpoint:
        setup_tracing(obs.otel_service_name, obs.otel_endpoint)
    metrics = setup_metrics(config.metrics.port) if config.metrics.enabled else get_metrics()

    log = get_logger(__name__)
    manager = LifecycleManager(registrar=AtexitRegistrar(), metrics=metrics)

    try:
        result = manager.launch(config.to_server_config())
    except ConfigurationError as e:
        log.error("configuration_error", error=str(e), mode=e.mode)
        return EXIT_CONFIG_ERROR
    except (OSError, ValueError, RuntimeError) as e:
        log.error("start_failed", error=str(e), exc_info=True)
        return EXIT_START_FAILED

    stop = threading.Event()
    signal.signal(signal.SIGTERM, lambda signum, frame: stop.set())
    try:
        stop.wait()
    except KeyboardInterrupt:
        pass
    finally:
        log.info("stopping_server")
        result.stop()
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())

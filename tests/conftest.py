"""Pytest configuration and fixtures for db_launcher tests."""

from __future__ import annotations

import socket
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from prometheus_client import CollectorRegistry

from db_launcher.domain.value_objects import ServerMode, ServerState
from db_launcher.infrastructure.metrics import MetricsRegistry


class FakeServer:
    """In-process stand-in for a database server that records its settings."""

    variant = "fake"

    def __init__(self) -> None:
        self.silent = True
        self.trace = False
        self.tls = False
        self.tls_files: tuple[str | None, str | None] = (None, None)
        self.address = "0.0.0.0"
        self.port: int | None = None
        self.names: dict[int, str] = {}
        self.paths: dict[int, str] = {}
        self.state = ServerState.SHUTDOWN
        self.start_calls = 0
        self.stop_calls = 0

    def set_silent(self, silent: bool) -> None:
        self.silent = silent

    def set_trace(self, trace: bool) -> None:
        self.trace = trace

    def set_tls(self, tls: bool) -> None:
        self.tls = tls

    def set_tls_files(self, certfile: str | None, keyfile: str | None) -> None:
        self.tls_files = (certfile, keyfile)

    def set_address(self, address: str) -> None:
        self.address = address

    def set_port(self, port: int) -> None:
        self.port = port

    def get_port(self) -> int:
        return self.port if self.port is not None else 9001

    def set_database_name(self, index: int, name: str) -> None:
        self.names[index] = name

    def set_database_path(self, index: int, path: str) -> None:
        self.paths[index] = path

    def get_database_name(self, index: int, as_configured: bool) -> str | None:
        if as_configured or self.state == ServerState.ONLINE:
            return self.names.get(index)
        return None

    def get_state(self) -> ServerState:
        return self.state

    def get_state_descriptor(self) -> str:
        return self.state.name

    def start(self) -> None:
        self.start_calls += 1
        self.state = ServerState.ONLINE

    def stop(self) -> None:
        self.stop_calls += 1
        self.state = ServerState.SHUTDOWN


class FakeWebServer(FakeServer):
    variant = "fakeweb"


class FailingServer(FakeServer):
    """Server whose start fails as a port conflict would."""

    def start(self) -> None:
        self.start_calls += 1
        raise OSError(98, "Address already in use")


class RecordingRegistrar:
    """Exit registrar that only records registrations."""

    def __init__(self) -> None:
        self.paths: list[Path] = []

    def register(self, path: Path) -> None:
        self.paths.append(path)

    @property
    def pending(self) -> tuple[Path, ...]:
        return tuple(self.paths)

    def __len__(self) -> int:
        return len(self.paths)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def workdir(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test with a temporary directory as working directory."""
    monkeypatch.chdir(temp_dir)
    return temp_dir


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def registrar() -> RecordingRegistrar:
    return RecordingRegistrar()


@pytest.fixture
def created_servers() -> list[FakeServer]:
    """Servers created by the fake_variants factory table."""
    return []


@pytest.fixture
def fake_variants(created_servers: list[FakeServer]) -> dict:
    """Factory table building fake servers and remembering them."""

    def make(cls):
        def construct():
            server = cls()
            created_servers.append(server)
            return server
        return construct

    return {
        ServerMode.SERVER: make(FakeServer),
        ServerMode.WEBSERVER: make(FakeWebServer),
    }


@pytest.fixture
def free_port() -> int:
    """Return a TCP port that was free a moment ago."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "property: Property-based tests")

"""Integration tests launching real database servers."""

from __future__ import annotations

import json
import socket
import threading
from pathlib import Path

import httpx
import pytest

from db_launcher.adapters.outbound import SqliteServer, SqliteWebServer
from db_launcher.adapters.outbound.sqlite_server import LINE_LIMIT
from db_launcher.application import LifecycleManager, ServerFactory
from db_launcher.domain.entities import ServerConfig
from db_launcher.domain.value_objects import LifecyclePhase, ServerState


class LineClient:
    """Minimal client for the line-delimited JSON data protocol."""

    def __init__(self, port: int) -> None:
        self._sock = socket.create_connection(("127.0.0.1", port), timeout=5)
        self._file = self._sock.makefile("rwb")

    def send_raw(self, line: bytes) -> dict:
        self._file.write(line + b"\n")
        self._file.flush()
        return json.loads(self._file.readline())

    def execute(self, sql: str, database: str | None = None) -> dict:
        request = {"sql": sql}
        if database is not None:
            request["database"] = database
        return self.send_raw(json.dumps(request).encode("utf-8"))

    def close(self) -> None:
        self._file.close()
        self._sock.close()


@pytest.fixture
def manager(registrar, metrics_registry) -> LifecycleManager:
    return LifecycleManager(
        registrar=registrar,
        factory=ServerFactory(metrics=metrics_registry),
        metrics=metrics_registry,
    )


@pytest.mark.integration
class TestDataProtocolServer:
    def test_transient_round_trip(self, manager, free_port, workdir) -> None:
        config = ServerConfig(
            mode="server", db_name="TestDB", is_transient=True,
            address="127.0.0.1", port=free_port,
        )
        result = manager.launch(config)
        try:
            assert isinstance(result.server, SqliteServer)
            assert result.server.get_state() == ServerState.ONLINE
            assert result.server.get_port() == free_port
            # The live alias is normalized by the server
            assert result.live_name == "testdb"
            assert result.status_lines[1:] == ["ONLINE", "Live name: testdb"]
            assert list(workdir.iterdir()) == []

            client = LineClient(free_port)
            try:
                assert client.execute("CREATE TABLE t (id INTEGER, name TEXT)")["success"]
                insert = client.execute("INSERT INTO t VALUES (1, 'a'), (2, 'b')")
                assert insert["affected_rows"] == 2

                rows = client.execute("SELECT id, name FROM t ORDER BY id", database="TESTDB")
                assert rows["columns"] == ["id", "name"]
                assert rows["rows"] == [[1, "a"], [2, "b"]]

                assert not client.send_raw(b"not json")["success"]
                assert not client.execute("SELECT 1", database="other")["success"]
                assert not client.execute("SELEC 1")["success"]
                # Connection is still usable after errors
                assert client.execute("SELECT 1")["rows"] == [[1]]
            finally:
                client.close()
        finally:
            result.stop()

        assert result.server.get_state() == ServerState.SHUTDOWN
        assert result.server.get_database_name(0, False) is None

    def test_oversized_request_line(self, manager, free_port, workdir) -> None:
        config = ServerConfig(
            db_name="testdb", is_transient=True, address="127.0.0.1", port=free_port,
        )
        result = manager.launch(config)
        try:
            client = LineClient(free_port)
            try:
                request = json.dumps({"sql": "SELECT '" + "a" * (LINE_LIMIT + 4000) + "'"})
                response = client.send_raw(request.encode("utf-8"))
                assert response["success"] is False
                assert "too long" in response["message"]

                # The rest of the long line was skipped; the connection still works
                assert client.execute("SELECT 1")["rows"] == [[1]]
            finally:
                client.close()
        finally:
            result.stop()

    def test_statements_run_off_the_loop_thread(self, metrics_registry, free_port) -> None:
        server = SqliteServer(metrics=metrics_registry)
        server.set_address("127.0.0.1")
        server.set_port(free_port)
        server.set_database_name(0, "threads")
        server.set_database_path(0, "mem:threads")

        threads: list[str] = []
        execute = server.execute

        def recording_execute(sql, database=None):
            threads.append(threading.current_thread().name)
            return execute(sql, database)

        server.execute = recording_execute
        server.start()
        try:
            client = LineClient(free_port)
            try:
                assert client.execute("SELECT 1")["success"]
            finally:
                client.close()
        finally:
            server.stop()

        assert len(threads) == 1
        assert threads[0] != "db-launcher-server"

    def test_persistent_artifacts_scheduled(self, manager, registrar, free_port, workdir) -> None:
        config = ServerConfig(
            db_name="data/testdb", address="127.0.0.1", port=free_port,
            delete_on_exit=True,
        )
        result = manager.launch(config)
        try:
            assert result.phases[-1] == LifecyclePhase.EXIT_CLEANUP_SCHEDULED
            # .backup is only written at checkpoint, so it is not scheduled
            assert sorted(p.name for p in result.exit_deletions) == [
                "testdb.data", "testdb.log", "testdb.properties", "testdb.script",
            ]
            assert len(registrar) == 4
        finally:
            result.stop()

        assert (workdir / "data" / "testdb.backup").exists()

    def test_port_in_use(self, manager, registrar, workdir) -> None:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as blocker:
            blocker.bind(("127.0.0.1", 0))
            blocker.listen(1)
            port = blocker.getsockname()[1]

            config = ServerConfig(
                db_name="testdb", is_transient=True, address="127.0.0.1", port=port,
            )
            with pytest.raises(OSError):
                manager.launch(config)

        assert manager.phases[-1] == LifecyclePhase.CONFIGURED

    def test_tls_without_certificate(self, manager, workdir) -> None:
        config = ServerConfig(db_name="testdb", is_transient=True, tls=True, port=1)
        with pytest.raises(ValueError, match="certificate"):
            manager.launch(config)

    def test_server_is_never_restarted(self, metrics_registry, free_port) -> None:
        server = SqliteServer(metrics=metrics_registry)
        server.set_address("127.0.0.1")
        server.set_port(free_port)
        server.set_database_name(0, "restart")
        server.set_database_path(0, "mem:restart")
        server.start()
        try:
            with pytest.raises(RuntimeError):
                server.set_port(free_port + 1)
            with pytest.raises(RuntimeError):
                server.start()
        finally:
            server.stop()

        with pytest.raises(RuntimeError):
            server.start()


@pytest.mark.integration
class TestWebServer:
    def test_http_round_trip(self, manager, free_port, workdir) -> None:
        config = ServerConfig(
            mode="WebServer", db_name="data/webdb", is_transient=True,
            address="127.0.0.1", port=free_port,
        )
        result = manager.launch(config)
        try:
            assert isinstance(result.server, SqliteWebServer)
            assert result.live_name == "webdb"

            with httpx.Client(base_url=f"http://127.0.0.1:{free_port}", timeout=5) as client:
                assert client.get("/health").json()["status"] == "healthy"

                response = client.post(
                    "/execute/batch",
                    json={"statements": [
                        "CREATE TABLE t (v INTEGER)",
                        "INSERT INTO t VALUES (5)",
                    ]},
                )
                assert [r["success"] for r in response.json()] == [True, True]

                response = client.post("/execute", json={"sql": "SELECT v FROM t", "database": "webdb"})
                assert response.status_code == 200
                assert response.json()["rows"] == [[5]]

                stats = client.get("/stats").json()
                assert stats["state"] == "ONLINE"
                assert stats["databases"][0]["alias"] == "webdb"
                assert stats["databases"][0]["location"] == "data/webdb"
        finally:
            result.stop()

        assert result.server.get_state() == ServerState.SHUTDOWN

"""Data-protocol database server.

Serves newline-delimited JSON over TCP (optionally TLS) from an asyncio
event loop running in a background thread.

Request (one line):
    {"sql": "SELECT 1", "database": "testdb"}    database is optional

Response (one line):
    {"success": true, "message": "", "columns": ["1"], "rows": [[1]],
     "affected_rows": 0}

A malformed request, or one longer than LINE_LIMIT, gets an unsuccessful
response; the connection stays open until the client closes it.
"""

from __future__ import annotations

import asyncio
import json
import threading
from asyncio import StreamReader, StreamWriter
from typing import Any

from db_launcher.adapters.outbound.server_base import DatabaseServerBase, UnknownDatabaseError

# Stream buffer limit; longer request lines are rejected
LINE_LIMIT = 64 * 1024


def _error_response(message: str) -> dict[str, Any]:
    return {
        "success": False,
        "message": message,
        "columns": [],
        "rows": [],
        "affected_rows": 0,
    }


class SqliteServer(DatabaseServerBase):
    """Database server speaking the line-delimited JSON data protocol."""

    variant = "server"
    default_port = 9001
    default_tls_port = 554

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._loop: asyncio.AbstractEventLoop | None = None
        self._server: asyncio.Server | None = None
        self._thread: threading.Thread | None = None
        self._clients: set[StreamWriter] = set()

    def _serve(self) -> None:
        ssl_context = self._ssl_context()
        ready = threading.Event()
        errors: list[BaseException] = []

        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run_loop,
            args=(ssl_context, ready, errors),
            name=f"db-launcher-{self.variant}",
            daemon=True,
        )
        self._thread.start()

        if not ready.wait(self._startup_timeout):
            self._loop.call_soon_threadsafe(self._loop.stop)
            raise RuntimeError(
                f"{self.variant} server did not come online within {self._startup_timeout}s"
            )
        if errors:
            self._thread.join()
            raise errors[0]

    def _run_loop(self, ssl_context, ready: threading.Event, errors: list[BaseException]) -> None:
        loop = self._loop
        asyncio.set_event_loop(loop)
        try:
            self._server = loop.run_until_complete(
                asyncio.start_server(
                    self._handle_client,
                    self._address,
                    self.get_port(),
                    ssl=ssl_context,
                    limit=LINE_LIMIT,
                )
            )
        except OSError as e:
            errors.append(e)
            ready.set()
            loop.close()
            return

        self._bound_port = self._server.sockets[0].getsockname()[1]
        ready.set()

        try:
            loop.run_forever()
        finally:
            tasks = asyncio.all_tasks(loop)
            for task in tasks:
                task.cancel()
            loop.run_until_complete(asyncio.gather(*tasks, return_exceptions=True))
            loop.close()

    def _shutdown(self) -> None:
        if self._loop is None or self._thread is None:
            return
        future = asyncio.run_coroutine_threadsafe(self._close_server(), self._loop)
        future.result(timeout=self._startup_timeout)
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=self._startup_timeout)

    async def _close_server(self) -> None:
        if self._server is None:
            return
        self._server.close()
        for writer in list(self._clients):
            writer.close()
        await self._server.wait_closed()

    async def _handle_client(self, reader: StreamReader, writer: StreamWriter) -> None:
        peer = writer.get_extra_info("peername")
        loop = asyncio.get_running_loop()
        self._clients.add(writer)
        self._log.debug("client_connected", peer=str(peer))
        try:
            while True:
                line = await self._read_line(reader)
                if line == b"":
                    break

                if line is None:
                    response = _error_response("Error: request line too long")
                else:
                    if self._trace:
                        self._log.debug(
                            "wire_request", peer=str(peer), data=line.decode("utf-8", "replace")
                        )
                    # SQLite calls block
                    response = await loop.run_in_executor(None, self._dispatch, line)

                payload = json.dumps(response).encode("utf-8") + b"\n"
                if self._trace:
                    self._log.debug("wire_response", peer=str(peer), data=payload.decode("utf-8"))

                writer.write(payload)
                await writer.drain()
        except ConnectionError as e:
            self._log.debug("client_connection_lost", peer=str(peer), error=str(e))
        finally:
            self._clients.discard(writer)
            writer.close()
            self._log.debug("client_disconnected", peer=str(peer))

    async def _read_line(self, reader: StreamReader) -> bytes | None:
        """Read one request line.

        Returns:
            The line, b"" once the client has closed, or None for a line
            longer than the stream limit. An oversized line is consumed up
            to and including its newline.
        """
        try:
            return await reader.readuntil(b"\n")
        except asyncio.IncompleteReadError as e:
            return e.partial
        except asyncio.LimitOverrunError as e:
            consumed = e.consumed

        self._log.debug("request_line_too_long", limit=LINE_LIMIT)
        while True:
            await reader.readexactly(consumed)
            try:
                await reader.readuntil(b"\n")
                return None
            except asyncio.IncompleteReadError:
                return b""
            except asyncio.LimitOverrunError as e:
                consumed = e.consumed

    def _dispatch(self, line: bytes) -> dict[str, Any]:
        """Turn one request line into a response object."""
        try:
            request = json.loads(line)
        except ValueError as e:
            return _error_response(f"Error: malformed request: {e}")

        if not isinstance(request, dict) or not isinstance(request.get("sql"), str):
            return _error_response("Error: request must be an object with an 'sql' string")

        database = request.get("database")
        if database is not None and not isinstance(database, str):
            return _error_response("Error: 'database' must be a string")

        try:
            return self.execute(request["sql"], database).to_dict()
        except UnknownDatabaseError as e:
            return _error_response(f"Error: {e}")

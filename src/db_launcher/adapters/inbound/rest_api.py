"""REST API adapter for the HTTP-fronted database server.

This module provides the FastAPI application served by SqliteWebServer.

Endpoints:
    GET /health - Health check
    GET /stats - Server state and served databases
    POST /execute - Execute a SQL statement
    POST /execute/batch - Execute several SQL statements

Usage:
    from db_launcher.adapters.inbound.rest_api import create_app

    app = create_app(server)
    # SqliteWebServer runs it with uvicorn in a background thread
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from db_launcher.adapters.outbound.server_base import UnknownDatabaseError
from db_launcher.domain.value_objects import ServerState

if TYPE_CHECKING:
    from db_launcher.adapters.outbound.server_base import DatabaseServerBase


class SQLRequest(BaseModel):
    """Request model for SQL execution."""

    sql: str = Field(..., description="SQL statement to execute")
    database: str | None = Field(None, description="Database alias (slot 0 if omitted)")


class BatchRequest(BaseModel):
    """Request model for batch SQL execution."""

    statements: list[str] = Field(..., description="SQL statements, executed in order")
    database: str | None = Field(None, description="Database alias (slot 0 if omitted)")


class SQLResponse(BaseModel):
    """Response model for SQL execution."""

    success: bool = Field(..., description="Whether the statement succeeded")
    message: str = Field("", description="Status or error message")
    columns: list[str] = Field(default_factory=list, description="Column names")
    rows: list[list[Any]] = Field(default_factory=list, description="Result rows")
    affected_rows: int = Field(0, description="Number of affected rows")


class DatabaseInfo(BaseModel):
    """A served database."""

    slot: int
    alias: str
    storage: str
    location: str


class StatsResponse(BaseModel):
    """Response model for server statistics."""

    state: str = Field(..., description="Server state descriptor")
    variant: str = Field(..., description="Server variant")
    port: int = Field(..., description="Listen port")
    tls: bool = Field(..., description="Whether TLS is on")
    databases: list[DatabaseInfo] = Field(default_factory=list, description="Served databases")


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status")
    version: str = Field(..., description="API version")


def create_app(server: DatabaseServerBase) -> FastAPI:
    """Create a FastAPI application fronting a database server.

    Args:
        server: The server whose databases are exposed.

    Returns:
        A configured FastAPI application.
    """
    from db_launcher import __version__

    app = FastAPI(
        title="DB Launcher Web Server",
        description="HTTP API for executing SQL against a launched database",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _require_online() -> None:
        if server.get_state() != ServerState.ONLINE:
            raise HTTPException(status_code=503, detail="Server not online")

    def _execute(sql: str, database: str | None) -> SQLResponse:
        try:
            result = server.execute(sql, database)
        except UnknownDatabaseError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return SQLResponse(**result.to_dict())

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            status="healthy" if server.get_state() == ServerState.ONLINE else "unhealthy",
            version=__version__,
        )

    @app.get("/stats", response_model=StatsResponse, tags=["Stats"])
    async def get_stats() -> StatsResponse:
        """Get server state and served databases."""
        return StatsResponse(
            state=server.get_state_descriptor(),
            variant=server.variant,
            port=server.get_port(),
            tls=server.tls,
            databases=[DatabaseInfo(**info) for info in server.describe_databases()],
        )

    @app.post("/execute", response_model=SQLResponse, tags=["SQL"])
    def execute_sql(request: SQLRequest) -> SQLResponse:
        """Execute a SQL statement.

        Args:
            request: The SQL request containing the statement.

        Returns:
            The execution result.
        """
        _require_online()
        return _execute(request.sql, request.database)

    @app.post("/execute/batch", response_model=list[SQLResponse], tags=["SQL"])
    def execute_batch(request: BatchRequest) -> list[SQLResponse]:
        """Execute multiple SQL statements."""
        _require_online()
        return [_execute(sql, request.database) for sql in request.statements]

    return app

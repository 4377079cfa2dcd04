"""
FastMCP server initialization and configuration.

Main server class that builds the FastMCP app, registers the Opsgenie
alert tools and runs one of the two transports: stdio, or streamable HTTP
with per-session transports managed by HTTPSessionManager.
"""

import logging
import socket
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Literal, Optional

import httpx
import uvicorn
from fastmcp import FastMCP
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from opsgenie_mcp.adapters import AlertAdapter
from opsgenie_mcp.auth import require_credential
from opsgenie_mcp.opsgenie.client import DEFAULT_TIMEOUT, OPSGENIE_API_BASE, OpsgenieClient
from opsgenie_mcp.session import HTTPSessionManager
from opsgenie_mcp.tools import register_alert_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "opsgenie-mcp-server"
MCP_PATH = "/mcp"


def create_http_app(app: FastMCP, json_response: bool = False) -> Starlette:
    """
    Build the Starlette app for the streamable HTTP entrypoint.

    Routes:
        /mcp     all methods, multiplexed on the mcp-session-id header
        /health  liveness check with the active session count

    Args:
        app: FastMCP app whose low-level server handles protocol messages
        json_response: Answer POSTs with JSON instead of SSE streams

    Returns:
        Starlette application; the session manager is attached as
        app.state.session_manager
    """
    session_manager = HTTPSessionManager(app._mcp_server, json_response=json_response)

    async def health(request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok", **session_manager.stats()})

    @asynccontextmanager
    async def lifespan(starlette_app: Starlette):
        async with session_manager.run():
            logger.info("HTTP session manager started")
            yield
        logger.info("HTTP session manager stopped")

    http_app = Starlette(
        routes=[
            Route(MCP_PATH, endpoint=session_manager),
            Route("/health", endpoint=health, methods=["GET"]),
        ],
        lifespan=lifespan,
    )
    http_app.state.session_manager = session_manager
    return http_app


@dataclass
class OpsgenieMCPServer:
    """
    MCP server exposing the Opsgenie alert API as tools.

    Attributes:
        host: HTTP bind address (default: "127.0.0.1", http only)
        port: HTTP port (default: 3000, http only)
        transport: Transport mode ("stdio" or "http")
        api_key: Process-wide default Opsgenie API key
        api_url: Opsgenie API root
        timeout: Opsgenie request timeout in seconds
        json_response: Answer HTTP POSTs with JSON instead of SSE streams
        http_transport: Optional httpx transport for the Opsgenie client (tests)
    """

    host: str = "127.0.0.1"
    port: int = 3000
    transport: Literal["stdio", "http"] = "stdio"
    api_key: Optional[str] = None
    api_url: str = OPSGENIE_API_BASE
    timeout: float = DEFAULT_TIMEOUT
    json_response: bool = False
    http_transport: Optional[httpx.AsyncBaseTransport] = field(default=None, repr=False)
    client: Optional[OpsgenieClient] = field(default=None, init=False, repr=False)
    _app: Optional[FastMCP] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        """Validate configuration and build the FastMCP app."""
        if self.transport not in ("stdio", "http"):
            raise ValueError(
                f"Invalid transport '{self.transport}'. "
                "Must be 'stdio' or 'http'."
            )

        self.client = OpsgenieClient(
            base_url=self.api_url,
            timeout=self.timeout,
            transport=self.http_transport,
        )
        self._app = FastMCP(SERVER_NAME)
        register_alert_tools(self._app, AlertAdapter(self.client), default_api_key=self.api_key)

    @property
    def app(self) -> FastMCP:
        return self._app

    def _check_port_available(self, host: str, port: int) -> bool:
        """
        Check if port is available for binding.

        Args:
            host: Host address to check
            port: Port number to check

        Returns:
            True if port is available, False otherwise
        """
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                s.bind((host, port))
                return True
        except OSError:
            return False

    def http_app(self) -> Starlette:
        return create_http_app(self._app, json_response=self.json_response)

    def start(self):
        """
        Start the MCP server with the configured transport.

        Raises:
            CredentialError: stdio transport without a default API key
            RuntimeError: If the port is unavailable (http) or the server fails to start
        """
        if self.transport == "stdio":
            # stdio has no request headers, so the key must be known up front
            require_credential(self.api_key)
            logger.info("Opsgenie MCP server running on stdio")
            try:
                self._app.run()  # STDIO is the default transport
            except Exception as e:
                raise RuntimeError(f"Failed to start MCP server with stdio transport: {e}") from e

        elif self.transport == "http":
            if not self._check_port_available(self.host, self.port):
                raise RuntimeError(
                    f"Port {self.port} already in use. "
                    f"Choose a different port or stop the conflicting service."
                )

            logger.info("Opsgenie MCP server running on http://%s:%s%s", self.host, self.port, MCP_PATH)
            try:
                uvicorn.run(self.http_app(), host=self.host, port=self.port, log_level="warning")
            except Exception as e:
                raise RuntimeError(
                    f"Failed to start MCP server on {self.host}:{self.port}: {e}"
                ) from e

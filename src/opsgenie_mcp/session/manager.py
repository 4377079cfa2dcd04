"""
Streamable HTTP session manager.

Routes every request on the single MCP endpoint to the transport of its
session:

- no mcp-session-id header and an initialize body: allocate a session id,
  create a transport, register it and start the MCP server loop on it
- known mcp-session-id: reuse the registered transport
- anything else: HTTP 400 with a JSON-RPC error envelope

A session is removed from the table when its server loop ends, which
happens when the client sends DELETE, when the loop fails, or when the
manager shuts down.
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Callable, Dict, Optional
from uuid import uuid4

import anyio
from anyio.abc import TaskGroup, TaskStatus
from mcp.server.lowlevel import Server
from mcp.server.streamable_http import MCP_SESSION_ID_HEADER, StreamableHTTPServerTransport
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import Message, Receive, Scope, Send

from opsgenie_mcp.auth import REQUEST_STATE_KEY, credential_from_request

from .registry import SessionRegistry

logger = logging.getLogger(__name__)

SESSION_ERROR_CODE = -32000
INTERNAL_ERROR_CODE = -32603

TransportFactory = Callable[[str], StreamableHTTPServerTransport]


def jsonrpc_error(code: int, message: str, status_code: int) -> JSONResponse:
    """JSON-RPC error envelope for failures that happen before any MCP request id is known."""
    return JSONResponse(
        {"jsonrpc": "2.0", "error": {"code": code, "message": message}, "id": None},
        status_code=status_code,
    )


def is_initialize_request(body: bytes) -> bool:
    """True if the body is a single JSON-RPC initialize request."""
    try:
        message = json.loads(body)
    except ValueError:
        return False
    return (
        isinstance(message, dict)
        and message.get("jsonrpc") == "2.0"
        and message.get("method") == "initialize"
        and "id" in message
    )


def _replay_receive(body: bytes, receive: Receive) -> Receive:
    """Hand an already-consumed request body to the next ASGI consumer."""
    replayed = False

    async def replay() -> Message:
        nonlocal replayed
        if not replayed:
            replayed = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


class HTTPSessionManager:
    """
    ASGI endpoint that multiplexes MCP sessions over one HTTP path.

    Must be running (see run()) before it can accept requests; the task
    group it owns hosts one MCP server loop per live session.

    Example:
        manager = HTTPSessionManager(fastmcp_app._mcp_server)
        async with manager.run():
            ...  # serve requests with manager as the ASGI app
    """

    def __init__(
        self,
        server: Server,
        json_response: bool = False,
        transport_factory: Optional[TransportFactory] = None,
    ):
        """
        Initialize the manager.

        Args:
            server: Low-level MCP server that handles protocol messages
            json_response: Answer POSTs with JSON instead of SSE streams
            transport_factory: Builds the transport for a new session id
        """
        self.server = server
        self.json_response = json_response
        self.sessions: SessionRegistry[StreamableHTTPServerTransport] = SessionRegistry()
        self._transport_factory = transport_factory or self._default_transport
        self._task_group: Optional[TaskGroup] = None

    def _default_transport(self, session_id: str) -> StreamableHTTPServerTransport:
        return StreamableHTTPServerTransport(
            mcp_session_id=session_id,
            is_json_response_enabled=self.json_response,
        )

    @asynccontextmanager
    async def run(self):
        """Own the task group that session server loops run in."""
        if self._task_group is not None:
            raise RuntimeError("HTTPSessionManager is already running")
        async with anyio.create_task_group() as task_group:
            self._task_group = task_group
            try:
                yield self
            finally:
                task_group.cancel_scope.cancel()
                self._task_group = None

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        response_started = False

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.handle_request(scope, receive, tracking_send)
        except Exception:
            logger.exception("Error handling MCP request")
            if not response_started:
                response = jsonrpc_error(INTERNAL_ERROR_CODE, "Internal server error", 500)
                await response(scope, receive, send)

    async def handle_request(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Resolve the credential, route to a session transport, and dispatch."""
        if self._task_group is None:
            raise RuntimeError("HTTPSessionManager is not running")

        request = Request(scope, receive)
        setattr(
            request.state,
            REQUEST_STATE_KEY,
            credential_from_request(request.headers, request.query_params),
        )

        body = b""
        if request.method == "POST":
            body = await request.body()
            receive = _replay_receive(body, receive)

        session_id = request.headers.get(MCP_SESSION_ID_HEADER)
        transport = self.sessions.get(session_id)

        if transport is None:
            if session_id or request.method != "POST" or not is_initialize_request(body):
                logger.debug(
                    "Rejected %s request (session id: %s)", request.method, session_id or "missing"
                )
                response = jsonrpc_error(
                    SESSION_ERROR_CODE, "Bad Request: No valid session ID provided", 400
                )
                await response(scope, receive, send)
                return
            transport = await self._start_session()

        await transport.handle_request(scope, receive, send)

    async def _start_session(self) -> StreamableHTTPServerTransport:
        session_id = uuid4().hex
        transport = self.sessions.create(session_id, self._transport_factory(session_id))

        def on_close() -> None:
            self.sessions.remove(session_id)

        try:
            await self._task_group.start(self._run_session, transport, on_close)
        except BaseException:
            on_close()
            raise
        return transport

    async def _run_session(
        self,
        transport: StreamableHTTPServerTransport,
        on_close: Callable[[], None],
        *,
        task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
    ) -> None:
        try:
            async with transport.connect() as (read_stream, write_stream):
                task_status.started()
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options(),
                    stateless=False,
                )
        except Exception:
            logger.exception("MCP session %s crashed", transport.mcp_session_id)
        finally:
            on_close()

    def stats(self) -> Dict[str, Any]:
        return {"active_sessions": len(self.sessions), "running": self._task_group is not None}

"""Session management for the streamable HTTP entrypoint."""

from .manager import HTTPSessionManager, is_initialize_request, jsonrpc_error
from .registry import DuplicateSessionError, SessionRegistry

__all__ = [
    "DuplicateSessionError",
    "HTTPSessionManager",
    "SessionRegistry",
    "is_initialize_request",
    "jsonrpc_error",
]

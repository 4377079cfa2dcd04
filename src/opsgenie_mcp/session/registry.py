"""Session table for the streamable HTTP entrypoint."""

import logging
from typing import Dict, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DuplicateSessionError(ValueError):
    """Raised when a session id is registered twice."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id} is already registered")


class SessionRegistry(Generic[T]):
    """
    Maps MCP session ids to the transport that carries each session.

    Invariant: at most one live transport per session id. All mutation
    happens from the event loop thread and none of these methods await,
    so no request can observe a half-applied change.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, T] = {}

    def create(self, session_id: str, transport: T) -> T:
        """
        Register a new session.

        Raises:
            DuplicateSessionError: If the id is already live
        """
        if session_id in self._sessions:
            raise DuplicateSessionError(session_id)
        self._sessions[session_id] = transport
        logger.info("Session %s created (%d active)", session_id, len(self._sessions))
        return transport

    def get(self, session_id: Optional[str]) -> Optional[T]:
        """Look up the transport for a session id; None if unknown or missing."""
        if not session_id:
            return None
        return self._sessions.get(session_id)

    def remove(self, session_id: str) -> Optional[T]:
        """
        Forget a session.

        Safe to call for an id that was already removed.

        Returns:
            The removed transport, or None if the id was not registered
        """
        transport = self._sessions.pop(session_id, None)
        if transport is not None:
            logger.info("Session %s closed (%d active)", session_id, len(self._sessions))
        return transport

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

"""
Adapter layer between MCP tools and the Opsgenie client.

Tools never talk to the HTTP client directly. The adapter runs the remote
call, turns the outcome into an OperationResult and renders the text the
agent sees, so that every tool invocation ends in a well-formed result.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class OperationResult:
    """Standardized result format for MCP tool operations.

    Attributes:
        success: Whether the Opsgenie call succeeded
        message: Text returned to the agent
        status: HTTP status of a failed Opsgenie call (0 for network errors)
    """

    success: bool
    message: str
    status: Optional[int] = None

    @classmethod
    def success_result(cls, message: str) -> "OperationResult":
        """Create success result."""
        return cls(success=True, message=message)

    @classmethod
    def error_result(cls, message: str, status: Optional[int] = None) -> "OperationResult":
        """Create error result."""
        return cls(success=False, message=message, status=status)


from .alert_adapter import AlertAdapter, format_api_error

__all__ = ["OperationResult", "AlertAdapter", "format_api_error"]

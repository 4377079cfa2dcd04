"""
MCP tool handlers for Opsgenie alert operations.

Each tool declares its argument shape, resolves the Opsgenie credential,
delegates to the AlertAdapter and returns the rendered text.
"""

from .alert_tools import ALERT_TOOLS, register_alert_tools
from .schemas import MAX_ALERT_LIST_LIMIT, Recipient

__all__ = [
    "ALERT_TOOLS",
    "MAX_ALERT_LIST_LIMIT",
    "Recipient",
    "register_alert_tools",
]

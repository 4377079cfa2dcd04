"""
Opsgenie MCP server.

Exposes the Opsgenie alert API (list, create, acknowledge, close, notes,
logs, details) as MCP tools over stdio or streamable HTTP.

Architecture:
- server.py: FastMCP server initialization and transport startup
- config.py: Configuration file and environment loading
- opsgenie/: Async Opsgenie API client and wire types
- adapters/: Runs client calls and renders results as tool output
- tools/: MCP tool declarations and argument shapes
- session/: Session table and HTTP session manager
- auth/: Opsgenie credential resolution
- cli/: Command line entrypoint
"""

__version__ = "1.1.0"

__all__ = ["OpsgenieMCPServer", "ServerConfig", "__version__"]

from .config import ServerConfig
from .server import OpsgenieMCPServer

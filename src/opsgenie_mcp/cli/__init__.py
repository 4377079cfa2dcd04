"""Command line interface for the Opsgenie MCP server."""

from .main import app

__all__ = ["app"]

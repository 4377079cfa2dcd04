"""Opsgenie Alert API client and wire types."""

from .client import OPSGENIE_API_BASE, OpsgenieAPIError, OpsgenieClient

__all__ = ["OPSGENIE_API_BASE", "OpsgenieAPIError", "OpsgenieClient"]

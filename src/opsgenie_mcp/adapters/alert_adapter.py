"""Alert adapter: runs Opsgenie calls and renders them as tool output."""

import logging
from functools import wraps
from typing import Any, Dict, List, Mapping, Optional

from opsgenie_mcp.opsgenie.client import OpsgenieAPIError, OpsgenieClient
from opsgenie_mcp.opsgenie.types import (
    AcceptedResponse,
    AddDetailsPayload,
    AddNotePayload,
    AlertActionPayload,
    CreateAlertPayload,
    IdentifierType,
    ListAlertsParams,
    ListPageParams,
)

from . import OperationResult

logger = logging.getLogger(__name__)


def format_api_error(error: BaseException) -> str:
    """Render any failure as the single-line text agents see."""
    if isinstance(error, OpsgenieAPIError):
        return f"Opsgenie API Error ({error.status}): {error.message}"
    return f"Error: {str(error) or type(error).__name__}"


def handle_api_errors(method):
    """Decorator to catch Opsgenie and unexpected errors and convert to OperationResult."""
    @wraps(method)
    async def wrapper(*args, **kwargs):
        try:
            return await method(*args, **kwargs)
        except OpsgenieAPIError as e:
            logger.warning("Opsgenie call %s failed (%s): %s", method.__name__, e.status, e.message)
            return OperationResult.error_result(message=format_api_error(e), status=e.status)
        except Exception as e:
            logger.exception(f"Unexpected error in {method.__name__}")
            return OperationResult.error_result(message=format_api_error(e))
    return wrapper


def _paging_hint(response: Mapping[str, Any]) -> str:
    next_page = (response.get("paging") or {}).get("next")
    if next_page:
        return f"\n\nMore results available (next page: {next_page})."
    return ""


def render_alerts(response: Mapping[str, Any]) -> str:
    alerts: List[Dict[str, Any]] = response.get("data") or []
    if not alerts:
        return "No alerts found."
    lines = [
        f"• {alert.get('message')} ({alert.get('id')})\n"
        f"  Status: {alert.get('status')} | Priority: {alert.get('priority')}\n"
        f"  Created: {alert.get('createdAt')}"
        for alert in alerts
    ]
    return f"Found {len(alerts)} alerts:\n\n" + "\n\n".join(lines) + _paging_hint(response)


def render_notes(response: Mapping[str, Any]) -> str:
    notes: List[Dict[str, Any]] = response.get("data") or []
    if not notes:
        return "No notes found for this alert."
    lines = [
        f"• {note.get('note')}\n  By: {note.get('owner')} at {note.get('createdAt')}"
        for note in notes
    ]
    return f"Found {len(notes)} notes:\n\n" + "\n\n".join(lines) + _paging_hint(response)


def render_logs(response: Mapping[str, Any]) -> str:
    logs: List[Dict[str, Any]] = response.get("data") or []
    if not logs:
        return "No log entries found for this alert."
    lines = [
        f"• [{entry.get('type')}] {entry.get('log')}\n"
        f"  By: {entry.get('owner')} at {entry.get('createdAt')}"
        for entry in logs
    ]
    return f"Found {len(logs)} log entries:\n\n" + "\n\n".join(lines) + _paging_hint(response)


def render_accepted(action: str, response: AcceptedResponse) -> str:
    """Confirmation text for mutating calls, e.g. action="Alert acknowledged"."""
    return (
        f"{action} successfully!\n"
        f"Request ID: {response.get('requestId')}\n"
        f"Result: {response.get('result')}"
    )


class AlertAdapter:
    """Wraps OpsgenieClient calls for MCP tool invocation."""

    def __init__(self, client: OpsgenieClient):
        self.client = client

    async def _accepted(self, action: str, call) -> OperationResult:
        response = await call
        return OperationResult.success_result(render_accepted(action, response))

    # ========================================================================
    # Listing
    # ========================================================================

    @handle_api_errors
    async def list_alerts(self, api_key: str, params: Optional[ListAlertsParams] = None) -> OperationResult:
        response = await self.client.list_alerts(api_key, params)
        return OperationResult.success_result(render_alerts(response))

    @handle_api_errors
    async def list_alert_notes(
        self,
        api_key: str,
        identifier: str,
        params: Optional[ListPageParams] = None,
        identifier_type: IdentifierType = "id",
    ) -> OperationResult:
        response = await self.client.list_alert_notes(api_key, identifier, params, identifier_type)
        return OperationResult.success_result(render_notes(response))

    @handle_api_errors
    async def list_alert_logs(
        self,
        api_key: str,
        identifier: str,
        params: Optional[ListPageParams] = None,
        identifier_type: IdentifierType = "id",
    ) -> OperationResult:
        response = await self.client.list_alert_logs(api_key, identifier, params, identifier_type)
        return OperationResult.success_result(render_logs(response))

    # ========================================================================
    # Mutations
    # ========================================================================

    @handle_api_errors
    async def create_alert(self, api_key: str, payload: CreateAlertPayload) -> OperationResult:
        return await self._accepted("Alert created", self.client.create_alert(api_key, payload))

    @handle_api_errors
    async def acknowledge_alert(
        self,
        api_key: str,
        identifier: str,
        payload: Optional[AlertActionPayload] = None,
        identifier_type: IdentifierType = "id",
    ) -> OperationResult:
        return await self._accepted(
            "Alert acknowledged",
            self.client.acknowledge_alert(api_key, identifier, payload, identifier_type),
        )

    @handle_api_errors
    async def close_alert(
        self,
        api_key: str,
        identifier: str,
        payload: Optional[AlertActionPayload] = None,
        identifier_type: IdentifierType = "id",
    ) -> OperationResult:
        return await self._accepted(
            "Alert closed",
            self.client.close_alert(api_key, identifier, payload, identifier_type),
        )

    @handle_api_errors
    async def add_note(
        self,
        api_key: str,
        identifier: str,
        payload: AddNotePayload,
        identifier_type: IdentifierType = "id",
    ) -> OperationResult:
        return await self._accepted(
            "Note added",
            self.client.add_note_to_alert(api_key, identifier, payload, identifier_type),
        )

    @handle_api_errors
    async def add_details(
        self,
        api_key: str,
        identifier: str,
        payload: AddDetailsPayload,
        identifier_type: IdentifierType = "id",
    ) -> OperationResult:
        return await self._accepted(
            "Details added",
            self.client.add_details_to_alert(api_key, identifier, payload, identifier_type),
        )

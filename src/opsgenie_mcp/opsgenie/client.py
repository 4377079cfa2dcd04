"""
Async HTTP client for the Opsgenie Alert API.

Every supported operation maps to exactly one HTTP call. Failures of any
kind (HTTP error status, DNS, connection, timeout) surface as a single
exception type, OpsgenieAPIError, so callers have one shape to handle.
"""

import logging
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote

import httpx

from .types import (
    AcceptedResponse,
    AddDetailsPayload,
    AddNotePayload,
    AlertActionPayload,
    CreateAlertPayload,
    IdentifierType,
    ListAlertLogsResponse,
    ListAlertNotesResponse,
    ListAlertsParams,
    ListAlertsResponse,
    ListPageParams,
)

logger = logging.getLogger(__name__)

OPSGENIE_API_BASE = "https://api.opsgenie.com"
DEFAULT_TIMEOUT = 30.0

_BODY_METHODS = ("POST", "PUT", "PATCH")


class OpsgenieAPIError(Exception):
    """
    Raised for every failed Opsgenie call.

    Attributes:
        message: Server-supplied message, or a generic fallback
        status: HTTP status code, 0 when no response was received
        response: Parsed error body, if the server sent JSON
    """

    def __init__(self, message: str, status: int, response: Any = None):
        self.message = message
        self.status = status
        self.response = response
        super().__init__(message)


def alert_path(identifier: str, action: str = "") -> str:
    """
    Build an alert-scoped API path.

    The identifier is percent-encoded completely, so aliases containing
    slashes or spaces stay inside a single path segment.
    """
    path = f"/v2/alerts/{quote(identifier, safe='')}"
    return f"{path}/{action}" if action else path


def build_query(params: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """
    Serialize query parameters the way the Opsgenie API expects.

    None values are dropped, lists are comma-joined, booleans are
    lowercased and everything else is stringified.
    """
    query: Dict[str, str] = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            query[key] = ",".join(str(item) for item in value)
        elif isinstance(value, bool):
            query[key] = "true" if value else "false"
        else:
            query[key] = str(value)
    return query


def _compact(payload: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    return {key: value for key, value in (payload or {}).items() if value is not None}


def _error_from_response(response: httpx.Response) -> OpsgenieAPIError:
    message = f"HTTP error! status: {response.status_code}"
    error_data = None
    try:
        error_data = response.json()
    except ValueError:
        pass
    else:
        if isinstance(error_data, dict) and error_data.get("message"):
            message = str(error_data["message"])
    return OpsgenieAPIError(message, response.status_code, error_data)


class OpsgenieClient:
    """
    Thin async wrapper around the Opsgenie v2 alert endpoints.

    The API key is passed per call rather than held by the client, so a
    single client can serve requests that carry different credentials.

    Example:
        client = OpsgenieClient()
        page = await client.list_alerts(api_key, {"limit": 10})
    """

    def __init__(
        self,
        base_url: str = OPSGENIE_API_BASE,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Opsgenie API root (use https://api.eu.opsgenie.com for EU accounts)
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport, mainly for tests
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def request(
        self,
        endpoint: str,
        api_key: str,
        method: str = "GET",
        params: Optional[Mapping[str, Any]] = None,
        body: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Issue a single authenticated call and return the parsed body.

        Args:
            endpoint: API path, e.g. "/v2/alerts"
            api_key: Opsgenie API key (sent as "GenieKey <key>")
            method: HTTP method
            params: Query parameters (see build_query)
            body: JSON payload, only sent for mutating methods

        Returns:
            Parsed JSON response, or an empty dict for empty bodies

        Raises:
            OpsgenieAPIError: On non-2xx status or network failure
        """
        method = method.upper()
        headers = {
            "Authorization": f"GenieKey {api_key or ''}",
            "Content-Type": "application/json",
        }
        json_body = None
        if method in _BODY_METHODS:
            json_body = _compact(body) or None

        url = f"{self.base_url}{endpoint}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.request(
                    method,
                    url,
                    params=build_query(params),
                    headers=headers,
                    json=json_body,
                )
        except httpx.HTTPError as e:
            logger.warning("Opsgenie request %s %s failed: %s", method, endpoint, e)
            raise OpsgenieAPIError(f"Network error: {str(e) or type(e).__name__}", 0) from e

        if not response.is_success:
            error = _error_from_response(response)
            logger.debug(
                "Opsgenie %s %s returned %s: %s", method, endpoint, error.status, error.message
            )
            raise error

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            logger.debug("Opsgenie %s %s returned a non-JSON body", method, endpoint)
            return {}

    # ========================================================================
    # Alert collection
    # ========================================================================

    async def list_alerts(
        self, api_key: str, params: Optional[ListAlertsParams] = None
    ) -> ListAlertsResponse:
        """GET /v2/alerts"""
        return await self.request("/v2/alerts", api_key, params=params)

    async def create_alert(self, api_key: str, payload: CreateAlertPayload) -> AcceptedResponse:
        """POST /v2/alerts"""
        return await self.request("/v2/alerts", api_key, method="POST", body=payload)

    # ========================================================================
    # Single alert
    # ========================================================================

    async def acknowledge_alert(
        self,
        api_key: str,
        identifier: str,
        payload: Optional[AlertActionPayload] = None,
        identifier_type: IdentifierType = "id",
    ) -> AcceptedResponse:
        """POST /v2/alerts/{identifier}/acknowledge"""
        return await self.request(
            alert_path(identifier, "acknowledge"),
            api_key,
            method="POST",
            params={"identifierType": identifier_type},
            body=payload,
        )

    async def close_alert(
        self,
        api_key: str,
        identifier: str,
        payload: Optional[AlertActionPayload] = None,
        identifier_type: IdentifierType = "id",
    ) -> AcceptedResponse:
        """POST /v2/alerts/{identifier}/close"""
        return await self.request(
            alert_path(identifier, "close"),
            api_key,
            method="POST",
            params={"identifierType": identifier_type},
            body=payload,
        )

    async def list_alert_notes(
        self,
        api_key: str,
        identifier: str,
        params: Optional[ListPageParams] = None,
        identifier_type: IdentifierType = "id",
    ) -> ListAlertNotesResponse:
        """GET /v2/alerts/{identifier}/notes"""
        return await self.request(
            alert_path(identifier, "notes"),
            api_key,
            params={**(params or {}), "identifierType": identifier_type},
        )

    async def add_note_to_alert(
        self,
        api_key: str,
        identifier: str,
        payload: AddNotePayload,
        identifier_type: IdentifierType = "id",
    ) -> AcceptedResponse:
        """POST /v2/alerts/{identifier}/notes"""
        return await self.request(
            alert_path(identifier, "notes"),
            api_key,
            method="POST",
            params={"identifierType": identifier_type},
            body=payload,
        )

    async def list_alert_logs(
        self,
        api_key: str,
        identifier: str,
        params: Optional[ListPageParams] = None,
        identifier_type: IdentifierType = "id",
    ) -> ListAlertLogsResponse:
        """GET /v2/alerts/{identifier}/logs"""
        return await self.request(
            alert_path(identifier, "logs"),
            api_key,
            params={**(params or {}), "identifierType": identifier_type},
        )

    async def add_details_to_alert(
        self,
        api_key: str,
        identifier: str,
        payload: AddDetailsPayload,
        identifier_type: IdentifierType = "id",
    ) -> AcceptedResponse:
        """POST /v2/alerts/{identifier}/details"""
        return await self.request(
            alert_path(identifier, "details"),
            api_key,
            method="POST",
            params={"identifierType": identifier_type},
            body=payload,
        )

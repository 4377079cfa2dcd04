"""MCP tools for Opsgenie alert operations.

This module provides one MCP tool per Opsgenie alert endpoint:
- opsgenie_list_alerts: List alerts, optionally filtered by a search query
- opsgenie_create_alert: Create a new alert
- opsgenie_acknowledge_alert / opsgenie_close_alert: Alert lifecycle actions
- opsgenie_list_alert_notes / opsgenie_add_note: Alert notes
- opsgenie_list_alert_logs: Alert activity log
- opsgenie_add_details: Add custom properties to an alert

Every tool returns text. Remote failures come back as an
"Opsgenie API Error (<status>): <message>" string, not as an exception.
"""

import logging
from typing import Optional

from fastmcp import FastMCP
from fastmcp.server.dependencies import get_http_request

from opsgenie_mcp.adapters import AlertAdapter, OperationResult
from opsgenie_mcp.auth import REQUEST_STATE_KEY, resolve_credential

from .schemas import (
    ActionsArg,
    AlertLimitArg,
    AliasArg,
    ApiKeyArg,
    DescriptionArg,
    DetailsArg,
    DirectionArg,
    EntityArg,
    IdentifierArg,
    IdentifierTypeArg,
    MessageArg,
    NoteArg,
    OffsetArg,
    OrderArg,
    PageLimitArg,
    PriorityArg,
    QueryArg,
    RequiredDetailsArg,
    RequiredNoteArg,
    RespondersArg,
    SearchIdentifierArg,
    SearchIdentifierTypeArg,
    SortArg,
    SourceArg,
    TagsArg,
    UserArg,
    VisibleToArg,
    recipients,
)

logger = logging.getLogger(__name__)

ALERT_TOOLS = {
    "opsgenie_list_alerts": "List alerts from Opsgenie",
    "opsgenie_create_alert": "Create a new alert in Opsgenie",
    "opsgenie_acknowledge_alert": "Acknowledge an alert in Opsgenie",
    "opsgenie_close_alert": "Close an alert in Opsgenie",
    "opsgenie_list_alert_notes": "List notes for an alert in Opsgenie",
    "opsgenie_add_note": "Add a note to an alert in Opsgenie",
    "opsgenie_list_alert_logs": "List logs for an alert in Opsgenie",
    "opsgenie_add_details": "Add custom details to an alert in Opsgenie",
}


def _request_credential() -> Optional[str]:
    """Credential resolved by the HTTP entrypoint for the current request, if any."""
    try:
        request = get_http_request()
    except RuntimeError:
        # stdio and in-memory transports have no HTTP request
        return None
    return getattr(request.state, REQUEST_STATE_KEY, None)


def _render(tool_name: str, result: OperationResult) -> str:
    if not result.success:
        logger.info("%s failed (status %s): %s", tool_name, result.status, result.message)
    return result.message


def register_alert_tools(
    mcp_server: FastMCP,
    adapter: AlertAdapter,
    default_api_key: Optional[str] = None,
) -> None:
    """Register the Opsgenie alert tools with a FastMCP server.

    Args:
        mcp_server: FastMCP server instance to register tools with
        adapter: AlertAdapter bound to an Opsgenie client
        default_api_key: Process-wide fallback credential
    """

    def credential(api_key: Optional[str]) -> str:
        # HTTP request sources > tool argument > process default.
        # An unresolved key is sent empty and Opsgenie rejects it.
        return resolve_credential(_request_credential(), api_key, default_api_key) or ""

    @mcp_server.tool(name="opsgenie_list_alerts", description=ALERT_TOOLS["opsgenie_list_alerts"])
    async def opsgenie_list_alerts(
        api_key: ApiKeyArg = None,
        query: QueryArg = None,
        search_identifier: SearchIdentifierArg = None,
        search_identifier_type: SearchIdentifierTypeArg = None,
        offset: OffsetArg = None,
        limit: AlertLimitArg = None,
        sort: SortArg = None,
        order: OrderArg = None,
    ) -> str:
        result = await adapter.list_alerts(
            credential(api_key),
            {
                "query": query,
                "searchIdentifier": search_identifier,
                "searchIdentifierType": search_identifier_type,
                "offset": offset,
                "limit": limit,
                "sort": sort,
                "order": order,
            },
        )
        return _render("opsgenie_list_alerts", result)

    @mcp_server.tool(name="opsgenie_create_alert", description=ALERT_TOOLS["opsgenie_create_alert"])
    async def opsgenie_create_alert(
        message: MessageArg,
        api_key: ApiKeyArg = None,
        alias: AliasArg = None,
        description: DescriptionArg = None,
        responders: RespondersArg = None,
        visible_to: VisibleToArg = None,
        actions: ActionsArg = None,
        tags: TagsArg = None,
        details: DetailsArg = None,
        entity: EntityArg = None,
        priority: PriorityArg = None,
        user: UserArg = None,
        note: NoteArg = None,
        source: SourceArg = None,
    ) -> str:
        result = await adapter.create_alert(
            credential(api_key),
            {
                "message": message,
                "alias": alias,
                "description": description,
                "responders": recipients(responders),
                "visibleTo": recipients(visible_to),
                "actions": actions,
                "tags": tags,
                "details": details,
                "entity": entity,
                "priority": priority,
                "user": user,
                "note": note,
                "source": source,
            },
        )
        return _render("opsgenie_create_alert", result)

    @mcp_server.tool(
        name="opsgenie_acknowledge_alert", description=ALERT_TOOLS["opsgenie_acknowledge_alert"]
    )
    async def opsgenie_acknowledge_alert(
        identifier: IdentifierArg,
        api_key: ApiKeyArg = None,
        identifier_type: IdentifierTypeArg = "id",
        user: UserArg = None,
        note: NoteArg = None,
        source: SourceArg = None,
    ) -> str:
        result = await adapter.acknowledge_alert(
            credential(api_key),
            identifier,
            {"user": user, "note": note, "source": source},
            identifier_type,
        )
        return _render("opsgenie_acknowledge_alert", result)

    @mcp_server.tool(name="opsgenie_close_alert", description=ALERT_TOOLS["opsgenie_close_alert"])
    async def opsgenie_close_alert(
        identifier: IdentifierArg,
        api_key: ApiKeyArg = None,
        identifier_type: IdentifierTypeArg = "id",
        user: UserArg = None,
        note: NoteArg = None,
        source: SourceArg = None,
    ) -> str:
        result = await adapter.close_alert(
            credential(api_key),
            identifier,
            {"user": user, "note": note, "source": source},
            identifier_type,
        )
        return _render("opsgenie_close_alert", result)

    @mcp_server.tool(
        name="opsgenie_list_alert_notes", description=ALERT_TOOLS["opsgenie_list_alert_notes"]
    )
    async def opsgenie_list_alert_notes(
        identifier: IdentifierArg,
        api_key: ApiKeyArg = None,
        identifier_type: IdentifierTypeArg = "id",
        offset: OffsetArg = None,
        direction: DirectionArg = None,
        limit: PageLimitArg = None,
        order: OrderArg = None,
    ) -> str:
        result = await adapter.list_alert_notes(
            credential(api_key),
            identifier,
            {"offset": offset, "direction": direction, "limit": limit, "order": order},
            identifier_type,
        )
        return _render("opsgenie_list_alert_notes", result)

    @mcp_server.tool(name="opsgenie_add_note", description=ALERT_TOOLS["opsgenie_add_note"])
    async def opsgenie_add_note(
        identifier: IdentifierArg,
        note: RequiredNoteArg,
        api_key: ApiKeyArg = None,
        identifier_type: IdentifierTypeArg = "id",
        user: UserArg = None,
        source: SourceArg = None,
    ) -> str:
        result = await adapter.add_note(
            credential(api_key),
            identifier,
            {"note": note, "user": user, "source": source},
            identifier_type,
        )
        return _render("opsgenie_add_note", result)

    @mcp_server.tool(
        name="opsgenie_list_alert_logs", description=ALERT_TOOLS["opsgenie_list_alert_logs"]
    )
    async def opsgenie_list_alert_logs(
        identifier: IdentifierArg,
        api_key: ApiKeyArg = None,
        identifier_type: IdentifierTypeArg = "id",
        offset: OffsetArg = None,
        direction: DirectionArg = None,
        limit: PageLimitArg = None,
        order: OrderArg = None,
    ) -> str:
        result = await adapter.list_alert_logs(
            credential(api_key),
            identifier,
            {"offset": offset, "direction": direction, "limit": limit, "order": order},
            identifier_type,
        )
        return _render("opsgenie_list_alert_logs", result)

    @mcp_server.tool(name="opsgenie_add_details", description=ALERT_TOOLS["opsgenie_add_details"])
    async def opsgenie_add_details(
        identifier: IdentifierArg,
        details: RequiredDetailsArg,
        api_key: ApiKeyArg = None,
        identifier_type: IdentifierTypeArg = "id",
        user: UserArg = None,
        note: NoteArg = None,
        source: SourceArg = None,
    ) -> str:
        result = await adapter.add_details(
            credential(api_key),
            identifier,
            {"details": details, "user": user, "note": note, "source": source},
            identifier_type,
        )
        return _render("opsgenie_add_details", result)

    logger.info("Registered %d Opsgenie alert tools with MCP server", len(ALERT_TOOLS))

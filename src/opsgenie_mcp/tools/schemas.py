"""Declared argument shapes for the Opsgenie alert tools.

FastMCP builds each tool's JSON schema from these annotations and validates
incoming arguments against them before the tool body runs, so an invalid
invocation never reaches the Opsgenie client.
"""

from typing import Annotated, Dict, List, Optional

from pydantic import BaseModel, Field

from opsgenie_mcp.opsgenie.types import (
    IdentifierType,
    PageDirection,
    Priority,
    RecipientType,
    SearchIdentifierType,
    SortOrder,
)

MAX_ALERT_LIST_LIMIT = 100
MAX_MESSAGE_LENGTH = 130


class Recipient(BaseModel):
    """Responder or visibility target of an alert."""

    type: RecipientType = Field(description="Recipient type")
    id: Optional[str] = Field(default=None, description="Recipient id")
    name: Optional[str] = Field(default=None, description="Recipient name (username for users)")


ApiKeyArg = Annotated[
    Optional[str],
    Field(
        description=(
            "Opsgenie API key. Optional when the server was started with a default key "
            "or the HTTP request already carries one"
        )
    ),
]
IdentifierArg = Annotated[str, Field(min_length=1, description="Alert identifier (id, tiny id, or alias)")]
IdentifierTypeArg = Annotated[
    IdentifierType,
    Field(description="Type of identifier: id, name (alias) or tiny"),
]
UserArg = Annotated[Optional[str], Field(description="Display name of the request owner")]
SourceArg = Annotated[Optional[str], Field(description="Source field")]
NoteArg = Annotated[Optional[str], Field(description="Additional note")]

OffsetArg = Annotated[Optional[int], Field(ge=0, description="Start index of the result set (for pagination)")]
AlertLimitArg = Annotated[
    Optional[int],
    Field(ge=1, le=MAX_ALERT_LIST_LIMIT, description="Maximum number of items to provide in the result"),
]
PageLimitArg = Annotated[Optional[int], Field(ge=1, description="Maximum number of items to provide")]
OrderArg = Annotated[Optional[SortOrder], Field(description="Sorting order of the result set")]
DirectionArg = Annotated[Optional[PageDirection], Field(description="Page direction")]

QueryArg = Annotated[Optional[str], Field(description="Search query to apply while filtering the alerts")]
SearchIdentifierArg = Annotated[Optional[str], Field(description="Identifier of the saved search query")]
SearchIdentifierTypeArg = Annotated[
    Optional[SearchIdentifierType],
    Field(description="Identifier type of the saved search query"),
]
SortArg = Annotated[Optional[str], Field(description="Name of the field that result set will be sorted by")]

MessageArg = Annotated[
    str,
    Field(min_length=1, max_length=MAX_MESSAGE_LENGTH, description="Message of the alert"),
]
AliasArg = Annotated[Optional[str], Field(description="Client-defined identifier of the alert")]
DescriptionArg = Annotated[Optional[str], Field(description="Description field of the alert")]
RespondersArg = Annotated[
    Optional[List[Recipient]],
    Field(description="Responders that the alert will be routed to"),
]
VisibleToArg = Annotated[
    Optional[List[Recipient]],
    Field(description="Teams and users that the alert will become visible to"),
]
ActionsArg = Annotated[Optional[List[str]], Field(description="Custom actions that will be available for the alert")]
TagsArg = Annotated[Optional[List[str]], Field(description="Tags of the alert")]
DetailsArg = Annotated[
    Optional[Dict[str, str]],
    Field(description="Map of key-value pairs to use as custom properties"),
]
RequiredDetailsArg = Annotated[
    Dict[str, str],
    Field(description="Key-value pairs to add as custom properties"),
]
EntityArg = Annotated[Optional[str], Field(description="Entity field of the alert")]
PriorityArg = Annotated[Optional[Priority], Field(description="Priority level of the alert")]
RequiredNoteArg = Annotated[str, Field(min_length=1, description="Note to add to the alert")]


def recipients(items: Optional[List[Recipient]]) -> Optional[List[dict]]:
    """Convert validated recipients into the Opsgenie wire format."""
    if items is None:
        return None
    return [item.model_dump(exclude_none=True) for item in items]

"""Opsgenie Alert API request and response shapes."""

from typing import Dict, List, Literal, TypedDict

IdentifierType = Literal["id", "name", "tiny"]
SearchIdentifierType = Literal["id", "name"]
Priority = Literal["P1", "P2", "P3", "P4", "P5"]
SortOrder = Literal["asc", "desc"]
PageDirection = Literal["next", "prev"]
RecipientType = Literal["user", "team", "escalation", "schedule"]
AlertStatus = Literal["open", "acked", "closed"]

PRIORITIES = ("P1", "P2", "P3", "P4", "P5")
IDENTIFIER_TYPES = ("id", "name", "tiny")


class Recipient(TypedDict, total=False):
    type: RecipientType
    id: str
    name: str


class AlertReport(TypedDict, total=False):
    ackTime: int
    closeTime: int
    acknowledgedBy: str
    closedBy: str


class Alert(TypedDict, total=False):
    id: str
    tinyId: str
    alias: str
    message: str
    status: AlertStatus
    acknowledged: bool
    isSeen: bool
    tags: List[str]
    snoozed: bool
    snoozedUntil: str
    count: int
    lastOccurredAt: str
    createdAt: str
    updatedAt: str
    source: str
    owner: str
    priority: Priority
    responders: List[Recipient]
    report: AlertReport
    actions: List[str]
    entity: str
    description: str
    details: Dict[str, str]


class AlertNote(TypedDict):
    note: str
    owner: str
    createdAt: str


class AlertLog(TypedDict):
    log: str
    type: str
    owner: str
    createdAt: str


class Paging(TypedDict, total=False):
    next: str
    prev: str
    first: str
    last: str


class ListAlertsResponse(TypedDict, total=False):
    data: List[Alert]
    paging: Paging


class ListAlertNotesResponse(TypedDict, total=False):
    data: List[AlertNote]
    paging: Paging


class ListAlertLogsResponse(TypedDict, total=False):
    data: List[AlertLog]
    paging: Paging


class AcceptedResponse(TypedDict):
    """Envelope Opsgenie returns (HTTP 202) for asynchronously processed requests."""

    result: str
    took: float
    requestId: str


class ListAlertsParams(TypedDict, total=False):
    query: str
    searchIdentifier: str
    searchIdentifierType: SearchIdentifierType
    offset: int
    limit: int
    sort: str
    order: SortOrder


class ListPageParams(TypedDict, total=False):
    """Query parameters shared by the alert notes and alert logs listings."""

    offset: int
    direction: PageDirection
    limit: int
    order: SortOrder


class AlertActionPayload(TypedDict, total=False):
    user: str
    note: str
    source: str


class CreateAlertPayload(AlertActionPayload, total=False):
    message: str
    alias: str
    description: str
    responders: List[Recipient]
    visibleTo: List[Recipient]
    actions: List[str]
    tags: List[str]
    details: Dict[str, str]
    entity: str
    priority: Priority


class AddNotePayload(AlertActionPayload, total=False):
    pass


class AddDetailsPayload(AlertActionPayload, total=False):
    details: Dict[str, str]

"""
Workflow API Response Schemas

Response models for request, workflow and notification endpoints (PascalCase fields).
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, Optional, List
from uuid import UUID
from datetime import datetime

from reqflow_api.workflow.models.audit import AuditEvent
from reqflow_api.workflow.models.request import Request
from reqflow_api.workflow.models.rulebook import TransitionRule
from reqflow_api.workflow.models.rulebook import WorkflowDefinition


# ════════════════════════════════════════════════════════════════════════════
# Request Schemas
# ════════════════════════════════════════════════════════════════════════════


class HistoryEntryResponse(BaseModel):
    """Single transition from a request's history."""

    Action: str
    ActorRole: str
    ActorName: str
    FromStatus: Optional[str] = None
    ToStatus: str
    Timestamp: datetime
    Notes: Optional[str] = None


class RequestResponse(BaseModel):
    """Request details."""

    RequestId: str
    Kind: str
    Status: str
    IsTerminal: bool = False
    SubmitterId: str
    SubmitterName: str
    Payload: Dict[str, Any] = Field(default_factory=dict)
    Notes: Optional[str] = None
    Version: int
    CreatedAt: datetime
    UpdatedAt: datetime
    History: List[HistoryEntryResponse] = Field(default_factory=list)

    @classmethod
    def from_request(cls, request: Request, is_terminal: bool = False) -> "RequestResponse":
        return cls(
            RequestId=request.id,
            Kind=request.kind,
            Status=request.status,
            IsTerminal=is_terminal,
            SubmitterId=request.submitter_id,
            SubmitterName=request.submitter_name,
            Payload=request.payload,
            Notes=request.notes,
            Version=request.version,
            CreatedAt=request.created_at,
            UpdatedAt=request.updated_at,
            History=[
                HistoryEntryResponse(
                    Action=entry.action,
                    ActorRole=entry.actor_role,
                    ActorName=entry.actor_name,
                    FromStatus=entry.from_status,
                    ToStatus=entry.to_status,
                    Timestamp=entry.timestamp,
                    Notes=entry.notes,
                )
                for entry in request.history
            ],
        )


class RequestListResponse(BaseModel):
    """List of requests."""

    Message: str
    Count: int
    Requests: List[RequestResponse]


# ════════════════════════════════════════════════════════════════════════════
# Rule Book Schemas
# ════════════════════════════════════════════════════════════════════════════


class TransitionResponse(BaseModel):
    """One row of the rule table."""

    Action: str
    FromStatus: str
    ToStatus: str
    Roles: List[str]
    PastTense: str

    @classmethod
    def from_rule(cls, rule: TransitionRule) -> "TransitionResponse":
        return cls(
            Action=rule.action,
            FromStatus=rule.from_status,
            ToStatus=rule.to_status,
            Roles=[role.value for role in rule.roles],
            PastTense=rule.verb,
        )


class AllowedActionsResponse(BaseModel):
    """Actions the caller's role may take on a request right now."""

    RequestId: str
    Status: str
    Role: str
    Actions: List[TransitionResponse]


class KindResponse(BaseModel):
    """Workflow definition of one request kind."""

    Kind: str
    Label: str
    IdPrefix: str
    InitialStatus: str
    States: List[str]
    TerminalStates: List[str]
    RequiredFields: List[str] = Field(default_factory=list)
    Transitions: List[TransitionResponse]

    @classmethod
    def from_definition(cls, definition: WorkflowDefinition) -> "KindResponse":
        return cls(
            Kind=definition.kind,
            Label=definition.label,
            IdPrefix=definition.id_prefix,
            InitialStatus=definition.initial,
            States=definition.states,
            TerminalStates=[s for s in definition.states if definition.is_terminal(s)],
            RequiredFields=definition.required_fields,
            Transitions=[TransitionResponse.from_rule(rule) for rule in definition.transitions],
        )


class KindsResponse(BaseModel):
    """Rule book summary."""

    Message: str
    Version: str
    Count: int
    Kinds: List[KindResponse]


# ════════════════════════════════════════════════════════════════════════════
# Notification Schemas
# ════════════════════════════════════════════════════════════════════════════


class NotificationResponse(BaseModel):
    """Audit event as shown in the notification feed."""

    EventId: UUID
    RequestId: str
    Kind: str
    Action: str
    FromStatus: Optional[str] = None
    ToStatus: str
    ActorRole: str
    ActorName: str
    Title: str
    Message: str
    Timestamp: datetime

    @classmethod
    def from_event(cls, event: AuditEvent) -> "NotificationResponse":
        return cls(
            EventId=event.event_id,
            RequestId=event.request_id,
            Kind=event.kind,
            Action=event.action,
            FromStatus=event.from_status,
            ToStatus=event.to_status,
            ActorRole=event.actor_role,
            ActorName=event.actor_name,
            Title=event.title,
            Message=event.message,
            Timestamp=event.timestamp,
        )


class NotificationListResponse(BaseModel):
    """Most recent audit events, newest first."""

    Message: str
    Count: int
    Notifications: List[NotificationResponse]


class RetryNotificationsResponse(BaseModel):
    """Outcome of re-delivering failed notifications."""

    Message: str
    Delivered: int
    StillFailed: int


# ════════════════════════════════════════════════════════════════════════════
# Health Schemas
# ════════════════════════════════════════════════════════════════════════════


class WorkflowHealthResponse(BaseModel):
    """Workflow system readiness check."""

    Message: str
    StoreBackend: str
    StoreConnected: bool
    KindsCount: int
    FailedNotifications: int

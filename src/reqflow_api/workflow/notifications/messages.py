"""
Notification Messages

Renders the human-readable audit event for a committed transition.
"""

from datetime import datetime
from typing import Optional

from reqflow_api.workflow.enums import CREATE_ACTION
from reqflow_api.workflow.models.audit import AuditEvent
from reqflow_api.workflow.models.request import Request
from reqflow_api.workflow.models.rulebook import TransitionRule
from reqflow_api.workflow.models.rulebook import WorkflowDefinition

SUBMITTED_VERB = "submitted"


def render_message(label: str, request_id: str, verb: str, actor_name: str) -> str:
    """
    Render an audit message.

    Example:
        "Safety equipment request SR-1A2B3C4D5E has been acknowledged by Dana"
    """
    return f"{label} request {request_id} has been {verb} by {actor_name}"


def build_event(
    definition: WorkflowDefinition,
    request: Request,
    rule: Optional[TransitionRule] = None,
    timestamp: Optional[datetime] = None,
) -> AuditEvent:
    """
    Build the audit event for the request's most recent history entry.

    Args:
        definition: Workflow definition of the request kind
        request: Request as committed by the store
        rule: Rule that fired, None for creation
        timestamp: Event time, defaults to the history entry's timestamp
    """
    entry = request.last_entry
    verb = rule.verb if rule is not None else SUBMITTED_VERB

    return AuditEvent(
        request_id=request.id,
        kind=request.kind,
        action=rule.action if rule is not None else CREATE_ACTION,
        from_status=entry.from_status,
        to_status=entry.to_status,
        actor_role=entry.actor_role,
        actor_name=entry.actor_name,
        timestamp=timestamp or entry.timestamp,
        message=render_message(definition.label, request.id, verb, entry.actor_name),
    )

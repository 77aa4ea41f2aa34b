"""
Workflow Models Module

All Pydantic models for the workflow system:
- Request domain models (requests, history, actors, filters)
- Rule book models (per-kind state machines)
- Kind-specific payload schemas
- Audit events
"""

# Request Domain Models
from reqflow_api.workflow.models.request import (
    Actor,
    HistoryEntry,
    Request,
    RequestFilter,
    utc_now,
)

# Rule Book Models
from reqflow_api.workflow.models.rulebook import TransitionRule, WorkflowDefinition

# Payload Models
from reqflow_api.workflow.models.payloads import (
    PAYLOAD_SCHEMAS,
    FuelPayload,
    MaterialPayload,
    PurchasePayload,
    SafetyEquipmentPayload,
)

# Audit Models (Append-Only)
from reqflow_api.workflow.models.audit import AuditEvent

__all__ = [
    # Request models
    "Actor",
    "HistoryEntry",
    "Request",
    "RequestFilter",
    "utc_now",
    # Rule book models
    "TransitionRule",
    "WorkflowDefinition",
    # Payloads
    "PAYLOAD_SCHEMAS",
    "FuelPayload",
    "MaterialPayload",
    "PurchasePayload",
    "SafetyEquipmentPayload",
    # Audit
    "AuditEvent",
]

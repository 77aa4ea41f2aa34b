"""
Audit Event Model

Human-readable record produced for every committed transition (the toast/log equivalent).
Append-only - never updated once created.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from uuid import uuid4

from pydantic import BaseModel
from pydantic import Field

from reqflow_api.workflow.enums import AuditAction
from reqflow_api.workflow.enums import CREATE_ACTION


class AuditEvent(BaseModel):
    """Audit/notification event for one committed transition."""

    event_id: UUID = Field(default_factory=uuid4)
    request_id: str
    kind: str
    action: str
    from_status: Optional[str] = None  # None when the request was just submitted
    to_status: str
    actor_role: str
    actor_name: str
    timestamp: datetime
    message: str

    @property
    def title(self) -> str:
        """Short title ("Request Acknowledged")."""
        return f"Request {self.to_status.replace('_', ' ').title()}"

    @property
    def audit_action(self) -> AuditAction:
        return AuditAction.CREATED if self.action == CREATE_ACTION else AuditAction.STATUS_CHANGED

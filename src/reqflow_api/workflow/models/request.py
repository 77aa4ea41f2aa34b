"""
Request Model

Domain models for workflow requests, their history and the actors acting on them.
"""

from datetime import datetime
from datetime import timezone
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator


def utc_now() -> datetime:
    """Current time in UTC (default engine clock)."""
    return datetime.now(timezone.utc)


class Actor(BaseModel):
    """Role + identity performing an action, as supplied by the session provider."""

    role: str  # validated against Role at the authorization gate
    name: str = Field(min_length=1)
    id: Optional[str] = None

    @field_validator("role")
    @classmethod
    def normalize_role(cls, v: str) -> str:
        """Roles are compared lowercase without surrounding whitespace."""
        return v.strip().lower()

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Reject blank actor names."""
        if not v.strip():
            raise ValueError("actor name cannot be empty")
        return v.strip()


class HistoryEntry(BaseModel):
    """One transition in a request's history. Frozen once written."""

    model_config = ConfigDict(frozen=True)

    action: str  # "create" for the first entry
    actor_role: str
    actor_name: str
    from_status: Optional[str] = None  # None for the creation entry
    to_status: str
    timestamp: datetime
    notes: Optional[str] = None


class Request(BaseModel):
    """A unit of work submitted by one role and advanced by others."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    kind: str
    submitter_id: str
    submitter_name: str
    payload: Dict[str, Any] = Field(default_factory=dict)
    status: str
    history: List[HistoryEntry] = Field(default_factory=list)
    notes: Optional[str] = None

    # Optimistic concurrency
    version: int = 1
    created_at: datetime
    updated_at: datetime

    @property
    def last_entry(self) -> HistoryEntry:
        """Most recent history entry."""
        return self.history[-1]

    def entry_for(self, status: str) -> Optional[HistoryEntry]:
        """
        History entry that moved the request into `status`.

        Replaces the per-kind acknowledgedBy/approvedDate/issuedBy columns:
        who did what and when is read from history.
        """
        for entry in reversed(self.history):
            if entry.to_status == status:
                return entry
        return None


class RequestFilter(BaseModel):
    """Filter for listing requests. Unset fields match everything."""

    status: Optional[str] = None
    kind: Optional[str] = None
    submitter_id: Optional[str] = None

    def matches(self, request: Request) -> bool:
        """Check whether a request satisfies every set criterion."""
        if self.status is not None and request.status != self.status:
            return False
        if self.kind is not None and request.kind != self.kind:
            return False
        if self.submitter_id is not None and request.submitter_id != self.submitter_id:
            return False
        return True

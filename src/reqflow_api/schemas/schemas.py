####################################
# --- Request/response schemas --- #
####################################

from typing import Any
from typing import Dict
from typing import Optional

from pydantic import BaseModel
from pydantic import Field
from pydantic import field_validator


# create (Crud)
class CreateRequestBody(BaseModel):
    """Body for submitting a new request."""

    kind: str = Field(..., min_length=1, description="Request kind declared in the rule book")
    payload: Dict[str, Any] = Field(default_factory=dict, description="Kind-specific request data")
    request_id: Optional[str] = Field(None, description="Optional caller-supplied request id")
    notes: Optional[str] = None

    @field_validator("kind")
    @classmethod
    def normalize_kind(cls, v):
        """Kinds are matched lowercase."""
        return v.strip().lower()


# update (crUd)
class TransitionRequestBody(BaseModel):
    """Body for applying an action to a request."""

    action: str = Field(..., min_length=1, description="Action name, e.g. acknowledge, approve, issue")
    notes: Optional[str] = None

    @field_validator("action")
    @classmethod
    def validate_action(cls, v):
        """Validate that action is not blank."""
        if not v.strip():
            raise ValueError("action cannot be empty")
        return v.strip().lower()


# read (cRud)
class ListRequestsQueryParams(BaseModel):
    """Query parameters for listing requests."""

    status: Optional[str] = None
    kind: Optional[str] = None
    submitter_id: Optional[str] = None


class ListNotificationsQueryParams(BaseModel):
    """Query parameters for the notification feed."""

    limit: Optional[int] = 50

    @field_validator("limit")
    @classmethod
    def validate_limit(cls, v):
        """Validate that limit is greater than 0."""
        if v is not None and v <= 0:
            raise ValueError("limit must be greater than 0")
        return v

"""
Workflow Exceptions

Typed errors raised by the rule book, the stores and the transition engine.
The HTTP layer translates each of them into a user-facing message (see errors.py).
"""

from typing import Any
from typing import Dict
from typing import List
from typing import Optional


class WorkflowError(Exception):
    """Base class for all workflow errors."""

    user_message = "The request could not be processed"

    def __init__(self, message: str, request_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.request_id = request_id


class NotFoundError(WorkflowError):
    """Referenced request does not exist. Never retried automatically."""

    user_message = "Request not found"


class InvalidTransitionError(WorkflowError):
    """Request is not in the source state required by the action (stale view, double submit, skipped step)."""

    user_message = "This request has already moved past this step"

    def __init__(
        self,
        message: str,
        request_id: Optional[str] = None,
        current_status: Optional[str] = None,
        action: Optional[str] = None,
    ):
        super().__init__(message, request_id)
        self.current_status = current_status
        self.action = action


class UnknownActionError(InvalidTransitionError):
    """Action is not declared for the request's kind."""


class UnauthorizedError(WorkflowError):
    """Actor's role lacks permission for the transition. Never retried."""

    user_message = "You are not permitted to perform this action"

    def __init__(self, message: str, request_id: Optional[str] = None, role: Optional[str] = None):
        super().__init__(message, request_id)
        self.role = role


class UnknownRoleError(UnauthorizedError):
    """Role value is not part of the closed role enumeration."""


class ValidationError(WorkflowError):
    """Payload is missing or has invalid kind-specific fields at creation time."""

    user_message = "The request is missing required information"

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []


class RuleBookError(WorkflowError):
    """Rule book definition is inconsistent (undeclared states, duplicate actions, ...)."""

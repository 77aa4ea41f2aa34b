"""FastAPI dependencies for accessing app state."""

from typing import Optional

from fastapi import Header
from fastapi import HTTPException
from fastapi import Request
from fastapi import status
from loguru import logger

from reqflow_api.settings import Settings
from reqflow_api.workflow.models.request import Actor
from reqflow_api.workflow.notifications.dispatcher import NotificationDispatcher
from reqflow_api.workflow.notifications.sinks import InMemoryNotificationLog
from reqflow_api.workflow.orchestrator.engine import RequestWorkflowEngine
from reqflow_api.workflow.rulebook import RuleBook


def get_settings(request: Request) -> Settings:
    """
    Get application settings from request state.

    Parameters
    ----------
    request : Request
        FastAPI request object

    Returns
    -------
    Settings
        Application settings instance
    """
    return request.app.state.settings


def get_engine(request: Request) -> RequestWorkflowEngine:
    """
    Get the transition engine from app state.

    The engine holds the explicit store handle created by create_app.
    """
    return request.app.state.engine


def get_rulebook(request: Request) -> RuleBook:
    """Get the loaded rule book from app state."""
    return request.app.state.engine.rulebook


def get_dispatcher(request: Request) -> NotificationDispatcher:
    """Get the notification dispatcher from app state."""
    return request.app.state.dispatcher


def get_notification_log(request: Request) -> InMemoryNotificationLog:
    """Get the in-memory notification feed from app state."""
    return request.app.state.notification_log


async def get_actor(
    x_actor_role: str = Header(
        ...,
        alias="X-Actor-Role",
        description="<small>*Role of the signed-in user, e.g. implementation_manager*</small>",
    ),
    x_actor_name: str = Header(
        ...,
        alias="X-Actor-Name",
        description="<small>*Display name of the signed-in user*</small>",
    ),
    x_actor_id: Optional[str] = Header(
        None,
        alias="X-Actor-Id",
        description="<small>*Stable id of the signed-in user (defaults to the name)*</small>",
    ),
) -> Actor:
    """
    Build the acting identity from the session provider headers.

    Identity is trusted as supplied. The role value itself is checked
    against the closed role list by the authorization gate, so an unknown
    role surfaces as 403 from the engine rather than here.

    Raises
    ------
    HTTPException
        401 if the role or name header is blank
    """
    role = (x_actor_role or "").strip()
    name = (x_actor_name or "").strip()
    if not role or not name:
        logger.warning("Missing actor identity headers", role_set=bool(role), name_set=bool(name))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-Actor-Role and X-Actor-Name headers are required",
        )

    actor_id = (x_actor_id or "").strip() or None
    return Actor(role=role, name=name, id=actor_id)

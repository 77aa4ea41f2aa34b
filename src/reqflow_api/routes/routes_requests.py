"""
Request API Routes

REST API endpoints for submitting requests and moving them through their workflow.
Workflow errors raised here are translated to HTTP responses by errors.handle_workflow_errors.
"""

from typing import List
from typing import Optional

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Path
from fastapi import Query
from fastapi import Request
from fastapi import status
from loguru import logger

from reqflow_api.dependencies import get_actor
from reqflow_api.dependencies import get_engine
from reqflow_api.schemas.schemas import CreateRequestBody
from reqflow_api.schemas.schemas import ListRequestsQueryParams
from reqflow_api.schemas.schemas import TransitionRequestBody
from reqflow_api.schemas.schemas_workflow import AllowedActionsResponse
from reqflow_api.schemas.schemas_workflow import RequestListResponse
from reqflow_api.schemas.schemas_workflow import RequestResponse
from reqflow_api.schemas.schemas_workflow import TransitionResponse
from reqflow_api.workflow.models.request import Actor
from reqflow_api.workflow.models.request import RequestFilter
from reqflow_api.workflow.models.request import Request as WorkflowRequest
from reqflow_api.workflow.orchestrator.engine import RequestWorkflowEngine

ROUTER_REQUESTS = APIRouter(tags=["Requests"], prefix="/requests")


def _to_response(engine: RequestWorkflowEngine, workflow_request: WorkflowRequest) -> RequestResponse:
    definition = engine.rulebook.get(workflow_request.kind)
    is_terminal = definition.is_terminal(workflow_request.status) if definition else False
    return RequestResponse.from_request(workflow_request, is_terminal=is_terminal)


def _to_list_response(engine: RequestWorkflowEngine, requests: List[WorkflowRequest]) -> RequestListResponse:
    return RequestListResponse(
        Message=f"Fetched {len(requests)} requests!",
        Count=len(requests),
        Requests=[_to_response(engine, r) for r in requests],
    )


@ROUTER_REQUESTS.post(
    "",
    response_model=RequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a new request",
    responses={
        201: {"description": "Request created in its kind's initial status"},
        403: {"description": "Unknown role"},
        422: {"description": "Unknown kind or invalid payload"},
    },
)
async def create_request(
    request: Request,
    body: CreateRequestBody,
    actor: Actor = Depends(get_actor),
    engine: RequestWorkflowEngine = Depends(get_engine),
):
    """Submit a request of any kind declared in the rule book."""
    logger.info(
        "Creating request",
        kind=body.kind,
        submitter=actor.name,
        role=actor.role,
        method=request.method,
        path=request.url.path,
    )

    created = await engine.create(
        kind=body.kind,
        payload=body.payload,
        submitter=actor,
        request_id=body.request_id,
        notes=body.notes,
    )
    return _to_response(engine, created)


@ROUTER_REQUESTS.get(
    "",
    response_model=RequestListResponse,
    summary="List requests",
    responses={
        status.HTTP_200_OK: {
            "description": "Requests fetched successfully",
            "content": {
                "application/json": {
                    "example": {
                        "Message": "Fetched 2 requests!",
                        "Count": 2,
                        "Requests": [],
                    }
                }
            },
        }
    },
)
async def list_requests(
    query_params: ListRequestsQueryParams = Depends(),
    engine: RequestWorkflowEngine = Depends(get_engine),
):
    """List requests, optionally filtered by status, kind or submitter."""
    requests = await engine.list(
        RequestFilter(
            status=query_params.status,
            kind=query_params.kind,
            submitter_id=query_params.submitter_id,
        )
    )
    logger.info(
        "Requests listed",
        count=len(requests),
        status=query_params.status,
        kind=query_params.kind,
        submitter_id=query_params.submitter_id,
    )
    return _to_list_response(engine, requests)


@ROUTER_REQUESTS.get(
    "/actionable",
    response_model=RequestListResponse,
    summary="List requests waiting on the caller's role",
)
async def list_actionable_requests(
    kind: Optional[str] = Query(None, description="Restrict to one request kind"),
    actor: Actor = Depends(get_actor),
    engine: RequestWorkflowEngine = Depends(get_engine),
):
    """Requests in a status where the caller's role has at least one action."""
    requests = await engine.list_actionable(actor.role, kind=kind)
    logger.info("Actionable requests listed", role=actor.role, kind=kind, count=len(requests))
    return _to_list_response(engine, requests)


@ROUTER_REQUESTS.get(
    "/{request_id}",
    response_model=RequestResponse,
    summary="Get request details",
    responses={
        200: {"description": "Request found"},
        404: {"description": "Request not found"},
    },
)
async def get_request(
    request_id: str = Path(..., min_length=1, description="Request id, e.g. SR-1A2B3C4D5E"),
    engine: RequestWorkflowEngine = Depends(get_engine),
):
    """Get a request with its full history."""
    workflow_request = await engine.get(request_id)
    return _to_response(engine, workflow_request)


@ROUTER_REQUESTS.get(
    "/{request_id}/actions",
    response_model=AllowedActionsResponse,
    summary="Actions available to the caller",
    responses={
        200: {"description": "Allowed actions (empty when the caller has none)"},
        403: {"description": "Unknown role"},
        404: {"description": "Request not found"},
    },
)
async def get_allowed_actions(
    request_id: str = Path(..., min_length=1, description="Request id"),
    actor: Actor = Depends(get_actor),
    engine: RequestWorkflowEngine = Depends(get_engine),
):
    """List the actions the caller's role may take on the request in its current status."""
    workflow_request = await engine.get(request_id)
    rules = await engine.allowed_actions(request_id, actor.role)
    return AllowedActionsResponse(
        RequestId=workflow_request.id,
        Status=workflow_request.status,
        Role=actor.role,
        Actions=[TransitionResponse.from_rule(rule) for rule in rules],
    )


@ROUTER_REQUESTS.post(
    "/{request_id}/transitions",
    response_model=RequestResponse,
    summary="Apply an action to a request",
    responses={
        200: {"description": "Transition committed, returns the updated request"},
        403: {"description": "Caller's role may not perform this action"},
        404: {"description": "Request not found"},
        409: {"description": "Request has already moved past this step"},
    },
)
async def transition_request(
    request: Request,
    body: TransitionRequestBody,
    request_id: str = Path(..., min_length=1, description="Request id"),
    actor: Actor = Depends(get_actor),
    engine: RequestWorkflowEngine = Depends(get_engine),
):
    """
    Apply `action` to the request as the calling actor.

    The response is the authoritative post-transition request; clients
    should replace their local copy with it.
    """
    logger.info(
        "Applying transition",
        request_id=request_id,
        action=body.action,
        actor=actor.name,
        role=actor.role,
        method=request.method,
        path=request.url.path,
    )

    updated = await engine.transition(request_id, body.action, actor, notes=body.notes)
    return _to_response(engine, updated)

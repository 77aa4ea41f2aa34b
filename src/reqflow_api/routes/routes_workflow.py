"""
Workflow API Routes

Read-only view of the loaded rule book.
"""

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Path
from fastapi import status

from reqflow_api.dependencies import get_rulebook
from reqflow_api.schemas.schemas_workflow import KindResponse
from reqflow_api.schemas.schemas_workflow import KindsResponse
from reqflow_api.workflow.exceptions import ValidationError
from reqflow_api.workflow.rulebook import RuleBook

ROUTER_WORKFLOW = APIRouter(tags=["Workflow"], prefix="/workflow")


@ROUTER_WORKFLOW.get(
    "/kinds",
    response_model=KindsResponse,
    summary="List request kinds and their state machines",
    responses={
        status.HTTP_200_OK: {"description": "Rule book summary"},
    },
)
async def list_kinds(rulebook: RuleBook = Depends(get_rulebook)):
    """Every declared kind with its states, terminal states and transitions (with authorized roles)."""
    kinds = [KindResponse.from_definition(rulebook.require(kind)) for kind in rulebook.kinds]
    return KindsResponse(
        Message=f"Fetched {len(kinds)} request kinds!",
        Version=rulebook.version,
        Count=len(kinds),
        Kinds=kinds,
    )


@ROUTER_WORKFLOW.get(
    "/kinds/{kind}",
    response_model=KindResponse,
    summary="Get the state machine of one request kind",
    responses={
        200: {"description": "Kind found"},
        422: {"description": "Unknown kind"},
    },
)
async def get_kind(
    kind: str = Path(..., min_length=1, description="Request kind, e.g. safety-equipment"),
    rulebook: RuleBook = Depends(get_rulebook),
):
    """Workflow definition of a single kind."""
    definition = rulebook.get(kind.strip().lower())
    if definition is None:
        raise ValidationError(
            f"Unknown request kind: '{kind}'",
            errors=[{"field": "kind", "msg": f"must be one of: {', '.join(rulebook.kinds)}"}],
        )
    return KindResponse.from_definition(definition)

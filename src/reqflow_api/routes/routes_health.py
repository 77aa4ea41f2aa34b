"""Health check endpoints for monitoring application status."""

from datetime import datetime
from datetime import timezone

from fastapi import APIRouter
from fastapi import Request
from fastapi import status
from fastapi.responses import JSONResponse
from loguru import logger

from reqflow_api.schemas.schemas_workflow import WorkflowHealthResponse

ROUTER_HEALTH = APIRouter(tags=["Health"])


@ROUTER_HEALTH.get(
    "/health",
    summary="Health check endpoint",
    description="Basic health check that returns application status and metadata",
    responses={
        status.HTTP_200_OK: {
            "description": "Application is healthy",
            "content": {
                "application/json": {
                    "example": {
                        "status": "healthy",
                        "timestamp": "2026-01-05T12:00:00.000000Z",
                        "service": "Request Workflow API",
                        "version": "v1",
                        "environment": "development",
                    }
                }
            },
        }
    },
)
async def health_check(request: Request):
    """
    Basic health check endpoint.

    Returns application status and metadata. This endpoint is lightweight
    and does not perform any external dependency checks.
    """
    settings = request.app.state.settings

    response_data = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": settings.app_name,
        "version": "v1",
        "environment": settings.environment,
    }

    logger.debug("Health check requested", status="healthy")

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=response_data,
    )


@ROUTER_HEALTH.get(
    "/health/live",
    summary="Liveness probe",
    responses={status.HTTP_200_OK: {"description": "Process is running"}},
)
async def liveness():
    """Liveness probe. Never touches the store."""
    return JSONResponse(status_code=status.HTTP_200_OK, content={"status": "alive"})


@ROUTER_HEALTH.get(
    "/health/ready",
    response_model=WorkflowHealthResponse,
    summary="Readiness probe",
    responses={
        status.HTTP_200_OK: {"description": "Request store reachable"},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"description": "Request store unreachable"},
    },
)
async def readiness(request: Request):
    """
    Check workflow readiness.

    Verifies:
    - Request store reachability
    - Rule book loaded
    """
    settings = request.app.state.settings
    engine = request.app.state.engine
    dispatcher = request.app.state.dispatcher

    try:
        store_connected = await engine.store.health_check()
    except Exception as e:
        logger.error(f"Request store health check failed: {e}")
        store_connected = False

    content = {
        "Message": "Workflow system healthy" if store_connected else "Workflow system unhealthy",
        "StoreBackend": settings.store_backend.value,
        "StoreConnected": store_connected,
        "KindsCount": len(engine.rulebook),
        "FailedNotifications": len(dispatcher.failed),
    }

    return JSONResponse(
        status_code=status.HTTP_200_OK if store_connected else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=content,
    )

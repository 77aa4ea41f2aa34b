"""Error handling for FastAPI application and workflow exceptions."""

import pydantic
from fastapi import Request
from fastapi import status
from fastapi.responses import JSONResponse
from loguru import logger

from reqflow_api.monitoring.logger import log_response_info
from reqflow_api.workflow.exceptions import InvalidTransitionError
from reqflow_api.workflow.exceptions import NotFoundError
from reqflow_api.workflow.exceptions import UnauthorizedError
from reqflow_api.workflow.exceptions import ValidationError
from reqflow_api.workflow.exceptions import WorkflowError

# Explicit exports
__all__ = [
    "handle_broad_exceptions",
    "handle_pydantic_validation_errors",
    "handle_workflow_errors",
    "status_for_workflow_error",
]


# fastapi docs on middlewares: https://fastapi.tiangolo.com/tutorial/middleware/
async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that goes unhandled by a more specific exception handler."""
    try:
        return await call_next(request)
    except Exception as err:  # pylint: disable=broad-except
        error_response = {"detail": "Internal server error", "error_type": type(err).__name__}

        # Get request body from request state (set by RequestContextMiddleware)
        request_body = getattr(request.state, "request_body", None)

        logger.error(
            f"Unhandled exception: {type(err).__name__}: {str(err)}",
            http_status=500,
            status_code=500,
            http_method=request.method,
            url_path=str(request.url.path),
            error_type=type(err).__name__,
            error_message=str(err),
            request_body=request_body,
            response_body=error_response,
            exc_info=True,
        )

        response = JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_response,
        )
        log_response_info(response)
        return response


# fastapi docs on error handlers: https://fastapi.tiangolo.com/tutorial/handling-errors/
async def handle_pydantic_validation_errors(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    """Handle Pydantic validation errors."""
    errors = exc.errors()
    error_response = {
        "detail": [
            {
                "msg": error["msg"],
                "input": error["input"],
            }
            for error in errors
        ]
    }

    request_body = getattr(request.state, "request_body", None)

    logger.warning(
        f"Validation error: {len(errors)} validation errors",
        http_status=422,
        status_code=422,
        http_method=request.method,
        url_path=str(request.url.path),
        error_type="ValidationError",
        validation_errors=errors,
        request_body=request_body,
        response_body=error_response,
    )

    response = JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        content=error_response,
    )
    log_response_info(response)

    return response


def status_for_workflow_error(exc: WorkflowError) -> int:
    """
    Map a workflow error to its HTTP status code.

    - NotFoundError -> 404 Not Found
    - InvalidTransitionError (incl. UnknownActionError) -> 409 Conflict
    - UnauthorizedError (incl. UnknownRoleError) -> 403 Forbidden
    - ValidationError -> 422 Unprocessable Content
    - Anything else (RuleBookError) -> 500
    """
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, InvalidTransitionError):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, UnauthorizedError):
        return status.HTTP_403_FORBIDDEN
    if isinstance(exc, ValidationError):
        return status.HTTP_422_UNPROCESSABLE_CONTENT
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def handle_workflow_errors(request: Request, exc: WorkflowError) -> JSONResponse:
    """
    Handle workflow errors and convert them to user-facing HTTP responses.

    The response carries the error's plain-language `user_message`; the
    technical message goes to the log only.

    Parameters
    ----------
    request : Request
        FastAPI request object
    exc : WorkflowError
        Workflow exception raised by the engine, the gate or a store

    Returns
    -------
    JSONResponse
        HTTP response with appropriate status code and error details
    """
    http_status = status_for_workflow_error(exc)
    error_type = type(exc).__name__

    error_response = {
        "detail": exc.user_message,
        "error_type": error_type,
    }
    if exc.request_id:
        error_response["request_id"] = exc.request_id
    if isinstance(exc, InvalidTransitionError) and exc.current_status:
        error_response["current_status"] = exc.current_status
    if isinstance(exc, ValidationError) and exc.errors:
        error_response["errors"] = exc.errors

    request_body = getattr(request.state, "request_body", None)

    log = logger.error if http_status >= 500 else logger.warning
    log(
        f"Workflow error: {error_type}: {exc.message}",
        http_status=http_status,
        status_code=http_status,
        http_method=request.method,
        url_path=str(request.url.path),
        error_type=error_type,
        error_message=exc.message,
        request_body=request_body,
        response_body=error_response,
    )

    response = JSONResponse(
        status_code=http_status,
        content=error_response,
    )

    log_response_info(response)
    return response

"""Request context middleware for logging."""
import asyncio
import json
import time
import uuid
from contextvars import ContextVar
from typing import Any
from typing import Callable
from typing import Optional

from fastapi import Request
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

# Context variables to store request-specific data
request_id_ctx: ContextVar[str] = ContextVar("request_id", default="")
client_ip_ctx: ContextVar[str] = ContextVar("client_ip", default="")
actor_identity_ctx: ContextVar[str] = ContextVar("actor_identity", default="")
request_path_ctx: ContextVar[str] = ContextVar("request_path", default="")

# Maximum size for request body logging (to avoid memory issues)
MAX_BODY_LOG_SIZE = 10000  # 10KB limit


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware to capture and log request context information."""

    async def dispatch(self, request: Request, call_next: Callable) -> Any:
        """
        Capture request context and add to logging.

        Captures:
        - Request ID (from header or generated)
        - Client IP (forwarded header or direct)
        - Actor identity (X-Actor-Name / X-Actor-Role headers from the session provider)
        - Request path and method
        - Request body (for POST/PUT/PATCH)
        """
        request_id = request.headers.get("X-Request-ID") or self._generate_request_id()
        request_id_ctx.set(request_id)

        client_ip = self._get_client_ip(request)
        client_ip_ctx.set(client_ip)

        actor_identity = self._get_actor_identity(request)
        actor_identity_ctx.set(actor_identity)

        request_path = f"{request.method} {request.url.path}"
        request_path_ctx.set(request_path)

        # Store in request state early so error handlers can access it
        request.state.request_body = None
        if request.method in ("POST", "PUT", "PATCH"):
            request.state.request_body = await self._get_request_body(request)

        with logger.contextualize(
            request_id=request_id,
            client_ip=client_ip,
            actor_identity=actor_identity,
            request_path=request_path,
        ):
            start_time = time.time()
            response = await call_next(request)
            duration_ms = (time.time() - start_time) * 1000

            logger.info(
                f"{request.method} {request.url.path} - {response.status_code}",
                event_type="http_request",
                http_method=request.method,
                url_path=str(request.url.path),
                url_query=str(request.query_params) if request.query_params else None,
                status_code=response.status_code,
                http_status=response.status_code,
                response_time_ms=round(duration_ms, 2),
            )

            response.headers["X-Request-ID"] = request_id
            return response

    async def _get_request_body(self, request: Request) -> Optional[dict]:
        """
        Read the request body with a timeout to prevent hanging.

        Returns:
            Parsed JSON body, a truncation/error marker, or None if empty
        """
        try:
            body = await asyncio.wait_for(request.body(), timeout=2.0)
        except asyncio.TimeoutError:
            return {"_error": "Request body read timeout (>2s)"}

        if not body:
            return None

        if len(body) > MAX_BODY_LOG_SIZE:
            preview = body[:1000].decode("utf-8", errors="replace")
            return {"_truncated": True, "_size": len(body), "_preview": preview}

        content_type = request.headers.get("Content-Type", "")
        if "application/json" not in content_type.lower():
            return {"_raw": body.decode("utf-8", errors="replace")[:200], "_content_type": content_type}

        try:
            return json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return {"_error": "Failed to parse request body", "_error_detail": str(e)}

    def _get_client_ip(self, request: Request) -> str:
        """Get real client IP address, honouring X-Forwarded-For."""
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            # X-Forwarded-For can contain multiple IPs, take the first one
            return forwarded_for.split(",")[0].strip()

        if request.client:
            return request.client.host

        return "unknown"

    def _get_actor_identity(self, request: Request) -> str:
        """
        Get actor identity from the session provider headers.

        Returns "name (role)", the role alone, or "anonymous".
        """
        name = request.headers.get("X-Actor-Name", "").strip()
        role = request.headers.get("X-Actor-Role", "").strip().lower()
        if name and role:
            return f"{name} ({role})"
        if name or role:
            return name or role
        return "anonymous"

    def _generate_request_id(self) -> str:
        """Generate a unique request ID."""
        return str(uuid.uuid4())


def get_request_context() -> dict:
    """
    Get current request context for logging.

    Returns:
        Dictionary with request context variables
    """
    return {
        "request_id": request_id_ctx.get(),
        "client_ip": client_ip_ctx.get(),
        "actor_identity": actor_identity_ctx.get(),
        "request_path": request_path_ctx.get(),
    }

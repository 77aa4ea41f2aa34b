from textwrap import dedent
from typing import List

import pydantic
from fastapi import FastAPI
from fastapi.routing import APIRoute
from loguru import logger

from reqflow_api.errors import handle_broad_exceptions
from reqflow_api.errors import handle_pydantic_validation_errors
from reqflow_api.errors import handle_workflow_errors
from reqflow_api.monitoring.logger import configure_logger
from reqflow_api.monitoring.request_context import RequestContextMiddleware
from reqflow_api.routes.routes_health import ROUTER_HEALTH
from reqflow_api.routes.routes_notifications import ROUTER_NOTIFICATIONS
from reqflow_api.routes.routes_requests import ROUTER_REQUESTS
from reqflow_api.routes.routes_workflow import ROUTER_WORKFLOW
from reqflow_api.settings import Settings
from reqflow_api.workflow.db.repository_base import RequestStore
from reqflow_api.workflow.db.repository_memory import InMemoryRequestStore
from reqflow_api.workflow.enums import StoreBackend
from reqflow_api.workflow.exceptions import WorkflowError
from reqflow_api.workflow.notifications.dispatcher import NotificationDispatcher
from reqflow_api.workflow.notifications.sinks import InMemoryNotificationLog
from reqflow_api.workflow.notifications.sinks import LoggingSink
from reqflow_api.workflow.notifications.sinks import NotificationSink
from reqflow_api.workflow.notifications.sinks import WebhookSink
from reqflow_api.workflow.orchestrator.engine import RequestWorkflowEngine
from reqflow_api.workflow.rulebook import load_rulebook


def create_app(settings: Settings | None = None, store: RequestStore | None = None) -> FastAPI:
    """Create a FastAPI application.

    Configuration is loaded directly from environment variables via pydantic-settings.
    - Deployed: set variables in the service environment
    - Local development: use a .env file in the repository root

    Parameters
    ----------
    settings : Settings, optional
        Application settings, read from the environment when omitted
    store : RequestStore, optional
        Explicit request store, overrides `settings.store_backend`
    """
    settings = settings or Settings()

    configure_logger(level=settings.log_level)

    logger.info(
        "Configuration loaded successfully",
        environment=settings.environment,
        store_backend=settings.store_backend.value,
        rules_file=settings.rules_file or "default",
        webhook_enabled=bool(settings.notification_webhook_url),
    )

    rulebook = load_rulebook(settings.rules_file)
    logger.info("Rule book loaded", version=rulebook.version, kinds=rulebook.kinds)

    app = FastAPI(
        title=settings.app_name,
        version="v1",
        description=dedent(
            """
        Generic request-approval workflow.

        Requests (safety equipment, purchase, fuel, material, general, ...) are submitted by one role
        and advanced by others according to the rule book. Identity comes from the
        `X-Actor-Role`, `X-Actor-Name` and `X-Actor-Id` headers set by the session provider.
        """
        ),
        generate_unique_id_function=custom_generate_unique_id,
        swagger_ui_parameters={
            "defaultModelsExpandDepth": -1,  # Hide schemas section
            "defaultModelExpandDepth": 1,  # Keep models collapsed if shown
        },
    )
    app.state.settings = settings

    # Notifications: log + in-memory feed always, webhook when configured
    notification_log = InMemoryNotificationLog(maxlen=settings.notification_log_size)
    sinks: List[NotificationSink] = [LoggingSink(), notification_log]
    if settings.notification_webhook_url:
        sinks.append(
            WebhookSink(settings.notification_webhook_url, timeout=settings.notification_timeout_seconds)
        )
        logger.info("Webhook notifications enabled", url=settings.notification_webhook_url)

    dispatcher = NotificationDispatcher(sinks, max_failed=settings.max_failed_notifications)
    app.state.notification_log = notification_log
    app.state.dispatcher = dispatcher

    if store is None and settings.store_backend == StoreBackend.POSTGRES:
        logger.info("Initializing PostgreSQL request store")

        from reqflow_api.workflow.db.pool import DomainDBPool
        from reqflow_api.workflow.db.repository_request import PostgresRequestStore
        from reqflow_api.workflow.notifications.sinks import PostgresAuditSink

        domain_db_pool = DomainDBPool(
            settings.domain_db_connection_string,
            min_size=settings.domain_db_min_pool_size,
            max_size=settings.domain_db_max_pool_size,
        )
        app.state.domain_db_pool = domain_db_pool
        store = PostgresRequestStore(domain_db_pool)
        dispatcher.add_sink(PostgresAuditSink(domain_db_pool))

        @app.on_event("startup")
        async def startup_workflow():
            """Initialize workflow database."""
            await app.state.domain_db_pool.initialize()
            logger.success("Workflow database initialized")

        @app.on_event("shutdown")
        async def shutdown_workflow():
            """Close workflow database connections."""
            await app.state.domain_db_pool.close()
            logger.info("Workflow database closed")

    elif store is None:
        store = InMemoryRequestStore()
        logger.info("Using in-memory request store (requests are lost on restart)")

    app.state.engine = RequestWorkflowEngine(store, rulebook, dispatcher=dispatcher)

    # Add request context middleware for tracking who/where requests come from
    app.add_middleware(RequestContextMiddleware)
    app.include_router(ROUTER_HEALTH)
    app.include_router(ROUTER_REQUESTS, prefix="/api")
    app.include_router(ROUTER_WORKFLOW, prefix="/api")
    app.include_router(ROUTER_NOTIFICATIONS, prefix="/api")

    app.add_exception_handler(
        exc_class_or_status_code=WorkflowError,
        handler=handle_workflow_errors,
    )
    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )

    app.middleware("http")(handle_broad_exceptions)

    logger.success("Request workflow API created", store=type(store).__name__)
    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    if route.tags:
        return f"{route.tags[0]}-{route.name}"
    return route.name


if __name__ == "__main__":
    import uvicorn

    app = create_app()
    uvicorn.run(app, host="0.0.0.0", port=8000)

"""Settings for the request workflow API."""

from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict

from reqflow_api.workflow.enums import StoreBackend


class Settings(BaseSettings):
    """
    Settings for the request workflow API.

    [pydantic.BaseSettings](https://docs.pydantic.dev/latest/concepts/pydantic_settings/) is a popular
    framework for organizing, validating, and reading configuration values from a variety of sources
    including environment variables.

    This class automatically reads from:
    1. Environment variables (production)
    2. .env file (local development)

    Environment variable names are treated case-insensitively, but the canonical
    names used in this project are lowercase (store_backend, rules_file, log_level).
    """

    app_name: str = "Request Workflow API"
    """Title shown in the OpenAPI docs."""

    environment: str = "development"
    """Deployment environment name, included in health responses."""

    log_level: str = "INFO"
    """Minimum level for the stdout log sink."""

    # Request Store
    store_backend: StoreBackend = StoreBackend.MEMORY
    """Where requests are kept: in process memory or in PostgreSQL."""

    domain_db_connection_string: Optional[str] = None
    """PostgreSQL connection string for the workflow database (required when store_backend=postgres)."""

    domain_db_min_pool_size: int = 2
    """Minimum pooled connections to the workflow database."""

    domain_db_max_pool_size: int = 10
    """Maximum pooled connections to the workflow database."""

    # Rule Book
    rules_file: Optional[str] = None
    """Path to a YAML rule book. The packaged default rule book is used when unset."""

    # Notifications
    notification_webhook_url: Optional[str] = None
    """Webhook receiving every audit event as JSON (disabled when unset)."""

    notification_timeout_seconds: float = 5.0
    """Timeout for a single webhook delivery."""

    notification_log_size: int = 200
    """Number of recent audit events kept for GET /api/notifications."""

    max_failed_notifications: int = 500
    """Failed deliveries kept for retry; the oldest are dropped beyond this."""

    @model_validator(mode="after")
    def validate_store_backend(self) -> "Settings":
        """The postgres backend needs a connection string."""
        if self.store_backend == StoreBackend.POSTGRES and not self.domain_db_connection_string:
            raise ValueError("domain_db_connection_string is required when store_backend=postgres")
        return self

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",  # Load from .env file if it exists (local development)
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra environment variables not defined in the model
        validate_default=True,  # Validate default values
    )

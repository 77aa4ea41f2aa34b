"""
Notification Sinks

Destinations for audit events. Each sink may fail independently; the
dispatcher decides what happens to failures, sinks simply raise.
"""

from abc import ABC
from abc import abstractmethod
from collections import deque
from typing import Deque
from typing import List
from typing import Optional

import httpx
from loguru import logger

from reqflow_api.workflow.db.repository_audit import AuditTrailRepository
from reqflow_api.workflow.db.repository_notification import NotificationRepository
from reqflow_api.workflow.enums import NotificationStatus
from reqflow_api.workflow.models.audit import AuditEvent


class NotificationSink(ABC):
    """Destination for audit events."""

    name: str = "sink"

    @abstractmethod
    async def deliver(self, event: AuditEvent) -> None:
        """Deliver one event. Raise on failure."""


class LoggingSink(NotificationSink):
    """Writes every event to the application log."""

    name = "logging"

    async def deliver(self, event: AuditEvent) -> None:
        logger.info(
            event.message,
            request_id=event.request_id,
            kind=event.kind,
            action=event.action,
            from_status=event.from_status,
            to_status=event.to_status,
            actor_role=event.actor_role,
        )


class InMemoryNotificationLog(NotificationSink):
    """Keeps the most recent events in memory for the notifications feed."""

    name = "memory"

    def __init__(self, maxlen: int = 200):
        self._events: Deque[AuditEvent] = deque(maxlen=maxlen)

    async def deliver(self, event: AuditEvent) -> None:
        self._events.append(event)

    def recent(self, limit: Optional[int] = None) -> List[AuditEvent]:
        """Most recent events first."""
        events = list(reversed(self._events))
        return events[:limit] if limit is not None else events

    def clear(self) -> None:
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)


class WebhookSink(NotificationSink):
    """POSTs each event as JSON to a webhook URL."""

    name = "webhook"

    def __init__(self, url: str, timeout: float = 5.0):
        self.url = url
        self.timeout = timeout

    async def deliver(self, event: AuditEvent) -> None:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self.url,
                json={"title": event.title, **event.model_dump(mode="json")},
            )
            response.raise_for_status()

        logger.debug("Webhook notification delivered", url=self.url, request_id=event.request_id)


class PostgresAuditSink(NotificationSink):
    """Persists events to reqflow.audit_trail and reqflow.notifications."""

    name = "postgres"

    def __init__(self, pool):
        self.audit_repo = AuditTrailRepository(pool)
        self.notification_repo = NotificationRepository(pool)

    async def deliver(self, event: AuditEvent) -> None:
        await self.audit_repo.record(event)

        await self.notification_repo.create(
            notification_type=event.audit_action.value,
            recipient=event.kind,
            subject=event.title,
            body=event.message,
            related_entity_type="request",
            related_entity_id=event.request_id,
            status=NotificationStatus.SENT,
        )

"""
Notification Repository

Repository for notification delivery records (append-only table).
"""

from typing import Optional
from uuid import UUID
from uuid import uuid4

from reqflow_api.workflow.enums import NotificationStatus


class NotificationRepository:
    """Notification repository (append-only)."""

    def __init__(self, pool):
        self.pool = pool

    async def create(
        self,
        notification_type: str,
        recipient: str,
        subject: str,
        body: str,
        related_entity_type: Optional[str] = None,
        related_entity_id: Optional[str] = None,
        status: NotificationStatus = NotificationStatus.PENDING,
    ) -> UUID:
        """Create a notification record."""
        notification_id = uuid4()

        async with self.pool.acquire() as conn:
            await conn.execute(
                """
                INSERT INTO reqflow.notifications
                    (notification_id, notification_type, recipient, subject, body,
                     related_entity_type, related_entity_id, status, created_at, sent_at)
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, NOW(),
                        CASE WHEN $8 = 'SENT' THEN NOW() ELSE NULL END)
                """,
                notification_id,
                notification_type,
                recipient,
                subject,
                body,
                related_entity_type,
                related_entity_id,
                status.value,
            )

        return notification_id

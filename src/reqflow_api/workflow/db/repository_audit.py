"""
Audit Trail Repository

One append-only row per audit event: who moved which request from which status
to which, and the message shown to users.
"""

from uuid import UUID
from uuid import uuid4

from reqflow_api.workflow.models.audit import AuditEvent


class AuditTrailRepository:
    """Request audit trail (append-only)."""

    def __init__(self, pool):
        self.pool = pool

    async def record(self, event: AuditEvent) -> UUID:
        """Insert the audit row for an event and return its audit id."""
        audit_id = uuid4()

        async with self.pool.acquire() as conn:
            await conn.execute(
                """
                INSERT INTO reqflow.audit_trail
                    (audit_id, event_id, request_id, kind, audit_action, action,
                     from_status, to_status, actor_role, actor_name, message, occurred_at)
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12)
                """,
                audit_id,
                event.event_id,
                event.request_id,
                event.kind,
                event.audit_action.value,
                event.action,
                event.from_status,
                event.to_status,
                event.actor_role,
                event.actor_name,
                event.message,
                event.timestamp,
            )

        return audit_id

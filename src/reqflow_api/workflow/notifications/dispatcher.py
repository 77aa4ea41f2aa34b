"""
Notification Dispatcher

Fans each audit event out to every configured sink. Delivery is best-effort:
a failing sink is logged and the event parked for `retry_failed()`, never
propagated to the caller. The transition that produced the event stays committed.
"""

from collections import deque
from typing import Deque
from typing import Iterable
from typing import List
from typing import Tuple

from loguru import logger

from reqflow_api.workflow.models.audit import AuditEvent
from reqflow_api.workflow.notifications.sinks import NotificationSink

FailedDelivery = Tuple[NotificationSink, AuditEvent]


class NotificationDispatcher:
    """Best-effort delivery of audit events to a set of sinks."""

    def __init__(self, sinks: Iterable[NotificationSink] = (), max_failed: int = 500):
        self.sinks: List[NotificationSink] = list(sinks)
        self._failed: Deque[FailedDelivery] = deque(maxlen=max_failed)

    def add_sink(self, sink: NotificationSink) -> None:
        self.sinks.append(sink)

    @property
    def failed(self) -> List[FailedDelivery]:
        """Deliveries waiting for a retry, oldest first."""
        return list(self._failed)

    async def dispatch(self, event: AuditEvent) -> int:
        """
        Deliver an event to every sink.

        Returns:
            Number of sinks that accepted the event
        """
        delivered = 0
        for sink in self.sinks:
            if await self._deliver(sink, event):
                delivered += 1
            else:
                self._failed.append((sink, event))
        return delivered

    async def retry_failed(self) -> int:
        """
        Re-attempt every parked delivery once.

        Deliveries that fail again stay parked.

        Returns:
            Number of deliveries that succeeded on this attempt
        """
        pending = list(self._failed)
        self._failed.clear()

        delivered = 0
        for sink, event in pending:
            if await self._deliver(sink, event):
                delivered += 1
            else:
                self._failed.append((sink, event))

        if pending:
            logger.info(
                "Notification retry finished",
                attempted=len(pending),
                delivered=delivered,
                still_failed=len(self._failed),
            )
        return delivered

    async def _deliver(self, sink: NotificationSink, event: AuditEvent) -> bool:
        try:
            await sink.deliver(event)
            return True
        except Exception as e:
            logger.warning(
                "Notification delivery failed",
                sink=sink.name,
                request_id=event.request_id,
                action=event.action,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

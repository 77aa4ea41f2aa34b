"""
Workflow Notifications Module

Audit event rendering, sinks and the best-effort dispatcher.
"""

from reqflow_api.workflow.notifications.dispatcher import NotificationDispatcher
from reqflow_api.workflow.notifications.messages import build_event
from reqflow_api.workflow.notifications.messages import render_message
from reqflow_api.workflow.notifications.sinks import (
    InMemoryNotificationLog,
    LoggingSink,
    NotificationSink,
    PostgresAuditSink,
    WebhookSink,
)

__all__ = [
    "NotificationDispatcher",
    "build_event",
    "render_message",
    "NotificationSink",
    "LoggingSink",
    "InMemoryNotificationLog",
    "WebhookSink",
    "PostgresAuditSink",
]

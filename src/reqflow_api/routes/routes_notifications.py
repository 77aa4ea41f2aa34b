"""
Notification API Routes

Feed of recent audit events and manual re-delivery of failed notifications.
"""

from fastapi import APIRouter
from fastapi import Depends
from fastapi import status
from loguru import logger

from reqflow_api.dependencies import get_dispatcher
from reqflow_api.dependencies import get_notification_log
from reqflow_api.schemas.schemas import ListNotificationsQueryParams
from reqflow_api.schemas.schemas_workflow import NotificationListResponse
from reqflow_api.schemas.schemas_workflow import NotificationResponse
from reqflow_api.schemas.schemas_workflow import RetryNotificationsResponse
from reqflow_api.workflow.notifications.dispatcher import NotificationDispatcher
from reqflow_api.workflow.notifications.sinks import InMemoryNotificationLog

ROUTER_NOTIFICATIONS = APIRouter(tags=["Notifications"], prefix="/notifications")


@ROUTER_NOTIFICATIONS.get(
    "",
    response_model=NotificationListResponse,
    summary="Recent audit events",
    responses={
        status.HTTP_200_OK: {
            "description": "Notifications fetched successfully",
            "content": {
                "application/json": {
                    "example": {
                        "Message": "Fetched 1 notifications!",
                        "Count": 1,
                        "Notifications": [
                            {
                                "RequestId": "SR-1A2B3C4D5E",
                                "Title": "Request Acknowledged",
                                "Message": "Safety equipment request SR-1A2B3C4D5E has been acknowledged by Dana",
                            }
                        ],
                    }
                }
            },
        }
    },
)
async def list_notifications(
    query_params: ListNotificationsQueryParams = Depends(),
    notification_log: InMemoryNotificationLog = Depends(get_notification_log),
):
    """Most recent audit events, newest first."""
    events = notification_log.recent(query_params.limit)
    return NotificationListResponse(
        Message=f"Fetched {len(events)} notifications!",
        Count=len(events),
        Notifications=[NotificationResponse.from_event(e) for e in events],
    )


@ROUTER_NOTIFICATIONS.post(
    "/retry",
    response_model=RetryNotificationsResponse,
    summary="Re-deliver failed notifications",
)
async def retry_notifications(dispatcher: NotificationDispatcher = Depends(get_dispatcher)):
    """Re-attempt every parked delivery once. Deliveries that fail again stay parked."""
    delivered = await dispatcher.retry_failed()
    still_failed = len(dispatcher.failed)
    logger.info("Notification retry requested", delivered=delivered, still_failed=still_failed)
    return RetryNotificationsResponse(
        Message=f"Re-delivered {delivered} notifications!",
        Delivered=delivered,
        StillFailed=still_failed,
    )

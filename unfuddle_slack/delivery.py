"""Ordered, stop-on-first-failure delivery of activity items."""

import logging
from datetime import datetime
from typing import Iterable, List, Sequence

from .formatter import normalize
from .models import ActivityItem, DeliveryResult
from .slack_notifier import DeliveryError, NotificationSink

logger = logging.getLogger(__name__)


def sort_items(items: Iterable[ActivityItem]) -> List[ActivityItem]:
    """Sort items by creation time ascending; ties keep fetch order."""
    return sorted(items, key=lambda item: item.created_at)


def deliver(
    items: Sequence[ActivityItem],
    sink: NotificationSink,
    cursor: datetime,
    base_url: str,
    project_id: str,
) -> DeliveryResult:
    """
    Send items one at a time, stopping at the first failure.

    The returned cursor is the creation time of the last item the sink
    accepted, or ``cursor`` if none was accepted. A failed send is reported in
    the result rather than raised, and no later item is attempted.

    Args:
        items: Activity items sorted ascending by ``created_at``.
        sink: Where notifications are sent.
        cursor: Cursor value at the start of the cycle.
        base_url: Unfuddle account URL used for links.
        project_id: Unfuddle project identifier used for links.
    """
    new_cursor = cursor
    delivered = 0

    for item in items:
        notification = normalize(item, base_url, project_id)
        try:
            sink.send(notification)
        except DeliveryError as e:
            logger.error(f"Error updating Slack with activity item ({item.id}): {item.summary}")
            logger.error(str(e))
            logger.info(
                "Aborting ping of remaining activity items, new sync time will be: "
                f"{new_cursor.isoformat()}"
            )
            return DeliveryResult(delivered_count=delivered, new_cursor=new_cursor, error=e)

        new_cursor = item.created_at
        delivered += 1
        logger.info(f"Successfully updated Slack with new activity item ({item.id}): {item.summary}")
        logger.debug(f"new_sync_time = {new_cursor.isoformat()}")
        logger.debug(f"attachments = {[a.to_dict() for a in notification.attachments]}")

    return DeliveryResult(delivered_count=delivered, new_cursor=new_cursor)

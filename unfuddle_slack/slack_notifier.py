"""Slack incoming-webhook notification module."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from slack_sdk.webhook import WebhookClient

from .config import SlackConfig
from .models import Notification

logger = logging.getLogger(__name__)


class DeliveryError(Exception):
    """Raised when a single notification could not be delivered."""


class NotificationSink(ABC):
    """Abstract base class for notification sinks."""

    @abstractmethod
    def send(self, notification: Notification) -> None:
        """
        Deliver one notification.

        Raises:
            DeliveryError: If the sink did not accept the notification.
        """
        pass


class SlackWebhookSink(NotificationSink):
    """Posts notifications to a Slack incoming webhook."""

    def __init__(self, config: SlackConfig, client: Optional[WebhookClient] = None):
        self.config = config
        # exactly one POST per notification
        self.client = client or WebhookClient(config.webhook_url, retry_handlers=[])

    def build_payload(self, notification: Notification) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "text": notification.text,
            "attachments": [a.to_dict() for a in notification.attachments],
            "username": self.config.username,
        }
        if self.config.channel:
            payload["channel"] = self.config.channel
        if self.config.icon_url:
            payload["icon_url"] = self.config.icon_url
        return payload

    def send(self, notification: Notification) -> None:
        payload = self.build_payload(notification)
        logger.debug(f"Slack payload: {payload}")
        try:
            response = self.client.send_dict(payload)
        except Exception as e:
            raise DeliveryError(f"Failed to post to Slack webhook: {e}") from e

        if response.status_code != 200:
            raise DeliveryError(
                f"Slack webhook returned {response.status_code}: {response.body}"
            )

"""
Chat Renderer Base

Common delivery loop for platform renderers.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from ..models.pull_request import DestinationBucket
from .delivery import DeliveryError, WebhookSender


logger = logging.getLogger(__name__)


class ChatRenderer(ABC):
    """
    Renders destination buckets into a platform payload and delivers them.

    Subclasses only implement ``render``.
    """

    platform_name = "chat"

    def __init__(self, sender: Optional[WebhookSender] = None):
        self.sender = sender or WebhookSender()

    @abstractmethod
    def render(self, bucket: DestinationBucket, now: datetime) -> Dict[str, Any]:
        """Build the JSON payload for one bucket."""

    def deliver(
        self,
        buckets: Mapping[str, DestinationBucket],
        webhooks: Mapping[str, str],
        now: Optional[datetime] = None
    ) -> Dict[str, bool]:
        """
        Render and send every bucket, in bucket insertion order.

        Destinations without a configured webhook URL are skipped and
        left out of the result. A failed destination is logged and does
        not stop the others.

        Args:
            buckets: Destination id -> bucket
            webhooks: Destination id -> webhook URL
            now: Render time used for PR ages (default: current UTC time)

        Returns:
            Destination id -> delivered successfully
        """
        now = now or datetime.now(timezone.utc)
        results = {}

        for destination_id, bucket in buckets.items():
            webhook_url = webhooks.get(destination_id)
            if not webhook_url:
                logger.debug(f"No webhook configured for {destination_id}, skipping")
                continue

            channel = bucket.rule.display_name or destination_id
            try:
                payload = self.render(bucket, now)
                self.sender.post(webhook_url, payload)
            except (DeliveryError, ValidationError) as e:
                logger.error(f"❌ Failed to send to {self.platform_name} ({channel}): {e}")
                results[destination_id] = False
                continue

            logger.info(f"✅ Sent {len(bucket)} PRs to {self.platform_name} ({channel})")
            results[destination_id] = True

        return results

"""
Webhook Delivery

Posts rendered chat payloads to incoming-webhook URLs.
"""

import logging
from typing import Any, Dict, Optional

import requests


logger = logging.getLogger(__name__)


class DeliveryError(Exception):
    """Webhook POST failed or was rejected"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class WebhookSender:
    """Sends one JSON payload per call. No retries."""

    def __init__(self, timeout: Optional[float] = 30, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def post(self, url: str, payload: Dict[str, Any]) -> None:
        """
        POST a payload as JSON.

        Raises:
            DeliveryError: On transport failure or a non-2xx response
        """
        try:
            response = self.session.post(
                url,
                json=payload,
                headers={'Content-Type': 'application/json'},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise DeliveryError(f"Request failed: {e}") from e

        if not response.ok:
            raise DeliveryError(
                f"{response.status_code} - {response.text}",
                status_code=response.status_code,
            )

"""
Chat Formatting

This module renders destination buckets for chat platforms
(Slack Block Kit, Google Chat Cards V2) and delivers them to webhooks.
"""

from .base import ChatRenderer
from .delivery import DeliveryError, WebhookSender
from .slack import SlackRenderer
from .google_chat import GoogleChatRenderer

__all__ = ['ChatRenderer', 'DeliveryError', 'WebhookSender', 'SlackRenderer', 'GoogleChatRenderer']

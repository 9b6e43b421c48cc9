"""
Command Line Entry Points

One run-to-completion process per chat platform. Configuration comes
from the environment (and an optional .env file), or from the YAML file
named by RELAY_CONFIG_FILE; there are no flags.
"""

import asyncio
import logging
import sys
from typing import Type

from .config import AppConfig, ConfigError, setup_logging
from .formatting.base import ChatRenderer
from .formatting.delivery import WebhookSender
from .formatting.google_chat import GoogleChatRenderer
from .formatting.slack import SlackRenderer
from .github.client import GitHubClient
from .pipeline import FetchResult, PullRequestPipeline


logger = logging.getLogger(__name__)


async def collect(config: AppConfig) -> FetchResult:
    """Run the fetch pipeline with a client that is closed afterwards."""
    async with GitHubClient(
        config.github.token,
        base_url=config.github.api_base_url,
        timeout=config.github.timeout_seconds,
    ) as client:
        return await PullRequestPipeline(client, config).fetch_buckets()


def run(renderer_class: Type[ChatRenderer], config: AppConfig) -> int:
    """
    Fetch, bucket and deliver once.

    Returns:
        Process exit code
    """
    result = asyncio.run(collect(config))

    if result.empty:
        return 0

    renderer = renderer_class(sender=WebhookSender(timeout=config.github.timeout_seconds))
    delivered = renderer.deliver(result.buckets, config.webhooks)

    failed = [destination for destination, ok in delivered.items() if not ok]
    if failed:
        logger.warning(f"Delivery failed for {len(failed)} destination(s): {', '.join(failed)}")
    return 0


def main(renderer_class: Type[ChatRenderer]) -> int:
    try:
        config = AppConfig.load()
        config.validate()
    except ConfigError as e:
        # logging is not configured yet
        print(f"❌ {e}", file=sys.stderr)
        return 1

    setup_logging(config.logging, debug=config.debug)

    try:
        return run(renderer_class, config)
    except Exception:
        logger.exception("❌ Relay run failed")
        return 1


def slack_main() -> None:
    sys.exit(main(SlackRenderer))


def google_chat_main() -> None:
    sys.exit(main(GoogleChatRenderer))

"""
Slack Renderer

Renders a destination bucket as a Slack Block Kit message in a
table-like layout: one section per PR with a two-column field grid
(author/age, size/build) and a context footer with the review status.
"""

import logging
from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.pull_request import DestinationBucket, EnrichedPullRequest, ReviewState
from .base import ChatRenderer
from .common import age_in_days, bucket_title, ci_icon, format_reviewers, review_icon


logger = logging.getLogger(__name__)

SLACK_MAX_BLOCKS = 50


class TextObject(BaseModel):
    """Block Kit text object"""
    model_config = ConfigDict(extra='forbid')

    type: Literal['plain_text', 'mrkdwn']
    text: str = Field(min_length=1)
    emoji: Optional[bool] = None


class HeaderBlock(BaseModel):
    model_config = ConfigDict(extra='forbid')

    type: Literal['header'] = 'header'
    text: TextObject

    @field_validator('text')
    @classmethod
    def validate_plain_text(cls, v):
        if v.type != 'plain_text':
            raise ValueError('Header text must be plain_text')
        return v


class DividerBlock(BaseModel):
    model_config = ConfigDict(extra='forbid')

    type: Literal['divider'] = 'divider'


class SectionBlock(BaseModel):
    model_config = ConfigDict(extra='forbid')

    type: Literal['section'] = 'section'
    text: TextObject
    # two-column grid
    fields: Optional[Annotated[List[TextObject], Field(min_length=2, max_length=2)]] = None


class ContextBlock(BaseModel):
    model_config = ConfigDict(extra='forbid')

    type: Literal['context'] = 'context'
    elements: List[TextObject] = Field(min_length=1)


SlackBlock = Annotated[
    Union[HeaderBlock, DividerBlock, SectionBlock, ContextBlock],
    Field(discriminator='type'),
]


class SlackMessage(BaseModel):
    """Incoming-webhook message body"""
    model_config = ConfigDict(extra='forbid')

    blocks: List[SlackBlock] = Field(min_length=1, max_length=SLACK_MAX_BLOCKS)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class SlackMessageBuilder:
    """Assembles blocks in order and validates the message on build."""

    def __init__(self):
        self.blocks: List[Union[HeaderBlock, DividerBlock, SectionBlock, ContextBlock]] = []

    def header(self, text: str) -> "SlackMessageBuilder":
        self.blocks.append(HeaderBlock(text=TextObject(type='plain_text', text=text, emoji=True)))
        return self

    def divider(self) -> "SlackMessageBuilder":
        self.blocks.append(DividerBlock())
        return self

    def section(self, text: str, fields: Optional[List[str]] = None) -> "SlackMessageBuilder":
        self.blocks.append(SectionBlock(
            text=TextObject(type='mrkdwn', text=text),
            fields=[TextObject(type='mrkdwn', text=f) for f in fields] if fields else None,
        ))
        return self

    def context(self, text: str) -> "SlackMessageBuilder":
        self.blocks.append(ContextBlock(elements=[TextObject(type='mrkdwn', text=text)]))
        return self

    def build(self) -> SlackMessage:
        return SlackMessage(blocks=self.blocks)


class SlackRenderer(ChatRenderer):
    """Table layout renderer for Slack incoming webhooks."""

    platform_name = "Slack"

    # header + divider, then section + context + divider per PR
    HEADER_BLOCKS = 2
    BLOCKS_PER_ITEM = 3

    def render(self, bucket: DestinationBucket, now: datetime) -> Dict[str, Any]:
        builder = SlackMessageBuilder()
        builder.header(bucket_title(bucket.rule)).divider()

        items = bucket.items
        shown = self._max_items(len(items))
        for pr in items[:shown]:
            self._render_item(builder, pr, now)

        overflow = len(items) - shown
        if overflow > 0:
            logger.warning(f"Slack message for {bucket.rule.destination_id} truncated, {overflow} PRs omitted")
            builder.context(f"…and {overflow} more")

        return builder.build().to_payload()

    def _max_items(self, count: int) -> int:
        if self.HEADER_BLOCKS + count * self.BLOCKS_PER_ITEM <= SLACK_MAX_BLOCKS:
            return count
        # keep one block for the overflow line
        return (SLACK_MAX_BLOCKS - self.HEADER_BLOCKS - 1) // self.BLOCKS_PER_ITEM

    def _render_item(self, builder: SlackMessageBuilder, pr: EnrichedPullRequest, now: datetime) -> None:
        days_old = age_in_days(pr.created_at, now)

        builder.section(
            f"👉 *<{pr.html_url}|{pr.title}>* ({pr.repository}#{pr.number})",
            fields=[
                f"👤 *Author:* {pr.author}\n⏳ *Age:* {days_old} days",
                f"📊 *Size:* `{pr.size}`\n🏗 *Build:* {ci_icon(pr.ci_status)}",
            ],
        )
        builder.context(self._status_text(pr))
        builder.divider()

    def _status_text(self, pr: EnrichedPullRequest) -> str:
        if pr.review_state == ReviewState.PENDING:
            return f"👀 *Waiting on:* {format_reviewers(pr.requested_reviewers, '_None_')}"
        return f"⚖️ *State:* {review_icon(pr.review_state)} {pr.review_state.value}"

"""
Google Chat Renderer

Renders a destination bucket as a single Cards V2 card: one section
per PR holding a link, a two-column widget grid (author/age, size/CI)
and a bold status footer.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..models.pull_request import DestinationBucket, EnrichedPullRequest, ReviewState
from .base import ChatRenderer
from .common import bucket_title, ci_icon, format_age, format_reviewers, review_icon


logger = logging.getLogger(__name__)

CARD_ID = "daily-pr-bump"
GITHUB_MARK_URL = "https://github.githubassets.com/images/modules/logos_page/GitHub-Mark.png"


class CardModel(BaseModel):
    """Cards V2 JSON uses camelCase keys"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='forbid')


class Icon(CardModel):
    known_icon: Literal['PERSON', 'CLOCK', 'DESCRIPTION', 'BOOKMARK', 'STAR']


class TextParagraph(CardModel):
    text: str = Field(min_length=1)


class DecoratedText(CardModel):
    text: str = Field(min_length=1)
    bottom_label: Optional[str] = None
    start_icon: Optional[Icon] = None


class Divider(CardModel):
    pass


class TextParagraphWidget(CardModel):
    text_paragraph: TextParagraph


class DecoratedTextWidget(CardModel):
    decorated_text: DecoratedText


class DividerWidget(CardModel):
    divider: Divider = Field(default_factory=Divider)


class Column(CardModel):
    widgets: List[DecoratedTextWidget] = Field(min_length=1)


class Columns(CardModel):
    column_items: List[Column] = Field(min_length=1, max_length=2)


class ColumnsWidget(CardModel):
    columns: Columns


Widget = Union[TextParagraphWidget, DecoratedTextWidget, ColumnsWidget, DividerWidget]


class Section(CardModel):
    header: Optional[str] = None
    widgets: List[Widget] = Field(min_length=1)


class CardHeader(CardModel):
    title: str = Field(min_length=1)
    subtitle: Optional[str] = None
    image_url: Optional[str] = None
    image_type: Optional[Literal['SQUARE', 'CIRCLE']] = None


class Card(CardModel):
    header: CardHeader
    sections: List[Section] = Field(default_factory=list)


class CardWithId(CardModel):
    card_id: str = Field(min_length=1)
    card: Card


class GoogleChatMessage(CardModel):
    """Incoming-webhook message body"""
    cards_v2: List[CardWithId] = Field(alias='cardsV2', min_length=1)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def decorated(text: str, label: str, icon: Optional[str] = None) -> DecoratedTextWidget:
    return DecoratedTextWidget(decorated_text=DecoratedText(
        text=text,
        bottom_label=label,
        start_icon=Icon(known_icon=icon) if icon else None,
    ))


def paragraph(text: str) -> TextParagraphWidget:
    return TextParagraphWidget(text_paragraph=TextParagraph(text=text))


class GoogleChatRenderer(ChatRenderer):
    """Card layout renderer for Google Chat incoming webhooks."""

    platform_name = "Google Chat"

    def render(self, bucket: DestinationBucket, now: datetime) -> Dict[str, Any]:
        sections = [self._render_item(pr, now) for pr in bucket.items]

        message = GoogleChatMessage(cards_v2=[
            CardWithId(
                card_id=CARD_ID,
                card=Card(
                    header=CardHeader(
                        title=bucket_title(bucket.rule),
                        subtitle=f"{len(bucket.items)} PRs pending attention",
                        image_url=GITHUB_MARK_URL,
                        image_type='CIRCLE',
                    ),
                    sections=sections,
                ),
            )
        ])
        return message.to_payload()

    def _render_item(self, pr: EnrichedPullRequest, now: datetime) -> Section:
        return Section(
            header=f"PR {pr.repository}#{pr.number}: {pr.title}",
            widgets=[
                paragraph(f'<a href="{pr.html_url}">🔗 Open Pull Request</a>'),
                ColumnsWidget(columns=Columns(column_items=[
                    Column(widgets=[
                        decorated(pr.author, "Author", "PERSON"),
                        decorated(format_age(pr.created_at, now), "Age", "CLOCK"),
                    ]),
                    Column(widgets=[
                        decorated(pr.size, "Size", "DESCRIPTION"),
                        decorated(f"{ci_icon(pr.ci_status)} Build", "CI Status"),
                    ]),
                ])),
                paragraph(f"<b>{review_icon(pr.review_state)} {self._status_text(pr)}</b>"),
                DividerWidget(),
            ],
        )

    def _status_text(self, pr: EnrichedPullRequest) -> str:
        if pr.review_state == ReviewState.PENDING:
            return f"Waiting on: {format_reviewers(pr.requested_reviewers, 'None')}"
        return f"State: {pr.review_state.value}"

"""
Message Feed Reader

Reads a channel's message change feed and returns one page of user messages.

The delta endpoint can skip/limit server-side but cannot filter by message
type, so server-side paging over the raw feed would let system events take
slots meant for real messages. The default strategy therefore fetches the
whole feed, filters to user messages, then pages client-side. This trades
bandwidth for correct page contents.
"""

import logging
from collections import Counter
from typing import Dict, List, Optional, Protocol

from pydantic import BaseModel

from app.integrations.graph.client import GraphClient
from app.integrations.graph.models import ChatMessage, to_display_reaction
from app.utils.helpers import require

logger = logging.getLogger(__name__)


class PageCursor(BaseModel):
    """1-based page position over the filtered feed."""

    current_page: int = 1
    page_size: int = 10

    @property
    def skip(self) -> int:
        return (self.current_page - 1) * self.page_size

    @property
    def is_empty(self) -> bool:
        return self.current_page <= 0 or self.page_size <= 0


class FeedStrategy(Protocol):
    async def fetch_page(
        self, client: GraphClient, team_id: str, channel_id: str, cursor: PageCursor
    ) -> List[ChatMessage]: ...


class FullFeedPagination:
    """Fetch everything, keep user messages, slice the requested page."""

    async def fetch_page(
        self, client: GraphClient, team_id: str, channel_id: str, cursor: PageCursor
    ) -> List[ChatMessage]:
        feed = await client.get_message_delta(team_id, channel_id)
        messages = [message for message in feed if message.is_user_message]
        logger.debug(
            f"Feed for {channel_id}: {len(feed)} items, {len(messages)} user messages"
        )

        if cursor.is_empty:
            return []
        return messages[cursor.skip : cursor.skip + cursor.page_size]


class ReplySummary(BaseModel):
    id: str
    content: str
    content_type: str
    reactions: Dict[str, int] = {}
    attachments: List[Dict[str, Optional[str]]] = []


class MessageSummary(ReplySummary):
    replies: List[ReplySummary] = []


def summarize_reactions(message: ChatMessage) -> Dict[str, int]:
    """
    Count a message's reactions per type, keyed by display name.

    Example: [👍, 👍, ❤️] → {"like": 2, "heart": 1}
    """
    counts = Counter(to_display_reaction(r.reaction_type) for r in message.reactions)
    return dict(counts)


def summarize_attachments(message: ChatMessage) -> List[Dict[str, Optional[str]]]:
    return [
        {"name": attachment.name, "content_url": attachment.content_url}
        for attachment in message.attachments
    ]


def _summarize_one(message: ChatMessage) -> dict:
    return {
        "id": message.id,
        "content": message.body.content,
        "content_type": message.body.content_type,
        "reactions": summarize_reactions(message),
        "attachments": summarize_attachments(message),
    }


def summarize_message(message: ChatMessage) -> MessageSummary:
    """View-ready summary of a message and its (single-level) replies."""
    return MessageSummary(
        **_summarize_one(message),
        replies=[
            ReplySummary(**_summarize_one(reply))
            for reply in message.replies
            if reply.is_user_message
        ],
    )


class MessageFeedReader:
    """Paged, type-filtered reads of a channel's messages."""

    def __init__(self, strategy: Optional[FeedStrategy] = None):
        self.strategy = strategy or FullFeedPagination()

    async def get_messages(
        self,
        client: GraphClient,
        team_id: str,
        channel_id: str,
        page: int,
        page_size: int,
    ) -> List[ChatMessage]:
        """
        Return page `page` (1-based) of the channel's user messages.

        A non-positive page or page size yields an empty list.

        Raises:
            PreconditionFailed: Missing team id or channel id
        """
        require(team_id, "No any team be existed.")
        require(channel_id, "Getting messages require the field 'channelId'")

        cursor = PageCursor(current_page=page, page_size=page_size)
        messages = await self.strategy.fetch_page(client, team_id, channel_id, cursor)
        logger.info(
            f"Channel {channel_id} page {page} (size {page_size}): {len(messages)} messages"
        )
        return messages

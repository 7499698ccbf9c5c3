"""
Messaging Service

Posts top-level channel messages and threaded replies (with optional file
attachments) and sets reactions on messages or replies.
"""

import logging
from typing import Optional, Sequence, Union

from app.errors import PreconditionFailed
from app.integrations.graph.client import GraphClient
from app.integrations.graph.models import ChatMessage, MessageBody, ReactionType
from app.services.attachments import AttachmentReader, PathLike, embed_hosted_contents
from app.utils.helpers import require

logger = logging.getLogger(__name__)


def reaction_target_path(
    team_id: str, channel_id: str, message_id: str, reply_id: Optional[str] = None
) -> str:
    """Resource path of a message, or of one of its replies."""
    path = f"/teams/{team_id}/channels/{channel_id}/messages/{message_id}"
    if reply_id:
        path += f"/replies/{reply_id}"
    return path


class MessagingService:
    """Channel message, reply and reaction writes."""

    def __init__(self, attachment_reader: Optional[AttachmentReader] = None):
        self.attachment_reader = attachment_reader or AttachmentReader()

    def _build_body(
        self,
        html_content: str,
        attachments: Optional[Sequence[PathLike]],
        require_attachments: bool,
    ):
        encoded = self.attachment_reader.read_all(attachments or [], required=require_attachments)
        if encoded.skipped:
            logger.warning(f"{len(encoded.skipped)} attachments skipped; sending text anyway")
        body = MessageBody(
            content=embed_hosted_contents(html_content, encoded.contents),
            content_type="html",
        )
        return body, encoded.contents

    async def post_message(
        self,
        client: GraphClient,
        team_id: str,
        channel_id: str,
        html_content: str,
        attachments: Optional[Sequence[PathLike]] = None,
        require_attachments: bool = False,
    ) -> ChatMessage:
        """
        Post a new top-level message to a channel.

        Raises:
            PreconditionFailed: Missing team id, channel id or content
            AttachmentError: An attachment was unreadable and attachments
                             are required
        """
        require(team_id, "No any team be existed.")
        require(channel_id, "Posting message require the field 'channelId'")
        require(html_content, "Posting message require the field 'content'")

        body, hosted = self._build_body(html_content, attachments, require_attachments)
        message = await client.create_message(team_id, channel_id, body, hosted)
        logger.info(f"Posted message {message.id} to channel {channel_id}")
        return message

    async def post_reply(
        self,
        client: GraphClient,
        team_id: str,
        channel_id: str,
        message_id: str,
        html_content: str,
        attachments: Optional[Sequence[PathLike]] = None,
        require_attachments: bool = False,
    ) -> ChatMessage:
        """Reply in the thread of `message_id`."""
        require(team_id, "No any team be existed.")
        require(channel_id, "Replying message require the field 'channelId'")
        require(message_id, "Replying message require the field 'messageId'")
        require(html_content, "Replying message require the field 'content'")

        body, hosted = self._build_body(html_content, attachments, require_attachments)
        reply = await client.create_reply(team_id, channel_id, message_id, body, hosted)
        logger.info(f"Posted reply {reply.id} to message {message_id}")
        return reply

    async def set_reaction(
        self,
        reaction: Union[ReactionType, str],
        client: GraphClient,
        team_id: str,
        channel_id: str,
        message_id: str,
        reply_id: Optional[str] = None,
    ) -> None:
        """
        React to a message, or to one of its replies when `reply_id` is given.

        The parent message id is always required; a reply cannot be addressed
        without it.
        """
        require(team_id, "No any team be existed.")
        require(channel_id, "Reacting require the field 'channelId'")
        require(message_id, "Reacting require the field 'messageId'")
        require(reaction, "Reacting require the field 'reactionType'")

        try:
            reaction_type = ReactionType(reaction)
        except ValueError:
            raise PreconditionFailed(f"Unknown reaction type: {reaction}")
        path = reaction_target_path(team_id, channel_id, message_id, reply_id)
        await client.set_reaction(path, reaction_type.emoji)
        logger.info(f"Set reaction '{reaction_type.value}' on {path}")

"""
Microsoft Graph Data Models

Typed records for every Graph payload the orchestration layer reads.
Raw JSON is validated into these models inside GraphClient and nowhere else.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class GraphRecord(BaseModel):
    """Base record: accepts Graph camelCase keys, ignores unknown fields."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ReactionType(str, Enum):
    """Reactions in the application's display vocabulary."""

    LIKE = "like"
    HEART = "heart"
    LAUGH = "laugh"
    SURPRISED = "surprised"
    SAD = "sad"
    ANGRY = "angry"

    @property
    def emoji(self) -> str:
        """Platform serialized form, as sent to setReaction."""
        return DISPLAY_TO_PLATFORM[self.value]


# Graph reports reactions by their unicode glyph
PLATFORM_TO_DISPLAY = {
    "👍": ReactionType.LIKE.value,
    "❤️": ReactionType.HEART.value,
    "😆": ReactionType.LAUGH.value,
    "😮": ReactionType.SURPRISED.value,
    "😢": ReactionType.SAD.value,
    "😡": ReactionType.ANGRY.value,
}
DISPLAY_TO_PLATFORM = {v: k for k, v in PLATFORM_TO_DISPLAY.items()}


def to_display_reaction(platform_key: str) -> str:
    """Map a platform reaction key to its display name; unknown keys pass through."""
    return PLATFORM_TO_DISPLAY.get(platform_key, platform_key)


class Team(GraphRecord):
    id: str
    display_name: Optional[str] = Field(None, alias="displayName")
    description: Optional[str] = None
    visibility: Optional[str] = None


class Channel(GraphRecord):
    id: str
    display_name: str = Field(..., alias="displayName")
    membership_type: Optional[str] = Field(None, alias="membershipType")


class DirectoryUser(GraphRecord):
    id: str
    display_name: Optional[str] = Field(None, alias="displayName")
    mail: Optional[str] = None
    user_principal_name: Optional[str] = Field(None, alias="userPrincipalName")


class TeamMember(GraphRecord):
    user_id: str = Field(..., alias="userId")


class MessageBody(GraphRecord):
    content: str = ""
    content_type: str = Field("html", alias="contentType")


class ChatAttachment(GraphRecord):
    id: Optional[str] = None
    name: Optional[str] = None
    content_url: Optional[str] = Field(None, alias="contentUrl")
    content_type: Optional[str] = Field(None, alias="contentType")


class ChatReaction(GraphRecord):
    reaction_type: str = Field(..., alias="reactionType")
    user_id: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_identity_set(cls, data: Any) -> Any:
        # Graph nests the actor as {"user": {"user": {"id": ...}}}
        if isinstance(data, dict) and "user_id" not in data:
            identity = (data.get("user") or {}).get("user") or {}
            data = {**data, "user_id": identity.get("id")}
        return data


class ChatMessage(GraphRecord):
    """A channel message or reply. Replies never carry nested replies."""

    id: str
    message_type: Optional[str] = Field(None, alias="messageType")
    body: MessageBody = Field(default_factory=MessageBody)
    attachments: list[ChatAttachment] = []
    reactions: list[ChatReaction] = []
    replies: list["ChatMessage"] = []
    reply_to_id: Optional[str] = Field(None, alias="replyToId")
    created_at: Optional[str] = Field(None, alias="createdDateTime")

    @model_validator(mode="after")
    def _single_level_threading(self) -> "ChatMessage":
        for reply in self.replies:
            reply.replies = []
        return self

    @property
    def is_user_message(self) -> bool:
        """Only plain messages are application-visible; system events are not."""
        return self.message_type == "message"


class HostedContent(BaseModel):
    """A base64-encoded attachment ready to embed in a message payload."""

    temporary_id: str
    name: str
    content_type: str
    content_bytes: str

    def to_payload(self) -> dict:
        return {
            "@microsoft.graph.temporaryId": self.temporary_id,
            "contentBytes": self.content_bytes,
            "contentType": self.content_type,
        }

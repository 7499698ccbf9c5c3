"""
API Request/Response Models

Pydantic models for the workspace action surface.
"""

from pydantic import BaseModel, Field
from typing import Any, List, Optional, Union

from app.integrations.graph.models import ReactionType


class ActionResponse(BaseModel):
    """
    Outcome of one user action.
    `message` is the single terminal log line for the action.
    """

    success: bool = Field(..., description="Whether the action completed")
    message: str = Field(..., description="Success summary or failure description")
    data: Optional[Any] = Field(None, description="Action payload, if any")


class LogEntryResponse(BaseModel):
    n: int = Field(..., description="Sequence number, newest is highest")
    text: str


class AuthorizeRequest(BaseModel):
    access_token: str = Field(..., description="Bearer token from the sign-in flow")


class AddChannelRequest(BaseModel):
    channel_name: str = Field(..., description="Display name of the private channel")
    member_emails: Union[str, List[str], None] = Field(
        None, description="Comma-separated string or list of member emails"
    )


class AddMembersRequest(BaseModel):
    channel_id: str
    member_emails: Union[str, List[str]] = Field(
        ..., description="Comma-separated string or list of member emails"
    )


class PostMessageRequest(BaseModel):
    channel_id: str
    content: str = Field(..., description="Message content (html)")
    attachments: List[str] = Field(default_factory=list, description="Local file paths")
    require_attachments: bool = False


class ReplyMessageRequest(PostMessageRequest):
    message_id: str


class SetReactionRequest(BaseModel):
    channel_id: str
    message_id: str
    reaction: ReactionType
    reply_id: Optional[str] = None

# Shared data models
from app.models.api_responses import (
    ActionResponse,
    AddChannelRequest,
    AddMembersRequest,
    AuthorizeRequest,
    LogEntryResponse,
    PostMessageRequest,
    ReplyMessageRequest,
    SetReactionRequest,
)

__all__ = [
    "ActionResponse",
    "AddChannelRequest",
    "AddMembersRequest",
    "AuthorizeRequest",
    "LogEntryResponse",
    "PostMessageRequest",
    "ReplyMessageRequest",
    "SetReactionRequest",
]

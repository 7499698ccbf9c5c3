# Microsoft Graph integration module
from app.integrations.graph.client import GraphClient, odata_quote
from app.integrations.graph.models import (
    Channel,
    ChatMessage,
    DirectoryUser,
    ReactionType,
    Team,
)

__all__ = [
    "GraphClient",
    "odata_quote",
    "Channel",
    "ChatMessage",
    "DirectoryUser",
    "ReactionType",
    "Team",
]

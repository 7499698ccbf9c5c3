"""
Shared fixtures: an in-memory stand-in for GraphClient that records calls.
"""

from typing import Dict, List, Optional

import pytest

from app.errors import RemoteNotFound
from app.integrations.graph.models import (
    Channel,
    ChatMessage,
    DirectoryUser,
    MessageBody,
    Team,
)


class FakeGraphClient:
    """Implements the GraphClient surface over plain dicts; records every call."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.teams: Dict[str, Team] = {}
        self.joined_teams: List[Team] = []
        self.create_team_returns_id = True
        self.channels: Dict[str, List[Channel]] = {}
        self.team_members: Dict[str, List[str]] = {}
        self.channel_members: Dict[str, List[str]] = {}
        self.directory: Dict[str, DirectoryUser] = {}
        self.feed: List[dict] = []
        self.fail_on: Dict[str, Exception] = {}
        self._next_id = 0

    def _record(self, name: str, *args):
        self.calls.append((name, *args))
        if name in self.fail_on:
            raise self.fail_on[name]

    def _new_id(self, prefix: str) -> str:
        self._next_id += 1
        return f"{prefix}-{self._next_id}"

    def calls_to(self, name: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == name]

    def add_user(self, email: str, user_id: str) -> None:
        self.directory[email] = DirectoryUser(id=user_id, mail=email)

    # Teams
    async def create_team(self, display_name, description, template="standard") -> Optional[Team]:
        self._record("create_team", display_name, description, template)
        team = Team(id=self._new_id("team"), displayName=display_name, visibility="private")
        self.teams[team.id] = team
        self.joined_teams.append(team)
        return team if self.create_team_returns_id else None

    async def get_team(self, team_id: str) -> Team:
        self._record("get_team", team_id)
        if team_id not in self.teams:
            raise RemoteNotFound(f"Resource not found: /teams/{team_id}", status_code=404)
        return self.teams[team_id]

    async def list_joined_teams(self) -> List[Team]:
        self._record("list_joined_teams")
        return list(self.joined_teams)

    async def list_team_member_ids(self, team_id: str) -> List[str]:
        self._record("list_team_member_ids", team_id)
        return list(self.team_members.get(team_id, []))

    async def add_team_members(self, team_id: str, user_ids: List[str]) -> None:
        self._record("add_team_members", team_id, list(user_ids))
        self.team_members.setdefault(team_id, []).extend(user_ids)

    # Channels
    async def list_channels(self, team_id: str, filter_query: Optional[str] = None) -> List[Channel]:
        self._record("list_channels", team_id, filter_query)
        return list(self.channels.get(team_id, []))

    async def create_channel(self, team_id, display_name, membership_type="private") -> Channel:
        self._record("create_channel", team_id, display_name)
        channel = Channel(
            id=self._new_id("channel"), displayName=display_name, membershipType=membership_type
        )
        self.channels.setdefault(team_id, []).append(channel)
        return channel

    async def list_channel_member_ids(self, team_id: str, channel_id: str) -> List[str]:
        self._record("list_channel_member_ids", team_id, channel_id)
        return list(self.channel_members.get(channel_id, []))

    async def add_channel_member(self, team_id: str, channel_id: str, user_id: str) -> None:
        self._record("add_channel_member", team_id, channel_id, user_id)
        self.channel_members.setdefault(channel_id, []).append(user_id)

    # Users
    async def find_users_by_mail(self, emails: List[str]) -> List[DirectoryUser]:
        self._record("find_users_by_mail", list(emails))
        return [self.directory[email] for email in emails if email in self.directory]

    # Messages
    async def create_message(self, team_id, channel_id, body: MessageBody, hosted_contents=None):
        self._record("create_message", team_id, channel_id, body, list(hosted_contents or []))
        return ChatMessage(id=self._new_id("msg"), body=body)

    async def create_reply(self, team_id, channel_id, message_id, body: MessageBody, hosted_contents=None):
        self._record("create_reply", team_id, channel_id, message_id, body, list(hosted_contents or []))
        return ChatMessage(id=self._new_id("reply"), body=body, replyToId=message_id)

    async def get_message_delta(self, team_id: str, channel_id: str) -> List[ChatMessage]:
        self._record("get_message_delta", team_id, channel_id)
        return [ChatMessage.model_validate(item) for item in self.feed]

    async def set_reaction(self, target_path: str, reaction: str) -> None:
        self._record("set_reaction", target_path, reaction)


def make_feed_item(index: int, message_type: str = "message", **extra) -> dict:
    """Raw Graph chatMessage JSON as returned by the delta endpoint."""
    item = {
        "id": f"m{index}",
        "messageType": message_type,
        "body": {"content": f"<p>message {index}</p>", "contentType": "html"},
        "attachments": [],
        "reactions": [],
        "replies": [],
    }
    item.update(extra)
    return item


@pytest.fixture
def fake_client() -> FakeGraphClient:
    return FakeGraphClient()


@pytest.fixture
def feed_item():
    return make_feed_item

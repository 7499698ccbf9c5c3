"""
Workspace Orchestrator

The single entry surface for UI actions. Each action:
1. Logs that it started
2. Sequences the provisioner, reconciler, messaging service or feed reader
3. Ends with exactly one terminal log line, a success summary or the failure

No failure escapes an action; every action can be retried independently.
The Graph client and team context live on the instance, never at module level.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Union

from app.config import Settings, get_settings
from app.errors import NotInitialized, RemoteNotFound, TeamspaceError
from app.integrations.graph.client import GraphClient
from app.integrations.graph.models import ReactionType
from app.models.api_responses import ActionResponse
from app.services.feed_reader import MessageFeedReader, summarize_message
from app.services.membership import MembershipReconciler
from app.services.messaging import MessagingService
from app.services.provisioner import WorkspaceProvisioner
from app.services.team_store import TeamStore
from app.utils.helpers import split_emails

logger = logging.getLogger(__name__)

EmailInput = Union[str, Sequence[str], None]


@dataclass
class LogEntry:
    n: int
    text: str


class ActionLog:
    """Bounded action history, read back newest first."""

    def __init__(self, max_entries: int = 200):
        self._entries: deque[LogEntry] = deque(maxlen=max_entries)
        self._next = 0

    def add(self, text: str) -> LogEntry:
        entry = LogEntry(n=self._next, text=text)
        self._next += 1
        self._entries.append(entry)
        return entry

    def entries(self) -> List[LogEntry]:
        return list(reversed(self._entries))


def _parse_emails(emails: EmailInput) -> List[str]:
    if emails is None:
        return []
    if isinstance(emails, str):
        return split_emails(emails)
    return [email.strip() for email in emails if email and email.strip()]


class WorkspaceOrchestrator:
    """Sequences workspace operations per user action."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        team_store: Optional[TeamStore] = None,
        provisioner: Optional[WorkspaceProvisioner] = None,
        reconciler: Optional[MembershipReconciler] = None,
        messaging: Optional[MessagingService] = None,
        feed_reader: Optional[MessageFeedReader] = None,
        client_factory: Callable[[str], GraphClient] = GraphClient,
        action_log: Optional[ActionLog] = None,
    ):
        self.settings = settings or get_settings()
        self.team_store = team_store or TeamStore(self.settings.team_store_path)
        self.reconciler = reconciler or MembershipReconciler()
        self.provisioner = provisioner or WorkspaceProvisioner(self.reconciler)
        self.messaging = messaging or MessagingService()
        self.feed_reader = feed_reader or MessageFeedReader()
        self.client_factory = client_factory
        self.action_log = action_log or ActionLog()

        self.client: Optional[GraphClient] = None
        self.team_name = self.settings.system_team_name
        self.team_id: Optional[str] = self.team_store.get_team_id()

    # ========== Plumbing ==========

    def log(self, text: str) -> None:
        self.action_log.add(text)

    async def _run(
        self,
        start_text: str,
        action: Callable[[], Awaitable[Any]],
        success_text: Callable[[Any], str],
    ) -> ActionResponse:
        self.log(start_text)
        try:
            data = await action()
        except TeamspaceError as e:
            logger.error(f"{start_text} failed: {e}")
            self.log(str(e))
            return ActionResponse(success=False, message=str(e))
        except Exception as e:
            logger.exception(f"{start_text} failed unexpectedly")
            message = f"Unexpected error: {e}"
            self.log(message)
            return ActionResponse(success=False, message=message)

        message = success_text(data)
        self.log(message)
        return ActionResponse(success=True, message=message, data=data)

    def _require_client(self) -> GraphClient:
        if self.client is None:
            raise NotInitialized("Graph client was not initialized")
        return self.client

    def _require_team(self) -> str:
        if not self.team_id:
            raise NotInitialized("No any team be existed.")
        return self.team_id

    def initialize_client(self, access_token: str) -> GraphClient:
        """Build the Graph client for a token; replaces any previous client."""
        self.client = None
        self.client = self.client_factory(access_token)
        return self.client

    # ========== Actions ==========

    async def authorize(self, access_token: str) -> ActionResponse:
        """Initialize the client, then ensure the team and list its channels."""

        async def action():
            self.initialize_client(access_token)
            team = await self._ensure_team()
            channels = await self.provisioner.list_channels(self.client, team.id)
            return {
                "team": team.model_dump(),
                "channels": [channel.model_dump() for channel in channels],
            }

        return await self._run(
            "Authorization is processing ...",
            action,
            lambda data: (
                f"Graph client ready for use! Team ID: {data['team']['id']}, "
                f"({len(data['channels'])}) channels"
            ),
        )

    async def _ensure_team(self):
        client = self._require_client()
        cached_id = self.team_id
        try:
            team = await self.provisioner.ensure_team(client, cached_id, self.team_name)
        except RemoteNotFound as e:
            if cached_id:
                self.team_id = None
                self.team_store.clear_team_id()
                raise RemoteNotFound(
                    f"Team '{cached_id}' no longer exists. Fetch the team again to re-create it."
                ) from e
            raise

        self.team_id = team.id
        self.team_store.set_team_id(team.id)
        return team

    async def fetch_team(self) -> ActionResponse:
        async def action():
            return (await self._ensure_team()).model_dump()

        return await self._run(
            "Fetching team is processing ...",
            action,
            lambda team: f"Team ID: {team['id']}",
        )

    async def list_channels(self) -> ActionResponse:
        async def action():
            channels = await self.provisioner.list_channels(
                self._require_client(), self._require_team()
            )
            return [channel.model_dump() for channel in channels]

        return await self._run(
            "Getting list channel is processing ...",
            action,
            lambda channels: f"Getting list channel is success, ({len(channels)}) count",
        )

    async def add_channel(self, channel_name: str, member_emails: EmailInput = None) -> ActionResponse:
        async def action():
            channel = await self.provisioner.ensure_channel(
                self._require_client(),
                self._require_team(),
                channel_name,
                _parse_emails(member_emails),
            )
            return channel.model_dump()

        return await self._run(
            "Adding channel is processing ...",
            action,
            lambda channel: f"'{channel['display_name']}' was added successfully ({channel['id']})",
        )

    async def add_members(self, channel_id: str, member_emails: EmailInput) -> ActionResponse:
        emails = _parse_emails(member_emails)

        async def action():
            result = await self.reconciler.add_members(
                self._require_client(), self._require_team(), channel_id, emails
            )
            return {
                "resolved": len(result.resolved_user_ids),
                "added_to_team": len(result.added_to_team),
                "added_to_channel": len(result.added_to_channel),
            }

        return await self._run(
            "Adding members is processing ...",
            action,
            lambda data: (
                f"({data['added_to_channel']}) members was added into channel '{channel_id}' "
                f"({len(emails)} requested, {data['added_to_team']} new to the team)"
            ),
        )

    async def post_message(
        self,
        channel_id: str,
        content: str,
        attachments: Optional[Sequence[str]] = None,
        require_attachments: bool = False,
    ) -> ActionResponse:
        async def action():
            message = await self.messaging.post_message(
                self._require_client(),
                self._require_team(),
                channel_id,
                content,
                attachments,
                require_attachments,
            )
            return {"id": message.id}

        return await self._run(
            f"Posting message into channel '{channel_id}' is processing ...",
            action,
            lambda data: f"Posting new message into channel '{channel_id}' successfully",
        )

    async def get_messages(
        self, channel_id: str, page: int = 1, page_size: Optional[int] = None
    ) -> ActionResponse:
        page_size = page_size if page_size is not None else self.settings.default_page_size

        async def action():
            messages = await self.feed_reader.get_messages(
                self._require_client(), self._require_team(), channel_id, page, page_size
            )
            return [summarize_message(message).model_dump() for message in messages]

        return await self._run(
            f"Getting messages for channel '{channel_id}' is processing ...",
            action,
            lambda messages: (
                f"Getting messages for channel '{channel_id}' current: {page}, "
                f"size: {page_size}, count: {len(messages)}"
            ),
        )

    async def reply_message(
        self,
        channel_id: str,
        message_id: str,
        content: str,
        attachments: Optional[Sequence[str]] = None,
        require_attachments: bool = False,
    ) -> ActionResponse:
        async def action():
            reply = await self.messaging.post_reply(
                self._require_client(),
                self._require_team(),
                channel_id,
                message_id,
                content,
                attachments,
                require_attachments,
            )
            return {"id": reply.id}

        return await self._run(
            f"Replying message into channel '{channel_id}' is processing ...",
            action,
            lambda data: f"Replying new message into channel '{channel_id}' successfully",
        )

    async def set_reaction(
        self,
        channel_id: str,
        message_id: str,
        reaction: Union[ReactionType, str],
        reply_id: Optional[str] = None,
    ) -> ActionResponse:
        async def action():
            await self.messaging.set_reaction(
                reaction,
                self._require_client(),
                self._require_team(),
                channel_id,
                message_id,
                reply_id,
            )

        target = f"reply '{reply_id}'" if reply_id else f"message '{message_id}'"
        return await self._run(
            f"Reacting to {target} is processing ...",
            action,
            lambda _: f"Reaction '{ReactionType(reaction).value}' set on {target}",
        )

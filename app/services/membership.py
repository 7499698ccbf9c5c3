"""
Membership Reconciler

Brings team and channel membership in line with a desired list of emails:
1. Resolve emails to user ids
2. Read current team members
3. Batch-add only the users missing from the team
4. Add every resolved user to the channel

Channel membership is tracked separately by the platform. By default step 4
is issued for every resolved user without reading channel members first;
with `dedupe_channel_members` the channel is diffed the same way as the team.

A failure partway through step 4 leaves the channel partially populated.
Nothing is rolled back.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from app.config import get_settings
from app.integrations.graph.client import GraphClient
from app.services.user_directory import UserDirectoryResolver
from app.utils.helpers import require

logger = logging.getLogger(__name__)


@dataclass
class MembershipResult:
    """What a reconciliation actually did."""

    resolved_user_ids: List[str] = field(default_factory=list)
    added_to_team: List[str] = field(default_factory=list)
    added_to_channel: List[str] = field(default_factory=list)


class MembershipReconciler:
    """Set-difference membership additions at team and channel scope."""

    def __init__(
        self,
        resolver: Optional[UserDirectoryResolver] = None,
        dedupe_channel_members: Optional[bool] = None,
    ):
        self.resolver = resolver or UserDirectoryResolver()
        if dedupe_channel_members is None:
            dedupe_channel_members = get_settings().dedupe_channel_members
        self.dedupe_channel_members = dedupe_channel_members

    async def add_members(
        self,
        client: GraphClient,
        team_id: str,
        channel_id: str,
        emails: List[str],
    ) -> MembershipResult:
        """
        Add the given users to a team's channel, adding them to the team first
        where needed.

        Raises:
            PreconditionFailed: Missing team id, channel id or emails
            RemoteCallFailed: Any remote step failed
        """
        require(team_id, "No any team be existed.")
        require(channel_id, "Adding members require the field 'channelId'")
        require(emails, "Email member not found.")

        users = await self.resolver.resolve_users(client, emails)
        # Repeated emails, or one user matched in two batches, collapse to one id
        user_ids = list(dict.fromkeys(user.id for user in users))
        result = MembershipResult(resolved_user_ids=user_ids)

        team_member_ids = set(await client.list_team_member_ids(team_id))
        need_add = [user_id for user_id in user_ids if user_id not in team_member_ids]

        if need_add:
            logger.info(f"Adding {len(need_add)} users to team {team_id}")
            await client.add_team_members(team_id, need_add)
            result.added_to_team = need_add
        else:
            logger.info(f"All {len(user_ids)} users already in team {team_id}")

        channel_targets = user_ids
        if self.dedupe_channel_members:
            channel_member_ids = set(
                await client.list_channel_member_ids(team_id, channel_id)
            )
            channel_targets = [
                user_id for user_id in user_ids if user_id not in channel_member_ids
            ]

        for user_id in channel_targets:
            await client.add_channel_member(team_id, channel_id, user_id)
            result.added_to_channel.append(user_id)

        logger.info(
            f"Channel {channel_id}: added {len(result.added_to_channel)} members"
        )
        return result

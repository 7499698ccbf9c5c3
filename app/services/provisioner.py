"""
Workspace Provisioner

Idempotent get-or-create for the system team and its private channels.

Idempotence is by display name: the platform does not enforce unique names,
so two callers provisioning for the first time at the same moment can still
end up with two same-named teams.
"""

import logging
from typing import List, Optional

from app.config import get_settings
from app.errors import ProvisioningFailed, RemoteCallFailed, RemoteNotFound
from app.integrations.graph.client import GraphClient, odata_quote
from app.integrations.graph.models import Channel, Team
from app.services.membership import MembershipReconciler
from app.utils.helpers import require

logger = logging.getLogger(__name__)


class WorkspaceProvisioner:
    """Creates or reuses the team and its channels."""

    def __init__(self, reconciler: Optional[MembershipReconciler] = None):
        settings = get_settings()
        self.reconciler = reconciler or MembershipReconciler()
        self.team_template = settings.team_template
        self.default_channel_name = settings.default_channel_name

    async def ensure_team(
        self,
        client: GraphClient,
        existing_team_id: Optional[str] = None,
        desired_name: Optional[str] = None,
    ) -> Team:
        """
        Return the team with `existing_team_id`, or create one named `desired_name`.

        When creation is turned into a pending provisioning job (no id comes
        back), the caller's joined teams are scanned for the desired name and
        the match is adopted.

        Raises:
            PreconditionFailed: Neither an id nor a name was given
            RemoteNotFound: The existing id no longer resolves; re-provision
                            without an id
            ProvisioningFailed: Creation yielded no adoptable team, or a remote
                                call failed while provisioning
        """
        if not existing_team_id:
            require(desired_name, "Creating new team require the field 'teamName'")
            return await self._create_team(client, desired_name)

        try:
            team = await client.get_team(existing_team_id)
        except RemoteNotFound:
            logger.warning(f"Team {existing_team_id} no longer exists")
            raise
        except RemoteCallFailed as e:
            raise ProvisioningFailed(f"Fetching team {existing_team_id} failed: {e}") from e

        logger.info(f"Reusing team {team.id}")
        return team

    async def _create_team(self, client: GraphClient, name: str) -> Team:
        try:
            team = await client.create_team(name, name, template=self.team_template)
            if team is not None:
                logger.info(f"Created team '{name}' ({team.id})")
                return team

            logger.info(f"Team '{name}' provisioning is pending; scanning joined teams")
            joined = await client.list_joined_teams()
        except RemoteCallFailed as e:
            raise ProvisioningFailed(f"Creating team '{name}' failed: {e}") from e

        for candidate in joined:
            if candidate.display_name == name:
                logger.info(f"Adopted joined team '{name}' ({candidate.id})")
                return candidate

        raise ProvisioningFailed(
            f"Team '{name}' was requested but is not available yet. Please try again."
        )

    async def list_channels(
        self,
        client: GraphClient,
        team_id: str,
        channel_name: Optional[str] = None,
    ) -> List[Channel]:
        """
        List the team's private channels, excluding the reserved default channel.

        Args:
            channel_name: Restrict to channels with exactly this display name
        """
        require(team_id, "No any team be existed.")

        query = (
            f"displayName ne {odata_quote(self.default_channel_name)}"
            " and membershipType eq 'private'"
        )
        if channel_name:
            query += f" and displayName eq {odata_quote(channel_name)}"

        channels = await client.list_channels(team_id, filter_query=query)
        # Guard against servers that ignore part of the filter
        channels = [
            channel
            for channel in channels
            if channel.display_name != self.default_channel_name
            and (not channel_name or channel.display_name == channel_name)
        ]
        logger.info(f"Team {team_id}: {len(channels)} matching channels")
        return channels

    async def ensure_channel(
        self,
        client: GraphClient,
        team_id: str,
        desired_name: str,
        member_emails: Optional[List[str]] = None,
    ) -> Channel:
        """
        Return the private channel named `desired_name`, creating it if absent.

        Members, when given, are reconciled onto the found or new channel.

        Raises:
            PreconditionFailed: Missing team id, or blank channel name
        """
        require(team_id, "No any team be existed.")
        require(desired_name, "Adding new channel require the field 'channelName'")
        desired_name = desired_name.strip()

        existing = await self.list_channels(client, team_id, desired_name)
        if existing:
            channel = existing[0]
            logger.info(f"Channel '{desired_name}' already exists ({channel.id})")
        else:
            channel = await client.create_channel(team_id, desired_name)
            logger.info(f"Created channel '{desired_name}' ({channel.id})")

        if member_emails:
            await self.reconciler.add_members(client, team_id, channel.id, member_emails)

        return channel

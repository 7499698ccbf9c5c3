"""
Microsoft Graph API Client

Responsibilities:
- Bearer-token authorized requests against Graph v1.0
- One translation point per endpoint: raw JSON -> typed records (models.py)
- Mapping HTTP failures onto the RemoteCallFailed family
- Running blocking HTTP in a worker thread so callers can await it

No retry or backoff happens here; that belongs to the transport.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests

from app.config import get_settings
from app.errors import (
    PreconditionFailed,
    RemoteCallFailed,
    RemoteNotFound,
    RemotePermissionDenied,
    RemoteRateLimited,
)
from app.integrations.graph.models import (
    Channel,
    ChatMessage,
    DirectoryUser,
    HostedContent,
    MessageBody,
    Team,
    TeamMember,
)

logger = logging.getLogger(__name__)

MEMBER_ODATA_TYPE = "#microsoft.graph.aadUserConversationMember"


def odata_quote(value: str) -> str:
    """Quote a string literal for an OData $filter expression."""
    return "'" + value.replace("'", "''") + "'"


class GraphClient:
    """
    Microsoft Graph client bound to one access token.

    The instance is read-only after construction and safe to share between
    concurrently awaited calls.

    Usage:
        client = GraphClient(access_token)
        teams = await client.list_joined_teams()
    """

    def __init__(
        self,
        access_token: str,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        if not access_token or not access_token.strip():
            raise PreconditionFailed("Access token was invalid")

        settings = get_settings()
        self.base_url = (base_url or settings.graph_base_url).rstrip("/")
        self.timeout = timeout or settings.graph_timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {access_token.strip()}",
                "Content-Type": "application/json",
            }
        )

    def _member_binding(self, user_id: str) -> Dict[str, Any]:
        return {
            "@odata.type": MEMBER_ODATA_TYPE,
            "roles": [],
            "user@odata.bind": f"{self.base_url}/users('{user_id}')",
        }

    # ========== Transport ==========

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, str]] = None,
        data: Optional[dict] = None,
    ) -> dict:
        return await asyncio.to_thread(self._send, method, endpoint, params, data)

    def _send(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, str]] = None,
        data: Optional[dict] = None,
    ) -> dict:
        """
        Perform one HTTP call.

        Args:
            method: HTTP method
            endpoint: Path relative to the Graph root, or an absolute
                      @odata.nextLink URL
            params: OData query options ($filter, $select, $expand, ...)
            data: JSON body

        Returns:
            Decoded JSON body, or {} for empty responses (202/204)
        """
        url = endpoint if endpoint.startswith("http") else f"{self.base_url}{endpoint}"
        logger.debug(f"Graph {method} {endpoint} params={params}")

        try:
            response = self.session.request(
                method, url, params=params, json=data, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"Graph transport error on {method} {endpoint}: {e}")
            raise RemoteCallFailed(f"Graph request failed: {e}", endpoint=endpoint) from e

        if response.status_code >= 400:
            raise self._error_from_response(response, endpoint)

        if response.status_code in (202, 204) or not response.content:
            return {}
        return response.json()

    @staticmethod
    def _error_from_response(response: requests.Response, endpoint: str) -> RemoteCallFailed:
        status = response.status_code
        try:
            message = response.json().get("error", {}).get("message") or response.text
        except ValueError:
            message = response.text

        logger.error(f"Graph API error ({status}) on {endpoint}: {message}")

        if status == 404:
            return RemoteNotFound(
                f"Resource not found: {endpoint}", status_code=status, endpoint=endpoint
            )
        if status in (401, 403):
            return RemotePermissionDenied(
                f"Permission denied ({status}): {message}",
                status_code=status,
                endpoint=endpoint,
            )
        if status == 429:
            retry_after = response.headers.get("Retry-After")
            return RemoteRateLimited(
                f"Rate limited. Retry after {retry_after or '?'} seconds.",
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
                status_code=status,
                endpoint=endpoint,
            )
        return RemoteCallFailed(
            f"Graph API error ({status}): {message}", status_code=status, endpoint=endpoint
        )

    async def _get_all(
        self, endpoint: str, params: Optional[Dict[str, str]] = None
    ) -> List[dict]:
        """GET a collection, following @odata.nextLink until the last page."""
        result = await self._request("GET", endpoint, params=params)
        items = list(result.get("value", []))
        while result.get("@odata.nextLink"):
            result = await self._request("GET", result["@odata.nextLink"])
            items.extend(result.get("value", []))
        return items

    # ========== Team Operations ==========

    async def create_team(
        self, display_name: str, description: str, template: str = "standard"
    ) -> Optional[Team]:
        """
        Create a private team from a template.

        Returns:
            The created Team, or None when the platform accepted the request
            as an asynchronous provisioning job without returning an id
        """
        payload = {
            "displayName": display_name,
            "description": description,
            "visibility": "private",
            "template@odata.bind": f"{self.base_url}/teamsTemplates('{template}')",
        }
        result = await self._request("POST", "/teams", data=payload)
        if not result.get("id"):
            return None
        return Team.model_validate(result)

    async def get_team(self, team_id: str) -> Team:
        return Team.model_validate(await self._request("GET", f"/teams/{team_id}"))

    async def list_joined_teams(self) -> List[Team]:
        items = await self._get_all("/me/joinedTeams")
        return [Team.model_validate(item) for item in items]

    async def list_team_member_ids(self, team_id: str) -> List[str]:
        items = await self._get_all(
            f"/teams/{team_id}/members",
            params={"$select": "microsoft.graph.aadUserConversationMember/userId"},
        )
        return [
            TeamMember.model_validate(item).user_id
            for item in items
            if item.get("userId")
        ]

    async def add_team_members(self, team_id: str, user_ids: List[str]) -> None:
        """Batch-add users to a team (POST /teams/{id}/members/add)."""
        payload = {"values": [self._member_binding(user_id) for user_id in user_ids]}
        await self._request("POST", f"/teams/{team_id}/members/add", data=payload)

    # ========== Channel Operations ==========

    async def list_channels(
        self, team_id: str, filter_query: Optional[str] = None
    ) -> List[Channel]:
        params = {"$filter": filter_query} if filter_query else None
        items = await self._get_all(f"/teams/{team_id}/channels", params=params)
        return [Channel.model_validate(item) for item in items]

    async def create_channel(
        self, team_id: str, display_name: str, membership_type: str = "private"
    ) -> Channel:
        payload = {
            "@odata.type": "#Microsoft.Graph.channel",
            "membershipType": membership_type,
            "displayName": display_name,
        }
        result = await self._request("POST", f"/teams/{team_id}/channels", data=payload)
        return Channel.model_validate(result)

    async def list_channel_member_ids(self, team_id: str, channel_id: str) -> List[str]:
        items = await self._get_all(f"/teams/{team_id}/channels/{channel_id}/members")
        return [
            TeamMember.model_validate(item).user_id
            for item in items
            if item.get("userId")
        ]

    async def add_channel_member(self, team_id: str, channel_id: str, user_id: str) -> None:
        await self._request(
            "POST",
            f"/teams/{team_id}/channels/{channel_id}/members",
            data=self._member_binding(user_id),
        )

    # ========== User Operations ==========

    async def find_users_by_mail(self, emails: List[str]) -> List[DirectoryUser]:
        """Look up users whose mail matches any of the given addresses."""
        query = f"mail in ({','.join(odata_quote(email) for email in emails)})"
        items = await self._get_all("/users", params={"$filter": query})
        return [DirectoryUser.model_validate(item) for item in items]

    # ========== Message Operations ==========

    @staticmethod
    def _message_payload(body: MessageBody, hosted_contents: List[HostedContent]) -> dict:
        payload: Dict[str, Any] = {
            "body": {"content": body.content, "contentType": body.content_type}
        }
        if hosted_contents:
            payload["hostedContents"] = [item.to_payload() for item in hosted_contents]
        return payload

    async def create_message(
        self,
        team_id: str,
        channel_id: str,
        body: MessageBody,
        hosted_contents: Optional[List[HostedContent]] = None,
    ) -> ChatMessage:
        result = await self._request(
            "POST",
            f"/teams/{team_id}/channels/{channel_id}/messages",
            data=self._message_payload(body, hosted_contents or []),
        )
        return ChatMessage.model_validate(result)

    async def create_reply(
        self,
        team_id: str,
        channel_id: str,
        message_id: str,
        body: MessageBody,
        hosted_contents: Optional[List[HostedContent]] = None,
    ) -> ChatMessage:
        result = await self._request(
            "POST",
            f"/teams/{team_id}/channels/{channel_id}/messages/{message_id}/replies",
            data=self._message_payload(body, hosted_contents or []),
        )
        return ChatMessage.model_validate(result)

    async def get_message_delta(self, team_id: str, channel_id: str) -> List[ChatMessage]:
        """
        Read the channel's message change feed with replies expanded.

        Server-driven continuation pages (@odata.nextLink) are followed so the
        caller always sees the full snapshot.
        """
        raw_items = await self._get_all(
            f"/teams/{team_id}/channels/{channel_id}/messages/delta",
            params={"$expand": "replies"},
        )
        return [ChatMessage.model_validate(item) for item in raw_items]

    async def set_reaction(self, target_path: str, reaction: str) -> None:
        """
        Set a reaction on a message or reply.

        Args:
            target_path: Message or reply resource path
            reaction: Platform serialized reaction (emoji glyph)
        """
        await self._request(
            "POST", f"{target_path}/setReaction", data={"reactionType": reaction}
        )

"""
Tests for the orchestration facade: sequencing, persistence of the team id,
and one terminal log line per action.
"""

import asyncio

import pytest

from app.config import Settings
from app.errors import RemoteCallFailed
from app.integrations.graph.models import Channel
from app.services.orchestrator import ActionLog, WorkspaceOrchestrator
from app.services.team_store import TeamStore


@pytest.fixture
def store(tmp_path):
    return TeamStore(tmp_path / "state.json")


@pytest.fixture
def orchestrator(fake_client, store):
    return WorkspaceOrchestrator(
        settings=Settings(),
        team_store=store,
        client_factory=lambda token: fake_client,
    )


def _authorized(orchestrator) -> WorkspaceOrchestrator:
    result = asyncio.run(orchestrator.authorize("token"))
    assert result.success, result.message
    return orchestrator


class TestAuthorize:
    """Test suite for the authorize action."""

    def test_authorize_creates_team_and_persists_id(self, orchestrator, fake_client, store):
        result = asyncio.run(orchestrator.authorize("token"))

        assert result.success
        team_id = result.data["team"]["id"]
        assert store.get_team_id() == team_id
        assert orchestrator.team_id == team_id
        assert result.message.startswith("Graph client ready for use!")
        assert [call[0] for call in fake_client.calls] == ["create_team", "list_channels"]

    def test_blank_token_reports_failure(self, fake_client, store):
        orchestrator = WorkspaceOrchestrator(settings=Settings(), team_store=store)

        result = asyncio.run(orchestrator.authorize("   "))

        assert not result.success
        assert result.message == "Access token was invalid"
        assert orchestrator.client is None

    def test_second_session_reuses_persisted_team(self, fake_client, store):
        first = WorkspaceOrchestrator(
            settings=Settings(), team_store=store, client_factory=lambda t: fake_client
        )
        _authorized(first)

        second = WorkspaceOrchestrator(
            settings=Settings(), team_store=store, client_factory=lambda t: fake_client
        )
        _authorized(second)

        assert second.team_id == first.team_id
        assert len(fake_client.calls_to("create_team")) == 1
        assert len(fake_client.calls_to("get_team")) == 1


class TestActions:
    """Test suite for the remaining facade actions."""

    def test_actions_require_client(self, orchestrator, fake_client):
        """Test NotInitialized reporting without any remote call."""
        result = asyncio.run(orchestrator.post_message("c", "hello"))

        assert not result.success
        assert result.message == "Graph client was not initialized"
        assert fake_client.calls == []

    def test_stale_team_id_is_cleared(self, orchestrator, fake_client, store):
        store.set_team_id("deleted-team")
        orchestrator.team_id = "deleted-team"
        orchestrator.initialize_client("token")

        result = asyncio.run(orchestrator.fetch_team())

        assert not result.success
        assert "no longer exists" in result.message
        assert store.get_team_id() is None

        retry = asyncio.run(orchestrator.fetch_team())
        assert retry.success
        assert store.get_team_id() == retry.data["id"]

    def test_add_channel_splits_member_field(self, orchestrator, fake_client):
        _authorized(orchestrator)
        fake_client.add_user("a@corp.com", "A")
        fake_client.add_user("b@corp.com", "B")

        result = asyncio.run(orchestrator.add_channel("Ops", " a@corp.com, ,b@corp.com"))

        assert result.success
        assert result.message.startswith("'Ops' was added successfully")
        assert fake_client.calls_to("find_users_by_mail") == [
            ("find_users_by_mail", ["a@corp.com", "b@corp.com"])
        ]

    def test_add_members_summary(self, orchestrator, fake_client):
        _authorized(orchestrator)
        fake_client.add_user("a@corp.com", "A")

        result = asyncio.run(orchestrator.add_members("c1", ["a@corp.com"]))

        assert result.success
        assert result.data == {"resolved": 1, "added_to_team": 1, "added_to_channel": 1}

    def test_get_messages_returns_summaries(self, orchestrator, fake_client, feed_item):
        _authorized(orchestrator)
        fake_client.feed = [feed_item(0), feed_item(1, message_type="systemEventMessage")]

        result = asyncio.run(orchestrator.get_messages("c1", page=1, page_size=5))

        assert result.success
        assert [message["id"] for message in result.data] == ["m0"]
        assert result.message.endswith("current: 1, size: 5, count: 1")

    def test_reply_and_reaction(self, orchestrator, fake_client):
        _authorized(orchestrator)

        reply = asyncio.run(orchestrator.reply_message("c1", "m1", "<p>ok</p>"))
        reaction = asyncio.run(orchestrator.set_reaction("c1", "m1", "like", reply_id="r1"))

        assert reply.success and reaction.success
        assert reaction.message == "Reaction 'like' set on reply 'r1'"

    def test_remote_failure_becomes_one_log_line(self, orchestrator, fake_client):
        _authorized(orchestrator)
        fake_client.fail_on["list_channels"] = RemoteCallFailed("Graph API error (500): oops")
        log_size = len(orchestrator.action_log.entries())

        result = asyncio.run(orchestrator.list_channels())

        assert not result.success
        entries = orchestrator.action_log.entries()
        assert len(entries) == log_size + 2
        assert entries[0].text == "Graph API error (500): oops"
        assert entries[1].text == "Getting list channel is processing ..."

    def test_unexpected_error_is_contained(self, orchestrator, fake_client):
        _authorized(orchestrator)
        fake_client.fail_on["list_channels"] = KeyError("value")

        result = asyncio.run(orchestrator.list_channels())

        assert not result.success
        assert result.message.startswith("Unexpected error:")

    def test_list_channels_counts(self, orchestrator, fake_client):
        _authorized(orchestrator)
        fake_client.channels[orchestrator.team_id] = [Channel(id="c1", displayName="Ops")]

        result = asyncio.run(orchestrator.list_channels())

        assert result.message == "Getting list channel is success, (1) count"


def test_action_log_newest_first_and_bounded():
    log = ActionLog(max_entries=2)
    for text in ("one", "two", "three"):
        log.add(text)

    assert [(entry.n, entry.text) for entry in log.entries()] == [(2, "three"), (1, "two")]

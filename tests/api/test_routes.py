"""
Tests for the FastAPI action surface.
"""

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import app
from app.services.orchestrator import WorkspaceOrchestrator
from app.services.team_store import TeamStore


@pytest.fixture
def api(fake_client, tmp_path):
    app.state.orchestrator = WorkspaceOrchestrator(
        settings=Settings(graph_access_token=""),
        team_store=TeamStore(tmp_path / "state.json"),
        client_factory=lambda token: fake_client,
    )
    return TestClient(app)


class TestRoutes:
    """Test suite for workspace and message routes."""

    def test_health(self, api):
        response = api.get("/health")
        assert response.status_code == 200
        assert response.json()["client_initialized"] is False

    def test_action_before_authorize_is_reported_not_raised(self, api):
        response = api.get("/api/channels")

        assert response.status_code == 200
        assert response.json() == {
            "success": False,
            "message": "Graph client was not initialized",
            "data": None,
        }

    def test_authorize_then_add_channel(self, api, fake_client):
        fake_client.add_user("a@corp.com", "A")

        authorized = api.post("/api/authorize", json={"access_token": "token"}).json()
        added = api.post(
            "/api/channels", json={"channel_name": "Ops", "member_emails": "a@corp.com"}
        ).json()

        assert authorized["success"] is True
        assert added["success"] is True
        assert added["data"]["display_name"] == "Ops"

    def test_post_and_read_messages(self, api, fake_client, feed_item):
        api.post("/api/authorize", json={"access_token": "token"})
        fake_client.feed = [feed_item(i) for i in range(4)]

        posted = api.post("/api/messages", json={"channel_id": "c1", "content": "<p>hi</p>"}).json()
        page = api.get("/api/messages", params={"channel_id": "c1", "page": 2, "page_size": 3}).json()

        assert posted["success"] is True
        assert [message["id"] for message in page["data"]] == ["m3"]

    def test_reaction_vocabulary_is_validated(self, api):
        response = api.post(
            "/api/messages/reactions",
            json={"channel_id": "c1", "message_id": "m1", "reaction": "party"},
        )
        assert response.status_code == 422

    def test_logs_newest_first(self, api):
        api.get("/api/channels")

        logs = api.get("/api/logs").json()

        assert logs[0]["text"] == "Graph client was not initialized"
        assert logs[1]["text"] == "Getting list channel is processing ..."

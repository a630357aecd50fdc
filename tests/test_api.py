"""Tests for the FastAPI surface."""
import pytest
from fastapi.testclient import TestClient

from chaoschain_actions.api import app
from chaoschain_actions.orchestrator import get_dispatcher


@pytest.fixture
def client(dispatcher):
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_list_actions(client):
    response = client.get("/actions")
    assert response.status_code == 200
    names = [action["name"] for action in response.json()["actions"]]
    assert names == [
        "registerChaosAgent",
        "getNetworkStatus",
        "submitVote",
        "proposeBlock",
        "getAgentStatus",
        "proposeAlliance",
    ]


def test_invoke_success(client, generation):
    generation.candidate = {
        "name": "Pizza",
        "personality": ["dramatic", "witty"],
        "style": "sarcastic",
        "stake_amount": 1000,
        "role": "validator",
    }

    response = client.post("/actions/registerChaosAgent", json={"text": "Register Pizza"})

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["kind"] == "register_agent"
    assert body["payload"] == {"token": "tok-123", "agent_id": "agent-42"}
    assert body["stage"] == "completed"


def test_invoke_rejection_is_not_an_http_error(client, generation, network):
    generation.candidate = {"block_height": -1, "approved": True, "reason": ""}

    response = client.post("/actions/submitVote", json={"text": "vote", "user": "bob"})

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is False
    assert body["error_code"] == "malformed_command"
    assert body["rejected_at"] == "extracted"
    assert network.calls == []


def test_invoke_with_state(client, generation):
    response = client.post(
        "/actions/getNetworkStatus",
        json={
            "text": "status please",
            "state": {"agent_name": "Pizza", "recent_messages": [{"user": "bob", "text": "hi"}]},
        },
    )
    assert response.status_code == 200
    assert response.json()["ok"] is True


def test_unknown_action_is_404(client):
    response = client.post("/actions/mintTokens", json={"text": "gimme"})
    assert response.status_code == 404
    assert "mintTokens" in response.json()["detail"]


def test_shutdown_closes_default_dispatcher():
    get_dispatcher.cache_clear()
    dispatcher = get_dispatcher()
    http = dispatcher._client._client

    with TestClient(app) as client:
        assert client.get("/health").status_code == 200

    assert http.is_closed
    assert get_dispatcher.cache_info().currsize == 0


def test_shutdown_without_default_dispatcher():
    get_dispatcher.cache_clear()
    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
    assert get_dispatcher.cache_info().currsize == 0

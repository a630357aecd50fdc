"""Tests for the ChaosChain HTTP client, against a mock transport."""
from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from chaoschain_actions.errors import ProviderError
from chaoschain_actions.integrations.chaoschain import ChaosChainAuth, ChaosChainClient
from chaoschain_actions.models import CommandKind
from chaoschain_actions.schemas import validate


def _client(handler) -> ChaosChainClient:
    transport = httpx.MockTransport(handler)
    http = httpx.AsyncClient(transport=transport, base_url="http://chain.test")
    return ChaosChainClient("http://chain.test", auth=ChaosChainAuth(), client=http)


def test_register_stores_token_and_agent_id():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/api/agents/register":
            return httpx.Response(200, json={"token": "tok-1", "agent_id": 42})
        return httpx.Response(200, json={"agent_id": "42", "drama_score": 9})

    command = validate(
        CommandKind.REGISTER_AGENT,
        {"name": "Pizza", "personality": ["witty"], "style": "sarcastic", "stake_amount": 10, "role": "producer"},
    )

    async def run():
        client = _client(handler)
        registered = await client.register_agent(command)
        status = await client.get_agent_status()
        return client, registered, status

    client, registered, status = asyncio.run(run())

    assert registered == {"token": "tok-1", "agent_id": 42}
    assert client.auth.token == "tok-1"
    assert client.auth.agent_id == "42"
    assert status["drama_score"] == 9

    register_request, status_request = seen
    assert json.loads(register_request.content) == {
        "name": "Pizza",
        "personality": ["witty"],
        "style": "sarcastic",
        "stake_amount": 10.0,
        "role": "producer",
    }
    assert status_request.url.path == "/api/agents/42/status"
    assert status_request.headers["Authorization"] == "Bearer tok-1"
    assert status_request.headers["X-Agent-ID"] == "42"


def test_agent_status_requires_registration():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(ProviderError, match="No agent is registered"):
        asyncio.run(_client(handler).get_agent_status())


@pytest.mark.parametrize(
    "response, message",
    [
        (httpx.Response(400, json={"detail": "insufficient stake"}), "insufficient stake"),
        (httpx.Response(403, json={"error": "not a validator"}), "not a validator"),
        (httpx.Response(409, json={"message": "block already proposed"}), "block already proposed"),
        (httpx.Response(500, text="boom"), "boom"),
    ],
)
def test_error_detail_is_surfaced_verbatim(response, message):
    command = validate(CommandKind.PROPOSE_BLOCK, {"transactions": ["tx1"]})

    async def run():
        await _client(lambda request: response).propose_block(command)

    with pytest.raises(ProviderError) as excinfo:
        asyncio.run(run())
    assert str(excinfo.value) == message
    assert excinfo.value.status_code == response.status_code


def test_transport_error_becomes_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ProviderError, match="connection refused"):
        asyncio.run(_client(handler).get_network_status())


@pytest.mark.parametrize(
    "method, kind, candidate, path",
    [
        ("submit_vote", CommandKind.SUBMIT_VOTE, {"block_height": 3, "approved": True, "reason": "ok"}, "/api/validators/vote"),
        ("propose_block", CommandKind.PROPOSE_BLOCK, {"transactions": ["tx1"]}, "/api/blocks/propose"),
        (
            "propose_alliance",
            CommandKind.PROPOSE_ALLIANCE,
            {"name": "A", "ally_ids": ["a", "b"], "drama_commitment": 3},
            "/api/alliances/propose",
        ),
    ],
)
def test_commands_are_posted(method, kind, candidate, path):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"receipt": "r-1"})

    command = validate(kind, candidate)
    result = asyncio.run(getattr(_client(handler), method)(command))

    assert result == {"receipt": "r-1"}
    assert seen[0].method == "POST"
    assert seen[0].url.path == path
    assert "kind" not in json.loads(seen[0].content)


def test_network_status_is_a_get():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert request.url.path == "/api/network/status"
        return httpx.Response(200, json={"height": 7})

    assert asyncio.run(_client(handler).get_network_status()) == {"height": 7}


def test_aclose_closes_owned_client_only():
    owned = ChaosChainClient("http://chain.test", auth=ChaosChainAuth())
    asyncio.run(owned.aclose())
    assert owned._client.is_closed

    http = httpx.AsyncClient(base_url="http://chain.test")
    borrowed = ChaosChainClient("http://chain.test", auth=ChaosChainAuth(), client=http)
    asyncio.run(borrowed.aclose())
    assert not http.is_closed

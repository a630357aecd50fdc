"""
ChaosChain client.

Async wrapper around the ChaosChain HTTP API. Registration stores the
returned token and agent ID on the client so later calls are authenticated.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import httpx

from ...config import settings
from ...errors import ProviderError
from ...schemas import (
    ProposeAllianceCommand,
    ProposeBlockCommand,
    RegisterAgentCommand,
    SubmitVoteCommand,
)

logger = logging.getLogger(__name__)


def _extract_error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return text if text else response.reason_phrase
    if isinstance(body, dict):
        for key in ("detail", "error", "message"):
            detail = body.get(key)
            if detail:
                return str(detail)
        return str(body)
    return str(body)


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    detail = _extract_error_detail(response)
    logger.warning(
        "%s %s -> %s: %s",
        response.request.method,
        response.request.url.path,
        response.status_code,
        detail,
    )
    raise ProviderError(detail, status_code=response.status_code)


@dataclass
class ChaosChainAuth:
    token: Optional[str] = None
    agent_id: Optional[str] = None

    def headers(self) -> Dict[str, str]:
        h: Dict[str, str] = {}
        if self.token:
            h["Authorization"] = f"Bearer {self.token}"
        if self.agent_id:
            h["X-Agent-ID"] = self.agent_id
        return h


class NetworkClient(Protocol):
    """The six ChaosChain operations the actions rely on."""

    async def register_agent(self, command: RegisterAgentCommand) -> Dict[str, Any]: ...

    async def get_network_status(self) -> Dict[str, Any]: ...

    async def submit_vote(self, command: SubmitVoteCommand) -> Dict[str, Any]: ...

    async def propose_block(self, command: ProposeBlockCommand) -> Dict[str, Any]: ...

    async def get_agent_status(self) -> Dict[str, Any]: ...

    async def propose_alliance(self, command: ProposeAllianceCommand) -> Dict[str, Any]: ...


class ChaosChainClient:
    """
    Client for the ChaosChain API.

    Usage:
        async with ChaosChainClient("http://localhost:3000") as client:
            await client.register_agent(command)
            status = await client.get_agent_status()
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        auth: Optional[ChaosChainAuth] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout_s: Optional[float] = None,
    ):
        self.base_url = (base_url or settings.chaoschain_api_url).rstrip("/")
        self.auth = auth or ChaosChainAuth(
            token=settings.chaoschain_token,
            agent_id=settings.chaoschain_agent_id,
        )
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout_s or settings.request_timeout_s,
        )
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "ChaosChainClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ----------------------------------------------------------------------- #
    # Internal: Requests
    # ----------------------------------------------------------------------- #

    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        try:
            r = await self._client.request(method, path, headers=self.auth.headers(), json=json)
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise ProviderError(str(exc) or exc.__class__.__name__) from exc
        _raise_for_status(r)
        if not r.content:
            return {}
        try:
            return r.json()
        except ValueError as exc:
            raise ProviderError(f"Invalid JSON in response from {path}") from exc

    # ----------------------------------------------------------------------- #
    # Agents
    # ----------------------------------------------------------------------- #

    async def register_agent(self, command: RegisterAgentCommand) -> Dict[str, Any]:
        data = await self._request("POST", "/api/agents/register", json=command.to_payload())
        if isinstance(data, dict):
            if data.get("token"):
                self.auth.token = data["token"]
            if data.get("agent_id"):
                self.auth.agent_id = str(data["agent_id"])
        return data

    async def get_agent_status(self) -> Dict[str, Any]:
        if not self.auth.agent_id:
            raise ProviderError("No agent is registered. Register an agent first.")
        return await self._request("GET", f"/api/agents/{self.auth.agent_id}/status")

    # ----------------------------------------------------------------------- #
    # Network
    # ----------------------------------------------------------------------- #

    async def get_network_status(self) -> Dict[str, Any]:
        return await self._request("GET", "/api/network/status")

    async def submit_vote(self, command: SubmitVoteCommand) -> Dict[str, Any]:
        return await self._request("POST", "/api/validators/vote", json=command.to_payload())

    async def propose_block(self, command: ProposeBlockCommand) -> Dict[str, Any]:
        return await self._request("POST", "/api/blocks/propose", json=command.to_payload())

    async def propose_alliance(self, command: ProposeAllianceCommand) -> Dict[str, Any]:
        return await self._request("POST", "/api/alliances/propose", json=command.to_payload())

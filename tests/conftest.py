"""Shared fixtures: fake generation service, fake network client, dispatcher."""
from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Tuple

import pytest

from chaoschain_actions.actions import build_registry
from chaoschain_actions.errors import ProviderError
from chaoschain_actions.llm import StructuredExtractor
from chaoschain_actions.orchestrator import ActionDispatcher


class FakeGenerationService:
    """Returns a fixed candidate (or raises) and records every call."""

    def __init__(self, candidate: Any = None, error: Optional[Exception] = None, delay: float = 0.0):
        self.candidate = candidate
        self.error = error
        self.delay = delay
        self.calls: List[Tuple[str, type]] = []

    async def generate(self, context, schema):
        self.calls.append((context, schema))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.candidate


class FakeNetworkClient:
    """Records calls per operation. ``responses`` may hold payloads or exceptions."""

    def __init__(self, responses: Optional[Dict[str, Any]] = None, delay: float = 0.0):
        self.responses = responses or {}
        self.delay = delay
        self.calls: List[Tuple[str, Any]] = []
        self.finished: List[str] = []
        self.closed = False

    async def _call(self, operation: str, command: Any = None) -> Any:
        self.calls.append((operation, command))
        if self.delay:
            await asyncio.sleep(self.delay)
        self.finished.append(operation)
        response = self.responses.get(operation, {"ok": True, "operation": operation})
        if isinstance(response, Exception):
            raise response
        return response

    async def register_agent(self, command):
        return await self._call("register_agent", command)

    async def get_network_status(self):
        return await self._call("get_network_status")

    async def submit_vote(self, command):
        return await self._call("submit_vote", command)

    async def propose_block(self, command):
        return await self._call("propose_block", command)

    async def get_agent_status(self):
        return await self._call("get_agent_status")

    async def propose_alliance(self, command):
        return await self._call("propose_alliance", command)

    async def aclose(self):
        self.closed = True


@pytest.fixture
def generation() -> FakeGenerationService:
    return FakeGenerationService()


@pytest.fixture
def network() -> FakeNetworkClient:
    return FakeNetworkClient(
        responses={
            "register_agent": {"token": "tok-123", "agent_id": "agent-42"},
            "get_network_status": {"height": 151, "validators": 4, "drama": "high"},
            "propose_block": ProviderError("insufficient stake", status_code=400),
        }
    )


@pytest.fixture
def dispatcher(generation: FakeGenerationService, network: FakeNetworkClient) -> ActionDispatcher:
    return ActionDispatcher(
        registry=build_registry(),
        extractor=StructuredExtractor(generation, timeout_s=5),
        client=network,
    )

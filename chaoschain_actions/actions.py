"""
Action definitions for ChaosChain.

Each action binds a command kind to its schema, its context template, the
network call that carries it out, and the wording used to report back.
The registry is built once and never changes afterwards.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, Iterator, Mapping, Optional, Tuple, Type

from .errors import UnknownActionError
from .integrations.chaoschain.client import NetworkClient
from .models import ActionInfo, CommandKind
from .schemas import ValidatedCommand, _Command, descriptor_for
from .templates import TEMPLATES


NetworkOperation = Callable[[NetworkClient, Optional[ValidatedCommand]], Awaitable[Any]]


@dataclass(frozen=True)
class ActionDefinition:
    name: str
    kind: CommandKind
    description: str
    template: str
    operation: NetworkOperation
    success_label: str
    failure_label: str
    requires_payload: bool = True
    similes: Tuple[str, ...] = ()
    examples: Tuple[str, ...] = ()

    @property
    def schema(self) -> Optional[Type[_Command]]:
        """Schema the extracted payload must satisfy, or None for status queries."""
        return descriptor_for(self.kind) if self.requires_payload else None

    def to_info(self) -> ActionInfo:
        return ActionInfo(
            name=self.name,
            kind=self.kind,
            description=self.description,
            similes=list(self.similes),
            examples=list(self.examples),
        )


# --------------------------------------------------------------------------- #
# Network Operations
# --------------------------------------------------------------------------- #

async def _register_agent(client: NetworkClient, command: Optional[ValidatedCommand]) -> Any:
    return await client.register_agent(command)


async def _get_network_status(client: NetworkClient, command: Optional[ValidatedCommand]) -> Any:
    return await client.get_network_status()


async def _submit_vote(client: NetworkClient, command: Optional[ValidatedCommand]) -> Any:
    return await client.submit_vote(command)


async def _propose_block(client: NetworkClient, command: Optional[ValidatedCommand]) -> Any:
    return await client.propose_block(command)


async def _get_agent_status(client: NetworkClient, command: Optional[ValidatedCommand]) -> Any:
    return await client.get_agent_status()


async def _propose_alliance(client: NetworkClient, command: Optional[ValidatedCommand]) -> Any:
    return await client.propose_alliance(command)


# --------------------------------------------------------------------------- #
# Definitions
# --------------------------------------------------------------------------- #

REGISTER_AGENT = ActionDefinition(
    name="registerChaosAgent",
    kind=CommandKind.REGISTER_AGENT,
    description=(
        "Register a new agent with ChaosChain. This call will store the "
        "authentication token for subsequent requests."
    ),
    template=TEMPLATES[CommandKind.REGISTER_AGENT],
    operation=_register_agent,
    success_label="Agent has been registered successfully",
    failure_label="Registration failed",
    similes=(
        "Create a new agent",
        "Register a new agent",
        "Enroll a new agent",
        "Sign up for a new agent",
    ),
    examples=(
        "Register agent with name 'Pizza', personality ['dramatic', 'witty'], "
        "style 'sarcastic', stake_amount 1000, role 'validator'",
    ),
)

GET_NETWORK_STATUS = ActionDefinition(
    name="getNetworkStatus",
    kind=CommandKind.GET_NETWORK_STATUS,
    description="Fetch current network status from ChaosChain.",
    template=TEMPLATES[CommandKind.GET_NETWORK_STATUS],
    operation=_get_network_status,
    success_label="Network status fetched",
    failure_label="Error fetching network status",
    requires_payload=False,
    similes=(
        "Check the status of the network",
        "Get the current network status",
    ),
    examples=("Get current network status",),
)

SUBMIT_VOTE = ActionDefinition(
    name="submitVote",
    kind=CommandKind.SUBMIT_VOTE,
    description=(
        "Submit a block validation vote (for validators). Vote data should "
        "include the block height, approval flag, and reason."
    ),
    template=TEMPLATES[CommandKind.SUBMIT_VOTE],
    operation=_submit_vote,
    success_label="Vote submitted successfully",
    failure_label="Vote submission failed",
    similes=("Vote on a block", "Validate a block"),
    examples=("Submit vote with block_height 150, approved true, reason 'Block is valid'",),
)

PROPOSE_BLOCK = ActionDefinition(
    name="proposeBlock",
    kind=CommandKind.PROPOSE_BLOCK,
    description="Submit a block proposal (for producers).",
    template=TEMPLATES[CommandKind.PROPOSE_BLOCK],
    operation=_propose_block,
    success_label="Block proposal submitted successfully",
    failure_label="Block proposal failed",
    similes=("Propose a block", "Produce a block"),
    examples=("Propose a block with transactions ['tx1', 'tx2']",),
)

GET_AGENT_STATUS = ActionDefinition(
    name="getAgentStatus",
    kind=CommandKind.GET_AGENT_STATUS,
    description="Retrieve agent status including drama score and validations.",
    template=TEMPLATES[CommandKind.GET_AGENT_STATUS],
    operation=_get_agent_status,
    success_label="Agent status fetched",
    failure_label="Error fetching agent status",
    requires_payload=False,
    similes=("Get agent info", "Fetch my agent status", "Retrieve agent status"),
    examples=("What's my agent status?",),
)

PROPOSE_ALLIANCE = ActionDefinition(
    name="proposeAlliance",
    kind=CommandKind.PROPOSE_ALLIANCE,
    description="Propose an alliance between agents in the ChaosChain network.",
    template=TEMPLATES[CommandKind.PROPOSE_ALLIANCE],
    operation=_propose_alliance,
    success_label="Alliance proposal submitted successfully",
    failure_label="Alliance proposal failed",
    similes=("Propose alliance", "Form an alliance", "Alliance proposal"),
    examples=(
        "Propose an alliance with agents ['agent_a', 'agent_b'] named "
        "'Chaos Alliance' with drama commitment 8",
    ),
)

ALL_ACTIONS: Tuple[ActionDefinition, ...] = (
    REGISTER_AGENT,
    GET_NETWORK_STATUS,
    SUBMIT_VOTE,
    PROPOSE_BLOCK,
    GET_AGENT_STATUS,
    PROPOSE_ALLIANCE,
)


# --------------------------------------------------------------------------- #
# Registry
# --------------------------------------------------------------------------- #

@dataclass(frozen=True)
class ActionRegistry:
    """
    Read-only lookup of action definitions.

    Actions can be looked up by name (``submitVote``), by tag
    (``SUBMIT_VOTE``) or by command kind (``submit_vote``).
    """

    _by_name: Mapping[str, ActionDefinition] = field(repr=False)
    _aliases: Mapping[str, str] = field(repr=False)

    def get(self, name: str) -> ActionDefinition:
        key = self._aliases.get(name, name)
        try:
            return self._by_name[key]
        except KeyError:
            raise UnknownActionError(name) from None

    def for_kind(self, kind: CommandKind) -> ActionDefinition:
        return self.get(CommandKind(kind).value)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._aliases.get(name, name) in self._by_name

    def __iter__(self) -> Iterator[ActionDefinition]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)


def build_registry(definitions: Tuple[ActionDefinition, ...] = ALL_ACTIONS) -> ActionRegistry:
    """Build the registry. Names, tags and kinds must all be unique."""
    by_name: Dict[str, ActionDefinition] = {}
    aliases: Dict[str, str] = {}

    for definition in definitions:
        if definition.name in by_name:
            raise ValueError(f"Duplicate action name: {definition.name}")
        by_name[definition.name] = definition

        for alias in (definition.kind.tag, definition.kind.value):
            if alias in aliases:
                raise ValueError(f"Duplicate action for kind: {definition.kind.value}")
            aliases[alias] = definition.name

    return ActionRegistry(MappingProxyType(by_name), MappingProxyType(aliases))

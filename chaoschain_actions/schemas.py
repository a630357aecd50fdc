"""
Command schemas for ChaosChain actions.

Each command kind has exactly one pydantic model. The model is bound to the
LLM as the tool schema and is also what untrusted tool-call arguments are
validated against before anything is sent to the network.
"""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple, Type, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    StringConstraints,
    ValidationError,
    field_validator,
)
from pydantic.json_schema import SkipJsonSchema
from typing_extensions import Annotated

from .errors import MALFORMED_COMMAND
from .models import CommandKind


NonEmptyStr = Annotated[StrictStr, StringConstraints(strip_whitespace=True, min_length=1)]
NonNegativeNumber = Annotated[float, Field(strict=True, ge=0, allow_inf_nan=False)]
DramaScore = Annotated[StrictInt, Field(ge=1, le=10)]


class _Command(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    def to_payload(self) -> Dict[str, Any]:
        """Request body for the network call (the ``kind`` tag is not sent)."""
        return self.model_dump(exclude={"kind"}, exclude_none=True)


# --------------------------------------------------------------------------- #
# Command Schemas
# --------------------------------------------------------------------------- #

class RegisterAgentCommand(_Command):
    """Register a new agent with ChaosChain."""
    kind: SkipJsonSchema[Literal[CommandKind.REGISTER_AGENT]] = CommandKind.REGISTER_AGENT
    name: NonEmptyStr = Field(..., description="Name of the agent")
    personality: List[NonEmptyStr] = Field(..., min_length=1, description="Personality traits, e.g. ['dramatic', 'witty']")
    style: NonEmptyStr = Field(..., description="Communication style, e.g. 'sarcastic'")
    stake_amount: NonNegativeNumber = Field(..., description="Amount of tokens to stake")
    role: Literal["validator", "producer"] = Field(..., description="Role in the network")


class GetNetworkStatusCommand(_Command):
    """Fetch the current network status. Takes no arguments."""
    kind: SkipJsonSchema[Literal[CommandKind.GET_NETWORK_STATUS]] = CommandKind.GET_NETWORK_STATUS


class SubmitVoteCommand(_Command):
    """Submit a block validation vote."""
    kind: SkipJsonSchema[Literal[CommandKind.SUBMIT_VOTE]] = CommandKind.SUBMIT_VOTE
    block_height: StrictInt = Field(..., ge=0, description="Height of the block being voted on")
    approved: StrictBool = Field(..., description="Whether the block is approved")
    reason: NonEmptyStr = Field(..., description="Reason for the vote")
    meme_url: Optional[StrictStr] = Field(None, description="Optional meme to attach to the vote")


class ProposeBlockCommand(_Command):
    """Propose a new block."""
    kind: SkipJsonSchema[Literal[CommandKind.PROPOSE_BLOCK]] = CommandKind.PROPOSE_BLOCK
    transactions: List[NonEmptyStr] = Field(..., min_length=1, description="Transactions to include in the block")
    drama_level: DramaScore = Field(5, description="How dramatic the block is, 1-10")
    justification: Optional[StrictStr] = Field(None, description="Why this block should be accepted")


class GetAgentStatusCommand(_Command):
    """Fetch the status of the registered agent. Takes no arguments."""
    kind: SkipJsonSchema[Literal[CommandKind.GET_AGENT_STATUS]] = CommandKind.GET_AGENT_STATUS


class ProposeAllianceCommand(_Command):
    """Propose an alliance between agents."""
    kind: SkipJsonSchema[Literal[CommandKind.PROPOSE_ALLIANCE]] = CommandKind.PROPOSE_ALLIANCE
    name: NonEmptyStr = Field(..., description="Name of the alliance")
    purpose: StrictStr = Field("", description="What the alliance is for")
    ally_ids: List[NonEmptyStr] = Field(..., min_length=2, description="IDs of the agents in the alliance")
    drama_commitment: DramaScore = Field(..., description="Drama commitment level, 1-10")

    @field_validator("ally_ids")
    @classmethod
    def _distinct_allies(cls, value: List[str]) -> List[str]:
        if len(set(value)) < 2:
            raise ValueError("at least two distinct agent identifiers are required")
        return value


ValidatedCommand = Union[
    RegisterAgentCommand,
    GetNetworkStatusCommand,
    SubmitVoteCommand,
    ProposeBlockCommand,
    GetAgentStatusCommand,
    ProposeAllianceCommand,
]


class InvalidCommand(BaseModel):
    """A candidate that failed validation, with the reason it was rejected."""

    model_config = ConfigDict(frozen=True)

    kind: CommandKind
    reason: str
    errors: Tuple[str, ...] = ()


# --------------------------------------------------------------------------- #
# Registry
# --------------------------------------------------------------------------- #

_DESCRIPTORS: Mapping[CommandKind, Type[_Command]] = {
    CommandKind.REGISTER_AGENT: RegisterAgentCommand,
    CommandKind.GET_NETWORK_STATUS: GetNetworkStatusCommand,
    CommandKind.SUBMIT_VOTE: SubmitVoteCommand,
    CommandKind.PROPOSE_BLOCK: ProposeBlockCommand,
    CommandKind.GET_AGENT_STATUS: GetAgentStatusCommand,
    CommandKind.PROPOSE_ALLIANCE: ProposeAllianceCommand,
}


def descriptor_for(kind: Union[CommandKind, str]) -> Type[_Command]:
    """Return the schema model for a command kind."""
    return _DESCRIPTORS[CommandKind(kind)]


def _format_errors(exc: ValidationError) -> Tuple[str, ...]:
    lines = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "<root>"
        lines.append(f"{loc}: {err['msg']}")
    return tuple(lines)


def validate(kind: Union[CommandKind, str], candidate: Any) -> Union[ValidatedCommand, InvalidCommand]:
    """
    Validate an untrusted candidate against the schema for ``kind``.

    Never raises for bad input: a failed check comes back as an
    ``InvalidCommand`` whose reason starts with "malformed command data".
    Any ``kind`` key in the candidate is ignored.
    """
    kind = CommandKind(kind)
    model = descriptor_for(kind)

    if not isinstance(candidate, Mapping):
        detail = f"expected an object, got {type(candidate).__name__}"
        return InvalidCommand(
            kind=kind,
            reason=f"{MALFORMED_COMMAND.message}: {detail}",
            errors=(detail,),
        )

    data = {key: value for key, value in candidate.items() if key != "kind"}
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        errors = _format_errors(exc)
        return InvalidCommand(
            kind=kind,
            reason=f"{MALFORMED_COMMAND.message}: " + "; ".join(errors),
            errors=errors,
        )


def is_valid(kind: Union[CommandKind, str], candidate: Any) -> bool:
    """True if ``candidate`` passes the schema for ``kind``."""
    return not isinstance(validate(kind, candidate), InvalidCommand)

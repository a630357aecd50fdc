from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --------------------------------------------------------------------------- #
# Command Kinds - one per ChaosChain operation
# --------------------------------------------------------------------------- #

class CommandKind(str, Enum):
    """The fixed set of commands the network accepts."""
    REGISTER_AGENT = "register_agent"
    GET_NETWORK_STATUS = "get_network_status"
    SUBMIT_VOTE = "submit_vote"
    PROPOSE_BLOCK = "propose_block"
    GET_AGENT_STATUS = "get_agent_status"
    PROPOSE_ALLIANCE = "propose_alliance"

    @property
    def tag(self) -> str:
        """Upper-case tag used in conversation examples, e.g. REGISTER_AGENT."""
        return self.value.upper()


# --------------------------------------------------------------------------- #
# Conversation
# --------------------------------------------------------------------------- #

class Message(BaseModel):
    """A single conversational turn."""

    model_config = ConfigDict(frozen=True)

    user: str = "user"
    text: str
    created_at: datetime = Field(default_factory=_utcnow)

    def to_prompt_string(self) -> str:
        """Format this message as a line for LLM prompts."""
        return f"{self.user}: {self.text}"


class ConversationState(BaseModel):
    """
    Read-only snapshot of the conversation handed to the context composer.

    The owner of the conversation keeps the authoritative copy. Composition
    only ever works on copies of this object.
    """

    model_config = ConfigDict(frozen=True)

    agent_name: str = "ChaosAgent"
    bio: str = ""
    recent_messages: Tuple[Message, ...] = ()

    # Extra template variables (e.g. chain facts the runtime wants in prompts)
    values: Dict[str, Any] = Field(default_factory=dict)


# --------------------------------------------------------------------------- #
# Invocation
# --------------------------------------------------------------------------- #

class InvocationStage(str, Enum):
    """Pipeline stages an invocation moves through."""
    IDLE = "idle"
    CONTEXT_READY = "context_ready"
    EXTRACTED = "extracted"
    VALIDATED = "validated"
    DISPATCHED = "dispatched"
    COMPLETED = "completed"
    REJECTED = "rejected"


class ActionResult(BaseModel):
    """Outcome of one action invocation, as seen by the caller."""

    ok: bool
    action: str
    kind: CommandKind
    text: str
    payload: Any = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    stage: InvocationStage = InvocationStage.IDLE

    # Last stage reached before a rejection
    rejected_at: Optional[InvocationStage] = None


class ActionInfo(BaseModel):
    """Public metadata about an action."""

    name: str
    kind: CommandKind
    description: str
    similes: List[str] = Field(default_factory=list)
    examples: List[str] = Field(default_factory=list)


class InvokeRequest(BaseModel):
    text: str
    user: str = "user"
    state: Optional[ConversationState] = None


class ListActionsResponse(BaseModel):
    actions: List[ActionInfo]

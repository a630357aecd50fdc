"""
Context composition for the extraction step.

Turns a conversation snapshot plus a context template into the text the LLM
sees. Nothing here writes to the conversation state: new state is always a
copy.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from langchain_core.prompts import PromptTemplate

from .config import settings
from .models import ConversationState, Message

logger = logging.getLogger(__name__)


def compose_state(
    message: Message,
    state: Optional[ConversationState] = None,
    limit: Optional[int] = None,
) -> ConversationState:
    """
    Return the state to compose against for ``message``.

    Without a state a fresh one is built from the message alone. With a state,
    a copy is returned whose recent messages end with ``message`` and hold at
    most ``limit`` entries.
    """
    limit = limit or settings.recent_message_limit

    if state is None:
        return ConversationState(recent_messages=(message,))

    recent = tuple(state.recent_messages)
    last = recent[-1] if recent else None
    # Same speaker and text counts as the same turn; timestamps differ per copy
    if last is None or (last.user, last.text) != (message.user, message.text):
        recent = recent + (message,)

    return state.model_copy(update={"recent_messages": recent[-limit:]})


def format_recent_messages(state: ConversationState) -> str:
    """Render the recent messages one per line for prompts."""
    if not state.recent_messages:
        return "(no messages)"
    return "\n".join(message.to_prompt_string() for message in state.recent_messages)


def _template_variables(state: ConversationState) -> Dict[str, Any]:
    variables: Dict[str, Any] = dict(state.values)
    variables.update(
        {
            "agent_name": state.agent_name,
            "bio": state.bio,
            "recent_messages": format_recent_messages(state),
        }
    )
    return variables


def compose(state: Optional[ConversationState], template: str) -> str:
    """Render ``template`` against ``state``. A missing state is treated as empty."""
    if state is None:
        state = ConversationState()

    prompt = PromptTemplate.from_template(template, template_format="mustache")
    context = prompt.format(**_template_variables(state))
    logger.debug("Composed context (%s chars)", len(context))
    return context

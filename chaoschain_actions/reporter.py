"""
Turns the outcome of an invocation into the text shown in the conversation.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

from .actions import ActionDefinition
from .models import CommandKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Completed:
    payload: Any


@dataclass(frozen=True)
class Rejected:
    reason: str
    code: Optional[str] = None


Outcome = Union[Completed, Rejected]


def _to_json(payload: Any) -> str:
    try:
        return json.dumps(payload, default=str)
    except (TypeError, ValueError):
        return repr(payload)


def _success_text(definition: ActionDefinition, payload: Any) -> str:
    label = definition.success_label

    if definition.kind == CommandKind.REGISTER_AGENT:
        details = payload if isinstance(payload, dict) else {}
        return (
            f"{label}. Here are the details:\n"
            f"Token: {details.get('token')}\n"
            f"Agent ID: {details.get('agent_id')}"
        )
    if definition.kind in (CommandKind.GET_NETWORK_STATUS, CommandKind.SUBMIT_VOTE):
        return f"{label}: {_to_json(payload)}"
    return label


def report(definition: ActionDefinition, outcome: Outcome) -> Tuple[str, Any]:
    """
    Return ``(text, payload)`` for an outcome.

    Completed outcomes keep the raw payload untouched; rejected ones have no
    payload and read ``"<failure label>: <reason>"``.
    """
    if isinstance(outcome, Completed):
        try:
            return _success_text(definition, outcome.payload), outcome.payload
        except Exception:
            logger.exception("Failed to format %s result", definition.name)
            return definition.success_label, outcome.payload

    return f"{definition.failure_label}: {outcome.reason}", None

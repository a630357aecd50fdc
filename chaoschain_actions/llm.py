"""
LLM integration for ChaosChain actions.

Uses tool-calling to pull a structured command out of the conversation. The
arguments of the tool call are returned untouched: checking them is the job
of ``schemas.validate``, not of the model.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional, Protocol, Type, Union

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from pydantic import BaseModel

from .config import settings
from .errors import ExtractionError
from .models import CommandKind
from .schemas import descriptor_for

logger = logging.getLogger(__name__)


# --------------------------------------------------------------------------- #
# System Prompt
# --------------------------------------------------------------------------- #

_SYSTEM_PROMPT = """\
You turn requests made in a conversation into ChaosChain commands.

Call the provided tool exactly once with the arguments found in the conversation.
Guidelines:
- Use only values that appear in the conversation; do not invent IDs or amounts
- Prefer the most recent message when earlier messages disagree
- Leave optional arguments out if they were not mentioned
"""


# --------------------------------------------------------------------------- #
# Generation Service
# --------------------------------------------------------------------------- #

class GenerationService(Protocol):
    """Anything that can turn (context, schema) into a candidate object."""

    async def generate(self, context: str, schema: Type[BaseModel]) -> Any:
        ...


class OpenAIGenerationService:
    """Generation service backed by an OpenAI chat model with tool-calling."""

    def __init__(
        self,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        api_key: Optional[str] = None,
    ):
        self.model = model or settings.llm_model
        self.temperature = settings.llm_temperature if temperature is None else temperature
        self._api_key = api_key or settings.openai_api_key

    def _chat_model(self) -> ChatOpenAI:
        return ChatOpenAI(model=self.model, temperature=self.temperature, api_key=self._api_key)

    async def generate(self, context: str, schema: Type[BaseModel]) -> Any:
        llm_with_tools = self._chat_model().bind_tools([schema], tool_choice=schema.__name__)

        messages = [
            SystemMessage(content=_SYSTEM_PROMPT),
            HumanMessage(content=context),
        ]

        response = await llm_with_tools.ainvoke(messages)
        return _candidate_from_response(response)


def _candidate_from_response(response: Any) -> Any:
    """Pull the raw tool arguments out of a chat response, without validating them."""
    tool_calls = getattr(response, "tool_calls", None) or []
    if tool_calls:
        return tool_calls[0].get("args")

    # Arguments that were not valid JSON end up here as raw strings
    invalid_calls = getattr(response, "invalid_tool_calls", None) or []
    if invalid_calls:
        logger.warning("Model returned an unparseable tool call: %s", invalid_calls[0].get("error"))
        return invalid_calls[0].get("args")

    content = getattr(response, "content", None)
    if isinstance(content, str) and content.strip():
        try:
            return json.loads(content)
        except json.JSONDecodeError:
            return content
    return None


# --------------------------------------------------------------------------- #
# Structured Extractor
# --------------------------------------------------------------------------- #

class StructuredExtractor:
    """
    Produces a candidate command for a kind from a composed context.

    Malformed output is returned as-is. Only a failing or slow generation
    service raises, as ``ExtractionError``.
    """

    def __init__(self, service: GenerationService, timeout_s: Optional[float] = None):
        self._service = service
        self._timeout_s = timeout_s or settings.extraction_timeout_s

    async def extract(self, context: str, kind: Union[CommandKind, str]) -> Any:
        kind = CommandKind(kind)
        schema = descriptor_for(kind)
        logger.debug("[%s] extracting with schema %s", kind.tag, schema.__name__)

        try:
            return await asyncio.wait_for(
                self._service.generate(context, schema),
                timeout=self._timeout_s,
            )
        except asyncio.TimeoutError as exc:
            raise ExtractionError(f"Generation timed out after {self._timeout_s:g}s") from exc
        except ExtractionError:
            raise
        except Exception as exc:
            raise ExtractionError(f"Generation failed: {exc}") from exc

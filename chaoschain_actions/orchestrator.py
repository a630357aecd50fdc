from __future__ import annotations

import asyncio
import logging
from functools import lru_cache
from typing import List, Optional

from .actions import ActionDefinition, ActionRegistry, build_registry
from .context import compose, compose_state
from .errors import (
    EXTRACTION_FAILED,
    MALFORMED_COMMAND,
    PROVIDER_FAILURE,
    ChaosChainError,
)
from .integrations.chaoschain.client import ChaosChainClient, NetworkClient
from .llm import OpenAIGenerationService, StructuredExtractor
from .models import ActionInfo, ActionResult, ConversationState, InvocationStage, Message
from .reporter import Completed, Outcome, Rejected, report
from .schemas import InvalidCommand, validate

logger = logging.getLogger(__name__)


def _log_detached_outcome(definition: ActionDefinition, task: "asyncio.Future") -> None:
    """Log how a network call ended. The result is always read, even when nobody awaits it."""
    if task.cancelled():
        logger.warning("[%s] network call was cancelled", definition.kind.tag)
        return
    exc = task.exception()
    if exc is not None:
        logger.warning("[%s] network call failed: %s", definition.kind.tag, exc)
    else:
        logger.debug("[%s] network call finished", definition.kind.tag)


class ActionDispatcher:
    """
    Runs actions end to end: compose context, extract, validate, call the
    network, report.

    Each invocation makes at most one network call, and none at all unless
    the extracted command passed validation. Status queries carry no payload
    and go straight from context composition to the network call.
    """

    def __init__(
        self,
        registry: ActionRegistry,
        extractor: StructuredExtractor,
        client: NetworkClient,
    ):
        self._registry = registry
        self._extractor = extractor
        self._client = client

    @property
    def registry(self) -> ActionRegistry:
        return self._registry

    async def aclose(self) -> None:
        """Release the network client's connections, if it holds any."""
        close = getattr(self._client, "aclose", None)
        if close is not None:
            await close()

    def list_actions(self) -> List[ActionInfo]:
        return [definition.to_info() for definition in self._registry]

    async def invoke(
        self,
        name: str,
        text: str,
        state: Optional[ConversationState] = None,
        user: str = "user",
    ) -> ActionResult:
        """
        Invoke an action by name with a free-form message.

        Raises:
            UnknownActionError: If no action has that name
        """
        definition = self._registry.get(name)
        return await self.run(definition, Message(user=user, text=text), state)

    async def run(
        self,
        definition: ActionDefinition,
        message: Message,
        state: Optional[ConversationState] = None,
    ) -> ActionResult:
        """
        Run one invocation of ``definition``. Never raises, except for
        cancellation of the calling task.
        """
        logger.info("Starting ChaosChain %s handler...", definition.kind.tag)
        stage = InvocationStage.IDLE

        try:
            context = compose(compose_state(message, state), definition.template)
            stage = InvocationStage.CONTEXT_READY

            command = None
            if definition.requires_payload:
                candidate = await self._extractor.extract(context, definition.kind)
                stage = InvocationStage.EXTRACTED

                checked = validate(definition.kind, candidate)
                if isinstance(checked, InvalidCommand):
                    logger.error("Invalid %s data format received: %s", definition.kind.value, checked.reason)
                    return self._finish(definition, Rejected(checked.reason, MALFORMED_COMMAND.code), stage)
                command = checked
                stage = InvocationStage.VALIDATED

            stage = InvocationStage.DISPATCHED
            logger.info("[%s] dispatching to ChaosChain", definition.kind.tag)
            # Once issued, the remote call runs to completion even if the caller goes away
            call = asyncio.ensure_future(definition.operation(self._client, command))
            call.add_done_callback(lambda task: _log_detached_outcome(definition, task))
            payload = await asyncio.shield(call)

        except ChaosChainError as exc:
            return self._finish(definition, Rejected(str(exc), exc.code.code), stage)
        except Exception as exc:
            logger.exception("[%s] failed at stage %s", definition.kind.tag, stage.value)
            code = PROVIDER_FAILURE if stage == InvocationStage.DISPATCHED else EXTRACTION_FAILED
            return self._finish(definition, Rejected(str(exc) or type(exc).__name__, code.code), stage)

        return self._finish(definition, Completed(payload), stage)

    def _finish(self, definition: ActionDefinition, outcome: Outcome, stage: InvocationStage) -> ActionResult:
        text, payload = report(definition, outcome)

        if isinstance(outcome, Completed):
            logger.info("[%s] completed", definition.kind.tag)
            return ActionResult(
                ok=True,
                action=definition.name,
                kind=definition.kind,
                text=text,
                payload=payload,
                stage=InvocationStage.COMPLETED,
            )

        logger.warning("[%s] rejected at %s: %s", definition.kind.tag, stage.value, outcome.reason)
        return ActionResult(
            ok=False,
            action=definition.name,
            kind=definition.kind,
            text=text,
            payload=None,
            error=outcome.reason,
            error_code=outcome.code,
            stage=InvocationStage.REJECTED,
            rejected_at=stage,
        )


# --------------------------------------------------------------------------- #
# Default wiring
# --------------------------------------------------------------------------- #

@lru_cache(maxsize=1)
def get_dispatcher() -> ActionDispatcher:
    """Get the process-wide dispatcher wired from settings."""
    return ActionDispatcher(
        registry=build_registry(),
        extractor=StructuredExtractor(OpenAIGenerationService()),
        client=ChaosChainClient(),
    )


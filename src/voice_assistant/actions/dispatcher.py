"""Execute action-plan skill calls against the skill registry."""

import asyncio
import dataclasses
import logging
import time
from collections.abc import Sequence

from .config import CANCELLED_RESPONSE, DEFAULT_SKILL_TIMEOUT, DENIED_RESPONSE, REPEATED_CONFIRMATION_MESSAGE
from .confirmation import ConfirmationTracker, classify_confirmation_reply
from .exceptions import SkillError
from .models import (
    CallStatus,
    ConfirmationReply,
    ConfirmationResolution,
    DispatchResult,
    NeedsConfirmation,
    SkillCall,
    SkillContext,
    SkillOutcome,
    SkillResult,
    SkillSummary,
    SummaryStatus,
)
from .skills import Skill, SkillRegistry

logger = logging.getLogger(__name__)


def dedupe_calls(calls: Sequence[SkillCall]) -> list[SkillCall]:
    """Drop repeated calls with the same skill id and arguments, keeping order."""
    seen: set[str] = set()
    unique: list[SkillCall] = []
    for call in calls:
        key = call.dedupe_key
        if key in seen:
            logger.debug(f"Skipping duplicate call to '{call.skill_id}'")
            continue
        seen.add(key)
        unique.append(call)
    return unique


class SkillDispatcher:
    """
    Runs skill calls sequentially in plan order.

    Each call is isolated: an unknown id, a disabled skill, a raised error or
    a timeout becomes that call's outcome and the batch continues. A skill
    asking for confirmation is recorded as pending and ends the batch.
    """

    def __init__(
        self,
        registry: SkillRegistry,
        confirmations: ConfirmationTracker | None = None,
        skill_timeout: float = DEFAULT_SKILL_TIMEOUT,
    ) -> None:
        """
        Initialize the dispatcher.

        Args:
            registry: Skills available for dispatch
            confirmations: Pending confirmation holder; a fresh one if None
            skill_timeout: Seconds each call may run before it is abandoned
        """
        self.registry = registry
        self.confirmations = confirmations or ConfirmationTracker()
        self.skill_timeout = skill_timeout

    async def dispatch(self, calls: Sequence[SkillCall], context: SkillContext) -> DispatchResult:
        """
        Execute calls in order.

        Args:
            calls: Calls from a ``CallSkills`` plan
            context: Request context passed to every skill

        Returns:
            Per-call outcomes and any confirmation now pending
        """
        result = DispatchResult()
        for call in dedupe_calls(calls):
            outcome = await self._execute_call(call, context)
            result.outcomes.append(outcome)

            if outcome.status == CallStatus.NEEDS_CONFIRMATION:
                result.pending_confirmation = self.confirmations.create(
                    skill_id=outcome.call.skill_id,
                    arguments=outcome.call.arguments,
                    prompt=outcome.message,
                    origin_user_request=context.user_request,
                )
                break

        return result

    async def handle_confirmation_reply(
        self, text: str, context: SkillContext
    ) -> ConfirmationResolution | None:
        """
        Answer a live pending confirmation without the language model.

        Args:
            text: The user's next utterance
            context: Request context for the deferred call

        Returns:
            The resolution, or None when nothing is pending or the reply is
            not a yes/no/cancel (the pending confirmation then stays live)
        """
        pending = self.confirmations.pending
        if pending is None:
            return None

        reply = classify_confirmation_reply(text)
        if reply == ConfirmationReply.UNKNOWN:
            logger.debug("Pending confirmation still active; deferring to language model")
            return None

        self.confirmations.clear()
        if reply == ConfirmationReply.CANCEL:
            return ConfirmationResolution(reply, pending, CANCELLED_RESPONSE)
        if reply == ConfirmationReply.DENY:
            return ConfirmationResolution(reply, pending, DENIED_RESPONSE)

        confirmed_context = dataclasses.replace(
            context,
            confirmed=True,
            user_request=pending.origin_user_request or context.user_request,
        )
        dispatch = DispatchResult(outcomes=[await self._execute_call(pending.call, confirmed_context)])
        logger.info(f"Executed confirmed call to '{pending.skill_id}'")
        return ConfirmationResolution(reply, pending, dispatch.fallback_text(), dispatch)

    async def _execute_call(self, call: SkillCall, context: SkillContext) -> SkillOutcome:
        skill = self.registry.get(call.skill_id)
        if skill is None:
            logger.warning(f"Unknown skill '{call.skill_id}'")
            return SkillOutcome(call, CallStatus.NOT_FOUND, f"I couldn't find the skill '{call.skill_id}'.")

        if not self.registry.is_enabled(call.skill_id):
            logger.info(f"Skill '{call.skill_id}' is disabled")
            return SkillOutcome(call, CallStatus.DISABLED, f"The {skill.name} skill is currently disabled.")

        logger.info(f"Executing {call.skill_id} with arguments: {call.arguments_json()}")
        start_time = time.time()
        try:
            result = await asyncio.wait_for(
                skill.execute(dict(call.arguments), context),
                timeout=self.skill_timeout,
            )
        except TimeoutError:
            logger.error(f"Skill '{call.skill_id}' timed out after {self.skill_timeout}s")
            return self._failure(skill, call, CallStatus.TIMEOUT, f"The {skill.name} skill took too long to respond.")
        except SkillError as e:
            logger.error(f"Skill '{call.skill_id}' failed: {e}")
            return self._failure(skill, call, CallStatus.FAILED, f"Error with {skill.name}: {e}")
        except Exception as e:
            logger.error(f"Unexpected error in skill '{call.skill_id}': {e}", exc_info=True)
            return self._failure(skill, call, CallStatus.FAILED, f"An error occurred while running {skill.name}.")

        logger.debug(f"Skill '{call.skill_id}' finished in {time.time() - start_time:.3f}s")

        if isinstance(result, NeedsConfirmation):
            if context.confirmed:
                return self._failure(skill, call, CallStatus.FAILED, REPEATED_CONFIRMATION_MESSAGE)
            deferred = call if result.arguments is None else SkillCall(call.skill_id, result.arguments)
            return SkillOutcome(deferred, CallStatus.NEEDS_CONFIRMATION, result.prompt)

        if not isinstance(result, SkillResult):
            return self._failure(
                skill, call, CallStatus.FAILED, f"An error occurred while running {skill.name}."
            )

        summary = None
        if skill.includes_in_response:
            summary = result.summary or SkillSummary(call.skill_id, SummaryStatus.SUCCESS, result.text)
        return SkillOutcome(call, CallStatus.SUCCESS, result.text, result=result, summary=summary)

    @staticmethod
    def _failure(skill: Skill, call: SkillCall, status: CallStatus, message: str) -> SkillOutcome:
        summary = None
        if skill.includes_in_response:
            summary = SkillSummary(call.skill_id, SummaryStatus.FAILED, message)
        return SkillOutcome(call, status, message, summary=summary)

"""Orchestrates segmentation, identification, the language model and skills."""

import asyncio
import contextlib
import logging
from collections.abc import Callable, Sequence
from uuid import UUID

from voice_assistant.actions.dispatcher import SkillDispatcher
from voice_assistant.actions.exceptions import ActionPlanError
from voice_assistant.actions.models import CallSkills, DispatchResult, SkillContext
from voice_assistant.actions.parser import parse_action_plan
from voice_assistant.audio.exceptions import AudioError
from voice_assistant.audio.interfaces import Transcriber
from voice_assistant.audio.models import AudioChunk, AudioSource, VADEvent
from voice_assistant.audio.segment_buffer import SegmentBuffer
from voice_assistant.audio.vad import VoiceActivityGate
from voice_assistant.speaker.config import FOLLOW_UP_THRESHOLD_OVERRIDE
from voice_assistant.speaker.exceptions import SpeakerError
from voice_assistant.speaker.matcher import SpeakerMatcher
from voice_assistant.speaker.models import Speaker

from .command_processor import CommandProcessor
from .config import (
    DEFAULT_SYSTEM_PROMPT,
    FALLBACK_RESPONSE,
    GUEST_SPEAKER_NAME,
    LLM_UNAVAILABLE_RESPONSE,
    REPEAT_REQUEST_RESPONSE,
    RETRY_PROMPT_TEMPLATE,
    SPEAKER_NAME_PLACEHOLDER,
)
from .conversation import ConversationManager
from .exceptions import AssistantError, LLMError
from .interfaces import LanguageModel
from .models import AssistantResponse, AssistantState, ConversationRole, ConversationTurn
from .response_agent import ResponseAgent

logger = logging.getLogger(__name__)


class AssistantCoordinator:
    """
    Drives the assistant from raw audio windows to a spoken-style reply.

    Feed capture windows to ``process_audio_chunk``. When the voice activity
    gate ends an utterance, it is handled in a background task: transcription
    and speaker identification run concurrently, the wake phrase (or an open
    follow-up window) selects a command, and the command is answered from a
    pending confirmation or by the language model and skills.
    """

    def __init__(
        self,
        transcriber: Transcriber,
        matcher: SpeakerMatcher,
        llm: LanguageModel,
        dispatcher: SkillDispatcher,
        buffer: SegmentBuffer | None = None,
        gate: VoiceActivityGate | None = None,
        conversation: ConversationManager | None = None,
        command_processor: CommandProcessor | None = None,
        response_agent: ResponseAgent | None = None,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        follow_up_threshold: float = FOLLOW_UP_THRESHOLD_OVERRIDE,
    ) -> None:
        """
        Initialize the coordinator.

        Args:
            transcriber: Speech-to-text adapter
            matcher: Speaker identification
            llm: Language model for action plans and replies
            dispatcher: Skill dispatcher holding the registry and pending confirmation
            buffer: Rolling audio buffer
            gate: Voice activity gate
            conversation: Conversation history and follow-up window
            command_processor: Wake phrase and closing phrase handling
            response_agent: Composes replies from skill summaries
            system_prompt: Prompt template with a {speaker_name} placeholder
            follow_up_threshold: Identification threshold override during follow-ups
        """
        self.transcriber = transcriber
        self.matcher = matcher
        self.llm = llm
        self.dispatcher = dispatcher
        self.buffer = buffer or SegmentBuffer()
        self.gate = gate or VoiceActivityGate()
        self.conversation = conversation or ConversationManager()
        self.command_processor = command_processor or CommandProcessor()
        self.response_agent = response_agent or ResponseAgent(llm)
        self.system_prompt = system_prompt
        self.follow_up_threshold = follow_up_threshold

        self._state = AssistantState.IDLE
        self._utterance_task: asyncio.Task | None = None
        self._response_callback: Callable[[AssistantResponse], None] | None = None

        self.last_transcription: str | None = None
        self.last_command: str | None = None
        self.last_response: str | None = None
        self.current_speaker: Speaker | None = None

    @property
    def state(self) -> AssistantState:
        return self._state

    @property
    def is_processing(self) -> bool:
        return self._utterance_task is not None and not self._utterance_task.done()

    @property
    def enrolled_speakers(self) -> list[Speaker]:
        return self.matcher.enrolled_speakers

    @property
    def requires_onboarding(self) -> bool:
        return not self.matcher.enrolled_speakers

    def set_response_callback(self, callback: Callable[[AssistantResponse], None] | None) -> None:
        self._response_callback = callback

    async def start(self) -> None:
        """
        Load models and begin listening.

        Speaker identification degrades to "unidentified" if its model
        cannot be loaded.

        Raises:
            AssistantError: If the transcriber cannot be loaded
        """
        if not self.transcriber.is_model_loaded:
            try:
                await self.transcriber.load_model()
            except AudioError as e:
                self._state = AssistantState.ERROR
                raise AssistantError(f"Failed to load transcriber: {e}") from e

        if not self.matcher.is_model_loaded:
            try:
                await self.matcher.load()
            except SpeakerError as e:
                logger.warning(f"Speaker identification unavailable: {e}")

        self.gate.reset()
        self.buffer.clear()
        self._state = AssistantState.LISTENING
        logger.info("Assistant listening")

    async def stop_listening(self) -> None:
        """Abandon any in-flight utterance and stop reacting to audio."""
        await self.cancel_current()
        self.gate.reset()
        self.buffer.clear()
        self._state = AssistantState.IDLE
        logger.info("Assistant stopped listening")

    async def cancel_current(self) -> None:
        task = self._utterance_task
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._utterance_task = None

    async def wait_until_processed(self) -> AssistantResponse | None:
        """Wait for the in-flight utterance, if any, and return its response."""
        task = self._utterance_task
        if task is None:
            return None
        return await task

    def clear_conversation(self) -> None:
        self.conversation.clear_history()
        self.conversation.end_follow_up_window()

    async def process_audio_chunk(self, chunk: AudioChunk) -> VADEvent | None:
        """
        Feed one capture window.

        Returns:
            The gate's event for this window, or None while idle
        """
        if self._state == AssistantState.IDLE:
            return None

        self.buffer.append(chunk)
        event = await self.gate.process(chunk)

        if self._state == AssistantState.LISTENING and event == VADEvent.SPEECH_START:
            self.buffer.mark_speech_start()
            self._state = AssistantState.CAPTURING
        elif self._state == AssistantState.CAPTURING and event == VADEvent.SPEECH_END:
            self._state = AssistantState.PROCESSING
            utterance = self.buffer.extract_utterance_since_start()
            self._utterance_task = asyncio.create_task(self.process_utterance(utterance, chunk.source))

        return event

    async def process_utterance(
        self, audio: AudioChunk, source: AudioSource | None = None
    ) -> AssistantResponse | None:
        """
        Handle one complete utterance.

        Returns:
            The reply, or None when the utterance held no command
        """
        source = source or audio.source
        self._state = AssistantState.PROCESSING
        logger.info(f"Processing utterance: {audio.duration:.2f}s from {source.identifier}")
        try:
            response = await self._handle_utterance(audio, source)
        except asyncio.CancelledError:
            logger.info("Utterance processing cancelled")
            raise
        except Exception as e:
            logger.error(f"Processing error: {e}", exc_info=True)
            response = None
        finally:
            if self._state in (AssistantState.PROCESSING, AssistantState.RESPONDING):
                self._state = AssistantState.LISTENING

        if response is not None and self._response_callback is not None:
            self._response_callback(response)
        return response

    async def _handle_utterance(self, audio: AudioChunk, source: AudioSource) -> AssistantResponse | None:
        follow_up_active = self.conversation.is_follow_up_active()
        override = self.follow_up_threshold if follow_up_active else None

        transcription, match = await asyncio.gather(
            self.transcriber.transcribe(audio),
            self.matcher.identify(audio, threshold_override=override),
            return_exceptions=True,
        )
        if isinstance(transcription, BaseException):
            if not isinstance(transcription, AudioError):
                raise transcription
            logger.error(f"Transcription failed: {transcription}")
            return None
        if isinstance(match, BaseException):
            raise match

        self.last_transcription = transcription.text
        self.current_speaker = match.speaker
        speaker_name = match.speaker.name if match.speaker else GUEST_SPEAKER_NAME
        logger.info(f"[{speaker_name}] Transcription: \"{transcription.text}\" ({transcription.confidence:.2f})")

        command = self.command_processor.extract_command(transcription.text)
        if command is not None:
            if self.command_processor.is_closing_phrase(command):
                logger.info("Closing phrase after wake word; ending conversation window")
                self.conversation.end_follow_up_window()
                return None
            logger.info(f"Wake word detected. Command: \"{command}\"")
        elif self.conversation.is_follow_up_active():
            command = transcription.text.strip()
            if not command:
                return None
            if self.command_processor.is_closing_phrase(command):
                logger.info("Closing phrase in follow-up; ending conversation window")
                self.conversation.end_follow_up_window()
                return None
            if match.speaker is None:
                logger.info("Follow-up from unidentified speaker; asking to repeat")
                self.conversation.extend_follow_up_window()
                self.last_response = REPEAT_REQUEST_RESPONSE
                return AssistantResponse(
                    text=REPEAT_REQUEST_RESPONSE, command=command, source=source, transcription=transcription
                )
            logger.info(f"Follow-up from {match.speaker.name}. Command: \"{command}\"")
        else:
            logger.debug(f"No wake word in: \"{transcription.text}\"")
            return None

        self.last_command = command
        response = await self.process_command(command, match.speaker, source)
        response.transcription = transcription
        return response

    async def process_command(
        self, command: str, speaker: Speaker | None = None, source: AudioSource | None = None
    ) -> AssistantResponse:
        """
        Answer a command, consulting any pending confirmation before the language model.

        Args:
            command: Command text without the wake phrase
            speaker: Identified speaker, if any
            source: Where the audio came from

        Returns:
            The reply and any skill dispatch it involved
        """
        source = source or AudioSource.local_mic()
        previous_state = self._state
        self._state = AssistantState.RESPONDING
        try:
            return await self._answer(command, speaker, source)
        finally:
            if self._state == AssistantState.RESPONDING and previous_state != AssistantState.PROCESSING:
                self._state = previous_state

    async def _answer(self, command: str, speaker: Speaker | None, source: AudioSource) -> AssistantResponse:
        context = SkillContext(speaker=speaker, source=source, user_request=command)

        resolution = await self.dispatcher.handle_confirmation_reply(command, context)
        if resolution is not None:
            text = resolution.response
            confirmed = resolution.dispatch
            if confirmed is not None and confirmed.summaries:
                request = resolution.pending.origin_user_request or command
                text = await self._compose(confirmed, request, speaker)
            self._record_exchange(command, text)
            return self._finish(AssistantResponse(text, command, speaker, source, dispatch=confirmed))

        history = self.conversation.recent_history()
        registry = self.dispatcher.registry
        manifest = registry.generate_manifest()
        system_prompt = self.system_prompt.replace(
            SPEAKER_NAME_PLACEHOLDER, speaker.name if speaker else GUEST_SPEAKER_NAME
        )

        dispatch: DispatchResult | None = None
        try:
            text, dispatch = await self._complete_and_execute(
                command, system_prompt, history, manifest, context
            )
        except LLMError as e:
            logger.error(f"Language model error: {e}")
            text = LLM_UNAVAILABLE_RESPONSE
        else:
            self._record_exchange(command, text)

        self.conversation.extend_follow_up_window()
        return self._finish(AssistantResponse(text, command, speaker, source, dispatch=dispatch))

    def _finish(self, response: AssistantResponse) -> AssistantResponse:
        self.last_response = response.text
        logger.info(f"Response: {response.text}")
        return response

    def _record_exchange(self, command: str, response: str) -> None:
        self.conversation.add_turn(ConversationRole.USER, command)
        self.conversation.add_turn(ConversationRole.ASSISTANT, response)

    async def _complete_and_execute(
        self,
        command: str,
        system_prompt: str,
        history: Sequence[ConversationTurn],
        manifest: str | None,
        context: SkillContext,
    ) -> tuple[str, DispatchResult | None]:
        raw = await self.llm.complete(
            prompt=command,
            system_prompt=system_prompt,
            conversation_history=history,
            tool_manifest=manifest,
        )
        try:
            plan = parse_action_plan(raw)
        except ActionPlanError as e:
            logger.warning(f"Failed to parse action plan ({e}); retrying with a strict prompt")
            retry = await self.llm.complete(
                prompt=RETRY_PROMPT_TEMPLATE.format(request=command),
                system_prompt=system_prompt,
                conversation_history=history,
                tool_manifest=manifest,
            )
            try:
                plan = parse_action_plan(retry)
            except ActionPlanError as retry_error:
                logger.warning(f"Retry action plan invalid ({retry_error}); using fallback response")
                return FALLBACK_RESPONSE, None

        if not isinstance(plan, CallSkills):
            return plan.text, None

        logger.info(f"Action plan: call_skills -> {', '.join(c.skill_id for c in plan.calls)}")
        dispatch = await self.dispatcher.dispatch(plan.calls, context)
        return await self._compose(dispatch, command, context.speaker), dispatch

    async def _compose(self, dispatch: DispatchResult, request: str, speaker: Speaker | None) -> str:
        if dispatch.needs_confirmation or not dispatch.summaries:
            return dispatch.fallback_text()
        try:
            return await self.response_agent.generate(
                request, dispatch.summaries, speaker.name if speaker else None
            )
        except LLMError as e:
            logger.warning(f"Response composition failed, using fallback: {e}")
            return dispatch.fallback_text()

    async def enroll_speaker(self, name: str, samples: Sequence[AudioChunk]) -> Speaker:
        """
        Enroll a speaker, loading the identification model first if needed.

        Raises:
            SpeakerError: If enrollment fails
        """
        if not self.matcher.is_model_loaded:
            await self.matcher.load()
        return await self.matcher.enroll(name, samples)

    async def remove_speaker(self, speaker_id: UUID) -> None:
        """
        Raises:
            SpeakerError: If the speaker is unknown or the removal cannot be saved
        """
        await self.matcher.remove(speaker_id)

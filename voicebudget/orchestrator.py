"""
Main Orchestrator for Voice Budget

This module ties together all the components and defines the
end-to-end flow for one voice command:

    recording / typed text
      → transcribe (falls back to a simulated transcript)
      → parse
      → execute against the record store
      → speak the confirmation (optional, non-fatal)
      → notify subscribers

Every front end goes through VoiceCommandFlow.process_voice_command,
so parsing and execution behave the same everywhere.
"""

from typing import Optional

import structlog

from voicebudget.audit import AuditLogger, configure_logging, create_correlation_id
from voicebudget.config import get_settings
from voicebudget.executor import (
    CANCELLED_MESSAGE,
    FAILURE_MESSAGE,
    CancellationToken,
    CommandExecutor,
)
from voicebudget.models.command import Unrecognized
from voicebudget.models.result import VoiceResponse
from voicebudget.notifications import VoiceCommandNotifier
from voicebudget.parser import parse_command
from voicebudget.services.speech import (
    ElevenLabsSpeechChannel,
    SimulatedSpeechChannel,
    SpeechChannel,
)
from voicebudget.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
    InMemoryRecordStore,
    RecordStoreInterface,
    default_entities,
)


logger = structlog.get_logger(__name__)


class VoiceCommandFlow:
    """
    Orchestrates a single voice command.

    Never raises for store or speech failures: every outcome comes back
    as a VoiceResponse.
    """

    def __init__(
        self,
        executor: CommandExecutor,
        speech: Optional[SpeechChannel] = None,
        fallback: Optional[SimulatedSpeechChannel] = None,
        notifier: Optional[VoiceCommandNotifier] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._executor = executor
        self._fallback = fallback or SimulatedSpeechChannel()
        self._speech = speech or self._fallback
        self._notifier = notifier or VoiceCommandNotifier()
        self._audit_logger = audit_logger or AuditLogger()

    @property
    def notifier(self) -> VoiceCommandNotifier:
        return self._notifier

    async def process_voice_command(
        self,
        text: Optional[str],
        user_id: str,
        audio: Optional[bytes] = None,
        audio_filename: str = "recording.mp4",
        cancel_token: Optional[CancellationToken] = None,
    ) -> VoiceResponse:
        """
        Process one typed or recorded command for `user_id`.

        When `audio` is given it is transcribed and `text` is ignored.
        A command cancelled while its write or speech synthesis is in
        flight comes back cancelled and is neither spoken nor broadcast.
        """
        correlation_id = create_correlation_id()
        token = cancel_token or CancellationToken()
        transcript = text or ""

        if audio:
            transcript = await self._transcribe(audio, audio_filename, user_id, correlation_id)

        if not transcript:
            return VoiceResponse(
                success=False,
                command=Unrecognized(text=""),
                message=FAILURE_MESSAGE,
            )

        command = parse_command(transcript)
        try:
            result = await self._executor.execute(
                command,
                user_id,
                cancel_token=token,
                correlation_id=correlation_id,
            )
        except Exception as e:
            await self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"command_type": command.type},
                correlation_id=correlation_id,
            )
            return VoiceResponse(
                success=False,
                command=command,
                message=FAILURE_MESSAGE,
                transcript=transcript,
            )

        response = VoiceResponse.from_execution(result, transcript)
        if result.cancelled or not result.success:
            return response
        if token.cancelled:
            return await self._cancelled(command, transcript, "execute", user_id, correlation_id)

        if result.audio_response:
            response.audio = await self._synthesize(
                result.audio_response, user_id, correlation_id
            )
            if token.cancelled:
                return await self._cancelled(
                    command, transcript, "speech_synthesis", user_id, correlation_id
                )

        await self._notifier.notify(response)
        return response

    async def _cancelled(self, command, transcript, stage, user_id, correlation_id) -> VoiceResponse:
        await self._audit_logger.log_command_cancelled(
            user_id=user_id,
            command_type=command.type,
            stage=stage,
            correlation_id=correlation_id,
        )
        return VoiceResponse(
            success=False,
            cancelled=True,
            command=command,
            message=CANCELLED_MESSAGE,
            transcript=transcript,
        )

    async def _transcribe(self, audio, filename, user_id, correlation_id) -> str:
        try:
            transcript = await self._speech.speech_to_text(audio, filename)
        except Exception as e:
            fallback_text = self._fallback.sample_transcript()
            await self._audit_logger.log_transcription_fallback(
                user_id=user_id,
                error_message=str(e),
                fallback_text=fallback_text,
                correlation_id=correlation_id,
            )
            return fallback_text

        await self._audit_logger.log_transcription_completed(
            user_id=user_id,
            text=transcript,
            correlation_id=correlation_id,
        )
        return transcript

    async def _synthesize(self, text, user_id, correlation_id) -> Optional[bytes]:
        try:
            return await self._speech.text_to_speech(text)
        except Exception as e:
            await self._audit_logger.log_speech_synthesis_failed(
                user_id=user_id,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            return None


def create_app_components(
    use_storage: bool = True,
) -> tuple[VoiceCommandFlow, RecordStoreInterface]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to initialize Google Sheets storage.
                    Set to False to keep everything in memory.

    Returns:
        (voice_command_flow, record_store)
    """
    app_settings = get_settings().app
    configure_logging(app_settings.effective_log_level)

    store: Optional[RecordStoreInterface] = None
    audit_logger = AuditLogger()  # Local-only logging

    if use_storage:
        try:
            sheets_client = GoogleSheetsClient()
            sheets_store = GoogleSheetsRecordStore(sheets_client)
            sheets_store.seed_defaults(default_entities())
            store = sheets_store
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
        except Exception as e:
            # Storage not configured - continue in memory
            logger.warning("storage_not_configured", error=str(e))

    if store is None:
        store = InMemoryRecordStore()

    speech: SpeechChannel = ElevenLabsSpeechChannel()
    if not speech.is_configured:
        logger.info("speech_simulated", reason="ElevenLabs API key not configured")
        speech = SimulatedSpeechChannel()

    executor = CommandExecutor(
        store,
        audit_logger=audit_logger,
        currency_symbol=app_settings.currency_symbol,
    )
    flow = VoiceCommandFlow(
        executor,
        speech=speech,
        audit_logger=audit_logger,
    )
    logger.info(
        "app_components_ready",
        environment=app_settings.app_environment,
        debug=app_settings.debug_mode,
        store=type(store).__name__,
        speech=type(speech).__name__,
    )

    return flow, store

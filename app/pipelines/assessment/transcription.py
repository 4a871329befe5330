"""Transcription stage of the assessment pipeline."""

from __future__ import annotations

import asyncio
import logging

from app.application.interfaces import SpeechToTextInterface
from app.config.settings import RetryConfig
from app.services.retry import Sleep, retry_operation
from app.services.uploads import TemporaryAudioFile

logger = logging.getLogger("app.services.assessment_pipeline")


async def transcribe_audio(
    speech_to_text: SpeechToTextInterface,
    audio_file: TemporaryAudioFile,
    retry: RetryConfig,
    *,
    sleep: Sleep = asyncio.sleep,
) -> str:
    """Transcribe the stored upload, retrying transient failures."""

    transcript = await retry_operation(
        lambda: speech_to_text.transcribe(audio_file.path),
        retry.max_attempts,
        "Transcription",
        base_delay=retry.base_delay_seconds,
        sleep=sleep,
    )
    logger.info("Transcription received file=%s chars=%s", audio_file.filename, len(transcript))
    return transcript


__all__ = ["transcribe_audio"]

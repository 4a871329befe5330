"""Amazon Transcribe integration helpers using Streaming API."""

from __future__ import annotations

import asyncio
import logging
import subprocess
from pathlib import Path

from amazon_transcribe.auth import StaticCredentialResolver
from amazon_transcribe.client import TranscribeStreamingClient
from amazon_transcribe.handlers import TranscriptResultStreamHandler
from amazon_transcribe.model import TranscriptEvent
from fastapi.concurrency import run_in_threadpool

from app.application.interfaces import SpeechToTextInterface
from app.config.settings import AwsConfig, TranscribeConfig

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 8192


class TranscriptionError(RuntimeError):
    """Raised when Amazon Transcribe fails to process audio successfully."""


class TranscribeService(SpeechToTextInterface):
    """High-level facade for streaming an audio file to Amazon Transcribe."""

    def __init__(self, aws: AwsConfig, config: TranscribeConfig) -> None:
        self._aws = aws
        self._config = config
        self._client: TranscribeStreamingClient | None = None

    @property
    def model_name(self) -> str:
        return self._config.model_name

    def _get_client(self) -> TranscribeStreamingClient:
        """Build the streaming client on first use."""

        if self._client is None:
            credential_resolver = None
            if self._aws.has_credentials:
                credential_resolver = StaticCredentialResolver(
                    access_key_id=self._aws.access_key,
                    secret_access_key=self._aws.secret_key.get_secret_value(),
                )
            self._client = TranscribeStreamingClient(
                region=self._aws.region,
                credential_resolver=credential_resolver,
            )
        return self._client

    async def transcribe(self, audio_path: Path) -> str:
        """Stream the file to Transcribe and return the full transcript."""

        try:
            return await asyncio.wait_for(
                self._transcribe(audio_path),
                timeout=self._config.timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise TranscriptionError(
                f"Transcription timed out after {self._config.timeout_seconds:g} seconds"
            ) from exc

    async def _transcribe(self, audio_path: Path) -> str:
        pcm_data = await run_in_threadpool(self._convert_to_pcm, audio_path)
        if not pcm_data:
            raise TranscriptionError("The uploaded audio file contains no decodable audio.")

        stream = await self._get_client().start_stream_transcription(
            language_code=self._config.language_code,
            media_sample_rate_hz=self._config.sample_rate_hz,
            media_encoding="pcm",
        )
        handler = _SimpleTranscriptHandler(stream.output_stream)

        async def write_chunks() -> None:
            # 16-bit mono, paced at real time
            sleep_time = _CHUNK_SIZE / (self._config.sample_rate_hz * 2)
            logger.debug("Starting stream. Total bytes: %s", len(pcm_data))
            for offset in range(0, len(pcm_data), _CHUNK_SIZE):
                await stream.input_stream.send_audio_event(
                    audio_chunk=pcm_data[offset : offset + _CHUNK_SIZE]
                )
                await asyncio.sleep(sleep_time)
            await stream.input_stream.end_stream()

        await asyncio.gather(write_chunks(), handler.handle_events())

        transcript = handler.transcript.strip()
        logger.info("Transcription complete. Length: %s", len(transcript))
        return transcript

    def _convert_to_pcm(self, audio_path: Path) -> bytes:
        """Decode the file to raw PCM s16le via ffmpeg."""

        try:
            process = subprocess.run(
                [
                    "ffmpeg",
                    "-nostdin",
                    "-i", str(audio_path),
                    "-f", "s16le",
                    "-ac", "1",
                    "-ar", str(self._config.sample_rate_hz),
                    "pipe:1",
                ],
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
            )
        except FileNotFoundError as exc:
            raise TranscriptionError("ffmpeg is not installed or not on PATH") from exc
        except subprocess.CalledProcessError as exc:
            error_msg = exc.stderr.decode("utf-8", errors="replace") if exc.stderr else "No stderr"
            logger.error("ffmpeg failed. stderr: %s", error_msg)
            raise TranscriptionError(f"ffmpeg failed to convert audio to PCM: {error_msg}") from exc

        if not process.stdout:
            logger.warning(
                "ffmpeg produced empty output. stderr: %s",
                process.stderr.decode("utf-8", errors="replace"),
            )
        return process.stdout


class _SimpleTranscriptHandler(TranscriptResultStreamHandler):
    def __init__(self, transcript_result_stream):
        super().__init__(transcript_result_stream)
        self.transcript = ""

    async def handle_transcript_event(self, transcript_event: TranscriptEvent):
        for result in transcript_event.transcript.results:
            if result.is_partial:
                continue
            if result.alternatives:
                self.transcript += result.alternatives[0].transcript + " "


__all__ = ["TranscribeService", "TranscriptionError"]

"""Shared fixtures: a test client wired to in-memory capability fakes."""

from __future__ import annotations

import io
import json
from pathlib import Path
import sys
from typing import Callable

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from app.application.interfaces import SpeechToTextInterface, TextGenerationInterface  # noqa: E402
from app.config.settings import RetryConfig, Settings, UploadConfig  # noqa: E402
from app.controllers.dependencies import get_speech_to_text, get_text_generator  # noqa: E402
from app.main import create_app  # noqa: E402
from app.services.uploads import TemporaryAudioFile, UploadManager  # noqa: E402

VALID_ASSESSMENT = {
    "strengths": ["Clear definition of photosynthesis", "Mentions chlorophyll"],
    "areasToImprove": ["Explain the light reactions", "Mention glucose as a product"],
    "perfectDefinition": "Photosynthesis converts light energy, water and CO2 into glucose and oxygen.",
    "encouragement": "Great start, keep building on the details!",
    "score": {"content": 4, "clarity": 3, "completeness": 2, "total": 9},
}
VALID_ASSESSMENT_JSON = json.dumps(VALID_ASSESSMENT)
AUDIO_BYTES = b"ID3" + b"\x00" * 2048


class FakeSpeechToText(SpeechToTextInterface):
    model_name = "fake-transcriber"

    def __init__(self, transcript: str = "Plants use sunlight to make food.", errors=()) -> None:
        self.transcript = transcript
        self.errors = list(errors)
        self.calls: list[Path] = []
        self.file_existed: list[bool] = []

    async def transcribe(self, audio_path: Path) -> str:
        self.calls.append(audio_path)
        self.file_existed.append(audio_path.exists())
        if self.errors:
            raise self.errors.pop(0)
        return self.transcript


class FakeTextGenerator(TextGenerationInterface):
    model_name = "fake-llm"

    def __init__(self, reply: str = VALID_ASSESSMENT_JSON, errors=()) -> None:
        self.reply = reply
        self.errors = list(errors)
        self.prompts: list[tuple[str, str]] = []

    async def generate(self, *, system_prompt: str, user_prompt: str) -> str:
        self.prompts.append((system_prompt, user_prompt))
        if self.errors:
            raise self.errors.pop(0)
        return self.reply


class RecordingUploadManager(UploadManager):
    """Upload manager that remembers every file it handed out."""

    def __init__(self, config: UploadConfig) -> None:
        super().__init__(config)
        self.acquired: list[TemporaryAudioFile] = []
        self.released: list[TemporaryAudioFile] = []

    async def acquire(self, source, original_name, content_type):
        audio_file = await super().acquire(source, original_name, content_type)
        self.acquired.append(audio_file)
        return audio_file

    def release(self, audio_file):
        if audio_file is not None:
            self.released.append(audio_file)
        super().release(audio_file)


class ByteSource:
    """Minimal async reader over an in-memory payload."""

    def __init__(self, payload: bytes) -> None:
        self._buffer = io.BytesIO(payload)

    async def read(self, size: int = -1) -> bytes:
        return self._buffer.read(size)


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def test_settings(tmp_path: Path, upload_dir: Path) -> Settings:
    return Settings(
        log_file=str(tmp_path / "logs" / "app.log"),
        upload=UploadConfig(path=upload_dir, max_file_size=64 * 1024, chunk_size=1024),
        retry=RetryConfig(max_attempts=3, base_delay_seconds=0),
    )


@pytest.fixture
def speech_to_text() -> FakeSpeechToText:
    return FakeSpeechToText()


@pytest.fixture
def text_generator() -> FakeTextGenerator:
    return FakeTextGenerator()


@pytest.fixture
def app(test_settings, speech_to_text, text_generator):
    application = create_app(test_settings)
    application.state.upload_manager = RecordingUploadManager(test_settings.upload)
    application.dependency_overrides[get_speech_to_text] = lambda: speech_to_text
    application.dependency_overrides[get_text_generator] = lambda: text_generator
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def post_assessment(client) -> Callable:
    """Post a multipart assessment request with sensible defaults."""

    def _post(
        *,
        question: str | None = "What is photosynthesis?",
        audio: bytes | None = AUDIO_BYTES,
        filename: str = "answer.mp3",
        content_type: str = "audio/mpeg",
    ):
        data = {} if question is None else {"question": question}
        files = None if audio is None else {"audio": (filename, audio, content_type)}
        return client.post("/api/assessment", data=data, files=files)

    return _post
